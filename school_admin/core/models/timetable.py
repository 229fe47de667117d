"""Weekly timetable for a class and term, and its 5 x 11 grid of roster slots."""

import uuid
from datetime import datetime

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    UniqueConstraint,
    text,
)
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship

from school_admin.db.session import Base


class Timetable(Base):
    """At most one timetable per class is active; active timetables are read-only."""

    __tablename__ = "timetables"
    __table_args__ = (
        UniqueConstraint("class_id", "academic_year", "term", name="uq_timetable_class_year_term"),
        CheckConstraint("term BETWEEN 1 AND 3", name="ck_timetable_term"),
        Index(
            "uq_timetable_active_class",
            "class_id",
            unique=True,
            postgresql_where=text("is_active"),
            sqlite_where=text("is_active = 1"),
        ),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    class_id = Column(UUID(as_uuid=True), ForeignKey("classes.id", ondelete="CASCADE"), nullable=False)
    academic_year = Column(String(9), nullable=False)  # "2025-2026"
    year = Column(Integer, nullable=False)  # start year of academic_year
    term = Column(Integer, nullable=False)
    is_active = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)

    school_class = relationship("SchoolClass", foreign_keys=[class_id])
    slots = relationship(
        "TimetableRoster",
        back_populates="timetable",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )


class TimetableRoster(Base):
    """One cell of the weekly grid (day x period). Course and teacher are set by slot assignment."""

    __tablename__ = "timetable_rosters"
    __table_args__ = (
        UniqueConstraint("timetable_id", "day_of_week", "period", name="uq_roster_timetable_day_period"),
        CheckConstraint("period BETWEEN 1 AND 11", name="ck_roster_period"),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    timetable_id = Column(UUID(as_uuid=True), ForeignKey("timetables.id", ondelete="CASCADE"), nullable=False)
    class_id = Column(UUID(as_uuid=True), ForeignKey("classes.id", ondelete="CASCADE"), nullable=False)
    day_of_week = Column(String(10), nullable=False)  # Monday .. Friday
    period = Column(Integer, nullable=False)
    course_id = Column(UUID(as_uuid=True), ForeignKey("courses.id", ondelete="SET NULL"), nullable=True)
    teacher_id = Column(UUID(as_uuid=True), ForeignKey("users.id", ondelete="SET NULL"), nullable=True)

    timetable = relationship("Timetable", back_populates="slots")
    school_class = relationship("SchoolClass", foreign_keys=[class_id])
    course = relationship("Course")
    teacher = relationship("User", foreign_keys=[teacher_id])
