"""Class–course assignment (year-specific), optionally with the teacher who teaches it."""

import uuid
from datetime import datetime

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, UniqueConstraint
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship

from school_admin.db.session import Base


class ClassCourseAssignment(Base):
    __tablename__ = "class_course_assignments"
    __table_args__ = (
        UniqueConstraint("class_id", "course_id", "academic_year", name="uq_class_course_assignment"),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    class_id = Column(UUID(as_uuid=True), ForeignKey("classes.id", ondelete="CASCADE"), nullable=False)
    course_id = Column(UUID(as_uuid=True), ForeignKey("courses.id", ondelete="CASCADE"), nullable=False)
    teacher_id = Column(UUID(as_uuid=True), ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    academic_year = Column(Integer, nullable=False)  # calendar start year, e.g. 2025
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)

    school_class = relationship("SchoolClass", foreign_keys=[class_id])
    course = relationship("Course")
    teacher = relationship("User", foreign_keys=[teacher_id])
