"""Per-period attendance: one record per attendance-taking event, one entry per student."""

import uuid
from datetime import datetime

from sqlalchemy import Boolean, Column, Date, DateTime, ForeignKey, Index, Integer, String, UniqueConstraint
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship

from school_admin.db.session import Base


class AttendanceRecord(Base):
    __tablename__ = "attendance_records"
    __table_args__ = (Index("ix_attendance_record_roster_date", "roster_id", "record_date"),)

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    roster_id = Column(UUID(as_uuid=True), ForeignKey("timetable_rosters.id", ondelete="RESTRICT"), nullable=False)
    recorded_by = Column(UUID(as_uuid=True), ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    # School-local calendar date of submission; used for the per-day lookups.
    record_date = Column(Date, nullable=False)
    recording_status = Column(String(20), nullable=False, default="on_time")
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)

    roster = relationship("TimetableRoster")
    recorder = relationship("User", foreign_keys=[recorded_by])
    entries = relationship(
        "AttendanceEntry",
        back_populates="record",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )


class AttendanceEntry(Base):
    __tablename__ = "attendance_entries"
    __table_args__ = (UniqueConstraint("record_id", "student_id", name="uq_attendance_entry_record_student"),)

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    record_id = Column(UUID(as_uuid=True), ForeignKey("attendance_records.id", ondelete="CASCADE"), nullable=False)
    student_id = Column(UUID(as_uuid=True), ForeignKey("students.id", ondelete="CASCADE"), nullable=False)
    is_present = Column(Boolean, nullable=False, default=False)

    record = relationship("AttendanceRecord", back_populates="entries")
    student = relationship("Student")


class AttendancePermissionRequest(Base):
    """Teacher request to record attendance for a period outside its normal window."""

    __tablename__ = "attendance_permission_requests"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    teacher_id = Column(UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    roster_id = Column(UUID(as_uuid=True), ForeignKey("timetable_rosters.id", ondelete="CASCADE"), nullable=False)
    class_id = Column(UUID(as_uuid=True), ForeignKey("classes.id", ondelete="CASCADE"), nullable=False)
    period_date = Column(Date, nullable=False)
    period_number = Column(Integer, nullable=False)
    reason_category = Column(String(50), nullable=False)
    reason_notes = Column(String(1000), nullable=True)
    # pending | approved
    status = Column(String(20), nullable=False, default="pending")
    approved_by = Column(UUID(as_uuid=True), ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    approved_at = Column(DateTime(timezone=True), nullable=True)
    admin_comments = Column(String(1000), nullable=True)
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)

    teacher = relationship("User", foreign_keys=[teacher_id])
    approver = relationship("User", foreign_keys=[approved_by])
    school_class = relationship("SchoolClass", foreign_keys=[class_id])
