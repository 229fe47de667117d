import uuid
from datetime import datetime

from sqlalchemy import CheckConstraint, Column, DateTime, Integer, String
from sqlalchemy.dialects.postgresql import UUID

from school_admin.db.session import Base


class Course(Base):
    __tablename__ = "courses"
    __table_args__ = (CheckConstraint("year_level BETWEEN 1 AND 3", name="ck_course_year_level"),)

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(String(255), nullable=False)
    code = Column(String(50), nullable=True, unique=True)
    year_level = Column(Integer, nullable=False)
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)
