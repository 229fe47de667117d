from school_admin.core.models.user import User
from school_admin.core.models.class_model import SchoolClass
from school_admin.core.models.course import Course
from school_admin.core.models.student import Student
from school_admin.core.models.class_course_assignment import ClassCourseAssignment
from school_admin.core.models.timetable import Timetable, TimetableRoster
from school_admin.core.models.attendance import (
    AttendanceEntry,
    AttendancePermissionRequest,
    AttendanceRecord,
)

__all__ = [
    "User",
    "SchoolClass",
    "Course",
    "Student",
    "ClassCourseAssignment",
    "Timetable",
    "TimetableRoster",
    "AttendanceRecord",
    "AttendanceEntry",
    "AttendancePermissionRequest",
]
