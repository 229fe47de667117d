from enum import Enum


class PeriodType(str, Enum):
    LESSON = "lesson"
    BREAK = "break"
    LUNCH = "lunch"


class DayOfWeek(str, Enum):
    MONDAY = "Monday"
    TUESDAY = "Tuesday"
    WEDNESDAY = "Wednesday"
    THURSDAY = "Thursday"
    FRIDAY = "Friday"


class PeriodStatus(str, Enum):
    UNKNOWN = "UNKNOWN"
    COMPLETED = "COMPLETED"
    FUTURE = "FUTURE"
    MISSED = "MISSED"
    YET_TO_START = "YET_TO_START"
    PENDING = "PENDING"


class PermissionStatus(str, Enum):
    pending = "pending"
    approved = "approved"


class ResubmissionPolicy(str, Enum):
    """What to do when attendance is submitted twice for one slot on one day."""

    APPEND = "append"
    REJECT = "reject"
    OVERWRITE = "overwrite"


class UserRole(str, Enum):
    ADMIN = "ADMIN"
    TEACHER = "TEACHER"


WEEKDAYS = [d.value for d in DayOfWeek]
