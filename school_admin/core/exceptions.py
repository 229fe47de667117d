from fastapi import status


class ServiceError(Exception):
    """Base exception for service layer errors."""

    def __init__(self, message: str, status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class NotFoundError(ServiceError):
    """A record looked up by id does not exist."""

    def __init__(self, message: str) -> None:
        super().__init__(message, status.HTTP_404_NOT_FOUND)


class BusinessRuleError(ServiceError):
    """Malformed input or a violated business rule."""

    def __init__(self, message: str) -> None:
        super().__init__(message, status.HTTP_400_BAD_REQUEST)


class ConflictError(ServiceError):
    """A uniqueness rule would be broken."""

    def __init__(self, message: str) -> None:
        super().__init__(message, status.HTTP_409_CONFLICT)


# ----- Timetable -----
class InvalidAcademicYear(BusinessRuleError):
    pass


class DuplicateTimetable(ConflictError):
    def __init__(self, message: str = "Timetable for this class, academic year and term already exists") -> None:
        super().__init__(message)


class TimetableNotFound(NotFoundError):
    def __init__(self, message: str = "Timetable not found") -> None:
        super().__init__(message)


class SlotNotFound(NotFoundError):
    def __init__(self, message: str = "Roster slot not found") -> None:
        super().__init__(message)


class TimetableLocked(BusinessRuleError):
    def __init__(self, message: str = "Cannot edit active timetable. Deactivate it first.") -> None:
        super().__init__(message)


class InvalidPeriodType(BusinessRuleError):
    def __init__(self, message: str = "Cannot assign lessons to break or lunch periods") -> None:
        super().__init__(message)


class AssignmentNotFound(NotFoundError):
    def __init__(self, message: str = "Course assignment not found") -> None:
        super().__init__(message)


class ClassMismatch(BusinessRuleError):
    def __init__(self, message: str = "Assignment class does not match timetable class") -> None:
        super().__init__(message)


class TeacherDoubleBooked(BusinessRuleError):
    def __init__(
        self, message: str = "Teacher is already assigned during this period in another active timetable"
    ) -> None:
        super().__init__(message)


# ----- Attendance -----
class DuplicateAttendance(ConflictError):
    def __init__(self, message: str = "Attendance has already been submitted for this period today") -> None:
        super().__init__(message)
