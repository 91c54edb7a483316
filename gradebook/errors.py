"""Exception hierarchy for gradebook operations."""


class GradebookError(Exception):
    """Base class for every error raised by the gradebook core."""

    status_code = 400


class InvalidNumber(GradebookError, ValueError):
    """Threshold or grade text that does not parse to a finite number."""


class InvalidBand(GradebookError, ValueError):
    """Threshold band name outside APlus / BPlus / CPlus."""


class InvalidStudent(GradebookError, ValueError):
    """Student record missing a usable name."""


class InvalidDate(GradebookError, ValueError):
    """Reminder due date that is not a real MM/DD/YYYY date."""


class EmptyRoster(GradebookError):
    """Class average requested for a roster with no students."""

    status_code = 409


class NotFound(GradebookError, LookupError):
    """No student with the requested id in the roster."""

    status_code = 404

    def __init__(self, student_id: str):
        super().__init__(f"No student with id '{student_id}'")
        self.student_id = student_id


class DuplicateId(GradebookError):
    """A student id already present in the roster."""

    status_code = 409

    def __init__(self, student_id: str):
        super().__init__(f"Student id '{student_id}' already exists in the roster")
        self.student_id = student_id


class StoreFailure(GradebookError):
    """The record store rejected or failed a request."""

    status_code = 502


class NotifierFailure(GradebookError):
    """The notifier failed to schedule a notification."""

    status_code = 502
