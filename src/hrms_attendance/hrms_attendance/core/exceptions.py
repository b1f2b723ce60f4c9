class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class EmployeeNotFound(ValidationError):
    """Employee missing, inactive, or not mapped to the company/device."""


class LocationRequired(ValidationError):
    """Mobile punch submitted without latitude/longitude."""


class NoShiftAssigned(ValidationError):
    """No shift resolves for the employee on the punch date."""


class PunchRejected(ValidationError):
    """Punch falls outside the shift's allowed check-in window."""


class DuplicatePunch(ValidationError):
    """A valid punch already exists inside the duplicate window."""


class ClockInRequired(ValidationError):
    """Break requested without an open clock-in for today."""


class AlreadyClockedOut(ValidationError):
    """Break requested after the employee clocked out for the day."""


class InvalidTimezone(ValidationError):
    """Timezone identifier is empty or unknown."""
