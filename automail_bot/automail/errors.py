"""
Exceptions raised by the auto-mail schedule engine and store.
"""


class ScheduleValidationError(Exception):
    """Base class for a draft that cannot become a persisted schedule"""

    kind = "ScheduleValidationError"

    def __init__(self, message: str = ""):
        super().__init__(message or self.kind)
        self.message = message or self.kind


class InvalidReportTypeCount(ScheduleValidationError):
    """Zero or more than one report type supplied"""
    kind = "InvalidReportTypeCount"


class PeriodNotAllowedForType(ScheduleValidationError):
    """Period missing or not legal for the report type"""
    kind = "PeriodNotAllowedForType"


class NoRecipients(ScheduleValidationError):
    """Neither a mail group nor an email was given"""
    kind = "NoRecipients"


class InvalidRecipientEmail(ScheduleValidationError):
    """An email recipient is not a well-formed address"""
    kind = "InvalidRecipientEmail"


class MissingCadence(ScheduleValidationError):
    """Neither a send cadence nor an interval preset was given"""
    kind = "MissingCadence"


class UnsupportedCustomInterval(ScheduleValidationError):
    """Custom every/unit pair outside the supported combinations"""
    kind = "UnsupportedCustomInterval"


class CadenceTooInfrequent(ScheduleValidationError):
    """Mail would be sent less often than the report period"""
    kind = "CadenceTooInfrequent"


class CadenceNotAllowedForType(ScheduleValidationError):
    """Cadence is not offered for the report type"""
    kind = "CadenceNotAllowedForType"


class InvalidTimeSpec(ScheduleValidationError):
    """Hour, minute or required day field missing or out of range"""
    kind = "InvalidTimeSpec"


class EngineConfigurationError(Exception):
    """Static eligibility tables are inconsistent (programming error)"""


class NoLegalCadence(EngineConfigurationError):
    """No cadence is legal for the current selection"""


class SelectionError(Exception):
    """A selection step was refused by the eligibility rules"""


class ScheduleNotFound(KeyError):
    """No stored schedule has the requested id"""

    def __init__(self, schedule_id: str):
        super().__init__(schedule_id)
        self.schedule_id = schedule_id


class StorageError(Exception):
    """Schedules could not be written to disk"""
