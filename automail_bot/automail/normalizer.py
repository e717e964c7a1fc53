"""
Schedule normalizer.
Validates a draft in a fixed order and turns it into the canonical
schedule shape that is persisted.
"""

from typing import Iterable, Optional, Tuple

from email_validator import EmailNotValidError, validate_email
from loguru import logger

from .errors import (
    CadenceNotAllowedForType,
    CadenceTooInfrequent,
    InvalidRecipientEmail,
    InvalidReportTypeCount,
    InvalidTimeSpec,
    MissingCadence,
    NoRecipients,
    PeriodNotAllowedForType,
    UnsupportedCustomInterval,
)
from .models import (
    AutoMailSchedule,
    IntervalPreset,
    IntervalUnit,
    ReportType,
    ScheduleDraft,
    SendCadence,
)
from .rules import cadence_days, legal_cadences, legal_periods, period_days

YEARLY_CUSTOM = (12, IntervalUnit.MONTH)
DAILY_CUSTOM = (1, IntervalUnit.DAY)

# Older rows may still carry these; they are readable but no longer saved
LEGACY_CUSTOM = {
    (1, IntervalUnit.WEEK): SendCadence.WEEKLY,
    (1, IntervalUnit.MONTH): SendCadence.MONTHLY,
}

PRESET_BY_CADENCE = {
    SendCadence.DAILY: IntervalPreset.DAILY,
    SendCadence.WEEKLY: IntervalPreset.WEEKLY,
    SendCadence.MONTHLY: IntervalPreset.MONTHLY,
}
CADENCE_BY_PRESET = {preset: cadence for cadence, preset in PRESET_BY_CADENCE.items()}


def normalize_email(value: str) -> Optional[str]:
    """Trim and lower-case an address, None if nothing is left"""
    normalized = (value or "").strip().lower()
    return normalized or None


def normalize_emails(values: Iterable[str]) -> Tuple[str, ...]:
    """Normalize, de-duplicate and sort email addresses"""
    emails = {normalize_email(v) for v in values}
    return tuple(sorted(e for e in emails if e))


def normalize_ids(values: Iterable[str]) -> Tuple[str, ...]:
    """Trim, de-duplicate and sort opaque ids"""
    ids = {str(v).strip() for v in values if v is not None}
    return tuple(sorted(i for i in ids if i))


def is_valid_email(value: str) -> bool:
    try:
        validate_email(value, check_deliverability=False)
        return True
    except EmailNotValidError:
        return False


def cadence_for_interval(
    preset: IntervalPreset,
    every: Optional[int] = None,
    unit: Optional[IntervalUnit] = None,
) -> Optional[SendCadence]:
    """
    Map a persisted interval back to the cadence a user would pick.

    Args:
        preset: Stored interval preset
        every: Custom interval count
        unit: Custom interval unit

    Returns:
        The cadence, or None when the custom interval is no longer supported
    """
    if preset != IntervalPreset.CUSTOM:
        return CADENCE_BY_PRESET[preset]

    pair = (every, unit)
    if pair == YEARLY_CUSTOM:
        return SendCadence.YEARLY
    if pair == DAILY_CUSTOM:
        return SendCadence.DAILY
    return LEGACY_CUSTOM.get(pair)


def _is_int(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _in_range(value, low: int, high: int) -> bool:
    return _is_int(value) and low <= value <= high


def _resolve_interval(
    draft: ScheduleDraft,
) -> Tuple[SendCadence, IntervalPreset, Optional[int], Optional[IntervalUnit]]:
    """Work out the effective cadence and its persisted encoding"""
    if draft.cadence is not None:
        if draft.cadence == SendCadence.YEARLY:
            every, unit = YEARLY_CUSTOM
            return SendCadence.YEARLY, IntervalPreset.CUSTOM, every, unit
        return draft.cadence, PRESET_BY_CADENCE[draft.cadence], None, None

    if draft.interval_preset is None:
        raise MissingCadence("No send cadence selected")

    if draft.interval_preset != IntervalPreset.CUSTOM:
        return (
            CADENCE_BY_PRESET[draft.interval_preset],
            draft.interval_preset,
            None,
            None,
        )

    pair = (draft.custom_every, draft.custom_unit)
    if pair == YEARLY_CUSTOM:
        every, unit = YEARLY_CUSTOM
        return SendCadence.YEARLY, IntervalPreset.CUSTOM, every, unit
    if pair == DAILY_CUSTOM:
        return SendCadence.DAILY, IntervalPreset.DAILY, None, None

    unit_name = draft.custom_unit.value if draft.custom_unit else None
    raise UnsupportedCustomInterval(
        f"Custom interval every {draft.custom_every} {unit_name} is not supported"
    )


def normalize_schedule(draft: ScheduleDraft) -> AutoMailSchedule:
    """
    Validate a draft and produce the canonical schedule.

    Checks run in a fixed order and the first failure is raised.

    Args:
        draft: Caller-assembled schedule candidate

    Returns:
        Canonical schedule ready for the store

    Raises:
        ScheduleValidationError: Subclass naming the first failing check
    """
    # 1. Exactly one report type
    report_types = tuple(dict.fromkeys(draft.report_types))
    if len(report_types) != 1:
        raise InvalidReportTypeCount(
            f"Expected exactly one report type, got {len(report_types)}"
        )
    report_type: ReportType = report_types[0]

    # 2. Period must be legal for the type
    period = draft.report_period
    if period is None or period not in legal_periods(report_type):
        raise PeriodNotAllowedForType(
            f"Period {period.value if period else None} is not allowed for {report_type.value}"
        )

    # 3. Recipients
    mail_group_ids = normalize_ids(draft.mail_group_ids)
    emails = normalize_emails(draft.emails)
    if not mail_group_ids and not emails:
        raise NoRecipients("Select at least one mail group or email")
    for email in emails:
        if not is_valid_email(email):
            raise InvalidRecipientEmail(f"{email} is not a valid email address")

    # 4. Cadence shape
    cadence, preset, custom_every, custom_unit = _resolve_interval(draft)

    # 5. Frequency
    if cadence_days(cadence) > period_days(period):
        raise CadenceTooInfrequent(
            f"Cadence {cadence.value} is less frequent than the {period.value} period"
        )
    if cadence not in legal_cadences([report_type], period):
        raise CadenceNotAllowedForType(
            f"Cadence {cadence.value} is not offered for {report_type.value}"
        )

    # 6. Time fields
    if not _in_range(draft.hour, 0, 23) or not _in_range(draft.minute, 0, 59):
        raise InvalidTimeSpec(f"Invalid send time {draft.hour}:{draft.minute}")

    day_of_week = None
    day_of_month = None
    if cadence == SendCadence.WEEKLY:
        if not _in_range(draft.day_of_week, 0, 6):
            raise InvalidTimeSpec(f"Weekly schedules need a day of week 0-6, got {draft.day_of_week}")
        day_of_week = draft.day_of_week
    elif cadence == SendCadence.MONTHLY:
        if not _in_range(draft.day_of_month, 1, 31):
            raise InvalidTimeSpec(f"Monthly schedules need a day of month 1-31, got {draft.day_of_month}")
        day_of_month = draft.day_of_month

    # 7. Canonical shape
    project_ids = ()
    if report_type == ReportType.TARGETS:
        project_ids = normalize_ids(draft.project_ids)

    schedule = AutoMailSchedule(
        id=draft.id,
        report_types=(report_type,),
        period_by_report_type={report_type: period},
        mail_group_ids=mail_group_ids,
        emails=emails,
        project_ids=project_ids,
        interval_preset=preset,
        custom_every=custom_every,
        custom_unit=custom_unit,
        hour=draft.hour,
        minute=draft.minute,
        day_of_week=day_of_week,
        day_of_month=day_of_month,
    )
    logger.debug(
        f"Normalized {report_type.value}/{period.value} schedule with cadence {cadence.value}"
    )
    return schedule


def draft_from_schedule(schedule: AutoMailSchedule) -> ScheduleDraft:
    """Turn a stored schedule back into a draft for re-validation"""
    report_type = schedule.report_types[0] if schedule.report_types else None
    period = schedule.period_by_report_type.get(report_type) if report_type else None
    return ScheduleDraft(
        id=schedule.id,
        report_types=tuple(schedule.report_types),
        report_period=period,
        interval_preset=schedule.interval_preset,
        custom_every=schedule.custom_every,
        custom_unit=schedule.custom_unit,
        hour=schedule.hour,
        minute=schedule.minute,
        day_of_week=schedule.day_of_week,
        day_of_month=schedule.day_of_month,
        mail_group_ids=tuple(schedule.mail_group_ids),
        emails=tuple(schedule.emails),
        project_ids=tuple(schedule.project_ids),
    )
