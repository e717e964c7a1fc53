"""
Eligibility rules for auto-mail schedules.
Decides which periods a report type may use and which send cadences
are legal for a report type and period.
"""

from typing import Dict, FrozenSet, Iterable, List, Optional, Sequence, TypeVar

from .errors import NoLegalCadence
from .models import ReportPeriod, ReportType, SendCadence

T = TypeVar("T")

# Ordered: the first entry is the default period for a freshly chosen type
ALLOWED_PERIODS_BY_REPORT_TYPE: Dict[ReportType, Sequence[ReportPeriod]] = {
    ReportType.PERFORMANCE: (ReportPeriod.MONTHLY, ReportPeriod.YEARLY),
    ReportType.TARGETS: (ReportPeriod.DAILY, ReportPeriod.WEEKLY),
    ReportType.MISSING_TARGETS: (
        ReportPeriod.DAILY,
        ReportPeriod.WEEKLY,
        ReportPeriod.MONTHLY,
        ReportPeriod.YEARLY,
    ),
}

ALLOWED_CADENCES_BY_REPORT_TYPE: Dict[ReportType, Sequence[SendCadence]] = {
    ReportType.PERFORMANCE: (
        SendCadence.DAILY,
        SendCadence.WEEKLY,
        SendCadence.MONTHLY,
        SendCadence.YEARLY,
    ),
    ReportType.TARGETS: (SendCadence.DAILY, SendCadence.WEEKLY),
    ReportType.MISSING_TARGETS: (
        SendCadence.DAILY,
        SendCadence.WEEKLY,
        SendCadence.MONTHLY,
        SendCadence.YEARLY,
    ),
}

# Nominal day counts. Months are 30 days and years 365, never calendar-exact.
PERIOD_FREQUENCY_DAYS: Dict[ReportPeriod, int] = {
    ReportPeriod.DAILY: 1,
    ReportPeriod.WEEKLY: 7,
    ReportPeriod.MONTHLY: 30,
    ReportPeriod.YEARLY: 365,
}

CADENCE_FREQUENCY_DAYS: Dict[SendCadence, int] = {
    SendCadence.DAILY: 1,
    SendCadence.WEEKLY: 7,
    SendCadence.MONTHLY: 30,
    SendCadence.YEARLY: 365,
}

DEFAULT_CADENCE_BY_PERIOD: Dict[ReportPeriod, SendCadence] = {
    ReportPeriod.DAILY: SendCadence.DAILY,
    ReportPeriod.WEEKLY: SendCadence.WEEKLY,
    ReportPeriod.MONTHLY: SendCadence.MONTHLY,
    ReportPeriod.YEARLY: SendCadence.YEARLY,
}

FALLBACK_CADENCE_ORDER = (
    SendCadence.YEARLY,
    SendCadence.MONTHLY,
    SendCadence.WEEKLY,
    SendCadence.DAILY,
)

ALL_CADENCES: FrozenSet[SendCadence] = frozenset(SendCadence)


def legal_periods(report_type: ReportType) -> FrozenSet[ReportPeriod]:
    """
    Get the reporting periods a report type may use.

    Args:
        report_type: Report type to look up

    Returns:
        Set of legal periods
    """
    return frozenset(ALLOWED_PERIODS_BY_REPORT_TYPE[report_type])


def first_legal_period(report_type: ReportType) -> ReportPeriod:
    """Default period offered when a report type is picked"""
    return ALLOWED_PERIODS_BY_REPORT_TYPE[report_type][0]


def period_days(period: ReportPeriod) -> int:
    return PERIOD_FREQUENCY_DAYS[period]


def cadence_days(cadence: SendCadence) -> int:
    return CADENCE_FREQUENCY_DAYS[cadence]


def legal_cadences(
    report_types: Iterable[ReportType],
    period: Optional[ReportPeriod] = None,
) -> FrozenSet[SendCadence]:
    """
    Compute the send cadences legal for the given report types and period.

    With no report types there is no constraint yet and every cadence is
    returned. Otherwise the allowed cadences of all types are intersected
    and, when a period is known, cadences that would mail the report less
    often than its own period are removed.

    Args:
        report_types: Chosen report types (usually zero or one)
        period: Chosen reporting period, if any

    Returns:
        Possibly empty set of legal cadences
    """
    legal = ALL_CADENCES
    for report_type in report_types:
        legal = legal & frozenset(ALLOWED_CADENCES_BY_REPORT_TYPE[report_type])

    if period is not None:
        max_days = period_days(period)
        legal = frozenset(c for c in legal if cadence_days(c) <= max_days)

    return legal


def default_cadence_for_period(period: ReportPeriod) -> SendCadence:
    """
    Suggest the cadence matching a period.
    Callers must still check the suggestion against legal_cadences.
    """
    return DEFAULT_CADENCE_BY_PERIOD[period]


def fallback_cadence(
    legal: Iterable[SendCadence],
    period: Optional[ReportPeriod] = None,
) -> SendCadence:
    """
    Pick a replacement cadence when the current one became illegal.

    Prefers the period's own cadence, then walks 1Y, 1M, 1W, 1D.

    Args:
        legal: Currently legal cadences
        period: Chosen reporting period, if any

    Returns:
        A cadence from the legal set

    Raises:
        NoLegalCadence: If the legal set is empty
    """
    legal = frozenset(legal)

    if period is not None:
        preferred = default_cadence_for_period(period)
        if preferred in legal:
            return preferred

    for cadence in FALLBACK_CADENCE_ORDER:
        if cadence in legal:
            return cadence

    raise NoLegalCadence(
        f"No legal send cadence for period {period.value if period else None}"
    )


def ordered(values: Iterable[T]) -> List[T]:
    """Sort enum members by declaration order for display"""
    values = set(values)
    if not values:
        return []
    enum_cls = type(next(iter(values)))
    return [member for member in enum_cls if member in values]
