"""
Tabular view of stored schedules.
Builds display rows and applies filtering, sorting and pagination.
"""

import math
from dataclasses import dataclass
from typing import Callable, List, Sequence

from .models import AutoMailSchedule, IntervalPreset, IntervalUnit, ReportPeriod, ReportType

REPORT_TYPE_LABELS = {
    ReportType.PERFORMANCE: "Performance Reports",
    ReportType.TARGETS: "Target Reports",
    ReportType.MISSING_TARGETS: "Missing Targets",
}

PERIOD_LABELS = {
    ReportPeriod.DAILY: "Daily",
    ReportPeriod.WEEKLY: "Weekly",
    ReportPeriod.MONTHLY: "Monthly",
    ReportPeriod.YEARLY: "Yearly",
}

INTERVAL_PRESET_LABELS = {
    IntervalPreset.DAILY: "Daily",
    IntervalPreset.WEEKLY: "Weekly",
    IntervalPreset.MONTHLY: "Monthly",
    IntervalPreset.CUSTOM: "Custom",
}

SORT_KEYS = ("reportTypes", "interval", "groups", "emails")
PAGE_SIZE = 10


@dataclass(frozen=True)
class ScheduleRow:
    key: str
    report_types_text: str
    interval_text: str
    groups_text: str
    emails_text: str
    schedule: AutoMailSchedule

    @property
    def haystack(self) -> str:
        return (
            f"{self.report_types_text} {self.interval_text} "
            f"{self.groups_text} {self.emails_text}"
        ).strip().lower()


@dataclass(frozen=True)
class TablePage:
    total_items: int
    total_pages: int
    page: int
    items: List[ScheduleRow]


def report_types_text(schedule: AutoMailSchedule) -> str:
    parts = []
    for report_type in schedule.report_types:
        label = REPORT_TYPE_LABELS.get(report_type, report_type.value)
        period = schedule.period_by_report_type.get(report_type)
        parts.append(f"{label} ({PERIOD_LABELS[period]})" if period else label)
    return ", ".join(parts)


def interval_text(schedule: AutoMailSchedule) -> str:
    """Human label for a stored interval"""
    if schedule.interval_preset != IntervalPreset.CUSTOM:
        return INTERVAL_PRESET_LABELS[schedule.interval_preset]
    if schedule.custom_every == 12 and schedule.custom_unit == IntervalUnit.MONTH:
        return "Yearly"
    unit = schedule.custom_unit.value if schedule.custom_unit else IntervalUnit.WEEK.value
    return f"Custom ({schedule.custom_every or 1} {unit})"


def build_rows(
    schedules: Sequence[AutoMailSchedule],
    group_name: Callable[[str], str] = lambda group_id: group_id,
) -> List[ScheduleRow]:
    """
    Build display rows for stored schedules.

    Args:
        schedules: Stored schedules
        group_name: Resolves a mail group id to its display name

    Returns:
        One row per schedule
    """
    rows = []
    for schedule in schedules:
        types_text = report_types_text(schedule)
        cadence_text = interval_text(schedule)
        groups_text = ", ".join(group_name(g) for g in schedule.mail_group_ids)
        emails_text = ", ".join(schedule.emails)
        rows.append(ScheduleRow(
            key=schedule.id or f"{types_text}-{cadence_text}-{groups_text}-{emails_text}",
            report_types_text=types_text or "-",
            interval_text=cadence_text or "-",
            groups_text=groups_text or "-",
            emails_text=emails_text or "-",
            schedule=schedule,
        ))
    return rows


def _sort_value(row: ScheduleRow, sort_key: str) -> str:
    if sort_key == "interval":
        return row.interval_text
    if sort_key == "groups":
        return row.groups_text
    if sort_key == "emails":
        return row.emails_text
    return row.report_types_text


def paginate_rows(
    rows: Sequence[ScheduleRow],
    needle: str = "",
    sort_key: str = "reportTypes",
    direction: str = "asc",
    page: int = 1,
    page_size: int = PAGE_SIZE,
) -> TablePage:
    """
    Filter, sort and slice schedule rows.

    Args:
        rows: Rows from build_rows
        needle: Case-insensitive text filter
        sort_key: One of SORT_KEYS; unknown keys sort by report types
        direction: "asc" or "desc"
        page: Requested page, clamped into range
        page_size: Rows per page

    Returns:
        The visible page
    """
    needle = needle.strip().lower()
    filtered = [r for r in rows if needle in r.haystack] if needle else list(rows)

    ordered_rows = sorted(
        filtered,
        key=lambda r: _sort_value(r, sort_key).casefold(),
        reverse=direction == "desc",
    )

    total_pages = max(1, math.ceil(len(ordered_rows) / page_size))
    safe_page = min(max(1, page), total_pages)
    start = (safe_page - 1) * page_size

    return TablePage(
        total_items=len(ordered_rows),
        total_pages=total_pages,
        page=safe_page,
        items=ordered_rows[start:start + page_size],
    )
