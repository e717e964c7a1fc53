"""
Data models for automatic report-mail schedules.
Defines report types, periods, cadences and the persisted schedule shape.
"""

from dataclasses import dataclass, replace
from enum import Enum
from typing import Dict, Any, Optional, Tuple, Mapping


class ReportType(str, Enum):
    """Kind of report a schedule mails out"""
    PERFORMANCE = "PERFORMANCE"
    TARGETS = "TARGETS"
    MISSING_TARGETS = "MISSING_TARGETS"


class ReportPeriod(str, Enum):
    """Aggregation window of the report content"""
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"


class SendCadence(str, Enum):
    """How often the mail is dispatched (user-facing choice)"""
    DAILY = "1D"
    WEEKLY = "1W"
    MONTHLY = "1M"
    YEARLY = "1Y"


class IntervalPreset(str, Enum):
    """Persisted encoding of a cadence"""
    DAILY = "1D"
    WEEKLY = "1W"
    MONTHLY = "1M"
    CUSTOM = "CUSTOM"


class IntervalUnit(str, Enum):
    """Unit of a custom interval"""
    DAY = "DAY"
    WEEK = "WEEK"
    MONTH = "MONTH"


@dataclass(frozen=True)
class ScheduleDraft:
    """An unvalidated, caller-assembled candidate schedule"""
    report_types: Tuple[ReportType, ...] = ()
    report_period: Optional[ReportPeriod] = None
    cadence: Optional[SendCadence] = None
    interval_preset: Optional[IntervalPreset] = None
    custom_every: Optional[int] = None
    custom_unit: Optional[IntervalUnit] = None
    hour: Optional[int] = None
    minute: Optional[int] = None
    day_of_week: Optional[int] = None  # 0=Sunday .. 6=Saturday
    day_of_month: Optional[int] = None
    mail_group_ids: Tuple[str, ...] = ()
    emails: Tuple[str, ...] = ()
    project_ids: Tuple[str, ...] = ()
    id: Optional[str] = None


@dataclass(frozen=True)
class AutoMailSchedule:
    """A validated schedule, safe to persist"""
    report_types: Tuple[ReportType, ...]
    period_by_report_type: Mapping[ReportType, ReportPeriod]
    interval_preset: IntervalPreset
    hour: int
    minute: int
    mail_group_ids: Tuple[str, ...] = ()
    emails: Tuple[str, ...] = ()
    project_ids: Tuple[str, ...] = ()
    custom_every: Optional[int] = None
    custom_unit: Optional[IntervalUnit] = None
    day_of_week: Optional[int] = None
    day_of_month: Optional[int] = None
    id: Optional[str] = None

    @property
    def report_type(self) -> ReportType:
        """The single report type this schedule mails"""
        return self.report_types[0]

    @property
    def report_period(self) -> ReportPeriod:
        """Period of the primary report type"""
        return self.period_by_report_type[self.report_type]

    def format_time(self) -> str:
        """Format the send time as HH:MM"""
        return f"{self.hour:02d}:{self.minute:02d}"

    def with_id(self, schedule_id: str) -> "AutoMailSchedule":
        """Return a copy of this schedule carrying the given id"""
        return replace(self, id=schedule_id)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the JSON shape used by the schedule store"""
        data: Dict[str, Any] = {
            "reportTypes": [t.value for t in self.report_types],
            "periodByReportType": {
                t.value: p.value for t, p in self.period_by_report_type.items()
            },
            "mailGroupIds": list(self.mail_group_ids),
            "emails": list(self.emails),
            "intervalPreset": self.interval_preset.value,
            "hour": self.hour,
            "minute": self.minute,
        }
        if self.id is not None:
            data["id"] = self.id
        if self.project_ids:
            data["projectIds"] = list(self.project_ids)
        if self.custom_every is not None:
            data["customEvery"] = self.custom_every
        if self.custom_unit is not None:
            data["customUnit"] = self.custom_unit.value
        if self.day_of_week is not None:
            data["dayOfWeek"] = self.day_of_week
        if self.day_of_month is not None:
            data["dayOfMonth"] = self.day_of_month
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AutoMailSchedule":
        """Create from a stored JSON record"""
        custom_unit = data.get("customUnit")
        return cls(
            id=data.get("id"),
            report_types=tuple(ReportType(t) for t in data["reportTypes"]),
            period_by_report_type={
                ReportType(t): ReportPeriod(p)
                for t, p in (data.get("periodByReportType") or {}).items()
            },
            mail_group_ids=tuple(data.get("mailGroupIds") or ()),
            emails=tuple(data.get("emails") or ()),
            project_ids=tuple(data.get("projectIds") or ()),
            interval_preset=IntervalPreset(data["intervalPreset"]),
            custom_every=data.get("customEvery"),
            custom_unit=IntervalUnit(custom_unit) if custom_unit else None,
            hour=data["hour"],
            minute=data["minute"],
            day_of_week=data.get("dayOfWeek"),
            day_of_month=data.get("dayOfMonth"),
        )
