"""
Step-by-step schedule selection.
Tracks report type, period and cadence choices the way an editor form
does, re-projecting later choices whenever an earlier one changes.
"""

from dataclasses import dataclass, replace
from enum import Enum
from typing import FrozenSet, Iterable, Optional, Tuple

from loguru import logger

from .errors import SelectionError
from .models import (
    AutoMailSchedule,
    ReportPeriod,
    ReportType,
    ScheduleDraft,
    SendCadence,
)
from .normalizer import cadence_for_interval
from .rules import (
    fallback_cadence,
    first_legal_period,
    legal_cadences,
    legal_periods,
)


class SelectionState(str, Enum):
    EMPTY = "empty"
    TYPE_CHOSEN = "type_chosen"
    PERIOD_CHOSEN = "period_chosen"
    CADENCE_CHOSEN = "cadence_chosen"


@dataclass(frozen=True)
class ScheduleSelection:
    """Immutable editor selection; every choice returns a new selection"""
    report_type: Optional[ReportType] = None
    period: Optional[ReportPeriod] = None
    cadence: Optional[SendCadence] = None
    project_ids: Tuple[str, ...] = ()

    @property
    def state(self) -> SelectionState:
        if self.report_type is None:
            return SelectionState.EMPTY
        if self.period is None:
            return SelectionState.TYPE_CHOSEN
        if self.cadence is None:
            return SelectionState.PERIOD_CHOSEN
        return SelectionState.CADENCE_CHOSEN

    @property
    def report_types(self) -> Tuple[ReportType, ...]:
        return (self.report_type,) if self.report_type else ()

    def allowed_periods(self) -> FrozenSet[ReportPeriod]:
        if self.report_type is None:
            return frozenset()
        return legal_periods(self.report_type)

    def allowed_cadences(self) -> FrozenSet[SendCadence]:
        return legal_cadences(self.report_types, self.period)

    def _reproject_cadence(self) -> "ScheduleSelection":
        """Keep the cadence if still legal, otherwise pick the fallback"""
        allowed = self.allowed_cadences()
        if self.cadence in allowed:
            return self
        cadence = fallback_cadence(allowed, self.period)
        logger.debug(f"Cadence {self.cadence} no longer legal, using {cadence.value}")
        return replace(self, cadence=cadence)

    def choose_report_type(self, report_type: ReportType) -> "ScheduleSelection":
        """
        Pick the report type.

        Args:
            report_type: Report type to select

        Returns:
            New selection with the type's default period and cadence

        Raises:
            SelectionError: If another report type is already selected
        """
        if self.report_type == report_type:
            return self
        if self.report_type is not None:
            raise SelectionError("Only one report type can be selected at a time")

        period = first_legal_period(report_type)
        project_ids = self.project_ids if report_type == ReportType.TARGETS else ()
        selection = ScheduleSelection(
            report_type=report_type,
            period=period,
            cadence=None,
            project_ids=project_ids,
        )
        return replace(selection, cadence=fallback_cadence(selection.allowed_cadences(), period))

    def clear_report_type(self) -> "ScheduleSelection":
        """Drop the report type along with period and projects"""
        return ScheduleSelection(cadence=self.cadence)

    def choose_period(self, period: ReportPeriod) -> "ScheduleSelection":
        if self.report_type is None:
            raise SelectionError("Choose a report type first")
        if period not in self.allowed_periods():
            raise SelectionError(
                f"Period {period.value} is not available for {self.report_type.value}"
            )
        return replace(self, period=period)._reproject_cadence()

    def choose_cadence(self, cadence: SendCadence) -> "ScheduleSelection":
        if cadence not in self.allowed_cadences():
            raise SelectionError(f"Cadence {cadence.value} is not available for this selection")
        return replace(self, cadence=cadence)

    def choose_projects(self, project_ids: Iterable[str]) -> "ScheduleSelection":
        if self.report_type != ReportType.TARGETS:
            raise SelectionError("Projects can only be chosen for target reports")
        return replace(self, project_ids=tuple(project_ids))

    def to_draft(
        self,
        hour: Optional[int],
        minute: Optional[int],
        day_of_week: Optional[int] = None,
        day_of_month: Optional[int] = None,
        mail_group_ids: Iterable[str] = (),
        emails: Iterable[str] = (),
        schedule_id: Optional[str] = None,
    ) -> ScheduleDraft:
        """Build a draft from this selection; it still has to be normalized"""
        return ScheduleDraft(
            id=schedule_id,
            report_types=self.report_types,
            report_period=self.period,
            cadence=self.cadence,
            hour=hour,
            minute=minute,
            day_of_week=day_of_week,
            day_of_month=day_of_month,
            mail_group_ids=tuple(mail_group_ids),
            emails=tuple(emails),
            project_ids=self.project_ids,
        )

    @classmethod
    def from_schedule(cls, schedule: AutoMailSchedule) -> "ScheduleSelection":
        """
        Seed a selection from a stored schedule for editing.

        Unsupported custom intervals are reset to a weekly cadence, or to
        a legal fallback when weekly is not allowed, and must be re-chosen
        by the user.
        """
        report_type = schedule.report_types[0]
        period = schedule.period_by_report_type.get(report_type)
        if period not in legal_periods(report_type):
            period = first_legal_period(report_type)

        cadence = cadence_for_interval(
            schedule.interval_preset, schedule.custom_every, schedule.custom_unit
        )
        if cadence is None:
            logger.warning(f"Schedule {schedule.id} uses an unsupported custom interval")
            cadence = SendCadence.WEEKLY

        project_ids = schedule.project_ids if report_type == ReportType.TARGETS else ()
        selection = cls(
            report_type=report_type,
            period=period,
            cadence=cadence,
            project_ids=tuple(project_ids),
        )
        return selection._reproject_cadence()
