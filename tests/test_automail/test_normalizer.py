import pytest

from automail_bot.automail.errors import (
    CadenceTooInfrequent,
    InvalidRecipientEmail,
    InvalidReportTypeCount,
    InvalidTimeSpec,
    MissingCadence,
    NoRecipients,
    PeriodNotAllowedForType,
    ScheduleValidationError,
    UnsupportedCustomInterval,
)
from automail_bot.automail.models import (
    AutoMailSchedule,
    IntervalPreset,
    IntervalUnit,
    ReportPeriod,
    ReportType,
    ScheduleDraft,
    SendCadence,
)
from automail_bot.automail.normalizer import (
    cadence_for_interval,
    draft_from_schedule,
    normalize_emails,
    normalize_schedule,
)


def make_draft(**overrides):
    """A valid daily missing-targets draft with overrides applied"""
    fields = dict(
        report_types=(ReportType.MISSING_TARGETS,),
        report_period=ReportPeriod.DAILY,
        cadence=SendCadence.DAILY,
        hour=7,
        minute=0,
        emails=("x@y.com",),
    )
    fields.update(overrides)
    return ScheduleDraft(**fields)


def test_weekly_target_report_cannot_be_mailed_monthly():
    draft = make_draft(
        report_types=(ReportType.TARGETS,),
        report_period=ReportPeriod.WEEKLY,
        cadence=SendCadence.MONTHLY,
        hour=9,
        day_of_month=1,
        emails=("a@b.com",),
    )
    with pytest.raises(CadenceTooInfrequent) as exc_info:
        normalize_schedule(draft)
    assert exc_info.value.kind == "CadenceTooInfrequent"


def test_yearly_cadence_is_persisted_as_custom_twelve_months():
    draft = make_draft(
        report_types=(ReportType.PERFORMANCE,),
        report_period=ReportPeriod.YEARLY,
        cadence=SendCadence.YEARLY,
        hour=8,
        minute=30,
        emails=(),
        mail_group_ids=("g1",),
    )
    schedule = normalize_schedule(draft)
    assert schedule.interval_preset == IntervalPreset.CUSTOM
    assert schedule.custom_every == 12
    assert schedule.custom_unit == IntervalUnit.MONTH
    assert schedule.day_of_week is None
    assert schedule.day_of_month is None


@pytest.mark.parametrize("report_type,period", [
    (ReportType.PERFORMANCE, ReportPeriod.YEARLY),
    (ReportType.MISSING_TARGETS, ReportPeriod.YEARLY),
])
def test_yearly_cadence_always_custom(report_type, period):
    schedule = normalize_schedule(make_draft(
        report_types=(report_type,), report_period=period, cadence=SendCadence.YEARLY,
    ))
    assert (schedule.interval_preset, schedule.custom_every, schedule.custom_unit) == (
        IntervalPreset.CUSTOM, 12, IntervalUnit.MONTH,
    )


def test_daily_schedule_has_no_day_fields():
    schedule = normalize_schedule(make_draft(day_of_week=3, day_of_month=10))
    assert schedule.interval_preset == IntervalPreset.DAILY
    assert schedule.day_of_week is None
    assert schedule.day_of_month is None
    assert schedule.custom_every is None
    assert schedule.emails == ("x@y.com",)


def test_weekly_cadence_on_weekly_target_report():
    schedule = normalize_schedule(make_draft(
        report_types=(ReportType.TARGETS,),
        report_period=ReportPeriod.WEEKLY,
        cadence=SendCadence.WEEKLY,
        hour=9,
        day_of_week=1,
        day_of_month=20,
        emails=(),
        mail_group_ids=("g1",),
    ))
    assert schedule.interval_preset == IntervalPreset.WEEKLY
    assert schedule.day_of_week == 1
    assert schedule.day_of_month is None


def test_monthly_cadence_keeps_only_day_of_month():
    schedule = normalize_schedule(make_draft(
        report_types=(ReportType.PERFORMANCE,),
        report_period=ReportPeriod.MONTHLY,
        cadence=SendCadence.MONTHLY,
        day_of_week=2,
        day_of_month=15,
    ))
    assert schedule.day_of_month == 15
    assert schedule.day_of_week is None


def test_yearly_period_accepts_weekly_cadence():
    schedule = normalize_schedule(make_draft(
        report_types=(ReportType.PERFORMANCE,),
        report_period=ReportPeriod.YEARLY,
        cadence=SendCadence.WEEKLY,
        day_of_week=5,
    ))
    assert schedule.interval_preset == IntervalPreset.WEEKLY
    assert schedule.report_period == ReportPeriod.YEARLY


@pytest.mark.parametrize("overrides", [
    {},
    {"report_types": ()},
    {"report_period": None},
    {"cadence": SendCadence.YEARLY},
    {"hour": 99},
])
def test_empty_recipients_rejected_after_type_and_period_checks(overrides):
    draft = make_draft(emails=(), mail_group_ids=(), **overrides)
    expected = NoRecipients
    if "report_types" in overrides:
        expected = InvalidReportTypeCount
    elif "report_period" in overrides:
        expected = PeriodNotAllowedForType
    with pytest.raises(expected):
        normalize_schedule(draft)


def test_blank_recipients_count_as_empty():
    with pytest.raises(NoRecipients):
        normalize_schedule(make_draft(emails=("  ", ""), mail_group_ids=(" ",)))


def test_report_type_count_must_be_one():
    with pytest.raises(InvalidReportTypeCount):
        normalize_schedule(make_draft(report_types=()))
    with pytest.raises(InvalidReportTypeCount):
        normalize_schedule(make_draft(report_types=(ReportType.TARGETS, ReportType.MISSING_TARGETS)))


def test_period_must_be_legal_for_type():
    with pytest.raises(PeriodNotAllowedForType):
        normalize_schedule(make_draft(report_types=(ReportType.PERFORMANCE,)))
    with pytest.raises(PeriodNotAllowedForType):
        normalize_schedule(make_draft(report_period=None))


def test_invalid_email_rejected():
    with pytest.raises(InvalidRecipientEmail):
        normalize_schedule(make_draft(emails=("not-an-email",)))


def test_missing_cadence_rejected():
    with pytest.raises(MissingCadence):
        normalize_schedule(make_draft(cadence=None))


def test_raw_custom_interval_whitelist():
    yearly = normalize_schedule(make_draft(
        report_period=ReportPeriod.YEARLY,
        cadence=None,
        interval_preset=IntervalPreset.CUSTOM,
        custom_every=12,
        custom_unit=IntervalUnit.MONTH,
    ))
    assert yearly.interval_preset == IntervalPreset.CUSTOM
    assert (yearly.custom_every, yearly.custom_unit) == (12, IntervalUnit.MONTH)

    daily = normalize_schedule(make_draft(
        cadence=None,
        interval_preset=IntervalPreset.CUSTOM,
        custom_every=1,
        custom_unit=IntervalUnit.DAY,
    ))
    assert daily.interval_preset == IntervalPreset.DAILY
    assert daily.custom_every is None


@pytest.mark.parametrize("every,unit", [
    (1, IntervalUnit.WEEK),
    (1, IntervalUnit.MONTH),
    (2, IntervalUnit.DAY),
    (6, IntervalUnit.MONTH),
    (None, None),
])
def test_other_custom_intervals_rejected(every, unit):
    draft = make_draft(
        report_period=ReportPeriod.YEARLY,
        cadence=None,
        interval_preset=IntervalPreset.CUSTOM,
        custom_every=every,
        custom_unit=unit,
    )
    with pytest.raises(UnsupportedCustomInterval):
        normalize_schedule(draft)


def test_raw_preset_is_used_without_cadence():
    schedule = normalize_schedule(make_draft(
        report_period=ReportPeriod.WEEKLY,
        cadence=None,
        interval_preset=IntervalPreset.WEEKLY,
        day_of_week=0,
    ))
    assert schedule.interval_preset == IntervalPreset.WEEKLY
    assert schedule.day_of_week == 0


@pytest.mark.parametrize("overrides", [
    {"hour": None},
    {"hour": 24},
    {"hour": -1},
    {"minute": 60},
    {"minute": True},
    {"hour": "9"},
])
def test_invalid_time_rejected(overrides):
    with pytest.raises(InvalidTimeSpec):
        normalize_schedule(make_draft(**overrides))


@pytest.mark.parametrize("day", [None, 7, -1])
def test_weekly_requires_day_of_week(day):
    draft = make_draft(report_period=ReportPeriod.WEEKLY, cadence=SendCadence.WEEKLY, day_of_week=day)
    with pytest.raises(InvalidTimeSpec):
        normalize_schedule(draft)


@pytest.mark.parametrize("day", [None, 0, 32])
def test_monthly_requires_day_of_month(day):
    draft = make_draft(report_period=ReportPeriod.MONTHLY, cadence=SendCadence.MONTHLY, day_of_month=day)
    with pytest.raises(InvalidTimeSpec):
        normalize_schedule(draft)


def test_frequency_checked_before_time_fields():
    draft = make_draft(report_period=ReportPeriod.DAILY, cadence=SendCadence.WEEKLY, hour=99)
    with pytest.raises(CadenceTooInfrequent):
        normalize_schedule(draft)


def test_all_validation_errors_share_a_base_class():
    with pytest.raises(ScheduleValidationError):
        normalize_schedule(make_draft(report_types=()))


def test_recipients_are_normalized():
    schedule = normalize_schedule(make_draft(
        emails=(" B@Acme.com", "a@acme.com", "b@acme.com ", ""),
        mail_group_ids=("g2", " g1", "g2"),
    ))
    assert schedule.emails == ("a@acme.com", "b@acme.com")
    assert schedule.mail_group_ids == ("g1", "g2")


def test_projects_only_kept_for_target_reports():
    targets = normalize_schedule(make_draft(
        report_types=(ReportType.TARGETS,), project_ids=("p2", "p1", "p2"),
    ))
    assert targets.project_ids == ("p1", "p2")

    missing = normalize_schedule(make_draft(project_ids=("p1",)))
    assert missing.project_ids == ()


def test_period_is_keyed_by_report_type():
    schedule = normalize_schedule(make_draft())
    assert schedule.report_types == (ReportType.MISSING_TARGETS,)
    assert schedule.period_by_report_type == {ReportType.MISSING_TARGETS: ReportPeriod.DAILY}


@pytest.mark.parametrize("draft", [
    make_draft(),
    make_draft(report_types=(ReportType.PERFORMANCE,), report_period=ReportPeriod.YEARLY,
               cadence=SendCadence.YEARLY),
    make_draft(report_types=(ReportType.PERFORMANCE,), report_period=ReportPeriod.YEARLY,
               cadence=SendCadence.MONTHLY, day_of_month=31),
    make_draft(report_types=(ReportType.TARGETS,), report_period=ReportPeriod.WEEKLY,
               cadence=SendCadence.WEEKLY, day_of_week=6, project_ids=("p1",), id="abc"),
])
def test_normalizing_a_canonical_schedule_is_idempotent(draft):
    schedule = normalize_schedule(draft)
    assert normalize_schedule(draft_from_schedule(schedule)) == schedule


def test_cadence_for_interval():
    assert cadence_for_interval(IntervalPreset.DAILY) == SendCadence.DAILY
    assert cadence_for_interval(IntervalPreset.MONTHLY) == SendCadence.MONTHLY
    assert cadence_for_interval(IntervalPreset.CUSTOM, 12, IntervalUnit.MONTH) == SendCadence.YEARLY
    assert cadence_for_interval(IntervalPreset.CUSTOM, 1, IntervalUnit.DAY) == SendCadence.DAILY
    assert cadence_for_interval(IntervalPreset.CUSTOM, 1, IntervalUnit.WEEK) == SendCadence.WEEKLY
    assert cadence_for_interval(IntervalPreset.CUSTOM, 1, IntervalUnit.MONTH) == SendCadence.MONTHLY
    assert cadence_for_interval(IntervalPreset.CUSTOM, 3, IntervalUnit.WEEK) is None


def test_normalize_emails_drops_blanks():
    assert normalize_emails(["", "  ", "X@Y.COM", "x@y.com"]) == ("x@y.com",)


def test_schedule_json_round_trip():
    schedule = normalize_schedule(make_draft(
        report_types=(ReportType.PERFORMANCE,),
        report_period=ReportPeriod.YEARLY,
        cadence=SendCadence.YEARLY,
        mail_group_ids=("g1",),
        id="s1",
    ))
    data = schedule.to_dict()
    assert data["intervalPreset"] == "CUSTOM"
    assert data["customEvery"] == 12
    assert data["customUnit"] == "MONTH"
    assert data["periodByReportType"] == {"PERFORMANCE": "yearly"}
    assert "dayOfWeek" not in data
    assert "projectIds" not in data
    assert AutoMailSchedule.from_dict(data) == schedule


@pytest.mark.parametrize("report_type,period,cadence", [
    (ReportType.PERFORMANCE, ReportPeriod.MONTHLY, SendCadence.YEARLY),
    (ReportType.TARGETS, ReportPeriod.DAILY, SendCadence.WEEKLY),
    (ReportType.MISSING_TARGETS, ReportPeriod.WEEKLY, SendCadence.MONTHLY),
])
def test_cadence_longer_than_period_rejected(report_type, period, cadence):
    draft = make_draft(
        report_types=(report_type,),
        report_period=period,
        cadence=cadence,
        day_of_week=1,
        day_of_month=1,
    )
    with pytest.raises(CadenceTooInfrequent):
        normalize_schedule(draft)
