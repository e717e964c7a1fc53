"""
Command handlers for auto-mail schedule commands.
Turns user arguments into drafts, runs them through the rule engine
and pipes canonical schedules into the store.
"""

from dataclasses import replace
from typing import Dict, Optional, Sequence
import discord
from discord.ext import commands
from loguru import logger

from automail_bot import config
from automail_bot.utils.embed_utilities import (
    create_alert_embed,
    create_options_embed,
    create_schedule_embed,
    create_schedule_table_embed,
)
from automail_bot.utils.validation_utilities import (
    ValidationError,
    confirm_action,
    parse_day_of_month,
    parse_day_of_week,
    parse_enum,
    parse_options,
    parse_recipients,
    parse_time,
    split_list,
    validate_choice,
)

from .directory import Directory
from .errors import (
    CadenceNotAllowedForType,
    CadenceTooInfrequent,
    InvalidRecipientEmail,
    InvalidReportTypeCount,
    InvalidTimeSpec,
    MissingCadence,
    NoRecipients,
    PeriodNotAllowedForType,
    ScheduleNotFound,
    ScheduleValidationError,
    SelectionError,
    StorageError,
    UnsupportedCustomInterval,
)
from .models import AutoMailSchedule, ReportPeriod, ReportType, ScheduleDraft, SendCadence
from .normalizer import normalize_schedule
from .rules import legal_cadences
from .selection import ScheduleSelection, SelectionState
from .storage import ScheduleStore
from .table import SORT_KEYS, build_rows, paginate_rows

OPTION_KEYS = ("type", "period", "cadence", "at", "day", "to", "projects")
LIST_OPTION_KEYS = ("type", "to", "projects")

STORAGE_FAILURE_MESSAGE = "The auto-mail schedules could not be written to disk. Please try again."

ERROR_MESSAGES = {
    InvalidReportTypeCount: "Please choose exactly one report type.",
    PeriodNotAllowedForType: "The selected report period is not supported for this report type.",
    NoRecipients: "Please choose at least one mail group or user.",
    InvalidRecipientEmail: "One of the email addresses is not valid.",
    MissingCadence: "Please choose a send interval.",
    UnsupportedCustomInterval: "The selected send interval is not supported.",
    CadenceTooInfrequent: "The send interval cannot be less frequent than the report period.",
    CadenceNotAllowedForType: "The selected send interval is not available for this report type.",
    InvalidTimeSpec: "Please choose a valid send time and day.",
}


def error_message(error: ScheduleValidationError) -> str:
    """User-facing text for a validation failure"""
    for cls in type(error).__mro__:
        if cls in ERROR_MESSAGES:
            return ERROR_MESSAGES[cls]
    return "The auto-mail schedule could not be saved."


class AutoMailCommands:
    """Command handlers for auto-mail schedules"""

    def __init__(self, store: ScheduleStore, directory: Directory):
        """
        Initialize auto-mail commands.

        Args:
            store: Schedule store
            directory: Mail group and user lookups
        """
        self.store = store
        self.directory = directory
        logger.debug("Initialized AutoMailCommands")

    def build_draft(
        self,
        options: Dict[str, str],
        existing: Optional[AutoMailSchedule] = None,
    ) -> ScheduleDraft:
        """
        Assemble a draft from command options.

        Choices go through the selection, which fills in defaults for
        anything missing. Explicit choices the selection refuses are passed
        to the normalizer as given so it reports exactly what is wrong.

        Args:
            options: Parsed key=value options
            existing: Schedule being edited, if any

        Returns:
            Draft ready for normalize_schedule
        """
        selection = ScheduleSelection.from_schedule(existing) if existing else ScheduleSelection()
        refused = {}

        if "type" in options:
            report_types = tuple(dict.fromkeys(
                parse_enum(t, ReportType, "report type") for t in split_list(options["type"])
            ))
            if len(report_types) == 1:
                if selection.report_type != report_types[0]:
                    selection = selection.clear_report_type().choose_report_type(report_types[0])
            else:
                refused["report_types"] = report_types

        if "period" in options:
            period = parse_enum(options["period"], ReportPeriod, "report period")
            if period in selection.allowed_periods():
                selection = selection.choose_period(period)
            else:
                refused["report_period"] = period

        if "cadence" in options:
            cadence = parse_enum(options["cadence"], SendCadence, "send cadence")
            if cadence in selection.allowed_cadences():
                selection = selection.choose_cadence(cadence)
            else:
                refused["cadence"] = cadence

        if "projects" in options and selection.report_type == ReportType.TARGETS:
            selection = selection.choose_projects(split_list(options["projects"]))

        cadence = refused.get("cadence", selection.cadence)

        if "at" in options:
            hour, minute = parse_time(options["at"])
        elif existing:
            hour, minute = existing.hour, existing.minute
        else:
            hour, minute = config.DEFAULT_HOUR, config.DEFAULT_MINUTE

        day_of_week = existing.day_of_week if existing else None
        day_of_month = existing.day_of_month if existing else None
        if day_of_week is None:
            day_of_week = config.DEFAULT_DAY_OF_WEEK
        if day_of_month is None:
            day_of_month = config.DEFAULT_DAY_OF_MONTH
        if "day" in options:
            if cadence == SendCadence.WEEKLY:
                day_of_week = parse_day_of_week(options["day"])
            elif cadence == SendCadence.MONTHLY:
                day_of_month = parse_day_of_month(options["day"])

        if "to" in options:
            mail_group_ids, user_ids, emails = parse_recipients(options["to"])
            unknown = [u for u in user_ids if not self.directory.user(u)]
            if unknown:
                raise ValidationError(f"Unknown user(s): {', '.join(unknown)}.")
            emails = emails + self.directory.resolve_user_emails(user_ids)
        elif existing:
            mail_group_ids, emails = list(existing.mail_group_ids), list(existing.emails)
        else:
            mail_group_ids, emails = [], []

        draft = selection.to_draft(
            hour=hour,
            minute=minute,
            day_of_week=day_of_week,
            day_of_month=day_of_month,
            mail_group_ids=mail_group_ids,
            emails=emails,
            schedule_id=existing.id if existing else None,
        )
        if refused:
            logger.debug(f"Passing refused choices to the normalizer: {refused}")
            draft = replace(draft, **refused)
        return draft

    async def _save(
        self,
        ctx: commands.Context,
        args: Sequence[str],
        existing: Optional[AutoMailSchedule] = None,
    ) -> Optional[AutoMailSchedule]:
        """Validate options and store the resulting schedule"""
        try:
            options = parse_options(args, OPTION_KEYS, repeatable=LIST_OPTION_KEYS)
            draft = self.build_draft(options, existing)
            schedule = normalize_schedule(draft)
        except (ValidationError, SelectionError) as e:
            logger.warning(f"Invalid auto-mail arguments from {ctx.author}: {e}")
            await ctx.send(f"❌ {e}")
            return None
        except ScheduleValidationError as e:
            logger.warning(f"Rejected auto-mail schedule ({e.kind}): {e.message}")
            await ctx.send(f"❌ {error_message(e)}")
            return None

        try:
            if existing:
                saved = self.store.update(existing.id, schedule)
                title = "✅ Auto-mail schedule updated"
            else:
                saved = self.store.upsert(schedule)
                title = "✅ Auto-mail schedule saved"
        except ScheduleNotFound:
            await ctx.send(f"❌ Schedule `{existing.id}` no longer exists.")
            return None
        except StorageError as e:
            logger.error(f"Could not store auto-mail schedule: {e}")
            await ctx.send(f"❌ {STORAGE_FAILURE_MESSAGE}")
            return None

        await ctx.send(embed=create_schedule_embed(
            saved, group_name=self.directory.mail_group_name, title=title
        ))
        return saved

    async def create_schedule(self, ctx: commands.Context, args: Sequence[str]) -> Optional[AutoMailSchedule]:
        """
        Create a schedule from key=value arguments.

        Args:
            ctx: Discord context
            args: Raw arguments, e.g. ("type=TARGETS", "period=weekly", "to=a@b.com")
        """
        schedule = await self._save(ctx, args)
        if schedule:
            logger.info(f"Auto-mail schedule {schedule.id} created by {ctx.author}")
        return schedule

    async def edit_schedule(
        self, ctx: commands.Context, schedule_id: str, args: Sequence[str]
    ) -> Optional[AutoMailSchedule]:
        """
        Replace a schedule, keeping every field not given in args.

        Args:
            ctx: Discord context
            schedule_id: Id of the schedule to edit
            args: Raw key=value arguments
        """
        existing = self.store.get(schedule_id)
        if not existing:
            await ctx.send(f"❌ No schedule with id `{schedule_id}`.")
            return None

        schedule = await self._save(ctx, args, existing)
        if schedule:
            logger.info(f"Auto-mail schedule {schedule.id} edited by {ctx.author}")
        return schedule

    async def show_schedule(self, ctx: commands.Context, schedule_id: str) -> None:
        schedule = self.store.get(schedule_id)
        if not schedule:
            await ctx.send(f"❌ No schedule with id `{schedule_id}`.")
            return
        user_labels = [
            self.directory.user(user_id).label
            for user_id in self.directory.user_ids_for_emails(schedule.emails)
        ]
        await ctx.send(embed=create_schedule_embed(
            schedule, group_name=self.directory.mail_group_name, user_labels=user_labels
        ))

    async def list_schedules(
        self,
        ctx: commands.Context,
        page: int = 1,
        sort_key: str = "reportTypes",
        direction: str = "asc",
        needle: str = "",
    ) -> None:
        """
        Show one page of stored schedules.

        Args:
            ctx: Discord context
            page: Page number
            sort_key: Column to sort by
            direction: "asc" or "desc"
            needle: Optional text filter
        """
        for value, choices in ((sort_key, SORT_KEYS), (direction, ("asc", "desc"))):
            is_valid, error_msg = validate_choice(value, list(choices))
            if not is_valid:
                await ctx.send(f"❌ {error_msg}")
                return

        sort_key = next(k for k in SORT_KEYS if k.lower() == sort_key.lower())
        direction = direction.lower()

        rows = build_rows(self.store.list(), group_name=self.directory.mail_group_name)
        table = paginate_rows(
            rows,
            needle=needle,
            sort_key=sort_key,
            direction=direction,
            page=page,
            page_size=config.TABLE_PAGE_SIZE,
        )

        if not table.total_items:
            await ctx.send("No auto-mail schedules found.")
            return

        await ctx.send(embed=create_schedule_table_embed(table, sort_key, direction))

    async def delete_schedule(self, ctx: commands.Context, schedule_id: str) -> bool:
        """
        Delete a schedule after confirmation.

        Args:
            ctx: Discord context
            schedule_id: Id of the schedule to delete

        Returns:
            Whether the schedule was deleted
        """
        schedule = self.store.get(schedule_id)
        if not schedule:
            await ctx.send(f"❌ No schedule with id `{schedule_id}`.")
            return False

        confirmed = await confirm_action(
            ctx,
            title="Delete auto-mail schedule?",
            description=f"Schedule `{schedule_id}` will stop sending mails.",
            timeout=config.CONFIRM_TIMEOUT,
        )
        if not confirmed:
            await ctx.send("Deletion cancelled.")
            return False

        try:
            self.store.delete(schedule_id)
        except ScheduleNotFound:
            await ctx.send(f"❌ No schedule with id `{schedule_id}`.")
            return False
        except StorageError as e:
            logger.error(f"Could not delete auto-mail schedule {schedule_id}: {e}")
            await ctx.send(f"❌ {STORAGE_FAILURE_MESSAGE}")
            return False

        await ctx.send(f"✅ Auto-mail schedule `{schedule_id}` deleted.")
        logger.info(f"Auto-mail schedule {schedule_id} deleted by {ctx.author}")
        return True

    async def show_options(
        self,
        ctx: commands.Context,
        report_type: Optional[str] = None,
        period: Optional[str] = None,
    ) -> None:
        """
        Show the periods and cadences available for a selection.

        Args:
            ctx: Discord context
            report_type: Optional report type
            period: Optional reporting period
        """
        try:
            selected_type = parse_enum(report_type, ReportType, "report type") if report_type else None
            selected_period = parse_enum(period, ReportPeriod, "report period") if period else None
        except ValidationError as e:
            await ctx.send(f"❌ {e}")
            return

        selection = ScheduleSelection()
        if selected_type:
            selection = selection.choose_report_type(selected_type)
            if selected_period and selected_period not in selection.allowed_periods():
                await ctx.send(f"❌ {ERROR_MESSAGES[PeriodNotAllowedForType]}")
                return

        if selection.state == SelectionState.EMPTY:
            periods = frozenset(ReportPeriod)
        else:
            periods = selection.allowed_periods()

        await ctx.send(embed=create_options_embed(
            report_type=selection.report_type,
            periods=periods,
            cadences=legal_cadences(selection.report_types, selected_period),
            selected_period=selected_period,
        ))

    async def list_groups(self, ctx: commands.Context, needle: str = "") -> None:
        groups = self.directory.search_groups(needle)
        if not groups:
            await ctx.send("No mail groups found.")
            return
        fields = [
            (g.name, f"ID: `{g.id}`\n{len(g.emails)} member(s)", True)
            for g in groups[:25]
        ]
        await ctx.send(embed=create_alert_embed(
            title="Mail Groups",
            description=f"{len(groups)} group(s)",
            fields=fields,
            color=discord.Color.blue(),
            timestamp=False,
        ))

    async def list_users(self, ctx: commands.Context, needle: str = "") -> None:
        users = self.directory.search_users(needle)
        if not users:
            await ctx.send("No users found.")
            return
        fields = [
            (u.label, f"ID: `{u.id}`\n{u.email or '-'}", True)
            for u in users[:25]
        ]
        await ctx.send(embed=create_alert_embed(
            title="Users",
            description=f"{len(users)} active user(s)",
            fields=fields,
            color=discord.Color.blue(),
            timestamp=False,
        ))
