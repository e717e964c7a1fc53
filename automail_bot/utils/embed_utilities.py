"""
Utility functions for creating standardized Discord embeds across the bot.
This module centralizes embed creation to ensure consistent styling and behavior.
"""

import discord
from datetime import datetime
from typing import Callable, Iterable, List, Sequence, Tuple

from automail_bot.automail.models import AutoMailSchedule, ReportPeriod, ReportType, SendCadence
from automail_bot.automail.rules import ordered
from automail_bot.automail.table import PERIOD_LABELS, REPORT_TYPE_LABELS, TablePage, interval_text

CADENCE_LABELS = {
    SendCadence.DAILY: "Daily",
    SendCadence.WEEKLY: "Weekly",
    SendCadence.MONTHLY: "Monthly",
    SendCadence.YEARLY: "Yearly",
}

DAY_NAMES = ["Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday"]


def create_alert_embed(
    title: str,
    description: str,
    fields: List[Tuple[str, str, bool]] = None,
    color: discord.Color = None,
    timestamp: bool = True,
    footer_text: str = None
) -> discord.Embed:
    """
    Create a standardized notification embed.

    Args:
        title: Title for the embed
        description: Description text
        fields: List of (name, value, inline) tuples for fields
        color: Discord color for the embed (defaults to blue)
        timestamp: Whether to add the current timestamp
        footer_text: Optional footer text

    Returns:
        Formatted Discord embed
    """
    embed = discord.Embed(
        title=title,
        description=description,
        color=color or discord.Color.blue(),
        timestamp=datetime.now() if timestamp else None
    )

    # Add fields if provided
    if fields:
        for name, value, inline in fields:
            embed.add_field(name=name, value=value, inline=inline)

    # Add footer if provided
    if footer_text:
        embed.set_footer(text=footer_text)

    return embed


def format_send_time(schedule: AutoMailSchedule) -> str:
    """
    Describe when a schedule fires.

    Args:
        schedule: Stored schedule

    Returns:
        Text such as "Mondays at 09:00" or "Day 15 at 08:30"
    """
    time_text = schedule.format_time()
    if schedule.day_of_week is not None:
        return f"{DAY_NAMES[schedule.day_of_week]}s at {time_text}"
    if schedule.day_of_month is not None:
        return f"Day {schedule.day_of_month} at {time_text}"
    return f"At {time_text}"


def create_schedule_embed(
    schedule: AutoMailSchedule,
    group_name: Callable[[str], str] = lambda group_id: group_id,
    title: str = "Auto-Mail Schedule",
    color: discord.Color = None,
    user_labels: Sequence[str] = (),
) -> discord.Embed:
    """
    Create an embed describing a single schedule.

    Args:
        schedule: Stored or freshly normalized schedule
        group_name: Resolves mail group ids to display names
        title: Embed title
        color: Embed color (defaults to green)
        user_labels: Names of directory users among the email recipients

    Returns:
        Formatted Discord embed
    """
    report_type = schedule.report_type
    period = schedule.report_period

    fields = [
        ("Report", REPORT_TYPE_LABELS[report_type], True),
        ("Period", PERIOD_LABELS[period], True),
        ("Interval", interval_text(schedule), True),
        ("Send Time", format_send_time(schedule), False),
        ("Mail Groups", ", ".join(group_name(g) for g in schedule.mail_group_ids) or "-", False),
        ("Emails", ", ".join(schedule.emails) or "-", False),
    ]
    if user_labels:
        fields.append(("Users", ", ".join(user_labels), False))
    if schedule.project_ids:
        fields.append(("Projects", ", ".join(schedule.project_ids), False))

    return create_alert_embed(
        title=title,
        description=f"ID: `{schedule.id}`" if schedule.id else "Unsaved schedule",
        fields=fields,
        color=color or discord.Color.green(),
        timestamp=False,
    )


def create_schedule_table_embed(table: TablePage, sort_key: str, direction: str) -> discord.Embed:
    """
    Create an embed listing one page of schedules.

    Args:
        table: Page returned by paginate_rows
        sort_key: Active sort column
        direction: "asc" or "desc"

    Returns:
        Formatted Discord embed
    """
    embed = discord.Embed(
        title="Auto-Mail Schedules",
        description=f"{table.total_items} schedule(s)",
        color=discord.Color.blue(),
    )

    for row in table.items:
        embed.add_field(
            name=row.report_types_text,
            value=(
                f"ID: `{row.schedule.id}`\n"
                f"Interval: {row.interval_text}\n"
                f"Groups: {row.groups_text}\n"
                f"Emails: {row.emails_text}"
            ),
            inline=False,
        )

    embed.set_footer(
        text=f"Page {table.page}/{table.total_pages} • sorted by {sort_key} ({direction})"
    )
    return embed


def create_options_embed(
    report_type: ReportType = None,
    periods: Iterable[ReportPeriod] = (),
    cadences: Iterable[SendCadence] = (),
    selected_period: ReportPeriod = None,
) -> discord.Embed:
    """
    Create an embed showing which periods and cadences can be chosen.

    Args:
        report_type: Report type the options apply to, if any
        periods: Legal reporting periods
        cadences: Legal send cadences
        selected_period: Period the cadences were computed for

    Returns:
        Formatted Discord embed
    """
    description = (
        f"Options for {REPORT_TYPE_LABELS[report_type]}"
        if report_type else "Pick a report type to narrow the options"
    )
    if selected_period:
        description += f" with a {PERIOD_LABELS[selected_period].lower()} period"

    period_text = ", ".join(f"`{p.value}`" for p in ordered(periods)) or "-"
    cadence_text = ", ".join(
        f"`{c.value}` ({CADENCE_LABELS[c]})" for c in ordered(cadences)
    ) or "None available"

    return create_alert_embed(
        title="Auto-Mail Options",
        description=description,
        fields=[
            ("Report Periods", period_text, False),
            ("Send Cadences", cadence_text, False),
        ],
        timestamp=False,
    )
