"""
Utilities for validating command parameters across the bot.
Provides standardized validators, parsers and confirmation prompts.
"""

from typing import Tuple, Optional, Dict, List, Iterable, Type, TypeVar
from enum import Enum
import asyncio
import discord
from discord.ext import commands

E = TypeVar("E", bound=Enum)

# 0=Sunday .. 6=Saturday
DAY_OF_WEEK_NAMES = {
    "sunday": 0,
    "monday": 1,
    "tuesday": 2,
    "wednesday": 3,
    "thursday": 4,
    "friday": 5,
    "saturday": 6,
}


class ValidationError(Exception):
    """Exception raised when command validation fails."""
    pass


def validate_choice(value: str, choices: list) -> Tuple[bool, str]:
    """
    Validate that a value is one of the allowed choices.

    Args:
        value: Value to validate
        choices: List of allowed choices

    Returns:
        Tuple of (is_valid, error_message)
    """
    if value.lower() in [c.lower() for c in choices]:
        return True, ""
    return False, f"Invalid choice. Please enter one of: {', '.join(choices)}."


def validate_time(value: str) -> Tuple[bool, str]:
    """
    Validate a time of day in HH:MM format.

    Args:
        value: Time string to validate

    Returns:
        Tuple of (is_valid, error_message)
    """
    try:
        hour_str, minute_str = value.strip().split(":")
        hour, minute = int(hour_str), int(minute_str)
    except ValueError:
        return False, "Invalid time format. Use HH:MM (24-hour format)."
    if not (0 <= hour < 24 and 0 <= minute < 60):
        return False, "Invalid time format. Use HH:MM (24-hour format)."
    return True, ""


def parse_time(value: str) -> Tuple[int, int]:
    """Parse HH:MM into (hour, minute), raising ValidationError"""
    is_valid, error_msg = validate_time(value)
    if not is_valid:
        raise ValidationError(error_msg)
    hour_str, minute_str = value.strip().split(":")
    return int(hour_str), int(minute_str)


def parse_enum(value: str, enum_cls: Type[E], label: str) -> E:
    """
    Parse a case-insensitive enum value or member name.

    Args:
        value: Raw user input
        enum_cls: Enum to parse into
        label: Name used in the error message

    Returns:
        Matching enum member
    """
    raw = value.strip()
    for member in enum_cls:
        if raw.lower() in (member.value.lower(), member.name.lower()):
            return member
    choices = ", ".join(m.value for m in enum_cls)
    raise ValidationError(f"Invalid {label} '{raw}'. Choose from: {choices}.")


def parse_day_of_week(value: str) -> int:
    """Parse a weekday name or number (0=Sunday .. 6=Saturday)"""
    raw = value.strip().lower()
    if raw in DAY_OF_WEEK_NAMES:
        return DAY_OF_WEEK_NAMES[raw]
    for name, number in DAY_OF_WEEK_NAMES.items():
        if len(raw) >= 3 and name.startswith(raw):
            return number
    if raw.isdigit() and 0 <= int(raw) <= 6:
        return int(raw)
    raise ValidationError("Invalid day. Choose Sunday-Saturday or 0-6 (0=Sunday).")


def parse_day_of_month(value: str) -> int:
    raw = value.strip()
    if raw.isdigit() and 1 <= int(raw) <= 31:
        return int(raw)
    raise ValidationError("Invalid day of month. Choose a number from 1 to 31.")


def split_list(value: str) -> List[str]:
    """Split a comma separated argument, dropping empty items"""
    return [item.strip() for item in value.split(",") if item.strip()]


def parse_options(
    tokens: Iterable[str],
    allowed: Iterable[str],
    repeatable: Iterable[str] = (),
) -> Dict[str, str]:
    """
    Parse key=value command arguments.

    Args:
        tokens: Raw argument tokens
        allowed: Accepted keys
        repeatable: Keys that may repeat; their values are joined with commas

    Returns:
        Dictionary of lower-cased keys to values
    """
    allowed = set(allowed)
    repeatable = set(repeatable)
    options: Dict[str, str] = {}
    for token in tokens:
        if "=" not in token:
            raise ValidationError(f"Expected key=value, got '{token}'.")
        key, value = token.split("=", 1)
        key = key.strip().lower()
        if key not in allowed:
            raise ValidationError(
                f"Unknown option '{key}'. Use: {', '.join(sorted(allowed))}."
            )
        if key in options:
            if key not in repeatable:
                raise ValidationError(f"Option '{key}' can only be given once.")
            options[key] = f"{options[key]},{value.strip()}"
        else:
            options[key] = value.strip()
    return options


def parse_recipients(value: str) -> Tuple[List[str], List[str], List[str]]:
    """
    Split a recipient list into mail group ids, user ids and emails.

    Items look like "group:<id>", "user:<id>" or a plain email address.

    Returns:
        Tuple of (mail_group_ids, user_ids, emails)
    """
    group_ids, user_ids, emails = [], [], []
    for item in split_list(value):
        prefix, _, rest = item.partition(":")
        if rest and prefix.lower() == "group":
            group_ids.append(rest.strip())
        elif rest and prefix.lower() == "user":
            user_ids.append(rest.strip())
        else:
            emails.append(item)
    return group_ids, user_ids, emails


async def confirm_action(
    ctx: commands.Context,
    title: str,
    description: str,
    color: discord.Color = discord.Color.red(),
    timeout: int = 30,
) -> bool:
    """
    Get confirmation for an action via reactions.

    Args:
        ctx: Discord context
        title: Confirmation embed title
        description: Confirmation embed description
        color: Embed color
        timeout: Timeout in seconds

    Returns:
        True if confirmed, False otherwise
    """
    # Create confirmation embed
    embed = discord.Embed(
        title=title,
        description=description,
        color=color
    )

    embed.set_footer(text="React with ✅ to confirm or ❌ to cancel")
    message = await ctx.send(embed=embed)
    await message.add_reaction("✅")
    await message.add_reaction("❌")

    # Wait for reaction
    def check(reaction, user):
        return (
            user == ctx.author
            and reaction.message.id == message.id
            and str(reaction.emoji) in ["✅", "❌"]
        )

    try:
        reaction, user = await ctx.bot.wait_for("reaction_add", timeout=timeout, check=check)
        return str(reaction.emoji) == "✅"
    except asyncio.TimeoutError:
        await ctx.send("⏱️ No response received. Action cancelled.")
        return False
