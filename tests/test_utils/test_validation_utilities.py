import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest

from automail_bot.utils.validation_utilities import (
    ValidationError,
    confirm_action,
    parse_day_of_week,
    parse_options,
    parse_recipients,
)

KEYS = ("type", "period", "to")


def test_parse_options_lowercases_keys():
    assert parse_options(["Type=TARGETS", "to= a@b.com "], KEYS) == {"type": "TARGETS", "to": "a@b.com"}


def test_parse_options_joins_repeatable_keys():
    options = parse_options(["to=a@b.com", "to=group:g1"], KEYS, repeatable=("to",))
    assert options == {"to": "a@b.com,group:g1"}


def test_parse_options_rejects_repeated_single_value_key():
    with pytest.raises(ValidationError, match="'period' can only be given once"):
        parse_options(["period=daily", "period=weekly"], KEYS, repeatable=("to",))


@pytest.mark.parametrize("tokens", [["colour=blue"], ["type"]])
def test_parse_options_rejects_malformed_tokens(tokens):
    with pytest.raises(ValidationError):
        parse_options(tokens, KEYS)


def test_parse_recipients_splits_prefixes():
    assert parse_recipients("group:g1, user:u2,a@b.com") == (["g1"], ["u2"], ["a@b.com"])


@pytest.mark.parametrize("value,expected", [("Sunday", 0), ("fri", 5), ("6", 6)])
def test_parse_day_of_week(value, expected):
    assert parse_day_of_week(value) == expected


def confirmation_message(ctx):
    message = MagicMock()
    message.id = 42
    message.add_reaction = AsyncMock()
    ctx.send.return_value = message
    return message


async def test_confirm_action_accepts_check_mark(mock_context):
    message = confirmation_message(mock_context)
    reaction = MagicMock()
    reaction.emoji = "✅"
    mock_context.bot.wait_for.return_value = (reaction, mock_context.author)

    assert await confirm_action(mock_context, "Delete?", "Really delete?") is True
    assert message.add_reaction.await_count == 2
    assert mock_context.bot.wait_for.call_args.args[0] == "reaction_add"


async def test_confirm_action_times_out(mock_context):
    confirmation_message(mock_context)
    mock_context.bot.wait_for.side_effect = asyncio.TimeoutError

    assert await confirm_action(mock_context, "Delete?", "Really delete?", timeout=1) is False
    assert mock_context.sent_texts == ["⏱️ No response received. Action cancelled."]
