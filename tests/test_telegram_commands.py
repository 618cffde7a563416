"""Tests for Telegram command definitions."""

import pytest

from leftover_tracker.telegram_commands import (
    BotCommand,
    parse_command,
    telegram_commands,
)


def test_telegram_commands_include_leftovers() -> None:
    commands = telegram_commands()

    assert {
        "command": "leftovers",
        "description": "Leftovers, soonest to expire first",
    } in commands
    assert len(commands) == len(list(BotCommand))


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ("/recipes", BotCommand.RECIPES),
        ("/SYNC now", BotCommand.SYNC),
        ("/help@LeftoverBot", BotCommand.HELP),
        ("/unknown", None),
        ("leftovers", None),
        ("", None),
        (None, None),
    ],
)
def test_parse_command(text: str | None, expected: BotCommand | None) -> None:
    assert parse_command(text) is expected
