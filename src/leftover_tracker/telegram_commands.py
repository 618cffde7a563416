"""Telegram bot command configuration."""

from dataclasses import dataclass
from enum import Enum


@dataclass(frozen=True)
class TelegramCommand:
    """Declarative bot command definition."""

    command: str
    description: str


class BotCommand(Enum):
    """Enum of bot commands (single source of truth)."""

    START = TelegramCommand("start", "Welcome and quick guide")
    LEFTOVERS = TelegramCommand("leftovers", "Leftovers, soonest to expire first")
    RECIPES = TelegramCommand("recipes", "Recipes that use your leftovers")
    SYNC = TelegramCommand("sync", "Sync with the cloud copy now")
    HELP = TelegramCommand("help", "List available commands")


def telegram_commands() -> list[dict[str, str]]:
    """Return commands formatted for Telegram API."""
    return [
        {"command": entry.value.command, "description": entry.value.description}
        for entry in BotCommand
    ]


def parse_command(text: str | None) -> BotCommand | None:
    """Return the bot command a message invokes, if any."""
    if not text or not text.startswith("/"):
        return None
    name = text[1:].split(maxsplit=1)[0].split("@", maxsplit=1)[0].lower()
    for entry in BotCommand:
        if entry.value.command == name:
            return entry
    return None
