"""Command parser for bot message text."""

from typing import Optional

from bot.models import (
    CommandRequest,
    DeleteCommand,
    HelpCommand,
    ListAllCommand,
    ListCommand,
    RevokeCommand,
    StartCommand,
)
from registry.utils import parse_file_ids


class ParseError(Exception):
    """Raised when command parsing fails."""

    pass


def is_command(text: Optional[str]) -> bool:
    return bool(text) and text.lstrip().startswith("/")


def parse_command(text: str, bot_username: Optional[str] = None) -> CommandRequest:
    """Parse message text into a CommandRequest object.

    Accepts the ``/command@BotName`` form used in group chats; commands
    addressed to another bot are rejected.

    Args:
        text: Raw message text
        bot_username: This bot's username, used to check addressed commands

    Returns:
        CommandRequest object

    Raises:
        ParseError: If the text is not a known command
    """
    if not is_command(text):
        raise ParseError("Not a command")

    parts = text.strip().split(maxsplit=1)
    head = parts[0]
    rest = parts[1] if len(parts) > 1 else ""
    name, _, addressee = head[1:].partition("@")
    name = name.lower()

    if addressee and bot_username and addressee.lower() != bot_username.lower():
        raise ParseError(f"Command addressed to @{addressee}")

    args = parse_file_ids(rest)

    if name == "start":
        return StartCommand(file_id=args[0] if args else None)
    elif name == "help":
        return HelpCommand()
    elif name == "delete":
        if not args:
            raise ParseError("Please provide at least one file ID to delete.")
        return DeleteCommand(file_ids=tuple(args))
    elif name == "revoke":
        if not args:
            raise ParseError("Please provide at least one file ID to revoke.")
        return RevokeCommand(file_ids=tuple(args))
    elif name == "list":
        return ListCommand()
    elif name == "listall":
        return ListAllCommand()
    else:
        raise ParseError(f"Unknown command: /{name}")
