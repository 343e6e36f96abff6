"""Command request data types for the bot."""

from dataclasses import dataclass
from typing import Literal, Optional


@dataclass(frozen=True)
class StartCommand:
    """Greet the user, or show a file when started through its public link."""

    file_id: Optional[str] = None
    command: Literal["start"] = "start"


@dataclass(frozen=True)
class HelpCommand:
    """Show usage."""

    command: Literal["help"] = "help"


@dataclass(frozen=True)
class DeleteCommand:
    """Delete files by identifier."""

    file_ids: tuple[str, ...]
    command: Literal["delete"] = "delete"


@dataclass(frozen=True)
class RevokeCommand:
    """Move files to freshly generated identifiers."""

    file_ids: tuple[str, ...]
    command: Literal["revoke"] = "revoke"


@dataclass(frozen=True)
class ListCommand:
    """List the requester's own files."""

    command: Literal["list"] = "list"


@dataclass(frozen=True)
class ListAllCommand:
    """List every file (owner only)."""

    command: Literal["listall"] = "listall"


CommandRequest = (
    StartCommand
    | HelpCommand
    | DeleteCommand
    | RevokeCommand
    | ListCommand
    | ListAllCommand
)
