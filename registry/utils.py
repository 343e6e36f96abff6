"""Utility helper functions for the registry."""

import uuid
from datetime import datetime, timezone
from typing import List, Optional, Union

from common.constants import DEFAULT_FILE_KIND, FILE_ID_SUFFIX_LENGTH, PUBLIC_LINK_TEMPLATE
from common.types import FileKind
from registry.exceptions import EntropyExhaustedError


def generate_file_id(kind: Optional[Union[FileKind, str]] = None) -> str:
    """
    Mint a new file identifier of the form ``<kind>(<8 hex chars>)``.

    Args:
        kind: File kind tag; empty or missing kinds become "unknown"

    Returns:
        Identifier string, e.g. ``document(3f9a1c2e)``

    Raises:
        EntropyExhaustedError: If the system has no randomness source
    """
    if isinstance(kind, FileKind):
        kind = kind.value
    kind = kind or DEFAULT_FILE_KIND

    try:
        suffix = uuid.uuid4().hex[:FILE_ID_SUFFIX_LENGTH]
    except NotImplementedError as e:
        raise EntropyExhaustedError(f"No randomness source available: {e}") from e

    return f"{kind}({suffix})"


def get_current_timestamp() -> str:
    """
    Get current UTC timestamp in ISO format.

    Returns:
        Current timestamp as ISO format string
    """
    return datetime.now(timezone.utc).isoformat()


def build_public_link(bot_username: str, file_id: str) -> str:
    """Deep link that opens the bot with ``/start <file_id>``."""
    return PUBLIC_LINK_TEMPLATE.format(bot_username=bot_username, file_id=file_id)


def parse_file_ids(ids_str: Optional[str]) -> List[str]:
    """
    Split a whitespace-separated list of identifiers.

    Args:
        ids_str: Raw argument text (e.g., "photo(1a2b3c4d) video(9f8e7d6c)")

    Returns:
        List of identifiers with empty entries dropped
    """
    if not ids_str:
        return []
    return [file_id for file_id in ids_str.split() if file_id]
