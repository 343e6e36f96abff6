"""Command handler functions for bot operations.

Every handler returns the list of reply messages to send, one per affected
file identifier for delete and revoke.
"""

from typing import List

from bot.constants import (
    HELP_TEXT,
    MSG_DELETE_DENIED,
    MSG_DELETED,
    MSG_FILE_NOT_FOUND,
    MSG_LIST_ALL_DENIED,
    MSG_NO_FILES,
    MSG_NO_FILES_AT_ALL,
    MSG_REVOKE_DENIED,
    MSG_REVOKE_FAILED,
    WELCOME_TEXT,
)
from bot.models import (
    CommandRequest,
    DeleteCommand,
    HelpCommand,
    ListAllCommand,
    ListCommand,
    RevokeCommand,
    StartCommand,
)
from bot.utils import format_file_details, format_list_entry, format_revoked, paginate
from common.logging_config import get_logger
from common.types import Requester
from registry.exceptions import PermissionDeniedError
from registry.schemas import Outcome
from registry.services.registry_service import RegistryService

logger = get_logger(__name__)


async def handle_start(cmd: StartCommand, service: RegistryService) -> List[str]:
    """
    Handle '/start' command.

    Args:
        cmd: StartCommand with an optional file ID from a public link
        service: Registry service

    Returns:
        File details when the ID is known, the welcome text otherwise
    """
    if cmd.file_id:
        descriptor = await service.get_file(cmd.file_id)
        if descriptor is not None:
            return [format_file_details(descriptor)]
    return [WELCOME_TEXT]


def handle_delete(cmd: DeleteCommand, requester: Requester, service: RegistryService) -> List[str]:
    """
    Handle '/delete' command.

    Args:
        cmd: DeleteCommand with file IDs
        requester: User issuing the command
        service: Registry service

    Returns:
        One reply per file ID
    """
    replies = []
    for result in service.delete_many(cmd.file_ids, requester):
        if result.outcome == Outcome.DELETED:
            replies.append(MSG_DELETED.format(file_id=result.file_id))
        elif result.outcome == Outcome.PERMISSION_DENIED:
            replies.append(MSG_DELETE_DENIED.format(file_id=result.file_id))
        else:
            replies.append(MSG_FILE_NOT_FOUND.format(file_id=result.file_id))
    return replies


async def handle_revoke(cmd: RevokeCommand, requester: Requester, service: RegistryService) -> List[str]:
    """
    Handle '/revoke' command.

    Args:
        cmd: RevokeCommand with file IDs
        requester: User issuing the command
        service: Registry service

    Returns:
        One reply per file ID
    """
    replies = []
    for result in await service.revoke_many(cmd.file_ids, requester):
        if result.outcome == Outcome.REVOKED:
            replies.append(format_revoked(result.file_id, result.descriptor))
        elif result.outcome == Outcome.PERMISSION_DENIED:
            replies.append(MSG_REVOKE_DENIED.format(file_id=result.file_id))
        elif result.outcome == Outcome.FAILED:
            replies.append(MSG_REVOKE_FAILED.format(file_id=result.file_id))
        else:
            replies.append(MSG_FILE_NOT_FOUND.format(file_id=result.file_id))
    return replies


def handle_list(cmd: ListCommand, requester: Requester, service: RegistryService) -> List[str]:
    files = service.list_for(requester)
    if not files:
        return [MSG_NO_FILES]
    return paginate("📂 Your Uploaded Files:", [format_list_entry(d) for d in files])


def handle_list_all(cmd: ListAllCommand, requester: Requester, service: RegistryService) -> List[str]:
    """
    Handle '/listall' command.

    Returns:
        One message per page of at most 50 files, each within the
        Telegram message length limit, or a refusal for non-owners
    """
    try:
        files = service.list_all(requester)
    except PermissionDeniedError as e:
        logger.warning(str(e))
        return [MSG_LIST_ALL_DENIED]

    if not files:
        return [MSG_NO_FILES_AT_ALL]

    return paginate("📂 All Uploaded Files:", [format_list_entry(d, with_uploader=True) for d in files])


async def dispatch_command(cmd: CommandRequest, requester: Requester, service: RegistryService) -> List[str]:
    """Dispatch parsed command to appropriate handler."""
    if isinstance(cmd, StartCommand):
        return await handle_start(cmd, service)
    elif isinstance(cmd, HelpCommand):
        return [HELP_TEXT]
    elif isinstance(cmd, DeleteCommand):
        return handle_delete(cmd, requester, service)
    elif isinstance(cmd, RevokeCommand):
        return await handle_revoke(cmd, requester, service)
    elif isinstance(cmd, ListCommand):
        return handle_list(cmd, requester, service)
    elif isinstance(cmd, ListAllCommand):
        return handle_list_all(cmd, requester, service)
    else:
        raise ValueError(f"Unhandled command: {cmd!r}")
