"""Routes Telegram updates to the registry and sends the replies."""

import asyncio
from typing import Any, List, Optional

from bot.commands import dispatch_command
from bot.constants import MSG_BATCH_PARTIAL, MSG_UPLOAD_FAILED, MSG_UPLOAD_REJECTED
from bot.parser import ParseError, is_command, parse_command
from bot.schemas import Update
from bot.telegram_client import TelegramAPIError, TelegramClient
from bot.utils import format_archive_caption, format_batch, format_upload
from common.logging_config import get_logger
from common.types import FileEvent
from registry.aggregator import MediaGroupAggregator
from registry.config import (
    MEDIA_GROUP_MAX_FILES,
    MEDIA_GROUP_MAX_WAIT_SECONDS,
    MEDIA_GROUP_WINDOW_SECONDS,
)
from registry.exceptions import BatchRegistrationError, MalformedEventError, RegistryError
from registry.schemas import FileDescriptor
from registry.services.registry_service import RegistryService

logger = get_logger(__name__)

ERROR_BACKOFF_SECONDS = 5


class UpdateDispatcher:
    """
    Turns incoming updates into registry calls.

    Standalone files are registered immediately; files that belong to a media
    group go through the aggregator and are registered as one batch. Every
    registered file is also posted to the archive channel.
    """

    def __init__(
        self,
        service: RegistryService,
        client: TelegramClient,
        archive_chat_id: Optional[Any] = None,
        window: float = MEDIA_GROUP_WINDOW_SECONDS,
        max_group_size: Optional[int] = MEDIA_GROUP_MAX_FILES,
        max_wait: Optional[float] = MEDIA_GROUP_MAX_WAIT_SECONDS,
    ):
        self.service = service
        self.client = client
        self.archive_chat_id = archive_chat_id
        self.aggregator: MediaGroupAggregator[FileEvent] = MediaGroupAggregator(
            self._handle_media_group,
            window=window,
            max_group_size=max_group_size,
            max_wait=max_wait,
        )
        self.offset: Optional[int] = None

    async def run(self, stop_event: asyncio.Event) -> None:
        """Long-poll for updates until stop_event is set."""
        logger.info("Polling for updates")
        while not stop_event.is_set():
            try:
                updates = await self.client.get_updates(self.offset)
            except asyncio.CancelledError:
                raise
            except Exception as e:
                logger.error(f"Polling failed: {e}")
                await asyncio.sleep(ERROR_BACKOFF_SECONDS)
                continue

            for update in updates:
                self.offset = update.update_id + 1
                try:
                    await self.handle_update(update)
                except Exception as e:
                    logger.error(f"Failed to handle update {update.update_id}: {e}", exc_info=True)

    async def shutdown(self) -> None:
        """Register files of media groups still collecting, then stop."""
        await self.aggregator.aclose(flush=True)

    async def handle_update(self, update: Update) -> None:
        message = update.message
        if message is None:
            return

        if message.has_file():
            event = message.to_file_event()
            if event.group_key:
                self.aggregator.submit(event.group_key, event)
            else:
                await self._handle_single(event)
            return

        if is_command(message.text):
            requester = message.from_user.to_requester() if message.from_user else None
            if requester is None:
                logger.debug(f"Ignoring command without sender in chat {message.chat.id}")
                return
            try:
                cmd = parse_command(message.text, self.service.bot_username)
            except ParseError as e:
                await self._reply(message.chat.id, f"❌ {e}")
                return
            logger.info(f"Command /{cmd.command} from user {requester.user_id}")
            for text in await dispatch_command(cmd, requester, self.service):
                await self._reply(message.chat.id, text)
            return

        logger.debug(f"Ignoring message {message.message_id} without file or command")

    async def _handle_single(self, event: FileEvent) -> None:
        try:
            descriptor = await self.service.register_single(
                event, uploader=event.sender.handle, uploaded_at=event.received_at
            )
        except MalformedEventError as e:
            logger.warning(str(e))
            await self._reply(event.chat_id, MSG_UPLOAD_REJECTED)
            return
        except RegistryError as e:
            logger.error(f"Upload failed: {e}")
            await self._reply(event.chat_id, MSG_UPLOAD_FAILED)
            return

        await self._reply(event.chat_id, format_upload(descriptor))
        await self._archive([descriptor])

    async def _handle_media_group(self, group_key: str, events: List[FileEvent]) -> None:
        first = events[0]
        try:
            descriptors = await self.service.register_batch(
                events, uploader=first.sender.handle, uploaded_at=first.received_at
            )
        except BatchRegistrationError as e:
            logger.error(f"Batch upload for media group {group_key} failed: {e}")
            if e.registered:
                for text in format_batch(e.registered):
                    await self._reply(first.chat_id, text)
                await self._reply(
                    first.chat_id, MSG_BATCH_PARTIAL.format(registered=len(e.registered), total=e.total)
                )
                await self._archive(e.registered)
            else:
                await self._reply(first.chat_id, MSG_UPLOAD_FAILED)
            return
        except RegistryError as e:
            logger.error(f"Batch upload for media group {group_key} failed: {e}")
            await self._reply(first.chat_id, MSG_UPLOAD_FAILED)
            return

        if not descriptors:
            await self._reply(first.chat_id, MSG_UPLOAD_REJECTED)
            return

        for text in format_batch(descriptors):
            await self._reply(first.chat_id, text)
        await self._archive(descriptors)

    async def _archive(self, descriptors: List[FileDescriptor]) -> None:
        if self.archive_chat_id is None:
            return
        for descriptor in descriptors:
            try:
                await self.client.send_media(
                    self.archive_chat_id,
                    descriptor.kind,
                    descriptor.file_ref,
                    caption=format_archive_caption(descriptor),
                )
                logger.info(f"File {descriptor.id} forwarded to channel")
            except (TelegramAPIError, ConnectionError) as e:
                logger.warning(f"Failed to forward {descriptor.id} to channel: {e}")

    async def _reply(self, chat_id: Optional[int], text: str) -> None:
        if chat_id is None:
            return
        try:
            await self.client.send_message(chat_id, text)
        except (TelegramAPIError, ConnectionError) as e:
            logger.warning(f"Failed to send reply to chat {chat_id}: {e}")
