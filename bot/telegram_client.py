"""HTTP client for the Telegram Bot API."""

import asyncio
from typing import Any, Dict, List, Optional

import httpx

from bot.config import BotConfig
from bot.schemas import BotUser, TelegramFile, Update
from common.logging_config import get_logger
from common.types import FileKind

logger = get_logger(__name__)

MEDIA_METHODS = {
    FileKind.DOCUMENT: ("sendDocument", "document"),
    FileKind.PHOTO: ("sendPhoto", "photo"),
    FileKind.VIDEO: ("sendVideo", "video"),
    FileKind.AUDIO: ("sendAudio", "audio"),
    FileKind.UNKNOWN: ("sendDocument", "document"),
}


class TelegramAPIError(Exception):
    """Raised when the Bot API rejects a call or returns an unusable response."""

    def __init__(self, method: str, description: str, error_code: Optional[int] = None):
        super().__init__(f"{method} failed: {description}")
        self.method = method
        self.description = description
        self.error_code = error_code


class TelegramClient:
    """Async Bot API client with retry logic on network errors and 5xx responses."""

    def __init__(self, config: BotConfig):
        """
        Initialize the client.

        Args:
            config: Bot configuration (token, API base URL, timeouts, retries)
        """
        self.config = config
        self.session = httpx.AsyncClient(
            base_url=f"{config.api_base}/bot{config.bot_token}/",
            timeout=config.http_timeout,
        )

    async def aclose(self) -> None:
        await self.session.aclose()

    async def _call(
        self,
        method: str,
        params: Optional[Dict[str, Any]] = None,
        timeout: Optional[float] = None,
    ) -> Any:
        """
        Call a Bot API method and return its ``result`` field.

        Args:
            method: API method name (e.g., 'sendMessage')
            params: JSON body
            timeout: Per-call timeout overriding the client default

        Returns:
            Decoded ``result`` payload

        Raises:
            TelegramAPIError: If the API answers ``ok: false`` or a non-JSON body
            ConnectionError: If retries are exhausted on network errors
        """
        max_retries = self.config.max_retries
        kwargs: Dict[str, Any] = {"json": params or {}}
        if timeout is not None:
            kwargs["timeout"] = timeout

        last_exception = None
        for attempt in range(max_retries + 1):
            delay = self.config.retry_base_delay * (2 ** attempt)
            try:
                response = await self.session.post(method, **kwargs)
            except httpx.TransportError as e:
                last_exception = e
                if attempt < max_retries:
                    logger.warning(
                        f"Network error (attempt {attempt + 1}/{max_retries + 1}): "
                        f"{method} error={type(e).__name__}, retrying in {delay}s"
                    )
                    await asyncio.sleep(delay)
                continue

            if response.status_code >= 500 and attempt < max_retries:
                logger.warning(
                    f"Server error (attempt {attempt + 1}/{max_retries + 1}): "
                    f"{method} status={response.status_code}, retrying in {delay}s"
                )
                await asyncio.sleep(delay)
                continue

            try:
                payload = response.json()
            except ValueError:
                raise TelegramAPIError(method, f"non-JSON response (status={response.status_code})", response.status_code)

            if response.status_code == 429 and attempt < max_retries:
                retry_after = payload.get("parameters", {}).get("retry_after", delay)
                logger.warning(f"Rate limited on {method}, retrying in {retry_after}s")
                await asyncio.sleep(retry_after)
                continue

            if not payload.get("ok"):
                raise TelegramAPIError(
                    method,
                    payload.get("description", "unknown error"),
                    payload.get("error_code", response.status_code),
                )
            return payload.get("result")

        logger.error(f"Network error (max retries exceeded): {method} error={last_exception}")
        raise ConnectionError(f"Cannot reach Telegram API for {method}")

    async def get_me(self) -> BotUser:
        return BotUser.model_validate(await self._call("getMe"))

    async def get_updates(self, offset: Optional[int] = None) -> List[Update]:
        """
        Long-poll for new updates.

        Args:
            offset: Identifier of the first update to return (last seen + 1)
        """
        params: Dict[str, Any] = {
            "timeout": self.config.poll_timeout,
            "allowed_updates": ["message"],
        }
        if offset is not None:
            params["offset"] = offset
        result = await self._call(
            "getUpdates", params, timeout=self.config.poll_timeout + self.config.http_timeout
        )
        return [Update.model_validate(item) for item in result or []]

    async def send_message(self, chat_id: Any, text: str, parse_mode: Optional[str] = None) -> None:
        params: Dict[str, Any] = {
            "chat_id": chat_id,
            "text": text,
            "disable_web_page_preview": True,
        }
        if parse_mode:
            params["parse_mode"] = parse_mode
        await self._call("sendMessage", params)

    async def send_media(
        self,
        chat_id: Any,
        kind: FileKind,
        file_ref: str,
        caption: Optional[str] = None,
    ) -> None:
        """Re-send an already uploaded file by reference, using the method matching its kind."""
        method, field_name = MEDIA_METHODS[kind]
        params: Dict[str, Any] = {"chat_id": chat_id, field_name: file_ref}
        if caption:
            params["caption"] = caption
        await self._call(method, params)

    async def get_file_url(self, file_ref: str) -> Optional[str]:
        """
        Resolve a direct download URL for a file.

        Best-effort: failures are logged and yield None.
        """
        try:
            result = TelegramFile.model_validate(await self._call("getFile", {"file_id": file_ref}))
        except (TelegramAPIError, ConnectionError) as e:
            logger.warning(f"Failed to get file URL: {e}")
            return None

        if not result.file_path:
            return None
        return f"{self.config.api_base}/file/bot{self.config.bot_token}/{result.file_path}"
