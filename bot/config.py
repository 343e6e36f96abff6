"""Configuration for the Telegram bot front end."""

import os
from dataclasses import dataclass
from typing import Mapping, Optional

from common.constants import TELEGRAM_API_BASE
from registry.exceptions import ConfigurationError

REQUIRED_VARIABLES = ("BOT_TOKEN", "CHANNEL_ID", "OWNER_ID")


@dataclass(frozen=True)
class BotConfig:
    """
    Settings read from the environment.

    Attributes:
        bot_token: Telegram bot API token
        channel_id: Chat id of the archive channel every upload is mirrored to
        owner_id: Identity allowed to manage and list every file
        api_base: Telegram Bot API base URL
        poll_timeout: Long-polling timeout for getUpdates, in seconds
        http_timeout: Timeout for every other API call, in seconds
        max_retries: Retries on network errors and 5xx responses
        retry_base_delay: First retry delay in seconds, doubled on each attempt
    """
    bot_token: str
    channel_id: str
    owner_id: str
    api_base: str = TELEGRAM_API_BASE
    poll_timeout: int = 30
    http_timeout: float = 10.0
    max_retries: int = 3
    retry_base_delay: float = 1.0

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "BotConfig":
        """
        Build the configuration from environment variables.

        Raises:
            ConfigurationError: If a required variable is missing or a number is malformed
        """
        env = os.environ if environ is None else environ

        missing = [name for name in REQUIRED_VARIABLES if not env.get(name)]
        if missing:
            raise ConfigurationError(f"{', '.join(missing)} must be set")

        try:
            return cls(
                bot_token=env["BOT_TOKEN"],
                channel_id=env["CHANNEL_ID"],
                owner_id=env["OWNER_ID"],
                api_base=env.get("TELEGRAM_API_BASE", TELEGRAM_API_BASE).rstrip("/"),
                poll_timeout=int(env.get("POLL_TIMEOUT_SECONDS", "30")),
                http_timeout=float(env.get("HTTP_TIMEOUT_SECONDS", "10")),
                max_retries=int(env.get("HTTP_MAX_RETRIES", "3")),
            )
        except ValueError as e:
            raise ConfigurationError(f"Invalid numeric setting: {e}") from e
