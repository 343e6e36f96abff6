"""Bot entry point."""

import asyncio
import os
import signal
import sys

from bot.config import BotConfig
from bot.dispatcher import UpdateDispatcher
from bot.telegram_client import TelegramClient
from common.logging_config import get_logger, setup_logging
from registry.config import DATABASE_PATH
from registry.exceptions import ConfigurationError
from registry.repositories.registry_store import JsonSnapshotFile, RegistryStore
from registry.services.registry_service import RegistryService

logger = get_logger('file-registry-bot')


async def run_bot(config: BotConfig, db_path: str = DATABASE_PATH) -> None:
    """
    Load the registry, then poll Telegram until interrupted.

    Pending media groups are registered before exit.
    """
    store = RegistryStore(JsonSnapshotFile(db_path))
    store.load()

    client = TelegramClient(config)
    try:
        me = await client.get_me()
        if not me.username:
            raise ConfigurationError("Bot account has no username; public links need one")
        logger.info(f"Authorized as @{me.username}")

        service = RegistryService(
            store,
            owner_id=config.owner_id,
            bot_username=me.username,
            resolve_direct_url=client.get_file_url,
        )
        dispatcher = UpdateDispatcher(service, client, archive_chat_id=config.channel_id)

        stop_event = asyncio.Event()
        loop = asyncio.get_running_loop()
        for sig in (signal.SIGINT, signal.SIGTERM):
            try:
                loop.add_signal_handler(sig, stop_event.set)
            except NotImplementedError:
                pass

        poll_task = asyncio.create_task(dispatcher.run(stop_event))
        logger.info("Bot is running!")
        await stop_event.wait()

        logger.info("Shutting down...")
        poll_task.cancel()
        try:
            await poll_task
        except asyncio.CancelledError:
            pass
        await dispatcher.shutdown()
    finally:
        await client.aclose()


def main() -> None:
    """Entry point for the bot."""
    log_level = 'DEBUG' if '--debug' in sys.argv else os.getenv('LOG_LEVEL', 'INFO')
    setup_logging('file-registry-bot', log_level=log_level)

    if '--debug' in sys.argv:
        logger.info("Debug logging enabled")
        sys.argv.remove('--debug')

    try:
        config = BotConfig.from_env()
    except ConfigurationError as e:
        logger.error(f"Configuration error: {e}")
        sys.exit(2)

    try:
        asyncio.run(run_bot(config))
    except KeyboardInterrupt:
        pass
    except Exception as e:
        logger.error(f"Bot error: {e}", exc_info=True)
        raise
    finally:
        logger.info("Bot exiting")


if __name__ == "__main__":
    main()
