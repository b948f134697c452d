import asyncio
import logging
import signal

# Import our custom modules
from config.loader import load_config
from config.models import Config
from discord_bot.client import CustomCommandsBot
from storage.repository import Repository

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

# Levels of the "Discord Extension Log Level" option
DISCORD_LOG_LEVELS = {
    "Verbose": logging.DEBUG,
    "Debug": logging.DEBUG,
    "Info": logging.INFO,
    "Warning": logging.WARNING,
    "Error": logging.ERROR,
    "Exception": logging.CRITICAL,
    "Off": logging.CRITICAL + 1,
}


def configure_logging(config: Config) -> None:
    """Apply the configured levels to the root and discord.py loggers."""
    logging.getLogger().setLevel(getattr(logging, config.log_level.upper(), logging.INFO))
    logging.getLogger("discord").setLevel(DISCORD_LOG_LEVELS.get(config.extension_log_level, logging.INFO))


async def main():
    """Main entry point for the bot."""
    logger.info("Starting Discord custom commands bot...")

    config = load_config()
    configure_logging(config)

    if not config.discord_token:
        logger.warning("Please set the Discord Bot Token and restart the bot")
        return

    # Initialize database repository
    repo = Repository(config.sqlite_path)
    await repo.initialize_tables()

    bot = CustomCommandsBot(config=config, repository=repo)

    # SIGHUP reloads the config file and re-syncs the commands
    if hasattr(signal, "SIGHUP"):
        asyncio.get_running_loop().add_signal_handler(signal.SIGHUP, bot.schedule_reload)

    try:
        logger.info("Starting Discord bot...")
        await bot.start(config.discord_token)
    except Exception as e:
        logger.error(f"Error in main: {e}")
        raise
    finally:
        if not bot.is_closed():
            await bot.close()


if __name__ == "__main__":
    asyncio.run(main())
