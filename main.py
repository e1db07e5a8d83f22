#!/usr/bin/env python3
"""
AI News Chat - Entry Point

Starts the Telegram front-end for the news summarization service.
"""

import sys

from config.settings import Settings, get_settings
from utils.logger import logger, setup_logger


def check_configuration(settings: Settings) -> bool:
    """Verify all required configuration is present."""
    errors = []

    if not settings.TELEGRAM_BOT_TOKEN:
        errors.append("TELEGRAM_BOT_TOKEN is required")

    if not settings.NEWS_API_BASE_URL.startswith(("http://", "https://")):
        errors.append(f"NEWS_API_BASE_URL must be an http(s) URL, got {settings.NEWS_API_BASE_URL!r}")

    if errors:
        for error in errors:
            logger.error(f"Configuration Error: {error}")
        logger.error("Please check your .env file or environment variables")
        return False

    return True


def main():
    """Main entry point."""
    settings = get_settings()
    setup_logger(settings.LOG_LEVEL, settings.LOG_DIR)

    logger.info("=" * 50)
    logger.info("News Chat Bot Starting...")
    logger.info("=" * 50)

    if not check_configuration(settings):
        logger.error("Configuration check failed. Exiting.")
        sys.exit(1)

    try:
        from telegram_bot.bot import NewsChatBot

        bot = NewsChatBot(settings)

        logger.info("Bot initialized successfully")
        logger.info(f"News service: {settings.NEWS_API_BASE_URL}")
        logger.info(f"Transport: {settings.CHAT_TRANSPORT}")
        logger.info(f"Request timeout: {settings.REQUEST_TIMEOUT:g}s")
        logger.info(f"Debug Mode: {settings.DEBUG}")
        logger.info("=" * 50)
        # Run the bot (blocking call)
        bot.run()

    except KeyboardInterrupt:
        logger.info("Received shutdown signal")
    except Exception as e:
        logger.exception(f"Fatal error: {e}")
        sys.exit(1)
    finally:
        logger.info("Bot shutdown complete")


if __name__ == "__main__":
    main()
