"""
Main entry point for the NearbyWeather Telegram bot.
"""

import logging

from telegram.ext import Application, ApplicationBuilder

from nearby_weather.const import Config
from nearby_weather.handlers.weather_handlers import WeatherBot, register_weather_handlers
from nearby_weather.logger import error_logger, general_logger, shutdown_logging
from nearby_weather.preferences import PreferencesManager
from nearby_weather.snapshot_source import SnapshotFileFetcher

logger = logging.getLogger(__name__)


def build_application(token: str, weather_bot: WeatherBot) -> Application:
    async def post_init(application: Application) -> None:
        await weather_bot.preferences.load()
        general_logger.info("Preferences loaded, bot is ready")

    async def post_shutdown(application: Application) -> None:
        for chat_id in list(weather_bot.sessions):
            await weather_bot.close_session(chat_id)
        general_logger.info("All weather sessions closed")

    application = (
        ApplicationBuilder()
        .token(token)
        .post_init(post_init)
        .post_shutdown(post_shutdown)
        .build()
    )
    register_weather_handlers(application, weather_bot)
    return application


def run_bot() -> None:
    """Run the bot until interrupted."""
    if not Config.TELEGRAM_BOT_TOKEN:
        error_logger.critical("TELEGRAM_BOT_TOKEN is not set. The bot cannot start.")
        return

    weather_bot = WeatherBot(
        fetcher=SnapshotFileFetcher(),
        preferences=PreferencesManager(),
    )
    application = build_application(Config.TELEGRAM_BOT_TOKEN, weather_bot)

    try:
        logger.info("Bot started. Press Ctrl+C to stop.")
        application.run_polling()
    except Exception as e:
        error_logger.error(f"Bot stopped due to an unhandled exception: {e}", exc_info=True)
        raise
    finally:
        logger.info("Bot run finished")
        shutdown_logging()


if __name__ == "__main__":
    run_bot()
