"""
Telegram surface for the weather list and map.

The list is rendered as one message with an inline keyboard that is edited in
place on every reload; the map is rendered as one venue message per annotation.
"""

import asyncio
import logging
from typing import Any, Dict, List, Optional, Set, Tuple

from telegram import Bot, InlineKeyboardButton, InlineKeyboardMarkup, Update
from telegram.constants import ChatAction
from telegram.error import BadRequest
from telegram.ext import (
    Application, CallbackContext, CallbackQueryHandler, CommandHandler, MessageHandler, filters
)

from nearby_weather.const import CallbackData
from nearby_weather.conversion import ConversionService
from nearby_weather.error_handler import ErrorHandler, handle_errors
from nearby_weather.event_system import EventBus, EventType
from nearby_weather.list_presenter import AlertCell, ListLayout, WeatherDataCell, WeatherListPresenter
from nearby_weather.localization import Localizer
from nearby_weather.location_service import LocationService
from nearby_weather.logger import general_logger
from nearby_weather.map_presenter import AnnotationView, AnnotationViewModel, MapRegion, NearbyLocationsMapPresenter
from nearby_weather.preferences import PreferencesManager
from nearby_weather.sort_coordinator import SortOption
from nearby_weather.types import ChatId
from nearby_weather.weather_data_manager import WeatherDataManager, WeatherFetcher
from nearby_weather.weather_models import SortKey, WeatherRecord

logger = logging.getLogger(__name__)


def render_layout_text(layout: ListLayout, refreshing: bool = False) -> str:
    """Plain-text rendering of a list layout."""
    lines = [f"🔄 {layout.title}" if refreshing else layout.title]
    if layout.subtitle:
        lines.append(layout.subtitle)

    for section in layout.sections:
        lines.append("")
        if section.header:
            lines.append(section.header.upper())
        for cell in section.rows:
            if isinstance(cell, WeatherDataCell):
                glyph = f"{cell.condition_glyph} " if cell.condition_glyph else ""
                lines.append(f"{glyph}{cell.city_name}")
                lines.append(f"{cell.temperature}  {cell.cloud_coverage}  {cell.humidity}  {cell.windspeed}")
            elif isinstance(cell, AlertCell):
                lines.append(f"⚠️ {cell.notice}")
    return "\n".join(lines)


def render_layout_keyboard(layout: ListLayout, localizer: Localizer) -> InlineKeyboardMarkup:
    """One button per data row, then refresh and (when enabled) sort."""
    keyboard: List[List[InlineKeyboardButton]] = []
    for section in layout.sections:
        for cell in section.rows:
            if isinstance(cell, WeatherDataCell):
                keyboard.append([InlineKeyboardButton(
                    cell.city_name,
                    callback_data=f"{CallbackData.SELECT}{cell.identifier}",
                )])

    actions = [InlineKeyboardButton(f"🔄 {localizer.get('list.refresh')}", callback_data=CallbackData.REFRESH)]
    if layout.sort_enabled:
        actions.append(InlineKeyboardButton(f"↕️ {localizer.get('list.sort')}", callback_data=CallbackData.SORT))
    keyboard.append(actions)
    return InlineKeyboardMarkup(keyboard)


def render_sort_keyboard(options: List[SortOption]) -> InlineKeyboardMarkup:
    keyboard = []
    for option in options:
        data = CallbackData.CANCEL if option.is_cancel else f"{CallbackData.SORT_KEY}{option.key.value}"
        keyboard.append([InlineKeyboardButton(option.title, callback_data=data)])
    return InlineKeyboardMarkup(keyboard)


class TelegramActivityIndicator:
    """Shows the "typing" chat action while a refresh is running."""

    def __init__(self, bot: Bot, chat_id: ChatId) -> None:
        self.bot = bot
        self.chat_id = chat_id
        self.active = False
        self._tasks: Set[asyncio.Task] = set()

    @property
    def pending(self) -> int:
        return len(self._tasks)

    def begin(self) -> None:
        self.active = True
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            return
        task = loop.create_task(self._send_typing())
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    def end(self) -> None:
        self.active = False
        for task in list(self._tasks):
            task.cancel()

    async def _send_typing(self) -> None:
        try:
            await self.bot.send_chat_action(chat_id=self.chat_id, action=ChatAction.TYPING)
        except Exception as e:
            await ErrorHandler.handle_error(
                e,
                context_data={"operation": "chat_action", "chat_id": self.chat_id},
                source="activity_indicator",
            )


class TelegramListView:
    """Keeps one list message per chat up to date."""

    def __init__(self, bot: Bot, chat_id: ChatId, localizer: Localizer, indicator: Optional[TelegramActivityIndicator] = None) -> None:
        self.bot = bot
        self.chat_id = chat_id
        self.localizer = localizer
        self.indicator = indicator
        self.message_id: Optional[int] = None
        self.last_layout: Optional[ListLayout] = None

    async def reload(self, layout: ListLayout) -> None:
        self.last_layout = layout
        refreshing = self.indicator.active if self.indicator else False
        await self.show(render_layout_text(layout, refreshing), render_layout_keyboard(layout, self.localizer))

    async def show(self, text: str, keyboard: InlineKeyboardMarkup) -> None:
        if self.message_id is None:
            message = await self.bot.send_message(chat_id=self.chat_id, text=text, reply_markup=keyboard)
            self.message_id = message.message_id
            return
        try:
            await self.bot.edit_message_text(
                chat_id=self.chat_id, message_id=self.message_id, text=text, reply_markup=keyboard
            )
        except BadRequest as e:
            if "not modified" not in str(e).lower():
                raise
            logger.debug("List message unchanged, skipping edit")


class TelegramMapView:
    """Annotations as venue messages; the region centre as a location message."""

    def __init__(self, bot: Bot, chat_id: ChatId) -> None:
        self.bot = bot
        self.chat_id = chat_id
        # One entry per venue sent; the same city may appear twice
        self._sent: List[Tuple[AnnotationViewModel, int]] = []

    @property
    def annotations(self) -> List[AnnotationViewModel]:
        return [annotation for annotation, _ in self._sent]

    def _pop_message_id(self, annotation: Any) -> Optional[int]:
        for index, (sent, message_id) in enumerate(self._sent):
            if sent == annotation:
                del self._sent[index]
                return message_id
        return None

    async def remove_annotations(self, annotations: List[Any]) -> None:
        for annotation in annotations:
            message_id = self._pop_message_id(annotation)
            if message_id is None:
                continue
            try:
                await self.bot.delete_message(chat_id=self.chat_id, message_id=message_id)
            except BadRequest as e:
                logger.debug(f"Could not delete stale annotation message {message_id}: {e}")

    async def add_annotations(self, annotations: List[Any]) -> None:
        for annotation in annotations:
            message = await self.bot.send_venue(
                chat_id=self.chat_id,
                latitude=annotation.coordinate.latitude,
                longitude=annotation.coordinate.longitude,
                title=annotation.title,
                address=annotation.subtitle,
            )
            self._sent.append((annotation, message.message_id))

    async def set_region(self, region: MapRegion) -> None:
        await self.bot.send_location(
            chat_id=self.chat_id,
            latitude=region.center.latitude,
            longitude=region.center.longitude,
        )

    def dequeue_reusable_annotation_view(self, identifier: str) -> Optional[AnnotationView]:
        """Venue messages are never recycled, so every pin gets a fresh view."""
        return None


class TelegramNavigator:
    """Shows a detail message for a selected record."""

    def __init__(self, bot: Bot, chat_id: ChatId, preferences: PreferencesManager, conversion: ConversionService) -> None:
        self.bot = bot
        self.chat_id = chat_id
        self.preferences = preferences
        self.conversion = conversion

    async def show_weather_detail(self, record: WeatherRecord) -> None:
        glyph = self.conversion.condition_glyph(record.primary_condition_code)
        temperature = self.conversion.temperature_descriptor(self.preferences.temperature_unit, record.temperature_kelvin)
        windspeed = self.conversion.windspeed_descriptor(self.preferences.windspeed_unit, record.windspeed)
        text = (
            f"{glyph + ' ' if glyph else ''}{record.city_name}\n"
            f"🌡 {temperature}\n"
            f"☁️ {record.cloud_coverage}%\n"
            f"💧 {record.humidity}%\n"
            f"🎏 {windspeed}\n"
            f"📍 {record.coordinate.latitude:.4f}, {record.coordinate.longitude:.4f}"
        )
        await self.bot.send_message(chat_id=self.chat_id, text=text)


class WeatherChatSession:
    """Presenters and Telegram views for one chat."""

    def __init__(self, bot: Bot, chat_id: ChatId, app: 'WeatherBot') -> None:
        localizer = Localizer(app.preferences.language)
        self.indicator = TelegramActivityIndicator(bot, chat_id)
        self.list_view = TelegramListView(bot, chat_id, localizer, self.indicator)
        self.map_view = TelegramMapView(bot, chat_id)
        self.navigator = TelegramNavigator(bot, chat_id, app.preferences, app.conversion)
        self.list_presenter = WeatherListPresenter(
            view=self.list_view,
            data_source=app.data_manager,
            location_source=app.location_service,
            preferences=app.preferences,
            navigator=self.navigator,
            indicator=self.indicator,
            event_bus=app.event_bus,
            conversion=app.conversion,
            localizer=localizer,
        )
        self.map_presenter = NearbyLocationsMapPresenter(
            view=self.map_view,
            data_source=app.data_manager,
            location_source=app.location_service,
            preferences=app.preferences,
            conversion=app.conversion,
            localizer=localizer,
        )


class WeatherBot:
    """Shared weather state plus one session per chat."""

    def __init__(
        self,
        fetcher: WeatherFetcher,
        preferences: Optional[PreferencesManager] = None,
        event_bus: Optional[EventBus] = None,
    ) -> None:
        self.event_bus = event_bus or EventBus()
        self.preferences = preferences or PreferencesManager()
        self.conversion = ConversionService()
        self.location_service = LocationService(self.event_bus)
        self.data_manager = WeatherDataManager(fetcher, self.location_service, self.preferences, self.event_bus)
        self.sessions: Dict[ChatId, WeatherChatSession] = {}

    def session_for(self, bot: Bot, chat_id: ChatId) -> WeatherChatSession:
        if chat_id not in self.sessions:
            self.sessions[chat_id] = WeatherChatSession(bot, chat_id, self)
            general_logger.info(f"Opened weather session for chat {chat_id}")
        return self.sessions[chat_id]

    async def close_session(self, chat_id: ChatId) -> None:
        session = self.sessions.pop(chat_id, None)
        if session is not None:
            await session.list_presenter.will_disappear()

    @handle_errors(feedback_message="❌ Could not show the weather list.")
    async def weather_command(self, update: Update, context: CallbackContext) -> None:
        """Handle /weather: show (or re-show) the list."""
        if not update.effective_chat:
            return
        is_new = update.effective_chat.id not in self.sessions
        session = self.session_for(context.bot, update.effective_chat.id)
        # A fresh message is sent below the command
        session.list_view.message_id = None
        if is_new:
            await session.list_presenter.will_appear()
        else:
            await self.event_bus.publish_event(EventType.APP_BECAME_ACTIVE, source="weather_command")
        await session.list_presenter.did_appear()

    @handle_errors(feedback_message="❌ Could not show the map.")
    async def map_command(self, update: Update, context: CallbackContext) -> None:
        """Handle /map: send the annotated locations."""
        if not update.effective_chat:
            return
        session = self.session_for(context.bot, update.effective_chat.id)
        await session.map_presenter.present()

    @handle_errors(feedback_message="❌ Could not use the shared location.")
    async def location_message(self, update: Update, context: CallbackContext) -> None:
        """A shared location grants location permission and sets the position."""
        message = update.message
        if not message or not message.location:
            return
        await self.location_service.update_position(message.location.latitude, message.location.longitude)

    @handle_errors(feedback_message="❌ That button did not work, please try /weather again.")
    async def button_callback(self, update: Update, context: CallbackContext) -> None:
        query = update.callback_query
        if query is None or not update.effective_chat:
            return
        await query.answer()
        data: str = query.data or ""
        session = self.sessions.get(update.effective_chat.id)
        if session is None:
            await query.edit_message_text("⌛ This list has expired. Send /weather to open a new one.")
            return

        presenter = session.list_presenter
        if query.message is not None:
            session.list_view.message_id = query.message.message_id

        if data == CallbackData.REFRESH:
            await presenter.refresh()
        elif data == CallbackData.SORT:
            await query.edit_message_reply_markup(
                reply_markup=render_sort_keyboard(presenter.sort_coordinator.sort_options())
            )
        elif data == CallbackData.CANCEL:
            await presenter.reload()
        elif data.startswith(CallbackData.SORT_KEY):
            try:
                key = SortKey(data[len(CallbackData.SORT_KEY):])
            except ValueError:
                logger.debug(f"Unknown sort key in callback data: {data}")
                await presenter.reload()
                return
            if not await presenter.sort(key):
                await presenter.reload()
        elif data.startswith(CallbackData.SELECT):
            try:
                identifier = int(data[len(CallbackData.SELECT):])
            except ValueError:
                logger.debug(f"Malformed selection callback data: {data}")
                return
            # Buttons of older list messages may name records that are gone
            if not await presenter.did_select_record(identifier):
                await presenter.reload()
        else:
            logger.debug(f"Unhandled callback data: {data}")


def register_weather_handlers(application: Application, weather_bot: WeatherBot) -> None:
    """Register the weather commands, location messages and button callbacks."""
    application.add_handler(CommandHandler("weather", weather_bot.weather_command))
    application.add_handler(CommandHandler("map", weather_bot.map_command))
    application.add_handler(MessageHandler(filters.LOCATION, weather_bot.location_message))
    application.add_handler(CallbackQueryHandler(weather_bot.button_callback, pattern=CallbackData.PATTERN))
    general_logger.info("Weather handlers registered")
