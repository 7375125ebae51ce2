"""Localized user-facing strings."""

import logging
from typing import Dict, Optional

logger = logging.getLogger(__name__)

STRINGS: Dict[str, Dict[str, str]] = {
    'en': {
        'list.section_header.bookmarked': 'Bookmarked Location',
        'list.section_header.nearby': 'Nearby Locations',
        'list.alert.no_data': 'No weather data available. Pull down or tap refresh to load it.',
        'list.alert.bookmarked_city_invalid': 'The bookmarked city is invalid. Please choose another one in the settings.',
        'list.alert.location_unavailable': 'Your location is unavailable. Nearby locations cannot be shown.',
        'list.last_refresh': 'Last refresh: {date}',
        'list.refresh': 'Refresh',
        'list.sort': 'Sort',
        'sort.cancel': 'Cancel',
        'sort.name': 'Sort by name',
        'sort.temperature': 'Sort by temperature',
        'sort.distance': 'Sort by distance',
        'map.title': 'Map',
    },
    'de': {
        'list.section_header.bookmarked': 'Gemerkter Ort',
        'list.section_header.nearby': 'Orte in der Nähe',
        'list.alert.no_data': 'Keine Wetterdaten vorhanden. Zum Laden herunterziehen oder Aktualisieren tippen.',
        'list.alert.bookmarked_city_invalid': 'Der gemerkte Ort ist ungültig. Bitte wähle in den Einstellungen einen anderen.',
        'list.alert.location_unavailable': 'Dein Standort ist nicht verfügbar. Orte in der Nähe können nicht angezeigt werden.',
        'list.last_refresh': 'Zuletzt aktualisiert: {date}',
        'list.refresh': 'Aktualisieren',
        'list.sort': 'Sortieren',
        'sort.cancel': 'Abbrechen',
        'sort.name': 'Nach Name sortieren',
        'sort.temperature': 'Nach Temperatur sortieren',
        'sort.distance': 'Nach Entfernung sortieren',
        'map.title': 'Karte',
    },
}


class Localizer:
    """Looks up strings for one language, falling back to English."""

    default_language = 'en'

    def __init__(self, language: Optional[str] = None) -> None:
        self.language = (language or self.default_language).lower()
        if self.language not in STRINGS:
            logger.warning(f"Language {self.language} not supported, using {self.default_language}")
            self.language = self.default_language

    def get(self, key: str, **kwargs: str) -> str:
        value = STRINGS[self.language].get(key) or STRINGS[self.default_language].get(key)
        if value is None:
            logger.warning(f"Missing localized string: {key}")
            return key
        return value.format(**kwargs) if kwargs else value

    @staticmethod
    def supported_languages() -> Dict[str, str]:
        return {'en': 'English', 'de': 'Deutsch'}
