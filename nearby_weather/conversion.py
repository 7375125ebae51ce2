"""Unit conversion and formatting of raw weather values."""

from typing import Dict, Optional

from nearby_weather.const import Weather
from nearby_weather.weather_models import TemperatureUnit, WindspeedUnit


class ConversionService:
    """Turns raw weather values into display strings."""

    def __init__(self, condition_emojis: Optional[Dict[range, str]] = None) -> None:
        self.condition_emojis = condition_emojis or Weather.CONDITION_EMOJIS

    def condition_glyph(self, weather_code: Optional[int]) -> Optional[str]:
        """Glyph for an OpenWeatherMap condition code, None when the code is unknown."""
        if weather_code is None:
            return None
        for code_range, emoji in self.condition_emojis.items():
            if weather_code in code_range:
                return emoji
        return None

    @staticmethod
    def convert_temperature(unit: TemperatureUnit, kelvin: float) -> float:
        if unit == TemperatureUnit.CELSIUS:
            return kelvin - Weather.KELVIN_OFFSET
        if unit == TemperatureUnit.FAHRENHEIT:
            return kelvin * 9 / 5 - 459.67
        return kelvin

    def temperature_descriptor(self, unit: TemperatureUnit, kelvin: float) -> str:
        value = self.convert_temperature(unit, kelvin)
        if unit == TemperatureUnit.CELSIUS:
            return f"{value:.2f}°C"
        if unit == TemperatureUnit.FAHRENHEIT:
            return f"{value:.2f}°F"
        return f"{value:.2f}K"

    def windspeed_descriptor(self, unit: WindspeedUnit, metres_per_second: float) -> str:
        if unit == WindspeedUnit.MILES:
            return f"{metres_per_second * Weather.MPS_TO_MPH:.2f} mph"
        return f"{metres_per_second * Weather.MPS_TO_KMH:.2f} km/h"
