import pytest

from nearby_weather.conversion import ConversionService
from nearby_weather.weather_models import TemperatureUnit, WindspeedUnit


@pytest.fixture
def conversion():
    return ConversionService()


@pytest.mark.parametrize("code,glyph", [
    (211, "⛈"),
    (301, "🌦"),
    (502, "🌧"),
    (601, "❄️"),
    (741, "🌫"),
    (800, "☀️"),
    (804, "☁️"),
])
def test_condition_glyph(conversion, code, glyph):
    assert conversion.condition_glyph(code) == glyph


@pytest.mark.parametrize("code", [None, 0, 100, 999])
def test_unknown_condition_has_no_glyph(conversion, code):
    assert conversion.condition_glyph(code) is None


def test_custom_glyph_table():
    conversion = ConversionService({range(800, 801): "sun"})
    assert conversion.condition_glyph(800) == "sun"
    assert conversion.condition_glyph(500) is None


@pytest.mark.parametrize("unit,expected", [
    (TemperatureUnit.CELSIUS, "16.85°C"),
    (TemperatureUnit.FAHRENHEIT, "62.33°F"),
    (TemperatureUnit.KELVIN, "290.00K"),
])
def test_temperature_descriptor(conversion, unit, expected):
    assert conversion.temperature_descriptor(unit, 290.0) == expected


def test_freezing_point(conversion):
    assert conversion.convert_temperature(TemperatureUnit.CELSIUS, 273.15) == pytest.approx(0.0)
    assert conversion.convert_temperature(TemperatureUnit.FAHRENHEIT, 273.15) == pytest.approx(32.0)


@pytest.mark.parametrize("unit,expected", [
    (WindspeedUnit.KILOMETRES, "36.00 km/h"),
    (WindspeedUnit.MILES, "22.37 mph"),
])
def test_windspeed_descriptor(conversion, unit, expected):
    assert conversion.windspeed_descriptor(unit, 10.0) == expected
