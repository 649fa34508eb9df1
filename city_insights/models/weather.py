"""Weather snapshot model and condition icon mapping."""

from pydantic import BaseModel

DEFAULT_WEATHER_ICON = "fas fa-cloud"

WEATHER_ICON_MAP = {
    "Clear": "fas fa-sun",
    "Clouds": "fas fa-cloud",
    "Rain": "fas fa-cloud-rain",
    "Drizzle": "fas fa-cloud-rain",
    "Thunderstorm": "fas fa-bolt",
    "Snow": "fas fa-snowflake",
    "Mist": "fas fa-smog",
    "Smoke": "fas fa-smog",
    "Haze": "fas fa-smog",
    "Fog": "fas fa-smog",
}


def weather_icon(condition: str) -> str:
    """Return the icon class for a weather condition category.

    Unknown categories map to ``DEFAULT_WEATHER_ICON``.
    """
    return WEATHER_ICON_MAP.get(condition, DEFAULT_WEATHER_ICON)


class WeatherSnapshot(BaseModel):
    """Current conditions at a location as of query time."""

    main: str
    description: str
    temperature: float
    feels_like: float
    humidity: int

    @classmethod
    def from_api_response(cls, api_data: dict) -> "WeatherSnapshot":
        """Create a WeatherSnapshot from an OpenWeather payload.

        Args:
            api_data: OpenWeather current weather payload.

        Returns:
            A populated WeatherSnapshot model.
        """
        condition = api_data["weather"][0]
        current = api_data["main"]
        return cls(
            main=condition["main"],
            description=condition["description"],
            temperature=current["temp"],
            feels_like=current["feels_like"],
            humidity=current["humidity"],
        )
