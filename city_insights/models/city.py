"""City model for geo lookup results."""

from pydantic import BaseModel


class City(BaseModel):
    """One candidate location returned by the geo lookup API."""

    name: str
    country: str | None = None
    country_code: str
    region: str | None = None
    latitude: float
    longitude: float
    population: int = 0
    timezone: str | None = None

    @classmethod
    def from_api_response(cls, data: dict) -> "City":
        """Create a City from one GeoDB ``data`` entry.

        Args:
            data: A single city object from the GeoDB response.

        Returns:
            A populated City model.
        """
        return cls(
            name=data["city"],
            country=data.get("country"),
            country_code=data["countryCode"],
            region=data.get("region"),
            latitude=data["latitude"],
            longitude=data["longitude"],
            population=data.get("population") or 0,
            timezone=data.get("timezone"),
        )
