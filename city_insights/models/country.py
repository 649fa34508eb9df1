"""Country and currency models."""

from pydantic import BaseModel


class CurrencyInfo(BaseModel):
    """A currency code and its human readable name."""

    code: str
    name: str


class Country(BaseModel):
    """Country name with the currency selected for it."""

    name: str
    code: str
    currency: CurrencyInfo

    @classmethod
    def from_api_response(cls, code: str, api_data) -> "Country":
        """Create a Country from a RestCountries payload.

        The first key of the ``currencies`` mapping is selected.

        Args:
            code: Country code that was looked up.
            api_data: RestCountries payload, either a list or a single object.

        Returns:
            A populated Country model.

        Raises:
            ValueError: If the payload has no currencies.
        """
        entry = api_data[0] if isinstance(api_data, list) else api_data
        currencies = entry.get("currencies") or {}
        if not currencies:
            raise ValueError(f"No currencies listed for {code}")
        currency_code = next(iter(currencies))
        return cls(
            name=entry["name"]["common"],
            code=code,
            currency=CurrencyInfo(
                code=currency_code,
                name=currencies[currency_code].get("name", currency_code),
            ),
        )
