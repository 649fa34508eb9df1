"""Exchange rate model."""

from pydantic import BaseModel

RATE_UNAVAILABLE = "Unavailable"


class ExchangeRate(BaseModel):
    """Value of one currency in the target currency, if known."""

    currency_code: str
    target: str = "USD"
    rate: float | None = None

    @classmethod
    def unavailable(cls, currency_code: str, target: str = "USD") -> "ExchangeRate":
        return cls(currency_code=currency_code, target=target)

    @property
    def display(self) -> str:
        """Rate with four decimals, or the ``Unavailable`` sentinel."""
        if self.rate is None:
            return RATE_UNAVAILABLE
        return f"{self.rate:.4f}"
