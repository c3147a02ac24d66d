"""Money value object shared by carts, orders and checkout."""

import math
from decimal import ROUND_HALF_UP, Decimal

from protean.fields import Float

from ordering.domain import ordering
from ordering.errors import InvalidMoneyError, NegativeResultError

TOLERANCE = 0.01

# locale -> (thousands separator, decimal separator, symbol after amount)
_LOCALES = {
    "es_AR": (".", ",", False),
    "es_ES": (".", ",", True),
    "pt_BR": (".", ",", False),
    "en_US": (",", ".", False),
}

SUPPORTED_LOCALES = tuple(_LOCALES)

_CURRENCY_SYMBOLS = {
    "ARS": "$",
    "USD": "US$",
    "EUR": "€",
}


def _is_valid_amount(value) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float, Decimal)):
        return False
    value = float(value)
    return not math.isnan(value) and not math.isinf(value)


@ordering.value_object
class Money:
    """A non-negative monetary amount.

    Money never carries a currency of its own: an order or cart is priced in a
    single currency, chosen at the edge. Every operation returns a new
    instance. Comparisons absorb float noise below one cent.
    """

    value = Float(required=True, min_value=0.0)

    @classmethod
    def create(cls, value) -> "Money":
        if not _is_valid_amount(value):
            raise InvalidMoneyError(
                f"Invalid monetary value: {value!r}",
                context={"value": repr(value)},
            )
        if value < 0:
            raise InvalidMoneyError(
                f"Monetary value cannot be negative: {value}",
                context={"value": float(value)},
            )
        return cls(value=float(value))

    @classmethod
    def zero(cls) -> "Money":
        return cls(value=0.0)

    # -------------------------------------------------------------------
    # Arithmetic
    # -------------------------------------------------------------------
    def add(self, other: "Money") -> "Money":
        return Money.create(self.value + other.value)

    def subtract(self, other: "Money") -> "Money":
        result = self.value - other.value
        if result < 0 and abs(result) >= TOLERANCE:
            raise NegativeResultError(
                f"Subtracting {other.value} from {self.value} would be negative",
                context={"minuend": self.value, "subtrahend": other.value},
            )
        return Money.create(max(result, 0.0))

    def multiply(self, factor) -> "Money":
        if not _is_valid_amount(factor) or factor < 0:
            raise InvalidMoneyError(
                f"Invalid multiplication factor: {factor!r}",
                context={"factor": repr(factor)},
            )
        return Money.create(self.value * float(factor))

    def round(self) -> "Money":
        """Round half-up to cents, independent of float representation."""
        rounded = Decimal(str(self.value)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
        return Money.create(float(rounded))

    # -------------------------------------------------------------------
    # Comparison
    # -------------------------------------------------------------------
    def equals(self, other: "Money") -> bool:
        return abs(self.value - other.value) < TOLERANCE

    def is_greater_than(self, other: "Money") -> bool:
        return self.value - other.value >= TOLERANCE

    def is_less_than(self, other: "Money") -> bool:
        return other.value - self.value >= TOLERANCE

    def is_zero(self) -> bool:
        return abs(self.value) < TOLERANCE

    def to_float(self) -> float:
        return self.round().value

    # -------------------------------------------------------------------
    # Formatting
    # -------------------------------------------------------------------
    def format(self, currency: str = "ARS", locale: str = "es_AR") -> str:
        """Render the amount with ``locale`` separators, e.g. ``$ 1.234,50``.

        Unknown currencies print their code instead of a symbol. Raises
        ``ValueError`` for locales without a separator convention here.
        """
        key = locale.replace("-", "_")
        if key not in _LOCALES:
            raise ValueError(f"Unsupported locale: {locale!r} (expected one of {', '.join(sorted(_LOCALES))})")
        thousands, decimal, symbol_after = _LOCALES[key]
        symbol = _CURRENCY_SYMBOLS.get(currency.upper(), currency.upper())
        amount = _group(self.round().value, thousands, decimal)
        if symbol_after:
            return f"{amount} {symbol}"
        return f"{symbol} {amount}"

    def format_simple(self) -> str:
        return f"${_group(self.round().value, '.', ',')}"

    def __str__(self) -> str:
        return self.format_simple()


def _group(amount: float, thousands: str, decimal: str) -> str:
    text = f"{amount:,.2f}"
    if (thousands, decimal) == (",", "."):
        return text
    return text.replace(",", "\x00").replace(".", decimal).replace("\x00", thousands)
