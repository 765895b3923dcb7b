"""
Monetary formatting for the certificate total.

Produces the "1235 (одна тысяча двести тридцать пять) руб. 0 коп." line:
integer rubles, the rubles spelled out in Russian, and kopecks.
"""

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation, ROUND_FLOOR, ROUND_HALF_UP
from typing import Union

from num2words import num2words

from .errors import FormatError

Amount = Union[Decimal, int, float, str]


@dataclass(frozen=True)
class MonetaryDisplay:
    """Amount split for display. kopecks is always within [0, 99]."""
    rubles: int
    kopecks: int
    words: str
    zero_pad_kopecks: bool = False

    @property
    def text(self) -> str:
        """Display string used in the document."""
        kopecks = f"{self.kopecks:02d}" if self.zero_pad_kopecks else str(self.kopecks)
        return f"{self.rubles} ({self.words}) руб. {kopecks} коп."

    def __str__(self) -> str:
        return self.text


def _to_amount(amount: Amount) -> Decimal:
    if isinstance(amount, bool):
        raise FormatError(f"Amount must be numeric, got {amount!r}")
    try:
        # str() first so that floats are taken as written (1234.995, not its binary expansion)
        value = amount if isinstance(amount, Decimal) else Decimal(str(amount))
    except (InvalidOperation, ValueError, TypeError):
        raise FormatError(f"Amount must be numeric, got {amount!r}")

    if not value.is_finite():
        raise FormatError(f"Amount must be finite, got {amount!r}")
    if value < 0:
        raise FormatError(f"Amount must be >= 0, got {amount!r}")
    return value


def rubles_to_words(rubles: int) -> str:
    """Spell out an integer number of rubles in Russian, lower case, nominative.

    Raises:
        FormatError: If the number cannot be converted
    """
    try:
        words = num2words(rubles, lang="ru")
    except (NotImplementedError, OverflowError, ValueError, TypeError) as e:
        raise FormatError(f"Cannot convert {rubles} to words: {e}") from e
    return words.lower()


def format_amount(amount: Amount, zero_pad_kopecks: bool = False) -> MonetaryDisplay:
    """Split an amount into rubles and kopecks and spell out the rubles.

    Kopecks are rounded half-up; a value that rounds to 100 carries into
    rubles, so the display never shows "100 коп.".

    Args:
        amount: Non-negative amount in rubles
        zero_pad_kopecks: Render kopecks with two digits ("05 коп.")

    Returns:
        MonetaryDisplay for the amount

    Raises:
        FormatError: If amount is negative, NaN, infinite or not a number
    """
    value = _to_amount(amount)

    rubles = int(value.to_integral_value(rounding=ROUND_FLOOR))
    kopecks = int(((value - rubles) * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))
    if kopecks == 100:
        rubles += 1
        kopecks = 0

    return MonetaryDisplay(
        rubles=rubles,
        kopecks=kopecks,
        words=rubles_to_words(rubles),
        zero_pad_kopecks=zero_pad_kopecks
    )


def format_fixed(amount: Decimal) -> str:
    """Two-decimal fixed-point string without grouping ("30.00")."""
    return str(Decimal(amount).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))
