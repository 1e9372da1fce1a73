"""Price text parsing for scraped listings.

Swedish sites print prices like "12 500 kr", "1.995:-" or "Bud";
only the first digit run (with dot or space thousand separators) is
taken as the amount, in whole kronor.
"""
import re
from dataclasses import dataclass
from typing import Optional

_AMOUNT_RE = re.compile(r"\d[\d.\s]*")
_SEPARATORS_RE = re.compile(r"[.\s]")


@dataclass(frozen=True)
class PriceInfo:
    """Displayed price text and its parsed amount (None when absent)."""
    text: str
    amount: Optional[int] = None


def parse_price(price_text: Optional[str]) -> PriceInfo:
    """Parse a displayed price.

    Example:
        parse_price("12 500 kr")
        # PriceInfo(text="12 500 kr", amount=12500)
    """
    text = " ".join((price_text or "").split())
    match = _AMOUNT_RE.search(text)
    if not match:
        return PriceInfo(text=text)

    digits = _SEPARATORS_RE.sub("", match.group(0))
    return PriceInfo(text=text, amount=int(digits) if digits else None)
