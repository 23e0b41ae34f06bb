from __future__ import annotations

import re
from typing import List

from .models import MoneySummary

MIN_VALUE = 0.0
MAX_VALUE = 10000.0

# Optional R$ marker, digits, optional decimal part with 1-2 digits.
# Tokens glued to other digits or separators (CPF, phone, 1.234,56) are skipped whole.
_VALUE_RE = re.compile(
    r"(?<![\w.,\-])(?:R\$\s*)?(\d+(?:[.,]\d{1,2})?)(?!\w|[.,]\d|-\d)"
)


def extract_values(text: str, min_value: float = MIN_VALUE, max_value: float = MAX_VALUE) -> List[float]:
    """Return plausible monetary values found in ``text``, in order of appearance.

    Brazilian (``6,50``) and international (``6.50``) notation are both accepted.
    Only values strictly between ``min_value`` and ``max_value`` are kept.
    """
    values: List[float] = []
    for match in _VALUE_RE.finditer(text or ""):
        num = float(match.group(1).replace(",", "."))
        if min_value < num < max_value:
            values.append(num)
    return values


def sum_values(text: str, min_value: float = MIN_VALUE, max_value: float = MAX_VALUE) -> MoneySummary:
    if not (text or "").strip():
        return MoneySummary(values=[], total=0.0)
    values = extract_values(text, min_value=min_value, max_value=max_value)
    return MoneySummary(values=values, total=sum(values))


def format_brl(value: float) -> str:
    """Format as Brazilian currency, e.g. ``R$ 1.234,56``."""
    sign = "-" if value < 0 else ""
    whole, cents = f"{abs(value):,.2f}".split(".")
    return f"{sign}R$ {whole.replace(',', '.')},{cents}"
