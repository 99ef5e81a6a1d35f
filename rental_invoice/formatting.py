"""Presentation helpers for invoice text and export file names."""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Callable, List, Union

from dateutil import parser as dateutil_parser

from .totals import round_money, to_decimal

# Swaps the thousands and decimal separators (1,150,000.50 -> 1.150.000,50).
_ID_SEPARATORS = str.maketrans(",.", ".,")


def fmt_money(amount: Union[Decimal, float, int, str], symbol: str = "Rp") -> str:
    """Format an amount the id-ID way, e.g. ``Rp 1.150.000`` or ``Rp 12,50``."""
    value = round_money(to_decimal(amount, "amount"))
    text = f"{abs(value):,.2f}"
    if text.endswith(".00"):
        text = text[:-3]
    text = text.translate(_ID_SEPARATORS)
    sign = "-" if value < 0 else ""
    return f"{sign}{symbol} {text}"


def fmt_date(value: Union[date, datetime, str]) -> str:
    """Return the value formatted as '15 January 2026'; unparsable strings pass through."""
    if isinstance(value, str):
        raw = value.strip()
        if not raw:
            return raw
        try:
            value = dateutil_parser.parse(raw)
        except (ValueError, OverflowError):
            return raw
    return f"{value.day:02d} {value.strftime('%B %Y')}"


def short_id(order_id: str) -> str:
    return order_id[:8].upper()


def invoice_filename(order_id: str) -> str:
    return f"Invoice-{short_id(order_id)}.pdf"


def split_lines(text: str) -> List[str]:
    if not text:
        return []
    return [line for line in text.split("\n") if line.strip()]


def wrap_text(text: str, max_width: float, measure: Callable[[str], float]) -> List[str]:
    """Greedy word wrap; a single word wider than ``max_width`` is broken by character."""
    lines: List[str] = []
    for paragraph in text.split("\n"):
        current = ""
        for word in paragraph.split():
            candidate = f"{current} {word}" if current else word
            if measure(candidate) <= max_width:
                current = candidate
                continue
            if current:
                lines.append(current)
            current = ""
            if measure(word) <= max_width:
                current = word
                continue
            for char in word:
                if current and measure(current + char) > max_width:
                    lines.append(current)
                    current = char
                else:
                    current += char
        lines.append(current)
    return lines if lines else [text]
