"""Runtime configuration loaded from environment variables."""

from __future__ import annotations

import os

from .formatting import split_lines
from .models import BusinessInfo, ExportConfig


def env_int(name: str, default: int, minimum: int = 1) -> int:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        value = int(raw)
    except ValueError:
        return default
    return value if value >= minimum else default


def env_float(name: str, default: float, minimum: float = 0.0) -> float:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        value = float(raw)
    except ValueError:
        return default
    return value if value > minimum else default


PAGE_WIDTH = env_float("INVOICE_PAGE_WIDTH", 210.0)
PAGE_HEIGHT = env_float("INVOICE_PAGE_HEIGHT", 297.0)
PAGE_UNIT = os.getenv("INVOICE_PAGE_UNIT", "mm")
CAPTURE_SCALE = env_float("INVOICE_CAPTURE_SCALE", 2.0)
CAPTURE_WIDTH = env_int("INVOICE_CAPTURE_WIDTH", 794, minimum=1)
BACKGROUND_COLOR = os.getenv("INVOICE_BACKGROUND_COLOR", "#ffffff")
MAX_PAGES = env_int("INVOICE_MAX_PAGES", 50, minimum=1)

MAX_BODY_BYTES = env_int("INVOICE_MAX_BODY_BYTES", 8 * 1024 * 1024, minimum=1024)
MAX_INFLIGHT_EXPORTS = env_int("INVOICE_MAX_INFLIGHT_EXPORTS", 8, minimum=1)
EXPORT_QUEUE_TIMEOUT_MS = env_int("INVOICE_EXPORT_QUEUE_TIMEOUT_MS", 30000, minimum=0)
LISTEN_BACKLOG = env_int("INVOICE_LISTEN_BACKLOG", 128, minimum=1)
HOST = os.getenv("INVOICE_HOST", "0.0.0.0")
PORT = env_int("INVOICE_PORT", 8080, minimum=1)


def default_export_config() -> ExportConfig:
    return ExportConfig(
        page_width=PAGE_WIDTH,
        page_height=PAGE_HEIGHT,
        unit=PAGE_UNIT,
        scale=CAPTURE_SCALE,
        use_cors=True,
        background_color=BACKGROUND_COLOR,
        capture_width=CAPTURE_WIDTH,
        max_pages=MAX_PAGES,
    )


def business_info() -> BusinessInfo:
    return BusinessInfo(
        name=os.getenv("INVOICE_BUSINESS_NAME", "").strip(),
        address_lines=tuple(split_lines(os.getenv("INVOICE_BUSINESS_ADDRESS", ""))),
        payment_lines=tuple(split_lines(os.getenv("INVOICE_PAYMENT_INFO", ""))),
    )
