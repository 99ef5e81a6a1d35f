"""Plan how a tall captured invoice image is spread over fixed-size pages."""

from __future__ import annotations

from typing import List

from .errors import InvalidInput
from .models import PagePlacement


def scaled_height(source_width: float, source_height: float, page_width: float) -> float:
    return source_height * (page_width / source_width)


def plan_pages(
    source_width: float,
    source_height: float,
    page_width: float,
    page_height: float,
) -> List[PagePlacement]:
    """Return one placement per page, top to bottom.

    Every page draws the whole image scaled to ``page_width``, shifted up by the
    height of the pages before it; the page bounds clip everything else.
    """
    for name, value in (
        ("source_width", source_width),
        ("source_height", source_height),
        ("page_width", page_width),
        ("page_height", page_height),
    ):
        if value <= 0:
            raise InvalidInput(f"'{name}' must be positive, got {value}.")

    height = scaled_height(source_width, source_height, page_width)
    if height <= page_height:
        return [PagePlacement(page_index=0, vertical_offset=0.0, slice_height=height)]

    placements: List[PagePlacement] = []
    remaining = height
    position = 0.0
    page_index = 0
    while remaining > 0:
        placements.append(
            PagePlacement(page_index=page_index, vertical_offset=position, slice_height=height)
        )
        remaining -= page_height
        position -= page_height
        page_index += 1
    return placements


def page_count(
    source_width: float,
    source_height: float,
    page_width: float,
    page_height: float,
) -> int:
    return len(plan_pages(source_width, source_height, page_width, page_height))
