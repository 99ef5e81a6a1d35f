"""Pillow renderer that rasterizes an invoice document into a PNG capture.

Layout coordinates are CSS-like pixels at the document's ``style["width"]``;
the capture scale multiplies them into device pixels. Layout runs twice: a
dry pass that only measures the height, then the real draw onto a canvas of
exactly that height.
"""

from __future__ import annotations

import io
from typing import Optional, Tuple

from PIL import Image, ImageDraw

from .fonts import load_font
from .formatting import fmt_date, fmt_money, short_id, wrap_text
from .models import BusinessInfo, CaptureOptions, CaptureResult, InvoiceDocument, Order
from .totals import order_total

Color = Tuple[int, int, int]

COLOR_ACCENT: Color = (234, 88, 12)
COLOR_ACCENT_SOFT: Color = (255, 247, 237)
COLOR_TEXT: Color = (17, 24, 39)
COLOR_MUTED: Color = (75, 85, 99)
COLOR_ROW_ALT: Color = (249, 250, 251)
COLOR_RULE: Color = (209, 213, 219)
COLOR_WHITE: Color = (255, 255, 255)

DEFAULT_WIDTH = 794
MARGIN = 24
INSET = 16
BORDER_W = 4
LINE_H = 16
ROW_PAD = 10

FONT_TITLE = 22
FONT_HEADING = 11
FONT_BODY = 12
FONT_SMALL = 11
FONT_TOTAL = 16

# (label, share of table width, alignment)
ITEM_COLUMNS = (
    ("Car type", 0.34, "left"),
    ("Units", 0.11, "center"),
    ("Days", 0.11, "center"),
    ("Rate/day", 0.22, "right"),
    ("Subtotal", 0.22, "right"),
)


def parse_px(value: Optional[str], default: int) -> int:
    if not value:
        return default
    try:
        width = int(float(value.strip().lower().rstrip("px")))
    except ValueError:
        return default
    return width if width > 0 else default


class _Canvas:
    def __init__(self, width: int, scale: float, draw: Optional[ImageDraw.ImageDraw]) -> None:
        self.width = width
        self.scale = scale
        self.draw = draw

    def _font(self, size: int, bold: bool):
        return load_font(max(1, round(size * self.scale)), bold)

    def measure(self, text: str, size: int, bold: bool = False) -> float:
        return self._font(size, bold).getlength(text) / self.scale

    def text(
        self,
        x: float,
        y: float,
        text: str,
        size: int,
        color: Color,
        bold: bool = False,
        align: str = "left",
    ) -> None:
        if self.draw is None or not text:
            return
        if align == "right":
            x -= self.measure(text, size, bold)
        elif align == "center":
            x -= self.measure(text, size, bold) / 2.0
        self.draw.text(
            (x * self.scale, y * self.scale),
            text,
            font=self._font(size, bold),
            fill=color,
        )

    def rect(
        self,
        x0: float,
        y0: float,
        x1: float,
        y1: float,
        fill: Optional[Color] = None,
        outline: Optional[Color] = None,
        line_width: float = 1,
    ) -> None:
        if self.draw is None:
            return
        self.draw.rectangle(
            [x0 * self.scale, y0 * self.scale, x1 * self.scale, y1 * self.scale],
            fill=fill,
            outline=outline,
            width=max(1, round(line_width * self.scale)),
        )


class InvoiceImageRenderer:
    def __init__(self, business: Optional[BusinessInfo] = None) -> None:
        self.business = business or BusinessInfo()

    def measure(self, document: InvoiceDocument, options: CaptureOptions) -> Tuple[int, int]:
        """Device-pixel size of the capture, computed without allocating a raster."""
        width = parse_px(document.style.get("width"), DEFAULT_WIDTH)
        height = self._layout(_Canvas(width, options.scale, None), document.order)
        return round(width * options.scale), round(height * options.scale)

    def capture(self, document: InvoiceDocument, options: CaptureOptions) -> CaptureResult:
        # Everything is drawn locally, so there are no cross-origin resources
        # and options.use_cors has nothing to govern here.
        width = parse_px(document.style.get("width"), DEFAULT_WIDTH)
        image = Image.new("RGB", self.measure(document, options), options.background_color)
        self._layout(_Canvas(width, options.scale, ImageDraw.Draw(image)), document.order)

        buffer = io.BytesIO()
        image.save(buffer, format="PNG")
        return CaptureResult(width=image.width, height=image.height, image_data=buffer.getvalue())

    def _layout(self, canvas: _Canvas, order: Order) -> float:
        left = MARGIN + INSET
        right = canvas.width - MARGIN - INSET
        y = self._draw_header(canvas, order, left, right, MARGIN + INSET)
        y = self._draw_parties(canvas, order, left, right, y)
        y = self._draw_items(canvas, order, left, right, y)
        y = self._draw_total(canvas, order, left, right, y)
        y = self._draw_block(canvas, "PAYMENT", self.business.payment_lines, left, right, y)
        if order.notes:
            y = self._draw_block(canvas, "NOTES", (order.notes,), left, right, y)

        bottom = y + INSET
        canvas.rect(
            MARGIN,
            MARGIN,
            canvas.width - MARGIN,
            bottom,
            outline=COLOR_ACCENT,
            line_width=BORDER_W,
        )
        return bottom + MARGIN

    def _draw_header(self, canvas: _Canvas, order: Order, left: float, right: float, top: float) -> float:
        y = top
        if self.business.name:
            canvas.text(left, y, self.business.name, 18, COLOR_ACCENT, bold=True)
            y += 26
        for line in self.business.address_lines:
            canvas.text(left, y, line, FONT_SMALL, COLOR_MUTED)
            y += LINE_H

        ry = top
        canvas.text(right, ry, "INVOICE", FONT_TITLE, COLOR_TEXT, bold=True, align="right")
        ry += 32
        for label, value in (
            ("No. Invoice:", f"#{short_id(order.id)}"),
            ("Date:", fmt_date(order.order_date)),
        ):
            canvas.text(right, ry, label, FONT_SMALL, COLOR_MUTED, bold=True, align="right")
            ry += LINE_H
            canvas.text(right, ry, value, FONT_BODY, COLOR_TEXT, align="right")
            ry += LINE_H + 4

        y = max(y, ry) + 4
        canvas.rect(left, y, right, y + 2, fill=COLOR_ACCENT)
        return y + INSET

    def _draw_parties(self, canvas: _Canvas, order: Order, left: float, right: float, top: float) -> float:
        middle = (left + right) / 2.0
        column_w = middle - left - 12

        y = top
        canvas.text(left, y, "CUSTOMER", FONT_HEADING, COLOR_ACCENT, bold=True)
        y += LINE_H + 2
        canvas.text(left, y, order.customer_name, FONT_BODY, COLOR_TEXT, bold=True)
        y += LINE_H + 2
        lines = [f"Phone: {order.customer_phone}"]
        if order.customer_address:
            lines.extend(
                wrap_text(
                    f"Address: {order.customer_address}",
                    column_w,
                    lambda text: canvas.measure(text, FONT_SMALL),
                )
            )
        for line in lines:
            canvas.text(left, y, line, FONT_SMALL, COLOR_MUTED)
            y += LINE_H

        ry = top
        canvas.text(middle + 12, ry, "RENTAL PERIOD", FONT_HEADING, COLOR_ACCENT, bold=True)
        ry += LINE_H + 2
        canvas.rect(middle + 12, ry, right, ry + 2 * LINE_H + 12, fill=COLOR_ACCENT_SOFT)
        ry += 6
        canvas.text(middle + 20, ry, f"Start: {fmt_date(order.rental_start_date)}", FONT_SMALL, COLOR_TEXT)
        ry += LINE_H
        canvas.text(middle + 20, ry, f"End: {fmt_date(order.rental_end_date)}", FONT_SMALL, COLOR_TEXT)
        ry += LINE_H + 6

        y = max(y, ry) + 8
        canvas.rect(left, y, right, y + 1, fill=COLOR_RULE)
        return y + INSET

    def _draw_items(self, canvas: _Canvas, order: Order, left: float, right: float, top: float) -> float:
        table_w = right - left
        edges = [left]
        for _, share, _ in ITEM_COLUMNS:
            edges.append(edges[-1] + table_w * share)

        def anchor(index: int, align: str) -> float:
            if align == "right":
                return edges[index + 1] - 8
            if align == "center":
                return (edges[index] + edges[index + 1]) / 2.0
            return edges[index] + 8

        y = top
        canvas.text(left, y, "RENTAL ITEMS", FONT_HEADING, COLOR_ACCENT, bold=True)
        y += LINE_H + 4

        header_h = LINE_H + ROW_PAD
        canvas.rect(left, y, right, y + header_h, fill=COLOR_ACCENT)
        for index, (label, _, align) in enumerate(ITEM_COLUMNS):
            canvas.text(anchor(index, align), y + ROW_PAD / 2, label, FONT_SMALL, COLOR_WHITE, bold=True, align=align)
        y += header_h

        name_w = edges[1] - edges[0] - 16
        for row, item in enumerate(order.items):
            name_lines = wrap_text(item.car_type, name_w, lambda text: canvas.measure(text, FONT_SMALL, True))
            row_h = len(name_lines) * LINE_H + ROW_PAD
            fill = COLOR_ROW_ALT if row % 2 else COLOR_WHITE
            canvas.rect(left, y, right, y + row_h, fill=fill, outline=COLOR_RULE)

            text_y = y + ROW_PAD / 2
            for offset, line in enumerate(name_lines):
                canvas.text(anchor(0, "left"), text_y + offset * LINE_H, line, FONT_SMALL, COLOR_TEXT, bold=True)
            cells = (
                str(item.quantity),
                str(item.days),
                fmt_money(item.daily_rate),
                fmt_money(item.subtotal),
            )
            for index, value in enumerate(cells, start=1):
                align = ITEM_COLUMNS[index][2]
                canvas.text(anchor(index, align), text_y, value, FONT_SMALL, COLOR_TEXT, align=align)
            y += row_h

        return y + INSET

    def _draw_total(self, canvas: _Canvas, order: Order, left: float, right: float, top: float) -> float:
        box_left = max(left, right - 360)
        box_h = 40
        canvas.rect(box_left, top, right, top + box_h, fill=COLOR_ACCENT)
        canvas.text(box_left + 12, top + 13, "TOTAL", FONT_HEADING + 2, COLOR_WHITE, bold=True)
        canvas.text(right - 12, top + 10, fmt_money(order_total(order.items)), FONT_TOTAL, COLOR_WHITE, bold=True, align="right")
        return top + box_h + INSET

    def _draw_block(
        self,
        canvas: _Canvas,
        heading: str,
        paragraphs: Tuple[str, ...],
        left: float,
        right: float,
        top: float,
    ) -> float:
        if not paragraphs:
            return top
        lines = []
        for paragraph in paragraphs:
            lines.extend(wrap_text(paragraph, right - left - 24, lambda text: canvas.measure(text, FONT_SMALL)))

        y = top
        canvas.text(left, y, heading, FONT_HEADING, COLOR_ACCENT, bold=True)
        y += LINE_H + 2
        canvas.rect(left, y, right, y + len(lines) * LINE_H + 12, fill=COLOR_ACCENT_SOFT)
        y += 6
        for line in lines:
            canvas.text(left + 12, y, line, FONT_SMALL, COLOR_MUTED)
            y += LINE_H
        return y + 6 + INSET
