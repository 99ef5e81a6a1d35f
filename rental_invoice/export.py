"""Invoice export: capture the document, paginate it and hand pages to a writer."""

from __future__ import annotations

import os
from contextlib import contextmanager
from typing import Dict, Iterator, Protocol

from .errors import EmptyOrder, ExportFailed, InvoiceTooLarge
from .formatting import invoice_filename
from .models import CaptureOptions, CaptureResult, ExportConfig, InvoiceDocument, Order
from .pagination import page_count, plan_pages


class Renderer(Protocol):
    def capture(self, document: InvoiceDocument, options: CaptureOptions) -> CaptureResult:
        ...


class DocumentWriter(Protocol):
    def new_document(self, page_width: float, page_height: float, unit: str) -> None:
        ...

    def add_page(self) -> None:
        ...

    def draw_image(self, data: bytes, x: float, y: float, width: float, height: float) -> None:
        ...

    def save(self, filename: str) -> None:
        ...


def capture_layout(capture_width: int) -> Dict[str, str]:
    """Style applied while capturing: off-screen, unscaled, fixed width."""
    return {
        "position": "absolute",
        "left": "-9999px",
        "top": "0",
        "width": f"{capture_width}px",
        "max-width": "none",
        "z-index": "-1",
        "transform": "scale(1)",
    }


@contextmanager
def prepared_region(document: InvoiceDocument, capture_width: int) -> Iterator[InvoiceDocument]:
    original = dict(document.style)
    document.style.update(capture_layout(capture_width))
    try:
        yield document
    finally:
        document.style.clear()
        document.style.update(original)


def require_items(order: Order) -> Order:
    if not order.items:
        raise EmptyOrder(f"Order {order.id} has no items to invoice.")
    return order


def check_page_limit(width: float, height: float, config: ExportConfig) -> None:
    if config.max_pages is None:
        return
    pages = page_count(width, height, config.page_width, config.page_height)
    if pages > config.max_pages:
        raise InvoiceTooLarge(pages, config.max_pages)


def capture_document(
    document: InvoiceDocument,
    renderer: Renderer,
    config: ExportConfig,
) -> CaptureResult:
    """Capture ``document``; renderers with a ``measure`` pass are checked against the page limit first."""
    options = config.capture_options
    with prepared_region(document, config.capture_width):
        measure = getattr(renderer, "measure", None)
        if measure is not None:
            try:
                width, height = measure(document, options)
            except Exception as exc:
                raise ExportFailed(f"Measuring the document failed: {exc}") from exc
            if width > 0 and height > 0:
                check_page_limit(width, height, config)

        try:
            capture = renderer.capture(document, options)
        except Exception as exc:
            raise ExportFailed(f"Raster capture failed: {exc}") from exc

    if not isinstance(capture, CaptureResult):
        raise ExportFailed(f"Raster capture returned {type(capture).__name__}, not an image.")
    if capture.width <= 0 or capture.height <= 0:
        raise ExportFailed(
            f"Raster capture returned an empty image ({capture.width}x{capture.height})."
        )
    return capture


def export_invoice(
    order: Order,
    document: InvoiceDocument,
    renderer: Renderer,
    writer: DocumentWriter,
    config: ExportConfig,
    output_dir: str = ".",
) -> str:
    """Export ``document`` as a paginated PDF and return the written path.

    Nothing is saved unless every page was drawn; the document's style is
    restored whether or not the capture succeeds.
    """
    capture = capture_document(document, renderer, config)

    check_page_limit(capture.width, capture.height, config)
    placements = plan_pages(capture.width, capture.height, config.page_width, config.page_height)

    path = os.path.join(output_dir, invoice_filename(order.id))
    try:
        writer.new_document(config.page_width, config.page_height, config.unit)
        for placement in placements:
            if placement.page_index > 0:
                writer.add_page()
            writer.draw_image(
                capture.image_data,
                0,
                placement.vertical_offset,
                config.page_width,
                placement.slice_height,
            )
        writer.save(path)
    except ExportFailed:
        raise
    except Exception as exc:
        raise ExportFailed(f"Writing {path} failed: {exc}") from exc
    return path
