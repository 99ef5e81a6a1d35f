"""fpdf-backed document writer used by the export pipeline."""

from __future__ import annotations

import io
import os
import tempfile
from typing import Optional

from fpdf import FPDF  # type: ignore


class FpdfDocumentWriter:
    def __init__(self) -> None:
        self.pdf: Optional[FPDF] = None

    def _require_document(self) -> FPDF:
        if self.pdf is None:
            raise RuntimeError("new_document() must be called before drawing.")
        return self.pdf

    def new_document(self, page_width: float, page_height: float, unit: str) -> None:
        self.pdf = FPDF(orientation="P", unit=unit, format=(page_width, page_height))
        self.pdf.set_auto_page_break(False)
        self.pdf.set_compression(True)
        self.pdf.add_page()

    def add_page(self) -> None:
        self._require_document().add_page()

    def draw_image(self, data: bytes, x: float, y: float, width: float, height: float) -> None:
        # Anything drawn outside the page box is clipped by the viewer.
        self._require_document().image(io.BytesIO(data), x=x, y=y, w=width, h=height)

    def to_bytes(self) -> bytes:
        return bytes(self._require_document().output())

    def save(self, filename: str) -> None:
        """Write atomically: the target only ever appears complete."""
        blob = self.to_bytes()
        directory = os.path.dirname(os.path.abspath(filename))
        fd, tmp_path = tempfile.mkstemp(prefix=".invoice-", suffix=".pdf.tmp", dir=directory)
        try:
            with os.fdopen(fd, "wb") as handle:
                handle.write(blob)
            os.replace(tmp_path, filename)
        except BaseException:
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise
