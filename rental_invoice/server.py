"""HTTP server entrypoints for order totals, monthly reports and invoice export."""

from __future__ import annotations

import errno
import json
import os
import sys
import tempfile
import threading
import traceback
from decimal import Decimal
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from typing import Any, Dict, List, Optional, Tuple

from .config import (
    EXPORT_QUEUE_TIMEOUT_MS,
    LISTEN_BACKLOG,
    MAX_BODY_BYTES as MAX_BODY_BYTES_CONFIG,
    MAX_INFLIGHT_EXPORTS,
    business_info,
    default_export_config,
)
from .errors import EmptyOrder, InvalidInput, InvoiceTooLarge
from .export import export_invoice, require_items
from .models import InvoiceDocument, MonthlyReportRow, Order, parse_date, parse_line_item, parse_order
from .reports import summarize_monthly
from .totals import order_total, recalculate

EXPORT_INFLIGHT_SEMAPHORE = threading.BoundedSemaphore(MAX_INFLIGHT_EXPORTS)
ValidationError = Tuple[int, Dict[str, Any]]

DISCONNECT_ERRNOS = {errno.EPIPE, errno.ECONNRESET, errno.ETIMEDOUT}


class DependencyError(RuntimeError):
    """Raised when a required runtime dependency is missing."""


def is_client_disconnect(exc: BaseException) -> bool:
    if isinstance(exc, (BrokenPipeError, ConnectionResetError, TimeoutError)):
        return True
    return isinstance(exc, OSError) and exc.errno in DISCONNECT_ERRNOS


def load_export_backend():
    """Import the Pillow renderer and fpdf writer, turning a missing package into DependencyError."""
    try:
        from .raster import InvoiceImageRenderer
        from .writer import FpdfDocumentWriter
    except ModuleNotFoundError as exc:
        if exc.name in ("fpdf", "PIL"):
            raise DependencyError(
                f"Missing dependency '{exc.name}'. Install project dependencies with "
                "'pip install -e .'."
            ) from exc
        raise
    return InvoiceImageRenderer, FpdfDocumentWriter


def money(value: Decimal) -> str:
    return f"{value:.2f}"


def decode_json_object(body: bytes) -> Tuple[Optional[Dict[str, Any]], Optional[ValidationError]]:
    try:
        payload = json.loads(body.decode("utf-8"))
    except UnicodeDecodeError:
        return None, (
            400,
            {"error": "invalid_encoding", "detail": "Body must be UTF-8 encoded JSON."},
        )
    except json.JSONDecodeError as exc:
        return None, (
            400,
            {
                "error": "invalid_json",
                "detail": f"{exc.msg} (line {exc.lineno}, column {exc.colno})",
            },
        )

    if not isinstance(payload, dict):
        return None, (
            400,
            {"error": "invalid_payload", "detail": "JSON root must be an object."},
        )
    return payload, None


def invalid(exc: InvalidInput) -> ValidationError:
    return 400, {"error": "invalid_payload", "detail": str(exc)}


def validate_order_payload(body: bytes) -> Tuple[Optional[Order], Optional[ValidationError]]:
    payload, error = decode_json_object(body)
    if error is not None:
        return None, error
    try:
        return parse_order(payload), None
    except InvalidInput as exc:
        return None, invalid(exc)


def handle_order_total(payload: Dict[str, Any]) -> Dict[str, Any]:
    raw_items = payload.get("items", [])
    if raw_items is None:
        raw_items = []
    if not isinstance(raw_items, list):
        raise InvalidInput("'items' must be an array.")
    items = [parse_line_item(item) for item in raw_items]
    return {
        "items": [
            {
                "id": item.id,
                "car_type": item.car_type,
                "quantity": item.quantity,
                "daily_rate": money(item.daily_rate),
                "days": item.days,
                "subtotal": money(item.subtotal),
            }
            for item in items
        ],
        "total_amount": money(order_total(items)),
    }


def report_row_json(row: MonthlyReportRow) -> Dict[str, Any]:
    return {
        "year": row.year,
        "month": row.month,
        "order_count": row.order_count,
        "total_revenue": money(row.total_revenue),
    }


def handle_monthly_report(payload: Dict[str, Any]) -> Dict[str, Any]:
    raw_orders = payload.get("orders", [])
    if not isinstance(raw_orders, list):
        raise InvalidInput("'orders' must be an array.")
    orders: List[Order] = [parse_order(order) for order in raw_orders]
    start = parse_date(payload["start"], "start") if payload.get("start") else None
    end = parse_date(payload["end"], "end") if payload.get("end") else None
    dense = payload.get("dense", False)
    if not isinstance(dense, bool):
        raise InvalidInput("'dense' must be a boolean.")
    rows = summarize_monthly(orders, start=start, end=end, dense=dense)
    return {"rows": [report_row_json(row) for row in rows]}


def export_order_pdf(order: Order) -> Tuple[str, bytes]:
    """Export ``order`` through the default backend; returns (filename, pdf bytes)."""
    order = recalculate(require_items(order))
    renderer_cls, writer_cls = load_export_backend()
    with tempfile.TemporaryDirectory(prefix="rental-invoice-") as output_dir:
        path = export_invoice(
            order,
            InvoiceDocument(order=order),
            renderer_cls(business_info()),
            writer_cls(),
            default_export_config(),
            output_dir=output_dir,
        )
        with open(path, "rb") as handle:
            return os.path.basename(path), handle.read()


class InvoiceHandler(BaseHTTPRequestHandler):
    MAX_BODY_BYTES = MAX_BODY_BYTES_CONFIG

    def _write_response(
        self,
        status: int,
        content_type: str,
        body: bytes,
        headers: Optional[Dict[str, str]] = None,
    ) -> bool:
        try:
            self.send_response(status)
            self.send_header("Content-Type", content_type)
            self.send_header("Content-Length", str(len(body)))
            for name, value in (headers or {}).items():
                self.send_header(name, value)
            self.end_headers()
            self.wfile.write(body)
            return True
        except Exception as exc:
            if is_client_disconnect(exc):
                return False
            raise

    def _send_json(self, status: int, payload: Dict[str, Any]) -> bool:
        body = json.dumps(payload).encode("utf-8")
        return self._write_response(status, "application/json", body)

    def _read_body(self) -> Optional[bytes]:
        header = self.headers.get("Content-Length")
        if header is None:
            self._send_json(
                411,
                {
                    "error": "missing_content_length",
                    "detail": "Content-Length header is required.",
                },
            )
            return None

        try:
            content_length = int(header)
        except ValueError:
            self._send_json(
                400,
                {"error": "invalid_content_length", "detail": "Content-Length must be an integer."},
            )
            return None

        if content_length <= 0:
            self._send_json(400, {"error": "empty_body", "detail": "Request body cannot be empty."})
            return None

        if content_length > self.MAX_BODY_BYTES:
            self._send_json(
                413,
                {"error": "payload_too_large", "detail": f"Body exceeds {self.MAX_BODY_BYTES} bytes."},
            )
            return None

        try:
            return self.rfile.read(content_length)
        except Exception as exc:
            if is_client_disconnect(exc):
                return None
            raise

    def _handle_json(self, body: bytes, handler) -> None:
        payload, error = decode_json_object(body)
        if error is not None:
            self._send_json(*error)
            return
        try:
            result = handler(payload)
        except InvalidInput as exc:
            self._send_json(*invalid(exc))
            return
        self._send_json(200, result)

    def _handle_invoice(self, body: bytes) -> None:
        order, error = validate_order_payload(body)
        if error is not None:
            self._send_json(*error)
            return

        acquired = EXPORT_INFLIGHT_SEMAPHORE.acquire(timeout=EXPORT_QUEUE_TIMEOUT_MS / 1000.0)
        if not acquired:
            self._send_json(
                503,
                {
                    "error": "server_busy",
                    "detail": "Export queue is full; retry shortly.",
                    "retry_after_ms": EXPORT_QUEUE_TIMEOUT_MS,
                    "max_inflight_exports": MAX_INFLIGHT_EXPORTS,
                },
            )
            return

        try:
            filename, pdf_bytes = export_order_pdf(order)
        except EmptyOrder as exc:
            self._send_json(422, {"error": "empty_order", "detail": str(exc)})
            return
        except InvoiceTooLarge as exc:
            self._send_json(
                413,
                {"error": "invoice_too_large", "detail": str(exc), "max_pages": exc.max_pages},
            )
            return
        except Exception as exc:
            traceback.print_exc(file=sys.stderr)
            self._send_json(500, {"error": "export_failed", "detail": str(exc)})
            return
        finally:
            EXPORT_INFLIGHT_SEMAPHORE.release()

        self._write_response(
            200,
            "application/pdf",
            pdf_bytes,
            headers={"Content-Disposition": f'attachment; filename="{filename}"'},
        )

    def do_POST(self) -> None:
        routes = {
            "/orders/total": lambda body: self._handle_json(body, handle_order_total),
            "/reports/monthly": lambda body: self._handle_json(body, handle_monthly_report),
            "/invoice": self._handle_invoice,
        }
        route = routes.get(self.path)
        if route is None:
            self._send_json(404, {"error": "not_found", "detail": "Unsupported endpoint."})
            return

        body = self._read_body()
        if body is None:
            return
        route(body)

    def do_GET(self) -> None:
        if self.path in ("/", "/health", "/healthz", "/ready"):
            self._send_json(200, {"status": "ok"})
            return
        self._send_json(404, {"error": "not_found", "detail": "Unsupported endpoint."})

    def handle_one_request(self) -> None:
        try:
            super().handle_one_request()
        except Exception as exc:
            if is_client_disconnect(exc):
                return
            raise

    def log_message(self, format: str, *args: Any) -> None:
        return


class InvoiceHTTPServer(ThreadingHTTPServer):
    daemon_threads = True
    allow_reuse_address = True
    request_queue_size = LISTEN_BACKLOG


def run(host: str = "0.0.0.0", port: int = 8080) -> None:
    load_export_backend()
    server = InvoiceHTTPServer((host, port), InvoiceHandler)
    print(f"Rental invoice server listening on http://{host}:{port}")
    server.serve_forever()
