"""Logging configuration for cert-issuer-service.

Two output modes, selected by LOG_JSON:

  _ContainerFormatter: human-readable, single-line, for local dev.
    Lifecycle context is appended as ``key=value`` pairs; WARNING and
    above also carry [filename:lineno] so a rejected call points at the
    guard that refused it.

  _JsonFormatter: one JSON object per line for log aggregation.

Context fields, set through ``extra=`` or the request-context filter,
and emitted whenever present:

  request_id        X-Request-ID of the HTTP request being handled
  method, path      HTTP request line
  status_code       response status (request completion lines)
  duration_ms       request wall time (request completion lines)
  caller_id         token subject on access-denied lines
  operation         lifecycle operation: issue, renew, revoke, expire,
                    pause, set_requirements, add_verifier, ...
  certification_id  derived record id the operation touched
  error_code        numeric CertificationError code on rejected calls

An auditor can therefore filter "every revoke against cert_ab12..."
with a field match instead of a regex.  Metrics live in
certissuer/core/metrics.py.
"""

from __future__ import annotations

import json
import logging
import sys

# Order is the order they appear in output.
CONTEXT_FIELDS = (
    "request_id",
    "method",
    "path",
    "caller_id",
    "status_code",
    "duration_ms",
    "operation",
    "certification_id",
    "error_code",
)

# Fields worth repeating in text mode; the HTTP ones are already in the
# completion message itself.
_TEXT_FIELDS = ("operation", "certification_id", "caller_id", "error_code")


def _context(record: logging.LogRecord, fields: tuple[str, ...]) -> dict[str, object]:
    context: dict[str, object] = {}
    for key in fields:
        value = getattr(record, key, None)
        if value is not None and value != "-":
            context[key] = value
    return context


class _ContainerFormatter(logging.Formatter):
    """Single-line formatter for container stdout.

    ``2026-01-01T12:00:00.123+0000 INFO     certissuer.services.certification_ledger
    Issued certification ...  operation=issue certification_id=cert_...``
    """

    _BASE_FMT = "%(asctime)s %(levelname)-8s %(name)s  %(message)s"
    _LOC_SUFFIX = "  [%(filename)s:%(lineno)d]"

    def __init__(self) -> None:
        super().__init__(datefmt="%Y-%m-%dT%H:%M:%S%z")

    def formatTime(self, record: logging.LogRecord, datefmt: str | None = None) -> str:
        base = super().formatTime(record, datefmt)
        # Insert .NNN before the timezone offset (last 5 chars: +0000)
        return f"{base[:-5]}.{int(record.msecs):03d}{base[-5:]}"

    def format(self, record: logging.LogRecord) -> str:
        fmt = self._BASE_FMT
        context = _context(record, _TEXT_FIELDS)
        if context:
            pairs = " ".join(f"{k}={v}" for k, v in context.items())
            # Escape % so the pairs survive %-style formatting.
            fmt += "  " + pairs.replace("%", "%%")
        if record.levelno >= logging.WARNING:
            fmt += self._LOC_SUFFIX
        self._style._fmt = fmt
        return super().format(record)


class _JsonFormatter(logging.Formatter):
    """JSON Lines formatter for machine-parseable log output."""

    def __init__(self) -> None:
        super().__init__(datefmt="%Y-%m-%dT%H:%M:%S%z")

    def format(self, record: logging.LogRecord) -> str:
        log_entry: dict[str, object] = {
            "timestamp": self.formatTime(record),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        log_entry.update(_context(record, CONTEXT_FIELDS))

        if record.exc_info and record.exc_info[0] is not None:
            log_entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_entry, default=str)


_NOISY_LOGGERS = (
    "uvicorn",
    "uvicorn.access",
    "uvicorn.error",
    "httpcore",
    "httpx",
    "sqlalchemy.engine",
)


def setup_logging(level_name: str, *, json_format: bool = False) -> None:
    """Configure the root logger: one stdout handler, text or JSON.

    Third-party loggers are held at WARNING or above so SQL echo and
    access logs do not drown the lifecycle audit lines.
    """
    level = getattr(logging, level_name.upper(), logging.INFO)

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(_JsonFormatter() if json_format else _ContainerFormatter())

    root = logging.getLogger()
    root.setLevel(level)
    root.handlers.clear()
    root.addHandler(handler)

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))
