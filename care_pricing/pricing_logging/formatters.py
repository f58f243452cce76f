"""Log formatters: JSON lines for shipped logs, one readable line for a terminal."""

import json
import logging
from datetime import UTC, datetime

SERVICE_NAME = "care-pricing"

# Record attributes set by log_booking_context / log_context or extra={}
CONTEXT_FIELDS = (
    "session_id",
    "service_kind",
    "price_rule",
    "correlation_id",
)


def _context_of(record: logging.LogRecord) -> dict[str, object]:
    return {field: getattr(record, field) for field in CONTEXT_FIELDS if hasattr(record, field)}


class JSONFormatter(logging.Formatter):
    """One JSON object per record, with any booking context attached."""

    def __init__(self, environment: str = "development", service_name: str = SERVICE_NAME):
        super().__init__()
        self.environment = environment
        self.service_name = service_name

    def format(self, record: logging.LogRecord) -> str:
        log_data: dict[str, object] = {
            "timestamp": datetime.fromtimestamp(record.created, UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "service_name": self.service_name,
            "env": self.environment,
            **_context_of(record),
        }

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        # Prices arrive as Decimal/float from the backend lists
        return json.dumps(log_data, default=str)


class DevFormatter(logging.Formatter):
    """Readable single line, suffixed with the booking session when there is one."""

    def __init__(self) -> None:
        super().__init__(
            fmt="%(asctime)s [%(levelname)8s] %(name)s: %(message)s",
            datefmt="%H:%M:%S",
        )

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        session_id = getattr(record, "session_id", None)
        if session_id is None:
            return line
        first, newline, rest = line.partition("\n")
        return f"{first} [session={session_id}]{newline}{rest}"
