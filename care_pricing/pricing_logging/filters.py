"""Log filters for patient PII masking and correlation ID injection."""

import logging
import re


class PIIFilter(logging.Filter):
    """Masks patient emails and phone numbers in log messages.

    Booking forms carry patient contact details. Indian mobile numbers are
    ten digits with an optional +91 prefix; the second pattern covers the
    3-3-4 grouping. Fares and distances are too short to match either.
    The message is rendered with its arguments before masking, so values
    passed as ``%s`` arguments are masked too.
    """

    EMAIL_PATTERN = re.compile(r"[a-zA-Z0-9_.+-]+@[a-zA-Z0-9-]+\.[a-zA-Z0-9-.]+")
    PHONE_PATTERN = re.compile(
        r"(?:\+91[-\s]?)?\b\d{5}[-\s]?\d{5}\b|\b\d{3}[-.\s]?\d{3}[-.\s]?\d{4}\b"
    )

    def mask(self, text: str) -> str:
        if "@" in text:
            text = self.EMAIL_PATTERN.sub("[EMAIL]", text)
        if any(c.isdigit() for c in text):
            text = self.PHONE_PATTERN.sub("[PHONE]", text)
        return text

    def filter(self, record: logging.LogRecord) -> bool:
        if not isinstance(record.msg, str):
            return True
        message = record.getMessage() if record.args else record.msg
        masked = self.mask(message)
        if masked != message or record.args:
            record.msg = masked
            record.args = None
        return True


class DefaultCorrelationFilter(logging.Filter):
    """Adds a placeholder correlation_id to records logged outside a booking."""

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "correlation_id"):
            record.correlation_id = "-"
        return True
