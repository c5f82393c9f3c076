"""Logging Hardening and Redaction.

This module provides filters to keep secret material (ciphertext, ivs and
above all decryption keys carried in URL fragments) out of application logs.
"""
import logging
import re

B64 = r"[A-Za-z0-9+/=_%-]+"

SECRET_PATTERNS = [
    (re.compile(r'("(?:ciphertext|iv|key)":\s*")' + B64 + r'(")'), r'\1[REDACTED]\2'),
    (re.compile(r"('(?:ciphertext|iv|key)':\s*')" + B64 + r"(')"), r'\1[REDACTED]\2'),
    # Keyword-based assignments
    (re.compile(r'\b(ciphertext|iv|key)=' + B64), r'\1=[REDACTED]'),
    # Share links: everything after '#' is the key
    (re.compile(r'(https?://\S+?)#' + B64), r'\1#[REDACTED]'),
]


def redact(text: str) -> str:
    for pattern, replacement in SECRET_PATTERNS:
        text = pattern.sub(replacement, text)
    return text


class SecretRedactionFilter(logging.Filter):
    """Filter that redacts secret-like patterns from log records."""

    def filter(self, record: logging.LogRecord) -> bool:
        if isinstance(record.msg, str):
            record.msg = redact(record.msg)

        # Also redact arguments if they are strings
        if isinstance(record.args, tuple):
            record.args = tuple(redact(arg) if isinstance(arg, str) else arg for arg in record.args)
        elif isinstance(record.args, dict):
            record.args = {k: redact(v) if isinstance(v, str) else v for k, v in record.args.items()}

        return True


def setup_logging_redaction() -> None:
    """Apply the SecretRedactionFilter to the root logger and every known logger."""
    redact_filter = SecretRedactionFilter()

    loggers = [logging.getLogger()]
    loggers += [logging.getLogger(name) for name in list(logging.root.manager.loggerDict)]

    for logger in loggers:
        # Remove existing filters if any (to avoid duplicates)
        for f in logger.filters[:]:
            if isinstance(f, SecretRedactionFilter):
                logger.removeFilter(f)
        logger.addFilter(redact_filter)

    # Filters on loggers do not see records from child loggers, so the
    # root handlers get one as well.
    for handler in logging.getLogger().handlers:
        if not any(isinstance(f, SecretRedactionFilter) for f in handler.filters):
            handler.addFilter(redact_filter)

    logging.getLogger(__name__).info("Logging redaction filters active.")
