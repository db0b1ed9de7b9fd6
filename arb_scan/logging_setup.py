from __future__ import annotations

import logging

LOG_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"

# Per-request chatter from the venue HTTP clients.
_NOISY_LOGGERS = ("httpx", "httpcore")


def configure_logging(level: str) -> int:
    """Configure root logging for the scanner CLI and return the resolved level.

    Unknown level names fall back to INFO. The scanner's own ``arb_scan.*``
    loggers follow the root level; the HTTP client loggers stay at WARNING
    unless DEBUG is requested.
    """
    resolved = getattr(logging, str(level).strip().upper(), None)
    if not isinstance(resolved, int):
        resolved = logging.INFO
    logging.basicConfig(level=resolved, format=LOG_FORMAT)
    noisy_level = logging.DEBUG if resolved <= logging.DEBUG else logging.WARNING
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(noisy_level)
    return resolved
