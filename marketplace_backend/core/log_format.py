# core/log_format.py

"""
KEY=VALUE LOG FORMATTER

Services log a constant message plus structured context:

    logger.info("Payment verified", extra={"payment_id": ..., "order_id": ...})

This formatter appends every `extra` attribute to the line so the context
survives plain-text log shipping:

    2026-01-01 10:00:00 INFO payments.services.verification Payment verified order_id=... payment_id=...
"""

from __future__ import annotations

import logging

# Attributes every LogRecord carries; anything else came in through `extra`.
_RESERVED = frozenset(vars(logging.LogRecord("", 0, "", 0, "", (), None))) | {"message", "asctime"}


def _render(value) -> str:
    text = str(value)
    if not text or any(ch.isspace() for ch in text) or "=" in text:
        return '"' + text.replace('"', '\\"') + '"'
    return text


class KeyValueFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        context = {k: v for k, v in vars(record).items() if k not in _RESERVED and not k.startswith("_")}
        if not context:
            return line

        pairs = " ".join(f"{key}={_render(context[key])}" for key in sorted(context))
        head, sep, tail = line.partition("\n")
        return f"{head} {pairs}{sep}{tail}"
