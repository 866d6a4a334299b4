"""Structured log context carried explicitly through a session."""

from __future__ import annotations

import logging


class ContextLogger(logging.LoggerAdapter):
    """Logger adapter that appends its fields to every message as ``key=value``.

    Fields are also attached to the record (``record.context``) so handlers
    that emit structured output can read them without parsing the message.
    """

    def process(self, msg, kwargs):
        fields = " ".join(f"{key}={value}" for key, value in self.extra.items())
        extra = dict(kwargs.get("extra") or {})
        extra["context"] = dict(self.extra)
        kwargs["extra"] = extra
        if fields:
            msg = f"{msg} [{fields}]"
        return msg, kwargs

    def bind(self, **fields) -> ContextLogger:
        """Return a new adapter with ``fields`` added to this one's context."""
        return ContextLogger(self.logger, {**self.extra, **fields})


def context_logger(name: str, **fields) -> ContextLogger:
    return ContextLogger(logging.getLogger(name), fields)


CONSOLE_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_console_logging(level) -> logging.Handler:
    """Send log records to stderr for a management command.

    Django has already configured logging by the time a command runs, which
    leaves ``logging.basicConfig`` without effect. The console handler is
    attached to the root logger once per process.
    """
    root = logging.getLogger()
    for handler in root.handlers:
        if getattr(handler, "votebot_console", False):
            break
    else:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(CONSOLE_FORMAT))
        handler.votebot_console = True
        root.addHandler(handler)
    root.setLevel(level)
    return handler
