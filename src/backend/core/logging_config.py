"""
Logging configuration for the Maintenance Desk application.

File handlers sit behind a QueueHandler; a QueueListener thread does the
file I/O so log writes never block the event loop. Every record carries
the request's correlation ID (or "-" outside a request).
"""

import atexit
import logging
import logging.handlers
import queue
import sys
from pathlib import Path
from typing import Optional

from pydantic import BaseModel

_queue_listener: Optional[logging.handlers.QueueListener] = None


class LogConfig(BaseModel):
    """Logging configuration settings."""

    level: str = "INFO"
    date_format: str = "%Y-%m-%d %H:%M:%S"
    enable_file_logging: bool = True
    log_dir: str = "logs"
    max_file_size: int = 10 * 1024 * 1024  # 10MB
    backup_count: int = 5
    enable_console: bool = True


class CorrelationIdFilter(logging.Filter):
    """Stamp records with the correlation ID of the request being served."""

    def filter(self, record: logging.LogRecord) -> bool:
        # Imported lazily: the middleware package pulls in starlette
        from core.middleware.correlation import get_correlation_id

        record.correlation_id = get_correlation_id() or "-"
        return True


class ColoredFormatter(logging.Formatter):
    """Custom formatter with colors for console output."""

    grey = "\x1b[38;21m"
    yellow = "\x1b[33;21m"
    red = "\x1b[31;21m"
    bold_red = "\x1b[31;1m"
    blue = "\x1b[34;21m"
    reset = "\x1b[0m"

    COLORS = {
        logging.DEBUG: grey,
        logging.INFO: blue,
        logging.WARNING: yellow,
        logging.ERROR: red,
        logging.CRITICAL: bold_red,
    }

    def format(self, record):
        # Work on a copy so file handlers see the plain level name
        record = logging.makeLogRecord(record.__dict__)
        color = self.COLORS.get(record.levelno, self.grey)
        record.levelname = f"{color}{record.levelname}{self.reset}"
        return f"{super().format(record)}{self.reset}"


def _rotating_handler(config: LogConfig, filename: str, level: int) -> logging.Handler:
    handler = logging.handlers.RotatingFileHandler(
        Path(config.log_dir) / filename,
        maxBytes=config.max_file_size,
        backupCount=config.backup_count,
        encoding="utf-8",
    )
    handler.setLevel(level)
    handler.setFormatter(
        logging.Formatter(
            fmt="%(asctime)s | %(name)s | %(levelname)s | %(correlation_id)s | "
            "%(funcName)s:%(lineno)d | %(message)s",
            datefmt=config.date_format,
        )
    )
    return handler


def setup_logging(config: Optional[LogConfig] = None) -> None:
    """Configure the root logger: colored console plus queued rotating files."""
    global _queue_listener

    if config is None:
        config = LogConfig()

    if _queue_listener:
        _queue_listener.stop()
        _queue_listener = None

    level = getattr(logging, config.level.upper(), logging.INFO)
    correlation_filter = CorrelationIdFilter()

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers.clear()

    if config.enable_console:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(level)
        console_handler.addFilter(correlation_filter)
        console_handler.setFormatter(
            ColoredFormatter(
                fmt="%(asctime)s | %(name)s | %(levelname)s | %(correlation_id)s | %(message)s",
                datefmt=config.date_format,
            )
        )
        root_logger.addHandler(console_handler)

    if config.enable_file_logging:
        Path(config.log_dir).mkdir(parents=True, exist_ok=True)

        app_handler = _rotating_handler(config, "app.log", level)

        # Ticket lifecycle events get their own audit-style file
        ticket_handler = _rotating_handler(config, "tickets.log", level)
        ticket_handler.addFilter(logging.Filter("tickets"))

        log_queue = queue.Queue(-1)
        queue_handler = logging.handlers.QueueHandler(log_queue)
        # Filter before enqueueing: the listener thread has no request context
        queue_handler.addFilter(correlation_filter)
        root_logger.addHandler(queue_handler)

        _queue_listener = logging.handlers.QueueListener(
            log_queue,
            app_handler,
            ticket_handler,
            respect_handler_level=True,
        )
        _queue_listener.start()
        atexit.register(stop_queue_listener)

    from .config import settings

    logging.getLogger("sqlalchemy.engine").setLevel(
        level if settings.database.echo else logging.WARNING
    )


def stop_queue_listener() -> None:
    """Stop the queue listener, flushing pending records."""
    global _queue_listener

    if _queue_listener:
        _queue_listener.stop()
        _queue_listener = None


class TicketLogger:
    """Structured logger for maintenance ticket lifecycle events."""

    def __init__(self, name: str = "lifecycle"):
        self.logger = logging.getLogger(f"tickets.{name}")

    def ticket_created(
        self, request_id: int, resident_id: int, category: str, priority: str
    ) -> None:
        self.logger.info(
            f"Ticket created | Request ID: {request_id} | Resident ID: {resident_id} | "
            f"Category: {category} | Priority: {priority}"
        )

    def ticket_assigned(
        self,
        request_id: int,
        technician_id: int,
        previous_technician_id: Optional[int] = None,
    ) -> None:
        if previous_technician_id and previous_technician_id != technician_id:
            self.logger.info(
                f"Ticket reassigned | Request ID: {request_id} | "
                f"From technician: {previous_technician_id} | To technician: {technician_id}"
            )
        else:
            self.logger.info(
                f"Ticket assigned | Request ID: {request_id} | Technician ID: {technician_id}"
            )

    def status_changed(
        self, request_id: int, old_status: str, new_status: str, actor_id: int
    ) -> None:
        self.logger.info(
            f"Status changed | Request ID: {request_id} | {old_status} -> {new_status} | "
            f"By user: {actor_id}"
        )

    def transition_rejected(self, request_id: int, status: str, reason: str) -> None:
        self.logger.warning(
            f"Transition rejected | Request ID: {request_id} | Status: {status} | "
            f"Reason: {reason}"
        )


class AuthLogger:
    """Structured logger for registration and login events."""

    def __init__(self, name: str = "auth"):
        self.logger = logging.getLogger(f"auth.{name}")

    def user_registered(self, user_id: int, email: str, role: str) -> None:
        self.logger.info(
            f"User registered | User ID: {user_id} | Email: {email} | Role: {role}"
        )

    def login_succeeded(self, user_id: int, email: str) -> None:
        self.logger.info(f"Login succeeded | User ID: {user_id} | Email: {email}")

    def login_failed(self, email: str, client_ip: Optional[str] = None) -> None:
        # Never log which half of the credentials was wrong
        self.logger.warning(
            f"Login failed | Email: {email} | IP: {client_ip or 'unknown'}"
        )
