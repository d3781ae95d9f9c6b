"""
Process-wide logging for the GoHive services.

Every service logs through the "gohive" logger. Records are stamped with
the service name, rendered in LOG_TIMEZONE and written both to the console
and to ``<LOG_DIR>/<service>-YYYY-MM-DD.log``.
"""

import datetime
import logging
import os
from pathlib import Path
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from .settings import settings

LOGGER_NAME = "gohive"
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(service)s %(name)s - %(message)s"

_configured_service: str | None = None


class ServiceNameFilter(logging.Filter):
    """Adds `record.service` so one format string works for every service."""

    def __init__(self, service_name: str) -> None:
        super().__init__()
        self.service_name = service_name

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "service"):
            record.service = self.service_name
        return True


class LocalTimezoneFormatter(logging.Formatter):
    """
    ISO-8601 timestamps in a fixed timezone; the host's local zone when the
    name is empty or unknown.
    """

    def __init__(self, *args, timezone_name: str | None = None, **kwargs):
        super().__init__(*args, **kwargs)
        self.tz = _zone(timezone_name)

    def formatTime(self, record: logging.LogRecord, datefmt: str | None = None) -> str:
        stamp = datetime.datetime.fromtimestamp(record.created, tz=self.tz)
        return stamp.strftime(datefmt) if datefmt else stamp.isoformat(timespec="milliseconds")


def _zone(timezone_name: str | None) -> datetime.tzinfo:
    if timezone_name:
        try:
            return ZoneInfo(timezone_name)
        except ZoneInfoNotFoundError:
            pass
    return datetime.datetime.now().astimezone().tzinfo or datetime.timezone.utc


class DailyFileHandler(logging.FileHandler):
    """
    File handler that switches to a new ``<service>-<date>.log`` at midnight
    and keeps the newest `backup_count` files of that service.
    """

    def __init__(
        self,
        log_dir: Path,
        service_name: str,
        backup_count: int = 7,
        encoding: str = "utf-8",
    ) -> None:
        self.log_dir = Path(log_dir)
        self.service_name = service_name
        self.backup_count = backup_count
        self.day = datetime.date.today()
        super().__init__(self.path_for(self.day), encoding=encoding, delay=True)

    def path_for(self, day: datetime.date) -> Path:
        return self.log_dir / f"{self.service_name}-{day.isoformat()}.log"

    def _open(self):
        self.log_dir.mkdir(parents=True, exist_ok=True)
        stream = super()._open()
        self._prune()
        return stream

    def _prune(self) -> None:
        if self.backup_count <= 0:
            return
        files = sorted(self.log_dir.glob(f"{self.service_name}-*.log"))
        for stale in files[: max(0, len(files) - self.backup_count)]:
            try:
                stale.unlink()
            except OSError:
                # Another process may still hold the file open.
                continue

    def emit(self, record: logging.LogRecord) -> None:
        today = datetime.date.today()
        if today != self.day and self.stream is not None:
            self.stream.close()
            self.stream = None
        if today != self.day:
            self.day = today
            self.baseFilename = os.path.abspath(self.path_for(today))
        super().emit(record)


def setup_logging(service_name: str = "gohive", *, log_to_file: bool = True) -> None:
    """
    Configure logging once per process for the named service.

    The file handler only receives "gohive.*" records; the console gets
    everything, uvicorn's loggers included.
    """
    global _configured_service
    if _configured_service is not None:
        return

    level = getattr(logging, str(settings.log_level).upper(), logging.INFO)
    formatter = LocalTimezoneFormatter(LOG_FORMAT, timezone_name=settings.log_timezone)
    service_filter = ServiceNameFilter(service_name)

    app_logger = logging.getLogger(LOGGER_NAME)
    app_logger.setLevel(level)
    if log_to_file:
        file_handler = DailyFileHandler(Path(settings.log_dir), service_name)
        file_handler.setFormatter(formatter)
        file_handler.addFilter(service_filter)
        app_logger.addHandler(file_handler)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    console = logging.StreamHandler()
    console.setFormatter(formatter)
    console.addFilter(service_filter)
    root_logger.addHandler(console)

    _configured_service = service_name


logger = logging.getLogger(LOGGER_NAME)
