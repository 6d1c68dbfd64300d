"""
Structured logging for the API process and the Celery workers.

JSON lines in production, plain text for local development. Both processes
call ``setup_logging`` with the same settings, so API and worker output can
be collected and filtered together by ``service`` and ``process``.
"""

import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict

from pythonjsonlogger import jsonlogger

# Third-party loggers that are too chatty at INFO
QUIET_LOGGERS = {
    "sqlalchemy.engine": logging.WARNING,
    "kombu": logging.WARNING,
    "amqp": logging.WARNING,
    "multipart": logging.WARNING,
    "celery": logging.INFO,
}


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    """
    Adds service, process role and source location to every record.
    """

    def __init__(self, *args, service: str = "perfeval", process_role: str = "api", **kwargs):
        super().__init__(*args, **kwargs)
        self.service = service
        self.process_role = process_role

    def add_fields(self, log_record: Dict[str, Any], record: logging.LogRecord, message_dict: Dict[str, Any]) -> None:
        super().add_fields(log_record, record, message_dict)

        log_record['timestamp'] = datetime.now(timezone.utc).isoformat().replace('+00:00', 'Z')
        log_record['level'] = record.levelname
        log_record['logger'] = record.name
        log_record['service'] = self.service
        log_record['process'] = self.process_role

        if record.levelno >= logging.WARNING:
            log_record['function'] = record.funcName
            log_record['line'] = record.lineno
            log_record['pathname'] = record.pathname


def setup_logging(log_level: str = "INFO", json_logs: bool = True,
                  service: str = "perfeval", process_role: str = "api") -> None:
    """
    Replace the root handlers with a single stdout handler.

    Args:
        log_level: DEBUG, INFO, WARNING, ERROR or CRITICAL
        json_logs: JSON lines (production) or human-readable text
        service: Value of the ``service`` field in JSON logs
        process_role: "api" or "worker"
    """
    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler(sys.stdout)

    if json_logs:
        formatter = CustomJsonFormatter(
            '%(timestamp)s %(level)s %(logger)s %(message)s',
            service=service,
            process_role=process_role,
        )
    else:
        formatter = logging.Formatter(
            f'%(asctime)s - {process_role} - %(name)s - %(levelname)s - %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )

    console_handler.setFormatter(formatter)

    root_logger.setLevel(getattr(logging, log_level.upper()))
    root_logger.addHandler(console_handler)

    for name, level in QUIET_LOGGERS.items():
        logging.getLogger(name).setLevel(level)
