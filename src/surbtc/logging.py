from __future__ import annotations

import logging
import logging.handlers
import os
from pathlib import Path
from typing import Iterable

REDACTED = "***"


class RedactSecretsFilter(logging.Filter):
    """Mask configured credentials in formatted log messages."""

    def __init__(self, secrets: Iterable[str]):
        super().__init__()
        # longest first so a secret containing another is masked whole
        self.secrets = sorted({s for s in secrets if s}, key=len, reverse=True)

    def filter(self, record: logging.LogRecord) -> bool:
        if not self.secrets:
            return True
        message = record.getMessage()
        redacted = message
        for secret in self.secrets:
            redacted = redacted.replace(secret, REDACTED)
        if redacted != message:
            record.msg = redacted
            record.args = None
        return True


def configure_logging(log_dir: Path | None = None, secrets: Iterable[str] = ()) -> None:
    """Configure console logging and, with ``log_dir``, a rotating log file.

    Any value in ``secrets`` (API key, API secret, proxy password) is masked
    in every record the handlers emit.
    """
    level_name = os.environ.get("SURBTC_LOG_LEVEL", "INFO").upper()
    level = getattr(logging, level_name, logging.INFO)

    formatter = logging.Formatter(
        "%(asctime)s %(levelname)s [%(name)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S"
    )
    redact = RedactSecretsFilter(secrets)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    handlers: list[logging.Handler] = [logging.StreamHandler()]

    # 10MB per file, 5 backups
    if log_dir:
        log_dir = Path(log_dir)
        log_dir.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.handlers.RotatingFileHandler(
            log_dir / "surbtc.log",
            maxBytes=10*1024*1024,
            backupCount=5
        ))

    for handler in handlers:
        handler.setLevel(level)
        handler.setFormatter(formatter)
        handler.addFilter(redact)
        root_logger.addHandler(handler)

    # aiohttp logs every connection at DEBUG
    logging.getLogger("aiohttp").setLevel(max(level, logging.INFO))
