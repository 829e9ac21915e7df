"""
Structured logging for PolicyTree.

- Configurable level (DEBUG, INFO, WARN, ERROR)
- Writes to /logs/ directory (file handler)
- Console handler for development
- Helpers for domain registration and validation results
"""

import json
import logging
import os
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional, Sequence

# Default: project root / logs
LOG_DIR = Path(os.getenv("POLICYTREE_LOG_DIR", Path(__file__).resolve().parent.parent.parent / "logs"))
LOG_LEVEL = os.getenv("POLICYTREE_LOG_LEVEL", "INFO").upper()
LOG_TO_FILE = os.getenv("POLICYTREE_LOG_TO_FILE", "1").lower() in ("1", "true", "yes")


def configure_logging(
    level: str = LOG_LEVEL,
    log_dir: Optional[Path] = None,
    log_to_console: bool = True,
    log_to_file: bool = LOG_TO_FILE,
) -> None:
    """Configure root and policytree loggers. Call once at app startup."""
    level_value = getattr(logging, level.upper(), logging.INFO)

    root = logging.getLogger()
    root.setLevel(level_value)
    # Avoid duplicate handlers when reloading
    for h in list(root.handlers):
        root.removeHandler(h)

    if log_to_file:
        log_dir = Path(log_dir or LOG_DIR)
        log_dir.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_dir / "policytree.log", encoding="utf-8")
        file_handler.setLevel(level_value)
        file_handler.setFormatter(logging.Formatter("%(asctime)s | %(levelname)s | %(name)s | %(message)s"))
        root.addHandler(file_handler)
    if log_to_console:
        console = logging.StreamHandler(sys.stdout)
        console.setLevel(level_value)
        console.setFormatter(logging.Formatter("%(levelname)s | %(name)s | %(message)s"))
        root.addHandler(console)

    logging.getLogger("policytree").setLevel(level_value)


def _now() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


def log_domain_registered(logger: logging.Logger, name: str, field_count: int) -> None:
    payload = {
        "event": "domain_registered",
        "domain": name,
        "field_count": field_count,
        "ts": _now(),
    }
    logger.info("Domain: %s", json.dumps(payload, default=str))


def log_validation_result(
    logger: logging.Logger,
    domain: Optional[str],
    errors: Sequence[Any],
    duration_sec: Optional[float] = None,
    extra: Optional[dict[str, Any]] = None,
) -> None:
    """Log a validation run: WARNING with error codes when invalid, INFO otherwise."""
    codes = sorted({getattr(e, "code", str(e)) for e in errors})
    payload = {
        "event": "validation",
        "domain": domain,
        "error_count": len(errors),
        "error_codes": codes,
        "duration_sec": duration_sec,
        "ts": _now(),
    }
    if extra:
        payload.update(extra)
    level = logging.WARNING if errors else logging.INFO
    logger.log(level, "Validation: %s", json.dumps(payload, default=str))
