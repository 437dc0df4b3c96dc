"""
Paths, logging setup, config load (config.json + environment), safe_print.
"""

import os
import json
import sys
import logging
from pathlib import Path

from dotenv import find_dotenv, load_dotenv

from .constants import (
    DEFAULT_API_URL, FLUSH_INTERVAL_SEC, SPOOL_FILENAME, LOG_MAX_BYTES,
)


class ConfigError(Exception):
    """Required configuration is missing or invalid. Fatal at startup."""


# ─── Paths ───────────────────────────────────────────────────────
# One config/spool per user per machine.

def base_dir():
    return Path(os.environ.get("SAGITTARIUS_HOME", Path.home() / ".sagittarius"))


def config_file():
    return base_dir() / "config.json"


# ─── Safe print (no crash without a console) ─────────────────────

def safe_print(*args, **kwargs):
    try:
        print(*args, **kwargs)
    except Exception:
        pass


# ─── Logging ─────────────────────────────────────────────────────

log = logging.getLogger("sagittarius.agent")


def setup_logging(log_file=None, level=logging.INFO):
    """File + console logging. Truncates the log file once it passes 1 MB."""
    log_file = Path(log_file) if log_file else base_dir() / "agent.log"
    log_file.parent.mkdir(parents=True, exist_ok=True)
    try:
        if log_file.exists() and log_file.stat().st_size > LOG_MAX_BYTES:
            log_file.write_text("")
    except OSError:
        pass

    formatter = logging.Formatter("%(asctime)s [%(levelname)s] %(message)s",
                                  datefmt="%Y-%m-%d %H:%M:%S")

    file_handler = logging.FileHandler(str(log_file), encoding="utf-8")
    file_handler.setFormatter(formatter)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)

    root = logging.getLogger("sagittarius")
    root.setLevel(level)
    root.handlers[:] = [file_handler, console_handler]
    return log


# ─── Config Management ──────────────────────────────────────────

def _read_config_file(path):
    if not path.exists():
        return {}
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (json.JSONDecodeError, OSError) as e:
        log.warning("Ignoring unreadable config %s: %s", path, e)
        return {}
    if not isinstance(data, dict):
        log.warning("Ignoring config %s: expected a JSON object", path)
        return {}
    return data


def load_config(path=None, environ=None):
    """
    Build the agent config dict. config.json values first, then
    environment overrides (API_URL, API_SECRET, FLUSH_INTERVAL_SEC, SPOOL_FILE).
    A .env file in the working directory fills in unset variables.
    Raises ConfigError when the API secret is missing.
    """
    if environ is None:
        load_dotenv(find_dotenv(usecwd=True))
        environ = os.environ
    config = _read_config_file(Path(path) if path else config_file())

    if environ.get("API_URL"):
        config["apiUrl"] = environ["API_URL"]
    if environ.get("API_SECRET"):
        config["apiSecret"] = environ["API_SECRET"]
    if environ.get("FLUSH_INTERVAL_SEC"):
        config["flushIntervalSec"] = environ["FLUSH_INTERVAL_SEC"]
    if environ.get("SPOOL_FILE"):
        config["spoolFile"] = environ["SPOOL_FILE"]

    if not config.get("apiUrl"):
        log.warning("API_URL not set, using default %s", DEFAULT_API_URL)
        config["apiUrl"] = DEFAULT_API_URL

    if not config.get("apiSecret"):
        raise ConfigError("API_SECRET is required (environment or config.json)")

    try:
        interval = float(config.get("flushIntervalSec", FLUSH_INTERVAL_SEC))
    except (TypeError, ValueError):
        raise ConfigError(f"Invalid flush interval: {config.get('flushIntervalSec')!r}")
    if interval <= 0:
        raise ConfigError(f"Flush interval must be positive, got {interval}")
    config["flushIntervalSec"] = interval

    config["spoolFile"] = str(config.get("spoolFile") or base_dir() / SPOOL_FILENAME)
    return config
