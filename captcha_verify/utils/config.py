import logging
import math
import os
from pathlib import Path

from dotenv import dotenv_values, load_dotenv

_ORIGINAL_ENV = dict(os.environ)
_PACKAGE_DIR = Path(__file__).resolve().parents[1]
LOGGER = logging.getLogger(__name__)

DEFAULT_VERIFY_URL = "https://www.google.com/recaptcha/api/siteverify"
DEFAULT_HTTP_TIMEOUT = 10.0


def _load_env_files() -> None:
    """Apply the optional ``.env`` files; the process environment always wins."""

    base_env = _PACKAGE_DIR / ".env"
    if base_env.exists():
        load_dotenv(base_env, override=False)

    local_override = _PACKAGE_DIR / ".env.local"
    if local_override.exists():
        for key, value in dotenv_values(local_override).items():
            if value is None or key in _ORIGINAL_ENV:
                continue
            os.environ[key] = value


_load_env_files()


def _get_env(name: str, default: str | None = None) -> str | None:
    value = os.getenv(name, default)
    if isinstance(value, str):
        value = value.strip() or None
    return value


def _get_float_env(name: str, default: float) -> float:
    raw_value = _get_env(name)
    if raw_value is None:
        return default
    try:
        value = float(raw_value)
    except ValueError:
        value = 0.0
    if not math.isfinite(value) or value <= 0:
        LOGGER.warning(
            "invalid_float_env", extra={"env_name": name, "value": raw_value}
        )
        return default
    return value


class Config:
    CAPTCHA_VERIFY_URL = _get_env("CAPTCHA_VERIFY_URL") or DEFAULT_VERIFY_URL
    CAPTCHA_HTTP_TIMEOUT = _get_float_env("CAPTCHA_HTTP_TIMEOUT", DEFAULT_HTTP_TIMEOUT)
    CAPTCHA_VERIFY_LOG_LEVEL = (
        _get_env("CAPTCHA_VERIFY_LOG_LEVEL") or "INFO"
    ).upper()
