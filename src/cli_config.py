"""CLI configuration overrides for runtime tunables.

Applies, in increasing precedence, the YAML config file in the nvs home,
``NVS_*`` environment variables and CLI flags onto :class:`Constants`.
Invalid values are logged and ignored so a bad config never breaks the CLI.
"""

from __future__ import annotations

import logging
import os
from typing import Any, Dict, Optional

import yaml

from constants import Constants

logger = logging.getLogger(__name__)


def _positive_int(value: Any) -> int:
    number = int(value)
    if number <= 0:
        raise ValueError(f"expected a positive integer, got {value!r}")
    return number


def _url(value: Any) -> str:
    text = str(value).strip()
    if not text.startswith(("http://", "https://")):
        raise ValueError(f"expected an http(s) URL, got {value!r}")
    return text if text.endswith("/") else text + "/"


# YAML key -> (Constants attribute, converter)
_CONFIG_KEYS: Dict[str, tuple] = {
    "mirror": ("MIRROR_URL", _url),
    "workers": ("MAX_WORKERS", _positive_int),
    "request_timeout": ("REQUEST_TIMEOUT", _positive_int),
    "retries": ("HTTP_RETRY_MAX", _positive_int),
}

# Environment variable -> YAML key
_ENV_KEYS = {
    "NVS_MIRROR": "mirror",
    "NVS_WORKERS": "workers",
    "NVS_REQUEST_TIMEOUT": "request_timeout",
}


def _apply(key: str, value: Any, source: str) -> None:
    attr, convert = _CONFIG_KEYS[key]
    try:
        setattr(Constants, attr, convert(value))
    except (TypeError, ValueError) as exc:
        logger.warning("Ignoring invalid %s value for %s: %s", source, key, exc)


def load_config_file(path: str) -> Dict[str, Any]:
    """Load the YAML config file; missing or malformed files yield {}."""
    if not os.path.isfile(path):
        return {}
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as exc:
        logger.warning("Failed to load config %s: %s", path, exc)
        return {}
    if not isinstance(data, dict):
        logger.warning("Config %s is not a mapping; ignoring", path)
        return {}
    return data


def apply_home_override(args: Any = None, environ: Optional[Dict[str, str]] = None) -> None:
    """Resolve the nvs home first, since the config file lives inside it."""
    env = os.environ if environ is None else environ
    home = getattr(args, "HOME", None) or env.get("NVS_HOME")
    if home:
        Constants.NVS_HOME = os.path.abspath(os.path.expanduser(home))


def apply_overrides(args: Any = None, environ: Optional[Dict[str, str]] = None) -> None:
    """Apply config file, environment and CLI overrides onto Constants."""
    env = os.environ if environ is None else environ
    apply_home_override(args, env)

    config_path = os.path.join(Constants.NVS_HOME, Constants.CONFIG_FILE)
    for key, value in load_config_file(config_path).items():
        if key in _CONFIG_KEYS:
            _apply(key, value, "config")
        else:
            logger.debug("Unknown config key %s in %s", key, config_path)

    for env_name, key in _ENV_KEYS.items():
        if env.get(env_name):
            _apply(key, env[env_name], "environment")

    for key, dest in (("mirror", "MIRROR"), ("workers", "WORKERS")):
        value = getattr(args, dest, None)
        if value is not None:
            _apply(key, value, "CLI")
