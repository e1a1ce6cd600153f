"""Configuration for the Closet Stylist app."""

from dataclasses import dataclass
from pathlib import Path
import os
from typing import Dict, Optional

DEFAULT_SELECTION_MODEL = "gemini-2.5-flash"
DEFAULT_COMPOSITION_MODEL = "gemini-2.5-flash-image-preview"
DEFAULT_CLOSET_DB_PATH = "data/closet.db"
DEFAULT_GENERATION_LOG_DIR = "data/generation_logs"

_TRUTHY = {"1", "true", "yes", "on"}


def _config_file(env_name: Optional[str]) -> Optional[Path]:
    """``APP_CONFIG_PATH`` wins, then ``<APP_CONFIG_DIR>/<APP_ENV>.yaml``."""

    explicit = os.getenv("APP_CONFIG_PATH")
    if explicit:
        return Path(explicit)
    if env_name:
        return Path(os.getenv("APP_CONFIG_DIR", "config/environments")) / f"{env_name}.yaml"
    return None


def _read_flat_yaml(path: Path) -> Dict[str, str]:
    """Read top-level ``key: value`` pairs; nesting and lists are not supported."""

    values: Dict[str, str] = {}
    for raw_line in path.read_text().splitlines():
        line = raw_line.strip()
        if line.startswith("#") or ":" not in line:
            continue
        key, _, value = line.partition(":")
        value = value.strip()
        if len(value) >= 2 and value[0] == value[-1] and value[0] in "\"'":
            value = value[1:-1]
        values[key.strip()] = value
    return values


@dataclass
class AppConfig:
    """Configuration values for the stylist app.

    The two model names map to the two Gemini calls made per outfit: a
    text-and-vision model that picks items and an image model that renders
    the try-on.
    """

    api_key: Optional[str] = None
    selection_model: str = DEFAULT_SELECTION_MODEL
    composition_model: str = DEFAULT_COMPOSITION_MODEL
    closet_db_path: str = DEFAULT_CLOSET_DB_PATH
    generation_log_dir: str = DEFAULT_GENERATION_LOG_DIR
    use_mock_data: bool = False
    encode_workers: int = 4
    request_timeout_ms: Optional[int] = None
    environment: Optional[str] = None

    @classmethod
    def from_env(cls) -> "AppConfig":
        """Build a config from an optional YAML file overlaid with environment variables.

        Keys are lower case in the file and upper case in the environment, so
        ``selection_model`` in ``staging.yaml`` is overridden by ``SELECTION_MODEL``.
        """

        env_name = os.getenv("APP_ENV")
        path = _config_file(env_name)
        file_values = _read_flat_yaml(path) if path and path.exists() else {}

        def lookup(key: str) -> Optional[str]:
            value = os.getenv(key.upper(), file_values.get(key))
            return value or None

        timeout = lookup("request_timeout_ms")
        return cls(
            api_key=lookup("gemini_api_key") or lookup("google_api_key"),
            selection_model=lookup("selection_model") or DEFAULT_SELECTION_MODEL,
            composition_model=lookup("composition_model") or DEFAULT_COMPOSITION_MODEL,
            closet_db_path=lookup("closet_db_path") or DEFAULT_CLOSET_DB_PATH,
            generation_log_dir=lookup("generation_log_dir") or DEFAULT_GENERATION_LOG_DIR,
            use_mock_data=(lookup("use_mock_data") or "false").strip().lower() in _TRUTHY,
            encode_workers=int(lookup("encode_workers") or 4),
            request_timeout_ms=int(timeout) if timeout else None,
            environment=env_name,
        )


__all__ = ["AppConfig", "DEFAULT_COMPOSITION_MODEL", "DEFAULT_SELECTION_MODEL"]
