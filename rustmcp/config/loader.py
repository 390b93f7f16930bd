"""Read and write ``~/.rustmcp/config.json``.

The file uses camelCase keys (``bridge.binaryPath``); the models use
snake_case. ``RUST_BINARY_PATH`` fills in the analyzer path when the file
leaves it empty.
"""

import json
import os
import re
from pathlib import Path
from typing import Any, Callable

from loguru import logger

from rustmcp.config.schema import Config

BINARY_PATH_ENV = "RUST_BINARY_PATH"

_CAMEL_BOUNDARY = re.compile(r"(?<!^)(?=[A-Z])")


def get_config_path() -> Path:
    return Path.home() / ".rustmcp" / "config.json"


def load_config(config_path: Path | None = None) -> Config:
    """Load the config file, or defaults when it does not exist.

    Raises ValueError naming the file when it is unreadable or invalid.
    """
    path = Path(config_path) if config_path else get_config_path()

    if not path.exists():
        logger.debug("[config] {} not found, using defaults", path)
        cfg = Config()
    else:
        try:
            raw = json.loads(path.read_text(encoding="utf-8"))
            if not isinstance(raw, dict):
                raise ValueError(f"expected a JSON object, got {type(raw).__name__}")
            cfg = Config.model_validate(convert_keys(raw))
        except (OSError, ValueError) as e:
            raise ValueError(f"Failed to load config from {path}: {e}") from e

    binary_from_env = os.environ.get(BINARY_PATH_ENV, "").strip()
    if not cfg.bridge.binary_path and binary_from_env:
        cfg.bridge.binary_path = binary_from_env
    return cfg


def save_config(config: Config, config_path: Path | None = None) -> Path:
    """Write ``config`` with camelCase keys and return the path written."""
    path = Path(config_path) if config_path else get_config_path()
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(convert_to_camel(config.model_dump()), indent=2) + "\n", encoding="utf-8")
    return path


def _rename_keys(data: Any, rename: Callable[[str], str]) -> Any:
    if isinstance(data, dict):
        return {rename(key): _rename_keys(value, rename) for key, value in data.items()}
    if isinstance(data, list):
        return [_rename_keys(item, rename) for item in data]
    return data


def convert_keys(data: Any) -> Any:
    """camelCase keys to snake_case, recursively."""
    return _rename_keys(data, camel_to_snake)


def convert_to_camel(data: Any) -> Any:
    """snake_case keys to camelCase, recursively."""
    return _rename_keys(data, snake_to_camel)


def camel_to_snake(name: str) -> str:
    return _CAMEL_BOUNDARY.sub("_", name).lower()


def snake_to_camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.capitalize() for part in rest)
