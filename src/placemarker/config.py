"""Config loading."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from placemarker.contracts.config import PlacemarkerConfig
from placemarker.contracts.exceptions import ConfigError


def load_config(path: str | Path) -> PlacemarkerConfig:
    """Load and validate config from JSON, resolving ``data_dir`` against the config directory."""
    config_path = Path(path).expanduser().resolve()

    try:
        raw_payload: Any = json.loads(config_path.read_text(encoding="utf-8"))
        parsed = PlacemarkerConfig.model_validate(raw_payload)
    except OSError as exc:
        raise ConfigError(f"failed reading config file: {config_path}") from exc
    except json.JSONDecodeError as exc:
        raise ConfigError(f"invalid JSON in config file: {config_path}") from exc
    except PydanticValidationError as exc:
        raise ConfigError(f"invalid config: {exc}") from exc

    data_dir = parsed.data_dir.expanduser()
    if not data_dir.is_absolute():
        data_dir = (config_path.parent / data_dir).resolve()
    return parsed.model_copy(update={"data_dir": data_dir})
