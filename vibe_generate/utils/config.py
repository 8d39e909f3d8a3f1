import os
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml
from pydantic import BaseModel, Field, ValidationError

from ..generator.errors import ConfigError

CONFIG_FILE = Path("config/vibe-generate.yml")
CONFIG_ENV = "VIBE_GENERATE_CONFIG"

# setting name -> environment variable
ENV_OVERRIDES = {
    "templates_dir": "VIBE_GENERATE_TEMPLATES_DIR",
    "output_dir": "VIBE_GENERATE_OUTPUT_DIR",
    "search_depth": "VIBE_GENERATE_SEARCH_DEPTH",
    "atomic": "VIBE_GENERATE_ATOMIC",
}


class Settings(BaseModel):
    templates_dir: Optional[Path] = None
    output_dir: Optional[Path] = None
    search_depth: int = Field(default=64, ge=1)
    atomic: bool = False


def _read_yaml(path: Path) -> Dict[str, Any]:
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except OSError as e:
        raise ConfigError(f"Cannot read config {path}: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Config {path} must be a mapping, got {type(data).__name__}")
    return data


def load_settings(
    path: Optional[Path] = None, env: Optional[Mapping[str, str]] = None
) -> Settings:
    """Load settings from YAML, then apply ``VIBE_GENERATE_*`` overrides.

    An explicit ``path`` (or ``$VIBE_GENERATE_CONFIG``) must exist; the default
    ``config/vibe-generate.yml`` is only read when present.
    """
    env = os.environ if env is None else env
    explicit = path or env.get(CONFIG_ENV)
    data: Dict[str, Any] = {}
    if explicit:
        cfg = Path(explicit).expanduser()
        if not cfg.is_file():
            raise ConfigError(f"Config file not found: {cfg}")
        data = _read_yaml(cfg)
    elif CONFIG_FILE.is_file():
        data = _read_yaml(CONFIG_FILE)

    for key, var in ENV_OVERRIDES.items():
        if env.get(var):
            data[key] = env[var]

    try:
        settings = Settings(**data)
    except ValidationError as e:
        raise ConfigError(f"Invalid settings: {e}") from e
    for key in ("templates_dir", "output_dir"):
        value = getattr(settings, key)
        if value is not None:
            setattr(settings, key, value.expanduser())
    return settings
