"""Token settings: defaults, optional YAML file, environment overrides."""

from __future__ import annotations

import os
from pathlib import Path

import yaml
from pydantic import BaseModel, Field

from compactjwt.algorithms import DEFAULT_ALGORITHM, Algorithm
from compactjwt.codec import DEFAULT_MAX_DEPTH

CONFIG_ENV = "COMPACTJWT_CONFIG"
SECRET_ENV = "COMPACTJWT_SECRET"

_ENV_FIELDS = {
    "algorithm": "COMPACTJWT_ALGORITHM",
    "leeway": "COMPACTJWT_LEEWAY",
    "verify_claims": "COMPACTJWT_VERIFY_CLAIMS",
    "max_depth": "COMPACTJWT_MAX_DEPTH",
}


class TokenSettings(BaseModel):
    """Defaults applied when encoding and decoding tokens."""

    algorithm: Algorithm = DEFAULT_ALGORITHM
    leeway: float = Field(default=0.0, ge=0)
    verify_claims: bool = True
    max_depth: int = Field(default=DEFAULT_MAX_DEPTH, ge=1)


def _read_yaml(path: Path) -> dict:
    with open(path) as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Config file {path} must contain a mapping")
    section = data.get("compactjwt", data)
    if not isinstance(section, dict):
        raise ValueError(f"Config file {path}: compactjwt section must be a mapping")
    return section


def load_settings(path: str | Path | None = None) -> TokenSettings:
    """Load token settings.

    Resolution order (later wins):
    1. Field defaults
    2. YAML file from ``path`` or the COMPACTJWT_CONFIG environment variable
    3. COMPACTJWT_* environment variables
    """
    raw: dict = {}

    config_path = path or os.environ.get(CONFIG_ENV)
    if config_path:
        config_path = Path(config_path)
        if not config_path.exists():
            raise FileNotFoundError(f"Config file not found: {config_path}")
        raw.update(_read_yaml(config_path))

    for field, env_var in _ENV_FIELDS.items():
        value = os.environ.get(env_var)
        if value is not None:
            raw[field] = value

    return TokenSettings.model_validate(raw)


def get_secret() -> str:
    secret = os.environ.get(SECRET_ENV)
    if secret:
        return secret
    raise ValueError(f"{SECRET_ENV} environment variable must be set (or pass --key)")
