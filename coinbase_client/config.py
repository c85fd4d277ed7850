"""Configuration helpers for the Coinbase API client."""

from __future__ import annotations

import json
import os
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Union

try:  # Python 3.11+
    import tomllib  # type: ignore[attr-defined]
except ModuleNotFoundError:  # pragma: no cover - fallback for older versions
    tomllib = None  # type: ignore[assignment]

DEFAULT_BASE_URL = "https://api.coinbase.com"
DEFAULT_API_VERSION = "2019-11-15"

ENV_API_KEY = "COINBASE_API_KEY"
ENV_API_SECRET = "COINBASE_API_SECRET"


class Language(str, Enum):
    """Languages accepted in the ``Accept-Language`` header."""

    DE = "de"
    EN = "en"
    ES = "es"
    ES_MX = "es-mx"
    FR = "fr"
    ID = "id"
    IT = "it"
    NL = "nl"
    PT = "pt"
    PT_BR = "pt-br"

    @classmethod
    def from_text(cls, value: str) -> "Language":
        try:
            return cls(value.strip().lower().replace("_", "-"))
        except ValueError as exc:
            raise ValueError(f"Unsupported language: {value}") from exc


@dataclass(slots=True)
class APIConfig:
    """Holds credentials and networking parameters for the Coinbase API."""

    api_key: str = ""
    api_secret: str = ""
    base_url: str = DEFAULT_BASE_URL
    timeout: float = 10.0
    language: Language = Language.EN
    version: str = DEFAULT_API_VERSION

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "APIConfig":
        """Construct :class:`APIConfig` from a plain dictionary."""

        values = dict(data)
        if "language" in values:
            values["language"] = Language.from_text(str(values["language"]))
        return cls(**values)

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None, **overrides: Any) -> "APIConfig":
        """Read credentials from ``COINBASE_API_KEY`` / ``COINBASE_API_SECRET``."""

        env = os.environ if environ is None else environ
        return cls(
            api_key=env.get(ENV_API_KEY, ""),
            api_secret=env.get(ENV_API_SECRET, ""),
            **overrides,
        )


def _load_json(path: Path) -> Dict[str, Any]:
    with path.open("r", encoding="utf-8") as fh:
        return json.load(fh)


def _load_yaml(path: Path) -> Dict[str, Any]:
    try:
        import yaml  # type: ignore[import-not-found]
    except ModuleNotFoundError as exc:  # pragma: no cover - optional dependency
        raise RuntimeError(
            "PyYAML is required to load YAML configuration files. Install it via 'pip install pyyaml'."
        ) from exc
    with path.open("r", encoding="utf-8") as fh:
        return yaml.safe_load(fh)


def _load_toml(path: Path) -> Dict[str, Any]:
    if tomllib is None:  # pragma: no cover - Python < 3.11 fallback
        raise RuntimeError("TOML configuration files require Python 3.11 or newer.")
    with path.open("rb") as fh:
        return tomllib.load(fh)


def load_config(path: Union[str, os.PathLike[str]]) -> APIConfig:
    """Load client settings from JSON, YAML, or TOML files.

    Settings may sit at the top level or under an ``api`` table. Credentials
    missing from the file are taken from the environment.
    """

    file_path = Path(path)
    if not file_path.exists():
        raise FileNotFoundError(f"Configuration file not found: {file_path}")

    suffix = file_path.suffix.lower()
    if suffix == ".json":
        data = _load_json(file_path)
    elif suffix in {".yml", ".yaml"}:
        data = _load_yaml(file_path)
    elif suffix == ".toml":
        data = _load_toml(file_path)
    else:
        raise ValueError(f"Unsupported configuration format: {suffix}")

    if not isinstance(data, dict):
        raise ValueError("Configuration file must contain a dictionary at the top level.")

    section = data.get("api", data)
    if not isinstance(section, dict):
        raise ValueError("The 'api' section must be a dictionary.")
    values = dict(section)
    values.setdefault("api_key", os.environ.get(ENV_API_KEY, ""))
    values.setdefault("api_secret", os.environ.get(ENV_API_SECRET, ""))
    return APIConfig.from_dict(values)


__all__ = [
    "APIConfig",
    "DEFAULT_API_VERSION",
    "DEFAULT_BASE_URL",
    "Language",
    "load_config",
]
