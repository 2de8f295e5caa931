"""
Configuration.

Settings are read from, in order of precedence:

1. an explicit ``--config`` file (``.toml``, ``.yml`` or ``.yaml``),
2. ``license-compliance.yml`` / ``license-compliance.yaml`` in the project root,
3. the ``[tool.license-compliance]`` table of the project's ``pyproject.toml``.

Example (YAML)::

    confidence_threshold: 0.9
    timeout: 20
    exclude: ["internal-*"]
    types:
      overrides:
        - spdx_id: LicenseRef-Corp
          type: notice
"""

import logging
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Union

import toml
import yaml

from .errors import ConfigError
from .licenses import LicenseType
from .source import DEFAULT_REF, DEFAULT_TAG_FORMAT, DEFAULT_TIMEOUT

logger = logging.getLogger(__name__)

CONFIG_FILES = ("license-compliance.yml", "license-compliance.yaml")
PYPROJECT_TABLE = "license-compliance"


@dataclass
class LicenseConfig:
    confidence_threshold: float = 0.9
    type_overrides: Dict[str, LicenseType] = field(default_factory=dict)
    exclude: List[str] = field(default_factory=list)
    timeout: float = DEFAULT_TIMEOUT
    default_ref: str = DEFAULT_REF
    tag_format: str = DEFAULT_TAG_FORMAT
    offline: bool = False

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any], source: str = "<config>") -> "LicenseConfig":
        data = dict(data)
        overrides = _parse_overrides(data.pop("types", None), source)
        known = {f.name for f in fields(cls)} - {"type_overrides"}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ConfigError(f"{source}: unknown setting(s): {', '.join(unknown)}", context={"path": source})

        config = cls(type_overrides=overrides)
        try:
            if "confidence_threshold" in data:
                config.confidence_threshold = float(data["confidence_threshold"])
            if "timeout" in data:
                config.timeout = float(data["timeout"])
            if "exclude" in data:
                exclude = data["exclude"]
                config.exclude = [exclude] if isinstance(exclude, str) else [str(p) for p in exclude]
            for key in ("default_ref", "tag_format"):
                if key in data:
                    setattr(config, key, str(data[key]))
            if "offline" in data:
                config.offline = bool(data["offline"])
        except (TypeError, ValueError) as e:
            raise ConfigError(f"{source}: {e}", context={"path": source}) from e

        if not 0.0 < config.confidence_threshold <= 1.0:
            raise ConfigError(f"{source}: confidence_threshold must be in (0, 1]", context={"path": source})
        if config.timeout <= 0:
            raise ConfigError(f"{source}: timeout must be positive", context={"path": source})
        return config


def _parse_overrides(types: Any, source: str) -> Dict[str, LicenseType]:
    if not types:
        return {}
    entries = types.get("overrides", []) if isinstance(types, dict) else None
    if not isinstance(entries, list):
        raise ConfigError(f"{source}: 'types.overrides' must be a list", context={"path": source})

    overrides = {}
    for entry in entries:
        if not isinstance(entry, dict) or "spdx_id" not in entry or "type" not in entry:
            raise ConfigError(f"{source}: each type override needs 'spdx_id' and 'type'", context={"path": source})
        value = str(entry["type"]).strip().lower()
        if value not in {t.value for t in LicenseType}:
            raise ConfigError(f"{source}: unknown license type {entry['type']!r}", context={"path": source})
        overrides[str(entry["spdx_id"]).strip()] = LicenseType(value)
    return overrides


def _read(path: Path) -> Mapping[str, Any]:
    try:
        with open(path, "r", encoding="utf-8") as f:
            if path.suffix == ".toml":
                data = toml.load(f)
            else:
                data = yaml.safe_load(f)
    except (OSError, toml.TomlDecodeError, yaml.YAMLError) as e:
        raise ConfigError(f"Error parsing {path}: {e}", context={"path": str(path)}) from e
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"{path}: expected a mapping at the top level", context={"path": str(path)})
    return data


def load_config(path: Optional[Union[str, Path]] = None,
                project_root: Optional[Union[str, Path]] = None) -> LicenseConfig:
    """Load configuration, falling back to defaults when nothing is found."""
    if path:
        path = Path(path)
        data = _read(path)
        if path.name == "pyproject.toml":
            data = data.get("tool", {}).get(PYPROJECT_TABLE, {})
        return LicenseConfig.from_mapping(data, str(path))

    root = Path(project_root) if project_root else Path.cwd()
    for name in CONFIG_FILES:
        candidate = root / name
        if candidate.is_file():
            logger.debug("loading configuration from %s", candidate)
            return LicenseConfig.from_mapping(_read(candidate), str(candidate))

    pyproject_path = root / "pyproject.toml"
    if pyproject_path.is_file():
        table = _read(pyproject_path).get("tool", {}).get(PYPROJECT_TABLE)
        if table is not None:
            logger.debug("loading configuration from %s", pyproject_path)
            return LicenseConfig.from_mapping(table, str(pyproject_path))

    return LicenseConfig()
