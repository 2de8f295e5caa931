"""
Dependency sources.

Components can be listed in a components file (YAML or TOML), found as the
sub-directories of a vendor directory, or given as ``NAME=PATH`` pairs. Missing
versions and repository URLs are filled in from the component's own packaging
metadata (pyproject.toml, PKG-INFO/METADATA or setup.py).
"""

import logging
import re
from pathlib import Path
from typing import Dict, Iterable, List, Optional

import toml
import yaml

from .errors import ConfigError
from .licenses import DependencyInfo
from .scanner import PRUNED_DIRS
from .source import is_supported_repository

logger = logging.getLogger(__name__)

COMPONENT_FILES = ("components.yml", "components.yaml", "components.toml")
VENDOR_DIRS = ("third_party", "vendor")


class DependencyParser:
    """Lists the third-party components of a project."""

    def __init__(self, project_path: Optional[Path] = None):
        """Initialize the parser.

        Args:
            project_path: Project directory used to discover default sources
                         and resolve relative paths. Defaults to the current
                         directory.
        """
        self.project_root = Path(project_path) if project_path else Path.cwd()

    def discover_sources(self) -> Dict[str, Path]:
        """Find conventional component files and vendor directories."""
        sources = {}
        for name in COMPONENT_FILES:
            path = self.project_root / name
            if path.is_file():
                sources[name] = path
        for name in VENDOR_DIRS:
            path = self.project_root / name
            if path.is_dir():
                sources[name] = path
        return sources

    def get_all_dependencies(self) -> List[DependencyInfo]:
        """Collect dependencies from every discovered source."""
        deps = []
        for name, path in self.discover_sources().items():
            if name in COMPONENT_FILES:
                deps.extend(self.from_components_file(path))
            else:
                deps.extend(self.from_vendor_dir(path))
        return deps

    def from_vendor_dir(self, vendor_dir: Path) -> List[DependencyInfo]:
        """Treat every immediate sub-directory of ``vendor_dir`` as a component.

        The component is named after its packaging metadata when it has any,
        otherwise after its directory.
        """
        vendor_dir = self._resolve(vendor_dir)
        if not vendor_dir.is_dir():
            raise ConfigError(f"vendor directory {vendor_dir} does not exist", context={"path": str(vendor_dir)})

        deps = []
        for child in sorted(vendor_dir.iterdir()):
            if not child.is_dir() or child.is_symlink():
                continue
            if child.name.startswith(".") or child.name in PRUNED_DIRS:
                continue
            metadata = self.detect_metadata(child)
            deps.append(DependencyInfo(
                name=metadata.get("name") or child.name,
                version=metadata.get("version", ""),
                root=child.resolve(),
                repository=metadata.get("repository", ""),
            ))
        return deps

    def from_components_file(self, file_path: Path) -> List[DependencyInfo]:
        """Parse a YAML or TOML list of components.

        Each entry needs ``name``; ``path``, ``version`` and ``repository`` are
        optional. Relative paths are resolved against the file's directory.
        """
        file_path = self._resolve(file_path)
        try:
            with open(file_path, "r", encoding="utf-8") as f:
                if file_path.suffix == ".toml":
                    data = toml.load(f)
                else:
                    data = yaml.safe_load(f)
        except (OSError, toml.TomlDecodeError, yaml.YAMLError) as e:
            raise ConfigError(f"Error parsing {file_path}: {e}", context={"path": str(file_path)}) from e

        entries = data.get("components", []) if isinstance(data, dict) else data
        if not isinstance(entries, list):
            raise ConfigError(f"{file_path}: expected a list of components", context={"path": str(file_path)})

        deps = []
        for index, entry in enumerate(entries):
            if not isinstance(entry, dict) or not entry.get("name"):
                raise ConfigError(
                    f"{file_path}: component #{index + 1} needs a name",
                    context={"path": str(file_path), "index": index},
                )
            root = None
            if entry.get("path"):
                root = Path(entry["path"])
                if not root.is_absolute():
                    root = file_path.parent / root
                root = root.resolve()
            version = str(entry.get("version") or "")
            repository = str(entry.get("repository") or "")
            if root is not None and (not version or not repository) and root.is_dir():
                metadata = self.detect_metadata(root)
                version = version or metadata.get("version", "")
                repository = repository or metadata.get("repository", "")
            deps.append(DependencyInfo(
                name=str(entry["name"]).strip(),
                version=version,
                root=root,
                repository=repository,
            ))
        return deps

    def from_pairs(self, pairs: Iterable[str]) -> List[DependencyInfo]:
        """Parse ``NAME=PATH`` command line entries."""
        deps = []
        for entry in pairs:
            if "=" not in entry:
                raise ConfigError(f"Invalid format (expected NAME=PATH): {entry}")
            name, path_str = entry.split("=", 1)
            root = self._resolve(Path(path_str)) if path_str else None
            metadata = self.detect_metadata(root) if root and root.is_dir() else {}
            deps.append(DependencyInfo(
                name=name.strip(),
                version=metadata.get("version", ""),
                root=root,
                repository=metadata.get("repository", ""),
            ))
        return deps

    def detect_metadata(self, root: Path) -> Dict[str, str]:
        """Read name, version and repository URL from a component's packaging files."""
        for reader in (self._metadata_from_pyproject, self._metadata_from_pkg_info, self._metadata_from_setup_py):
            metadata = reader(root)
            if metadata:
                return metadata
        return {}

    def _metadata_from_pyproject(self, root: Path) -> Dict[str, str]:
        pyproject_path = root / "pyproject.toml"
        if not pyproject_path.is_file():
            return {}
        try:
            with open(pyproject_path, "r", encoding="utf-8") as f:
                data = toml.load(f)
        except (OSError, toml.TomlDecodeError) as e:
            logger.warning("Error parsing %s: %s", pyproject_path, e)
            return {}

        # PEP 621 first, then Poetry
        section = data.get("project") or data.get("tool", {}).get("poetry") or {}
        urls = dict(section.get("urls") or {})
        for key in ("repository", "homepage"):
            if section.get(key):
                urls.setdefault(key, section[key])
        return _metadata(section.get("name"), section.get("version"), urls.values())

    def _metadata_from_pkg_info(self, root: Path) -> Dict[str, str]:
        for candidate in ("PKG-INFO", "METADATA"):
            path = root / candidate
            if not path.is_file():
                continue
            name = version = None
            urls = []
            try:
                with open(path, "r", encoding="utf-8", errors="replace") as f:
                    for line in f:
                        if not line.strip():
                            break  # headers end at the first blank line
                        key, _, value = line.partition(":")
                        value = value.strip()
                        if key == "Name":
                            name = value
                        elif key == "Version":
                            version = value
                        elif key == "Home-page":
                            urls.append(value)
                        elif key == "Project-URL":
                            urls.insert(0, value.split(",", 1)[-1].strip())
            except OSError as e:
                logger.warning("Error reading %s: %s", path, e)
                continue
            return _metadata(name, version, urls)
        return {}

    def _metadata_from_setup_py(self, root: Path) -> Dict[str, str]:
        setup_path = root / "setup.py"
        if not setup_path.is_file():
            return {}
        try:
            with open(setup_path, "r", encoding="utf-8") as f:
                content = f.read()
        except OSError as e:
            logger.warning("Error reading %s: %s", setup_path, e)
            return {}

        def keyword(name):
            match = re.search(rf'\b{name}\s*=\s*["\']([^"\']+)["\']', content)
            return match.group(1) if match else None

        return _metadata(keyword("name"), keyword("version"), [keyword("url") or ""])

    def _resolve(self, path: Path) -> Path:
        path = Path(path)
        if not path.is_absolute():
            path = self.project_root / path
        return path.resolve()


def _metadata(name, version, urls) -> Dict[str, str]:
    metadata = {}
    if name:
        metadata["name"] = str(name)
    if version:
        metadata["version"] = str(version)
    for url in urls:
        if url and is_supported_repository(str(url)):
            metadata["repository"] = str(url)
            break
    return metadata


def filter_dependencies(dependencies: List[DependencyInfo],
                        exclude_patterns: Optional[List[str]] = None) -> List[DependencyInfo]:
    """Drop dependencies whose name matches any exclude pattern."""
    exclude_patterns = exclude_patterns or []
    return [
        dep for dep in dependencies
        if not any(_matches_pattern(dep.name, pattern) for pattern in exclude_patterns)
    ]


def _matches_pattern(name: str, pattern: str) -> bool:
    """Check if a component name matches a pattern (supports wildcards)."""
    # Convert shell-style wildcards to regex
    regex_pattern = re.escape(pattern).replace(r"\*", ".*").replace(r"\?", ".")
    return bool(re.match(f"^{regex_pattern}$", name, re.IGNORECASE))
