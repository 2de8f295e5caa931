"""
Fulfils license obligations for every manifest row.

Depending on the governing license type a component either gets its license
text and notices saved, gets its whole source tree saved, or is rejected. All
rows are always processed; rejections and per-row failures are collected and
raised together once the pass is over.
"""

import logging
import os
import re
import shutil
import stat
from dataclasses import dataclass, field
from pathlib import Path, PurePosixPath
from typing import IO, Iterable, List, Mapping, Optional, Tuple, Union

import requests

from .classifier import TypeOverrides
from .errors import (
    ComponentError,
    ComponentNotFoundError,
    DestinationExistsError,
    DispatchFailedError,
    EmptyRootError,
    RejectedLicenseError,
)
from .licenses import ComplianceAction, DependencyInfo
from .manifest import ManifestRow
from .resolver import action_for
from .scanner import license_files
from .source import DEFAULT_TIMEOUT, raw_url

logger = logging.getLogger(__name__)

LICENSES_FILE = "licenses.txt"
SRC_DIR = "src"
NOTICES_DIR = "notices"

VCS_DIRS = frozenset({".git", ".hg", ".svn", ".bzr"})
NOTICE_FILE_RE = re.compile(r"^NOTICE(\.(txt|md))?$")

# Directories need the execute bit for `cd` and `ls`.
PERM_DIR_CURRENT_USER = 0o700
PERM_FILE_CURRENT_USER = 0o600


@dataclass
class DispatchReport:
    saved: List[Tuple[str, ComplianceAction]] = field(default_factory=list)
    rejected: List[Tuple[str, str]] = field(default_factory=list)
    failures: List[Tuple[str, str]] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.rejected and not self.failures


def prepare_destination(dest: Union[str, Path], force: bool = False) -> Path:
    """Make sure ``dest`` does not exist, removing it first when ``force`` is set.

    Raises:
        DestinationExistsError: ``dest`` exists and ``force`` is not set.
    """
    dest = Path(dest)
    if force:
        if dest.is_symlink() or dest.is_file():
            dest.unlink()
        elif dest.exists():
            shutil.rmtree(dest)
    # Refuse to mix stale files with the output of this run.
    if dest.exists() or dest.is_symlink():
        raise DestinationExistsError(dest)
    return dest


def add_permissions(root: Union[str, Path]) -> None:
    """Make a copied tree readable and writable by the current user."""
    root = str(root)
    if os.path.isfile(root) and not os.path.islink(root):
        _add_mode(root, PERM_FILE_CURRENT_USER)
        return
    _add_mode(root, PERM_DIR_CURRENT_USER)
    for dirpath, dirnames, filenames in os.walk(root):
        for name in dirnames:
            path = os.path.join(dirpath, name)
            if not os.path.islink(path):
                _add_mode(path, PERM_DIR_CURRENT_USER)
        for name in filenames:
            path = os.path.join(dirpath, name)
            if not os.path.islink(path):
                _add_mode(path, PERM_FILE_CURRENT_USER)


def _add_mode(path: str, bits: int) -> None:
    mode = stat.S_IMODE(os.lstat(path).st_mode)
    if mode & bits != bits:
        os.chmod(path, mode | bits)


def _ignore_vcs(directory, names):
    return [name for name in names if name in VCS_DIRS]


def copy_tree(src: Union[str, Path], dest: Union[str, Path]) -> None:
    """Recursively copy ``src`` to ``dest``, skipping VCS metadata."""
    shutil.copytree(src, dest, symlinks=True, ignore=_ignore_vcs)
    add_permissions(dest)


def copy_file(src: Union[str, Path], dest: Union[str, Path]) -> None:
    dest = Path(dest)
    dest.parent.mkdir(parents=True, exist_ok=True)
    shutil.copyfile(src, dest)
    add_permissions(dest)


def copy_notices(root: Path, license_path: str, dest: Path) -> None:
    """Copy a license file and the NOTICE files next to it, keeping relative paths."""
    copy_file(root / license_path, dest / license_path)
    directory = PurePosixPath(license_path).parent
    for entry in sorted(os.listdir(root / directory)):
        source = root / directory / entry
        if source.is_file() and not source.is_symlink() and NOTICE_FILE_RE.match(entry):
            copy_file(source, dest / directory / entry)


def _safe_relative(value: str, what: str) -> PurePosixPath:
    path = PurePosixPath(value)
    if not value or path.is_absolute() or ".." in path.parts:
        raise ComponentError(f"unsafe {what} {value!r}")
    return path


class ComplianceDispatcher:
    """Saves what each component's license requires into a destination directory."""

    def __init__(self, dependencies: Union[Mapping[str, DependencyInfo], Iterable[DependencyInfo]] = (),
                 overrides: Optional[TypeOverrides] = None,
                 session: Optional[requests.Session] = None,
                 timeout: float = DEFAULT_TIMEOUT):
        if isinstance(dependencies, Mapping):
            self.dependencies = dict(dependencies)
        else:
            self.dependencies = {dep.name: dep for dep in dependencies}
        self.overrides = dict(overrides or {})
        self.session = session or requests.Session()
        self.timeout = timeout

    def dispatch(self, rows: Iterable[ManifestRow], dest: Union[str, Path], force: bool = False) -> DispatchReport:
        """Comply with the license of every row.

        Raises:
            DestinationExistsError: ``dest`` exists and ``force`` is not set.
            RejectedLicenseError: any row has an unknown or forbidden license.
            DispatchFailedError: any row failed to be saved.
        """
        dest = prepare_destination(dest, force)
        dest.mkdir(parents=True)
        add_permissions(dest)

        report = DispatchReport()
        with open(dest / LICENSES_FILE, "w", encoding="utf-8", newline="\n") as out:
            for row in rows:
                license_type = row.license_type(self.overrides)
                action = action_for(license_type)
                if action is ComplianceAction.REJECT:
                    logger.error("%s: rejected license %r (type %s)", row.name, row.license, license_type.value)
                    report.rejected.append((row.name, row.license))
                    continue
                try:
                    self._comply(row, action, dest, out)
                except (ComponentError, OSError, requests.exceptions.RequestException) as e:
                    logger.error("%s: failed to comply with %s: %s", row.name, row.license, e)
                    report.failures.append((row.name, str(e)))
                    continue
                logger.info("%s: %s (%s)", row.name, action.value, row.license)
                report.saved.append((row.name, action))

        if report.rejected:
            raise RejectedLicenseError(report)
        if report.failures:
            raise DispatchFailedError(report)
        return report

    def _comply(self, row: ManifestRow, action: ComplianceAction, dest: Path, out: IO[str]) -> None:
        name = _safe_relative(row.name, "component name")
        dep = self.dependencies.get(row.name)
        # only directories created for this row are removed when it fails
        created = [d for d in (dest / SRC_DIR / name, dest / NOTICES_DIR / name) if not d.exists()]
        try:
            if action is ComplianceAction.REDISTRIBUTE_SOURCE:
                root = self._root(row, dep)
                paths = self._license_paths(row, root)
                text = self._license_text(row, root, paths)
                copy_tree(root, dest / SRC_DIR / name)
            else:
                root = Path(dep.root) if dep is not None and dep.root else None
                paths = self._license_paths(row, root)
                text = self._license_text(row, root, paths)
                for relative in paths:
                    copy_notices(root, relative, dest / NOTICES_DIR / name)
        except (ComponentError, OSError, requests.exceptions.RequestException):
            for directory in created:
                shutil.rmtree(directory, ignore_errors=True)
            raise

        write_section(out, row, text)

    def _root(self, row: ManifestRow, dep: Optional[DependencyInfo]) -> Path:
        if dep is None:
            raise ComponentNotFoundError("component is not listed by any dependency source")
        if not dep.root:
            raise EmptyRootError("component directory is empty, cannot save its source")
        if not Path(dep.root).is_dir():
            raise EmptyRootError(f"component directory {dep.root} does not exist")
        return Path(dep.root)

    def _license_paths(self, row: ManifestRow, root: Optional[Path]) -> List[str]:
        """The manifest's license file first, then every other license file under ``root``."""
        if root is None:
            return []
        paths = []
        if row.path:
            paths.append(str(_safe_relative(row.path, "license path")))
        if root.is_dir():
            paths.extend(p for p in license_files(root) if p not in paths)
        return paths

    def _license_text(self, row: ManifestRow, root: Optional[Path], paths: List[str]) -> str:
        primary = paths[0] if row.path and paths else None
        texts = []
        for relative in paths:
            # NOTICE files are copied next to the licenses but kept out of licenses.txt
            if relative != primary and NOTICE_FILE_RE.match(PurePosixPath(relative).name):
                continue
            with open(root / relative, "r", encoding="utf-8", errors="replace") as f:
                text = f.read()
            texts.append(text if text.endswith("\n") else text + "\n")
        if texts:
            return "\n".join(texts)
        if row.url:
            url = raw_url(row.url)
            response = self.session.get(url, timeout=self.timeout)
            response.raise_for_status()
            logger.info("%s: downloaded %s", row.name, url)
            return response.text
        raise ComponentError("no local license file and no URL to download it from")


def write_section(out: IO[str], row: ManifestRow, text: str) -> None:
    out.write(f"============= {row.name} =============\n")
    if row.url:
        out.write(f"{row.url}\n")
    out.write("\n")
    out.write(text)
    if not text.endswith("\n"):
        out.write("\n")
    out.write("\n")
