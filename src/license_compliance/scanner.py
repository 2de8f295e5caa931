"""Walks a component's directory tree and classifies its license files."""

import logging
import os
import re
from pathlib import Path
from typing import List, Optional, Union

from .classifier import Classifier
from .errors import EmptyRootError, LicenseNotFoundError, LicenseNotRecognizedError
from .licenses import Finding, LicenseType

logger = logging.getLogger(__name__)

# Directories that are never descended into: VCS metadata, dependency
# caches and test fixtures, which often contain unrelated license texts.
PRUNED_DIRS = frozenset({
    ".git", ".hg", ".svn", ".bzr",
    "node_modules", "__pycache__", ".tox", ".nox",
    "testdata",
})

LICENSE_FILE_RE = re.compile(r"^(UN)?(LICEN[CS]E|COPYING|NOTICE)([-_][A-Za-z0-9.]+)?(\.(txt|md|rst))?$")


def is_license_file(name: str) -> bool:
    """Check whether a file name looks like a license or notice file."""
    return LICENSE_FILE_RE.match(name) is not None


def license_files(root: Union[str, Path]) -> List[str]:
    """Relative POSIX paths of every license-like file under ``root``, sorted."""
    found = []
    for dirpath, dirnames, filenames in os.walk(root, followlinks=False):
        # prune in place so os.walk never enters these directories
        dirnames[:] = sorted(d for d in dirnames if d not in PRUNED_DIRS)
        for name in sorted(filenames):
            if not is_license_file(name):
                continue
            path = os.path.join(dirpath, name)
            if os.path.islink(path):
                continue
            found.append(Path(path).relative_to(root).as_posix())
    return sorted(found)


def scan_tree(root: Optional[Union[str, Path]], classifier: Classifier, component: str = "") -> List[Finding]:
    """Find and classify every license file under ``root``.

    Args:
        root: Component root directory.
        classifier: Used to identify each candidate file.
        component: Component name, only used in error messages.

    Returns:
        Findings sorted by their path relative to ``root``.

    Raises:
        EmptyRootError: root is empty or is not a directory.
        LicenseNotFoundError: no candidate file could be classified.
    """
    if not root or not os.path.isdir(root):
        raise EmptyRootError(f"component directory {str(root or '')!r} is empty or missing", component=component)
    root = Path(root)

    findings = []
    for relative in license_files(root):
        path = root / relative
        try:
            license_id, license_type = classifier.identify(path)
        except (LicenseNotRecognizedError, OSError) as e:
            logger.debug("skipping %s: %s", path, e)
            continue
        findings.append(Finding(
            license_id=license_id,
            path=relative,
            license_type=LicenseType.parse(license_type),
        ))

    if not findings:
        raise LicenseNotFoundError(f"no license found under {root}", component=component)

    findings.sort(key=lambda f: f.path)
    return findings
