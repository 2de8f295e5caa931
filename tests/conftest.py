"""
Shared pytest fixtures.

The fake classifier reads license files written as ``<license-id>:<type>`` so
scanning tests do not depend on real license text matching.
"""

import logging
from pathlib import Path
from typing import Dict, Tuple

import pytest

from license_compliance.classifier import Classifier
from license_compliance.errors import LicenseNotRecognizedError
from license_compliance.licenses import LicenseType

MIT_TEXT = """MIT License

Copyright (c) 2020 Example Authors

Permission is hereby granted, free of charge, to any person obtaining a copy
of this software and associated documentation files (the "Software"), to deal
in the Software without restriction.

The above copyright notice and this permission notice shall be included in all
copies or substantial portions of the Software.
"""

GPL3_TEXT = """                    GNU GENERAL PUBLIC LICENSE
                       Version 3, 29 June 2007

 Copyright (C) 2007 Free Software Foundation, Inc. <https://fsf.org/>

If the program is a library, you may consider it more useful to permit linking
proprietary applications with the library. If this is what you want to do, use
the GNU Lesser General Public License instead of this License.
"""


class FakeClassifier(Classifier):
    """Classifies files whose whole content is ``<license-id>:<type>``."""

    def __init__(self):
        self.calls = []

    def identify(self, path) -> Tuple[str, LicenseType]:
        self.calls.append(Path(path))
        text = Path(path).read_text(encoding="utf-8").strip()
        license_id, sep, license_type = text.partition(":")
        if not sep or not license_id:
            raise LicenseNotRecognizedError(f"no license in {path}")
        return license_id, LicenseType.parse(license_type)


def write_tree(root: Path, files: Dict[str, str]) -> Path:
    """Create ``files`` (relative path -> content) under ``root``."""
    for relative, content in files.items():
        path = root / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
    return root


def snapshot(root: Path) -> Dict[str, bytes]:
    """Relative path -> bytes for every file under ``root``."""
    return {
        path.relative_to(root).as_posix(): path.read_bytes()
        for path in sorted(root.rglob("*"))
        if path.is_file()
    }


@pytest.fixture
def classifier() -> FakeClassifier:
    return FakeClassifier()


@pytest.fixture
def lib_tree(tmp_path):
    """Three vendored components: MIT, GPL-3.0 and one without a license."""
    vendor = tmp_path / "third_party"
    write_tree(vendor / "lib-a", {
        "LICENSE": "MIT:permissive",
        "a.py": "print('a')\n",
    })
    write_tree(vendor / "lib-b", {
        "COPYING": "GPL-3.0:restricted",
        "b.py": "print('b')\n",
        "pkg/util.py": "X = 1\n",
    })
    write_tree(vendor / "lib-c", {
        "README.md": "no license here\n",
        "LICENSE": "this file has no recognizable license\n",
    })
    return vendor


@pytest.fixture(autouse=True)
def reset_logging():
    yield
    logger = logging.getLogger("license_compliance")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.setLevel(logging.NOTSET)
    logger.propagate = True
