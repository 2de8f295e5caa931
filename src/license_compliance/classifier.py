"""
License text classification.

The scanner only needs something with an ``identify(path)`` method that returns
``(license_id, LicenseType)`` or raises ``LicenseNotRecognizedError``. The
``PhraseClassifier`` here is the default: it looks for an SPDX header first and
falls back to matching anchor phrases of well-known license texts.
"""

import logging
import re
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, Mapping, Optional, Tuple, Union

from .errors import LicenseNotRecognizedError
from .licenses import LicenseType

logger = logging.getLogger(__name__)

MAX_LICENSE_BYTES = 512 * 1024

# License families, following the categories used by Google's licenseclassifier.
_TYPES_BY_FAMILY = {
    LicenseType.FORBIDDEN: (
        "AGPL-1.0", "AGPL-3.0", "AGPL-3.0-only", "AGPL-3.0-or-later",
        "CC-BY-NC-1.0", "CC-BY-NC-2.0", "CC-BY-NC-2.5", "CC-BY-NC-3.0", "CC-BY-NC-4.0",
        "CC-BY-NC-ND-4.0", "CC-BY-NC-SA-4.0", "Commons-Clause", "Facebook-2-Clause",
        "Facebook-3-Clause", "Facebook-Examples", "WTFPL",
    ),
    LicenseType.RESTRICTED: (
        "BCL", "CC-BY-ND-4.0", "CC-BY-SA-3.0", "CC-BY-SA-4.0",
        "GPL-1.0", "GPL-2.0", "GPL-2.0-only", "GPL-2.0-or-later",
        "GPL-3.0", "GPL-3.0-only", "GPL-3.0-or-later",
        "LGPL-2.0", "LGPL-2.1", "LGPL-2.1-only", "LGPL-2.1-or-later",
        "LGPL-3.0", "LGPL-3.0-only", "LGPL-3.0-or-later",
        "NPL-1.0", "NPL-1.1", "OSL-1.0", "OSL-2.0", "OSL-3.0", "QPL-1.0", "Sleepycat",
    ),
    LicenseType.RECIPROCAL: (
        "APSL-2.0", "CDDL-1.0", "CDDL-1.1", "CPL-1.0", "EPL-1.0", "EPL-2.0",
        "IPL-1.0", "MPL-1.0", "MPL-1.1", "MPL-2.0", "Ruby",
    ),
    LicenseType.NOTICE: (
        "AFL-3.0", "Apache-1.0", "Apache-1.1", "Apache-2.0", "Artistic-2.0",
        "BSD-1-Clause", "BSD-2-Clause", "BSD-2-Clause-FreeBSD", "BSD-3-Clause",
        "BSD-4-Clause", "BSL-1.0", "CC-BY-3.0", "CC-BY-4.0", "FTL", "ISC",
        "ImageMagick", "Libpng", "MIT", "MIT-0", "MS-PL", "NCSA", "OpenSSL", "PHP-3.01",
        "Python-2.0", "W3C", "X11", "Zlib", "Unicode-DFS-2016",
    ),
    LicenseType.PERMISSIVE: (
        "HPND", "PSF-2.0", "Unicode-3.0",
    ),
    LicenseType.UNENCUMBERED: (
        "0BSD", "CC0-1.0", "Unlicense",
    ),
}

LICENSE_TYPES: Dict[str, LicenseType] = {
    spdx_id: family
    for family, ids in _TYPES_BY_FAMILY.items()
    for spdx_id in ids
}

# Earlier entries win ties. GNU licenses are anchored on their title line because
# each of them mentions the others in its body.
ANCHOR_PHRASES: Tuple[Tuple[str, Tuple[str, ...]], ...] = (
    ("AGPL-3.0", (
        "gnu affero general public license version 3, 19 november 2007",
    )),
    ("LGPL-3.0", (
        "gnu lesser general public license version 3, 29 june 2007",
    )),
    ("LGPL-2.1", (
        "gnu lesser general public license version 2.1, february 1999",
    )),
    ("GPL-3.0", (
        "gnu general public license version 3, 29 june 2007",
    )),
    ("GPL-2.0", (
        "gnu general public license version 2, june 1991",
    )),
    ("MPL-2.0", (
        "mozilla public license version 2.0",
        "exhibit a - source code form license notice",
    )),
    ("EPL-2.0", (
        "eclipse public license - v 2.0",
    )),
    ("Apache-2.0", (
        "apache license",
        "version 2.0, january 2004",
    )),
    ("BSD-3-Clause", (
        "redistribution and use in source and binary forms, with or without modification",
        "neither the name of",
    )),
    ("BSD-2-Clause", (
        "redistribution and use in source and binary forms, with or without modification",
        "this software is provided by the copyright holders and contributors",
    )),
    ("BSL-1.0", (
        "boost software license - version 1.0",
    )),
    ("MIT", (
        "permission is hereby granted, free of charge, to any person obtaining a copy",
        "the above copyright notice and this permission notice shall be included",
    )),
    ("ISC", (
        "permission to use, copy, modify, and/or distribute this software for any purpose",
    )),
    ("Zlib", (
        "this software is provided 'as-is', without any express or implied warranty",
        "altered source versions must be plainly marked as such",
    )),
    ("CC0-1.0", (
        "cc0 1.0 universal",
    )),
    ("Unlicense", (
        "this is free and unencumbered software released into the public domain",
    )),
    ("WTFPL", (
        "do what the fuck you want to public license",
    )),
)

_SPDX_HEADER = re.compile(r"SPDX-License-Identifier:\s*([A-Za-z0-9.+-]+)")
_WHITESPACE = re.compile(r"\s+")

TypeOverrides = Mapping[str, Union[LicenseType, str]]


def license_type(spdx_id: str, overrides: Optional[TypeOverrides] = None) -> LicenseType:
    """Look up the family of an SPDX identifier.

    Overrides take precedence over the built-in table. Unlisted identifiers
    are UNKNOWN rather than an error.
    """
    spdx_id = spdx_id.strip()
    if overrides and spdx_id in overrides:
        return LicenseType.parse(overrides[spdx_id])
    return LICENSE_TYPES.get(spdx_id, LicenseType.UNKNOWN)


class Classifier(ABC):
    """Identifies the license contained in a single file."""

    @abstractmethod
    def identify(self, path: Union[str, Path]) -> Tuple[str, LicenseType]:
        """Return ``(license_id, license_type)`` or raise LicenseNotRecognizedError."""


class PhraseClassifier(Classifier):
    """Classifier based on SPDX headers and anchor phrases."""

    def __init__(self, confidence_threshold: float = 0.9, overrides: Optional[TypeOverrides] = None):
        if not 0.0 < confidence_threshold <= 1.0:
            raise ValueError(f"confidence_threshold must be in (0, 1], got {confidence_threshold}")
        self.confidence_threshold = confidence_threshold
        self.overrides = dict(overrides or {})

    def identify(self, path: Union[str, Path]) -> Tuple[str, LicenseType]:
        path = Path(path)
        try:
            with open(path, "rb") as f:
                raw = f.read(MAX_LICENSE_BYTES)
        except OSError as e:
            raise LicenseNotRecognizedError(f"cannot read {path}: {e}", context={"path": str(path)}) from e
        text = raw.decode("utf-8", errors="replace")

        license_id = self._identify_text(text)
        if license_id is None:
            raise LicenseNotRecognizedError(f"no license text recognized in {path}", context={"path": str(path)})
        return license_id, license_type(license_id, self.overrides)

    def _identify_text(self, text: str) -> Optional[str]:
        header = _SPDX_HEADER.search(text)
        if header:
            return header.group(1)

        normalized = _WHITESPACE.sub(" ", text.lower())
        best_id, best_score = None, 0.0
        for spdx_id, phrases in ANCHOR_PHRASES:
            hits = sum(1 for phrase in phrases if phrase in normalized)
            score = hits / len(phrases)
            if score > best_score:
                best_id, best_score = spdx_id, score

        if best_score >= self.confidence_threshold:
            logger.debug("matched %s with confidence %.2f", best_id, best_score)
            return best_id
        return None
