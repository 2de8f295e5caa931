"""Core data types: license families, findings, dependencies and components."""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Optional, Tuple


class LicenseType(str, Enum):
    """Coarse license family, as reported by a classifier."""

    UNENCUMBERED = "unencumbered"
    PERMISSIVE = "permissive"
    NOTICE = "notice"
    RECIPROCAL = "reciprocal"
    RESTRICTED = "restricted"
    UNKNOWN = "unknown"
    FORBIDDEN = "forbidden"

    @classmethod
    def parse(cls, value) -> "LicenseType":
        """Convert a free-form family name to a LicenseType.

        Anything that is not a recognized family name becomes UNKNOWN.
        """
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            return cls.UNKNOWN

    @property
    def rank(self) -> int:
        return _STRICTNESS[self]

    @property
    def rejected(self) -> bool:
        return self in (LicenseType.UNKNOWN, LicenseType.FORBIDDEN)


# UNKNOWN and FORBIDDEN sit above RESTRICTED so they always win a strictness
# comparison; they are never chosen as a least strict starting point.
_STRICTNESS = {
    LicenseType.UNENCUMBERED: 0,
    LicenseType.PERMISSIVE: 1,
    LicenseType.NOTICE: 2,
    LicenseType.RECIPROCAL: 3,
    LicenseType.RESTRICTED: 4,
    LicenseType.UNKNOWN: 5,
    LicenseType.FORBIDDEN: 6,
}


def stricter(a: LicenseType, b: LicenseType) -> bool:
    """Return True if license type ``a`` is strictly stricter than ``b``."""
    return LicenseType.parse(a).rank > LicenseType.parse(b).rank


class ComplianceAction(str, Enum):
    """What has to be done to comply with a component's governing license."""

    REJECT = "Reject"
    REDISTRIBUTE_NOTICE = "RedistributeNotice"
    REDISTRIBUTE_SOURCE = "RedistributeSource"


@dataclass(frozen=True)
class Finding:
    """A license file found inside a component."""

    license_id: str
    path: str  # relative to the component root, POSIX separators
    license_type: LicenseType
    url: str = ""


@dataclass(frozen=True)
class DependencyInfo:
    """A third-party component as listed by a dependency source."""

    name: str
    version: str = ""
    root: Optional[Path] = None
    repository: str = ""

    def __repr__(self):
        return f"DependencyInfo({self.name}, {self.version or '<unversioned>'}, {self.root})"


@dataclass(frozen=True)
class Component:
    """A scanned dependency together with its ordered license findings."""

    dependency: DependencyInfo
    findings: Tuple[Finding, ...] = field(default_factory=tuple)

    @property
    def name(self) -> str:
        return self.dependency.name

    @property
    def version(self) -> str:
        return self.dependency.version

    @property
    def root(self) -> Optional[Path]:
        return self.dependency.root
