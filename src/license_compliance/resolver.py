"""Reduces license findings to one governing license and compliance action."""

from typing import Iterable, Optional, Sequence

from .classifier import TypeOverrides, license_type
from .licenses import ComplianceAction, Finding, LicenseType, stricter

ALTERNATIVE_SEPARATOR = "/"


def governing_type(types: Iterable[LicenseType]) -> LicenseType:
    """Pick the strictest license type.

    Starts from UNENCUMBERED and keeps any stricter type seen. FORBIDDEN is the
    strictest possible value, so the walk stops as soon as it shows up.

    Raises:
        ValueError: ``types`` is empty.
    """
    governing = LicenseType.UNENCUMBERED
    seen = False
    for value in types:
        seen = True
        value = LicenseType.parse(value)
        if value is LicenseType.FORBIDDEN:
            return value
        if stricter(value, governing):
            governing = value
    if not seen:
        raise ValueError("cannot resolve a governing license from no findings")
    return governing


def governing_finding(findings: Sequence[Finding]) -> Finding:
    """Return the first finding (in path order) that carries the governing type."""
    strictest = governing_type(f.license_type for f in findings)
    for finding in findings:
        if LicenseType.parse(finding.license_type) is strictest:
            return finding
    raise AssertionError("governing type must come from one of the findings")


def expression_type(expression: str, overrides: Optional[TypeOverrides] = None) -> LicenseType:
    """Map a license expression such as ``"Apache-2.0 / MIT"`` to a license type.

    Every alternative is looked up on its own and the strictest one governs.
    An empty alternative makes the whole expression UNKNOWN.
    """
    types = []
    for part in expression.split(ALTERNATIVE_SEPARATOR):
        spdx_id = part.strip()
        if not spdx_id:
            return LicenseType.UNKNOWN
        types.append(license_type(spdx_id, overrides))
    return governing_type(types)


def action_for(value: LicenseType) -> ComplianceAction:
    """Compliance action required by a governing license type."""
    value = LicenseType.parse(value)
    if value.rejected:
        return ComplianceAction.REJECT
    if value in (LicenseType.RESTRICTED, LicenseType.RECIPROCAL):
        return ComplianceAction.REDISTRIBUTE_SOURCE
    return ComplianceAction.REDISTRIBUTE_NOTICE
