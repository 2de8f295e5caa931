"""Scans components for licenses and turns the results into manifests and reports."""

import logging
from dataclasses import dataclass, field, replace
from typing import Dict, Iterable, List, Optional

from .classifier import Classifier
from .errors import ComponentError, ScanFailedError, SourceLookupError
from .licenses import Component, ComplianceAction, DependencyInfo, LicenseType
from .manifest import ManifestRow
from .resolver import action_for, governing_finding, governing_type
from .scanner import scan_tree
from .source import SourceLocator

logger = logging.getLogger(__name__)

DEFAULT_DISALLOWED = frozenset({LicenseType.FORBIDDEN, LicenseType.UNKNOWN})


@dataclass
class ScanResult:
    components: List[Component] = field(default_factory=list)
    errors: List[ComponentError] = field(default_factory=list)

    def raise_for_errors(self) -> None:
        if self.errors:
            raise ScanFailedError(self.errors)


class LicenseScanner:
    """Finds the licenses of third-party components."""

    def __init__(self, classifier: Classifier, locator: Optional[SourceLocator] = None):
        """Initialize the scanner.

        Args:
            classifier: Identifies the license of each candidate file.
            locator: Resolves public URLs for license files. Without one,
                     findings carry no URL.
        """
        self.classifier = classifier
        self.locator = locator

    def scan(self, dep: DependencyInfo) -> Component:
        """Scan one component.

        Raises:
            EmptyRootError: the component has no directory.
            LicenseNotFoundError: no license file could be classified.
        """
        findings = scan_tree(dep.root, self.classifier, component=dep.name)

        if self.locator is not None:
            try:
                remote = self.locator.locate(dep.name, dep.version, dep.repository)
            except SourceLookupError as e:
                # URLs are optional, the license decision does not need them
                logger.warning("finding source location for %s: %s", dep.name, e)
            else:
                findings = [replace(f, url=remote.file_url(f.path)) for f in findings]

        return Component(dependency=dep, findings=tuple(findings))

    def scan_all(self, dependencies: Iterable[DependencyInfo]) -> ScanResult:
        """Scan every component, collecting failures instead of stopping at the first."""
        result = ScanResult()
        for dep in dependencies:
            try:
                result.components.append(self.scan(dep))
            except ComponentError as e:
                logger.error("scanning licenses: %s", e.message, extra=e.as_log_fields())
                result.errors.append(e)
        return result

    def manifest_rows(self, components: Iterable[Component]) -> List[ManifestRow]:
        """One manifest row per component, describing its governing license."""
        rows = []
        for component in components:
            finding = governing_finding(component.findings)
            rows.append(ManifestRow(
                name=component.name,
                license=finding.license_id,
                url=finding.url,
                path=finding.path,
            ))
        return rows

    def check(self, components: Iterable[Component],
              disallowed: Iterable[LicenseType] = DEFAULT_DISALLOWED) -> List[Component]:
        """Return the components whose governing license type is disallowed."""
        disallowed = {LicenseType.parse(t) for t in disallowed}
        bad = []
        for component in components:
            license_type = governing_type(f.license_type for f in component.findings)
            if license_type in disallowed:
                finding = governing_finding(component.findings)
                logger.error(
                    "%s license type %s for library %s: %s",
                    license_type.value.capitalize(), finding.license_id, component.name, finding.url or finding.path,
                )
                bad.append(component)
        return bad

    def generate_report(self, result: ScanResult, project_name: str = "") -> Dict:
        """Build a report dictionary for the formatters."""
        report = {
            "project": project_name,
            "generated_by": "license-compliance",
            "components": [],
            "failed": [{"name": e.component, "error": e.message} for e in result.errors],
            "summary": {
                "total_components": len(result.components) + len(result.errors),
                "failed_components": len(result.errors),
                "by_type": {t.value: 0 for t in LicenseType},
                "by_action": {a.value: 0 for a in ComplianceAction},
            },
        }

        for component in sorted(result.components, key=lambda c: c.name.lower()):
            license_type = governing_type(f.license_type for f in component.findings)
            action = action_for(license_type)
            finding = governing_finding(component.findings)
            report["components"].append({
                "name": component.name,
                "version": component.version or "unknown",
                "license": finding.license_id,
                "license_type": license_type.value,
                "action": action.value,
                "url": finding.url,
                "licenses": [
                    {"id": f.license_id, "type": LicenseType.parse(f.license_type).value, "path": f.path, "url": f.url}
                    for f in component.findings
                ],
            })
            report["summary"]["by_type"][license_type.value] += 1
            report["summary"]["by_action"][action.value] += 1

        return report

