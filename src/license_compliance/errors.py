"""Exception taxonomy for scanning and compliance actions."""

from typing import Any, Dict, List, Mapping, Optional, Tuple


class LicenseComplianceError(Exception):
    """Base class for every error raised by license_compliance."""

    code = "license_compliance_error"

    def __init__(self, message: str, *, context: Optional[Mapping[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.context: Dict[str, Any] = dict(context or {})

    def as_log_fields(self) -> Dict[str, Any]:
        return {
            "error_code": self.code,
            "error_message": self.message,
            "error_context": self.context,
        }


class ConfigError(LicenseComplianceError):
    code = "config_error"


class ManifestError(LicenseComplianceError):
    code = "manifest_error"


class ComponentError(LicenseComplianceError):
    """An error that belongs to a single component."""

    code = "component_error"

    def __init__(self, message: str, *, component: str = "", context: Optional[Mapping[str, Any]] = None):
        context = dict(context or {})
        if component:
            context["component"] = component
            message = f"{component}: {message}"
        super().__init__(message, context=context)
        self.component = component


class EmptyRootError(ComponentError):
    code = "empty_root"


class LicenseNotFoundError(ComponentError):
    code = "license_not_found"


class LicenseNotRecognizedError(LicenseComplianceError):
    """The classifier found no license text in a file."""

    code = "license_not_recognized"


class ComponentNotFoundError(ComponentError):
    code = "component_not_found"


class SourceLookupError(ComponentError):
    code = "source_lookup_failed"


class ResolutionTimeoutError(SourceLookupError):
    code = "resolution_timeout"


class DestinationExistsError(LicenseComplianceError):
    code = "destination_exists"

    def __init__(self, path):
        super().__init__(
            f"{path} already exists, pass --force to replace it",
            context={"path": str(path)},
        )
        self.path = path


class ScanFailedError(LicenseComplianceError):
    """One or more components could not be scanned."""

    code = "scan_failed"

    def __init__(self, errors: List[ComponentError]):
        names = ", ".join(err.component or "<unnamed>" for err in errors)
        lines = [f"{len(errors)} component(s) failed to scan: {names}"]
        lines.extend(f"  - {err.message}" for err in errors)
        super().__init__("\n".join(lines), context={"components": [err.component for err in errors]})
        self.errors = errors


class DispatchFailedError(LicenseComplianceError):
    """The compliance pass finished, but some components failed."""

    code = "dispatch_failed"

    def __init__(self, report):
        super().__init__(_describe_report(report), context={
            "rejected": [name for name, _ in report.rejected],
            "failed": [name for name, _ in report.failures],
        })
        self.report = report


class RejectedLicenseError(DispatchFailedError):
    """At least one component has an unknown or disallowed license."""

    code = "rejected_license"


def _describe_report(report) -> str:
    lines: List[str] = []
    rejected: List[Tuple[str, str]] = list(report.rejected)
    failures: List[Tuple[str, str]] = list(report.failures)
    if rejected:
        lines.append(f"{len(rejected)} component(s) have rejected licenses:")
        lines.extend(f"  - {name}: license={license!r}" for name, license in rejected)
    if failures:
        lines.append(f"{len(failures)} component(s) failed to comply:")
        lines.extend(f"  - {name}: {reason}" for name, reason in failures)
    return "\n".join(lines)
