"""
License Compliance - find the licenses of third-party components and comply with them

Scans the source trees of third-party components for license files, decides
which license governs each component, records the result in a reviewable
manifest and then saves whatever those licenses require to be redistributed.

Features:
- Components from vendor directories, YAML/TOML component lists or NAME=PATH pairs
- License classification by SPDX header or well-known license text
- Strictest-license-wins resolution, including "A / B" dual licenses
- Public URLs of license files on GitHub, GitLab and Bitbucket
- Notice-only or full-source redistribution, depending on the license
- Every rejected or failed component reported at once, never one at a time
"""

__version__ = "1.0.0"
__author__ = "License Compliance Contributors"
__email__ = "license-compliance@example.com"

from .classifier import Classifier, PhraseClassifier
from .core import LicenseScanner, ScanResult
from .dependencies import DependencyParser
from .dispatch import ComplianceDispatcher, DispatchReport
from .formatters import JSONFormatter, MarkdownFormatter, TextFormatter
from .licenses import ComplianceAction, Component, DependencyInfo, Finding, LicenseType
from .manifest import ManifestRow
from .cli import main

__all__ = [
    "Classifier",
    "PhraseClassifier",
    "LicenseScanner",
    "ScanResult",
    "DependencyParser",
    "ComplianceDispatcher",
    "DispatchReport",
    "TextFormatter",
    "JSONFormatter",
    "MarkdownFormatter",
    "ComplianceAction",
    "Component",
    "DependencyInfo",
    "Finding",
    "LicenseType",
    "ManifestRow",
    "main",
]
