"""Render scan reports as text, JSON or Markdown."""

import json
from typing import Dict


class TextFormatter:
    """Format report as human-readable text."""

    def format(self, report: Dict) -> str:
        lines = []
        lines.append("=" * 80)
        lines.append("THIRD-PARTY SOFTWARE LICENSES")
        lines.append("=" * 80)
        lines.append("")
        if report.get('project'):
            lines.append(f"Project: {report['project']}")
        lines.append(f"Generated by: {report['generated_by']}")
        lines.append("")

        summary = report['summary']
        lines.append("SUMMARY:")
        lines.append(f"  Total components: {summary['total_components']}")
        for license_type, count in summary['by_type'].items():
            if count > 0:
                lines.append(f"  {license_type.capitalize()}: {count}")
        for action, count in summary['by_action'].items():
            if count > 0:
                lines.append(f"  Action {action}: {count}")
        if summary['failed_components']:
            lines.append(f"  Failed to scan: {summary['failed_components']}")
        lines.append("")

        lines.append("=" * 80)
        lines.append("COMPONENT DETAILS")
        lines.append("=" * 80)
        lines.append("")

        for component in report['components']:
            lines.append(f"Component: {component['name']}")
            lines.append(f"Version: {component['version']}")
            lines.append(f"License: {component['license']} ({component['license_type']})")
            lines.append(f"Action: {component['action']}")
            lines.append(f"URL: {component['url'] or 'Unknown'}")
            if len(component['licenses']) > 1:
                lines.append("License files:")
                for finding in component['licenses']:
                    lines.append(f"  - {finding['path']}: {finding['id']} ({finding['type']})")
            lines.append("-" * 40)
            lines.append("")

        if report.get('failed'):
            lines.append("FAILED COMPONENTS:")
            for failure in report['failed']:
                lines.append(f"  - {failure['error']}")
            lines.append("")

        return "\n".join(lines)


class JSONFormatter:
    """Format report as JSON."""

    def __init__(self, indent: int = 2):
        self.indent = indent

    def format(self, report: Dict) -> str:
        return json.dumps(report, indent=self.indent)


class MarkdownFormatter:
    """Format report as Markdown."""

    def format(self, report: Dict) -> str:
        lines = []
        lines.append("# Third-Party Software Licenses")
        lines.append("")
        if report.get('project'):
            lines.append(f"**Project:** {report['project']}")
        lines.append(f"**Generated by:** {report['generated_by']}")
        lines.append("")

        summary = report['summary']
        lines.append("## Summary")
        lines.append("")
        lines.append(f"- **Total components:** {summary['total_components']}")
        for action, count in summary['by_action'].items():
            if count > 0:
                lines.append(f"- **{action}:** {count}")
        if summary['failed_components']:
            lines.append(f"- **Failed to scan:** {summary['failed_components']}")
        lines.append("")

        lines.append("## Component Details")
        lines.append("")
        lines.append("| Component | Version | License | Type | Action |")
        lines.append("|-----------|---------|---------|------|--------|")

        for component in report['components']:
            license_info = component['license']
            if component['url']:
                license_info = f"[{license_info}]({component['url']})"
            lines.append(
                f"| {component['name']} | {component['version']} | {license_info} "
                f"| {component['license_type']} | {component['action']} |"
            )
        lines.append("")

        if report.get('failed'):
            lines.append("## Failed Components")
            lines.append("")
            for failure in report['failed']:
                lines.append(f"- `{failure['name']}`: {failure['error']}")
            lines.append("")

        return "\n".join(lines)


FORMATTERS = {
    "text": TextFormatter,
    "json": JSONFormatter,
    "markdown": MarkdownFormatter,
}
