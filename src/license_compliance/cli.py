"""Command line interface."""

import argparse
import sys
from pathlib import Path
from typing import List, Optional

from . import manifest
from .classifier import PhraseClassifier
from .config import LicenseConfig, load_config
from .core import DEFAULT_DISALLOWED, LicenseScanner
from .dependencies import DependencyParser, filter_dependencies
from .dispatch import ComplianceDispatcher
from .errors import ConfigError, LicenseComplianceError
from .formatters import FORMATTERS
from .licenses import DependencyInfo, LicenseType
from .log import configure_logging
from .source import SourceLocator

EPILOG = """
Examples:
  # Write a license manifest for everything under third_party/
  license-compliance csv --vendor-dir third_party -o licenses.csv

  # Scan components listed in a file, without network lookups
  license-compliance csv --components-file components.yml --offline

  # Save license texts and required source code
  license-compliance save licenses.csv --vendor-dir third_party --save-path NOTICES --force

  # Fail when any component has a forbidden or unknown license
  license-compliance check --vendor-dir third_party

  # Markdown overview of all licenses
  license-compliance report --vendor-dir third_party --format markdown -o LICENSES.md
"""


def _add_common_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("components", nargs="*", metavar="NAME=PATH",
                        help="Component name and source directory")
    parser.add_argument("--project-path", default=".",
                        help="Project directory used to discover components and configuration (default: .)")
    parser.add_argument("--vendor-dir", action="append", default=[],
                        help="Directory whose sub-directories are components (repeatable)")
    parser.add_argument("--components-file", action="append", default=[],
                        help="YAML or TOML file listing components (repeatable)")
    parser.add_argument("--config", help="Configuration file (.toml, .yml or .yaml)")
    parser.add_argument("--exclude",
                        help="Comma-separated list of component patterns to exclude (supports wildcards)")
    parser.add_argument("--confidence-threshold", type=float,
                        help="Minimum confidence required to positively identify a license")
    parser.add_argument("--timeout", type=float, help="Timeout in seconds for remote lookups")
    parser.add_argument("--offline", action="store_true", help="Do not query remote services")
    parser.add_argument("-v", "--verbose", action="count", default=0, help="More output (repeatable)")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="license-compliance",
        description="Find the licenses of third-party components and comply with them",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=EPILOG,
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    csv_parser = subparsers.add_parser("csv", help="Write a license manifest for all components")
    csv_parser.add_argument("--output", "-o", help="Output file (default: stdout)")
    _add_common_arguments(csv_parser)

    save_parser = subparsers.add_parser("save", help="Save license texts and source code required by a manifest")
    save_parser.add_argument("manifest", help="License manifest written by the csv command")
    save_parser.add_argument("--save-path", required=True,
                             help="Directory into which files required by license terms are saved")
    save_parser.add_argument("--force", action="store_true",
                             help="Delete the destination directory if it already exists")
    _add_common_arguments(save_parser)

    check_parser = subparsers.add_parser("check", help="Fail if any component has a disallowed license type")
    check_parser.add_argument("--disallow", default=",".join(sorted(t.value for t in DEFAULT_DISALLOWED)),
                              help="Comma-separated license types to reject (default: %(default)s)")
    _add_common_arguments(check_parser)

    report_parser = subparsers.add_parser("report", help="Print a license report")
    report_parser.add_argument("--format", choices=sorted(FORMATTERS), default="text",
                               help="Output format (default: text)")
    report_parser.add_argument("--output", "-o", help="Output file (default: stdout)")
    report_parser.add_argument("--project-name", help="Project name shown in the report")
    _add_common_arguments(report_parser)

    return parser


def _split(value: Optional[str]) -> List[str]:
    if not value:
        return []
    return [part.strip() for part in value.split(",") if part.strip()]


def _load_config(args) -> LicenseConfig:
    config = load_config(args.config, project_root=args.project_path)
    if args.confidence_threshold is not None:
        config.confidence_threshold = args.confidence_threshold
    if args.timeout is not None:
        config.timeout = args.timeout
    if args.offline:
        config.offline = True
    config.exclude = config.exclude + _split(args.exclude)
    return config


def _dependencies(args, config: LicenseConfig, required: bool = True) -> List[DependencyInfo]:
    parser = DependencyParser(Path(args.project_path))
    deps = parser.from_pairs(args.components)
    for vendor_dir in args.vendor_dir:
        deps.extend(parser.from_vendor_dir(Path(vendor_dir)))
    for components_file in args.components_file:
        deps.extend(parser.from_components_file(Path(components_file)))
    if not (args.components or args.vendor_dir or args.components_file):
        deps = parser.get_all_dependencies()

    deps = filter_dependencies(deps, config.exclude)
    if required and not deps:
        raise ConfigError("no components found, pass NAME=PATH, --vendor-dir or --components-file")
    return deps


def _scanner(config: LicenseConfig) -> LicenseScanner:
    classifier = PhraseClassifier(config.confidence_threshold, config.type_overrides)
    locator = SourceLocator(
        timeout=config.timeout,
        default_ref=config.default_ref,
        tag_format=config.tag_format,
        offline=config.offline,
    )
    return LicenseScanner(classifier, locator)


def _write(text: str, output: Optional[str]) -> None:
    if output:
        with open(output, "w", encoding="utf-8") as f:
            f.write(text)
    else:
        sys.stdout.write(text)


def csv_main(args) -> int:
    config = _load_config(args)
    scanner = _scanner(config)
    result = scanner.scan_all(_dependencies(args, config))

    _write(manifest.dumps(scanner.manifest_rows(result.components)), args.output)
    if args.output:
        print(f"License manifest written to {args.output}", file=sys.stderr)
    result.raise_for_errors()
    return 0


def save_main(args) -> int:
    config = _load_config(args)
    rows = manifest.load(args.manifest)
    dispatcher = ComplianceDispatcher(
        _dependencies(args, config, required=False),
        overrides=config.type_overrides,
        timeout=config.timeout,
    )
    report = dispatcher.dispatch(rows, args.save_path, force=args.force)
    print(f"Saved licenses of {len(report.saved)} components to {args.save_path}", file=sys.stderr)
    return 0


def check_main(args) -> int:
    config = _load_config(args)
    disallowed = set()
    for value in _split(args.disallow):
        if value.lower() not in {t.value for t in LicenseType}:
            raise ConfigError(f"unknown license type {value!r}")
        disallowed.add(LicenseType(value.lower()))

    scanner = _scanner(config)
    result = scanner.scan_all(_dependencies(args, config))
    bad = scanner.check(result.components, disallowed)
    result.raise_for_errors()
    if bad:
        names = ", ".join(c.name for c in bad)
        print(f"Error: {len(bad)} component(s) have disallowed licenses: {names}", file=sys.stderr)
        return 1
    return 0


def report_main(args) -> int:
    config = _load_config(args)
    scanner = _scanner(config)
    result = scanner.scan_all(_dependencies(args, config))
    project_name = args.project_name or Path(args.project_path).resolve().name
    report = scanner.generate_report(result, project_name=project_name)

    output = FORMATTERS[args.format]().format(report)
    _write(output if output.endswith("\n") else output + "\n", args.output)
    if args.output:
        print(f"License report written to {args.output}", file=sys.stderr)
    return 1 if result.errors else 0


COMMANDS = {
    "csv": csv_main,
    "save": save_main,
    "check": check_main,
    "report": report_main,
}


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    args = build_parser().parse_args(argv)
    configure_logging(args.verbose)
    try:
        return COMMANDS[args.command](args)
    except (LicenseComplianceError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
