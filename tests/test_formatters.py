import json

import pytest

from license_compliance.formatters import FORMATTERS, JSONFormatter, MarkdownFormatter, TextFormatter


@pytest.fixture
def report():
    return {
        "project": "demo",
        "generated_by": "license-compliance",
        "components": [
            {
                "name": "lib-a",
                "version": "1.0.0",
                "license": "MIT",
                "license_type": "notice",
                "action": "RedistributeNotice",
                "url": "https://github.com/example/lib-a/blob/v1.0.0/LICENSE",
                "licenses": [
                    {"id": "MIT", "type": "notice", "path": "LICENSE", "url": ""},
                ],
            },
            {
                "name": "lib-b",
                "version": "unknown",
                "license": "GPL-3.0",
                "license_type": "restricted",
                "action": "RedistributeSource",
                "url": "",
                "licenses": [
                    {"id": "GPL-3.0", "type": "restricted", "path": "COPYING", "url": ""},
                    {"id": "MIT", "type": "notice", "path": "vendor/LICENSE", "url": ""},
                ],
            },
        ],
        "failed": [{"name": "lib-c", "error": "lib-c: no license found"}],
        "summary": {
            "total_components": 3,
            "failed_components": 1,
            "by_type": {"notice": 1, "restricted": 1, "forbidden": 0},
            "by_action": {"Reject": 0, "RedistributeNotice": 1, "RedistributeSource": 1},
        },
    }


def test_text(report):
    output = TextFormatter().format(report)
    assert "Project: demo" in output
    assert "Total components: 3" in output
    assert "Restricted: 1" in output
    assert "Forbidden" not in output
    assert "License: GPL-3.0 (restricted)" in output
    assert "URL: Unknown" in output
    assert "  - vendor/LICENSE: MIT (notice)" in output
    assert "Failed to scan: 1" in output
    assert "  - lib-c: no license found" in output


def test_json(report):
    output = JSONFormatter().format(report)
    assert json.loads(output) == report
    assert "\n  " in output


def test_markdown(report):
    output = MarkdownFormatter().format(report)
    assert output.startswith("# Third-Party Software Licenses\n")
    assert "| lib-a | 1.0.0 | [MIT](https://github.com/example/lib-a/blob/v1.0.0/LICENSE) | notice |" in output
    assert "| lib-b | unknown | GPL-3.0 | restricted | RedistributeSource |" in output
    assert "- **Reject:**" not in output
    assert "- `lib-c`: lib-c: no license found" in output


def test_registry():
    assert set(FORMATTERS) == {"text", "json", "markdown"}
