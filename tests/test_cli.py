import json

import pytest

from conftest import GPL3_TEXT, MIT_TEXT, write_tree
from license_compliance import manifest
from license_compliance.cli import build_parser, main
from license_compliance.manifest import ManifestRow


@pytest.fixture
def project(tmp_path):
    write_tree(tmp_path / "third_party" / "lib-a", {"LICENSE": MIT_TEXT, "a.py": "A = 1\n"})
    write_tree(tmp_path / "third_party" / "lib-b", {"COPYING": GPL3_TEXT, "b.py": "B = 1\n"})
    return tmp_path


def _run(capsys, *argv):
    code = main(list(argv))
    captured = capsys.readouterr()
    return code, captured.out, captured.err


def test_csv(project, capsys):
    code, out, err = _run(
        capsys, "csv", "--offline", "--project-path", str(project), "--vendor-dir", "third_party",
    )
    assert code == 0
    assert out == "lib-a, Unknown, MIT, LICENSE\nlib-b, Unknown, GPL-3.0, COPYING\n"


def test_csv_with_pairs_and_output_file(project, capsys):
    output = project / "licenses.csv"
    code, out, err = _run(
        capsys, "csv", "--offline", "-o", str(output),
        f"lib-b={project / 'third_party' / 'lib-b'}",
    )
    assert code == 0
    assert out == ""
    assert manifest.load(output) == [ManifestRow("lib-b", "GPL-3.0", "", "COPYING")]
    assert str(output) in err


def test_csv_fails_on_component_without_license(project, capsys):
    write_tree(project / "third_party" / "lib-c", {"README.md": "hello\n"})
    code, out, err = _run(
        capsys, "csv", "--offline", "--project-path", str(project), "--vendor-dir", "third_party",
    )
    assert code == 1
    # the manifest still lists every component that could be scanned
    assert "lib-a, Unknown, MIT" in out
    assert "lib-c" in err


def test_csv_exclude(project, capsys):
    code, out, _ = _run(
        capsys, "csv", "--offline", "--project-path", str(project), "--vendor-dir", "third_party",
        "--exclude", "lib-b",
    )
    assert code == 0
    assert out == "lib-a, Unknown, MIT, LICENSE\n"


def test_no_components(tmp_path, capsys):
    code, _, err = _run(capsys, "csv", "--offline", "--project-path", str(tmp_path))
    assert code == 1
    assert "no components found" in err


def test_save(project, capsys):
    listing = project / "licenses.csv"
    dest = project / "NOTICES"
    assert _run(capsys, "csv", "--offline", "--project-path", str(project), "--vendor-dir", "third_party",
                "-o", str(listing))[0] == 0

    args = ["save", str(listing), "--save-path", str(dest), "--project-path", str(project),
            "--vendor-dir", "third_party"]
    code, _, err = _run(capsys, *args)
    assert code == 0
    assert "Saved licenses of 2 components" in err
    licenses = (dest / "licenses.txt").read_text(encoding="utf-8")
    assert licenses.startswith("============= lib-a =============\n\nMIT License\n")
    assert (dest / "src" / "lib-b" / "b.py").is_file()
    assert (dest / "notices" / "lib-a" / "LICENSE").is_file()

    code, _, err = _run(capsys, *args)
    assert code == 1
    assert "already exists" in err
    assert _run(capsys, *args, "--force")[0] == 0


def test_save_rejects_forbidden_licenses(project, capsys):
    listing = project / "licenses.csv"
    listing.write_text("lib-a, Unknown, MIT, LICENSE\nlib-x, Unknown, AGPL-3.0\n", encoding="utf-8")
    code, _, err = _run(
        capsys, "save", str(listing), "--save-path", str(project / "out"),
        "--project-path", str(project), "--vendor-dir", "third_party",
    )
    assert code == 1
    assert "lib-x" in err
    assert (project / "out" / "licenses.txt").is_file()


def test_check(project, capsys):
    assert _run(capsys, "check", "--offline", "--project-path", str(project), "--vendor-dir", "third_party")[0] == 0

    write_tree(project / "third_party" / "lib-x", {"LICENSE": "SPDX-License-Identifier: AGPL-3.0\n"})
    code, _, err = _run(capsys, "check", "--offline", "--project-path", str(project), "--vendor-dir", "third_party")
    assert code == 1
    assert "lib-x" in err

    code, _, _ = _run(
        capsys, "check", "--offline", "--project-path", str(project), "--vendor-dir", "third_party",
        "--disallow", "restricted",
    )
    assert code == 1


def test_check_unknown_type(project, capsys):
    code, _, err = _run(
        capsys, "check", "--offline", "--project-path", str(project), "--vendor-dir", "third_party",
        "--disallow", "copyleft",
    )
    assert code == 1
    assert "copyleft" in err


def test_report_json(project, capsys):
    code, out, _ = _run(
        capsys, "report", "--offline", "--format", "json", "--project-name", "demo",
        "--project-path", str(project), "--vendor-dir", "third_party",
    )
    assert code == 0
    report = json.loads(out)
    assert report["project"] == "demo"
    assert [(c["name"], c["action"]) for c in report["components"]] == [
        ("lib-a", "RedistributeNotice"),
        ("lib-b", "RedistributeSource"),
    ]


def test_config_file_overrides(project, capsys):
    write_tree(project / "third_party" / "lib-x", {"LICENSE": "SPDX-License-Identifier: LicenseRef-Corp\n"})
    (project / "license-compliance.yml").write_text(
        "offline: true\ntypes:\n  overrides:\n    - spdx_id: LicenseRef-Corp\n      type: notice\n",
        encoding="utf-8",
    )
    code, _, _ = _run(capsys, "check", "--project-path", str(project), "--vendor-dir", "third_party")
    assert code == 0


def test_command_is_required():
    with pytest.raises(SystemExit):
        build_parser().parse_args([])
