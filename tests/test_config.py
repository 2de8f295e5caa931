import pytest

from license_compliance.config import LicenseConfig, load_config
from license_compliance.errors import ConfigError
from license_compliance.licenses import LicenseType
from license_compliance.source import DEFAULT_REF, DEFAULT_TIMEOUT


def test_defaults(tmp_path):
    config = load_config(project_root=tmp_path)
    assert config == LicenseConfig()
    assert config.timeout == DEFAULT_TIMEOUT
    assert config.default_ref == DEFAULT_REF


def test_yaml_file_in_project_root(tmp_path):
    (tmp_path / "license-compliance.yml").write_text(
        "confidence_threshold: 0.8\n"
        "timeout: 5\n"
        "exclude: internal-*\n"
        "types:\n"
        "  overrides:\n"
        "    - spdx_id: LicenseRef-Corp\n"
        "      type: Notice\n",
        encoding="utf-8",
    )
    config = load_config(project_root=tmp_path)
    assert config.confidence_threshold == 0.8
    assert config.timeout == 5.0
    assert config.exclude == ["internal-*"]
    assert config.type_overrides == {"LicenseRef-Corp": LicenseType.NOTICE}


def test_pyproject_table(tmp_path):
    (tmp_path / "pyproject.toml").write_text(
        '[project]\nname = "app"\n\n'
        '[tool.license-compliance]\n'
        'tag_format = "release-{version}"\n'
        'offline = true\n'
        '[[tool.license-compliance.types.overrides]]\n'
        'spdx_id = "Corp-1.0"\n'
        'type = "reciprocal"\n',
        encoding="utf-8",
    )
    config = load_config(project_root=tmp_path)
    assert config.tag_format == "release-{version}"
    assert config.offline is True
    assert config.type_overrides == {"Corp-1.0": LicenseType.RECIPROCAL}


def test_pyproject_without_table(tmp_path):
    (tmp_path / "pyproject.toml").write_text('[project]\nname = "app"\n', encoding="utf-8")
    assert load_config(project_root=tmp_path) == LicenseConfig()


def test_explicit_file_wins(tmp_path):
    (tmp_path / "license-compliance.yml").write_text("timeout: 5\n", encoding="utf-8")
    explicit = tmp_path / "ci.toml"
    explicit.write_text("timeout = 60\ndefault_ref = \"main\"\n", encoding="utf-8")
    config = load_config(explicit, project_root=tmp_path)
    assert config.timeout == 60.0
    assert config.default_ref == "main"


def test_empty_yaml_file(tmp_path):
    path = tmp_path / "license-compliance.yaml"
    path.write_text("", encoding="utf-8")
    assert load_config(path) == LicenseConfig()


@pytest.mark.parametrize("content", [
    "colour: blue\n",
    "confidence_threshold: 2\n",
    "confidence_threshold: high\n",
    "timeout: 0\n",
    "types:\n  overrides:\n    - spdx_id: X\n      type: copyleft\n",
    "types:\n  overrides:\n    - spdx_id: X\n",
    "types:\n  overrides: notice\n",
    "- a list\n",
    "timeout: [\n",
])
def test_invalid_config(tmp_path, content):
    path = tmp_path / "license-compliance.yml"
    path.write_text(content, encoding="utf-8")
    with pytest.raises(ConfigError) as excinfo:
        load_config(path)
    assert excinfo.value.context["path"] == str(path)


def test_missing_explicit_file(tmp_path):
    with pytest.raises(ConfigError):
        load_config(tmp_path / "nope.yml")
