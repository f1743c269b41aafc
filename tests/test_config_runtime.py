"""Tests for runtime configuration layering."""

import json

from ghaudit.config_runtime import DEFAULTS, load_runtime_config


def write_config(root, data):
    config_dir = root / ".ghaudit"
    config_dir.mkdir()
    path = config_dir / "config.json"
    path.write_text(data if isinstance(data, str) else json.dumps(data), encoding="utf-8")
    return path


class TestLoadRuntimeConfig:
    def test_defaults(self, tmp_path):
        assert load_runtime_config(str(tmp_path)) == DEFAULTS

    def test_defaults_are_not_mutated(self, tmp_path):
        cfg = load_runtime_config(str(tmp_path))
        cfg["analysis"]["disabled_policies"].append("x")
        assert DEFAULTS["analysis"]["disabled_policies"] == []

    def test_file_overrides_defaults(self, tmp_path):
        write_config(
            tmp_path,
            {"analysis": {"disabled_policies": ["permissions_set"], "workers": 4}, "output": {"format": "json"}},
        )

        cfg = load_runtime_config(str(tmp_path))

        assert cfg["analysis"]["disabled_policies"] == ["permissions_set"]
        assert cfg["analysis"]["workers"] == 4
        assert cfg["analysis"]["min_severity"] == "info"
        assert cfg["output"]["format"] == "json"

    def test_env_overrides_file(self, tmp_path, monkeypatch):
        write_config(tmp_path, {"analysis": {"workers": 4}})
        monkeypatch.setenv("GHAUDIT_ANALYSIS_WORKERS", "8")
        monkeypatch.setenv("GHAUDIT_ANALYSIS_DISABLED_POLICIES", "a, b")

        cfg = load_runtime_config(str(tmp_path))

        assert cfg["analysis"]["workers"] == 8
        assert cfg["analysis"]["disabled_policies"] == ["a", "b"]

    def test_invalid_env_value_keeps_previous(self, tmp_path, monkeypatch):
        monkeypatch.setenv("GHAUDIT_ANALYSIS_WORKERS", "many")
        assert load_runtime_config(str(tmp_path))["analysis"]["workers"] == 1

    def test_invalid_json_uses_defaults(self, tmp_path):
        write_config(tmp_path, "{not json")
        assert load_runtime_config(str(tmp_path)) == DEFAULTS

    def test_wrong_types_are_ignored(self, tmp_path):
        write_config(tmp_path, {"analysis": {"workers": "four", "max_file_size": True}, "bogus": {}})

        cfg = load_runtime_config(str(tmp_path))

        assert cfg["analysis"]["workers"] == 1
        assert cfg["analysis"]["max_file_size"] == DEFAULTS["analysis"]["max_file_size"]

    def test_explicit_path(self, tmp_path):
        path = tmp_path / "custom.json"
        path.write_text(json.dumps({"analysis": {"min_severity": "high"}}), encoding="utf-8")

        cfg = load_runtime_config(str(tmp_path), config_path=path)

        assert cfg["analysis"]["min_severity"] == "high"

    def test_unknown_output_format(self, tmp_path, monkeypatch):
        monkeypatch.setenv("GHAUDIT_OUTPUT_FORMAT", "xml")
        assert load_runtime_config(str(tmp_path))["output"]["format"] == "text"
