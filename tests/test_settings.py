"""Tests for branchpilot.settings — config file loading, merging and precedence."""

from pathlib import Path

import pytest
import tomlkit

import branchpilot.settings as settings_module
from branchpilot.constants import DEFAULT_CONFIG
from branchpilot.errors import ConfigError
from branchpilot.models import BranchPilotConfig, StateDirective
from branchpilot.settings import deep_merge, get_config, load_config, repo_config, save_config


def _write_config(path: Path, config: dict) -> Path:
    path.write_text(tomlkit.dumps(config))
    return path


class TestDeepMerge:
    def test_nested_dicts_merged(self) -> None:
        merged = deep_merge({"general": {"a": 1, "b": 2}}, {"general": {"b": 3}})
        assert merged == {"general": {"a": 1, "b": 3}}

    def test_lists_replaced(self) -> None:
        assert deep_merge({"rules": [1, 2, 3]}, {"rules": []}) == {"rules": []}

    def test_none_ignored(self) -> None:
        assert deep_merge({"a": 1}, {"a": None}) == {"a": 1}

    def test_new_keys_added(self) -> None:
        assert deep_merge({"a": 1}, {"b": {"c": 2}}) == {"a": 1, "b": {"c": 2}}

    def test_inputs_not_mutated(self) -> None:
        base = {"general": {"a": 1}}
        deep_merge(base, {"general": {"a": 2}})
        assert base == {"general": {"a": 1}}


class TestLoadConfig:
    def test_missing_file_gives_defaults(self, tmp_path: Path) -> None:
        cfg = load_config(tmp_path / "missing.toml")
        assert cfg == BranchPilotConfig.model_validate(DEFAULT_CONFIG)
        assert len(cfg.rules_by_source_branch) == 12
        assert [r.work_item_type for r in cfg.rules_by_work_item_type] == ["Bug", "User Story", "Task"]

    def test_partial_file_merged_with_defaults(self, tmp_path: Path) -> None:
        path = _write_config(tmp_path / "config.toml", {"general": {"maxLength": 40}})
        cfg = load_config(path)
        assert cfg.general.max_length == 40
        assert cfg.general.lowercase is True
        assert len(cfg.rules_by_source_branch) == 12

    def test_stored_rule_list_replaces_defaults(self, tmp_path: Path) -> None:
        path = _write_config(tmp_path / "config.toml", {"rulesBySourceBranch": []})
        assert load_config(path).rules_by_source_branch == []

    def test_invalid_value_raises(self, tmp_path: Path) -> None:
        path = _write_config(tmp_path / "config.toml", {"general": {"maxLength": "long"}})
        with pytest.raises(ConfigError):
            load_config(path)

    def test_invalid_toml_raises(self, tmp_path: Path) -> None:
        path = tmp_path / "config.toml"
        path.write_text("general = [unclosed")
        with pytest.raises(ConfigError):
            load_config(path)


class TestSaveConfig:
    def test_round_trip(self, tmp_path: Path, config: BranchPilotConfig) -> None:
        path = tmp_path / "nested" / "config.toml"
        save_config(config, path)
        assert load_config(path) == config

    def test_writes_camel_case(self, tmp_path: Path, config: BranchPilotConfig) -> None:
        path = tmp_path / "config.toml"
        save_config(config, path)
        doc = tomlkit.load(path.open())
        assert doc["schemaVersion"] == 1
        assert doc["general"]["maxLength"] == 80
        assert doc["rulesBySourceBranch"][0]["matchType"] == "glob"

    def test_preserves_comments(self, tmp_path: Path, config: BranchPilotConfig) -> None:
        path = tmp_path / "config.toml"
        path.write_text("# team branch naming\n")
        save_config(config, path)
        assert "# team branch naming" in path.read_text()

    def test_invalidates_cache(self, tmp_path: Path, config: BranchPilotConfig) -> None:
        path = tmp_path / "config.toml"
        assert load_config(path).general.max_length == 80
        save_config(config.model_copy(update={"general": config.general.model_copy(update={"max_length": 33})}), path)
        assert load_config(path).general.max_length == 33


class TestRepoConfig:
    def _config(self) -> BranchPilotConfig:
        return BranchPilotConfig.model_validate(
            {
                "defaults": {"template": "feature/{wi.id}", "workItemState": {"enabled": True, "state": "Active"}},
                "repoOverrides": {
                    "web": {"defaultTemplate": "web/{wi.id}"},
                    "api": {"workItemState": {"enabled": False, "state": "Committed"}},
                },
            }
        )

    def test_template_override(self) -> None:
        cfg = repo_config(self._config(), "web")
        assert cfg.defaults.template == "web/{wi.id}"
        assert cfg.defaults.work_item_state == StateDirective(enabled=True, state="Active")

    def test_state_override(self) -> None:
        cfg = repo_config(self._config(), "api")
        assert cfg.defaults.template == "feature/{wi.id}"
        assert cfg.defaults.work_item_state == StateDirective(enabled=False, state="Committed")

    def test_unknown_repo_unchanged(self) -> None:
        base = self._config()
        assert repo_config(base, "other") is base
        assert repo_config(base, None) is base


class TestGetConfig:
    @pytest.fixture(autouse=True)
    def _isolate(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.chdir(tmp_path)
        monkeypatch.delenv("BRANCHPILOT_CONFIG_PATH", raising=False)
        monkeypatch.delenv("BRANCHPILOT_REPO", raising=False)

    def test_default_path(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        path = _write_config(tmp_path / "default.toml", {"general": {"maxLength": 50}})
        monkeypatch.setattr(settings_module, "CONFIG_PATH", path)
        assert get_config().general.max_length == 50

    def test_env_beats_default_path(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        default_path = _write_config(tmp_path / "d.toml", {"general": {"maxLength": 50}})
        monkeypatch.setattr(settings_module, "CONFIG_PATH", default_path)
        env_path = _write_config(tmp_path / "env.toml", {"general": {"maxLength": 60}})
        monkeypatch.setenv("BRANCHPILOT_CONFIG_PATH", str(env_path))
        assert get_config().general.max_length == 60

    def test_argument_beats_env(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        env_path = _write_config(tmp_path / "env.toml", {"general": {"maxLength": 60}})
        monkeypatch.setenv("BRANCHPILOT_CONFIG_PATH", str(env_path))
        arg_path = _write_config(tmp_path / "arg.toml", {"general": {"maxLength": 70}})
        assert get_config(config_path=arg_path).general.max_length == 70

    def test_env_repo_applies_override(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        path = _write_config(tmp_path / "c.toml", {"repoOverrides": {"web": {"defaultTemplate": "web/{wi.id}"}}})
        monkeypatch.setenv("BRANCHPILOT_REPO", "web")
        assert get_config(config_path=path).defaults.template == "web/{wi.id}"

    def test_repo_argument_beats_env(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        path = _write_config(
            tmp_path / "c.toml",
            {"repoOverrides": {"web": {"defaultTemplate": "web/{wi.id}"}, "api": {"defaultTemplate": "api/{wi.id}"}}},
        )
        monkeypatch.setenv("BRANCHPILOT_REPO", "web")
        assert get_config(config_path=path, repo="api").defaults.template == "api/{wi.id}"
