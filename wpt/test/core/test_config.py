"""Tests for wpt.core.config."""

from __future__ import annotations

import json
from pathlib import Path

from wpt.core.config import (
    DEFAULT_EXCLUDED_FILES,
    FtpConfig,
    ReleaseConfig,
    discover_config,
    load_config,
    slugify,
)
from wpt.core.project import Project
from wpt.core.result import Err, Ok
from wpt.output.console import MockConsole
from wpt.output.prompt import ScriptedPrompt

PLUGIN_HEADER = """<?php
/**
 * Plugin Name: Demo Plugin
 * Version: 1.2.3
 */
"""


def _write_json(path: Path, data: object) -> None:
    path.write_text(json.dumps(data), encoding="utf-8")


class TestReleaseConfig:
    def test_defaults(self) -> None:
        config = ReleaseConfig()
        assert config.build_command == "npm run build"
        assert config.package_manager == "npm"
        assert config.include_files == ()
        assert config.excluded_files == DEFAULT_EXCLUDED_FILES
        assert config.ftp == FtpConfig()
        assert config.missing_fields == ("pluginName", "pluginSlug", "mainFile")

    def test_round_trip(self) -> None:
        config = ReleaseConfig(
            plugin_name="Demo",
            plugin_slug="demo",
            main_file="demo.php",
            build_command="yarn build",
            package_manager="yarn",
            include_files=("demo.php", "includes"),
            excluded_files=(".git",),
            ftp=FtpConfig(enabled=True, host="ftp.example.com", user="u", password=" p ", port=2121),
        )
        assert ReleaseConfig.from_dict(json.loads(json.dumps(config.to_dict()))) == config

    def test_shallow_merge_over_defaults(self) -> None:
        config = ReleaseConfig.from_dict({"pluginName": "Demo", "excludedFiles": ["dist"]})
        assert config.plugin_name == "Demo"
        assert config.excluded_files == ("dist",)
        assert config.build_command == "npm run build"

    def test_empty_build_command_disables_build(self) -> None:
        assert ReleaseConfig.from_dict({"buildCommand": ""}).build_command is None

    def test_unknown_package_manager_falls_back_to_npm(self) -> None:
        assert ReleaseConfig.from_dict({"packageManager": "bun"}).package_manager == "npm"

    def test_constant_prefix(self) -> None:
        assert ReleaseConfig(plugin_slug="my-great-plugin").constant_prefix == "MY_GREAT_PLUGIN"

    def test_slugify(self) -> None:
        assert slugify("My Great Plugin!") == "my-great-plugin"


class TestDiscoverConfig:
    def test_package_json_seeds_identity(self, tmp_path: Path) -> None:
        _write_json(tmp_path / "package.json", {"name": "@acme/cool-widget"})
        config = discover_config(Project(tmp_path))
        assert config.plugin_slug == "cool-widget"
        assert config.plugin_name == "Cool Widget"
        assert config.main_file == ""

    def test_plugin_header_wins(self, tmp_path: Path) -> None:
        _write_json(tmp_path / "package.json", {"name": "something-else"})
        (tmp_path / "demo.php").write_text(PLUGIN_HEADER, encoding="utf-8")
        (tmp_path / "helpers.php").write_text("<?php // no header", encoding="utf-8")

        config = discover_config(Project(tmp_path))

        assert config.main_file == "demo.php"
        assert config.plugin_name == "Demo Plugin"
        assert config.plugin_slug == "demo-plugin"

    def test_lockfile_selects_package_manager(self, tmp_path: Path) -> None:
        (tmp_path / "yarn.lock").write_text("", encoding="utf-8")
        assert discover_config(Project(tmp_path)).package_manager == "yarn"

    def test_existing_values_are_kept(self, tmp_path: Path) -> None:
        (tmp_path / "demo.php").write_text(PLUGIN_HEADER, encoding="utf-8")
        (tmp_path / "pnpm-lock.yaml").write_text("", encoding="utf-8")
        base = ReleaseConfig(plugin_name="Mine", plugin_slug="mine")

        config = discover_config(Project(tmp_path), base)

        assert config.plugin_name == "Mine"
        assert config.plugin_slug == "mine"
        assert config.main_file == "demo.php"
        assert config.package_manager == "npm"


class TestLoadConfig:
    def test_existing_complete_file(self, tmp_path: Path) -> None:
        _write_json(
            tmp_path / "wp-tools.json",
            {"pluginName": "Demo", "pluginSlug": "demo", "mainFile": "demo.php"},
        )
        before = (tmp_path / "wp-tools.json").read_text(encoding="utf-8")

        result = load_config(Project(tmp_path), skip_prompts=True)

        assert isinstance(result, Ok)
        assert result.value.plugin_slug == "demo"
        assert (tmp_path / "wp-tools.json").read_text(encoding="utf-8") == before

    def test_creates_file_from_discovery(self, tmp_path: Path) -> None:
        (tmp_path / "demo.php").write_text(PLUGIN_HEADER, encoding="utf-8")
        console = MockConsole()

        result = load_config(Project(tmp_path), skip_prompts=True, console=console)

        assert isinstance(result, Ok)
        saved = json.loads((tmp_path / "wp-tools.json").read_text(encoding="utf-8"))
        assert saved["mainFile"] == "demo.php"
        assert saved["excludedFiles"] == list(DEFAULT_EXCLUDED_FILES)
        assert console.find("Configuration file created")

    def test_missing_config_with_yes(self, tmp_path: Path) -> None:
        result = load_config(Project(tmp_path), skip_prompts=True)

        assert isinstance(result, Err)
        assert result.error.is_missing_config
        assert "mainFile" in result.error.missing
        assert not (tmp_path / "wp-tools.json").exists()

    def test_prompts_for_missing_fields(self, tmp_path: Path) -> None:
        prompt = ScriptedPrompt.of("Hello World", "", "")

        result = load_config(Project(tmp_path), skip_prompts=False, prompt=prompt)

        assert isinstance(result, Ok)
        assert result.value.plugin_name == "Hello World"
        assert result.value.plugin_slug == "hello-world"
        assert result.value.main_file == "hello-world.php"
        assert len(prompt.asked) == 3

    def test_invalid_json_is_fatal_and_kept(self, tmp_path: Path) -> None:
        path = tmp_path / "wp-tools.json"
        path.write_text("{not json", encoding="utf-8")

        result = load_config(Project(tmp_path), skip_prompts=True)

        assert isinstance(result, Err)
        assert not result.error.is_missing_config
        assert path.read_text(encoding="utf-8") == "{not json"

    def test_fresh_ignores_existing_file(self, tmp_path: Path) -> None:
        _write_json(tmp_path / "wp-tools.json", {"pluginName": "Old", "pluginSlug": "old", "mainFile": "old.php"})
        (tmp_path / "demo.php").write_text(PLUGIN_HEADER, encoding="utf-8")

        result = load_config(Project(tmp_path), skip_prompts=True, fresh=True)

        assert isinstance(result, Ok)
        assert result.value.plugin_slug == "demo-plugin"
        saved = json.loads((tmp_path / "wp-tools.json").read_text(encoding="utf-8"))
        assert saved["pluginSlug"] == "demo-plugin"
