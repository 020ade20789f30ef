"""
Tests for polling hot reload.
"""

import os
from pathlib import Path

import pytest

from flare import EnvSource, FileSource, HotReloadWatcher, ParseError, load
from flare.sources import FileConfigurationSource


def rewrite(path: Path, content: str) -> None:
    """Rewrite a file and push its mtime forward so the change is always visible."""
    previous = os.stat(path).st_mtime_ns
    path.write_text(content, encoding='utf-8')
    os.utime(path, ns=(previous + 2_000_000_000, previous + 2_000_000_000))


class TestHotReload:
    """Test check_and_reload and reload."""

    def test_reload_preserves_defaults(self, write_config):
        """Test a changed file is reloaded and defaults survive."""
        path = write_config("cfg.json", '{"v": 1}')
        with load(files=[path]) as config:
            config.set_default("d", "k")
            config.enable_hot_reload()

            rewrite(path, '{"v": 2}')

            assert config.check_and_reload() is True
            assert config.get_int("v") == 2
            assert config.get_string("d") == "k"

    def test_no_change_no_reload(self, write_config):
        path = write_config("cfg.json", '{"v": 1}')
        with load(files=[path]) as config:
            config.enable_hot_reload()
            assert config.check_and_reload() is False

    def test_not_enabled(self, write_config):
        path = write_config("cfg.json", '{"v": 1}')
        with load(files=[path]) as config:
            rewrite(path, '{"v": 2}')
            assert config.is_hot_reload_enabled() is False
            assert config.check_and_reload() is False
            assert config.get_int("v") == 1

    def test_callback_receives_store(self, write_config):
        path = write_config("cfg.json", '{"v": 1}')
        seen = []
        with load(files=[path]) as config:
            config.enable_hot_reload(lambda cfg: seen.append(cfg.get_int("v")))
            rewrite(path, '{"v": 5}')
            config.check_and_reload()
        assert seen == [5]

    def test_callback_error_does_not_break_reload(self, write_config):
        path = write_config("cfg.json", '{"v": 1}')

        def failing(cfg):
            raise RuntimeError("boom")

        with load(files=[path]) as config:
            config.enable_hot_reload(failing)
            rewrite(path, '{"v": 2}')
            assert config.check_and_reload() is True
            assert config.get_int("v") == 2

    def test_reload_replaces_data_layer(self, write_config):
        """Test keys removed from the file disappear and explicit sets are dropped."""
        path = write_config("cfg.json", '{"a": 1, "b": 2}')
        with load(files=[path]) as config:
            config.set("manual", True)
            config.enable_hot_reload()
            rewrite(path, '{"a": 10}')

            assert config.check_and_reload()
            assert config.get("a") == 10
            assert config.get("b") is None
            assert config.get("manual") is None

    def test_reload_reapplies_env_and_cli(self, write_config):
        path = write_config("cfg.json", '{"host": "file", "port": 1}')
        with load(
            files=[path],
            env=EnvSource(prefix="APP", environ={'APP_HOST': 'env'}),
            cli=["--port=9"],
        ) as config:
            config.enable_hot_reload()
            rewrite(path, '{"host": "file2", "port": 2, "extra": true}')

            assert config.check_and_reload()
            assert config.get_string("host") == "env"
            assert config.get_int("port") == 9
            assert config.get_bool("extra") is True

    def test_failed_reload_keeps_previous_data(self, write_config):
        """Test reload is all-or-nothing when a required file breaks."""
        good = write_config("a.json", '{"a": 1}')
        other = write_config("b.json", '{"b": 1}')
        with load(files=[good, other]) as config:
            config.enable_hot_reload()
            rewrite(good, '{"a": 2}')
            rewrite(other, '{"b": ')

            with pytest.raises(ParseError):
                config.check_and_reload()
            assert config.get_int("a") == 1
            assert config.get_int("b") == 1

            # the snapshot did not advance, so fixing the file reloads both
            rewrite(other, '{"b": 3}')
            assert config.check_and_reload()
            assert config.get_int("a") == 2
            assert config.get_int("b") == 3

    def test_optional_file_appearing_triggers_reload(self, tmp_path, write_config):
        base = write_config("base.json", '{"mode": "base"}')
        local = tmp_path / "local.json"
        with load(files=[base, FileSource(path=local, required=False)]) as config:
            config.enable_hot_reload()
            assert config.check_and_reload() is False

            local.write_text('{"mode": "local"}', encoding='utf-8')
            assert config.check_and_reload() is True
            assert config.get_string("mode") == "local"

    def test_unconditional_reload(self, write_config):
        path = write_config("cfg.json", '{"v": 1}')
        with load(files=[path]) as config:
            config.set("v", 100)
            config.reload()
            assert config.get_int("v") == 1


class TestHotReloadWatcher:
    """Test the watcher on its own."""

    def test_watches_only_files(self, write_config):
        path = write_config("cfg.json", "{}")
        watcher = HotReloadWatcher([FileConfigurationSource(path)])
        assert watcher.watched_files == [str(path)]
        assert watcher.has_changed() is False

    def test_commit_advances_snapshot(self, write_config):
        path = write_config("cfg.json", "{}")
        watcher = HotReloadWatcher([FileConfigurationSource(path)])
        rewrite(path, '{"x": 1}')

        assert watcher.changed_files() == [str(path)]
        watcher.commit()
        assert watcher.changed_files() == []
