"""
Tests for the plugin registry.
"""
import logging

import pytest

from nextblog.models import Plugin
from nextblog.services import PluginRegistry, PluginResult, resolve_load_order
from nextblog.services.plugins import parse_dependencies


@pytest.fixture
def registry(db):
    return PluginRegistry()


def install_enabled(registry, name, dependencies=None, path="tests.plugins.setup", config=None):
    plugin = registry.install(name, "1.0.0", path, config=config, dependencies=dependencies)
    return registry.enable(plugin.pk)


def names(plugins):
    return [plugin.name for plugin in plugins]


class TestParseDependencies:
    def test_list(self):
        assert parse_dependencies(["a", "b"]) == ["a", "b"]

    def test_bad_data(self):
        assert parse_dependencies(None) == []
        assert parse_dependencies({"a": 1}) == []
        assert parse_dependencies(["a", 3, ""]) == ["a"]
        assert parse_dependencies("a") == ["a"]


class TestLoadOrder:
    """Tests for dependency-ordered loading."""

    def test_dependencies_come_first(self, registry):
        install_enabled(registry, "seo", dependencies=["markdown", "cache"])
        install_enabled(registry, "markdown", dependencies=["cache"])
        install_enabled(registry, "cache")
        install_enabled(registry, "analytics")

        order = names(registry.get_load_order())

        assert order.index("cache") < order.index("markdown")
        assert order.index("markdown") < order.index("seo")
        assert order.index("cache") < order.index("seo")

    def test_contains_every_enabled_plugin_once(self, registry):
        install_enabled(registry, "a", dependencies=["b"])
        install_enabled(registry, "b", dependencies=["c"])
        install_enabled(registry, "c")
        install_enabled(registry, "d", dependencies=["b", "c"])
        registry.install("disabled", "1.0.0", "tests.plugins.setup")

        order = names(registry.get_load_order())

        assert sorted(order) == ["a", "b", "c", "d"]
        assert len(order) == len(set(order))

    def test_missing_dependency_is_skipped(self, registry):
        install_enabled(registry, "a", dependencies=["not-installed"])
        plugin = registry.install("disabled", "1.0.0", "tests.plugins.setup")
        install_enabled(registry, "b", dependencies=[plugin.name])

        assert sorted(names(registry.get_load_order())) == ["a", "b"]

    def test_cycle_terminates(self, registry, caplog):
        install_enabled(registry, "a", dependencies=["b"])
        install_enabled(registry, "b", dependencies=["a"])

        with caplog.at_level(logging.WARNING, logger="nextblog.services.plugins"):
            order = names(registry.get_load_order())

        # Which member of the cycle comes first follows the input order.
        assert sorted(order) == ["a", "b"]
        assert "cycle" in caplog.text

    def test_works_on_unsaved_plugins(self):
        plugins = [
            Plugin(name="child", dependencies=["parent"]),
            Plugin(name="parent"),
            Plugin(name="other"),
        ]
        assert names(resolve_load_order(plugins)) == ["parent", "child", "other"]

    def test_unsaved_cycle(self):
        plugins = [Plugin(name="a", dependencies=["b"]), Plugin(name="b", dependencies=["a"])]
        assert sorted(names(resolve_load_order(plugins))) == ["a", "b"]


class TestRegistry:
    def test_install_starts_disabled(self, registry):
        plugin = registry.install("seo", "1.0.0", "tests.plugins.setup", dependencies=["cache"])

        assert not plugin.is_enabled
        assert registry.get_dependencies(plugin) == ["cache"]
        assert registry.find_by_name("seo") == plugin

    def test_enable_disable(self, registry):
        plugin = registry.install("seo", "1.0.0", "tests.plugins.setup")

        registry.enable(plugin.pk)
        assert names(registry.find_enabled()) == ["seo"]

        registry.disable(plugin.pk)
        assert registry.find_enabled() == []

    def test_update_config(self, registry):
        plugin = registry.install("seo", "1.0.0", "tests.plugins.setup")
        registry.update_config(plugin.pk, {"site": "example.com"})

        assert registry.find_by_id(plugin.pk).config == {"site": "example.com"}

    def test_uninstall(self, registry):
        plugin = registry.install("seo", "1.0.0", "tests.plugins.setup")
        registry.uninstall(plugin.pk)

        assert registry.find_by_id(plugin.pk) is None


class TestExecute:
    """Tests for error-isolated plugin execution."""

    def test_failure_is_captured(self, registry, caplog):
        plugin = install_enabled(registry, "broken")

        def action():
            raise RuntimeError("boom")

        with caplog.at_level(logging.ERROR, logger="nextblog.services.plugins"):
            result = registry.execute(plugin, action)

        assert result == PluginResult(success=False, error="boom")
        assert "Plugin broken error: boom" in caplog.text

    def test_later_calls_are_unaffected(self, registry):
        broken = install_enabled(registry, "broken")
        healthy = install_enabled(registry, "healthy")

        def fail():
            raise ValueError("boom")

        registry.execute(broken, fail)

        assert registry.execute(broken, lambda: 1) == PluginResult(success=True, result=1)
        assert registry.execute(healthy, lambda x, y=0: x + y, 2, y=3) == PluginResult(success=True, result=5)

    def test_async_action(self, registry):
        plugin = install_enabled(registry, "async")

        async def action(value):
            return value * 2

        assert registry.execute(plugin, action, 21) == PluginResult(success=True, result=42)

    def test_async_failure(self, registry):
        plugin = install_enabled(registry, "async")

        async def action():
            raise RuntimeError("boom")

        assert registry.execute(plugin, action) == PluginResult(success=False, error="boom")


class TestBoot:
    def test_boot_loads_in_order_and_isolates_failures(self, registry):
        install_enabled(registry, "seo", dependencies=["cache"], path="plugins.seo", config={"level": 2})
        install_enabled(registry, "cache", path="plugins.cache")
        install_enabled(registry, "broken", path="plugins.broken")

        loaded = []

        def seo_setup(config):
            loaded.append("seo")
            return config["level"]

        def cache_setup(config):
            loaded.append("cache")
            return "ready"

        def loader(path):
            if path == "plugins.broken":
                raise ImportError("No module named 'plugins.broken'")
            return {"plugins.seo": seo_setup, "plugins.cache": cache_setup}[path]

        results = registry.boot(loader=loader)

        assert loaded == ["cache", "seo"]
        assert results["seo"] == PluginResult(success=True, result=2)
        assert results["cache"] == PluginResult(success=True, result="ready")
        assert not results["broken"].success
        assert "plugins.broken" in results["broken"].error
