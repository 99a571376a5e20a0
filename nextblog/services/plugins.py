"""
Plugin registry: install/enable bookkeeping, dependency-ordered loading
and error-isolated execution.
"""
import inspect
import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, List, Optional

from asgiref.sync import async_to_sync
from django.utils.module_loading import import_string

from ..models import Plugin

logger = logging.getLogger(__name__)


@dataclass
class PluginResult:
    """Outcome of running a plugin action."""

    success: bool
    result: Any = None
    error: Optional[str] = None


def parse_dependencies(raw) -> List[str]:
    """Return the dependency names stored on a plugin, tolerating bad data."""
    if not raw:
        return []
    if isinstance(raw, str):
        raw = [raw]
    if not isinstance(raw, (list, tuple)):
        return []
    return [name for name in raw if isinstance(name, str) and name]


def resolve_load_order(plugins: Iterable[Plugin]) -> List[Plugin]:
    """
    Order plugins so that each one comes after the plugins it depends on.

    Depth-first post-order walk seeded in input order. Dependency names
    that match no plugin in ``plugins`` are skipped. A cycle does not
    fail: the member reached second is appended without waiting on its
    back-reference, so the relative order inside a cycle depends on the
    input order.
    """
    plugins = list(plugins)
    by_name = {plugin.name: plugin for plugin in plugins}
    ordered: List[Plugin] = []
    visited = set()
    in_progress = set()

    def visit(plugin):
        if plugin.name in visited:
            if plugin.name in in_progress:
                logger.warning("Plugin dependency cycle detected at %s", plugin.name)
            return
        visited.add(plugin.name)
        in_progress.add(plugin.name)

        for dep_name in parse_dependencies(plugin.dependencies):
            dep = by_name.get(dep_name)
            if dep is None:
                logger.debug("Plugin %s: dependency %s is not enabled", plugin.name, dep_name)
                continue
            visit(dep)

        in_progress.discard(plugin.name)
        ordered.append(plugin)

    for plugin in plugins:
        visit(plugin)

    return ordered


class PluginRegistry:
    """
    Registry of installed plugins.

    Construct once and hand the instance to whatever needs it; the model
    class can be swapped for tests.
    """

    def __init__(self, model=Plugin):
        self.model = model

    def install(self, name, version, path, config=None, dependencies=None):
        """Register a plugin. New plugins start disabled."""
        plugin = self.model.objects.create(
            name=name,
            version=version,
            path=path,
            config=config or {},
            dependencies=list(dependencies or []),
            is_enabled=False,
        )
        logger.info("Installed plugin %s %s", name, version)
        return plugin

    def find_by_id(self, pk):
        return self.model.objects.filter(pk=pk).first()

    def find_by_name(self, name):
        return self.model.objects.filter(name=name).first()

    def find_all(self):
        return list(self.model.objects.order_by("-created_at", "-id"))

    def find_enabled(self):
        return list(self.model.objects.filter(is_enabled=True).order_by("created_at", "id"))

    def enable(self, pk):
        return self._set_enabled(pk, True)

    def disable(self, pk):
        """Disable a plugin. Its configuration is kept."""
        return self._set_enabled(pk, False)

    def _set_enabled(self, pk, enabled):
        plugin = self.model.objects.get(pk=pk)
        plugin.is_enabled = enabled
        plugin.save(update_fields=["is_enabled", "updated_at"])
        logger.info("Plugin %s %s", plugin.name, "enabled" if enabled else "disabled")
        return plugin

    def update_config(self, pk, config: Dict[str, Any]):
        plugin = self.model.objects.get(pk=pk)
        plugin.config = config
        plugin.save(update_fields=["config", "updated_at"])
        return plugin

    def uninstall(self, pk):
        plugin = self.model.objects.get(pk=pk)
        plugin.delete()
        logger.info("Uninstalled plugin %s", plugin.name)

    def get_dependencies(self, plugin) -> List[str]:
        return parse_dependencies(plugin.dependencies)

    def get_load_order(self) -> List[Plugin]:
        """Enabled plugins, dependencies first."""
        return resolve_load_order(self.find_enabled())

    def execute(self, plugin, action: Callable, *args, **kwargs) -> PluginResult:
        """
        Run ``action`` on behalf of ``plugin`` and capture any failure.

        ``action`` may be a plain callable or a coroutine function. The
        returned PluginResult carries the action's return value on success
        or the exception message on failure; nothing is raised.
        """
        try:
            if inspect.iscoroutinefunction(action):
                result = async_to_sync(action)(*args, **kwargs)
            else:
                result = action(*args, **kwargs)
                if inspect.isawaitable(result):
                    result = async_to_sync(_await)(result)
        except Exception as e:
            logger.error("Plugin %s error: %s", plugin.name, e)
            return PluginResult(success=False, error=str(e))
        return PluginResult(success=True, result=result)

    async def aexecute(self, plugin, action: Callable, *args, **kwargs) -> PluginResult:
        """Async counterpart of execute() for callers already on an event loop."""
        try:
            result = action(*args, **kwargs)
            if inspect.isawaitable(result):
                result = await result
        except Exception as e:
            logger.error("Plugin %s error: %s", plugin.name, e)
            return PluginResult(success=False, error=str(e))
        return PluginResult(success=True, result=result)

    def boot(self, loader: Callable = import_string) -> Dict[str, PluginResult]:
        """
        Load every enabled plugin in dependency order.

        ``loader`` receives the plugin's ``path``; if it returns a callable,
        that callable is invoked with the plugin's config. A failing plugin
        is reported in the result map and does not stop the others.
        """
        results = {}
        for plugin in self.get_load_order():
            results[plugin.name] = self.execute(plugin, _load_plugin, loader, plugin)
        return results


def _load_plugin(loader, plugin):
    entry_point = loader(plugin.path)
    if callable(entry_point):
        return entry_point(dict(plugin.config or {}))
    return entry_point


async def _await(awaitable):
    return await awaitable
