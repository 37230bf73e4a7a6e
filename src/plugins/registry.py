"""
Plugin Registry - Discovery and registration of reconciler plugins.

This module provides the central registry for reconcilers, handling
discovery, registration, and instantiation.
"""

import logging
from importlib.metadata import entry_points
from typing import Any, Dict, List, Optional, Type

from plugins.reconcilers.base import ResourceReconciler

logger = logging.getLogger(__name__)

ENTRY_POINT_GROUP = "enterprise_reconciler.reconcilers"


class PluginRegistry:
    """
    Central registry for reconciler plugins.

    Maps reconciler names and resource type names to reconciler classes.
    """

    def __init__(self):
        # Registered reconciler classes (not instantiated)
        self._reconciler_plugins: Dict[str, Type[ResourceReconciler]] = {}

        # Cached reconciler metadata to avoid repeated instantiation
        self._reconciler_plugin_info: Dict[str, Dict[str, Any]] = {}

        # Instantiated reconcilers
        self._reconciler_instances: Dict[str, ResourceReconciler] = {}

        # Mapping from resource type name to reconciler plugin name
        self._resource_type_to_reconciler: Dict[str, str] = {}

    def register_reconciler_plugin(
        self, plugin_class: Type[ResourceReconciler]
    ) -> None:
        """
        Register a reconciler plugin class.

        Args:
            plugin_class: The ResourceReconciler subclass to register

        Raises:
            ValueError: If a resource type is already claimed by another reconciler
        """
        temp_instance = plugin_class()
        name = temp_instance.name
        resource_types = temp_instance.resource_types

        if name in self._reconciler_plugins:
            logger.warning(f"Overwriting existing reconciler plugin: {name}")

        for rt in resource_types:
            existing = self._resource_type_to_reconciler.get(rt)
            if existing and existing != name:
                raise ValueError(
                    f"Resource type '{rt}' is already claimed by "
                    f"reconciler '{existing}'. Cannot register '{name}'."
                )

        self._reconciler_plugins[name] = plugin_class
        self._reconciler_plugin_info[name] = {
            "name": name,
            "resource_types": resource_types,
        }
        self._reconciler_instances.pop(name, None)

        for rt in resource_types:
            self._resource_type_to_reconciler[rt] = name

        logger.info(
            f"Registered reconciler plugin: {name} "
            f"(resource types: {', '.join(resource_types)})"
        )

    def get_reconciler_plugin(self, name: str) -> ResourceReconciler:
        """
        Get a reconciler plugin instance.

        Args:
            name: The reconciler plugin name

        Returns:
            A ResourceReconciler instance

        Raises:
            ValueError: If the reconciler name is not registered
        """
        if name not in self._reconciler_plugins:
            available = ", ".join(self._reconciler_plugins.keys()) or "none"
            raise ValueError(
                f"Unknown reconciler plugin: {name}. "
                f"Available reconcilers: {available}"
            )

        if name not in self._reconciler_instances:
            self._reconciler_instances[name] = self._reconciler_plugins[name]()
            logger.debug(f"Instantiated reconciler plugin: {name}")

        return self._reconciler_instances[name]

    def list_reconciler_plugins(self) -> List[str]:
        """List all registered reconciler plugin names."""
        return list(self._reconciler_plugins.keys())

    def list_resource_types(self) -> List[str]:
        """List all resource types claimed by a reconciler."""
        return list(self._resource_type_to_reconciler.keys())

    def has_reconciler_for_resource_type(self, resource_type_name: str) -> bool:
        """Check if any reconciler handles the given resource type."""
        return resource_type_name in self._resource_type_to_reconciler

    def get_reconciler_for_resource_type(
        self, resource_type_name: str
    ) -> Optional[ResourceReconciler]:
        """
        Get the reconciler instance for a resource type.

        Args:
            resource_type_name: The resource type name

        Returns:
            A ResourceReconciler instance, or None if no reconciler handles it
        """
        reconciler_name = self._resource_type_to_reconciler.get(resource_type_name)
        if reconciler_name is None:
            return None
        return self.get_reconciler_plugin(reconciler_name)

    def get_reconciler_plugin_info(self, name: str) -> Optional[Dict[str, Any]]:
        """
        Get information about a registered reconciler plugin.

        Args:
            name: The reconciler plugin name

        Returns:
            Dictionary with 'name' and 'resource_types', or None if not found
        """
        return self._reconciler_plugin_info.get(name)


# Global registry instance
_registry: Optional[PluginRegistry] = None


def get_registry() -> PluginRegistry:
    """Get the global plugin registry singleton."""
    global _registry
    if _registry is None:
        _registry = PluginRegistry()
    return _registry


def reset_registry() -> None:
    """Reset the global registry (mainly for testing)."""
    global _registry
    _registry = None


def register_builtin_plugins() -> None:
    """
    Register the built-in enterprise reconciler and discover third-party
    reconcilers via entry points.
    """
    registry = get_registry()

    from plugins.reconcilers.enterprise import EnterpriseReconciler

    registry.register_reconciler_plugin(EnterpriseReconciler)

    discovered = entry_points(group=ENTRY_POINT_GROUP)
    for ep in discovered:
        try:
            reconciler_class = ep.load()
            registry.register_reconciler_plugin(reconciler_class)
        except Exception as e:
            logger.warning(f"Could not load reconciler plugin {ep.name}: {e}")
