"""
Plugin system for the Enterprise Reconciler.

This package provides the reconciler plugins and their registry.
"""

from plugins.reconcilers import EnterpriseReconciler, ResourceReconciler
from plugins.registry import PluginRegistry, get_registry

__all__ = [
    "EnterpriseReconciler",
    "ResourceReconciler",
    "PluginRegistry",
    "get_registry",
]
