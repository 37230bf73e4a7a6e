"""
Reconciler plugins package.

Reconcilers own the create/read/update/delete logic for one or more resource
types. Third-party reconcilers are discovered via Python entry points
(group: 'enterprise_reconciler.reconcilers').
"""

from plugins.reconcilers.base import ResourceReconciler
from plugins.reconcilers.enterprise import EnterpriseReconciler

__all__ = ["ResourceReconciler", "EnterpriseReconciler"]
