"""
Reconciler Plugin Base - Abstract interface for resource reconcilers.

A reconciler translates between a resource's declared attributes and a
remote management API through four operations: create, read, update and
delete. The driving engine decides which operation to call; reconcilers
hold no state between calls.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Mapping, Optional

from errors import ClientUnavailable, InvalidState, RemoteNotFound
from instance import InstanceState, ResourceInstance
from schema import AttributeSchema

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 600  # 10 minutes


class ResourceReconciler(ABC):
    """
    Abstract base class for resource reconcilers.

    Reconcilers are discovered via Python entry points in the
    'enterprise_reconciler.reconcilers' group.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Unique identifier for this reconciler."""
        pass

    @property
    @abstractmethod
    def resource_types(self) -> List[str]:
        """Resource type names this reconciler handles."""
        pass

    @property
    @abstractmethod
    def schema(self) -> Mapping[str, AttributeSchema]:
        """The resource descriptor."""
        pass

    @property
    def default_timeouts(self) -> Dict[str, int]:
        """
        Per-operation budgets in seconds.

        Advisory: the driving engine enforces them, the reconciler does not.
        """
        return {
            "create": DEFAULT_TIMEOUT,
            "update": DEFAULT_TIMEOUT,
            "delete": DEFAULT_TIMEOUT,
        }

    @abstractmethod
    async def create(
        self, declared: Mapping[str, Any], instance: ResourceInstance, client: Any
    ) -> str:
        """
        Create the remote object and hydrate the instance.

        Args:
            declared: Declared attribute values.
            instance: An ABSENT instance; receives the new identifier.
            client: The remote-call capability.

        Returns:
            The identifier assigned by the remote system.
        """
        pass

    @abstractmethod
    async def read(
        self, instance: ResourceInstance, client: Any
    ) -> Optional[Dict[str, Any]]:
        """
        Refresh the instance from the remote object.

        Returns:
            The refreshed attribute values, or None if the remote object is
            gone (the instance is then ABSENT).
        """
        pass

    @abstractmethod
    async def update(
        self, declared: Mapping[str, Any], instance: ResourceInstance, client: Any
    ) -> Dict[str, Any]:
        """
        Push changed mutable attributes and re-hydrate the instance.

        Returns:
            The attributes that were sent to the remote system (empty when
            nothing changed).
        """
        pass

    @abstractmethod
    async def delete(self, instance: ResourceInstance, client: Any = None) -> None:
        """Remove the resource from the instance record."""
        pass

    async def import_state(self, identifier: str, client: Any) -> ResourceInstance:
        """
        Build an instance for an existing remote object.

        Args:
            identifier: The remote identifier.
            client: The remote-call capability.

        Returns:
            A hydrated PRESENT instance.

        Raises:
            RemoteNotFound: If no remote object has that identifier.
        """
        instance = ResourceInstance(
            resource_type=self.resource_types[0], id=identifier, schema=self.schema
        )
        if await self.read(instance, client) is None:
            raise RemoteNotFound("Import", identifier)
        logger.info(f"Imported {instance.resource_type} '{identifier}'")
        return instance

    @staticmethod
    def require_client(client: Any) -> Any:
        """Raise ClientUnavailable if no client was supplied."""
        if client is None:
            raise ClientUnavailable("Remote-call client is not available")
        return client

    @staticmethod
    def require_state(
        instance: ResourceInstance, expected: InstanceState, operation: str
    ) -> None:
        """Raise InvalidState unless the instance is in the expected state."""
        if instance.state is not expected:
            raise InvalidState(
                f"{operation} requires a {expected.value} instance, "
                f"but {instance.resource_type} is {instance.state.value}"
            )
