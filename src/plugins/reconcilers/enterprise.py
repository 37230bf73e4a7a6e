"""
Enterprise Reconciler - create, read, update and delete for enterprises.
"""

import logging
from typing import Any, Dict, List, Mapping, Optional

from errors import RemoteNotFound
from instance import InstanceState, ResourceInstance
from models import CreateEnterpriseRequest, Enterprise
from plugins.reconcilers.base import ResourceReconciler
from schema import (
    ENTERPRISE_SCHEMA,
    READ_ATTRIBUTES,
    RESOURCE_TYPE,
    AttributeSchema,
    Mutability,
    OptionalValue,
    attributes_by_mutability,
    format_timestamp,
)

logger = logging.getLogger(__name__)

# name and primary_contact_iam_id are required, domain is optional
MUTABLE_ATTRIBUTES = attributes_by_mutability(ENTERPRISE_SCHEMA, Mutability.MUTABLE)


def enterprise_attributes(enterprise: Enterprise) -> Dict[str, Optional[str]]:
    """Map a remote enterprise onto the instance attributes refreshed by Read."""
    values = {
        "name": enterprise.name,
        "primary_contact_iam_id": enterprise.primary_contact_iam_id,
        "domain": enterprise.domain,
        "url": enterprise.url,
        "enterprise_account_id": enterprise.enterprise_account_id,
        "crn": enterprise.crn,
        "state": enterprise.state,
        "primary_contact_email": enterprise.primary_contact_email,
        "created_at": format_timestamp(enterprise.created_at),
        "created_by": enterprise.created_by,
        "updated_at": format_timestamp(enterprise.updated_at),
        "updated_by": enterprise.updated_by,
    }
    return {name: values[name] for name in READ_ATTRIBUTES}


class EnterpriseReconciler(ResourceReconciler):
    """
    Reconciler for the ibm_enterprise resource type.

    Delete only forgets the enterprise locally: the Enterprise Management API
    has no delete call, so the remote enterprise outlives the record.
    """

    @property
    def name(self) -> str:
        return "enterprise"

    @property
    def resource_types(self) -> List[str]:
        return [RESOURCE_TYPE]

    @property
    def schema(self) -> Mapping[str, AttributeSchema]:
        return ENTERPRISE_SCHEMA

    async def create(
        self, declared: Mapping[str, Any], instance: ResourceInstance, client: Any
    ) -> str:
        self.require_state(instance, InstanceState.ABSENT, "Create")
        client = self.require_client(client)

        domain = OptionalValue.from_declared(declared, "domain")
        request = CreateEnterpriseRequest(
            source_account_id=declared["source_account_id"],
            name=declared["name"],
            primary_contact_iam_id=declared["primary_contact_iam_id"],
            domain=domain.value if domain.is_set else None,
        )

        enterprise_id = await client.create_enterprise(request)

        instance.update_attributes(
            {
                "source_account_id": request.source_account_id,
                "name": request.name,
                "primary_contact_iam_id": request.primary_contact_iam_id,
                "domain": request.domain,
            }
        )
        instance.set_id(enterprise_id)
        logger.info(f"Created enterprise '{enterprise_id}' ({request.name})")

        await self.read(instance, client)
        return enterprise_id

    async def read(
        self, instance: ResourceInstance, client: Any
    ) -> Optional[Dict[str, Any]]:
        self.require_state(instance, InstanceState.PRESENT, "Read")
        client = self.require_client(client)

        try:
            enterprise = await client.get_enterprise(instance.id)
        except RemoteNotFound:
            logger.warning(
                f"Enterprise '{instance.id}' no longer exists, removing it from state"
            )
            instance.clear_id()
            return None

        values = enterprise_attributes(enterprise)
        instance.update_attributes(values)
        return values

    def changed_attributes(
        self, declared: Mapping[str, Any], instance: ResourceInstance
    ) -> Dict[str, Any]:
        """
        Mutable attributes whose declared value differs from the last-known one.

        An optional attribute left out of the declaration is not managed and
        never counts as changed. For optional attributes an empty declared
        value matches a remote null.
        """
        changes: Dict[str, Any] = {}
        for name in MUTABLE_ATTRIBUTES:
            declared_value = OptionalValue.from_declared(declared, name)
            if not declared_value.is_set:
                continue
            known = instance.get(name)
            if known is None and not self.schema[name].required:
                known = ""
            if declared_value.value != known:
                changes[name] = declared_value.value
        return changes

    async def update(
        self, declared: Mapping[str, Any], instance: ResourceInstance, client: Any
    ) -> Dict[str, Any]:
        self.require_state(instance, InstanceState.PRESENT, "Update")
        client = self.require_client(client)

        changes = self.changed_attributes(declared, instance)
        if changes:
            await client.update_enterprise(instance.id, changes)
            logger.info(
                f"Updated enterprise '{instance.id}': {', '.join(sorted(changes))}"
            )
        else:
            logger.debug(f"Enterprise '{instance.id}' is up to date, no update sent")

        await self.read(instance, client)
        return changes

    async def delete(self, instance: ResourceInstance, client: Any = None) -> None:
        self.require_state(instance, InstanceState.PRESENT, "Delete")

        enterprise_id = instance.id
        instance.clear_id()
        # TODO: call the API once the Enterprise Management service supports deletion
        logger.warning(
            f"Removed enterprise '{enterprise_id}' from state; "
            f"the remote enterprise is not deleted"
        )
