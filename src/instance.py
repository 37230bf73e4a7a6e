"""
Resource Instance - the local record of one reconciled resource.
"""

import copy
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Mapping, Optional

from errors import AttributeAssignmentFailure
from schema import ENTERPRISE_SCHEMA, RESOURCE_TYPE, AttributeSchema

# Identifier value before creation and after deletion.
TOMBSTONE_ID = ""


class InstanceState(Enum):
    """Lifecycle state of an instance."""

    ABSENT = "absent"
    PRESENT = "present"


@dataclass
class ResourceInstance:
    """
    Identifier plus last-known attribute values of one resource.

    The identifier is the only durable handle on the remote object. Losing it
    orphans the remote object relative to this record.
    """

    resource_type: str = RESOURCE_TYPE
    id: str = TOMBSTONE_ID
    attributes: Dict[str, Any] = field(default_factory=dict)
    schema: Mapping[str, AttributeSchema] = field(
        default_factory=lambda: ENTERPRISE_SCHEMA, repr=False, compare=False
    )

    @property
    def state(self) -> InstanceState:
        return InstanceState.PRESENT if self.id else InstanceState.ABSENT

    def get(self, name: str, default: Any = None) -> Any:
        return self.attributes.get(name, default)

    def set_id(self, identifier: str) -> None:
        self.id = identifier

    def clear_id(self) -> None:
        self.id = TOMBSTONE_ID

    def _check(self, name: str, value: Any) -> None:
        attr = self.schema.get(name)
        if attr is None:
            raise AttributeAssignmentFailure(name, "unknown attribute")
        if value is not None and not isinstance(value, str):
            raise AttributeAssignmentFailure(
                name,
                f"expected {attr.type}, got {type(value).__name__}",
            )

    def set(self, name: str, value: Optional[str]) -> None:
        """
        Assign one attribute.

        Raises:
            AttributeAssignmentFailure: If the attribute is unknown or the
                value has the wrong type.
        """
        self._check(name, value)
        self.attributes[name] = value

    def update_attributes(self, values: Mapping[str, Any]) -> None:
        """Assign several attributes; nothing is assigned if any value is rejected."""
        for name, value in values.items():
            self._check(name, value)
        self.attributes.update(values)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to a plain dict suitable for persistence."""
        return {
            "resource_type": self.resource_type,
            "id": self.id,
            "attributes": copy.deepcopy(self.attributes),
        }

    @classmethod
    def from_dict(
        cls,
        data: Mapping[str, Any],
        schema: Mapping[str, AttributeSchema] = ENTERPRISE_SCHEMA,
    ) -> "ResourceInstance":
        """Restore an instance saved with :meth:`to_dict`."""
        instance = cls(
            resource_type=data.get("resource_type", RESOURCE_TYPE),
            id=data.get("id") or TOMBSTONE_ID,
            schema=schema,
        )
        instance.update_attributes(data.get("attributes") or {})
        return instance
