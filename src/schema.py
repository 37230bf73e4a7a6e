"""
Resource Descriptor - attribute table for the enterprise resource.

The descriptor is static data: attribute name, type, mutability class and
the constraints used to validate declared values.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional

RESOURCE_TYPE = "ibm_enterprise"

IAM_ID_PATTERN = r"^IBMid-[A-Z0-9]{10}$"
NAME_MIN_LENGTH = 3
NAME_MAX_LENGTH = 60


class Mutability(Enum):
    """How an attribute may change over the life of an instance."""

    IMMUTABLE = "immutable"  # set at creation only
    MUTABLE = "mutable"  # updated in place
    DERIVED = "derived"  # computed remotely


@dataclass(frozen=True)
class AttributeSchema:
    """Descriptor entry for a single attribute."""

    name: str
    mutability: Mutability
    type: str = "string"
    required: bool = False
    description: str = ""
    constraints: Dict[str, Any] = field(default_factory=dict)

    @property
    def settable(self) -> bool:
        """Whether the caller may supply this attribute."""
        return self.mutability is not Mutability.DERIVED


def _attrs(*entries: AttributeSchema) -> Dict[str, AttributeSchema]:
    return {entry.name: entry for entry in entries}


ENTERPRISE_SCHEMA: Dict[str, AttributeSchema] = _attrs(
    AttributeSchema(
        name="source_account_id",
        mutability=Mutability.IMMUTABLE,
        required=True,
        description="The ID of the account that is used to create the enterprise.",
    ),
    AttributeSchema(
        name="name",
        mutability=Mutability.MUTABLE,
        required=True,
        description="The name of the enterprise. This field must have 3 - 60 characters.",
        constraints={"minLength": NAME_MIN_LENGTH, "maxLength": NAME_MAX_LENGTH},
    ),
    AttributeSchema(
        name="primary_contact_iam_id",
        mutability=Mutability.MUTABLE,
        required=True,
        description=(
            "The IAM ID of the enterprise primary contact, such as "
            "`IBMid-0123ABCDEF`. The IAM ID must already exist."
        ),
        constraints={"pattern": IAM_ID_PATTERN},
    ),
    AttributeSchema(
        name="domain",
        mutability=Mutability.MUTABLE,
        description=(
            "A domain or subdomain for the enterprise, such as `example.com` "
            "or `my.example.com`."
        ),
    ),
    AttributeSchema(
        name="url",
        mutability=Mutability.DERIVED,
        description="The URL of the enterprise.",
    ),
    AttributeSchema(
        name="enterprise_account_id",
        mutability=Mutability.DERIVED,
        description="The enterprise account ID.",
    ),
    AttributeSchema(
        name="crn",
        mutability=Mutability.DERIVED,
        description="The Cloud Resource Name (CRN) of the enterprise.",
    ),
    AttributeSchema(
        name="state",
        mutability=Mutability.DERIVED,
        description="The state of the enterprise.",
    ),
    AttributeSchema(
        name="primary_contact_email",
        mutability=Mutability.DERIVED,
        description="The email of the primary contact of the enterprise.",
    ),
    AttributeSchema(
        name="created_at",
        mutability=Mutability.DERIVED,
        description="The time stamp at which the enterprise was created.",
    ),
    AttributeSchema(
        name="created_by",
        mutability=Mutability.DERIVED,
        description="The IAM ID of the user or service that created the enterprise.",
    ),
    AttributeSchema(
        name="updated_at",
        mutability=Mutability.DERIVED,
        description="The time stamp at which the enterprise was last updated.",
    ),
    AttributeSchema(
        name="updated_by",
        mutability=Mutability.DERIVED,
        description="The IAM ID of the user or service that updated the enterprise.",
    ),
)


def attributes_by_mutability(
    schema: Mapping[str, AttributeSchema], mutability: Mutability
) -> List[str]:
    """Return attribute names of the given mutability class, in schema order."""
    return [name for name, attr in schema.items() if attr.mutability is mutability]


# Attributes overwritten by every successful Read.
READ_ATTRIBUTES = [
    "name",
    "primary_contact_iam_id",
    "domain",
    "url",
    "enterprise_account_id",
    "crn",
    "state",
    "primary_contact_email",
    "created_at",
    "created_by",
    "updated_at",
    "updated_by",
]


class Presence(Enum):
    """Presence of an optional attribute in a declaration."""

    ABSENT = "absent"
    EMPTY = "empty"
    VALUE = "value"


@dataclass(frozen=True)
class OptionalValue:
    """
    An optional declared value that keeps "not set" apart from "set to empty".

    Use :meth:`from_declared` to read one out of a declared mapping: a missing
    key or ``None`` is ABSENT, an empty string is EMPTY, anything else is
    VALUE.
    """

    presence: Presence
    value: Optional[str] = None

    @classmethod
    def from_declared(cls, declared: Mapping[str, Any], name: str) -> "OptionalValue":
        raw = declared.get(name)
        if raw is None:
            return cls(Presence.ABSENT)
        if raw == "":
            return cls(Presence.EMPTY, "")
        return cls(Presence.VALUE, raw)

    @property
    def is_set(self) -> bool:
        return self.presence is not Presence.ABSENT


def format_timestamp(value: Optional[datetime]) -> Optional[str]:
    """
    Normalize a timestamp to its canonical string form.

    Canonical form is UTC with millisecond precision, e.g.
    ``2024-01-15T10:30:00.000Z``. Naive datetimes are taken as UTC.
    """
    if value is None:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    value = value.astimezone(timezone.utc)
    return value.strftime("%Y-%m-%dT%H:%M:%S.") + f"{value.microsecond // 1000:03d}Z"
