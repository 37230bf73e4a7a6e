"""
Enterprise Management API models.

Pydantic models for the request and response bodies exchanged with the
remote API.
"""

from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field


class Enterprise(BaseModel):
    """An enterprise as returned by GET /enterprises/{enterprise_id}."""

    id: Optional[str] = None
    url: Optional[str] = None
    enterprise_account_id: Optional[str] = None
    crn: Optional[str] = None
    name: Optional[str] = None
    domain: Optional[str] = None
    state: Optional[str] = None
    primary_contact_iam_id: Optional[str] = None
    primary_contact_email: Optional[str] = None
    created_at: Optional[datetime] = None
    created_by: Optional[str] = None
    updated_at: Optional[datetime] = None
    updated_by: Optional[str] = None


class CreateEnterpriseRequest(BaseModel):
    """Body of POST /enterprises."""

    source_account_id: str
    name: str
    primary_contact_iam_id: str
    domain: Optional[str] = Field(
        None, description="Omitted from the payload when not set"
    )

    def to_payload(self) -> Dict[str, Any]:
        # An empty-string domain is a value and must be sent.
        return self.model_dump(exclude_none=True)


class CreateEnterpriseResponse(BaseModel):
    """Body returned by POST /enterprises."""

    enterprise_id: Optional[str] = None
    enterprise_account_id: Optional[str] = None
