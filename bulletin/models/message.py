"""
Boundary representations of a message: what clients send and what they get back.
"""

from datetime import datetime
from typing import Any, Dict, Optional
from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class MessageBoundary(BaseModel):
    """
    Message payload as submitted by a client.

    Every field is optional at this level so that the message service,
    not the parser, decides what is missing. Server-assigned fields
    (`id`, `publicationTimestamp`) are accepted but ignored on create.
    """
    model_config = ConfigDict(populate_by_name=True)

    id: Optional[str] = Field(None, description="Ignored on create")
    target: Optional[str] = Field(None, description="Recipient email")
    sender: Optional[str] = Field(None, description="Sender email")
    title: Optional[str] = Field(None, description="Message title")
    publication_timestamp: Optional[datetime] = Field(
        None,
        alias="publicationTimestamp",
        description="Ignored on create"
    )
    urgent: Optional[bool] = Field(None, description="Urgency flag, required on create")
    extra_attributes: Optional[Dict[str, Any]] = Field(
        None,
        validation_alias=AliasChoices("extraAttributes", "moreDetails", "extra_attributes"),
        description="Free-form attributes"
    )


class MessageView(BaseModel):
    """Message as returned to clients."""
    model_config = ConfigDict(populate_by_name=True, from_attributes=True)

    id: str = Field(..., description="Message ID")
    target: str = Field(..., description="Normalized recipient email")
    sender: str = Field(..., description="Normalized sender email")
    title: str = Field(..., description="Message title")
    publication_timestamp: datetime = Field(
        ...,
        alias="publicationTimestamp",
        description="Server-assigned creation time (UTC)"
    )
    urgent: bool = Field(..., description="Urgency flag")
    extra_attributes: Dict[str, Any] = Field(
        default_factory=dict,
        alias="extraAttributes",
        description="Free-form attributes"
    )

    def to_wire(self) -> Dict[str, Any]:
        """JSON-compatible dict using the camelCase wire names."""
        return self.model_dump(mode="json", by_alias=True)
