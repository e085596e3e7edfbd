"""
Common Pydantic schema mixins.

The external JSON contract is camelCase while Python code uses snake_case;
ApiModel accepts both on input and serializes camelCase with ``by_alias``.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class ApiModel(BaseModel):
    """Base for all DTOs: ORM-readable, camelCase aliases, snake_case names."""

    model_config = ConfigDict(
        from_attributes=True,
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


class IdMixin(ApiModel):
    """Mixin for schemas that include a unique identifier."""

    id: str = Field(..., description="Unique identifier for the record")


class TenantMixin(ApiModel):
    """Mixin for schemas that include tenant isolation."""

    tenant_id: str = Field(..., description="Owning tenant")


class TimestampMixin(ApiModel):
    """Mixin for schemas that include creation and update timestamps."""

    created_at: datetime = Field(..., description="Timestamp when the record was created")
    updated_at: datetime = Field(..., description="Timestamp when the record was last updated")


class CoreEntityMixin(IdMixin, TenantMixin, TimestampMixin):
    """Common mixin for tenant-owned entities with ID and timestamps."""

    pass
