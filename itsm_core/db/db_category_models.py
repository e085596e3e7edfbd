"""
Category model.

Categories form a tree through a flat ``parent_id`` column. There is no ORM
children collection: trees are assembled from id/parent_id pairs in
utils.category_tree_utils.
"""

from sqlalchemy import Column, ForeignKey, Index, String, Text

from .db_base import TimestampMixin, UUIDMixin
from .db_config import Base


class Category(Base, UUIDMixin, TimestampMixin):
    """A node of a tenant's category tree."""

    __tablename__ = "category"

    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    parent_id = Column(String(36), ForeignKey("category.id", ondelete="SET NULL"), nullable=True)
    tenant_id = Column(String(36), ForeignKey("tenant.id", ondelete="CASCADE"), nullable=False)

    __table_args__ = (
        Index("ix_category_tenant", "tenant_id"),
        Index("ix_category_tenant_parent", "tenant_id", "parent_id"),
    )

    def __repr__(self) -> str:
        return f"<Category(id='{self.id}', name='{self.name}', parent_id='{self.parent_id}')>"
