"""
Pydantic schemas for categories and the derived tree views.
"""

from typing import List, Optional

from pydantic import Field

from .mixins import ApiModel, CoreEntityMixin


class CategoryCreate(ApiModel):
    """Schema for creating a category; validation happens in CategoryService."""

    name: Optional[str] = None
    description: Optional[str] = None
    parent_id: Optional[str] = None


class CategoryUpdate(ApiModel):
    """
    Partial update. Only fields present in ``model_fields_set`` are applied;
    an explicit null ``parent_id`` moves the category to the root.
    """

    name: Optional[str] = None
    description: Optional[str] = None
    parent_id: Optional[str] = None


class CategoryRead(CoreEntityMixin):
    name: str
    description: Optional[str] = None
    parent_id: Optional[str] = None
    tickets_count: int = Field(default=0, description="Tickets filed directly under this node")


class CategoryNode(CategoryRead):
    """A category with its children, as produced by build_tree()."""

    children: List["CategoryNode"] = Field(default_factory=list)
    subtree_tickets_count: Optional[int] = Field(
        default=None, description="Derived rollup over the subtree; None until computed"
    )


CategoryNode.model_rebuild()


class CategoryOption(ApiModel):
    """Pick-list entry with a breadcrumb label such as 'Bugs / Critical'."""

    id: str
    label: str


class CategoryStats(ApiModel):
    total: int = 0
    roots: int = 0
    tickets: int = 0
