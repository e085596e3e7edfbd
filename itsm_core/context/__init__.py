"""Context management for operations and tenant isolation."""

from .operation_context import OperationContext, operation
from .tenant_context import TenantScope, get_scoped_or_404, require_scope, scoped_query

__all__ = [
    "operation",
    "OperationContext",
    "TenantScope",
    "get_scoped_or_404",
    "require_scope",
    "scoped_query",
]
