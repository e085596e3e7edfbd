"""Utility modules for the ITSM core."""

# Auth helpers
from .auth_utils import create_token, hash_password, verify_password, verify_token

# Category tree algorithms
from .category_tree_utils import (
    build_tree,
    category_stats,
    find_descendant_ids,
    flatten_options,
    iter_nodes,
    rollup_ticket_counts,
    search_categories,
)

# JSON helpers
from .json_utils import EnhancedJSONEncoder, dumps

# Logging utilities
from .logger import ContextAwareLogger, configure_logging, get_logger

__all__ = [
    "create_token",
    "hash_password",
    "verify_password",
    "verify_token",
    "build_tree",
    "category_stats",
    "find_descendant_ids",
    "flatten_options",
    "iter_nodes",
    "rollup_ticket_counts",
    "search_categories",
    "EnhancedJSONEncoder",
    "dumps",
    "ContextAwareLogger",
    "configure_logging",
    "get_logger",
]
