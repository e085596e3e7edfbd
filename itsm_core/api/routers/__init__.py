"""HTTP routers, one per resource."""

from . import auth, categories, tickets, users

__all__ = ["auth", "categories", "tickets", "users"]
