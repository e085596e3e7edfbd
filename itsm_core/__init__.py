"""Multi-tenant IT service management core: categories, tickets and their history."""

__version__ = "0.1.0"
