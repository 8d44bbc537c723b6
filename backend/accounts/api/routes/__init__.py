"""Route modules for the user accounts API."""
from . import health, users

__all__ = ["health", "users"]
