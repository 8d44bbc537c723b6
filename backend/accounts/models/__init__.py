"""SQLAlchemy models exposed for imports."""
from .user import User

__all__ = ["User"]
