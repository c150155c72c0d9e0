from .db import Base, build_engine, build_session_factory
from .user import User

__all__ = [
	"Base",
	"User",
	"build_engine",
	"build_session_factory",
]
