# SQLAlchemy models
from .base import Base
from .responses import ResponseRow

__all__ = ["Base", "ResponseRow"]
