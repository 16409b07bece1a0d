"""SQLAlchemy models exposed by the backend."""
from .base import Base
from .category import Category
from .enums import RequestStatus, Role
from .leave_request import LeaveRequest
from .user import User

__all__ = ["Base", "Category", "LeaveRequest", "RequestStatus", "Role", "User"]
