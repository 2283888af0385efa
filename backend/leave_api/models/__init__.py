from .leave_request import LeaveRequest
from .manager import Manager
from .role import Role, RoleName
from .user import User

__all__ = ["Role", "RoleName", "User", "Manager", "LeaveRequest"]
