"""Users feature module"""

from scribo.features.users.domain import CurrentUser, User
from scribo.features.users.repository import UserRepository

__all__ = ["CurrentUser", "User", "UserRepository"]
