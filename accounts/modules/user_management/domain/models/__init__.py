from .user import PasswordUpdate, UpdateUser, User

__all__ = ["PasswordUpdate", "UpdateUser", "User"]
