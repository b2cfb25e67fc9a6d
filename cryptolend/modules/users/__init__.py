# Users module
from cryptolend.modules.users.models import User
from cryptolend.modules.users.schemas import UserDocument
from cryptolend.modules.users.services import UserService

__all__ = ["User", "UserDocument", "UserService"]
