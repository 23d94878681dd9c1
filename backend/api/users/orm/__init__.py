from api.users.orm.user_model import UserModel

__all__ = ["UserModel"]
