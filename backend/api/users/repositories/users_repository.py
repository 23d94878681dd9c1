"""Users repository — data access layer for credentials."""

from sqlalchemy.orm import Session

from api.users.orm.user_model import UserModel


def get_by_email(session: Session, email: str) -> UserModel | None:
    return session.query(UserModel).filter_by(email=email).first()


def get_by_id(session: Session, user_id: int) -> UserModel | None:
    return session.get(UserModel, user_id)


def email_exists(session: Session, email: str) -> bool:
    return get_by_email(session, email) is not None


def create(session: Session, username: str, email: str, password_hash: str) -> UserModel:
    model = UserModel(username=username, email=email, password=password_hash)
    session.add(model)
    session.commit()
    session.refresh(model)
    return model
