"""Files repository — data access layer."""

from sqlalchemy.orm import Session

from api.files.orm.file_model import FileModel


def list_by_user(session: Session, user_id: int) -> list[FileModel]:
    return session.query(FileModel).filter_by(user_id=user_id).order_by(FileModel.id).all()


def get_owned(session: Session, file_id: int, user_id: int) -> FileModel | None:
    """Look up a file by id and owner together; another user's file is simply absent."""
    return session.query(FileModel).filter_by(id=file_id, user_id=user_id).first()


def create(
    session: Session,
    user_id: int,
    original_name: str,
    storage_name: str,
    content_type: str,
    size: int,
    generate_uuid: str,
) -> FileModel:
    model = FileModel(
        user_id=user_id,
        original_name=original_name,
        storage_name=storage_name,
        content_type=content_type,
        size=size,
        generate_uuid=generate_uuid,
    )
    session.add(model)
    session.commit()
    session.refresh(model)
    return model


def delete(session: Session, model: FileModel) -> None:
    session.delete(model)
    session.commit()


def list_all(session: Session) -> list[FileModel]:
    return session.query(FileModel).order_by(FileModel.id).all()
