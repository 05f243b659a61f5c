from sqlalchemy import select
from sqlalchemy.orm import Session

from eventhorizon.core.security import hash_password, new_jti, verify_password
from eventhorizon.models.users import User


def get_user_by_username(db: Session, username: str) -> User | None:
    return db.scalar(select(User).where(User.username == username))


def create_user(db: Session, username: str, password: str, *, is_admin: bool = False) -> User:
    user = User(username=username, password_hash=hash_password(password), is_admin=is_admin)
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def authenticate_user(db: Session, username: str, password: str) -> User | None:
    user = get_user_by_username(db, username)
    if not user or not verify_password(password, user.password_hash):
        return None
    return user


def update_user_jti(db: Session, username: str) -> str | None:
    """Issue a fresh token id for the user, invalidating any older token."""
    user = get_user_by_username(db, username)
    if not user:
        return None
    user.jti = new_jti()
    db.commit()
    return user.jti
