import jwt
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from eventhorizon.core.errors import AuthenticationError
from eventhorizon.core.security import decode_access_token
from eventhorizon.crud.user import get_user_by_username
from eventhorizon.database.db import get_db
from eventhorizon.models.users import User

security = HTTPBearer(auto_error=False)


def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
    db: Session = Depends(get_db),
) -> User:
    """Resolve the bearer token to a user; the token's jti must match the stored one."""
    if credentials is None:
        raise AuthenticationError("Not authenticated")
    try:
        payload = decode_access_token(credentials.credentials)
    except jwt.InvalidTokenError:
        raise AuthenticationError()

    user = get_user_by_username(db, payload["sub"])
    if not user or user.jti != payload["jti"]:
        raise AuthenticationError()
    return user
