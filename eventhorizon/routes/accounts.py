from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from eventhorizon.core.errors import AuthenticationError, ConflictError
from eventhorizon.core.security import create_access_token
from eventhorizon.crud.user import authenticate_user, create_user, get_user_by_username, update_user_jti
from eventhorizon.database.db import get_db
from eventhorizon.models.users import User
from eventhorizon.routes.deps import get_current_user
from eventhorizon.schemas.users import TokenOut, UserCreate, UserLogin, UserOut

router = APIRouter(prefix="/accounts", tags=["accounts"])


@router.post("/new-user", response_model=UserOut, status_code=status.HTTP_201_CREATED)
def new_user(payload: UserCreate, db: Session = Depends(get_db)):
    if get_user_by_username(db, payload.username):
        raise ConflictError(f"Username {payload.username!r} is already taken.")
    return create_user(db, payload.username, payload.password)


@router.post("/login", response_model=TokenOut)
def login(payload: UserLogin, db: Session = Depends(get_db)):
    user = authenticate_user(db, payload.username, payload.password)
    if not user:
        raise AuthenticationError("Incorrect username or password")
    jti = update_user_jti(db, user.username)
    return TokenOut(access_token=create_access_token(data={"sub": user.username}, jti=jti))


@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT)
def logout(user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    update_user_jti(db, user.username)


@router.get("/me", response_model=UserOut)
def me(user: User = Depends(get_current_user)):
    return user
