from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

from eventhorizon.database.db import get_db
from eventhorizon.models.users import User
from eventhorizon.routes.deps import get_current_user
from eventhorizon.schemas.registrations import RegistrationOut
from eventhorizon.services.registrations import cancel_registration, get_registration, list_user_registrations

router = APIRouter(prefix="/registrations", tags=["registrations"])


@router.get("/mine", response_model=list[RegistrationOut])
def my_registrations(db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    return list_user_registrations(db, user.id)


@router.get("/{registration_id}", response_model=RegistrationOut)
def registration_detail(registration_id: int, db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    return get_registration(db, registration_id, viewer=user)


@router.delete("/{registration_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_registration(registration_id: int, db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    cancel_registration(db, registration_id=registration_id, actor=user)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
