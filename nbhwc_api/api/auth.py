from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, ConfigDict, EmailStr, Field, StringConstraints
from sqlalchemy.orm import Session

from nbhwc_api.core.auth import create_token
from nbhwc_api.core.database import get_db
from nbhwc_api.services.accounts import authenticate, register_user

router = APIRouter()

class RegisterIn(BaseModel):
    model_config = ConfigDict(populate_by_name=True)
    full_name: Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)] = Field(alias="fullName")
    email: EmailStr
    password: str = Field(min_length=1)

class RegisteredUser(BaseModel):
    user_id: int
    email: str
    full_name: str

class LoginIn(BaseModel):
    email: str
    password: str

@router.post("/register", response_model=RegisteredUser, status_code=201)
def register(payload: RegisterIn, db: Session = Depends(get_db)):
    user = register_user(db, payload.full_name, payload.email, payload.password)
    return RegisteredUser(user_id=user.id, email=user.email, full_name=user.full_name)

@router.post("/login")
def login(payload: LoginIn, db: Session = Depends(get_db)):
    user = authenticate(db, payload.email, payload.password)
    if not user: raise HTTPException(status.HTTP_401_UNAUTHORIZED, "Invalid credentials.")
    claims = {"userId": user.id, "email": user.email, "name": user.full_name}
    return {"token": create_token(user.id, user.email, user.full_name), "user": claims}
