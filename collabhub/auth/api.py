# collabhub/auth/api.py
from fastapi import APIRouter, Depends
from fastapi.security import OAuth2PasswordRequestForm
from pydantic import BaseModel, EmailStr, Field
from sqlalchemy.orm import Session

from collabhub.shared.db import get_db
from collabhub.shared.auth import Principal, create_access_token, get_principal
from collabhub.shared.config import settings
from collabhub.shared.errors import Unauthorized, ValidationError
from collabhub.auth.service import register_user, authenticate_user

router = APIRouter(prefix="/auth", tags=["Auth"])

class RegisterIn(BaseModel):
    email: EmailStr
    password: str = Field(min_length=8)

@router.post("/register", status_code=201)
def api_register(inb: RegisterIn, db: Session = Depends(get_db)):
    try:
        user = register_user(db, inb.email, inb.password)
    except ValueError as e:
        raise ValidationError(str(e), [{"item": inb.email, "reason": str(e)}])
    return {"ok": True, "user": user}

@router.post("/token")
def api_token(form: OAuth2PasswordRequestForm = Depends(), db: Session = Depends(get_db)):
    if settings.AUTH_DEMO and form.username == "demo":
        # return the demo token; user pastes it in Authorize
        return {"access_token": settings.DEMO_TOKEN, "token_type": "bearer", "demo": True}
    user = authenticate_user(db, form.username, form.password)
    if not user:
        raise Unauthorized("invalid credentials")
    token = create_access_token(sub=user["sub"], role=user["role"])
    return {"access_token": token, "token_type": "bearer", "demo": False}

@router.get("/me")
def api_me(principal: Principal = Depends(get_principal)):
    return {"ok": True, "user": principal.model_dump()}
