# barbershop/routers/auth_routes.py

from fastapi import APIRouter, Depends, HTTPException
from fastapi.security import OAuth2PasswordRequestForm

from barbershop.repository import InMemoryRepository
from barbershop.schemas import Token
from barbershop.security import create_access_token, verify_password
from barbershop.store import get_repository

router = APIRouter(
    prefix="/auth",
    tags=["auth"],
)


@router.post("/login", response_model=Token)
def login(
    form_data: OAuth2PasswordRequestForm = Depends(),
    repo: InMemoryRepository = Depends(get_repository),
):
    # Swagger's OAuth2 "password" flow calls it username; here it is the phone number
    user = repo.find_customer_by_phone(form_data.username)
    if user is None or not verify_password(form_data.password, user.password_hash):
        raise HTTPException(status_code=401, detail="Invalid credentials")

    token = create_access_token({"sub": user.id})
    return {"access_token": token, "token_type": "bearer"}
