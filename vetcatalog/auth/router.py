from __future__ import annotations

import logging
from typing import List

from fastapi import APIRouter, HTTPException, status

from ..db import get_session
from ..deps import CurrentUser
from ..models import User
from ..security import create_access_token
from .schemas import (
    LoginRequest,
    RegisterRequest,
    TokenResponse,
    UserListItem,
    UserProfile,
)
from .service import EmailTakenError, authenticate, list_users, register_user

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["auth"])


@router.post("/register", response_model=TokenResponse, status_code=status.HTTP_201_CREATED)
def register(request: RegisterRequest) -> TokenResponse:
    if not (request.name and request.email and request.password and request.phone_number):
        raise HTTPException(
            status_code=400,
            detail="Name, email, password, and phone number are required.",
        )
    with get_session() as session:
        try:
            user = register_user(
                session,
                name=request.name,
                email=request.email,
                password=request.password,
                phone_number=request.phone_number,
                role=request.role,
            )
        except EmailTakenError:
            raise HTTPException(
                status_code=409, detail="An account with this email already exists."
            )
        except ValueError as exc:
            raise HTTPException(status_code=400, detail=str(exc))
        token = create_access_token(user)
        profile = UserProfile.model_validate(user)
    return TokenResponse(
        message=f"Welcome {profile.email}! Your registration was successful.",
        token=token,
        user=profile,
    )


@router.post("/login", response_model=TokenResponse, response_model_exclude_none=True)
def login(request: LoginRequest) -> TokenResponse:
    if not (request.email and request.password):
        raise HTTPException(status_code=400, detail="Email and password are required.")
    with get_session() as session:
        user = authenticate(session, request.email, request.password)
        if not user:
            logger.info("Failed login attempt")
            raise HTTPException(status_code=401, detail="Invalid credentials.")
        token = create_access_token(user)
        email = user.email
    return TokenResponse(message=f"Welcome {email}!", token=token)


@router.get("/me", response_model=UserProfile)
def me(current: CurrentUser) -> UserProfile:
    with get_session() as session:
        user = session.get(User, current.user_id)
        if not user:
            raise HTTPException(status_code=404, detail="User not found")
        return UserProfile.model_validate(user)


users_router = APIRouter(prefix="/api/users", tags=["users"])


@users_router.get("", response_model=List[UserListItem])
def list_all_users(current: CurrentUser) -> List[UserListItem]:
    logger.debug("User listing requested by id=%s", current.user_id)
    with get_session() as session:
        return [UserListItem.model_validate(user) for user in list_users(session)]
