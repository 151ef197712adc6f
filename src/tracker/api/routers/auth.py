import logging

from fastapi import APIRouter, Depends, HTTPException, status

from src.tracker.api.schemas import (
    AuthRegisterRequest,
    AuthLoginRequest,
    AuthTokenResponse,
    ForgotPasswordRequest,
    ResetPasswordRequest,
    MessageResponse,
)
from src.tracker.api.deps import get_auth_service
from src.tracker.services.auth_service import AuthService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["auth"])


@router.post("/register", response_model=AuthTokenResponse, status_code=status.HTTP_201_CREATED)
def register(
    req: AuthRegisterRequest,
    svc: AuthService = Depends(get_auth_service),
):
    """
    Creates the user with a free subscription and returns an access_token.
    """
    try:
        token = svc.register(email=req.email, password=req.password)
        return AuthTokenResponse(access_token=token)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.post("/login", response_model=AuthTokenResponse)
def login(
    req: AuthLoginRequest,
    svc: AuthService = Depends(get_auth_service),
):
    try:
        token = svc.login(email=req.email, password=req.password)
        return AuthTokenResponse(access_token=token)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=str(e))


@router.post("/forgot-password", response_model=MessageResponse)
def forgot_password(
    req: ForgotPasswordRequest,
    svc: AuthService = Depends(get_auth_service),
):
    """
    Same answer whether or not the email is registered.
    """
    token = svc.request_password_reset(req.email)
    if token:
        # TODO: hand the token to an email sender once one is configured
        logger.info("password reset requested for %s", req.email)
    return MessageResponse(message="If the email is registered, a reset link has been sent.")


@router.post("/reset-password", response_model=MessageResponse)
def reset_password(
    req: ResetPasswordRequest,
    svc: AuthService = Depends(get_auth_service),
):
    try:
        svc.reset_password(req.token, req.password)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    return MessageResponse(message="Password has been reset.")
