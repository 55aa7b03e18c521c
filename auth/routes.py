"""
Auth API routes — register, login, refresh, logout.

Route prefix: /auth
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, status

from api.responses import api_response
from auth.dependencies import get_auth_service
from auth.service import AuthService
from utils.schemas import LoginRequest, RefreshRequest, RegisterRequest

router = APIRouter(tags=["auth"])


@router.post("/register", status_code=status.HTTP_201_CREATED)
async def register(
    req: RegisterRequest,
    service: AuthService = Depends(get_auth_service),
):
    """Register a new user."""
    user = await service.register(req.name, req.email, req.password)
    return api_response(
        True, "User registered successfully", data=user, status_code=status.HTTP_201_CREATED,
    )


@router.post("/login")
async def login(
    req: LoginRequest,
    service: AuthService = Depends(get_auth_service),
):
    """Login with email + password."""
    result = await service.login(req.email, req.password)
    return api_response(True, "Login successful", data=result)


@router.post("/refresh")
async def refresh(
    req: RefreshRequest,
    service: AuthService = Depends(get_auth_service),
):
    """Exchange a refresh token for a new access token."""
    result = await service.refresh(req.refresh_token)
    return api_response(True, "Token refreshed successfully", data=result)


@router.post("/logout")
async def logout():
    result = await AuthService.logout()
    return api_response(True, result["message"])
