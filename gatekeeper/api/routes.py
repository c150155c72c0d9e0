from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends

from gatekeeper.auth import AuthService, Identity, LoginResult

from .deps import get_auth_service, get_client_id, get_identity, get_json_body

router = APIRouter()


def _login_payload(result: LoginResult) -> dict[str, Any]:
    if result.requires_totp:
        return {"requiresTOTP": True}
    return {
        "token": result.token,
        "user": {"email": result.user.email, "totpEnabled": bool(result.user.totp_enabled)},
    }


@router.post("/register")
def register(
    body: dict[str, Any] = Depends(get_json_body),
    client_id: str = Depends(get_client_id),
    service: AuthService = Depends(get_auth_service),
):
    service.register(body.get("email"), body.get("password"), client_id)
    return {"success": True}


@router.post("/login")
def login(
    body: dict[str, Any] = Depends(get_json_body),
    client_id: str = Depends(get_client_id),
    service: AuthService = Depends(get_auth_service),
):
    result = service.login(body.get("email"), body.get("password"), client_id)
    return _login_payload(result)


@router.post("/login-2fa")
def login_with_totp(
    body: dict[str, Any] = Depends(get_json_body),
    client_id: str = Depends(get_client_id),
    service: AuthService = Depends(get_auth_service),
):
    result = service.login_with_totp(body.get("email"), body.get("password"), body.get("totpCode"), client_id)
    return _login_payload(result)


@router.post("/2fa/setup")
def setup_totp(
    identity: Identity = Depends(get_identity),
    service: AuthService = Depends(get_auth_service),
):
    setup = service.setup_totp(identity)
    return {"secret": setup.secret, "qrCode": setup.qr_code}


@router.post("/2fa/verify")
def verify_totp(
    identity: Identity = Depends(get_identity),
    body: dict[str, Any] = Depends(get_json_body),
    service: AuthService = Depends(get_auth_service),
):
    service.verify_totp(identity, body.get("token"))
    return {"success": True}


@router.post("/2fa/disable")
def disable_totp(
    identity: Identity = Depends(get_identity),
    service: AuthService = Depends(get_auth_service),
):
    service.disable_totp(identity)
    return {"success": True}


@router.get("/me")
def current_user(
    identity: Identity = Depends(get_identity),
    service: AuthService = Depends(get_auth_service),
):
    profile = service.current_user(identity)
    return {
        "email": profile.email,
        "totpEnabled": profile.totp_enabled,
        "lastLogin": profile.last_login.isoformat() if profile.last_login else None,
    }
