from __future__ import annotations

import logging
from typing import Any, Iterator

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from gatekeeper.auth import (
    AuthenticationError,
    AuthService,
    Identity,
    client_identifier,
    parse_authorization_header,
)
from gatekeeper.logging import log_event


def get_session(request: Request) -> Iterator[Session]:
    session = request.app.state.session_factory()
    try:
        yield session
    finally:
        session.close()


def get_auth_service(request: Request, session: Session = Depends(get_session)) -> AuthService:
    state = request.app.state
    return AuthService(
        session,
        token_issuer=state.token_issuer,
        totp_engine=state.totp_engine,
        rate_limiter=state.rate_limiter,
        limits=state.rate_limits,
        password_hasher=state.password_hasher,
    )


def get_client_id(request: Request) -> str:
    return client_identifier(request.headers)


def get_identity(request: Request) -> Identity:
    token = parse_authorization_header(request.headers.get("authorization"))
    try:
        return request.app.state.token_issuer.validate(token)
    except AuthenticationError:
        log_event("token_rejected", logging.WARNING, path=request.url.path)
        raise


async def get_json_body(request: Request) -> dict[str, Any]:
    try:
        payload = await request.json()
    except ValueError:
        return {}
    return payload if isinstance(payload, dict) else {}
