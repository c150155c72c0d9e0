from __future__ import annotations

from datetime import datetime

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from gatekeeper.models import User

from .errors import ConflictError


class CredentialStore:
    def __init__(self, session: Session) -> None:
        self.session = session

    def add_user(self, email: str, password_hash: str) -> User:
        user = User(email=email, password_hash=password_hash, totp_enabled=False)
        self.session.add(user)
        try:
            self.session.commit()
        except SQLAlchemyError as exc:
            self.session.rollback()
            raise ConflictError("Registration failed") from exc
        self.session.refresh(user)
        return user

    def get_by_email(self, email: str) -> User | None:
        return self.session.scalars(select(User).where(User.email == email)).first()

    def get_by_id(self, user_id: int) -> User | None:
        return self.session.get(User, user_id)

    def record_login(self, user: User, moment: datetime) -> None:
        user.last_login = moment
        self._commit()

    def set_pending_totp(self, user: User, secret: str) -> None:
        user.totp_secret = secret
        user.totp_enabled = False
        self._commit()

    def enable_totp(self, user: User) -> None:
        user.totp_enabled = True
        self._commit()

    def disable_totp(self, user: User) -> None:
        user.totp_enabled = False
        user.totp_secret = None
        self._commit()

    def delete_user(self, user: User) -> None:
        self.session.delete(user)
        self._commit()

    def count(self) -> int:
        return self.session.scalar(select(func.count()).select_from(User)) or 0

    def _commit(self) -> None:
        try:
            self.session.commit()
        except SQLAlchemyError:
            self.session.rollback()
            raise
