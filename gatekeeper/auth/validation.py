from __future__ import annotations

import re

MIN_PASSWORD_LENGTH = 8

_EMAIL_PATTERN = re.compile(r"[^\s@]+@[^\s@]+\.[^\s@]+")
_EMAIL_FORBIDDEN = ("..", " ", "@.", ".@")


def is_valid_email(email: object) -> bool:
    if not isinstance(email, str) or not _EMAIL_PATTERN.fullmatch(email):
        return False
    if email.startswith("@") or email.endswith("@"):
        return False
    return not any(fragment in email for fragment in _EMAIL_FORBIDDEN)


def is_valid_password(password: object) -> bool:
    return isinstance(password, str) and len(password) >= MIN_PASSWORD_LENGTH
