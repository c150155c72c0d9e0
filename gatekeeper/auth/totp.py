from __future__ import annotations

import base64
import io
import threading
from dataclasses import dataclass
from datetime import datetime, timezone

import pyotp
import qrcode
from pyotp.utils import strings_equal

CODE_DIGITS = 6
STEP_SECONDS = 30


@dataclass(frozen=True)
class TotpEnrollment:
    secret: str
    provisioning_uri: str


class ReplayGuard:
    """Remembers the last accepted time step per account so a code cannot be used twice."""

    def __init__(self) -> None:
        self._last_step: dict[str, int] = {}
        self._lock = threading.Lock()

    def accept(self, account: str, step: int) -> bool:
        with self._lock:
            last = self._last_step.get(account)
            if last is not None and step <= last:
                return False
            self._last_step[account] = step
            return True

    def forget(self, account: str) -> None:
        with self._lock:
            self._last_step.pop(account, None)


class TotpEngine:
    def __init__(self, issuer_name: str = "AuthApp", replay_guard: ReplayGuard | None = None) -> None:
        self.issuer_name = issuer_name
        self.replay_guard = replay_guard

    def generate_secret(self, label: str) -> TotpEnrollment:
        secret = pyotp.random_base32()
        uri = pyotp.TOTP(secret).provisioning_uri(name=label, issuer_name=self.issuer_name)
        return TotpEnrollment(secret=secret, provisioning_uri=uri)

    def current_code(self, secret: str, for_time: datetime | None = None) -> str:
        moment = for_time or datetime.now(timezone.utc)
        return pyotp.TOTP(secret, digits=CODE_DIGITS, interval=STEP_SECONDS).at(moment)

    def verify(
        self,
        secret: str,
        code: str | None,
        window_steps: int = 1,
        for_time: datetime | None = None,
        account: str | None = None,
    ) -> bool:
        if not secret or not isinstance(code, str):
            return False
        candidate = code.strip()
        if len(candidate) != CODE_DIGITS or not candidate.isdigit():
            return False
        moment = for_time or datetime.now(timezone.utc)
        totp = pyotp.TOTP(secret, digits=CODE_DIGITS, interval=STEP_SECONDS)
        current_step = totp.timecode(moment)
        for offset in range(-window_steps, window_steps + 1):
            if strings_equal(candidate, totp.at(moment, counter_offset=offset)):
                if self.replay_guard is not None and account is not None:
                    return self.replay_guard.accept(account, current_step + offset)
                return True
        return False

    def qr_data_url(self, uri: str) -> str:
        qr = qrcode.QRCode(
            version=1,
            error_correction=qrcode.constants.ERROR_CORRECT_L,
            box_size=10,
            border=4,
        )
        qr.add_data(uri)
        qr.make(fit=True)
        image = qr.make_image(fill_color="black", back_color="white")
        buffer = io.BytesIO()
        image.save(buffer, format="PNG")
        encoded = base64.b64encode(buffer.getvalue()).decode("utf-8")
        return f"data:image/png;base64,{encoded}"
