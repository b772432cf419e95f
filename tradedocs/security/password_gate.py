# tradedocs/security/password_gate.py
from __future__ import annotations

import hashlib
import hmac
from typing import Optional

from tradedocs.config import Settings, get_settings
from tradedocs.dialogs import Dialogs

# A UX deterrent against casual use of the app, not an access control.
# Anyone with the source or the configuration can get past it.


def hash_password(password: str, salt: str) -> str:
    return hashlib.sha256((password + salt).encode("utf-8")).hexdigest()


class PasswordGate:
    def __init__(self, settings: Settings | None = None):
        s = settings or get_settings()
        self._salt = s.gate_salt
        self._valid_hash = hash_password(s.gate_password.upper(), s.gate_salt)

    def verify(self, password: str | None) -> bool:
        if password is None:
            return False
        candidate = hash_password(password.upper(), self._salt)
        return hmac.compare_digest(candidate, self._valid_hash)

    def unlock(self, password: str | None) -> Optional[str]:
        """
        Session token on success (kept by the UI until logout), else None.
        """
        return self._valid_hash if self.verify(password) else None

    def is_unlocked(self, token: str | None) -> bool:
        if not token:
            return False
        return hmac.compare_digest(token.encode("utf-8"), self._valid_hash.encode("utf-8"))

    async def prompt_unlock(self, dialogs: Dialogs) -> Optional[str]:
        password = await dialogs.prompt_password("Password Required", "Enter the password to continue.")
        if password is None:
            return None
        token = self.unlock(password)
        if token is None:
            await dialogs.alert("Access Denied", "Incorrect password", "error")
        return token
