# tradedocs/dialogs.py
from __future__ import annotations

from typing import Literal, Optional, Protocol

AlertKind = Literal["alert", "success", "error", "warning"]


class Dialogs(Protocol):
    """
    User-facing dialogs provided by the UI layer. Every call resolves to
    the user's decision.
    """

    async def alert(self, title: str, message: str, kind: AlertKind = "alert") -> None:
        ...

    async def confirm(self, title: str, message: str) -> bool:
        ...

    async def prompt_password(self, title: str, message: str) -> Optional[str]:
        ...
