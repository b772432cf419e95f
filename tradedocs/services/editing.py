# tradedocs/services/editing.py
from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Optional

from tradedocs.dialogs import Dialogs

UNSAVED_TITLE = "Unsaved Changes"
UNSAVED_MESSAGE = "You have unsaved changes. Are you sure you want to leave this page?"


def canonical(record: Any) -> str:
    return json.dumps(record, sort_keys=True, default=str, ensure_ascii=False)


@dataclass
class EditSession:
    """
    Dirty state of one editor screen. The router's guard receives the
    session explicitly; nothing is shared between screens.
    """
    baseline: str

    @classmethod
    def start(cls, record: Any) -> "EditSession":
        return cls(baseline=canonical(record))

    def is_dirty(self, current: Any) -> bool:
        return canonical(current) != self.baseline

    def mark_saved(self, current: Any) -> None:
        self.baseline = canonical(current)


class NavigationGuard:
    def __init__(self, dialogs: Dialogs):
        self.dialogs = dialogs

    async def may_leave(
        self,
        session: Optional[EditSession],
        current: Any,
        *,
        from_path: str = "",
        to_path: str = "",
    ) -> bool:
        if session is None or (from_path and from_path == to_path):
            return True
        if not session.is_dirty(current):
            return True
        return bool(await self.dialogs.confirm(UNSAVED_TITLE, UNSAVED_MESSAGE))
