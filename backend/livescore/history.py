"""Undo history for one match session.

Entries are full snapshots of the score state taken before each mutating
action, so an undo also restores derived flags, the serve/raid holder and
rotation orders.
"""

import copy
from typing import Dict, Iterable, List, Optional


class HistoryStack:
    """LIFO stack of score-state snapshots, unbounded for a session."""

    def __init__(self, entries: Optional[Iterable[Dict]] = None) -> None:
        self._entries: List[Dict] = [copy.deepcopy(e) for e in entries or []]

    def push(self, state: Dict) -> None:
        self._entries.append(copy.deepcopy(state))

    def pop(self) -> Optional[Dict]:
        if not self._entries:
            return None
        return self._entries.pop()

    def peek(self) -> Optional[Dict]:
        if not self._entries:
            return None
        return copy.deepcopy(self._entries[-1])

    def clear(self) -> None:
        self._entries.clear()

    def entries(self) -> List[Dict]:
        """Copy of the snapshots, oldest first, ready to persist."""

        return copy.deepcopy(self._entries)

    @classmethod
    def from_entries(cls, entries: Optional[Iterable[Dict]]) -> "HistoryStack":
        return cls(entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __bool__(self) -> bool:
        return bool(self._entries)
