"""
Participant Selection

Required/optional classification of participants. This set is the
source of truth for slot requests and timeline coloring.

INVARIANT: a name is never both required and optional.
"""

from __future__ import annotations
from typing import Dict, FrozenSet, Iterable, Optional, Tuple

from ..contracts import ParticipantCategory


class ParticipantSelectionSet:
    """
    Mutually exclusive required/optional selection.

    Each name maps to exactly one category, so the two derived views
    can never overlap.
    """

    def __init__(self, participants: Iterable[str] = ()):
        self._participants: Tuple[str, ...] = tuple(participants)
        self._categories: Dict[str, ParticipantCategory] = {}

    def toggle(self, name: str, category: ParticipantCategory, checked: bool = True):
        """
        Apply a checkbox change.

        Checking a category replaces whatever the participant had before;
        unchecking clears the participant to NONE.
        """
        if category is ParticipantCategory.NONE or not checked:
            self._categories.pop(name, None)
            return
        self._categories[name] = category

    def category_of(self, name: str) -> ParticipantCategory:
        return self._categories.get(name, ParticipantCategory.NONE)

    def required_names(self) -> FrozenSet[str]:
        return self._names(ParticipantCategory.REQUIRED)

    def optional_names(self) -> FrozenSet[str]:
        return self._names(ParticipantCategory.OPTIONAL)

    def ordered(self, category: ParticipantCategory) -> Tuple[str, ...]:
        """Names in participant-list order (unknown names last, in selection order)."""
        known = [p for p in self._participants if self.category_of(p) is category]
        extra = [n for n, c in self._categories.items() if c is category and n not in self._participants]
        return tuple(known + extra)

    def reset(self, participants: Optional[Iterable[str]] = None):
        """Forget every selection, optionally for a new participant list."""
        if participants is not None:
            self._participants = tuple(participants)
        self._categories.clear()

    @property
    def participants(self) -> Tuple[str, ...]:
        return self._participants

    def _names(self, category: ParticipantCategory) -> FrozenSet[str]:
        return frozenset(n for n, c in self._categories.items() if c is category)

    def __len__(self) -> int:
        return len(self._categories)
