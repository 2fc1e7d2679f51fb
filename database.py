"""
Storage for users and waste entries.

Handlers talk to the EntryStore / UserStore interfaces; the in-memory
implementations below keep everything in process-local lists that vanish on
restart. Updates take no locks: two simultaneous submissions for one user
can race on total_credits.
"""

from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import List, Optional

from schemas import Prediction, UserAccount, WasteEntry

SEED_USERS = [
    {"username": "john_doe", "email": "john@example.com", "total_credits": 1250},
]


class EntryStore(ABC):
    @abstractmethod
    def add(
        self,
        user_id: int,
        entry_type: str,
        waste_name: str,
        waste_type: str,
        place: str,
        credits_earned: float,
        quantity: Optional[float] = None,
        notes: Optional[str] = None,
        ai_confidence: Optional[float] = None,
        ai_raw_predictions: Optional[List[Prediction]] = None,
    ) -> WasteEntry:
        ...

    @abstractmethod
    def list_for_user(self, user_id: int) -> List[WasteEntry]:
        ...

    @abstractmethod
    def all(self) -> List[WasteEntry]:
        ...


class UserStore(ABC):
    @abstractmethod
    def get(self, user_id: int) -> Optional[UserAccount]:
        ...

    @abstractmethod
    def get_by_email(self, email: str) -> Optional[UserAccount]:
        ...

    @abstractmethod
    def create(self, username: str, email: str) -> UserAccount:
        ...

    @abstractmethod
    def add_credits(self, user_id: int, amount: float) -> float:
        """Increase a user's total and return the new total."""


class InMemoryEntryStore(EntryStore):
    def __init__(self):
        self._entries: List[WasteEntry] = []

    def add(self, user_id, entry_type, waste_name, waste_type, place, credits_earned,
            quantity=None, notes=None, ai_confidence=None, ai_raw_predictions=None):
        entry = WasteEntry(
            id=len(self._entries) + 1,
            user_id=user_id,
            entry_type=entry_type,
            waste_name=waste_name,
            waste_type=waste_type,
            quantity=quantity,
            place=place,
            notes=notes,
            credits_earned=credits_earned,
            created_at=datetime.now(timezone.utc),
        )
        if entry_type == "ai":
            entry.ai_confidence = ai_confidence
            entry.ai_raw_predictions = ai_raw_predictions
        self._entries.append(entry)
        return entry.model_copy(deep=True)

    def list_for_user(self, user_id):
        return [e.model_copy(deep=True) for e in self._entries if e.user_id == user_id]

    def all(self):
        return [e.model_copy(deep=True) for e in self._entries]


class InMemoryUserStore(UserStore):
    def __init__(self, seed: bool = True):
        self._users: List[UserAccount] = []
        if seed:
            for user in SEED_USERS:
                self._users.append(UserAccount(id=len(self._users) + 1, **user))

    def _find(self, user_id):
        return next((u for u in self._users if u.id == user_id), None)

    def get(self, user_id):
        user = self._find(user_id)
        return user.model_copy() if user else None

    def get_by_email(self, email):
        wanted = (email or "").strip().lower()
        user = next((u for u in self._users if u.email.lower() == wanted), None)
        return user.model_copy() if user else None

    def create(self, username, email):
        user = UserAccount(id=len(self._users) + 1, username=username, email=email, total_credits=0)
        self._users.append(user)
        return user.model_copy()

    def add_credits(self, user_id, amount):
        user = self._find(user_id)
        if user is None:
            raise KeyError(user_id)
        user.total_credits += amount
        return user.total_credits


class Database:
    """The stores a request handler works with."""

    def __init__(self, users: Optional[UserStore] = None, entries: Optional[EntryStore] = None):
        self.users = users if users is not None else InMemoryUserStore()
        self.entries = entries if entries is not None else InMemoryEntryStore()
