"""Collaborators of the checkout orchestrator (abstract interfaces).

The orchestrator talks to the cart store, the order store, the creator
directory and the payment gateway only through these ports, so each can be
replaced independently (Protean repositories in the service, failing doubles
in tests).
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class Identity:
    """The authenticated shopper behind a request."""

    user_id: str
    email: str


class CartStore(ABC):
    @abstractmethod
    def find_by_user(self, user_id: str) -> list[dict]:
        """Return the user's stored cart lines (empty when there is no cart)."""
        ...

    @abstractmethod
    def clear(self, user_id: str) -> None:
        """Empty the user's stored cart."""
        ...


class OrderStore(ABC):
    @abstractmethod
    def create(self, fields: dict) -> str:
        """Persist a pending order and return its id."""
        ...
