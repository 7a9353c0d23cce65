"""Repository for the Cart aggregate."""

from checkout.cart.cart import Cart
from checkout.domain import checkout


@checkout.repository(part_of=Cart)
class CartRepository:
    """Cart lookups by owner.

    A user has at most one cart; a guest session likewise. The query only
    locates the cart; the aggregate itself (with its lines) is loaded through
    ``get``.
    """

    def find_for_user(self, user_id) -> Cart | None:
        results = self._dao.query.filter(user_id=str(user_id)).all().items
        return self.get(results[0].id) if results else None

    def find_for_session(self, session_id) -> Cart | None:
        results = self._dao.query.filter(session_id=session_id).all().items
        return self.get(results[0].id) if results else None
