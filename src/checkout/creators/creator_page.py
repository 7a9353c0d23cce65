"""CreatorPage — the public storefront page of a creator, addressed by slug.

Checkout only needs the slug → creator mapping to attribute an order to its
creator; page content and onboarding live elsewhere.
"""

from protean.fields import Identifier, String

from checkout.domain import checkout


@checkout.aggregate
class CreatorPage:
    slug = String(required=True, max_length=255, unique=True)
    creator_id = Identifier(required=True)
    title = String(max_length=255)

    @classmethod
    def publish(cls, slug, creator_id, title=None):
        return cls(slug=slug, creator_id=creator_id, title=title)
