"""Creator directory — resolves a creator slug to the owning creator id."""

from abc import ABC, abstractmethod

from protean.utils.globals import current_domain

from checkout.creators.creator_page import CreatorPage


class CreatorDirectory(ABC):
    @abstractmethod
    def find_by_slug(self, slug: str) -> str | None:
        """Return the creator id behind ``slug``, or None when no page exists."""
        ...


class RepositoryCreatorDirectory(CreatorDirectory):
    """Looks creator pages up in the checkout domain's CreatorPage store."""

    def find_by_slug(self, slug: str) -> str | None:
        if not slug:
            return None
        pages = current_domain.repository_for(CreatorPage)._dao.query.filter(slug=slug).all().items
        return str(pages[0].creator_id) if pages else None
