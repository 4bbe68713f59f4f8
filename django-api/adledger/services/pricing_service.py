"""Pricing table: content sizes and their per-magazine prices."""

import logging
from dataclasses import replace
from decimal import Decimal

from adledger.domain import ContentSize, ContentSizeId, MagazineId, Money
from adledger.domain.errors import (
    ErrorCode,
    NotFoundError,
    PriceNotFoundError,
    ProtectedError,
    ValidationError,
)
from adledger.domain.pricing import PriceMode, combine_prices
from adledger.services.common import Clock, parse_id, to_money, to_page_units, utc_now
from adledger.stores.interfaces import BookingStore, ContentSizeStore, MagazineStore

logger = logging.getLogger(__name__)


class PricingService:
    """Service for content sizes and price resolution."""

    def __init__(
        self,
        content_sizes: ContentSizeStore,
        magazines: MagazineStore,
        bookings: BookingStore,
        clock: Clock = utc_now,
    ) -> None:
        self._content_sizes = content_sizes
        self._magazines = magazines
        self._bookings = bookings
        self._clock = clock

    def list_content_sizes(
        self, owner_id: str, include_archived: bool = False
    ) -> list[ContentSize]:
        return self._content_sizes.list_content_sizes(owner_id, include_archived)

    def get_content_size(self, owner_id: str, content_size_id: str) -> ContentSize:
        """Return a content size by ID.

        Raises:
            ValidationError: If the content_size_id is not a valid UUID.
            NotFoundError: If the content size does not exist for this owner.
        """
        cid = parse_id(ContentSizeId, content_size_id, "content_size_id")
        content_size = self._content_sizes.get_content_size(owner_id, cid)
        if content_size is None:
            raise NotFoundError("Content size", content_size_id)
        return content_size

    def create_content_size(
        self,
        owner_id: str,
        description: str,
        size: Decimal | str | float,
        pricing: dict[str, Decimal | str | float] | None = None,
    ) -> ContentSize:
        description = (description or "").strip()
        if not description:
            raise ValidationError("Description is required", field="description")
        content_size = ContentSize(
            id=ContentSizeId.new(),
            owner_id=owner_id,
            description=description,
            size=to_page_units(size, "size"),
            pricing=self._pricing(owner_id, pricing or {}),
            created_at=self._clock(),
        )
        self._content_sizes.save_content_size(content_size)
        logger.info("Created content size %s", content_size.id)
        return content_size

    def update_content_size(
        self,
        owner_id: str,
        content_size_id: str,
        description: str,
        size: Decimal | str | float,
        pricing: dict[str, Decimal | str | float],
    ) -> ContentSize:
        """Replace description, size and the whole price list.

        Existing bookings keep the list price they were created with.
        """
        content_size = self.get_content_size(owner_id, content_size_id)
        description = (description or "").strip()
        if not description:
            raise ValidationError("Description is required", field="description")
        updated = replace(
            content_size,
            description=description,
            size=to_page_units(size, "size"),
            pricing=self._pricing(owner_id, pricing),
        )
        self._content_sizes.save_content_size(updated)
        return updated

    def set_price(
        self, owner_id: str, content_size_id: str, magazine_id: str, price: Decimal | str | float
    ) -> ContentSize:
        content_size = self.get_content_size(owner_id, content_size_id)
        mid = self._magazine_id(owner_id, magazine_id)
        pricing = dict(content_size.pricing)
        pricing[mid] = to_money(price, "price")
        updated = replace(content_size, pricing=pricing)
        self._content_sizes.save_content_size(updated)
        return updated

    def get_price(self, owner_id: str, content_size_id: str, magazine_id: str) -> Money:
        """Resolve the price of a content size in one magazine.

        Raises:
            PriceNotFoundError: If no price is configured for the pair.
        """
        content_size = self.get_content_size(owner_id, content_size_id)
        mid = parse_id(MagazineId, magazine_id, "magazine_id")
        price = content_size.pricing.get(mid)
        if price is None:
            raise PriceNotFoundError(content_size_id, magazine_id)
        return price

    def list_price(
        self,
        owner_id: str,
        content_size_id: str,
        magazine_ids: list[str],
        mode: PriceMode,
    ) -> Money:
        """Combined list price of one content size across several magazines.

        Each magazine's price resolves independently; the caller chooses
        whether they are summed or averaged.
        """
        if not magazine_ids:
            raise ValidationError("At least one magazine is required", field="magazine_ids")
        prices = [self.get_price(owner_id, content_size_id, mid) for mid in magazine_ids]
        return combine_prices(prices, mode)

    def toggle_archive(self, owner_id: str, content_size_id: str) -> ContentSize:
        content_size = self.get_content_size(owner_id, content_size_id)
        updated = replace(content_size, archived=not content_size.archived)
        self._content_sizes.save_content_size(updated)
        return updated

    def delete_content_size(self, owner_id: str, content_size_id: str) -> None:
        content_size = self.get_content_size(owner_id, content_size_id)
        if self._bookings.content_size_referenced(content_size.id):
            raise ProtectedError(
                "Content size is referenced by bookings; archive it instead",
                code=ErrorCode.CONTENT_SIZE_IN_USE,
            )
        self._content_sizes.delete_content_size(content_size.id)
        logger.info("Deleted content size %s", content_size.id)

    def _magazine_id(self, owner_id: str, magazine_id: str) -> MagazineId:
        mid = parse_id(MagazineId, magazine_id, "magazine_id")
        if self._magazines.get_magazine(owner_id, mid) is None:
            raise NotFoundError("Magazine", magazine_id)
        return mid

    def _pricing(
        self, owner_id: str, raw: dict[str, Decimal | str | float]
    ) -> dict[MagazineId, Money]:
        pricing = {}
        for magazine_id, price in raw.items():
            mid = self._magazine_id(owner_id, str(magazine_id))
            if mid in pricing:
                raise ValidationError("Magazine priced more than once", field="pricing")
            pricing[mid] = to_money(price, "price")
        return pricing

