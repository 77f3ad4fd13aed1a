"""Read-through cache for derived product attributes.

Holds structural data only (a product's variants, colors and sizes). Stock
counts are never cached: they are always projected live from the ledger, so
a decrement recorded elsewhere is visible on the next read.

Entries are keyed by a structured ``CacheKey`` and dropped per product
whenever a catalog or ledger event for that product is published. Each
invalidation also bumps the product's generation, so a load that started
before the write cannot store its result afterwards.
"""

import hashlib
import json
from dataclasses import dataclass
from typing import Any

import structlog

from shoestore.domain.base import DomainEvent

logger = structlog.get_logger()


@dataclass(frozen=True)
class CacheKey:
    """Structured cache key.

    Attributes:
        entity: What is cached (e.g. "product_variants").
        entity_id: Product the entry belongs to; used for invalidation.
        filter_hash: Digest of any extra parameters ("" when none).
    """

    entity: str
    entity_id: int
    filter_hash: str = ""

    @classmethod
    def build(cls, entity: str, entity_id: int, **params: Any) -> "CacheKey":
        """Build a key, hashing extra parameters deterministically.

        Args:
            entity: What is cached.
            entity_id: Owning product id.
            **params: Extra parameters that distinguish entries.

        Returns:
            CacheKey instance.
        """
        if not params:
            return cls(entity, entity_id)
        encoded = json.dumps(params, sort_keys=True, default=str)
        digest = hashlib.sha256(encoded.encode("utf-8")).hexdigest()[:16]
        return cls(entity, entity_id, digest)


class AttributeCache:
    """In-process cache of per-product structural data.

    Example usage:
        cache = AttributeCache()
        key = CacheKey.build("product_variants", product_id)

        generation = cache.generation(product_id)
        variants = await repository.find_variants(product_id)
        cache.set(key, variants, generation=generation)
    """

    def __init__(self, enabled: bool = True) -> None:
        """Initialize cache.

        Args:
            enabled: When False nothing is stored and every lookup misses.
        """
        self.enabled = enabled
        self._entries: dict[CacheKey, Any] = {}
        self._generations: dict[int, int] = {}
        self._epoch = 0
        self.hits = 0
        self.misses = 0

    def get(self, key: CacheKey) -> Any | None:
        """Return a cached value or None."""
        if not self.enabled or key not in self._entries:
            self.misses += 1
            return None
        self.hits += 1
        return self._entries[key]

    def generation(self, product_id: int) -> tuple[int, int]:
        """Current generation of a product's entries.

        Read it before loading and pass it to ``set``.
        """
        return (self._epoch, self._generations.get(product_id, 0))

    def set(self, key: CacheKey, value: Any, generation: tuple[int, int] | None = None) -> bool:
        """Store a value.

        Args:
            key: Cache key.
            value: Value to store.
            generation: Generation read before the value was loaded. The value
                is discarded when the product was invalidated since.

        Returns:
            True when the value was stored.
        """
        if not self.enabled:
            return False
        if generation is not None and generation != self.generation(key.entity_id):
            logger.debug("Discarded stale attribute load", product_id=key.entity_id)
            return False
        self._entries[key] = value
        return True

    def invalidate_product(self, product_id: int) -> int:
        """Drop every entry belonging to a product.

        Returns:
            Number of entries removed.
        """
        self._generations[product_id] = self._generations.get(product_id, 0) + 1
        stale = [key for key in self._entries if key.entity_id == product_id]
        for key in stale:
            del self._entries[key]
        if stale:
            logger.debug("Attribute cache invalidated", product_id=product_id, removed=len(stale))
        return len(stale)

    def clear(self) -> None:
        """Drop all entries."""
        self._epoch += 1
        self._entries.clear()

    def handle_event(self, event: DomainEvent) -> None:
        """Event subscriber: invalidate the product the event touches."""
        if event.product_id:
            self.invalidate_product(event.product_id)

    def stats(self) -> dict[str, int]:
        """Cache counters."""
        return {"entries": len(self._entries), "hits": self.hits, "misses": self.misses}
