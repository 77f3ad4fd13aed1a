"""Variant catalog service.

Owns products, colors, sizes and their variants. Enforces the variant
natural key (one active variant per product/color/size) and SKU uniqueness.
Stock is never writable here: it lives in the stock ledger.
"""

import re

import structlog

from shoestore.catalog.publisher import EventPublisher
from shoestore.catalog.repository import CatalogRepository, LedgerRepository
from shoestore.domain.entities import Color, Product, Size, Variant
from shoestore.domain.events import VariantDeleted
from shoestore.domain.exceptions import NotFoundError, ValidationError
from shoestore.domain.validation import FieldErrors
from shoestore.domain.value_objects import SizeSystem

logger = structlog.get_logger()

SKU_MAX_LENGTH = 50
_HEX_COLOR = re.compile(r"^#[0-9A-Fa-f]{6}$")


class VariantCatalog:
    """Service for catalog maintenance.

    Example usage:
        catalog = VariantCatalog(catalog_repo, ledger_repo, publisher)

        product = await catalog.create_product("Runner X", base_price=8999)
        variant = await catalog.upsert_variant(
            product.id, color_id=1, size_id=9, sku="RX-BLK-9", price=None
        )
    """

    def __init__(
        self,
        repository: CatalogRepository,
        ledger_repository: LedgerRepository,
        publisher: EventPublisher | None = None,
    ) -> None:
        """Initialize catalog service.

        Args:
            repository: Catalog storage.
            ledger_repository: Ledger storage (consulted before deletes).
            publisher: Receives domain events after each committed write.
        """
        self.repository = repository
        self.ledger_repository = ledger_repository
        self.publisher = publisher or EventPublisher()

    # ========================================================================
    # Products
    # ========================================================================

    async def create_product(
        self,
        name: str,
        base_price: int,
        category_id: int | None = None,
        description: str | None = None,
        image_url: str | None = None,
    ) -> Product:
        """Create a product.

        Args:
            name: Display name.
            base_price: Price in cents.
            category_id: Category reference.
            description: Long description.
            image_url: Main image URL.

        Returns:
            The persisted product.

        Raises:
            ValidationError: If any field is malformed.
        """
        errors = FieldErrors()
        errors.require_text("name", name, max_length=100)
        errors.require_non_negative("base_price", base_price)
        if category_id is not None:
            errors.require_id("category_id", category_id)
        errors.raise_if_any("Invalid product")

        product = await self.repository.add_product(
            Product(
                name=name.strip(),
                base_price=base_price,
                category_id=category_id,
                description=description,
                image_url=image_url,
            )
        )
        logger.info("Product created", product_id=product.id, name=product.name)
        return product

    async def get_product(self, product_id: int) -> Product:
        """Get a product by id.

        Raises:
            NotFoundError: If the product does not exist.
        """
        product = await self.repository.get_product(product_id)
        if product is None:
            raise NotFoundError("Product", product_id)
        return product

    async def deactivate_product(self, product_id: int) -> list[int]:
        """Soft-delete a product and cascade-deactivate its variants.

        Deactivating an already inactive product is a no-op.

        Args:
            product_id: Product to deactivate.

        Returns:
            Ids of variants deactivated by the cascade.
        """
        product = await self.get_product(product_id)
        if not product.deactivate():
            return []

        variant_ids = await self.repository.deactivate_product(product)
        product.mark_deactivated(variant_ids)
        self.publisher.publish(product.collect_events())

        logger.info(
            "Product deactivated",
            product_id=product_id,
            deactivated_variants=len(variant_ids),
        )
        return variant_ids

    # ========================================================================
    # Colors and Sizes
    # ========================================================================

    async def create_color(self, name: str, hex_code: str | None = None) -> Color:
        """Create a color.

        Raises:
            ValidationError: Blank/duplicate name or malformed hex code.
        """
        errors = FieldErrors()
        errors.require_text("name", name, max_length=50)
        if hex_code is not None and not _HEX_COLOR.match(hex_code):
            errors.add("hex_code", "must look like #RRGGBB")
        errors.raise_if_any("Invalid color")

        name = name.strip()
        existing = await self.repository.list_colors()
        if any(c.name.casefold() == name.casefold() for c in existing):
            raise ValidationError.for_field("name", f"color '{name}' already exists")

        color = await self.repository.add_color(Color(id=0, name=name, hex_code=hex_code))
        logger.info("Color created", color_id=color.id, name=color.name)
        return color

    async def create_size(self, value: str, size_system: str = SizeSystem.US.value) -> Size:
        """Create a size.

        Raises:
            ValidationError: Blank/duplicate value or unknown size system.
        """
        errors = FieldErrors()
        errors.require_text("value", value, max_length=10)
        try:
            system = SizeSystem(size_system)
        except ValueError:
            errors.add("size_system", f"must be one of {[s.value for s in SizeSystem]}")
        errors.raise_if_any("Invalid size")

        value = value.strip()
        existing = await self.repository.list_sizes()
        if any(s.value.upper() == value.upper() for s in existing):
            raise ValidationError.for_field("value", f"size '{value}' already exists")

        size = await self.repository.add_size(Size(id=0, value=value, size_system=system))
        logger.info("Size created", size_id=size.id, value=size.value)
        return size

    async def list_colors(self) -> list[Color]:
        """All colors, ordered by id."""
        return await self.repository.list_colors()

    async def list_sizes(self) -> list[Size]:
        """All sizes, in natural size order."""
        sizes = await self.repository.list_sizes()
        return sorted(sizes, key=lambda s: (s.sort_key, s.id))

    # ========================================================================
    # Variants
    # ========================================================================

    async def upsert_variant(
        self,
        product_id: int,
        color_id: int,
        size_id: int,
        sku: str,
        price: int | None = None,
        is_active: bool = True,
        variant_id: int | None = None,
    ) -> Variant:
        """Create a variant, or update one when ``variant_id`` is given.

        Args:
            product_id: Owning product.
            color_id: Color reference.
            size_id: Size reference.
            sku: Stock keeping unit, unique across the catalog.
            price: Price override in cents (None uses the product price).
            is_active: Whether the variant is sellable.
            variant_id: Existing variant to update.

        Returns:
            The persisted variant.

        Raises:
            ValidationError: Malformed ids, sku or price, or an active
                variant for an inactive product.
            NotFoundError: Product, color, size or variant does not exist.
            DuplicateVariantError: Triple or SKU already held by another variant.
        """
        errors = FieldErrors()
        errors.require_id("product_id", product_id)
        errors.require_id("color_id", color_id)
        errors.require_id("size_id", size_id)
        errors.require_text("sku", sku, max_length=SKU_MAX_LENGTH)
        errors.require_non_negative("price", price, optional=True)
        if variant_id is not None:
            errors.require_id("variant_id", variant_id)
        errors.raise_if_any("Invalid variant")

        product = await self.get_product(product_id)
        if is_active and not product.is_active:
            raise ValidationError.for_field("is_active", f"product {product_id} is inactive")
        await self._require_color(color_id)
        await self._require_size(size_id)

        sku = sku.strip()
        created = variant_id is None
        if created:
            variant = await self.repository.add_variant(
                Variant(
                    product_id=product_id,
                    color_id=color_id,
                    size_id=size_id,
                    sku=sku,
                    price=price,
                    is_active=is_active,
                )
            )
        else:
            variant = await self.get_variant(variant_id)
            if variant.product_id != product_id:
                raise ValidationError.for_field(
                    "product_id", f"variant {variant_id} belongs to product {variant.product_id}"
                )
            variant.update(color_id, size_id, sku, price, is_active)
            variant = await self.repository.save_variant(variant)

        variant.mark_upserted(created)
        self.publisher.publish(variant.collect_events())

        logger.info(
            "Variant created" if created else "Variant updated",
            variant_id=variant.id,
            product_id=product_id,
            key=str(variant.key),
            sku=sku,
        )
        return variant

    async def get_variant(self, variant_id: int) -> Variant:
        """Get a variant by id.

        Raises:
            NotFoundError: If the variant does not exist.
        """
        variant = await self.repository.get_variant(variant_id)
        if variant is None:
            raise NotFoundError("Variant", variant_id)
        return variant

    async def find_by_sku(self, sku: str) -> Variant:
        """Get a variant by SKU.

        Raises:
            NotFoundError: If no variant carries the SKU.
        """
        variant = await self.repository.find_by_sku(sku.strip())
        if variant is None:
            raise NotFoundError("Variant", sku)
        return variant

    async def find_variants(self, product_id: int) -> list[Variant]:
        """All variants of a product, active and inactive.

        Raises:
            NotFoundError: If the product does not exist.
        """
        await self.get_product(product_id)
        return await self.repository.find_variants(product_id)

    async def set_active(self, variant_id: int, active: bool) -> Variant:
        """Enable or disable a variant without deleting it.

        Re-activation re-checks the natural key, so it fails with
        DuplicateVariantError when another active variant took the triple.

        Raises:
            NotFoundError: If the variant does not exist.
            ValidationError: Re-activating a variant of an inactive product.
            DuplicateVariantError: Triple taken by another active variant.
        """
        variant = await self.get_variant(variant_id)
        if active:
            product = await self.get_product(variant.product_id)
            if not product.is_active:
                raise ValidationError.for_field(
                    "is_active", f"product {product.id} is inactive"
                )

        if not variant.set_active(active):
            return variant

        variant = await self.repository.save_variant(variant)
        self.publisher.publish(variant.collect_events())

        logger.info("Variant activation changed", variant_id=variant_id, is_active=active)
        return variant

    async def delete_variant(self, variant_id: int) -> None:
        """Physically delete a variant that never had stock movements.

        Raises:
            NotFoundError: If the variant does not exist.
            ValidationError: If the variant has ledger history.
        """
        variant = await self.get_variant(variant_id)
        if await self.ledger_repository.has_entries(variant_id):
            raise ValidationError.for_field(
                "variant_id",
                "variant has stock history; deactivate it instead",
            )

        await self.repository.delete_variant(variant_id)
        self.publisher.publish(
            [
                VariantDeleted(
                    aggregate_id=str(variant_id),
                    aggregate_type="Variant",
                    product_id=variant.product_id,
                    variant_id=variant_id,
                )
            ]
        )
        logger.info("Variant deleted", variant_id=variant_id, product_id=variant.product_id)

    # ========================================================================
    # Helpers
    # ========================================================================

    async def _require_color(self, color_id: int) -> Color:
        color = await self.repository.get_color(color_id)
        if color is None:
            raise NotFoundError("Color", color_id)
        return color

    async def _require_size(self, size_id: int) -> Size:
        size = await self.repository.get_size(size_id)
        if size is None:
            raise NotFoundError("Size", size_id)
        return size
