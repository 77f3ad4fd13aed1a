"""SQLAlchemy models for the shoe catalog.

Defines products, colors, sizes, product_variants and the stock_imports
ledger for persistent storage. Variants are unique per (product, color, size)
among active rows; ledger rows are append-only.
"""

from datetime import datetime, timezone

from sqlalchemy import (
    Boolean,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from shoestore.domain.entities import (
    Color,
    LedgerEntry,
    LedgerEntryKind,
    Product,
    Size,
    Variant,
)
from shoestore.domain.value_objects import SizeSystem
from shoestore.infrastructure.database import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ProductModel(Base):
    """Product (shoe model) row.

    Attributes:
        id: Synthetic integer id.
        name: Display name.
        description: Long description.
        base_price: Price in cents.
        category_id: Category reference.
        image_url: Main image.
        is_active: Soft-delete flag.
        created_at: Creation timestamp.
        updated_at: Last update timestamp.
    """

    __tablename__ = "products"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    base_price: Mapped[int] = mapped_column(Integer, nullable=False)  # in cents
    category_id: Mapped[int | None] = mapped_column(Integer, nullable=True, index=True)
    image_url: Mapped[str | None] = mapped_column(String(1000), nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True, index=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
        onupdate=_utcnow,
    )

    # Relationships
    variants: Mapped[list["VariantModel"]] = relationship(
        "VariantModel",
        back_populates="product",
    )

    def __repr__(self) -> str:
        """String representation."""
        return f"<ProductModel(id={self.id}, name={self.name[:30]})>"

    def to_entity(self) -> Product:
        """Convert to domain entity."""
        return Product(
            id=self.id,
            name=self.name,
            description=self.description,
            base_price=self.base_price,
            category_id=self.category_id,
            image_url=self.image_url,
            is_active=self.is_active,
            created_at=self.created_at,
            updated_at=self.updated_at,
        )

    def apply(self, product: Product) -> None:
        """Copy mutable fields from a domain entity."""
        self.name = product.name
        self.description = product.description
        self.base_price = product.base_price
        self.category_id = product.category_id
        self.image_url = product.image_url
        self.is_active = product.is_active
        self.updated_at = product.updated_at


class ColorModel(Base):
    """Color lookup row."""

    __tablename__ = "colors"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(50), nullable=False, unique=True)
    hex_code: Mapped[str | None] = mapped_column(String(7), nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    def to_entity(self) -> Color:
        """Convert to domain entity."""
        return Color(id=self.id, name=self.name, hex_code=self.hex_code, is_active=self.is_active)


class SizeModel(Base):
    """Size lookup row."""

    __tablename__ = "sizes"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    value: Mapped[str] = mapped_column(String(10), nullable=False, unique=True)
    size_system: Mapped[str] = mapped_column(String(20), nullable=False, default="US")
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    def to_entity(self) -> Size:
        """Convert to domain entity."""
        return Size(
            id=self.id,
            value=self.value,
            size_system=SizeSystem(self.size_system),
            is_active=self.is_active,
        )


class VariantModel(Base):
    """Product variant (color + size combination).

    Stock is not a column: it is projected from ``stock_imports``.

    Attributes:
        id: Synthetic integer id.
        product_id: Parent product.
        color_id: Color reference.
        size_id: Size reference.
        sku: Unique stock keeping unit.
        price: Price override in cents (NULL falls back to product base price).
        is_active: Soft-disable flag.
    """

    __tablename__ = "product_variants"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    product_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("products.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    color_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("colors.id", ondelete="RESTRICT"),
        nullable=False,
    )
    size_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("sizes.id", ondelete="RESTRICT"),
        nullable=False,
    )
    sku: Mapped[str] = mapped_column(String(50), nullable=False, unique=True)
    price: Mapped[int | None] = mapped_column(Integer, nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True, index=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
        onupdate=_utcnow,
    )

    # Relationships
    product: Mapped["ProductModel"] = relationship("ProductModel", back_populates="variants")

    # One active variant per (product, color, size)
    __table_args__ = (
        Index(
            "uq_variants_active_triple",
            "product_id",
            "color_id",
            "size_id",
            unique=True,
            postgresql_where=text("is_active"),
            sqlite_where=text("is_active"),
        ),
    )

    def __repr__(self) -> str:
        """String representation."""
        return f"<VariantModel(id={self.id}, sku={self.sku})>"

    def to_entity(self) -> Variant:
        """Convert to domain entity."""
        return Variant(
            id=self.id,
            product_id=self.product_id,
            color_id=self.color_id,
            size_id=self.size_id,
            sku=self.sku,
            price=self.price,
            is_active=self.is_active,
            created_at=self.created_at,
            updated_at=self.updated_at,
        )

    def apply(self, variant: Variant) -> None:
        """Copy mutable fields from a domain entity."""
        self.color_id = variant.color_id
        self.size_id = variant.size_id
        self.sku = variant.sku
        self.price = variant.price
        self.is_active = variant.is_active
        self.updated_at = variant.updated_at


class StockImportModel(Base):
    """Stock ledger row. One row per stock movement, never updated.

    Attributes:
        id: Auto-increment sequence.
        variant_id: Variant the movement applies to.
        operator_id: Operator who recorded it (opaque id from the auth layer).
        kind: "import" or "adjustment".
        quantity: Signed units (imports are always positive).
        unit_cost: Import price per unit in cents.
        note: Free-form remark.
        created_at: When the movement was recorded.
    """

    __tablename__ = "stock_imports"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    variant_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("product_variants.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    operator_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    kind: Mapped[str] = mapped_column(String(20), nullable=False, default="import")
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    unit_cost: Mapped[int | None] = mapped_column(Integer, nullable=True)
    note: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
        index=True,
    )

    @classmethod
    def from_entity(cls, entry: LedgerEntry) -> "StockImportModel":
        """Build a row from a domain entry."""
        return cls(
            variant_id=entry.variant_id,
            operator_id=entry.operator_id,
            kind=entry.kind.value,
            quantity=entry.quantity,
            unit_cost=entry.unit_cost,
            note=entry.note,
            created_at=entry.created_at,
        )

    def to_entity(self) -> LedgerEntry:
        """Convert to domain entry."""
        return LedgerEntry(
            id=self.id,
            variant_id=self.variant_id,
            operator_id=self.operator_id,
            kind=LedgerEntryKind(self.kind),
            quantity=self.quantity,
            unit_cost=self.unit_cost,
            note=self.note,
            created_at=self.created_at,
        )
