# vetms/db/schema.py

from sqlalchemy import (
    MetaData, Table, Column, Integer, String,
    Numeric, Date, ForeignKey, CheckConstraint, Text, UniqueConstraint
)

metadata = MetaData()

clients = Table(
    "clients",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("name", String, nullable=False, unique=True),
    Column("contact_info", Text, nullable=True),
)

pets = Table(
    "pets",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("name", String, nullable=False),
    Column("species", String, nullable=True),
    Column("client_id", Integer, ForeignKey("clients.id"), nullable=False),
    UniqueConstraint("name", "client_id", name="uq_pets_name_client"),
)

products = Table(
    "products",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("name", String, nullable=False, unique=True),
    Column("price", Numeric, nullable=False),
    CheckConstraint("price >= 0", name="ck_products_price_nonneg"),
)

invoices = Table(
    "invoices",
    metadata,
    Column("id", Integer, primary_key=True),
    Column("friendly_id", Text, unique=True, nullable=False),
    Column("client_id", Integer, ForeignKey("clients.id"), nullable=False),
    # legacy single-pet column, always NULL now; pets live on the items
    Column("pet_id", Integer, ForeignKey("pets.id"), nullable=True),
    Column("date", Date, nullable=False),
    Column("status", Text, nullable=False, server_default="Draft"),
    Column("total_amount", Numeric, nullable=False),
)

invoice_items = Table(
    "invoice_items",
    metadata,
    Column("id", Integer, primary_key=True),
    Column(
        "invoice_id",
        Integer,
        ForeignKey("invoices.id", ondelete="CASCADE"),
        nullable=False,
    ),
    Column("pet_id", Integer, ForeignKey("pets.id"), nullable=True),
    Column("product_id", Integer, ForeignKey("products.id"), nullable=True),
    Column("product_name_snapshot", Text, nullable=False),
    Column("quantity", Numeric, nullable=False),
    Column("price_snapshot", Numeric, nullable=False),
    CheckConstraint("quantity > 0", name="ck_invoice_items_quantity_pos"),
)

settings = Table(
    "settings",
    metadata,
    Column("key", String, primary_key=True),
    Column("value", Text, nullable=False),
)
