from sqlalchemy import Column, Integer, String, ForeignKey, DateTime, Boolean, Text, Numeric, CheckConstraint
from sqlalchemy.orm import relationship
from datetime import datetime, timezone
import enum
import uuid
from pharmacy_pos.database import Base


def utcnow() -> datetime:
    """Timezone-aware UTC now, used for every stored timestamp"""
    return datetime.now(timezone.utc)


def new_id() -> str:
    return str(uuid.uuid4())


# Enums
class PaymentMethod(str, enum.Enum):
    CASH = "cash"
    CARD = "card"
    TRANSFER = "transfer"


class SaleStatus(str, enum.Enum):
    COMPLETED = "completed"
    REFUNDED = "refunded"


# Models
class Product(Base):
    """Products Master"""
    __tablename__ = "products"

    id = Column(String(36), primary_key=True, default=new_id)
    name = Column(String(300), nullable=False, index=True)
    buy_price = Column(Numeric(10, 2), nullable=False)
    sell_price = Column(Numeric(10, 2), nullable=False)
    stock = Column(Integer, nullable=False, default=0)
    category = Column(String(100), nullable=False, index=True)
    description = Column(Text)
    barcode = Column(String(100), unique=True, index=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False, index=True)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False, index=True)

    __table_args__ = (
        CheckConstraint("buy_price >= 0", name="ck_products_buy_price"),
        CheckConstraint("sell_price >= 0", name="ck_products_sell_price"),
        CheckConstraint("stock >= 0", name="ck_products_stock"),
    )

    # Relationships
    sale_items = relationship("SaleItem", back_populates="product")


class Sale(Base):
    """Sales Transactions"""
    __tablename__ = "sales"

    id = Column(String(36), primary_key=True, default=new_id)
    total_amount = Column(Numeric(12, 2), nullable=False, default=0)
    total_profit = Column(Numeric(12, 2), nullable=False, default=0)
    payment_method = Column(String(20), nullable=False)
    status = Column(String(20), nullable=False, default=SaleStatus.COMPLETED.value, index=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False, index=True)

    __table_args__ = (
        CheckConstraint("total_amount >= 0", name="ck_sales_total_amount"),
        CheckConstraint("total_profit >= 0", name="ck_sales_total_profit"),
        CheckConstraint("payment_method IN ('cash', 'card', 'transfer')", name="ck_sales_payment_method"),
        CheckConstraint("status IN ('completed', 'refunded')", name="ck_sales_status"),
    )

    # Relationships
    items = relationship("SaleItem", back_populates="sale", cascade="all, delete-orphan")


class SaleItem(Base):
    """Sale line items"""
    __tablename__ = "sale_items"

    id = Column(String(36), primary_key=True, default=new_id)
    sale_id = Column(String(36), ForeignKey("sales.id", ondelete="CASCADE"), nullable=False, index=True)
    product_id = Column(String(36), ForeignKey("products.id", ondelete="RESTRICT"), nullable=False, index=True)

    quantity = Column(Integer, nullable=False)
    unit_sell_price = Column(Numeric(10, 2), nullable=False)
    unit_buy_price = Column(Numeric(10, 2), nullable=False)
    total_sell_price = Column(Numeric(12, 2), nullable=False)
    item_profit = Column(Numeric(12, 2), nullable=False)

    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    __table_args__ = (
        CheckConstraint("quantity > 0", name="ck_sale_items_quantity"),
        CheckConstraint("unit_sell_price >= 0", name="ck_sale_items_unit_sell_price"),
        CheckConstraint("unit_buy_price >= 0", name="ck_sale_items_unit_buy_price"),
    )

    # Relationships
    sale = relationship("Sale", back_populates="items")
    product = relationship("Product", back_populates="sale_items")


class Customer(Base):
    """Customers"""
    __tablename__ = "customers"

    id = Column(String(36), primary_key=True, default=new_id)
    name = Column(String(200), nullable=False)
    phone = Column(String(30), unique=True, nullable=False, index=True)
    email = Column(String(100))
    address = Column(Text)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False, index=True)


class Service(Base):
    """Billable services (consultations, tests, ...)"""
    __tablename__ = "services"

    id = Column(String(36), primary_key=True, default=new_id)
    name = Column(String(200), nullable=False, index=True)
    category = Column(String(100), nullable=False, index=True)
    description = Column(Text)
    price = Column(Numeric(10, 2), nullable=False)
    duration = Column(Integer, nullable=False)  # minutes
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False, index=True)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False, index=True)

    __table_args__ = (
        CheckConstraint("price >= 0", name="ck_services_price"),
        CheckConstraint("duration > 0", name="ck_services_duration"),
    )

    # Relationships
    sales = relationship("ServiceSale", back_populates="service")


class ServiceSale(Base):
    """Services rendered and billed"""
    __tablename__ = "service_sales"

    id = Column(String(36), primary_key=True, default=new_id)
    service_id = Column(String(36), ForeignKey("services.id", ondelete="RESTRICT"), nullable=False, index=True)
    quantity = Column(Integer, nullable=False)
    unit_price = Column(Numeric(10, 2), nullable=False)
    total_amount = Column(Numeric(12, 2), nullable=False)
    served_by = Column(String(200), nullable=False)
    notes = Column(Text)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False, index=True)

    __table_args__ = (
        CheckConstraint("quantity > 0", name="ck_service_sales_quantity"),
        CheckConstraint("unit_price >= 0", name="ck_service_sales_unit_price"),
    )

    # Relationships
    service = relationship("Service", back_populates="sales")


class SyncState(Base):
    """Durable key/value state for the cloud sync (last acknowledged push)"""
    __tablename__ = "sync_state"

    key = Column(String(50), primary_key=True)
    value = Column(DateTime(timezone=True))
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)
