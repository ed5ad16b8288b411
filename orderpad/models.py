"""
SQLAlchemy Database Models

The order table keeps the camelCase column names the mobile client has
always written (audioUri, transcribedText, ...), so existing databases can be
opened in place. Python attribute names are snake_case.

Author: OrderPad Team
Version: 1.0.0
"""

import enum

from sqlalchemy import Column, Integer, String, Text, Enum

from orderpad.database import Base


class OrderStatus(str, enum.Enum):
    """Order status. Orders move freely between the two states."""
    OPEN = "open"
    CLOSED = "closed"


class Order(Base):
    """
    One customer order.

    The schema of this table is owned by orderpad.storage.migrations; this
    class only maps it.
    """
    __tablename__ = "orders"

    id = Column(String, primary_key=True)

    # =========================================================================
    # RECORDING
    # =========================================================================
    audio_uri = Column("audioUri", Text, nullable=False)
    duration = Column(Text, nullable=False)

    # =========================================================================
    # ORDER CONTENT
    # =========================================================================
    transcribed_text = Column("transcribedText", Text, nullable=False)
    staff_name = Column("staffName", Text, nullable=False)
    timestamp = Column(Text, nullable=False)  # ISO-8601, sortable as text

    # =========================================================================
    # TABLE SERVICE
    # =========================================================================
    table_number = Column("tableNumber", Integer, nullable=True)
    guest_count = Column("guestCount", Integer, nullable=True)
    status = Column(
        Enum(
            OrderStatus,
            native_enum=False,
            length=16,
            values_callable=lambda statuses: [s.value for s in statuses],
        ),
        default=OrderStatus.OPEN,
        server_default=OrderStatus.OPEN.value,
        nullable=False,
    )

    def __repr__(self):
        return f"<Order #{self.id} - {self.staff_name} - {self.status.value if self.status else 'open'}>"


class SchemaMigration(Base):
    """One applied (or adopted) schema migration step."""
    __tablename__ = "schema_migrations"

    version = Column(Integer, primary_key=True, autoincrement=False)
    name = Column(String(100), nullable=False)
    outcome = Column(String(20), nullable=False)
    applied_at = Column(Text, nullable=False)

    def __repr__(self):
        return f"<SchemaMigration v{self.version} {self.name} ({self.outcome})>"
