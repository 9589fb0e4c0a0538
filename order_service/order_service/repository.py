"""SQLAlchemy-backed order store."""

from decimal import Decimal
from typing import Optional, Protocol

from sqlalchemy import Engine, Integer, Numeric, String, create_engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import DeclarativeBase, Mapped, Session, mapped_column
from sqlalchemy.pool import StaticPool
from sqlalchemy.types import TypeDecorator

from .errors import PersistenceFailed
from .logger import logger
from .schemas import Order


class ExactDecimal(TypeDecorator):
    """Decimal column that never rounds.

    Unscaled NUMERIC where the database has one. SQLite has no exact decimal
    type, so values are stored there as their string form.
    """

    impl = Numeric
    cache_ok = True

    def load_dialect_impl(self, dialect):
        if dialect.name == "sqlite":
            return dialect.type_descriptor(String())
        return dialect.type_descriptor(Numeric(asdecimal=True))

    def process_bind_param(self, value, dialect):
        if value is None or dialect.name != "sqlite":
            return value
        return str(value)

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        return Decimal(value) if dialect.name == "sqlite" else value


class Base(DeclarativeBase):
    pass


class OrderRecord(Base):
    """Row of the orders table."""

    __tablename__ = "orders"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    order_number: Mapped[str] = mapped_column(String(36), unique=True, nullable=False)
    sku_code: Mapped[str] = mapped_column(String(255), nullable=False)
    price: Mapped[Optional[Decimal]] = mapped_column(ExactDecimal(), nullable=True)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)

    def to_order(self) -> Order:
        return Order(
            id=self.id,
            order_number=self.order_number,
            sku_code=self.sku_code,
            quantity=self.quantity,
            price=self.price,
        )


class OrderStore(Protocol):
    """Protocol for durable order storage."""

    def save(self, order: Order) -> Order:
        """Persist an order and return it with its store-assigned id.

        Raises:
            PersistenceFailed: If the order could not be written
        """
        ...


def create_engine_from_url(database_url: str) -> Engine:
    """Create an engine, sharing one connection for in-memory SQLite.

    Args:
        database_url: SQLAlchemy database URL

    Returns:
        Engine: The configured engine
    """
    if database_url.startswith("sqlite"):
        kwargs = {"connect_args": {"check_same_thread": False}}
        if database_url in ("sqlite://", "sqlite:///:memory:"):
            kwargs["poolclass"] = StaticPool
        return create_engine(database_url, **kwargs)
    return create_engine(database_url, pool_pre_ping=True)


class SqlOrderRepository:
    """Order store writing to a relational database."""

    def __init__(self, engine: Engine):
        self.engine = engine

    def create_schema(self) -> None:
        """Create the orders table if it does not exist."""
        Base.metadata.create_all(self.engine)

    def save(self, order: Order) -> Order:
        """Insert the order in its own transaction.

        Args:
            order: The unsaved order

        Returns:
            Order: The order as read back from the table, carrying the generated id

        Raises:
            PersistenceFailed: On any database error; the transaction is rolled back
        """
        record = OrderRecord(
            order_number=order.order_number,
            sku_code=order.sku_code,
            price=order.price,
            quantity=order.quantity,
        )
        try:
            with Session(self.engine) as session, session.begin():
                session.add(record)
                session.flush()
                session.refresh(record)
                saved = record.to_order()
        except SQLAlchemyError as e:
            logger.error(f"Failed to save order {order.order_number}: {e}")
            raise PersistenceFailed(f"Could not save order {order.order_number}") from e

        logger.debug(f"Order {saved.order_number} saved with id {saved.id}")
        return saved
