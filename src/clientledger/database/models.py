"""SQLAlchemy models for clientledger database."""

from datetime import datetime, UTC
from sqlalchemy import (
    Column,
    Integer,
    String,
    ForeignKey,
    DateTime,
    Numeric,
    create_engine,
    event,
)
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, relationship, sessionmaker, Session

Base = declarative_base()


def _utcnow() -> datetime:
    return datetime.now(UTC)


class Client(Base):
    """Client model, owned by one accountant."""

    __tablename__ = "clients"

    id = Column(Integer, primary_key=True)
    accountant_id = Column(String, nullable=False, index=True)
    first_name = Column(String, nullable=False)
    last_name = Column(String, nullable=True)
    email = Column(String, nullable=False)
    phone_number = Column(String, nullable=True)
    created_at = Column(DateTime, default=_utcnow, nullable=False)

    # Relationships
    files = relationship("File", back_populates="client")


class File(Base):
    """Uploaded statement file model."""

    __tablename__ = "files"

    id = Column(Integer, primary_key=True)
    client_id = Column(Integer, ForeignKey("clients.id"), nullable=False, index=True)
    accountant_id = Column(String, nullable=False)
    name = Column(String, nullable=False)
    storage_path = Column(String, nullable=False)
    size = Column(Integer, nullable=True)
    uploaded_at = Column(DateTime, default=_utcnow, nullable=False)

    # Relationships
    client = relationship("Client", back_populates="files")
    transactions = relationship("Transaction", back_populates="file")


class Category(Base):
    """Category model. Names are intentionally not unique."""

    __tablename__ = "categories"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String, nullable=False)


class Transaction(Base):
    """Transaction model holding both the AI category and the accountant override."""

    __tablename__ = "transactions"

    id = Column(Integer, primary_key=True)
    client_id = Column(Integer, ForeignKey("clients.id"), nullable=False, index=True)
    file_id = Column(Integer, ForeignKey("files.id"), nullable=False, index=True)
    accountant_id = Column(String, nullable=False)
    tx_amount = Column(Numeric(14, 2), nullable=True)
    tx_narration = Column(String, nullable=True)
    tx_timestamp = Column(DateTime, nullable=True)
    category_id_by_ai = Column(Integer, ForeignKey("categories.id"), nullable=True)
    updated_category_id = Column(Integer, ForeignKey("categories.id"), nullable=True)
    reason = Column(String, nullable=True)
    confidence = Column(String, nullable=True)
    feedback_for_update = Column(String, nullable=True)
    created_at = Column(DateTime, default=_utcnow, nullable=False)
    updated_at = Column(DateTime, default=_utcnow, onupdate=_utcnow, nullable=False)
    updated_by = Column(String, nullable=True)

    # Relationships
    file = relationship("File", back_populates="transactions")
    ai_category = relationship("Category", foreign_keys=[category_id_by_ai])
    updated_category = relationship("Category", foreign_keys=[updated_category_id])


@event.listens_for(Engine, "connect")
def _enable_sqlite_foreign_keys(dbapi_connection, connection_record) -> None:
    """Enforce foreign keys on SQLite connections."""
    module = type(dbapi_connection).__module__
    if "sqlite" not in module:
        return
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def create_session_factory(database_url: str) -> sessionmaker[Session]:
    """Create a SQLAlchemy session factory."""
    engine = create_engine(database_url, echo=False)
    Base.metadata.create_all(engine)
    return sessionmaker(bind=engine, expire_on_commit=False)
