"""
Database models for financial applications.
"""

from sqlalchemy import (
    Column,
    Integer,
    String,
    Date,
    DateTime,
    Enum as SQLEnum,
    Text,
    ForeignKey,
    Numeric,
    Boolean,
)
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from application_documents.database import Base
import enum
import uuid


class ApplicationState(enum.Enum):
    """Lifecycle state of an application."""
    PENDING = "pending"
    ACTIVATED = "activated"
    IN_REVIEW = "in_review"
    CLOSED = "closed"
    DECLINED = "declined"

    @property
    def description(self) -> str:
        """Human-readable label shown on documents."""
        return _STATE_DESCRIPTIONS[self]


_STATE_DESCRIPTIONS = {
    ApplicationState.PENDING: "Pending",
    ApplicationState.ACTIVATED: "Activated",
    ApplicationState.IN_REVIEW: "In Review",
    ApplicationState.CLOSED: "Closed",
    ApplicationState.DECLINED: "Declined",
}


def _new_id() -> str:
    return str(uuid.uuid4())


class Person(Base):
    """The individual who applied."""
    __tablename__ = "people"

    id = Column(Integer, primary_key=True, index=True)
    first_name = Column(String(100), nullable=False)
    surname = Column(String(100), nullable=False)


class LegalEntity(Base):
    """Company details for applications made on behalf of a legal entity."""
    __tablename__ = "legal_entities"

    id = Column(Integer, primary_key=True, index=True)
    company_name = Column(String(200), nullable=False)
    registration_number = Column(String(64), nullable=True)
    company_type = Column(String(64), nullable=True)


class Review(Base):
    """A review placed on an application, with the reason it was raised."""
    __tablename__ = "reviews"

    id = Column(Integer, primary_key=True, index=True)
    reason = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)


class Application(Base):
    """Model for an application for a financial product."""
    __tablename__ = "applications"

    id = Column(String(36), primary_key=True, default=_new_id)
    reference_number = Column(String(64), nullable=False, index=True)
    state = Column(SQLEnum(ApplicationState), nullable=False, default=ApplicationState.PENDING)
    date = Column(Date, nullable=False)  # submission date

    person_id = Column(Integer, ForeignKey("people.id"), nullable=False)
    is_legal_entity = Column(Boolean, nullable=False, default=False)
    legal_entity_id = Column(Integer, ForeignKey("legal_entities.id"), nullable=True)
    current_review_id = Column(Integer, ForeignKey("reviews.id"), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    person = relationship("Person")
    legal_entity = relationship("LegalEntity")
    current_review = relationship("Review")
    products = relationship(
        "Product", back_populates="application", cascade="all, delete-orphan", order_by="Product.id"
    )

    def __repr__(self):
        return f"<Application(id={self.id}, reference={self.reference_number}, state={self.state.value})>"


class Product(Base):
    """A financial product held under an application."""
    __tablename__ = "products"

    id = Column(Integer, primary_key=True, index=True)
    application_id = Column(String(36), ForeignKey("applications.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String(200), nullable=False)

    application = relationship("Application", back_populates="products")
    funds = relationship("Fund", back_populates="product", cascade="all, delete-orphan", order_by="Fund.id")


class Fund(Base):
    """An investment in a fund; monetary values are stored as exact decimals."""
    __tablename__ = "funds"

    id = Column(Integer, primary_key=True, index=True)
    product_id = Column(Integer, ForeignKey("products.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String(200), nullable=False)
    amount = Column(Numeric(18, 2), nullable=False)
    fees = Column(Numeric(18, 2), nullable=False, default=0)

    product = relationship("Product", back_populates="funds")
