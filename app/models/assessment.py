"""
Relational model for customers, their assessments and the follow-up thread.

Every foreign key is NOT NULL and ON DELETE RESTRICT: deleting a row that
is still referenced is refused by the database, never cascaded.
"""
from datetime import datetime, timezone

from sqlalchemy import (
    JSON,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import DeclarativeBase, relationship


def utcnow() -> datetime:
    """Naive UTC, matching the TIMESTAMP (without time zone) columns."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class Base(DeclarativeBase):
    pass


class Customer(Base):
    __tablename__ = "customer"

    id = Column(Integer, primary_key=True, autoincrement=True)
    fname = Column(String(100), nullable=False)
    lname = Column(String(100), nullable=False)
    gender = Column(String(20), nullable=False)
    age = Column(Integer, nullable=False)
    mobile = Column(String(20), nullable=False, unique=True)
    email = Column(String(255), nullable=False, unique=True)
    pan = Column(String(20), nullable=False, unique=True)
    account_number = Column(String(34), nullable=False, unique=True)
    password_hash = Column(String(255), nullable=False)

    last_accessed = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    assessments = relationship("Assessment", back_populates="customer", passive_deletes="all")

    @property
    def display_name(self) -> str:
        return f"{self.fname} {self.lname}".strip()

    def __repr__(self):
        return f"<Customer {self.id} {self.email}>"


class BankUser(Base):
    __tablename__ = "bank_user"

    id = Column(Integer, primary_key=True, autoincrement=True)
    username = Column(String(100), nullable=False, unique=True)
    password_hash = Column(String(255), nullable=False)


class Assessment(Base):
    __tablename__ = "assessment"
    __table_args__ = (
        Index("ix_assessment_customer_created", "customer_id", "created_at"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    customer_id = Column(
        Integer, ForeignKey("customer.id", ondelete="RESTRICT"), nullable=False, index=True,
    )

    # ── Decision ──
    score = Column(Integer, nullable=False)
    status = Column(String(30), nullable=False, index=True)

    # ── Questionnaire payloads (schema owned by the client) ──
    answers = Column(JSON, nullable=False)
    breakdown = Column(JSON, nullable=True)
    language = Column(String(8), nullable=False, default="en")

    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    customer = relationship("Customer", back_populates="assessments")
    messages = relationship(
        "Message",
        back_populates="assessment",
        order_by=lambda: [Message.created_at, Message.id],
        passive_deletes="all",
    )
    documents = relationship(
        "Document",
        back_populates="assessment",
        order_by=lambda: [Document.upload_date, Document.id],
        passive_deletes="all",
    )

    def __repr__(self):
        return f"<Assessment {self.id} customer={self.customer_id} score={self.score} status={self.status}>"


class Message(Base):
    __tablename__ = "message"

    id = Column(Integer, primary_key=True, autoincrement=True)
    assessment_id = Column(
        Integer, ForeignKey("assessment.id", ondelete="RESTRICT"), nullable=False, index=True,
    )
    sender = Column(String(100), nullable=False)
    text = Column(Text, nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)

    assessment = relationship("Assessment", back_populates="messages")


class Document(Base):
    __tablename__ = "document"

    id = Column(Integer, primary_key=True, autoincrement=True)
    assessment_id = Column(
        Integer, ForeignKey("assessment.id", ondelete="RESTRICT"), nullable=False, index=True,
    )
    file_name = Column(String(255), nullable=False, unique=True)
    original_name = Column(String(255), nullable=False)
    file_path = Column(String(512), nullable=False)
    doc_type = Column(String(100), nullable=True)
    upload_date = Column(DateTime, default=utcnow, nullable=False)

    assessment = relationship("Assessment", back_populates="documents")


class AssessmentStatusAudit(Base):
    """One row per manual status override."""
    __tablename__ = "assessment_status_audit"

    id = Column(Integer, primary_key=True, autoincrement=True)
    assessment_id = Column(
        Integer, ForeignKey("assessment.id", ondelete="RESTRICT"), nullable=False, index=True,
    )
    old_status = Column(String(30), nullable=False)
    new_status = Column(String(30), nullable=False)
    changed_by = Column(String(100), nullable=False)
    changed_at = Column(DateTime, default=utcnow, nullable=False)


class DynamicQuestion(Base):
    __tablename__ = "dynamic_question"

    id = Column(String(36), primary_key=True)
    question_key = Column(String(50), nullable=False)
    question = Column(Text, nullable=False)
    language = Column(String(8), nullable=False, default="en")
    options = Column(JSON, nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)
