"""Database models using SQLModel.

Defines the core data models for the church letters service:
- Organization: The church, multi-tenancy root
- User: Administrators who edit templates and generate letters
- Person: Church members that letters are addressed to
- LetterTemplate: Named letter/certificate templates with {{token}} placeholders
- GeneratedLetter: Append-only snapshots of rendered letters
"""

import datetime
import uuid

from pydantic import field_validator
from sqlalchemy import (
    JSON,
    BigInteger,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    Text,
    UniqueConstraint,
    Uuid,
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlmodel import Field, SQLModel


def utcnow() -> datetime.datetime:
    """Current UTC time as an aware datetime."""
    return datetime.datetime.now(datetime.timezone.utc)


# JSONB on PostgreSQL, plain JSON elsewhere (SQLite in tests)
JSONVariant = JSON().with_variant(JSONB(), "postgresql")

# BIGSERIAL on PostgreSQL, INTEGER PRIMARY KEY (rowid) on SQLite
SequenceVariant = BigInteger().with_variant(Integer(), "sqlite")


# =============================================================================
# Shared Models (for API responses, not database tables)
# =============================================================================


class OrganizationBase(SQLModel):
    """Base organization fields."""

    name: str = Field(min_length=1, max_length=255)
    slug: str = Field(min_length=1, max_length=100)
    pastor_name: str | None = Field(default=None, max_length=255)


class UserBase(SQLModel):
    """Base user fields."""

    email: str = Field(max_length=255)
    full_name: str | None = Field(default=None, max_length=255)
    is_active: bool = Field(default=True)


class PersonBase(SQLModel):
    """Base church member fields."""

    full_name: str = Field(min_length=1, max_length=255)
    ministry: str | None = Field(default=None, max_length=255)
    phone: str | None = Field(default=None, max_length=50)
    email: str | None = Field(default=None, max_length=255)


class LetterTemplateBase(SQLModel):
    """Base letter template fields."""

    name: str = Field(min_length=1, max_length=255)
    category: str = Field(default="general", max_length=100)
    content: str


class RecipientContext(SQLModel):
    """Substitution values supplied by a letter's recipient.

    Optional contact fields are normalized to empty strings so resolvers
    never deal with ``None``.
    """

    id: uuid.UUID
    full_name: str
    ministry: str = ""
    phone: str = ""
    email: str = ""

    @field_validator("ministry", "phone", "email", mode="before")
    @classmethod
    def none_to_empty(cls, v: str | None) -> str:
        return v or ""


class OrganizationContext(SQLModel):
    """Substitution values supplied by the issuing organization."""

    name: str
    pastor_name: str = ""

    @field_validator("pastor_name", mode="before")
    @classmethod
    def none_to_empty(cls, v: str | None) -> str:
        return v or ""


# =============================================================================
# Database Models
# =============================================================================


class Organization(OrganizationBase, table=True):
    """Organization model for multi-tenancy.

    Templates, members and generated letters all belong to an
    organization, ensuring data isolation between churches.
    """

    __tablename__ = "organizations"

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        sa_column=Column(Uuid, primary_key=True),
    )
    created_at: datetime.datetime = Field(
        default_factory=utcnow,
        sa_column=Column(DateTime(timezone=True), nullable=False),
    )
    updated_at: datetime.datetime = Field(
        default_factory=utcnow,
        sa_column=Column(DateTime(timezone=True), nullable=False, onupdate=utcnow),
    )


class User(UserBase, table=True):
    """User model representing administrators.

    Users belong to an organization and are recorded as the creator of
    templates and the generator of letters.
    """

    __tablename__ = "users"

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        sa_column=Column(Uuid, primary_key=True),
    )
    org_id: uuid.UUID = Field(
        sa_column=Column(
            Uuid,
            ForeignKey("organizations.id", ondelete="CASCADE"),
            nullable=False,
            index=True,
        )
    )
    created_at: datetime.datetime = Field(
        default_factory=utcnow,
        sa_column=Column(DateTime(timezone=True), nullable=False),
    )


class Person(PersonBase, table=True):
    """Church member that letters can be addressed to."""

    __tablename__ = "people"

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        sa_column=Column(Uuid, primary_key=True),
    )
    org_id: uuid.UUID = Field(
        sa_column=Column(
            Uuid,
            ForeignKey("organizations.id", ondelete="CASCADE"),
            nullable=False,
            index=True,
        )
    )
    created_at: datetime.datetime = Field(
        default_factory=utcnow,
        sa_column=Column(DateTime(timezone=True), nullable=False),
    )


class LetterTemplate(LetterTemplateBase, table=True):
    """Letter template model.

    ``variables`` is derived from ``content`` every time the content is
    written and is never edited on its own.
    """

    __tablename__ = "letter_templates"
    __table_args__ = (
        UniqueConstraint("org_id", "name", name="uq_letter_templates_org_name"),
    )

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        sa_column=Column(Uuid, primary_key=True),
    )
    org_id: uuid.UUID = Field(
        sa_column=Column(
            Uuid,
            ForeignKey("organizations.id", ondelete="CASCADE"),
            nullable=False,
            index=True,
        )
    )
    content: str = Field(sa_column=Column(Text, nullable=False))
    variables: list[str] = Field(
        default_factory=list,
        sa_column=Column(JSONVariant, nullable=False),
    )
    created_by: uuid.UUID | None = Field(
        default=None,
        sa_column=Column(Uuid, nullable=True),
    )
    created_at: datetime.datetime = Field(
        default_factory=utcnow,
        sa_column=Column(DateTime(timezone=True), nullable=False),
    )
    updated_at: datetime.datetime = Field(
        default_factory=utcnow,
        sa_column=Column(DateTime(timezone=True), nullable=False),
    )


class GeneratedLetter(SQLModel, table=True):
    """Generated letter snapshot.

    Template and recipient are referenced by id without foreign keys and
    their names are copied, so deleting or editing a template never
    touches letters already issued.

    ``sequence`` grows with every insert and breaks ties between letters
    stored with the same ``created_at``.
    """

    __tablename__ = "generated_letters"

    sequence: int | None = Field(
        default=None,
        sa_column=Column(SequenceVariant, primary_key=True, autoincrement=True),
    )
    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        sa_column=Column(Uuid, unique=True, nullable=False),
    )
    org_id: uuid.UUID = Field(
        sa_column=Column(
            Uuid,
            ForeignKey("organizations.id", ondelete="CASCADE"),
            nullable=False,
            index=True,
        )
    )
    template_id: uuid.UUID = Field(sa_column=Column(Uuid, nullable=False, index=True))
    template_name: str = Field(max_length=255)
    recipient_id: uuid.UUID = Field(sa_column=Column(Uuid, nullable=False, index=True))
    recipient_name: str = Field(max_length=255)
    content: str = Field(sa_column=Column(Text, nullable=False))
    generated_by: uuid.UUID | None = Field(
        default=None,
        sa_column=Column(Uuid, nullable=True),
    )
    created_at: datetime.datetime = Field(
        default_factory=utcnow,
        sa_column=Column(DateTime(timezone=True), nullable=False, index=True),
    )


# =============================================================================
# Response Models
# =============================================================================


class TemplateRead(LetterTemplateBase):
    """Letter template read model."""

    id: uuid.UUID
    org_id: uuid.UUID
    variables: list[str]
    created_by: uuid.UUID | None = None
    created_at: datetime.datetime
    updated_at: datetime.datetime


class GeneratedLetterRead(SQLModel):
    """Generated letter read model."""

    id: uuid.UUID
    org_id: uuid.UUID
    template_id: uuid.UUID
    template_name: str
    recipient_id: uuid.UUID
    recipient_name: str
    content: str
    generated_by: uuid.UUID | None = None
    created_at: datetime.datetime


class LetterPreview(SQLModel):
    """Rendered letter that has not been stored."""

    template_id: uuid.UUID
    template_name: str
    recipient_id: uuid.UUID
    recipient_name: str
    variables: list[str]
    content: str
