"""Note table model."""

from sqlalchemy import BigInteger, Column, Index, Text
from sqlmodel import Field, SQLModel


class NoteRecord(SQLModel, table=True):  # type: ignore
    """Row of the ``notes`` table. Active when ``deleted_at`` is null, trashed otherwise."""

    __tablename__ = "notes"  # type: ignore

    id: int | None = Field(default=None, primary_key=True)
    title: str = Field(default="", sa_column=Column("title", Text, nullable=False))
    body: str = Field(default="", sa_column=Column("content", Text, nullable=False))

    # Epoch milliseconds
    created_at: int = Field(
        default=0, sa_column=Column("createdAt", BigInteger, nullable=False)
    )
    deleted_at: int | None = Field(
        default=None, sa_column=Column("deletedAt", BigInteger, nullable=True)
    )

    __table_args__ = (
        Index("ix_notes_createdAt", "createdAt"),
        Index("ix_notes_deletedAt", "deletedAt"),
    )
