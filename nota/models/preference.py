"""Preference table model."""

from sqlmodel import Field, SQLModel


class PreferenceRecord(SQLModel, table=True):  # type: ignore
    """Integer key/value row of a named preferences store."""

    __tablename__ = "preferences"  # type: ignore

    store: str = Field(primary_key=True)
    key: str = Field(primary_key=True)
    value: int
