from sqlalchemy import Column, Integer, String, Text

from .db import Base


class PasswordEntryRow(Base):
    __tablename__ = "password_entries"

    id = Column(String(36), primary_key=True)

    title = Column(Text, nullable=False)
    username = Column(Text, nullable=False)
    password = Column(Text, nullable=False)
    website = Column(Text)
    email = Column(Text)

    # canonical ISO-8601 strings, so ORDER BY is chronological
    created_at = Column(String(32), nullable=False)
    updated_at = Column(String(32), nullable=False)


class SchemaVersion(Base):
    __tablename__ = "schema_version"

    version = Column(Integer, primary_key=True, nullable=False)
