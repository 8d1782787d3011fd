"""SQLAlchemy declarative Base shared by the user and complaint models."""

from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """Declarative base; Base.metadata is the target for Alembic and test create_all."""

    pass
