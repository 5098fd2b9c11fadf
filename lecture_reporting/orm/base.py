"""
lecture_reporting/orm/base.py
Base model for all ORM models
"""
from datetime import datetime
from enum import Enum
from typing import Type

from sqlalchemy import Column, Integer, DateTime, Enum as SQLEnum
from sqlalchemy.orm import declarative_base

Base = declarative_base()


def enum_column_type(enum_cls: Type[Enum], name: str) -> SQLEnum:
    """
    Enum column storing the member *values* ("Program Leader", "in_progress")
    as plain strings so the rows stay readable from any SQL client.
    """
    return SQLEnum(
        enum_cls,
        name=name,
        native_enum=False,
        validate_strings=True,
        values_callable=lambda members: [m.value for m in members],
        length=32,
    )


class BaseModel(Base):
    """
    Abstract base model with common fields.
    All ORM models inherit from this.
    """
    __abstract__ = True

    id = Column(
        Integer,
        primary_key=True,
        autoincrement=True,
        index=True
    )

    created_at = Column(
        DateTime,
        default=datetime.utcnow,
        nullable=False,
        comment="Timestamp when record was created"
    )
