"""
DataSource model and supported database product types.

DataSource is a plain SQLModel (no table): it only describes how to reach
an external database. Passwords are taken as given.
"""

import uuid
from enum import Enum

from sqlmodel import Field, SQLModel


class ProductTypeEnum(str, Enum):
    """Supported database product types (postgres, mysql, trino, sqlite)."""

    POSTGRES = "postgres"
    MYSQL = "mysql"
    TRINO = "trino"
    SQLITE = "sqlite"


class DataSource(SQLModel):
    id: uuid.UUID = Field(default_factory=uuid.uuid4)
    name: str = Field(max_length=255)
    product_type: ProductTypeEnum
    host: str | None = Field(default=None, max_length=255)
    port: int | None = Field(default=None)
    database: str = Field(max_length=1024)  # file path for sqlite
    username: str | None = Field(default=None, max_length=255)
    password: str | None = Field(default=None, max_length=512)
    is_active: bool = Field(default=True)
    close_connection_after_execute: bool = Field(
        default=False,
        description="If True, close the DB connection when the transaction closes instead of "
        "returning it to the pool.",
    )
    use_ssl: bool = Field(
        default=False,
        description="For Trino: use HTTPS (http_scheme='https'). When True, password is required.",
    )


class IsolationLevel(str, Enum):
    """Transaction isolation levels. NONE leaves the driver default untouched."""

    NONE = "NONE"
    READ_UNCOMMITTED = "READ UNCOMMITTED"
    READ_COMMITTED = "READ COMMITTED"
    REPEATABLE_READ = "REPEATABLE READ"
    SERIALIZABLE = "SERIALIZABLE"
