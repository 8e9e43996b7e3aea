"""Test helpers for DataSource."""

import uuid
from pathlib import Path

from dbmapper.models import DataSource, ProductTypeEnum


def make_datasource(
    *,
    product_type: ProductTypeEnum = ProductTypeEnum.POSTGRES,
    name: str = "test-ds",
    is_active: bool = True,
    close_connection_after_execute: bool = False,
) -> DataSource:
    """In-memory DataSource for mocked drivers (nothing is contacted)."""
    return DataSource(
        id=uuid.uuid4(),
        name=name,
        product_type=product_type,
        host="localhost",
        port=5432,
        database="db",
        username="u",
        password="p",
        is_active=is_active,
        close_connection_after_execute=close_connection_after_execute,
    )


def make_sqlite_datasource(
    path: Path,
    *,
    close_connection_after_execute: bool = False,
) -> DataSource:
    """DataSource pointing at a SQLite file (created on first connect)."""
    return DataSource(
        id=uuid.uuid4(),
        name=f"sqlite-{path.stem}",
        product_type=ProductTypeEnum.SQLITE,
        database=str(path),
        close_connection_after_execute=close_connection_after_execute,
    )
