"""Alembic migrations: repeatable up/down cycle and the resulting schema."""

from typing import Any

import pytest
from sqlalchemy import Connection, inspect
from sqlalchemy.ext.asyncio import AsyncEngine

from alembic import command
from alembic.config import Config


def test_migration_stairway(alembic_config: Config) -> None:
    """Ensure migrations can be applied and rolled back repeatedly."""
    command.downgrade(alembic_config, "base")
    command.upgrade(alembic_config, "head")
    command.downgrade(alembic_config, "base")
    command.upgrade(alembic_config, "head")


def _schema(connection: Connection) -> dict[str, Any]:
    inspector = inspect(connection)
    return {
        "tables": set(inspector.get_table_names()),
        "record_indexes": {index["name"] for index in inspector.get_indexes("records")},
        "resource_uniques": [sorted(c["column_names"]) for c in inspector.get_unique_constraints("resources")],
        "resource_fks": [fk["options"].get("ondelete") for fk in inspector.get_foreign_keys("resources")],
    }


@pytest.mark.asyncio
async def test_head_schema(engine: AsyncEngine) -> None:
    async with engine.connect() as conn:
        schema = await conn.run_sync(_schema)

    assert {"projects", "resources", "records", "alembic_version"} <= schema["tables"]
    assert "records_resource_external_id_idx" in schema["record_indexes"]
    assert schema["resource_uniques"] == [["name", "project_id"]]
    assert schema["resource_fks"] == ["CASCADE"]
