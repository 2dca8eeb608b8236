import json
import logging
import time
import uuid
from collections.abc import Sequence
from datetime import datetime, timezone
from typing import Any

from sqlalchemy import text
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncConnection, AsyncEngine

from mockforge.core.errors import ResourceConflict
from mockforge.models import Project, Record, Resource

logger = logging.getLogger(__name__)

_BATCH_SIZE = 100

_RESOURCE_COLUMNS = (
    "id, project_id, name, version, endpoint, template, endpoint_template, "
    "allow_get, allow_get_by_id, allow_post, allow_put, allow_delete, use_incremental_ids, "
    "created_at, updated_at"
)
_JSON_COLUMNS = frozenset({"template", "endpoint_template"})
_UPDATABLE_COLUMNS = frozenset(
    {
        "name",
        "version",
        "endpoint",
        "template",
        "endpoint_template",
        "allow_get",
        "allow_get_by_id",
        "allow_post",
        "allow_put",
        "allow_delete",
        "use_incremental_ids",
    }
)

_DDL = (
    """
    CREATE TABLE IF NOT EXISTS projects (
        id         TEXT PRIMARY KEY,
        name       TEXT NOT NULL,
        created_at TIMESTAMPTZ NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS resources (
        id                  TEXT PRIMARY KEY,
        project_id          TEXT NOT NULL REFERENCES projects(id) ON DELETE CASCADE,
        name                TEXT NOT NULL,
        version             TEXT NOT NULL,
        endpoint            TEXT NOT NULL,
        template            JSONB NOT NULL,
        endpoint_template   JSONB,
        allow_get           BOOLEAN NOT NULL DEFAULT TRUE,
        allow_get_by_id     BOOLEAN NOT NULL DEFAULT TRUE,
        allow_post          BOOLEAN NOT NULL DEFAULT TRUE,
        allow_put           BOOLEAN NOT NULL DEFAULT TRUE,
        allow_delete        BOOLEAN NOT NULL DEFAULT TRUE,
        use_incremental_ids BOOLEAN NOT NULL DEFAULT TRUE,
        created_at          TIMESTAMPTZ NOT NULL,
        updated_at          TIMESTAMPTZ NOT NULL,
        UNIQUE (project_id, name)
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS records (
        id          TEXT PRIMARY KEY,
        seq         BIGINT GENERATED ALWAYS AS IDENTITY,
        resource_id TEXT NOT NULL REFERENCES resources(id) ON DELETE CASCADE,
        external_id TEXT,
        data        JSONB NOT NULL,
        created_at  TIMESTAMPTZ NOT NULL
    )
    """,
    "CREATE INDEX IF NOT EXISTS records_resource_external_id_idx ON records (resource_id, external_id)",
)


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _load_json(value: Any) -> Any:
    """asyncpg hands JSONB back as text when the column type is not declared."""
    if isinstance(value, str):
        return json.loads(value)
    return value


def _external_id(data: dict[str, Any]) -> str | None:
    value = data.get("id")
    return None if value is None else str(value)


def _row_to_project(row: Any) -> Project:
    return Project(id=row[0], name=row[1], created_at=row[2])


def _row_to_resource(row: Any) -> Resource:
    return Resource(
        id=row[0],
        project_id=row[1],
        name=row[2],
        version=row[3],
        endpoint=row[4],
        template=_load_json(row[5]),
        endpoint_template=_load_json(row[6]),
        allow_get=row[7],
        allow_get_by_id=row[8],
        allow_post=row[9],
        allow_put=row[10],
        allow_delete=row[11],
        use_incremental_ids=row[12],
        created_at=row[13],
        updated_at=row[14],
    )


def _row_to_record(row: Any) -> Record:
    return Record(storage_id=row[0], resource_id=row[1], data=_load_json(row[2]), created_at=row[3])


async def _insert_records(conn: AsyncConnection, resource_id: str, blobs: Sequence[dict[str, Any]]) -> None:
    """Insert ``blobs`` in chunks of ``_BATCH_SIZE`` to bound statement size."""
    created = _now()
    for i in range(0, len(blobs), _BATCH_SIZE):
        chunk = blobs[i : i + _BATCH_SIZE]
        await conn.execute(
            text(
                "INSERT INTO records (id, resource_id, external_id, data, created_at) "
                "VALUES (:id, :resource_id, :external_id, CAST(:data AS JSONB), :created_at)"
            ),
            [
                {
                    "id": str(uuid.uuid4()),
                    "resource_id": resource_id,
                    "external_id": _external_id(data),
                    "data": json.dumps(data),
                    "created_at": created,
                }
                for data in chunk
            ],
        )


class PostgresRecordStore:
    def __init__(self, engine: AsyncEngine) -> None:
        self._engine = engine
        self._ready = False

    async def ensure_ready(self) -> None:
        """Create the tables when they do not exist yet."""
        if self._ready:
            return
        async with self._engine.begin() as conn:
            for ddl in _DDL:
                await conn.execute(text(ddl))
        self._ready = True

    async def ping(self) -> bool:
        try:
            async with self._engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
            return True
        except Exception as exc:
            logger.warning("database ping failed: %s", exc)
            return False

    async def dispose(self) -> None:
        await self._engine.dispose()

    # --- projects ---

    async def create_project(self, name: str) -> Project:
        project = Project(id=str(uuid.uuid4()), name=name, created_at=_now())
        async with self._engine.begin() as conn:
            await conn.execute(
                text("INSERT INTO projects (id, name, created_at) VALUES (:id, :name, :created_at)"),
                {"id": project.id, "name": project.name, "created_at": project.created_at},
            )
        return project

    async def get_project(self, project_id: str) -> Project | None:
        async with self._engine.connect() as conn:
            result = await conn.execute(
                text("SELECT id, name, created_at FROM projects WHERE id = :id"),
                {"id": project_id},
            )
            row = result.fetchone()
        return _row_to_project(row) if row is not None else None

    async def list_projects(self) -> list[Project]:
        async with self._engine.connect() as conn:
            result = await conn.execute(text("SELECT id, name, created_at FROM projects ORDER BY created_at DESC"))
            return [_row_to_project(row) for row in result.fetchall()]

    async def delete_project(self, project_id: str) -> bool:
        async with self._engine.begin() as conn:
            result = await conn.execute(text("DELETE FROM projects WHERE id = :id"), {"id": project_id})
        return result.rowcount > 0

    # --- resources ---

    async def create_resource(self, resource: Resource) -> Resource:
        params = resource.model_dump()
        params["template"] = json.dumps(resource.template)
        params["endpoint_template"] = json.dumps(resource.endpoint_template)
        try:
            async with self._engine.begin() as conn:
                await conn.execute(
                    text(
                        f"INSERT INTO resources ({_RESOURCE_COLUMNS}) VALUES ("
                        ":id, :project_id, :name, :version, :endpoint, "
                        "CAST(:template AS JSONB), CAST(:endpoint_template AS JSONB), "
                        ":allow_get, :allow_get_by_id, :allow_post, :allow_put, :allow_delete, "
                        ":use_incremental_ids, :created_at, :updated_at)"
                    ),
                    params,
                )
        except IntegrityError as exc:
            raise ResourceConflict(resource.name) from exc
        return resource

    async def get_resource(self, resource_id: str) -> Resource | None:
        async with self._engine.connect() as conn:
            result = await conn.execute(
                text(f"SELECT {_RESOURCE_COLUMNS} FROM resources WHERE id = :id"),
                {"id": resource_id},
            )
            row = result.fetchone()
        return _row_to_resource(row) if row is not None else None

    async def find_resource(self, project_id: str, name: str) -> Resource | None:
        async with self._engine.connect() as conn:
            result = await conn.execute(
                text(f"SELECT {_RESOURCE_COLUMNS} FROM resources WHERE project_id = :project_id AND name = :name"),
                {"project_id": project_id, "name": name},
            )
            row = result.fetchone()
        return _row_to_resource(row) if row is not None else None

    async def list_resources(self, project_id: str | None = None) -> list[Resource]:
        async with self._engine.connect() as conn:
            if project_id is None:
                result = await conn.execute(
                    text(f"SELECT {_RESOURCE_COLUMNS} FROM resources ORDER BY created_at DESC")
                )
            else:
                result = await conn.execute(
                    text(
                        f"SELECT {_RESOURCE_COLUMNS} FROM resources "
                        "WHERE project_id = :project_id ORDER BY created_at DESC"
                    ),
                    {"project_id": project_id},
                )
            return [_row_to_resource(row) for row in result.fetchall()]

    async def update_resource(self, resource_id: str, **changes: Any) -> Resource | None:
        unknown = set(changes) - _UPDATABLE_COLUMNS
        if unknown:
            raise ValueError(f"Unknown resource columns: {', '.join(sorted(unknown))}")

        assignments = ["updated_at = :updated_at"]
        params: dict[str, Any] = {"id": resource_id, "updated_at": _now()}
        for column, value in changes.items():
            if column in _JSON_COLUMNS:
                assignments.append(f"{column} = CAST(:{column} AS JSONB)")
                params[column] = json.dumps(value)
            else:
                assignments.append(f"{column} = :{column}")
                params[column] = value

        async with self._engine.begin() as conn:
            result = await conn.execute(
                text(f"UPDATE resources SET {', '.join(assignments)} WHERE id = :id RETURNING {_RESOURCE_COLUMNS}"),
                params,
            )
            row = result.fetchone()
        return _row_to_resource(row) if row is not None else None

    async def delete_resource(self, resource_id: str) -> Resource | None:
        async with self._engine.begin() as conn:
            result = await conn.execute(
                text(f"DELETE FROM resources WHERE id = :id RETURNING {_RESOURCE_COLUMNS}"),
                {"id": resource_id},
            )
            row = result.fetchone()
        return _row_to_resource(row) if row is not None else None

    # --- records ---

    async def list_records(self, resource_id: str) -> list[Record]:
        async with self._engine.connect() as conn:
            result = await conn.execute(
                text(
                    "SELECT id, resource_id, data, created_at FROM records "
                    "WHERE resource_id = :resource_id ORDER BY seq"
                ),
                {"resource_id": resource_id},
            )
            return [_row_to_record(row) for row in result.fetchall()]

    async def count_records(self, resource_id: str) -> int:
        async with self._engine.connect() as conn:
            result = await conn.execute(
                text("SELECT count(*) FROM records WHERE resource_id = :resource_id"),
                {"resource_id": resource_id},
            )
            return int(result.scalar_one())

    async def find_record(self, resource_id: str, external_id: str) -> Record | None:
        async with self._engine.connect() as conn:
            result = await conn.execute(
                text(
                    "SELECT id, resource_id, data, created_at FROM records "
                    "WHERE resource_id = :resource_id AND external_id = :external_id "
                    "ORDER BY seq LIMIT 1"
                ),
                {"resource_id": resource_id, "external_id": external_id},
            )
            row = result.fetchone()
        return _row_to_record(row) if row is not None else None

    async def create_record(self, resource_id: str, data: dict[str, Any]) -> Record:
        record = Record(storage_id=str(uuid.uuid4()), resource_id=resource_id, data=data, created_at=_now())
        async with self._engine.begin() as conn:
            await conn.execute(
                text(
                    "INSERT INTO records (id, resource_id, external_id, data, created_at) "
                    "VALUES (:id, :resource_id, :external_id, CAST(:data AS JSONB), :created_at)"
                ),
                {
                    "id": record.storage_id,
                    "resource_id": resource_id,
                    "external_id": _external_id(data),
                    "data": json.dumps(data),
                    "created_at": record.created_at,
                },
            )
        return record

    async def update_record(self, storage_id: str, data: dict[str, Any]) -> Record:
        async with self._engine.begin() as conn:
            result = await conn.execute(
                text(
                    "UPDATE records SET data = CAST(:data AS JSONB), external_id = :external_id "
                    "WHERE id = :id RETURNING id, resource_id, data, created_at"
                ),
                {"id": storage_id, "data": json.dumps(data), "external_id": _external_id(data)},
            )
            row = result.fetchone()
        if row is None:
            raise KeyError(storage_id)
        return _row_to_record(row)

    async def delete_record(self, storage_id: str) -> None:
        async with self._engine.begin() as conn:
            await conn.execute(text("DELETE FROM records WHERE id = :id"), {"id": storage_id})

    async def replace_records(self, resource_id: str, blobs: Sequence[dict[str, Any]]) -> int:
        """Delete every record of the resource and insert ``blobs``, in one transaction."""
        t0 = time.perf_counter()
        async with self._engine.begin() as conn:
            deleted = await conn.execute(
                text("DELETE FROM records WHERE resource_id = :resource_id"),
                {"resource_id": resource_id},
            )
            await _insert_records(conn, resource_id, blobs)
        logger.info(
            "replaced records of resource %s: %d deleted, %d inserted in %.2fs",
            resource_id,
            deleted.rowcount,
            len(blobs),
            time.perf_counter() - t0,
        )
        return len(blobs)

    async def reassign_record_ids(self, resource_id: str, updates: Sequence[tuple[str, dict[str, Any]]]) -> None:
        if not updates:
            return
        async with self._engine.begin() as conn:
            await conn.execute(
                text(
                    "UPDATE records SET data = CAST(:data AS JSONB), external_id = :external_id "
                    "WHERE id = :id AND resource_id = :resource_id"
                ),
                [
                    {
                        "id": storage_id,
                        "resource_id": resource_id,
                        "data": json.dumps(data),
                        "external_id": _external_id(data),
                    }
                    for storage_id, data in updates
                ],
            )
