import uuid
from collections.abc import Sequence
from typing import Any

from mockforge.models import Record


def random_token() -> str:
    return uuid.uuid4().hex


def next_external_id(use_incremental_ids: bool, position: int) -> str:
    """Return the external ID for the record at 1-based ``position``."""
    return str(position) if use_incremental_ids else random_token()


def reassign_ids(records: Sequence[Record], use_incremental_ids: bool) -> list[tuple[str, dict[str, Any]]]:
    """Recompute the external ID of every record, leaving the rest of each blob alone.

    Sequential IDs follow the order of ``records``. Returns
    ``(storage_id, new_data)`` pairs for the store to apply.
    """
    return [
        (record.storage_id, {**record.data, "id": next_external_id(use_incremental_ids, position)})
        for position, record in enumerate(records, start=1)
    ]
