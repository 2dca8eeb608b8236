from collections.abc import Iterable, Sequence
from typing import Any

from mockforge.models import COUNT, MOCK_DATA


def order_record(data: dict[str, Any], template_keys: Iterable[str]) -> dict[str, Any]:
    """Return ``data`` with ``id`` first, then the template keys it carries in template order."""
    ordered: dict[str, Any] = {}
    if "id" in data:
        ordered["id"] = data["id"]
    for key in template_keys:
        if key != "id" and key in data:
            ordered[key] = data[key]
    return ordered


def shape_response(endpoint_template: Any, records: Sequence[dict[str, Any]]) -> Any:
    """Substitute the ``$mockData`` / ``$count`` sentinels of an endpoint template.

    Only the direct values of a top-level object are inspected. Any other
    template shape is returned as configured, without the records.
    """
    if endpoint_template is None or endpoint_template == MOCK_DATA:
        return list(records)

    if isinstance(endpoint_template, dict):
        shaped: dict[str, Any] = {}
        for key, value in endpoint_template.items():
            if value == MOCK_DATA:
                shaped[key] = list(records)
            elif value == COUNT:
                shaped[key] = len(records)
            else:
                shaped[key] = value
        return shaped

    return endpoint_template
