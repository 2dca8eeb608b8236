import json
from collections.abc import Mapping
from typing import Any

_JSON_HEADERS = {"Content-Type": "application/json"}


def format_curl(
    method: str,
    url: str,
    headers: Mapping[str, str] | None = None,
    body: Any = None,
) -> str:
    """Render a multi-line ``curl`` command."""
    parts = ["curl --location \\", f"  --request {method.upper()} \\", f"  '{url}' \\"]

    header_items = list((headers or {}).items())
    for idx, (key, value) in enumerate(header_items):
        is_last = idx == len(header_items) - 1 and body is None
        parts.append(f"  --header '{key}: {value}'" + ("" if is_last else " \\"))

    if body is not None:
        parts.append(f"  --data-raw '{json.dumps(body, indent=2)}'")
    elif not header_items:
        parts[-1] = parts[-1].removesuffix(" \\")

    return "\n".join(parts)


def _example_body(template: Mapping[str, Any]) -> dict[str, Any]:
    keys = [key for key in template if key != "id"]
    return {key: "example" for key in keys[:2]} or {"name": "example"}


def resource_curls(
    base_url: str,
    project_id: str,
    version: str,
    resource_name: str,
    template: Mapping[str, Any] | None = None,
) -> dict[str, str]:
    """Example requests for the five mock endpoint operations of a resource."""
    collection = f"{base_url.rstrip('/')}/{project_id}/api/{version}/{resource_name}"
    body = _example_body(template or {})
    return {
        "list": format_curl("GET", collection, _JSON_HEADERS),
        "create": format_curl("POST", collection, _JSON_HEADERS, body),
        "get": format_curl("GET", f"{collection}/{{id}}", _JSON_HEADERS),
        "update": format_curl("PUT", f"{collection}/{{id}}", _JSON_HEADERS, body),
        "delete": format_curl("DELETE", f"{collection}/{{id}}", _JSON_HEADERS),
    }
