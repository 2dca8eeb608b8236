"""Template compilation: authoring form → JSON template → concrete record."""

from __future__ import annotations

import logging
import re
import uuid
from collections.abc import Sequence
from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Any

from mockforge.core.macros import parse_macro
from mockforge.core.registry import GeneratorRegistry
from mockforge.models import TemplateField

logger = logging.getLogger(__name__)

DEFAULT_ARRAY_COUNT = 3


def build_template(fields: Sequence[TemplateField]) -> dict[str, Any]:
    """Flatten an authoring-form field list into a JSON template.

    Arrays are expanded here: a ``count`` of 3 becomes three copies of the
    element macro (or object shape), each resolved independently later.
    """
    template: dict[str, Any] = {}
    for field in fields:
        if not field.key:
            continue

        if field.type == "simple":
            macro = _macro_for(field)
            if macro is not None:
                template[field.key] = macro
        elif field.type == "object" and field.fields is not None:
            template[field.key] = build_template(field.fields)
        elif field.type == "array" and field.items is not None:
            count = field.count or DEFAULT_ARRAY_COUNT
            if field.array_type == "simple":
                macro = _macro_for(field.items)
                if macro is not None:
                    template[field.key] = [macro for _ in range(count)]
            elif field.array_type == "object" and field.items.fields is not None:
                template[field.key] = [build_template(field.items.fields) for _ in range(count)]
    return template


def _macro_for(field: TemplateField) -> str | None:
    if not field.module or not field.method:
        return None
    macro = f"${field.module}.{field.method}"
    if field.params:
        macro += f"({', '.join(field.params)})"
    return macro


def compile_template(template: dict[str, Any], registry: GeneratorRegistry) -> dict[str, Any]:
    """Resolve every macro in ``template`` into a freshly generated value.

    The top-level ``id`` key is skipped; identity is assigned by the caller.
    """
    return {key: _compile_value(value, registry) for key, value in template.items() if key != "id"}


def _compile_value(value: Any, registry: GeneratorRegistry) -> Any:
    if isinstance(value, str) and value.startswith("$"):
        return resolve_macro(value, registry)
    if isinstance(value, dict):
        return {key: _compile_value(item, registry) for key, item in value.items()}
    if isinstance(value, list):
        return [_compile_value(item, registry) for item in value]
    return value


def resolve_macro(macro: str, registry: GeneratorRegistry) -> Any:
    """Invoke the generator named by ``macro``; fall back to the literal on failure."""
    path, args = parse_macro(macro[1:])
    try:
        func = registry.resolve(path)
        result = func(*args) if args else func()
    except Exception as exc:  # noqa: BLE001
        logger.warning("Failed to resolve generator macro %s: %s", macro, exc)
        return macro
    return to_json_value(result)


def to_json_value(value: Any) -> Any:
    """Convert generator output into JSON-compatible values."""
    if isinstance(value, datetime):
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, Decimal):
        return float(value)
    if isinstance(value, uuid.UUID):
        return str(value)
    if isinstance(value, dict):
        return {str(k): to_json_value(v) for k, v in value.items()}
    if isinstance(value, (list, tuple, set)):
        return [to_json_value(v) for v in value]
    return value


def to_slug(text: str) -> str:
    """Normalise free text into a URL-safe resource name."""
    slug = text.lower().strip()
    slug = re.sub(r"[^\w\s-]", "", slug)
    slug = re.sub(r"[\s_-]+", "-", slug)
    return slug.strip("-")
