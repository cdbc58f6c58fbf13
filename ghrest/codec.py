"""JSON encoding of outbound payloads and schema-checked decoding of responses."""

from functools import lru_cache
from typing import Any, TypeVar

from pydantic import BaseModel, TypeAdapter, ValidationError

from ghrest.errors import MalformedResponse

T = TypeVar("T")


@lru_cache(maxsize=None)
def _adapter(target: Any) -> TypeAdapter:
    return TypeAdapter(target)


def _target_name(target: Any) -> str:
    return target.__name__ if isinstance(target, type) else repr(target)


def decode(body: bytes, target: type[T]) -> T:
    """Decode a response body into ``target`` (an entity type or e.g. ``list[Entity]``).

    Raises MalformedResponse naming the first offending field and value when the
    body is not JSON or does not match the expected shape.
    """
    try:
        return _adapter(target).validate_json(body)
    except ValidationError as exc:
        first = exc.errors()[0]
        if first["type"] == "json_invalid":
            raise MalformedResponse(_target_name(target), first["msg"]) from exc
        field = ".".join(str(part) for part in first["loc"]) or None
        raise MalformedResponse(_target_name(target), first["msg"], field, first.get("input")) from exc


def encode(request: BaseModel) -> bytes:
    """Serialize a payload with only the fields that were set."""
    return request.model_dump_json(exclude_none=True, by_alias=True).encode("utf-8")
