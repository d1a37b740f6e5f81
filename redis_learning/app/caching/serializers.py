"""
Serialization strategies for cached values.

Each value type gets one explicit strategy: ``JsonSerializer`` for plain
JSON-compatible data, ``ModelSerializer`` for pydantic models.
"""

import json
from typing import Any, Generic, Protocol, Type, TypeVar, Union

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from shared.errors import SerializationError

Payload = Union[str, bytes]
ModelT = TypeVar("ModelT", bound=BaseModel)


class Serializer(Protocol):
    """Encode values to store payloads and back."""

    def dumps(self, value: Any) -> str:
        ...

    def loads(self, payload: Payload) -> Any:
        ...


class JsonSerializer:
    """JSON for dicts, lists, strings, numbers, booleans."""

    def dumps(self, value: Any) -> str:
        try:
            return json.dumps(value, separators=(",", ":"))
        except (TypeError, ValueError) as e:
            raise SerializationError(
                f"Cannot encode {type(value).__name__} as JSON",
                {"error": str(e)}
            ) from e

    def loads(self, payload: Payload) -> Any:
        try:
            return json.loads(payload)
        except (TypeError, ValueError) as e:
            raise SerializationError("Cached payload is not valid JSON", {"error": str(e)}) from e


class ModelSerializer(Generic[ModelT]):
    """JSON through a pydantic model, so reads come back typed."""

    def __init__(self, model: Type[ModelT]):
        self.model = model

    def dumps(self, value: ModelT) -> str:
        if not isinstance(value, self.model):
            raise SerializationError(
                f"Expected {self.model.__name__}, got {type(value).__name__}"
            )
        return value.model_dump_json()

    def loads(self, payload: Payload) -> ModelT:
        try:
            return self.model.model_validate_json(payload)
        except PydanticValidationError as e:
            raise SerializationError(
                f"Cached payload is not a valid {self.model.__name__}",
                {"errors": e.error_count()}
            ) from e
        except ValueError as e:
            raise SerializationError(
                f"Cached payload is not a valid {self.model.__name__}",
                {"error": str(e)}
            ) from e
