"""Pluggable validators for endpoint input and output."""

from collections.abc import Mapping
from typing import Any, Protocol

from pydantic import BaseModel, ConfigDict, TypeAdapter, model_validator

from wsdottie.fetch.normalize import normalize_key


class Validator(Protocol):
    """Parses data against a declared shape.

    ``parse`` raises (``pydantic.ValidationError`` or
    ``InputValidationError``) on mismatch so the classifier can tag the
    failure as VALIDATION.
    """

    def parse(self, data: Any) -> Any:
        """Validate ``data`` and return the parsed value."""
        ...


class UpstreamModel(BaseModel):
    """Base class for response schemas.

    Incoming upstream keys are renamed with the same transform the
    non-validating path uses, so both paths expose identical field names.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    @model_validator(mode="before")
    @classmethod
    def _rename_upstream_keys(cls, data: Any) -> Any:
        if isinstance(data, Mapping):
            return {
                normalize_key(key) if isinstance(key, str) else key: value
                for key, value in data.items()
            }
        return data


class InputModel(BaseModel):
    """Base class for endpoint parameter schemas.

    Fields carry the upstream placeholder names as aliases; unknown keys
    are rejected.
    """

    model_config = ConfigDict(frozen=True, extra="forbid", populate_by_name=True)


class SchemaValidator:
    """Validator backed by a pydantic TypeAdapter."""

    def __init__(self, schema: Any) -> None:
        """Initialize the validator.

        Args:
            schema: Any type pydantic can adapt, e.g. ``list[Vessel]``.
        """
        self._schema = schema
        self._adapter: TypeAdapter[Any] = TypeAdapter(schema)

    @property
    def schema(self) -> Any:
        """The adapted type."""
        return self._schema

    def parse(self, data: Any) -> Any:
        """Validate data against the schema."""
        return self._adapter.validate_python(data)

    def json_schema(self) -> dict[str, Any]:
        """JSON Schema for the adapted type."""
        return self._adapter.json_schema()


class ParamsValidator:
    """Validates a parameter record against an InputModel."""

    def __init__(self, model: type[InputModel]) -> None:
        """Initialize the validator.

        Args:
            model: Parameter schema.
        """
        self._model = model

    @property
    def model(self) -> type[InputModel]:
        """The parameter schema."""
        return self._model

    def parse(self, data: Any) -> dict[str, Any]:
        """Validate params and return them keyed by upstream name.

        Args:
            data: Parameter record (None is treated as empty).

        Returns:
            Validated params with ``None`` values dropped.
        """
        validated = self._model.model_validate(data or {})
        return validated.model_dump(by_alias=True, exclude_none=True)
