"""Shared base for camelCase JSON wire models."""

from typing import TypeVar

import httpx
from pydantic import BaseModel, ConfigDict, ValidationError
from pydantic.alias_generators import to_camel

from tripforum.core.errors import ApiError, read_json


class WireModel(BaseModel):
    """Model whose JSON form uses camelCase keys.

    Ids arrive as numbers from the server but are opaque to the client, so
    numbers are accepted for string fields.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        coerce_numbers_to_str=True,
        extra="ignore",
    )

    def to_wire(self) -> dict:
        """Serialize with camelCase keys."""
        return self.model_dump(mode="json", by_alias=True)


ModelT = TypeVar("ModelT", bound=WireModel)


def parse_response(model: type[ModelT], response: httpx.Response) -> ModelT:
    """Validate a JSON object body against ``model``.

    Raises:
        ApiError: body is not JSON or does not fit the schema
    """
    body = read_json(response)
    try:
        return model.model_validate(body)
    except ValidationError as e:
        raise ApiError(response.status_code, "Unexpected response shape") from e


def parse_response_list(
    model: type[ModelT], response: httpx.Response
) -> list[ModelT]:
    """Validate a JSON array body item by item.

    Raises:
        ApiError: body is not a JSON array or an item does not fit the schema
    """
    body = read_json(response)
    if not isinstance(body, list):
        raise ApiError(response.status_code, "Expected a list")
    try:
        return [model.model_validate(item) for item in body]
    except ValidationError as e:
        raise ApiError(response.status_code, "Unexpected response shape") from e
