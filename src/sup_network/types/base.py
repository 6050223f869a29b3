"""Reusable, strict base models."""

from typing import Any, Self

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """
    A base model that converts field names to camel case when serializing.

    For example, the field name `chain_spec_protocol_id` is represented as
    `chainSpecProtocolId` when the model is dumped by alias.

    Opaque runtime objects (peer ids, addresses, executors) are allowed as
    field types and are validated with `isinstance`.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        validate_default=True,
        arbitrary_types_allowed=True,
    )

    def copy(self: Self, **kwargs: Any) -> Self:
        """Create a copy of the model with the updated fields that are validated."""
        fields = {name: getattr(self, name) for name in self.model_fields_set}
        return self.__class__(**(fields | kwargs))


class StrictBaseModel(CamelModel):
    """A strict, immutable pydantic base model."""

    model_config = CamelModel.model_config | {
        "extra": "forbid",
        "frozen": True,
        "strict": True,
    }
