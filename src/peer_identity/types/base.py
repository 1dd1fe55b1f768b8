"""Reusable, strict base models for serialized records."""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """
    A base model that converts field names to camel case when serializing.

    For example, the field name `priv_key` in a Python model will be
    represented as `privKey` when it is serialized to JSON.

    This keeps persisted records compatible with the go-ipfs config format.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        validate_default=True,
    )


class StrictBaseModel(CamelModel):
    """A strict, immutable pydantic base model."""

    model_config = CamelModel.model_config | {
        "extra": "forbid",
        "frozen": True,
        "strict": True,
    }
