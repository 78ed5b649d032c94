"""Reusable, strict base model for envelopes and records."""

from pydantic import BaseModel, ConfigDict


class StrictBaseModel(BaseModel):
    """
    A strict, immutable pydantic base model.

    Fields hold library objects (peer IDs, public keys, multiaddresses), so
    arbitrary types are allowed and checked by isinstance.
    """

    model_config = ConfigDict(
        extra="forbid",
        frozen=True,
        strict=True,
        arbitrary_types_allowed=True,
    )
