"""Shared pydantic base for the dotreel config schemas."""

from pydantic import BaseModel, ConfigDict


class DotreelBaseModel(BaseModel):
    """Rejects unknown keys and re-validates on assignment.

    Strings are stripped, so ``" cargo run "`` and ``"cargo run"`` resolve
    to the same command.
    """

    model_config = ConfigDict(
        extra='forbid',
        validate_assignment=True,
        use_enum_values=True,
        str_strip_whitespace=True,
    )
