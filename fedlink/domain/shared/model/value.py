from pydantic import BaseModel, ConfigDict


class ValueObject(BaseModel):
    """Immutable model compared by its field values."""

    model_config = ConfigDict(frozen=True)
