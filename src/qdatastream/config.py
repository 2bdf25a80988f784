from __future__ import annotations
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class DecoderConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    byteorder: Literal["<", ">"] = "<"
    max_depth: int = Field(64, ge=1, le=200)
    validate_schemas: bool = False


DEFAULT_CONFIG = DecoderConfig()
