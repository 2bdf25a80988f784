from __future__ import annotations
from pydantic import BaseModel, Field
from typing import Any, Dict, List


class LumpEntry(BaseModel):
    name: str
    offset: int = Field(..., ge=0)
    length: int = Field(..., ge=0)

    @property
    def end(self) -> int:
        return self.offset + self.length


class BspHeader(BaseModel):
    version: int
    lumps: List[LumpEntry] = Field(default_factory=list)

    def lump(self, name: str) -> LumpEntry:
        for entry in self.lumps:
            if entry.name == name:
                return entry
        raise KeyError(name)


class Texture(BaseModel):
    name: str
    width: int = Field(..., ge=0)
    height: int = Field(..., ge=0)
    offsets: List[int] = Field(default_factory=list)


class BspFile(BaseModel):
    header: BspHeader
    entities: str = ""
    textures: List[Texture] = Field(default_factory=list)
    # lump name -> decoded records as plain dicts
    lumps: Dict[str, List[Dict[str, Any]]] = Field(default_factory=dict)

    @classmethod
    def from_binary(cls, data: bytes | str) -> "BspFile":
        from ..binary.reader import parse_file
        return parse_file(data)
