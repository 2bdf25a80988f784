from __future__ import annotations
import struct

from ..errors import OutOfBounds, UnsupportedType
from ...log import log
from ...models.record import Vector2, Vector3

# (width, signed, floating) -> struct code
PRIMITIVE_FORMATS = {
    (8, False, False): "B",
    (8, True, False): "b",
    (16, False, False): "H",
    (16, True, False): "h",
    (32, False, False): "I",
    (32, True, False): "i",
    (64, False, False): "Q",
    (64, True, False): "q",
    (32, True, True): "f",
    (64, True, True): "d",
}


class Cursor:
    """Bounds-checked reader over an in-memory buffer.

    A failed read never moves the position.
    """

    __slots__ = ("buf", "pos", "byteorder")

    def __init__(self, data: bytes | bytearray | memoryview, byteorder: str = "<"):
        if byteorder not in ("<", ">"):
            raise ValueError(f"byteorder must be '<' or '>', got {byteorder!r}")
        self.buf = memoryview(data).cast("B")
        self.pos = 0
        self.byteorder = byteorder

    @property
    def length(self) -> int:
        return len(self.buf)

    @property
    def position(self) -> int:
        return self.pos

    @position.setter
    def position(self, value: int) -> None:
        if not (0 <= value <= len(self.buf)):
            raise OutOfBounds(f"position {value} outside [0, {len(self.buf)}]", offset=self.pos)
        self.pos = value

    def remaining(self) -> int: return len(self.buf) - self.pos
    def tell(self) -> int: return self.pos

    def seek(self, pos: int) -> int:
        """Move to ``pos`` clamped into [0, length]; returns the applied position."""
        applied = max(0, min(len(self.buf), pos))
        if applied != pos:
            log.debug("seek(%d) clamped to %d (length %d)", pos, applied, len(self.buf))
        self.pos = applied
        return applied

    def skip(self, n: int) -> None:
        self._check(n)
        self.pos += n

    def _check(self, n: int) -> None:
        if n < 0:
            raise ValueError(f"negative byte count {n}")
        if self.pos + n > len(self.buf):
            raise OutOfBounds(f"underrun: need {n} bytes, {self.remaining()} left", offset=self.pos)

    def read_bytes(self, n: int) -> bytes:
        self._check(n)
        end = self.pos + n
        out = self.buf[self.pos:end].tobytes()
        self.pos = end
        return out

    def peek(self, n: int) -> bytes:
        self._check(n)
        return self.buf[self.pos:self.pos + n].tobytes()

    def read_primitive(self, width: int, signed: bool = False, *, floating: bool = False) -> int | float:
        code = PRIMITIVE_FORMATS.get((width, signed or floating, floating))
        if code is None:
            kind = "float" if floating else ("signed" if signed else "unsigned")
            raise UnsupportedType(f"no {width}-bit {kind} primitive", offset=self.pos)
        return struct.unpack(self.byteorder + code, self.read_bytes(width // 8))[0]

    def u8(self) -> int:  return self.read_primitive(8)
    def s8(self) -> int:  return self.read_primitive(8, True)
    def u16(self) -> int: return self.read_primitive(16)
    def s16(self) -> int: return self.read_primitive(16, True)
    def u32(self) -> int: return self.read_primitive(32)
    def s32(self) -> int: return self.read_primitive(32, True)
    def f32(self) -> float: return self.read_primitive(32, floating=True)

    def read_ascii(self, length: int) -> str:
        # bytes above 0x7f become U+FFFD, nothing is trimmed
        return self.read_bytes(length).decode("ascii", errors="replace")

    def read_vector2(self) -> Vector2:
        self._check(8)
        return Vector2(self.f32(), self.f32())

    def read_vector3(self) -> Vector3:
        self._check(12)
        return Vector3(self.f32(), self.f32(), self.f32())
