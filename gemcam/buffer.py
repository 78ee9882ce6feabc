"""
Fixed-capacity output buffer shared by the encoder and the JSON builder.

The buffer follows the C-string convention the request is sized for: one
byte of capacity always stays free for the terminator, so a write of n
bytes fits only when length + n < capacity. Unwritten bytes are zero, so
the byte after the content is always the terminator.
"""

from typing import Optional

from .errors import BufferOverflowError, InvalidArgumentError


class OutputBuffer:
    """
    A caller-owned byte region with a write cursor.

    Writes are all-or-nothing: a write that does not fit raises
    BufferOverflowError and leaves the buffer untouched.

    Usage:
        out = OutputBuffer(1024)
        out.write(b'{"a":1}')
        payload = out.view()     # memoryview of the written bytes
        out.release()
    """

    def __init__(self, capacity: int):
        if capacity is None or capacity < 0:
            raise InvalidArgumentError(f"Invalid buffer capacity: {capacity}")
        self._data: Optional[bytearray] = bytearray(capacity)
        self._capacity = capacity
        self._length = 0

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def length(self) -> int:
        """Number of bytes written so far."""
        return self._length

    @property
    def remaining(self) -> int:
        """Bytes that can still be written, terminator slot excluded."""
        return max(self._capacity - self._length - 1, 0)

    @property
    def released(self) -> bool:
        return self._data is None

    def __len__(self) -> int:
        return self._length

    def ensure(self, n: int):
        """Raise BufferOverflowError unless n more bytes (plus terminator) fit."""
        if self._length + n >= self._capacity:
            raise BufferOverflowError(n + 1, self._capacity - self._length)

    def write(self, data) -> int:
        """
        Append bytes at the cursor.

        Args:
            data: Any bytes-like object

        Returns:
            Number of bytes written
        """
        if data is None:
            raise InvalidArgumentError("Cannot write None to buffer")
        n = len(data)
        if n == 0:
            return 0
        self.ensure(n)
        self._data[self._length:self._length + n] = data
        self._length += n
        return n

    def terminate(self):
        """Check that the terminator slot is still available."""
        self.ensure(0)

    def view(self) -> memoryview:
        """Zero-copy view of the written bytes."""
        if self._data is None:
            return memoryview(b"")
        return memoryview(self._data)[:self._length]

    def getvalue(self) -> bytes:
        """Copy of the written bytes."""
        return bytes(self.view())

    def text(self) -> str:
        return self.view().tobytes().decode("utf-8")

    def release(self):
        """Drop the storage. Safe to call more than once."""
        self._data = None
        self._capacity = 0
        self._length = 0

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.release()
        return False

    def __repr__(self) -> str:
        state = "released" if self.released else f"{self._length}/{self._capacity}"
        return f"<OutputBuffer {state}>"
