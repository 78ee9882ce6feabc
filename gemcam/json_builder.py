"""
Incremental JSON writer over a fixed-capacity OutputBuffer.

Tokens are written one at a time, straight into the buffer, with comma
placement and string escaping handled here. Nesting is tracked with an
explicit bounded stack of frames so separators resume correctly after
closing a nested container of either kind.

Usage:
    out = OutputBuffer(256)
    doc = JsonBuilder(out)
    doc.open_object()
    doc.write_key_string("name", "desk")
    doc.write_key("tags")
    doc.open_array()
    doc.write_string("camera")
    doc.close_array()
    doc.close_object()
    doc.finish()

After any error the builder state is undefined; abandon the document.
"""

from contextlib import contextmanager
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterator, List

from .buffer import OutputBuffer
from .errors import BuilderStateError, InvalidArgumentError

DEFAULT_MAX_DEPTH = 8

_SHORT_ESCAPES = {
    '"': '\\"',
    "\\": "\\\\",
    "\b": "\\b",
    "\f": "\\f",
    "\n": "\\n",
    "\r": "\\r",
    "\t": "\\t",
}


class Frame(Enum):
    OBJECT = "object"
    ARRAY = "array"


@dataclass
class BuilderState:
    stack: List[Frame] = field(default_factory=list)
    pending_separator: bool = False
    key_pending: bool = False

    @property
    def depth(self) -> int:
        return len(self.stack)

    @property
    def top(self):
        return self.stack[-1] if self.stack else None


def escape_string(value: str) -> str:
    """Escape a string for use between JSON double quotes."""
    parts = []
    for ch in value:
        esc = _SHORT_ESCAPES.get(ch)
        if esc is not None:
            parts.append(esc)
        elif ord(ch) < 0x20:
            parts.append("\\u%04x" % ord(ch))
        else:
            parts.append(ch)
    return "".join(parts)


class JsonBuilder:
    """
    Writes a JSON document token by token into an OutputBuffer.

    Each token, including its leading comma, goes out in a single buffer
    write, so an overflow leaves the buffer ending at the last complete
    token.
    """

    def __init__(self, out: OutputBuffer, max_depth: int = DEFAULT_MAX_DEPTH):
        if out is None:
            raise InvalidArgumentError("JsonBuilder requires an output buffer")
        self.out = out
        self.max_depth = max_depth
        self.state = BuilderState()

    @property
    def depth(self) -> int:
        return self.state.depth

    def _emit(self, token: str):
        """Write a value-position token, preceded by a comma if needed."""
        if self.state.pending_separator:
            token = "," + token
        self.out.write(token.encode("utf-8"))

    def _check_value(self):
        if self.state.top is Frame.OBJECT and not self.state.key_pending:
            raise BuilderStateError("Value written inside an object without a key")

    def _value_done(self):
        self.state.pending_separator = self.state.depth > 0
        self.state.key_pending = False

    # Containers

    def _open(self, frame: Frame, token: str):
        if self.state.depth >= self.max_depth:
            raise BuilderStateError(
                f"Nesting deeper than {self.max_depth} levels"
            )
        self._check_value()
        self._emit(token)
        self.state.stack.append(frame)
        self.state.pending_separator = False
        self.state.key_pending = False

    def _close(self, frame: Frame, token: str):
        if self.state.depth == 0:
            raise BuilderStateError(f"Cannot close {frame.value}: nothing is open")
        if self.state.top is not frame:
            raise BuilderStateError(
                f"Cannot close {frame.value}: innermost container is {self.state.top.value}"
            )
        if self.state.key_pending:
            raise BuilderStateError(f"Cannot close {frame.value}: key has no value")
        self.out.write(token.encode("ascii"))
        self.state.stack.pop()
        self._value_done()

    def open_object(self):
        self._open(Frame.OBJECT, "{")

    def close_object(self):
        self._close(Frame.OBJECT, "}")

    def open_array(self):
        self._open(Frame.ARRAY, "[")

    def close_array(self):
        self._close(Frame.ARRAY, "]")

    # Keys and scalars

    def write_key(self, name: str):
        if name is None:
            raise InvalidArgumentError("Key name is required")
        if self.state.top is not Frame.OBJECT:
            raise BuilderStateError(f"Key {name!r} written outside of an object")
        if self.state.key_pending:
            raise BuilderStateError(f"Key {name!r} written before the previous key's value")
        self._emit('"' + escape_string(name) + '":')
        self.state.pending_separator = False
        self.state.key_pending = True

    def write_string(self, value: str):
        if value is None:
            raise InvalidArgumentError("String value is required")
        self._check_value()
        self._emit('"' + escape_string(value) + '"')
        self._value_done()

    def write_number(self, literal):
        """Write a numeric literal verbatim. No validation is done."""
        if literal is None:
            raise InvalidArgumentError("Number literal is required")
        text = literal if isinstance(literal, str) else str(literal)
        if not text:
            raise InvalidArgumentError("Number literal is empty")
        self._check_value()
        self._emit(text)
        self._value_done()

    def write_bool(self, value: bool):
        self._check_value()
        self._emit("true" if value else "false")
        self._value_done()

    def write_null(self):
        self._check_value()
        self._emit("null")
        self._value_done()

    def write_key_string(self, name: str, value: str):
        self.write_key(name)
        self.write_string(value)

    def write_key_number(self, name: str, literal):
        self.write_key(name)
        self.write_number(literal)

    def write_key_bool(self, name: str, value: bool):
        self.write_key(name)
        self.write_bool(value)

    def write_key_null(self, name: str):
        self.write_key(name)
        self.write_null()

    @contextmanager
    def streamed_string(self) -> Iterator[OutputBuffer]:
        """
        Write a string value whose characters are produced by the caller.

        Emits the separator and opening quote, yields the underlying
        buffer, then emits the closing quote. Whatever the caller writes
        is not escaped, so it must already be JSON-safe (e.g. base64).
        """
        self._check_value()
        self._emit('"')
        yield self.out
        self.out.write(b'"')
        self._value_done()

    def finish(self):
        """Check that every container has been closed."""
        if self.state.depth != 0:
            raise BuilderStateError(
                f"Document incomplete: {self.state.depth} container(s) still open"
            )
        self.out.terminate()
