"""Tests for the fixed-capacity output buffer."""

from __future__ import annotations

import pytest

from gemcam.buffer import OutputBuffer
from gemcam.errors import BufferOverflowError, InvalidArgumentError


def test_write_keeps_terminator_slot_free() -> None:
    out = OutputBuffer(4)
    assert out.remaining == 3
    out.write(b"abc")
    assert out.length == 3
    assert out.remaining == 0

    with pytest.raises(BufferOverflowError):
        out.write(b"d")
    assert out.getvalue() == b"abc"


def test_overflow_is_all_or_nothing() -> None:
    out = OutputBuffer(8)
    out.write(b"12345")
    with pytest.raises(BufferOverflowError) as excinfo:
        out.write(b"6789")
    assert out.getvalue() == b"12345"
    assert excinfo.value.needed == 5
    assert excinfo.value.available == 3


def test_view_is_zero_copy_of_written_bytes() -> None:
    out = OutputBuffer(16)
    out.write(bytearray(b"hi"))
    out.write(memoryview(b" there"))
    view = out.view()
    assert isinstance(view, memoryview)
    assert bytes(view) == b"hi there"
    assert out.text() == "hi there"
    assert len(out) == 8


def test_release_and_context_manager() -> None:
    with OutputBuffer(16) as out:
        out.write(b"data")
    assert out.released
    assert out.capacity == 0
    assert out.getvalue() == b""
    out.release()

    with pytest.raises(BufferOverflowError):
        out.write(b"x")


def test_terminate_needs_one_free_byte() -> None:
    OutputBuffer(1).terminate()
    with pytest.raises(BufferOverflowError):
        OutputBuffer(0).terminate()


@pytest.mark.parametrize("capacity", [None, -1])
def test_rejects_bad_capacity(capacity) -> None:
    with pytest.raises(InvalidArgumentError):
        OutputBuffer(capacity)


def test_rejects_none_write() -> None:
    with pytest.raises(InvalidArgumentError):
        OutputBuffer(4).write(None)
