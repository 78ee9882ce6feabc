"""
Chunked base64 encoder.

Input may arrive in pieces of any size. Bytes that do not complete a
3-byte group are carried in an EncoderState until the next call, and
padding is only written by finalize(), so the output is identical no
matter how the input was split.

Usage:
    state = EncoderState()
    out = OutputBuffer(encoded_length(len(jpeg)))
    for chunk in chunks:
        encode_chunk(chunk, state, out)
    finalize(state, out)
"""

import base64
from dataclasses import dataclass

from .buffer import OutputBuffer
from .errors import InvalidArgumentError

ALPHABET = b"ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789+/"
PAD = b"="


@dataclass
class EncoderState:
    """Carry between encode_chunk() calls. One instance per logical encode."""

    carry_bits: int = 0
    carry_count: int = 0
    total_bytes_seen: int = 0

    def reset(self):
        self.carry_bits = 0
        self.carry_count = 0
        self.total_bytes_seen = 0


def encoded_length(n: int) -> int:
    """Base64 length of n input bytes plus one byte for the terminator."""
    if n is None or n < 0:
        raise InvalidArgumentError(f"Invalid input length: {n}")
    return (n + 2) // 3 * 4 + 1


def _group(bits: int) -> bytes:
    # 24 bits -> 4 characters
    return bytes((
        ALPHABET[(bits >> 18) & 0x3F],
        ALPHABET[(bits >> 12) & 0x3F],
        ALPHABET[(bits >> 6) & 0x3F],
        ALPHABET[bits & 0x3F],
    ))


def _as_bytes_view(data) -> memoryview:
    view = memoryview(data)
    if view.format != "B" or view.ndim != 1:
        view = view.cast("B")
    return view


def encode_chunk(data, state: EncoderState, out: OutputBuffer) -> int:
    """
    Encode one piece of input.

    Completes a group carried from the previous call first, then encodes
    every whole 3-byte group, then keeps the 0-2 trailing bytes in state.
    The capacity check happens before anything is written or carried, so
    an overflow leaves both buffer and state as they were.

    Args:
        data: Bytes-like input chunk (may be empty)
        state: Carry state for this encode
        out: Destination buffer

    Returns:
        Number of characters written
    """
    if data is None or state is None or out is None:
        raise InvalidArgumentError("encode_chunk requires data, state and out")

    view = _as_bytes_view(data)
    n = len(view)
    groups = (state.carry_count + n) // 3
    if groups:
        out.ensure(groups * 4)

    bits = state.carry_bits
    count = state.carry_count
    i = 0
    head = b""

    if count:
        while count < 3 and i < n:
            bits = (bits << 8) | view[i]
            count += 1
            i += 1
        if count == 3:
            head = _group(bits)
            bits = 0
            count = 0

    whole = (n - i) // 3 * 3
    body = base64.b64encode(view[i:i + whole]) if whole else b""
    i += whole

    while i < n:
        bits = (bits << 8) | view[i]
        count += 1
        i += 1

    written = out.write(head + body) if (head or body) else 0

    state.carry_bits = bits
    state.carry_count = count
    state.total_bytes_seen += n
    return written


def finalize(state: EncoderState, out: OutputBuffer) -> int:
    """
    Write the final partial group with padding and reset the state.

    1 carried byte gives 2 characters + "==", 2 carried bytes give
    3 characters + "=", none gives nothing. The terminator slot is
    checked in every case.

    Returns:
        Number of characters written
    """
    if state is None or out is None:
        raise InvalidArgumentError("finalize requires state and out")

    if state.carry_count == 1:
        bits = state.carry_bits << 16
        tail = _group(bits)[:2] + PAD * 2
    elif state.carry_count == 2:
        bits = state.carry_bits << 8
        tail = _group(bits)[:3] + PAD
    else:
        tail = b""

    written = out.write(tail)
    out.terminate()
    state.reset()
    return written


def encode(data) -> bytes:
    """Encode a whole input in one call."""
    if data is None:
        raise InvalidArgumentError("encode requires data")
    view = _as_bytes_view(data)
    state = EncoderState()
    with OutputBuffer(encoded_length(len(view))) as out:
        encode_chunk(view, state, out)
        finalize(state, out)
        return out.getvalue()
