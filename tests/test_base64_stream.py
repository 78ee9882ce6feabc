"""Tests for the chunked base64 encoder."""

from __future__ import annotations

import base64
import random

import pytest

from gemcam.base64_stream import EncoderState, encode, encode_chunk, encoded_length, finalize
from gemcam.buffer import OutputBuffer
from gemcam.errors import BufferOverflowError, InvalidArgumentError


def _encode_in_pieces(data: bytes, cuts: list[int]) -> bytes:
    state = EncoderState()
    out = OutputBuffer(encoded_length(len(data)))
    start = 0
    for cut in cuts + [len(data)]:
        encode_chunk(data[start:cut], state, out)
        start = cut
    finalize(state, out)
    return out.getvalue()


@pytest.mark.parametrize("n, expected", [(0, 1), (1, 5), (2, 5), (3, 5), (4, 9), (6, 9), (1000, 1337)])
def test_encoded_length(n: int, expected: int) -> None:
    assert encoded_length(n) == expected


def test_encoded_length_rejects_negative() -> None:
    with pytest.raises(InvalidArgumentError):
        encoded_length(-1)


@pytest.mark.parametrize(
    "data, expected",
    [
        (b"", b""),
        (b"f", b"Zg=="),
        (b"fo", b"Zm8="),
        (b"foo", b"Zm9v"),
        (b"foob", b"Zm9vYg=="),
        (b"fooba", b"Zm9vYmE="),
        (b"foobar", b"Zm9vYmFy"),
        (b"\xff\xfe\xfd", b"//79"),
        (b"\x01\x02\x03", b"AQID"),
    ],
)
def test_known_vectors(data: bytes, expected: bytes) -> None:
    assert encode(data) == expected


def test_round_trip_against_reference_decoder() -> None:
    rng = random.Random(1234)
    for n in range(0, 200):
        data = bytes(rng.randrange(256) for _ in range(n))
        encoded = encode(data)
        assert base64.b64decode(encoded, validate=True) == data
        assert len(encoded) < encoded_length(n)


def test_chunking_does_not_change_output() -> None:
    rng = random.Random(99)
    for n in (0, 1, 2, 3, 4, 5, 17, 64, 301):
        data = bytes(rng.randrange(256) for _ in range(n))
        whole = encode(data)
        for _ in range(25):
            cuts = sorted(rng.randrange(n + 1) for _ in range(rng.randrange(6)))
            assert _encode_in_pieces(data, cuts) == whole


def test_single_byte_chunks() -> None:
    data = bytes(range(256)) * 3
    assert _encode_in_pieces(data, list(range(1, len(data)))) == base64.b64encode(data)


def test_carry_is_tracked_between_calls() -> None:
    state = EncoderState()
    out = OutputBuffer(64)

    assert encode_chunk(b"\x01", state, out) == 0
    assert state.carry_count == 1
    assert encode_chunk(b"\x02", state, out) == 0
    assert state.carry_count == 2
    assert encode_chunk(b"\x03\x04", state, out) == 4
    assert state.carry_count == 1
    assert state.total_bytes_seen == 4

    assert finalize(state, out) == 4
    assert out.getvalue() == b"AQIDBA=="
    assert state == EncoderState()


def test_empty_chunk_is_accepted() -> None:
    state = EncoderState()
    out = OutputBuffer(8)
    assert encode_chunk(b"", state, out) == 0
    assert state.total_bytes_seen == 0
    assert finalize(state, out) == 0
    assert out.length == 0


def test_accepts_bytes_like_inputs() -> None:
    data = bytearray(b"hello world")
    assert encode(memoryview(data)) == base64.b64encode(bytes(data))
    assert encode(data) == base64.b64encode(bytes(data))


@pytest.mark.parametrize("n", [0, 1, 2, 3, 4, 5, 6, 7, 30, 31, 32])
def test_buffer_one_byte_short_overflows(n: int) -> None:
    data = bytes(range(n))
    state = EncoderState()
    out = OutputBuffer(encoded_length(n) - 1)

    with pytest.raises(BufferOverflowError):
        encode_chunk(data, state, out)
        finalize(state, out)

    assert out.length <= out.capacity


def test_exact_capacity_succeeds() -> None:
    data = b"\x00" * 10
    state = EncoderState()
    out = OutputBuffer(encoded_length(len(data)))
    encode_chunk(data, state, out)
    finalize(state, out)
    assert out.length == encoded_length(len(data)) - 1


def test_overflow_leaves_buffer_and_state_untouched() -> None:
    state = EncoderState()
    out = OutputBuffer(6)
    encode_chunk(b"ab", state, out)

    with pytest.raises(BufferOverflowError):
        encode_chunk(b"cdefg", state, out)

    assert out.length == 0
    assert state.carry_count == 2
    assert state.total_bytes_seen == 2


def test_finalize_overflow_keeps_carry() -> None:
    state = EncoderState()
    out = OutputBuffer(4)
    encode_chunk(b"a", state, out)

    with pytest.raises(BufferOverflowError):
        finalize(state, out)

    assert state.carry_count == 1
    assert out.length == 0


@pytest.mark.parametrize(
    "args",
    [
        (None, EncoderState(), OutputBuffer(8)),
        (b"abc", None, OutputBuffer(8)),
        (b"abc", EncoderState(), None),
    ],
)
def test_encode_chunk_rejects_missing_arguments(args) -> None:
    with pytest.raises(InvalidArgumentError):
        encode_chunk(*args)


def test_finalize_rejects_missing_arguments() -> None:
    with pytest.raises(InvalidArgumentError):
        finalize(None, OutputBuffer(8))
    with pytest.raises(InvalidArgumentError):
        finalize(EncoderState(), None)


def test_encoder_writes_after_existing_content() -> None:
    out = OutputBuffer(32)
    out.write(b'"')
    state = EncoderState()
    encode_chunk(b"foobar", state, out)
    finalize(state, out)
    out.write(b'"')
    assert out.getvalue() == b'"Zm9vYmFy"'
