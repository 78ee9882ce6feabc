"""
gemcam - Camera image to Gemini request, in bounded memory

This package turns one captured JPEG and a prompt into a Gemini
generateContent request document. The image is base64-encoded in chunks
straight into the single pre-sized request buffer, so the encoded image
never exists twice in memory.

  - base64_stream: chunked base64 encoder with carried state
  - json_builder:  incremental JSON writer over a fixed-capacity buffer
  - payload:       assembles the Gemini request document
  - extract:       pulls the reply text / error message out of a response
"""

from .errors import (
    GemcamError,
    BufferOverflowError,
    BuilderStateError,
    InvalidArgumentError,
    MalformedResponseError,
    GeminiAPIError,
)
from .buffer import OutputBuffer
from .base64_stream import EncoderState, encoded_length, encode_chunk, finalize, encode
from .json_builder import JsonBuilder, Frame
from .payload import build_payload, estimate_payload_size
from .extract import extract_field, extract_text, extract_error_message

__version__ = "0.1.0"
