"""
Gemini generateContent request assembly.

Builds

    {"contents":[{"parts":[{"text":<prompt>},
      {"inline_data":{"mime_type":<mime>,"data":<base64 image>}}]}],
     "generationConfig":{"maxOutputTokens":<n>}}

into one buffer sized up front. The image is base64-encoded chunk by
chunk directly into the "data" value, so the encoded image only ever
exists inside the request buffer.
"""

from typing import Optional

from . import config
from .base64_stream import EncoderState, encode_chunk, encoded_length, finalize
from .buffer import OutputBuffer
from .errors import BufferOverflowError, InvalidArgumentError
from .json_builder import JsonBuilder

# Keys, quotes, braces and the token count digits
STRUCTURAL_OVERHEAD = 200

DEFAULT_MIME_TYPE = "image/jpeg"


def estimate_payload_size(image_len: int, prompt: str, mime_type: str = DEFAULT_MIME_TYPE) -> int:
    """
    Capacity needed for a request document.

    Prompt and MIME type are counted twice to leave room for escaping.
    Prompts dense with control characters can still exceed this; the
    build then fails with BufferOverflowError.
    """
    return (
        encoded_length(image_len)
        + 2 * len(prompt.encode("utf-8"))
        + 2 * len(mime_type.encode("utf-8"))
        + STRUCTURAL_OVERHEAD
    )


def _require_utf8(name: str, value: str):
    try:
        value.encode("utf-8")
    except UnicodeEncodeError as e:
        raise InvalidArgumentError(f"{name} is not valid UTF-8 text: {e.reason}") from e


def _validate(prompt, image, mime_type, max_output_tokens, chunk_size):
    if prompt is None:
        raise InvalidArgumentError("Prompt is required")
    if not isinstance(prompt, str):
        raise InvalidArgumentError(f"Prompt must be text, got {type(prompt).__name__}")
    if image is None or len(image) == 0:
        raise InvalidArgumentError("Image data is required")
    if not mime_type:
        raise InvalidArgumentError("MIME type is required")
    if not isinstance(mime_type, str):
        raise InvalidArgumentError(f"MIME type must be text, got {type(mime_type).__name__}")
    _require_utf8("Prompt", prompt)
    _require_utf8("MIME type", mime_type)
    if (
        not isinstance(max_output_tokens, int)
        or isinstance(max_output_tokens, bool)
        or max_output_tokens <= 0
    ):
        raise InvalidArgumentError(f"Invalid maxOutputTokens: {max_output_tokens!r}")
    if (
        not isinstance(chunk_size, int)
        or isinstance(chunk_size, bool)
        or chunk_size <= 0
    ):
        raise InvalidArgumentError(f"Invalid chunk size: {chunk_size!r}")


def _write_image(doc: JsonBuilder, image: memoryview, chunk_size: int):
    state = EncoderState()
    with doc.streamed_string() as out:
        for start in range(0, len(image), chunk_size):
            encode_chunk(image[start:start + chunk_size], state, out)
        finalize(state, out)


def build_payload(
    prompt: str,
    image,
    mime_type: str = DEFAULT_MIME_TYPE,
    max_output_tokens: int = None,
    chunk_size: int = None,
    capacity: Optional[int] = None,
) -> OutputBuffer:
    """
    Build a Gemini request document for one image.

    Args:
        prompt: Text prompt sent with the image
        image: Image bytes (any bytes-like object)
        mime_type: MIME type of the image
        max_output_tokens: generationConfig.maxOutputTokens
        chunk_size: Bytes of image fed to the encoder per call
        capacity: Buffer capacity; estimated from the inputs if None

    Returns:
        OutputBuffer holding the document. The caller owns it and should
        release() it (or use it as a context manager) once sent.

    Raises:
        InvalidArgumentError: missing prompt/image/MIME type or bad numbers
        BufferOverflowError: the document did not fit in capacity
    """
    if max_output_tokens is None:
        max_output_tokens = config.MAX_OUTPUT_TOKENS
    if chunk_size is None:
        chunk_size = config.CHUNK_SIZE
    _validate(prompt, image, mime_type, max_output_tokens, chunk_size)

    image = memoryview(image).cast("B")
    if capacity is None:
        capacity = estimate_payload_size(len(image), prompt, mime_type)

    out = OutputBuffer(capacity)
    try:
        doc = JsonBuilder(out)
        doc.open_object()

        doc.write_key("contents")
        doc.open_array()
        doc.open_object()

        doc.write_key("parts")
        doc.open_array()

        doc.open_object()
        doc.write_key_string("text", prompt)
        doc.close_object()

        doc.open_object()
        doc.write_key("inline_data")
        doc.open_object()
        doc.write_key_string("mime_type", mime_type)
        doc.write_key("data")
        _write_image(doc, image, chunk_size)
        doc.close_object()  # inline_data
        doc.close_object()  # image part

        doc.close_array()   # parts
        doc.close_object()  # content
        doc.close_array()   # contents

        doc.write_key("generationConfig")
        doc.open_object()
        doc.write_key_number("maxOutputTokens", str(max_output_tokens))
        doc.close_object()

        doc.close_object()
        doc.finish()
    except BufferOverflowError as e:
        print(f"[payload] Buffer overflow at {out.length}/{capacity} bytes: {e}")
        out.release()
        raise
    except Exception:
        out.release()
        raise

    print(f"[payload] Request built: {out.length} bytes ({len(image)} byte image)")
    return out
