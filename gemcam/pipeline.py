"""
Capture -> request -> response -> text.

Ties the camera, payload builder and Gemini client together. The request
buffer is released as soon as it has been sent, whether or not sending
succeeded.
"""

from typing import Optional

from . import config
from .client import GeminiClient
from .payload import DEFAULT_MIME_TYPE, build_payload


def analyze_image(
    client: GeminiClient,
    image: bytes,
    prompt: str = None,
    mime_type: str = DEFAULT_MIME_TYPE,
    max_output_tokens: int = None,
) -> Optional[str]:
    """
    Ask Gemini about one image.

    Returns:
        The generated text, or None if the response carried no text
    """
    prompt = config.PROMPT if prompt is None else prompt

    with build_payload(
        prompt,
        image,
        mime_type=mime_type,
        max_output_tokens=max_output_tokens,
    ) as payload:
        text = client.generate(payload)

    if text is None:
        print("[pipeline] No text in response")
    return text


def capture_and_analyze(
    camera,
    client: GeminiClient,
    prompt: str = None,
    max_output_tokens: int = None,
    flush: bool = True,
) -> Optional[str]:
    """
    Capture a fresh still and ask Gemini about it.

    Args:
        camera: Started Camera or DummyCamera
        client: GeminiClient
        prompt: Prompt text (default: config.PROMPT)
        max_output_tokens: Reply length limit (default: config.MAX_OUTPUT_TOKENS)
        flush: Discard one frame first so the image is not stale

    Returns:
        The generated text, or None if the response carried no text
    """
    if flush:
        camera.flush()

    print("[pipeline] Capturing image...")
    jpeg = camera.capture()
    print(f"[pipeline] Image captured: {len(jpeg)} bytes")

    return analyze_image(
        client,
        jpeg,
        prompt=prompt,
        max_output_tokens=max_output_tokens,
    )
