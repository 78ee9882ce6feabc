"""
Entry point for running gemcam as a module.

Usage:
    python -m gemcam                          # capture from the camera and describe it
    python -m gemcam --image photo.jpg        # describe an existing JPEG
    python -m gemcam --dummy --dry-run --out request.json
    python -m gemcam --serve [--dummy]        # run the HTTP server

Options:
    --image FILE      Use this image instead of capturing one
    --mime TYPE       MIME type of --image (default: image/jpeg)
    --prompt TEXT     Prompt sent with the image
    --max-tokens N    generationConfig.maxOutputTokens
    --dummy           Use dummy camera for testing without hardware
    --dry-run         Build the request but do not send it
    --out FILE        With --dry-run, write the request document here
    --serve           Start the capture/analyze HTTP server
"""

import argparse
import sys
from pathlib import Path

from . import config
from .camera import CameraError, create_camera
from .client import GeminiClient
from .errors import GemcamError, GeminiAPIError, MalformedResponseError
from .payload import DEFAULT_MIME_TYPE, build_payload
from .pipeline import analyze_image


def parse_args(argv=None):
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        prog="gemcam",
        description="Capture an image and ask Gemini about it",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    python -m gemcam --prompt "What objects are on the desk?"
    python -m gemcam --image photo.jpg --max-tokens 200
    python -m gemcam --dummy --dry-run --out request.json
    python -m gemcam --serve
        """
    )

    parser.add_argument("--image", "-i", help="JPEG file to send instead of capturing")
    parser.add_argument("--mime", default=DEFAULT_MIME_TYPE, help="MIME type of --image")
    parser.add_argument("--prompt", "-p", default=None, help="Prompt sent with the image")
    parser.add_argument("--max-tokens", type=int, default=None, help="Maximum reply tokens")
    parser.add_argument("--dummy", "-d", action="store_true", help="Use dummy camera (no hardware)")
    parser.add_argument("--dry-run", action="store_true", help="Build the request without sending it")
    parser.add_argument("--out", "-o", help="With --dry-run, write the request document to this file")
    parser.add_argument("--serve", action="store_true", help="Run the capture/analyze HTTP server")

    return parser.parse_args(argv)


def _load_image(args) -> bytes:
    if args.image:
        path = Path(args.image)
        print(f"[main] Reading {path}")
        return path.read_bytes()

    with create_camera(use_dummy=args.dummy) as camera:
        camera.flush()
        return camera.capture()


def main(argv=None) -> int:
    """Main entry point."""
    args = parse_args(argv)

    if args.serve:
        from .server import run_server
        run_server(use_dummy_camera=args.dummy)
        return 0

    prompt = args.prompt if args.prompt is not None else config.PROMPT
    mime_type = args.mime if args.image else DEFAULT_MIME_TYPE

    try:
        image = _load_image(args)
    except (CameraError, OSError) as e:
        print(f"[main] Could not get image: {e}")
        return 1

    client = None
    if not args.dry_run:
        try:
            client = GeminiClient()
        except ValueError as e:
            print(f"[main] {e}")
            return 1

    try:
        if args.dry_run:
            with build_payload(
                prompt,
                image,
                mime_type=mime_type,
                max_output_tokens=args.max_tokens,
            ) as payload:
                if args.out:
                    Path(args.out).write_bytes(payload.view())
                    print(f"[main] Request written to {args.out}")
                print(f"[main] Dry run: request is {payload.length} bytes")
            return 0

        text = analyze_image(
            client,
            image,
            prompt=prompt,
            mime_type=mime_type,
            max_output_tokens=args.max_tokens,
        )
    except GeminiAPIError as e:
        print(f"[main] {e}")
        return 1
    except MalformedResponseError as e:
        print(f"[main] {e}")
        print(f"[main] Raw response: {e.document}")
        return 1
    except GemcamError as e:
        print(f"[main] Request failed: {e}")
        return 1

    if text is None:
        print("No description returned")
    else:
        print(text)
    return 0


if __name__ == "__main__":
    sys.exit(main())
