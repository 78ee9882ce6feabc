"""
Flask-based capture and analysis server.

Provides:
  GET  /          - Plain-text status line
  GET  /capture   - Capture a still and return it as image/jpeg
  GET  /analyze   - Capture a still and ask Gemini about it (?prompt=...)
  POST /analyze   - Same, prompt taken from the JSON body {"prompt": "..."}
  GET  /health    - JSON health check endpoint
"""

from flask import Flask, Response, jsonify, request

from . import config
from .camera import CameraError, create_camera
from .client import GeminiClient
from .errors import GemcamError, GeminiAPIError, InvalidArgumentError, MalformedResponseError
from .pipeline import capture_and_analyze

app = Flask(__name__)

# Global instances (initialized in run_server)
_camera = None
_client = None


@app.route('/')
def index():
    """Plain status text."""
    return Response(
        "gemcam server is running. Use /capture to take a photo, /analyze to describe one.",
        mimetype="text/plain",
    )


@app.route('/capture')
def capture():
    """Capture and return one JPEG still."""
    if _camera is None:
        return Response("Camera not initialized", status=500, mimetype="text/plain")

    try:
        _camera.flush()
        jpeg = _camera.capture()
    except CameraError as e:
        print(f"[server] Capture failed: {e}")
        return Response("Failed to capture image", status=500, mimetype="text/plain")

    return Response(
        jpeg,
        mimetype="image/jpeg",
        headers={"Content-Disposition": "inline; filename=capture.jpg"},
    )


@app.route('/analyze', methods=['GET', 'POST'])
def analyze():
    """
    Capture a still and return Gemini's description of it.

    Returns JSON: {"text": ..., "found": bool}
    """
    if _camera is None:
        return jsonify({"error": "Camera not initialized"}), 500
    if _client is None:
        return jsonify({"error": "Gemini client not configured (set GEMINI_API_KEY)"}), 503

    if request.method == 'POST':
        body = request.get_json(silent=True)
        if body is None:
            body = {}
        if not isinstance(body, dict):
            return jsonify({"error": "Request body must be a JSON object"}), 400
        prompt = body.get("prompt")
        max_tokens = body.get("max_tokens")
        if prompt is not None and not isinstance(prompt, str):
            return jsonify({"error": "prompt must be a string"}), 400
        if max_tokens is not None and (
            not isinstance(max_tokens, int) or isinstance(max_tokens, bool)
        ):
            return jsonify({"error": "max_tokens must be an integer"}), 400
    else:
        prompt = request.args.get("prompt")
        max_tokens = request.args.get("max_tokens", type=int)
        if max_tokens is None and "max_tokens" in request.args:
            return jsonify({"error": "max_tokens must be an integer"}), 400

    try:
        text = capture_and_analyze(
            _camera,
            _client,
            prompt=prompt,
            max_output_tokens=max_tokens,
        )
    except CameraError as e:
        print(f"[server] Capture failed: {e}")
        return jsonify({"error": f"Failed to capture image: {e}"}), 500
    except InvalidArgumentError as e:
        return jsonify({"error": str(e)}), 400
    except GeminiAPIError as e:
        return jsonify({"error": e.message, "status": e.status}), 502
    except MalformedResponseError as e:
        print(f"[server] Malformed response: {e.document}")
        return jsonify({"error": str(e)}), 502
    except GemcamError as e:
        print(f"[server] Request build failed: {e}")
        return jsonify({"error": str(e)}), 500

    return jsonify({"text": text, "found": text is not None})


@app.route('/health')
def health():
    """
    Health check endpoint.

    Returns JSON with server, camera and client status.
    """
    camera_status = "not_initialized"
    camera_stats = {}

    if _camera is not None:
        try:
            camera_stats = _camera.get_stats()
            camera_status = "ok" if _camera.is_running() else "stopped"
        except Exception as e:
            camera_status = f"error: {e}"

    return jsonify({
        "status": "ok",
        "camera": camera_status,
        "gemini": "configured" if _client is not None else "not_configured",
        "config": {
            "model": config.MODEL,
            "frame_size": config.FRAME_SIZE,
            "quality": config.JPEG_QUALITY,
            "max_tokens": config.MAX_OUTPUT_TOKENS,
        },
        "stats": camera_stats,
    })


def run_server(use_dummy_camera: bool = False):
    """
    Initialize camera and Gemini client, then start the Flask server.

    Args:
        use_dummy_camera: If True, use dummy camera for testing
    """
    global _camera, _client

    print("=" * 50)
    print("  GEMCAM - Camera to Gemini")
    print("=" * 50)

    config.print_config()
    print()

    print("[server] Initializing camera...")
    try:
        _camera = create_camera(use_dummy=use_dummy_camera)
        _camera.start()
    except CameraError as e:
        print(f"[server] Camera error: {e}")
        print("[server] Starting with dummy camera for testing...")
        _camera = create_camera(use_dummy=True)
        _camera.start()

    try:
        _client = GeminiClient()
    except ValueError as e:
        print(f"[server] {e}")
        print("[server] /analyze disabled until an API key is configured")
        _client = None

    print()
    print(f"[server] Starting HTTP server on http://{config.HOST}:{config.PORT}")
    print(f"[server] Capture URL: http://<PI_IP>:{config.PORT}/capture")
    print(f"[server] Analyze URL: http://<PI_IP>:{config.PORT}/analyze")
    print()
    print("[server] Press Ctrl+C to stop")
    print()

    try:
        app.run(
            host=config.HOST,
            port=config.PORT,
            threaded=False,
            debug=False
        )
    except KeyboardInterrupt:
        print("\n[server] Shutting down...")
    finally:
        if _camera is not None:
            _camera.stop()
        print("[server] Stopped")
