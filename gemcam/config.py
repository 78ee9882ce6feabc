"""
Configuration management for gemcam.

All settings can be overridden via environment variables:
  GEMINI_API_KEY      - Gemini API key (required to send requests)
  GEMCAM_MODEL        - Gemini model name (default: gemini-2.0-flash)
  GEMCAM_API_URL      - API base URL (default: https://generativelanguage.googleapis.com/v1beta)
  GEMCAM_TIMEOUT      - Request timeout in seconds (default: 30)
  GEMCAM_PROMPT       - Prompt sent with each image
  GEMCAM_MAX_TOKENS   - generationConfig.maxOutputTokens (default: 100)
  GEMCAM_CHUNK_SIZE   - Image bytes per encoder call (default: 1024)
  GEMCAM_FRAME_SIZE   - Capture resolution name, e.g. QVGA, VGA, SVGA (default: VGA)
  GEMCAM_QUALITY      - JPEG quality 1-100 (default: 80)
  GEMCAM_HOST         - Server bind address (default: 0.0.0.0)
  GEMCAM_PORT         - Server port (default: 8000)
"""

import os


def _env_int(name: str, default: int) -> int:
    """Get an integer from environment variable with fallback."""
    val = os.environ.get(name)
    if val is None:
        return default
    try:
        return int(val)
    except ValueError:
        print(f"[config] Warning: {name}={val} is not a valid integer, using default={default}")
        return default


def _env_float(name: str, default: float) -> float:
    val = os.environ.get(name)
    if val is None:
        return default
    try:
        return float(val)
    except ValueError:
        print(f"[config] Warning: {name}={val} invalid, using default={default}")
        return default


def _env_str(name: str, default: str) -> str:
    """Get a string from environment variable with fallback."""
    return os.environ.get(name, default)


# Gemini API
API_KEY = _env_str("GEMINI_API_KEY", "")
MODEL = _env_str("GEMCAM_MODEL", "gemini-2.0-flash")
API_URL = _env_str("GEMCAM_API_URL", "https://generativelanguage.googleapis.com/v1beta")
TIMEOUT = _env_float("GEMCAM_TIMEOUT", 30.0)  # seconds

# Request
PROMPT = _env_str("GEMCAM_PROMPT", "Describe what you see in this image in one short sentence.")
MAX_OUTPUT_TOKENS = _env_int("GEMCAM_MAX_TOKENS", 100)
CHUNK_SIZE = _env_int("GEMCAM_CHUNK_SIZE", 1024)

# Camera
FRAME_SIZE = _env_str("GEMCAM_FRAME_SIZE", "VGA")
JPEG_QUALITY = _env_int("GEMCAM_QUALITY", 80)

# Server
HOST = _env_str("GEMCAM_HOST", "0.0.0.0")
PORT = _env_int("GEMCAM_PORT", 8000)


def print_config():
    """Print current configuration to stdout."""
    print("[config] Current settings:")
    print(f"  MODEL       = {MODEL}")
    print(f"  API_URL     = {API_URL}")
    print(f"  API_KEY     = {'set' if API_KEY else 'NOT SET'}")
    print(f"  TIMEOUT     = {TIMEOUT}s")
    print(f"  MAX_TOKENS  = {MAX_OUTPUT_TOKENS}")
    print(f"  CHUNK_SIZE  = {CHUNK_SIZE}")
    print(f"  FRAME_SIZE  = {FRAME_SIZE}")
    print(f"  QUALITY     = {JPEG_QUALITY}")
    print(f"  HOST        = {HOST}")
    print(f"  PORT        = {PORT}")
