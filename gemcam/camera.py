"""
Picamera2 wrapper for single JPEG still captures.

This module provides a Camera class that:
  - Initializes Picamera2 with a configured frame size and JPEG quality
  - Captures one still at a time as JPEG bytes
  - Can flush a stale frame before capturing a fresh one
"""

import io
import time
from typing import Optional

import numpy as np
from PIL import Image

from . import config
from .resolutions import get_frame_size

# Picamera2 is only available on Raspberry Pi OS with libcamera
try:
    from picamera2 import Picamera2
    PICAMERA2_AVAILABLE = True
except ImportError:
    PICAMERA2_AVAILABLE = False


class CameraError(Exception):
    """Raised when camera operations fail."""
    pass


class Camera:
    """
    Wrapper around Picamera2 for still capture.

    Usage:
        with Camera(frame_size="VGA") as camera:
            camera.flush()
            jpeg_bytes = camera.capture()
    """

    def __init__(self, frame_size: str = None, quality: int = None):
        if not PICAMERA2_AVAILABLE:
            raise CameraError(
                "Picamera2 is not installed or not available.\n\n"
                "This module requires a Raspberry Pi with:\n"
                "  1. Raspberry Pi OS (Bullseye or later)\n"
                "  2. A connected camera module\n"
                "  3. Picamera2 library installed\n\n"
                "To install on Raspberry Pi OS:\n"
                "  sudo apt install -y python3-picamera2\n\n"
                "Test with: libcamera-hello\n\n"
                "Or run with --dummy to use a generated test image."
            )

        size = get_frame_size(frame_size or config.FRAME_SIZE)
        self.frame_size = size.name
        self.width = size.width
        self.height = size.height
        self.quality = quality or config.JPEG_QUALITY

        self._picam2: Optional[Picamera2] = None
        self._running = False
        self._capture_count = 0
        self._last_capture_time = 0.0
        self._last_capture_bytes = 0

    def start(self):
        """Initialize and start the camera."""
        if self._running:
            print("[camera] Already running")
            return

        print(f"[camera] Initializing Picamera2 ({self.frame_size} {self.width}x{self.height}, quality {self.quality})")

        try:
            self._picam2 = Picamera2()
            still_config = self._picam2.create_still_configuration(
                main={"size": (self.width, self.height)}
            )
            self._picam2.configure(still_config)
            self._picam2.options["quality"] = self.quality
            self._picam2.start()
            self._running = True
            print("[camera] Started successfully")
        except Exception as e:
            self._cleanup()
            raise CameraError(f"Failed to start camera: {e}")

    def stop(self):
        """Stop the camera and release resources."""
        if not self._running:
            return
        print("[camera] Stopping...")
        self._cleanup()
        print("[camera] Stopped")

    def _cleanup(self):
        self._running = False
        if self._picam2:
            try:
                self._picam2.stop()
            except Exception:
                pass
            try:
                self._picam2.close()
            except Exception:
                pass
            self._picam2 = None

    def flush(self):
        """Capture and discard one frame so the next capture is fresh."""
        if not self._running:
            raise CameraError("Camera not started")
        request = self._picam2.capture_request()
        request.release()
        time.sleep(0.05)

    def capture(self) -> bytes:
        """
        Capture one still.

        Returns:
            JPEG bytes
        """
        if not self._running:
            raise CameraError("Camera not started")

        stream = io.BytesIO()
        try:
            self._picam2.capture_file(stream, format="jpeg")
        except Exception as e:
            raise CameraError(f"Capture failed: {e}")

        jpeg = stream.getvalue()
        self._capture_count += 1
        self._last_capture_time = time.time()
        self._last_capture_bytes = len(jpeg)
        print(f"[camera] Image captured: {self.width}x{self.height}, {len(jpeg)} bytes")
        return jpeg

    def is_running(self) -> bool:
        return self._running

    def get_stats(self) -> dict:
        return {
            "running": self._running,
            "captures": self._capture_count,
            "last_capture_time": self._last_capture_time,
            "last_capture_bytes": self._last_capture_bytes,
            "resolution": f"{self.width}x{self.height}",
            "frame_size": self.frame_size,
            "quality": self.quality,
        }

    def __enter__(self):
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.stop()
        return False


class DummyCamera:
    """
    A dummy camera for testing without hardware.
    Produces a gradient test pattern that changes with each capture.
    """

    def __init__(self, frame_size: str = None, quality: int = None, **kwargs):
        size = get_frame_size(frame_size or config.FRAME_SIZE)
        self.frame_size = size.name
        self.width = size.width
        self.height = size.height
        self.quality = quality or config.JPEG_QUALITY
        self._running = False
        self._capture_count = 0
        self._last_capture_time = 0.0
        self._last_capture_bytes = 0

    def start(self):
        print("[dummy-camera] Starting dummy camera (no real hardware)")
        self._running = True

    def stop(self):
        print("[dummy-camera] Stopping")
        self._running = False

    def flush(self):
        if not self._running:
            raise CameraError("Camera not started")

    def capture(self) -> bytes:
        if not self._running:
            raise CameraError("Camera not started")

        img = np.zeros((self.height, self.width, 3), dtype=np.uint8)

        # Red down, blue up, green shifts per capture
        ramp = np.linspace(0, 255, self.height, dtype=np.float32)[:, None]
        img[:, :, 0] = ramp.astype(np.uint8)
        img[:, :, 2] = (255 - ramp).astype(np.uint8)
        t = self._capture_count % 100
        img[:, :, 1] = int(128 + 127 * (t / 100))

        buffer = io.BytesIO()
        Image.fromarray(img).save(buffer, format="JPEG", quality=self.quality)
        jpeg = buffer.getvalue()

        self._capture_count += 1
        self._last_capture_time = time.time()
        self._last_capture_bytes = len(jpeg)
        return jpeg

    def is_running(self) -> bool:
        return self._running

    def get_stats(self) -> dict:
        return {
            "running": self._running,
            "captures": self._capture_count,
            "last_capture_time": self._last_capture_time,
            "last_capture_bytes": self._last_capture_bytes,
            "resolution": f"{self.width}x{self.height}",
            "frame_size": self.frame_size,
            "quality": self.quality,
            "dummy": True,
        }

    def __enter__(self):
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.stop()
        return False


def create_camera(use_dummy: bool = False, **kwargs):
    """
    Factory function to create appropriate camera instance.

    Args:
        use_dummy: Force use of dummy camera for testing
        **kwargs: Passed to camera constructor

    Returns:
        Camera or DummyCamera instance
    """
    if use_dummy:
        return DummyCamera(**kwargs)

    if not PICAMERA2_AVAILABLE:
        print("[camera] Picamera2 not available, using dummy camera")
        return DummyCamera(**kwargs)

    return Camera(**kwargs)
