"""
Camera frame sizes.

Static table of the resolutions the capture side can be configured with,
ordered from smallest to largest.
"""

from typing import NamedTuple, Tuple


class FrameSize(NamedTuple):
    name: str
    width: int
    height: int
    aspect: str


FRAME_SIZES: Tuple[FrameSize, ...] = (
    FrameSize("96X96", 96, 96, "1:1"),
    FrameSize("QQVGA", 160, 120, "4:3"),
    FrameSize("128X128", 128, 128, "1:1"),
    FrameSize("QCIF", 176, 144, "5:4"),
    FrameSize("HQVGA", 240, 176, "4:3"),
    FrameSize("240X240", 240, 240, "1:1"),
    FrameSize("QVGA", 320, 240, "4:3"),
    FrameSize("320X320", 320, 320, "1:1"),
    FrameSize("CIF", 400, 296, "4:3"),
    FrameSize("HVGA", 480, 320, "3:2"),
    FrameSize("VGA", 640, 480, "4:3"),
    FrameSize("SVGA", 800, 600, "4:3"),
    FrameSize("XGA", 1024, 768, "4:3"),
    FrameSize("HD", 1280, 720, "16:9"),
    FrameSize("SXGA", 1280, 1024, "5:4"),
    FrameSize("UXGA", 1600, 1200, "4:3"),
    FrameSize("FHD", 1920, 1080, "16:9"),
    FrameSize("P_HD", 720, 1280, "9:16"),
    FrameSize("P_3MP", 864, 1536, "9:16"),
    FrameSize("QXGA", 2048, 1536, "4:3"),
)

_BY_NAME = {fs.name: fs for fs in FRAME_SIZES}


def get_frame_size(name: str) -> FrameSize:
    """Look up a frame size by name (case-insensitive)."""
    try:
        return _BY_NAME[name.upper()]
    except KeyError:
        raise ValueError(
            f"Unknown frame size: {name}. "
            f"Choose from: {', '.join(fs.name for fs in FRAME_SIZES)}"
        )
