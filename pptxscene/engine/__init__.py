# Unit conversions for the scene reconstruction engine

from .units import (
    DEFAULT_SLIDE_HEIGHT_EMU,
    DEFAULT_SLIDE_WIDTH_EMU,
    calculate_scale_factor,
    emu_to_pixels,
    emu_to_points,
    points_to_pixels,
)

__all__ = [
    "DEFAULT_SLIDE_HEIGHT_EMU",
    "DEFAULT_SLIDE_WIDTH_EMU",
    "calculate_scale_factor",
    "emu_to_pixels",
    "emu_to_points",
    "points_to_pixels",
]
