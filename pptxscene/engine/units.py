"""
units.py — EMU conversions and render-space constants.

This is the foundation module. ALL positioning math uses these constants and functions.
Never hardcode EMU values anywhere else in the codebase.

EMU = English Metric Units (914400 EMUs per inch, 12700 per point)
"""

from pptx.util import Inches, Pt

# =============================================================================
# SLIDE DIMENSIONS (16:9 widescreen, 13.333in x 7.5in)
# =============================================================================

DEFAULT_SLIDE_WIDTH_EMU = 12192000
DEFAULT_SLIDE_HEIGHT_EMU = 6858000

# =============================================================================
# UNIT CONVERSIONS
# =============================================================================

EMU_PER_INCH = int(Inches(1))
EMU_PER_PT = int(Pt(1))
PIXELS_PER_INCH = 96
POINTS_PER_INCH = 72

DEFAULT_RENDER_WIDTH = 960

# OOXML angles are 60000ths of a degree, percentages 100000ths
ANGLE_UNIT = 60000
PERCENT_UNIT = 100000


def emu_to_pixels(emu: float, scale_factor: float = 1.0) -> float:
    """Convert EMUs to render pixels at 96 DPI, then apply the global scale."""
    return (emu / EMU_PER_INCH) * PIXELS_PER_INCH * scale_factor


def emu_to_points(emu: float) -> float:
    """Convert EMUs to points (for font sizes, line widths, insets)."""
    return emu / EMU_PER_PT


def points_to_pixels(points: float) -> float:
    """Convert points to pixels at 96 DPI."""
    return points * PIXELS_PER_INCH / POINTS_PER_INCH


def calculate_scale_factor(slide_width_emu: float, target_width: float = DEFAULT_RENDER_WIDTH) -> float:
    """Scale that maps the native slide width onto ``target_width`` pixels.

    Raises:
        MalformedPackage: If the slide width is not positive.
    """
    from pptxscene.parser.errors import MalformedPackage

    if slide_width_emu is None or slide_width_emu <= 0:
        raise MalformedPackage(f"Invalid slide width: {slide_width_emu}")
    return target_width / (slide_width_emu / EMU_PER_INCH * PIXELS_PER_INCH)


def angle_to_degrees(value: float) -> float:
    """Convert an OOXML angle (60000ths of a degree) to degrees."""
    return value / ANGLE_UNIT


def percentage(value: float) -> float:
    """Convert an OOXML percentage (100000 = 100%) to a fraction."""
    return value / PERCENT_UNIT


# =============================================================================
# HELPER FUNCTIONS
# =============================================================================

def clamp(value: float, min_val: float, max_val: float) -> float:
    """Clamp a value between min and max."""
    return max(min_val, min(max_val, value))


def hex_to_rgb(hex_color: str) -> tuple:
    """Convert hex color string to RGB tuple (0-255)."""
    hex_color = hex_color.lstrip('#')
    return tuple(int(hex_color[i:i+2], 16) for i in (0, 2, 4))


def rgb_to_hex(r: int, g: int, b: int) -> str:
    """Convert RGB tuple to hex color string."""
    return f"#{r:02X}{g:02X}{b:02X}"
