"""Pydantic v2 models for the presentation scene graph.

This module defines the structures produced by the parser when it rebuilds
a PowerPoint package. Positions and sizes on elements are in render pixels
(already multiplied by the presentation's global scale factor); font sizes,
indents, insets and outline widths are in points. 1 inch = 914400 EMUs.
"""

import base64
import colorsys
from abc import abstractmethod
from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from pptxscene.engine.units import hex_to_rgb


# ============================================================================
# Color Models
# ============================================================================


# Office 2013+ default palette, used whenever no theme is available.
DEFAULT_SCHEME_COLORS = {
    "dark1": "#000000",
    "light1": "#FFFFFF",
    "dark2": "#44546A",
    "light2": "#E7E6E6",
    "accent1": "#4472C4",
    "accent2": "#ED7D31",
    "accent3": "#A5A5A5",
    "accent4": "#FFC000",
    "accent5": "#5B9BD5",
    "accent6": "#70AD47",
    "hyperlink": "#0563C1",
    "followed_hyperlink": "#954F72",
}

# schemeClr values that alias a color scheme slot
SCHEME_SLOT_ALIASES = {
    "dk1": "dark1",
    "lt1": "light1",
    "dk2": "dark2",
    "lt2": "light2",
    "tx1": "dark1",
    "bg1": "light1",
    "tx2": "dark2",
    "bg2": "light2",
    "hlink": "hyperlink",
    "folHlink": "followed_hyperlink",
    "phClr": "dark1",
}

SYSTEM_COLORS = {
    "windowText": "#000000",
    "window": "#FFFFFF",
    "highlight": "#0078D7",
    "highlightText": "#FFFFFF",
    "btnFace": "#F0F0F0",
    "btnText": "#000000",
    "3dDkShadow": "#696969",
    "3dLight": "#E3E3E3",
    "infoText": "#000000",
    "infoBk": "#FFFFE1",
    "menu": "#F0F0F0",
    "menuText": "#000000",
    "grayText": "#6D6D6D",
    "captionText": "#000000",
    "activeCaption": "#99B4D1",
    "inactiveCaption": "#BFCDDB",
}

PRESET_COLORS = {
    "black": "#000000",
    "white": "#FFFFFF",
    "red": "#FF0000",
    "green": "#008000",
    "lime": "#00FF00",
    "blue": "#0000FF",
    "yellow": "#FFFF00",
    "cyan": "#00FFFF",
    "aqua": "#00FFFF",
    "magenta": "#FF00FF",
    "fuchsia": "#FF00FF",
    "gray": "#808080",
    "grey": "#808080",
    "silver": "#C0C0C0",
    "maroon": "#800000",
    "navy": "#000080",
    "olive": "#808000",
    "purple": "#800080",
    "teal": "#008080",
    "orange": "#FFA500",
    "pink": "#FFC0CB",
    "brown": "#A52A2A",
    "gold": "#FFD700",
    "coral": "#FF7F50",
    "crimson": "#DC143C",
    "indigo": "#4B0082",
    "violet": "#EE82EE",
    "tan": "#D2B48C",
    "dkBlue": "#00008B",
    "dkRed": "#8B0000",
    "dkGreen": "#006400",
    "dkGray": "#A9A9A9",
    "ltBlue": "#ADD8E6",
    "ltGreen": "#90EE90",
    "ltGray": "#D3D3D3",
    "ltYellow": "#FFFFE0",
}


def _clamp01(value: float) -> float:
    return max(0.0, min(1.0, value))


class _ColorBase(BaseModel):
    """Fields shared by every color kind.

    Modifiers are stored as fractions (``lum_mod=0.75`` for ``val="75000"``)
    and are applied in HLS space by :meth:`resolve`.
    """

    model_config = ConfigDict(frozen=True)

    tint: Optional[float] = Field(default=None, description="Tint toward white (fraction)")
    shade: Optional[float] = Field(default=None, description="Shade toward black (fraction)")
    lum_mod: Optional[float] = Field(default=None, description="Luminance modulation")
    lum_off: Optional[float] = Field(default=None, description="Luminance offset")
    sat_mod: Optional[float] = Field(default=None, description="Saturation modulation")

    @abstractmethod
    def base_hex(self, theme: Optional["Theme"] = None) -> str:
        """Unmodified ``#RRGGBB`` of the color."""

    def resolve(self, theme: Optional["Theme"] = None) -> str:
        """Resolve to an ``#RRGGBB`` string, applying any modifiers."""
        return self._apply_modifiers(self.base_hex(theme))

    def _apply_modifiers(self, hex_color: str) -> str:
        if all(
            m is None for m in (self.tint, self.shade, self.lum_mod, self.lum_off, self.sat_mod)
        ):
            return hex_color

        r, g, b = (c / 255.0 for c in hex_to_rgb(hex_color))

        if self.tint is not None:
            r, g, b = (c + (1.0 - c) * (1.0 - self.tint) for c in (r, g, b))
        if self.shade is not None:
            r, g, b = (c * self.shade for c in (r, g, b))

        h, l, s = colorsys.rgb_to_hls(r, g, b)
        if self.sat_mod is not None:
            s = _clamp01(s * self.sat_mod)
        if self.lum_mod is not None:
            l = l * self.lum_mod
        if self.lum_off is not None:
            l = l + self.lum_off
        r, g, b = colorsys.hls_to_rgb(h, _clamp01(l), s)

        return "#{:02X}{:02X}{:02X}".format(*(round(_clamp01(c) * 255) for c in (r, g, b)))


class RGBColor(_ColorBase):
    """Explicit sRGB color (``<a:srgbClr>``)."""

    type: Literal["rgb"] = "rgb"
    value: str = Field(description="Hex color, '#RRGGBB'")

    def base_hex(self, theme: Optional["Theme"] = None) -> str:
        return self.value


class SchemeColor(_ColorBase):
    """Reference into the theme's color scheme (``<a:schemeClr>``)."""

    type: Literal["scheme"] = "scheme"
    value: str = Field(description="Scheme slot name as written, e.g. 'accent1', 'tx1'")

    @property
    def slot(self) -> str:
        """Canonical color scheme slot this reference points at."""
        return SCHEME_SLOT_ALIASES.get(self.value, self.value)

    def base_hex(self, theme: Optional["Theme"] = None) -> str:
        if theme is not None:
            return theme.color_scheme.get(self.slot)
        return DEFAULT_SCHEME_COLORS.get(self.slot, "#000000")


class SystemColor(_ColorBase):
    """Operating system color (``<a:sysClr>``)."""

    type: Literal["system"] = "system"
    value: str = Field(description="System color name, e.g. 'windowText'")
    last_color: Optional[str] = Field(default=None, description="Last computed color, '#RRGGBB'")

    def base_hex(self, theme: Optional["Theme"] = None) -> str:
        if self.last_color:
            return self.last_color
        return SYSTEM_COLORS.get(self.value, "#000000")


class PresetColor(_ColorBase):
    """Named preset color (``<a:prstClr>``)."""

    type: Literal["preset"] = "preset"
    value: str = Field(description="Preset color name, e.g. 'red'")

    def base_hex(self, theme: Optional["Theme"] = None) -> str:
        return PRESET_COLORS.get(self.value, "#000000")


Color = Annotated[
    Union[RGBColor, SchemeColor, SystemColor, PresetColor],
    Field(discriminator="type"),
]


# ============================================================================
# Theme Models
# ============================================================================


class ThemeColors(BaseModel):
    """PowerPoint theme color palette."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(default="Office", description="Color scheme name")

    # Core colors
    dark1: str = Field(default=DEFAULT_SCHEME_COLORS["dark1"], description="Dark 1 (typically black)")
    light1: str = Field(default=DEFAULT_SCHEME_COLORS["light1"], description="Light 1 (typically white)")
    dark2: str = Field(default=DEFAULT_SCHEME_COLORS["dark2"], description="Dark 2")
    light2: str = Field(default=DEFAULT_SCHEME_COLORS["light2"], description="Light 2")

    # Accent colors
    accent1: str = Field(default=DEFAULT_SCHEME_COLORS["accent1"])
    accent2: str = Field(default=DEFAULT_SCHEME_COLORS["accent2"])
    accent3: str = Field(default=DEFAULT_SCHEME_COLORS["accent3"])
    accent4: str = Field(default=DEFAULT_SCHEME_COLORS["accent4"])
    accent5: str = Field(default=DEFAULT_SCHEME_COLORS["accent5"])
    accent6: str = Field(default=DEFAULT_SCHEME_COLORS["accent6"])

    # Hyperlinks
    hyperlink: str = Field(default=DEFAULT_SCHEME_COLORS["hyperlink"], description="Hyperlink color")
    followed_hyperlink: str = Field(
        default=DEFAULT_SCHEME_COLORS["followed_hyperlink"],
        description="Followed hyperlink color",
    )

    def get(self, slot: str) -> str:
        """Look up a slot by canonical or XML name, falling back to dark1."""
        slot = SCHEME_SLOT_ALIASES.get(slot, slot)
        return getattr(self, slot, None) if slot in DEFAULT_SCHEME_COLORS else self.dark1


class ThemeFont(BaseModel):
    """Typefaces for one font role (major = headings, minor = body)."""

    model_config = ConfigDict(frozen=True)

    latin: str = "Calibri"
    east_asian: Optional[str] = None
    complex_script: Optional[str] = None


class FontScheme(BaseModel):
    """Theme font scheme."""

    model_config = ConfigDict(frozen=True)

    name: str = "Office"
    major: ThemeFont = Field(default_factory=lambda: ThemeFont(latin="Calibri Light"))
    minor: ThemeFont = Field(default_factory=ThemeFont)


class Theme(BaseModel):
    """Shared presentation theme."""

    model_config = ConfigDict(frozen=True)

    name: str = "Default Theme"
    color_scheme: ThemeColors = Field(default_factory=ThemeColors)
    font_scheme: FontScheme = Field(default_factory=FontScheme)

    def resolve_font(self, typeface: Optional[str]) -> Optional[str]:
        """Resolve theme font references such as ``+mn-lt`` to a family name."""
        if not typeface or not typeface.startswith("+"):
            return typeface
        role = self.font_scheme.major if typeface.startswith("+mj") else self.font_scheme.minor
        if typeface.endswith("-ea"):
            return role.east_asian or role.latin
        if typeface.endswith("-cs"):
            return role.complex_script or role.latin
        return role.latin


# ============================================================================
# Fill, Outline & Effects Models
# ============================================================================


class NoFill(BaseModel):
    """No fill (transparent)."""

    model_config = ConfigDict(frozen=True)

    type: Literal["none"] = "none"


class SolidFill(BaseModel):
    """Solid color fill."""

    model_config = ConfigDict(frozen=True)

    type: Literal["solid"] = "solid"
    color: Color
    alpha: Optional[float] = Field(default=None, ge=0.0, le=1.0, description="Opacity (0-1)")


class GradientStop(BaseModel):
    """A gradient color stop."""

    model_config = ConfigDict(frozen=True)

    position: float = Field(ge=0.0, le=100.0, description="Position along gradient (0-100)")
    color: Color
    alpha: Optional[float] = Field(default=None, ge=0.0, le=1.0, description="Opacity (0-1)")


class GradientFill(BaseModel):
    """Gradient fill. ``angle`` is set for linear gradients, ``path`` otherwise."""

    model_config = ConfigDict(frozen=True)

    type: Literal["gradient"] = "gradient"
    stops: list[GradientStop] = Field(min_length=2, description="Color stops")
    angle: Optional[float] = Field(default=None, description="Linear gradient angle in degrees")
    path: Optional[Literal["circle", "rect", "shape"]] = Field(default=None)


class PatternFill(BaseModel):
    """Preset pattern fill."""

    model_config = ConfigDict(frozen=True)

    type: Literal["pattern"] = "pattern"
    preset: str = Field(description="Pattern preset name, e.g. 'pct5'")
    fg_color: Color
    bg_color: Color


class ImageFill(BaseModel):
    """Image-backed (blip) fill."""

    model_config = ConfigDict(frozen=True)

    type: Literal["image"] = "image"
    relationship_id: Optional[str] = Field(default=None, description="r:embed id")
    target: Optional[str] = Field(default=None, description="Resolved package path of the media")
    mode: Literal["stretch", "tile"] = "stretch"


Fill = Annotated[
    Union[NoFill, SolidFill, GradientFill, PatternFill, ImageFill],
    Field(discriminator="type"),
]

DashStyle = Literal[
    "solid",
    "dot",
    "dash",
    "dash-dot",
    "long-dash",
    "long-dash-dot",
    "long-dash-dot-dot",
    "sys-dot",
    "sys-dash",
]


class Outline(BaseModel):
    """Line/border properties."""

    model_config = ConfigDict(frozen=True)

    width: float = Field(default=1.0, ge=0.0, description="Line width in points")
    color: Color = Field(default_factory=lambda: RGBColor(value="#000000"))
    alpha: Optional[float] = Field(default=None, ge=0.0, le=1.0)
    dash: DashStyle = "solid"
    cap: Optional[Literal["flat", "round", "square"]] = None
    join: Optional[Literal["miter", "round", "bevel"]] = None


class Shadow(BaseModel):
    """Shadow effect."""

    model_config = ConfigDict(frozen=True)

    type: Literal["outer", "inner"] = "outer"
    color: Color = Field(default_factory=lambda: RGBColor(value="#000000"))
    alpha: float = Field(default=0.5, ge=0.0, le=1.0, description="Shadow opacity")
    blur_radius: float = Field(default=4.0, ge=0, description="Blur radius in points")
    distance: float = Field(default=3.0, ge=0, description="Shadow distance in points")
    angle: float = Field(default=45.0, description="Shadow direction in degrees")


class Glow(BaseModel):
    """Glow effect."""

    model_config = ConfigDict(frozen=True)

    color: Color
    alpha: float = Field(default=0.6, ge=0.0, le=1.0)
    radius: float = Field(default=5.0, ge=0, description="Glow radius in points")


class Reflection(BaseModel):
    """Reflection effect."""

    model_config = ConfigDict(frozen=True)

    blur_radius: float = Field(default=0.0, ge=0, description="Blur radius in points")
    start_alpha: float = Field(default=0.5, ge=0.0, le=1.0)
    end_alpha: float = Field(default=0.0, ge=0.0, le=1.0)
    distance: float = Field(default=0.0, ge=0, description="Distance from shape in points")
    direction: float = Field(default=90.0, description="Direction in degrees")


class Effects(BaseModel):
    """Combined visual effects for a shape."""

    model_config = ConfigDict(frozen=True)

    shadow: Optional[Shadow] = None
    glow: Optional[Glow] = None
    reflection: Optional[Reflection] = None
    soft_edge: Optional[float] = Field(default=None, ge=0, description="Soft edge radius in points")

    @property
    def is_empty(self) -> bool:
        return not (self.shadow or self.glow or self.reflection or self.soft_edge)


class ShapeStyle(BaseModel):
    """Fill, outline and effects of a shape or picture."""

    model_config = ConfigDict(frozen=True)

    fill: Fill = Field(default_factory=lambda: SolidFill(color=RGBColor(value="#FFFFFF")))
    outline: Optional[Outline] = None
    effects: Effects = Field(default_factory=Effects)


# ============================================================================
# Text Models
# ============================================================================


class TextRun(BaseModel):
    """A run of text with consistent formatting.

    Every property is defaulted on its own; nothing is inherited from the
    paragraph or the text body.
    """

    model_config = ConfigDict(frozen=True)

    text: str = Field(default="", description="The text content")
    font: str = Field(default="Calibri", description="Font family name")
    size: float = Field(default=16.0, description="Font size in points")
    bold: bool = False
    italic: bool = False
    underline: bool = False
    strikethrough: bool = False
    color: Color = Field(default_factory=lambda: RGBColor(value="#000000"))
    highlight: Optional[Color] = None
    baseline: Literal["baseline", "superscript", "subscript"] = "baseline"
    spacing: Optional[float] = Field(default=None, description="Character spacing in points")
    caps: Literal["none", "all", "small"] = "none"
    language: Optional[str] = None
    hyperlink: Optional[str] = Field(default=None, description="Resolved hyperlink target")


class Indentation(BaseModel):
    """Paragraph indentation, all values in points."""

    model_config = ConfigDict(frozen=True)

    left: Optional[float] = None
    right: Optional[float] = None
    first_line: Optional[float] = None
    hanging: Optional[float] = None


class CharBullet(BaseModel):
    """Literal-character bullet (``<a:buChar>``)."""

    model_config = ConfigDict(frozen=True)

    type: Literal["char"] = "char"
    char: str = "•"
    font: Optional[str] = None
    color: Optional[Color] = None
    size: Optional[float] = Field(default=None, description="Bullet size in points")
    size_percent: Optional[float] = Field(default=None, description="Bullet size relative to text")


class AutoNumberBullet(BaseModel):
    """Auto-numbered bullet (``<a:buAutoNum>``)."""

    model_config = ConfigDict(frozen=True)

    type: Literal["number"] = "number"
    scheme: str = Field(default="arabicPeriod", description="Numbering scheme, e.g. 'romanUcPeriod'")
    start_at: int = 1
    font: Optional[str] = None
    color: Optional[Color] = None
    size: Optional[float] = Field(default=None, description="Bullet size in points")
    size_percent: Optional[float] = Field(default=None, description="Bullet size relative to text")


Bullet = Annotated[Union[CharBullet, AutoNumberBullet], Field(discriminator="type")]

Alignment = Literal["left", "center", "right", "justified", "distributed"]


class Paragraph(BaseModel):
    """A block of runs sharing paragraph formatting."""

    model_config = ConfigDict(frozen=True)

    runs: list[TextRun] = Field(default_factory=list)
    alignment: Alignment = "left"
    indentation: Optional[Indentation] = None
    line_spacing: Optional[float] = Field(default=None, description="Percent of single spacing")
    line_spacing_points: Optional[float] = Field(default=None, description="Exact line spacing in points")
    space_before: Optional[float] = Field(default=None, description="Points")
    space_after: Optional[float] = Field(default=None, description="Points")
    level: int = Field(default=0, ge=0)
    bullet: Optional[Bullet] = None

    @property
    def text(self) -> str:
        """Concatenated text of all runs."""
        return "".join(run.text for run in self.runs)


class BodyProperties(BaseModel):
    """Text body layout hints. Insets are in points."""

    model_config = ConfigDict(frozen=True)

    auto_fit: Literal["none", "normal", "shape"] = "none"
    anchor: Literal["top", "middle", "bottom", "justified", "distributed"] = "top"
    wrap: bool = True
    left_inset: float = 7.2
    right_inset: float = 7.2
    top_inset: float = 3.6
    bottom_inset: float = 3.6


class TextBody(BaseModel):
    """Rich text content of a shape or text element."""

    model_config = ConfigDict(frozen=True)

    paragraphs: list[Paragraph] = Field(min_length=1)
    properties: BodyProperties = Field(default_factory=BodyProperties)

    @property
    def text(self) -> str:
        return "\n".join(p.text for p in self.paragraphs)


# ============================================================================
# Element Models
# ============================================================================


class PlaceholderRef(BaseModel):
    """Layout placeholder a slide shape is bound to."""

    model_config = ConfigDict(frozen=True)

    type: str = "body"
    index: Optional[int] = None


class _ElementBase(BaseModel):
    """Fields shared by every element kind. Geometry is in render pixels."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(description="Element identifier (cNvPr id)")
    name: Optional[str] = Field(default=None, description="Display name")
    x: float = Field(description="Left position, slide-absolute")
    y: float = Field(description="Top position, slide-absolute")
    width: float = Field(ge=0)
    height: float = Field(ge=0)
    rotation: float = Field(default=0.0, description="Rotation in degrees")
    flip_h: bool = False
    flip_v: bool = False
    z_index: int = Field(default=0, description="Draw-order key (ascending = drawn later)")
    local_x: Optional[float] = Field(default=None, description="Left position inside the parent group")
    local_y: Optional[float] = Field(default=None, description="Top position inside the parent group")
    placeholder: Optional[PlaceholderRef] = None


class TextElement(_ElementBase):
    """Free-standing text."""

    kind: Literal["text"] = "text"
    body: TextBody


class ShapeElement(_ElementBase):
    """Preset or custom geometry with style and optional text."""

    kind: Literal["shape"] = "shape"
    geometry: str = Field(default="rect", description="Preset geometry name or 'custom'")
    style: ShapeStyle = Field(default_factory=ShapeStyle)
    text: Optional[TextBody] = None


class ImagePayload(BaseModel):
    """Embeddable image bytes."""

    model_config = ConfigDict(frozen=True)

    data: bytes
    mime_type: str = "image/jpeg"
    source_path: Optional[str] = Field(default=None, description="Package entry the bytes came from")

    @property
    def data_uri(self) -> str:
        """``data:`` URI for direct embedding."""
        return f"data:{self.mime_type};base64,{base64.b64encode(self.data).decode('ascii')}"


class CropRect(BaseModel):
    """Crop insets as fractions of the source image."""

    model_config = ConfigDict(frozen=True)

    left: float = 0.0
    right: float = 0.0
    top: float = 0.0
    bottom: float = 0.0


class ImageElement(_ElementBase):
    """Picture with its resolved (or placeholder) payload."""

    kind: Literal["image"] = "image"
    payload: ImagePayload
    is_placeholder: bool = False
    crop: Optional[CropRect] = None
    brightness: Optional[float] = None
    contrast: Optional[float] = None
    style: Optional[ShapeStyle] = None


class GroupElement(_ElementBase):
    """Container of child elements."""

    kind: Literal["group"] = "group"
    children: list["Element"] = Field(default_factory=list)


Element = Annotated[
    Union[TextElement, ShapeElement, ImageElement, GroupElement],
    Field(discriminator="kind"),
]

GroupElement.model_rebuild()


# ============================================================================
# Slide & Presentation Models
# ============================================================================


DiagnosticKind = Literal[
    "MalformedPackage",
    "MissingPart",
    "MissingRelationship",
    "UnresolvedMedia",
    "UnsupportedNodeKind",
    "ExtractionFailed",
]


class Diagnostic(BaseModel):
    """A recoverable problem absorbed during parsing."""

    model_config = ConfigDict(frozen=True)

    kind: DiagnosticKind
    message: str
    part: Optional[str] = Field(default=None, description="Package part the problem was found in")


class Size(BaseModel):
    """Width and height pair."""

    model_config = ConfigDict(frozen=True)

    width: float
    height: float


class SlideBackground(BaseModel):
    """Slide background paint."""

    model_config = ConfigDict(frozen=True)

    fill: Optional[Fill] = None
    inherit: bool = Field(default=False, description="Show the master/layout background")


def _text_of(element: Element) -> list[str]:
    if isinstance(element, TextElement):
        return [element.body.text]
    if isinstance(element, ShapeElement) and element.text is not None:
        return [element.text.text]
    if isinstance(element, GroupElement):
        return [t for child in element.children for t in _text_of(child)]
    return []


class Slide(BaseModel):
    """Complete scene graph for a single slide."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(description="Identifier derived from the part name, e.g. 'slide1.xml'")
    number: int = Field(ge=0, description="Index embedded in the part name")
    elements: list[Element] = Field(default_factory=list)
    background: SlideBackground = Field(default_factory=SlideBackground)
    size: Size
    notes: Optional[str] = None
    diagnostics: list[Diagnostic] = Field(default_factory=list)

    def text_content(self) -> str:
        """All text on the slide, group children included."""
        parts = [t for element in self.elements for t in _text_of(element)]
        return "\n".join(p for p in parts if p).strip()

    def flatten(self) -> list[Element]:
        """Non-group elements in absolute space, groups expanded in draw order."""
        flat: list[Element] = []

        def walk(elements: list[Element]) -> None:
            for element in elements:
                if isinstance(element, GroupElement):
                    walk(element.children)
                else:
                    flat.append(element)

        walk(self.elements)
        return flat

    def get_element_by_id(self, element_id: str) -> Optional[Element]:
        """Find an element by id, searching groups recursively."""
        stack = list(self.elements)
        while stack:
            element = stack.pop(0)
            if element.id == element_id:
                return element
            if isinstance(element, GroupElement):
                stack.extend(element.children)
        return None


class Presentation(BaseModel):
    """A parsed presentation package."""

    model_config = ConfigDict(frozen=True)

    slides: list[Slide] = Field(default_factory=list)
    theme: Theme = Field(default_factory=Theme)
    size: Size = Field(description="Render size in pixels")
    native_size: Size = Field(description="Declared slide size in EMUs")
    scale_factor: float = Field(gt=0)
    diagnostics: list[Diagnostic] = Field(default_factory=list)
    source_name: Optional[str] = None
    error: Optional[str] = Field(default=None, description="Set when the package could not be read")
