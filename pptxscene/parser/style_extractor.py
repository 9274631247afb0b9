"""Extract visual styles from shape property XML.

Includes fill, outline, effects (shadow, glow, reflection, soft edges) and
slide backgrounds. All lookups are on the direct children of the
properties element; nothing is inherited from layouts or masters.
"""

import logging
from typing import Any, Optional

from pptxscene.dsl.schema import (
    Effects,
    Fill,
    Glow,
    GradientFill,
    GradientStop,
    ImageFill,
    NoFill,
    Outline,
    PatternFill,
    Reflection,
    RGBColor,
    Shadow,
    ShapeStyle,
    SlideBackground,
    SolidFill,
)
from pptxscene.engine.units import angle_to_degrees, clamp, emu_to_points, percentage
from pptxscene.parser.color_parser import ColorParser
from pptxscene.parser.errors import MissingRelationship
from pptxscene.parser.relationship_parser import RelationshipTable

logger = logging.getLogger(__name__)


# XML namespaces for Office Open XML
NAMESPACES = {
    "a": "http://schemas.openxmlformats.org/drawingml/2006/main",
    "p": "http://schemas.openxmlformats.org/presentationml/2006/main",
    "r": "http://schemas.openxmlformats.org/officeDocument/2006/relationships",
}

R_EMBED = f"{{{NAMESPACES['r']}}}embed"

DEFAULT_FILL_COLOR = "#FFFFFF"
DEFAULT_LINE_WIDTH_EMU = 12700


def default_fill() -> SolidFill:
    """Opaque white solid, used when no fill is specified."""
    return SolidFill(color=RGBColor(value=DEFAULT_FILL_COLOR))


def _points_attr(elem: Any, name: str, default: int) -> float:
    """Points from an EMU attribute, floored at zero; malformed values use the default."""
    try:
        value = int(elem.get(name, default))
    except (TypeError, ValueError):
        logger.debug(f"Ignoring malformed {name}={elem.get(name)!r}")
        value = default
    return emu_to_points(max(0, value))


def _angle_attr(elem: Any, name: str, default: int) -> float:
    try:
        return angle_to_degrees(float(elem.get(name, default)))
    except (TypeError, ValueError):
        return angle_to_degrees(default)


def _fraction_attr(elem: Any, name: str, default: int) -> float:
    """0-1 fraction from a percentage attribute (100000 = 1)."""
    try:
        value = float(elem.get(name, default))
    except (TypeError, ValueError):
        value = default
    return clamp(percentage(value), 0.0, 1.0)



class StyleExtractor:
    """Extracts visual styles from DrawingML property elements."""

    # prstDash values mapped to our dash names
    DASH_STYLE_MAP = {
        "solid": "solid",
        "dot": "dot",
        "dash": "dash",
        "lgDash": "long-dash",
        "dashDot": "dash-dot",
        "lgDashDot": "long-dash-dot",
        "lgDashDotDot": "long-dash-dot-dot",
        "sysDot": "sys-dot",
        "sysDash": "sys-dash",
        "sysDashDot": "dash-dot",
        "sysDashDotDot": "long-dash-dot-dot",
    }

    LINE_CAP_MAP = {
        "flat": "flat",
        "rnd": "round",
        "sq": "square",
    }

    FILL_TAGS = ("noFill", "solidFill", "gradFill", "pattFill", "blipFill")

    GRADIENT_PATH_MAP = {
        "circle": "circle",
        "rect": "rect",
        "shape": "shape",
    }

    def __init__(self, color_parser: Optional[ColorParser] = None) -> None:
        self.color_parser = color_parser or ColorParser()

    def extract_style(
        self,
        sp_pr: Any,
        relationships: Optional[RelationshipTable] = None,
    ) -> ShapeStyle:
        """Fill, outline and effects of a ``<p:spPr>`` element."""
        return ShapeStyle(
            fill=self.extract_fill(sp_pr, relationships),
            outline=self.extract_outline(sp_pr),
            effects=self.extract_effects(sp_pr),
        )

    def extract_picture_style(
        self,
        sp_pr: Any,
        relationships: Optional[RelationshipTable] = None,
    ) -> Optional[ShapeStyle]:
        """Style of a ``<p:pic>``; None when it declares no fill, line or effects.

        A picture without a fill marker is unfilled rather than white.
        """
        if sp_pr is None:
            return None
        has_fill = any(sp_pr.find(f"a:{tag}", NAMESPACES) is not None for tag in self.FILL_TAGS)
        outline = self.extract_outline(sp_pr)
        effects = self.extract_effects(sp_pr)
        if not has_fill and outline is None and effects.is_empty:
            return None
        return ShapeStyle(
            fill=self.extract_fill(sp_pr, relationships) if has_fill else NoFill(),
            outline=outline,
            effects=effects,
        )

    def extract_fill(
        self,
        sp_pr: Any,
        relationships: Optional[RelationshipTable] = None,
    ) -> Fill:
        """Extract the fill of a properties element.

        Fill markers are checked in a fixed order: noFill, solidFill,
        gradFill, pattFill, blipFill. A missing marker yields opaque white.

        Args:
            sp_pr: The ``<p:spPr>`` (or ``<p:bgPr>``) element.
            relationships: Part relationships, used to resolve blip targets.

        Returns:
            Fill object.
        """
        if sp_pr is None:
            return default_fill()

        if sp_pr.find("a:noFill", NAMESPACES) is not None:
            return NoFill()

        solid = sp_pr.find("a:solidFill", NAMESPACES)
        if solid is not None:
            return self._extract_solid_fill(solid)

        grad = sp_pr.find("a:gradFill", NAMESPACES)
        if grad is not None:
            return self._extract_gradient_fill(grad)

        patt = sp_pr.find("a:pattFill", NAMESPACES)
        if patt is not None:
            return self._extract_pattern_fill(patt)

        blip_fill = sp_pr.find("a:blipFill", NAMESPACES)
        if blip_fill is not None:
            return self.extract_image_fill(blip_fill, relationships)

        return default_fill()

    def _extract_solid_fill(self, solid: Any) -> SolidFill:
        """Extract a solid fill; a colorless solidFill is white."""
        color = self.color_parser.parse(solid) or RGBColor(value=DEFAULT_FILL_COLOR)
        return SolidFill(color=color, alpha=self.color_parser.parse_alpha(solid))

    def _extract_gradient_fill(self, grad: Any) -> GradientFill:
        """Extract a gradient fill.

        XML structure:
            <a:gradFill>
                <a:gsLst>
                    <a:gs pos="0"><a:srgbClr val="FF0000"/></a:gs>
                    <a:gs pos="100000"><a:srgbClr val="0000FF"/></a:gs>
                </a:gsLst>
                <a:lin ang="5400000" scaled="0"/>
            </a:gradFill>

        Stop positions are 1000ths of a percent. With fewer than two
        usable stops the gradient falls back to white to black.
        """
        stops: list[GradientStop] = []
        for gs in grad.findall("a:gsLst/a:gs", NAMESPACES):
            color = self.color_parser.parse(gs)
            if color is None:
                continue
            try:
                position = clamp(int(gs.get("pos", "0")) / 1000.0, 0.0, 100.0)
            except ValueError:
                continue
            stops.append(GradientStop(
                position=position,
                color=color,
                alpha=self.color_parser.parse_alpha(gs),
            ))

        if len(stops) < 2:
            logger.debug("Gradient with fewer than two stops, using white to black")
            stops = [
                GradientStop(position=0.0, color=RGBColor(value="#FFFFFF")),
                GradientStop(position=100.0, color=RGBColor(value="#000000")),
            ]

        angle = None
        path = None
        lin = grad.find("a:lin", NAMESPACES)
        path_elem = grad.find("a:path", NAMESPACES)
        if lin is not None:
            try:
                angle = angle_to_degrees(int(lin.get("ang", "0")))
            except ValueError:
                angle = 0.0
        elif path_elem is not None:
            path = self.GRADIENT_PATH_MAP.get(path_elem.get("path", "circle"), "circle")
        else:
            angle = 0.0

        return GradientFill(stops=stops, angle=angle, path=path)

    def _extract_pattern_fill(self, patt: Any) -> PatternFill:
        """Extract a preset pattern fill.

        Missing foreground/background colors default to black on white.
        """
        fg = self.color_parser.parse(patt.find("a:fgClr", NAMESPACES))
        bg = self.color_parser.parse(patt.find("a:bgClr", NAMESPACES))
        return PatternFill(
            preset=patt.get("prst", "pct5"),
            fg_color=fg or RGBColor(value="#000000"),
            bg_color=bg or RGBColor(value="#FFFFFF"),
        )

    def extract_image_fill(
        self,
        blip_fill: Any,
        relationships: Optional[RelationshipTable] = None,
    ) -> ImageFill:
        """Extract an image fill from ``<a:blipFill>``."""
        blip = blip_fill.find("a:blip", NAMESPACES)
        rid = blip.get(R_EMBED) if blip is not None else None

        target = None
        if rid and relationships is not None:
            try:
                target = relationships.target(rid)
            except MissingRelationship:
                logger.warning(f"Image fill references unknown relationship {rid}")

        mode = "tile" if blip_fill.find("a:tile", NAMESPACES) is not None else "stretch"
        return ImageFill(relationship_id=rid, target=target, mode=mode)

    def extract_outline(self, sp_pr: Any) -> Optional[Outline]:
        """Extract the outline of a properties element.

        XML structure:
            <a:ln w="12700" cap="rnd">
                <a:solidFill><a:srgbClr val="000000"/></a:solidFill>
                <a:prstDash val="dash"/>
                <a:round/>
            </a:ln>

        Returns:
            Outline, or None when there is no ``<a:ln>`` or it has noFill.
        """
        if sp_pr is None:
            return None

        ln = sp_pr.find("a:ln", NAMESPACES)
        if ln is None or ln.find("a:noFill", NAMESPACES) is not None:
            return None

        width = _points_attr(ln, "w", DEFAULT_LINE_WIDTH_EMU)

        color = RGBColor(value="#000000")
        alpha = None
        solid = ln.find("a:solidFill", NAMESPACES)
        if solid is not None:
            color = self.color_parser.parse(solid) or color
            alpha = self.color_parser.parse_alpha(solid)

        dash = "solid"
        prst_dash = ln.find("a:prstDash", NAMESPACES)
        if prst_dash is not None:
            dash = self.DASH_STYLE_MAP.get(prst_dash.get("val", "solid"), "solid")

        join = None
        for tag, name in (("round", "round"), ("bevel", "bevel"), ("miter", "miter")):
            if ln.find(f"a:{tag}", NAMESPACES) is not None:
                join = name
                break

        return Outline(
            width=width,
            color=color,
            alpha=alpha,
            dash=dash,
            cap=self.LINE_CAP_MAP.get(ln.get("cap")),
            join=join,
        )

    def extract_effects(self, sp_pr: Any) -> Effects:
        """Extract visual effects from ``<a:effectLst>``.

        Args:
            sp_pr: The ``<p:spPr>`` element.

        Returns:
            Effects object with all detected effects.
        """
        if sp_pr is None:
            return Effects()

        effect_lst = sp_pr.find("a:effectLst", NAMESPACES)
        if effect_lst is None:
            return Effects()

        try:
            return Effects(
                shadow=self._extract_shadow(effect_lst),
                glow=self._extract_glow(effect_lst),
                reflection=self._extract_reflection(effect_lst),
                soft_edge=self._extract_soft_edge(effect_lst),
            )
        except (TypeError, ValueError) as e:
            logger.warning(f"Ignoring malformed effect list: {e}")
            return Effects()

    def _extract_shadow(self, effect_lst: Any) -> Optional[Shadow]:
        """Extract shadow effect from effect list XML.

        XML structure:
            <a:outerShdw blurRad="50800" dist="38100" dir="2700000"
                         algn="tl" rotWithShape="0">
                <a:srgbClr val="000000">
                    <a:alpha val="50000"/>
                </a:srgbClr>
            </a:outerShdw>
        """
        # Try outer shadow first
        shadow_elem = effect_lst.find("a:outerShdw", NAMESPACES)
        shadow_type = "outer"

        if shadow_elem is None:
            shadow_elem = effect_lst.find("a:innerShdw", NAMESPACES)
            shadow_type = "inner"

        if shadow_elem is None:
            return None

        alpha = self.color_parser.parse_alpha(shadow_elem)
        return Shadow(
            type=shadow_type,
            color=self.color_parser.parse(shadow_elem) or RGBColor(value="#000000"),
            alpha=0.5 if alpha is None else alpha,
            blur_radius=_points_attr(shadow_elem, "blurRad", 50800),
            distance=_points_attr(shadow_elem, "dist", 38100),
            angle=_angle_attr(shadow_elem, "dir", 2700000),
        )

    def _extract_glow(self, effect_lst: Any) -> Optional[Glow]:
        """Extract glow effect from effect list.

        XML structure:
            <a:glow rad="63500">
                <a:srgbClr val="FF0000"><a:alpha val="60000"/></a:srgbClr>
            </a:glow>
        """
        glow_elem = effect_lst.find("a:glow", NAMESPACES)
        if glow_elem is None:
            return None

        alpha = self.color_parser.parse_alpha(glow_elem)
        return Glow(
            # Default glow color (yellow)
            color=self.color_parser.parse(glow_elem) or RGBColor(value="#FFFF00"),
            alpha=0.6 if alpha is None else alpha,
            radius=_points_attr(glow_elem, "rad", 63500),
        )

    def _extract_reflection(self, effect_lst: Any) -> Optional[Reflection]:
        """Extract reflection effect from effect list.

        XML structure:
            <a:reflection blurRad="6350" stA="52000" endA="300"
                          dist="0" dir="5400000" sy="-100000"/>
        """
        refl_elem = effect_lst.find("a:reflection", NAMESPACES)
        if refl_elem is None:
            return None

        return Reflection(
            blur_radius=_points_attr(refl_elem, "blurRad", 0),
            start_alpha=_fraction_attr(refl_elem, "stA", 50000),
            end_alpha=_fraction_attr(refl_elem, "endA", 0),
            distance=_points_attr(refl_elem, "dist", 0),
            direction=_angle_attr(refl_elem, "dir", 5400000),
        )

    def _extract_soft_edge(self, effect_lst: Any) -> Optional[float]:
        """Soft edge radius in points, from ``<a:softEdge rad="63500"/>``."""
        soft_elem = effect_lst.find("a:softEdge", NAMESPACES)
        if soft_elem is None:
            return None

        return _points_attr(soft_elem, "rad", 0)

    def extract_background(
        self,
        slide_root: Any,
        relationships: Optional[RelationshipTable] = None,
    ) -> SlideBackground:
        """Extract the slide background.

        ``<p:bg><p:bgPr>`` carries an explicit fill; ``<p:bg><p:bgRef>``
        carries a theme background reference with a color override. Without
        ``<p:bg>`` the slide shows its layout background, reported as
        ``inherit`` with opaque white.

        Args:
            slide_root: The ``<p:sld>`` root element.
            relationships: Slide relationships, used for image backgrounds.

        Returns:
            SlideBackground for the slide.
        """
        bg = slide_root.find("p:cSld/p:bg", NAMESPACES) if slide_root is not None else None
        if bg is None:
            return SlideBackground(fill=default_fill(), inherit=True)

        bg_pr = bg.find("p:bgPr", NAMESPACES)
        if bg_pr is not None:
            return SlideBackground(fill=self.extract_fill(bg_pr, relationships))

        bg_ref = bg.find("p:bgRef", NAMESPACES)
        if bg_ref is not None:
            color = self.color_parser.parse(bg_ref)
            if color is not None:
                return SlideBackground(
                    fill=SolidFill(color=color, alpha=self.color_parser.parse_alpha(bg_ref)),
                )

        return SlideBackground(fill=default_fill(), inherit=True)
