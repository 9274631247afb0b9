"""Parse DrawingML color choices into Color models.

A color fragment is any element whose direct children may hold one of
the EG_ColorChoice elements, e.g. ``<a:solidFill>``, ``<a:gs>`` or a
theme slot like ``<a:accent1>``.
"""

import colorsys
import logging
import re
from typing import Any, Optional

from pptxscene.dsl.schema import (
    Color,
    PresetColor,
    RGBColor,
    SchemeColor,
    SystemColor,
)
from pptxscene.engine.units import ANGLE_UNIT, PERCENT_UNIT, clamp, rgb_to_hex

logger = logging.getLogger(__name__)


# XML namespaces for Office Open XML
NAMESPACES = {
    "a": "http://schemas.openxmlformats.org/drawingml/2006/main",
}

HEX_PATTERN = re.compile(r"^[0-9A-Fa-f]{6}$")

# Modifier element -> Color field
MODIFIERS = {
    "tint": "tint",
    "shade": "shade",
    "lumMod": "lum_mod",
    "lumOff": "lum_off",
    "satMod": "sat_mod",
}


class ColorParser:
    """Builds Color models from DrawingML color elements.

    Precedence when a fragment carries several choices is fixed:
    srgbClr, schemeClr, sysClr, prstClr, then hslClr and scrgbClr.
    """

    def parse(self, fragment: Any) -> Optional[Color]:
        """Parse the color held directly by a fragment.

        Args:
            fragment: Element containing a color choice child.

        Returns:
            Color model, or None when the fragment has no usable color.

        XML structure example:
            <a:solidFill>
                <a:schemeClr val="accent1">
                    <a:lumMod val="75000"/>
                </a:schemeClr>
            </a:solidFill>
        """
        if fragment is None:
            return None

        srgb = fragment.find("a:srgbClr", NAMESPACES)
        if srgb is not None:
            val = srgb.get("val", "")
            if HEX_PATTERN.match(val):
                return RGBColor(value=f"#{val.upper()}", **self._modifiers(srgb))
            logger.warning(f"Ignoring malformed srgbClr value {val!r}")

        scheme = fragment.find("a:schemeClr", NAMESPACES)
        if scheme is not None and scheme.get("val"):
            return SchemeColor(value=scheme.get("val"), **self._modifiers(scheme))

        sys_clr = fragment.find("a:sysClr", NAMESPACES)
        if sys_clr is not None and sys_clr.get("val"):
            last = sys_clr.get("lastClr", "")
            return SystemColor(
                value=sys_clr.get("val"),
                last_color=f"#{last.upper()}" if HEX_PATTERN.match(last) else None,
                **self._modifiers(sys_clr),
            )

        prst = fragment.find("a:prstClr", NAMESPACES)
        if prst is not None and prst.get("val"):
            return PresetColor(value=prst.get("val"), **self._modifiers(prst))

        hsl = fragment.find("a:hslClr", NAMESPACES)
        if hsl is not None:
            hex_color = self._hsl_to_hex(hsl)
            if hex_color:
                return RGBColor(value=hex_color, **self._modifiers(hsl))

        scrgb = fragment.find("a:scrgbClr", NAMESPACES)
        if scrgb is not None:
            hex_color = self._scrgb_to_hex(scrgb)
            if hex_color:
                return RGBColor(value=hex_color, **self._modifiers(scrgb))

        return None

    def parse_alpha(self, fragment: Any) -> Optional[float]:
        """Opacity (0-1) from the color's ``<a:alpha>`` child, if any."""
        if fragment is None:
            return None
        for color_elem in fragment:
            alpha = color_elem.find("a:alpha", NAMESPACES)
            if alpha is not None:
                try:
                    return clamp(int(alpha.get("val", PERCENT_UNIT)) / PERCENT_UNIT, 0.0, 1.0)
                except (TypeError, ValueError):
                    return None
        return None

    def _modifiers(self, color_elem: Any) -> dict[str, float]:
        """Collect tint/shade/lum/sat modifiers as fractions."""
        modifiers: dict[str, float] = {}
        for xml_name, field in MODIFIERS.items():
            elem = color_elem.find(f"a:{xml_name}", NAMESPACES)
            if elem is None:
                continue
            try:
                modifiers[field] = int(elem.get("val")) / PERCENT_UNIT
            except (TypeError, ValueError):
                logger.debug(f"Ignoring malformed {xml_name} modifier")
        return modifiers

    def _hsl_to_hex(self, hsl_elem: Any) -> Optional[str]:
        """Convert an ``<a:hslClr>`` element to hex.

        Hue is in 60000ths of a degree; saturation and luminance are
        100000ths.
        """
        try:
            h = float(hsl_elem.get("hue", "0")) / ANGLE_UNIT / 360.0
            s = float(hsl_elem.get("sat", "0")) / PERCENT_UNIT
            l = float(hsl_elem.get("lum", "0")) / PERCENT_UNIT
        except (TypeError, ValueError):
            return None

        r, g, b = colorsys.hls_to_rgb(h % 1.0, clamp(l, 0.0, 1.0), clamp(s, 0.0, 1.0))
        return rgb_to_hex(round(r * 255), round(g * 255), round(b * 255))

    def _scrgb_to_hex(self, scrgb_elem: Any) -> Optional[str]:
        """Convert an ``<a:scrgbClr>`` element (percent components) to hex."""
        try:
            components = [
                clamp(float(scrgb_elem.get(key, "0")) / PERCENT_UNIT, 0.0, 1.0)
                for key in ("r", "g", "b")
            ]
        except (TypeError, ValueError):
            return None
        return rgb_to_hex(*(round(c * 255) for c in components))
