"""Extract the presentation theme from its theme part.

Parses <a:clrScheme> and <a:fontScheme> from ``ppt/theme/themeN.xml`` to
build the palette and typefaces referenced by scheme colors and theme
font tokens.
"""

import logging
from typing import Any, Optional, Union

from pptxscene.dsl.schema import FontScheme, Theme, ThemeColors, ThemeFont
from pptxscene.parser.color_parser import ColorParser
from pptxscene.parser.package import parse_xml

logger = logging.getLogger(__name__)


# XML namespaces for Office Open XML
NAMESPACES = {
    "a": "http://schemas.openxmlformats.org/drawingml/2006/main",
    "p": "http://schemas.openxmlformats.org/presentationml/2006/main",
}

# Theme color element names mapped to ThemeColors attributes
THEME_COLOR_MAP = {
    "dk1": "dark1",
    "lt1": "light1",
    "dk2": "dark2",
    "lt2": "light2",
    "accent1": "accent1",
    "accent2": "accent2",
    "accent3": "accent3",
    "accent4": "accent4",
    "accent5": "accent5",
    "accent6": "accent6",
    "hlink": "hyperlink",
    "folHlink": "followed_hyperlink",
}


class ThemeParser:
    """Extracts the color and font schemes of a theme part."""

    def __init__(self, color_parser: Optional[ColorParser] = None) -> None:
        self.color_parser = color_parser or ColorParser()

    def parse(self, xml: Union[bytes, str, Any, None]) -> Theme:
        """Parse a theme part.

        Never raises: an absent or malformed part yields the default theme
        (Office palette, Calibri fonts), and absent fields keep their
        defaults.

        Args:
            xml: Theme part content, a parsed root element, or None.

        Returns:
            Theme with name, color scheme and font scheme.

        XML structure example:
            <a:theme name="Office Theme">
                <a:themeElements>
                    <a:clrScheme name="Office">
                        <a:dk1><a:sysClr val="windowText" lastClr="000000"/></a:dk1>
                        <a:accent1><a:srgbClr val="4472C4"/></a:accent1>
                        ...
                    </a:clrScheme>
                    <a:fontScheme name="Office">
                        <a:majorFont><a:latin typeface="Calibri Light"/></a:majorFont>
                        <a:minorFont><a:latin typeface="Calibri"/></a:minorFont>
                    </a:fontScheme>
                </a:themeElements>
            </a:theme>
        """
        root = parse_xml(xml) if isinstance(xml, (bytes, str)) else xml
        if root is None:
            logger.info("No theme available, using default theme")
            return Theme()

        try:
            fields: dict[str, Any] = {}
            if root.get("name"):
                fields["name"] = root.get("name")

            clr_scheme = root.find(".//a:clrScheme", NAMESPACES)
            if clr_scheme is not None:
                fields["color_scheme"] = self._extract_color_scheme(clr_scheme)

            font_scheme = root.find(".//a:fontScheme", NAMESPACES)
            if font_scheme is not None:
                fields["font_scheme"] = self._extract_font_scheme(font_scheme)

            return Theme(**fields)

        except (AttributeError, TypeError, ValueError) as e:
            # Fall back to defaults if theme extraction fails
            logger.warning(f"Theme extraction failed, using default theme: {e}")
            return Theme()

    def _extract_color_scheme(self, clr_scheme: Any) -> ThemeColors:
        """Extract the twelve scheme slots.

        Slot colors are resolved without a theme, so only their own
        srgbClr/sysClr/hslClr content and modifiers apply.
        """
        colors: dict[str, str] = {}
        if clr_scheme.get("name"):
            colors["name"] = clr_scheme.get("name")

        for xml_name, attr_name in THEME_COLOR_MAP.items():
            color_elem = clr_scheme.find(f"a:{xml_name}", NAMESPACES)
            if color_elem is None:
                continue
            color = self.color_parser.parse(color_elem)
            if color is not None:
                colors[attr_name] = color.resolve(None)

        return ThemeColors(**colors)

    def _extract_font_scheme(self, font_scheme: Any) -> FontScheme:
        fields: dict[str, Any] = {}
        if font_scheme.get("name"):
            fields["name"] = font_scheme.get("name")

        major = self._extract_theme_font(font_scheme.find("a:majorFont", NAMESPACES))
        if major is not None:
            fields["major"] = major
        minor = self._extract_theme_font(font_scheme.find("a:minorFont", NAMESPACES))
        if minor is not None:
            fields["minor"] = minor

        return FontScheme(**fields)

    def _extract_theme_font(self, font_elem: Any) -> Optional[ThemeFont]:
        """Extract latin/ea/cs typefaces; empty typefaces count as absent."""
        if font_elem is None:
            return None

        def typeface(tag: str) -> Optional[str]:
            elem = font_elem.find(f"a:{tag}", NAMESPACES)
            value = elem.get("typeface") if elem is not None else None
            return value or None

        latin = typeface("latin")
        fields: dict[str, Any] = {
            "east_asian": typeface("ea"),
            "complex_script": typeface("cs"),
        }
        if latin:
            fields["latin"] = latin
        return ThemeFont(**fields)
