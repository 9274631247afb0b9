"""Extract transformation properties from shape XML.

Parses <a:xfrm> to extract offset, extent, rotation, flips and, for groups,
the child coordinate space (chOff/chExt). Values stay in EMUs here;
conversion to pixels happens when elements are built. Rotation is stored
in 60,000ths of a degree in PPTX and converted to degrees.
"""

import logging
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict

from pptxscene.engine.units import (
    DEFAULT_SLIDE_HEIGHT_EMU,
    DEFAULT_SLIDE_WIDTH_EMU,
    angle_to_degrees,
)

logger = logging.getLogger(__name__)


# XML namespaces for Office Open XML
NAMESPACES = {
    "a": "http://schemas.openxmlformats.org/drawingml/2006/main",
    "p": "http://schemas.openxmlformats.org/presentationml/2006/main",
}

# Default frames of the standard 16:9 layout placeholders, in EMUs:
# (x, y, cx, cy)
PLACEHOLDER_FRAMES = {
    "title": (838200, 365125, 10515600, 1325563),
    "ctrTitle": (1524000, 1122363, 9144000, 2387600),
    "subTitle": (1524000, 3602038, 9144000, 1655762),
    "body": (838200, 1825625, 10515600, 4351338),
    "obj": (838200, 1825625, 10515600, 4351338),
    "dt": (838200, 6356350, 2743200, 365125),
    "ftr": (4038600, 6356350, 4114800, 365125),
    "sldNum": (8610600, 6356350, 2743200, 365125),
}


class Transform(BaseModel):
    """Raw transform of a shape, in EMUs and degrees."""

    model_config = ConfigDict(frozen=True)

    x: int = 0
    y: int = 0
    cx: int = 0
    cy: int = 0
    rotation: float = 0.0
    flip_h: bool = False
    flip_v: bool = False

    # Child coordinate space (groups only)
    ch_x: int = 0
    ch_y: int = 0
    ch_cx: int = 0
    ch_cy: int = 0


class TransformParser:
    """Extracts transformation properties from PPTX shape XML."""

    def extract_transform(self, element: Any) -> Optional[Transform]:
        """Extract the transform of a shape, picture or group.

        Args:
            element: The ``<p:sp>``, ``<p:pic>`` or ``<p:grpSp>`` element.

        Returns:
            Transform, or None when the element carries no ``<a:xfrm>``.

        XML structure example:
            <a:xfrm rot="5400000" flipH="1" flipV="0">
                <a:off x="914400" y="914400"/>
                <a:ext cx="2743200" cy="914400"/>
            </a:xfrm>
        """
        xfrm = self._find_xfrm_element(element)
        if xfrm is None:
            return None
        return self.parse_xfrm(xfrm)

    def parse_xfrm(self, xfrm: Any) -> Transform:
        """Read an ``<a:xfrm>`` element; missing or malformed values are zero."""
        off = xfrm.find("a:off", NAMESPACES)
        ext = xfrm.find("a:ext", NAMESPACES)
        ch_off = xfrm.find("a:chOff", NAMESPACES)
        ch_ext = xfrm.find("a:chExt", NAMESPACES)

        rotation = 0.0
        rot_attr = xfrm.get("rot")
        if rot_attr is not None:
            try:
                # Rotation is in 60,000ths of a degree
                rotation = normalize_rotation(angle_to_degrees(float(rot_attr)))
            except ValueError:
                logger.debug(f"Ignoring malformed rotation {rot_attr!r}")

        return Transform(
            x=self._int_attr(off, "x"),
            y=self._int_attr(off, "y"),
            cx=max(0, self._int_attr(ext, "cx")),
            cy=max(0, self._int_attr(ext, "cy")),
            rotation=rotation,
            # "1" or "true" means flipped
            flip_h=xfrm.get("flipH") in ("1", "true"),
            flip_v=xfrm.get("flipV") in ("1", "true"),
            ch_x=self._int_attr(ch_off, "x"),
            ch_y=self._int_attr(ch_off, "y"),
            ch_cx=max(0, self._int_attr(ch_ext, "cx")),
            ch_cy=max(0, self._int_attr(ch_ext, "cy")),
        )

    def _find_xfrm_element(self, element: Any) -> Optional[Any]:
        """Find the <a:xfrm> element in a shape's XML.

        The xfrm element is in different locations depending on the shape type:
        - <p:sp><p:spPr><a:xfrm> for normal shapes and pictures
        - <p:grpSp><p:grpSpPr><a:xfrm> for groups
        - <p:graphicFrame><p:xfrm> for graphic frames
        """
        search_paths = [
            "p:spPr/a:xfrm",
            "p:grpSpPr/a:xfrm",
            "p:xfrm",
        ]

        for path in search_paths:
            xfrm = element.find(path, NAMESPACES)
            if xfrm is not None:
                return xfrm

        return None

    def placeholder_transform(
        self,
        placeholder_type: str,
        slide_width: int = DEFAULT_SLIDE_WIDTH_EMU,
        slide_height: int = DEFAULT_SLIDE_HEIGHT_EMU,
    ) -> Transform:
        """Default frame for a placeholder that declares no position.

        Frames of the standard 16:9 layout are stretched to the slide size;
        unknown placeholder types use the body frame.
        """
        x, y, cx, cy = PLACEHOLDER_FRAMES.get(placeholder_type, PLACEHOLDER_FRAMES["body"])
        sx = slide_width / DEFAULT_SLIDE_WIDTH_EMU
        sy = slide_height / DEFAULT_SLIDE_HEIGHT_EMU
        return Transform(x=round(x * sx), y=round(y * sy), cx=round(cx * sx), cy=round(cy * sy))

    def _int_attr(self, elem: Any, name: str) -> int:
        if elem is None:
            return 0
        try:
            return int(elem.get(name, "0"))
        except ValueError:
            return 0


def normalize_rotation(degrees: float) -> float:
    """Normalize rotation to 0-360 range.

    Args:
        degrees: Rotation in degrees (may be negative or >360).

    Returns:
        Normalized rotation in 0-360 range.
    """
    normalized = degrees % 360.0
    if normalized < 0:
        normalized += 360.0
    return normalized
