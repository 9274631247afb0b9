"""Extract rich text from ``<p:txBody>`` elements.

Run properties are read from each run's own ``<a:rPr>`` and defaulted
independently (16pt, black, Calibri, regular); nothing is inherited from
the paragraph, list styles, layouts or masters.
"""

import logging
from typing import Any, Optional

from pptxscene.dsl.schema import (
    AutoNumberBullet,
    BodyProperties,
    CharBullet,
    Indentation,
    Paragraph,
    RGBColor,
    TextBody,
    TextRun,
    Theme,
)
from pptxscene.engine.units import emu_to_points
from pptxscene.parser.color_parser import ColorParser
from pptxscene.parser.errors import MissingRelationship
from pptxscene.parser.relationship_parser import RelationshipTable

logger = logging.getLogger(__name__)


# XML namespaces for Office Open XML
NAMESPACES = {
    "a": "http://schemas.openxmlformats.org/drawingml/2006/main",
    "r": "http://schemas.openxmlformats.org/officeDocument/2006/relationships",
}

A_NS = f"{{{NAMESPACES['a']}}}"
R_ID = f"{{{NAMESPACES['r']}}}id"

DEFAULT_FONT = "Calibri"
DEFAULT_FONT_SIZE = 16.0

# Default insets: 0.1in left/right, 0.05in top/bottom
DEFAULT_LR_INSET_EMU = 91440
DEFAULT_TB_INSET_EMU = 45720

TRUE_VALUES = ("1", "true", "on")


class TextExtractor:
    """Rebuilds TextBody models from DrawingML text XML."""

    ALIGNMENT_MAP = {
        "l": "left",
        "ctr": "center",
        "r": "right",
        "just": "justified",
        "justLow": "justified",
        "dist": "distributed",
        "thaiDist": "distributed",
    }

    ANCHOR_MAP = {
        "t": "top",
        "ctr": "middle",
        "b": "bottom",
        "just": "justified",
        "dist": "distributed",
    }

    CAPS_MAP = {
        "all": "all",
        "small": "small",
    }

    def __init__(self, color_parser: Optional[ColorParser] = None) -> None:
        self.color_parser = color_parser or ColorParser()

    def extract(
        self,
        tx_body: Any,
        theme: Optional[Theme] = None,
        relationships: Optional[RelationshipTable] = None,
    ) -> Optional[TextBody]:
        """Extract a text body.

        Args:
            tx_body: The ``<p:txBody>`` element.
            theme: Theme used to resolve ``+mj-lt``/``+mn-lt`` font tokens.
            relationships: Slide relationships, used to resolve hyperlinks.

        Returns:
            TextBody, or None when the body has no paragraphs.

        XML structure example:
            <p:txBody>
                <a:bodyPr anchor="ctr" wrap="square"/>
                <a:p>
                    <a:pPr algn="ctr"/>
                    <a:r><a:rPr sz="2400" b="1"/><a:t>Hello</a:t></a:r>
                </a:p>
            </p:txBody>
        """
        if tx_body is None:
            return None

        paragraphs = [
            self._extract_paragraph(p, theme, relationships)
            for p in tx_body.findall("a:p", NAMESPACES)
        ]
        if not paragraphs:
            return None

        return TextBody(
            paragraphs=paragraphs,
            properties=self.extract_body_properties(tx_body.find("a:bodyPr", NAMESPACES)),
        )

    def extract_body_properties(self, body_pr: Any) -> BodyProperties:
        """Extract anchor, wrap, insets and autofit from ``<a:bodyPr>``."""
        if body_pr is None:
            return BodyProperties()

        auto_fit = "none"
        if body_pr.find("a:spAutoFit", NAMESPACES) is not None:
            auto_fit = "shape"
        elif body_pr.find("a:normAutofit", NAMESPACES) is not None:
            auto_fit = "normal"

        return BodyProperties(
            auto_fit=auto_fit,
            anchor=self.ANCHOR_MAP.get(body_pr.get("anchor"), "top"),
            wrap=body_pr.get("wrap") != "none",
            left_inset=self._emu_attr_to_points(body_pr, "lIns", DEFAULT_LR_INSET_EMU),
            right_inset=self._emu_attr_to_points(body_pr, "rIns", DEFAULT_LR_INSET_EMU),
            top_inset=self._emu_attr_to_points(body_pr, "tIns", DEFAULT_TB_INSET_EMU),
            bottom_inset=self._emu_attr_to_points(body_pr, "bIns", DEFAULT_TB_INSET_EMU),
        )

    def _extract_paragraph(
        self,
        p: Any,
        theme: Optional[Theme],
        relationships: Optional[RelationshipTable],
    ) -> Paragraph:
        runs: list[TextRun] = []
        for child in p:
            if child.tag in (f"{A_NS}r", f"{A_NS}fld"):
                t = child.find("a:t", NAMESPACES)
                text = t.text if t is not None and t.text else ""
                runs.append(self._extract_run(child.find("a:rPr", NAMESPACES), text, theme, relationships))
            elif child.tag == f"{A_NS}br":
                runs.append(self._extract_run(child.find("a:rPr", NAMESPACES), "\n", theme, relationships))

        if not runs:
            end_props = p.find("a:endParaRPr", NAMESPACES)
            if end_props is not None:
                runs.append(self._extract_run(end_props, "", theme, relationships))

        p_pr = p.find("a:pPr", NAMESPACES)
        if p_pr is None:
            return Paragraph(runs=runs)

        line_spacing, line_spacing_points = self._extract_line_spacing(p_pr)
        return Paragraph(
            runs=runs,
            alignment=self.ALIGNMENT_MAP.get(p_pr.get("algn"), "left"),
            indentation=self._extract_indentation(p_pr),
            line_spacing=line_spacing,
            line_spacing_points=line_spacing_points,
            space_before=self._spacing_points(p_pr.find("a:spcBef", NAMESPACES)),
            space_after=self._spacing_points(p_pr.find("a:spcAft", NAMESPACES)),
            level=max(0, self._int_attr(p_pr, "lvl", 0)),
            bullet=self._extract_bullet(p_pr, theme),
        )

    def _extract_run(
        self,
        r_pr: Any,
        text: str,
        theme: Optional[Theme],
        relationships: Optional[RelationshipTable],
    ) -> TextRun:
        """Build a run from its own ``<a:rPr>``; every property defaults on its own."""
        if r_pr is None:
            return TextRun(text=text)

        size = DEFAULT_FONT_SIZE
        if r_pr.get("sz"):
            try:
                size = int(r_pr.get("sz")) / 100.0
            except ValueError:
                logger.debug(f"Ignoring malformed font size {r_pr.get('sz')!r}")

        baseline = "baseline"
        try:
            offset = int(r_pr.get("baseline", "0"))
        except ValueError:
            offset = 0
        if offset > 0:
            baseline = "superscript"
        elif offset < 0:
            baseline = "subscript"

        spacing = None
        if r_pr.get("spc"):
            try:
                spacing = int(r_pr.get("spc")) / 100.0
            except ValueError:
                spacing = None

        color = self.color_parser.parse(r_pr.find("a:solidFill", NAMESPACES))
        highlight = self.color_parser.parse(r_pr.find("a:highlight", NAMESPACES))

        return TextRun(
            text=text,
            font=self._extract_font(r_pr, theme),
            size=size,
            bold=r_pr.get("b", "0").lower() in TRUE_VALUES,
            italic=r_pr.get("i", "0").lower() in TRUE_VALUES,
            underline=r_pr.get("u", "none") != "none",
            strikethrough=r_pr.get("strike", "noStrike") in ("sngStrike", "dblStrike"),
            color=color or RGBColor(value="#000000"),
            highlight=highlight,
            baseline=baseline,
            spacing=spacing,
            caps=self.CAPS_MAP.get(r_pr.get("cap"), "none"),
            language=r_pr.get("lang"),
            hyperlink=self._extract_hyperlink(r_pr, relationships),
        )

    def _extract_font(self, r_pr: Any, theme: Optional[Theme]) -> str:
        """Latin typeface, falling back to east-asian and complex-script ones."""
        for tag in ("latin", "ea", "cs"):
            elem = r_pr.find(f"a:{tag}", NAMESPACES)
            typeface = elem.get("typeface") if elem is not None else None
            if not typeface:
                continue
            if typeface.startswith("+"):
                typeface = (theme or Theme()).resolve_font(typeface)
            if typeface:
                return typeface
        return DEFAULT_FONT

    def _extract_hyperlink(self, r_pr: Any, relationships: Optional[RelationshipTable]) -> Optional[str]:
        link = r_pr.find("a:hlinkClick", NAMESPACES)
        if link is None:
            return None
        rid = link.get(R_ID)
        if not rid or relationships is None:
            return None
        try:
            return relationships.target(rid)
        except MissingRelationship:
            logger.warning(f"Hyperlink references unknown relationship {rid}")
            return None

    def _extract_indentation(self, p_pr: Any) -> Optional[Indentation]:
        """marL/marR/indent in EMUs; a positive indent is a first-line
        indent, a negative one is hanging.
        """
        mar_l = self._int_attr(p_pr, "marL", None)
        mar_r = self._int_attr(p_pr, "marR", None)
        indent = self._int_attr(p_pr, "indent", None)
        if mar_l is None and mar_r is None and indent is None:
            return None

        first_line = hanging = None
        if indent is not None and indent > 0:
            first_line = emu_to_points(indent)
        elif indent is not None and indent < 0:
            hanging = emu_to_points(-indent)

        return Indentation(
            left=emu_to_points(mar_l) if mar_l is not None else None,
            right=emu_to_points(mar_r) if mar_r is not None else None,
            first_line=first_line,
            hanging=hanging,
        )

    def _extract_line_spacing(self, p_pr: Any) -> tuple[Optional[float], Optional[float]]:
        """Line spacing as (percent, points); at most one is set."""
        ln_spc = p_pr.find("a:lnSpc", NAMESPACES)
        if ln_spc is None:
            return None, None

        pct = ln_spc.find("a:spcPct", NAMESPACES)
        if pct is not None:
            value = self._int_attr(pct, "val", None)
            return (value / 1000.0 if value is not None else None), None

        return None, self._spacing_points(ln_spc)

    def _spacing_points(self, spacing: Any) -> Optional[float]:
        """Points from an ``<a:spcPts val="600"/>`` child (100ths of a point)."""
        if spacing is None:
            return None
        pts = spacing.find("a:spcPts", NAMESPACES)
        if pts is None:
            return None
        value = self._int_attr(pts, "val", None)
        return value / 100.0 if value is not None else None

    def _extract_bullet(self, p_pr: Any, theme: Optional[Theme]):
        """Bullet from buChar/buAutoNum; buNone or neither means no bullet."""
        if p_pr.find("a:buNone", NAMESPACES) is not None:
            return None

        common: dict[str, Any] = {}
        bu_font = p_pr.find("a:buFont", NAMESPACES)
        if bu_font is not None and bu_font.get("typeface"):
            common["font"] = (theme or Theme()).resolve_font(bu_font.get("typeface"))
        bu_clr = self.color_parser.parse(p_pr.find("a:buClr", NAMESPACES))
        if bu_clr is not None:
            common["color"] = bu_clr
        bu_sz_pts = p_pr.find("a:buSzPts", NAMESPACES)
        if bu_sz_pts is not None and self._int_attr(bu_sz_pts, "val", None) is not None:
            common["size"] = self._int_attr(bu_sz_pts, "val", 0) / 100.0
        bu_sz_pct = p_pr.find("a:buSzPct", NAMESPACES)
        if bu_sz_pct is not None and self._int_attr(bu_sz_pct, "val", None) is not None:
            common["size_percent"] = self._int_attr(bu_sz_pct, "val", 0) / 1000.0

        bu_char = p_pr.find("a:buChar", NAMESPACES)
        if bu_char is not None:
            return CharBullet(char=bu_char.get("char") or "•", **common)

        bu_auto = p_pr.find("a:buAutoNum", NAMESPACES)
        if bu_auto is not None:
            return AutoNumberBullet(
                scheme=bu_auto.get("type", "arabicPeriod"),
                start_at=self._int_attr(bu_auto, "startAt", 1),
                **common,
            )

        return None

    def _emu_attr_to_points(self, elem: Any, name: str, default: int) -> float:
        return emu_to_points(self._int_attr(elem, name, default))

    def _int_attr(self, elem: Any, name: str, default: Optional[int]) -> Optional[int]:
        value = elem.get(name)
        if value is None:
            return default
        try:
            return int(value)
        except ValueError:
            return default
