"""Tests for text body extraction."""

import pytest

from pptxscene.dsl.schema import (
    AutoNumberBullet,
    CharBullet,
    FontScheme,
    RGBColor,
    SchemeColor,
    Theme,
    ThemeFont,
)
from pptxscene.parser.relationship_parser import RelationshipTable
from pptxscene.parser.text_extractor import TextExtractor

RT_HYPERLINK = "http://schemas.openxmlformats.org/officeDocument/2006/relationships/hyperlink"


def tx_body(fragment, paragraphs: str, body_pr: str = "<a:bodyPr/>"):
    return fragment(f"<p:txBody>{body_pr}<a:lstStyle/>{paragraphs}</p:txBody>")


class TestRunExtraction:
    """Tests for run-level properties."""

    @pytest.fixture
    def extractor(self) -> TextExtractor:
        """Create a TextExtractor instance."""
        return TextExtractor()

    def test_run_defaults(self, extractor: TextExtractor, fragment) -> None:
        """Test runs without rPr get the documented defaults."""
        body = extractor.extract(tx_body(fragment, "<a:p><a:r><a:t>Plain</a:t></a:r></a:p>"))
        run = body.paragraphs[0].runs[0]

        assert run.text == "Plain"
        assert run.size == 16.0
        assert run.font == "Calibri"
        assert run.color == RGBColor(value="#000000")
        assert not run.bold and not run.italic and not run.underline

    def test_formatted_run(self, extractor: TextExtractor, fragment) -> None:
        """Test size, weight, style, decoration and color."""
        body = extractor.extract(tx_body(
            fragment,
            '<a:p><a:r><a:rPr lang="en-US" sz="2400" b="1" i="1" u="sng" strike="sngStrike" baseline="30000">'
            '<a:solidFill><a:schemeClr val="accent1"/></a:solidFill><a:latin typeface="Georgia"/>'
            "</a:rPr><a:t>Title</a:t></a:r></a:p>",
        ))
        run = body.paragraphs[0].runs[0]

        assert run.size == 24.0
        assert run.bold and run.italic and run.underline and run.strikethrough
        assert run.baseline == "superscript"
        assert run.color == SchemeColor(value="accent1")
        assert run.font == "Georgia"
        assert run.language == "en-US"

    def test_runs_do_not_inherit(self, extractor: TextExtractor, fragment) -> None:
        """Test a second run does not pick up the first run's formatting."""
        body = extractor.extract(tx_body(
            fragment,
            '<a:p><a:r><a:rPr sz="4000" b="1"/><a:t>Big</a:t></a:r>'
            "<a:r><a:t>small</a:t></a:r></a:p>",
        ))
        first, second = body.paragraphs[0].runs
        assert first.size == 40.0 and first.bold
        assert second.size == 16.0 and not second.bold

    def test_line_break_and_field(self, extractor: TextExtractor, fragment) -> None:
        """Test a:br becomes a newline run and fields keep their text."""
        body = extractor.extract(tx_body(
            fragment,
            '<a:p><a:r><a:t>Line one</a:t></a:r><a:br/><a:fld id="{X}" type="slidenum"><a:t>3</a:t></a:fld></a:p>',
        ))
        assert [r.text for r in body.paragraphs[0].runs] == ["Line one", "\n", "3"]
        assert body.text == "Line one\n3"

    def test_end_paragraph_properties(self, extractor: TextExtractor, fragment) -> None:
        """Test empty paragraphs keep an empty run from endParaRPr."""
        body = extractor.extract(tx_body(fragment, '<a:p><a:endParaRPr sz="1800"/></a:p>'))
        runs = body.paragraphs[0].runs
        assert len(runs) == 1
        assert runs[0].text == ""
        assert runs[0].size == 18.0

    def test_theme_font_token(self, extractor: TextExtractor, fragment) -> None:
        """Test +mn-lt resolves through the theme."""
        theme = Theme(font_scheme=FontScheme(minor=ThemeFont(latin="Aptos")))
        body = extractor.extract(
            tx_body(fragment, '<a:p><a:r><a:rPr><a:latin typeface="+mn-lt"/></a:rPr><a:t>x</a:t></a:r></a:p>'),
            theme=theme,
        )
        assert body.paragraphs[0].runs[0].font == "Aptos"

    def test_east_asian_fallback(self, extractor: TextExtractor, fragment) -> None:
        """Test the ea typeface is used when latin is absent."""
        body = extractor.extract(tx_body(
            fragment, '<a:p><a:r><a:rPr><a:ea typeface="MS Gothic"/></a:rPr><a:t>x</a:t></a:r></a:p>'
        ))
        assert body.paragraphs[0].runs[0].font == "MS Gothic"

    def test_hyperlink(self, extractor: TextExtractor, fragment, builder) -> None:
        """Test hlinkClick targets resolve through the slide relationships."""
        rels = RelationshipTable.from_xml(
            builder.relationships({"rId3": (RT_HYPERLINK, "https://example.com/")}, external=("rId3",)),
            "ppt/slides",
        )
        body = extractor.extract(
            tx_body(
                fragment,
                '<a:p><a:r><a:rPr><a:hlinkClick r:id="rId3"/></a:rPr><a:t>link</a:t></a:r></a:p>',
            ),
            relationships=rels,
        )
        assert body.paragraphs[0].runs[0].hyperlink == "https://example.com/"


class TestParagraphExtraction:
    """Tests for paragraph-level properties."""

    @pytest.fixture
    def extractor(self) -> TextExtractor:
        """Create a TextExtractor instance."""
        return TextExtractor()

    def test_alignment_and_level(self, extractor: TextExtractor, fragment) -> None:
        """Test algn and lvl mapping."""
        body = extractor.extract(tx_body(
            fragment, '<a:p><a:pPr algn="ctr" lvl="2"/><a:r><a:t>x</a:t></a:r></a:p>'
        ))
        paragraph = body.paragraphs[0]
        assert paragraph.alignment == "center"
        assert paragraph.level == 2

    def test_hanging_indent(self, extractor: TextExtractor, fragment) -> None:
        """Test marL and a negative indent (hanging)."""
        body = extractor.extract(tx_body(
            fragment, '<a:p><a:pPr marL="342900" indent="-342900"/><a:r><a:t>x</a:t></a:r></a:p>'
        ))
        indentation = body.paragraphs[0].indentation
        assert indentation.left == 27.0
        assert indentation.hanging == 27.0
        assert indentation.first_line is None

    def test_first_line_indent(self, extractor: TextExtractor, fragment) -> None:
        """Test a positive indent is a first-line indent."""
        body = extractor.extract(tx_body(
            fragment, '<a:p><a:pPr indent="127000"/><a:r><a:t>x</a:t></a:r></a:p>'
        ))
        assert body.paragraphs[0].indentation.first_line == 10.0

    def test_spacing(self, extractor: TextExtractor, fragment) -> None:
        """Test line spacing percent and before/after points."""
        body = extractor.extract(tx_body(
            fragment,
            "<a:p><a:pPr><a:lnSpc><a:spcPct val=\"150000\"/></a:lnSpc>"
            "<a:spcBef><a:spcPts val=\"600\"/></a:spcBef><a:spcAft><a:spcPts val=\"1200\"/></a:spcAft>"
            "</a:pPr><a:r><a:t>x</a:t></a:r></a:p>",
        ))
        paragraph = body.paragraphs[0]
        assert paragraph.line_spacing == 150.0
        assert paragraph.line_spacing_points is None
        assert paragraph.space_before == 6.0
        assert paragraph.space_after == 12.0

    def test_exact_line_spacing(self, extractor: TextExtractor, fragment) -> None:
        """Test spcPts line spacing is reported in points."""
        body = extractor.extract(tx_body(
            fragment,
            '<a:p><a:pPr><a:lnSpc><a:spcPts val="2000"/></a:lnSpc></a:pPr><a:r><a:t>x</a:t></a:r></a:p>',
        ))
        assert body.paragraphs[0].line_spacing_points == 20.0
        assert body.paragraphs[0].line_spacing is None

    def test_char_bullet(self, extractor: TextExtractor, fragment) -> None:
        """Test buChar with font, color and relative size."""
        body = extractor.extract(tx_body(
            fragment,
            '<a:p><a:pPr><a:buClr><a:srgbClr val="FF0000"/></a:buClr><a:buSzPct val="75000"/>'
            '<a:buFont typeface="Arial"/><a:buChar char="-"/></a:pPr><a:r><a:t>x</a:t></a:r></a:p>',
        ))
        bullet = body.paragraphs[0].bullet
        assert isinstance(bullet, CharBullet)
        assert bullet.char == "-"
        assert bullet.font == "Arial"
        assert bullet.color == RGBColor(value="#FF0000")
        assert bullet.size_percent == 75.0

    def test_auto_number_bullet(self, extractor: TextExtractor, fragment) -> None:
        """Test buAutoNum scheme and start index."""
        body = extractor.extract(tx_body(
            fragment,
            '<a:p><a:pPr><a:buAutoNum type="romanUcPeriod" startAt="3"/></a:pPr><a:r><a:t>x</a:t></a:r></a:p>',
        ))
        bullet = body.paragraphs[0].bullet
        assert isinstance(bullet, AutoNumberBullet)
        assert bullet.scheme == "romanUcPeriod"
        assert bullet.start_at == 3

    def test_bu_none(self, extractor: TextExtractor, fragment) -> None:
        """Test buNone suppresses bullets."""
        body = extractor.extract(tx_body(
            fragment, '<a:p><a:pPr><a:buNone/></a:pPr><a:r><a:t>x</a:t></a:r></a:p>'
        ))
        assert body.paragraphs[0].bullet is None


class TestBodyProperties:
    """Tests for bodyPr extraction."""

    @pytest.fixture
    def extractor(self) -> TextExtractor:
        """Create a TextExtractor instance."""
        return TextExtractor()

    def test_defaults(self, extractor: TextExtractor, fragment) -> None:
        """Test default insets and anchor."""
        body = extractor.extract(tx_body(fragment, "<a:p><a:r><a:t>x</a:t></a:r></a:p>"))
        properties = body.properties
        assert properties.anchor == "top"
        assert properties.wrap
        assert properties.auto_fit == "none"
        assert properties.left_inset == 7.2
        assert properties.top_inset == 3.6

    def test_explicit_properties(self, extractor: TextExtractor, fragment) -> None:
        """Test anchor, wrap, insets and shape autofit."""
        body = extractor.extract(tx_body(
            fragment,
            "<a:p><a:r><a:t>x</a:t></a:r></a:p>",
            body_pr='<a:bodyPr anchor="ctr" wrap="none" lIns="0" tIns="127000"><a:spAutoFit/></a:bodyPr>',
        ))
        properties = body.properties
        assert properties.anchor == "middle"
        assert not properties.wrap
        assert properties.left_inset == 0.0
        assert properties.top_inset == 10.0
        assert properties.auto_fit == "shape"

    def test_no_paragraphs(self, extractor: TextExtractor, fragment) -> None:
        """Test a body without paragraphs yields None."""
        assert extractor.extract(fragment("<p:txBody><a:bodyPr/></p:txBody>")) is None
        assert extractor.extract(None) is None
