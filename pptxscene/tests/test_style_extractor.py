"""Tests for fill, outline, effect and background extraction."""

import pytest

from pptxscene.dsl.schema import (
    GradientFill,
    ImageFill,
    NoFill,
    PatternFill,
    RGBColor,
    SchemeColor,
    SolidFill,
)
from pptxscene.parser.relationship_parser import RelationshipTable
from pptxscene.parser.style_extractor import StyleExtractor

RT_IMAGE = "http://schemas.openxmlformats.org/officeDocument/2006/relationships/image"


def sp_pr(fragment, content: str):
    return fragment(f"<p:spPr>{content}</p:spPr>")


class TestFillExtraction:
    """Tests for StyleExtractor.extract_fill."""

    @pytest.fixture
    def extractor(self) -> StyleExtractor:
        """Create a StyleExtractor instance."""
        return StyleExtractor()

    def test_missing_fill_is_white(self, extractor: StyleExtractor, fragment) -> None:
        """Test shapes without a fill marker get opaque white."""
        fill = extractor.extract_fill(sp_pr(fragment, ""))
        assert isinstance(fill, SolidFill)
        assert fill.color.resolve() == "#FFFFFF"
        assert fill.alpha is None

    def test_no_fill(self, extractor: StyleExtractor, fragment) -> None:
        """Test noFill wins over later fill markers."""
        fill = extractor.extract_fill(sp_pr(
            fragment, '<a:noFill/><a:solidFill><a:srgbClr val="FF0000"/></a:solidFill>'
        ))
        assert fill == NoFill()

    def test_solid_scheme_fill(self, extractor: StyleExtractor, fragment) -> None:
        """Test a scheme-colored solid fill with alpha."""
        fill = extractor.extract_fill(sp_pr(
            fragment,
            '<a:solidFill><a:schemeClr val="accent1"><a:alpha val="50000"/></a:schemeClr></a:solidFill>',
        ))
        assert isinstance(fill, SolidFill)
        assert fill.color == SchemeColor(value="accent1")
        assert fill.alpha == 0.5

    def test_linear_gradient(self, extractor: StyleExtractor, fragment) -> None:
        """Test stops and angle of a linear gradient."""
        fill = extractor.extract_fill(sp_pr(
            fragment,
            '<a:gradFill><a:gsLst>'
            '<a:gs pos="0"><a:srgbClr val="FF0000"/></a:gs>'
            '<a:gs pos="50000"><a:srgbClr val="00FF00"/></a:gs>'
            '<a:gs pos="100000"><a:srgbClr val="0000FF"/></a:gs>'
            '</a:gsLst><a:lin ang="5400000" scaled="0"/></a:gradFill>',
        ))
        assert isinstance(fill, GradientFill)
        assert [s.position for s in fill.stops] == [0.0, 50.0, 100.0]
        assert fill.stops[1].color == RGBColor(value="#00FF00")
        assert fill.angle == 90.0
        assert fill.path is None

    def test_path_gradient(self, extractor: StyleExtractor, fragment) -> None:
        """Test radial gradients keep their path kind."""
        fill = extractor.extract_fill(sp_pr(
            fragment,
            '<a:gradFill><a:gsLst>'
            '<a:gs pos="0"><a:srgbClr val="FFFFFF"/></a:gs>'
            '<a:gs pos="100000"><a:srgbClr val="000000"/></a:gs>'
            '</a:gsLst><a:path path="circle"/></a:gradFill>',
        ))
        assert fill.path == "circle"
        assert fill.angle is None

    def test_degenerate_gradient_falls_back(self, extractor: StyleExtractor, fragment) -> None:
        """Test a gradient with one stop becomes white to black."""
        fill = extractor.extract_fill(sp_pr(
            fragment,
            '<a:gradFill><a:gsLst><a:gs pos="0"><a:srgbClr val="FF0000"/></a:gs></a:gsLst></a:gradFill>',
        ))
        assert isinstance(fill, GradientFill)
        assert [s.color.resolve() for s in fill.stops] == ["#FFFFFF", "#000000"]
        assert fill.angle == 0.0

    def test_pattern_fill(self, extractor: StyleExtractor, fragment) -> None:
        """Test pattern preset and colors."""
        fill = extractor.extract_fill(sp_pr(
            fragment,
            '<a:pattFill prst="dkHorz"><a:fgClr><a:srgbClr val="111111"/></a:fgClr>'
            '<a:bgClr><a:srgbClr val="EEEEEE"/></a:bgClr></a:pattFill>',
        ))
        assert isinstance(fill, PatternFill)
        assert fill.preset == "dkHorz"
        assert fill.fg_color.resolve() == "#111111"
        assert fill.bg_color.resolve() == "#EEEEEE"

    def test_image_fill_resolves_target(self, extractor: StyleExtractor, fragment, builder) -> None:
        """Test blip fills resolve their relationship target."""
        rels = RelationshipTable.from_xml(
            builder.relationships({"rId5": (RT_IMAGE, "../media/image3.jpeg")}), "ppt/slides"
        )
        fill = extractor.extract_fill(
            sp_pr(fragment, '<a:blipFill><a:blip r:embed="rId5"/><a:tile/></a:blipFill>'),
            rels,
        )
        assert isinstance(fill, ImageFill)
        assert fill.relationship_id == "rId5"
        assert fill.target == "ppt/media/image3.jpeg"
        assert fill.mode == "tile"

    def test_image_fill_unknown_relationship(self, extractor: StyleExtractor, fragment) -> None:
        """Test an unknown blip id leaves the target empty."""
        fill = extractor.extract_fill(
            sp_pr(fragment, '<a:blipFill><a:blip r:embed="rId9"/><a:stretch/></a:blipFill>'),
            RelationshipTable({}, "ppt/slides"),
        )
        assert fill.target is None
        assert fill.mode == "stretch"


class TestOutlineExtraction:
    """Tests for StyleExtractor.extract_outline."""

    @pytest.fixture
    def extractor(self) -> StyleExtractor:
        """Create a StyleExtractor instance."""
        return StyleExtractor()

    def test_no_line(self, extractor: StyleExtractor, fragment) -> None:
        """Test shapes without a line have no outline."""
        assert extractor.extract_outline(sp_pr(fragment, "")) is None

    def test_line_no_fill(self, extractor: StyleExtractor, fragment) -> None:
        """Test an explicitly unfilled line has no outline."""
        assert extractor.extract_outline(sp_pr(fragment, '<a:ln w="25400"><a:noFill/></a:ln>')) is None

    def test_line_properties(self, extractor: StyleExtractor, fragment) -> None:
        """Test width, color, dash, cap and join."""
        outline = extractor.extract_outline(sp_pr(
            fragment,
            '<a:ln w="38100" cap="rnd"><a:solidFill><a:srgbClr val="C00000"/></a:solidFill>'
            '<a:prstDash val="lgDash"/><a:bevel/></a:ln>',
        ))
        assert outline.width == 3.0
        assert outline.color.resolve() == "#C00000"
        assert outline.dash == "long-dash"
        assert outline.cap == "round"
        assert outline.join == "bevel"

    def test_default_width(self, extractor: StyleExtractor, fragment) -> None:
        """Test a line without w is one point wide and black."""
        outline = extractor.extract_outline(sp_pr(fragment, "<a:ln/>"))
        assert outline.width == 1.0
        assert outline.color.resolve() == "#000000"
        assert outline.dash == "solid"


class TestEffectsExtraction:
    """Tests for StyleExtractor.extract_effects."""

    @pytest.fixture
    def extractor(self) -> StyleExtractor:
        """Create a StyleExtractor instance."""
        return StyleExtractor()

    def test_no_effects(self, extractor: StyleExtractor, fragment) -> None:
        """Test missing effect lists give empty effects."""
        assert extractor.extract_effects(sp_pr(fragment, "")).is_empty

    def test_outer_shadow(self, extractor: StyleExtractor, fragment) -> None:
        """Test outer shadow geometry and alpha."""
        effects = extractor.extract_effects(sp_pr(
            fragment,
            '<a:effectLst><a:outerShdw blurRad="50800" dist="38100" dir="2700000">'
            '<a:srgbClr val="000000"><a:alpha val="40000"/></a:srgbClr></a:outerShdw></a:effectLst>',
        ))
        shadow = effects.shadow
        assert shadow.type == "outer"
        assert shadow.blur_radius == 4.0
        assert shadow.distance == 3.0
        assert shadow.angle == 45.0
        assert shadow.alpha == pytest.approx(0.4)

    def test_glow_and_soft_edge(self, extractor: StyleExtractor, fragment) -> None:
        """Test glow radius/color and soft edge radius."""
        effects = extractor.extract_effects(sp_pr(
            fragment,
            '<a:effectLst><a:glow rad="63500"><a:schemeClr val="accent2"/></a:glow>'
            '<a:softEdge rad="127000"/></a:effectLst>',
        ))
        assert effects.glow.radius == 5.0
        assert effects.glow.color == SchemeColor(value="accent2")
        assert effects.soft_edge == 10.0
        assert effects.shadow is None
        assert not effects.is_empty

    def test_inner_shadow(self, extractor: StyleExtractor, fragment) -> None:
        """Test inner shadows are reported when there is no outer shadow."""
        effects = extractor.extract_effects(sp_pr(
            fragment, '<a:effectLst><a:innerShdw blurRad="0" dist="0"/></a:effectLst>'
        ))
        assert effects.shadow.type == "inner"
        assert effects.shadow.alpha == 0.5


class TestPictureStyle:
    """Tests for StyleExtractor.extract_picture_style."""

    def test_plain_picture_has_no_style(self, fragment) -> None:
        """Test a picture with only a transform has no style."""
        extractor = StyleExtractor()
        assert extractor.extract_picture_style(sp_pr(fragment, '<a:prstGeom prst="rect"/>')) is None

    def test_bordered_picture_is_unfilled(self, fragment) -> None:
        """Test a picture with just a line keeps an empty fill."""
        style = StyleExtractor().extract_picture_style(sp_pr(
            fragment, '<a:ln w="12700"><a:solidFill><a:srgbClr val="FF0000"/></a:solidFill></a:ln>'
        ))
        assert style.fill == NoFill()
        assert style.outline.color.resolve() == "#FF0000"


class TestBackgroundExtraction:
    """Tests for StyleExtractor.extract_background."""

    @pytest.fixture
    def extractor(self) -> StyleExtractor:
        """Create a StyleExtractor instance."""
        return StyleExtractor()

    def test_no_background_inherits(self, extractor: StyleExtractor, fragment, builder) -> None:
        """Test slides without p:bg inherit with a white fill."""
        slide = fragment(builder.slide().split("?>", 1)[1])
        background = extractor.extract_background(slide)
        assert background.inherit
        assert background.fill.color.resolve() == "#FFFFFF"

    def test_explicit_background(self, extractor: StyleExtractor, fragment, builder) -> None:
        """Test bgPr fills are used as-is."""
        slide = fragment(builder.slide(
            background='<p:bg><p:bgPr><a:solidFill><a:srgbClr val="1F2937"/></a:solidFill>'
                       '<a:effectLst/></p:bgPr></p:bg>'
        ).split("?>", 1)[1])
        background = extractor.extract_background(slide)
        assert not background.inherit
        assert background.fill == SolidFill(color=RGBColor(value="#1F2937"))

    def test_background_reference(self, extractor: StyleExtractor, fragment, builder) -> None:
        """Test bgRef color overrides become solid fills."""
        slide = fragment(builder.slide(
            background='<p:bg><p:bgRef idx="1001"><a:schemeClr val="bg2"/></p:bgRef></p:bg>'
        ).split("?>", 1)[1])
        background = extractor.extract_background(slide)
        assert background.fill.color.resolve() == "#E7E6E6"
