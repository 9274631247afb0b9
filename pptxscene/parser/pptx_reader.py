"""High-level PPTX reading and scene reconstruction."""

import logging
import posixpath
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Any, Iterable, Optional

from pptx.opc.constants import RELATIONSHIP_TYPE as RT

from pptxscene.config import Settings, get_settings
from pptxscene.dsl.schema import (
    Diagnostic,
    Paragraph,
    Presentation,
    RGBColor,
    ShapeElement,
    ShapeStyle,
    Size,
    Slide,
    SolidFill,
    TextBody,
    TextElement,
    TextRun,
    Theme,
)
from pptxscene.engine.units import (
    DEFAULT_SLIDE_HEIGHT_EMU,
    DEFAULT_SLIDE_WIDTH_EMU,
    calculate_scale_factor,
    emu_to_pixels,
)
from pptxscene.parser.errors import ExtractionFailed, MalformedPackage, MissingPart, PackageError
from pptxscene.parser.image_extractor import ImageExtractor
from pptxscene.parser.package import PRESENTATION_PART, Package, PackageSource
from pptxscene.parser.shape_extractor import ShapeExtractor, SlideContext, empty_slide_placeholder
from pptxscene.parser.style_extractor import StyleExtractor
from pptxscene.parser.text_extractor import TextExtractor
from pptxscene.parser.theme_parser import ThemeParser

logger = logging.getLogger(__name__)


# XML namespaces for Office Open XML
NAMESPACES = {
    "a": "http://schemas.openxmlformats.org/drawingml/2006/main",
    "p": "http://schemas.openxmlformats.org/presentationml/2006/main",
}

DEFAULT_THEME_PART = "ppt/theme/theme1.xml"


class PPTXReader:
    """Reads PPTX packages and rebuilds their scene graphs."""

    def __init__(self, settings: Optional[Settings] = None) -> None:
        """Initialize the PPTX reader."""
        self.settings = settings or get_settings()
        self.theme_parser = ThemeParser()
        self.style_extractor = StyleExtractor()
        self.text_extractor = TextExtractor(self.style_extractor.color_parser)

    def read(self, source: PackageSource) -> Presentation:
        """Read a PPTX package and extract scene graphs for all slides.

        Missing parts, relationships and media are absorbed and recorded as
        diagnostics; only an unreadable package raises.

        Args:
            source: Path to a PPTX file, its bytes, or a binary stream.

        Returns:
            Presentation with every slide, ordered by slide number.

        Raises:
            MalformedPackage: If the package cannot be opened or is not a
                presentation.
        """
        with Package.open(source) as package:
            return self._read_package(package)

    def read_slide(self, source: PackageSource, slide_number: int = 1) -> Slide:
        """Read a specific slide from a PPTX package.

        Args:
            source: Path to PPTX file, bytes, or file-like object.
            slide_number: 1-based position in slide order.

        Returns:
            Slide at that position.

        Raises:
            IndexError: If slide_number is out of range.
        """
        slides = self.read(source).slides
        if slide_number < 1 or slide_number > len(slides):
            raise IndexError(f"Slide {slide_number} not found. File has {len(slides)} slides.")
        return slides[slide_number - 1]

    def read_many(self, sources: Iterable[PackageSource]) -> list[Presentation]:
        """Read several packages; a package that fails does not abort the batch.

        Each failing package yields an error-flagged Presentation holding a
        single error slide.
        """
        results: list[Presentation] = []
        for index, source in enumerate(sources):
            name = _source_name(source) or f"source-{index + 1}"
            try:
                presentation = self.read(source)
                results.append(presentation.model_copy(update={"source_name": name}))
            except MalformedPackage as e:
                logger.warning(f"Failed to read {name}: {e.message}")
                results.append(self._error_presentation(name, e))
            except Exception as e:
                logger.warning(f"Unexpected error reading {name}: {e}")
                error = ExtractionFailed(f"Failed to read package: {e}", part=name)
                results.append(self._error_presentation(name, error))
        return results

    def _read_package(self, package: Package) -> Presentation:
        diagnostics: list[Diagnostic] = []

        slide_parts = package.slide_parts()
        if not package.has(PRESENTATION_PART) and not slide_parts:
            raise MalformedPackage("Package contains no presentation part or slides")

        width, height = self._extract_slide_size(package, diagnostics)
        scale_factor = calculate_scale_factor(width, self.settings.render_width)
        theme = self._extract_theme(package, diagnostics)
        render_size = Size(
            width=emu_to_pixels(width, scale_factor),
            height=emu_to_pixels(height, scale_factor),
        )

        # Relationship tables are cached before slides are processed
        for _, part_name in slide_parts:
            package.relationships(part_name)

        shape_extractor = ShapeExtractor(
            ImageExtractor(package, self.settings.media_search_dirs),
            style_extractor=self.style_extractor,
            text_extractor=self.text_extractor,
        )

        def extract(item: tuple[int, str]) -> Slide:
            number, part_name = item
            try:
                return self._extract_slide(
                    package, shape_extractor, number, part_name, theme,
                    scale_factor, width, height, render_size,
                )
            except Exception as e:
                logger.warning(f"Slide {part_name} failed, using error slide: {e}")
                error = ExtractionFailed(f"Failed to extract slide: {e}", part=part_name)
                return error_slide(posixpath.basename(part_name), number, render_size, error)

        if self.settings.max_workers > 1 and len(slide_parts) > 1:
            with ThreadPoolExecutor(max_workers=self.settings.max_workers) as executor:
                slides = list(executor.map(extract, slide_parts))
        else:
            slides = [extract(item) for item in slide_parts]

        logger.info(
            f"Read {len(slides)} slides from {package.name or '<stream>'} "
            f"at scale {scale_factor:.4f}"
        )
        return Presentation(
            slides=slides,
            theme=theme,
            size=render_size,
            native_size=Size(width=width, height=height),
            scale_factor=scale_factor,
            diagnostics=diagnostics,
            source_name=package.name,
        )

    def _extract_slide(
        self,
        package: Package,
        shape_extractor: ShapeExtractor,
        number: int,
        part_name: str,
        theme: Theme,
        scale_factor: float,
        width: int,
        height: int,
        render_size: Size,
    ) -> Slide:
        """Extract a single slide part to a Slide."""
        relationships = package.relationships(part_name)
        context = SlideContext(
            part_name,
            relationships,
            theme=theme,
            scale_factor=scale_factor,
            slide_width=width,
            slide_height=height,
            group_child_space=self.settings.group_child_space,
        )

        try:
            root = package.read_xml(part_name)
        except MissingPart as e:
            logger.warning(f"Slide {part_name} unreadable: {e.message}")
            context.record(e)
            root = None

        elements = []
        if root is not None:
            sp_tree = root.find("p:cSld/p:spTree", NAMESPACES)
            elements = shape_extractor.extract_elements(sp_tree, context)

        if not elements:
            logger.info(f"No elements found in {part_name}, adding placeholder")
            elements = [empty_slide_placeholder(self.settings.placeholder_text)]

        return Slide(
            id=posixpath.basename(part_name),
            number=number,
            elements=elements,
            background=self.style_extractor.extract_background(root, relationships),
            size=render_size,
            notes=self._extract_notes(package, part_name, context),
            diagnostics=context.diagnostics,
        )

    def _extract_slide_size(self, package: Package, diagnostics: list[Diagnostic]) -> tuple[int, int]:
        """Declared slide size in EMUs, falling back to 16:9 widescreen.

        XML structure example:
            <p:presentation>
                <p:sldSz cx="12192000" cy="6858000"/>
            </p:presentation>
        """
        try:
            root = package.read_xml(PRESENTATION_PART)
        except MissingPart as e:
            logger.warning(f"Presentation part unusable, using default slide size: {e.message}")
            diagnostics.append(_diagnostic(e))
            return DEFAULT_SLIDE_WIDTH_EMU, DEFAULT_SLIDE_HEIGHT_EMU

        sld_sz = root.find("p:sldSz", NAMESPACES)
        if sld_sz is None:
            return DEFAULT_SLIDE_WIDTH_EMU, DEFAULT_SLIDE_HEIGHT_EMU

        try:
            width = int(sld_sz.get("cx", "0"))
            height = int(sld_sz.get("cy", "0"))
        except ValueError:
            width = height = 0

        if width <= 0 or height <= 0:
            logger.warning(f"Invalid slide size {sld_sz.get('cx')}x{sld_sz.get('cy')}, using default")
            diagnostics.append(Diagnostic(
                kind="MalformedPackage",
                message="Invalid slide size, using 16:9 default",
                part=PRESENTATION_PART,
            ))
            return DEFAULT_SLIDE_WIDTH_EMU, DEFAULT_SLIDE_HEIGHT_EMU

        return width, height

    def _extract_theme(self, package: Package, diagnostics: list[Diagnostic]) -> Theme:
        """Parse the presentation theme once.

        The theme relationship of the presentation part wins, then
        ``ppt/theme/theme1.xml``, then the first theme part.
        """
        candidates = []
        rel = package.relationships(PRESENTATION_PART).first_of_type(RT.THEME)
        if rel is not None and not rel.external:
            candidates.append(rel.resolved)
        candidates.append(DEFAULT_THEME_PART)
        candidates.extend(package.theme_parts())

        for part_name in candidates:
            if not package.has(part_name):
                continue
            try:
                return self.theme_parser.parse(package.read_xml(part_name))
            except MissingPart as e:
                diagnostics.append(_diagnostic(e))

        logger.info("Package has no theme part, using default theme")
        diagnostics.append(Diagnostic(
            kind="MissingPart",
            message="No theme part found, using default theme",
            part=DEFAULT_THEME_PART,
        ))
        return Theme()

    def _extract_notes(self, package: Package, part_name: str, context: SlideContext) -> Optional[str]:
        """Extract speaker notes from the slide's notes part.

        Returns:
            Speaker notes text or None.
        """
        notes_rels = package.relationships(part_name).of_kind("notes")
        rel = notes_rels[0] if notes_rels else None
        if rel is None or rel.external or not package.has(rel.resolved):
            return None

        try:
            root = package.read_xml(rel.resolved)
        except MissingPart as e:
            context.record(e)
            return None

        for sp in root.iterfind(".//p:sp", NAMESPACES):
            ph = sp.find("p:nvSpPr/p:nvPr/p:ph", NAMESPACES)
            if ph is None or ph.get("type") != "body":
                continue
            body = self.text_extractor.extract(sp.find("p:txBody", NAMESPACES))
            return body.text if body is not None else None
        return None

    def _error_presentation(self, name: str, error: PackageError) -> Presentation:
        """Presentation standing in for a package that could not be read."""
        scale_factor = calculate_scale_factor(DEFAULT_SLIDE_WIDTH_EMU, self.settings.render_width)
        size = Size(
            width=emu_to_pixels(DEFAULT_SLIDE_WIDTH_EMU, scale_factor),
            height=emu_to_pixels(DEFAULT_SLIDE_HEIGHT_EMU, scale_factor),
        )
        return Presentation(
            slides=[error_slide("error", 1, size, error)],
            size=size,
            native_size=Size(width=DEFAULT_SLIDE_WIDTH_EMU, height=DEFAULT_SLIDE_HEIGHT_EMU),
            scale_factor=scale_factor,
            diagnostics=[_diagnostic(error)],
            source_name=name,
            error=error.message,
        )


def error_slide(slide_id: str, number: int, size: Size, error: PackageError) -> Slide:
    """Slide standing in for content that could not be extracted."""
    return Slide(
        id=slide_id,
        number=number,
        elements=error_slide_elements(),
        size=size,
        diagnostics=[_diagnostic(error)],
    )


def error_slide_elements() -> list[Any]:
    """Elements of the slide shown in place of an unreadable package."""
    red = RGBColor(value="#DC2626")
    return [
        TextElement(
            id="error-title",
            x=50, y=50, width=600, height=60, z_index=1,
            body=TextBody(paragraphs=[Paragraph(runs=[
                TextRun(text="Error Processing Slide", size=32, bold=True, color=red),
            ])]),
        ),
        TextElement(
            id="error-description",
            x=50, y=120, width=600, height=100, z_index=2,
            body=TextBody(paragraphs=[Paragraph(runs=[
                TextRun(
                    text="There was an error processing this slide. "
                         "The content could not be properly extracted.",
                    size=16,
                    color=RGBColor(value="#666666"),
                ),
            ])]),
        ),
        ShapeElement(
            id="error-rule",
            x=50, y=200, width=150, height=8, z_index=3,
            style=ShapeStyle(fill=SolidFill(color=red)),
        ),
    ]


def _diagnostic(error: PackageError) -> Diagnostic:
    return Diagnostic(kind=error.kind, message=error.message, part=error.part)


def _source_name(source: Any) -> Optional[str]:
    if isinstance(source, (str, Path)):
        return Path(source).name
    return getattr(source, "name", None)
