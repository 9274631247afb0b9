"""Extract the element tree of a slide from its shape tree XML."""

import logging
from typing import Any, Optional

from lxml import etree

from pptxscene.config import get_settings
from pptxscene.dsl.schema import (
    Diagnostic,
    Element,
    GroupElement,
    ImageElement,
    Paragraph,
    PlaceholderRef,
    RGBColor,
    ShapeElement,
    TextBody,
    TextElement,
    TextRun,
    Theme,
)
from pptxscene.engine.units import (
    DEFAULT_SLIDE_HEIGHT_EMU,
    DEFAULT_SLIDE_WIDTH_EMU,
    emu_to_pixels,
)
from pptxscene.parser.errors import ExtractionFailed, PackageError, UnsupportedNodeKind
from pptxscene.parser.image_extractor import ImageExtractor
from pptxscene.parser.relationship_parser import RelationshipTable
from pptxscene.parser.style_extractor import StyleExtractor
from pptxscene.parser.text_extractor import TextExtractor
from pptxscene.parser.transform_parser import Transform, TransformParser

logger = logging.getLogger(__name__)


# XML namespaces for Office Open XML
NAMESPACES = {
    "a": "http://schemas.openxmlformats.org/drawingml/2006/main",
    "p": "http://schemas.openxmlformats.org/presentationml/2006/main",
    "r": "http://schemas.openxmlformats.org/officeDocument/2006/relationships",
    "mc": "http://schemas.openxmlformats.org/markup-compatibility/2006",
}

P_NS = f"{{{NAMESPACES['p']}}}"
MC_NS = f"{{{NAMESPACES['mc']}}}"
R_EMBED = f"{{{NAMESPACES['r']}}}embed"

# Non-visual and property children of a shape tree or group
STRUCTURAL_TAGS = {
    f"{P_NS}nvGrpSpPr",
    f"{P_NS}grpSpPr",
    f"{P_NS}extLst",
}


class SlideContext:
    """Per-slide state shared by the extractors while one slide is built."""

    def __init__(
        self,
        part_name: str,
        relationships: RelationshipTable,
        theme: Optional[Theme] = None,
        scale_factor: float = 1.0,
        slide_width: int = DEFAULT_SLIDE_WIDTH_EMU,
        slide_height: int = DEFAULT_SLIDE_HEIGHT_EMU,
        group_child_space: Optional[str] = None,
    ) -> None:
        self.part_name = part_name
        self.relationships = relationships
        self.theme = theme or Theme()
        self.scale_factor = scale_factor
        self.slide_width = slide_width
        self.slide_height = slide_height
        self.group_child_space = group_child_space or get_settings().group_child_space
        self.diagnostics: list[Diagnostic] = []

    def px(self, emu: float) -> float:
        return emu_to_pixels(emu, self.scale_factor)

    def record(self, error: PackageError) -> None:
        self.diagnostics.append(Diagnostic(
            kind=error.kind,
            message=error.message,
            part=error.part or self.part_name,
        ))


class GroupFrame:
    """Pixel frame of a group and the child coordinate space it maps from."""

    def __init__(self, x: float, y: float, width: float, height: float, transform: Transform) -> None:
        self.x = x
        self.y = y
        self.width = width
        self.height = height
        self.transform = transform


class ShapeExtractor:
    """Builds Element trees from ``<p:spTree>`` XML."""

    def __init__(
        self,
        image_extractor: ImageExtractor,
        style_extractor: Optional[StyleExtractor] = None,
        text_extractor: Optional[TextExtractor] = None,
        transform_parser: Optional[TransformParser] = None,
    ) -> None:
        """Initialize the shape extractor."""
        self.image_extractor = image_extractor
        self.style_extractor = style_extractor or StyleExtractor()
        self.text_extractor = text_extractor or TextExtractor(self.style_extractor.color_parser)
        self.transform_parser = transform_parser or TransformParser()

    def extract_elements(self, sp_tree: Any, context: SlideContext) -> list[Element]:
        """Extract all elements of a shape tree.

        Children are dispatched in document order and the result is
        stable-sorted by draw order (``cNvPr id``).

        Args:
            sp_tree: The ``<p:spTree>`` element.
            context: Slide context; diagnostics are appended to it.

        Returns:
            List of Element objects, groups nested.
        """
        if sp_tree is None:
            return []
        return self._extract_children(sp_tree, context, None)

    def _extract_children(
        self,
        container: Any,
        context: SlideContext,
        parent: Optional[GroupFrame],
    ) -> list[Element]:
        result: list[Element] = []
        for child in container:
            result.extend(self._dispatch(child, context, parent))
        return sorted(result, key=lambda element: element.z_index)

    def _dispatch(
        self,
        node: Any,
        context: SlideContext,
        parent: Optional[GroupFrame],
    ) -> list[Element]:
        """Build the element(s) for one shape tree child.

        A child that fails to build is skipped and recorded on the context.
        """
        if not isinstance(node.tag, str) or node.tag in STRUCTURAL_TAGS:
            return []

        tag = etree.QName(node).localname
        try:
            return self._build_node(node, tag, context, parent)
        except Exception as e:
            logger.warning(f"Skipping <{tag}> in {context.part_name}: {e}")
            context.record(ExtractionFailed(f"Failed to extract <{tag}>: {e}", context.part_name))
            return []

    def _build_node(
        self,
        node: Any,
        tag: str,
        context: SlideContext,
        parent: Optional[GroupFrame],
    ) -> list[Element]:
        logger.debug(f"Dispatching <{tag}> in {context.part_name}")

        if node.tag == f"{P_NS}sp":
            return [self._extract_shape(node, context, parent)]
        if node.tag == f"{P_NS}pic":
            return [self._extract_picture(node, context, parent)]
        if node.tag == f"{P_NS}grpSp":
            return [self._extract_group(node, context, parent)]
        if node.tag == f"{MC_NS}AlternateContent":
            # Fallback is the portable branch; a lone Choice is used as-is
            branch = node.find("mc:Fallback", NAMESPACES)
            if branch is None:
                branch = node.find("mc:Choice", NAMESPACES)
            if branch is None:
                context.record(UnsupportedNodeKind("Empty AlternateContent", context.part_name))
                return []
            elements: list[Element] = []
            for child in branch:
                elements.extend(self._dispatch(child, context, parent))
            return elements

        content = self._related_content_kind(node, context.relationships)
        label = f"{tag} ({content})" if content else tag
        logger.warning(f"Skipping unsupported <{label}> in {context.part_name}")
        context.record(UnsupportedNodeKind(f"Unsupported node kind: {label}", context.part_name))
        return []

    def _related_content_kind(self, node: Any, relationships: RelationshipTable) -> Optional[str]:
        """Kind of the first related part a node references, e.g. 'chart'."""
        for rid in node.xpath(".//@r:id | .//@r:dm | .//@r:embed", namespaces=NAMESPACES):
            rel = relationships.get(str(rid))
            if rel is not None:
                return rel.kind
        return None

    def _extract_shape(
        self,
        sp: Any,
        context: SlideContext,
        parent: Optional[GroupFrame],
    ) -> ShapeElement:
        """Extract a ``<p:sp>`` to a ShapeElement.

        XML structure example:
            <p:sp>
                <p:nvSpPr><p:cNvPr id="2" name="Rectangle 1"/>...</p:nvSpPr>
                <p:spPr>
                    <a:xfrm><a:off x="0" y="0"/><a:ext cx="914400" cy="914400"/></a:xfrm>
                    <a:prstGeom prst="rect"/>
                    <a:solidFill><a:srgbClr val="FF0000"/></a:solidFill>
                </p:spPr>
                <p:txBody>...</p:txBody>
            </p:sp>
        """
        sp_pr = sp.find("p:spPr", NAMESPACES)
        placeholder = self._extract_placeholder(sp.find("p:nvSpPr/p:nvPr/p:ph", NAMESPACES))

        shape_dict: dict[str, Any] = self._base_properties(
            sp.find("p:nvSpPr/p:cNvPr", NAMESPACES), sp, context, parent, placeholder,
        )
        shape_dict["geometry"] = self._extract_geometry(sp_pr)
        shape_dict["style"] = self.style_extractor.extract_style(sp_pr, context.relationships)
        shape_dict["text"] = self.text_extractor.extract(
            sp.find("p:txBody", NAMESPACES), context.theme, context.relationships,
        )

        return ShapeElement(**shape_dict)

    def _extract_picture(
        self,
        pic: Any,
        context: SlideContext,
        parent: Optional[GroupFrame],
    ) -> ImageElement:
        """Extract a ``<p:pic>``; unresolvable media yields a placeholder payload."""
        c_nv_pr = pic.find("p:nvPicPr/p:cNvPr", NAMESPACES)
        placeholder = self._extract_placeholder(pic.find("p:nvPicPr/p:nvPr/p:ph", NAMESPACES))
        shape_dict = self._base_properties(c_nv_pr, pic, context, parent, placeholder)
        name = shape_dict.get("name") or f"Image {shape_dict['id']}"

        blip_fill = pic.find("p:blipFill", NAMESPACES)
        blip = blip_fill.find("a:blip", NAMESPACES) if blip_fill is not None else None
        rid = blip.get(R_EMBED) if blip is not None else None

        payload, error = self.image_extractor.resolve(rid, context.relationships, name)
        if error is not None:
            context.record(error)

        brightness, contrast = self.image_extractor.extract_adjustments(blip_fill)
        shape_dict.update(
            payload=payload,
            is_placeholder=error is not None,
            crop=self.image_extractor.extract_crop(blip_fill),
            brightness=brightness,
            contrast=contrast,
            style=self.style_extractor.extract_picture_style(
                pic.find("p:spPr", NAMESPACES), context.relationships,
            ),
        )
        return ImageElement(**shape_dict)

    def _extract_group(
        self,
        grp: Any,
        context: SlideContext,
        parent: Optional[GroupFrame],
    ) -> GroupElement:
        """Extract a ``<p:grpSp>`` and its children.

        Children are positioned relative to the group: their absolute
        position is the group's absolute position plus their local one.
        """
        shape_dict = self._base_properties(
            grp.find("p:nvGrpSpPr/p:cNvPr", NAMESPACES), grp, context, parent, None,
        )
        transform = self.transform_parser.extract_transform(grp) or Transform()
        frame = GroupFrame(
            x=shape_dict["x"],
            y=shape_dict["y"],
            width=shape_dict["width"],
            height=shape_dict["height"],
            transform=transform,
        )

        children = self._extract_children(grp, context, frame)
        if not children:
            children = self._extract_descendants(grp, context, frame)

        shape_dict["children"] = children
        return GroupElement(**shape_dict)

    def _extract_descendants(
        self,
        grp: Any,
        context: SlideContext,
        frame: GroupFrame,
    ) -> list[Element]:
        """Fallback for groups whose direct children yield nothing.

        Shapes and pictures anywhere below the group are extracted directly
        in the group's coordinate space.
        """
        descendants = grp.xpath(".//p:sp | .//p:pic", namespaces=NAMESPACES)
        if not descendants:
            return []
        logger.debug(f"Group fallback found {len(descendants)} nested shapes in {context.part_name}")

        result: list[Element] = []
        for node in descendants:
            result.extend(self._dispatch(node, context, frame))
        return sorted(result, key=lambda element: element.z_index)

    def _base_properties(
        self,
        c_nv_pr: Any,
        node: Any,
        context: SlideContext,
        parent: Optional[GroupFrame],
        placeholder: Optional[PlaceholderRef],
    ) -> dict[str, Any]:
        """Identity, geometry and draw order shared by every element kind."""
        draw_order = 0
        element_id = None
        name = None
        if c_nv_pr is not None:
            element_id = c_nv_pr.get("id")
            name = c_nv_pr.get("name") or None
            try:
                draw_order = int(element_id) if element_id is not None else 0
            except ValueError:
                draw_order = 0
        if not element_id:
            element_id = f"{etree.QName(node).localname}-{node.getparent().index(node)}"

        transform = self.transform_parser.extract_transform(node)
        if transform is None:
            if placeholder is not None:
                transform = self.transform_parser.placeholder_transform(
                    placeholder.type, context.slide_width, context.slide_height,
                )
            else:
                logger.debug(f"Element {element_id} has no transform in {context.part_name}")
                transform = Transform()

        shape_dict: dict[str, Any] = {
            "id": element_id,
            "name": name,
            "rotation": transform.rotation,
            "flip_h": transform.flip_h,
            "flip_v": transform.flip_v,
            "z_index": draw_order,
            "placeholder": placeholder,
        }
        shape_dict.update(self._position(transform, context, parent))
        return shape_dict

    def _position(
        self,
        transform: Transform,
        context: SlideContext,
        parent: Optional[GroupFrame],
    ) -> dict[str, Any]:
        """Pixel frame of an element, absolute and (inside groups) local.

        In "additive" mode a child's offset is taken as-is in the group's
        space. In "mapped" mode it is mapped from the group's chOff/chExt
        child space onto the group's extent.
        """
        width = context.px(transform.cx)
        height = context.px(transform.cy)

        if parent is None:
            return {
                "x": context.px(transform.x),
                "y": context.px(transform.y),
                "width": width,
                "height": height,
            }

        local_x = context.px(transform.x)
        local_y = context.px(transform.y)

        group = parent.transform
        if context.group_child_space == "mapped":
            sx = parent.width / context.px(group.ch_cx) if group.ch_cx > 0 else 1.0
            sy = parent.height / context.px(group.ch_cy) if group.ch_cy > 0 else 1.0
            local_x = context.px(transform.x - group.ch_x) * sx
            local_y = context.px(transform.y - group.ch_y) * sy
            width *= sx
            height *= sy

        return {
            "x": parent.x + local_x,
            "y": parent.y + local_y,
            "width": width,
            "height": height,
            "local_x": local_x,
            "local_y": local_y,
        }

    def _extract_geometry(self, sp_pr: Any) -> str:
        """Preset geometry name, 'custom' for custom geometry, default 'rect'."""
        if sp_pr is None:
            return "rect"
        prst_geom = sp_pr.find("a:prstGeom", NAMESPACES)
        if prst_geom is not None and prst_geom.get("prst"):
            return prst_geom.get("prst")
        if sp_pr.find("a:custGeom", NAMESPACES) is not None:
            return "custom"
        return "rect"

    def _extract_placeholder(self, ph: Any) -> Optional[PlaceholderRef]:
        if ph is None:
            return None
        index = ph.get("idx")
        return PlaceholderRef(
            type=ph.get("type", "obj"),
            index=int(index) if index is not None and index.isdigit() else None,
        )


def empty_slide_placeholder(message: Optional[str] = None) -> TextElement:
    """The single text element shown for a slide with no extractable content."""
    text = message or get_settings().placeholder_text
    return TextElement(
        id="placeholder-1",
        name="Placeholder",
        x=50,
        y=50,
        width=400,
        height=100,
        z_index=1,
        body=TextBody(paragraphs=[
            Paragraph(runs=[TextRun(text=text, bold=True, color=RGBColor(value="#333333"))]),
        ]),
    )
