"""Parse OPC relationship parts and resolve their targets.

Every part in the package may have a sibling ``_rels/<name>.rels`` part
mapping relationship ids (``rId3``) to target parts. Targets are relative
to the directory of the *source* part, so ``../media/image1.png`` from
``ppt/slides/slide1.xml`` resolves to ``ppt/media/image1.png``.
"""

import logging
import posixpath
from typing import Any, Iterator, Optional, Union

from lxml import etree
from pptx.opc.constants import RELATIONSHIP_TYPE as RT
from pydantic import BaseModel, ConfigDict

from pptxscene.parser.errors import MissingRelationship

logger = logging.getLogger(__name__)


NAMESPACES = {
    "rel": "http://schemas.openxmlformats.org/package/2006/relationships",
}

# Relationship types mapped to a short kind
RELATIONSHIP_KINDS = {
    RT.IMAGE: "image",
    RT.CHART: "chart",
    RT.DIAGRAM_DATA: "diagram",
    RT.DIAGRAM_LAYOUT: "diagram",
    RT.DIAGRAM_QUICK_STYLE: "diagram",
    RT.DIAGRAM_COLORS: "diagram",
    RT.HYPERLINK: "hyperlink",
    RT.MEDIA: "media",
    RT.VIDEO: "video",
    RT.AUDIO: "audio",
    RT.OLE_OBJECT: "ole",
    RT.PACKAGE: "embedding",
    RT.THEME: "theme",
    RT.SLIDE: "slide",
    RT.SLIDE_LAYOUT: "layout",
    RT.SLIDE_MASTER: "master",
    RT.NOTES_SLIDE: "notes",
}

_PARSER = etree.XMLParser(recover=True, resolve_entities=False)


class Relationship(BaseModel):
    """A single ``<Relationship>`` entry."""

    model_config = ConfigDict(frozen=True)

    id: str
    type: str = ""
    target: str
    external: bool = False
    resolved: Optional[str] = None

    @property
    def kind(self) -> str:
        """Short relationship kind, e.g. 'image' or 'chart'."""
        return RELATIONSHIP_KINDS.get(self.type, "other")


def resolve_relationship_target(target: str, base_dir: str) -> str:
    """Resolve a relationship target against the source part's directory.

    Args:
        target: Target as written, e.g. '../media/image1.png' or '/ppt/theme/theme1.xml'.
        base_dir: Directory of the source part, e.g. 'ppt/slides'.

    Returns:
        Archive entry name without a leading slash.

    Examples:
        >>> resolve_relationship_target("../media/image1.png", "ppt/slides")
        'ppt/media/image1.png'
        >>> resolve_relationship_target("/ppt/media/a.png", "ppt/slides")
        'ppt/media/a.png'
    """
    if target.startswith("/"):
        return target.lstrip("/")

    segments = [s for s in base_dir.strip("/").split("/") if s]
    for segment in target.split("/"):
        if segment == "..":
            if segments:
                segments.pop()
        elif segment in ("", "."):
            continue
        else:
            segments.append(segment)
    return "/".join(segments)


def rels_path_for(part_name: str) -> str:
    """Relationship part name for a part.

    Example: 'ppt/slides/slide1.xml' -> 'ppt/slides/_rels/slide1.xml.rels'
    """
    directory, name = posixpath.split(part_name.lstrip("/"))
    return posixpath.join(directory, "_rels", f"{name}.rels")


def part_dir(part_name: str) -> str:
    """Directory portion of a part name."""
    return posixpath.dirname(part_name.lstrip("/"))


def _relationship_elements(xml: Union[bytes, str, Any]) -> list[Any]:
    if xml is None:
        return []
    if isinstance(xml, (bytes, str)):
        if isinstance(xml, str):
            xml = xml.encode("utf-8")
        try:
            root = etree.fromstring(xml, _PARSER) if xml.strip() else None
        except etree.XMLSyntaxError:
            logger.warning("Unreadable relationship part ignored")
            return []
    else:
        root = xml
    if root is None:
        return []
    return root.findall("rel:Relationship", NAMESPACES)


def parse_relationships(xml: Union[bytes, str, Any]) -> dict[str, str]:
    """Map relationship ids to their raw targets.

    Entries missing an Id or Target are ignored.

    Args:
        xml: Relationship part content, or an already parsed root element.

    Returns:
        Dict of id to target as written.
    """
    mapping: dict[str, str] = {}
    for rel in _relationship_elements(xml):
        rid = rel.get("Id")
        target = rel.get("Target")
        if rid and target:
            mapping[rid] = target
    return mapping


class RelationshipTable:
    """Relationships of a single source part, with resolved targets."""

    def __init__(self, relationships: Optional[dict[str, Relationship]] = None, base_dir: str = ""):
        self._relationships = relationships or {}
        self.base_dir = base_dir

    @classmethod
    def from_xml(cls, xml: Union[bytes, str, Any], base_dir: str) -> "RelationshipTable":
        """Build a table from a relationship part.

        Args:
            xml: Relationship part content or parsed root element.
            base_dir: Directory of the source part the targets are relative to.
        """
        relationships: dict[str, Relationship] = {}
        for rel in _relationship_elements(xml):
            rid = rel.get("Id")
            target = rel.get("Target")
            if not rid or not target:
                logger.debug(f"Ignoring relationship without Id/Target in {base_dir}")
                continue
            external = rel.get("TargetMode") == "External"
            relationships[rid] = Relationship(
                id=rid,
                type=rel.get("Type", ""),
                target=target,
                external=external,
                resolved=None if external else resolve_relationship_target(target, base_dir),
            )
        return cls(relationships, base_dir)

    def get(self, rid: Optional[str]) -> Optional[Relationship]:
        if rid is None:
            return None
        return self._relationships.get(rid)

    def target(self, rid: Optional[str]) -> str:
        """Resolved target of a relationship.

        External targets are returned as written.

        Raises:
            MissingRelationship: If the id is unknown.
        """
        rel = self.get(rid)
        if rel is None:
            raise MissingRelationship(f"Relationship {rid!r} not found", part=self.base_dir)
        return rel.target if rel.external else rel.resolved

    def first_of_type(self, rel_type: str) -> Optional[Relationship]:
        """First relationship with the given type URI."""
        for rel in self._relationships.values():
            if rel.type == rel_type:
                return rel
        return None

    def of_kind(self, kind: str) -> list[Relationship]:
        return [rel for rel in self._relationships.values() if rel.kind == kind]

    def __contains__(self, rid: object) -> bool:
        return rid in self._relationships

    def __iter__(self) -> Iterator[Relationship]:
        return iter(self._relationships.values())

    def __len__(self) -> int:
        return len(self._relationships)
