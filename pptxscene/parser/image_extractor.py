"""Resolve picture media from the package.

Pictures point at their media through a relationship id on ``<a:blip>``.
Targets that do not match an archive entry verbatim are looked up by file
name in the usual media folders, then by a case-insensitive suffix match.
Anything that still cannot be found is replaced by a placeholder SVG.
"""

import logging
import posixpath
from typing import Any, Optional
from xml.etree import ElementTree as ET
from xml.etree.ElementTree import Element, SubElement

from pptxscene.config import get_settings
from pptxscene.dsl.schema import CropRect, ImagePayload
from pptxscene.engine.units import percentage
from pptxscene.parser.errors import MissingRelationship, PackageError, UnresolvedMedia
from pptxscene.parser.package import Package
from pptxscene.parser.relationship_parser import RelationshipTable

logger = logging.getLogger(__name__)


# XML namespaces for Office Open XML
NAMESPACES = {
    "a": "http://schemas.openxmlformats.org/drawingml/2006/main",
    "r": "http://schemas.openxmlformats.org/officeDocument/2006/relationships",
}

R_EMBED = f"{{{NAMESPACES['r']}}}embed"

MIME_TYPES = {
    "png": "image/png",
    "gif": "image/gif",
    "svg": "image/svg+xml",
    "wmf": "image/wmf",
    "emf": "image/emf",
}
DEFAULT_MIME_TYPE = "image/jpeg"

PLACEHOLDER_WIDTH = 200
PLACEHOLDER_HEIGHT = 150
PLACEHOLDER_NAME_LENGTH = 20


def mime_type_for(path: str) -> str:
    """MIME type from a file extension; unknown extensions are JPEG."""
    extension = path.rsplit(".", 1)[-1].lower() if "." in path else ""
    return MIME_TYPES.get(extension, DEFAULT_MIME_TYPE)


def placeholder_svg(name: str) -> bytes:
    """Render the "Image not found" placeholder, naming the element."""
    label = name[:PLACEHOLDER_NAME_LENGTH] + ("..." if len(name) > PLACEHOLDER_NAME_LENGTH else "")

    svg = Element('svg', {
        'xmlns': 'http://www.w3.org/2000/svg',
        'width': str(PLACEHOLDER_WIDTH),
        'height': str(PLACEHOLDER_HEIGHT),
        'viewBox': f'0 0 {PLACEHOLDER_WIDTH} {PLACEHOLDER_HEIGHT}',
    })
    SubElement(svg, 'rect', {
        'width': str(PLACEHOLDER_WIDTH),
        'height': str(PLACEHOLDER_HEIGHT),
        'fill': '#f0f0f0',
        'stroke': '#ccc',
        'stroke-width': '2',
    })
    title = SubElement(svg, 'text', {
        'x': '50%', 'y': '50%',
        'font-family': 'Arial', 'font-size': '14',
        'text-anchor': 'middle', 'fill': '#666',
    })
    title.text = label
    caption = SubElement(svg, 'text', {
        'x': '50%', 'y': '70%',
        'font-family': 'Arial', 'font-size': '12',
        'text-anchor': 'middle', 'fill': '#999',
    })
    caption.text = 'Image not found'

    return ET.tostring(svg, encoding='utf-8')


def placeholder_payload(name: str) -> ImagePayload:
    return ImagePayload(data=placeholder_svg(name), mime_type=MIME_TYPES["svg"])


class ImageExtractor:
    """Loads picture payloads and reads crop/brightness settings."""

    def __init__(self, package: Package, search_dirs: Optional[list[str]] = None) -> None:
        self.package = package
        self.search_dirs = search_dirs if search_dirs is not None else get_settings().media_search_dirs

    def load(self, rid: Optional[str], relationships: RelationshipTable) -> ImagePayload:
        """Load the media a relationship points at.

        Raises:
            MissingRelationship: If the id is absent from the relationships.
            UnresolvedMedia: If the target is external or matches no entry.
        """
        if not rid:
            raise MissingRelationship("Picture has no r:embed reference", part=relationships.base_dir)

        rel = relationships.get(rid)
        if rel is None:
            raise MissingRelationship(f"Relationship {rid!r} not found", part=relationships.base_dir)
        if rel.external:
            raise UnresolvedMedia(f"External media is not embedded: {rel.target}", part=rel.target)

        entry = self.find_media(rel.resolved)
        if entry is None:
            raise UnresolvedMedia(f"Media not found in package: {rel.resolved}", part=rel.resolved)

        return ImagePayload(
            data=self.package.read_bytes(entry),
            mime_type=mime_type_for(entry),
            source_path=entry,
        )

    def resolve(
        self,
        rid: Optional[str],
        relationships: RelationshipTable,
        name: str,
    ) -> tuple[ImagePayload, Optional[PackageError]]:
        """Load media, substituting a placeholder on failure.

        Returns:
            ``(payload, error)``; error is None when the real media was loaded.
        """
        try:
            return self.load(rid, relationships), None
        except PackageError as e:
            logger.warning(f"Using placeholder for image {name!r}: {e.message}")
            return placeholder_payload(name), e

    def find_media(self, path: str) -> Optional[str]:
        """Locate an archive entry for a media path.

        Tries the path verbatim (exact, then ignoring case), then the bare
        file name under each search directory, then any entry ending with the
        file name (case-insensitive).
        """
        if self.package.has(path):
            return path.lstrip("/")
        entry = self.package.find_entry(path)
        if entry is not None:
            return entry

        file_name = posixpath.basename(path)
        if not file_name:
            return None

        for prefix in self.search_dirs:
            # Bare-name lookup at the root only applies to flat paths
            if prefix == "" and "/" in path:
                continue
            candidate = prefix + file_name
            if self.package.has(candidate):
                logger.debug(f"Found {path} at alternative path {candidate}")
                return candidate

        lowered = file_name.lower()
        for entry in self.package.names:
            if entry.lower().endswith(lowered):
                logger.debug(f"Found {path} by case-insensitive match {entry}")
                return entry

        return None

    def extract_crop(self, blip_fill: Any) -> Optional[CropRect]:
        """Crop insets from ``<a:srcRect l="10000" .../>`` as fractions."""
        if blip_fill is None:
            return None
        src_rect = blip_fill.find("a:srcRect", NAMESPACES)
        if src_rect is None:
            return None

        values = {}
        for attr, field in (("l", "left"), ("r", "right"), ("t", "top"), ("b", "bottom")):
            try:
                values[field] = percentage(int(src_rect.get(attr, "0")))
            except ValueError:
                values[field] = 0.0
        if not any(values.values()):
            return None
        return CropRect(**values)

    def extract_adjustments(self, blip_fill: Any) -> tuple[Optional[float], Optional[float]]:
        """Brightness and contrast of a picture.

        ``<a:lum bright contrast>`` is used when present; otherwise lumMod
        maps to brightness (``val - 1``) and lumOff to contrast.
        """
        blip = blip_fill.find("a:blip", NAMESPACES) if blip_fill is not None else None
        if blip is None:
            return None, None

        lum = blip.find("a:lum", NAMESPACES)
        if lum is not None:
            try:
                brightness = percentage(int(lum.get("bright"))) if lum.get("bright") else None
                contrast = percentage(int(lum.get("contrast"))) if lum.get("contrast") else None
            except ValueError:
                return None, None
            return brightness, contrast

        brightness = contrast = None
        lum_mod = blip.find(".//a:lumMod", NAMESPACES)
        lum_off = blip.find(".//a:lumOff", NAMESPACES)
        try:
            if lum_mod is not None:
                brightness = percentage(int(lum_mod.get("val", "100000"))) - 1
            if lum_off is not None:
                contrast = percentage(int(lum_off.get("val", "0")))
        except ValueError:
            return None, None
        return brightness, contrast
