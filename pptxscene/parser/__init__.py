"""PPTX Parser module - rebuilds a positioned scene graph from PowerPoint packages.

This module provides reconstruction of presentation packages into a
structured scene graph including:
- Relationship resolution across package parts
- Theme color and font schemes
- Shapes, pictures and nested groups in pixel space
- Fill, outline and effect styles with theme-aware colors
- Rich text with paragraph and run formatting
- Embedded media with placeholder fallback
"""

from pptxscene.parser.color_parser import ColorParser
from pptxscene.parser.errors import (
    ExtractionFailed,
    MalformedPackage,
    MissingPart,
    MissingRelationship,
    PackageError,
    UnresolvedMedia,
    UnsupportedNodeKind,
)
from pptxscene.parser.image_extractor import ImageExtractor
from pptxscene.parser.package import Package
from pptxscene.parser.pptx_reader import PPTXReader
from pptxscene.parser.relationship_parser import (
    RelationshipTable,
    parse_relationships,
    resolve_relationship_target,
)
from pptxscene.parser.shape_extractor import ShapeExtractor, SlideContext
from pptxscene.parser.style_extractor import StyleExtractor
from pptxscene.parser.text_extractor import TextExtractor
from pptxscene.parser.theme_parser import ThemeParser
from pptxscene.parser.transform_parser import TransformParser

__all__ = [
    "ColorParser",
    "ExtractionFailed",
    "ImageExtractor",
    "MalformedPackage",
    "MissingPart",
    "MissingRelationship",
    "Package",
    "PackageError",
    "PPTXReader",
    "RelationshipTable",
    "ShapeExtractor",
    "SlideContext",
    "StyleExtractor",
    "TextExtractor",
    "ThemeParser",
    "TransformParser",
    "UnresolvedMedia",
    "UnsupportedNodeKind",
    "parse_relationships",
    "resolve_relationship_target",
]
