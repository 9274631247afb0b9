"""Read-only access to the parts of an OOXML presentation archive."""

import io
import logging
import re
import threading
import zipfile
from pathlib import Path
from typing import Any, BinaryIO, Optional, Union

from lxml import etree

from pptxscene.parser.errors import MalformedPackage, MissingPart
from pptxscene.parser.relationship_parser import RelationshipTable, part_dir, rels_path_for

logger = logging.getLogger(__name__)


PRESENTATION_PART = "ppt/presentation.xml"

SLIDE_PART_PATTERN = re.compile(r"^ppt/slides/slide(\d+)\.xml$")
THEME_PART_PATTERN = re.compile(r"^ppt/theme/theme(\d+)\.xml$")

_PARSER = etree.XMLParser(recover=True, resolve_entities=False, huge_tree=True)

PackageSource = Union[str, Path, bytes, BinaryIO]


def parse_xml(data: Union[bytes, str]) -> Optional[Any]:
    """Parse XML leniently.

    Returns:
        Root element, or None when nothing could be recovered.
    """
    if isinstance(data, str):
        data = data.encode("utf-8")
    if not data or not data.strip():
        return None
    try:
        return etree.fromstring(data, _PARSER)
    except etree.XMLSyntaxError:
        return None


class Package:
    """An opened presentation archive.

    Reads are safe from several threads: zipfile serialises access to the
    shared file handle and the relationship cache is guarded by a lock.
    """

    def __init__(self, archive: zipfile.ZipFile, name: Optional[str] = None):
        self._archive = archive
        self.name = name
        self._names = [info.filename for info in archive.infolist() if not info.is_dir()]
        self._name_set = set(self._names)
        self._rels_cache: dict[str, RelationshipTable] = {}
        self._lock = threading.Lock()

    @classmethod
    def open(cls, source: PackageSource) -> "Package":
        """Open an archive from a path, bytes, or a binary stream.

        Raises:
            MalformedPackage: If the source is not a readable ZIP archive.
        """
        name = None
        if isinstance(source, (bytes, bytearray)):
            source = io.BytesIO(source)
        elif isinstance(source, (str, Path)):
            name = Path(source).name
        else:
            name = getattr(source, "name", None)

        try:
            archive = zipfile.ZipFile(source)
        except (zipfile.BadZipFile, OSError, ValueError) as e:
            raise MalformedPackage(f"Cannot open package: {e}") from e

        logger.info(f"Opened package {name or '<stream>'} with {len(archive.namelist())} entries")
        return cls(archive, name)

    def close(self) -> None:
        self._archive.close()

    def __enter__(self) -> "Package":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    @property
    def names(self) -> list[str]:
        """All file entry names, in archive order."""
        return list(self._names)

    def has(self, name: str) -> bool:
        return name.lstrip("/") in self._name_set

    def read_bytes(self, name: str) -> bytes:
        """Raw bytes of an entry.

        Raises:
            MissingPart: If there is no such entry or it cannot be read.
        """
        name = name.lstrip("/")
        if name not in self._name_set:
            raise MissingPart(f"Part not found: {name}", part=name)
        try:
            return self._archive.read(name)
        except (zipfile.BadZipFile, OSError, RuntimeError) as e:
            raise MissingPart(f"Part unreadable: {name} ({e})", part=name) from e

    def read_xml(self, name: str) -> Any:
        """Parsed root element of an XML part.

        Raises:
            MissingPart: If the part is absent or nothing could be recovered from it.
        """
        root = parse_xml(self.read_bytes(name))
        if root is None:
            logger.warning(f"Unrecoverable XML in {name}")
            raise MissingPart(f"Part is not well-formed XML: {name}", part=name)
        return root

    def relationships(self, part_name: str) -> RelationshipTable:
        """Relationship table of a part; empty when it has none."""
        part_name = part_name.lstrip("/")
        with self._lock:
            cached = self._rels_cache.get(part_name)
        if cached is not None:
            return cached

        rels_name = rels_path_for(part_name)
        root = None
        if rels_name in self._name_set:
            try:
                root = parse_xml(self._archive.read(rels_name))
            except (zipfile.BadZipFile, OSError, RuntimeError) as e:
                logger.warning(f"Cannot read {rels_name}: {e}")
        table = RelationshipTable.from_xml(root, part_dir(part_name))

        with self._lock:
            self._rels_cache[part_name] = table
        return table

    def find_entry(self, path: str) -> Optional[str]:
        """Case-insensitive exact match for an entry name."""
        lowered = path.lstrip("/").lower()
        for name in self._names:
            if name.lower() == lowered:
                return name
        return None

    def slide_parts(self) -> list[tuple[int, str]]:
        """``(number, part name)`` for every slide part, ordered numerically."""
        slides = []
        for name in self._names:
            match = SLIDE_PART_PATTERN.match(name)
            if match:
                slides.append((int(match.group(1)), name))
        return sorted(slides)

    def theme_parts(self) -> list[str]:
        """Theme part names ordered by their embedded index."""
        themes = []
        for name in self._names:
            match = THEME_PART_PATTERN.match(name)
            if match:
                themes.append((int(match.group(1)), name))
        return [name for _, name in sorted(themes)]
