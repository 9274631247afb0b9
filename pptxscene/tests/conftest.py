"""Pytest configuration and fixtures.

Packages are assembled in memory with zipfile so each test states exactly
which parts and XML it exercises.
"""

import io
import zipfile
from typing import Optional

import pytest
from lxml import etree

from pptxscene.config import Settings
from pptxscene.parser import PPTXReader


NS_DECLS = (
    'xmlns:a="http://schemas.openxmlformats.org/drawingml/2006/main" '
    'xmlns:p="http://schemas.openxmlformats.org/presentationml/2006/main" '
    'xmlns:r="http://schemas.openxmlformats.org/officeDocument/2006/relationships" '
    'xmlns:mc="http://schemas.openxmlformats.org/markup-compatibility/2006"'
)

REL_NS = "http://schemas.openxmlformats.org/package/2006/relationships"
RT_BASE = "http://schemas.openxmlformats.org/officeDocument/2006/relationships"
RT_IMAGE = f"{RT_BASE}/image"
RT_THEME = f"{RT_BASE}/theme"
RT_HYPERLINK = f"{RT_BASE}/hyperlink"
RT_NOTES = f"{RT_BASE}/notesSlide"

# PNG signature followed by filler; only the bytes are compared
PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 16


class PackageBuilder:
    """Builds OOXML fragments and whole presentation archives."""

    def shape(
        self,
        shape_id: int,
        x: int = 0,
        y: int = 0,
        cx: int = 914400,
        cy: int = 914400,
        name: Optional[str] = None,
        fill: str = "",
        line: str = "",
        text: str = "",
        geometry: str = '<a:prstGeom prst="rect"><a:avLst/></a:prstGeom>',
        xfrm_attrs: str = "",
        placeholder: str = "",
        xfrm: bool = True,
    ) -> str:
        """A ``<p:sp>``; ``text`` is inserted inside ``<p:txBody>`` after bodyPr."""
        name = name or f"Shape {shape_id}"
        transform = (
            f'<a:xfrm{xfrm_attrs}><a:off x="{x}" y="{y}"/><a:ext cx="{cx}" cy="{cy}"/></a:xfrm>'
            if xfrm else ""
        )
        tx_body = f"<p:txBody><a:bodyPr/><a:lstStyle/>{text}</p:txBody>" if text else ""
        return (
            f'<p:sp><p:nvSpPr><p:cNvPr id="{shape_id}" name="{name}"/><p:cNvSpPr/>'
            f"<p:nvPr>{placeholder}</p:nvPr></p:nvSpPr>"
            f"<p:spPr>{transform}{geometry}{fill}{line}</p:spPr>{tx_body}</p:sp>"
        )

    def picture(
        self,
        shape_id: int,
        rid: str = "rId2",
        x: int = 0,
        y: int = 0,
        cx: int = 914400,
        cy: int = 914400,
        name: Optional[str] = None,
        blip_extra: str = "",
        src_rect: str = "",
    ) -> str:
        name = name or f"Picture {shape_id}"
        return (
            f'<p:pic><p:nvPicPr><p:cNvPr id="{shape_id}" name="{name}"/><p:cNvPicPr/><p:nvPr/></p:nvPicPr>'
            f'<p:blipFill><a:blip r:embed="{rid}">{blip_extra}</a:blip>{src_rect}'
            f"<a:stretch><a:fillRect/></a:stretch></p:blipFill>"
            f'<p:spPr><a:xfrm><a:off x="{x}" y="{y}"/><a:ext cx="{cx}" cy="{cy}"/></a:xfrm>'
            f'<a:prstGeom prst="rect"><a:avLst/></a:prstGeom></p:spPr></p:pic>'
        )

    def group(
        self,
        shape_id: int,
        children: str,
        x: int = 0,
        y: int = 0,
        cx: int = 1828800,
        cy: int = 1828800,
        ch_x: int = 0,
        ch_y: int = 0,
        ch_cx: Optional[int] = None,
        ch_cy: Optional[int] = None,
    ) -> str:
        ch_cx = cx if ch_cx is None else ch_cx
        ch_cy = cy if ch_cy is None else ch_cy
        return (
            f'<p:grpSp><p:nvGrpSpPr><p:cNvPr id="{shape_id}" name="Group {shape_id}"/>'
            f"<p:cNvGrpSpPr/><p:nvPr/></p:nvGrpSpPr>"
            f'<p:grpSpPr><a:xfrm><a:off x="{x}" y="{y}"/><a:ext cx="{cx}" cy="{cy}"/>'
            f'<a:chOff x="{ch_x}" y="{ch_y}"/><a:chExt cx="{ch_cx}" cy="{ch_cy}"/></a:xfrm></p:grpSpPr>'
            f"{children}</p:grpSp>"
        )

    def slide(self, shapes: str = "", background: str = "") -> str:
        return (
            f'<?xml version="1.0" encoding="UTF-8" standalone="yes"?>'
            f"<p:sld {NS_DECLS}><p:cSld>{background}<p:spTree>"
            f'<p:nvGrpSpPr><p:cNvPr id="1" name=""/><p:cNvGrpSpPr/><p:nvPr/></p:nvGrpSpPr>'
            f"<p:grpSpPr/>{shapes}</p:spTree></p:cSld></p:sld>"
        )

    def presentation(self, cx: Optional[int] = 12192000, cy: Optional[int] = 6858000) -> str:
        size = f'<p:sldSz cx="{cx}" cy="{cy}"/>' if cx is not None else ""
        return (
            f'<?xml version="1.0" encoding="UTF-8" standalone="yes"?>'
            f"<p:presentation {NS_DECLS}>{size}</p:presentation>"
        )

    def theme(self, accent1: str = "4472C4", name: str = "Test Theme", major: str = "Aptos Display", minor: str = "Aptos") -> str:
        return (
            f'<?xml version="1.0" encoding="UTF-8" standalone="yes"?>'
            f'<a:theme {NS_DECLS} name="{name}"><a:themeElements>'
            f'<a:clrScheme name="Custom">'
            f'<a:dk1><a:sysClr val="windowText" lastClr="111111"/></a:dk1>'
            f'<a:lt1><a:sysClr val="window" lastClr="FEFEFE"/></a:lt1>'
            f'<a:dk2><a:srgbClr val="222222"/></a:dk2>'
            f'<a:lt2><a:srgbClr val="EEEEEE"/></a:lt2>'
            f'<a:accent1><a:srgbClr val="{accent1}"/></a:accent1>'
            f'<a:accent2><a:srgbClr val="ED7D31"/></a:accent2>'
            f'<a:accent3><a:srgbClr val="A5A5A5"/></a:accent3>'
            f'<a:accent4><a:srgbClr val="FFC000"/></a:accent4>'
            f'<a:accent5><a:srgbClr val="5B9BD5"/></a:accent5>'
            f'<a:accent6><a:srgbClr val="70AD47"/></a:accent6>'
            f'<a:hlink><a:srgbClr val="0563C1"/></a:hlink>'
            f'<a:folHlink><a:srgbClr val="954F72"/></a:folHlink>'
            f"</a:clrScheme>"
            f'<a:fontScheme name="Custom Fonts">'
            f'<a:majorFont><a:latin typeface="{major}"/><a:ea typeface=""/><a:cs typeface=""/></a:majorFont>'
            f'<a:minorFont><a:latin typeface="{minor}"/><a:ea typeface=""/><a:cs typeface=""/></a:minorFont>'
            f"</a:fontScheme></a:themeElements></a:theme>"
        )

    def relationships(self, rels: dict[str, tuple[str, str]], external: tuple[str, ...] = ()) -> str:
        """``rels`` maps id to (type, target); ids in ``external`` get TargetMode=External."""
        entries = ""
        for rid, (rtype, target) in rels.items():
            mode = ' TargetMode="External"' if rid in external else ""
            entries += f'<Relationship Id="{rid}" Type="{rtype}" Target="{target}"{mode}/>'
        return (
            f'<?xml version="1.0" encoding="UTF-8" standalone="yes"?>'
            f'<Relationships xmlns="{REL_NS}">{entries}</Relationships>'
        )

    def build(
        self,
        slides: Optional[dict[int, str]] = None,
        slide_rels: Optional[dict[int, str]] = None,
        media: Optional[dict[str, bytes]] = None,
        theme: Optional[str] = None,
        presentation: Optional[str] = None,
        extra: Optional[dict[str, str]] = None,
    ) -> bytes:
        """Assemble an archive; slides are keyed by the number in their part name."""
        buffer = io.BytesIO()
        with zipfile.ZipFile(buffer, "w") as archive:
            archive.writestr("[Content_Types].xml", "<Types/>")
            archive.writestr(
                "ppt/presentation.xml",
                presentation if presentation is not None else self.presentation(),
            )
            if theme is not None:
                archive.writestr("ppt/theme/theme1.xml", theme)
                archive.writestr(
                    "ppt/_rels/presentation.xml.rels",
                    self.relationships({"rId1": (RT_THEME, "theme/theme1.xml")}),
                )
            for number, xml in (slides or {}).items():
                archive.writestr(f"ppt/slides/slide{number}.xml", xml)
            for number, xml in (slide_rels or {}).items():
                archive.writestr(f"ppt/slides/_rels/slide{number}.xml.rels", xml)
            for name, data in (media or {}).items():
                archive.writestr(name, data)
            for name, data in (extra or {}).items():
                archive.writestr(name, data)
        return buffer.getvalue()


def xml_fragment(markup: str):
    """Parse a fragment written with a:/p:/r: prefixes."""
    return etree.fromstring(f"<root {NS_DECLS}>{markup}</root>")[0]


@pytest.fixture
def builder() -> PackageBuilder:
    """Create a PackageBuilder instance."""
    return PackageBuilder()


@pytest.fixture
def fragment():
    """Parse namespaced XML fragments."""
    return xml_fragment


@pytest.fixture
def settings() -> Settings:
    """Settings with defaults, independent of the environment."""
    return Settings(_env_file=None)


@pytest.fixture
def reader(settings: Settings) -> PPTXReader:
    """Create a PPTXReader instance."""
    return PPTXReader(settings)
