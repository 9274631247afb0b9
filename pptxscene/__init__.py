"""pptxscene - rebuild positioned, styled scene graphs from PowerPoint packages."""

from pptxscene.parser import PPTXReader

__version__ = "0.1.0"

__all__ = ["PPTXReader"]
