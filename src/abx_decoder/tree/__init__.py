"""Document tree and textual rendering for decoded binary XML.

Key Components:
    XMLElement: Element with attributes, text, and owned children
    XMLDocument: Decoded document with root and statistics
    XMLRenderer: Indented textual XML output
"""

from .model import XMLDocument, XMLElement
from .render import XML_DECLARATION, XMLRenderer, render_document

__all__ = [
    "XMLDocument",
    "XMLElement",
    "XML_DECLARATION",
    "XMLRenderer",
    "render_document",
]
