"""Textual XML rendering of decoded documents."""

import time
from typing import List, Optional
from xml.sax.saxutils import escape

from ..shared.config import RenderConfig
from ..shared.logging import get_logger
from .model import XMLDocument, XMLElement

XML_DECLARATION = "<?xml version='1.0' encoding='UTF-8' standalone='yes' ?>"

_ATTRIBUTE_ENTITIES = {'"': "&quot;"}


class XMLRenderer:
    """Render an :class:`XMLDocument` as indented XML text.

    Empty elements self-close, text follows the opening tag on the same line,
    and each child starts on its own line one indent deeper. In multi-root
    mode the synthetic root is skipped and its children start at depth zero.
    """

    def __init__(
        self,
        config: Optional[RenderConfig] = None,
        correlation_id: Optional[str] = None
    ) -> None:
        self.config = config or RenderConfig()
        self.logger = get_logger(__name__, correlation_id, "xml_renderer")

    def render(self, document: XMLDocument) -> str:
        """Render the whole document, declaration included."""
        start_time = time.time()
        lines: List[str] = []
        if self.config.xml_declaration:
            lines.append(XML_DECLARATION)
        for element in document.top_level_elements:
            self._render_element(element, 0, lines)

        output = "".join(line + "\n" for line in lines)
        self.logger.debug(
            "Rendered document",
            extra={
                "lines": len(lines),
                "output_size": len(output),
                "processing_time_ms": (time.time() - start_time) * 1000,
            }
        )
        return output

    def render_element(self, element: XMLElement, depth: int = 0) -> str:
        """Render a single element subtree without a declaration."""
        lines: List[str] = []
        self._render_element(element, depth, lines)
        return "".join(line + "\n" for line in lines)

    def _render_element(self, element: XMLElement, depth: int, lines: List[str]) -> None:
        indent = self.config.indent * depth
        opening = f"{indent}<{element.tag}"
        for name, value in element.attributes.items():
            opening += f' {name}="{self._attribute(value)}"'

        if element.is_empty:
            lines.append(opening + "/>")
            return

        opening += ">"
        if element.text:
            opening += self._text(element.text)
        if not element.children:
            lines.append(f"{opening}</{element.tag}>")
            return

        lines.append(opening)
        for child in element.children:
            self._render_element(child, depth + 1, lines)
        lines.append(f"{indent}</{element.tag}>")

    def _text(self, value: str) -> str:
        return escape(value) if self.config.escape_values else value

    def _attribute(self, value: str) -> str:
        if not self.config.escape_values:
            return value
        return escape(value, _ATTRIBUTE_ENTITIES)


def render_document(document: XMLDocument, config: Optional[RenderConfig] = None) -> str:
    """Render ``document`` with a one-off :class:`XMLRenderer`."""
    return XMLRenderer(config).render(document)
