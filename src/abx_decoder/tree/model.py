"""Document tree produced by the binary XML decoder.

Elements own their children exclusively and keep no reference to their
parent; the decoder tracks nesting with its own stack.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional, Tuple


@dataclass(eq=False)
class XMLElement:
    """A single element with attributes, text content, and children.

    The tag is fixed once the element exists; attributes are unique by name
    and a later write replaces the earlier value.
    """

    tag: str
    attributes: Dict[str, str] = field(default_factory=dict)
    text: Optional[str] = None
    children: List["XMLElement"] = field(default_factory=list)

    def __post_init__(self) -> None:
        """Validate element values."""
        if not isinstance(self.tag, str):
            raise TypeError("Element tag must be a string")

    def __setattr__(self, name: str, value: Any) -> None:
        if name == "tag" and "tag" in self.__dict__:
            raise AttributeError("Element tag is immutable")
        super().__setattr__(name, value)

    @property
    def is_empty(self) -> bool:
        """True when the element has neither text nor children."""
        return not self.text and not self.children

    def add_child(self, child: "XMLElement") -> None:
        """Append a child element."""
        if not isinstance(child, XMLElement):
            raise TypeError("Child must be an XMLElement instance")
        self.children.append(child)

    def append_text(self, text: str) -> None:
        """Concatenate ``text`` onto the element's accumulated text."""
        self.text = text if self.text is None else self.text + text

    def get_attribute(self, name: str, default: Optional[str] = None) -> Optional[str]:
        """Get attribute value with optional default."""
        return self.attributes.get(name, default)

    def set_attribute(self, name: str, value: str) -> None:
        """Set attribute value, replacing any earlier value."""
        if not isinstance(name, str) or not isinstance(value, str):
            raise TypeError("Attribute name and value must be strings")
        self.attributes[name] = value

    def has_attribute(self, name: str) -> bool:
        return name in self.attributes

    def find_child(self, tag: str) -> Optional["XMLElement"]:
        """Find first direct child with matching tag name."""
        return next((child for child in self.children if child.tag == tag), None)

    def find_children(self, tag: str) -> List["XMLElement"]:
        """Find all direct children with matching tag name."""
        return [child for child in self.children if child.tag == tag]

    def iter(self) -> Iterator["XMLElement"]:
        """Iterate over this element and all descendants in document order."""
        stack = [self]
        while stack:
            element = stack.pop()
            yield element
            stack.extend(reversed(element.children))

    def iter_with_depth(self, depth: int = 0) -> Iterator[Tuple["XMLElement", int]]:
        """Like :meth:`iter`, also yielding each element's depth."""
        stack = [(self, depth)]
        while stack:
            element, level = stack.pop()
            yield element, level
            stack.extend((child, level + 1) for child in reversed(element.children))

    def find(self, tag: str) -> Optional["XMLElement"]:
        """Find first descendant element with matching tag name."""
        descendants = self.iter()
        next(descendants)
        return next((element for element in descendants if element.tag == tag), None)

    def find_all(self, tag: str) -> List["XMLElement"]:
        """Find all descendant elements with matching tag name."""
        descendants = self.iter()
        next(descendants)
        return [element for element in descendants if element.tag == tag]

    def to_dict(self) -> Dict[str, Any]:
        """Convert element to dictionary representation."""
        result: Dict[str, Any] = {
            "tag": self.tag,
            "attributes": dict(self.attributes),
        }
        if self.text:
            result["text"] = self.text
        if self.children:
            result["children"] = [child.to_dict() for child in self.children]
        return result


@dataclass
class XMLDocument:
    """Decoded document with its root and summary statistics.

    In multi-root mode ``root`` is the synthetic wrapper element; it is not
    part of the document content and is excluded from every statistic.
    """

    root: Optional[XMLElement] = None
    multi_root: bool = False
    correlation_id: Optional[str] = None

    total_elements: int = 0
    total_attributes: int = 0
    max_depth: int = 0

    def __post_init__(self) -> None:
        """Calculate document statistics."""
        self.refresh_statistics()

    def refresh_statistics(self) -> None:
        """Recompute element, attribute, and depth totals."""
        self.total_elements = 0
        self.total_attributes = 0
        self.max_depth = 0
        for top in self.top_level_elements:
            for element, depth in top.iter_with_depth():
                self.total_elements += 1
                self.total_attributes += len(element.attributes)
                self.max_depth = max(self.max_depth, depth)

    @property
    def top_level_elements(self) -> List[XMLElement]:
        """Elements rendered at depth zero."""
        if self.root is None:
            return []
        if self.multi_root:
            return list(self.root.children)
        return [self.root]

    def iter_elements(self) -> Iterator[XMLElement]:
        """Iterate over all content elements in document order."""
        for top in self.top_level_elements:
            yield from top.iter()

    def find(self, tag: str) -> Optional[XMLElement]:
        """Find first element with matching tag name."""
        return next((e for e in self.iter_elements() if e.tag == tag), None)

    def find_all(self, tag: str) -> List[XMLElement]:
        """Find all elements with matching tag name."""
        return [e for e in self.iter_elements() if e.tag == tag]

    def to_dict(self) -> Dict[str, Any]:
        """Convert document to dictionary representation."""
        return {
            "multi_root": self.multi_root,
            "total_elements": self.total_elements,
            "total_attributes": self.total_attributes,
            "max_depth": self.max_depth,
            "elements": [element.to_dict() for element in self.top_level_elements],
        }
