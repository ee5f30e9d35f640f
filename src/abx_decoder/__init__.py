"""ABX Decoder.

Decodes Android binary XML (ABX) token streams into an element tree and
renders them back as textual XML.

Progressive API Disclosure:
- Level 1: Simple functions - decode(), decode_bytes(), decode_file(), convert_file()
- Level 2: Configured decoder - AbxDecoder class with ConverterConfig
- Level 3: Building blocks - abx_decoder.binary and abx_decoder.decoding
"""

__version__ = "0.1.0"
__author__ = "ABX Decoder Team"

from .api import (
    AbxDecoder,
    DecodeResult,
    convert_file,
    decode,
    decode_bytes,
    decode_file,
)
from .shared.config import ConverterConfig, DecoderConfig, RenderConfig
from .shared.errors import AbxDecodeError
from .tree import XMLDocument, XMLElement, XMLRenderer

__all__ = [
    # Version and metadata
    "__author__",
    "__version__",

    # Level 1: Simple functions
    "decode",
    "decode_bytes",
    "decode_file",
    "convert_file",

    # Level 2: Configured decoder
    "AbxDecoder",
    "ConverterConfig",
    "DecoderConfig",
    "RenderConfig",

    # Results and data structures
    "DecodeResult",
    "XMLDocument",
    "XMLElement",
    "XMLRenderer",

    # Errors
    "AbxDecodeError",
]
