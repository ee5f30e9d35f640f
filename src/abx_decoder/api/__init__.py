"""Public API for binary XML decoding."""

from .decoder import (
    AbxDecoder,
    DecodeResult,
    convert_file,
    decode,
    decode_bytes,
    decode_file,
    resolve_output_path,
)

__all__ = [
    "AbxDecoder",
    "DecodeResult",
    "convert_file",
    "decode",
    "decode_bytes",
    "decode_file",
    "resolve_output_path",
]
