"""Developer tools module for ABX Decoder.

This module provides test tooling: a binary stream builder and a generator of
malformed streams with their expected errors.
"""

from .testing import (
    AbxStreamBuilder,
    MalformationType,
    TestCase,
    TestCaseGenerator,
    generate_malformed_cases,
)

__all__ = [
    "AbxStreamBuilder",
    "MalformationType",
    "TestCase",
    "TestCaseGenerator",
    "generate_malformed_cases",
]
