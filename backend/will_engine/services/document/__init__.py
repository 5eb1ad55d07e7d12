"""
Document - will assembly

Core Principle: a will is ASSEMBLED, not WRITTEN.
"""

from .assembler import WillAssembler, build_clauses_only_document, build_document
from .gifts import beneficiary_name, render_specific_gift, render_specific_gifts

__all__ = [
    "WillAssembler",
    "build_clauses_only_document",
    "build_document",
    "beneficiary_name",
    "render_specific_gift",
    "render_specific_gifts",
]
