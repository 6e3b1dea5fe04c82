"""Operator translators, keyed by source operator name."""

from . import concatenate, split
from .base import (
    ConstructContext,
    DescriptorLookup,
    OperatorTranslator,
    get_translator,
    is_supported,
    register_translator,
    supported_operators,
)

register_translator(concatenate.OP_NAME, concatenate.TRANSLATOR)
register_translator(split.OP_NAME, split.TRANSLATOR)

__all__ = [
    "ConstructContext",
    "DescriptorLookup",
    "OperatorTranslator",
    "get_translator",
    "is_supported",
    "register_translator",
    "supported_operators",
]
