"""
Shared utilities for examtex.

Common functionality used across contexts:
- Text processing (delimiter balance, truncation, Roman numerals)
- Logger setup with provenance tracking
"""

from examtex.utils.text_processing import (
    find_unescaped_imbalance,
    to_roman,
    truncate_display,
)

__all__ = ["find_unescaped_imbalance", "to_roman", "truncate_display"]
