"""
Text processing utilities shared by the rendering context.
"""

from typing import List, Tuple

# Value/numeral pairs for lowercase Roman numerals, largest first
ROMAN_NUMERALS: List[Tuple[int, str]] = [
    (1000, "m"),
    (900, "cm"),
    (500, "d"),
    (400, "cd"),
    (100, "c"),
    (90, "xc"),
    (50, "l"),
    (40, "xl"),
    (10, "x"),
    (9, "ix"),
    (5, "v"),
    (4, "iv"),
    (1, "i"),
]


def find_unescaped_imbalance(
    text: str,
    open_char: str = '{',
    close_char: str = '}',
    escape_char: str = '\\'
) -> int:
    """
    Locate the first delimiter that breaks balance, skipping escaped characters.

    Walks the text counting nested delimiters the same way a balanced-delimiter
    extractor does. A closing delimiter with no matching opener is reported at its
    own position; openers left unclosed at the end are reported at the position of
    the outermost unclosed one.

    Args:
        text: Text to scan
        open_char: Opening delimiter character (default: '{')
        close_char: Closing delimiter character (default: '}')
        escape_char: Character used for escaping (default: '\\')

    Returns:
        Position of the offending delimiter, or -1 when the text is balanced

    Example:
        >>> find_unescaped_imbalance(r"\\frac{1}{2}")
        -1
        >>> find_unescaped_imbalance(r"\\frac{1}{2")
        8
        >>> find_unescaped_imbalance(r"a}b")
        1
        >>> find_unescaped_imbalance(r"\\{ literal")
        -1
    """
    open_positions: List[int] = []
    pos = 0

    while pos < len(text):
        char = text[pos]
        if char == escape_char:
            # Skip escaped character
            pos += 2
            continue
        if char == open_char:
            open_positions.append(pos)
        elif char == close_char:
            if not open_positions:
                return pos
            open_positions.pop()
        pos += 1

    return open_positions[0] if open_positions else -1


def truncate_display(text: str, max_len: int) -> str:
    """
    Truncate text for display with ellipsis if needed.

    Args:
        text: Text to truncate
        max_len: Maximum length including ellipsis

    Returns:
        Original text if within max_len, otherwise truncated with "..."

    Example:
        >>> truncate_display("short", 10)
        "short"
        >>> truncate_display("this is a very long string", 10)
        "this is..."
    """
    return text if len(text) <= max_len else text[: max_len - 3] + "..."


def to_roman(number: int) -> str:
    """
    Convert a positive integer to a lowercase Roman numeral.

    Example:
        >>> to_roman(4)
        'iv'
        >>> to_roman(14)
        'xiv'
    """
    if number < 1:
        raise ValueError(f"Roman numerals start at 1, got {number}")

    parts = []
    remaining = number
    for value, numeral in ROMAN_NUMERALS:
        while remaining >= value:
            parts.append(numeral)
            remaining -= value

    return "".join(parts)
