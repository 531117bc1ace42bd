"""Custom exceptions for the rendering context with offending-content references."""

from typing import Optional


class RenderError(Exception):
    """
    Base exception for failures local to one piece of author content.

    Attributes:
        message: Error description
        content: The content that failed to render (formula, directive, markdown)
        position: Offset of the content within the rendered text, when known
    """

    def __init__(
        self,
        message: str,
        content: Optional[str] = None,
        position: Optional[int] = None,
    ):
        self.message = message
        self.content = content
        self.position = position

        # Build enhanced error message
        parts = [message]

        if position is not None:
            parts.append(f"Position: {position}")

        if content:
            # Truncate snippet if too long
            snippet = content[:200] + "..." if len(content) > 200 else content
            parts.append(f"\nContent:\n{snippet}")

        super().__init__("\n".join(parts))


class MathRenderError(RenderError):
    """Raised when the typesetting engine rejects a formula."""

    pass


class MathSyntaxError(MathRenderError):
    """
    Raised by the typesetting adapter for malformed formulas.

    Covers unbalanced braces, exceeded macro-expansion ceilings and any conversion
    failure reported by the underlying engine.
    """

    pass


class QuestionDirectiveError(RenderError):
    """Reserved for directive validation; directives are currently never rejected."""

    pass


class MarkdownParseError(RenderError):
    """Reserved; markdown substitutions are unconditional and cannot fail."""

    pass
