"""
examtex - Exam content rendering

Compiles question-bank content written in a lightweight markdown dialect, LaTeX math
and exam-question directives into HTML fragments for display.

Architecture:
- Rendering Context: directive expansion, markdown, math typesetting, render cache
"""

__version__ = "0.1.0"
