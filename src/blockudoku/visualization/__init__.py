"""pygame front end: board/hand drawing, drag-and-drop input and the play loop."""

from .layout import Layout
from .input import PointerInput

__all__ = ["Layout", "PointerInput"]
