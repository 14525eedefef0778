"""Pointer interaction, selection and highlighting."""

from .clicks import ClickEvent, ClickKind, ClickTracker
from .controller import InteractionController, Mode
from .highlight import Highlight, LinkStyle, NodeStyle, compute_highlight, highlight_set
from .view_transform import Transition, ViewTransform

__all__ = [
    "ClickEvent",
    "ClickKind",
    "ClickTracker",
    "InteractionController",
    "Mode",
    "Highlight",
    "LinkStyle",
    "NodeStyle",
    "compute_highlight",
    "highlight_set",
    "Transition",
    "ViewTransform",
]
