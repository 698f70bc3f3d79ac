"""Terminal prompts and rendering for the interactive session."""

from epictrack.ui.prompts import ConsolePrompts, Prompts
from epictrack.ui.render import ConsoleRenderer, Renderer

__all__ = ["ConsolePrompts", "ConsoleRenderer", "Prompts", "Renderer"]
