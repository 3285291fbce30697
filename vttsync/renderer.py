"""
Renderer interface for VTTSync.

A renderer draws the two caption lines. It receives the text pair each time
it changes and, independently, the overlay size/position adjustments.
"""

import logging
import sys
from typing import TextIO

from .models import OverlaySettings

logger = logging.getLogger(__name__)


class Renderer:
    """Base renderer interface."""

    def update_text(self, primary: str, secondary: str) -> None:
        """Show the given lines; an empty string hides that line."""
        raise NotImplementedError

    def update_settings(self, settings: OverlaySettings) -> None:
        raise NotImplementedError


class ConsoleRenderer(Renderer):
    """Writes every caption change to a text stream."""

    def __init__(self, stream: TextIO = sys.stdout):
        self.stream = stream
        self.settings = OverlaySettings()

    def update_text(self, primary: str, secondary: str) -> None:
        if not primary and not secondary:
            self.stream.write("[hidden]\n")
        for label, text in (("1", primary), ("2", secondary)):
            if text:
                # Multi-line cues are flattened onto one console line
                self.stream.write(f"[{label}] {text.replace(chr(10), ' / ')}\n")
        self.stream.flush()

    def update_settings(self, settings: OverlaySettings) -> None:
        self.settings = settings
        logger.info(
            f"Overlay settings: size=({settings.primary_size}, {settings.secondary_size}) "
            f"position=({settings.primary_position}, {settings.secondary_position})"
        )
