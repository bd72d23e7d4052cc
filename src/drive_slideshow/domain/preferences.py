"""Domain models for display preferences."""

from dataclasses import dataclass

DEFAULT_TOP_BAR_OPACITY = 0.25


@dataclass(frozen=True)
class DisplayPreferences:
    """Overlay options shown on top of the slideshow."""

    show_email: bool = True
    show_controls: bool = True
    show_photo_counter: bool = True
    top_bar_opacity: float = DEFAULT_TOP_BAR_OPACITY
