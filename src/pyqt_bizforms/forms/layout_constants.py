"""
Layout constants for generated forms.

Centralizes spacing and margins so every UniversalForm looks the same.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class FormLayoutConfig:
    """Spacing and margins of a generated form."""

    # Outer layout of the form widget
    main_layout_spacing: int = 8
    main_layout_margins: tuple = (8, 8, 8, 8)

    # Card frame (show_card=True)
    card_margins: tuple = (16, 16, 16, 16)
    card_spacing: int = 12

    # Between sections
    section_spacing: int = 16

    # Section grid (label + control per cell)
    grid_horizontal_spacing: int = 12
    grid_vertical_spacing: int = 8
    field_spacing: int = 2

    # Button row
    button_spacing: int = 8
    button_min_width: int = 90

    title_point_size_delta: int = 4
    error_color: str = "#dc2626"
    muted_color: str = "#6b7280"


DEFAULT_LAYOUT = FormLayoutConfig()

COMPACT_LAYOUT = FormLayoutConfig(
    main_layout_spacing=4,
    main_layout_margins=(4, 4, 4, 4),
    card_margins=(8, 8, 8, 8),
    card_spacing=6,
    section_spacing=8,
    grid_horizontal_spacing=6,
    grid_vertical_spacing=4,
    field_spacing=1,
    button_spacing=4,
)

# Current active configuration - change this to switch layouts globally
CURRENT_LAYOUT = DEFAULT_LAYOUT
