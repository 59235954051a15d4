"""
Branding Resolver Service

Derives the colour tokens used to theme a rendered report from a tenant's
theme id and optional accent colour override.

Themes:
- light (default), dark, blue, green. Unknown theme ids resolve to light
  through ThemeId's default member, never an error.

Accent Override Rules:
- accent_color = override
- accent_hover = override darkened by 15% (each channel * 0.85, floored)
- accent_text = #000000 if relative luminance > 0.5 else #FFFFFF
- Background, foreground, border and card tokens always come from the base
  theme. An override only affects the accent family.

All functions are pure: the same inputs always give the same tokens.
"""

import logging
import math
import re
from dataclasses import dataclass
from typing import Dict, Optional, Tuple, Union

from report_export.models.enums import ThemeId


logger = logging.getLogger(__name__)

_HEX_COLOR_RE = re.compile(r'^#?[0-9A-Fa-f]{6}$')

# Darkening applied to an accent override to derive its hover colour
ACCENT_HOVER_DARKEN_PERCENT = 15

# Luminance above which text on the accent colour is black
CONTRAST_LUMINANCE_THRESHOLD = 0.5


# =============================================================================
# Theme Definitions
# =============================================================================


@dataclass(frozen=True)
class ThemeConfig:
    """
    Colour palette of a predefined theme.

    Attributes:
        id: Theme identifier.
        name: Display name.
        background / background_secondary: Page and secondary backgrounds.
        foreground / foreground_muted: Primary and muted text colours.
        border / border_muted: Strong and subtle border colours.
        accent_color / accent_hover / accent_text: Accent family.
        card_background / card_border: Card styling.
    """
    id: ThemeId
    name: str
    background: str
    background_secondary: str
    foreground: str
    foreground_muted: str
    border: str
    border_muted: str
    accent_color: str
    accent_hover: str
    accent_text: str
    card_background: str
    card_border: str


THEMES: Dict[ThemeId, ThemeConfig] = {
    # gray palette, blue-600 accent
    ThemeId.LIGHT: ThemeConfig(
        id=ThemeId.LIGHT,
        name='Light',
        background='#F9FAFB',
        background_secondary='#FFFFFF',
        foreground='#111827',
        foreground_muted='#6B7280',
        border='#E5E7EB',
        border_muted='#F3F4F6',
        accent_color='#2563EB',
        accent_hover='#1D4ED8',
        accent_text='#FFFFFF',
        card_background='#FFFFFF',
        card_border='#E5E7EB',
    ),
    # slate palette, sky-500 accent
    ThemeId.DARK: ThemeConfig(
        id=ThemeId.DARK,
        name='Dark',
        background='#0F172A',
        background_secondary='#1E293B',
        foreground='#F8FAFC',
        foreground_muted='#94A3B8',
        border='#334155',
        border_muted='#1E293B',
        accent_color='#0EA5E9',
        accent_hover='#0284C7',
        accent_text='#FFFFFF',
        card_background='#1E293B',
        card_border='#334155',
    ),
    # slate palette, blue-700 accent
    ThemeId.BLUE: ThemeConfig(
        id=ThemeId.BLUE,
        name='Blue',
        background='#F8FAFC',
        background_secondary='#FFFFFF',
        foreground='#0F172A',
        foreground_muted='#64748B',
        border='#E2E8F0',
        border_muted='#F1F5F9',
        accent_color='#1D4ED8',
        accent_hover='#1E40AF',
        accent_text='#FFFFFF',
        card_background='#FFFFFF',
        card_border='#DBEAFE',
    ),
    # gray palette, emerald-600 accent
    ThemeId.GREEN: ThemeConfig(
        id=ThemeId.GREEN,
        name='Green',
        background='#F9FAFB',
        background_secondary='#FFFFFF',
        foreground='#111827',
        foreground_muted='#6B7280',
        border='#E5E7EB',
        border_muted='#F3F4F6',
        accent_color='#059669',
        accent_hover='#047857',
        accent_text='#FFFFFF',
        card_background='#FFFFFF',
        card_border='#D1FAE5',
    ),
}


def get_theme(theme_id: Optional[Union[str, ThemeId]]) -> ThemeConfig:
    """
    Get a theme configuration by id.

    Args:
        theme_id: Theme identifier; None or unknown values give the light theme.

    Returns:
        ThemeConfig for the resolved theme.
    """
    return THEMES[ThemeId(theme_id)]


# =============================================================================
# Branding Tokens
# =============================================================================


@dataclass(frozen=True)
class BrandingTokens:
    """
    The 11 colour tokens applied to a rendered report.

    Never persisted; recomputed for every render.
    """
    accent_color: str
    accent_hover: str
    accent_text: str
    background: str
    background_secondary: str
    foreground: str
    foreground_muted: str
    border: str
    border_muted: str
    card_background: str
    card_border: str

    def to_css_variables(self) -> Dict[str, str]:
        """Map the tokens to their CSS custom property names."""
        return {
            '--accent-color': self.accent_color,
            '--accent-hover': self.accent_hover,
            '--accent-text': self.accent_text,
            '--background': self.background,
            '--background-secondary': self.background_secondary,
            '--foreground': self.foreground,
            '--foreground-muted': self.foreground_muted,
            '--border': self.border,
            '--border-muted': self.border_muted,
            '--card-background': self.card_background,
            '--card-border': self.card_border,
        }


# =============================================================================
# Colour Arithmetic
# =============================================================================


def _parse_hex(hex_color: str) -> Tuple[int, int, int]:
    """
    Parse '#RRGGBB' (leading '#' optional) into RGB channel values.

    Raises:
        ValueError: If the string is not six hexadecimal digits.
    """
    clean = hex_color.strip().lstrip('#')
    if len(clean) != 6:
        raise ValueError(f"Expected a #RRGGBB colour, got {hex_color!r}")
    return int(clean[0:2], 16), int(clean[2:4], 16), int(clean[4:6], 16)


def is_hex_color(value: str) -> bool:
    """Return True for '#RRGGBB' (or 'RRGGBB') colour strings."""
    return bool(_HEX_COLOR_RE.match(value.strip()))


def darken(hex_color: str, percent: float) -> str:
    """
    Darken a hex colour by a percentage.

    Each RGB channel is multiplied by (1 - percent / 100), floored and
    clamped at zero.

    Args:
        hex_color: Colour in '#RRGGBB' form.
        percent: Darkening percentage (15 darkens each channel by 15%).

    Returns:
        Lowercase '#rrggbb' colour.

    Example:
        >>> darken('#2563EB', 15)
        '#1f54c7'
    """
    r, g, b = _parse_hex(hex_color)
    factor = 1 - percent / 100
    channels = [max(0, math.floor(channel * factor)) for channel in (r, g, b)]
    return '#' + ''.join(f'{channel:02x}' for channel in channels)


def contrast_text(hex_color: str) -> str:
    """
    Pick black or white text for a background colour.

    Uses relative luminance (0.299R + 0.587G + 0.114B) / 255; above 0.5 the
    background is light and gets black text.

    Example:
        >>> contrast_text('#FFFFFF')
        '#000000'
        >>> contrast_text('#000000')
        '#FFFFFF'
    """
    r, g, b = _parse_hex(hex_color)
    luminance = (0.299 * r + 0.587 * g + 0.114 * b) / 255
    return '#000000' if luminance > CONTRAST_LUMINANCE_THRESHOLD else '#FFFFFF'


# =============================================================================
# Resolver
# =============================================================================


def resolve_branding(
    theme_id: Optional[Union[str, ThemeId]],
    accent_override: Optional[str] = None
) -> BrandingTokens:
    """
    Resolve the branding tokens for a theme and optional accent override.

    Args:
        theme_id: Theme identifier; unknown or missing ids use the light theme.
        accent_override: Optional '#RRGGBB' accent colour (the # may be
            omitted and is added back). Empty strings and
            values that are not six hex digits are treated as absent.

    Returns:
        BrandingTokens with all 11 colour tokens populated.

    Example:
        >>> tokens = resolve_branding('dark', '#FF5500')
        >>> tokens.accent_color, tokens.background
        ('#FF5500', '#0F172A')
    """
    theme = get_theme(theme_id)

    if accent_override and not is_hex_color(accent_override):
        logger.warning(f"Ignoring malformed accent override {accent_override!r}")
        accent_override = None

    if accent_override:
        # Overrides may omit the leading #; CSS needs it
        accent_color = '#' + accent_override.lstrip('#')
        accent_hover = darken(accent_override, ACCENT_HOVER_DARKEN_PERCENT)
        accent_text = contrast_text(accent_override)
    else:
        accent_color = theme.accent_color
        accent_hover = theme.accent_hover
        accent_text = theme.accent_text

    return BrandingTokens(
        accent_color=accent_color,
        accent_hover=accent_hover,
        accent_text=accent_text,
        background=theme.background,
        background_secondary=theme.background_secondary,
        foreground=theme.foreground,
        foreground_muted=theme.foreground_muted,
        border=theme.border,
        border_muted=theme.border_muted,
        card_background=theme.card_background,
        card_border=theme.card_border,
    )
