"""
css_validator.py - CSS Class Validation
SwiftUI Playground

Allow-lists for Tailwind tokens and builders that always return a safe
class string, falling back to a fixed default on invalid input.
"""

import re
import logging

logger = logging.getLogger(__name__)

VALID_COLORS = [
    'white', 'black', 'red', 'blue', 'green', 'yellow', 'gray', 'purple',
    'pink', 'orange', 'indigo', 'slate', 'zinc', 'neutral', 'stone', 'amber',
    'teal', 'cyan', 'sky', 'violet', 'fuchsia', 'rose',
    'transparent', 'current', 'inherit',
]

VALID_SHADES = ['50', '100', '200', '300', '400', '500', '600', '700', '800', '900', '950']

VALID_ASPECTS = ['auto', 'square', 'video', 'wide', '1/1', '3/2', '4/3', '5/4', '16/9', '16/10', '21/9']

VALID_GRID_COLS = [str(n) for n in range(1, 13)] + ['none', 'subgrid']

VALID_SPACING = [
    '0', 'px', '0.5', '1', '1.5', '2', '2.5', '3', '3.5', '4', '5', '6', '7', '8', '9', '10', '11', '12',
    '14', '16', '20', '24', '28', '32', '36', '40', '44', '48', '52', '56', '60', '64', '72', '80', '96',
    'auto', 'full', '1/2', '1/3', '2/3', '1/4', '2/4', '3/4',
]

SPACING_PREFIXES = ['p', 'm', 'px', 'py', 'mx', 'my', 'pt', 'pb', 'pl', 'pr', 'mt', 'mb', 'ml', 'mr']

VALID_SHADOWS = ['none', 'sm', 'md', 'lg', 'xl', '2xl', 'inner']

VALID_ROUNDED = ['none', 'sm', 'md', 'lg', 'xl', '2xl', '3xl', 'full']

VALID_TEXT_SIZES = ['xs', 'sm', 'base', 'lg', 'xl', '2xl', '3xl', '4xl', '5xl', '6xl', '7xl', '8xl', '9xl']

VALID_FONT_WEIGHTS = ['thin', 'extralight', 'light', 'normal', 'medium', 'semibold', 'bold', 'extrabold', 'black']

VALID_TRANSITIONS = ['none', 'all', 'colors', 'opacity', 'shadow', 'transform']

VALID_DURATIONS = ['75', '100', '150', '200', '300', '500', '700', '1000']

VALID_SCALES = ['0', '50', '75', '90', '95', '100', '105', '110', '125', '150']

VALID_OPACITIES = ['0', '5', '10', '20', '25', '30', '40', '50', '60', '70', '75', '80', '90', '95', '100']

BARE_COLORS = ('transparent', 'current', 'inherit', 'white', 'black')

CSS_IDENTIFIER = re.compile(r'^[a-zA-Z0-9\-_/]+$')
CSS_CLASS_PATTERN = re.compile(r'^[a-zA-Z0-9\-_:/.\[\](),\s]+$')
UNSAFE_CSS_CHARS = re.compile(r'[^a-zA-Z0-9\-_/]')

DANGEROUS_STYLE_PATTERNS = [
    re.compile(r'javascript:|expression\(|@import|<script|behavior:|binding:|include-source:|moz-binding:|vbscript:', re.IGNORECASE),
    re.compile(r'data:(?!image/(?:png|jpg|jpeg|gif|webp|svg\+xml))|on\w+\s*=', re.IGNORECASE),
]


def _color_class(prefix: str, color, shade, default_shade: str, fallback: str) -> str:
    if not color:
        return fallback

    color_str = str(color).lower()
    if color_str not in VALID_COLORS:
        return fallback

    if shade is not None and str(shade) in VALID_SHADES:
        return f"{prefix}-{color_str}-{shade}"
    if color_str in BARE_COLORS:
        return f"{prefix}-{color_str}"
    return f"{prefix}-{color_str}-{default_shade}"


def safe_bg_class(color, shade=None) -> str:
    """Background color class, defaulting to bg-gray-500."""
    return _color_class('bg', color, shade, '500', 'bg-gray-500')


def safe_text_class(color, shade=None) -> str:
    """Text color class, defaulting to text-gray-900."""
    return _color_class('text', color, shade, '900', 'text-gray-900')


def safe_aspect_class(ratio) -> str:
    if not ratio:
        return 'aspect-square'

    ratio_str = str(ratio)
    if ratio_str in VALID_ASPECTS:
        return f"aspect-{ratio_str.replace('/', '-')}"
    return 'aspect-square'


def safe_grid_cols_class(cols) -> str:
    if not cols:
        return 'grid-cols-1'

    cols_value = str(cols)
    if cols_value in VALID_GRID_COLS:
        return f"grid-cols-{cols_value}"
    return 'grid-cols-1'


def safe_spacing_class(prefix: str, value) -> str:
    """
    Spacing class for a validated prefix/value pair.

    Args:
        prefix: One of the padding/margin prefixes (p, mx, pt, ...)
        value: A Tailwind spacing scale value

    Returns:
        str: e.g. 'px-4', or '{prefix}-0' if invalid
    """
    if value is None or prefix not in SPACING_PREFIXES:
        return f"{prefix}-0"

    value_str = str(value)
    if value_str in VALID_SPACING:
        return f"{prefix}-{value_str.replace('/', '-')}"
    return f"{prefix}-0"


def safe_shadow_class(size) -> str:
    if not size:
        return 'shadow'

    size_str = str(size)
    if size_str in VALID_SHADOWS:
        return f"shadow-{size_str}"
    return 'shadow'


def safe_rounded_class(size) -> str:
    if not size:
        return 'rounded'

    size_str = str(size)
    if size_str in VALID_ROUNDED:
        return f"rounded-{size_str}"
    return 'rounded'


def safe_text_size_class(size) -> str:
    if not size:
        return 'text-base'

    size_str = str(size)
    if size_str in VALID_TEXT_SIZES:
        return f"text-{size_str}"
    return 'text-base'


def safe_font_weight_class(weight) -> str:
    if not weight:
        return 'font-normal'

    weight_str = str(weight)
    if weight_str in VALID_FONT_WEIGHTS:
        return f"font-{weight_str}"
    return 'font-normal'


def safe_transition_class(kind=None) -> str:
    if not kind:
        return 'transition'

    kind_str = str(kind)
    if kind_str in VALID_TRANSITIONS:
        return f"transition-{kind_str}"
    return 'transition'


def safe_duration_class(duration) -> str:
    duration_str = str(duration)
    if duration_str in VALID_DURATIONS:
        return f"duration-{duration_str}"
    return 'duration-200'


def safe_scale_class(scale) -> str:
    scale_str = str(scale)
    if scale_str in VALID_SCALES:
        return f"scale-{scale_str}"
    return 'scale-100'


def safe_opacity_class(opacity) -> str:
    opacity_str = str(opacity)
    if opacity_str in VALID_OPACITIES:
        return f"opacity-{opacity_str}"
    return 'opacity-100'


def valid_css_value(value) -> bool:
    if value is None:
        return False
    return bool(CSS_IDENTIFIER.match(str(value)))


def sanitize_css_value(value) -> str:
    """Strip everything except letters, digits, hyphens, underscores and slashes."""
    if value is None:
        return ''
    return UNSAFE_CSS_CHARS.sub('', str(value))


def safe_css_class(css_class) -> bool:
    """
    Check a class string for injection attempts.

    Allows Tailwind variants (hover:bg-blue-600), fractional spacing (p-0.5)
    and arbitrary values (grid-cols-[repeat(auto-fit,minmax(200px,1fr))]).
    """
    if not css_class:
        return False

    if ';' in css_class or '{' in css_class or '}' in css_class:
        return False
    if '<' in css_class or '>' in css_class:
        return False
    if 'javascript:' in css_class or 'data:' in css_class:
        return False

    return bool(CSS_CLASS_PATTERN.match(css_class))


def build_safe_class(prefix, value, fallback=None):
    """Join sanitized prefix and value with '-', or return fallback."""
    if prefix is None or value is None:
        return fallback

    sanitized_prefix = sanitize_css_value(prefix)
    sanitized_value = sanitize_css_value(value)

    if not sanitized_prefix or not sanitized_value:
        return fallback

    return f"{sanitized_prefix}-{sanitized_value}"


def safe_style(style_string):
    """
    Validate an inline style string.

    Returns:
        str: The style string, or None if it contains an XSS pattern
    """
    if not style_string:
        return None

    for pattern in DANGEROUS_STYLE_PATTERNS:
        if pattern.search(style_string):
            logger.warning(f"[SECURITY] Potentially dangerous style blocked: {style_string}")
            return None

    return style_string
