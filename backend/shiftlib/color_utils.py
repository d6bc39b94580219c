"""Color helpers for the shift display palette (stored as '#rrggbb' strings)."""

SHIFT_COLORS = [
    {'value': '#3b82f6', 'label': 'Blue'},
    {'value': '#22c55e', 'label': 'Green'},
    {'value': '#ef4444', 'label': 'Red'},
    {'value': '#a855f7', 'label': 'Purple'},
    {'value': '#f97316', 'label': 'Orange'},
    {'value': '#eab308', 'label': 'Yellow'},
    {'value': '#14b8a6', 'label': 'Teal'},
    {'value': '#ec4899', 'label': 'Pink'},
]

DEFAULT_COLOR = SHIFT_COLORS[0]['value']

_PALETTE = {c['value'] for c in SHIFT_COLORS}


def is_palette_color(value: str) -> bool:
    """True if value is one of the fixed palette entries (case-insensitive)."""
    return isinstance(value, str) and value.lower() in _PALETTE


def color_label(value: str) -> str:
    for c in SHIFT_COLORS:
        if isinstance(value, str) and c['value'] == value.lower():
            return c['label']
    return ''


def hex_to_rgb(value: str) -> tuple:
    """Convert '#rrggbb' to an (R, G, B) tuple. Invalid input maps to white."""
    if not isinstance(value, str) or len(value) != 7 or not value.startswith('#'):
        return (255, 255, 255)
    try:
        return (int(value[1:3], 16), int(value[3:5], 16), int(value[5:7], 16))
    except ValueError:
        return (255, 255, 255)


def is_light_color(value: str) -> bool:
    """Returns True if the color is light (use dark text on it)."""
    r, g, b = hex_to_rgb(value)
    luminance = (0.299 * r + 0.587 * g + 0.114 * b) / 255
    return luminance > 0.5
