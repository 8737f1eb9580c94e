from utils.errors import ApiError

SERVICE_ICONS = (
    "PaintBucket",
    "Palette",
    "Shield",
    "Sparkles",
    "Wrench",
    "Car",
    "Droplets",
    "Brush",
)
FALLBACK_ICON = "Sparkles"

# older rows stored lowercase names
_ALIASES = {name.lower(): name for name in SERVICE_ICONS}
_ALIASES["paint"] = "PaintBucket"


def normalize_icon(value) -> str:
    """Write path: unknown names are rejected, missing ones get the fallback."""
    if value is None or (isinstance(value, str) and not value.strip()):
        return FALLBACK_ICON
    if not isinstance(value, str):
        raise ApiError("Unknown icon_name", inline_error="icon_name")
    name = _ALIASES.get(value.strip().lower())
    if name is None:
        raise ApiError(
            "Unknown icon_name, expected one of: " + ", ".join(SERVICE_ICONS),
            inline_error="icon_name",
        )
    return name


def display_icon(value) -> str:
    """Read path: anything unrecognised renders as the fallback."""
    if not isinstance(value, str):
        return FALLBACK_ICON
    return _ALIASES.get(value.strip().lower(), FALLBACK_ICON)
