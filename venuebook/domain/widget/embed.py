"""Embed snippet for third-party websites"""

from html import escape
from typing import Any, Optional

from ...config import API_URL

CALENDAR_STYLES = ("standard", "compact", "expanded")

# option key -> data attribute on the loader script
OPTION_ATTRIBUTES = (
    ("primaryColor", "data-color"),
    ("layout", "data-layout"),
    ("secondaryColor", "data-secondary-color"),
    ("textColor", "data-text-color"),
    ("fontFamily", "data-font-family"),
    ("borderRadius", "data-border-radius"),
    ("logoUrl", "data-logo-url"),
    ("headerText", "data-header-text"),
    ("buttonStyle", "data-button-style"),
    ("darkMode", "data-dark-mode"),
    ("calendarStyle", "data-calendar-style"),
)
RESERVED_ATTRIBUTES = frozenset(["src", "data-api-key"] + [attribute for _, attribute in OPTION_ATTRIBUTES])


def _attr_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return escape(str(value), quote=True)


def _feature_attribute(feature: str) -> str:
    slug = "".join(f"-{c.lower()}" if c.isupper() else c for c in feature)
    slug = "".join(c if c.isalnum() or c == "-" else "-" for c in slug.lower())
    return f"data-{slug.strip('-')}"


def build_embed_code(api_key: str, options: Optional[dict[str, Any]] = None, api_url: str = API_URL) -> str:
    """
    Render the HTML snippet a business pastes into its website.

    Args:
        api_key: Public widget API key
        options: Customization keyed like the widget settings (primaryColor, layout,
            ..., features); empty values are left out
        api_url: Base URL serving widget.js

    Raises:
        ValueError: If calendarStyle is not standard, compact or expanded
    """
    options = options or {}
    calendar_style = options.get("calendarStyle")
    if calendar_style and calendar_style not in CALENDAR_STYLES:
        raise ValueError(f"calendarStyle must be one of: {', '.join(CALENDAR_STYLES)}")

    base_url = escape(api_url.rstrip("/"), quote=True)
    attributes = [
        f'src="{base_url}/widget.js"',
        f'data-api-key="{_attr_value(api_key)}"',
    ]
    for key, attribute in OPTION_ATTRIBUTES:
        value = options.get(key)
        if value is None or value == "":
            continue
        attributes.append(f'{attribute}="{_attr_value(value)}"')

    # features never override the key or an option attribute
    taken = set(RESERVED_ATTRIBUTES)
    for feature, enabled in sorted((options.get("features") or {}).items()):
        attribute = _feature_attribute(feature)
        if attribute in taken:
            continue
        taken.add(attribute)
        attributes.append(f'{attribute}="{_attr_value(bool(enabled))}"')

    return (
        "<!-- VenueBook Widget -->\n"
        '<div id="venuebook-widget"></div>\n'
        f"<script {' '.join(attributes)} async></script>\n"
        "<!-- End VenueBook Widget -->"
    )
