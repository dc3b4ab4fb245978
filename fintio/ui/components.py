"""Small presentational helpers rendered as HTML by the dashboard."""

from html import escape


DEFAULT_ORB_COLOR = "from-primary/20 to-accent/10"


def gradient_orb(class_name: str = "", color: str = DEFAULT_ORB_COLOR) -> str:
    """
    Decorative blurred, pulsing circle.

    Returns the markup only; placement and size come from class_name.
    """
    classes = f"absolute rounded-full blur-3xl animate-pulse {color} {class_name}"
    return f'<div class="{escape(classes, quote=True)}"></div>'
