"""
Base class for the explorer's HTML components.

Pages are assembled from small Python classes instead of a template engine;
every dynamic value passes through `escape` or `attributes`.
"""

from typing import Any, Optional
import html


class Component:
    """Base class for all UI components."""

    def render(self) -> str:
        raise NotImplementedError("Subclasses must implement render()")

    @staticmethod
    def escape(text: Optional[Any]) -> str:
        """Escape HTML entities; None renders as an empty string."""
        return html.escape(str(text)) if text is not None else ""

    @staticmethod
    def classes(*args: str, **conditionals: bool) -> str:
        """Join CSS classes, adding each keyword class whose value is true.

        >>> Component.classes("notice", warning=True, error=False)
        'notice warning'
        """
        names = [a for a in args if a]
        names.extend(key for key, value in conditionals.items() if value)
        return " ".join(names)

    @staticmethod
    def attributes(**attrs: Any) -> str:
        """Build an escaped HTML attribute string.

        A trailing underscore maps reserved names (`class_` -> `class`); inner
        underscores become hyphens. True renders a boolean attribute, False and
        None drop the attribute.
        """
        parts = []
        for key, value in attrs.items():
            key = key[:-1] if key.endswith("_") else key.replace("_", "-")
            if value is True:
                parts.append(key)
            elif value is not False and value is not None:
                parts.append(f'{key}="{html.escape(str(value))}"')
        return " ".join(parts)
