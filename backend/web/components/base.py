"""
Base Component class for the portal UI.

Components render HTML strings from pure Python. Escaping lives here so
every component gets it by default.
"""

from typing import Any, Optional
import html


class Component:
    """Base class for all UI components."""

    def render(self) -> str:
        """Render the component as an HTML string"""
        raise NotImplementedError("Subclasses must implement render()")

    @staticmethod
    def escape(text: Optional[str]) -> str:
        """Escape HTML entities; None renders as an empty string."""
        return html.escape(str(text)) if text is not None else ""

    @staticmethod
    def classes(*args: str, **conditionals: bool) -> str:
        """Build a CSS class string with conditional classes

        Example:
            >>> Component.classes("btn", "btn-primary", disabled=True, active=False)
            "btn btn-primary disabled"
        """
        classes = list(args)
        classes.extend(key for key, value in conditionals.items() if value)
        return " ".join(classes)

    @staticmethod
    def attributes(**attrs: Any) -> str:
        """Build HTML attributes from keyword arguments

        Example:
            >>> Component.attributes(id="test", data_value="123", disabled=True)
            'id="test" data-value="123" disabled'
        """
        result = []
        for key, value in attrs.items():
            # Special-case trailing underscore for reserved names: class_ -> class, for_ -> for
            if key.endswith("_"):
                key = key[:-1]
            else:
                # Convert inner underscores to hyphens (data_value -> data-value)
                key = key.replace("_", "-")

            if value is True:
                result.append(key)
            elif value is not False and value is not None:
                result.append(f'{key}="{html.escape(str(value))}"')

        return " ".join(result)
