"""
Layout component

Wraps pre-rendered page content into a complete HTML document. Navigation
chrome belongs to the surrounding portal and is not rendered here.
"""

from typing import Optional, Dict, Any
from .base import Component


class Layout(Component):
    """Main layout component that assembles the complete page"""

    def __init__(
        self,
        title: str,
        content: str,
        user: Optional[Dict[str, Any]] = None,
        current_path: str = "/",
    ):
        """
        Args:
            title: Page title (will be escaped)
            content: Main content HTML (pre-rendered components)
            user: Current user object (optional)
            current_path: Current URL path
        """
        self.title = title
        self.content = content
        self.user = user
        self.current_path = current_path

    def render(self) -> str:
        """Render the complete HTML document."""
        return f"""<!DOCTYPE html>
<html lang="en">
<head>
    {self._render_head()}
</head>
<body>
    <a href="#main-content" class="skip-link">Skip to main content</a>
    <main id="main-content" class="main-content" role="main">
        {self.content}
    </main>
</body>
</html>"""

    def _render_head(self) -> str:
        return f"""
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>{self.escape(self.title)} - Internship Portal</title>
    <link rel="stylesheet" href="/static/css/portal.css">
    """
