"""Page chrome shared by the sign-in panel and the explorer page."""

from typing import Optional

from .base import Component

# Pinned htmx release; forms keep plain method/action so pages work without it
HTMX_ORIGIN = "https://unpkg.com"
HTMX_SRC = f"{HTMX_ORIGIN}/htmx.org@1.9.12/dist/htmx.min.js"


class Layout(Component):
    def __init__(self, title: str, content: str, user_email: Optional[str] = None):
        """
        Args:
            title: Page title (escaped)
            content: Pre-rendered main content HTML
            user_email: Signed-in user shown in the header with a sign-out link
        """
        self.title = title
        self.content = content
        self.user_email = user_email

    def render(self) -> str:
        return f"""<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>{self.escape(self.title)} - S3 Explorer</title>
    <script src="{HTMX_SRC}"></script>
</head>
<body>
    {self._render_header()}
    <main id="main-content" role="main">
        {self.content}
    </main>
</body>
</html>"""

    def _render_header(self) -> str:
        if self.user_email is None:
            return '<header class="app-header"><h1>S3 Explorer</h1></header>'
        return f"""<header class="app-header">
        <h1>S3 Explorer</h1>
        <span id="userEmail">{self.escape(self.user_email)}</span>
        <a href="/auth/logout" class="btn btn-outline">Sign out</a>
    </header>"""
