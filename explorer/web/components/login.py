from typing import Iterable

from .base import Component
from .notices import Notices


class LoginPanel(Component):
    """Sign-in panel shown to anonymous sessions."""

    def __init__(self, notices: Iterable[str] = ()):
        self.notices = list(notices)

    def render(self) -> str:
        return f"""<section id="loginSection" class="login-panel">
    {Notices(self.notices, level="danger").render()}
    <h2>Sign in</h2>
    <p>Sign in with your organization account to browse the shared bucket.</p>
    <a href="/auth/login" class="btn btn-primary" id="loginButton">Sign in</a>
</section>"""
