from typing import Iterable

from .base import Component


class Notices(Component):
    """Flash messages shown once at the top of a page or fragment."""

    def __init__(self, messages: Iterable[str], level: str = "info"):
        self.messages = [m for m in messages if m]
        self.level = level

    def render(self) -> str:
        if not self.messages:
            return ""
        items = "".join(
            f'<div {self.attributes(class_=self.classes("alert", f"alert-{self.level}"), role="alert")}>'
            f"{self.escape(m)}</div>"
            for m in self.messages
        )
        return f'<div class="notices" aria-live="polite">{items}</div>'
