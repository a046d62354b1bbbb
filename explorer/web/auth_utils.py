"""
Session cookie policy shared by the app and the routers.

Design:
    Pure helper; callers pass the environment string. Flags are the same in
    every environment.
"""

from __future__ import annotations


def cookie_opts(environment: str) -> dict:
    """Return hardened cookie flags (dev = prod).

    Returns a mapping with keys:
      - httponly: True
      - secure: True
      - samesite: "lax"  # sent on the top-level redirect back from the hosted UI
    """
    return {"httponly": True, "secure": True, "samesite": "lax"}
