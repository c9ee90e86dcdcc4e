"""FastAPI route modules.

Exports all route modules for inclusion in the main application.
"""

from quotebridge.api.routes import auth, quotes

__all__ = [
    "auth",
    "quotes",
]
