"""Pure domain utilities: allow-list, return-URL tokens, redirects.

Nothing here touches FastAPI or the environment; secrets and allow-lists
are passed in so the same code serves the API, the runner and the tests.
"""
__all__ = ["paths", "tokens", "redirects"]
