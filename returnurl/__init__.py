"""Signed, expiring return-URL tokens for post sign-up redirects."""
from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("returnurl")
except PackageNotFoundError:  # pragma: no cover
    __version__ = "0.0.0"
