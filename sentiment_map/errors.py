from __future__ import annotations


class SentimentMapError(Exception):
    """Base class for dashboard errors."""


class LoadError(SentimentMapError):
    """Dataset could not be loaded. Terminal until the user reloads."""


class FetchError(LoadError):
    """Resource unreachable, missing, or answered with a non-2xx status."""


class ParseError(LoadError):
    """Structural CSV malformation (quoting, field count, missing columns)."""


class RenderError(SentimentMapError):
    """Map initialization/render failure. Terminal for the map only."""


class ZoomError(SentimentMapError):
    """Pan/zoom request failed. Logged and swallowed by the controller."""
