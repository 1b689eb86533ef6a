"""Exceptions raised by csscritic collaborators."""

from __future__ import annotations


class CssCriticError(Exception):
    """Base class for csscritic errors."""


class RenderError(CssCriticError):
    """A page could not be rendered (e.g. it does not exist or failed to load)."""

    def __init__(self, url: str, reason: str = ""):
        self.url = url
        self.reason = reason
        message = f"Failed to render {url}"
        if reason:
            message += f": {reason}"
        super().__init__(message)
