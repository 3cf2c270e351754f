from __future__ import annotations


class StorefrontError(Exception):
    """Base error for storefront generation."""


class DesignParseError(StorefrontError, ValueError):
    """Completion output could not be parsed into a storefront design."""


class SectionInsertError(StorefrontError):
    """Sections could not be persisted, so no component can reference them."""


class GenerationFailedError(StorefrontError):
    def __init__(self, message: str, errors: list[str] | None = None) -> None:
        super().__init__(message)
        self.errors = list(errors or [])


class TemplateNotFoundError(StorefrontError, LookupError):
    pass


__all__ = [
    "StorefrontError",
    "DesignParseError",
    "SectionInsertError",
    "GenerationFailedError",
    "TemplateNotFoundError",
]
