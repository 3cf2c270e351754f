from __future__ import annotations

import re
from enum import Enum
from typing import Any, Mapping

from .dictionaries import DEFAULT_LOGO_URL, DEFAULT_TAGLINE
from .models.vendor import VendorData

_TOKEN_PATTERN = re.compile(r"\{\{\s*vendor\.([A-Za-z_][A-Za-z0-9_]*)\s*\}\}")


class VendorToken(str, Enum):
    store_name = "store_name"
    slug = "slug"
    store_tagline = "store_tagline"
    logo_url = "logo_url"

    def value_for(self, vendor: VendorData) -> str:
        if self is VendorToken.store_name:
            return vendor.store_name
        if self is VendorToken.slug:
            return vendor.slug
        if self is VendorToken.store_tagline:
            return vendor.store_tagline or DEFAULT_TAGLINE
        return vendor.logo_url or DEFAULT_LOGO_URL


_TOKENS: Mapping[str, VendorToken] = {token.value: token for token in VendorToken}


def resolve_text(text: str, vendor: VendorData) -> str:
    """Expand ``{{vendor.<field>}}`` tokens in a single string.

    Substitution is a single pass, so expanded values are never re-scanned.
    Tokens naming an unknown field are left exactly as written so older
    templates keep rendering when new tokens are introduced.
    """

    if "{{" not in text:
        return text

    def _replace(match: re.Match[str]) -> str:
        token = _TOKENS.get(match.group(1))
        if token is None:
            return match.group(0)
        return token.value_for(vendor)

    return _TOKEN_PATTERN.sub(_replace, text)


def resolve_props(props: Mapping[str, Any], vendor: VendorData) -> dict[str, Any]:
    """Return a new prop bag with top-level string values resolved.

    Non-string values (numbers, booleans, nested lists and objects) are
    copied through untouched. The input mapping is never modified.
    """

    return {
        key: resolve_text(value, vendor) if isinstance(value, str) else value
        for key, value in props.items()
    }


__all__ = ["VendorToken", "resolve_text", "resolve_props"]
