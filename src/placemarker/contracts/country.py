"""Country contracts."""

from __future__ import annotations

import re

from pydantic import BaseModel

CountryCode = str

_ALPHA3_RE = re.compile(r"^[A-Z]{3}$")


def normalize_code(code: str) -> CountryCode:
    """Upper-case and strip *code*; raise ``ValueError`` when it is not alpha-3 shaped."""
    normalized = (code or "").strip().upper()
    if not _ALPHA3_RE.match(normalized):
        raise ValueError(f"not an ISO-3166 alpha-3 code: {code!r}")
    return normalized


class Country(BaseModel):
    name: str
    alpha2: str
    alpha3: CountryCode

    model_config = {"frozen": True}
