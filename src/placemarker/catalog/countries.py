"""ISO-3166 country catalog backed by pycountry."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

import pycountry

from placemarker.contracts.country import Country, CountryCode
from placemarker.contracts.exceptions import ValidationError


def _display_name(entry: Any) -> str:
    return getattr(entry, "common_name", None) or entry.name


def _load_pycountry() -> list[Country]:
    return [
        Country(name=_display_name(entry), alpha2=entry.alpha_2, alpha3=entry.alpha_3)
        for entry in pycountry.countries
    ]


class CountryCatalog:
    """Static alpha-3 lookup and name search.

    The catalog defines which codes are valid; anything it cannot resolve
    is rejected by :meth:`require`.
    """

    def __init__(self, countries: Iterable[Country] | None = None) -> None:
        rows = list(countries) if countries is not None else _load_pycountry()
        self._countries = sorted(rows, key=lambda country: country.name.casefold())
        self._by_alpha3 = {country.alpha3.upper(): country for country in self._countries}

    def __len__(self) -> int:
        return len(self._countries)

    def __contains__(self, code: object) -> bool:
        return isinstance(code, str) and code.strip().upper() in self._by_alpha3

    def all(self) -> list[Country]:
        return list(self._countries)

    def lookup(self, code: str) -> Country | None:
        return self._by_alpha3.get((code or "").strip().upper())

    def require(self, code: str) -> Country:
        country = self.lookup(code)
        if country is None:
            raise ValidationError(f"unknown country code: {code!r}")
        return country

    def name_for(self, code: CountryCode) -> str | None:
        country = self.lookup(code)
        return country.name if country is not None else None

    def search(self, query: str, limit: int = 10) -> list[Country]:
        """Case-insensitive match on name, alpha-2 and alpha-3.

        Names starting with the query come first, then alphabetical order.
        """
        needle = (query or "").strip().casefold()
        if not needle or limit <= 0:
            return []

        matches = [
            country
            for country in self._countries
            if needle in country.name.casefold()
            or needle in country.alpha2.casefold()
            or needle in country.alpha3.casefold()
        ]
        matches.sort(key=lambda country: (not country.name.casefold().startswith(needle), country.name.casefold()))
        return matches[:limit]


_DEFAULT_CATALOG: CountryCatalog | None = None


def default_catalog() -> CountryCatalog:
    global _DEFAULT_CATALOG
    if _DEFAULT_CATALOG is None:
        _DEFAULT_CATALOG = CountryCatalog()
    return _DEFAULT_CATALOG
