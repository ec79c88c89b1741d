"""Country catalog exports."""

from placemarker.catalog.countries import CountryCatalog, default_catalog

__all__ = ["CountryCatalog", "default_catalog"]
