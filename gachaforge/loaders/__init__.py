"""Loaders for declarative prize catalogues."""

from .json_loader import (
    CatalogDefinition,
    dump_catalog_dict,
    load_prize_table,
    parse_catalog_dict,
    validate_catalog_dict,
    validate_catalog_file,
)

__all__ = [
    "CatalogDefinition",
    "dump_catalog_dict",
    "load_prize_table",
    "parse_catalog_dict",
    "validate_catalog_dict",
    "validate_catalog_file",
]
