"""Shared fixtures."""

import pytest

from sheet_cleaner.matching import ProductAlias, SizeAlias, SizeStat
from sheet_cleaner.schema import SheetData
from sheet_cleaner.stores import InMemoryAliasStore


@pytest.fixture
def store():
    return InMemoryAliasStore(
        sizes=[SizeStat('12"x24"', 12), SizeStat("2x2", 2)],
        size_aliases=[SizeAlias("MOS-22", "2x2")],
        product_aliases=[ProductAlias("COR-PRO-OAK-5IN", "Coretec Pro Oak")],
        product_names=["Coretec Pro Oak", "Shaw Floorte Pro", "Mohawk SolidTech"],
    )


@pytest.fixture
def sheet():
    return SheetData(
        file_name="vendor.xlsx",
        headers=["SKU", "Description", "Product", "Cost"],
        rows=[
            {"SKU": "A1", "Description": "12 x 24", "Product": "COR-PRO-OAK-5IN", "Cost": "$3.499"},
            {"SKU": "A2", "Description": "M122 Tile Sample", "Product": "Floorte Pro 7in", "Cost": "call for price"},
            {"SKU": "A3", "Description": "", "Product": "COR-PRO-OAK-5IN", "Cost": "2.1"},
            {"SKU": "A4", "Description": "Mosaic M122 gloss", "Product": "cor-pro-oak-5in", "Cost": ""},
            {"SKU": "A5", "Description": "Custom 12x12 Run", "Product": "Mystery Vinyl", "Cost": "$10"},
        ],
    )
