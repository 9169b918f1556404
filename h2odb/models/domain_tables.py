from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Mapping

"""Static lab domain tables (read-only for the whole run).

Report "Param" values are mapped to database analyte codes, analysis method
suffixes, unit overrides and target chemistry tables. ``test_priority`` lists
the acceptable "Test" descriptions per parameter, most preferred first, and
``standards`` holds the acceptable drinking-water range per analyte.
"""

__all__ = [
    "ChemistryTable",
    "DomainTables",
    "DEFAULT_TABLES",
    "TOTAL_ANALYTE_SUFFIX",
    "total_analyte",
    "base_analyte",
]

TOTAL_ANALYTE_SUFFIX = "(total)"


class ChemistryTable(Enum):
    MAJOR = "major_chemistry"
    MINOR = "minor_chemistry"


def total_analyte(code: str) -> str:
    if code.endswith(TOTAL_ANALYTE_SUFFIX):
        return code
    return code + TOTAL_ANALYTE_SUFFIX


def base_analyte(code: str) -> str:
    if code.endswith(TOTAL_ANALYTE_SUFFIX):
        return code[: -len(TOTAL_ANALYTE_SUFFIX)]
    return code


@dataclass(frozen=True)
class DomainTables:
    analytes: Mapping[str, str]
    chemistry_tables: Mapping[str, ChemistryTable]
    methods: Mapping[str, str] = field(default_factory=dict)
    units: Mapping[str, str] = field(default_factory=dict)
    test_priority: Mapping[str, tuple[re.Pattern[str], ...]] = field(default_factory=dict)
    standards: Mapping[str, tuple[float, float]] = field(default_factory=dict)

    def test_patterns(self, parameter: str) -> tuple[re.Pattern[str], ...] | None:
        return self.test_priority.get(parameter)

    def test_rank(self, parameter: str, test: str) -> int | None:
        """Index of the first pattern matching ``test``; None when nothing matches.

        Parameters without a registered pattern list rank 0.
        """
        patterns = self.test_priority.get(parameter)
        if patterns is None:
            return 0
        for idx, pattern in enumerate(patterns):
            if pattern.search(test):
                return idx
        return None


# Param column values as they appear in the lab reports
ALKALINITY = "Alkalinity as CaCO3"
ALUMINUM = "Aluminum"
ANIONS = "Anions total"
ANTIMONY = "Antimony 121"
ARSENIC = "Arsenic"
BARIUM = "Barium"
BERYLLIUM = "Beryllium"
BICARBONATE = "Bicarbonate (HCO3)"
BORON = "Boron 11"
BROMIDE = "Bromide"
CADMIUM = "Cadmium 111"
CALCIUM = "Calcium"
CARBONATE = "Carbonate (CO3)"
CATIONS = "Cations total"
CHLORIDE = "Chloride"
CHROMIUM = "Chromium"
COBALT = "Cobalt"
COPPER = "Copper 65"
FLUORIDE = "Fluoride"
HARDNESS = "Hardness"
IRON = "Iron"
LEAD = "Lead"
LITHIUM = "Lithium"
MAGNESIUM = "Magnesium"
MANGANESE = "Manganese"
MOLYBDENUM = "Molybdenum 95"
NICKEL = "Nickel"
NITRATE = "Nitrate"
NITRITE = "Nitrite"
PHOSPHATE = "Ortho Phosphate"
PERCENT_DIFF = "Percent difference"
POTASSIUM = "Potassium"
SELENIUM = "Selenium"
SILICON_DIOXIDE = "SiO2"
SILICON = "Silicon"
SILVER = "Silver 107"
SODIUM = "Sodium"
CONDUCTANCE = "Specific Conductance"
STRONTIUM = "Strontium"
SULFATE = "Sulfate"
TDS = "TDS calc"
THALLIUM = "Thallium"
THORIUM = "Thorium"
TIN = "Tin"
TITANIUM = "Titanium"
URANIUM = "Uranium"
VANADIUM = "Vanadium"
ZINC = "Zinc 66"
PH = "pH"

_MAJOR = ChemistryTable.MAJOR
_MINOR = ChemistryTable.MINOR

# param -> (analyte code, target table)
_PARAMS: dict[str, tuple[str, ChemistryTable]] = {
    ALKALINITY: ("ALK", _MAJOR),
    ALUMINUM: ("Al", _MINOR),
    ANIONS: ("TAn", _MAJOR),
    ANTIMONY: ("Sb", _MINOR),
    ARSENIC: ("As", _MINOR),
    BARIUM: ("Ba", _MINOR),
    BERYLLIUM: ("Be", _MINOR),
    BICARBONATE: ("HCO3", _MAJOR),
    BORON: ("B", _MINOR),
    BROMIDE: ("Br", _MINOR),
    CADMIUM: ("Cd", _MINOR),
    CALCIUM: ("Ca", _MAJOR),
    CARBONATE: ("CO3", _MAJOR),
    CATIONS: ("TCat", _MAJOR),
    CHLORIDE: ("Cl", _MAJOR),
    CHROMIUM: ("Cr", _MINOR),
    COBALT: ("Co", _MINOR),
    COPPER: ("Cu", _MINOR),
    FLUORIDE: ("F", _MINOR),
    HARDNESS: ("HRD", _MAJOR),
    IRON: ("Fe", _MINOR),
    LEAD: ("Pb", _MINOR),
    LITHIUM: ("Li", _MINOR),
    MAGNESIUM: ("Mg", _MAJOR),
    MANGANESE: ("Mn", _MINOR),
    MOLYBDENUM: ("Mo", _MINOR),
    NICKEL: ("Ni", _MINOR),
    NITRATE: ("NO3", _MINOR),
    NITRITE: ("NO2", _MINOR),
    PHOSPHATE: ("PO4", _MINOR),
    PERCENT_DIFF: ("IONBAL", _MAJOR),
    POTASSIUM: ("K", _MAJOR),
    SELENIUM: ("Se", _MINOR),
    SILICON_DIOXIDE: ("SiO2", _MINOR),
    SILICON: ("Si", _MINOR),
    SILVER: ("Ag", _MINOR),
    SODIUM: ("Na", _MAJOR),
    CONDUCTANCE: ("CONDLAB", _MAJOR),
    STRONTIUM: ("Sr", _MINOR),
    SULFATE: ("SO4", _MAJOR),
    TDS: ("TDS", _MAJOR),
    THALLIUM: ("Tl", _MINOR),
    THORIUM: ("Th", _MINOR),
    TIN: ("Sn", _MINOR),
    TITANIUM: ("Ti", _MINOR),
    URANIUM: ("U", _MINOR),
    VANADIUM: ("V", _MINOR),
    ZINC: ("Zn", _MINOR),
    PH: ("pHL", _MAJOR),
}

_METHODS = {
    ALKALINITY: "As CaCO3",
    BICARBONATE: "Alkalinity as HCO3",
    TDS: "Calculation",
    HARDNESS: "As CaCO3",
}

_UNITS = {
    ANIONS: "epm",
    CATIONS: "epm",
    HARDNESS: "mg/L",
    PERCENT_DIFF: "%Diff",
    PH: "pH",
    CONDUCTANCE: "µS/cm",
}

# most preferred first
_TEST_PRIORITY = {
    STRONTIUM: (
        re.compile(r" *trace +metal.*", re.IGNORECASE),
        re.compile(r" *cation.*", re.IGNORECASE),
    ),
    BROMIDE: (
        re.compile(r" *low +bromide *", re.IGNORECASE),
        re.compile(r" *anions +by +ic *", re.IGNORECASE),
    ),
}

_STANDARDS_BY_PARAM = {
    ALUMINUM: (0.0, 0.05),
    ANTIMONY: (0.0, 0.006),
    ARSENIC: (0.0, 0.01),
    BARIUM: (0.0, 2.0),
    BERYLLIUM: (0.0, 0.004),
    BORON: (0.0, 7.0),
    CADMIUM: (0.0, 0.005),
    CHLORIDE: (0.0, 250.0),
    CHROMIUM: (0.0, 0.1),
    COPPER: (0.0, 1.0),
    FLUORIDE: (0.0, 2.0),
    HARDNESS: (0.0, 150.0),
    IRON: (0.0, 0.3),
    LEAD: (0.0, 0.015),
    MANGANESE: (0.0, 0.05),
    NICKEL: (0.0, 0.1),
    NITRATE: (0.0, 45.0),
    NITRITE: (0.0, 3.3),
    SELENIUM: (0.0, 0.05),
    SILVER: (0.0, 0.1),
    SODIUM: (0.0, 200.0),
    SULFATE: (0.0, 250.0),
    TDS: (0.0, 500.0),
    THALLIUM: (0.0, 0.0025),
    URANIUM: (0.0, 0.03),
    ZINC: (0.0, 5.0),
    PH: (6.5, 8.5),
}

DEFAULT_TABLES = DomainTables(
    analytes=MappingProxyType({p: code for p, (code, _) in _PARAMS.items()}),
    chemistry_tables=MappingProxyType({p: table for p, (_, table) in _PARAMS.items()}),
    methods=MappingProxyType(_METHODS),
    units=MappingProxyType(_UNITS),
    test_priority=MappingProxyType(_TEST_PRIORITY),
    standards=MappingProxyType(
        {_PARAMS[p][0]: bounds for p, bounds in _STANDARDS_BY_PARAM.items()}
    ),
)
