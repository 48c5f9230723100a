"""Static display tables shared by the pipeline and the dashboard.

These tables are fixed at release time (changing a rate means redeploying,
not reconfiguring). They are bundled in a frozen `DisplayConfig` so callers
pass them into the aggregation functions explicitly.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from functools import lru_cache
from types import MappingProxyType
from typing import Mapping

# 1 MT expressed in each currency
CURRENCY_RATES: Mapping[str, float] = MappingProxyType({
    "MT": 1.0,
    "USD": 0.016,
    "EUR": 0.015,
})

CURRENCY_SYMBOLS: Mapping[str, str] = MappingProxyType({
    "MT": "MT",
    "USD": "USD",
    "EUR": "€",
})

OTHER = "Other"

FAMILY_DISPLAY_NAMES: Mapping[str, str] = MappingProxyType({
    "Acanthuridae": "Surgeonfish",
    "Ariidae": "Catfish",
    "Balistidae": "Triggerfish",
    "Caesionidae": "Fusilier",
    "Carangidae": "Jacks/Trevally/Other Scad",
    "Clupeidae": "Sardines/pilchards",
    "Dasyatidae": "Stingray",
    "Gerreidae": "Mojarra/Silverbelly",
    "Haemulidae": "Grunts",
    "Hemiramphidae": "Halfbeaks",
    "Holocentridae": "Soldierfish",
    "Kyphosidae": "Chub",
    "Lethrinidae": "Emperor",
    "Lutjanidae": "Snapper/seaperch",
    "Mullidae": "Goatfish",
    "Myliobatidae": "Eagle ray",
    "Nemipteridae": "Threadfin bream",
    "Octopodidae": "Octopus",
    "Scaridae": "Parrotfish",
    "Scombridae": "Mackerel scad",
    "Serranidae": "Grouper",
    "Siganidae": "Spinefoot",
    "Sphyraenidae": "Barracuda",
    "Xiphiidae": "Swordfish",
    "Others": OTHER,
})

# Closed set of stacked-bar categories, in legend order
DISPLAY_CATEGORIES: tuple[str, ...] = (
    "Barracuda",
    "Chub",
    "Emperor",
    "Fusilier",
    "Grouper",
    "Jacks/Trevally/Other Scad",
    "Mackerel scad",
    "Mojarra/Silverbelly",
    OTHER,
    "Parrotfish",
    "Sardines/pilchards",
    "Snapper/seaperch",
    "Soldierfish",
    "Spinefoot",
    "Surgeonfish",
)

MONTH_NAMES: tuple[str, ...] = (
    "Jan", "Feb", "Mar", "Apr", "May", "Jun",
    "Jul", "Aug", "Sep", "Oct", "Nov", "Dec",
)

HABITAT_COLORS: Mapping[str, str] = MappingProxyType({
    "Reef": "#5D2A8C",
    "Pelagic": "#3F7CAC",
    "Beach": "#4CAF7C",
    "Mangroves": "#F4D03F",
    "Seagrass": "#FFA07A",
    "FAD": "#DC3545",
})


@dataclass(frozen=True)
class TimeBreak:
    """Half-open range ``[min, max)`` of average hours spent in a grid cell."""
    min: float
    max: float
    label: str

    def contains(self, hours: float) -> bool:
        return hours >= self.min and (self.max == float("inf") or hours < self.max)


TIME_BREAKS: tuple[TimeBreak, ...] = (
    TimeBreak(0.0, 1.0, "< 1h"),
    TimeBreak(1.0, 2.0, "1-2h"),
    TimeBreak(2.0, 4.0, "2-4h"),
    TimeBreak(4.0, 8.0, "4-8h"),
    TimeBreak(8.0, 16.0, "8-16h"),
    TimeBreak(16.0, float("inf"), "16h+"),
)

# One RGB colour per time break
COLOR_RANGE: tuple[tuple[int, int, int], ...] = (
    (255, 255, 178),
    (254, 217, 118),
    (254, 178, 76),
    (253, 141, 60),
    (240, 59, 32),
    (189, 0, 38),
)


@dataclass(frozen=True)
class DisplayConfig:
    """Immutable bundle of the lookup tables above."""
    currency_rates: Mapping[str, float] = field(default_factory=lambda: CURRENCY_RATES)
    currency_symbols: Mapping[str, str] = field(default_factory=lambda: CURRENCY_SYMBOLS)
    family_display_names: Mapping[str, str] = field(default_factory=lambda: FAMILY_DISPLAY_NAMES)
    display_categories: tuple[str, ...] = DISPLAY_CATEGORIES
    month_names: tuple[str, ...] = MONTH_NAMES
    time_breaks: tuple[TimeBreak, ...] = TIME_BREAKS
    color_range: tuple[tuple[int, int, int], ...] = COLOR_RANGE
    habitat_colors: Mapping[str, str] = field(default_factory=lambda: HABITAT_COLORS)


@lru_cache(maxsize=1)
def get_display_config() -> DisplayConfig:
    """Return the process-wide display configuration."""
    return DisplayConfig()
