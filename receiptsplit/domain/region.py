"""Sales-tax regions used to pick the default tax estimate."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal


@dataclass(frozen=True)
class Region:
    """A taxing region. Rates are percentages (13 means 13%)."""

    id: str
    name: str
    country: str
    province: str | None = None
    gst: Decimal | None = None
    pst: Decimal | None = None
    hst: Decimal | None = None

    @property
    def total_rate(self) -> Decimal:
        """Combined sales-tax percentage. HST replaces GST+PST where present."""
        if self.hst is not None:
            return self.hst
        return (self.gst or Decimal("0")) + (self.pst or Decimal("0"))

    @property
    def fraction(self) -> Decimal:
        """Combined rate as a multiplier (0.13 for 13%)."""
        return self.total_rate / Decimal(100)


REGIONS: tuple[Region, ...] = (
    Region("on", "Ontario", "Canada", "ON", hst=Decimal("13")),
    Region("bc", "British Columbia", "Canada", "BC", gst=Decimal("5"), pst=Decimal("7")),
    Region("ab", "Alberta", "Canada", "AB", gst=Decimal("5")),
    Region("qc", "Quebec", "Canada", "QC", gst=Decimal("5"), pst=Decimal("9.975")),
    Region("mb", "Manitoba", "Canada", "MB", gst=Decimal("5"), pst=Decimal("7")),
    Region("sk", "Saskatchewan", "Canada", "SK", gst=Decimal("5"), pst=Decimal("6")),
    Region("ns", "Nova Scotia", "Canada", "NS", hst=Decimal("15")),
    Region("nb", "New Brunswick", "Canada", "NB", hst=Decimal("15")),
    Region("nl", "Newfoundland and Labrador", "Canada", "NL", hst=Decimal("15")),
    Region("pe", "Prince Edward Island", "Canada", "PE", hst=Decimal("15")),
)

DEFAULT_REGION_ID = "on"


def get_region(region_id: str | None) -> Region | None:
    """Look up a region by id or province code, case-insensitively."""
    if not region_id:
        return None
    key = region_id.strip().lower()
    for region in REGIONS:
        if region.id == key or (region.province or "").lower() == key:
            return region
    return None
