"""Runtime loader for tax and display settings.

Example ``config/receiptsplit.toml``::

    [tax]
    region = "bc"          # picks the default estimate rate
    default_rate = 0.12    # overrides the region's rate when set
    policy = "item"        # "item" or "flat"

    [display]
    currency = "CAD"
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from functools import lru_cache
from pathlib import Path
from typing import Any

from receiptsplit.domain.allocation import TaxPolicy
from receiptsplit.domain.money import to_decimal
from receiptsplit.domain.region import DEFAULT_REGION_ID, Region, get_region
from receiptsplit.runtime.logging import get_logger
from receiptsplit.runtime.paths import get_paths

logger = get_logger(__name__)


@dataclass(frozen=True)
class Settings:
    """Resolved settings."""

    region: Region | None
    default_tax_rate: Decimal  # multiplier used by the converter, 0.13 for 13%
    tax_policy: TaxPolicy
    currency: str = "CAD"

    @property
    def flat_tax_percentage(self) -> Decimal:
        """The default rate as a percentage, for TaxPolicy.FLAT."""
        return self.default_tax_rate * 100


def _load_toml(path: Path) -> dict[str, Any]:
    """Load TOML file and return parsed dict; missing files map to empty dict."""
    try:
        import tomllib
    except ImportError:
        import tomli as tomllib  # type: ignore[no-redef]

    if not path.exists():
        return {}

    with open(path, "rb") as f:
        data = tomllib.load(f)
    return data if isinstance(data, dict) else {}


def build_settings(config: dict[str, Any]) -> Settings:
    """Resolve a parsed config dict into Settings.

    Raises:
        ValueError: If the region or policy is not recognised.
    """
    tax = config.get("tax", {})
    display = config.get("display", {})

    region_id = tax.get("region", DEFAULT_REGION_ID)
    region = get_region(region_id)
    if region is None:
        raise ValueError(f"Unknown tax region: {region_id!r}")

    if "default_rate" in tax:
        default_rate = to_decimal(tax["default_rate"])
    else:
        default_rate = region.fraction

    policy_name = str(tax.get("policy", TaxPolicy.ITEM.value)).lower()
    try:
        policy = TaxPolicy(policy_name)
    except ValueError as exc:
        raise ValueError(f"Unknown tax policy: {policy_name!r}") from exc

    return Settings(
        region=region,
        default_tax_rate=default_rate,
        tax_policy=policy,
        currency=str(display.get("currency", "CAD")),
    )


@lru_cache(maxsize=4)
def load_settings(config_path: str | None = None) -> Settings:
    """Load settings from TOML.

    Args:
        config_path: Optional TOML path override. If None, uses the data root's
            config/receiptsplit.toml. A missing file yields the defaults.
    """
    path = Path(config_path) if config_path is not None else get_paths().settings_file
    config = _load_toml(path)
    settings = build_settings(config)
    logger.debug(
        "Loaded settings from %s: region=%s rate=%s policy=%s",
        path,
        settings.region.id if settings.region else None,
        settings.default_tax_rate,
        settings.tax_policy.value,
    )
    return settings
