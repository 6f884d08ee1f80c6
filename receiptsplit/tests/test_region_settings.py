from __future__ import annotations

from decimal import Decimal
from pathlib import Path

import pytest

from receiptsplit.domain.allocation import TaxPolicy
from receiptsplit.domain.region import get_region
from receiptsplit.runtime import build_settings, get_paths, load_settings


def test_region_rates() -> None:
    ontario = get_region("on")
    assert ontario is not None
    assert ontario.total_rate == Decimal("13")
    assert ontario.fraction == Decimal("0.13")

    bc = get_region("BC")
    assert bc is not None
    assert bc.total_rate == Decimal("12")

    assert get_region("qc").total_rate == Decimal("14.975")
    assert get_region("zz") is None
    assert get_region(None) is None


def test_defaults_without_config() -> None:
    settings = build_settings({})
    assert settings.region is not None and settings.region.id == "on"
    assert settings.default_tax_rate == Decimal("0.13")
    assert settings.flat_tax_percentage == Decimal("13")
    assert settings.tax_policy == TaxPolicy.ITEM
    assert settings.currency == "CAD"


def test_explicit_rate_overrides_region() -> None:
    settings = build_settings({"tax": {"region": "ab", "default_rate": 0.07, "policy": "FLAT"}})
    assert settings.region.id == "ab"
    assert settings.default_tax_rate == Decimal("0.07")
    assert settings.tax_policy == TaxPolicy.FLAT


@pytest.mark.parametrize("config", [{"tax": {"region": "atlantis"}}, {"tax": {"policy": "mixed"}}])
def test_unknown_values_are_rejected(config: dict) -> None:
    with pytest.raises(ValueError):
        build_settings(config)


def test_load_settings_reads_data_root_config() -> None:
    paths = get_paths()
    paths.ensure_directories()
    paths.settings_file.write_text(
        '[tax]\nregion = "bc"\npolicy = "flat"\n\n[display]\ncurrency = "USD"\n',
        encoding="utf-8",
    )

    settings = load_settings()
    assert settings.region.id == "bc"
    assert settings.default_tax_rate == Decimal("0.12")
    assert settings.tax_policy == TaxPolicy.FLAT
    assert settings.currency == "USD"


def test_load_settings_explicit_path(tmp_path: Path) -> None:
    config = tmp_path / "other.toml"
    config.write_text('[tax]\nregion = "ns"\n', encoding="utf-8")
    assert load_settings(str(config)).default_tax_rate == Decimal("0.15")
    assert load_settings(str(tmp_path / "missing.toml")).region.id == "on"
