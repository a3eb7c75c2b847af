from __future__ import annotations

import json

import pytest

from storefront.config import StorefrontConfig, validate_currency


def _load(tmp_path, **overrides) -> StorefrontConfig:
    base = {"cosmic_bucket_slug": "", "cosmic_read_key": "", "log_level": "ERROR"}
    base.update(overrides)
    return StorefrontConfig.load(data_dir=tmp_path / "data", **base)


def test_defaults_and_data_dir_setup(tmp_path, monkeypatch) -> None:
    for key in ("CURRENCY", "CATALOG_TYPE", "CART_STORAGE", "TAX_RATE", "SHIPPING_FLAT", "FREE_SHIPPING_THRESHOLD"):
        monkeypatch.delenv(key, raising=False)
    config = _load(tmp_path)
    assert config.currency == "USD"
    assert config.catalog_type == "products"
    assert config.cart_storage == "file"
    assert (config.tax_rate, config.shipping_flat, config.free_shipping_threshold) == (0.08, 15.0, 100.0)
    assert config.cart_dir.is_dir()
    assert config.local_catalog_file.read_text(encoding="utf-8") == "[]"
    assert config.uses_cosmic is False


def test_settings_file_beats_environment(tmp_path, monkeypatch) -> None:
    data_dir = tmp_path / "data"
    data_dir.mkdir()
    (data_dir / "settings.json").write_text(json.dumps({"CATALOG_TYPE": "rfp-services", "TAX_RATE": 0}), encoding="utf-8")
    monkeypatch.setenv("CATALOG_TYPE", "products")
    monkeypatch.setenv("CURRENCY", "eur")
    config = _load(tmp_path)
    assert config.catalog_type == "rfp-services"
    assert config.tax_rate == 0.0
    assert config.currency == "EUR"


def test_keyword_overrides_win(tmp_path, monkeypatch) -> None:
    monkeypatch.setenv("HTTP_TIMEOUT", "30")
    config = _load(tmp_path, http_timeout=2, cosmic_bucket_slug="bucket", cosmic_read_key="key")
    assert config.http_timeout == 2.0
    assert config.uses_cosmic is True


def test_existing_catalog_file_is_left_alone(tmp_path) -> None:
    data_dir = tmp_path / "data"
    data_dir.mkdir()
    (data_dir / "catalog.json").write_text('[{"id": "x"}]', encoding="utf-8")
    assert _load(tmp_path).local_catalog_file.read_text(encoding="utf-8") == '[{"id": "x"}]'


@pytest.mark.parametrize("overrides", [{"catalog_type": "widgets"}, {"cart_storage": "redis"}, {"currency": "DOLLARS"}])
def test_invalid_settings_raise(tmp_path, overrides) -> None:
    with pytest.raises(ValueError):
        _load(tmp_path, **overrides)


def test_validate_currency() -> None:
    assert validate_currency(None) == "USD"
    assert validate_currency(" pkr ") == "PKR"
    with pytest.raises(ValueError):
        validate_currency("US")
