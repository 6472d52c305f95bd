import pytest

from stitchdesk.config import ConfigError, load_config

BASE = """
[app]
name = "StitchDesk"

[db]
host = "localhost"
name = "stitchdesk"
user = "stitch"
password = "secret"
"""


def test_defaults(tmp_path):
    p = tmp_path / "config.toml"
    p.write_text(BASE, encoding="utf-8")
    cfg = load_config(p)
    assert cfg.db.port == 5432
    assert cfg.shop.name == "Raghav Tailor & Fabric"
    assert cfg.print.invoice_page_size == 12
    assert cfg.print.slip_page_size == 2
    assert cfg.print.print_delay_ms == 500


def test_print_and_shop_sections(tmp_path):
    p = tmp_path / "config.toml"
    p.write_text(
        BASE + '\n[shop]\nname = "Test Tailors"\nphone = "011-1234"\n\n[print]\ninvoice_page_size = 8\n',
        encoding="utf-8",
    )
    cfg = load_config(p)
    assert cfg.shop.name == "Test Tailors"
    assert cfg.shop.phone == "011-1234"
    assert cfg.print.invoice_page_size == 8


def test_non_positive_page_size(tmp_path):
    p = tmp_path / "config.toml"
    p.write_text(BASE + "\n[print]\nslip_page_size = 0\n", encoding="utf-8")
    with pytest.raises(ConfigError, match="slip_page_size"):
        load_config(p)


def test_missing_file_and_keys(tmp_path):
    with pytest.raises(ConfigError, match="not found"):
        load_config(tmp_path / "nope.toml")
    p = tmp_path / "config.toml"
    p.write_text('[app]\nname = "x"\n', encoding="utf-8")
    with pytest.raises(ConfigError, match="Missing config key"):
        load_config(p)
