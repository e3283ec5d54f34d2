import pytest

from config_loader import DEFAULTS, ConfigError, load_credentials, load_settings


def test_missing_file_gives_defaults(tmp_path):
    settings = load_settings(str(tmp_path / "nope.yml"))
    assert settings == DEFAULTS
    settings["matching"]["similarity_threshold"] = 0.9
    assert DEFAULTS["matching"]["similarity_threshold"] == 0.2


def test_shallow_merge(tmp_path):
    path = tmp_path / "cashtx.yml"
    path.write_text("matching:\n  similarity_threshold: 0.35\nhttp:\n  max_retries: 5\n", encoding="utf-8")

    settings = load_settings(str(path))

    assert settings["matching"]["similarity_threshold"] == 0.35
    assert settings["http"] == {"timeout_seconds": 30, "max_retries": 5}
    assert settings["payments"]["reference"] == "Auto-reconciled using cashtx tool"


def test_empty_file_gives_defaults(tmp_path):
    path = tmp_path / "cashtx.yml"
    path.write_text("", encoding="utf-8")
    assert load_settings(str(path)) == DEFAULTS


def test_non_mapping_is_rejected(tmp_path):
    path = tmp_path / "cashtx.yml"
    path.write_text("- a\n- b\n", encoding="utf-8")
    with pytest.raises(ConfigError):
        load_settings(str(path))


def test_shipped_config_matches_defaults():
    settings = load_settings()
    assert settings["matching"]["similarity_threshold"] == 0.2
    assert settings["xero"]["invoice_page_size"] == 1000


def test_load_credentials():
    creds = load_credentials({
        "SQUARE_LOCATION_ID": "LOC1",
        "XERO_PAYMENT_ACCOUNT_CODE": "090",
        "SQUARE_SHIFT_EVENT_DESCRIPTION_EXCLUSIONS_PATTERN": "float",
    })
    assert creds["square_location_id"] == "LOC1"
    assert creds["xero_payment_account_code"] == "090"
    assert creds["exclusions"] == "float"
    assert creds["xero_client_secret"] == ""
