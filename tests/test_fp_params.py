import json
from decimal import Decimal

import pytest

from finprov.commission import DecimalFormatError, Description
from finprov.config import cfg_file, default_config_with_home, write_config
from finprov.fp_params import (
    load_key_name,
    parse_finality_provider_fields,
    parse_finality_provider_json,
)

EOTS_PK = "ab" * 32


def _fp_json(**overrides):
    data = {
        "keyName": "mykey",
        "chainID": "chain-a",
        "passphrase": "",
        "commissionRate": "0.05",
        "commissionMaxRate": "0.20",
        "commissionMaxChangeRate": "0.01",
        "moniker": "my-fp",
        "identity": "ident",
        "website": "https://example.com",
        "securityContract": "sec@example.com",
        "details": "some details",
        "eotsPK": EOTS_PK,
    }
    data.update(overrides)
    return {key: value for key, value in data.items() if value is not None}


def _write(tmp_path, data, name="fp.json"):
    path = tmp_path / name
    path.write_text(json.dumps(data), encoding="utf-8")
    return str(path)


def _write_config(home, key=None):
    cfg = default_config_with_home(home)
    if key is not None:
        cfg.babylon_config.key = key
    write_config(cfg, cfg_file(home))
    return cfg


def _fields(home, **overrides):
    values = dict(
        key_name="mykey",
        chain_id="chain-a",
        eots_pk=EOTS_PK,
        moniker="my-fp",
        identity="",
        website="",
        security_contact="",
        details="",
        commission_rate="0.05",
        commission_max_rate="0.20",
        commission_max_change_rate="0.01",
    )
    values.update(overrides)
    return parse_finality_provider_fields(home, **values)


def test_parse_json_all_fields(tmp_path):
    parsed = parse_finality_provider_json(_write(tmp_path, _fp_json()), str(tmp_path))
    assert parsed.key_name == "mykey"
    assert parsed.chain_id == "chain-a"
    assert parsed.eots_pk == EOTS_PK
    assert parsed.description == Description(
        moniker="my-fp",
        identity="ident",
        website="https://example.com",
        security_contact="sec@example.com",
        details="some details",
    )
    assert parsed.commission_rates.to_decimals() == (
        Decimal("0.05"),
        Decimal("0.20"),
        Decimal("0.01"),
    )


def test_parse_json_keys_match_case_insensitively(tmp_path):
    data = {key.upper(): value for key, value in _fp_json().items()}
    parsed = parse_finality_provider_json(_write(tmp_path, data), str(tmp_path))
    assert parsed.chain_id == "chain-a"
    assert parsed.description.security_contact == "sec@example.com"


def test_parse_json_key_name_from_config(tmp_path):
    home = str(tmp_path)
    cfg = _write_config(home)
    parsed = parse_finality_provider_json(_write(tmp_path, _fp_json(keyName=None)), home)
    assert parsed.key_name == cfg.babylon_config.key
    assert parsed.key_name == "finality-provider"


def test_parse_json_key_missing_everywhere(tmp_path):
    home = str(tmp_path)
    _write_config(home, key="")
    with pytest.raises(ValueError, match="neither in config nor provided"):
        parse_finality_provider_json(_write(tmp_path, _fp_json(keyName="")), home)


def test_parse_json_no_key_and_no_config(tmp_path):
    home = str(tmp_path / "absent")
    with pytest.raises(ValueError, match="failed to load config from"):
        parse_finality_provider_json(_write(tmp_path, _fp_json(keyName=None)), home)


@pytest.mark.parametrize(
    "field, message",
    [
        ("chainID", "chainID is required"),
        ("moniker", "moniker is required"),
        ("commissionRate", "commissionRate is required"),
        ("commissionMaxRate", "CommissionMaxRate is required"),
        ("commissionMaxChangeRate", "CommissionMaxChangeRate is required"),
        ("eotsPK", "eotsPK is required"),
    ],
)
def test_parse_json_required_fields(tmp_path, field, message):
    path = _write(tmp_path, _fp_json(**{field: ""}))
    with pytest.raises(ValueError, match=message):
        parse_finality_provider_json(path, str(tmp_path))


def test_parse_json_invalid_rate(tmp_path):
    path = _write(tmp_path, _fp_json(commissionMaxRate="abc"))
    with pytest.raises(DecimalFormatError, match="invalid commission max rate"):
        parse_finality_provider_json(path, str(tmp_path))


def test_parse_json_moniker_too_long(tmp_path):
    path = _write(tmp_path, _fp_json(moniker="m" * 71))
    with pytest.raises(ValueError, match="moniker length"):
        parse_finality_provider_json(path, str(tmp_path))


def test_parse_json_wrong_type(tmp_path):
    path = _write(tmp_path, _fp_json(chainID=5))
    with pytest.raises(ValueError, match="chainID"):
        parse_finality_provider_json(path, str(tmp_path))


def test_parse_json_not_an_object(tmp_path):
    path = _write(tmp_path, ["chain-a"])
    with pytest.raises(ValueError, match="cannot unmarshal"):
        parse_finality_provider_json(path, str(tmp_path))


def test_parse_json_malformed(tmp_path):
    path = tmp_path / "bad.json"
    path.write_text("{not json", encoding="utf-8")
    with pytest.raises(ValueError):
        parse_finality_provider_json(str(path), str(tmp_path))


def test_parse_json_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        parse_finality_provider_json(str(tmp_path / "none.json"), str(tmp_path))


def test_load_key_name_prefers_given(tmp_path):
    assert load_key_name(str(tmp_path / "absent"), "given") == "given"


def test_load_key_name_from_config(tmp_path):
    home = str(tmp_path)
    cfg = _write_config(home)
    assert load_key_name(home, "") == cfg.babylon_config.key


def test_load_key_name_empty_in_config(tmp_path):
    home = str(tmp_path)
    _write_config(home, key="")
    with pytest.raises(ValueError, match="the key in config is empty"):
        load_key_name(home, "")


def test_load_key_name_without_config(tmp_path):
    home = str(tmp_path / "absent")
    with pytest.raises(ValueError, match="failed to load config from"):
        load_key_name(home, "")


def test_parse_fields_values(tmp_path):
    parsed = _fields(str(tmp_path), identity="ident", details="d")
    assert parsed.key_name == "mykey"
    assert parsed.chain_id == "chain-a"
    assert parsed.eots_pk == EOTS_PK
    assert parsed.description == Description(moniker="my-fp", identity="ident", details="d")
    assert parsed.commission_rates.to_decimals() == (
        Decimal("0.05"),
        Decimal("0.20"),
        Decimal("0.01"),
    )


def test_parse_fields_key_from_config(tmp_path):
    home = str(tmp_path)
    cfg = _write_config(home)
    assert _fields(home, key_name="").key_name == cfg.babylon_config.key


def test_parse_fields_key_unavailable(tmp_path):
    with pytest.raises(ValueError, match="not able to load key name"):
        _fields(str(tmp_path / "absent"), key_name="")


def test_parse_fields_empty_chain_id(tmp_path):
    with pytest.raises(ValueError, match="chain-id cannot be empty"):
        _fields(str(tmp_path), chain_id="")


def test_parse_fields_empty_eots_pk(tmp_path):
    with pytest.raises(ValueError, match="eots-pk cannot be empty"):
        _fields(str(tmp_path), eots_pk="")


def test_parse_fields_invalid_description(tmp_path):
    with pytest.raises(ValueError, match="invalid description"):
        _fields(str(tmp_path), website="w" * 141)


def test_parse_fields_invalid_rate_checked_first(tmp_path):
    with pytest.raises(DecimalFormatError, match="invalid commission rate"):
        _fields(str(tmp_path), commission_rate="", chain_id="")