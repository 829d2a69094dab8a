import os
from dataclasses import replace
from datetime import timedelta

import pytest

from finprov.chain_configs import ConfigError, CosmwasmConfig, OPStackL2Config
from finprov.config import (
    DEFAULT_RPC_LISTENER,
    MAIN_NET_PARAMS,
    REGRESSION_NET_PARAMS,
    SIG_NET_PARAMS,
    SIM_NET_PARAMS,
    TEST_NET3_PARAMS,
    Config,
    cfg_file,
    data_dir,
    default_config_with_home,
    load_config,
    log_dir,
    log_file,
    net_params_btc,
    write_config,
)
from finprov.iniformat import DEFAULT_SECTION


def test_paths_under_home(tmp_path):
    home = str(tmp_path)
    assert cfg_file(home) == os.path.join(home, "fpd.conf")
    assert log_dir(home) == os.path.join(home, "logs")
    assert log_file(home) == os.path.join(home, "logs", "fpd.log")
    assert data_dir(home) == os.path.join(home, "data")


@pytest.mark.parametrize(
    "name, params",
    [
        ("mainnet", MAIN_NET_PARAMS),
        ("testnet", TEST_NET3_PARAMS),
        ("regtest", REGRESSION_NET_PARAMS),
        ("simnet", SIM_NET_PARAMS),
        ("signet", SIG_NET_PARAMS),
    ],
)
def test_net_params_btc(name, params):
    assert net_params_btc(name) is params


def test_net_params_are_distinct():
    names = ("mainnet", "testnet", "regtest", "simnet", "signet")
    nets = {net_params_btc(name).net for name in names}
    assert len(nets) == 5


def test_net_params_invalid():
    with pytest.raises(ConfigError, match="invalid network: moon"):
        net_params_btc("moon")


def test_default_config_values(tmp_path):
    home = str(tmp_path)
    cfg = default_config_with_home(home)
    assert cfg.chain_type == "babylon"
    assert cfg.log_level == "info"
    assert cfg.num_pub_rand == 10000
    assert cfg.num_pub_rand_max == 100000
    assert cfg.timestamping_delay_blocks == 6000
    assert cfg.batch_submission_size == 1000
    assert cfg.max_submission_retries == 20
    assert cfg.randomness_commit_interval == timedelta(seconds=30)
    assert cfg.submission_retry_interval == timedelta(seconds=1)
    assert cfg.bitcoin_network == "signet"
    assert cfg.btc_net_params == SIG_NET_PARAMS
    assert cfg.rpc_listener == DEFAULT_RPC_LISTENER == "127.0.0.1:12581"
    assert cfg.babylon_config.key == "finality-provider"
    assert cfg.babylon_config.key_directory == home
    assert cfg.database_config.db_path == data_dir(home)
    assert cfg.database_config.db_file_name == "finality-provider.db"
    assert cfg.opstack_l2_config is None


def test_validate_requires_eots_address(tmp_path):
    cfg = default_config_with_home(str(tmp_path))
    cfg.eots_manager_address = ""
    with pytest.raises(ConfigError, match="EOTS manager address not specified"):
        cfg.validate()


def test_validate_sets_network_params(tmp_path):
    cfg = default_config_with_home(str(tmp_path))
    cfg.bitcoin_network = "regtest"
    cfg.validate()
    assert cfg.btc_net_params is REGRESSION_NET_PARAMS


def test_validate_rejects_bad_network(tmp_path):
    cfg = default_config_with_home(str(tmp_path))
    cfg.bitcoin_network = "bogus"
    with pytest.raises(ConfigError, match="invalid network"):
        cfg.validate()


@pytest.mark.parametrize("listener", ["127.0.0.1", "127.0.0.1:99999", "::1:80", "[::1"])
def test_validate_rejects_bad_listener(tmp_path, listener):
    cfg = default_config_with_home(str(tmp_path))
    cfg.rpc_listener = listener
    with pytest.raises(ConfigError, match="invalid RPC listener address"):
        cfg.validate()


def test_validate_accepts_ipv6_listener(tmp_path):
    cfg = default_config_with_home(str(tmp_path))
    cfg.rpc_listener = "[::1]:1234"
    cfg.validate()
    assert cfg.rpc_listener == "[::1]:1234"


def test_validate_rejects_bad_poller(tmp_path):
    cfg = default_config_with_home(str(tmp_path))
    cfg.poller_config.buffer_size = 0
    with pytest.raises(ConfigError, match="invalid poller config: invalid buffersize"):
        cfg.validate()


def test_write_and_load_round_trip(tmp_path):
    home = str(tmp_path)
    cfg = default_config_with_home(home)
    cfg.babylon_config.chain_id = "some-chain"
    write_config(cfg, cfg_file(home))
    loaded = load_config(home)
    expected = replace(cfg, opstack_l2_config=OPStackL2Config(), cosmwasm_config=CosmwasmConfig())
    assert loaded == expected
    assert loaded.babylon_config.chain_id == "some-chain"


def test_load_missing_file(tmp_path):
    with pytest.raises(ConfigError, match="specified config file does not exist"):
        load_config(str(tmp_path))


def test_to_sections_has_all_groups(tmp_path):
    sections = default_config_with_home(str(tmp_path)).to_sections()
    assert list(sections) == [DEFAULT_SECTION, "chainpollerconfig", "dbconfig",
                              "babylon", "opstackl2", "wasm"]
    value, comment = sections[DEFAULT_SECTION]["numPubRand"]
    assert value == "10000"
    assert comment == "The number of Schnorr public randomness for each commitment"


def test_from_sections_accepts_field_style_names():
    cfg = Config.from_sections({DEFAULT_SECTION: {"ChainType": "wasm", "NumPubRand": "5"},
                                "babylon": {"ChainID": "abc"}})
    assert cfg.chain_type == "wasm"
    assert cfg.num_pub_rand == 5
    assert cfg.babylon_config.chain_id == "abc"


def test_from_sections_missing_options_stay_zero():
    cfg = Config.from_sections({})
    assert cfg.poller_config.buffer_size == 0
    assert cfg.eots_manager_address == ""
    with pytest.raises(ConfigError):
        cfg.validate()


def test_from_sections_rejects_bad_choice():
    with pytest.raises(ConfigError, match="allowed values"):
        Config.from_sections({DEFAULT_SECTION: {"loglevel": "loud"}})


def test_from_sections_rejects_unknown_option():
    with pytest.raises(ConfigError, match="unknown option"):
        Config.from_sections({DEFAULT_SECTION: {"nonsense": "1"}})


def test_from_sections_rejects_unknown_section():
    with pytest.raises(ConfigError, match="unknown section"):
        Config.from_sections({"elsewhere": {}})


def test_from_sections_rejects_uint32_overflow():
    with pytest.raises(ConfigError, match="numPubRand"):
        Config.from_sections({DEFAULT_SECTION: {"numPubRand": str(1 << 32)}})


def test_from_sections_rejects_negative():
    with pytest.raises(ConfigError):
        Config.from_sections({DEFAULT_SECTION: {"batchsubmissionsize": "-1"}})


def test_from_sections_parses_bool_and_duration():
    cfg = Config.from_sections({"babylon": {"debug": "T", "timeout": "1m30s"}})
    assert cfg.babylon_config.debug is True
    assert cfg.babylon_config.timeout == timedelta(seconds=90)