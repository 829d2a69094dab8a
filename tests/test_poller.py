from dataclasses import fields, replace
from datetime import timedelta

import pytest

from finprov.poller import ChainPollerConfig, default_chain_poller_config


def test_defaults():
    cfg = default_chain_poller_config()
    assert cfg.buffer_size == 1000
    assert cfg.poll_size == 1000
    assert cfg.poll_interval == timedelta(seconds=1)
    assert cfg.static_chain_scanning_start_height == 1
    assert cfg.auto_chain_scanning_mode is True


def test_defaults_are_valid():
    cfg = default_chain_poller_config()
    assert cfg.validate() is None
    assert cfg == ChainPollerConfig()


def test_zero_buffer_size():
    cfg = replace(default_chain_poller_config(), buffer_size=0)
    with pytest.raises(ValueError, match="invalid buffersize: 0"):
        cfg.validate()


def test_zero_poll_size():
    cfg = replace(default_chain_poller_config(), poll_size=0)
    with pytest.raises(ValueError, match="invalid pollsize: 0"):
        cfg.validate()


def test_zero_poll_interval():
    cfg = replace(default_chain_poller_config(), poll_interval=timedelta(0))
    with pytest.raises(ValueError, match="invalid pollinterval"):
        cfg.validate()


def test_option_names_in_metadata():
    cfg = default_chain_poller_config()
    names = [f.metadata["long"] for f in fields(cfg)]
    assert names == [
        "buffersize",
        "pollinterval",
        "staticchainscanningstartheight",
        "autochainscanningmode",
        "pollsize",
    ]