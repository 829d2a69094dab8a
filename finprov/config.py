"""Main configuration of the finality provider daemon and its file format."""

from __future__ import annotations

import ipaddress
import os
import re
import socket
import sys
from dataclasses import dataclass, field, fields
from datetime import timedelta
from pathlib import Path
from typing import Any, Callable, Iterator, Mapping, Optional

from .chain_configs import (
    BBNConfig,
    ConfigError,
    CosmwasmConfig,
    DBConfig,
    OPStackL2Config,
    default_bbn_config,
    default_db_config_with_home_path,
)
from .durations import format_duration, parse_duration
from .iniformat import DEFAULT_SECTION, Value, dump_sections, parse_sections
from .poller import ChainPollerConfig, default_chain_poller_config

DEFAULT_RPC_PORT = 12581
DEFAULT_EOTS_RPC_PORT = 12582

_DEFAULT_CHAIN_TYPE = "babylon"
_DEFAULT_LOG_LEVEL = "info"
_DEFAULT_LOG_DIRNAME = "logs"
_DEFAULT_LOG_FILENAME = "fpd.log"
_DEFAULT_FINALITY_PROVIDER_KEY_NAME = "finality-provider"
_DEFAULT_CONFIG_FILE_NAME = "fpd.conf"
_DEFAULT_NUM_PUB_RAND = 10000  # roughly one day of blocks at 10s each
_DEFAULT_NUM_PUB_RAND_MAX = 100000
_DEFAULT_TIMESTAMPING_DELAY_BLOCKS = 6000  # 100 BTC blocks * 600s / 10s
_DEFAULT_BATCH_SUBMISSION_SIZE = 1000
_DEFAULT_RANDOM_INTERVAL = timedelta(seconds=30)
_DEFAULT_SUBMIT_RETRY_INTERVAL = timedelta(seconds=1)
_DEFAULT_SIGNATURE_SUBMISSION_INTERVAL = timedelta(seconds=1)
_DEFAULT_MAX_SUBMISSION_RETRIES = 20
_DEFAULT_BITCOIN_NETWORK = "signet"
_DEFAULT_DATA_DIRNAME = "data"

_LOG_LEVELS = ("trace", "debug", "info", "warn", "error", "fatal")
_CHAIN_TYPES = ("babylon", "OPStackL2", "wasm")
_BITCOIN_NETWORKS = ("mainnet", "regtest", "testnet", "simnet", "signet")

_UINT64_FIELDS = frozenset({"static_chain_scanning_start_height"})
_TRUE_WORDS = frozenset({"1", "t", "T", "TRUE", "true", "True"})
_FALSE_WORDS = frozenset({"0", "f", "F", "FALSE", "false", "False"})
_UNSIGNED = re.compile(r"[0-9]+")


@dataclass(frozen=True)
class BTCNetParams:
    """Identifying parameters of a Bitcoin network."""

    name: str
    net: int
    default_port: str
    bech32_hrp: str


MAIN_NET_PARAMS = BTCNetParams("mainnet", 0xD9B4BEF9, "8333", "bc")
TEST_NET3_PARAMS = BTCNetParams("testnet3", 0x0709110B, "18333", "tb")
REGRESSION_NET_PARAMS = BTCNetParams("regtest", 0xDAB5BFFA, "18444", "bcrt")
SIM_NET_PARAMS = BTCNetParams("simnet", 0x12141C16, "18555", "sb")
SIG_NET_PARAMS = BTCNetParams("signet", 0x40CF030A, "38333", "tb")

_NETWORKS = {
    "mainnet": MAIN_NET_PARAMS,
    "testnet": TEST_NET3_PARAMS,
    "regtest": REGRESSION_NET_PARAMS,
    "simnet": SIM_NET_PARAMS,
    "signet": SIG_NET_PARAMS,
}


def net_params_btc(btc_net: str) -> BTCNetParams:
    """Return the parameters of the named Bitcoin network."""
    try:
        return _NETWORKS[btc_net]
    except KeyError:
        raise ConfigError(f"invalid network: {btc_net}") from None


def _app_data_dir(app: str) -> str:
    name = app.lstrip(".")
    upper = name[:1].upper() + name[1:]
    lower = name.lower()
    home = os.path.expanduser("~")
    if sys.platform.startswith("win"):
        base = os.environ.get("LOCALAPPDATA") or os.environ.get("APPDATA")
        if base:
            return os.path.join(base, upper)
    elif sys.platform == "darwin" and home:
        return os.path.join(home, "Library", "Application Support", upper)
    if home and home != "~":
        return os.path.join(home, "." + lower)
    return "."


def cfg_file(home_path: str) -> str:
    """Return the path of the configuration file under ``home_path``."""
    return os.path.join(home_path, _DEFAULT_CONFIG_FILE_NAME)


def log_dir(home_path: str) -> str:
    """Return the log directory under ``home_path``."""
    return os.path.join(home_path, _DEFAULT_LOG_DIRNAME)


def log_file(home_path: str) -> str:
    """Return the path of the log file under ``home_path``."""
    return os.path.join(log_dir(home_path), _DEFAULT_LOG_FILENAME)


def data_dir(home_path: str) -> str:
    """Return the data directory under ``home_path``."""
    return os.path.join(home_path, _DEFAULT_DATA_DIRNAME)


DEFAULT_FPD_DIR = _app_data_dir("fpd")
DEFAULT_RPC_LISTENER = f"127.0.0.1:{DEFAULT_RPC_PORT}"
DEFAULT_EOTS_MANAGER_ADDRESS = f"127.0.0.1:{DEFAULT_EOTS_RPC_PORT}"
DEFAULT_DATA_DIR = data_dir(DEFAULT_FPD_DIR)


def _opt(long: str, description: str, default: Any, choices: tuple = ()) -> Any:
    metadata: dict[str, Any] = {"long": long, "description": description}
    if choices:
        metadata["choices"] = choices
    return field(default=default, metadata=metadata)


def _zero_poller() -> ChainPollerConfig:
    return ChainPollerConfig(
        buffer_size=0,
        poll_interval=timedelta(0),
        static_chain_scanning_start_height=0,
        auto_chain_scanning_mode=False,
        poll_size=0,
    )


_GROUPS: tuple[tuple[str, str, Callable[[], Any]], ...] = (
    ("chainpollerconfig", "poller_config", _zero_poller),
    ("dbconfig", "database_config", DBConfig),
    ("babylon", "babylon_config", BBNConfig),
    ("opstackl2", "opstack_l2_config", OPStackL2Config),
    ("wasm", "cosmwasm_config", CosmwasmConfig),
)


def _option_fields(obj: Any) -> Iterator[Any]:
    return (item for item in fields(obj) if "long" in item.metadata)


def _render(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, timedelta):
        return format_duration(value)
    if isinstance(value, float):
        text = repr(value)
        return text[:-2] if text.endswith(".0") else text
    return str(value)


def _options_of(obj: Any) -> dict[str, Value]:
    return {
        item.metadata["long"]: (_render(getattr(obj, item.name)), item.metadata["description"])
        for item in _option_fields(obj)
    }


def _normalize(name: str) -> str:
    return name.replace("_", "").replace("-", "").lower()


def _convert(name: str, current: Any, raw: str) -> Any:
    if isinstance(current, bool):
        if raw in _TRUE_WORDS:
            return True
        if raw in _FALSE_WORDS:
            return False
        raise ValueError("invalid syntax")
    if isinstance(current, int):
        if not _UNSIGNED.fullmatch(raw):
            raise ValueError("invalid syntax")
        value = int(raw)
        bits = 64 if name in _UINT64_FIELDS else 32
        if value >= 1 << bits:
            raise ValueError("value out of range")
        return value
    if isinstance(current, float):
        if "_" in raw:
            raise ValueError("invalid syntax")
        return float(raw)
    if isinstance(current, timedelta):
        return parse_duration(raw)
    return raw


def _apply(obj: Any, options: Mapping[str, str], section: str) -> None:
    lookup = {}
    for item in _option_fields(obj):
        lookup[_normalize(item.metadata["long"])] = item
        lookup[_normalize(item.name)] = item
    for key, raw in options.items():
        item = lookup.get(_normalize(key))
        if item is None:
            raise ConfigError(f"unknown option {key} in section [{section}]")
        long = item.metadata["long"]
        try:
            value = _convert(item.name, getattr(obj, item.name), raw)
        except ValueError as exc:
            raise ConfigError(f"invalid value {raw!r} for option {long}: {exc}") from exc
        choices = item.metadata.get("choices")
        if choices and value not in choices:
            raise ConfigError(
                f"invalid value {raw!r} for option {long}; "
                f"allowed values are: {', '.join(choices)}"
            )
        setattr(obj, item.name, value)


def _split_host_port(address: str) -> tuple[str, str]:
    if address.startswith("["):
        end = address.find("]")
        if end < 0:
            raise ValueError("missing ']' in address")
        rest = address[end + 1 :]
        if not rest:
            raise ValueError("missing port in address")
        if not rest.startswith(":"):
            raise ValueError("unexpected text after ']' in address")
        host, port = address[1:end], rest[1:]
        if ":" in port or "[" in host or "]" in port:
            raise ValueError("too many colons in address")
        return host, port
    index = address.rfind(":")
    if index < 0:
        raise ValueError("missing port in address")
    host, port = address[:index], address[index + 1 :]
    if ":" in host:
        raise ValueError("too many colons in address")
    if "[" in address or "]" in address:
        raise ValueError("unexpected bracket in address")
    return host, port


def _resolve_tcp_addr(address: str) -> None:
    host, port = _split_host_port(address)
    if port:
        if port.isdigit():
            if int(port) > 65535:
                raise ValueError("invalid port")
        else:
            try:
                socket.getservbyname(port, "tcp")
            except OSError:
                raise ValueError(f"unknown port tcp/{port}") from None
    if not host:
        return
    try:
        ipaddress.ip_address(host.split("%", 1)[0])
        return
    except ValueError:
        pass
    try:
        socket.getaddrinfo(host, None, type=socket.SOCK_STREAM)
    except OSError:
        raise ValueError(f"lookup {host}: no such host") from None


@dataclass
class Config:
    """Everything the finality provider daemon is configured with."""

    log_level: str = _opt(
        "loglevel", "Logging level for all subsystems", "", _LOG_LEVELS
    )
    chain_type: str = _opt(
        "chaintype", "the type of the consumer chain", "", _CHAIN_TYPES
    )
    num_pub_rand: int = _opt(
        "numPubRand", "The number of Schnorr public randomness for each commitment", 0
    )
    num_pub_rand_max: int = _opt(
        "numpubrandmax",
        "The upper bound of the number of Schnorr public randomness for each commitment",
        0,
    )
    timestamping_delay_blocks: int = _opt(
        "timestampingdelayblocks",
        "The delay, measured in blocks, between a randomness commit submission and the "
        "randomness is BTC-timestamped",
        0,
    )
    max_submission_retries: int = _opt(
        "maxsubmissionretries",
        "The maximum number of retries to submit finality signature or public randomness",
        0,
    )
    eots_manager_address: str = _opt(
        "eotsmanageraddress",
        "The address of the remote EOTS manager; Empty if the EOTS manager is running locally",
        "",
    )
    hmac_key: str = _opt(
        "hmackey",
        "The HMAC key for authentication with EOTSD. If not provided, will use HMAC_KEY "
        "environment variable.",
        "",
    )
    batch_submission_size: int = _opt(
        "batchsubmissionsize", "The size of a batch in one submission", 0
    )
    randomness_commit_interval: timedelta = _opt(
        "randomnesscommitinterval",
        "The interval between each attempt to commit public randomness",
        timedelta(0),
    )
    submission_retry_interval: timedelta = _opt(
        "submissionretryinterval",
        "The interval between each attempt to submit finality signature or public "
        "randomness after a failure",
        timedelta(0),
    )
    signature_submission_interval: timedelta = _opt(
        "signaturesubmissioninterval",
        "The interval between each finality signature(s) submission",
        timedelta(0),
    )
    bitcoin_network: str = _opt(
        "bitcoinnetwork", "Bitcoin network to run on", "", _BITCOIN_NETWORKS
    )
    btc_net_params: Optional[BTCNetParams] = None
    poller_config: ChainPollerConfig = field(default_factory=_zero_poller)
    database_config: DBConfig = field(default_factory=DBConfig)
    babylon_config: BBNConfig = field(default_factory=BBNConfig)
    opstack_l2_config: Optional[OPStackL2Config] = None
    cosmwasm_config: Optional[CosmwasmConfig] = None
    rpc_listener: str = _opt(
        "rpclistener", "the listener for RPC connections, e.g., 127.0.0.1:1234", ""
    )

    def validate(self) -> None:
        """Raise ConfigError unless the settings make sense; fills in btc_net_params."""
        if not self.eots_manager_address:
            raise ConfigError("EOTS manager address not specified")
        self.btc_net_params = net_params_btc(self.bitcoin_network)
        try:
            _resolve_tcp_addr(self.rpc_listener)
        except ValueError as exc:
            raise ConfigError(
                f"invalid RPC listener address {self.rpc_listener}, {exc}"
            ) from exc
        try:
            self.poller_config.validate()
        except ValueError as exc:
            raise ConfigError(f"invalid poller config: {exc}") from exc

    def to_sections(self) -> dict[str, dict[str, Value]]:
        """Return the settings as sections of commented options."""
        sections = {DEFAULT_SECTION: _options_of(self)}
        for section, attribute, factory in _GROUPS:
            group = getattr(self, attribute)
            sections[section] = _options_of(group if group is not None else factory())
        return sections

    @classmethod
    def from_sections(cls, sections: Mapping[str, Mapping[str, str]]) -> "Config":
        """Build a configuration from parsed sections; absent options stay zero."""
        cfg = cls()
        groups = {section: (attribute, factory()) for section, attribute, factory in _GROUPS}
        for section, options in sections.items():
            if section == DEFAULT_SECTION:
                _apply(cfg, options, section)
            elif section in groups:
                _apply(groups[section][1], options, section)
            else:
                raise ConfigError(f"unknown section [{section}]")
        for attribute, group in groups.values():
            setattr(cfg, attribute, group)
        return cfg


def default_config_with_home(home_path: str) -> Config:
    """Return the default configuration for a daemon whose home is ``home_path``."""
    bbn_cfg = default_bbn_config()
    bbn_cfg.key = _DEFAULT_FINALITY_PROVIDER_KEY_NAME
    bbn_cfg.key_directory = home_path
    cfg = Config(
        chain_type=_DEFAULT_CHAIN_TYPE,
        log_level=_DEFAULT_LOG_LEVEL,
        database_config=default_db_config_with_home_path(home_path, data_dir(home_path)),
        babylon_config=bbn_cfg,
        poller_config=default_chain_poller_config(),
        num_pub_rand=_DEFAULT_NUM_PUB_RAND,
        num_pub_rand_max=_DEFAULT_NUM_PUB_RAND_MAX,
        timestamping_delay_blocks=_DEFAULT_TIMESTAMPING_DELAY_BLOCKS,
        batch_submission_size=_DEFAULT_BATCH_SUBMISSION_SIZE,
        randomness_commit_interval=_DEFAULT_RANDOM_INTERVAL,
        submission_retry_interval=_DEFAULT_SUBMIT_RETRY_INTERVAL,
        signature_submission_interval=_DEFAULT_SIGNATURE_SUBMISSION_INTERVAL,
        max_submission_retries=_DEFAULT_MAX_SUBMISSION_RETRIES,
        bitcoin_network=_DEFAULT_BITCOIN_NETWORK,
        btc_net_params=SIG_NET_PARAMS,
        eots_manager_address=DEFAULT_EOTS_MANAGER_ADDRESS,
        rpc_listener=DEFAULT_RPC_LISTENER,
    )
    cfg.validate()
    return cfg


def default_config() -> Config:
    """Return the default configuration under the default home directory."""
    return default_config_with_home(DEFAULT_FPD_DIR)


def write_config(cfg: Config, path: str) -> None:
    """Write ``cfg`` to ``path`` with every option and its description."""
    Path(path).write_text(dump_sections(cfg.to_sections()), encoding="utf-8")


def load_config(home_path: str) -> Config:
    """Read and validate the configuration file under ``home_path``."""
    path = cfg_file(home_path)
    if not os.path.isfile(path):
        raise ConfigError(f"specified config file does not exist in {path}")
    cfg = Config.from_sections(parse_sections(Path(path).read_text(encoding="utf-8")))
    cfg.validate()
    return cfg