"""Connection settings for the Babylon, CosmWasm and OP-stack chains and the local database."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from datetime import timedelta
from typing import Any, Optional
from urllib.parse import urlsplit

from .bech32 import Bech32Error, decode


class ConfigError(ValueError):
    """Raised when a configuration holds an unusable value."""


def _opt(long: str, description: str, default: Any) -> Any:
    return field(default=default, metadata={"long": long, "description": description})


def _check_url(address: str) -> None:
    if any(ord(char) < 0x20 or ord(char) == 0x7F for char in address):
        raise ConfigError("rpc-addr is not correctly formatted: invalid control character in URL")
    try:
        urlsplit(address)
    except ValueError as exc:
        raise ConfigError(f"rpc-addr is not correctly formatted: {exc}") from exc


def _check_timeouts(timeout: timedelta, block_timeout: timedelta) -> None:
    if timeout <= timedelta(0):
        raise ConfigError("timeout must be positive")
    if block_timeout < timedelta(0):
        raise ConfigError("block-timeout can't be negative")


def _check_contract_address(name: str, address: str, prefix: str) -> None:
    try:
        decode(address, len(address))
    except Bech32Error as exc:
        raise ConfigError(f"{name}: invalid bech32 address: {exc}") from exc
    if not address.startswith(prefix):
        raise ConfigError(f"{name}: invalid address prefix")


@dataclass
class BBNConfig:
    """Client settings for the Babylon chain."""

    key: str = _opt("key", "name of the key to sign transactions with", "")
    chain_id: str = _opt("chain-id", "chain id of the chain to connect to", "")
    rpc_addr: str = _opt("rpc-address", "address of the rpc server to connect to", "")
    grpc_addr: str = _opt("grpc-address", "address of the grpc server to connect to", "")
    account_prefix: str = _opt("acc-prefix", "account prefix to use for addresses", "")
    keyring_backend: str = _opt("keyring-type", "type of keyring to use", "")
    gas_adjustment: float = _opt(
        "gas-adjustment", "adjustment factor when using gas estimation", 0.0
    )
    gas_prices: str = _opt(
        "gas-prices", "comma separated minimum gas prices to accept for transactions", ""
    )
    key_directory: str = _opt("key-dir", "directory to store keys in", "")
    debug: bool = _opt("debug", "flag to print debug output", False)
    timeout: timedelta = _opt("timeout", "client timeout when doing queries", timedelta(0))
    block_timeout: timedelta = _opt(
        "block-timeout", "block timeout when waiting for block events", timedelta(0)
    )
    output_format: str = _opt("output-format", "default output when printint responses", "")
    sign_mode_str: str = _opt("sign-mode", "sign mode to use", "")


def default_bbn_config() -> BBNConfig:
    """Return the Babylon client settings used when nothing is configured."""
    return BBNConfig(
        key="node0",
        chain_id="chain-test",
        rpc_addr="http://localhost:26657",
        grpc_addr="https://localhost:9090",
        account_prefix="bbn",
        keyring_backend="test",
        gas_adjustment=1.5,
        gas_prices="0.002ubbn",
        debug=True,
        timeout=timedelta(seconds=20),
        # the client blocks this long waiting for a transaction to be included
        block_timeout=timedelta(minutes=1),
        output_format="text",
        sign_mode_str="direct",
    )


@dataclass
class CosmwasmConfig:
    """Client settings for a CosmWasm consumer chain."""

    key: str = _opt("key", "name of the key to sign transactions with", "")
    chain_id: str = _opt("chain-id", "chain id of the chain to connect to", "")
    rpc_addr: str = _opt("rpc-address", "address of the rpc server to connect to", "")
    grpc_addr: str = _opt("grpc-address", "address of the grpc server to connect to", "")
    account_prefix: str = _opt("acc-prefix", "account prefix to use for addresses", "")
    keyring_backend: str = _opt("keyring-type", "type of keyring to use", "")
    gas_adjustment: float = _opt(
        "gas-adjustment", "adjustment factor when using gas estimation", 0.0
    )
    gas_prices: str = _opt(
        "gas-prices", "comma separated minimum gas prices to accept for transactions", ""
    )
    key_directory: str = _opt("key-dir", "directory to store keys in", "")
    debug: bool = _opt("debug", "flag to print debug output", False)
    timeout: timedelta = _opt("timeout", "client timeout when doing queries", timedelta(0))
    block_timeout: timedelta = _opt(
        "block-timeout", "block timeout when waiting for block events", timedelta(0)
    )
    output_format: str = _opt("output-format", "default output when printint responses", "")
    sign_mode_str: str = _opt("sign-mode", "sign mode to use", "")
    btc_staking_contract_address: str = _opt(
        "btc-staking-contract-address", "address of the BTC staking contract", ""
    )
    btc_finality_contract_address: str = _opt(
        "btc-finality-contract-address", "address of the BTC finality contract", ""
    )

    def validate(self) -> None:
        """Raise ConfigError if the address, timeouts or contract addresses are unusable."""
        _check_url(self.rpc_addr)
        _check_timeouts(self.timeout, self.block_timeout)
        _check_contract_address(
            "btc-staking-contract-address",
            self.btc_staking_contract_address,
            self.account_prefix,
        )
        _check_contract_address(
            "btc-finality-contract-address",
            self.btc_finality_contract_address,
            self.account_prefix,
        )


def default_cosmwasm_config() -> CosmwasmConfig:
    """Return the CosmWasm client settings used when nothing is configured."""
    return CosmwasmConfig(
        key="validator",
        chain_id="wasmd-test",
        rpc_addr="http://localhost:2990",
        grpc_addr="https://localhost:9090",
        account_prefix="wasm",
        keyring_backend="test",
        gas_adjustment=1.3,
        gas_prices="1ustake",
        debug=True,
        timeout=timedelta(seconds=20),
        block_timeout=timedelta(minutes=1),
        output_format="direct",
        sign_mode_str="",
        btc_staking_contract_address="",
    )


@dataclass
class OPStackL2Config:
    """Settings for an OP-stack L2 consumer chain and its Babylon client."""

    opstackl2_rpc_address: str = _opt(
        "opstackl2-rpc-address", "the rpc address of the op-stack-l2 node to connect to", ""
    )
    op_finality_gadget_address: str = _opt(
        "op-finality-gadget", "the contract address of the op-finality-gadget", ""
    )
    babylon_finality_gadget_rpc: str = _opt(
        "babylon-finality-gadget-rpc", "the rpc address of babylon op finality gadget", ""
    )
    key: str = _opt("key", "name of the babylon key to sign transactions with", "")
    chain_id: str = _opt("chain-id", "chain id of the babylon chain to connect to", "")
    rpc_addr: str = _opt("rpc-address", "address of the babylon rpc server to connect to", "")
    grpc_addr: str = _opt(
        "grpc-address", "address of the babylon grpc server to connect to", ""
    )
    account_prefix: str = _opt("acc-prefix", "babylon account prefix to use for addresses", "")
    keyring_backend: str = _opt("keyring-type", "type of keyring to use", "")
    gas_adjustment: float = _opt(
        "gas-adjustment", "adjustment factor when using babylon gas estimation", 0.0
    )
    gas_prices: str = _opt(
        "gas-prices",
        "comma separated minimum babylon gas prices to accept for transactions",
        "",
    )
    key_directory: str = _opt("key-dir", "directory to store babylon keys in", "")
    debug: bool = _opt("debug", "flag to print debug output", False)
    timeout: timedelta = _opt("timeout", "client timeout when doing queries", timedelta(0))
    block_timeout: timedelta = _opt(
        "block-timeout", "block timeout when waiting for block events", timedelta(0)
    )
    output_format: str = _opt("output-format", "default output when printint responses", "")
    sign_mode_str: str = _opt("sign-mode", "sign mode to use", "")

    def validate(self) -> None:
        """Raise ConfigError if a required address is missing or a value is unusable."""
        if not self.opstackl2_rpc_address:
            raise ConfigError("opstackl2-rpc-address is required")
        _check_contract_address(
            "op-finality-gadget", self.op_finality_gadget_address, self.account_prefix
        )
        if not self.babylon_finality_gadget_rpc:
            raise ConfigError("babylon-finality-gadget-rpc is required")
        _check_url(self.rpc_addr)
        _check_timeouts(self.timeout, self.block_timeout)

    def to_bbn_config(self) -> BBNConfig:
        """Return the Babylon client settings held in this configuration."""
        return BBNConfig(
            key=self.key,
            chain_id=self.chain_id,
            rpc_addr=self.rpc_addr,
            account_prefix=self.account_prefix,
            keyring_backend=self.keyring_backend,
            gas_adjustment=self.gas_adjustment,
            gas_prices=self.gas_prices,
            key_directory=self.key_directory,
            debug=self.debug,
            timeout=self.timeout,
            block_timeout=self.block_timeout,
            output_format=self.output_format,
            sign_mode_str=self.sign_mode_str,
        )


DEFAULT_DB_NAME = "finality-provider.db"
DEFAULT_AUTO_COMPACT_MIN_AGE = timedelta(hours=168)
DEFAULT_DB_TIMEOUT = timedelta(seconds=60)


@dataclass
class DBConfig:
    """Where and how the local database is kept."""

    db_path: str = _opt(
        "dbpath", "The directory path in which the database file should be stored.", ""
    )
    db_file_name: str = _opt("dbfilename", "The name of the database file.", "")
    no_freelist_sync: bool = _opt(
        "nofreelistsync",
        "Prevents the database from syncing its freelist to disk, resulting in improved "
        "performance at the expense of increased startup time.",
        False,
    )
    auto_compact: bool = _opt(
        "autocompact",
        "Specifies if a Bolt based database backend should be automatically compacted on "
        "startup (if the minimum age of the database file is reached). This will require "
        "additional disk space for the compacted copy of the database but will result in an "
        "overall lower database size after the compaction.",
        False,
    )
    auto_compact_min_age: timedelta = _opt(
        "autocompactminage",
        "Specifies the minimum time that must have passed since a bolt database file was "
        "last compacted for the compaction to be considered again.",
        timedelta(0),
    )
    db_timeout: timedelta = _opt(
        "dbtimeout",
        "Specifies the timeout value to use when opening the wallet database.",
        timedelta(0),
    )

    def db_file(self) -> str:
        """Return the full path of the database file."""
        return os.path.join(self.db_path, self.db_file_name)


def default_db_config_with_home_path(home_path: str, data_dir: Optional[str] = None) -> DBConfig:
    """Return database settings under ``data_dir``, or ``<home_path>/data`` if not given."""
    return DBConfig(
        db_path=data_dir if data_dir is not None else os.path.join(home_path, "data"),
        db_file_name=DEFAULT_DB_NAME,
        no_freelist_sync=True,
        auto_compact=False,
        auto_compact_min_age=DEFAULT_AUTO_COMPACT_MIN_AGE,
        db_timeout=DEFAULT_DB_TIMEOUT,
    )