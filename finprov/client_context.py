"""Client settings shared by commands, filled from flags and the daemon configuration."""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import AbstractSet, Iterable, Mapping, Optional

from .chain_configs import BBNConfig, ConfigError
from .config import load_config

FLAG_HOME = "home"
FLAG_FROM = "from"
FLAG_CHAIN_ID = "chain-id"
FLAG_KEYRING_BACKEND = "keyring-backend"
FLAG_KEYRING_DIR = "keyring-dir"
FLAG_OUTPUT = "output"
FLAG_SIGN_MODE = "sign-mode"

KEYRING_BACKENDS = frozenset({"os", "file", "kwallet", "pass", "test", "memory"})

_FLAG_FIELDS = (
    (FLAG_CHAIN_ID, "chain_id"),
    (FLAG_FROM, "from_name"),
    (FLAG_KEYRING_BACKEND, "keyring_backend"),
    (FLAG_KEYRING_DIR, "keyring_dir"),
    (FLAG_OUTPUT, "output_format"),
    (FLAG_SIGN_MODE, "sign_mode_str"),
)


@dataclass(frozen=True)
class ClientContext:
    """Settings a command uses to talk to the chain."""

    home_dir: str = ""
    chain_id: str = ""
    from_name: str = ""
    keyring_backend: str = ""
    keyring_dir: str = ""
    output_format: str = ""
    sign_mode_str: str = ""


def fill_context_from_babylon_config(
    ctx: ClientContext, changed_flags: AbstractSet[str], bbn_conf: BBNConfig
) -> ClientContext:
    """Return ``ctx`` with every value whose flag was not changed taken from ``bbn_conf``.

    Flags set on the command line take precedence over the configuration.
    """
    updates = {}
    if FLAG_FROM not in changed_flags:
        updates["from_name"] = bbn_conf.key
    if FLAG_CHAIN_ID not in changed_flags:
        updates["chain_id"] = bbn_conf.chain_id
    if FLAG_KEYRING_BACKEND not in changed_flags:
        if bbn_conf.keyring_backend not in KEYRING_BACKENDS:
            raise ConfigError(f"unknown keyring backend {bbn_conf.keyring_backend}")
        updates["keyring_backend"] = bbn_conf.keyring_backend
    if FLAG_KEYRING_DIR not in changed_flags:
        updates["keyring_dir"] = bbn_conf.key_directory
    if FLAG_OUTPUT not in changed_flags:
        updates["output_format"] = bbn_conf.output_format
    if FLAG_SIGN_MODE not in changed_flags:
        updates["sign_mode_str"] = bbn_conf.sign_mode_str
    return replace(ctx, **updates)


def persist_client_ctx(
    ctx: ClientContext,
    home_dir: str,
    changed_flags: Iterable[str] = (),
    flag_values: Optional[Mapping[str, str]] = None,
) -> ClientContext:
    """Return the context a command runs with.

    ``home_dir`` is the value of the home flag and ``flag_values`` holds the
    values of the other flags by name. A flag value is used when it was
    changed or the context has nothing yet. If a configuration file can be
    loaded from the home directory, its Babylon settings fill in whatever no
    changed flag supplies; without one the context is returned as it is.
    """
    changed = frozenset(changed_flags)
    values = dict(flag_values or {})

    updates = {}
    if not ctx.home_dir or FLAG_HOME in changed:
        updates["home_dir"] = home_dir
    for flag, attribute in _FLAG_FIELDS:
        if flag in values and (not getattr(ctx, attribute) or flag in changed):
            updates[attribute] = values[flag]
    ctx = replace(ctx, **updates)

    try:
        cfg = load_config(ctx.home_dir)
    except (ValueError, OSError):
        return ctx

    return fill_context_from_babylon_config(ctx, changed, cfg.babylon_config)