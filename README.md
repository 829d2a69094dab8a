# finprov

Tools for setting up and managing the configuration of a finality provider
daemon: building default configurations, reading and writing the `fpd.conf`
file in a home directory, validating chain, database and poller settings,
and checking finality-provider parameters such as commission rates and
descriptions.

The package has no runtime dependencies beyond the Python standard library
and supports Python 3.10 and later.

## Installation

```
pip install .
```

To run the test suite:

```
pip install ".[test]"
pytest
```

## Command line

Installing the package provides the `fpd` command. Its one subcommand is
`init`.

Create a new home directory holding a default `fpd.conf` and a `logs`
directory:

```
fpd init --home /tmp/fpd-home
```

If the home directory already exists, `init` refuses to touch it unless
`--force` is given:

```
fpd init --home /tmp/fpd-home --force
```

Without `--home`, the platform's default application directory for `fpd` is
used (`finprov.config.DEFAULT_FPD_DIR`). On failure the command prints an
error to standard error and exits with status 1.

The same work is available from Python as `finprov.cli.init_home(home_path,
force=False)`, which returns the cleaned home path and raises
`FileExistsError` when the directory exists and `force` is false.

## Configuration from Python

```python
from finprov.config import (
    default_config_with_home,
    write_config,
    load_config,
    cfg_file,
    log_file,
)

home = "/tmp/fpd-home"
cfg = default_config_with_home(home)
cfg.babylon_config.chain_id = "my-chain"
write_config(cfg, cfg_file(home))

loaded = load_config(home)     # raises ConfigError if fpd.conf is missing or invalid
loaded.validate()
print(log_file(home))          # /tmp/fpd-home/logs/fpd.log
```

The default configuration uses the `babylon` chain type, the `signet`
Bitcoin network, an RPC listener on `127.0.0.1:12581`, an EOTS manager
address of `127.0.0.1:12582`, and keeps its database under the `data`
directory of the home path. `net_params_btc` accepts `mainnet`, `testnet`,
`regtest`, `simnet` and `signet` and raises `ConfigError` for anything else.

`Config.validate` checks that an EOTS manager address is set, that the
Bitcoin network is known, that the RPC listener is a resolvable `host:port`
address and that the poller settings are usable.

The file is written in sections of `key = value` lines, each option preceded
by its description as a `;` comment. `Config.to_sections` and
`Config.from_sections` convert to and from the plain mappings handled by
`finprov.iniformat.dump_sections` and `finprov.iniformat.parse_sections`.
Durations such as `1m0s` or `1.5h` are read and written with
`finprov.durations.parse_duration` and `format_duration`.

The chain-specific sections live in `finprov.chain_configs`:
`BBNConfig`, `CosmwasmConfig`, `OPStackL2Config` and `DBConfig`. The
CosmWasm and OP-stack sections check their contract addresses as bech32
strings carrying the configured account prefix (using `finprov.bech32`);
invalid settings raise `ConfigError`. Poller settings are in
`finprov.poller.ChainPollerConfig`.

## Commission rates and descriptions

```python
from finprov.commission import get_commission_rates, parse_legacy_dec

rates = get_commission_rates("0.05", "0.20", "0.01")
print(rates.rate, rates.max_rate, rates.max_change_rate)
# 0.050000000000000000 0.200000000000000000 0.010000000000000000

parse_legacy_dec("not-a-number")   # raises DecimalFormatError
```

Decimals carry at most 18 fractional digits. `Description.ensure_length`
checks the moniker, identity, website, security contact and details fields
against their maximum lengths and raises `ValueError` if one is too long.

## Finality provider parameters from a JSON file

`finprov.fp_params.parse_finality_provider_json` reads a file such as:

```json
{
  "keyName": "my-key",
  "chainID": "my-chain",
  "commissionRate": "0.05",
  "commissionMaxRate": "0.20",
  "commissionMaxChangeRate": "0.01",
  "moniker": "my-provider",
  "identity": "",
  "website": "",
  "securityContract": "security@example.com",
  "details": "",
  "eotsPK": "0000000000000000000000000000000000000000000000000000000000000001"
}
```

`chainID`, `moniker`, the three commission fields and `eotsPK` are required.
When `keyName` is empty, the key configured in the home directory's
`fpd.conf` is used instead. `parse_finality_provider_fields` builds the same
`ParsedFinalityProvider` from individual values.

## Client context

`finprov.client_context.persist_client_ctx` merges values given on the
command line with those from the home directory's configuration. Explicitly
set flags always win; settings from `fpd.conf` fill in the rest, and when no
configuration file can be loaded the context is left as the flags made it.

## What this package does not do

It prepares and checks configuration and parameters only. It does not run a
finality provider daemon, serve or call any RPC interface, talk to a chain
or an EOTS manager, manage keys, or open the database it configures. The
`fpd` command offers `init` and nothing else: there are no commands to start
the daemon, create, list, edit or unjail finality providers, or submit
signatures or randomness.