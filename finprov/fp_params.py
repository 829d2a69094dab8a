"""Parameters for creating a finality provider, from a JSON file or from flags."""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path

from .commission import CommissionRates, Description, get_commission_rates
from .config import cfg_file, load_config

_JSON_FIELDS = (
    ("keyName", "key_name"),
    ("chainID", "chain_id"),
    ("passphrase", "passphrase"),
    ("commissionRate", "commission_rate"),
    ("commissionMaxRate", "commission_max_rate"),
    ("commissionMaxChangeRate", "commission_max_change_rate"),
    ("moniker", "moniker"),
    ("identity", "identity"),
    ("website", "website"),
    ("securityContract", "security_contract"),
    ("details", "details"),
    ("eotsPK", "eots_pk"),
)
_JSON_LOOKUP = {name.lower(): (name, attribute) for name, attribute in _JSON_FIELDS}


@dataclass
class ParsedFinalityProvider:
    """Everything needed to ask the daemon to create a finality provider."""

    key_name: str
    chain_id: str
    eots_pk: str
    description: Description
    commission_rates: CommissionRates


def _key_from_config(home_dir: str) -> str:
    try:
        cfg = load_config(home_dir)
    except (ValueError, OSError) as exc:
        raise ValueError(f"failed to load config from {cfg_file(home_dir)}: {exc}") from exc
    return cfg.babylon_config.key


def load_key_name(home_dir: str, key_name: str) -> str:
    """Return ``key_name``, or the key of the configuration under ``home_dir`` if empty."""
    if key_name:
        return key_name
    key_name = _key_from_config(home_dir)
    if not key_name:
        raise ValueError("the key in config is empty")
    return key_name


def _read_json_fields(contents: str) -> dict[str, str]:
    document = json.loads(contents)
    if not isinstance(document, dict):
        raise ValueError(
            f"cannot unmarshal {type(document).__name__} into finality provider object"
        )
    values = {attribute: "" for _, attribute in _JSON_FIELDS}
    for key, value in document.items():
        match = _JSON_LOOKUP.get(key.lower())
        if match is None or value is None:
            continue
        name, attribute = match
        if not isinstance(value, str):
            raise ValueError(
                f"cannot unmarshal {type(value).__name__} into field {name} of type string"
            )
        values[attribute] = value
    return values


def parse_finality_provider_json(path: str, home_dir: str) -> ParsedFinalityProvider:
    """Read finality provider parameters from the JSON file at ``path``.

    A missing key name is taken from the configuration under ``home_dir``.
    """
    fields = _read_json_fields(Path(path).read_text(encoding="utf-8"))

    if not fields["chain_id"]:
        raise ValueError("chainID is required")

    if not fields["key_name"]:
        fields["key_name"] = _key_from_config(home_dir)
        if not fields["key_name"]:
            raise ValueError("the key is neither in config nor provided in the json file")

    if not fields["moniker"]:
        raise ValueError("moniker is required")
    if not fields["commission_rate"]:
        raise ValueError("commissionRate is required")
    if not fields["commission_max_rate"]:
        raise ValueError("CommissionMaxRate is required")
    if not fields["commission_max_change_rate"]:
        raise ValueError("CommissionMaxChangeRate is required")
    if not fields["eots_pk"]:
        raise ValueError("eotsPK is required")

    rates = get_commission_rates(
        fields["commission_rate"],
        fields["commission_max_rate"],
        fields["commission_max_change_rate"],
    )
    description = Description(
        moniker=fields["moniker"],
        identity=fields["identity"],
        website=fields["website"],
        security_contact=fields["security_contract"],
        details=fields["details"],
    ).ensure_length()

    return ParsedFinalityProvider(
        key_name=fields["key_name"],
        chain_id=fields["chain_id"],
        eots_pk=fields["eots_pk"],
        description=description,
        commission_rates=rates,
    )


def parse_finality_provider_fields(
    home_dir: str,
    key_name: str,
    chain_id: str,
    eots_pk: str,
    moniker: str,
    identity: str,
    website: str,
    security_contact: str,
    details: str,
    commission_rate: str,
    commission_max_rate: str,
    commission_max_change_rate: str,
) -> ParsedFinalityProvider:
    """Build finality provider parameters from individual command-line values."""
    rates = get_commission_rates(commission_rate, commission_max_rate, commission_max_change_rate)

    try:
        description = Description(
            moniker=moniker,
            identity=identity,
            website=website,
            security_contact=security_contact,
            details=details,
        ).ensure_length()
    except ValueError as exc:
        raise ValueError(f"invalid description: {exc}") from exc

    try:
        key_name = load_key_name(home_dir, key_name)
    except ValueError as exc:
        raise ValueError(f"not able to load key name: {exc}") from exc
    if not key_name:
        raise ValueError("keyname cannot be empty")

    if not chain_id:
        raise ValueError("chain-id cannot be empty")
    if not eots_pk:
        raise ValueError("eots-pk cannot be empty")

    return ParsedFinalityProvider(
        key_name=key_name,
        chain_id=chain_id,
        eots_pk=eots_pk,
        description=description,
        commission_rates=rates,
    )