"""
Configuration Loader (``payroll_config.loader``).

Responsibility
--------------
Loads a YAML configuration set and parses it into the frozen
``payroll_config.schema`` dataclasses.  Runtime callers go through
``payroll_config.get_active_config()``; this module is the parsing layer
underneath it.

Invariants enforced
-------------------
* Parse errors raise ``ValueError`` or ``KeyError`` with descriptive
  messages; there are no silent defaults for required fields.
* Amounts and rates are parsed with ``Decimal(str(value))`` so YAML floats
  never leak binary rounding into the engine.
* ``compute_checksum`` produces a deterministic SHA-256 hash of the raw
  configuration for identity and change detection.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Missing required keys  -> ``KeyError`` propagates.
* Invalid values  -> ``ValueError`` from parsing or schema validation.
"""

from __future__ import annotations

import hashlib
import json
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any

import yaml

from payroll_config.schema import (
    AdvancePolicy,
    BracketTable,
    PayrollEngineConfig,
    RunPolicy,
    TaxBracket,
    WithholdingRates,
)


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
    """
    with open(path) as f:
        return yaml.safe_load(f) or {}


def parse_decimal(value: Any, field: str) -> Decimal:
    """Parse a Decimal from a YAML scalar (string preferred)."""
    if value is None or isinstance(value, bool):
        raise ValueError(f"{field}: expected a number, got {value!r}")
    try:
        return Decimal(str(value))
    except InvalidOperation:
        raise ValueError(f"{field}: cannot parse decimal from {value!r}") from None


def parse_bracket(data: dict[str, Any], index: int) -> TaxBracket:
    """Parse one TaxBracket from a dict."""
    prefix = f"irsa.brackets[{index}]"
    ceiling = data.get("ceiling")
    return TaxBracket(
        floor=parse_decimal(data["floor"], f"{prefix}.floor"),
        ceiling=None if ceiling is None else parse_decimal(ceiling, f"{prefix}.ceiling"),
        rate=parse_decimal(data["rate"], f"{prefix}.rate"),
        base_amount=parse_decimal(data.get("base_amount", "0"), f"{prefix}.base_amount"),
    )


def parse_bracket_table(data: dict[str, Any]) -> BracketTable:
    """Parse the ``irsa`` section."""
    return BracketTable(
        brackets=tuple(
            parse_bracket(item, i) for i, item in enumerate(data["brackets"], 1)
        ),
        minimum_tax=parse_decimal(data.get("minimum_tax", "0"), "irsa.minimum_tax"),
    )


def parse_withholdings(data: dict[str, Any]) -> WithholdingRates:
    return WithholdingRates(
        ostie_rate=parse_decimal(data["ostie_rate"], "withholdings.ostie_rate"),
        cnaps_rate=parse_decimal(data["cnaps_rate"], "withholdings.cnaps_rate"),
    )


def parse_advance_policy(data: dict[str, Any]) -> AdvancePolicy:
    defaults = AdvancePolicy()
    months = data.get("allowed_repayment_months", defaults.allowed_repayment_months)
    return AdvancePolicy(
        cap_ratio=parse_decimal(
            data.get("cap_ratio", defaults.cap_ratio), "advances.cap_ratio"
        ),
        allowed_repayment_months=tuple(int(m) for m in months),
        installment_quantum=parse_decimal(
            data.get("installment_quantum", defaults.installment_quantum),
            "advances.installment_quantum",
        ),
    )


def parse_run_policy(data: dict[str, Any]) -> RunPolicy:
    defaults = RunPolicy()
    return RunPolicy(
        lock_timeout_seconds=float(
            data.get("lock_timeout_seconds", defaults.lock_timeout_seconds)
        ),
    )


def parse_config(data: dict[str, Any]) -> PayrollEngineConfig:
    """
    Parse a complete configuration set.

    Postconditions:
        - Returns a frozen ``PayrollEngineConfig`` whose ``checksum`` is the
          SHA-256 of ``data``.
    """
    return PayrollEngineConfig(
        config_id=str(data["config_id"]),
        version=int(data["version"]),
        jurisdiction=str(data.get("jurisdiction", "")),
        currency=str(data.get("currency", "")),
        brackets=parse_bracket_table(data["irsa"]),
        withholdings=parse_withholdings(data["withholdings"]),
        advances=parse_advance_policy(data.get("advances") or {}),
        runs=parse_run_policy(data.get("runs") or {}),
        checksum=compute_checksum(data),
    )


def load_config_file(path: Path) -> PayrollEngineConfig:
    """Load and parse a YAML configuration set."""
    return parse_config(load_yaml_file(path))


def compute_checksum(data: dict[str, Any]) -> str:
    """
    Compute SHA-256 checksum of canonical JSON serialization.

    Postconditions:
        - Identical ``data`` always produces identical checksums.
    """
    canonical = json.dumps(data, sort_keys=True, default=str)
    return hashlib.sha256(canonical.encode()).hexdigest()
