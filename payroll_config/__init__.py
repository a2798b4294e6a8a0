"""
payroll_config -- single public entrypoint for payroll configuration.

Responsibility:
    Provides the one way to obtain the statutory payroll parameters at
    runtime: ``get_active_config()``.  The bracket table and withholding
    rates are configuration constants, loaded once and frozen; they are
    never edited at runtime.

Architecture position:
    Configuration -- sits above ``payroll_kernel`` and below
    ``payroll_engines`` / ``payroll_modules``.  The kernel never imports
    from this package.

Failure modes:
    - ``FileNotFoundError`` -- the configuration file does not exist.
    - ``ValueError`` / ``KeyError`` -- schema or structural validation
      failures.

Audit relevance:
    Every successful ``get_active_config()`` call emits a
    ``PAYROLL_CONFIG_TRACE`` log entry with the config id, version and
    checksum, tying each payroll run to the parameters that governed it.
"""

from __future__ import annotations

import logging
from pathlib import Path

from payroll_config.loader import compute_checksum, load_config_file
from payroll_config.schema import (
    AdvancePolicy,
    BracketTable,
    PayrollEngineConfig,
    RunPolicy,
    TaxBracket,
    WithholdingRates,
)

_logger = logging.getLogger("payroll_kernel.config")

_DEFAULT_CONFIG_FILE = Path(__file__).parent / "sets" / "irsa_2025.yaml"


def get_active_config(path: Path | None = None) -> PayrollEngineConfig:
    """The single public configuration entrypoint.

    Args:
        path: Override path to a YAML configuration set.
            Defaults to payroll_config/sets/irsa_2025.yaml.

    Returns:
        The frozen PayrollEngineConfig.
    """
    config = load_config_file(path or _DEFAULT_CONFIG_FILE)

    _logger.info(
        "PAYROLL_CONFIG_TRACE",
        extra={
            "trace_type": "PAYROLL_CONFIG_TRACE",
            "config_id": config.config_id,
            "config_version": config.version,
            "checksum": config.checksum,
            "jurisdiction": config.jurisdiction,
            "bracket_count": len(config.brackets),
            "minimum_tax": str(config.brackets.minimum_tax),
        },
    )
    return config


__all__ = [
    "get_active_config",
    "compute_checksum",
    "load_config_file",
    "AdvancePolicy",
    "BracketTable",
    "PayrollEngineConfig",
    "RunPolicy",
    "TaxBracket",
    "WithholdingRates",
]
