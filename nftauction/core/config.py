"""
Chain configuration parameters for nftauction.

Defines account funding, gas pricing, block timing and on-disk locations
for the simulated chain.

Values come from, in order of precedence:
1. Explicit overrides passed to load_config()
2. NFTA_* environment variables (a .env file is loaded first)
3. The defaults below
"""

import os
from pathlib import Path
from typing import Any, Dict, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field

ENV_PREFIX = "NFTA_"

ONE_ETHER = 10**18


class ChainConfig(BaseModel):
    """Chain-wide configuration parameters"""

    model_config = ConfigDict(frozen=True)

    # Network identity
    chain_id: int = Field(default=31337, gt=0)

    # Dev accounts
    account_count: int = Field(default=10, ge=1, le=256)
    account_seed: str = "nftauction devnet"
    initial_balance: int = Field(default=10_000 * ONE_ETHER, ge=0)  # 10k ETH each

    # Gas
    gas_price: int = Field(default=1_000_000_000, gt=0)  # 1 gwei
    gas_limit: int = Field(default=3_000_000, gt=0)      # Per transaction
    intrinsic_gas: int = Field(default=21_000, ge=0)     # Charged for every tx
    call_gas: int = Field(default=25_000, ge=0)          # Per call frame
    log_gas: int = Field(default=1_500, ge=0)            # Per emitted event

    # Blocks
    block_time: int = Field(default=1, ge=1)             # Seconds between blocks
    genesis_timestamp: Optional[int] = Field(default=None, ge=0)  # None = wall clock

    # Paths
    data_dir: Path = Path("data")
    log_dir: Path = Path("logs")
    log_level: str = "INFO"


def _env_overrides() -> Dict[str, Any]:
    """Collect NFTA_* variables that name a ChainConfig field."""
    overrides = {}
    for name in ChainConfig.model_fields:
        raw = os.environ.get(ENV_PREFIX + name.upper())
        if raw is not None and raw != "":
            overrides[name] = raw
    return overrides


def load_config(config_path: Optional[str] = None, **overrides: Any) -> ChainConfig:
    """
    Load configuration from a dotenv file, the environment, and overrides.

    Args:
        config_path: Optional path to a dotenv file. Defaults to ./.env
        **overrides: Field values that win over everything else

    Returns:
        ChainConfig instance

    Raises:
        pydantic.ValidationError: if any value fails validation
    """
    if config_path:
        load_dotenv(config_path, override=False)
    else:
        load_dotenv(override=False)

    values = _env_overrides()
    values.update(overrides)
    return ChainConfig(**values)
