"""
config.py

Purpose:
    - get_supabase_client(): create a Supabase client from environment variables.
    - RecommenderSettings: rule/top table names and the default mining method.
    - Named defaults for every recommendation variant.

Usage:
    from basket_recs.config import get_supabase_client, RecommenderSettings
"""
from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional

from dotenv import load_dotenv  # Load environment variables from .env file
from supabase import Client, create_client

from basket_recs.errors import ConfigurationError
from basket_recs.rules.schema import MiningMethod, TableBinding

load_dotenv()  # loads .env

# ---------------------------------------------------------------------------
# Recommendation defaults
# ---------------------------------------------------------------------------
DEFAULT_PER_SEED_LIMIT = 20         # max rule rows per seed item
DEFAULT_RULE_LIMIT = 10             # max rule rows for a single-item lookup
DEFAULT_SAMPLE_LIMIT = 10           # default size for limit()

MIN_CONFIDENCE_TOP = 0.6            # recommend_by_top / _without_top
MIN_CONFIDENCE_EXT = 0.1            # extension-table-only variants
MIN_CONFIDENCE_PLUS_EXT = 0.3       # primary + scaled extension
MIN_CONFIDENCE_ALL_TABLES = 0.6     # fusion across mining methods
MIN_CONFIDENCE_VALUE = 0.6          # recommend_by_value

# Extension tables carry systematically lower confidences; their threshold is
# the primary threshold times this factor.
EXTENSION_CONFIDENCE_SCALE = 1 / 3


def check_extension_scale(scale: float) -> float:
    """Extension thresholds only scale down: 0 < scale <= 1."""
    try:
        value = float(scale)
    except (TypeError, ValueError) as exc:
        raise ConfigurationError(f"EXTENSION_CONFIDENCE_SCALE is not a number: {scale!r}") from exc
    if not 0.0 < value <= 1.0:
        raise ConfigurationError(f"EXTENSION_CONFIDENCE_SCALE must be within (0, 1], got {scale!r}")
    return value


# ---------------------------------------------------------------------------
# Table names (order: FPGrowth, Apriori, Eclat)
# ---------------------------------------------------------------------------
DEFAULT_RULE_TABLES = ("costs", "costs2", "costs3")
DEFAULT_RULE_EXT_TABLES = ("costsExt", "costs2ext", "costs3ext")
DEFAULT_TOP_TABLE = "top"
DEFAULT_MINING_METHOD = MiningMethod.FPGROWTH


def get_supabase_client() -> Client:
    """Create a Supabase client using env vars."""
    url = os.environ.get("SUPABASE_URL")
    key = os.environ.get("SUPABASE_SERVICE_ROLE_KEY")
    if not url or not key:
        raise ConfigurationError("SUPABASE_URL and SUPABASE_SERVICE_ROLE_KEY must be set (env or .env)")
    return create_client(url, key)


def _table_list(env: Mapping[str, str], env_name: str, default: tuple) -> List[str]:
    raw = env.get(env_name)
    if not raw:
        return list(default)
    names = [part.strip() for part in raw.split(",") if part.strip()]
    if len(names) != len(MiningMethod):
        raise ConfigurationError(
            f"{env_name} must list {len(MiningMethod)} tables "
            f"({', '.join(m.name for m in MiningMethod)}), got {len(names)}"
        )
    return names


@dataclass
class RecommenderSettings:
    tables: Dict[MiningMethod, TableBinding] = field(
        default_factory=lambda: {
            method: TableBinding(primary, ext)
            for method, primary, ext in zip(MiningMethod, DEFAULT_RULE_TABLES, DEFAULT_RULE_EXT_TABLES)
        }
    )
    top_table: str = DEFAULT_TOP_TABLE
    default_method: MiningMethod = DEFAULT_MINING_METHOD
    extension_confidence_scale: float = EXTENSION_CONFIDENCE_SCALE

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "RecommenderSettings":
        """
        Read RULE_TABLES, RULE_EXT_TABLES, TOP_TABLE, DEFAULT_MINING_METHOD and
        EXTENSION_CONFIDENCE_SCALE; anything unset keeps its default.
        """
        env = os.environ if environ is None else environ
        primaries = _table_list(env, "RULE_TABLES", DEFAULT_RULE_TABLES)
        extensions = _table_list(env, "RULE_EXT_TABLES", DEFAULT_RULE_EXT_TABLES)

        scale_raw = env.get("EXTENSION_CONFIDENCE_SCALE")
        scale = check_extension_scale(scale_raw) if scale_raw else EXTENSION_CONFIDENCE_SCALE

        return cls(
            tables={
                method: TableBinding(primary, ext)
                for method, primary, ext in zip(MiningMethod, primaries, extensions)
            },
            top_table=env.get("TOP_TABLE") or DEFAULT_TOP_TABLE,
            default_method=MiningMethod.parse(env.get("DEFAULT_MINING_METHOD") or DEFAULT_MINING_METHOD),
            extension_confidence_scale=scale,
        )
