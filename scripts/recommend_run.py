"""
recommend_run.py

Purpose:
    Command-line runner for rule based recommendations.

    Reads the top items from Supabase, composes recommendations with the chosen
    variant and prints a randomly truncated list.

Usage:
    python scripts/recommend_run.py --top 10
    python scripts/recommend_run.py --top 5 --variant all-plus-ext --limit 8
    python scripts/recommend_run.py --item 1234 --method apriori
"""

from __future__ import annotations

import argparse
import datetime
import sys
from typing import List, Optional

from basket_recs.config import get_supabase_client, RecommenderSettings
from basket_recs.errors import RecommendationError
from basket_recs.logging_utils import LOG_RUN_ID, log_error, log_info
from basket_recs.recommendation import RuleRecommender

MODULE_PURPOSE = "Command-line runner for rule based recommendations from Supabase rule tables."

VARIANTS = {
    "top": "recommend_by_top",
    "without-top": "recommend_by_top_without_top",
    "ext": "recommend_by_top_ext",
    "without-top-ext": "recommend_by_top_without_top_ext",
    "plus-ext": "recommend_by_top_plus_ext",
    "without-top-plus-ext": "recommend_by_top_without_top_plus_ext",
    "all": "recommend_by_top_from_all_tables",
    "all-without-top": "recommend_by_top_from_all_tables_without_top",
    "all-plus-ext": "recommend_by_top_from_all_tables_plus_ext",
}


# ---------------------------------------------------------------------------
# RUN BANNER
# ---------------------------------------------------------------------------
def print_run_banner(args: argparse.Namespace) -> None:
    now = datetime.datetime.now(datetime.timezone.utc)
    banner = [
        "\n===============================================================",
        "  BASKET-RECS RECOMMENDATION RUN",
        f"  Run ID       : {LOG_RUN_ID}",
        f"  UTC Time     : {now.strftime('%Y-%m-%d %H:%M:%S')}",
        f"  Variant      : {'by-value' if args.item is not None else args.variant}",
        f"  Method       : {args.method or 'default'}",
        "===============================================================\n",
    ]
    print("\n".join(banner))


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(description=MODULE_PURPOSE)
    ap.add_argument("--top", type=int, default=10, help="number of top seed items")
    ap.add_argument("--item", default=None, help="recommend for one item id instead of the top items")
    ap.add_argument("--variant", choices=sorted(VARIANTS), default="top")
    ap.add_argument("--per-value-limit", type=int, default=None)
    ap.add_argument("--min-confidence", type=float, default=None)
    ap.add_argument("--method", default=None, help="fpgrowth | apriori | eclat")
    ap.add_argument("--limit", type=int, default=10, help="max recommendations to print")
    return ap


def run(args: argparse.Namespace, recommender: RuleRecommender) -> List:
    if args.method:
        recommender.switch_all_tables(args.method)

    kwargs = {}
    if args.per_value_limit is not None:
        kwargs["per_value_limit"] = args.per_value_limit
    if args.min_confidence is not None:
        kwargs["min_confidence"] = args.min_confidence

    if args.item is not None:
        item = int(args.item) if args.item.isdigit() else args.item
        found = recommender.recommend_by_value(item, **kwargs)
    else:
        found = getattr(recommender, VARIANTS[args.variant])(args.top, **kwargs)

    log_info(
        f"Composed {len(found)} recommendations (skipped_rows={found.skipped_rows})",
        module_purpose=MODULE_PURPOSE,
        invoking_function="run",
        invoking_purpose="Compose recommendations for the chosen variant",
        next_step="Sample and print",
    )
    return recommender.limit(found, args.limit)


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    print_run_banner(args)

    try:
        recommender = RuleRecommender.from_client(get_supabase_client(), RecommenderSettings.from_env())
        picked = run(args, recommender)
    except RecommendationError as exc:
        log_error(
            "Recommendation run failed",
            module_purpose=MODULE_PURPOSE,
            invoking_function="main",
            invoking_purpose="Unified recommendation run",
            next_step="Exit with status 1",
            resolution="Check Supabase credentials, table names and DEFAULT_MINING_METHOD",
            exc=exc,
        )
        return 1

    for i, item in enumerate(picked, start=1):
        print(f"{i:02d}. {item}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
