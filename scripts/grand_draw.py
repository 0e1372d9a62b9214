"""Draw unique winners per prize from a record file or the participants table.

Usage::

    python scripts/grand_draw.py entrants.csv tv=1 mug=20 --retries 25
    python scripts/grand_draw.py --db tv=1 mug=20
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from typing import Optional, Sequence

from drawkit import UniqueFileSampler, make_random_source
from drawkit import config
from drawkit.errors import DrawError


def parse_quotas(pairs: Sequence[str]) -> dict[str, int]:
    """Turn ``["tv=1", "mug=20"]`` into ``{"tv": 1, "mug": 20}``."""
    quotas: dict[str, int] = {}
    for pair in pairs:
        name, sep, count = pair.partition("=")
        if not sep or not name.strip():
            raise ValueError(f"Expected item=count, got {pair!r}")
        try:
            quotas[name.strip()] = int(count)
        except ValueError as exc:
            raise ValueError(f"Count for {name.strip()!r} must be an integer") from exc
    return quotas


def main(argv: Optional[Sequence[str]] = None) -> int:
    ap = argparse.ArgumentParser(description="Draw unique winners per prize item")
    ap.add_argument("source", nargs="?", help="delimited record file (first field is the identifier)")
    ap.add_argument("items", nargs="*", help="item=count pairs, drawn in the given order")
    ap.add_argument("--db", action="store_true", help="draw from the participants table at DB_URL")
    ap.add_argument("--delimiter", default=None, help="field delimiter of the record file")
    ap.add_argument("--retries", type=int, default=config.DEFAULT_RETRY_COUNT, help="consecutive misses per item before giving up")
    ap.add_argument("--seed", type=int, default=None, help="rng seed for a reproducible draw")
    ns = ap.parse_args(argv)

    logging.basicConfig(level=config.LOG_LEVEL.upper())

    item_args = list(ns.items)
    if ns.db and ns.source:
        # With --db every positional argument is an item quota.
        item_args.insert(0, ns.source)
    try:
        quotas = parse_quotas(item_args)
    except ValueError as exc:
        ap.error(str(exc))

    sampler = UniqueFileSampler(items=quotas, rng=make_random_source(ns.seed))
    try:
        if ns.db:
            from drawkit.db.engine import get_sessionmaker, make_engine
            from drawkit.sources import SqlRecordSource

            Session = get_sessionmaker(make_engine())
            with Session() as session:
                winners = sampler.set_source(SqlRecordSource(session)).get_winners(ns.retries)
        else:
            if not ns.source:
                ap.error("a record file is required unless --db is given")
            winners = sampler.set_record_file(ns.source, ns.delimiter).get_winners(ns.retries)
    except DrawError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1

    print(json.dumps(winners, indent=2, ensure_ascii=False))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
