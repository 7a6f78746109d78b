"""Trending ranking runner.

Replays an events file (one `id,timestamp` per line) or generates a
deterministic demo stream, then prints the ranking as JSON lines.

Usage:
  python main.py --events events.csv
  python main.py --demo --seed 123 --steps 30
"""
import argparse
import json
import logging
import sys
import time
from typing import Any, Dict, Iterable, List, Optional, Tuple

from trending.config import TrendingConfig, load_config, resolve_trending_config
from trending.determinism import DeterministicRNG, FrozenTimeProvider
from trending.scorer import Scorer

logger = logging.getLogger(__name__)

DEMO_START_TS = 1_700_000_000.0
DEMO_BURST_ID = "topic-burst"


def parse_event_line(line: str, default_ts: float) -> Optional[Tuple[str, float]]:
    """Parse `id,timestamp` (or tab separated). Returns None for blanks/comments."""
    line = line.strip()
    if not line or line.startswith("#"):
        return None
    sep = "\t" if "\t" in line else ","
    parts = [p.strip() for p in line.split(sep)]
    item_id = parts[0]
    if not item_id:
        raise ValueError("empty id")
    if len(parts) < 2 or parts[1] == "":
        return item_id, default_ts
    return item_id, float(parts[1])


def replay_events(lines: Iterable[str], config: TrendingConfig, default_ts: float) -> List[Dict[str, Any]]:
    """Feed events into a scorer whose clock follows the newest event, then rank."""
    events = []
    for lineno, line in enumerate(lines, 1):
        try:
            ev = parse_event_line(line, default_ts)
        except ValueError as e:
            logger.warning("skipping line %d: %s", lineno, e)
            continue
        if ev is not None:
            events.append(ev)
    events.sort(key=lambda ev: ev[1])
    clock = FrozenTimeProvider(events[0][1] if events else default_ts)
    scorer = Scorer(config, time_provider=clock)
    for item_id, ts in events:
        clock.set(max(clock.now(), ts))
        scorer.add_event(item_id, ts)
    return [s.as_dict() for s in scorer.rank()]


def run_demo(cfg: Optional[TrendingConfig] = None, steps: int = 30, seed: int = 123, entities: int = 8) -> Dict[str, Any]:
    """
    Deterministic demo: `entities` topics get steady background traffic for
    `steps` minutes, then one extra topic bursts during the final minute.
    No wall clock, no randomness except the seeded RNG.
    """
    config = cfg or TrendingConfig(storage_duration_sec=24 * 3600.0, bucket_step_sec=3600.0)
    rng = DeterministicRNG(seed)
    clock = FrozenTimeProvider(DEMO_START_TS)
    scorer = Scorer(config, time_provider=clock)

    steps_i = max(1, int(steps))
    events = 0
    for _ in range(steps_i):
        for n in range(entities):
            for _ in range(rng.randint(0, 3)):
                scorer.add_event(f"topic-{n}", clock.now() + rng.uniform(0, 59))
                events += 1
        # a little history so the burst is measured against something
        if rng.rand() < 0.2:
            scorer.add_event(DEMO_BURST_ID, clock.now())
            events += 1
        clock.advance(60)
        scorer.rank()
    for _ in range(25):
        scorer.add_event(DEMO_BURST_ID, clock.now() + rng.uniform(0, 30))
        events += 1
    clock.advance(30)
    ranking = [s.as_dict() for s in scorer.rank()]
    return {
        "ok": True,
        "seed": seed,
        "steps": steps_i,
        "events": events,
        "items": len(scorer),
        "ranking": ranking,
    }


def main(argv=None):
    ap = argparse.ArgumentParser(description="Rank entities by trending score")
    ap.add_argument("--config", default="config.yaml", help="YAML config path")
    ap.add_argument("--events", help="Events file with `id,timestamp` lines ('-' for stdin)")
    ap.add_argument("--demo", action="store_true", help="Run the deterministic demo stream")
    ap.add_argument("--seed", type=int, default=123)
    ap.add_argument("--steps", type=int, default=30, help="Demo length in minutes")
    ap.add_argument("--log-level", default="INFO")
    args = ap.parse_args(argv)

    logging.basicConfig(level=getattr(logging, str(args.log_level).upper(), logging.INFO),
                        format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    config = resolve_trending_config(load_config(args.config))

    if args.demo:
        ranking = run_demo(config, steps=args.steps, seed=args.seed)["ranking"]
    elif args.events:
        now = time.time()
        if args.events == "-":
            ranking = replay_events(sys.stdin, config, now)
        else:
            with open(args.events, "r", encoding="utf-8") as f:
                ranking = replay_events(f, config, now)
    else:
        ap.error("one of --events or --demo is required")

    for rank, rec in enumerate(ranking, 1):
        print(json.dumps({"rank": rank, **rec}, ensure_ascii=False))
    return 0


if __name__ == "__main__":
    sys.exit(main())
