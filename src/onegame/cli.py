from __future__ import annotations

import argparse
import logging
from collections import Counter
from dataclasses import replace
from typing import Sequence

from onegame.engine.errors import EngineError
from onegame.engine.match import MatchConfig, new_match
from onegame.paths import get_paths
from onegame.services.content import ContentError, ContentService

logger = logging.getLogger(__name__)


def _build_config(args: argparse.Namespace, content: ContentService) -> MatchConfig:
    cfg = content.preset(args.preset) if args.preset else MatchConfig()
    if args.seats is not None:
        cfg = replace(cfg, seat_count=args.seats)
    if args.hand_size is not None:
        cfg = replace(cfg, hand_size=args.hand_size)
    if args.stacking:
        cfg = replace(cfg, stack_draw_penalties=True)
    # Simulations are bots only.
    return replace(cfg, bots=tuple(range(cfg.seat_count)), auto_play_bots=True)


def simulate(cfg: MatchConfig, games: int, seed: int) -> Counter[int]:
    wins: Counter[int] = Counter()
    for i in range(games):
        state = new_match(cfg, seed=seed + i)
        assert state.winner is not None
        wins[state.winner] += 1
        logger.info(
            "game %d: seat %d won (%d points, %d actions)",
            i,
            state.winner,
            state.round_points,
            len(state.action_log),
        )
    return wins


def main(argv: Sequence[str] | None = None) -> int:
    parser = argparse.ArgumentParser(prog="onegame", description="Run bot-vs-bot ONE matches.")
    parser.add_argument("--preset", choices=["classic", "tournament", "custom"], default=None)
    parser.add_argument("--seats", type=int, default=None)
    parser.add_argument("--hand-size", type=int, default=None)
    parser.add_argument("--stacking", action="store_true", help="stack draw-two/draw-four penalties")
    parser.add_argument("--games", type=int, default=1)
    parser.add_argument("--seed", type=int, default=0)
    parser.add_argument("--log-level", default="WARNING")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level.upper(), logging.WARNING),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    paths = get_paths()
    content = ContentService(data_dir=paths.data_dir, schema_dir=paths.schema_dir)
    try:
        cfg = _build_config(args, content)
    except ContentError as e:
        parser.error(str(e))

    try:
        wins = simulate(cfg, args.games, args.seed)
    except (EngineError, ValueError) as e:
        parser.error(str(e))
    for seat in range(cfg.seat_count):
        print(f"seat {seat}: {wins[seat]} win(s)")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
