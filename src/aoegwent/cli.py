from __future__ import annotations

import argparse
import asyncio
import logging
from collections.abc import Sequence
from pathlib import Path

from aoegwent.engine.ai import BotPlayer, BotSpec
from aoegwent.engine.errors import EngineError
from aoegwent.paths import get_paths
from aoegwent.services.content import ContentError, ContentService
from aoegwent.services.host import MatchHost
from aoegwent.services.telemetry import TelemetryService

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="aoegwent", description="Run headless bot-vs-bot matches.")
    parser.add_argument("--seed", type=int, default=0, help="seed of the first match; later matches add 1")
    parser.add_argument("--matches", type=int, default=1)
    parser.add_argument("--delay", type=float, default=0.0, help="bot thinking delay in seconds")
    parser.add_argument("--telemetry", type=Path, default=None, help="append match events to this JSONL file")
    parser.add_argument("--log-level", default="WARNING", choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    parser.add_argument("--validate-content", action="store_true", help="validate the card catalog and exit")
    return parser


async def _play_all(host: MatchHost, seeds: Sequence[int], delay: float) -> list[tuple[str, str | None]]:
    runs = []
    ids = []
    for seed in seeds:
        match_id = host.create_match(("player", "bot"), seed, names=("West", "East"))
        sources = {
            "player": BotPlayer("player", BotSpec(thinking_delay=delay, seed=seed * 2)),
            "bot": BotPlayer("bot", BotSpec(thinking_delay=delay, seed=seed * 2 + 1)),
        }
        ids.append(match_id)
        runs.append(host.run(match_id, sources))
    results = await asyncio.gather(*runs)
    return list(zip(ids, results))


def _print_match(host: MatchHost, match_id: str, result: str | None) -> None:
    state = host.get(match_id)
    print(f"== {match_id} (seed {state.seed}) ==")
    for record in state.history:
        scores = ", ".join(f"{pid} {score}" for pid, score in record.scores.items())
        print(f"  round {record.round_number}: {scores} -> {record.winner}")
    if result is None:
        print(f"  halted: {state.failure}")
    else:
        print(f"  result: {result}")


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    paths = get_paths()
    content = ContentService(data_dir=paths.data_dir, schema_dir=paths.schema_dir)
    try:
        cards = content.load_cards_db()
    except ContentError as e:
        logger.error("%s", e)
        return 2
    if args.validate_content:
        print(f"OK: {len(cards.cards)} cards, {len(cards.effects)} effects")
        return 0

    telemetry = TelemetryService(args.telemetry) if args.telemetry is not None else None
    host = MatchHost(cards, telemetry=telemetry)
    seeds = [args.seed + i for i in range(max(args.matches, 0))]
    try:
        outcomes = asyncio.run(_play_all(host, seeds, args.delay))
    except EngineError as e:
        logger.error("Match setup failed: %s", e)
        return 1

    for match_id, result in outcomes:
        _print_match(host, match_id, result)
    return 0 if all(result is not None for _, result in outcomes) else 1
