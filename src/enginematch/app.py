"""Application entry point."""

from __future__ import annotations

import argparse
import logging
import sys
from collections.abc import Sequence
from contextlib import ExitStack

from enginematch.config import load_config
from enginematch.engine.errors import EngineError
from enginematch.engine.process import TrafficLog
from enginematch.game.controller import Game
from enginematch.game.samples import write_samples
from enginematch.match import Match

_LOGGER = logging.getLogger(__name__)


def main(argv: Sequence[str] | None = None) -> int:
    """Play the match described by a TOML config file."""
    parser = argparse.ArgumentParser(
        prog="enginematch",
        description="Run a match between two UCI chess engines.",
    )
    parser.add_argument("config", help="path to the TOML match configuration")
    args = parser.parse_args(argv)

    try:
        config = load_config(args.config)
        match = Match(config)
    except (OSError, ValueError) as exc:
        parser.error(f"cannot load {args.config}: {exc}")

    logging.basicConfig(
        level=config.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    with ExitStack() as stack:
        traffic = None
        if config.log_file:
            traffic = TrafficLog(
                stack.enter_context(open(config.log_file, "a", encoding="utf-8"))
            )
        pgn_out = (
            stack.enter_context(open(config.pgn_file, "a", encoding="utf-8"))
            if config.pgn_file
            else None
        )
        samples_out = (
            stack.enter_context(open(config.samples_file, "a", encoding="utf-8"))
            if config.samples_file
            else None
        )

        def on_game(index: int, game: Game) -> None:
            if pgn_out is not None:
                pgn_out.write(game.pgn() + "\n")
                pgn_out.flush()
            if samples_out is not None:
                write_samples(samples_out, game.samples)
                samples_out.flush()

        try:
            score = match.run(on_game, log=traffic)
        except EngineError as exc:
            _LOGGER.error("Match aborted: %s", exc)
            return 1

    first, second = config.engines
    _LOGGER.info(
        "Final score of %s vs %s: %s (%.1f/%d)",
        first.name or first.command,
        second.name or second.command,
        score,
        score.points,
        score.games,
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
