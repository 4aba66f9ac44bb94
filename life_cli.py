"""
life_cli.py

Create and run Game of Life boards stored in a DuckDB file.

Example
-------
python life_cli.py create --state 010 111 010
python life_cli.py next 1
python life_cli.py at 1 1
python life_cli.py final 1 --max-steps 10

python life_cli.py create --random --rows 16 --cols 16 \
       --density 0.35 --seed 7
python life_cli.py export 2 --outfile data/board2.jsonl

Grids are printed as rows of 0/1. Unknown boards, missing steps and boards
that do not stabilize exit with status 1 and a message on stderr.
"""

from __future__ import annotations
import argparse, json, pathlib, sys
from typing import Any, Callable, Dict, List

from board_service import BoardService
from board_store import DuckDBStore
from generate import BoardGenerator
from grid_codec import ROW_DELIMITER, decode
from life_config import LifeConfig, load_config
from life_errors import ConvergenceFailure, LifeError, NotFound
from rules import CONWAY


def generation_to_jsonl(generation) -> str:
    """
    Serialize one generation as a single JSON line.
    """
    return json.dumps(
        {
            "board": generation.board_id,
            "step": generation.step,
            "state": generation.state,
            "population": decode(generation.state).population,
        },
        separators=(",", ":"),
    )


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description=f"Run Conway's Game of Life ({CONWAY.notation}) boards stored in DuckDB.")
    p.add_argument("--config", type=pathlib.Path, default=None, help="YAML settings file (see life.yaml).")
    sub = p.add_subparsers(dest="command", required=True)

    create = sub.add_parser("create", help="Create a board and print its id.")
    source = create.add_mutually_exclusive_group(required=True)
    source.add_argument("--state", nargs="+", metavar="ROW", help="Rows of 0/1 cells, e.g. --state 010 111 010")
    source.add_argument("--state-file", type=pathlib.Path, help="File holding newline-separated rows of 0/1.")
    source.add_argument("--random", action="store_true", help="Start from a random grid.")
    create.add_argument("--rows", type=int, help="Row count (required with --random).")
    create.add_argument("--cols", type=int, help="Column count (required with --random).")
    create.add_argument("--density", type=float, default=0.5, help="Probability a cell starts alive (--random).")
    create.add_argument("--seed", type=int, default=42, help="RNG seed (--random).")
    create.add_argument("--keep-trivial", action="store_true",
                        help="Accept random grids that are empty, full or already stable.")

    show = sub.add_parser("show", help="Print the initial state of a board.")
    show.add_argument("board", type=int)

    nxt = sub.add_parser("next", help="Advance a board one generation and print it.")
    nxt.add_argument("board", type=int)

    at = sub.add_parser("at", help="Print the state at an already computed step.")
    at.add_argument("board", type=int)
    at.add_argument("step", type=int)

    final = sub.add_parser("final", help="Advance until stable and print the final state.")
    final.add_argument("board", type=int)
    final.add_argument("--max-steps", type=int, default=None,
                       help="Advance budget (default: default_max_steps from the config).")

    delete = sub.add_parser("delete", help="Delete a board and all of its generations.")
    delete.add_argument("board", type=int)

    export = sub.add_parser("export", help="Write every stored generation of a board as JSONL.")
    export.add_argument("board", type=int)
    export.add_argument("--outfile", type=pathlib.Path, required=True, help="Where to write the JSONL.")
    return p


def _create(service: BoardService, args: argparse.Namespace, cfg: LifeConfig) -> Any:
    if args.random:
        if args.rows is None or args.cols is None:
            sys.exit("--random needs both --rows and --cols")
        gen = BoardGenerator(args.rows, args.cols, seed=args.seed, density=args.density)
        grid = gen.generate_batch(1, trim_trivial=not args.keep_trivial)[0]
        return service.create_from_grid(grid)

    if args.state_file is not None:
        text = args.state_file.read_text(encoding="utf-8")
    else:
        text = ROW_DELIMITER.join(args.state)
    grid = decode(text)
    rows = grid.rows if args.rows is None else args.rows
    cols = grid.cols if args.cols is None else args.cols
    return service.create(text, rows, cols)


def _export(service: BoardService, args: argparse.Namespace, cfg: LifeConfig) -> Any:
    history = service.history(args.board)
    if isinstance(history, NotFound):
        return history
    args.outfile.parent.mkdir(parents=True, exist_ok=True)
    with args.outfile.open("w", encoding="utf-8") as f:
        for generation in history:
            f.write(generation_to_jsonl(generation) + "\n")
    return f"Wrote {len(history):,} generations to {args.outfile}"


def _final(service: BoardService, args: argparse.Namespace, cfg: LifeConfig) -> Any:
    max_steps = cfg.default_max_steps if args.max_steps is None else args.max_steps
    return service.get_final_state(args.board, max_steps)


COMMANDS: Dict[str, Callable[[BoardService, argparse.Namespace, LifeConfig], Any]] = {
    "create": _create,
    "show": lambda service, args, cfg: service.get_initial_state(args.board),
    "next": lambda service, args, cfg: service.advance_and_get(args.board),
    "at": lambda service, args, cfg: service.get_at_step(args.board, args.step),
    "final": _final,
    "delete": lambda service, args, cfg: service.delete(args.board),
    "export": _export,
}


def main(argv: List[str] | None = None) -> None:
    args = build_parser().parse_args(argv)
    try:
        cfg = load_config(args.config)
    except (OSError, ValueError) as exc:
        sys.exit(f"config error: {exc}")

    with DuckDBStore(cfg.database, retry_seconds=cfg.open_retry_seconds) as store:
        service = BoardService(store, event_log=cfg.event_log)
        try:
            result = COMMANDS[args.command](service, args, cfg)
        except (LifeError, ValueError, RuntimeError) as exc:
            sys.exit(f"error: {exc}")

    if isinstance(result, (NotFound, ConvergenceFailure)):
        sys.exit(result.message)
    print(result)


if __name__ == "__main__":
    main()
