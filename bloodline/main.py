from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Any, Optional

from .blood_matrix import compute_blood_tables
from .models import BloodlineError, CacheOpenError, EmptyTargetsError
from .pedigree_graph import PedigreeGraph
from .pedigree_parser import DEFAULT_ENCODING, load_individuals
from .pedigree_scoring import BloodCalculator
from .pedigree_store import (
    DEFAULT_CACHE_DIR,
    LRU_LIMIT,
    DurableCache,
    FifoCache,
    TieredCache,
)
from .scores_xlsx import write_tables_xlsx
from .table_writer import file_a_name, file_b_name, write_table_csv
from .target_query import parse_query, query_label, resolve_targets


DEFAULT_RECORDS_PATH = Path("bloodline.csv")

# Calculator recursion depth follows pedigree depth
RECURSION_LIMIT = 100_000

PROMPT = "Target horses (year / year range / PrimaryKey, comma-separated): "


# ---------------------------------------------------------------------------

def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Blood fraction of target horses in every horse, and of every horse in the targets.",
    )

    parser.add_argument(
        "--records",
        type=Path,
        default=DEFAULT_RECORDS_PATH,
        help=f"Pedigree records CSV (default: {DEFAULT_RECORDS_PATH}).",
    )
    parser.add_argument(
        "--encoding",
        type=str,
        default=DEFAULT_ENCODING,
        help=f"Text encoding of the records file (default: {DEFAULT_ENCODING}; e.g. cp932).",
    )
    parser.add_argument(
        "--targets",
        type=str,
        default=None,
        help="Comma-separated years (1990), year ranges (1990-1992) and/or PrimaryKeys. "
             "Prompted on stdin when omitted.",
    )
    parser.add_argument(
        "--out-dir",
        type=Path,
        default=Path("."),
        help="Directory for the two CSV tables (default: current directory).",
    )
    parser.add_argument(
        "--xlsx",
        type=Path,
        default=None,
        help="Also write both tables to this Excel workbook (sheets A and B).",
    )

    parser.add_argument(
        "--cache-dir",
        type=Path,
        default=DEFAULT_CACHE_DIR,
        help=f"Durable memoization store directory (default: {DEFAULT_CACHE_DIR}).",
    )
    parser.add_argument(
        "--memory-limit",
        type=int,
        default=LRU_LIMIT,
        help=f"In-memory cache capacity in entries (default: {LRU_LIMIT}).",
    )
    parser.add_argument(
        "--memory-only",
        action="store_true",
        help="Run without the durable store (results are not kept between runs).",
    )

    parser.add_argument("--quiet", action="store_true", help="No per-row progress output.")

    args = parser.parse_args(argv)
    if args.memory_limit < 1:
        parser.error(f"--memory-limit must be at least 1, got {args.memory_limit}")
    return args


def _err(*a: Any) -> None:
    print(*a, file=sys.stderr)


def _read_query(args: argparse.Namespace) -> str:
    if args.targets is not None:
        return args.targets
    try:
        return input(PROMPT)
    except EOFError:
        return ""


def _open_cache(args: argparse.Namespace) -> TieredCache:
    memory = FifoCache(args.memory_limit)
    if args.memory_only:
        _err("[cache] WARNING: durable store disabled (--memory-only); nothing is persisted")
        return TieredCache(memory, None)

    durable = DurableCache(args.cache_dir)
    print(f"[cache] Durable store: {args.cache_dir} ({len(durable)} entries)")
    return TieredCache(memory, durable)


# ---------------------------------------------------------------------------

def run(args: argparse.Namespace) -> tuple[Path, Path]:
    """
    Full pipeline. Raises on fatal conditions; main() turns them into exit codes.
    """
    graph = PedigreeGraph.build(load_individuals(args.records, args.encoding))

    raw = _read_query(args)
    tokens = parse_query(raw)
    targets, _missing = resolve_targets(graph, tokens)
    print(f"[main] {len(targets)} targets found")

    if not targets:
        raise EmptyTargetsError("no target individuals matched the query")

    label = query_label(tokens)
    path_a = Path(args.out_dir) / file_a_name(label)
    path_b = Path(args.out_dir) / file_b_name(label)

    cache = _open_cache(args)
    try:
        calc = BloodCalculator(graph, cache)
        file_a, file_b = compute_blood_tables(graph, calc, targets, progress=not args.quiet)

        write_table_csv(path_a, graph, file_a)
        print(f"[done] {path_a}")
        write_table_csv(path_b, graph, file_b)
        print(f"[done] {path_b}")

        if args.xlsx is not None:
            write_tables_xlsx(xlsx_path=args.xlsx, graph=graph, tables={"A": file_a, "B": file_b})
            print(f"[done] {args.xlsx}")

        print(f"[cache] {cache.stats()}")
    finally:
        cache.close()

    return path_a, path_b


def main(argv: Optional[list[str]] = None) -> None:
    args = parse_args(argv)
    sys.setrecursionlimit(max(sys.getrecursionlimit(), RECURSION_LIMIT))

    try:
        run(args)
    except EmptyTargetsError as e:
        _err(f"[main] ERROR: {e}")
        raise SystemExit(1)
    except CacheOpenError as e:
        _err(f"[main] ERROR: durable cache unavailable: {e}")
        raise SystemExit(1)
    except (BloodlineError, OSError) as e:
        _err(f"[main] ERROR: {e}")
        raise SystemExit(1)

    print("[main] All done.")


if __name__ == "__main__":
    main()
