# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
CLI entrypoint for rankr.

Every operation is a subcommand of `rankr`. The global options (--config,
--log-level, --dry-run, --seed) are inherited by every subcommand through
argparse's parent parser mechanism.

Usage:
    rankr <subcommand> [options]
    rankr index --config configs/rankr.yaml --corpus data/corpus.jsonl
    rankr run --config configs/rankr.yaml --topics data/topics.tsv --output runs/bm.run
    rankr eval --run runs/bm.run --qrels data/qrels.txt
    rankr info
"""

import argparse
import sys

from rankr.cli.commands import (
    handle_benchmark,
    handle_compare,
    handle_eval,
    handle_fuse,
    handle_index,
    handle_info,
    handle_run,
    handle_search,
    handle_serve,
    handle_train,
)
from rankr.cli.exit_codes import USER_ERROR


def _build_global_parser() -> argparse.ArgumentParser:
    """
    Build the parent parser with global options.

    add_help=False keeps the parent's help text from colliding with the
    subcommand parsers.
    """
    parent = argparse.ArgumentParser(add_help=False)
    parent.add_argument(
        "--config",
        type=str,
        default=None,
        help="Path to YAML configuration file.",
    )
    parent.add_argument(
        "--log-level",
        type=str,
        default=None,
        dest="log_level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Set the logging verbosity level (overrides global.log_level, default INFO).",
    )
    parent.add_argument(
        "--dry-run",
        action="store_true",
        default=False,
        dest="dry_run",
        help="Validate inputs and report what would happen without writing anything.",
    )
    parent.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Override the random seed (takes precedence over config).",
    )
    return parent


def _add_index_option(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--index",
        type=str,
        default=None,
        help="Path to a saved index (defaults to index.index_path from config).",
    )


def _register_subcommands(
    subparsers: argparse._SubParsersAction,  # type: ignore[type-arg]
    parent: argparse.ArgumentParser,
) -> None:
    """Register every subcommand and the options specific to it."""
    commands = [
        ("index", "Build an inverted index from a JSONL corpus.", handle_index),
        ("search", "Search a saved index for one query.", handle_search),
        ("run", "Search every topic and write a TREC run.", handle_run),
        ("eval", "Evaluate a TREC run against qrels.", handle_eval),
        ("compare", "Compare two runs with a paired randomization test.", handle_compare),
        ("fuse", "Fuse several TREC runs into one.", handle_fuse),
        ("train", "Train a neural ranker with Ranking SVM.", handle_train),
        ("benchmark", "Benchmark the retrievers on a synthetic corpus.", handle_benchmark),
        ("serve", "Start the local HTTP search server.", handle_serve),
        ("info", "Display environment and config info.", handle_info),
    ]

    for name, help_text, handler in commands:
        parser = subparsers.add_parser(name, parents=[parent], help=help_text)
        parser.set_defaults(func=handler)

    index_parser = subparsers.choices["index"]
    index_parser.add_argument("--corpus", type=str, default=None, help="JSONL corpus to index.")
    index_parser.add_argument("--output", type=str, default=None, help="Where to write the index.")

    search_parser = subparsers.choices["search"]
    _add_index_option(search_parser)
    search_parser.add_argument("--query", type=str, required=True, help="Query text.")
    search_parser.add_argument("--k", type=int, default=10, help="Number of results.")
    search_parser.add_argument(
        "--filter",
        type=str,
        default=None,
        dest="filter_expression",
        help="Metadata filter such as 'lang=1,year=5' (all must match).",
    )

    run_parser = subparsers.choices["run"]
    _add_index_option(run_parser)
    run_parser.add_argument("--topics", type=str, required=True, help="Topics as TSV or JSONL.")
    run_parser.add_argument("--output", type=str, required=True, help="Run file to write.")
    run_parser.add_argument("--k", type=int, default=None, help="Results per topic.")
    run_parser.add_argument("--tag", type=str, default="rankr", help="Run tag column.")

    eval_parser = subparsers.choices["eval"]
    eval_parser.add_argument("--run", type=str, required=True, dest="run_path", help="TREC run file.")
    eval_parser.add_argument("--qrels", type=str, required=True, help="TREC qrels file.")
    eval_parser.add_argument(
        "--output-dir", type=str, default=None, dest="output_dir", help="Report directory."
    )

    compare_parser = subparsers.choices["compare"]
    compare_parser.add_argument("--run-a", type=str, required=True, dest="run_a", help="Baseline run.")
    compare_parser.add_argument("--run-b", type=str, required=True, dest="run_b", help="Candidate run.")
    compare_parser.add_argument("--qrels", type=str, required=True, help="TREC qrels file.")
    compare_parser.add_argument("--metric", type=str, default="MAP", help="Metric to compare on.")
    compare_parser.add_argument("--trials", type=int, default=None, help="Randomization trials.")
    compare_parser.add_argument(
        "--output-dir", type=str, default=None, dest="output_dir", help="Write comparison.json here."
    )

    fuse_parser = subparsers.choices["fuse"]
    fuse_parser.add_argument("--runs", type=str, nargs="+", required=True, help="Run files to fuse.")
    fuse_parser.add_argument("--output", type=str, required=True, help="Fused run file.")
    fuse_parser.add_argument("--method", type=str, default=None, help="Fusion method name.")
    fuse_parser.add_argument("--k", type=int, default=None, help="Keep this many results per query.")
    fuse_parser.add_argument("--tag", type=str, default="rankr-fused", help="Run tag column.")

    train_parser = subparsers.choices["train"]
    train_parser.add_argument("--data", type=str, default=None, help="LETOR training file.")
    train_parser.add_argument("--output", type=str, default=None, help="Checkpoint path.")
    train_parser.add_argument(
        "--test", type=str, default=None, dest="test_path", help="LETOR file to rerank after training."
    )
    train_parser.add_argument(
        "--run-output", type=str, default=None, dest="run_output", help="Write the reranked test set as a run."
    )

    benchmark_parser = subparsers.choices["benchmark"]
    benchmark_parser.add_argument(
        "--dataset", type=str, default=None, choices=["tiny", "small", "medium"], help="Synthetic dataset size."
    )
    benchmark_parser.add_argument(
        "--algorithms", type=str, nargs="+", default=None, help="Subset of retrievers to benchmark."
    )
    benchmark_parser.add_argument(
        "--output-dir", type=str, default=None, dest="output_dir", help="Results directory."
    )

    serve_parser = subparsers.choices["serve"]
    _add_index_option(serve_parser)
    serve_parser.add_argument("--host", type=str, default=None, help="Bind address.")
    serve_parser.add_argument("--port", type=int, default=None, help="Bind port.")


def build_parser() -> argparse.ArgumentParser:
    parent = _build_global_parser()
    root_parser = argparse.ArgumentParser(
        prog="rankr",
        description="rankr: lexical retrieval, rank fusion and IR evaluation.",
        parents=[parent],
    )
    subparsers = root_parser.add_subparsers(dest="command")
    _register_subcommands(subparsers, parent)
    return root_parser


def main(argv: list[str] | None = None) -> None:
    """
    Main CLI entrypoint, referenced by pyproject.toml's [project.scripts].

    With no subcommand we show help and exit with USER_ERROR.
    """
    root_parser = build_parser()
    args = root_parser.parse_args(argv)

    if not hasattr(args, "func") or args.func is None:
        root_parser.print_help()
        sys.exit(USER_ERROR)

    exit_code = args.func(args)
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
