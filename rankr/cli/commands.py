# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Subcommand handlers for the rankr CLI.

Each function here corresponds to one CLI subcommand and returns an exit
code from rankr.cli.exit_codes. Progress and summaries go through the
structured logger; only results a user asked to see (search hits, a run
comparison) are written to stdout.

Heavy modules (torch, the benchmark runner, the HTTP server) are imported
inside the handlers that need them so `rankr info` stays fast.
"""

import argparse
import json
import logging
import sys
import time
from pathlib import Path
from typing import TYPE_CHECKING

from rankr.cli.exit_codes import CONFIG_ERROR, RUNTIME_ERROR, SUCCESS, USER_ERROR, VALIDATION_ERROR
from rankr.config.exceptions import ConfigError
from rankr.config.loader import load_config
from rankr.config.schema import (
    AnalyzerConfig,
    BenchmarkConfig,
    EvalConfig,
    FusionConfig,
    IndexConfig,
    LearnConfig,
    RankrConfig,
    RetrievalConfig,
    ServeConfig,
)
from rankr.eval.errors import EvalError
from rankr.fusion.errors import FusionError
from rankr.learn.errors import LearnError
from rankr.logging.logger import DEFAULT_LOG_LEVEL, get_logger
from rankr.retrieve.errors import RetrieveError
from rankr.runtime.bootstrap import bootstrap
from rankr.utils.paths import resolve_path

if TYPE_CHECKING:
    from rankr.pipeline import Pipeline
    from rankr.retrieve.index import IndexBundle

DEFAULT_CONFIG_VERSION = "1.0.0"
DEFAULT_SEED = 42


def _configure_logging(args: argparse.Namespace, command_name: str, log_stream: str) -> logging.Logger:
    """
    Point the package logger at `log_stream` and set its level from
    --log-level (INFO when absent; a loaded config may still change it).
    """
    get_logger("rankr", log_level=args.log_level or DEFAULT_LOG_LEVEL, stream=log_stream)
    return get_logger(f"rankr.cli.{command_name}")


def _load_and_bootstrap(
    args: argparse.Namespace,
    command_name: str,
    log_stream: str = "stdout",
) -> tuple[int, RankrConfig | None, logging.Logger]:
    """
    The shared setup that every command needs: load config, run bootstrap.

    Commands whose results go to stdout pass log_stream="stderr" so the two
    never interleave.

    Returns (exit_code, config, logger). If exit_code is not SUCCESS the
    caller returns it immediately.
    """
    logger = _configure_logging(args, command_name, log_stream)

    config = None
    if args.config is not None:
        try:
            config = load_config(Path(args.config))
        except ConfigError as err:
            logger.error(
                "Configuration error",
                extra={"command": command_name, "error": str(err)},
            )
            return CONFIG_ERROR, None, logger

    if config is not None:
        bootstrap(config.global_config, log_level=args.log_level)
    else:
        logger.debug(
            "No config provided, running with defaults",
            extra={"command": command_name},
        )

    if args.seed is not None:
        from rankr.runtime.bootstrap import set_deterministic_seed

        set_deterministic_seed(args.seed)

    return SUCCESS, config, logger


def _effective_seed(args: argparse.Namespace, config: RankrConfig | None) -> int:
    if args.seed is not None:
        return args.seed
    if config is not None:
        return config.global_config.seed
    return DEFAULT_SEED


def _index_path(args: argparse.Namespace, config: RankrConfig | None) -> Path:
    """--index wins; otherwise index.index_path from config (or its default)."""
    if getattr(args, "index", None):
        return Path(args.index)
    index_config = config.index if config is not None and config.index is not None else None
    if index_config is None:
        index_config = IndexConfig(config_version=DEFAULT_CONFIG_VERSION)
    return resolve_path(index_config.index_path)


def _retrieval_config(config: RankrConfig | None) -> RetrievalConfig:
    if config is not None and config.retrieval is not None:
        return config.retrieval
    return RetrievalConfig(config_version=DEFAULT_CONFIG_VERSION)


def _open_pipeline(
    index_path: Path, config: RankrConfig | None
) -> tuple["Pipeline", "IndexBundle"]:
    """Load a saved index and assemble the configured retrieval pipeline around it."""
    from rankr.pipeline import build_pipeline
    from rankr.retrieve.analysis import Analyzer
    from rankr.retrieve.filtering import MetadataStore
    from rankr.retrieve.index import load_index_bundle

    bundle = load_index_bundle(index_path)
    analyzer_config = (
        AnalyzerConfig.model_validate(bundle.analyzer_config)
        if bundle.analyzer_config is not None
        else None
    )
    pipeline = build_pipeline(
        bundle.index,
        Analyzer(analyzer_config),
        _retrieval_config(config),
        fusion_config=config.fusion if config is not None else None,
        metadata_store=MetadataStore.from_dict(bundle.metadata),
    )
    return pipeline, bundle


def handle_index(args: argparse.Namespace) -> int:
    """Analyze a JSONL corpus and persist the inverted index with its checksum."""
    exit_code, config, logger = _load_and_bootstrap(args, "index")
    if exit_code != SUCCESS:
        return exit_code

    try:
        index_config = config.index if config is not None and config.index is not None else None
        if index_config is None:
            index_config = IndexConfig(config_version=DEFAULT_CONFIG_VERSION)

        if args.corpus is not None:
            corpus_path = Path(args.corpus)
        elif index_config.corpus_path is not None:
            corpus_path = resolve_path(index_config.corpus_path)
        else:
            logger.error(
                "No corpus given: pass --corpus or set index.corpus_path",
                extra={"command": "index"},
            )
            return USER_ERROR

        output_path = Path(args.output) if args.output else resolve_path(index_config.index_path)

        if not corpus_path.is_file():
            logger.error("Corpus file not found", extra={"path": str(corpus_path)})
            return VALIDATION_ERROR

        from rankr.retrieve.analysis import Analyzer
        from rankr.retrieve.filtering import MetadataStore
        from rankr.retrieve.index import InvertedIndex, iter_corpus

        logger.info(
            "Starting indexing",
            extra={"corpus": str(corpus_path), "output": str(output_path), "dry_run": args.dry_run},
        )

        if args.dry_run:
            num_docs = sum(1 for _ in iter_corpus(corpus_path))
            logger.info("Dry run: corpus is valid, nothing written", extra={"documents": num_docs})
            return SUCCESS

        analyzer = Analyzer(index_config.analyzer)
        index = InvertedIndex()
        store = MetadataStore()
        for document in iter_corpus(corpus_path):
            index.add_document(document.doc_id, analyzer.analyze(document.text))
            if document.metadata:
                store.add(document.doc_id, document.metadata)

        output_path.parent.mkdir(parents=True, exist_ok=True)
        index.save(
            output_path,
            analyzer_config=index_config.analyzer.model_dump(),
            metadata=store.to_dict(),
        )

        logger.info(
            "Index built",
            extra={
                "documents": index.num_docs,
                "vocabulary": index.vocabulary_size,
                "avg_doc_length": round(index.avg_doc_length, 3),
                "with_metadata": len(store),
                "path": str(output_path),
            },
        )
        return SUCCESS

    except RetrieveError as err:
        logger.error("Indexing failed: invalid corpus", extra={"error": str(err)})
        return VALIDATION_ERROR
    except Exception as err:
        logger.error("Indexing failed", extra={"error": str(err)}, exc_info=True)
        return RUNTIME_ERROR


def handle_search(args: argparse.Namespace) -> int:
    """Run one query through the pipeline and print `rank<TAB>doc_id<TAB>score` lines."""
    exit_code, config, logger = _load_and_bootstrap(args, "search", log_stream="stderr")
    if exit_code != SUCCESS:
        return exit_code

    if args.k < 1:
        logger.error("--k must be a positive integer", extra={"k": args.k})
        return USER_ERROR

    try:
        from rankr.retrieve.errors import EmptyQueryError, IndexIntegrityError
        from rankr.retrieve.filtering import parse_filter_expression

        predicate = None
        if args.filter_expression:
            predicate = parse_filter_expression(args.filter_expression)

        index_path = _index_path(args, config)
        try:
            pipeline, _bundle = _open_pipeline(index_path, config)
        except IndexIntegrityError as err:
            logger.error("Cannot load index", extra={"path": str(index_path), "error": str(err)})
            return VALIDATION_ERROR
        except ConfigError as err:
            logger.error("Invalid pipeline configuration", extra={"error": str(err)})
            return CONFIG_ERROR

        start = time.perf_counter()
        try:
            results = pipeline.search(args.query, args.k, predicate=predicate)
        except EmptyQueryError:
            logger.error("Query has no searchable terms", extra={"query": args.query})
            return USER_ERROR
        took_ms = (time.perf_counter() - start) * 1000.0

        for rank, (doc_id, score) in enumerate(results, start=1):
            sys.stdout.write(f"{rank}\t{doc_id}\t{score:.6f}\n")
        sys.stdout.flush()

        logger.info(
            "Search complete",
            extra={"results": len(results), "took_ms": round(took_ms, 3)},
        )
        return SUCCESS

    except RetrieveError as err:
        logger.error("Search failed", extra={"error": str(err)})
        return USER_ERROR
    except Exception as err:
        logger.error("Search failed", extra={"error": str(err)}, exc_info=True)
        return RUNTIME_ERROR


def handle_run(args: argparse.Namespace) -> int:
    """Search every topic and write the results as a TREC run file."""
    exit_code, config, logger = _load_and_bootstrap(args, "run")
    if exit_code != SUCCESS:
        return exit_code

    try:
        from rankr.eval.trec import read_topics, write_run
        from rankr.retrieve.errors import IndexIntegrityError

        topics_path = Path(args.topics)
        if not topics_path.is_file():
            logger.error("Topics file not found", extra={"path": str(topics_path)})
            return VALIDATION_ERROR

        topics = read_topics(topics_path)
        retrieval_config = _retrieval_config(config)
        k = args.k if args.k is not None else retrieval_config.k
        if k < 1:
            logger.error("--k must be a positive integer", extra={"k": k})
            return USER_ERROR

        index_path = _index_path(args, config)
        logger.info(
            "Starting run",
            extra={
                "topics": len(topics),
                "index": str(index_path),
                "methods": list(retrieval_config.methods),
                "k": k,
                "dry_run": args.dry_run,
            },
        )

        try:
            pipeline, _bundle = _open_pipeline(index_path, config)
        except IndexIntegrityError as err:
            logger.error("Cannot load index", extra={"path": str(index_path), "error": str(err)})
            return VALIDATION_ERROR
        except ConfigError as err:
            logger.error("Invalid pipeline configuration", extra={"error": str(err)})
            return CONFIG_ERROR

        if args.dry_run:
            logger.info(
                "Dry run: would write run",
                extra={"output": args.output, "retrievers": list(pipeline.retrievers)},
            )
            return SUCCESS

        start = time.perf_counter()
        run = pipeline.run(topics, k, tag=args.tag)
        elapsed = time.perf_counter() - start

        output_path = Path(args.output)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        write_run(run, output_path)

        logger.info(
            "Run written",
            extra={
                "path": str(output_path),
                "queries": len(run),
                "seconds": round(elapsed, 3),
            },
        )
        return SUCCESS

    except (EvalError, RetrieveError, FusionError) as err:
        logger.error("Run failed", extra={"error": str(err)})
        return VALIDATION_ERROR
    except Exception as err:
        logger.error("Run failed", extra={"error": str(err)}, exc_info=True)
        return RUNTIME_ERROR


def handle_eval(args: argparse.Namespace) -> int:
    """
    Score a TREC run against qrels and write metrics.json, report.txt and a
    config snapshot under the eval output directory.
    """
    exit_code, config, logger = _load_and_bootstrap(args, "eval")
    if exit_code != SUCCESS:
        return exit_code

    try:
        eval_config = config.eval if config is not None and config.eval is not None else None
        if eval_config is None:
            eval_config = EvalConfig(config_version=DEFAULT_CONFIG_VERSION)

        from rankr.eval.engine import evaluate_run
        from rankr.eval.reporting import write_report
        from rankr.eval.trec import read_qrels, read_run

        run = read_run(Path(args.run_path))
        qrels = read_qrels(Path(args.qrels))

        logger.info(
            "Starting evaluation",
            extra={
                "run_tag": run.tag,
                "run_queries": len(run),
                "judged_queries": len(qrels),
                "metrics": list(eval_config.metrics),
                "k_values": list(eval_config.k_values),
                "dry_run": args.dry_run,
            },
        )

        result = evaluate_run(
            run,
            qrels,
            metrics=eval_config.metrics,
            k_values=eval_config.k_values,
            relevance_threshold=eval_config.relevance_threshold,
        )

        logger.info(
            "Evaluation complete",
            extra={name: round(value, 4) for name, value in result.aggregate.items()},
        )

        if args.dry_run:
            logger.info("Dry run: report not written")
            return SUCCESS

        if args.output_dir:
            output_dir = Path(args.output_dir)
        else:
            run_id = f"eval_{run.tag}_{int(time.time())}"
            output_dir = resolve_path(eval_config.output_directory) / run_id

        config_snapshot = config.model_dump(by_alias=True) if config is not None else None
        write_report(result, output_dir, config_snapshot=config_snapshot)
        return SUCCESS

    except FileNotFoundError as err:
        logger.error("Evaluation failed: missing files", extra={"error": str(err)})
        return VALIDATION_ERROR
    except EvalError as err:
        logger.error("Evaluation failed", extra={"error": str(err)})
        return VALIDATION_ERROR
    except Exception as err:
        logger.error("Evaluation failed", extra={"error": str(err)}, exc_info=True)
        return RUNTIME_ERROR


def handle_compare(args: argparse.Namespace) -> int:
    """Compare two runs on one metric with a paired randomization test."""
    exit_code, config, logger = _load_and_bootstrap(args, "compare", log_stream="stderr")
    if exit_code != SUCCESS:
        return exit_code

    try:
        eval_config = config.eval if config is not None and config.eval is not None else None
        if eval_config is None:
            eval_config = EvalConfig(config_version=DEFAULT_CONFIG_VERSION)

        family, _, cutoff = args.metric.partition("@")
        if cutoff and not cutoff.isdigit():
            logger.error("Metric cutoff must be an integer", extra={"metric": args.metric})
            return USER_ERROR
        k_values = [int(cutoff)] if cutoff else list(eval_config.k_values)

        trials = args.trials if args.trials is not None else eval_config.significance_trials
        if trials < 1:
            logger.error("--trials must be a positive integer", extra={"trials": trials})
            return USER_ERROR

        from rankr.eval.engine import evaluate_run
        from rankr.eval.reporting import format_comparison_text, write_comparison
        from rankr.eval.statistics import compare_runs
        from rankr.eval.trec import read_qrels, read_run

        qrels = read_qrels(Path(args.qrels))
        run_a = read_run(Path(args.run_a))
        run_b = read_run(Path(args.run_b))

        results = [
            evaluate_run(
                run,
                qrels,
                metrics=[family],
                k_values=k_values,
                relevance_threshold=eval_config.relevance_threshold,
            )
            for run in (run_a, run_b)
        ]

        seed = args.seed if args.seed is not None else eval_config.seed
        comparison = compare_runs(results[0], results[1], args.metric, trials=trials, seed=seed)

        sys.stdout.write(format_comparison_text(comparison))
        sys.stdout.flush()

        logger.info(
            "Comparison complete",
            extra={
                "metric": comparison.metric,
                "mean_difference": round(comparison.mean_difference, 4),
                "p_value": round(comparison.p_value, 4),
                "queries": comparison.num_queries,
            },
        )

        if args.output_dir and not args.dry_run:
            write_comparison(comparison, Path(args.output_dir))
        return SUCCESS

    except FileNotFoundError as err:
        logger.error("Comparison failed: missing files", extra={"error": str(err)})
        return VALIDATION_ERROR
    except EvalError as err:
        logger.error("Comparison failed", extra={"error": str(err)})
        return USER_ERROR
    except Exception as err:
        logger.error("Comparison failed", extra={"error": str(err)}, exc_info=True)
        return RUNTIME_ERROR


def handle_fuse(args: argparse.Namespace) -> int:
    """Fuse the per-query rankings of several run files into one run."""
    exit_code, config, logger = _load_and_bootstrap(args, "fuse")
    if exit_code != SUCCESS:
        return exit_code

    try:
        from rankr.eval.trec import TrecRun, read_run, write_run
        from rankr.fusion.methods import FUSION_METHODS, fuse

        fusion_config: FusionConfig | None = config.fusion if config is not None else None
        method = args.method or (fusion_config.method if fusion_config is not None else "rrf")
        if method not in FUSION_METHODS:
            logger.error(
                "Unknown fusion method",
                extra={"method": method, "expected": list(FUSION_METHODS)},
            )
            return USER_ERROR
        if fusion_config is not None and fusion_config.method != method:
            fusion_config = fusion_config.model_copy(update={"method": method})

        if args.k is not None and args.k < 1:
            logger.error("--k must be a positive integer", extra={"k": args.k})
            return USER_ERROR

        runs = [read_run(Path(path)) for path in args.runs]
        query_ids = sorted({query_id for run in runs for query_id in run.query_ids()})

        logger.info(
            "Starting fusion",
            extra={"method": method, "runs": len(runs), "queries": len(query_ids), "dry_run": args.dry_run},
        )

        fused = TrecRun(tag=args.tag)
        for query_id in query_ids:
            lists = [run.results.get(query_id, []) for run in runs]
            ranked = fuse(method, lists, fusion_config)
            if args.k is not None:
                ranked = ranked[: args.k]
            fused.add_query(query_id, ranked)

        if args.dry_run:
            logger.info("Dry run: fused run not written", extra={"output": args.output})
            return SUCCESS

        output_path = Path(args.output)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        write_run(fused, output_path)
        logger.info("Fused run written", extra={"path": str(output_path), "queries": len(fused)})
        return SUCCESS

    except FileNotFoundError as err:
        logger.error("Fusion failed: missing files", extra={"error": str(err)})
        return VALIDATION_ERROR
    except (EvalError, FusionError) as err:
        logger.error("Fusion failed", extra={"error": str(err)})
        return VALIDATION_ERROR
    except Exception as err:
        logger.error("Fusion failed", extra={"error": str(err)}, exc_info=True)
        return RUNTIME_ERROR


def handle_train(args: argparse.Namespace) -> int:
    """
    Train a RankerModel on a LETOR file and save the checkpoint plus its
    per-epoch history. With --test, the trained model reranks the test
    queries, the result is evaluated against the test labels and (with
    --run-output) written as a TREC run.
    """
    exit_code, config, logger = _load_and_bootstrap(args, "train")
    if exit_code != SUCCESS:
        return exit_code

    try:
        learn_config = config.learn if config is not None and config.learn is not None else None
        if learn_config is None:
            learn_config = LearnConfig(config_version=DEFAULT_CONFIG_VERSION)

        if args.data is not None:
            train_path = Path(args.data)
        elif learn_config.train_path is not None:
            train_path = resolve_path(learn_config.train_path)
        else:
            logger.error(
                "No training data given: pass --data or set learn.train_path",
                extra={"command": "train"},
            )
            return USER_ERROR

        if not train_path.is_file():
            logger.error("Training file not found", extra={"path": str(train_path)})
            return VALIDATION_ERROR

        output_path = Path(args.output) if args.output else resolve_path(learn_config.output_path)

        from rankr.learn.dataset import load_letor

        dataset = load_letor(train_path)
        logger.info(
            "Starting training",
            extra={
                "queries": len(dataset.queries),
                "features": dataset.num_features,
                "epochs": learn_config.epochs,
                "hidden_dims": list(learn_config.hidden_dims),
                "dry_run": args.dry_run,
            },
        )

        if args.dry_run:
            logger.info("Dry run: training data is valid, nothing trained")
            return SUCCESS

        from dataclasses import asdict

        from rankr.learn.trainer import rerank_with_model, save_ranker, train_ranker
        from rankr.utils.filesystem import atomic_write

        model, history = train_ranker(dataset, learn_config, seed=_effective_seed(args, config))

        output_path.parent.mkdir(parents=True, exist_ok=True)
        save_ranker(model, output_path)
        history_path = output_path.with_name(output_path.stem + "_history.json")
        atomic_write(history_path, json.dumps(asdict(history), indent=2))

        if args.test_path is not None:
            from rankr.eval.engine import evaluate_run
            from rankr.eval.trec import TrecRun, write_run

            test_set = load_letor(Path(args.test_path))
            run = TrecRun(tag="rankr-ranker")
            for query_id in test_set.query_ids():
                query = test_set.queries[query_id]
                run.add_query(query_id, rerank_with_model(model, query.doc_ids, query.features))

            result = evaluate_run(run, test_set.to_qrels(), metrics=["nDCG", "MAP"], k_values=[10])
            logger.info(
                "Test set evaluated",
                extra={name: round(value, 4) for name, value in result.aggregate.items()},
            )

            if args.run_output is not None:
                run_path = Path(args.run_output)
                run_path.parent.mkdir(parents=True, exist_ok=True)
                write_run(run, run_path)
                logger.info("Reranked run written", extra={"path": str(run_path)})

        final = history.final
        logger.info(
            "Training complete",
            extra={
                "checkpoint": str(output_path),
                "history": str(history_path),
                "final_loss": round(final.mean_loss, 6) if final else None,
                "final_ndcg_at_10": round(final.ndcg_at_10, 4) if final else None,
            },
        )
        return SUCCESS

    except LearnError as err:
        logger.error("Training failed", extra={"error": str(err)})
        return VALIDATION_ERROR
    except Exception as err:
        logger.error("Training failed", extra={"error": str(err)}, exc_info=True)
        return RUNTIME_ERROR


def handle_benchmark(args: argparse.Namespace) -> int:
    """
    Generate a synthetic corpus, measure every selected retriever against
    exhaustive TF-IDF ground truth and write results.json / results.csv.
    """
    exit_code, config, logger = _load_and_bootstrap(args, "benchmark")
    if exit_code != SUCCESS:
        return exit_code

    try:
        bench_config = (
            config.benchmark if config is not None and config.benchmark is not None else None
        )
        if bench_config is None:
            bench_config = BenchmarkConfig(config_version=DEFAULT_CONFIG_VERSION)

        from rankr.benchmark.datasets import StandardDataset
        from rankr.benchmark.results import write_benchmark_results
        from rankr.benchmark.runner import BenchmarkRunner, lexical_algorithms

        algorithms = lexical_algorithms()
        selected = args.algorithms or list(algorithms)
        unknown = [name for name in selected if name not in algorithms]
        if unknown:
            logger.error(
                "Unknown benchmark algorithms",
                extra={"unknown": unknown, "expected": list(algorithms)},
            )
            return USER_ERROR

        dataset_kind = StandardDataset(args.dataset or bench_config.dataset)
        logger.info(
            "Starting benchmark",
            extra={
                "dataset": dataset_kind.value,
                "algorithms": selected,
                "k_values": list(bench_config.k_values),
                "dry_run": args.dry_run,
            },
        )

        if args.dry_run:
            shape = dataset_kind.shape
            logger.info(
                "Dry run: would benchmark",
                extra={"num_docs": shape.num_docs, "num_queries": shape.num_queries},
            )
            return SUCCESS

        dataset = dataset_kind.generate(seed=_effective_seed(args, config))
        runner = BenchmarkRunner(bench_config.k_values, bench_config.max_test_queries)
        runner.add_dataset(dataset)
        runner.precompute_ground_truth()

        results = []
        for name in selected:
            build_fn, search_fn = algorithms[name]
            results.extend(runner.run_algorithm(name, build_fn, search_fn, dataset.name))

        output_dir = (
            Path(args.output_dir) if args.output_dir else resolve_path(bench_config.output_directory)
        )
        written = write_benchmark_results(results, output_dir / dataset.name)
        logger.info(
            "Benchmark complete",
            extra={"results": len(results), "files": [str(p) for p in written]},
        )
        return SUCCESS

    except Exception as err:
        logger.error("Benchmark failed", extra={"error": str(err)}, exc_info=True)
        return RUNTIME_ERROR


def handle_serve(args: argparse.Namespace) -> int:
    """Serve /search over HTTP from a saved index until /shutdown or Ctrl+C."""
    exit_code, config, logger = _load_and_bootstrap(args, "serve")
    if exit_code != SUCCESS:
        return exit_code

    try:
        serve_config = config.serve if config is not None and config.serve is not None else None
        if serve_config is None:
            serve_config = ServeConfig(config_version=DEFAULT_CONFIG_VERSION)

        host = args.host or serve_config.host
        port = args.port if args.port is not None else serve_config.port

        from rankr.retrieve.errors import IndexIntegrityError
        from rankr.serving.server import SearchStatus, run_server

        index_path = _index_path(args, config)
        try:
            pipeline, bundle = _open_pipeline(index_path, config)
        except IndexIntegrityError as err:
            logger.error("Cannot load index", extra={"path": str(index_path), "error": str(err)})
            return VALIDATION_ERROR
        except ConfigError as err:
            logger.error("Invalid pipeline configuration", extra={"error": str(err)})
            return CONFIG_ERROR

        status = SearchStatus(
            index_path=str(index_path),
            num_docs=bundle.index.num_docs,
            vocabulary_size=bundle.index.vocabulary_size,
            retrievers=list(pipeline.retrievers),
            fusion_method=pipeline.fusion_method,
        )

        if args.dry_run:
            logger.info(
                "Dry run: would start server",
                extra={"host": host, "port": port, "docs": status.num_docs},
            )
            return SUCCESS

        run_server(
            pipeline,
            host=host,
            port=port,
            status=status,
            max_request_size_bytes=serve_config.max_request_size_bytes,
            default_k=serve_config.default_k,
        )
        return SUCCESS

    except Exception as err:
        logger.error("Server failed", extra={"error": str(err)}, exc_info=True)
        return RUNTIME_ERROR


def handle_info(args: argparse.Namespace) -> int:
    """Display environment and configuration information."""
    logger = _configure_logging(args, "info", "stdout")

    from rankr import __version__
    from rankr.runtime.environment import get_system_info

    system_info = get_system_info()

    logger.info(
        "System information",
        extra={
            "rankr_version": __version__,
            "python_version": system_info.python_version,
            "platform": system_info.platform,
            "architecture": system_info.architecture,
            "hostname": system_info.hostname,
            "torch_version": system_info.torch_version,
            "config": args.config,
        },
    )
    return SUCCESS
