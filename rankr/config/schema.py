# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Type-safe configuration schemas for rankr.

Each stage of the toolkit (indexing, retrieval, fusion, evaluation, learning,
benchmarking, serving) gets its own frozen pydantic model. The models share
the same ConfigDict:
  - frozen=True: immutability after construction
  - extra="forbid": unknown fields cause immediate failure
  - validate_default=True: even defaults get type-checked

A single YAML file holds a required `global:` section plus whichever stage
sections the command at hand needs. Missing sections stay None and the
command decides whether it can run with defaults.
"""

from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

_FROZEN = ConfigDict(frozen=True, extra="forbid", validate_default=True)

DEFAULT_STOPWORDS: tuple[str, ...] = (
    "a", "an", "and", "are", "as", "at", "be", "by", "for", "from", "has",
    "in", "is", "it", "its", "of", "on", "or", "that", "the", "to", "was",
    "were", "will", "with",
)


class DirectoryConfig(BaseModel):
    """Paths to the standard project directories, all relative to project root."""

    model_config = _FROZEN

    data: str = Field(default="data", description="Corpora, topics and qrels")
    indexes: str = Field(default="indexes", description="Persisted inverted indexes")
    runs: str = Field(default="runs", description="TREC run files produced by `rankr run`")
    logs: str = Field(default="logs", description="System and debug logs")
    experiments: str = Field(default="experiments", description="Eval reports and trained rankers")


class GlobalConfig(BaseModel):
    """
    Cross-cutting settings that apply to every command: reproducibility
    (seed), observability (log_level, log_file) and project identity.
    """

    model_config = _FROZEN

    config_version: str = Field(
        description="Schema version for compatibility tracking, e.g. '1.0.0'"
    )
    project_name: str = Field(default="rankr", description="Human-readable project identifier")
    seed: int = Field(default=42, ge=0, description="Global random seed")
    log_level: str = Field(
        default="INFO",
        description="One of DEBUG, INFO, WARNING, ERROR, CRITICAL",
    )
    log_file: Optional[str] = Field(
        default=None,
        description="Optional path for file-based log output, relative to project root",
    )
    directories: DirectoryConfig = Field(default_factory=DirectoryConfig)


class AnalyzerConfig(BaseModel):
    """How raw text is normalized and split into index terms."""

    model_config = _FROZEN

    nfkc: bool = Field(default=True, description="Unicode NFKC normalization")
    lowercase: bool = Field(default=True, description="Case-fold before splitting")
    strip_accents: bool = Field(default=True, description="Drop combining marks after NFD")
    min_term_length: int = Field(default=1, ge=1, description="Shorter terms are dropped")
    remove_stopwords: bool = Field(default=False, description="Drop terms in `stopwords`")
    stopwords: list[str] = Field(default_factory=lambda: list(DEFAULT_STOPWORDS))


class IndexConfig(BaseModel):
    """Where the corpus comes from and where the built index goes."""

    model_config = _FROZEN

    config_version: str = Field(description="Schema version")
    corpus_path: Optional[str] = Field(
        default=None,
        description="JSONL corpus with id/text/metadata records, relative to project root",
    )
    index_path: str = Field(
        default="indexes/index.json",
        description="Where the index is saved, relative to project root",
    )
    analyzer: AnalyzerConfig = Field(default_factory=AnalyzerConfig)


class TfIdfConfig(BaseModel):
    model_config = _FROZEN

    tf_variant: Literal["linear", "log_scaled"] = Field(default="log_scaled")
    idf_variant: Literal["standard", "smoothed"] = Field(default="standard")


class QueryLikelihoodConfig(BaseModel):
    """Language-model smoothing. `mu` feeds Dirichlet, `jm_lambda` feeds Jelinek-Mercer."""

    model_config = _FROZEN

    smoothing: Literal["dirichlet", "jelinek_mercer"] = Field(default="dirichlet")
    mu: float = Field(default=1000.0, ge=0.0)
    jm_lambda: float = Field(default=0.5, ge=0.0, le=1.0)


class ExpansionConfig(BaseModel):
    """Pseudo-relevance feedback. Off unless `enabled` is set."""

    model_config = _FROZEN

    enabled: bool = Field(default=False)
    prf_depth: int = Field(default=5, ge=1, description="Feedback documents taken from the first pass")
    max_expansion_terms: int = Field(default=5, ge=0)
    expansion_weight: float = Field(default=0.5, ge=0.0, le=1.0)
    initial_k: int = Field(default=20, ge=1, description="Depth of the first-pass retrieval")
    method: Literal["robertson_selection", "term_frequency", "idf_weighted"] = Field(
        default="idf_weighted"
    )


class RetrievalConfig(BaseModel):
    """
    Which retrievers run for each query and how they are parameterized.
    When more than one method is listed, the pipeline fuses their outputs
    with the `fusion:` section (RRF when that section is absent).
    """

    model_config = _FROZEN

    config_version: str = Field(description="Schema version")
    methods: list[Literal["tfidf", "query_likelihood"]] = Field(
        default_factory=lambda: ["tfidf"],
        min_length=1,
    )
    k: int = Field(default=100, ge=1, description="Results kept per query")
    tfidf: TfIdfConfig = Field(default_factory=TfIdfConfig)
    query_likelihood: QueryLikelihoodConfig = Field(default_factory=QueryLikelihoodConfig)
    expansion: ExpansionConfig = Field(default_factory=ExpansionConfig)
    routing: bool = Field(
        default=False,
        description="Pick retrievers per query from query features instead of running all",
    )


FusionMethodName = Literal["rrf", "isr", "combsum", "combmnz", "borda", "dbsf", "weighted"]


class FusionConfig(BaseModel):
    """Rank fusion settings shared by the pipeline and `rankr fuse`."""

    model_config = _FROZEN

    config_version: str = Field(description="Schema version")
    method: FusionMethodName = Field(default="rrf")
    rrf_k: float = Field(default=60.0, gt=0.0, description="RRF rank offset")
    isr_k: float = Field(default=1.0, gt=0.0, description="ISR rank offset")
    weights: Optional[list[float]] = Field(
        default=None,
        description=(
            "Weights for the weighted method: one per retriever in pipeline order "
            "(retrieval.methods, or tfidf, query_likelihood, prf when routing), "
            "or one per run for `rankr fuse`"
        ),
    )
    normalize: bool = Field(default=True, description="Min-max normalize before weighting")
    top_k: Optional[int] = Field(default=None, ge=1, description="Truncate the fused list")

    @model_validator(mode="after")
    def _check_weights(self) -> "FusionConfig":
        if self.weights is not None:
            if any(w < 0 for w in self.weights):
                raise ValueError("fusion weights must be non-negative")
            if not any(w > 0 for w in self.weights):
                raise ValueError("at least one fusion weight must be positive")
        if self.method == "weighted" and self.weights is None:
            raise ValueError("the weighted fusion method requires `weights`")
        return self


class EvalConfig(BaseModel):
    """Which metrics to compute, at which cutoffs, and where reports go."""

    model_config = _FROZEN

    config_version: str = Field(description="Schema version")
    metrics: list[Literal["P", "R", "nDCG", "Success", "ERR", "MAP", "MRR", "R-Prec"]] = Field(
        default_factory=lambda: ["MAP", "MRR", "nDCG", "P", "R"],
        min_length=1,
    )
    k_values: list[int] = Field(
        default_factory=lambda: [5, 10, 20],
        min_length=1,
        description="Cutoffs for the @k metrics",
    )
    relevance_threshold: int = Field(
        default=1,
        ge=1,
        description="Minimum qrels grade that counts as relevant for binary metrics",
    )
    significance_trials: int = Field(default=10_000, ge=100)
    seed: int = Field(default=42, ge=0)
    output_directory: str = Field(
        default="experiments",
        description="Where evaluation reports get written, relative to project root",
    )

    @model_validator(mode="after")
    def _check_k_values(self) -> "EvalConfig":
        if any(k < 1 for k in self.k_values):
            raise ValueError("k_values must all be >= 1")
        return self


class LearnConfig(BaseModel):
    """Ranking SVM training of a torch scoring model over LETOR features."""

    model_config = _FROZEN

    config_version: str = Field(description="Schema version")
    train_path: Optional[str] = Field(default=None, description="LETOR/SVMlight training file")
    hidden_dims: list[int] = Field(
        default_factory=list,
        description="Empty means a linear scorer; otherwise MLP hidden layer sizes",
    )
    c: float = Field(default=1.0, gt=0.0, description="Ranking SVM regularization trade-off")
    query_normalization: bool = Field(default=True)
    cost_sensitivity: bool = Field(default=True)
    epsilon: float = Field(default=1e-10, ge=0.0)
    epochs: int = Field(default=20, ge=1)
    learning_rate: float = Field(default=0.01, gt=0.0)
    weight_decay: float = Field(default=0.0, ge=0.0)
    optimizer: Literal["sgd", "adamw"] = Field(default="sgd")
    output_path: str = Field(default="experiments/ranker.pt")


class BenchmarkConfig(BaseModel):
    """Synthetic retrieval benchmark settings."""

    model_config = _FROZEN

    config_version: str = Field(description="Schema version")
    dataset: Literal["tiny", "small", "medium"] = Field(default="small")
    k_values: list[int] = Field(default_factory=lambda: [1, 10, 100], min_length=1)
    max_test_queries: Optional[int] = Field(default=None, ge=1)
    output_directory: str = Field(default="experiments/benchmarks")


class ServeConfig(BaseModel):
    """Local search server settings. Binds to localhost unless told otherwise."""

    model_config = _FROZEN

    config_version: str = Field(description="Schema version")
    host: str = Field(default="127.0.0.1")
    port: int = Field(default=8731, ge=0, le=65535)
    max_request_size_bytes: int = Field(default=1_048_576, ge=1)
    default_k: int = Field(default=10, ge=1)


class RankrConfig(BaseModel):
    """
    Top-level config container. Each CLI command reads the sections it needs
    and validates their presence itself.
    """

    model_config = _FROZEN

    global_config: GlobalConfig = Field(alias="global")
    index: Optional[IndexConfig] = Field(default=None)
    retrieval: Optional[RetrievalConfig] = Field(default=None)
    fusion: Optional[FusionConfig] = Field(default=None)
    eval: Optional[EvalConfig] = Field(default=None)
    learn: Optional[LearnConfig] = Field(default=None)
    benchmark: Optional[BenchmarkConfig] = Field(default=None)
    serve: Optional[ServeConfig] = Field(default=None)
