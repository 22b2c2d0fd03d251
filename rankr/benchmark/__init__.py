# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
rankr retrieval benchmarking package.

Applies the ann-benchmarks methodology (fixed datasets, exhaustive ground
truth, recall@k at standard cutoffs, latency percentiles) to the lexical
retrievers.

Subsystems:
  - datasets: deterministic Zipf-distributed synthetic corpora and queries
  - metrics: recall@k and distribution statistics
  - runner: ground truth caching and per-algorithm measurement
  - results: JSON / CSV output
"""
