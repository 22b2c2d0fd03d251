# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
rankr evaluation package.

Answers the question every retrieval change has to face: did ranking
quality go up or down, and is the difference real?

Subsystems:
  - trec: TREC run and qrels file formats
  - metrics: binary (relevant-set) and graded (relevance-grade) IR metrics
  - engine: per-query and aggregate evaluation of a run against qrels
  - statistics: summary statistics, robustness and significance testing
  - reporting: metrics.json / report.txt writers
"""
