# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Lexical retrieval for rankr.

Subsystems:
  - analysis: text normalization and term splitting
  - index: inverted index, persistence and JSONL corpus loading
  - tfidf / query_likelihood: the two scoring models
  - expansion: pseudo-relevance feedback
  - filtering: categorical metadata filters
  - routing: per-query retriever selection
  - batch: many queries through one retriever
"""
