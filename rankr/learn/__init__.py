# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
rankr learning-to-rank package.

Subsystems:
  - dataset: LETOR / SVMlight feature files
  - ranking_svm: pairwise hinge loss and its per-document gradients
  - model: torch scoring model (linear or MLP) over feature vectors
  - trainer: epoch loop driving the model with Ranking SVM gradients,
    checkpoint save/load and reranking
"""
