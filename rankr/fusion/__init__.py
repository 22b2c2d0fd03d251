# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Rank fusion for rankr.

Subsystems:
  - normalize: min-max and clipped z-score score normalization
  - methods: RRF, ISR, CombSUM, CombMNZ, Borda, DBSF, weighted fusion and
    the `fuse` dispatcher driven by the `fusion:` config section
"""
