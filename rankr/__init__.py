# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""rankr: lexical retrieval, rank fusion, IR evaluation and learning to rank."""

__version__ = "0.1.0"
