# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Torch scoring model for learning to rank.

Maps a (num_docs, num_features) tensor to (num_docs,) scores. With no hidden
layers it is a linear scorer, which is the classic Ranking SVM; hidden
layers turn it into a small ReLU MLP.
"""

from typing import Sequence

import torch
import torch.nn as nn


class RankerModel(nn.Module):
    def __init__(self, num_features: int, hidden_dims: Sequence[int] = ()) -> None:
        super().__init__()
        if num_features < 1:
            raise ValueError(f"num_features must be >= 1, got {num_features}")

        self.num_features = num_features
        self.hidden_dims = list(hidden_dims)

        layers: list[nn.Module] = []
        in_dim = num_features
        for width in self.hidden_dims:
            layers.append(nn.Linear(in_dim, width))
            layers.append(nn.ReLU())
            in_dim = width
        layers.append(nn.Linear(in_dim, 1))
        self.net = nn.Sequential(*layers)

    def forward(self, features: torch.Tensor) -> torch.Tensor:
        return self.net(features).squeeze(-1)
