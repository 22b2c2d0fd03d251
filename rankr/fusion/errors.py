# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT


class FusionError(Exception):
    """Invalid fusion parameters or an unknown fusion method."""
