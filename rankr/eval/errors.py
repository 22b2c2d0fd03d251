# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT


class EvalError(Exception):
    """Base class for evaluation failures."""


class TrecFormatError(EvalError):
    """A run or qrels file is malformed. The message names the file and line."""


class LengthMismatchError(EvalError):
    """Paired inputs (e.g. per-query scores of two runs) differ in length."""
