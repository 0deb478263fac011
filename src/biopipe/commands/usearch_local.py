"""Run usearch_local on sequences in the stream.

Same options and output as ``usearch_global`` but with local alignments
(``usearch -usearch_local``).

Usage::

    usearch_local(database=<file>, identity=<float>
                  [, strand=<plus|both>, cpus=<uint>])
"""

from __future__ import annotations

from typing import Callable

from ..seq import usearch
from .usearch_global import UsearchGlobal


class UsearchLocal(UsearchGlobal):
    """Local alignment search against a database."""

    search: Callable[..., None] = staticmethod(usearch.usearch_local)
