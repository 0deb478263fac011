"""Scoped temporary directories for commands that spill to disk."""

from __future__ import annotations

import os
import shutil
import tempfile
from contextlib import contextmanager
from typing import Iterator, Tuple

from .config import get_settings


class TmpDir:
    @staticmethod
    @contextmanager
    def create(*names: str) -> Iterator[Tuple[str, ...]]:
        """Create a temporary directory removed on exit.

        Yields the paths of ``names`` inside the directory followed by the
        directory itself::

            with TmpDir.create("in.fa", "out.fa") as (tmp_in, tmp_out, tmp_dir):
                ...
        """
        settings = get_settings()
        parent = str(settings.tmpdir) if settings.tmpdir else None
        path = tempfile.mkdtemp(prefix="biopipe-", dir=parent)
        try:
            yield tuple(os.path.join(path, name) for name in names) + (path,)
        finally:
            shutil.rmtree(path, ignore_errors=True)


__all__ = ["TmpDir"]
