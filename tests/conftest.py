"""
Pytest configuration.

The service code lives under ``src/`` (``src/classifier`` and ``src/common``)
and is normally importable after ``pip install -e .[test]``. When the tests
are run straight from a checkout, or an editable install's ``.pth`` file is
skipped by ``site``, ``src/`` is put on ``sys.path`` instead.
"""

from __future__ import annotations

import sys
from pathlib import Path


def _ensure_src_on_path() -> None:
    try:
        import classifier  # noqa: F401
        import common  # noqa: F401
        return
    except ModuleNotFoundError:
        pass

    src_dir = Path(__file__).resolve().parents[1] / "src"
    sys.path.insert(0, str(src_dir))


_ensure_src_on_path()
