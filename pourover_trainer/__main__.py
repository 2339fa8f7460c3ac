from __future__ import annotations

import sys
from pathlib import Path


def _ensure_repo_root_on_path() -> None:
    """Put the repository root (parent of this package) on ``sys.path``.

    Needed when the file is executed directly (``python pourover_trainer/__main__.py``)
    instead of with ``python -m pourover_trainer``.
    """
    repo_root_str = str(Path(__file__).resolve().parent.parent)
    if repo_root_str not in sys.path:
        sys.path.insert(0, repo_root_str)


try:
    from .app import run  # type: ignore[attr-defined]
except ImportError:
    _ensure_repo_root_on_path()
    from pourover_trainer.app import run  # type: ignore[attr-defined]


def main() -> int:
    """Entry point for the pour-over trainer."""
    return run()


if __name__ == "__main__":
    raise SystemExit(main())
