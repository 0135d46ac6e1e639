from __future__ import annotations

import sys
from collections.abc import Callable
from typing import Any

from tqdm import tqdm
from tqdm.std import tqdm as TqdmType

"""Progress display for question imports (tqdm, TTY only).

The import coordinator reports progress as a percentage in 0..100 after
every row. ProgressTracker is a callable sink for those values:

- a single tqdm bar with total=100, disabled outside a TTY so CI logs do not
  fill up with ANSI control sequences
- values are treated as monotonic; a lower value than the last one is ignored
"""

__all__ = [
    "ProgressSink",
    "ProgressTracker",
    "is_tty_enabled",
]

ProgressSink = Callable[[float], Any]


def is_tty_enabled() -> bool:
    """Check if TTY output is enabled.

    Returns:
        True if stdout is a TTY and progress should be displayed, False otherwise
    """
    return sys.stdout.isatty()


class ProgressTracker:
    """Percentage progress bar usable as the import progress sink.

    Usage:
        with ProgressTracker(description="Importing questions.xlsx") as progress:
            import_questions(file, tags, sections, progress)
    """

    def __init__(self, *, description: str = "Importing questions") -> None:
        self.description = description
        self.percent = 0.0

        self.enabled = is_tty_enabled()
        self.pbar: TqdmType[Any] | None
        if self.enabled:
            self.pbar = tqdm(
                total=100,
                desc=description,
                unit="%",
                disable=False,
                leave=True,
                position=0,
                ncols=80,
                ascii=True,
                bar_format="{l_bar}{bar}| {n:.0f}/{total:.0f}%",
            )
        else:
            self.pbar = None

    def __call__(self, percent: float) -> None:
        self.update(percent)

    def update(self, percent: float) -> None:
        """Move the bar to ``percent`` (clamped to 0..100)."""
        percent = max(0.0, min(100.0, float(percent)))
        if percent <= self.percent:
            return
        delta = percent - self.percent
        self.percent = percent
        if self.enabled and self.pbar is not None:
            self.pbar.update(delta)

    def set_postfix(self, **kwargs: Any) -> None:
        """Set postfix information (stats) on the progress bar."""
        if self.enabled and self.pbar is not None:
            self.pbar.set_postfix(**kwargs)

    def close(self) -> None:
        """Close the progress bar."""
        if self.enabled and self.pbar is not None:
            self.pbar.close()
            self.pbar = None

    def __enter__(self) -> ProgressTracker:
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()
