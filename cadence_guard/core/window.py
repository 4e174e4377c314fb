"""SampleWindow — the three most recent samples, newest first."""

from __future__ import annotations

from collections import deque

from cadence_guard.core.classifier import WINDOW_SIZE
from cadence_guard.domain.sample import Sample


class SampleWindow:
    """Sliding window fed by the external sampler.

    Not locked: a window belongs to a single sampling loop.
    """

    __slots__ = ("_samples",)

    def __init__(self, size: int = WINDOW_SIZE) -> None:
        if size < WINDOW_SIZE:
            raise ValueError(f"window size must be at least {WINDOW_SIZE}")
        self._samples: deque[Sample] = deque(maxlen=size)

    def push(self, sample: Sample) -> bool:
        """Add *sample* as the newest entry.

        Returns False (and keeps the window unchanged) when the sample is an
        exact repeat of the current newest one, e.g. the same block polled
        twice.
        """
        if self._samples and self._samples[0] == sample:
            return False
        self._samples.appendleft(sample)
        return True

    @property
    def samples(self) -> list[Sample]:
        """Copy of the window contents, index 0 = newest."""
        return list(self._samples)

    @property
    def newest(self) -> Sample | None:
        return self._samples[0] if self._samples else None

    @property
    def is_full(self) -> bool:
        return len(self._samples) == self._samples.maxlen

    def clear(self) -> None:
        self._samples.clear()

    def __len__(self) -> int:
        return len(self._samples)
