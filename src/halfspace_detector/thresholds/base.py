"""Base class for adaptive score thresholds."""
from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Optional, Tuple

from ..config import require_count

LOGGER = logging.getLogger(__name__)


class Threshold(ABC):
    """Turns a stream of ensemble scores into normal/anomalous decisions.

    A score above :attr:`current_threshold` is normal. During the first
    ``window_size`` predictions no boundary exists yet and every score is
    treated as normal.
    """

    def __init__(self, window_size: int) -> None:
        require_count("window_size", window_size)
        self._window_size = window_size
        self._counter = 0
        self._current_threshold = 0
        self._last_prediction: Optional[Tuple[int, bool]] = None

    @property
    def window_size(self) -> int:
        return self._window_size

    @property
    def counter(self) -> int:
        return self._counter

    @property
    def current_threshold(self) -> int:
        return self._current_threshold

    @current_threshold.setter
    def current_threshold(self, value: int) -> None:
        self._current_threshold = int(value)

    @property
    def is_active(self) -> bool:
        """Whether the warm-up is over, without advancing it."""

        return self._counter >= self._window_size

    def reference_created(self) -> bool:
        """Advance the warm-up and report whether it had already completed.

        Returns ``False`` for exactly the first ``window_size`` calls and
        ``True`` for every call after that.
        """

        if self._counter < self._window_size:
            self._counter += 1
            if self._counter == self._window_size:
                LOGGER.debug("%r finished warming up", self)
            return False
        return True

    def predict_sample(self, anomaly_score: int) -> bool:
        """Return ``True`` if the score is normal, ``False`` if anomalous."""

        if not self.reference_created():
            is_normal = True
        else:
            is_normal = anomaly_score > self._current_threshold
        self._last_prediction = (anomaly_score, is_normal)
        return is_normal

    def _is_normal(self, anomaly_score: int) -> bool:
        # Reuse the verdict issued by predict_sample for this score, if any.
        last, self._last_prediction = self._last_prediction, None
        if last is not None and last[0] == anomaly_score:
            return last[1]
        return not self.is_active or anomaly_score > self._current_threshold

    @abstractmethod
    def update_model(self, anomaly_score: int, is_normal: Optional[bool] = None) -> None:
        """Feed ``anomaly_score`` into the strategy's model.

        ``is_normal`` is the verdict already issued for this score. When it is
        omitted, the verdict of the preceding :meth:`predict_sample` call for
        the same score is reused. Failing that, it is derived from the current
        threshold without advancing the warm-up.
        """

    def insert_new_sample(self, anomaly_score: int) -> bool:
        """Classify ``anomaly_score`` and then learn from it.

        The verdict reflects the threshold as it stood before this score.
        """

        is_normal = self.predict_sample(anomaly_score)
        self._last_prediction = None
        self.update_model(anomaly_score, is_normal)
        return is_normal


__all__ = ["Threshold"]
