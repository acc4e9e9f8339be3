"""Per-sample composition of the tree ensemble and an adaptive threshold."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, List, Optional, Sequence

import numpy as np
import pandas as pd

from .config import DetectorConfig, EnsembleConfig, ThresholdConfig
from .exceptions import InputError
from .orchestrator import TreeOrchestrator
from .thresholds import Threshold, create_threshold
from .utils import DetectionResult

LOGGER = logging.getLogger(__name__)

RESULT_COLUMNS = ["hst_score", "hst_threshold", "hst_normal", "hst_anomaly"]


@dataclass
class HalfSpaceTreeDetector:
    """Scores one stream and classifies every score against an adaptive threshold."""

    orchestrator: TreeOrchestrator
    threshold: Threshold
    processed: int = field(default=0, init=False)

    def process(self, sample: Any) -> DetectionResult:
        """Score ``sample``, classify it, then let the threshold learn from it."""

        score = self.orchestrator.insert_sample(sample)
        boundary = self.threshold.current_threshold
        was_active = self.threshold.is_active
        is_normal = self.threshold.insert_new_sample(score)
        result = DetectionResult(
            index=self.processed,
            score=score,
            threshold=boundary,
            is_normal=is_normal,
            reference_created=was_active,
        )
        self.processed += 1
        if result.is_anomaly:
            LOGGER.debug(
                "Sample %d flagged as anomalous (score=%d, threshold=%d)",
                result.index,
                score,
                boundary,
            )
        return result

    def update(
        self,
        features: pd.DataFrame,
        feature_columns: Optional[Sequence[str]] = None,
    ) -> pd.DataFrame:
        """Stream every row of ``features`` in order and return the decisions.

        ``feature_columns`` defaults to every numeric column of the frame. The
        result is aligned to the frame's index.
        """

        if features.empty:
            return pd.DataFrame(columns=RESULT_COLUMNS)

        if feature_columns is None:
            columns: List[str] = list(features.select_dtypes(include="number").columns)
        else:
            columns = list(feature_columns)
            missing = set(columns) - set(features.columns)
            if missing:
                raise InputError(f"Features are missing columns: {sorted(missing)}")

        # Validate the whole batch up front so a bad row cannot leave earlier
        # rows learned and their results discarded.
        try:
            matrix = features[columns].to_numpy(dtype=float)
        except (TypeError, ValueError) as exc:
            raise InputError(f"Feature columns must be numeric: {exc}") from exc
        n_dimensions = self.orchestrator.n_dimensions
        if matrix.shape[1] != n_dimensions:
            raise InputError(
                f"Expected {n_dimensions} feature columns, got {matrix.shape[1]}: {columns}"
            )
        bad_rows = ~np.isfinite(matrix).all(axis=1)
        if bad_rows.any():
            labels = list(features.index[bad_rows][:5])
            raise InputError(f"Feature rows contain non-finite values: {labels}")

        rows = [self.process(row) for row in matrix]

        return pd.DataFrame(
            {
                "hst_score": [row.score for row in rows],
                "hst_threshold": [row.threshold for row in rows],
                "hst_normal": [row.is_normal for row in rows],
                "hst_anomaly": [row.is_anomaly for row in rows],
            },
            index=features.index,
        )


def create_detector(
    *,
    ensemble_config: EnsembleConfig | None = None,
    threshold_config: ThresholdConfig | None = None,
    seed: int | None = None,
    config: DetectorConfig | None = None,
) -> HalfSpaceTreeDetector:
    """Build a :class:`HalfSpaceTreeDetector` using configuration objects.

    Explicit ``ensemble_config``, ``threshold_config`` and ``seed`` arguments
    take precedence over the matching fields of ``config``. Anything left
    unspecified falls back to the library defaults.
    """

    config = config or DetectorConfig()
    ensemble_config = ensemble_config or config.ensemble
    threshold_config = threshold_config or config.threshold
    seed = seed if seed is not None else config.seed

    orchestrator = TreeOrchestrator.from_config(ensemble_config, rng=seed)
    threshold = create_threshold(threshold_config)
    return HalfSpaceTreeDetector(orchestrator=orchestrator, threshold=threshold)


__all__ = ["HalfSpaceTreeDetector", "RESULT_COLUMNS", "create_detector"]
