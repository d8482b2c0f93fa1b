from __future__ import annotations

import logging
import math
from typing import Optional, Sequence, Union

import numpy as np

from .config import DEFAULT_THRESHOLD, YinConfig
from .errors import InvalidArgument

logger = logging.getLogger(__name__)

NO_PITCH = -1.0

Samples = Union[np.ndarray, Sequence[float]]


class PitchEstimator:
    """YIN fundamental frequency estimator for fixed-size frames.

    One instance owns a scratch buffer of ``frame_length // 2`` values that is
    rewritten on every call, so an instance must not be shared between threads
    without external locking. Construction is cheap; prefer one per thread.
    """

    def __init__(self, frame_length: int, sample_rate: int, threshold: float = DEFAULT_THRESHOLD):
        self._config = YinConfig(frame_length=frame_length, sample_rate=sample_rate, threshold=threshold)
        self._scratch = np.empty(self._config.lag_count, dtype=np.float64)
        logger.debug(
            "YIN estimator ready: frame_length=%d sample_rate=%d threshold=%.3f",
            self._config.frame_length,
            self._config.sample_rate,
            self._config.threshold,
        )

    @classmethod
    def from_config(cls, config: YinConfig) -> "PitchEstimator":
        return cls(config.frame_length, config.sample_rate, config.threshold)

    @property
    def config(self) -> YinConfig:
        return self._config

    @property
    def frame_length(self) -> int:
        return self._config.frame_length

    @property
    def sample_rate(self) -> int:
        return self._config.sample_rate

    @property
    def threshold(self) -> float:
        return self._config.threshold

    @property
    def cmndf(self) -> np.ndarray:
        """Read-only view of the normalized difference from the last call."""
        view = self._scratch.view()
        view.flags.writeable = False
        return view

    def estimate_pitch(self, samples: Samples) -> float:
        """Return the fundamental frequency of ``samples`` in Hz, or ``NO_PITCH``.

        ``samples`` must hold exactly ``frame_length`` real values.
        """
        try:
            frame = np.asarray(samples)
        except (TypeError, ValueError) as exc:
            raise InvalidArgument(f"samples must be a sequence of real numbers: {exc}") from exc
        if frame.dtype.kind not in "iuf":
            raise InvalidArgument(f"samples must be real numbers, got dtype {frame.dtype}")
        frame = frame.astype(np.float64, copy=False)
        if frame.ndim != 1 or frame.size != self.frame_length:
            raise InvalidArgument(
                f"expected a 1-D frame of {self.frame_length} samples, got shape {frame.shape}"
            )

        # silent prefixes divide by a zero running total; NaN is kept and rejected below
        with np.errstate(divide="ignore", invalid="ignore", over="ignore"):
            self._difference(frame)
            tau = self._search_lag()
            period = self._refine(tau)

        if period is None:
            logger.debug("no pitch: lag search ran to the end of the range (tau=%d)", tau)
            return NO_PITCH
        if not math.isfinite(period) or period <= 0.0:
            logger.debug("no pitch: refined period %r at tau=%d is not usable", period, tau)
            return NO_PITCH
        return self.sample_rate / period

    def _difference(self, frame: np.ndarray) -> None:
        buf = self._scratch
        lags = buf.size
        head = frame[:lags]
        total = 0.0

        buf[0] = 1.0
        for tau in range(1, lags):
            delta = head - frame[tau : tau + lags]
            step = np.dot(delta, delta)
            total += step
            buf[tau] = step * (tau / total)

    def _search_lag(self) -> int:
        buf = self._scratch
        max_lag = buf.size - 1

        tau = 2
        while tau < max_lag and buf[tau] >= self.threshold:
            tau += 1
        # walk down to the local minimum so a harmonic dip is not taken for the period
        while tau < max_lag and buf[tau + 1] < buf[tau]:
            tau += 1
        return tau

    def _refine(self, tau: int) -> Optional[float]:
        buf = self._scratch
        if tau + 1 >= buf.size:
            return None

        prev, here, nxt = buf[tau - 1], buf[tau], buf[tau + 1]
        delta = prev - nxt
        den = nxt - 2.0 * here + prev
        if den == 0:
            return float(tau)
        return float(tau + delta / (2.0 * den))
