from __future__ import annotations

import math
import numbers
from dataclasses import dataclass

from .errors import InvalidArgument

DEFAULT_THRESHOLD = 0.2
MAX_SAFE_INTEGER = 2**53 - 1


def _is_integer(value: object) -> bool:
    return isinstance(value, numbers.Integral) and not isinstance(value, bool)


@dataclass(frozen=True)
class YinConfig:
    frame_length: int
    sample_rate: int
    threshold: float = DEFAULT_THRESHOLD

    def __post_init__(self) -> None:
        if not _is_integer(self.frame_length) or self.frame_length <= 0 or self.frame_length % 2:
            raise InvalidArgument(f"frame_length must be a positive even integer, got {self.frame_length!r}")
        if not _is_integer(self.sample_rate) or not 0 < self.sample_rate <= MAX_SAFE_INTEGER:
            raise InvalidArgument(f"sample_rate must be a positive integer, got {self.sample_rate!r}")
        if (
            not isinstance(self.threshold, numbers.Real)
            or isinstance(self.threshold, bool)
            or math.isnan(self.threshold)
            or not 0.0 < self.threshold < 1.0
        ):
            raise InvalidArgument(f"threshold must be a number between 0 and 1, got {self.threshold!r}")

        # numpy scalars are normalised so the frozen record only holds builtins
        object.__setattr__(self, "frame_length", int(self.frame_length))
        object.__setattr__(self, "sample_rate", int(self.sample_rate))
        object.__setattr__(self, "threshold", float(self.threshold))

    @property
    def lag_count(self) -> int:
        return self.frame_length // 2
