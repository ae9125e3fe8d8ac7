from typing import Sequence

from stream_exporter.core.errors import EmptyWindowError
from stream_exporter.domain.models import TimeBucketSample


def aggregate(samples: Sequence[TimeBucketSample]) -> float:
    """Mean minutes viewed per reported bucket.

    Buckets the provider omitted (no views) do not count towards the mean.
    Raises EmptyWindowError when nothing was reported.
    """
    if not samples:
        raise EmptyWindowError()
    total = sum(s.minutes_viewed for s in samples)
    return float(total) / len(samples)
