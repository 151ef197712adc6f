from typing import Optional, Sequence


def outlier_warning(
    value: float,
    existing: Sequence[float],
    threshold: float = 3.0,
    min_points: int = 3,
) -> Optional[str]:
    """
    Population z-score of `value` against the chart's existing measurements.
    Never blocks a write, only produces a message for the caller.
    """
    if len(existing) < min_points:
        return None

    mean = sum(existing) / len(existing)
    var = sum((x - mean) ** 2 for x in existing) / len(existing)
    std = var ** 0.5

    if std < 1e-12:
        return None

    z = abs((value - mean) / std)
    if z > threshold:
        return (
            f"This value ({value:g}) is significantly different from your usual range. "
            "Please verify it's correct."
        )
    return None
