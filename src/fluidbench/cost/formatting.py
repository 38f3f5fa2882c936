"""Display helpers for costs and durations."""


def format_cost(cost: float) -> str:
    """Format a USD amount.

    Amounts under one cent are shown scaled by 1000 with a ``k`` suffix,
    e.g. ``0.0012`` becomes ``$1.200k``.
    """
    if cost < 0.01:
        return f"${cost * 1000:.3f}k"
    return f"${cost:.4f}"


def format_duration(ms: float) -> str:
    if ms < 1000:
        return f"{ms:.0f}ms"
    return f"{ms / 1000:.2f}s"
