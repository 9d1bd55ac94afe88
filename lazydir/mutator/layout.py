"""Float geometry and boxed-text layout for modal status views."""

from __future__ import annotations

from collections.abc import Callable, Sequence

from ..runtime.config import ProgressOptions, SizeSpec
from ..text import display_width, lpad
from ..view.surface import FloatConfig

FLOAT_ZINDEX = 152


def _resolve_size(value: int | float, total: int) -> int:
    if isinstance(value, float) and 0 < value < 1:
        return int(total * value)
    return int(value)


def calc_list(
    values: SizeSpec,
    total: int,
    aggregate: Callable[[int, int], int],
    default: int,
) -> int:
    """Aggregate a size spec (cells, ratio, or a list of both) against ``total``."""
    if values is None:
        return default
    if not isinstance(values, list):
        return _resolve_size(values, total)
    resolved = [_resolve_size(value, total) for value in values]
    if not resolved:
        return default
    result = resolved[0]
    for value in resolved[1:]:
        result = aggregate(result, value)
    return result


def calculate_dims(
    desired_width: int,
    desired_height: int,
    opts: ProgressOptions,
    host_width: int,
    host_height: int,
) -> tuple[int, int]:
    """Clamp a desired float size between the configured minimum and maximum."""
    max_width = calc_list(opts.max_width, host_width, min, host_width)
    min_width = calc_list(opts.min_width, host_width, max, 1)
    max_height = calc_list(opts.max_height, host_height, min, host_height)
    min_height = calc_list(opts.min_height, host_height, max, 1)
    width = max(min_width, min(max_width, desired_width))
    height = max(min_height, min(max_height, desired_height))
    return max(1, min(width, host_width)), max(1, min(height, host_height))


def centered_float(width: int, height: int, host_width: int, host_height: int, border: str) -> FloatConfig:
    return FloatConfig(
        width=width,
        height=height,
        row=max(0, (host_height - height) // 2),
        col=max(0, (host_width - width) // 2),
        border=border,
        zindex=FLOAT_ZINDEX,
    )


def corner_float(width: int, height: int, host_width: int, host_height: int, border: str) -> FloatConfig:
    """Float anchored by its bottom-right corner to the host's bottom-right."""
    return FloatConfig(
        width=width,
        height=height,
        row=host_height,
        col=host_width,
        anchor="SE",
        border=border,
        zindex=FLOAT_ZINDEX,
    )


def render_centered_text(width: int, items: Sequence[str]) -> str:
    """Spread ``items`` evenly across ``width`` columns."""
    total = sum(display_width(item) for item in items)
    spacing = max(2, (width - total) // (len(items) + 1)) if items else 0
    line = (" " * spacing).join(items)
    return lpad(line, (width + display_width(line)) // 2)


def render_text(
    lines: Sequence[str],
    width: int,
    height: int,
    *,
    actions: Sequence[str] | None = None,
    h_align: str = "center",
) -> list[str]:
    """Lay ``lines`` out vertically centered in a ``width``×``height`` box.

    With ``actions``, the last row holds the action hints.
    """
    out: list[str] = [""] * max(0, height // 2 - len(lines) // 2)
    for line in lines:
        if h_align == "center":
            line = lpad(line, (width + display_width(line)) // 2)
        out.append(line)
    if actions:
        while len(out) < height - 1:
            out.append("")
        out.append(render_centered_text(width, actions))
    return out
