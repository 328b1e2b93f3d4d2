from __future__ import annotations

from src.domain.models.realtime import AnimationFrame, Snapshot


def lerp(start: float, end: float, progress: float) -> float:
    """Linear interpolation; exact at both ends of the [0, 1] progress range."""

    if progress <= 0.0:
        return start
    if progress >= 1.0:
        return end
    return start + (end - start) * progress


def interpolate_bearing(from_deg: float, to_deg: float, progress: float) -> float:
    """Interpolate a compass heading along the shortest arc.

    The delta is folded into [-180, 180] so the heading never sweeps the long
    way round across the 0/360 seam. Result is always in [0, 360).
    """

    delta = to_deg - from_deg
    if delta > 180.0:
        delta -= 360.0
    if delta < -180.0:
        delta += 360.0

    result = (from_deg + delta * progress + 360.0) % 360.0
    # Float modulo of a tiny negative value can round up to exactly 360.
    return 0.0 if result >= 360.0 else result


def progress(elapsed_s: float, window_s: float) -> float:
    if window_s <= 0.0:
        return 1.0
    return max(0.0, min(elapsed_s / window_s, 1.0))


def interpolate_frames(
    previous: Snapshot, current: Snapshot, p: float
) -> tuple[AnimationFrame, ...]:
    """Frames for every entity in `current`.

    Entities without a match in `previous` are drawn at their current
    position; entities missing from `current` are dropped.
    """

    before = previous.by_entity_id()
    frames: list[AnimationFrame] = []
    for end in current.positions:
        start = before.get(end.entity_id)
        if start is None:
            frames.append(
                AnimationFrame(
                    entity_id=end.entity_id,
                    lat=end.lat,
                    lon=end.lon,
                    bearing=end.bearing % 360.0,
                )
            )
            continue

        frames.append(
            AnimationFrame(
                entity_id=end.entity_id,
                lat=lerp(start.lat, end.lat, p),
                lon=lerp(start.lon, end.lon, p),
                bearing=interpolate_bearing(start.bearing, end.bearing, p),
            )
        )
    return tuple(frames)
