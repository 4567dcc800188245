"""Hour-angle solver — time from solar noon at which the sun reaches a given altitude."""

import math
from dataclasses import dataclass


@dataclass(frozen=True)
class HourAngle:
    """Solver result. ``clamped`` is set when the condition has no real solution."""

    degrees: float
    clamped: bool = False

    @property
    def hours(self) -> float:
        return self.degrees / 15.0


def _solve(lat_deg: float, decl_deg: float, sin_altitude: float) -> HourAngle:
    lat = math.radians(lat_deg)
    decl = math.radians(decl_deg)
    cos_h = (sin_altitude - math.sin(lat) * math.sin(decl)) / (
        math.cos(lat) * math.cos(decl)
    )
    clamped = not -1.0 <= cos_h <= 1.0
    cos_h = max(-1.0, min(1.0, cos_h))
    return HourAngle(degrees=math.degrees(math.acos(cos_h)), clamped=clamped)


def horizon_hour_angle(lat_deg: float, decl_deg: float, angle_below_deg: float) -> HourAngle:
    """Hour angle when the sun is ``angle_below_deg`` degrees below the horizon.

    Out-of-domain cosines (polar day/night, deep twilight angles at high
    latitude) saturate to 0° or 180° instead of failing.
    """
    return _solve(lat_deg, decl_deg, math.sin(math.radians(-angle_below_deg)))


def asr_hour_angle(lat_deg: float, decl_deg: float, shadow_ratio: float) -> HourAngle:
    """Hour angle when a gnomon's shadow is ``shadow_ratio`` times its length plus the noon shadow."""
    zenith_at_noon = math.radians(abs(lat_deg - decl_deg))
    altitude = math.atan(1.0 / (shadow_ratio + math.tan(zenith_at_noon)))
    return _solve(lat_deg, decl_deg, math.sin(altitude))
