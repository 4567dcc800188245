"""Error kinds raised by the prayer-time core."""


class SalahTimesError(Exception):
    """Base class for every error raised by salahtimes."""


class CalculationFailed(SalahTimesError):
    """A day's prayer times could not be composed.

    Raised when the date cannot be decomposed in the local calendar, or when a
    composed time fails its sanity-range check. No partial result accompanies it.
    """


class InvalidConfiguration(SalahTimesError):
    """Coordinates, method, madhab or settings outside their allowed domain."""
