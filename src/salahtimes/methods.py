"""Calculation method table — Fajr/Isha rules per regional convention."""

from types import MappingProxyType

from salahtimes.errors import InvalidConfiguration
from salahtimes.models import CalculationMethod, MethodParameters

# Sun depression for sunrise/sunset: apparent solar radius + standard refraction
SUNRISE_SUNSET_ANGLE = 0.833

IMSAK_LEAD_MINUTES = 10

METHOD_PARAMETERS = MappingProxyType(
    {
        CalculationMethod.MUSLIM_WORLD_LEAGUE: MethodParameters(fajr_angle=18.0, isha_angle=17.0),
        CalculationMethod.ISNA: MethodParameters(fajr_angle=15.0, isha_angle=15.0),
        CalculationMethod.EGYPTIAN: MethodParameters(fajr_angle=19.5, isha_angle=17.5),
        CalculationMethod.UMM_AL_QURA: MethodParameters(fajr_angle=18.5, isha_interval_minutes=90),
        CalculationMethod.KARACHI: MethodParameters(fajr_angle=18.0, isha_angle=18.0),
        CalculationMethod.DUBAI: MethodParameters(fajr_angle=18.2, isha_angle=18.2),
        CalculationMethod.MOONSIGHTING_COMMITTEE: MethodParameters(fajr_angle=18.0, isha_angle=18.0),
    }
)


def parameters_for(method: CalculationMethod | str) -> MethodParameters:
    """Resolve a method (enum member or its value) to its parameters.

    Raises:
        InvalidConfiguration: When the method is not one of the known conventions.
    """
    try:
        return METHOD_PARAMETERS[CalculationMethod(method)]
    except (ValueError, KeyError):
        raise InvalidConfiguration(f"Unknown calculation method: {method!r}") from None
