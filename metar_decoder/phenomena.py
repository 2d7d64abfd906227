"""Weather phenomena decoder - present weather groups such as '+VCBLSN' or '-TSRA'."""

import string
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List


class Intensity(Enum):
    """Intensity of a phenomenon group."""
    LIGHT = -1
    NORMAL = 0
    HEAVY = 1


class PhenomenonKind(Enum):
    """Phenomenon vocabulary. Values are the report codes."""
    MIST = "BR"
    DUST_STORM = "DS"
    DUST = "DU"
    DRIZZLE = "DZ"
    FUNNEL_CLOUD = "FC"
    FOG = "FG"
    SMOKE = "FU"
    HAIL = "GR"
    SMALL_HAIL = "GS"
    HAZE = "HZ"
    ICE_CRYSTALS = "IC"
    ICE_PELLETS = "PL"
    DUST_SAND_WHORLS = "PO"
    SPRAY = "PY"
    RAIN = "RA"
    SAND = "SA"
    SNOW_GRAINS = "SG"
    SHOWER = "SH"
    SNOW = "SN"
    SQUALLS = "SQ"
    SAND_STORM = "SS"
    UNKNOWN_PRECIP = "UP"
    VOLCANIC_ASH = "VA"
    SLEET = "RASN"
    THUNDERSTORM = "TS"


# Code -> kind. SH and TS are qualifiers here; they only become a kind
# when a group carries no other phenomenon.
PHENOMENON_CODES: Dict[str, PhenomenonKind] = {
    kind.value: kind
    for kind in PhenomenonKind
    if kind not in (PhenomenonKind.SHOWER, PhenomenonKind.SLEET, PhenomenonKind.THUNDERSTORM)
}
PHENOMENON_CODES["PE"] = PhenomenonKind.ICE_PELLETS  # pre-1998 code

# Code -> PhenomenonOccurrence flag name
QUALIFIER_CODES: Dict[str, str] = {
    "VC": "vicinity",
    "RE": "recent",
    "MI": "shallow",
    "PR": "partial",
    "BC": "patches",
    "DR": "drifting",
    "BL": "blowing",
    "SH": "shower",
    "TS": "thunderstorm",
    "FZ": "freezing",
}


@dataclass(frozen=True)
class PhenomenonOccurrence:
    """One decoded weather phenomenon with its intensity and qualifiers."""
    kind: PhenomenonKind
    intensity: Intensity = Intensity.NORMAL
    blowing: bool = False
    freezing: bool = False
    drifting: bool = False
    vicinity: bool = False
    shower: bool = False
    partial: bool = False
    shallow: bool = False
    patches: bool = False
    thunderstorm: bool = False
    recent: bool = False

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "kind": self.kind.name,
            "code": self.kind.value,
            "intensity": self.intensity.name,
            "blowing": self.blowing,
            "freezing": self.freezing,
            "drifting": self.drifting,
            "vicinity": self.vicinity,
            "shower": self.shower,
            "partial": self.partial,
            "shallow": self.shallow,
            "patches": self.patches,
            "thunderstorm": self.thunderstorm,
            "recent": self.recent,
        }


def is_phenomenon_token(token: str) -> bool:
    """Check whether a token is a present weather group that decodes to something."""
    body = token[1:] if token[:1] in ("+", "-") else token
    if len(body) < 2 or not all(c in string.ascii_uppercase for c in body):
        return False
    return bool(decode_phenomena(token))


def decode_phenomena(token: str) -> List[PhenomenonOccurrence]:
    """
    Decode one present weather group.

    Args:
        token: Weather group, e.g. "BR", "-RA", "+VCBLSN", "TSRA", "RASN"

    Returns:
        Occurrences in report order. Usually one entry; a run such as
        "TSRAGR" yields one per phenomenon, all sharing the group's
        intensity and qualifiers. Unknown codes contribute nothing.
    """
    intensity = Intensity.NORMAL
    if token.startswith("+"):
        intensity = Intensity.HEAVY
        token = token[1:]
    elif token.startswith("-"):
        intensity = Intensity.LIGHT
        token = token[1:]

    flags: Dict[str, bool] = {}
    kinds: List[PhenomenonKind] = []
    for i in range(0, len(token) - 1, 2):
        code = token[i:i + 2]
        if code in QUALIFIER_CODES:
            flags[QUALIFIER_CODES[code]] = True
        elif code in PHENOMENON_CODES:
            kinds.append(PHENOMENON_CODES[code])

    # Rain and snow together are reported as sleet
    if PhenomenonKind.RAIN in kinds and PhenomenonKind.SNOW in kinds:
        position = min(kinds.index(PhenomenonKind.RAIN), kinds.index(PhenomenonKind.SNOW))
        kinds = [k for k in kinds if k not in (PhenomenonKind.RAIN, PhenomenonKind.SNOW)]
        kinds.insert(position, PhenomenonKind.SLEET)

    if not kinds:
        if flags.get("thunderstorm"):
            kinds.append(PhenomenonKind.THUNDERSTORM)
        elif flags.get("shower"):
            kinds.append(PhenomenonKind.SHOWER)

    return [PhenomenonOccurrence(kind, intensity=intensity, **flags) for kind in kinds]
