from .snapshot import FrozenDrillString, FrozenAnnulus, FrozenMud, FrozenSurvey, FrozenInputs
