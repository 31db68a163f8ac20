from fakeg.parsers.xyz.comment import infer_charge_spin
from fakeg.parsers.xyz.energy import DEFAULT_EXTRACTORS, EnergyExtractor, EnergyPipeline
from fakeg.parsers.xyz.parser import MISSING_ENERGY, XyzParser

__all__ = [
    "DEFAULT_EXTRACTORS",
    "MISSING_ENERGY",
    "EnergyExtractor",
    "EnergyPipeline",
    "XyzParser",
    "infer_charge_spin",
]
