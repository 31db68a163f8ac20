"""Energy tags embedded in XYZ comment lines by ORCA, molclus and xtb."""

import logging
import re
from collections.abc import Sequence
from dataclasses import dataclass, field

from fakeg.utils import logger as package_logger

_NUMBER = r"([-+]?\d*\.?\d+(?:[eE][-+]?\d+)?)"


@dataclass(frozen=True)
class EnergyExtractor:
    """Pulls one energy value out of a comment line written in one program's convention."""

    format_name: str
    pattern: re.Pattern[str]

    def extract(self, comment: str) -> float | None:
        match = self.pattern.search(comment)
        if match is None:
            return None
        try:
            return float(match.group(1))
        except ValueError:
            return None


ORCA_EXTRACTOR = EnergyExtractor("ORCA", re.compile(r"Coordinates\s+from\s+ORCA-job\s+.+\s+E\s+" + _NUMBER))
MOLCLUS_EXTRACTOR = EnergyExtractor("molclus", re.compile(r"Energy\s*=\s*" + _NUMBER + r"\s*a\.u\."))
XTB_EXTRACTOR = EnergyExtractor("xtb", re.compile(r"energy:\s*" + _NUMBER))

# Order is the tie-break for comments that more than one convention could match.
DEFAULT_EXTRACTORS: Sequence[EnergyExtractor] = (ORCA_EXTRACTOR, MOLCLUS_EXTRACTOR, XTB_EXTRACTOR)


@dataclass
class EnergyPipeline:
    """First-match-wins chain of extractors that announces each detected format once per session."""

    extractors: Sequence[EnergyExtractor] = DEFAULT_EXTRACTORS
    logger: logging.Logger = field(default=package_logger, repr=False)
    announced: set[str] = field(default_factory=set)

    def reset(self) -> None:
        self.announced.clear()

    def extract(self, comment: str) -> float | None:
        for extractor in self.extractors:
            value = extractor.extract(comment)
            if value is None:
                continue
            if extractor.format_name not in self.announced:
                self.announced.add(extractor.format_name)
                self.logger.info(f">> Detected {extractor.format_name} output format - energy information available")
            return value
        return None
