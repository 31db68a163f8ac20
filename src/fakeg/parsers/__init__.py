import logging
from collections.abc import Mapping
from enum import StrEnum
from types import MappingProxyType

from fakeg.exceptions import ConfigurationError
from fakeg.parsers.amesp import AmespParser
from fakeg.parsers.base import CONVERGENCE_THRESHOLDS, LogParser, SourceParser, is_converged
from fakeg.parsers.bdf import BdfParser
from fakeg.parsers.cursor import LineCursor
from fakeg.parsers.gaussian import GaussianFormatParser
from fakeg.parsers.xyz import XyzParser


class Dialect(StrEnum):
    """The log formats FakeG can read."""

    AMESP = "amesp"
    BDF = "bdf"
    XTB = "xtb"
    XYZ = "xyz"


PARSERS: Mapping[Dialect, type[LogParser]] = MappingProxyType(
    {
        Dialect.AMESP: AmespParser,
        Dialect.BDF: BdfParser,
        Dialect.XTB: GaussianFormatParser,
        Dialect.XYZ: XyzParser,
    }
)


def get_parser(dialect: Dialect | str, logger: logging.Logger | None = None) -> SourceParser:
    try:
        parser_cls = PARSERS[Dialect(dialect)]
    except ValueError as e:
        raise ConfigurationError(f"Unknown dialect '{dialect}'. Choose one of: {', '.join(Dialect)}") from e
    return parser_cls(logger)


__all__ = [
    "CONVERGENCE_THRESHOLDS",
    "PARSERS",
    "AmespParser",
    "BdfParser",
    "Dialect",
    "GaussianFormatParser",
    "LineCursor",
    "SourceParser",
    "XyzParser",
    "get_parser",
    "is_converged",
]
