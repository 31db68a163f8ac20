from fakeg.app import convert
from fakeg.parsers import Dialect, get_parser
from fakeg.typing import ComputationRecord
from fakeg.writers import derive_output_path, render, validate_output

__version__ = "1.0.0"

__all__ = [
    "ComputationRecord",
    "Dialect",
    "convert",
    "derive_output_path",
    "get_parser",
    "render",
    "validate_output",
]
