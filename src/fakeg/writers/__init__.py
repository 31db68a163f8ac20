from fakeg.writers.gaussian import (
    FOOTER_MARKER,
    GaussianWriter,
    derive_output_path,
    render,
    validate_output,
)

__all__ = [
    "FOOTER_MARKER",
    "GaussianWriter",
    "derive_output_path",
    "render",
    "validate_output",
]
