"""Periodic table lookups shared by every parser."""

from collections.abc import Mapping
from types import MappingProxyType

# fmt: off
_SYMBOLS = (
    "H", "He",
    "Li", "Be", "B", "C", "N", "O", "F", "Ne",
    "Na", "Mg", "Al", "Si", "P", "S", "Cl", "Ar",
    "K", "Ca", "Sc", "Ti", "V", "Cr", "Mn", "Fe", "Co", "Ni", "Cu", "Zn",
    "Ga", "Ge", "As", "Se", "Br", "Kr",
    "Rb", "Sr", "Y", "Zr", "Nb", "Mo", "Tc", "Ru", "Rh", "Pd", "Ag", "Cd",
    "In", "Sn", "Sb", "Te", "I", "Xe",
    "Cs", "Ba",
    "La", "Ce", "Pr", "Nd", "Pm", "Sm", "Eu", "Gd", "Tb", "Dy", "Ho", "Er", "Tm", "Yb", "Lu",
    "Hf", "Ta", "W", "Re", "Os", "Ir", "Pt", "Au", "Hg",
    "Tl", "Pb", "Bi", "Po", "At", "Rn",
    "Fr", "Ra",
    "Ac", "Th", "Pa", "U", "Np", "Pu", "Am", "Cm", "Bk", "Cf", "Es", "Fm", "Md", "No", "Lr",
    "Rf", "Db", "Sg", "Bh", "Hs", "Mt", "Ds", "Rg", "Cn",
    "Nh", "Fl", "Mc", "Lv", "Ts", "Og",
)
# fmt: on

ELEMENTS: Mapping[str, int] = MappingProxyType({symbol: number for number, symbol in enumerate(_SYMBOLS, start=1)})
_NUMBERS: Mapping[int, str] = MappingProxyType({number: symbol for symbol, number in ELEMENTS.items()})

UNKNOWN_ATOMIC_NUMBER = 1
UNKNOWN_SYMBOL = "X"


def normalize_symbol(symbol: str) -> str:
    """'CL', 'cl' and ' Cl ' all become 'Cl'."""
    return symbol.strip().capitalize()


def atomic_number(symbol: str) -> int:
    """Atomic number for an element symbol, 1 when the symbol is not an element."""
    return ELEMENTS.get(normalize_symbol(symbol), UNKNOWN_ATOMIC_NUMBER)


def symbol_for(number: int) -> str:
    return _NUMBERS.get(number, UNKNOWN_SYMBOL)
