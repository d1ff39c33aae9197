"""Tabulated equations of state and constant-value hypersurface finding for relativistic hydrodynamics."""

__version__ = "0.1.0"

__all__ = [
    "cornelius",
    "eos_azh",
    "eos_chiral",
    "eos_cmf",
    "eos_cmfe",
    "eos_grid",
    "eos_hadron",
    "surface_cubes",
    "surface_elements",
]