"""Equations of state read from tables on (e, n) grids with binary-search lookup."""

from __future__ import annotations

import itertools
import os
from abc import ABC, abstractmethod
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from pathlib import Path

_HEADER_TOLERANCE = 1e-5
_PRESSURE_FLOOR = 1e-18


@dataclass(frozen=True)
class ThermoState:
    """Temperature, chemical potentials and pressure at one point."""

    T: float = 0.0
    mub: float = 0.0
    muq: float = 0.0
    mus: float = 0.0
    p: float = 0.0


@dataclass(frozen=True)
class EosRanges:
    """Header values of a grid table."""

    emax: float
    e0: float
    nmax: float
    n0: float
    ne: int
    nn: int


class EquationOfState(ABC):
    """Maps energy density and charge densities to thermodynamic variables."""

    @abstractmethod
    def eos(self, e: float, nb: float, nq: float, ns: float) -> ThermoState:
        """Return the full thermodynamic state."""

    def p(self, e: float, nb: float, nq: float, ns: float) -> float:
        """Return the pressure only."""
        return self.eos(e, nb, nq, ns).p


class _TokenReader:
    """Reads whitespace-separated numbers from a text file."""

    def __init__(self, filename: str | os.PathLike[str]) -> None:
        self._name = os.fspath(filename)
        self._tokens = iter(Path(filename).read_text().split())

    def _next(self) -> str:
        try:
            return next(self._tokens)
        except StopIteration:
            raise ValueError(f"{self._name}: unexpected end of table") from None

    def float(self) -> float:
        return float(self._next())

    def int(self) -> int:
        return int(self._next())

    def floats(self, count: int) -> list[float]:
        return [self.float() for _ in range(count)]


def _locate(grid: Sequence[float], x: float) -> tuple[int, int]:
    """Bisect a sorted grid, returning the bracketing indices (k1, k2)."""
    k1, k2 = 0, len(grid) - 1
    while k2 - k1 > 1:
        k = (k1 + k2) // 2
        if x < grid[k]:
            k2 = k
        else:
            k1 = k
    return k1, k2


def _energy_cell(grid: Sequence[float], e: float) -> tuple[int, float]:
    k1, k2 = _locate(grid, e)
    ixe = min(k1, len(grid) - 2)
    return ixe, (e - grid[k1]) / (grid[k2] - grid[k1])


def _density_cell(grid: Sequence[float], n: float) -> tuple[int, float]:
    k1, k2 = _locate(grid, n)
    ixn = max(min(k1, len(grid) - 2), 0)
    return ixn, (n - grid[k1]) / (grid[k2] - grid[k1])


def _blend(weighted: Iterable[tuple[float, Sequence[float]]]) -> list[float]:
    """Sum records scaled by their weights."""
    total: list[float] | None = None
    for weight, record in weighted:
        contribution = [weight * value for value in record]
        total = contribution if total is None else [a + b for a, b in zip(total, contribution)]
    return total if total is not None else []


def _clip_pressure(p: float) -> float:
    return 0.0 if p < _PRESSURE_FLOOR else p


class _GridEoS(EquationOfState):
    """Shared grid reading for the tabulated (e, n) equations of state."""

    emax: float
    e0: float
    nmax: float
    n0: float
    egrid: list[float]
    ngrid: list[float]

    def _read_grids(self, reader: _TokenReader) -> None:
        self.emax = reader.float()
        self.e0 = reader.float()
        self.nmax = reader.float()
        self.n0 = reader.float()
        ne = reader.int()
        nn = reader.int()
        self.egrid = reader.floats(ne)
        self.ngrid = reader.floats(nn)

    @property
    def ne(self) -> int:
        return len(self.egrid)

    @property
    def nn(self) -> int:
        return len(self.ngrid)

    def _ranges(self) -> EosRanges:
        return EosRanges(self.emax, self.e0, self.nmax, self.n0, self.ne, self.nn)


class EoS1f(_GridEoS):
    """Table in (e, nb) holding pressure, temperature and baryon chemical potential."""

    def __init__(self, filename: str | os.PathLike[str]) -> None:
        reader = _TokenReader(filename)
        self._read_grids(reader)
        self._table: list[list[tuple[float, float, float]]] = []
        for _ in range(self.ne):
            row = []
            for _ in range(self.nn):
                pre, temp, mub = reader.floats(3)
                row.append((_clip_pressure(pre), temp, mub))
            self._table.append(row)

    def eosranges(self) -> EosRanges:
        """Return the table header values."""
        return self._ranges()

    def getue(self, e: float) -> tuple[int, float]:
        """Return the cell index in energy and the fractional position inside it."""
        return _energy_cell(self.egrid, e)

    def getun(self, n: float) -> tuple[int, float]:
        """Return the cell index in density and the fractional position inside it."""
        return _density_cell(self.ngrid, n)

    def eos(self, e: float, nb: float, nq: float, ns: float) -> ThermoState:
        ixe, ue = self.getue(e)
        ixn, ub = self.getun(nb)
        we = (1.0 - ue, ue)
        wnb = (1.0 - ub, ub)
        p, temp, mub = _blend(
            (we[je] * wnb[jnb], self._table[ixe + je][ixn + jnb])
            for je, jnb in itertools.product((0, 1), repeat=2)
        )
        return ThermoState(T=temp, mub=mub, muq=0.0, mus=0.0, p=max(p, 0.0))

    def p(self, e: float, nb: float, nq: float, ns: float) -> float:
        return self.eos(e, nb, nq, ns).p


class EoS3f(_GridEoS):
    """Table in (e, nb, nq, ns) holding pressure, temperature and all chemical potentials."""

    def __init__(
        self,
        filename: str | os.PathLike[str],
        b: float,
        volex0: float,
        delta0: float,
        aaa: float,
        bbb: float,
    ) -> None:
        reader = _TokenReader(filename)
        header = dict(zip(("B", "volex0", "delta0", "aaa", "bbb"), reader.floats(5)))
        expected = {"B": b, "volex0": volex0, "delta0": delta0, "aaa": aaa, "bbb": bbb}
        if header["B"] > 0:
            for name, value in header.items():
                if abs(value - expected[name]) > _HEADER_TOLERANCE:
                    raise ValueError(f"{name} = {value} instead of {expected[name]}")
        self.b = header["B"]
        self.volex0 = header["volex0"]
        self.delta0 = header["delta0"]
        self.aaa = header["aaa"]
        self.bbb = header["bbb"]
        self._read_grids(reader)
        nn = self.nn
        self._table = [
            [
                [[self._read_record(reader) for _ in range(nn)] for _ in range(nn)]
                for _ in range(nn)
            ]
            for _ in range(self.ne)
        ]

    @staticmethod
    def _read_record(reader: _TokenReader) -> tuple[float, ...]:
        pre, temp, mub, muq, mus = reader.floats(5)
        return (_clip_pressure(pre), temp, mub, muq, mus)

    def eosranges(self) -> EosRanges:
        """Return the table header values."""
        return self._ranges()

    def getue(self, e: float) -> tuple[int, float]:
        """Return the cell index in energy and the fractional position inside it."""
        return _energy_cell(self.egrid, e)

    def getun(self, n: float) -> tuple[int, float]:
        """Return the cell index in density and the fractional position inside it."""
        return _density_cell(self.ngrid, n)

    def eos(self, e: float, nb: float, nq: float, ns: float) -> ThermoState:
        ixe, ue = self.getue(e)
        ixnb, ub = self.getun(nb)
        ixnq, uq = self.getun(nq)
        ixns, us = self.getun(ns)
        we = (1.0 - ue, ue)
        wnb = (1.0 - ub, ub)
        wnq = (1.0 - uq, uq)
        wns = (1.0 - us, us)
        p, temp, mub, muq, mus = _blend(
            (
                we[je] * wnb[jnb] * wnq[jnq] * wns[jns],
                self._table[ixe + je][ixnb + jnb][ixnq + jnq][ixns + jns],
            )
            for je, jnb, jnq, jns in itertools.product((0, 1), repeat=4)
        )
        return ThermoState(T=temp, mub=mub, muq=muq, mus=mus, p=max(p, 0.0))

    def p(self, e: float, nb: float, nq: float, ns: float) -> float:
        return self.eos(e, nb, nq, ns).p