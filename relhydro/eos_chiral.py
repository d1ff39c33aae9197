"""Chiral-model equation of state built from two uniformly spaced tables."""

from __future__ import annotations

import itertools
import logging
import os
from pathlib import Path

from relhydro.eos_grid import EquationOfState, ThermoState

logger = logging.getLogger(__name__)

_E_UNIT = 0.146  # GeV/fm^3 per table energy unit
_N_UNIT = 0.15  # 1/fm^3 per table density unit
_IDEAL_P = 0.2964
_IDEAL_T = 0.15120476935
_FIELDS_PER_RECORD = 8


class ChiralTable:
    """One (e, nb) table with pressure, temperature and chemical potentials."""

    def __init__(self, filename: str | os.PathLike[str], ne: int, nn: int) -> None:
        values = [float(token) for token in Path(filename).read_text().split()]
        needed = ne * nn * _FIELDS_PER_RECORD
        if len(values) < needed:
            raise ValueError(f"{os.fspath(filename)}: expected {needed} numbers, found {len(values)}")
        self.ne = ne
        self.nn = nn
        records = zip(*[iter(values)] * _FIELDS_PER_RECORD)
        e_raw = [0.0] * ne
        n_raw = [0.0] * nn
        self._table: list[list[tuple[float, float, float, float]]] = [
            [(0.0, 0.0, 0.0, 0.0)] * nn for _ in range(ne)
        ]
        for (i_n, i_e), record in zip(itertools.product(range(nn), range(ne)), records):
            temp, mub, e, p, n, _entropy, mus, _ = record
            e_raw[i_e] = e
            n_raw[i_n] = n
            self._table[i_e][i_n] = (p * _E_UNIT, temp / 1000.0, mub / 1000.0, mus / 1000.0)
        self.emin = e_raw[0] * _E_UNIT
        self.emax = e_raw[-1] * _E_UNIT
        self.nmin = n_raw[0] * _N_UNIT
        self.nmax = n_raw[-1] * _N_UNIT
        logger.info(
            "table %s read, [emin,emax,nmin,nmax] = %g %g %g %g",
            os.fspath(filename),
            self.emin,
            self.emax,
            self.nmin,
            self.nmax,
        )

    def _interpolate(self, e: float, nb: float) -> tuple[float, float, float, float]:
        de = (self.emax - self.emin) / (self.ne - 1)
        dn = (self.nmax - self.nmin) / (self.nn - 1)
        ie = min(max(int((e - self.emin) / de), 0), self.ne - 2)
        i_n = min(max(int((nb - self.nmin) / dn), 0), self.nn - 2)
        em = (e - self.emin - ie * de) / de
        nm = (nb - self.nmin - i_n * dn) / dn
        we = (1.0 - em, em)
        wn = (1.0 - nm, nm)
        sums = [0.0, 0.0, 0.0, 0.0]
        for je, jn in itertools.product((0, 1), repeat=2):
            weight = we[je] * wn[jn]
            sums = [s + weight * v for s, v in zip(sums, self._table[ie + je][i_n + jn])]
        p, temp, mub, mus = sums
        return p, temp, mub, mus

    def get(self, e: float, nb: float) -> ThermoState:
        """Interpolate all quantities at (e, nb)."""
        if e < 0.0:
            return ThermoState()
        p, temp, mub, mus = self._interpolate(e, nb)
        return ThermoState(T=temp, mub=mub, muq=0.0, mus=mus, p=max(p, 0.0))

    def p(self, e: float, nb: float) -> float:
        """Interpolate the pressure at (e, nb)."""
        if e < 0.0:
            return 0.0
        return max(self._interpolate(e, nb)[0], 0.0)


def _load(table: ChiralTable | str | os.PathLike[str], ne: int, nn: int) -> ChiralTable:
    return table if isinstance(table, ChiralTable) else ChiralTable(table, ne, nn)


class EoSChiral(EquationOfState):
    """Small table at low density, big table above it, ideal gas beyond both."""

    def __init__(
        self,
        big_table: ChiralTable | str | os.PathLike[str] = "eos/chiraleos.dat",
        small_table: ChiralTable | str | os.PathLike[str] = "eos/chiralsmall.dat",
    ) -> None:
        self.big = _load(big_table, 2001, 401)
        self.small = _load(small_table, 201, 201)

    def eos(self, e: float, nb: float, nq: float, ns: float) -> ThermoState:
        if e < 1.46 and nb < 0.3:
            return self.small.get(e, nb)
        if e < 146.0 and nb < 6.0:
            return self.big.get(e, nb)
        return ThermoState(T=_IDEAL_T * e**0.25, mub=0.0, muq=0.0, mus=0.0, p=_IDEAL_P * e)

    def p(self, e: float, nb: float, nq: float, ns: float) -> float:
        if e < 1.46 and nb < 0.3:
            return self.small.p(e, nb)
        if e < 146.0 and nb < 6.0:
            return self.big.p(e, nb)
        return _IDEAL_P * e