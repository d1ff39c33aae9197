"""Chiral mean-field equation of state tabulated in energy density."""

from __future__ import annotations

import itertools
import logging
import math
import os
from pathlib import Path

from relhydro.eos_grid import EquationOfState, ThermoState

logger = logging.getLogger(__name__)

EPS_0 = 146.51751415742 * 0.87326281
N_0 = 0.15891 * 0.87272727
EPS_CUTOFF = 2e-2
_IDEAL_P = 0.2964
_IDEAL_T = 0.15120476935
_FIELDS_PER_RECORD = 7


def _beyond_tables(e: float, nb: float) -> bool:
    return e > 0.8 * EPS_0 or nb > 40.0 * N_0


def _ideal_gas(e: float) -> ThermoState:
    return ThermoState(T=_IDEAL_T * e**0.25, mub=0.0, muq=0.0, mus=0.0, p=_IDEAL_P * e)


class CMFeTable:
    """One (e, nb) table; missing entries are written as NAN."""

    def __init__(self, filename: str | os.PathLike[str], ne: int, nn: int) -> None:
        body = Path(filename).read_text().partition("\n")[2]
        values = [float(token) for token in body.split()]
        needed = ne * nn * _FIELDS_PER_RECORD
        if len(values) < needed:
            raise ValueError(f"{os.fspath(filename)}: expected {needed} numbers, found {len(values)}")
        self.ne = ne
        self.nn = nn
        records = zip(*[iter(values)] * _FIELDS_PER_RECORD)
        etab = [0.0] * ne
        ntab = [0.0] * nn
        self._table: list[list[tuple[float, float, float, float]]] = [
            [(0.0, 0.0, 0.0, 0.0)] * nn for _ in range(ne)
        ]
        for (ie, i_n), record in zip(itertools.product(range(ne), range(nn)), records):
            e, n, temp, p, _entropy, mub, mus = record
            etab[ie] = e * EPS_0 / 1000.0
            ntab[i_n] = n * N_0
            self._table[ie][i_n] = (p * EPS_0 / 1000.0, temp / 1000.0, mub / 1000.0, mus / 1000.0)
        self.emin = etab[0]
        self.emax = etab[-1]
        self.nmin = ntab[0]
        self.nmax = ntab[-1]
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
        if e < EPS_CUTOFF:
            return ThermoState()
        p, temp, mub, mus = self._interpolate(e, nb)
        if math.isnan(p):
            return _ideal_gas(e) if _beyond_tables(e, nb) else ThermoState()
        return ThermoState(T=temp, mub=mub, muq=0.0, mus=mus, p=max(p, 0.0))

    def p(self, e: float, nb: float) -> float:
        """Interpolate the pressure at (e, nb)."""
        if e < EPS_CUTOFF:
            return 0.0
        p = self._interpolate(e, nb)[0]
        if math.isnan(p):
            p = _IDEAL_P * e if _beyond_tables(e, nb) else 0.0
        return max(p, 0.0)


def _load(table: CMFeTable | str | os.PathLike[str], ne: int, nn: int) -> CMFeTable:
    return table if isinstance(table, CMFeTable) else CMFeTable(table, ne, nn)


class EoSCMFe(EquationOfState):
    """Small table at low density, big table above it, ideal gas beyond both."""

    EPS_0 = EPS_0
    N_0 = N_0

    def __init__(
        self,
        big_table: CMFeTable | str | os.PathLike[str] = "eos/cmfe.dat",
        small_table: CMFeTable | str | os.PathLike[str] = "eos/cmfe_small.dat",
    ) -> None:
        self.big = _load(big_table, 4001, 401)
        self.small = _load(small_table, 1501, 501)

    @staticmethod
    def _in_small(e: float, nb: float) -> bool:
        return e < 15.0 * EPS_0 / 1000.0 and nb < 5.0 * N_0

    @staticmethod
    def _in_big(e: float, nb: float) -> bool:
        return e < 0.8 * EPS_0 and nb < 40.0 * N_0

    def eos(self, e: float, nb: float, nq: float, ns: float) -> ThermoState:
        if self._in_small(e, nb):
            return self.small.get(e, nb)
        if self._in_big(e, nb):
            return self.big.get(e, nb)
        return _ideal_gas(e)

    def p(self, e: float, nb: float, nq: float, ns: float) -> float:
        if self._in_small(e, nb):
            return self.small.p(e, nb)
        if self._in_big(e, nb):
            return self.big.p(e, nb)
        return _IDEAL_P * e