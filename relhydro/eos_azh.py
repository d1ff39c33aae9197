"""Equation of state assembled from six uniformly spaced (e, nb) tables."""

from __future__ import annotations

import itertools
import logging
import math
import os
from pathlib import Path

from relhydro.eos_grid import EquationOfState, ThermoState

logger = logging.getLogger(__name__)

_LOW_DENSITY_LIMIT = 10000
_PREVIEW_ROWS = 15


class AZHTable:
    """One quantity tabulated on a regular grid in energy and baryon density."""

    def __init__(self, filename: str | os.PathLike[str]) -> None:
        name = os.fspath(filename)
        tokens = Path(filename).read_text().split()
        if len(tokens) < 6:
            raise ValueError(f"{name}: incomplete table header")
        self.nmin, self._emin, self.dn, self.de = (float(t) for t in tokens[:4])
        self.nn = int(tokens[4]) + 1
        self.ne = int(tokens[5]) + 1
        body = tokens[6:]
        needed = self.ne * self.nn
        if len(body) < needed:
            raise ValueError(f"{name}: expected {needed} numbers, found {len(body)}")
        values = [float(t) for t in body[:needed]]
        self._tab = [values[row * self.nn : (row + 1) * self.nn] for row in range(self.ne)]
        logger.debug("first entries: %s", [row[0] for row in self._tab[:_PREVIEW_ROWS]])
        logger.info("table %s read, [ne nb] = %d %d", name, self.ne, self.nn)

    def emin(self) -> float:
        """Lowest tabulated energy density."""
        return self._emin

    def emax(self) -> float:
        """Highest tabulated energy density."""
        return self._emin + self.de * (self.ne - 1)

    def nmax(self) -> float:
        """Highest tabulated baryon density."""
        return self.nmin + self.dn * (self.nn - 1)

    def _density_cell(self, nb: float) -> tuple[int, float]:
        i_n = min(max(int((nb - self.nmin) / self.dn), 0), self.nn - 2)
        return i_n, (nb - self.nmin - i_n * self.dn) / self.dn

    def get(self, e: float, nb: float) -> float:
        """Bilinear interpolation at (e, nb); zero for non-positive e."""
        if e <= 0.0:
            return 0.0
        ie = min(max(int((e - self._emin) / self.de), 0), self.ne - 2)
        i_n, nm = self._density_cell(nb)
        em = (e - self._emin - ie * self.de) / self.de
        we = (1.0 - em, em)
        wn = (1.0 - nm, nm)
        value = sum(
            we[je] * wn[jn] * self._tab[ie + je][i_n + jn]
            for je, jn in itertools.product((0, 1), repeat=2)
        )
        if math.isnan(value):
            logger.warning("NaN at e=%g nb=%g (cell %d %d)", e, nb, ie, i_n)
        return value

    def get_low(self, e: float, nb: float) -> float:
        """Value below the lowest tabulated energy, scaled linearly in e."""
        if e <= 0.0:
            return 0.0
        if (nb - self.nmin) / self.dn > _LOW_DENSITY_LIMIT:
            raise ValueError(f"baryon density {nb} far outside the table at e={e}")
        i_n, nm = self._density_cell(nb)
        row = self._tab[0]
        value = (1.0 - nm) * row[i_n] + nm * row[i_n + 1]
        if math.isnan(value):
            logger.warning("NaN in low-energy lookup at e=%g nb=%g (cell %d)", e, nb, i_n)
        return value * e / self._emin


class EoSAZH(EquationOfState):
    """Two energy regions, each with pressure, temperature and chemical potential tables."""

    def __init__(self, directory: str | os.PathLike[str] = "eos/azhydro0p2") -> None:
        base = Path(directory)
        self.p1 = AZHTable(base / "aa1_p.dat")
        self.p2 = AZHTable(base / "aa2_p.dat")
        self.t1 = AZHTable(base / "aa1_t.dat")
        self.t2 = AZHTable(base / "aa2_t.dat")
        self.mu1 = AZHTable(base / "aa1_mb.dat")
        self.mu2 = AZHTable(base / "aa2_mb.dat")

    def eos(self, e: float, nb: float, nq: float, ns: float) -> ThermoState:
        anb = abs(nb)
        if e > self.p1.emax():
            p = self.p2.get(e, anb)
            temp = self.t2.get(e, anb)
            mub = self.mu2.get(e, nb)
        elif e > self.p1.emin():
            p = self.p1.get(e, anb)
            temp = self.t1.get(e, anb)
            mub = self.mu1.get(e, nb)
        else:
            p = self.p1.get_low(e, anb)
            temp = self.t1.get_low(e, anb)
            mub = self.mu1.get_low(e, nb)
        return ThermoState(T=temp, mub=mub, muq=0.0, mus=0.0, p=p)

    def p(self, e: float, nb: float, nq: float, ns: float) -> float:
        anb = abs(nb)
        if e > self.p1.emax():
            return self.p2.get(e, anb)
        if e > self.p1.emin():
            return self.p1.get(e, anb)
        return self.p1.get_low(e, anb)