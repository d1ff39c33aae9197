"""Hadron resonance gas equation of state on logarithmic (e, nb, nq) grids."""

from __future__ import annotations

import itertools
import logging
import math
import os
from collections.abc import Iterator
from pathlib import Path

from relhydro.eos_grid import EquationOfState, ThermoState

logger = logging.getLogger(__name__)

_FIELDS_PER_RECORD = 9


class _Tokens:
    def __init__(self, filename: str | os.PathLike[str]) -> None:
        self.name = os.fspath(filename)
        self._it: Iterator[str] = iter(Path(filename).read_text().split())

    def next(self) -> str:
        try:
            return next(self._it)
        except StopIteration:
            raise ValueError(f"{self.name}: unexpected end of table") from None

    def float(self) -> float:
        return float(self.next())

    def int(self) -> int:
        return int(self.next())


class EoSHadron(EquationOfState):
    """Trilinear lookup with a log map in e and a signed log map in nb and nq."""

    def __init__(self, filename: str | os.PathLike[str]) -> None:
        tokens = _Tokens(filename)
        self.ne = tokens.int()
        self.nnb = tokens.int()
        self.nnq = tokens.int()
        self.e0 = tokens.float()
        self.n0 = tokens.float()
        self.logemin = tokens.float()
        self.logemax = tokens.float()
        self.lognmax = tokens.float()

        e_vals = [0.0] * self.ne
        nb_vals = [0.0] * self.nnb
        nq_vals = [0.0] * self.nnq
        self._table = [
            [[(0.0, 0.0, 0.0, 0.0, 0.0)] * self.nnq for _ in range(self.nnb)]
            for _ in range(self.ne)
        ]
        self._status = [[[0] * self.nnq for _ in range(self.nnb)] for _ in range(self.ne)]
        for ie, inb, inq in itertools.product(range(self.ne), range(self.nnb), range(self.nnq)):
            e_vals[ie] = tokens.float()
            nb_vals[inb] = tokens.float()
            nq_vals[inq] = tokens.float()
            record = tuple(tokens.float() for _ in range(5))
            self._table[ie][inb][inq] = record
            self._status[ie][inb][inq] = tokens.int()

        self.dxe = (self.logemax - self.logemin) / (self.ne - 1)
        self.dxnb = 2.0 * self.lognmax / (self.nnb - 1)
        self.dxnq = 2.0 * self.lognmax / (self.nnq - 1)
        self.nb_abs_min = self.n0 * math.exp(2.0 * self.dxnb - self.lognmax)
        self.nq_abs_min = self.n0 * math.exp(2.0 * self.dxnq - self.lognmax)
        self.e_min = self.e0 * math.exp(self.logemin)

        emin, emax = e_vals[0], e_vals[-1]
        nbmin, nbmax = nb_vals[0], nb_vals[-1]
        if (
            abs((self.e0 * math.exp(self.logemin) - emin) / emin) > 1e-5
            or abs((self.e0 * math.exp(self.logemax) - emax) / emax) > 1e-5
            or abs(self.n0 * math.exp(self.lognmax) - nbmax) > 1e-4
        ):
            raise ValueError(
                f"{tokens.name}: wrong eps or nb range: {emin} {emax} {nbmin} {nbmax}"
            )
        logger.info(
            "table %s read, [emin,emax,nmin,nmax] = %g %g %g %g %g %g",
            tokens.name,
            emin,
            emax,
            nbmin,
            nbmax,
            nq_vals[0],
            nq_vals[-1],
        )

    def _coordinate(self, n: float, abs_min: float, dx: float) -> float:
        if n == 0.0:
            return 0.0
        z = math.log(abs(n) / self.n0)
        if z >= -self.lognmax + 2.0 * dx:
            return math.copysign(0.5 * (z + self.lognmax), n)
        return n / abs_min * dx

    def _corners(self, e: float, nb: float, nq: float):
        """Weighted table records around the point, or None where the table is invalid."""
        xe = math.log(e / self.e0)
        xnb = self._coordinate(nb, self.nb_abs_min, self.dxnb)
        xnq = self._coordinate(nq, self.nq_abs_min, self.dxnq)
        ie = min(max(int((xe - self.logemin) / self.dxe), 0), self.ne - 2)
        inb = min(max(int((xnb + self.lognmax) / self.dxnb), 0), self.nnb - 2)
        inq = min(max(int((xnq + self.lognmax) / self.dxnq), 0), self.nnq - 2)
        if self._status[ie][inb][inq] == 1:
            return None
        em = (xe - self.logemin - ie * self.dxe) / self.dxe
        nbm = (xnb + self.lognmax - inb * self.dxnb) / self.dxnb
        nqm = (xnq + self.lognmax - inq * self.dxnq) / self.dxnq
        we = (1.0 - em, em)
        wnb = (1.0 - nbm, nbm)
        wnq = (1.0 - nqm, nqm)
        return [
            (we[je] * wnb[jb] * wnq[jq], self._table[ie + je][inb + jb][inq + jq])
            for je, jb, jq in itertools.product((0, 1), repeat=3)
        ]

    def _centre(self) -> tuple[float, ...]:
        return self._table[0][self.nnb // 2][self.nnq // 2]

    def eos(self, e: float, nb: float, nq: float, ns: float) -> ThermoState:
        if e <= 0.0:
            return ThermoState()
        if e < self.e_min:
            p, temp = self._centre()[:2]
            scale = e / self.e_min
            return ThermoState(T=scale * temp, mub=0.0, muq=0.0, mus=0.0, p=scale * p)
        corners = self._corners(e, nb, nq)
        if corners is None:
            return ThermoState()
        sums = [0.0] * 5
        for weight, record in corners:
            sums = [s + weight * v for s, v in zip(sums, record)]
        p, temp, mub, muq, mus = sums
        return ThermoState(T=temp, mub=mub, muq=muq, mus=mus, p=max(p, 0.0))

    def p(self, e: float, nb: float, nq: float, ns: float) -> float:
        if e <= 0.0:
            return 0.0
        if e < self.e_min:
            return e / self.e_min * self._centre()[0]
        corners = self._corners(e, nb, nq)
        if corners is None:
            return 0.0
        return max(sum(weight * record[0] for weight, record in corners), 0.0)