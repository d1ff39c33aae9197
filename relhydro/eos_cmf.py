"""Chiral mean-field equation of state tabulated in temperature and baryon density."""

from __future__ import annotations

import itertools
import logging
import math
import os
from collections.abc import Sequence
from pathlib import Path

from relhydro.eos_grid import EquationOfState, ThermoState

logger = logging.getLogger(__name__)

EPS_CUTOFF = 1e-5
EPS_0 = 146.51751415742 * 0.87326281
N_0 = 0.15891 * 0.87272727
_IDEAL_P = 0.2964
_IDEAL_T = 0.15120476935
_FIELDS_PER_RECORD = 8
_T_CAP = 500.0
_T_CAPPED = 499.0


def nearest_index(values: Sequence[float], first: int, last: int, target: float) -> int:
    """Bisect values[first..last] for the index of an element close to target.

    An upper bound past the end of ``values`` is accepted; that slot never wins.
    """
    while last > first:
        if last - first == 1:
            if last < len(values) and abs(values[last] - target) < abs(values[first] - target):
                return last
            return first
        middle = (first + last) // 2
        if values[middle] == target:
            return middle
        if values[middle] < target:
            first = middle + 1
        else:
            last = middle - 1
    if last == first:
        return last
    raise ValueError(f"empty search range [{first}, {last}]")


def _ieee_div(a: float, b: float) -> float:
    if b != 0.0:
        return a / b
    if a == 0.0 or math.isnan(a):
        return math.nan
    return math.copysign(math.inf, a) * math.copysign(1.0, b)


def _trunc(x: float) -> int:
    """Truncate toward zero; values that have no integer map below any index."""
    if math.isnan(x) or x == -math.inf:
        return -1
    if x == math.inf:
        return 2**31
    return int(x)


class EoSCMF(EquationOfState):
    """Energy density inverted to temperature, then bilinear lookup in (T, nb)."""

    def __init__(
        self,
        filename: str | os.PathLike[str] = "eos/CMF_eos.dat",
        n_t: int = 1001,
        n_nb: int = 401,
    ) -> None:
        name = os.fspath(filename)
        self.n_t = n_t
        self.n_nb = n_nb
        self.d_t = 0.5
        self.d_n = 0.1
        self.eps_0 = EPS_0
        self.n_0 = N_0
        values = [float(token) for token in Path(filename).read_text().split()]
        needed = n_t * n_nb * _FIELDS_PER_RECORD
        if len(values) < needed:
            raise ValueError(f"{name}: expected {needed} numbers, found {len(values)}")

        def grid() -> list[list[float]]:
            return [[0.0] * n_nb for _ in range(n_t)]

        self.etab, self.ptab, self.stab = grid(), grid(), grid()
        self.mubtab, self.mustab, self.qfractab = grid(), grid(), grid()
        temps = [0.0] * n_t
        densities = [0.0] * n_nb
        records = zip(*[iter(values)] * _FIELDS_PER_RECORD)
        for temp, nb, e, p, s, mub, mus, qfrac in itertools.islice(records, n_t * n_nb):
            i_nb = _trunc((nb + 0.5 * self.d_n) / self.d_n)
            i_t = _trunc((temp + 0.5 * self.d_t) / self.d_t)
            if not (0 <= i_t < n_t and 0 <= i_nb < n_nb):
                raise ValueError(f"{name}: record T={temp} nB={nb} lies outside the grid")
            densities[i_nb] = nb
            temps[i_t] = temp
            self.etab[i_t][i_nb] = e * EPS_0 / 1000.0
            self.ptab[i_t][i_nb] = p * EPS_0 / 1000.0
            self.stab[i_t][i_nb] = s * N_0
            self.mubtab[i_t][i_nb] = mub / 1000.0
            self.mustab[i_t][i_nb] = mus / 1000.0
            self.qfractab[i_t][i_nb] = qfrac
        self.tmin = temps[0] / 1000.0
        self.tmax = temps[n_t - 2] / 1000.0
        self.nmin = densities[0] * N_0
        self.nmax = densities[n_nb - 1] * N_0
        logger.info(
            "table %s read, [Tmin,Tmax,nmin,nmax] = %g %g %g %g",
            name,
            self.tmin,
            self.tmax,
            self.nmin,
            self.nmax,
        )

    def _get_ind(self, eps: float, n: float) -> int:
        nb_ind = min(max(_trunc((n + 0.5 * self.d_n) / self.d_n), 0), self.n_nb - 1)
        column = [row[nb_ind] for row in self.etab]
        t_ind = nearest_index(column, 0, self.n_t, eps)
        return min(t_ind, self.n_t - 2)

    def get_temp(self, eps: float, n: float) -> float:
        """Invert the energy table to a temperature on the table's own scale."""
        n_ind = min(max(_trunc(n / self.d_n), 0), self.n_nb - 2)
        t_ind = self._get_ind(eps, n)
        low, high = self.etab[t_ind], self.etab[t_ind + 1]
        offset = n - n_ind * self.d_n
        elow = (low[n_ind + 1] - low[n_ind]) / self.d_n * offset + low[n_ind]
        ehigh = (high[n_ind + 1] - high[n_ind]) / self.d_n * offset + high[n_ind]
        temp = (t_ind + _ieee_div(eps - elow, ehigh - elow)) * self.d_t
        return _T_CAPPED if temp > _T_CAP else temp

    def _cell(self, temp: float, nb: float, i_t: int, i_nb: int) -> list[tuple[float, int, int]]:
        i_t = min(max(i_t, 0), self.n_t - 2)
        i_nb = min(max(i_nb, 0), self.n_nb - 2)
        tm = (temp - self.tmin - i_t * self.d_t) / self.d_t
        nm = (nb - self.nmin - i_nb * self.d_n) / self.d_n
        wt = (1.0 - tm, tm)
        wn = (1.0 - nm, nm)
        return [
            (wt[jt] * wn[jn], i_t + jt, i_nb + jn)
            for jt, jn in itertools.product((0, 1), repeat=2)
        ]

    def _raw_indices(self, temp: float, nb: float) -> tuple[int, int]:
        i_t = max(_trunc((temp - self.tmin + 0.5 * self.d_t) / self.d_t), 0)
        i_nb = max(_trunc((nb - self.nmin + 0.5 * self.d_n) / self.d_n), 0)
        return i_t, i_nb

    def _get(self, e: float, nb: float) -> ThermoState:
        if e < EPS_CUTOFF:
            return ThermoState()
        temp = self.get_temp(e, nb)
        if not temp >= 10.0:
            return ThermoState()
        i_t, i_nb = self._raw_indices(temp, nb)
        p = mub = mus = 0.0
        for weight, jt, jn in self._cell(temp, nb, i_t - 2, i_nb - 2):
            p += weight * self.ptab[jt][jn]
            mub += weight * self.mubtab[jt][jn]
            mus += weight * self.mustab[jt][jn]
        return ThermoState(T=temp, mub=mub, muq=0.0, mus=mus, p=max(p, 0.0))

    def eos(self, e: float, nb: float, nq: float, ns: float) -> ThermoState:
        if e < EPS_CUTOFF:
            return ThermoState()
        if e < 146.0 and nb < 6.0:
            return self._get(e, nb)
        return ThermoState(T=_IDEAL_T * e**0.25, mub=0.0, muq=0.0, mus=0.0, p=_IDEAL_P * e)

    def p(self, e: float, nb: float, nq: float, ns: float) -> float:
        if not (e < 1.63 and nb < 6.0):
            return _IDEAL_P * e
        if e < EPS_CUTOFF:
            return 0.0
        temp = self.get_temp(e, nb)
        i_t, i_nb = self._raw_indices(temp, nb)
        if i_t > self.n_t - 2:
            i_t -= 2
        if i_nb > self.n_nb - 2:
            i_nb -= 2
        p = sum(weight * self.ptab[jt][jn] for weight, jt, jn in self._cell(temp, nb, i_t, i_nb))
        return p if not p < 0.0 else 0.0