"""Derived quantities exposed to report and uncertainty consumers.

DerivedQuantities is the in-graph (JAX pytree) form: it can be returned from
jitted code, differentiated for delta-method standard errors by an external
collector, or registered as NumPyro deterministic sites.

SpictReport is the host-side, JSON-serialisable snapshot of a concrete
evaluation, typed with pydantic so consumers get a stable schema.

Nothing here feeds back into the negative log-likelihood.
"""

from __future__ import annotations

from typing import NamedTuple

import jax.numpy as jnp
import numpy as np
import numpyro
from pydantic import BaseModel


class DerivedQuantities(NamedTuple):
    """Every quantity derived during one evaluation.

    Shapes follow the arrays actually computed: Cpredsub and P have ns-1
    entries, one per sub-interval. A TMB-style report of Cpredsub carries ns
    entries with an unset last slot; that slot is not reproduced here.
    logIpred has one entry per index observation, and entries for missing
    observations hold the model prediction rather than an unset value.
    """

    # natural-scale parameters
    r: jnp.ndarray
    K: jnp.ndarray
    q: jnp.ndarray
    sdf: jnp.ndarray
    sdb: jnp.ndarray
    sdc: jnp.ndarray
    sdi: jnp.ndarray
    # per knot
    rvec: jnp.ndarray
    Binf: jnp.ndarray
    logBinf: jnp.ndarray
    # per sub-interval
    Bpred: jnp.ndarray  # predicted biomass at knots 1..ns-1
    Cpredsub: jnp.ndarray
    P: jnp.ndarray
    # per observation
    Cpred: jnp.ndarray
    logCpred: jnp.ndarray
    logIpred: jnp.ndarray
    # reference points
    Bmsy: jnp.ndarray
    Fmsy: jnp.ndarray
    MSY: jnp.ndarray
    logBmsy: jnp.ndarray
    logFmsy: jnp.ndarray
    # forecast
    logFp: jnp.ndarray
    Fp: jnp.ndarray
    Binfp: jnp.ndarray
    Bp: jnp.ndarray
    logBp: jnp.ndarray
    Cp: jnp.ndarray
    logIp: jnp.ndarray
    Cinfp: jnp.ndarray
    Binfpmsy: jnp.ndarray
    Bpmsy: jnp.ndarray
    logBpmsy: jnp.ndarray
    Cpmsy: jnp.ndarray


# Quantities targeted by delta-method standard errors.
SDREPORT_FIELDS: tuple[str, ...] = (
    "r",
    "K",
    "q",
    "sdf",
    "sdc",
    "sdi",
    "Bmsy",
    "MSY",
    "Fmsy",
    "logBmsy",
    "logFmsy",
    "logBp",
    "logBpmsy",
    "Cpmsy",
    "Cinfp",
    "Cpredsub",
    "logIpred",
    "logCpred",
    "P",
    "logBinf",
    "logFp",
)


def sdreport_quantities(derived: DerivedQuantities) -> dict[str, jnp.ndarray]:
    """Subset of derived quantities targeted by delta-method uncertainty."""
    return {name: getattr(derived, name) for name in SDREPORT_FIELDS}


def expose_deterministic(derived: DerivedQuantities, prefix: str = "") -> None:
    """Register every derived quantity as a numpyro.deterministic site.

    Must be called inside a NumPyro model context.
    """
    for name, value in derived._asdict().items():
        numpyro.deterministic(f"{prefix}{name}", value)


# ---------------------------------------------------------------------------
# Host-side report schema
# ---------------------------------------------------------------------------


class ReferencePointsReport(BaseModel):
    """MSY reference point."""

    Bmsy: float
    Fmsy: float
    MSY: float


class ForecastReport(BaseModel):
    """One-step-ahead forecast at predicted F and at Fmsy."""

    Fp: float
    Bp: float
    Cp: float
    logIp: float
    Binfp: float
    Cinfp: float
    Bpmsy: float
    Cpmsy: float


class SpictReport(BaseModel):
    """Snapshot of one evaluation for downstream reporting."""

    nll: float
    is_valid: bool
    parameters: dict[str, float]
    reference_points: ReferencePointsReport
    forecast: ForecastReport
    Binf: list[float]
    Bpred: list[float]
    Cpredsub: list[float]
    P: list[float]
    Cpred: list[float]
    logIpred: list[float]

    @classmethod
    def from_evaluation(cls, nll, derived: DerivedQuantities) -> SpictReport:
        """Build a report from a concrete (non-traced) evaluation."""

        def scalar(x) -> float:
            return float(np.asarray(x))

        def vector(x) -> list[float]:
            return np.asarray(x, dtype=np.float64).tolist()

        nll = scalar(nll)
        return cls(
            nll=nll,
            is_valid=bool(np.isfinite(nll)),
            parameters={
                name: scalar(getattr(derived, name))
                for name in ("r", "K", "q", "sdf", "sdb", "sdc", "sdi")
            },
            reference_points=ReferencePointsReport(
                Bmsy=scalar(derived.Bmsy),
                Fmsy=scalar(derived.Fmsy),
                MSY=scalar(derived.MSY),
            ),
            forecast=ForecastReport(
                Fp=scalar(derived.Fp),
                Bp=scalar(derived.Bp),
                Cp=scalar(derived.Cp),
                logIp=scalar(derived.logIp),
                Binfp=scalar(derived.Binfp),
                Cinfp=scalar(derived.Cinfp),
                Bpmsy=scalar(derived.Bpmsy),
                Cpmsy=scalar(derived.Cpmsy),
            ),
            Binf=vector(derived.Binf),
            Bpred=vector(derived.Bpred),
            Cpredsub=vector(derived.Cpredsub),
            P=vector(derived.P),
            Cpred=vector(derived.Cpred),
            logIpred=vector(derived.logIpred),
        )
