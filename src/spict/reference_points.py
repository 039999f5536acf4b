"""One-step-ahead forecast and MSY reference points.

Both reuse the equilibrium/biomass/catch predictors of the process model,
starting from the last knot and integrating over the forecast horizon dtpred.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, NamedTuple

import jax.numpy as jnp

from spict.likelihoods.process import predict_log_f
from spict.schemes import calculate_binf

if TYPE_CHECKING:
    from spict.params import SpictParams, TransformedParams
    from spict.schemes import IntegrationScheme


class MSYReference(NamedTuple):
    """Deterministic maximum-sustainable-yield reference point."""

    Bmsy: jnp.ndarray
    Fmsy: jnp.ndarray
    MSY: jnp.ndarray
    logBmsy: jnp.ndarray
    logFmsy: jnp.ndarray


class Forecast(NamedTuple):
    """Projection one step of length dtpred beyond the last knot."""

    logFp: jnp.ndarray
    Fp: jnp.ndarray
    Binfp: jnp.ndarray
    Bp: jnp.ndarray
    logBp: jnp.ndarray
    Cp: jnp.ndarray
    logIp: jnp.ndarray
    Cinfp: jnp.ndarray  # catch at equilibrium biomass; ignores the delay in reaching it
    Binfpmsy: jnp.ndarray
    Bpmsy: jnp.ndarray
    logBpmsy: jnp.ndarray
    Cpmsy: jnp.ndarray


def msy_reference(r, K, sdb2, lamperti: bool = False) -> MSYReference:
    """Schaefer MSY: Bmsy = K/2, Fmsy = r/2 (- 0.5*sdb2 under lamperti)."""
    Bmsy = K / 2
    if lamperti:
        Fmsy = r / 2 - 0.5 * sdb2
    else:
        Fmsy = r / 2
    return MSYReference(
        Bmsy=Bmsy,
        Fmsy=Fmsy,
        MSY=Bmsy * Fmsy,
        logBmsy=jnp.log(Bmsy),
        logFmsy=jnp.log(Fmsy),
    )


def project(F, B0, r, K, sdb2, dtpred, scheme: IntegrationScheme, lamperti: bool = False):
    """Equilibrium, end biomass and catch for a constant F over dtpred.

    The catch integral starts from the projected biomass, not from B0.

    Returns:
        (Binf, B, C) at the end of the horizon.
    """
    Binf = calculate_binf(K, F, r, sdb2, lamperti)
    B = scheme.predict_biomass(B0, Binf, F, r, K, dtpred, sdb2)
    C = scheme.predict_catch(F, K, r, B, Binf, dtpred, sdb2)
    return Binf, B, C


def forecast(
    params: SpictParams,
    tp: TransformedParams,
    rvec: jnp.ndarray,
    Fmsy,
    delay: int,
    dtpred: float,
    scheme: IntegrationScheme,
    lamperti: bool = False,
) -> Forecast:
    """Project fishing mortality, biomass and catch one step past the last knot.

    Args:
        params: Model parameters (for phi1, phi2, logq, logF, logB).
        tp: Natural-scale parameters.
        rvec: (ns,) per-knot growth rate; the last entry drives the forecast.
        Fmsy: Fishing mortality at MSY for the reference projection.
        delay: F-process lag.
        dtpred: Forecast horizon.
        scheme: Integration scheme.
        lamperti: Configured Lamperti flag for the equilibrium biomass.
    """
    ns = params.logF.shape[0]
    r_last = rvec[ns - 1]
    B_last = jnp.exp(params.logB[ns - 1])

    logFp = predict_log_f(params.phi1, params.logF[ns - 1], params.phi2, params.logF[ns - delay])
    Fp = jnp.exp(logFp)
    Binfp, Bp, Cp = project(Fp, B_last, r_last, tp.K, tp.sdb2, dtpred, scheme, lamperti)
    Cinfp = scheme.predict_catch(Fp, tp.K, r_last, Binfp, Binfp, dtpred, tp.sdb2)

    Binfpmsy, Bpmsy, Cpmsy = project(Fmsy, B_last, r_last, tp.K, tp.sdb2, dtpred, scheme, lamperti)

    return Forecast(
        logFp=logFp,
        Fp=Fp,
        Binfp=Binfp,
        Bp=Bp,
        logBp=jnp.log(Bp),
        Cp=Cp,
        logIp=params.logq + jnp.log(Bp),
        Cinfp=Cinfp,
        Binfpmsy=Binfpmsy,
        Bpmsy=Bpmsy,
        logBpmsy=jnp.log(Bpmsy),
        Cpmsy=Cpmsy,
    )
