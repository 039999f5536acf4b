"""Process-model log-densities for the latent fishing-mortality and biomass states.

Both states are random effects defined on the knot grid. Their transition
densities are Gaussian on the log scale with variance proportional to the
interval length (Brownian increments):

    logF[i] ~ N(phi1*logF[i-1] + phi2*logF[i-delay], dt[i-1] * sdf^2)
    logB[i+1] ~ N(log Bpred[i+1], dt[i] * sdb^2)

All index arithmetic uses static NumPy ranges so the functions trace cleanly
under jax.jit for a fixed grid.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import jax.numpy as jnp
import jax.scipy.stats as jstats
import numpy as np

if TYPE_CHECKING:
    from spict.schemes import IntegrationScheme


def predict_log_f(phi1, logF_prev, phi2, logF_lag):
    """Autoregressive-with-delay prediction of log fishing mortality."""
    return phi1 * logF_prev + phi2 * logF_lag


def fishing_mortality_log_density(logF, phi1, phi2, sdf, dt, delay: int) -> jnp.ndarray:
    """Log-densities of logF[delay:] under the AR-with-delay process.

    Args:
        logF: (ns,) latent log fishing mortality.
        phi1: Weight on the previous knot.
        phi2: Weight on the delay-lagged knot.
        sdf: Process standard deviation per unit time.
        dt: (ns-1,) interval lengths.
        delay: Lag (>= 1, validated by SpictData).

    Returns:
        (ns - delay,) log-density of each predicted knot.
    """
    ns = logF.shape[0]
    idx = np.arange(delay, ns)
    logFpred = predict_log_f(phi1, logF[idx - 1], phi2, logF[idx - delay])
    sd = jnp.sqrt(jnp.asarray(dt)[idx - 1]) * sdf
    return jstats.norm.logpdf(logF[idx], logFpred, sd)


def predict_biomass_transitions(
    B, Binf, F, rvec, K, dt, sdb2, scheme: IntegrationScheme
) -> jnp.ndarray:
    """Predict B[i+1] from B[i] for every interval.

    The prediction for knot i+1 uses the equilibrium, fishing mortality and
    growth rate of knot i+1 together with the biomass at knot i.

    Returns:
        (ns-1,) predicted biomass at knots 1..ns-1.
    """
    return scheme.predict_biomass(B[:-1], Binf[1:], F[1:], rvec[1:], K, jnp.asarray(dt), sdb2)


def biomass_log_density(Bpred, logB, sdb, dt) -> jnp.ndarray:
    """Log-densities of the biomass transitions, (ns-1,)."""
    sd = jnp.sqrt(jnp.asarray(dt)) * sdb
    return jstats.norm.logpdf(jnp.log(Bpred), logB[1:], sd)
