"""Observation-model log-densities: catches and the abundance index.

Catch is integrated over each sub-interval (knot i to i+1) and summed into
the observed catch periods. Both observation types are lognormal:

    log Cobs[i] ~ N(log Cpred[i], sdc^2)
    log I[i]    ~ N(log q + log B[ii[i]], sdi^2),   only where I[i] > 0
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import jax.numpy as jnp
import jax.scipy.stats as jstats

if TYPE_CHECKING:
    import numpy as np

    from spict.schemes import IntegrationScheme


def predict_subinterval_catch(
    F, K, rvec, B, Binf, dt, sdb2, scheme: IntegrationScheme
) -> jnp.ndarray:
    """Catch removed in each sub-interval, (ns-1,).

    Sub-interval i is integrated with the state of knot i (F, rvec, B, Binf).
    """
    return scheme.predict_catch(F[:-1], K, rvec[:-1], B[:-1], Binf[:-1], jnp.asarray(dt), sdb2)


def production(B, Cpredsub) -> jnp.ndarray:
    """Accumulated surplus production per sub-interval: B[i+1] - B[i] + C[i]."""
    return B[1:] - B[:-1] + Cpredsub


def aggregate_catch(Cpredsub, catch_gather: np.ndarray, catch_mask: np.ndarray) -> jnp.ndarray:
    """Sum sub-interval catches into observed catch periods.

    Args:
        Cpredsub: (ns-1,) sub-interval catch predictions.
        catch_gather: (n_catch, max_span) sub-interval indices.
        catch_mask: (n_catch, max_span) validity of each gathered entry.

    Returns:
        (n_catch,) predicted catch per observation.
    """
    gathered = Cpredsub[jnp.asarray(catch_gather)]
    return jnp.sum(jnp.where(jnp.asarray(catch_mask), gathered, 0.0), axis=1)


def predict_catch_periods(
    F,
    K,
    rvec,
    B,
    Binf,
    dt,
    sdb2,
    scheme: IntegrationScheme,
    catch_gather: np.ndarray,
    catch_mask: np.ndarray,
) -> jnp.ndarray:
    """Predicted catch per observed period, (n_catch,).

    Equal to aggregate_catch(predict_subinterval_catch(...)), but the knot
    states are gathered before integrating, so sub-intervals that no catch
    observation covers never enter the result or its gradient.
    """
    idx = jnp.asarray(catch_gather)
    dt = jnp.asarray(dt)
    sub = scheme.predict_catch(F[idx], K, rvec[idx], B[idx], Binf[idx], dt[idx], sdb2)
    return jnp.sum(jnp.where(jnp.asarray(catch_mask), sub, 0.0), axis=1)


def catch_log_density(Cpred, catch_obs, sdc) -> jnp.ndarray:
    """Lognormal catch log-densities, (n_catch,).

    Non-positive Cpred yields a non-finite value; it is not clamped.
    """
    return jstats.norm.logpdf(jnp.log(Cpred), jnp.log(jnp.asarray(catch_obs)), sdc)


def predict_log_index(logq, B, index_knot: np.ndarray) -> jnp.ndarray:
    """log q + log B at the knot of every index observation, (n_index,).

    Entries for missing observations (I <= 0) hold the prediction too, not a
    placeholder; index_log_density gives them zero weight.
    """
    return logq + jnp.log(B[jnp.asarray(index_knot)])


def index_log_density(logIpred, log_index: np.ndarray, observed: np.ndarray, sdi) -> jnp.ndarray:
    """Lognormal index log-densities, exactly 0 where the observation is missing.

    Args:
        logIpred: (n_index,) predicted log index.
        log_index: (n_index,) log observed index (0 placeholder where missing).
        observed: (n_index,) True where I > 0.
        sdi: Observation standard deviation.
    """
    logp = jstats.norm.logpdf(jnp.asarray(log_index), logIpred, sdi)
    return jnp.where(jnp.asarray(observed), logp, 0.0)
