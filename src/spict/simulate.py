"""Synthetic data from the surplus-production process and observation models.

Draws latent logF/logB trajectories forward through the same predictors the
likelihood uses, then lognormal catch and index observations around them.
Intended for tests, examples and simulation-recovery checks.
"""

from __future__ import annotations

from typing import NamedTuple

import jax.numpy as jnp
import jax.random as random
import numpy as np

from spict.config import EvaluatorConfig, get_config
from spict.data import SpictData
from spict.likelihoods import aggregate_catch, predict_log_f, predict_subinterval_catch
from spict.params import SpictParams, growth_rate_vector, transform_parameters
from spict.schemes import calculate_binf, resolve_scheme


class SimulatedData(NamedTuple):
    """Simulated observations and the parameters (with latent states) that produced them."""

    data: SpictData
    params: SpictParams


def simulate(
    key: jnp.ndarray | None,
    params: SpictParams,
    dt=None,
    *,
    logF0: float,
    logB0: float,
    delay: int = 1,
    catch_span: int = 1,
    isum=None,
    dtpred: float = 1.0,
    config: EvaluatorConfig | None = None,
) -> SimulatedData:
    """Simulate one data set.

    Args:
        key: JAX PRNG key; seeded from the simulation config when None.
        params: Fixed parameters; params.logF and params.logB are ignored.
        dt: (ns-1,) interval lengths; a regular grid of
            simulation.n_knots knots spaced simulation.dt apart when None.
        logF0: Initial log fishing mortality (held for the first `delay` knots).
        logB0: Initial log biomass.
        delay: F-process lag.
        catch_span: Number of consecutive sub-intervals per catch observation.
        isum: (ns,) seasonal flags, all zero when None.
        dtpred: Forecast horizon stored on the returned data.
        config: Model flags selecting the integration scheme; the evaluator
            section of config.yaml when None.

    Returns:
        SimulatedData with validated SpictData and the true parameter set.
    """
    config = config or get_config().evaluator
    if key is None or dt is None:
        settings = get_config().simulation
        if key is None:
            key = random.PRNGKey(settings.seed)
        if dt is None:
            dt = np.full(settings.n_knots - 1, settings.dt)
    scheme = resolve_scheme(lamperti=config.lamperti, euler=config.euler)
    dt = np.asarray(dt, dtype=np.float64)
    ns = dt.shape[0] + 1
    isum = np.zeros(ns, dtype=np.int64) if isum is None else np.asarray(isum, dtype=np.int64)

    tp = transform_parameters(params)
    rvec = growth_rate_vector(tp.r, tp.gamma, isum)
    key_f, key_b, key_c, key_i = random.split(key, 4)

    # Fishing mortality
    z_f = random.normal(key_f, (ns,))
    logF = [jnp.asarray(logF0, dtype=float)] * min(delay, ns)
    for i in range(delay, ns):
        mean = predict_log_f(params.phi1, logF[i - 1], params.phi2, logF[i - delay])
        logF.append(mean + jnp.sqrt(dt[i - 1]) * tp.sdf * z_f[i])
    logF = jnp.stack(logF)
    F = jnp.exp(logF)
    Binf = calculate_binf(tp.K, F, rvec, tp.sdb2, config.lamperti)

    # Biomass
    z_b = random.normal(key_b, (ns,))
    logB = [jnp.asarray(logB0, dtype=float)]
    for i in range(ns - 1):
        Bpred = scheme.predict_biomass(
            jnp.exp(logB[i]), Binf[i + 1], F[i + 1], rvec[i + 1], tp.K, dt[i], tp.sdb2
        )
        logB.append(jnp.log(Bpred) + jnp.sqrt(dt[i]) * tp.sdb * z_b[i + 1])
    logB = jnp.stack(logB)
    B = jnp.exp(logB)

    # Catch observations over consecutive blocks of sub-intervals
    starts = np.arange(0, ns - 1 - catch_span + 1, catch_span)
    ic = starts + 1
    nc = np.full(starts.shape, catch_span)
    Cpredsub = predict_subinterval_catch(F, tp.K, rvec, B, Binf, dt, tp.sdb2, scheme)
    gather = starts[:, None] + np.arange(catch_span)[None, :]
    Cpred = aggregate_catch(Cpredsub, gather, np.ones_like(gather, dtype=bool))
    Cobs = Cpred * jnp.exp(tp.sdc * random.normal(key_c, Cpred.shape))

    # Index observed at every knot
    ii = np.arange(1, ns + 1)
    index = tp.q * B * jnp.exp(tp.sdi * random.normal(key_i, (ns,)))

    data = SpictData.from_arrays(
        delay=delay,
        dt=dt,
        dtpred=dtpred,
        Cobs=np.asarray(Cobs),
        ic=ic,
        nc=nc,
        I=np.asarray(index),
        ii=ii,
        isum=isum,
    )
    return SimulatedData(data=data, params=params._replace(logF=logF, logB=logB))
