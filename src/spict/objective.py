"""Negative log-likelihood of the surplus-production state-space model.

evaluate() runs the full pipeline once, as a pure function of
(params, data, config):

1. transform fixed parameters to natural scale
2. per-knot growth rate from the seasonal flags
3. fishing-mortality process density
4. equilibrium biomass per knot
5. biomass process density (analytical or Euler scheme)
6. sub-interval catch predictions and production
7. catch observation density
8. abundance-index density (missing observations skipped)
9. forecast and MSY reference points
10. derived quantities for exposure

The returned NLL is the negated sum of the per-term log-density arrays in
LikelihoodContributions. Nothing is accumulated outside the call, so the
function is reentrant and composes with jax.jit, jax.grad, jax.hessian and
jax.vmap. Numeric domain failures (F == r, non-positive log arguments) are
not raised: they produce a non-finite NLL, which an enclosing optimizer can
reject via is_valid_evaluation().
"""

from __future__ import annotations

from typing import TYPE_CHECKING, NamedTuple

import jax
import jax.numpy as jnp
import numpyro

from spict.config import EvaluatorConfig, get_config
from spict.likelihoods import (
    biomass_log_density,
    catch_log_density,
    fishing_mortality_log_density,
    index_log_density,
    predict_biomass_transitions,
    predict_catch_periods,
    predict_log_index,
    predict_subinterval_catch,
    production,
)
from spict.params import growth_rate_vector, transform_parameters
from spict.reference_points import forecast, msy_reference
from spict.report import DerivedQuantities, expose_deterministic
from spict.schemes import calculate_binf, resolve_scheme
from spict.tracing import trace, warn_if

if TYPE_CHECKING:
    from collections.abc import Callable

    from spict.data import SpictData
    from spict.params import SpictParams


class LikelihoodContributions(NamedTuple):
    """Per-term log-densities (not negated).

    fishing_mortality: (ns - delay,) F-process transitions.
    biomass: (ns - 1,) biomass-process transitions.
    catch: (n_catch,) catch observations.
    index: (n_index,) index observations, 0 where missing.
    """

    fishing_mortality: jnp.ndarray
    biomass: jnp.ndarray
    catch: jnp.ndarray
    index: jnp.ndarray

    def total(self) -> jnp.ndarray:
        """Summed log-density over all terms."""
        return sum(jnp.sum(term) for term in self)


class EvaluationResult(NamedTuple):
    """Output of one likelihood evaluation."""

    nll: jnp.ndarray
    contributions: LikelihoodContributions
    derived: DerivedQuantities


def evaluate(
    params: SpictParams,
    data: SpictData,
    config: EvaluatorConfig | None = None,
) -> EvaluationResult:
    """Evaluate the negative log-likelihood and all derived quantities.

    Args:
        params: Fixed parameters and latent logF/logB states.
        data: Validated observations and time grid.
        config: Model flags; defaults to the evaluator section of config.yaml.

    Returns:
        EvaluationResult with the scalar NLL, per-term log-densities and
        derived quantities.

    Raises:
        SpictDataError: If logF/logB do not match the knot grid.
    """
    config = config or get_config().evaluator
    data.check_params(params)
    dbg = config.dbg
    lamperti = bool(config.lamperti)
    scheme = resolve_scheme(lamperti=lamperti, euler=config.euler)

    trace(dbg, 1, f"--- spict evaluation start (scheme={scheme.name}) ---")
    trace(
        dbg,
        1,
        "INPUT: logr={logr} logK={logK} logq={logq} logsdf={logsdf} logsdb={logsdb}",
        logr=params.logr,
        logK=params.logK,
        logq=params.logq,
        logsdf=params.logsdf,
        logsdb=params.logsdb,
    )
    trace(
        dbg,
        1,
        f"sizes: ns={data.ns} n_catch={data.n_catch} n_index={data.n_index} delay={data.delay}",
    )

    tp = transform_parameters(params)
    F = jnp.exp(params.logF)
    B = jnp.exp(params.logB)

    warn_if(F == tp.r, "F equals r at some knot; equilibrium biomass is degenerate (F={F})", F=F)

    rvec = growth_rate_vector(tp.r, tp.gamma, data.isum)
    trace(dbg, 2, "rvec={rvec}", rvec=rvec)

    # --- Process equations ---
    lp_F = fishing_mortality_log_density(
        params.logF, params.phi1, params.phi2, tp.sdf, data.dt, data.delay
    )
    trace(dbg, 2, "F process: sdf={sdf} logdens={lp}", sdf=tp.sdf, lp=lp_F)

    Binf = calculate_binf(tp.K, F, rvec, tp.sdb2, lamperti)

    Bpred = predict_biomass_transitions(B, Binf, F, rvec, tp.K, data.dt, tp.sdb2, scheme)
    lp_B = biomass_log_density(Bpred, params.logB, tp.sdb, data.dt)
    trace(dbg, 2, "B process: log(Bpred)={lb} logdens={lp}", lb=jnp.log(Bpred), lp=lp_B)

    Cpredsub = predict_subinterval_catch(F, tp.K, rvec, B, Binf, data.dt, tp.sdb2, scheme)
    P = production(B, Cpredsub)

    # --- Observation equations ---
    Cpred = predict_catch_periods(
        F, tp.K, rvec, B, Binf, data.dt, tp.sdb2, scheme, data.catch_gather, data.catch_mask
    )
    logCpred = jnp.log(Cpred)
    lp_C = catch_log_density(Cpred, data.catch_obs, tp.sdc)
    trace(dbg, 2, "catch: logCpred={lc} sdc={sdc} logdens={lp}", lc=logCpred, sdc=tp.sdc, lp=lp_C)

    logIpred = predict_log_index(params.logq, B, data.index_knot)
    lp_I = index_log_density(logIpred, data.log_index, data.index_observed, tp.sdi)
    trace(dbg, 2, "index: logIpred={li} sdi={sdi} logdens={lp}", li=logIpred, sdi=tp.sdi, lp=lp_I)

    contributions = LikelihoodContributions(
        fishing_mortality=lp_F,
        biomass=lp_B,
        catch=lp_C,
        index=lp_I,
    )
    nll = -contributions.total()

    # --- Forecast and reference points ---
    msy = msy_reference(tp.r, tp.K, tp.sdb2, lamperti)
    fc = forecast(params, tp, rvec, msy.Fmsy, data.delay, data.dtpred, scheme, lamperti)

    derived = DerivedQuantities(
        r=tp.r,
        K=tp.K,
        q=tp.q,
        sdf=tp.sdf,
        sdb=tp.sdb,
        sdc=tp.sdc,
        sdi=tp.sdi,
        rvec=rvec,
        Binf=Binf,
        logBinf=jnp.log(Binf),
        Bpred=Bpred,
        Cpredsub=Cpredsub,
        P=P,
        Cpred=Cpred,
        logCpred=logCpred,
        logIpred=logIpred,
        **msy._asdict(),
        **fc._asdict(),
    )
    trace(dbg, 1, "--- spict evaluation end: nll={nll} ---", nll=nll)

    return EvaluationResult(nll=nll, contributions=contributions, derived=derived)


def negative_log_likelihood(
    params: SpictParams,
    data: SpictData,
    config: EvaluatorConfig | None = None,
) -> jnp.ndarray:
    """Scalar objective for optimizers and automatic differentiation."""
    return evaluate(params, data, config).nll


def build_objective(
    data: SpictData,
    config: EvaluatorConfig | None = None,
) -> Callable[[SpictParams], EvaluationResult]:
    """Bind data and flags once and return a jitted params -> EvaluationResult."""
    config = config or get_config().evaluator

    @jax.jit
    def objective(params: SpictParams) -> EvaluationResult:
        return evaluate(params, data, config)

    return objective


def is_valid_evaluation(result: EvaluationResult | jnp.ndarray) -> bool:
    """True when the negative log-likelihood is finite.

    Accepts an EvaluationResult or a bare NLL value.
    """
    nll = result.nll if isinstance(result, EvaluationResult) else result
    return bool(jnp.isfinite(nll))


def spict_factor(
    params: SpictParams,
    data: SpictData,
    config: EvaluatorConfig | None = None,
    *,
    expose: bool = True,
) -> EvaluationResult:
    """Add the SPiCT log-likelihood to the enclosing NumPyro model.

    The caller's model supplies params (sampled or fixed). The log-likelihood
    enters as numpyro.factor("log_likelihood", -nll); derived quantities are
    registered as deterministic sites when expose is True.
    """
    result = evaluate(params, data, config)
    numpyro.factor("log_likelihood", -result.nll)
    if expose:
        expose_deterministic(result.derived)
    return result
