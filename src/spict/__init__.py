"""Surplus production model in continuous time (SPiCT) for JAX.

A pure, differentiable negative log-likelihood for the stochastic Schaefer
surplus-production model with latent fishing mortality and biomass, plus
forecast and MSY reference points. Optimization, Laplace approximation and
uncertainty propagation are left to the caller (e.g. jax.grad/jax.hessian,
NumPyro, or an external optimizer).

Computation runs in float64: the package enables jax_enable_x64 on import.
"""

import jax

jax.config.update("jax_enable_x64", True)

from spict.config import EvaluatorConfig, SpictConfig, get_config, load_config  # noqa: E402
from spict.data import SpictData, SpictDataError  # noqa: E402
from spict.objective import (  # noqa: E402
    EvaluationResult,
    LikelihoodContributions,
    build_objective,
    evaluate,
    is_valid_evaluation,
    negative_log_likelihood,
    spict_factor,
)
from spict.params import SpictParams, TransformedParams, make_params  # noqa: E402
from spict.report import DerivedQuantities, SpictReport  # noqa: E402
from spict.schemes import AnalyticalScheme, EulerScheme, resolve_scheme  # noqa: E402
from spict.simulate import SimulatedData, simulate  # noqa: E402

__all__ = [
    "AnalyticalScheme",
    "DerivedQuantities",
    "EulerScheme",
    "EvaluationResult",
    "EvaluatorConfig",
    "LikelihoodContributions",
    "SimulatedData",
    "SpictConfig",
    "SpictData",
    "SpictDataError",
    "SpictParams",
    "SpictReport",
    "TransformedParams",
    "build_objective",
    "evaluate",
    "get_config",
    "is_valid_evaluation",
    "load_config",
    "make_params",
    "negative_log_likelihood",
    "resolve_scheme",
    "simulate",
    "spict_factor",
]
