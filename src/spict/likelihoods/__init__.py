"""Log-density terms of the surplus-production likelihood.

- process: latent fishing-mortality and biomass transitions
- observation: catch aggregation and abundance index
"""

from spict.likelihoods.observation import (
    aggregate_catch,
    catch_log_density,
    index_log_density,
    predict_catch_periods,
    predict_log_index,
    predict_subinterval_catch,
    production,
)
from spict.likelihoods.process import (
    biomass_log_density,
    fishing_mortality_log_density,
    predict_biomass_transitions,
    predict_log_f,
)

__all__ = [
    "aggregate_catch",
    "biomass_log_density",
    "catch_log_density",
    "fishing_mortality_log_density",
    "index_log_density",
    "predict_biomass_transitions",
    "predict_catch_periods",
    "predict_log_f",
    "predict_log_index",
    "predict_subinterval_catch",
    "production",
]
