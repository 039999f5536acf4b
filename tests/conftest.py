"""Shared fixtures for spict tests.

- small_data / small_params: a hand-built 6-knot problem with irregular dt,
  a multi-interval catch period and missing index observations.
- simulated: a longer simulated data set with its true parameters.
"""

import jax.numpy as jnp
import jax.random as random
import numpy as np
import pytest

from spict.data import SpictData
from spict.params import make_params
from spict.simulate import simulate

# ══════════════════════════════════════════════════════════════════════════════
# SMALL HAND-BUILT PROBLEM
# ══════════════════════════════════════════════════════════════════════════════


@pytest.fixture
def small_data():
    """6 knots, irregular dt, three catch periods, two missing index values."""
    return SpictData.from_arrays(
        delay=1,
        dt=[1.0, 1.0, 0.5, 0.5, 1.0],
        dtpred=1.0,
        Cobs=[45.0, 110.0, 60.0],
        ic=[1, 2, 4],
        nc=[1, 2, 2],
        I=[10.0, -1.0, 12.0, 0.0, 11.0, 9.0],
        ii=[1, 2, 3, 4, 5, 6],
        isum=[0, 1, 0, 1, 0, 1],
    )


@pytest.fixture
def small_params():
    """Parameters with F well below r so every log argument is positive."""
    return make_params(
        logF=np.log([0.10, 0.11, 0.12, 0.12, 0.13, 0.15]),
        logB=np.log([500.0, 520.0, 540.0, 530.0, 560.0, 600.0]),
        phi1=1.0,
        phi2=0.0,
        alpha=1.0,
        beta=1.0,
        loggamma=np.log(1.2),
        logr=np.log(0.4),
        logK=np.log(1000.0),
        logq=np.log(0.02),
        logsdf=np.log(0.2),
        logsdb=np.log(0.1),
    )


# ══════════════════════════════════════════════════════════════════════════════
# SIMULATED DATA
# ══════════════════════════════════════════════════════════════════════════════


@pytest.fixture(scope="session")
def simulated():
    """30-knot simulated data set (analytical scheme, delay=2, 2-interval catches)."""
    params = make_params(
        logF=jnp.zeros(0),
        logB=jnp.zeros(0),
        phi1=0.7,
        phi2=0.3,
        alpha=2.0,
        beta=1.0,
        logr=np.log(0.6),
        logK=np.log(1000.0),
        logq=np.log(0.01),
        logsdf=np.log(0.05),
        logsdb=np.log(0.05),
    )
    return simulate(
        random.PRNGKey(42),
        params,
        np.full(29, 1.0),
        logF0=np.log(0.15),
        logB0=np.log(600.0),
        delay=2,
        catch_span=2,
    )
