"""Tests for the parameter transform and growth-rate selection."""

import jax.numpy as jnp
import numpy as np

from spict.params import growth_rate_vector, make_params, transform_parameters


def test_transform_parameters():
    params = make_params(
        logF=np.zeros(2),
        logB=np.zeros(2),
        alpha=2.0,
        beta=3.0,
        loggamma=np.log(1.5),
        logr=np.log(0.4),
        logK=np.log(1000.0),
        logq=np.log(0.01),
        logsdf=np.log(0.2),
        logsdb=np.log(0.1),
    )
    tp = transform_parameters(params)
    assert jnp.allclose(tp.r, 0.4)
    assert jnp.allclose(tp.K, 1000.0)
    assert jnp.allclose(tp.q, 0.01)
    assert jnp.allclose(tp.sdb2, 0.01)
    assert jnp.allclose(tp.sdi, 2.0 * 0.1)
    assert jnp.allclose(tp.sdc, 3.0 * 0.2)
    assert jnp.allclose(tp.gamma, 1.5)


def test_growth_rate_vector():
    rvec = growth_rate_vector(jnp.asarray(0.4), jnp.asarray(1.5), np.array([0, 1, 1, 0]))
    np.testing.assert_allclose(np.asarray(rvec), [0.4, 0.6, 0.6, 0.4])


def test_growth_rate_vector_no_season():
    rvec = growth_rate_vector(jnp.asarray(0.4), jnp.asarray(9.0), np.zeros(3, dtype=bool))
    assert jnp.all(rvec == 0.4)
