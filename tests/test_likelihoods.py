"""Tests for the process and observation log-density terms."""

import math

import jax.numpy as jnp
import numpy as np
import pytest

from spict.likelihoods import (
    aggregate_catch,
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
from spict.schemes import calculate_binf, resolve_scheme


def _dnorm_log(x, mean, sd):
    return -0.5 * math.log(2 * math.pi) - math.log(sd) - 0.5 * ((x - mean) / sd) ** 2


# =============================================================================
# Fishing mortality process
# =============================================================================


class TestFishingMortalityProcess:
    def test_matches_scalar_loop(self):
        logF = jnp.log(jnp.array([0.1, 0.12, 0.11, 0.14, 0.13]))
        dt = np.array([1.0, 0.5, 2.0, 1.0])
        phi1, phi2, sdf, delay = 0.6, 0.4, 0.3, 2

        lp = fishing_mortality_log_density(logF, phi1, phi2, sdf, dt, delay)

        expected = []
        for i in range(delay, 5):
            mean = phi1 * float(logF[i - 1]) + phi2 * float(logF[i - delay])
            expected.append(_dnorm_log(float(logF[i]), mean, math.sqrt(dt[i - 1]) * sdf))
        assert lp.shape == (3,)
        assert jnp.allclose(lp, jnp.array(expected), rtol=1e-12)

    def test_delay_one_random_walk(self):
        """phi1=1, phi2=0, delay=1 is a random walk on logF."""
        logF = jnp.array([0.0, 0.1, -0.2])
        dt = np.array([1.0, 4.0])
        lp = fishing_mortality_log_density(logF, 1.0, 0.0, 0.5, dt, 1)
        assert jnp.allclose(lp[0], _dnorm_log(0.1, 0.0, 0.5))
        assert jnp.allclose(lp[1], _dnorm_log(-0.2, 0.1, 1.0))


# =============================================================================
# Biomass process
# =============================================================================


class TestBiomassProcess:
    def test_transition_uses_next_knot_rates(self, small_params, small_data):
        """Bpred[i] is driven by B[i] and the F, r, Binf of knot i+1."""
        tp = transform_parameters(small_params)
        F = jnp.exp(small_params.logF)
        B = jnp.exp(small_params.logB)
        rvec = growth_rate_vector(tp.r, tp.gamma, small_data.isum)
        binf = calculate_binf(tp.K, F, rvec)
        scheme = resolve_scheme()

        bpred = predict_biomass_transitions(B, binf, F, rvec, tp.K, small_data.dt, tp.sdb2, scheme)
        expected = scheme.predict_biomass(
            B[2], binf[3], F[3], rvec[3], tp.K, small_data.dt[2], tp.sdb2
        )
        assert bpred.shape == (5,)
        assert jnp.allclose(bpred[2], expected, rtol=1e-14)

    def test_density_sd_scales_with_sqrt_dt(self):
        logB = jnp.log(jnp.array([100.0, 110.0, 90.0]))
        bpred = jnp.array([105.0, 95.0])
        dt = np.array([1.0, 0.25])
        lp = biomass_log_density(bpred, logB, 0.2, dt)
        assert jnp.allclose(lp[0], _dnorm_log(math.log(105.0), math.log(110.0), 0.2))
        assert jnp.allclose(lp[1], _dnorm_log(math.log(95.0), math.log(90.0), 0.1))


# =============================================================================
# Catch
# =============================================================================


class TestCatchAggregation:
    def test_sums_exactly_the_declared_span(self):
        """ic=1, nc=2 gives Cpredsub[0] + Cpredsub[1] and nothing else."""
        gather = np.array([[0, 1]])
        mask = np.array([[True, True]])
        rng = np.random.default_rng(0)
        for _ in range(5):
            sub = jnp.asarray(rng.uniform(1.0, 100.0, size=5))
            cpred = aggregate_catch(sub, gather, mask)
            assert cpred[0] == sub[0] + sub[1]

    def test_padding_excluded(self, small_data):
        sub = jnp.array([1.0, 10.0, 100.0, 1000.0, 10000.0])
        cpred = aggregate_catch(sub, small_data.catch_gather, small_data.catch_mask)
        np.testing.assert_array_equal(np.asarray(cpred), [1.0, 110.0, 11000.0])

    def test_outside_terms_do_not_matter(self, small_data):
        sub = jnp.array([1.0, 10.0, 100.0, 1000.0, 10000.0])
        perturbed = sub.at[3].set(-5.0)
        a = aggregate_catch(sub, small_data.catch_gather, small_data.catch_mask)
        b = aggregate_catch(perturbed, small_data.catch_gather, small_data.catch_mask)
        assert a[0] == b[0]
        assert a[1] == b[1]

    @pytest.mark.parametrize("euler", [False, True])
    def test_periods_match_aggregated_subintervals(self, small_params, small_data, euler):
        tp = transform_parameters(small_params)
        F = jnp.exp(small_params.logF)
        B = jnp.exp(small_params.logB)
        rvec = growth_rate_vector(tp.r, tp.gamma, small_data.isum)
        Binf = calculate_binf(tp.K, F, rvec, tp.sdb2)
        scheme = resolve_scheme(euler=euler)
        sub = predict_subinterval_catch(F, tp.K, rvec, B, Binf, small_data.dt, tp.sdb2, scheme)
        expected = aggregate_catch(sub, small_data.catch_gather, small_data.catch_mask)
        cpred = predict_catch_periods(
            F,
            tp.K,
            rvec,
            B,
            Binf,
            small_data.dt,
            tp.sdb2,
            scheme,
            small_data.catch_gather,
            small_data.catch_mask,
        )
        assert jnp.allclose(cpred, expected, rtol=1e-14)

    def test_subinterval_uses_own_knot(self, small_params, small_data):
        tp = transform_parameters(small_params)
        F = jnp.exp(small_params.logF)
        B = jnp.exp(small_params.logB)
        rvec = growth_rate_vector(tp.r, tp.gamma, small_data.isum)
        binf = calculate_binf(tp.K, F, rvec)
        scheme = resolve_scheme()

        sub = predict_subinterval_catch(F, tp.K, rvec, B, binf, small_data.dt, tp.sdb2, scheme)
        expected = scheme.predict_catch(
            F[1], tp.K, rvec[1], B[1], binf[1], small_data.dt[1], tp.sdb2
        )
        assert sub.shape == (5,)
        assert jnp.allclose(sub[1], expected, rtol=1e-14)

    def test_production(self):
        B = jnp.array([100.0, 120.0, 110.0])
        C = jnp.array([5.0, 15.0])
        np.testing.assert_allclose(np.asarray(production(B, C)), [25.0, 5.0])

    def test_lognormal_density(self):
        lp = catch_log_density(jnp.array([50.0]), np.array([40.0]), 0.3)
        assert jnp.allclose(lp[0], _dnorm_log(math.log(50.0), math.log(40.0), 0.3))

    def test_non_positive_prediction_is_not_finite(self):
        lp = catch_log_density(jnp.array([-1.0, 0.0]), np.array([40.0, 40.0]), 0.3)
        assert not jnp.any(jnp.isfinite(lp))


# =============================================================================
# Index
# =============================================================================


class TestIndexLikelihood:
    @pytest.mark.parametrize("logq", [-10.0, 0.0, 3.0])
    @pytest.mark.parametrize("scale", [1e-3, 1.0, 1e4])
    def test_missing_contributes_zero(self, small_data, logq, scale):
        B = jnp.full(small_data.ns, 250.0) * scale
        logIpred = predict_log_index(logq, B, small_data.index_knot)
        lp = index_log_density(logIpred, small_data.log_index, small_data.index_observed, 0.2)
        assert lp[1] == 0.0
        assert lp[3] == 0.0
        assert jnp.all(lp[small_data.index_observed] != 0.0)

    def test_observed_density(self, small_data):
        B = jnp.arange(1.0, 7.0) * 100.0
        logIpred = predict_log_index(jnp.log(0.02), B, small_data.index_knot)
        lp = index_log_density(logIpred, small_data.log_index, small_data.index_observed, 0.2)
        expected = _dnorm_log(math.log(12.0), math.log(0.02) + math.log(300.0), 0.2)
        assert jnp.allclose(lp[2], expected)

    def test_prediction_reported_for_missing(self, small_data):
        B = jnp.arange(1.0, 7.0) * 100.0
        logIpred = predict_log_index(0.0, B, small_data.index_knot)
        assert jnp.allclose(logIpred[1], math.log(200.0))
