"""Tests for the RK2 integrated action model."""

import numpy as np
import pytest
from scipy.integrate import solve_ivp

from stagewise.controls.poly_one import ControlParametrizationPolyOne
from stagewise.integrators.euler import IntegratedActionModelEuler
from stagewise.integrators.rk2 import IntegratedActionModelRK2, IntegratedActionDataRK2
from stagewise.models.lqr import DifferentialActionModelLQR
from stagewise.stepping.rollout import rollout
from stagewise.utils.numdiff import numdiff_derivatives


def test_rk2_double_integrator_step(double_integrator):
    """
    x = [0, 0], u = 1, dt = 0.1:
        k0 = [0, 1], y1 = [0, 0.05], k1 = [0.05, 1]
        xnext = dt k1 = [0.005, 0.1], cost = dt l(y1, u) = 0.05
    """
    model = IntegratedActionModelRK2(double_integrator, time_step=0.1)
    data = model.create_data()

    model.calc(data, np.array([0.0, 0.0]), np.array([1.0]))

    np.testing.assert_allclose(data.y[1], [0.0, 0.05])
    np.testing.assert_allclose(data.ki[1], [0.05, 1.0])
    np.testing.assert_allclose(data.xnext, [0.005, 0.1])
    assert data.cost == pytest.approx(0.05)


def test_rk2_cost_uses_midpoint_stage_only(pendulum):
    model = IntegratedActionModelRK2(pendulum, time_step=0.1)
    data = model.create_data()

    model.calc(data, np.array([0.4, -0.3]), np.array([0.7]))

    assert data.integral[0] != pytest.approx(data.integral[1])
    assert data.cost == pytest.approx(0.1 * data.integral[1])


def test_rk2_data_layout(lqr):
    model = IntegratedActionModelRK2(lqr, ControlParametrizationPolyOne(lqr.nu))
    data = model.create_data()
    nx, ndx, nv = lqr.state.nx, lqr.state.ndx, lqr.state.nv
    nu_diff, nu = model.nu_diff, model.nu

    assert isinstance(data, IntegratedActionDataRK2)
    assert len(data.differential) == 2
    assert all(u.shape == (nu_diff,) for u in data.u_diff)
    assert all(y.shape == (nx,) for y in data.y)
    assert all(J.shape == (ndx, nu) for J in data.dki_du)
    assert all(J.shape == (ndx, nu_diff) for J in data.dki_dudiff)
    assert all(H.shape == (nu, nu) for H in data.ddli_ddu)
    np.testing.assert_array_equal(data.dyi_dx[0], np.eye(ndx))
    for dki_dy in data.dki_dy:
        np.testing.assert_array_equal(dki_dy[:nv, nv:], np.eye(nv))
        np.testing.assert_array_equal(dki_dy[:nv, :nv], 0.0)


@pytest.mark.parametrize("poly_one", [False, True])
def test_rk2_derivatives_match_finite_differences_lqr(lqr, poly_one):
    """Linear stages and quadratic cost: the chained Hessians are exact too."""
    control = ControlParametrizationPolyOne(lqr.nu) if poly_one else None
    model = IntegratedActionModelRK2(lqr, control, time_step=0.05)
    data = model.create_data()
    rng = np.random.default_rng(13)
    x = rng.standard_normal(lqr.state.nx)
    p = rng.standard_normal(model.nu)

    model.calc(data, x, p)
    model.calc_diff(data, x, p)
    fd = numdiff_derivatives(model, x, p)

    np.testing.assert_allclose(data.Fx, fd.Fx, atol=1e-6)
    np.testing.assert_allclose(data.Fu, fd.Fu, atol=1e-6)
    np.testing.assert_allclose(data.Lx, fd.Lx, atol=1e-6)
    np.testing.assert_allclose(data.Lu, fd.Lu, atol=1e-6)
    np.testing.assert_allclose(data.Lxx, fd.Lxx, atol=1e-6)
    np.testing.assert_allclose(data.Lxu, fd.Lxu, atol=1e-6)
    np.testing.assert_allclose(data.Luu, fd.Luu, atol=1e-6)


@pytest.mark.parametrize("fixture", ["pendulum", "warped_pendulum"])
@pytest.mark.parametrize("poly_one", [False, True])
def test_rk2_first_derivatives_match_finite_differences(fixture, poly_one, request):
    """Nonlinear stages chained through the midpoint state."""
    differential = request.getfixturevalue(fixture)
    control = ControlParametrizationPolyOne(1) if poly_one else None
    model = IntegratedActionModelRK2(differential, control, time_step=0.05)
    data = model.create_data()
    x = np.array([0.4, -0.3])
    p = np.full(model.nu, 0.7)
    if poly_one:
        p[1] = -0.2

    model.calc_diff(data, x, p)
    fd = numdiff_derivatives(model, x, p)

    np.testing.assert_allclose(data.Fx, fd.Fx, atol=1e-6)
    np.testing.assert_allclose(data.Fu, fd.Fu, atol=1e-6)
    np.testing.assert_allclose(data.Lx, fd.Lx, atol=1e-6)
    np.testing.assert_allclose(data.Lu, fd.Lu, atol=1e-6)


def test_rk2_hessians_are_symmetric(pendulum):
    model = IntegratedActionModelRK2(pendulum, ControlParametrizationPolyOne(1), time_step=0.05)
    data = model.create_data()

    model.calc_diff(data, np.array([0.4, -0.3]), np.array([0.7, -0.2]))

    np.testing.assert_allclose(data.Lxx, data.Lxx.T, atol=1e-12)
    np.testing.assert_allclose(data.Luu, data.Luu.T, atol=1e-12)


def test_rk2_zero_time_step_disables_integration(lqr):
    model = IntegratedActionModelRK2(lqr, time_step=0.0)
    data = model.create_data()
    diff_data = lqr.create_data()
    rng = np.random.default_rng(5)
    x = rng.standard_normal(lqr.state.nx)
    p = rng.standard_normal(model.nu)

    model.calc(data, x, p)
    model.calc_diff(data, x, p)
    lqr.calc(diff_data, x, p)
    lqr.calc_diff(diff_data, x, p)

    np.testing.assert_array_equal(data.xnext, x)
    np.testing.assert_allclose(data.Fx, np.eye(lqr.state.ndx))
    np.testing.assert_array_equal(data.Fu, 0.0)
    assert data.cost == pytest.approx(diff_data.cost)
    np.testing.assert_allclose(data.Lx, diff_data.Lx)
    np.testing.assert_allclose(data.Lu, diff_data.Lu)
    np.testing.assert_allclose(data.Lxx, diff_data.Lxx)
    np.testing.assert_allclose(data.Lxu, diff_data.Lxu)
    np.testing.assert_allclose(data.Luu, diff_data.Luu)


def test_rk2_residual_is_first_stage(pendulum):
    model = IntegratedActionModelRK2(pendulum, time_step=0.1)
    data = model.create_data()

    model.calc(data, np.array([0.4, -0.3]), np.array([0.7]))

    np.testing.assert_allclose(data.r, data.differential[0].r)
    np.testing.assert_allclose(data.r, [np.sin(0.4), -0.3, 0.7])


def test_rk2_check_data(lqr, double_integrator):
    model = IntegratedActionModelRK2(lqr)
    other = IntegratedActionModelRK2(double_integrator)

    assert model.check_data(model.create_data())
    assert not model.check_data(other.create_data())
    assert not model.check_data(IntegratedActionModelEuler(lqr).create_data())


def test_rk2_dimension_errors(lqr):
    model = IntegratedActionModelRK2(lqr, time_step=0.05)
    data = model.create_data()

    with pytest.raises(ValueError, match="x has wrong dimension \\(it should be 6\\)"):
        model.calc(data, np.zeros(4), np.zeros(2))
    with pytest.raises(ValueError, match="p has wrong dimension \\(it should be 2\\)"):
        model.calc_diff(data, np.zeros(6), np.zeros(1))
    np.testing.assert_array_equal(data.xnext, 0.0)


def test_rk2_quasi_static_poly_one(pendulum):
    model = IntegratedActionModelRK2(pendulum, ControlParametrizationPolyOne(1), time_step=0.01)
    data = model.create_data()
    u = pendulum.k * np.sin(0.4) / pendulum.beta

    p = model.quasi_static(data, np.array([0.4, 0.0]))

    np.testing.assert_allclose(p, [u, u], atol=1e-9)


def test_rk2_repr(double_integrator):
    model = IntegratedActionModelRK2(double_integrator, time_step=0.01)
    assert repr(model).startswith("IntegratedActionModelRK2 {dt=0.01, ")


def _final_state_error(model_cls, pendulum, N, T=1.0):
    x0 = np.array([1.0, 0.0])
    model = model_cls(pendulum, time_step=T / N)
    trajectory = rollout(model, x0, np.zeros((N, 1)))

    reference = solve_ivp(pendulum.rhs, (0.0, T), x0, method="RK45", rtol=1e-11, atol=1e-12)
    return np.linalg.norm(trajectory.xs[-1] - reference.y[:, -1])


def test_rk2_vs_scipy_convergence_order(pendulum):
    """Halving dt divides the RK2 error by about four."""
    error_coarse = _final_state_error(IntegratedActionModelRK2, pendulum, N=50)
    error_fine = _final_state_error(IntegratedActionModelRK2, pendulum, N=100)

    assert error_fine < error_coarse
    assert error_coarse / error_fine > 3.0


def test_rk2_more_accurate_than_euler(pendulum):
    error_euler = _final_state_error(IntegratedActionModelEuler, pendulum, N=50)
    error_rk2 = _final_state_error(IntegratedActionModelRK2, pendulum, N=50)

    assert error_rk2 < error_euler


def test_rk2_check_data_rejects_models_with_same_dimensions(pendulum, double_integrator):
    model = IntegratedActionModelRK2(pendulum)
    assert not model.check_data(IntegratedActionModelRK2(double_integrator).create_data())

    first = DifferentialActionModelLQR.random(nq=2, nu=1, seed=0)
    second = DifferentialActionModelLQR.random(nq=2, nu=1, seed=1)
    model = IntegratedActionModelRK2(first)
    assert not model.check_data(IntegratedActionModelRK2(second).create_data())
    assert model.check_data(IntegratedActionModelRK2(first).create_data())


def test_rk2_zero_time_step_poly_one_pulls_back_at_start(lqr):
    model = IntegratedActionModelRK2(lqr, ControlParametrizationPolyOne(lqr.nu), time_step=0.0)
    data = model.create_data()
    rng = np.random.default_rng(19)
    x = rng.standard_normal(lqr.state.nx)
    p = rng.standard_normal(model.nu)
    J0 = model.control.dvalue(0.0, p)

    model.calc_diff(data, x, p)
    fd = numdiff_derivatives(model, x, p)
    diff_data = data.differential[0]

    np.testing.assert_allclose(data.Lu, J0.T @ diff_data.Lu)
    np.testing.assert_allclose(data.Lxu, diff_data.Lxu @ J0)
    np.testing.assert_allclose(data.Luu, J0.T @ diff_data.Luu @ J0)
    np.testing.assert_allclose(data.Lu, fd.Lu, atol=1e-6)
    np.testing.assert_allclose(data.Luu, fd.Luu, atol=1e-6)
    np.testing.assert_array_equal(data.Fu, 0.0)
