import math
import numpy as np

from pdcphd.logmath import log_binomial, log_falling_factorial, log_poisson, sum_exp

def test_falling_factorial():
    assert np.isclose(np.exp(log_falling_factorial(5, 2)), 20.0)
    assert np.isclose(log_falling_factorial(4, 0), 0.0)
    assert log_falling_factorial(2, 3) == -np.inf

def test_binomial_and_poisson():
    assert np.isclose(np.exp(log_binomial(6, 3)), 20.0)
    assert np.isclose(np.exp(log_poisson(2, 1.5)), math.exp(-1.5) * 1.5**2 / 2)
    assert np.isclose(np.exp(log_poisson(0, 0.0)), 1.0)
    assert np.exp(log_poisson(1, 0.0)) == 0.0

def test_sum_exp():
    a = np.log(np.array([[1.0, 2.0, 3.0], [4.0, 5.0, 6.0]]))
    assert np.allclose(sum_exp(a, axis=1), [6.0, 15.0])
    assert np.allclose(sum_exp(a, np.array([1.0, 0.0, 2.0]), axis=1), [7.0, 16.0])

def test_sum_exp_no_terms():
    a = np.full((2, 3), -np.inf)
    assert np.all(sum_exp(a, axis=1) == 0.0)
    assert sum_exp(np.zeros((3, 0)), axis=1).shape == (3,)

def test_sum_exp_extreme_terms():
    assert np.isclose(sum_exp(np.array([700.0, 700.0])), 2.0 * np.exp(700.0))
    # exp(-800) underflows on its own, the weights bring it back into range
    assert np.isclose(np.log(sum_exp(np.array([-800.0]), np.array([1e300]))), -800.0 + 300.0 * np.log(10.0))

def test_sum_exp_inf_weight_on_dead_term():
    a = np.array([[0.0, -np.inf], [np.log(2.0), -np.inf]])
    b = np.array([3.0, np.inf])
    assert np.allclose(sum_exp(a, b, axis=1), [3.0, 6.0])
