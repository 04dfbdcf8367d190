import numpy as np
import pytest
from geofield import correlated_field, cholesky_factor, distance_matrix, random_locations
from geofield import InvalidParameterError, IllConditionedCovarianceError

def test_single_location():
    # One location: just a scaled standard normal.
    vals = correlated_field([[0.5, 0.5]], variance=2., range=0.3, seed=1, size=20000)
    assert vals.shape == (20000, 1)
    assert np.allclose(vals.var(), 2., rtol=0.05)
    assert np.allclose(vals.mean(), 0., atol=0.05)

def test_single_draw_shape():
    locs = random_locations(50, seed=3)
    vals = correlated_field(locs, variance=1., range=0.2)
    assert vals.shape == (50,)
    assert np.all(np.isfinite(vals))

def test_empirical_covariance():
    locs = random_locations(5, seed=4)
    variance, vrange = 1.5, 0.3

    vals = correlated_field(locs, variance, vrange, seed=5, size=50000)
    emp = np.cov(vals.T)
    target = variance * np.exp(-distance_matrix(locs) / vrange)

    assert np.allclose(emp, target, atol=0.05)

def test_deterministic_given_seed():
    locs = random_locations(20, seed=0)
    a = correlated_field(locs, 1., 0.25, seed=7)
    b = correlated_field(locs, 1., 0.25, seed=7)
    c = correlated_field(locs, 1., 0.25, seed=8)
    assert np.all(a == b)
    assert not np.allclose(a, c)

@pytest.mark.parametrize('variance, vrange', [
    (0., 0.25), (-1., 0.25), (1., 0.), (1., -0.5), (float('nan'), 0.25), (1., float('inf'))])
def test_invalid_parameters(variance, vrange):
    with pytest.raises(InvalidParameterError):
        correlated_field([[0., 0.], [1., 1.]], variance, vrange)

def test_invalid_parameter_is_value_error():
    with pytest.raises(ValueError, match='range'):
        correlated_field([[0., 0.]], 1., 0.)

def test_duplicate_locations():
    locs = np.array([[0.1, 0.2], [0.7, 0.4], [0.3, 0.9], [0.1, 0.2]])
    try:
        vals = correlated_field(locs, 1., 0.25, seed=2, size=100)
    except IllConditionedCovarianceError as e:
        assert (0, 3) in e.pairs
        assert '(0, 3)' in str(e)
    else:
        assert np.all(np.isfinite(vals))
        assert np.allclose(vals[:, 0], vals[:, 3], atol=1e-6)

def test_cholesky_factor_rejects_indefinite():
    C = np.array([[1., 2.], [2., 1.]])
    with pytest.raises(IllConditionedCovarianceError):
        cholesky_factor(C)

def test_cholesky_factor():
    C = np.array([[4., 2.], [2., 3.]])
    L = np.asarray(cholesky_factor(C))
    assert np.allclose(L @ L.T, C)
    assert L[0, 1] == 0.

def test_error_is_linalg_error():
    assert issubclass(IllConditionedCovarianceError, np.linalg.LinAlgError)

def test_flat_single_location_rejected():
    # A bare [x, y] is not read as two 1-D locations.
    with pytest.raises(ValueError, match=r'\[N, 2\]'):
        correlated_field([0.5, 0.5], 1., 0.25)
