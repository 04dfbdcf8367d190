import numpy as np
import pytest
from geofield import Parameters, Model, Exponential, Nugget, random_locations, sample_field
from geofield import InvalidParameterError

def test_generate():
    locs = random_locations(200, seed=0)
    p = Parameters(sill=1., range=0.2)

    model = Model(Exponential(sill=p.sill, range=p.range), verbose=False)
    vals = model.generate(locs, seed=3).vals

    assert vals.shape == (200,)
    assert np.all(model.locs == locs)

def test_fit():
    locs = random_locations(300, seed=1)
    p = Parameters(sill=1., range=0.2)

    # Generate data.
    model = Model(Exponential(sill=p.sill, range=p.range), verbose=False)
    vals = model.generate(locs, seed=2).vals

    # Fit, starting from the wrong place.
    model = Model(Exponential(sill=p.sill, range=p.range))
    model.set(sill=0.5, range=0.5)
    model.fit(locs, vals, step_size=0.05, iters=400)

    # The ratio sill / range is the well-determined combination.
    assert np.allclose(p.sill.value / p.range.value, 1. / 0.2, rtol=0.35)
    assert 0.05 < p.range.value < 0.8

def test_set_unknown_parameter():
    p = Parameters(sill=1., range=0.2)
    model = Model(Exponential(sill=p.sill, range=p.range))
    with pytest.raises(ValueError):
        model.set(nugget=1.)

def test_predict():
    np.random.seed(2)
    locs1 = random_locations(50, seed=4)
    vals1 = np.random.normal(size=50)

    model = Model(Exponential(sill=1., range=0.3), locs=locs1, vals=vals1, verbose=False)

    # Interpolating at data reproduces it with no uncertainty.
    mean, var = model.predict(locs1)
    assert np.allclose(mean, vals1, atol=1e-6)
    assert np.allclose(var, 0., atol=1e-6)

    # Far from data the prior takes over.
    mean, var = model.predict([[50., 50.]])
    assert np.allclose(mean, 0., atol=1e-6)
    assert np.allclose(var, 1., atol=1e-6)

    mean, var = model.predict(random_locations(30, seed=5))
    mean2, var2 = model.predict(random_locations(30, seed=5))
    assert np.all(mean == mean2)
    assert np.all(var == var2)
    assert np.all(var >= -1e-9) and np.all(var <= 1. + 1e-9)

def test_predict_with_nugget():
    locs1 = random_locations(20, seed=6)
    vals1 = np.linspace(-1., 1., 20)
    model = Model(Exponential(sill=1., range=0.3) + Nugget(0.2), locs=locs1, vals=vals1, verbose=False)
    # The nugget is not smoothed away just off the data locations.
    _, var = model.predict(locs1 + 1e-3)
    assert np.all(var > 0.15)

def test_set_invalid_value():
    p = Parameters(sill=1., range=0.2)
    model = Model(Exponential(sill=p.sill, range=p.range), verbose=False)
    with pytest.raises(InvalidParameterError, match='sill'):
        model.set(sill=-1.)
    with pytest.raises(InvalidParameterError):
        model.set(range=0.)
    assert p.sill.value == 1. and p.range.value == 0.2
    assert np.isfinite(p.sill.underlying)

def test_generate_rejects_invalid_value():
    p = Parameters(sill=1., range=0.2)
    model = Model(Exponential(sill=p.sill, range=p.range) + Nugget(0.1), verbose=False)
    p.sill.value = -1.
    with pytest.raises(InvalidParameterError):
        model.generate(random_locations(10))
    with pytest.raises(InvalidParameterError):
        sample_field(model.covfunc, random_locations(10))
