import os
os.environ.setdefault('TF_CPP_MIN_LOG_LEVEL', '1')

import time
from dataclasses import dataclass, replace
from typing import Callable, Dict, Optional

import numpy as np
from scipy.linalg import cho_solve

# Tensorflow is extraordinarily noisy. Catch warnings during import.
import warnings
with warnings.catch_warnings():
    warnings.filterwarnings("ignore", category=DeprecationWarning)
    import tensorflow as tf
    import tensorflow_probability as tfp
    tfd = tfp.distributions

from .field import cholesky_factor
from .metric import as_locations, distance_matrix
from .model import default_report

__all__ = ['Featurizer', 'SpatialPoisson']

class Featurizer:
    """
    Produces a feature matrix from locations.

    `featurization` takes the coordinate columns as separate arguments and
    returns a tuple of features (or a single feature). With `None`, the
    feature matrix has zero columns.

    ```
    featurizer = Featurizer(lambda x, y: (x, y, x * y))
    F = featurizer(locs) # [N, 3]
    ```
    """

    def __init__(self, featurization):
        self.featurization = featurization

    def __call__(self, locs):
        locs = as_locations(locs)
        n = locs.shape[0]
        if self.featurization is None:
            return np.ones([n, 0])

        feats = self.featurization(*np.moveaxis(locs, -1, 0))
        if not isinstance(feats, tuple):
            feats = (feats,)
        if len(feats) == 0:
            return np.ones([n, 0])
        return np.stack([np.broadcast_to(np.asarray(f, dtype=np.float64), [n]) for f in feats], axis=1)

def f64(x):
    return tf.constant(x, dtype=tf.float64)

def latent_field(D, log_sill, log_range, z, jitter):
    """Whitened latent field: `L @ z` with `L` the Cholesky factor of the covariance."""
    C = tf.exp(log_sill) * tf.exp(-D / tf.exp(log_range))
    C += jitter * tf.eye(tf.shape(D)[0], dtype=D.dtype)
    L = tf.linalg.cholesky(C)
    return tf.linalg.matvec(L, z)

def exp_cov(D, sill, vrange):
    return sill * np.exp(-D / vrange)

@dataclass
class SpatialPoisson:
    """
    Bayesian Poisson regression with a spatially correlated random effect.

        counts[i] ~ Poisson(exp(X[i] @ beta + S[i] + offset[i]))
        S ~ N(0, sill * exp(-D / range))

    `X` is an intercept column followed by the features from `featurizer`.
    The latent field is sampled in whitened form, `S = L z` with `z ~ N(0, I)`.

    Priors:
        beta ~ N(0, beta_scale**2)
        log(sill) ~ N(0, 1)
        log(range) ~ N(log(0.25), 1)

    After `mcmc`, `posterior` maps 'beta', 'sill', 'range' and 'field' to
    arrays of samples with a leading sample axis.
    """

    locs: np.ndarray
    counts: np.ndarray
    featurizer: Callable = None
    offset: np.ndarray = None
    beta_scale: float = 10.
    range_prior_median: float = 0.25
    jitter: float = 1e-6
    report: Callable = None
    verbose: bool = True
    posterior: Optional[Dict[str, np.ndarray]] = None

    def __post_init__(self):
        if self.report is None: self.report = default_report

        self.locs = as_locations(self.locs)
        counts = np.asarray(self.counts, dtype=np.float64).reshape(-1)
        if len(counts) != len(self.locs):
            raise ValueError(f'Got {len(self.locs)} locations but {len(counts)} counts')
        if np.any(counts < 0) or np.any(counts != np.round(counts)):
            raise ValueError('Counts must be non-negative integers')
        self.counts = counts

        if self.offset is None:
            self.offset = np.zeros(len(counts))
        else:
            self.offset = np.broadcast_to(np.asarray(self.offset, dtype=np.float64), counts.shape)

    def design(self, locs):
        F = Featurizer(self.featurizer)(locs)
        return np.concatenate([np.ones([len(F), 1]), F], axis=1)

    def initial_state(self):
        X = self.design(self.locs)
        beta = np.zeros(X.shape[1])
        beta[0] = np.log(np.mean(self.counts) + 0.5) - np.mean(self.offset)
        return [
            f64(beta),
            f64(0.),
            f64(np.log(self.range_prior_median)),
            f64(np.zeros(len(self.locs)))]

    def target_log_prob_fn(self):
        D = f64(distance_matrix(self.locs))
        X = f64(self.design(self.locs))
        y = f64(self.counts)
        offset = f64(self.offset)
        jitter = f64(self.jitter)

        beta_prior = tfd.Normal(f64(0.), f64(self.beta_scale))
        log_sill_prior = tfd.Normal(f64(0.), f64(1.))
        log_range_prior = tfd.Normal(f64(np.log(self.range_prior_median)), f64(1.))
        z_prior = tfd.Normal(f64(0.), f64(1.))

        def f(beta, log_sill, log_range, z):
            S = latent_field(D, log_sill, log_range, z, jitter)
            log_rate = tf.linalg.matvec(X, beta) + S + offset
            return tf.reduce_sum(tfd.Poisson(log_rate=log_rate).log_prob(y)) \
                + tf.reduce_sum(beta_prior.log_prob(beta)) \
                + log_sill_prior.log_prob(log_sill) \
                + log_range_prior.log_prob(log_range) \
                + tf.reduce_sum(z_prior.log_prob(z))

        return f

    def mcmc(self, samples=1000, burnin=500, step_size=0.01, num_leapfrog_steps=8,
             report_interval=100, seed=0):
        """
        Sample the posterior with Hamiltonian Monte Carlo.

        The step size adapts during the first 80% of burn-in. Sampling runs in
        bursts of `report_interval` iterations, with a progress report after each.

        Returns a copy of this object with `posterior` filled in.
        """
        if samples <= 0 or samples % report_interval != 0:
            raise ValueError('`samples` must be a positive multiple of `report_interval`')
        if burnin < 0 or burnin % report_interval != 0:
            raise ValueError('`burnin` must be a multiple of `report_interval`')

        hmc = tfp.mcmc.HamiltonianMonteCarlo(
            target_log_prob_fn=self.target_log_prob_fn(),
            step_size=f64(step_size),
            num_leapfrog_steps=num_leapfrog_steps)
        kernel = tfp.mcmc.SimpleStepSizeAdaptation(
            hmc, num_adaptation_steps=int(0.8 * burnin))

        # Run the chain for a burst.
        @tf.function
        def run_chain(current_state, previous_kernel_results, burst_seed):
            return tfp.mcmc.sample_chain(
                num_results=report_interval,
                current_state=current_state,
                previous_kernel_results=previous_kernel_results,
                kernel=kernel,
                return_final_kernel_results=True,
                trace_fn=lambda _, pkr: (pkr.inner_results.is_accepted, pkr.new_step_size),
                seed=burst_seed)

        current_state = self.initial_state()
        kernel_results = kernel.bootstrap_results(current_state)

        # Do bursts.
        acc_states = []
        num_bursts = (samples + burnin) // report_interval
        burnin_bursts = burnin // report_interval
        for i in range(num_bursts):
            is_burnin = i < burnin_bursts

            if self.verbose and (i == 0 or i == burnin_bursts):
                print('BURNIN\n' if is_burnin else '\nSAMPLING')

            t0 = time.time()
            states, (accepted, step_sizes), kernel_results = run_chain(
                current_state, kernel_results, tf.constant([seed, i], dtype=tf.int32))

            if self.verbose:
                print('[iter {:4d}] [time {:.1f}] [accept rate {:.2f}] [step size {:.4f}]'.format(
                    ((i if is_burnin else i - burnin_bursts) + 1) * report_interval,
                    time.time() - t0,
                    np.mean(accepted.numpy()),
                    float(step_sizes.numpy()[-1])))

            if not is_burnin:
                acc_states.append([s.numpy() for s in states])

                # Reporting.
                if self.verbose:
                    beta, log_sill, log_range = [np.concatenate(x, 0) for x in list(zip(*acc_states))[:3]]
                    sp = dict(beta=beta, sill=np.exp(log_sill), range=np.exp(log_range))
                    for p in [5, 50, 95]:
                        self.report({k: np.percentile(v, p, axis=0) for k, v in sp.items()},
                                    prefix=f'{p:02d}%ile')

            current_state = [s[-1] for s in states]

        beta, log_sill, log_range, z = [np.concatenate(x, 0) for x in zip(*acc_states)]
        posterior = dict(
            beta = beta,
            sill = np.exp(log_sill),
            range = np.exp(log_range),
            field = self.whitened_to_field(np.exp(log_sill), np.exp(log_range), z))

        return replace(self, posterior=posterior)

    def whitened_to_field(self, sill, vrange, z):
        D = distance_matrix(self.locs)
        eye = np.eye(len(self.locs))
        return np.stack([
            np.asarray(cholesky_factor(exp_cov(D, s, r) + self.jitter * eye, self.locs)) @ zz
            for s, r, zz in zip(sill, vrange, z)])

    def predict(self, locs2, offset=None, subsample=None):
        """
        Posterior mean of the Poisson rate at new locations.

        For each posterior draw the latent field at `locs2` is Gaussian given
        the field at the data locations; its mean and variance give the
        expected rate in closed form. Draws are averaged.

        `subsample` limits the number of posterior draws used, picking
        roughly equally spaced ones.
        """
        assert self.posterior is not None, 'Run `mcmc` before `predict`'

        locs2 = as_locations(locs2)
        assert self.locs.shape[-1] == locs2.shape[-1], 'Mismatch in location dimensions'
        offset2 = np.zeros(len(locs2)) if offset is None else \
            np.broadcast_to(np.asarray(offset, dtype=np.float64), [len(locs2)])

        post = self.posterior
        n = len(post['sill'])
        if subsample is not None and subsample < n:
            pick = np.round(np.linspace(0, n - 1, subsample)).astype(int)
        else:
            pick = np.arange(n)

        D11 = distance_matrix(self.locs)
        D12 = distance_matrix(self.locs, locs2)
        X2 = self.design(locs2)
        eye = np.eye(len(self.locs))

        rates = []
        for s in pick:
            sill, vrange = post['sill'][s], post['range'][s]
            C11 = (np.asarray(cholesky_factor(exp_cov(D11, sill, vrange) + self.jitter * eye, self.locs)), True)
            C12 = exp_cov(D12, sill, vrange)
            W = cho_solve(C11, C12)
            mean = W.T @ post['field'][s]
            var = np.maximum(sill - np.einsum('ab,ab->b', C12, W), 0.)
            rates.append(np.exp(X2 @ post['beta'][s] + mean + 0.5 * var + offset2))

        return np.mean(rates, axis=0)
