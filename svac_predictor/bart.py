from __future__ import annotations

import logging
from typing import Optional

import numpy as np
from sklearn.base import BaseEstimator, ClassifierMixin
from sklearn.utils.validation import check_is_fitted


logger = logging.getLogger(__name__)


class BartClassifier(ClassifierMixin, BaseEstimator):
    """Binary BART classifier backed by pymc-bart.

    A sum-of-trees latent function with a logistic link and a Bernoulli
    likelihood. `trees` is the number of trees in the ensemble (the tuned
    hyperparameter); predictions are posterior means of the class-1 probability.
    """

    def __init__(
        self,
        trees: int = 50,
        draws: int = 500,
        tune: int = 500,
        chains: int = 2,
        random_state: Optional[int] = None,
    ):
        self.trees = trees
        self.draws = draws
        self.tune = tune
        self.chains = chains
        self.random_state = random_state

    def fit(self, X, y):
        X = np.asarray(X, dtype=float)
        y = np.asarray(y)
        self.classes_ = np.unique(y)
        if len(self.classes_) != 2:
            raise ValueError(f"BartClassifier needs two classes, got {self.classes_.tolist()}")
        y01 = (y == self.classes_[1]).astype(int)
        self.n_features_in_ = X.shape[1]

        import pymc as pm
        import pymc_bart as pmb

        with pm.Model() as model:
            X_data = pm.Data("X", X)
            mu = pmb.BART("mu", X_data, y01, m=int(self.trees))
            p = pm.Deterministic("p", pm.math.sigmoid(mu))
            pm.Bernoulli("y", p=p, observed=y01, shape=mu.shape)
            idata = pm.sample(
                draws=self.draws,
                tune=self.tune,
                chains=self.chains,
                cores=1,
                random_seed=self.random_state,
                progressbar=False,
                compute_convergence_checks=False,
            )

        self.model_ = model
        self.idata_ = idata
        logger.debug("Fitted BART with %d trees on %d rows", self.trees, X.shape[0])
        return self

    def predict_proba(self, X):
        import pymc as pm

        check_is_fitted(self, "idata_")
        X = np.asarray(X, dtype=float)
        with self.model_:
            pm.set_data({"X": X})
            ppc = pm.sample_posterior_predictive(
                self.idata_,
                var_names=["p"],
                random_seed=self.random_state,
                progressbar=False,
            )
        prob = ppc.posterior_predictive["p"].mean(dim=("chain", "draw")).values
        prob = np.clip(np.asarray(prob, dtype=float), 0.0, 1.0)
        return np.column_stack([1.0 - prob, prob])

    def predict(self, X):
        prob = self.predict_proba(X)[:, 1]
        return np.where(prob >= 0.5, self.classes_[1], self.classes_[0])
