"""Callaway & Sant'Anna (2021) group-time ATT via the ``csdid`` package.

Reference:
    Callaway, B., & Sant'Anna, P. H. C. (2021). Difference-in-differences
    with multiple time periods. Journal of Econometrics.
"""

from __future__ import annotations

import logging

import numpy as np
import pandas as pd

from ..errors import EstimatorError
from ._base import DynamicATT, GroupTimeEstimator, GroupTimeResult, SimpleATT

logger = logging.getLogger(__name__)


def _flat(values) -> np.ndarray:
    return np.asarray(values, dtype=float).flatten()


class CsdidEstimator(GroupTimeEstimator):
    """Group-time ATT estimator backed by ``csdid.att_gt.ATTgt``.

    The unit id is always a cluster in ``csdid``; at most one additional
    cluster variable (the state group) can be passed.

    Parameters
    ----------
    est_method : str
        ``"dr"``, ``"ipw"`` or ``"reg"``.
    control_group : str
        ``"notyettreated"`` or ``"nevertreated"``.
    base_period : str
        ``"universal"`` or ``"varying"``.
    bootstrap : bool
        Multiplier bootstrap standard errors instead of analytic ones.
    biters : int
        Bootstrap iterations.
    alpha : float
        Significance level for confidence bands.
    attgt_cls : type, optional
        ``ATTgt`` implementation. Defaults to ``csdid.att_gt.ATTgt``.

    Example
    -------
    >>> est = CsdidEstimator(est_method="reg")
    >>> res = est.fit(df, "murder", "time", "id", "treat_time", ["id", "state_group"])
    >>> res.simple.att
    """

    def __init__(
        self,
        est_method: str = "dr",
        control_group: str = "notyettreated",
        base_period: str = "universal",
        bootstrap: bool = False,
        biters: int = 1000,
        alpha: float = 0.05,
        attgt_cls=None,
    ):
        super().__init__(est_method, control_group, base_period)
        self.bootstrap = bootstrap
        self.biters = biters
        self.alpha = alpha
        self._attgt_cls = attgt_cls

    @property
    def attgt_cls(self):
        if self._attgt_cls is None:
            from csdid.att_gt import ATTgt

            self._attgt_cls = ATTgt
        return self._attgt_cls

    def _fit(
        self,
        df: pd.DataFrame,
        outcome: str,
        time_col: str,
        id_col: str,
        group_col: str,
        cluster_cols: list[str],
    ) -> GroupTimeResult:
        extra_clusters = [col for col in cluster_cols if col != id_col]
        if len(extra_clusters) > 1:
            raise EstimatorError(
                f"csdid supports one cluster variable besides the unit id, got {extra_clusters}"
            )
        clustervar = extra_clusters[0] if extra_clusters else None

        cols = list(dict.fromkeys([outcome, time_col, id_col, group_col] + extra_clusters))
        data = df[cols].copy()
        data[outcome] = data[outcome].astype(float)

        try:
            att = self.attgt_cls(
                yname=outcome,
                tname=time_col,
                idname=id_col,
                gname=group_col,
                data=data,
                control_group=self.control_group,
                xformla=None,
                panel=True,
                allow_unbalanced_panel=False,
                clustervar=clustervar,
                cband=False,
                biters=self.biters,
                alp=self.alpha,
            )
            att.fit(est_method=self.est_method, base_period=self.base_period, bstrap=self.bootstrap)

            att.aggte(typec="dynamic", na_rm=True)
            dyn = att.atte
            att.aggte(typec="simple", na_rm=True)
            simple = att.atte
        except Exception as exc:
            raise EstimatorError(f"csdid failed on {outcome!r}: {exc}") from exc

        estimates = pd.DataFrame({
            "event_time": _flat(dyn["egt"]).astype(int),
            "att": _flat(dyn["att_egt"]),
            "se": _flat(dyn["se_egt"]),
        })
        crit = dyn.get("crit_val_egt")
        crit_val = float(_flat(crit)[0]) if crit is not None else None

        overall_se = _flat(simple["overall_se"])
        result = GroupTimeResult(
            dynamic=DynamicATT(estimates, crit_val=crit_val),
            simple=SimpleATT(
                att=float(_flat(simple["overall_att"])[0]),
                se=float(overall_se[0]) if len(overall_se) else float("nan"),
            ),
            n_units=int(data[id_col].nunique()),
            n_obs=len(data),
        )
        logger.info(
            "csdid %s: overall ATT %.3f (SE %.3f), %s event times",
            outcome,
            result.simple.att,
            result.simple.se,
            f"{len(estimates):,}",
        )
        return result
