"""
Permutation significance test over a PolymorphismMultiGContainer.

Builds a null distribution for a caller-supplied statistic by applying one of
the resampling operations of popgenperm.stats.permutation many times, then
compares the observed statistic against it.

Per-replicate loop:
    1. Derive an independent generator from a spawned SeedSequence child
    2. Permute the container (multi_g, mono_g, alleles, ...)
    3. Evaluate statistic(permuted) -> float
    4. Collect null value

Because each replicate owns its generator, the null distribution for a given
seed is identical whether replicates run sequentially or on a thread pool.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Callable, Iterable, Optional

import numpy as np
from numpy.typing import NDArray

from popgenperm.core.container import PolymorphismMultiGContainer
from popgenperm.core.errors import DimensionError
from popgenperm.stats.permutation import (
    permute_alleles,
    permute_intra_group_alleles,
    permute_intra_group_mono_g,
    permute_mono_g,
    permute_multi_g,
)

__all__ = [
    'PERMUTATION_METHODS',
    'ALTERNATIVES',
    'PermutationTestResult',
    'empirical_p_value',
    'run_permutation_test',
]

logger = logging.getLogger(__name__)

PERMUTATION_METHODS = {
    "multi_g": permute_multi_g,
    "mono_g": permute_mono_g,
    "intra_group_mono_g": permute_intra_group_mono_g,
    "alleles": permute_alleles,
    "intra_group_alleles": permute_intra_group_alleles,
}

ALTERNATIVES = ("greater", "less", "two-sided")

Statistic = Callable[[PolymorphismMultiGContainer], float]


@dataclass
class PermutationTestResult:
    """Result of a permutation test.

    Attributes:
        observed: Statistic on the unpermuted container.
        null_distribution: Statistic on each valid permuted replicate.
        p_value: Empirical p-value, (1 + #extreme) / (1 + n).
        n_permutations: Number of valid replicates.
        method: Resampling operation used.
        alternative: "greater", "less" or "two-sided".
        group_ids: Group ids the resampling was restricted to.
        seed: Seed the replicates were spawned from.
        null_mean: Mean of the null distribution.
        null_std: Std of the null distribution.
    """

    observed: float
    null_distribution: NDArray[np.float64]
    p_value: float
    n_permutations: int
    method: str
    alternative: str
    group_ids: list[int] = field(default_factory=list)
    seed: Optional[int] = None
    null_mean: float = 0.0
    null_std: float = 0.0

    @property
    def is_significant(self) -> bool:
        """p_value < 0.05."""
        return self.p_value < 0.05

    def to_dict(self) -> dict:
        """Serialize to JSON-compatible dict."""
        null = self.null_distribution
        return {
            "observed": self.observed,
            "p_value": self.p_value,
            "n_permutations": self.n_permutations,
            "method": self.method,
            "alternative": self.alternative,
            "group_ids": list(self.group_ids),
            "seed": self.seed,
            "null_mean": self.null_mean,
            "null_std": self.null_std,
            "null_quantiles": {
                "q05": float(np.percentile(null, 5)),
                "q50": float(np.percentile(null, 50)),
                "q95": float(np.percentile(null, 95)),
            },
        }


def empirical_p_value(observed: float, null: NDArray[np.float64], alternative: str = "greater") -> float:
    """
    Empirical p-value with the +1 correction, so it is never zero.

    Args:
        observed: Observed statistic.
        null: Null distribution.
        alternative: "greater" counts null >= observed, "less" counts
            null <= observed, "two-sided" doubles the smaller tail (capped at 1).

    Returns:
        p-value in (0, 1].
    """
    n = len(null)
    if alternative == "greater":
        return float(np.sum(null >= observed) + 1) / (n + 1)
    if alternative == "less":
        return float(np.sum(null <= observed) + 1) / (n + 1)
    if alternative == "two-sided":
        upper = float(np.sum(null >= observed) + 1) / (n + 1)
        lower = float(np.sum(null <= observed) + 1) / (n + 1)
        return min(1.0, 2.0 * min(upper, lower))
    raise ValueError(f"alternative must be one of {ALTERNATIVES}, got {alternative!r}")


def run_permutation_test(
    container: PolymorphismMultiGContainer,
    statistic: Statistic,
    method: str = "multi_g",
    group_ids: Optional[Iterable[int]] = None,
    n_permutations: int = 999,
    alternative: str = "greater",
    seed: Optional[int] = None,
    n_jobs: int = 1,
) -> PermutationTestResult:
    """
    Permutation test of statistic against a resampling null.

    Args:
        container: Source container (not modified).
        statistic: Callable mapping a container to a float (e.g. Fst).
        method: Key of PERMUTATION_METHODS.
        group_ids: Groups to resample within (default: all groups of the
            container). Ignored by "multi_g", which relabels every individual.
        n_permutations: Number of replicates.
        alternative: "greater", "less" or "two-sided".
        seed: Seed for reproducibility.
        n_jobs: Worker threads evaluating replicates.

    Returns:
        PermutationTestResult with observed vs null statistic.

    Raises:
        ValueError: If method, alternative, n_permutations or n_jobs is invalid.
        DimensionError: If the container holds fewer than 2 individuals.
        RuntimeError: If every replicate produced a NaN statistic.
    """
    if method not in PERMUTATION_METHODS:
        raise ValueError(f"method must be one of {sorted(PERMUTATION_METHODS)}, got {method!r}")
    if alternative not in ALTERNATIVES:
        raise ValueError(f"alternative must be one of {ALTERNATIVES}, got {alternative!r}")
    if n_permutations < 1:
        raise ValueError(f"n_permutations must be >= 1, got {n_permutations}")
    if n_jobs < 1:
        raise ValueError(f"n_jobs must be >= 1, got {n_jobs}")
    if len(container) < 2:
        raise DimensionError(
            f"a permutation test needs at least 2 individuals, got {len(container)}",
            operation="run_permutation_test",
        )

    selected = container.get_all_group_ids() if group_ids is None else sorted(set(group_ids))
    permute = PERMUTATION_METHODS[method]
    resamples = method == "multi_g" or bool(set(selected) & set(container.group_id_labels))
    if not resamples:
        logger.warning(
            f"Group ids {selected} select no individual; every replicate equals the observed container"
        )

    def replicate(child: np.random.SeedSequence) -> float:
        rng = np.random.default_rng(child)
        if method == "multi_g":
            permuted = permute(container, rng=rng)
        elif resamples:
            permuted = permute(container, selected, rng=rng)
        else:
            permuted = container.copy()
        return float(statistic(permuted))

    observed = float(statistic(container))
    logger.info(
        f"Permutation test ({method}, {alternative}): {n_permutations} replicates, "
        f"{len(container)} individuals, groups {selected}"
    )

    # One child seed per replicate keeps the null independent of n_jobs
    children = np.random.SeedSequence(seed).spawn(n_permutations)
    if n_jobs == 1:
        null_values = [replicate(child) for child in children]
    else:
        with ThreadPoolExecutor(max_workers=n_jobs) as executor:
            null_values = list(executor.map(replicate, children))

    null = np.asarray(null_values, dtype=np.float64)
    valid_null = null[~np.isnan(null)]
    n_valid = len(valid_null)
    if n_valid == 0:
        raise RuntimeError("All permutations produced NaN statistics, cannot compute null distribution")
    if n_valid < n_permutations:
        logger.warning(f"{n_permutations - n_valid} replicate(s) produced NaN statistics and were dropped")

    p_value = empirical_p_value(observed, valid_null, alternative)
    null_mean = float(np.mean(valid_null))
    null_std = float(np.std(valid_null, ddof=1)) if n_valid > 1 else 0.0

    logger.info(
        f"Observed {observed:.4g}, null mean={null_mean:.4g}, std={null_std:.4g}, p={p_value:.4g}"
    )

    return PermutationTestResult(
        observed=observed,
        null_distribution=valid_null,
        p_value=p_value,
        n_permutations=n_valid,
        method=method,
        alternative=alternative,
        group_ids=selected,
        seed=seed,
        null_mean=null_mean,
        null_std=null_std,
    )
