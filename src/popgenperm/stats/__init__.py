"""
Resampling and permutation testing for population containers.

Exports:
- The six resampling operations (and their PolymorphismMultiGContainerTools namespace)
- run_permutation_test and its result type
"""

from .permutation import (
    PolymorphismMultiGContainerTools,
    extract_groups,
    permute_alleles,
    permute_intra_group_alleles,
    permute_intra_group_mono_g,
    permute_mono_g,
    permute_multi_g,
)
from .permutation_test import (
    ALTERNATIVES,
    PERMUTATION_METHODS,
    PermutationTestResult,
    empirical_p_value,
    run_permutation_test,
)

__all__ = [
    "PolymorphismMultiGContainerTools",
    "extract_groups",
    "permute_alleles",
    "permute_intra_group_alleles",
    "permute_intra_group_mono_g",
    "permute_mono_g",
    "permute_multi_g",
    "ALTERNATIVES",
    "PERMUTATION_METHODS",
    "PermutationTestResult",
    "empirical_p_value",
    "run_permutation_test",
]
