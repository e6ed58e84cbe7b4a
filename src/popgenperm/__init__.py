"""
popgenperm - Population Sample Containers and Permutation Tests

Hierarchical containers for population-genetics samples (groups of
individuals carrying multilocus genotypes and sequences) and the resampling
operations used to build permutation-test null distributions over them.
"""

__version__ = "0.1.0"

from popgenperm.core.dataset import DataSet
from popgenperm.core.container import PolymorphismMultiGContainer
from popgenperm.stats.permutation import PolymorphismMultiGContainerTools
from popgenperm.stats.permutation_test import run_permutation_test

__all__ = [
    "DataSet",
    "PolymorphismMultiGContainer",
    "PolymorphismMultiGContainerTools",
    "run_permutation_test",
]
