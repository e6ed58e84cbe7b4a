"""
Core data containers: the hierarchical DataSet and its flat projections.
"""

from .container import PolymorphismMultiGContainer, PolymorphismSequenceContainer
from .dataset import AnalyzedSequences, DataSet
from .errors import (
    AlleleNotFoundError,
    AlphabetMismatchError,
    DimensionError,
    DuplicateIdentifierError,
    GroupNotFoundError,
    IndexOutOfRangeError,
    IndividualNotFoundError,
    LocalityNotFoundError,
    LocusNotFoundError,
    NotFoundError,
    PloidyError,
    PopulationDataError,
    PreconditionError,
    SequenceNotFoundError,
    error_context,
    error_scope,
)
from .genotype import (
    BiAlleleMonolocusGenotype,
    MonoAlleleMonolocusGenotype,
    MonolocusGenotype,
    MultilocusGenotype,
)
from .group import Group
from .individual import Coordinate, Individual, Locality, Sequence
from .loci import AlleleInfo, AnalyzedLoci, LocusInfo
from .registry import OrderedRegistry

__all__ = [
    "PolymorphismMultiGContainer",
    "PolymorphismSequenceContainer",
    "AnalyzedSequences",
    "DataSet",
    "AlleleNotFoundError",
    "AlphabetMismatchError",
    "DimensionError",
    "DuplicateIdentifierError",
    "GroupNotFoundError",
    "IndexOutOfRangeError",
    "IndividualNotFoundError",
    "LocalityNotFoundError",
    "LocusNotFoundError",
    "NotFoundError",
    "PloidyError",
    "PopulationDataError",
    "PreconditionError",
    "SequenceNotFoundError",
    "error_context",
    "error_scope",
    "BiAlleleMonolocusGenotype",
    "MonoAlleleMonolocusGenotype",
    "MonolocusGenotype",
    "MultilocusGenotype",
    "Group",
    "Coordinate",
    "Individual",
    "Locality",
    "Sequence",
    "AlleleInfo",
    "AnalyzedLoci",
    "LocusInfo",
    "OrderedRegistry",
]
