"""
Genotype values: one locus (MonolocusGenotype) and a full panel (MultilocusGenotype).

A MonolocusGenotype is an immutable tuple of allele keys (positions in the
locus's allele catalogue, see LocusInfo). Its cardinality is the ploidy it
was observed at: one key for a haploid locus, two for a diploid one.

A MultilocusGenotype has one slot per analyzed locus; a slot holds a
MonolocusGenotype or None when the individual was not typed at that locus.

Examples:
    >>> mg = MultilocusGenotype(2)
    >>> mg.set_monolocus_genotype_by_allele_key(0, [0, 1])
    >>> mg.set_monolocus_genotype(1, MonoAlleleMonolocusGenotype(3))
    >>> mg.get_monolocus_genotype(0)
    BiAlleleMonolocusGenotype(first=0, second=1)
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING, Iterable, Iterator, Optional, Sequence

from popgenperm.core.errors import (
    DimensionError,
    IndexOutOfRangeError,
    PreconditionError,
)

if TYPE_CHECKING:
    from popgenperm.core.loci import LocusInfo

__all__ = [
    'MonolocusGenotype',
    'MonoAlleleMonolocusGenotype',
    'BiAlleleMonolocusGenotype',
    'MultilocusGenotype',
]


class MonolocusGenotype(ABC):
    """Genotype at a single locus, identified by allele keys."""

    @property
    @abstractmethod
    def allele_index(self) -> tuple[int, ...]:
        """Allele keys carried at this locus."""

    @property
    def ploidy(self) -> int:
        return len(self.allele_index)

    @property
    def is_homozygous(self) -> bool:
        return len(set(self.allele_index)) == 1

    @staticmethod
    def from_keys(keys: Sequence[int]) -> MonolocusGenotype:
        """Build the genotype variant matching the number of keys.

        Raises:
            DimensionError: If keys is empty or has more than two entries
        """
        keys = list(keys)
        if len(keys) == 1:
            return MonoAlleleMonolocusGenotype(keys[0])
        if len(keys) == 2:
            return BiAlleleMonolocusGenotype(keys[0], keys[1])
        if not keys:
            raise DimensionError("no key in allele_keys")
        raise DimensionError(f"at most two allele keys per locus, got {len(keys)}")


@dataclass(frozen=True)
class MonoAlleleMonolocusGenotype(MonolocusGenotype):
    """Haploid genotype: a single allele."""

    allele: int

    @property
    def allele_index(self) -> tuple[int, ...]:
        return (self.allele,)


@dataclass(frozen=True)
class BiAlleleMonolocusGenotype(MonolocusGenotype):
    """Diploid genotype: two alleles, in observed order."""

    first: int
    second: int

    @property
    def allele_index(self) -> tuple[int, ...]:
        return (self.first, self.second)

    def same_alleles(self, other: BiAlleleMonolocusGenotype) -> bool:
        """Unordered comparison (A1/A2 is the same genotype as A2/A1)."""
        return sorted(self.allele_index) == sorted(other.allele_index)


class MultilocusGenotype:
    """
    One individual's genotypes across the full locus panel.

    Args:
        number_of_loci: Number of locus slots (>= 1), all initially missing

    Raises:
        DimensionError: If number_of_loci < 1
    """

    def __init__(self, number_of_loci: int):
        if number_of_loci < 1:
            raise DimensionError(f"number of loci must be > 0, got {number_of_loci}")
        self._loci: list[Optional[MonolocusGenotype]] = [None] * number_of_loci

    @classmethod
    def from_monolocus_genotypes(
        cls, genotypes: Iterable[Optional[MonolocusGenotype]]
    ) -> MultilocusGenotype:
        genotypes = list(genotypes)
        mg = cls(len(genotypes))
        mg._loci = genotypes
        return mg

    @property
    def number_of_loci(self) -> int:
        return len(self._loci)

    @property
    def number_of_genotyped_loci(self) -> int:
        return sum(g is not None for g in self._loci)

    def _check_position(self, locus_position: int) -> None:
        if not 0 <= locus_position < len(self._loci):
            raise IndexOutOfRangeError(locus_position, (0, len(self._loci)), field="locus_position")

    def set_monolocus_genotype(self, locus_position: int, genotype: MonolocusGenotype) -> None:
        self._check_position(locus_position)
        self._loci[locus_position] = genotype

    def set_monolocus_genotype_by_allele_key(self, locus_position: int, allele_keys: Sequence[int]) -> None:
        self._check_position(locus_position)
        self._loci[locus_position] = MonolocusGenotype.from_keys(allele_keys)

    def set_monolocus_genotype_by_allele_id(
        self,
        locus_position: int,
        allele_ids: Sequence[str],
        locus_info: LocusInfo,
    ) -> None:
        """Set a genotype from allele identifiers, resolved through locus_info.

        Raises:
            AlleleNotFoundError: If an id is not in the locus's allele catalogue
        """
        self._check_position(locus_position)
        keys = [locus_info.get_allele_info_key(allele_id) for allele_id in allele_ids]
        self._loci[locus_position] = MonolocusGenotype.from_keys(keys)

    def set_monolocus_genotype_as_missing(self, locus_position: int) -> None:
        self._check_position(locus_position)
        self._loci[locus_position] = None

    def is_monolocus_genotype_missing(self, locus_position: int) -> bool:
        self._check_position(locus_position)
        return self._loci[locus_position] is None

    def is_all_missing(self) -> bool:
        return all(g is None for g in self._loci)

    def get_monolocus_genotype(self, locus_position: int) -> MonolocusGenotype:
        self._check_position(locus_position)
        genotype = self._loci[locus_position]
        if genotype is None:
            raise PreconditionError(f"genotype missing at locus_position {locus_position}")
        return genotype

    def monolocus_genotypes(self) -> list[Optional[MonolocusGenotype]]:
        """All slots in locus order, None where missing."""
        return list(self._loci)

    def copy(self) -> MultilocusGenotype:
        # Slot values are immutable, a shallow list copy is enough
        return MultilocusGenotype.from_monolocus_genotypes(self._loci)

    def __deepcopy__(self, memo) -> MultilocusGenotype:
        return self.copy()

    def __len__(self) -> int:
        return len(self._loci)

    def __iter__(self) -> Iterator[Optional[MonolocusGenotype]]:
        return iter(self._loci)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, MultilocusGenotype):
            return NotImplemented
        return self._loci == other._loci

    __hash__ = None

    def __repr__(self) -> str:
        slots = ["NA" if g is None else "/".join(map(str, g.allele_index)) for g in self._loci]
        return f"MultilocusGenotype([{', '.join(slots)}])"
