"""
Locus and allele metadata for multilocus genotype data.

Biological Context:
    A marker study types every individual at a fixed panel of loci
    (microsatellites, SNPs, allozymes). Each locus has a ploidy (how many
    alleles one individual carries there) and a catalogue of alleles observed
    in the study. Genotypes do not store allele names; they store allele *keys*,
    i.e. positions in their locus's allele catalogue.

Structure:
    AnalyzedLoci   fixed number of locus slots (the study's marker panel)
      LocusInfo    name, ploidy, ordered allele catalogue
        AlleleInfo allele identifier (+ optional fragment size)

Examples:
    >>> loci = AnalyzedLoci(2)
    >>> loci.set_locus_info(0, LocusInfo("Msat1", LocusInfo.DIPLOID))
    >>> loci.add_allele_info_by_locus_name("Msat1", AlleleInfo("152", size=152.0))
    >>> loci.get_locus_info_by_name("Msat1").get_allele_info_key("152")
    0
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, Optional

from popgenperm.core.errors import (
    AlleleNotFoundError,
    DimensionError,
    DuplicateIdentifierError,
    IndexOutOfRangeError,
    LocusNotFoundError,
    PreconditionError,
    error_context,
)
from popgenperm.core.registry import OrderedRegistry

__all__ = ['AlleleInfo', 'LocusInfo', 'AnalyzedLoci']


@dataclass(frozen=True)
class AlleleInfo:
    """A known allele at one locus.

    Attributes:
        id: Allele identifier, unique within its locus
        size: Optional fragment length (e.g. microsatellite size in bp)
    """

    id: str
    size: Optional[float] = None


class LocusInfo:
    """
    Description of one locus: name, ploidy and allele catalogue.

    Ploidy Codes:
        HAPLODIPLOID (0): one or two alleles depending on the individual
        HAPLOID (1): exactly one allele
        DIPLOID (2): exactly two alleles
        UNKNOWN (9): not checked
    """

    HAPLODIPLOID = 0
    HAPLOID = 1
    DIPLOID = 2
    UNKNOWN = 9

    def __init__(self, name: str, ploidy: int = DIPLOID):
        if ploidy not in (self.HAPLODIPLOID, self.HAPLOID, self.DIPLOID, self.UNKNOWN):
            raise ValueError(f"Invalid ploidy code {ploidy} for locus {name!r}")
        self._name = name
        self._ploidy = ploidy
        self._alleles: OrderedRegistry[str, AlleleInfo] = OrderedRegistry(
            "allele id", "allele_key", AlleleNotFoundError
        )

    @property
    def name(self) -> str:
        return self._name

    @property
    def ploidy(self) -> int:
        return self._ploidy

    @property
    def number_of_alleles(self) -> int:
        return len(self._alleles)

    @property
    def allele_ids(self) -> list[str]:
        return self._alleles.keys()

    def accepts_allele_count(self, n_alleles: int) -> bool:
        """Whether a genotype carrying n_alleles is consistent with this ploidy."""
        if self._ploidy == self.UNKNOWN:
            return True
        if self._ploidy == self.HAPLODIPLOID:
            return n_alleles in (1, 2)
        return n_alleles == self._ploidy

    def add_allele_info(self, allele: AlleleInfo) -> None:
        self._alleles.add(allele.id, allele)

    def get_allele_info_by_id(self, allele_id: str) -> AlleleInfo:
        return self._alleles.get(allele_id)

    def get_allele_info_by_key(self, key: int) -> AlleleInfo:
        return self._alleles.get_at(key)

    def get_allele_info_key(self, allele_id: str) -> int:
        """Key (catalogue position) of an allele id, as stored in genotypes."""
        return self._alleles.position(allele_id)

    def clear(self) -> None:
        self._alleles.clear()

    def __iter__(self) -> Iterator[AlleleInfo]:
        return iter(self._alleles)

    def __repr__(self) -> str:
        return f"LocusInfo({self._name!r}, ploidy={self._ploidy}, n_alleles={len(self._alleles)})"


class AnalyzedLoci:
    """
    The marker panel of a study: a fixed number of locus slots.

    Slots start empty and are filled with set_locus_info(). The slot count is
    the number of loci every MultilocusGenotype in the owning DataSet has.

    Args:
        number_of_loci: Number of slots (>= 1)

    Raises:
        DimensionError: If number_of_loci < 1
    """

    def __init__(self, number_of_loci: int):
        if number_of_loci < 1:
            raise DimensionError(f"number of loci must be >= 1, got {number_of_loci}")
        self._loci: list[Optional[LocusInfo]] = [None] * number_of_loci

    @property
    def number_of_loci(self) -> int:
        return len(self._loci)

    def _check_position(self, locus_position: int) -> None:
        if not 0 <= locus_position < len(self._loci):
            raise IndexOutOfRangeError(locus_position, (0, len(self._loci)), field="locus_position")

    def set_locus_info(self, locus_position: int, locus: LocusInfo) -> None:
        self._check_position(locus_position)
        for i, existing in enumerate(self._loci):
            if i != locus_position and existing is not None and existing.name == locus.name:
                raise DuplicateIdentifierError("locus name", locus.name)
        self._loci[locus_position] = locus

    def is_locus_defined(self, locus_position: int) -> bool:
        self._check_position(locus_position)
        return self._loci[locus_position] is not None

    def get_locus_info_at_position(self, locus_position: int) -> LocusInfo:
        self._check_position(locus_position)
        locus = self._loci[locus_position]
        if locus is None:
            raise PreconditionError(f"no locus defined at locus_position {locus_position}")
        return locus

    def get_locus_info_position(self, locus_name: str) -> int:
        for i, locus in enumerate(self._loci):
            if locus is not None and locus.name == locus_name:
                return i
        raise LocusNotFoundError(locus_name)

    def get_locus_info_by_name(self, locus_name: str) -> LocusInfo:
        return self._loci[self.get_locus_info_position(locus_name)]

    def add_allele_info_by_locus_name(self, locus_name: str, allele: AlleleInfo) -> None:
        with error_context("AnalyzedLoci.add_allele_info_by_locus_name"):
            self.get_locus_info_by_name(locus_name).add_allele_info(allele)

    def add_allele_info_by_locus_position(self, locus_position: int, allele: AlleleInfo) -> None:
        with error_context("AnalyzedLoci.add_allele_info_by_locus_position"):
            self.get_locus_info_at_position(locus_position).add_allele_info(allele)

    def get_ploidy_by_locus_name(self, locus_name: str) -> int:
        return self.get_locus_info_by_name(locus_name).ploidy

    def get_ploidy_by_locus_position(self, locus_position: int) -> int:
        return self.get_locus_info_at_position(locus_position).ploidy

    def number_of_alleles_for_loci(self) -> list[int]:
        """Catalogue size per slot (0 for undefined slots)."""
        return [0 if locus is None else locus.number_of_alleles for locus in self._loci]

    def __iter__(self) -> Iterator[Optional[LocusInfo]]:
        return iter(self._loci)

    def __repr__(self) -> str:
        defined = sum(locus is not None for locus in self._loci)
        return f"AnalyzedLoci({len(self._loci)} slots, {defined} defined)"
