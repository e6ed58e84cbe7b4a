"""
Sampled individuals and the geographic localities they were collected at.

An Individual carries an identity plus optional collection metadata (sex,
date, coordinate, locality), an optional set of sequences keyed by position
(e.g. position 0 = mtDNA COI, 1 = nuclear intron) and an optional
MultilocusGenotype.

The locality is stored by *name*; the owning DataSet resolves it to a
Locality object. Individuals never hold Locality instances, so copying or
moving an individual between groups cannot alias locality data.
"""

from __future__ import annotations

import copy
import datetime
from dataclasses import dataclass
from typing import NamedTuple, Optional, Sequence as SequenceType

from popgenperm.core.errors import (
    AlphabetMismatchError,
    DuplicateIdentifierError,
    PreconditionError,
    SequenceNotFoundError,
)
from popgenperm.core.genotype import MonolocusGenotype, MultilocusGenotype
from popgenperm.core.loci import LocusInfo

__all__ = ['Coordinate', 'Locality', 'Sequence', 'Individual']


class Coordinate(NamedTuple):
    """Planar sampling coordinate (e.g. longitude/latitude or UTM)."""

    x: float
    y: float


@dataclass
class Locality:
    """A named geographic reference point."""

    name: str
    x: float = 0.0
    y: float = 0.0

    @property
    def coord(self) -> Coordinate:
        return Coordinate(self.x, self.y)


@dataclass(frozen=True)
class Sequence:
    """A named biological sequence.

    Attributes:
        name: Sequence name, unique within an individual
        content: Residues as a string
        alphabet: Alphabet type name (e.g. "DNA", "RNA", "Protein")
    """

    name: str
    content: str
    alphabet: str = "DNA"

    def __len__(self) -> int:
        return len(self.content)


class Individual:
    """
    One sampled organism.

    Args:
        individual_id: Identifier, unique within the owning group
        sex: Optional sex code (0 unknown, 1 male, 2 female)
        date: Optional collection date
        coord: Optional (x, y) sampling coordinate
        locality: Optional locality name, resolved by the owning DataSet
    """

    def __init__(
        self,
        individual_id: str,
        sex: Optional[int] = None,
        date: Optional[datetime.date] = None,
        coord: Optional[tuple[float, float]] = None,
        locality: Optional[str] = None,
    ):
        self._id = individual_id
        self.sex = sex
        self.date = date
        self.coord = coord
        self.locality = locality
        self._sequences: dict[int, Sequence] = {}
        self._genotype: Optional[MultilocusGenotype] = None

    @property
    def id(self) -> str:
        return self._id

    @property
    def coord(self) -> Optional[Coordinate]:
        return self._coord

    @coord.setter
    def coord(self, value: Optional[tuple[float, float]]) -> None:
        self._coord = None if value is None else Coordinate(*value)

    # -------------------------------------------------------------------------
    # Sequences
    # -------------------------------------------------------------------------

    @property
    def has_sequences(self) -> bool:
        return bool(self._sequences)

    @property
    def number_of_sequences(self) -> int:
        return len(self._sequences)

    def _require_sequences(self) -> None:
        if not self._sequences:
            raise PreconditionError(f"individual {self._id!r} has no sequences")

    @property
    def sequence_alphabet(self) -> str:
        self._require_sequences()
        return next(iter(self._sequences.values())).alphabet

    def has_sequence_at_position(self, sequence_position: int) -> bool:
        return sequence_position in self._sequences

    def add_sequence(self, sequence_position: int, sequence: Sequence) -> None:
        """Store a sequence at a position.

        Raises:
            DuplicateIdentifierError: If the position or the sequence name is taken
            AlphabetMismatchError: If existing sequences use another alphabet
        """
        if sequence_position in self._sequences:
            raise DuplicateIdentifierError("sequence_position", sequence_position, field="sequence_position")
        if any(s.name == sequence.name for s in self._sequences.values()):
            raise DuplicateIdentifierError("sequence name", sequence.name)
        if self._sequences and sequence.alphabet != self.sequence_alphabet:
            raise AlphabetMismatchError(self.sequence_alphabet, sequence.alphabet)
        self._sequences[sequence_position] = sequence
        self._sequences = dict(sorted(self._sequences.items()))

    def get_sequence_at_position(self, sequence_position: int) -> Sequence:
        self._require_sequences()
        try:
            return self._sequences[sequence_position]
        except KeyError:
            raise SequenceNotFoundError(sequence_position, field="sequence_position") from None

    def get_sequence_position(self, sequence_name: str) -> int:
        self._require_sequences()
        for position, sequence in self._sequences.items():
            if sequence.name == sequence_name:
                return position
        raise SequenceNotFoundError(sequence_name, field="sequence_name")

    def get_sequence_by_name(self, sequence_name: str) -> Sequence:
        return self._sequences[self.get_sequence_position(sequence_name)]

    def delete_sequence_at_position(self, sequence_position: int) -> None:
        self.get_sequence_at_position(sequence_position)
        del self._sequences[sequence_position]

    def delete_sequence_by_name(self, sequence_name: str) -> None:
        del self._sequences[self.get_sequence_position(sequence_name)]

    @property
    def sequence_names(self) -> list[str]:
        self._require_sequences()
        return [s.name for s in self._sequences.values()]

    @property
    def sequence_positions(self) -> list[int]:
        return list(self._sequences)

    # -------------------------------------------------------------------------
    # Genotype
    # -------------------------------------------------------------------------

    @property
    def has_genotype(self) -> bool:
        return self._genotype is not None

    @property
    def genotype(self) -> MultilocusGenotype:
        if self._genotype is None:
            raise PreconditionError(f"individual {self._id!r} has no genotype")
        return self._genotype

    def set_genotype(self, genotype: MultilocusGenotype) -> None:
        self._genotype = genotype.copy()

    def init_genotype(self, number_of_loci: int) -> None:
        """Attach an all-missing genotype with number_of_loci slots.

        Raises:
            PreconditionError: If the individual already has a genotype
            DimensionError: If number_of_loci < 1
        """
        if self._genotype is not None:
            raise PreconditionError(f"individual {self._id!r} already has a genotype")
        self._genotype = MultilocusGenotype(number_of_loci)

    def delete_genotype(self) -> None:
        if self._genotype is None:
            raise PreconditionError(f"individual {self._id!r} has no genotype")
        self._genotype = None

    def set_monolocus_genotype(self, locus_position: int, genotype: MonolocusGenotype) -> None:
        self.genotype.set_monolocus_genotype(locus_position, genotype)

    def set_monolocus_genotype_by_allele_key(self, locus_position: int, allele_keys: SequenceType[int]) -> None:
        self.genotype.set_monolocus_genotype_by_allele_key(locus_position, allele_keys)

    def set_monolocus_genotype_by_allele_id(
        self,
        locus_position: int,
        allele_ids: SequenceType[str],
        locus_info: LocusInfo,
    ) -> None:
        self.genotype.set_monolocus_genotype_by_allele_id(locus_position, allele_ids, locus_info)

    def get_monolocus_genotype(self, locus_position: int) -> MonolocusGenotype:
        return self.genotype.get_monolocus_genotype(locus_position)

    def copy(self) -> Individual:
        return copy.deepcopy(self)

    def __repr__(self) -> str:
        return (
            f"Individual({self._id!r}, sequences={len(self._sequences)}, "
            f"genotyped={self._genotype is not None})"
        )
