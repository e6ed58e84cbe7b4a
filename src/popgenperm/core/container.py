"""
Flat, analysis-ready projections of a DataSet.

The hierarchical DataSet is the authoritative, editable store. Statistics and
permutation tests work on flat projections instead:

    PolymorphismMultiGContainer
        ordered (MultilocusGenotype, group_id) entries + group_id -> name map.
        Group ids are labels: they need not be contiguous or match DataSet
        positions, and a permutation can reassign them freely.

    PolymorphismSequenceContainer
        ordered (Sequence, group_id) entries sharing one alphabet.

Projections own copies of their genotypes/sequences; nothing is shared with
the DataSet they came from.

Examples:
    >>> pmgc = dataset.get_polymorphism_multig_container()
    >>> pmgc.get_all_group_ids()
    [1, 2]
    >>> pmgc.allele_counts(0, group_ids={1})
    {0: 3, 1: 1}
    >>> pmgc.to_frame().head()
"""

from __future__ import annotations

from collections import Counter
from typing import Iterable, Iterator, Optional

import numpy as np
import pandas as pd

from popgenperm.core.errors import (
    AlphabetMismatchError,
    DimensionError,
    DuplicateIdentifierError,
    IndexOutOfRangeError,
    SequenceNotFoundError,
)
from popgenperm.core.genotype import MultilocusGenotype
from popgenperm.core.individual import Sequence

__all__ = ['PolymorphismMultiGContainer', 'PolymorphismSequenceContainer']


class PolymorphismMultiGContainer:
    """
    Ordered multilocus genotypes tagged with group ids.

    Attributes are private; use the accessors. len(container) is the number
    of individuals; iterating yields (MultilocusGenotype, group_id) pairs.
    """

    def __init__(self):
        self._genotypes: list[MultilocusGenotype] = []
        self._group_ids: list[int] = []
        self._group_names: dict[int, str] = {}

    def _check_position(self, position: int) -> None:
        if not 0 <= position < len(self._genotypes):
            raise IndexOutOfRangeError(position, (0, len(self._genotypes)), field="position")

    # -------------------------------------------------------------------------
    # Entries
    # -------------------------------------------------------------------------

    def add_multilocus_genotype(self, genotype: MultilocusGenotype, group_id: int) -> None:
        """Append a copy of genotype under group_id."""
        self._genotypes.append(genotype.copy())
        self._group_ids.append(group_id)

    def get_multilocus_genotype(self, position: int) -> MultilocusGenotype:
        self._check_position(position)
        return self._genotypes[position]

    def remove_multilocus_genotype(self, position: int) -> MultilocusGenotype:
        """Detach and return the genotype at position."""
        self._check_position(position)
        self._group_ids.pop(position)
        return self._genotypes.pop(position)

    def delete_multilocus_genotype(self, position: int) -> None:
        self.remove_multilocus_genotype(position)

    def get_group_id(self, position: int) -> int:
        self._check_position(position)
        return self._group_ids[position]

    def set_group_id(self, position: int, group_id: int) -> None:
        self._check_position(position)
        self._group_ids[position] = group_id

    @property
    def group_id_labels(self) -> list[int]:
        """Group id of every entry, in entry order."""
        return list(self._group_ids)

    def clear(self) -> None:
        self._genotypes.clear()
        self._group_ids.clear()
        self._group_names.clear()

    # -------------------------------------------------------------------------
    # Groups
    # -------------------------------------------------------------------------

    def get_all_group_ids(self) -> list[int]:
        """Distinct group ids carried by entries, ascending."""
        return sorted(set(self._group_ids))

    def group_exists(self, group_id: int) -> bool:
        return group_id in self._group_ids

    @property
    def number_of_groups(self) -> int:
        return len(set(self._group_ids))

    def get_group_name(self, group_id: int) -> str:
        name = self._group_names.get(group_id)
        return name if name else str(group_id)

    def set_group_name(self, group_id: int, name: str) -> None:
        self._group_names[group_id] = name

    def add_group_name(self, group_id: int, name: str) -> None:
        """Register a name for a group id that has none yet.

        Raises:
            DuplicateIdentifierError: If group_id already has a name
        """
        if group_id in self._group_names:
            raise DuplicateIdentifierError("group name for id", group_id)
        self._group_names[group_id] = name

    @property
    def group_names(self) -> dict[int, str]:
        """Explicitly registered names (group_id -> name)."""
        return dict(self._group_names)

    def get_group_size(self, group_id: int) -> int:
        return self._group_ids.count(group_id)

    def get_group_size_for_locus(self, group_id: int, locus_position: int) -> int:
        """Number of individuals of a group typed at a locus."""
        return sum(
            1
            for mg, gid in zip(self._genotypes, self._group_ids)
            if gid == group_id and not mg.is_monolocus_genotype_missing(locus_position)
        )

    # -------------------------------------------------------------------------
    # Loci and alleles
    # -------------------------------------------------------------------------

    def is_aligned(self) -> bool:
        """Whether every genotype has the same number of loci."""
        return len({mg.number_of_loci for mg in self._genotypes}) <= 1

    @property
    def number_of_loci(self) -> int:
        """Shared number of loci (0 for an empty container).

        Raises:
            DimensionError: If genotypes have different numbers of loci
        """
        if not self._genotypes:
            return 0
        if not self.is_aligned():
            raise DimensionError("multilocus genotypes do not share a number of loci")
        return self._genotypes[0].number_of_loci

    def allele_counts(
        self,
        locus_position: int,
        group_ids: Optional[Iterable[int]] = None,
    ) -> dict[int, int]:
        """Count allele keys at a locus, optionally restricted to some groups.

        Missing genotypes contribute nothing. Keys are returned ascending.
        """
        selected = None if group_ids is None else set(group_ids)
        counts: Counter[int] = Counter()
        for mg, gid in zip(self._genotypes, self._group_ids):
            if selected is not None and gid not in selected:
                continue
            if mg.is_monolocus_genotype_missing(locus_position):
                continue
            counts.update(mg.get_monolocus_genotype(locus_position).allele_index)
        return dict(sorted(counts.items()))

    # -------------------------------------------------------------------------
    # Export
    # -------------------------------------------------------------------------

    def to_frame(self) -> pd.DataFrame:
        """
        One row per individual: group_id, group_name, then one column per locus.

        Locus cells hold "k1/k2" allele-key strings (or "k" for haploid
        loci) and NaN where the genotype is missing.
        """
        n_loci = self.number_of_loci
        columns = [f"locus_{j}" for j in range(n_loci)]
        rows = []
        for mg in self._genotypes:
            rows.append([
                np.nan if g is None else "/".join(str(a) for a in g.allele_index)
                for g in mg.monolocus_genotypes()
            ])
        frame = pd.DataFrame(rows, columns=columns, dtype=object)
        frame.insert(0, "group_name", [self.get_group_name(gid) for gid in self._group_ids])
        frame.insert(0, "group_id", np.asarray(self._group_ids, dtype=np.int64))
        return frame

    def copy(self) -> PolymorphismMultiGContainer:
        result = PolymorphismMultiGContainer()
        result._genotypes = [mg.copy() for mg in self._genotypes]
        result._group_ids = list(self._group_ids)
        result._group_names = dict(self._group_names)
        return result

    def __deepcopy__(self, memo) -> PolymorphismMultiGContainer:
        return self.copy()

    def __len__(self) -> int:
        return len(self._genotypes)

    def __iter__(self) -> Iterator[tuple[MultilocusGenotype, int]]:
        return iter(zip(self._genotypes, self._group_ids))

    def __repr__(self) -> str:
        return (
            f"PolymorphismMultiGContainer({len(self._genotypes)} individuals, "
            f"groups={self.get_all_group_ids()})"
        )


class PolymorphismSequenceContainer:
    """
    Ordered sequences tagged with group ids, all in one alphabet.

    Args:
        alphabet: Alphabet type name shared by every sequence
    """

    def __init__(self, alphabet: str):
        self._alphabet = alphabet
        self._sequences: list[Sequence] = []
        self._group_ids: list[int] = []

    @property
    def alphabet(self) -> str:
        return self._alphabet

    def add_sequence(self, sequence: Sequence, group_id: int) -> None:
        """
        Raises:
            DuplicateIdentifierError: If a sequence with that name is present
            AlphabetMismatchError: If the sequence uses another alphabet
        """
        if sequence.alphabet != self._alphabet:
            raise AlphabetMismatchError(self._alphabet, sequence.alphabet)
        if any(s.name == sequence.name for s in self._sequences):
            raise DuplicateIdentifierError("sequence name", sequence.name)
        self._sequences.append(sequence)
        self._group_ids.append(group_id)

    def _position(self, sequence_name: str) -> int:
        for i, sequence in enumerate(self._sequences):
            if sequence.name == sequence_name:
                return i
        raise SequenceNotFoundError(sequence_name)

    def get_sequence_at_position(self, position: int) -> Sequence:
        if not 0 <= position < len(self._sequences):
            raise IndexOutOfRangeError(position, (0, len(self._sequences)), field="sequence_position")
        return self._sequences[position]

    def get_sequence_by_name(self, sequence_name: str) -> Sequence:
        return self._sequences[self._position(sequence_name)]

    def get_group_id(self, sequence_name: str) -> int:
        return self._group_ids[self._position(sequence_name)]

    @property
    def sequence_names(self) -> list[str]:
        return [s.name for s in self._sequences]

    def get_all_group_ids(self) -> list[int]:
        return sorted(set(self._group_ids))

    def __len__(self) -> int:
        return len(self._sequences)

    def __iter__(self) -> Iterator[tuple[Sequence, int]]:
        return iter(zip(self._sequences, self._group_ids))

    def __repr__(self) -> str:
        return f"PolymorphismSequenceContainer({len(self._sequences)} sequences, alphabet={self._alphabet!r})"
