"""
DataSet: the authoritative, consistency-checked store of a population sample.

Hierarchy:
    DataSet
      AnalyzedLoci        0..1  marker panel (number of loci, ploidy, alleles)
      AnalyzedSequences   0..1  shared sequence alphabet
      Locality            *     geographic reference points (unique names)
      Group               *     populations (unique numeric ids)
        Individual        *     samples (ids unique within a group)
          Sequence        *     keyed by position
          MultilocusGenotype 0..1

Access Paths:
    Every nested entity is reachable by position and by identifier. Operations
    on individuals address the group by *position* and the individual by
    position or id, then delegate downward. Errors raised at any depth are
    reported against the public DataSet operation, with a path naming the
    group/individual that was traversed (see core.errors.error_context).

Consistency:
    - All checks happen before mutation: an operation either succeeds or
      leaves the DataSet unchanged.
    - Genotypes must match the AnalyzedLoci (number of loci, ploidy).
    - The first sequence added fixes the DataSet-wide alphabet.
    - Stored entities are private copies. Getters hand out copies too, so
      every change goes through a checked DataSet operation.
    - DataSet.copy() shares nothing.

Examples:
    >>> ds = DataSet()
    >>> ds.init_analyzed_loci(2)
    >>> ds.add_empty_group(1)
    >>> ds.add_empty_individual_to_group(0, "ind1")
    >>> ds.init_individual_genotype_in_group(0, 0)
    >>> ds.set_individual_monolocus_genotype_by_allele_key_in_group(0, 0, 0, [0, 1])
    >>> pmgc = ds.get_polymorphism_multig_container()
"""

from __future__ import annotations

import copy
import datetime
import logging
from contextlib import contextmanager
from typing import Iterable, Iterator, Mapping, Optional, Sequence as SequenceType

from popgenperm.core.container import PolymorphismMultiGContainer, PolymorphismSequenceContainer
from popgenperm.core.errors import (
    AlphabetMismatchError,
    DimensionError,
    DuplicateIdentifierError,
    GroupNotFoundError,
    IndexOutOfRangeError,
    LocalityNotFoundError,
    PloidyError,
    PreconditionError,
    error_context,
    error_scope,
)
from popgenperm.core.genotype import MonolocusGenotype, MultilocusGenotype
from popgenperm.core.group import Group
from popgenperm.core.individual import Coordinate, Individual, Locality, Sequence
from popgenperm.core.loci import AlleleInfo, AnalyzedLoci, LocusInfo
from popgenperm.core.registry import OrderedRegistry

__all__ = ['AnalyzedSequences', 'DataSet']

logger = logging.getLogger(__name__)


class AnalyzedSequences:
    """Sequence-level metadata shared by a DataSet (currently the alphabet)."""

    def __init__(self, alphabet: str):
        self._alphabet = alphabet

    @property
    def alphabet(self) -> str:
        return self._alphabet


class DataSet:
    """
    Hierarchical container of localities, groups, individuals and their data.

    Constructed empty and populated incrementally (typically by an importer).
    See the module docstring for the hierarchy and consistency rules.
    """

    def __init__(self):
        self._analyzed_loci: Optional[AnalyzedLoci] = None
        self._analyzed_sequences: Optional[AnalyzedSequences] = None
        self._localities: OrderedRegistry[str, Locality] = OrderedRegistry(
            "locality name", "locality_position", LocalityNotFoundError
        )
        self._groups: OrderedRegistry[int, Group] = OrderedRegistry(
            "group id", "group_position", GroupNotFoundError
        )
        # Largest group id ever held; split_group allocates above it
        self._group_id_high_water = -1

    # =========================================================================
    # Internal helpers
    # =========================================================================

    def _individual_at(self, group_position: int, individual_position: int) -> Individual:
        group = self._groups.get_at(group_position)
        with error_scope(f"group {group.group_id}"):
            return group.get_individual_at_position(individual_position)

    @contextmanager
    def _individual_in_group(
        self,
        operation: str,
        group_position: int,
        individual_position: int,
    ) -> Iterator[Individual]:
        """Resolve (group position, individual position) under one public operation."""
        with error_context(operation):
            group = self._groups.get_at(group_position)
            with error_scope(f"group {group.group_id}"):
                individual = group.get_individual_at_position(individual_position)
                with error_scope(f"individual {individual.id!r}"):
                    yield individual

    def _all_individuals(self) -> Iterator[Individual]:
        for group in self._groups:
            yield from group

    def _check_ploidy(self, locus_position: int, genotype: Optional[MonolocusGenotype]) -> None:
        if genotype is None or self._analyzed_loci is None:
            return
        if not self._analyzed_loci.is_locus_defined(locus_position):
            return
        locus = self._analyzed_loci.get_locus_info_at_position(locus_position)
        if not locus.accepts_allele_count(genotype.ploidy):
            raise PloidyError(
                f"genotype with {genotype.ploidy} allele(s) does not fit locus "
                f"{locus.name!r} (ploidy {locus.ploidy})",
                field="locus_position",
                identifier=locus_position,
            )

    def _check_genotype(self, genotype: MultilocusGenotype) -> None:
        n_loci = self.number_of_loci
        if genotype.number_of_loci != n_loci:
            raise DimensionError(
                f"genotype has {genotype.number_of_loci} loci, analyzed loci has {n_loci}"
            )
        for locus_position, monolocus in enumerate(genotype.monolocus_genotypes()):
            self._check_ploidy(locus_position, monolocus)

    def _check_alphabet(self, alphabet: str) -> None:
        if self._analyzed_sequences is not None and self._analyzed_sequences.alphabet != alphabet:
            raise AlphabetMismatchError(self._analyzed_sequences.alphabet, alphabet)

    def _establish_alphabet(self, alphabet: str) -> None:
        if self._analyzed_sequences is None:
            self._analyzed_sequences = AnalyzedSequences(alphabet)
            logger.debug(f"Sequence alphabet established: {alphabet}")

    def _check_incoming_individual(self, individual: Individual, alphabet: Optional[str]) -> Optional[str]:
        """Validate an individual entering the DataSet; return the alphabet it implies."""
        with error_scope(f"individual {individual.id!r}"):
            if individual.has_genotype:
                self._check_genotype(individual.genotype)
            if individual.locality is not None:
                self._localities.get(individual.locality)
            if individual.has_sequences:
                incoming = individual.sequence_alphabet
                self._check_alphabet(incoming)
                if alphabet is not None and incoming != alphabet:
                    raise AlphabetMismatchError(alphabet, incoming)
                return incoming
        return alphabet

    def _register_group_id(self, group_id: int) -> None:
        self._group_id_high_water = max(self._group_id_high_water, group_id)

    # =========================================================================
    # Localities
    # =========================================================================

    def add_locality(self, locality: Locality) -> None:
        with error_context("DataSet.add_locality"):
            self._localities.add(locality.name, copy.deepcopy(locality))

    def get_locality_position(self, name: str) -> int:
        with error_context("DataSet.get_locality_position"):
            return self._localities.position(name)

    def get_locality_at_position(self, locality_position: int) -> Locality:
        with error_context("DataSet.get_locality_at_position"):
            return copy.deepcopy(self._localities.get_at(locality_position))

    def get_locality_by_name(self, name: str) -> Locality:
        with error_context("DataSet.get_locality_by_name"):
            return copy.deepcopy(self._localities.get(name))

    def _delete_locality(self, name: str) -> None:
        users = [ind.id for ind in self._all_individuals() if ind.locality == name]
        if users:
            raise PreconditionError(
                f"locality {name!r} is still referenced by {len(users)} individual(s), e.g. {users[0]!r}"
            )
        self._localities.pop(name)

    def delete_locality_at_position(self, locality_position: int) -> None:
        with error_context("DataSet.delete_locality_at_position"):
            self._delete_locality(self._localities.key_at(locality_position))

    def delete_locality_by_name(self, name: str) -> None:
        with error_context("DataSet.delete_locality_by_name"):
            self._localities.get(name)
            self._delete_locality(name)

    @property
    def number_of_localities(self) -> int:
        return len(self._localities)

    @property
    def has_locality(self) -> bool:
        return len(self._localities) > 0

    @property
    def locality_names(self) -> list[str]:
        return self._localities.keys()

    # =========================================================================
    # Groups
    # =========================================================================

    def add_group(self, group: Group) -> None:
        """Store a copy of group, validating every individual it carries.

        Raises:
            DuplicateIdentifierError: If the group id is in use
        """
        with error_context("DataSet.add_group"):
            self._groups.check_key_free(group.group_id)
            alphabet = None
            for individual in group:
                alphabet = self._check_incoming_individual(individual, alphabet)
            self._groups.add(group.group_id, group.copy())
        if alphabet is not None:
            self._establish_alphabet(alphabet)
        self._register_group_id(group.group_id)
        logger.debug(f"Added group {group.group_id} ({len(group)} individuals)")

    def add_empty_group(self, group_id: int) -> None:
        with error_context("DataSet.add_empty_group"):
            self._groups.add(group_id, Group(group_id))
        self._register_group_id(group_id)

    def get_group_by_id(self, group_id: int) -> Group:
        with error_context("DataSet.get_group_by_id"):
            return self._groups.get(group_id).copy()

    def get_group_name(self, group_id: int) -> str:
        with error_context("DataSet.get_group_name"):
            return self._groups.get(group_id).name

    def set_group_name(self, group_id: int, group_name: str) -> None:
        with error_context("DataSet.set_group_name"):
            self._groups.get(group_id).name = group_name

    def get_group_position(self, group_id: int) -> int:
        with error_context("DataSet.get_group_position"):
            return self._groups.position(group_id)

    def get_group_at_position(self, group_position: int) -> Group:
        with error_context("DataSet.get_group_at_position"):
            return self._groups.get_at(group_position).copy()

    def delete_group_at_position(self, group_position: int) -> None:
        with error_context("DataSet.delete_group_at_position"):
            self._groups.pop_at(group_position)

    def delete_group_by_id(self, group_id: int) -> None:
        with error_context("DataSet.delete_group_by_id"):
            self._groups.pop(group_id)

    @property
    def number_of_groups(self) -> int:
        return len(self._groups)

    @property
    def group_ids(self) -> list[int]:
        return self._groups.keys()

    def _absorb(self, source_id: int, target_id: int) -> None:
        source = self._groups.pop(source_id)
        target = self._groups.get(target_id)
        while len(source):
            target.adopt_individual(source.remove_individual_at_position(0))

    def merge_two_groups(self, source_id: int, target_id: int) -> None:
        """
        Move every individual of source into target, then delete source.

        Raises:
            GroupNotFoundError: If either id is unknown
            PreconditionError: If source and target are the same group
            DuplicateIdentifierError: If an individual id exists in both groups
        """
        op = "DataSet.merge_two_groups"
        if source_id not in self._groups:
            raise GroupNotFoundError(source_id, field="source_id", operation=op)
        if target_id not in self._groups:
            raise GroupNotFoundError(target_id, field="target_id", operation=op)
        if source_id == target_id:
            raise PreconditionError(f"cannot merge group {source_id} into itself", operation=op)

        target = self._groups.get(target_id)
        with error_context(op, f"group {target_id}"):
            for individual_id in self._groups.get(source_id).individual_ids:
                target.check_individual_id_free(individual_id)

        n_moved = len(self._groups.get(source_id))
        self._absorb(source_id, target_id)
        logger.info(f"Merged group {source_id} into group {target_id} ({n_moved} individuals moved)")

    def merge_groups(self, group_ids: Iterable[int]) -> None:
        """
        Merge several groups into the one with the lowest id.

        Raises:
            DimensionError: If group_ids is empty
            GroupNotFoundError: If any id is unknown
            DuplicateIdentifierError: If individual ids clash across the groups
        """
        op = "DataSet.merge_groups"
        ids = list(group_ids)
        if not ids:
            raise DimensionError("at least one group id is required", operation=op)
        for group_id in ids:
            if group_id not in self._groups:
                raise GroupNotFoundError(group_id, field="group_ids", operation=op)

        ids = sorted(set(ids))
        destination = ids[0]
        seen = set(self._groups.get(destination).individual_ids)
        for group_id in ids[1:]:
            for individual_id in self._groups.get(group_id).individual_ids:
                if individual_id in seen:
                    raise DuplicateIdentifierError("individual id", individual_id, operation=op)
                seen.add(individual_id)

        for group_id in ids[1:]:
            self._absorb(group_id, destination)
        if len(ids) > 1:
            logger.info(f"Merged groups {ids[1:]} into group {destination}")

    def split_group(self, group_id: int, individual_selection: SequenceType[int]) -> int:
        """
        Move selected individuals of a group into a brand-new group.

        Positions refer to the group as it is before the split. The new group
        receives the individuals in selection order and is appended to the
        DataSet. Its id is one above the largest id this DataSet has ever
        held, so ids freed by deletion or merging are never reused.

        Args:
            group_id: Id of the group to split
            individual_selection: Positions of the individuals to move

        Returns:
            Id of the new group

        Raises:
            GroupNotFoundError: If group_id is unknown
            IndexOutOfRangeError: If a position is out of range
            DuplicateIdentifierError: If a position is selected twice
        """
        op = "DataSet.split_group"
        with error_context(op):
            source = self._groups.get(group_id)
        selection = list(individual_selection)
        n_source = len(source)
        seen: set[int] = set()
        for position in selection:
            if not 0 <= position < n_source:
                raise IndexOutOfRangeError(position, (0, n_source), field="individual_selection", operation=op)
            if position in seen:
                raise DuplicateIdentifierError(
                    "individual position", position, field="individual_selection", operation=op
                )
            seen.add(position)

        new_group_id = max(self._group_id_high_water, max(self._groups.keys(), default=-1)) + 1
        snapshot = [source.get_individual_at_position(p) for p in selection]
        new_group = Group(new_group_id)
        for individual in snapshot:
            new_group.adopt_individual(source.remove_individual_by_id(individual.id))
        self._groups.add(new_group_id, new_group)
        self._register_group_id(new_group_id)

        logger.info(f"Split {len(snapshot)} individuals from group {group_id} into new group {new_group_id}")
        return new_group_id

    # =========================================================================
    # Individuals
    # =========================================================================

    def add_individual_to_group(self, group_position: int, individual: Individual) -> None:
        """Store a copy of individual in the group at group_position.

        Raises:
            IndexOutOfRangeError: If group_position is out of range
            DuplicateIdentifierError: If the id is in use in that group
            DimensionError, PloidyError, PreconditionError: If its genotype
                does not fit the analyzed loci
            AlphabetMismatchError: If its sequences use another alphabet
            LocalityNotFoundError: If it refers to an unknown locality
        """
        with error_context("DataSet.add_individual_to_group"):
            group = self._groups.get_at(group_position)
            with error_scope(f"group {group.group_id}"):
                group.check_individual_id_free(individual.id)
            alphabet = self._check_incoming_individual(individual, None)
            group.add_individual(individual)
        if alphabet is not None:
            self._establish_alphabet(alphabet)
        logger.debug(f"Added individual {individual.id!r} to group {group.group_id}")

    def add_empty_individual_to_group(self, group_position: int, individual_id: str) -> None:
        with error_context("DataSet.add_empty_individual_to_group"):
            group = self._groups.get_at(group_position)
            with error_scope(f"group {group.group_id}"):
                group.add_empty_individual(individual_id)

    def number_of_individuals_in_group(self, group_position: int) -> int:
        with error_context("DataSet.number_of_individuals_in_group"):
            return self._groups.get_at(group_position).number_of_individuals

    def get_individual_position_in_group(self, group_position: int, individual_id: str) -> int:
        with error_context("DataSet.get_individual_position_in_group"):
            group = self._groups.get_at(group_position)
            with error_scope(f"group {group.group_id}"):
                return group.get_individual_position(individual_id)

    def get_individual_at_position_from_group(self, group_position: int, individual_position: int) -> Individual:
        with error_context("DataSet.get_individual_at_position_from_group"):
            return self._individual_at(group_position, individual_position).copy()

    def get_individual_by_id_from_group(self, group_position: int, individual_id: str) -> Individual:
        with error_context("DataSet.get_individual_by_id_from_group"):
            group = self._groups.get_at(group_position)
            with error_scope(f"group {group.group_id}"):
                return group.get_individual_by_id(individual_id).copy()

    def delete_individual_at_position_from_group(self, group_position: int, individual_position: int) -> None:
        with error_context("DataSet.delete_individual_at_position_from_group"):
            group = self._groups.get_at(group_position)
            with error_scope(f"group {group.group_id}"):
                group.delete_individual_at_position(individual_position)

    def delete_individual_by_id_from_group(self, group_position: int, individual_id: str) -> None:
        with error_context("DataSet.delete_individual_by_id_from_group"):
            group = self._groups.get_at(group_position)
            with error_scope(f"group {group.group_id}"):
                group.delete_individual_by_id(individual_id)

    @property
    def number_of_individuals(self) -> int:
        """Total across all groups."""
        return sum(len(group) for group in self._groups)

    # -- collection metadata --------------------------------------------------

    def set_individual_sex_in_group(self, group_position: int, individual_position: int, sex: int) -> None:
        with self._individual_in_group("DataSet.set_individual_sex_in_group", group_position, individual_position) as ind:
            ind.sex = sex

    def get_individual_sex_in_group(self, group_position: int, individual_position: int) -> Optional[int]:
        with self._individual_in_group("DataSet.get_individual_sex_in_group", group_position, individual_position) as ind:
            return ind.sex

    def set_individual_date_in_group(
        self, group_position: int, individual_position: int, date: datetime.date
    ) -> None:
        with self._individual_in_group("DataSet.set_individual_date_in_group", group_position, individual_position) as ind:
            ind.date = date

    def get_individual_date_in_group(self, group_position: int, individual_position: int) -> Optional[datetime.date]:
        with self._individual_in_group("DataSet.get_individual_date_in_group", group_position, individual_position) as ind:
            return ind.date

    def set_individual_coord_in_group(
        self, group_position: int, individual_position: int, coord: tuple[float, float]
    ) -> None:
        with self._individual_in_group("DataSet.set_individual_coord_in_group", group_position, individual_position) as ind:
            ind.coord = coord

    def get_individual_coord_in_group(self, group_position: int, individual_position: int) -> Optional[Coordinate]:
        with self._individual_in_group("DataSet.get_individual_coord_in_group", group_position, individual_position) as ind:
            return ind.coord

    def set_individual_locality_in_group_by_name(
        self, group_position: int, individual_position: int, locality_name: str
    ) -> None:
        with self._individual_in_group(
            "DataSet.set_individual_locality_in_group_by_name", group_position, individual_position
        ) as ind:
            self._localities.get(locality_name)
            ind.locality = locality_name

    def get_individual_locality_in_group(self, group_position: int, individual_position: int) -> Optional[Locality]:
        """Resolve the individual's locality name to the DataSet's Locality (None if unset)."""
        with self._individual_in_group(
            "DataSet.get_individual_locality_in_group", group_position, individual_position
        ) as ind:
            if ind.locality is None:
                return None
            return copy.deepcopy(self._localities.get(ind.locality))

    # -- sequences ------------------------------------------------------------

    def add_individual_sequence_in_group(
        self,
        group_position: int,
        individual_position: int,
        sequence_position: int,
        sequence: Sequence,
    ) -> None:
        """Attach a sequence; the first sequence in the DataSet fixes the alphabet.

        Raises:
            AlphabetMismatchError: If the sequence's alphabet differs from the
                DataSet's (or the individual's) alphabet
            DuplicateIdentifierError: If the position or name is taken
        """
        with self._individual_in_group(
            "DataSet.add_individual_sequence_in_group", group_position, individual_position
        ) as ind:
            self._check_alphabet(sequence.alphabet)
            ind.add_sequence(sequence_position, sequence)
            self._establish_alphabet(sequence.alphabet)

    def get_individual_sequence_by_name_in_group(
        self, group_position: int, individual_position: int, sequence_name: str
    ) -> Sequence:
        with self._individual_in_group(
            "DataSet.get_individual_sequence_by_name_in_group", group_position, individual_position
        ) as ind:
            return ind.get_sequence_by_name(sequence_name)

    def get_individual_sequence_at_position_in_group(
        self, group_position: int, individual_position: int, sequence_position: int
    ) -> Sequence:
        with self._individual_in_group(
            "DataSet.get_individual_sequence_at_position_in_group", group_position, individual_position
        ) as ind:
            return ind.get_sequence_at_position(sequence_position)

    def delete_individual_sequence_by_name_in_group(
        self, group_position: int, individual_position: int, sequence_name: str
    ) -> None:
        with self._individual_in_group(
            "DataSet.delete_individual_sequence_by_name_in_group", group_position, individual_position
        ) as ind:
            ind.delete_sequence_by_name(sequence_name)

    def delete_individual_sequence_at_position_in_group(
        self, group_position: int, individual_position: int, sequence_position: int
    ) -> None:
        with self._individual_in_group(
            "DataSet.delete_individual_sequence_at_position_in_group", group_position, individual_position
        ) as ind:
            ind.delete_sequence_at_position(sequence_position)

    def get_individual_sequences_names_in_group(self, group_position: int, individual_position: int) -> list[str]:
        with self._individual_in_group(
            "DataSet.get_individual_sequences_names_in_group", group_position, individual_position
        ) as ind:
            return ind.sequence_names

    def get_individual_sequence_position_in_group(
        self, group_position: int, individual_position: int, sequence_name: str
    ) -> int:
        with self._individual_in_group(
            "DataSet.get_individual_sequence_position_in_group", group_position, individual_position
        ) as ind:
            return ind.get_sequence_position(sequence_name)

    def get_individual_number_of_sequences_in_group(self, group_position: int, individual_position: int) -> int:
        with self._individual_in_group(
            "DataSet.get_individual_number_of_sequences_in_group", group_position, individual_position
        ) as ind:
            return ind.number_of_sequences

    # -- genotypes ------------------------------------------------------------

    def set_individual_genotype_in_group(
        self, group_position: int, individual_position: int, genotype: MultilocusGenotype
    ) -> None:
        """Attach a copy of genotype after checking it against the analyzed loci.

        Raises:
            PreconditionError: If no AnalyzedLoci is set
            DimensionError: If the number of loci differs
            PloidyError: If a locus genotype does not fit its locus ploidy
        """
        with self._individual_in_group(
            "DataSet.set_individual_genotype_in_group", group_position, individual_position
        ) as ind:
            self._check_genotype(genotype)
            ind.set_genotype(genotype)

    def init_individual_genotype_in_group(self, group_position: int, individual_position: int) -> None:
        """Attach an all-missing genotype sized to the analyzed loci."""
        with self._individual_in_group(
            "DataSet.init_individual_genotype_in_group", group_position, individual_position
        ) as ind:
            ind.init_genotype(self.number_of_loci)

    def delete_individual_genotype_in_group(self, group_position: int, individual_position: int) -> None:
        with self._individual_in_group(
            "DataSet.delete_individual_genotype_in_group", group_position, individual_position
        ) as ind:
            ind.delete_genotype()

    def set_individual_monolocus_genotype_in_group(
        self,
        group_position: int,
        individual_position: int,
        locus_position: int,
        genotype: MonolocusGenotype,
    ) -> None:
        with self._individual_in_group(
            "DataSet.set_individual_monolocus_genotype_in_group", group_position, individual_position
        ) as ind:
            self._check_ploidy(locus_position, genotype)
            ind.set_monolocus_genotype(locus_position, genotype)

    def set_individual_monolocus_genotype_by_allele_key_in_group(
        self,
        group_position: int,
        individual_position: int,
        locus_position: int,
        allele_keys: SequenceType[int],
    ) -> None:
        with self._individual_in_group(
            "DataSet.set_individual_monolocus_genotype_by_allele_key_in_group", group_position, individual_position
        ) as ind:
            genotype = MonolocusGenotype.from_keys(allele_keys)
            self._check_ploidy(locus_position, genotype)
            ind.set_monolocus_genotype(locus_position, genotype)

    def set_individual_monolocus_genotype_by_allele_id_in_group(
        self,
        group_position: int,
        individual_position: int,
        locus_position: int,
        allele_ids: SequenceType[str],
    ) -> None:
        """Set a locus genotype from allele ids of the locus's catalogue.

        Raises:
            PreconditionError: If no AnalyzedLoci is set or the locus slot is empty
            AlleleNotFoundError: If an allele id is not in the catalogue
        """
        with self._individual_in_group(
            "DataSet.set_individual_monolocus_genotype_by_allele_id_in_group", group_position, individual_position
        ) as ind:
            locus_info = self._loci().get_locus_info_at_position(locus_position)
            keys = [locus_info.get_allele_info_key(allele_id) for allele_id in allele_ids]
            genotype = MonolocusGenotype.from_keys(keys)
            self._check_ploidy(locus_position, genotype)
            ind.set_monolocus_genotype(locus_position, genotype)

    def get_individual_monolocus_genotype_in_group(
        self, group_position: int, individual_position: int, locus_position: int
    ) -> MonolocusGenotype:
        with self._individual_in_group(
            "DataSet.get_individual_monolocus_genotype_in_group", group_position, individual_position
        ) as ind:
            return ind.get_monolocus_genotype(locus_position)

    # =========================================================================
    # Sequence alphabet
    # =========================================================================

    def set_alphabet(self, alphabet: str) -> None:
        """Fix the DataSet-wide alphabet (idempotent for the same alphabet)."""
        with error_context("DataSet.set_alphabet"):
            self._check_alphabet(alphabet)
        self._establish_alphabet(alphabet)

    @property
    def alphabet(self) -> str:
        if self._analyzed_sequences is None:
            raise PreconditionError("no sequence data", operation="DataSet.alphabet")
        return self._analyzed_sequences.alphabet

    @property
    def has_sequence_data(self) -> bool:
        return self._analyzed_sequences is not None

    # =========================================================================
    # Analyzed loci
    # =========================================================================

    def init_analyzed_loci(self, number_of_loci: int) -> None:
        """Create an empty marker panel with number_of_loci slots.

        Raises:
            PreconditionError: If AnalyzedLoci is already initialized
        """
        if self._analyzed_loci is not None:
            raise PreconditionError("analyzed loci already initialized", operation="DataSet.init_analyzed_loci")
        with error_context("DataSet.init_analyzed_loci"):
            self._analyzed_loci = AnalyzedLoci(number_of_loci)

    def set_analyzed_loci(self, analyzed_loci: AnalyzedLoci) -> None:
        """Replace the marker panel with a copy of analyzed_loci.

        Raises:
            PreconditionError: If any individual holds a genotype of the
                current panel
        """
        with error_context("DataSet.set_analyzed_loci"):
            if self._analyzed_loci is not None:
                self.delete_analyzed_loci()
        self._analyzed_loci = copy.deepcopy(analyzed_loci)
        logger.info(f"Analyzed loci set ({analyzed_loci.number_of_loci} loci)")

    def _loci(self) -> AnalyzedLoci:
        if self._analyzed_loci is None:
            raise PreconditionError("no analyzed loci initialized")
        return self._analyzed_loci

    @property
    def analyzed_loci(self) -> AnalyzedLoci:
        with error_context("DataSet.analyzed_loci"):
            return copy.deepcopy(self._loci())

    def delete_analyzed_loci(self) -> None:
        """
        Raises:
            PreconditionError: If no panel is set, or an individual still
                holds a genotype referencing it
        """
        op = "DataSet.delete_analyzed_loci"
        if self._analyzed_loci is None:
            raise PreconditionError("no analyzed loci initialized", operation=op)
        holders = [ind.id for ind in self._all_individuals() if ind.has_genotype]
        if holders:
            raise PreconditionError(
                f"{len(holders)} individual(s) hold a genotype of the current analyzed loci "
                f"(e.g. {holders[0]!r})",
                operation=op,
            )
        self._analyzed_loci = None

    def set_locus_info(self, locus_position: int, locus: LocusInfo) -> None:
        """Define a locus slot; existing genotypes at that slot must fit its ploidy."""
        with error_context("DataSet.set_locus_info"):
            loci = self._loci()
            if locus_position >= loci.number_of_loci or locus_position < 0:
                raise IndexOutOfRangeError(locus_position, (0, loci.number_of_loci), field="locus_position")
            for ind in self._all_individuals():
                if not ind.has_genotype:
                    continue
                if ind.genotype.is_monolocus_genotype_missing(locus_position):
                    continue
                n_alleles = ind.genotype.get_monolocus_genotype(locus_position).ploidy
                if not locus.accepts_allele_count(n_alleles):
                    raise PloidyError(
                        f"individual {ind.id!r} holds {n_alleles} allele(s) at locus_position "
                        f"{locus_position}, incompatible with ploidy {locus.ploidy}",
                        field="locus_position",
                        identifier=locus_position,
                    )
            loci.set_locus_info(locus_position, copy.deepcopy(locus))

    def get_locus_info_by_name(self, locus_name: str) -> LocusInfo:
        with error_context("DataSet.get_locus_info_by_name"):
            return copy.deepcopy(self._loci().get_locus_info_by_name(locus_name))

    def get_locus_info_at_position(self, locus_position: int) -> LocusInfo:
        with error_context("DataSet.get_locus_info_at_position"):
            return copy.deepcopy(self._loci().get_locus_info_at_position(locus_position))

    def add_allele_info_by_locus_name(self, locus_name: str, allele: AlleleInfo) -> None:
        with error_context("DataSet.add_allele_info_by_locus_name"):
            self._loci().add_allele_info_by_locus_name(locus_name, allele)

    def add_allele_info_by_locus_position(self, locus_position: int, allele: AlleleInfo) -> None:
        with error_context("DataSet.add_allele_info_by_locus_position"):
            self._loci().add_allele_info_by_locus_position(locus_position, allele)

    @property
    def number_of_loci(self) -> int:
        if self._analyzed_loci is None:
            raise PreconditionError("no analyzed loci initialized")
        return self._analyzed_loci.number_of_loci

    def get_ploidy_by_locus_name(self, locus_name: str) -> int:
        with error_context("DataSet.get_ploidy_by_locus_name"):
            return self._loci().get_ploidy_by_locus_name(locus_name)

    def get_ploidy_by_locus_position(self, locus_position: int) -> int:
        with error_context("DataSet.get_ploidy_by_locus_position"):
            return self._loci().get_ploidy_by_locus_position(locus_position)

    @property
    def has_allelic_data(self) -> bool:
        return self._analyzed_loci is not None

    # =========================================================================
    # Projections
    # =========================================================================

    def _resolve_selection(
        self, selection: Optional[Mapping[int, SequenceType[int]]]
    ) -> list[tuple[Group, list[int]]]:
        if selection is None:
            return [(group, list(range(len(group)))) for group in self._groups]
        resolved = []
        for group_id, positions in sorted(selection.items()):
            group = self._groups.get(group_id)
            with error_scope(f"group {group_id}"):
                for position in positions:
                    group.check_individual_position(position)
            resolved.append((group, list(positions)))
        return resolved

    def get_polymorphism_multig_container(
        self, selection: Optional[Mapping[int, SequenceType[int]]] = None
    ) -> PolymorphismMultiGContainer:
        """
        Project selected individuals' genotypes into a flat container.

        Args:
            selection: group id -> individual positions. None selects every
                individual of every group.

        Returns:
            Container of genotype copies tagged with their group id, with
            group display names; individuals without genotype are skipped.

        Raises:
            GroupNotFoundError: If a selected group id is unknown
            IndexOutOfRangeError: If a selected position is out of range
        """
        with error_context("DataSet.get_polymorphism_multig_container"):
            resolved = self._resolve_selection(selection)

        pmgc = PolymorphismMultiGContainer()
        for group, positions in resolved:
            pmgc.set_group_name(group.group_id, group.name)
            for position in positions:
                individual = group.get_individual_at_position(position)
                if individual.has_genotype:
                    pmgc.add_multilocus_genotype(individual.genotype, group.group_id)
        return pmgc

    def get_polymorphism_sequence_container(
        self,
        selection: Optional[Mapping[int, SequenceType[int]]],
        sequence_position: int,
    ) -> PolymorphismSequenceContainer:
        """
        Project the sequence at sequence_position of selected individuals.

        Individuals without a sequence at that position are skipped.

        Raises:
            PreconditionError: If the DataSet has no sequence data
            GroupNotFoundError, IndexOutOfRangeError: On bad selection
            DuplicateIdentifierError: If two selected sequences share a name
        """
        op = "DataSet.get_polymorphism_sequence_container"
        with error_context(op):
            alphabet = self.alphabet
            resolved = self._resolve_selection(selection)
            psc = PolymorphismSequenceContainer(alphabet)
            for group, positions in resolved:
                for position in positions:
                    individual = group.get_individual_at_position(position)
                    if individual.has_sequence_at_position(sequence_position):
                        psc.add_sequence(individual.get_sequence_at_position(sequence_position), group.group_id)
        return psc

    # =========================================================================
    # Copy / dunder
    # =========================================================================

    def copy(self) -> DataSet:
        """Deep copy: no entity is shared with the original."""
        return copy.deepcopy(self)

    def __iter__(self) -> Iterator[Group]:
        return (group.copy() for group in self._groups)

    def __repr__(self) -> str:
        loci = self._analyzed_loci.number_of_loci if self._analyzed_loci is not None else 0
        return (
            f"DataSet({len(self._groups)} groups, {self.number_of_individuals} individuals, "
            f"{loci} loci, {len(self._localities)} localities)"
        )
