"""
Groups: numerically identified collections of individuals (populations, demes).
"""

from __future__ import annotations

import copy
from typing import Iterator, Optional

from popgenperm.core.errors import DimensionError, IndividualNotFoundError
from popgenperm.core.individual import Individual
from popgenperm.core.registry import OrderedRegistry

__all__ = ['Group']


class Group:
    """
    A named, numerically identified collection of individuals.

    Individual ids are unique within a group. Individuals are stored as
    private copies; positions follow insertion order.

    Args:
        group_id: Numeric identifier, fixed for the lifetime of the group
        name: Display name (defaults to str(group_id))

    Examples:
        >>> group = Group(1, name="Lake Constance")
        >>> group.add_empty_individual("fish_01")
        >>> group.get_individual_position("fish_01")
        0
    """

    def __init__(self, group_id: int, name: Optional[str] = None):
        if group_id < 0:
            raise DimensionError(
                f"group_id must be non-negative, got {group_id}", field="group_id", identifier=group_id
            )
        self._group_id = group_id
        self._name = name
        self._individuals: OrderedRegistry[str, Individual] = OrderedRegistry(
            "individual id", "individual_position", IndividualNotFoundError
        )

    @property
    def group_id(self) -> int:
        return self._group_id

    @property
    def name(self) -> str:
        return self._name if self._name else str(self._group_id)

    @name.setter
    def name(self, value: Optional[str]) -> None:
        self._name = value

    @property
    def number_of_individuals(self) -> int:
        return len(self._individuals)

    @property
    def individual_ids(self) -> list[str]:
        return self._individuals.keys()

    def check_individual_id_free(self, individual_id: str) -> None:
        self._individuals.check_key_free(individual_id)

    def check_individual_position(self, individual_position: int) -> None:
        self._individuals.check_position(individual_position)

    def add_individual(self, individual: Individual) -> None:
        self._individuals.add(individual.id, individual.copy())

    def add_empty_individual(self, individual_id: str) -> None:
        self._individuals.add(individual_id, Individual(individual_id))

    def adopt_individual(self, individual: Individual) -> None:
        """Take ownership of an individual detached from another group (no copy)."""
        self._individuals.add(individual.id, individual)

    def get_individual_position(self, individual_id: str) -> int:
        return self._individuals.position(individual_id)

    def get_individual_at_position(self, individual_position: int) -> Individual:
        return self._individuals.get_at(individual_position)

    def get_individual_by_id(self, individual_id: str) -> Individual:
        return self._individuals.get(individual_id)

    def remove_individual_at_position(self, individual_position: int) -> Individual:
        """Detach and return the individual at a position."""
        return self._individuals.pop_at(individual_position)

    def remove_individual_by_id(self, individual_id: str) -> Individual:
        return self._individuals.pop(individual_id)

    def delete_individual_at_position(self, individual_position: int) -> None:
        self._individuals.pop_at(individual_position)

    def delete_individual_by_id(self, individual_id: str) -> None:
        self._individuals.pop(individual_id)

    def clear(self) -> None:
        self._individuals.clear()

    @property
    def has_sequences(self) -> bool:
        return any(ind.has_sequences for ind in self._individuals)

    @property
    def has_genotypes(self) -> bool:
        return any(ind.has_genotype for ind in self._individuals)

    @property
    def max_number_of_sequences(self) -> int:
        return max((ind.number_of_sequences for ind in self._individuals), default=0)

    def copy(self) -> Group:
        return copy.deepcopy(self)

    def __len__(self) -> int:
        return len(self._individuals)

    def __iter__(self) -> Iterator[Individual]:
        return iter(self._individuals)

    def __repr__(self) -> str:
        return f"Group({self._group_id}, name={self.name!r}, n_individuals={len(self._individuals)})"
