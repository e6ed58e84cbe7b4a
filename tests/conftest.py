"""
Pytest configuration and shared fixtures.

This module provides DataSet and container builders shared by all test suites.
"""

import numpy as np
import pytest

from popgenperm.core.container import PolymorphismMultiGContainer
from popgenperm.core.dataset import DataSet
from popgenperm.core.genotype import MonolocusGenotype, MultilocusGenotype
from popgenperm.core.loci import AlleleInfo, LocusInfo


def make_multilocus_genotype(slots):
    """
    Build a MultilocusGenotype from per-locus allele-key lists.

    Args:
        slots: One entry per locus: a list of allele keys, or None for missing

    Examples:
        >>> make_multilocus_genotype([[0, 1], None, [2]])
        MultilocusGenotype([0/1, NA, 2])
    """
    return MultilocusGenotype.from_monolocus_genotypes(
        None if keys is None else MonolocusGenotype.from_keys(keys) for keys in slots
    )


def make_container(entries, names=None):
    """
    Build a PolymorphismMultiGContainer.

    Args:
        entries: (group_id, slots) pairs, slots as in make_multilocus_genotype
        names: Optional group_id -> name mapping
    """
    container = PolymorphismMultiGContainer()
    for group_id, slots in entries:
        container.add_multilocus_genotype(make_multilocus_genotype(slots), group_id)
    for group_id, name in (names or {}).items():
        container.set_group_name(group_id, name)
    return container


@pytest.fixture
def rng():
    """Seeded generator for reproducible resampling."""
    return np.random.default_rng(42)


@pytest.fixture
def scenario_dataset():
    """
    Two diploid loci, one group (id 1) with two genotyped individuals.

    Design:
        ind1: locus0 = A1/A2, locus1 = B1/B1
        ind2: locus0 = A1/A1, locus1 = B1/B2
        Allele keys: A1=0, A2=1, B1=0, B2=1
    """
    ds = DataSet()
    ds.init_analyzed_loci(2)
    ds.set_locus_info(0, LocusInfo("locus0", LocusInfo.DIPLOID))
    ds.set_locus_info(1, LocusInfo("locus1", LocusInfo.DIPLOID))
    for allele_id in ("A1", "A2"):
        ds.add_allele_info_by_locus_name("locus0", AlleleInfo(allele_id))
    for allele_id in ("B1", "B2"):
        ds.add_allele_info_by_locus_name("locus1", AlleleInfo(allele_id))

    ds.add_empty_group(1)
    genotypes = {
        "ind1": (["A1", "A2"], ["B1", "B1"]),
        "ind2": (["A1", "A1"], ["B1", "B2"]),
    }
    for position, (individual_id, (locus0, locus1)) in enumerate(genotypes.items()):
        ds.add_empty_individual_to_group(0, individual_id)
        ds.init_individual_genotype_in_group(0, position)
        ds.set_individual_monolocus_genotype_by_allele_id_in_group(0, position, 0, locus0)
        ds.set_individual_monolocus_genotype_by_allele_id_in_group(0, position, 1, locus1)
    return ds


@pytest.fixture
def grouped_dataset():
    """Three groups (ids 1, 2, 5) with individuals but no genotypes."""
    ds = DataSet()
    members = {1: ["a", "b", "c"], 2: ["d", "e"], 5: ["f"]}
    for position, (group_id, individual_ids) in enumerate(members.items()):
        ds.add_empty_group(group_id)
        for individual_id in individual_ids:
            ds.add_empty_individual_to_group(position, individual_id)
    return ds


@pytest.fixture
def mixed_container():
    """
    Three loci, three groups, mixed ploidy and missing data.

    Design:
        locus 0: diploid everywhere
        locus 1: haploid everywhere, one missing genotype in group 2
        locus 2: diploid except one haploid genotype in group 1
        group 3 is never selected by most tests (pass-through check)
    """
    entries = [
        (1, [[0, 1], [0], [2, 2]]),
        (2, [[1, 1], None, [0, 1]]),
        (1, [[0, 0], [1], [3]]),
        (3, [[2, 2], [2], [1, 1]]),
        (2, [[0, 2], [1], [1, 2]]),
        (1, [[1, 2], [0], [0, 0]]),
        (2, [[2, 2], [2], [3, 3]]),
    ]
    return make_container(entries, names={1: "North", 2: "South", 3: "Island"})


@pytest.fixture
def separated_container():
    """Two groups of ten diploid individuals fixed for different alleles at locus 0."""
    entries = [(1, [[0, 0], [0, 1]]) for _ in range(10)]
    entries += [(2, [[1, 1], [0, 1]]) for _ in range(10)]
    return make_container(entries)
