"""
Resampling operations over PolymorphismMultiGContainer for permutation tests.

Every operation takes a container (plus, where applicable, the set of group
ids to resample) and returns a new, independent container; the input is never
mutated. Randomness comes from an explicit numpy Generator so that replicates
can run in parallel and reproduce from a seed.

Granularities:
    permute_multi_g             shuffle group labels across all individuals
    permute_mono_g              shuffle per-locus genotypes across the set
    permute_intra_group_mono_g  shuffle per-locus genotypes within each group
    permute_alleles             shuffle per-locus alleles across the set
    permute_intra_group_alleles shuffle per-locus alleles within each group
    extract_groups              sub-container of the selected groups (no shuffle)

Ordering:
    Results list individuals in source order. Individuals outside the group
    set pass through unchanged at their position; resampled individuals keep
    their group id and receive the next reconstructed genotype of their pool.

Preserved by every permutation:
    - number of individuals and the multiset of group ids
    - per-locus allele count of every allele-level reconstruction
    - the group-name map
    - the per-locus pool (a permutation is a bijection on it)
"""

from __future__ import annotations

import logging
from typing import Iterable, Optional

import numpy as np

from popgenperm.core.container import PolymorphismMultiGContainer
from popgenperm.core.genotype import MonolocusGenotype, MultilocusGenotype

__all__ = [
    'permute_multi_g',
    'permute_mono_g',
    'permute_intra_group_mono_g',
    'permute_alleles',
    'permute_intra_group_alleles',
    'extract_groups',
    'PolymorphismMultiGContainerTools',
]

logger = logging.getLogger(__name__)


def _resolve_rng(rng: Optional[np.random.Generator]) -> np.random.Generator:
    return rng if rng is not None else np.random.default_rng()


def _carry_group_names(source: PolymorphismMultiGContainer, target: PolymorphismMultiGContainer) -> None:
    for group_id, name in source.group_names.items():
        target.set_group_name(group_id, name)


def _positions_by_group(
    container: PolymorphismMultiGContainer,
    group_ids: Iterable[int],
) -> dict[int, list[int]]:
    """Entry positions of each requested group id, in source order."""
    wanted = sorted(set(group_ids))
    by_group: dict[int, list[int]] = {gid: [] for gid in wanted}
    for position, gid in enumerate(container.group_id_labels):
        if gid in by_group:
            by_group[gid].append(position)
    if not any(by_group.values()):
        logger.warning(f"Group ids {wanted} select no individual; container returned unchanged")
    return by_group


def _shuffle_genotypes(
    genotypes: list[MultilocusGenotype],
    n_loci: int,
    rng: np.random.Generator,
) -> list[MultilocusGenotype]:
    """Shuffle each locus's pool of monolocus genotypes (missing included) independently."""
    n = len(genotypes)
    columns = [[mg.monolocus_genotypes()[j] for mg in genotypes] for j in range(n_loci)]
    shuffled = []
    for column in columns:
        order = rng.permutation(n)
        shuffled.append([column[k] for k in order])
    return [
        MultilocusGenotype.from_monolocus_genotypes(shuffled[j][i] for j in range(n_loci))
        for i in range(n)
    ]


def _shuffle_alleles(
    genotypes: list[MultilocusGenotype],
    n_loci: int,
    rng: np.random.Generator,
) -> list[MultilocusGenotype]:
    """
    Shuffle each locus's pool of alleles and redistribute them.

    Each genotype gets back as many alleles as it had at that locus; missing
    genotypes contribute nothing and stay missing.
    """
    pools = []
    for j in range(n_loci):
        keys = [
            key
            for mg in genotypes
            if not mg.is_monolocus_genotype_missing(j)
            for key in mg.get_monolocus_genotype(j).allele_index
        ]
        pools.append(rng.permutation(np.asarray(keys, dtype=np.int64)))

    cursors = [0] * n_loci
    rebuilt = []
    for mg in genotypes:
        slots: list[Optional[MonolocusGenotype]] = []
        for j, original in enumerate(mg.monolocus_genotypes()):
            if original is None:
                slots.append(None)
                continue
            n_alleles = original.ploidy
            drawn = pools[j][cursors[j]:cursors[j] + n_alleles]
            cursors[j] += n_alleles
            slots.append(MonolocusGenotype.from_keys([int(k) for k in drawn]))
        rebuilt.append(MultilocusGenotype.from_monolocus_genotypes(slots))
    return rebuilt


def _rebuild(
    container: PolymorphismMultiGContainer,
    replacements: dict[int, MultilocusGenotype],
) -> PolymorphismMultiGContainer:
    """New container in source order, with replaced genotypes at the given positions."""
    result = PolymorphismMultiGContainer()
    for position, (mg, gid) in enumerate(container):
        result.add_multilocus_genotype(replacements.get(position, mg), gid)
    _carry_group_names(container, result)
    return result


def _permute_pooled(container, group_ids, rng, shuffle) -> PolymorphismMultiGContainer:
    by_group = _positions_by_group(container, group_ids)
    positions = sorted(p for members in by_group.values() for p in members)
    if not positions:
        return container.copy()
    pool = [container.get_multilocus_genotype(p) for p in positions]
    reshuffled = shuffle(pool, container.number_of_loci, _resolve_rng(rng))
    return _rebuild(container, dict(zip(positions, reshuffled)))


def _permute_per_group(container, group_ids, rng, shuffle) -> PolymorphismMultiGContainer:
    by_group = _positions_by_group(container, group_ids)
    if not any(by_group.values()):
        return container.copy()
    rng = _resolve_rng(rng)
    n_loci = container.number_of_loci
    replacements: dict[int, MultilocusGenotype] = {}
    for members in by_group.values():
        if not members:
            continue
        pool = [container.get_multilocus_genotype(p) for p in members]
        replacements.update(zip(members, shuffle(pool, n_loci, rng)))
    return _rebuild(container, replacements)


# =============================================================================
# Public operations
# =============================================================================


def permute_multi_g(
    container: PolymorphismMultiGContainer,
    rng: Optional[np.random.Generator] = None,
) -> PolymorphismMultiGContainer:
    """
    Shuffle group labels uniformly across all individuals.

    Genotypes stay with their individual; the number of individuals carrying
    each group id is unchanged. This is the classic relabelling null for
    between-group differentiation.

    Args:
        container: Source container (not modified)
        rng: NumPy random generator (default: fresh default_rng())

    Returns:
        Copy of container with permuted group ids
    """
    rng = _resolve_rng(rng)
    labels = np.asarray(container.group_id_labels, dtype=np.int64)
    permuted = rng.permutation(labels)
    result = container.copy()
    for position, group_id in enumerate(permuted):
        result.set_group_id(position, int(group_id))
    return result


def permute_mono_g(
    container: PolymorphismMultiGContainer,
    group_ids: Iterable[int],
    rng: Optional[np.random.Generator] = None,
) -> PolymorphismMultiGContainer:
    """
    Shuffle monolocus genotypes per locus across every individual of group_ids.

    Each locus's pool is shuffled independently, which breaks associations
    between loci while keeping each locus's genotype frequencies within the
    set. Group membership is unchanged.

    Args:
        container: Source container (not modified)
        group_ids: Groups whose individuals are pooled
        rng: NumPy random generator

    Raises:
        DimensionError: If the container's genotypes are not aligned
    """
    return _permute_pooled(container, group_ids, rng, _shuffle_genotypes)


def permute_intra_group_mono_g(
    container: PolymorphismMultiGContainer,
    group_ids: Iterable[int],
    rng: Optional[np.random.Generator] = None,
) -> PolymorphismMultiGContainer:
    """Like permute_mono_g, but each group in group_ids is its own pool."""
    return _permute_per_group(container, group_ids, rng, _shuffle_genotypes)


def permute_alleles(
    container: PolymorphismMultiGContainer,
    group_ids: Iterable[int],
    rng: Optional[np.random.Generator] = None,
) -> PolymorphismMultiGContainer:
    """
    Shuffle alleles per locus across every individual of group_ids.

    Finer-grained than permute_mono_g: genotypes are rebuilt from a shuffled
    allele pool, drawing as many alleles as the genotype they replace carried.
    Missing genotypes are neither pooled nor rebuilt.

    Args:
        container: Source container (not modified)
        group_ids: Groups whose individuals are pooled
        rng: NumPy random generator

    Returns:
        New container in source order
    """
    return _permute_pooled(container, group_ids, rng, _shuffle_alleles)


def permute_intra_group_alleles(
    container: PolymorphismMultiGContainer,
    group_ids: Iterable[int],
    rng: Optional[np.random.Generator] = None,
) -> PolymorphismMultiGContainer:
    """Like permute_alleles, but each group in group_ids is its own pool."""
    return _permute_per_group(container, group_ids, rng, _shuffle_alleles)


def extract_groups(
    container: PolymorphismMultiGContainer,
    group_ids: Iterable[int],
) -> PolymorphismMultiGContainer:
    """
    Sub-container holding only the individuals of group_ids.

    Individuals are ordered by ascending group id, then source order. Names
    registered for the extracted groups are copied.
    """
    wanted = sorted(set(group_ids))
    result = PolymorphismMultiGContainer()
    for group_id in wanted:
        for mg, gid in container:
            if gid == group_id:
                result.add_multilocus_genotype(mg, gid)
    names = container.group_names
    for group_id in wanted:
        if group_id in names:
            result.set_group_name(group_id, names[group_id])
    return result


class PolymorphismMultiGContainerTools:
    """Namespace exposing the resampling operations as static methods."""

    permute_multi_g = staticmethod(permute_multi_g)
    permute_mono_g = staticmethod(permute_mono_g)
    permute_intra_group_mono_g = staticmethod(permute_intra_group_mono_g)
    permute_alleles = staticmethod(permute_alleles)
    permute_intra_group_alleles = staticmethod(permute_intra_group_alleles)
    extract_groups = staticmethod(extract_groups)
