"""Tests for locus and allele metadata."""

import dataclasses

import pytest

from popgenperm.core.errors import (
    AlleleNotFoundError,
    DimensionError,
    DuplicateIdentifierError,
    IndexOutOfRangeError,
    LocusNotFoundError,
    PreconditionError,
)
from popgenperm.core.loci import AlleleInfo, AnalyzedLoci, LocusInfo


class TestLocusInfo:
    """Tests for LocusInfo."""

    @pytest.fixture
    def msat(self):
        locus = LocusInfo("Msat1", LocusInfo.DIPLOID)
        for allele_id, size in (("152", 152.0), ("156", 156.0), ("160", 160.0)):
            locus.add_allele_info(AlleleInfo(allele_id, size=size))
        return locus

    def test_allele_info_is_frozen(self):
        allele = AlleleInfo("152", size=152.0)
        with pytest.raises(dataclasses.FrozenInstanceError):
            allele.size = 154.0

    def test_invalid_ploidy(self):
        with pytest.raises(ValueError, match="Invalid ploidy"):
            LocusInfo("x", ploidy=3)

    def test_keys_follow_insertion_order(self, msat):
        assert msat.allele_ids == ["152", "156", "160"]
        assert msat.get_allele_info_key("160") == 2
        assert msat.get_allele_info_by_key(1).size == 156.0
        assert msat.number_of_alleles == 3

    def test_duplicate_allele(self, msat):
        with pytest.raises(DuplicateIdentifierError):
            msat.add_allele_info(AlleleInfo("152"))
        assert msat.number_of_alleles == 3

    def test_unknown_allele(self, msat):
        with pytest.raises(AlleleNotFoundError):
            msat.get_allele_info_by_id("999")

    def test_key_out_of_range(self, msat):
        with pytest.raises(IndexOutOfRangeError) as excinfo:
            msat.get_allele_info_by_key(3)
        assert excinfo.value.field == "allele_key"

    def test_clear(self, msat):
        msat.clear()
        assert msat.number_of_alleles == 0

    @pytest.mark.parametrize("ploidy, n_alleles, accepted", [
        (LocusInfo.HAPLOID, 1, True),
        (LocusInfo.HAPLOID, 2, False),
        (LocusInfo.DIPLOID, 2, True),
        (LocusInfo.DIPLOID, 1, False),
        (LocusInfo.HAPLODIPLOID, 1, True),
        (LocusInfo.HAPLODIPLOID, 2, True),
        (LocusInfo.UNKNOWN, 2, True),
    ])
    def test_accepts_allele_count(self, ploidy, n_alleles, accepted):
        assert LocusInfo("x", ploidy).accepts_allele_count(n_alleles) is accepted


class TestAnalyzedLoci:
    """Tests for AnalyzedLoci."""

    def test_requires_at_least_one_locus(self):
        with pytest.raises(DimensionError):
            AnalyzedLoci(0)

    def test_slots_start_empty(self):
        loci = AnalyzedLoci(3)
        assert loci.number_of_loci == 3
        assert not loci.is_locus_defined(1)
        with pytest.raises(PreconditionError):
            loci.get_locus_info_at_position(1)

    def test_position_out_of_range(self):
        with pytest.raises(IndexOutOfRangeError) as excinfo:
            AnalyzedLoci(2).set_locus_info(2, LocusInfo("x"))
        assert excinfo.value.field == "locus_position"

    def test_duplicate_name_in_other_slot(self):
        loci = AnalyzedLoci(2)
        loci.set_locus_info(0, LocusInfo("Msat1"))
        with pytest.raises(DuplicateIdentifierError):
            loci.set_locus_info(1, LocusInfo("Msat1"))
        # Redefining the same slot is allowed
        loci.set_locus_info(0, LocusInfo("Msat1", LocusInfo.HAPLOID))
        assert loci.get_ploidy_by_locus_position(0) == LocusInfo.HAPLOID

    def test_lookup_by_name(self):
        loci = AnalyzedLoci(2)
        loci.set_locus_info(1, LocusInfo("COI", LocusInfo.HAPLOID))
        assert loci.get_locus_info_position("COI") == 1
        assert loci.get_ploidy_by_locus_name("COI") == LocusInfo.HAPLOID
        with pytest.raises(LocusNotFoundError):
            loci.get_locus_info_by_name("ND2")

    def test_add_alleles(self):
        loci = AnalyzedLoci(2)
        loci.set_locus_info(0, LocusInfo("Msat1"))
        loci.add_allele_info_by_locus_name("Msat1", AlleleInfo("152"))
        loci.add_allele_info_by_locus_position(0, AlleleInfo("156"))
        assert loci.number_of_alleles_for_loci() == [2, 0]

    def test_add_allele_error_names_operation(self):
        loci = AnalyzedLoci(1)
        with pytest.raises(LocusNotFoundError) as excinfo:
            loci.add_allele_info_by_locus_name("missing", AlleleInfo("1"))
        assert excinfo.value.operation == "AnalyzedLoci.add_allele_info_by_locus_name"
