"""Tests for NAP normalization and matching."""

import pytest

from localseo.modules.local_seo.nap_matcher import (
    DEFAULT_NAP_WEIGHTS,
    NAPRecord,
    NAPWeights,
    compare_nap,
    normalize_address,
    normalize_name,
    normalize_nap,
    normalize_phone,
    parse_address,
)


# ===========================================================================
# Name normalization
# ===========================================================================
class TestNormalizeName:

    @pytest.mark.parametrize("raw, expected", [
        ("The Gents Place, LLC.", "gentsplace"),
        ("Acme Plumbing Inc", "acmeplumbing"),
        ("Joe's Pizza Co.", "joespizza"),
        ("A Cut Above Ltd", "cutabove"),
        ("Bob & Sons Company", "bobsons"),
        ("  Café 101  ", "caf101"),
    ])
    def test_examples(self, raw, expected):
        assert normalize_name(raw) == expected

    def test_only_stripped_tokens_gives_empty(self):
        assert normalize_name("The LLC") == ""

    def test_suffix_inside_word_kept(self):
        assert normalize_name("Cocoa Company Store") == "cocoastore"

    def test_none_and_empty(self):
        assert normalize_name(None) == ""
        assert normalize_name("") == ""

    def test_output_alphanumeric_and_not_longer(self):
        raw = "The Best-Ever B.B.Q. Shack, Inc."
        out = normalize_name(raw)
        assert out.isalnum()
        assert out == out.lower()
        assert len(out) <= len(raw)


# ===========================================================================
# Address normalization
# ===========================================================================
class TestNormalizeAddress:

    def test_abbreviates_and_drops_suite(self):
        assert normalize_address("10225 Research Boulevard Suite 310") == "10225researchblvd"

    def test_hash_unit_dropped(self):
        assert normalize_address("10225 Research Blvd #310") == "10225researchblvd"

    @pytest.mark.parametrize("a, b", [
        ("123 Main Street", "123 Main St."),
        ("500 North Lamar Avenue", "500 N Lamar Ave"),
        ("42 West Elm Road, Apt 4B", "42 W. Elm Rd"),
        ("9 Oak Lane Unit 12-C", "9 Oak Ln"),
        ("77 Sunset Drive Suite 100", "77 Sunset Dr Ste 220"),
    ])
    def test_equivalent_forms(self, a, b):
        assert normalize_address(a) == normalize_address(b)

    def test_direction_word_inside_street_name_kept(self):
        assert normalize_address("1 Eastwood Court") == "1eastwoodct"

    @pytest.mark.parametrize("address", [
        "10225 Research Blvd #310, Austin, TX 78759",
        "500 North Lamar Avenue Suite 4",
        "1 Infinite Loop, Cupertino, CA 95014",
        "",
    ])
    def test_case_invariance(self, address):
        assert normalize_address(address) == normalize_address(address.upper())

    def test_none(self):
        assert normalize_address(None) == ""


# ===========================================================================
# Phone normalization
# ===========================================================================
class TestNormalizePhone:

    @pytest.mark.parametrize("raw", [
        "(512) 555-1234",
        "512-555-1234",
        "512.555.1234",
        "5125551234",
        "+1 512 555 1234",
        "1-512-555-1234",
        "+1 (512) 555-1234",
    ])
    def test_punctuation_and_country_code(self, raw):
        assert normalize_phone(raw) == "5125551234"

    def test_extension_truncated(self):
        assert normalize_phone("512-555-1234 ext. 99") == "5125551234"

    def test_empty(self):
        assert normalize_phone(None) == ""
        assert normalize_phone("") == ""
        assert normalize_phone("call us") == ""

    def test_short_number_not_padded(self):
        assert normalize_phone("555-1234") == "5551234"


# ===========================================================================
# Address parsing
# ===========================================================================
class TestParseAddress:

    def test_full_address(self):
        parts = parse_address("10225 Research Blvd #310, Austin, TX 78759")
        assert parts.street == "10225 Research Blvd #310"
        assert parts.city == "Austin"
        assert parts.state == "TX"
        assert parts.zip == "78759"

    def test_zip_plus_four(self):
        assert parse_address("1 Main St, Austin, TX 78759-1234").zip == "78759-1234"

    def test_state_without_zip(self):
        parts = parse_address("1 Main St, Austin, TX")
        assert parts.state == "TX"
        assert parts.zip == ""

    def test_spelled_out_state_yields_no_zip(self):
        parts = parse_address("1 Main St, Austin, Texas 78759")
        assert parts.state == ""
        assert parts.zip == ""

    @pytest.mark.parametrize("raw", ["", "1 Main St", "1 Main St, Austin", None])
    def test_missing_segments_never_raise(self, raw):
        parts = parse_address(raw)
        assert parts.zip == ""
        assert parts.state == ""


# ===========================================================================
# normalize_nap
# ===========================================================================
class TestNormalizeNap:

    def test_fields(self, gents_place):
        n = normalize_nap(gents_place)
        assert n.name == "gentsplace"
        assert n.phone == "5125551234"
        assert n.street == "10225researchblvd"
        assert n.city == "austin"
        assert n.state == "tx"
        assert n.zip == "78759"

    def test_deterministic(self, gents_place):
        assert normalize_nap(gents_place) == normalize_nap(gents_place)

    def test_empty_record(self):
        n = normalize_nap(NAPRecord())
        assert n.to_dict() == {
            "name": "", "address": "", "phone": "",
            "street": "", "city": "", "state": "", "zip": "",
        }


# ===========================================================================
# compare_nap
# ===========================================================================
class TestCompareNap:

    def test_directory_variant_matches(self, gents_place):
        target = NAPRecord(
            "Gents Place Barbershop",
            "10225 Research Boulevard Suite 310, Austin, Texas 78759",
            "512-555-1234",
        )
        result = compare_nap(gents_place, target)
        assert result.name_match is True
        assert result.address_match is True
        assert result.phone_match is True
        assert result.overall_match is True
        assert result.confidence == 100

    def test_different_name_same_address(self, gents_place):
        target = NAPRecord(
            "Michaels", "10225 Research Boulevard, Austin, TX 78759", "(512) 555-9999",
        )
        result = compare_nap(gents_place, target)
        assert result.name_match is False
        assert result.address_match is True
        assert result.phone_match is False
        assert result.overall_match is False
        assert result.confidence == 50
        assert result.details.address_score == 100.0
        assert result.details.phone_score == 0.0
        assert result.details.name_score < 80

    def test_empty_target_address(self, gents_place):
        target = NAPRecord("The Gents Place", "", "(512) 555-1234")
        result = compare_nap(gents_place, target)
        assert result.address_match is False
        assert result.overall_match is False
        # Empty street is contained in any street, city still differs.
        assert result.details.address_score == 50.0

    def test_both_addresses_blank(self):
        result = compare_nap(NAPRecord("Acme", ""), NAPRecord("Acme", ""))
        assert result.address_match is True
        assert result.overall_match is True
        assert result.confidence == 90

    @pytest.mark.parametrize("record", [
        NAPRecord("The Gents Place", "10225 Research Blvd #310, Austin, TX 78759", "(512) 555-1234"),
        NAPRecord("Acme Plumbing", "1 Main St, Springfield, IL 62701", "217-555-0100"),
        NAPRecord("Joe's Pizza", "7 Carmine St, New York, NY", "+1 212 555 0199"),
    ])
    def test_self_comparison(self, record):
        result = compare_nap(record, record)
        assert result.overall_match is True
        assert result.confidence >= 90

    def test_address_symmetry_for_equal_streets(self):
        a = NAPRecord("Acme", "1 Main Street, Austin, TX 78701")
        b = NAPRecord("Acme", "1 Main St., Dallas, TX 78701")
        assert compare_nap(a, b).address_match == compare_nap(b, a).address_match
        c = NAPRecord("Acme", "1 Main St, Austin, TX")
        assert compare_nap(a, c).address_match == compare_nap(c, a).address_match is True

    def test_missing_phone_never_disqualifies(self):
        a = NAPRecord("Acme", "1 Main St, Austin, TX 78701", "512-555-0000")
        b = NAPRecord("Acme", "1 Main St, Austin, TX 78701")
        result = compare_nap(a, b)
        assert result.phone_match is True
        assert result.overall_match is True
        assert result.confidence == 90

    def test_zip_mismatch_blocks_address(self):
        a = NAPRecord("Acme", "1 Main St, Austin, TX 78701")
        b = NAPRecord("Acme", "1 Main St, Austin, TX 78702")
        result = compare_nap(a, b)
        assert result.address_match is False
        # Zip only gates the boolean; street and city both scored.
        assert result.details.address_score == 100.0

    def test_missing_zip_is_unknown(self):
        a = NAPRecord("Acme", "1 Main St, Austin, TX 78701")
        b = NAPRecord("Acme", "1 Main St, Austin")
        assert compare_nap(a, b).address_match is True

    def test_similar_names_match(self):
        a = NAPRecord("Gents Place", "1 Main St, Austin")
        b = NAPRecord("Gent's Plaace", "1 Main St, Austin")
        assert compare_nap(a, b).name_match is True

    def test_empty_normalized_name_never_matches(self):
        a = NAPRecord("The LLC", "1 Main St, Austin")
        b = NAPRecord("Acme Plumbing", "1 Main St, Austin")
        result = compare_nap(a, b)
        assert result.name_match is False
        assert result.overall_match is False
        assert result.details.name_score == 0.0

    def test_custom_weights(self, gents_place):
        weights = NAPWeights(name=30, address=60, phone=10)
        target = NAPRecord("Michaels", "10225 Research Blvd, Austin, TX 78759")
        assert compare_nap(gents_place, target, weights).confidence == 60

    def test_confidence_clamped(self, gents_place):
        weights = NAPWeights(name=80, address=80, phone=80)
        assert compare_nap(gents_place, gents_place, weights).confidence == 100

    def test_to_dict(self, gents_place):
        data = compare_nap(gents_place, gents_place).to_dict()
        assert data["overall_match"] is True
        assert set(data["details"]) == {"name_score", "address_score", "phone_score"}


class TestNAPWeights:

    def test_defaults(self):
        assert DEFAULT_NAP_WEIGHTS.name + DEFAULT_NAP_WEIGHTS.address + DEFAULT_NAP_WEIGHTS.phone == 100
        assert DEFAULT_NAP_WEIGHTS.name_similarity_threshold == 0.8

    def test_from_config(self):
        weights = NAPWeights.from_config({
            "weights": {"name": 35},
            "name_similarity_threshold": 0.9,
        })
        assert weights.name == 35
        assert weights.address == 50
        assert weights.phone == 10
        assert weights.name_similarity_threshold == 0.9

    def test_from_empty_config(self):
        assert NAPWeights.from_config(None) == DEFAULT_NAP_WEIGHTS
