"""
Test Suite for Vehicle List Parser
==================================

Covers each parsing stage and the end-to-end behavior:
- OCR error normalization
- Line segmentation and noise filtering
- Year extraction (4-digit, contextual 2-digit, century cutoff)
- Make/model splitting
- Text cleaning
- Record assembly and list-level properties

Run with: pytest tests/test_vehicle_parser.py -v
"""

import dataclasses
import sys
from pathlib import Path

import pytest

# Add src directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from yard_ocr.core.vehicle_parser import (
    COMMON_MAKES,
    CENTURY_CUTOFF,
    Vehicle,
    VehicleParser,
    YearMatch,
    clean_text,
    extract_year,
    format_vehicle_list,
    normalize_ocr_text,
    parse_vehicles,
    segment_lines,
    split_make_model,
)


# =============================================================================
# TEST FIXTURES
# =============================================================================

@pytest.fixture
def parser():
    """Create a default parser instance."""
    return VehicleParser()


SAMPLE_INVENTORIES = [
    "2015 CHEVROLETIMPALA\nYARD ROW 3\n99 FORD F150",
    "YARD 7\n. 05CHEVROLET IMPALA\n2012 TOYOTA\nRANDOM JUNK LINE\n2015 !!!\n",
    "§008 honda accord\r\n|998 jeep cherokee\n\n\nFord\nA12 03DODGE NEON",
    "",
    "\n\n\n",
    "**** ####\n2010 CHEVYS10 EXT CAB",
]


# =============================================================================
# DATA MODEL TESTS
# =============================================================================

class TestVehicle:
    """Tests for the Vehicle record."""

    def test_from_parts_with_model(self):
        vehicle = Vehicle.from_parts("2015", "CHEVROLET", "IMPALA")
        assert vehicle.full_text == "2015 CHEVROLET IMPALA"

    def test_from_parts_without_model(self):
        vehicle = Vehicle.from_parts("2012", "TOYOTA")
        assert vehicle.model == ""
        assert vehicle.full_text == "2012 TOYOTA"

    def test_unparsed_record(self):
        vehicle = Vehicle.unparsed("RANDOM JUNK LINE")
        assert vehicle.year == vehicle.make == vehicle.model == ""
        assert vehicle.full_text == "RANDOM JUNK LINE"
        assert vehicle.is_parsed is False

    def test_records_are_immutable(self):
        vehicle = Vehicle.from_parts("2015", "FORD", "F150")
        with pytest.raises(dataclasses.FrozenInstanceError):
            vehicle.full_text = "something else"  # type: ignore

    def test_edit_does_not_rederive_fields(self):
        """Editing the display text leaves year/make/model as parsed."""
        vehicle = Vehicle.from_parts("2015", "FORD", "F150")
        edited = vehicle.with_full_text("2016 FORD F-250")
        assert edited.full_text == "2016 FORD F-250"
        assert edited.year == "2015"
        assert edited.model == "F150"
        assert vehicle.full_text == "2015 FORD F150"

    def test_to_dict(self):
        d = Vehicle.from_parts("1999", "FORD", "F150").to_dict()
        assert d == {
            'year': "1999",
            'make': "FORD",
            'model': "F150",
            'full_text': "1999 FORD F150",
        }


# =============================================================================
# NORMALIZER TESTS
# =============================================================================

class TestNormalizeOCRText:
    """Tests for OCR error normalization."""

    def test_uppercases(self):
        assert normalize_ocr_text("2015 chevrolet impala") == "2015 CHEVROLET IMPALA"

    def test_joi_word_becomes_201(self):
        assert normalize_ocr_text("JOI HONDA") == "201 HONDA"

    def test_joi_inside_word_untouched(self):
        assert normalize_ocr_text("JOI5 HONDA") == "JOI5 HONDA"

    def test_section_sign_becomes_2(self):
        assert normalize_ocr_text("§008 HONDA ACCORD") == "2008 HONDA ACCORD"

    def test_pipe_becomes_1(self):
        assert normalize_ocr_text("|998 JEEP CHEROKEE") == "1998 JEEP CHEROKEE"

    def test_standalone_o_becomes_zero(self):
        assert normalize_ocr_text("GMC O SERIES") == "GMC 0 SERIES"

    def test_o_inside_word_untouched(self):
        assert normalize_ocr_text("TOYOTA COROLLA") == "TOYOTA COROLLA"

    def test_applies_across_lines(self):
        assert normalize_ocr_text("§015 ford\n|999 kia") == "2015 FORD\n1999 KIA"


# =============================================================================
# SEGMENTER TESTS
# =============================================================================

class TestSegmentLines:
    """Tests for line splitting and noise filtering."""

    def test_splits_and_trims(self):
        text = "2015 FORD F150\n\n\r\n  99 KIA RIO  "
        assert segment_lines(text) == ["2015 FORD F150", "99 KIA RIO"]

    def test_drops_noise_markers(self):
        text = "YARD 4\nROW 3\nLOCATION A\n2015 FORD F150"
        assert segment_lines(text) == ["2015 FORD F150"]

    def test_marker_matches_as_substring(self):
        """CROWN contains ROW, so the whole line is treated as noise."""
        assert segment_lines("2010 FORD CROWN VICTORIA") == []

    def test_short_lines_dropped(self):
        assert segment_lines("FORD\nABCD\nABCDE") == ["ABCDE"]

    def test_length_is_measured_after_trim(self):
        assert segment_lines("   Ford    ") == []

    def test_mixed_case_vehicle_marker(self):
        """The Vehicle marker is case-sensitive."""
        assert segment_lines("Vehicle list") == []
        assert segment_lines("VEHICLE LIST") == ["VEHICLE LIST"]

    def test_preserves_order(self):
        text = "2001 HONDA CIVIC\n1998 FORD TAURUS\n2005 KIA RIO"
        assert segment_lines(text) == ["2001 HONDA CIVIC", "1998 FORD TAURUS", "2005 KIA RIO"]

    def test_empty_text(self):
        assert segment_lines("") == []


# =============================================================================
# YEAR EXTRACTOR TESTS
# =============================================================================

class TestExtractYear:
    """Tests for year extraction."""

    def test_four_digit_year(self):
        assert extract_year("2015 CHEVROLET IMPALA") == YearMatch("2015", "CHEVROLET IMPALA")

    def test_four_digit_1900s(self):
        assert extract_year("1987 BUICK REGAL") == YearMatch("1987", "BUICK REGAL")

    def test_text_before_year_discarded(self):
        assert extract_year("#12 2008 TOYOTA CAMRY") == YearMatch("2008", "TOYOTA CAMRY")

    def test_year_only(self):
        assert extract_year("2015") == YearMatch("2015", "")

    def test_two_digit_glued_to_make(self):
        result = extract_year(". 05CHEVROLET IMPALA")
        assert result is not None
        assert result.year == "2005"
        assert result.rest_of_text == "CHEVROLET IMPALA"

    def test_two_digit_at_line_start(self):
        assert extract_year("99 FORD F150") == YearMatch("1999", "FORD F150")

    def test_two_digit_after_lot_number(self):
        """A digit pair followed by another digit is not a year."""
        assert extract_year("A12 03DODGE NEON") == YearMatch("2003", "DODGE NEON")

    @pytest.mark.parametrize("line, expected", [
        ("00 HONDA CIVIC", "2000"),
        ("30 DODGE RAM", "2030"),
        ("31 DODGE RAM", "1931"),
        ("85 CHEVY CAPRICE", "1985"),
    ])
    def test_century_cutoff(self, line, expected):
        assert extract_year(line).year == expected

    def test_custom_century_cutoff(self):
        parser = VehicleParser(century_cutoff=10)
        assert parser.extract_year("15 FORD FOCUS").year == "1915"
        assert extract_year("15 FORD FOCUS").year == "2015"

    def test_default_cutoff_value(self):
        assert CENTURY_CUTOFF == 30

    @pytest.mark.parametrize("line", [
        "RANDOM JUNK LINE",
        "STOCK 1234 FORD",
        "A 2015CHEVY",
        "123 FORD",
        "1899 FORD",
        "05  FORD",
    ])
    def test_no_year(self, line):
        assert extract_year(line) is None


# =============================================================================
# MAKE/MODEL SPLITTER TESTS
# =============================================================================

class TestSplitMakeModel:
    """Tests for concatenated make/model repair."""

    def test_splits_concatenated(self):
        assert split_make_model("CHEVROLETIMPALA") == "CHEVROLET IMPALA"

    def test_abbreviated_make(self):
        assert split_make_model("CHEVYS10") == "CHEVY S10"

    def test_long_make_listed_before_short(self):
        assert split_make_model("VOLKSWAGENJETTA") == "VOLKSWAGEN JETTA"
        assert split_make_model("VWJETTA") == "VW JETTA"

    def test_already_separated_unchanged(self):
        assert split_make_model("FORD F150") == "FORD F150"

    def test_make_alone_unchanged(self):
        assert split_make_model("FORD") == "FORD"

    def test_unknown_make_unchanged(self):
        assert split_make_model("IMPALA LS") == "IMPALA LS"

    def test_lowercase_input_keeps_model_case(self):
        assert split_make_model("chevroletimpala") == "CHEVROLET impala"

    def test_list_order_breaks_ties(self):
        """The first listed make that prefixes the text wins."""
        short_first = VehicleParser(makes=("RAM", "RAMBLER"))
        long_first = VehicleParser(makes=("RAMBLER", "RAM"))
        assert short_first.split_make_model("RAMBLERAMERICAN") == "RAM BLERAMERICAN"
        assert long_first.split_make_model("RAMBLERAMERICAN") == "RAMBLER AMERICAN"

    def test_make_table(self):
        assert len(COMMON_MAKES) == 30
        assert COMMON_MAKES.index("CHEVROLET") < COMMON_MAKES.index("CHEVY")
        assert all(make == make.upper() for make in COMMON_MAKES)


# =============================================================================
# CLEANER TESTS
# =============================================================================

class TestCleanText:
    """Tests for punctuation and whitespace cleanup."""

    def test_collapses_whitespace(self):
        assert clean_text("  FORD   F-150  ") == "FORD F-150"

    def test_removes_punctuation(self):
        assert clean_text("TOYOTA, CAMRY.") == "TOYOTA CAMRY"

    def test_keeps_hyphen(self):
        assert clean_text("F-150 SUPER-DUTY!") == "F-150 SUPER-DUTY"

    def test_no_double_space_after_removal(self):
        assert clean_text("FORD . F150") == "FORD F150"

    def test_all_punctuation(self):
        assert clean_text("!!! ***") == ""

    def test_removes_underscores(self):
        assert clean_text("F_150") == "F150"
        assert clean_text("__________") == ""


# =============================================================================
# ASSEMBLER / END-TO-END TESTS
# =============================================================================

class TestParseVehicles:
    """End-to-end parsing tests."""

    def test_separator_rows_dropped(self):
        vehicles = parse_vehicles("__________\n2015 FORD F_150")
        assert [v.full_text for v in vehicles] == ["2015 FORD F150"]
        assert vehicles[0].model == "F150"

    def test_reference_inventory(self):
        vehicles = parse_vehicles("2015 CHEVROLETIMPALA\nYARD ROW 3\n99 FORD F150")
        assert vehicles == [
            Vehicle("2015", "CHEVROLET", "IMPALA", "2015 CHEVROLET IMPALA"),
            Vehicle("1999", "FORD", "F150", "1999 FORD F150"),
        ]

    def test_no_year_fallback(self):
        vehicles = parse_vehicles("RANDOM JUNK LINE")
        assert vehicles == [Vehicle("", "", "", "RANDOM JUNK LINE")]

    def test_short_line_dropped(self):
        assert parse_vehicles("Ford") == []

    def test_make_only(self):
        assert parse_vehicles("2012 TOYOTA") == [Vehicle("2012", "TOYOTA", "", "2012 TOYOTA")]

    def test_multi_word_model(self):
        [vehicle] = parse_vehicles("2008 ford f-150 super crew")
        assert vehicle.make == "FORD"
        assert vehicle.model == "F-150 SUPER CREW"
        assert vehicle.full_text == "2008 FORD F-150 SUPER CREW"

    def test_year_without_remainder_dropped(self):
        assert parse_vehicles("2015 !!!") == []

    def test_unparsed_line_empty_after_cleaning_dropped(self):
        assert parse_vehicles("**** ####") == []

    def test_two_digit_with_concatenated_make(self):
        [vehicle] = parse_vehicles(". 05CHEVROLETIMPALA LS")
        assert vehicle.year == "2005"
        assert vehicle.make == "CHEVROLET"
        assert vehicle.model == "IMPALA LS"

    def test_ocr_substitutions_feed_year(self):
        vehicles = parse_vehicles("§008 honda accord\n|998 jeep cherokee")
        assert [v.full_text for v in vehicles] == ["2008 HONDA ACCORD", "1998 JEEP CHEROKEE"]

    def test_mixed_case_vehicle_header_survives(self):
        """Upper-casing happens first, so a 'Vehicle' header is kept verbatim."""
        assert parse_vehicles("Vehicle List") == [Vehicle.unparsed("VEHICLE LIST")]

    def test_punctuation_in_fallback_cleaned(self):
        assert parse_vehicles("STOCK #4471, SOLD") == [Vehicle.unparsed("STOCK 4471 SOLD")]

    def test_no_deduplication(self):
        vehicles = parse_vehicles("2015 FORD F150\n2015 FORD F150")
        assert len(vehicles) == 2

    def test_custom_parser_min_line_length(self):
        parser = VehicleParser(min_line_length=3)
        assert parser.parse("Ford") == [Vehicle.unparsed("FORD")]

    @pytest.mark.parametrize("text", SAMPLE_INVENTORIES)
    def test_output_bounded_by_segmented_lines(self, text):
        assert len(parse_vehicles(text)) <= len(segment_lines(normalize_ocr_text(text)))

    @pytest.mark.parametrize("text", SAMPLE_INVENTORIES)
    def test_full_text_never_empty(self, text):
        assert all(v.full_text for v in parse_vehicles(text))

    @pytest.mark.parametrize("text", SAMPLE_INVENTORIES)
    def test_repeatable(self, text):
        assert parse_vehicles(text) == parse_vehicles(text)

    @pytest.mark.parametrize("text", SAMPLE_INVENTORIES)
    def test_years_in_range(self, text):
        for vehicle in parse_vehicles(text):
            if vehicle.year:
                assert len(vehicle.year) == 4
                assert 1900 <= int(vehicle.year) <= 2099

    def test_never_raises_on_odd_input(self):
        for text in ["\x00\x01", "§§§§§§", "|||| ||||", "\t\t\t\t\t", "ÉÉÉÉÉ 2015 ÜBER"]:
            parse_vehicles(text)


class TestFormatVehicleList:
    """Tests for the newline-joined display format."""

    def test_joins_full_text(self):
        vehicles = parse_vehicles("2015 CHEVROLETIMPALA\n99 FORD F150")
        assert format_vehicle_list(vehicles) == "2015 CHEVROLET IMPALA\n1999 FORD F150"

    def test_uses_edited_text(self):
        vehicles = [Vehicle.from_parts("2015", "FORD", "F150").with_full_text("2015 FORD F-150 XLT")]
        assert format_vehicle_list(vehicles) == "2015 FORD F-150 XLT"

    def test_empty(self):
        assert format_vehicle_list([]) == ""
