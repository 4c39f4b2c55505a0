"""
Vehicle List Parser - Single Source of Truth
============================================

Turns raw OCR text from a photographed yard inventory list into an ordered
list of vehicle records in canonical "YEAR MAKE MODEL" form.

Processing stages (applied in order):
1. Normalize OCR errors (upper-case, JOI/§/|/O substitutions)
2. Segment into lines, dropping short and noise lines
3. Extract the model year (4-digit, then contextual 2-digit)
4. Split concatenated make/model tokens
5. Clean residual punctuation
6. Assemble Vehicle records

Every stage is a pure function of its input; the module holds no mutable
state and is safe to call concurrently.

Author: Yard OCR Project
"""

import re
import logging
from dataclasses import dataclass, replace
from typing import Dict, Iterable, List, NamedTuple, Optional, Pattern, Sequence, Tuple

logger = logging.getLogger(__name__)


# =============================================================================
# LOOKUP TABLES
# =============================================================================

# Ordered: the first listed make that prefixes a token wins.
COMMON_MAKES: Tuple[str, ...] = (
    'CHEVROLET', 'CHEVY', 'FORD', 'TOYOTA', 'HONDA', 'NISSAN', 'GMC', 'RAM',
    'JEEP', 'DODGE', 'HYUNDAI', 'KIA', 'MAZDA', 'SUBARU', 'VOLKSWAGEN', 'VW',
    'BMW', 'MERCEDES', 'AUDI', 'LEXUS', 'ACURA', 'INFINITI', 'CADILLAC',
    'BUICK', 'PONTIAC', 'LINCOLN', 'MERCURY', 'CHRYSLER', 'VOLVO', 'MITSUBISHI',
)

# Common misreads on printed inventory sheets, applied in order.
OCR_SUBSTITUTIONS: Tuple[Tuple[Pattern, str], ...] = (
    (re.compile(r'\bJOI\b', re.ASCII), '201'),   # JOI -> 201 (model years 2010-2019)
    (re.compile(r'§'), '2'),
    (re.compile(r'\|'), '1'),
    (re.compile(r'\bO\b', re.ASCII), '0'),       # standalone O only
)

# Case-sensitive. 'Vehicle' never matches upper-cased text; kept as shipped.
NOISE_MARKERS: Tuple[str, ...] = ('YARD', 'ROW', 'LOCAT', 'Vehicle')

MIN_LINE_LENGTH: int = 5

# Two-digit years 00..CENTURY_CUTOFF map to 20xx, the rest to 19xx.
CENTURY_CUTOFF: int = 30


# Pre-compiled regex patterns
_LINE_SPLIT_PATTERN = re.compile(r'[\n\r]+')
_FOUR_DIGIT_YEAR_PATTERN = re.compile(r'\b(19\d{2}|20\d{2})\b', re.ASCII)
# Two digits not preceded by a digit, followed by a letter directly or after one space
_TWO_DIGIT_YEAR_PATTERN = re.compile(r'(?<!\d)(\d{2})(?=[A-Za-z]|\s[A-Za-z])', re.ASCII)
_DISALLOWED_CHARS_PATTERN = re.compile(r'[^\w\s-]|_')
_WHITESPACE_PATTERN = re.compile(r'\s+')


# =============================================================================
# DATA MODEL
# =============================================================================

@dataclass(frozen=True)
class Vehicle:
    """
    One parsed inventory line.

    Attributes:
        year: Four-digit model year, or "" when the line had none
        make: First token after the year, may be ""
        model: Remaining tokens joined by single spaces, may be ""
        full_text: Display/edit form, never empty for emitted records
    """
    year: str
    make: str
    model: str
    full_text: str

    @classmethod
    def from_parts(cls, year: str, make: str, model: str = '') -> 'Vehicle':
        """Build a record, rendering full_text from the non-empty parts."""
        full_text = ' '.join(part for part in (year, make, model) if part)
        return cls(year=year, make=make, model=model, full_text=full_text)

    @classmethod
    def unparsed(cls, text: str) -> 'Vehicle':
        """Build a verbatim record for a line with no recognizable year."""
        return cls(year='', make='', model='', full_text=text)

    @property
    def is_parsed(self) -> bool:
        return bool(self.year)

    def with_full_text(self, full_text: str) -> 'Vehicle':
        """
        Return a copy with an edited display text.

        year/make/model are not re-derived from the new text.
        """
        return replace(self, full_text=full_text)

    def to_dict(self) -> Dict[str, str]:
        """Convert to dictionary for JSON serialization."""
        return {
            'year': self.year,
            'make': self.make,
            'model': self.model,
            'full_text': self.full_text,
        }


class YearMatch(NamedTuple):
    """A located model year and the text that followed it."""
    year: str
    rest_of_text: str


# =============================================================================
# PARSER
# =============================================================================

class VehicleParser:
    """
    Heuristic parser for yard inventory OCR text.

    The defaults reproduce the module-level tables; a parser built with a
    different century cutoff or make list is useful for inventories whose
    stock skews older or regional.

    Thread Safety: instances are read-only after construction.
    """

    def __init__(
        self,
        makes: Sequence[str] = COMMON_MAKES,
        century_cutoff: int = CENTURY_CUTOFF,
        min_line_length: int = MIN_LINE_LENGTH,
        noise_markers: Sequence[str] = NOISE_MARKERS,
    ):
        self.makes: Tuple[str, ...] = tuple(make.upper() for make in makes)
        self.century_cutoff = century_cutoff
        self.min_line_length = min_line_length
        self.noise_markers: Tuple[str, ...] = tuple(noise_markers)

    @classmethod
    def from_config(cls, config) -> 'VehicleParser':
        """Create a parser from a ParserConfig section."""
        return cls(
            century_cutoff=config.century_cutoff,
            min_line_length=config.min_line_length,
        )

    # -------------------------------------------------------------------------
    # Stages
    # -------------------------------------------------------------------------

    def normalize(self, raw: str) -> str:
        """Upper-case the text and fix known OCR misreads."""
        fixed = raw.upper()
        for pattern, replacement in OCR_SUBSTITUTIONS:
            fixed = pattern.sub(replacement, fixed)
        return fixed

    def segment(self, text: str) -> List[str]:
        """
        Split normalized text into candidate vehicle lines.

        Lines are trimmed. Lines shorter than min_line_length or containing
        a noise marker (yard/row/location headers) are dropped.
        """
        lines = []
        for line in _LINE_SPLIT_PATTERN.split(text):
            line = line.strip()
            if not line:
                continue
            if len(line) < self.min_line_length:
                logger.debug(f"Dropped short line: '{line}'")
                continue
            if any(marker in line for marker in self.noise_markers):
                logger.debug(f"Dropped noise line: '{line}'")
                continue
            lines.append(line)
        return lines

    def extract_year(self, line: str) -> Optional[YearMatch]:
        """
        Locate the model year in a line.

        Strategy:
        1. A standalone 19xx/20xx token
        2. Two digits followed by a letter ("05CHEVROLET", "05 FORD"),
           expanded with the century cutoff

        Args:
            line: One inventory line

        Returns:
            YearMatch with the year and the trimmed text after it, or None
        """
        match = _FOUR_DIGIT_YEAR_PATTERN.search(line)
        if match:
            return YearMatch(match.group(1), line[match.end():].strip())

        match = _TWO_DIGIT_YEAR_PATTERN.search(line)
        if match:
            two_digit = match.group(1)
            century = '20' if int(two_digit) <= self.century_cutoff else '19'
            return YearMatch(century + two_digit, line[match.end():].strip())

        return None

    def split_make_model(self, text: str) -> str:
        """
        Insert the missing space in a concatenated make/model token.

        "CHEVROLETIMPALA" -> "CHEVROLET IMPALA". Text that does not start
        with a known make glued to more characters is returned unchanged.
        """
        upper_text = text.upper()
        for make in self.makes:
            if len(upper_text) > len(make) and upper_text.startswith(make):
                if not upper_text[len(make)].isspace():
                    return f"{make} {text[len(make):]}"
        return text

    def clean(self, text: str) -> str:
        """Strip punctuation (hyphens kept) and collapse whitespace."""
        text = _DISALLOWED_CHARS_PATTERN.sub('', text)
        return _WHITESPACE_PATTERN.sub(' ', text).strip()

    def assemble(self, line: str) -> Optional[Vehicle]:
        """
        Build the record for one segmented line.

        Returns None when a year was found but nothing follows it, or when
        an unparsed line is empty after cleaning.
        """
        year_match = self.extract_year(line)

        if year_match is None:
            cleaned = self.clean(line)
            if not cleaned:
                return None
            logger.debug(f"No year found, keeping line verbatim: '{cleaned}'")
            return Vehicle.unparsed(cleaned)

        remainder = self.clean(self.split_make_model(year_match.rest_of_text))
        words = remainder.split()
        if not words:
            logger.debug(f"Dropped year-only line: '{line}'")
            return None

        return Vehicle.from_parts(year_match.year, words[0], ' '.join(words[1:]))

    # -------------------------------------------------------------------------
    # Entry points
    # -------------------------------------------------------------------------

    def parse(self, text: str) -> List[Vehicle]:
        """
        Parse raw OCR text into vehicle records.

        Args:
            text: Raw multi-line OCR output

        Returns:
            Records in input line order (possibly empty)
        """
        vehicles = []
        for line in self.segment(self.normalize(text)):
            vehicle = self.assemble(line)
            if vehicle is not None:
                vehicles.append(vehicle)
        return vehicles


# =============================================================================
# CONVENIENCE FUNCTIONS
# =============================================================================

# Module-level parser instance for simple usage
_default_parser = VehicleParser()


def get_parser() -> VehicleParser:
    """Get the default parser instance."""
    return _default_parser


def normalize_ocr_text(raw: str) -> str:
    return _default_parser.normalize(raw)


def segment_lines(text: str) -> List[str]:
    return _default_parser.segment(text)


def extract_year(line: str) -> Optional[YearMatch]:
    return _default_parser.extract_year(line)


def split_make_model(text: str) -> str:
    return _default_parser.split_make_model(text)


def clean_text(text: str) -> str:
    return _default_parser.clean(text)


def parse_vehicles(text: str) -> List[Vehicle]:
    """
    Parse raw OCR text into vehicle records using the default parser.

    Examples:
        >>> [v.full_text for v in parse_vehicles("2015 CHEVROLETIMPALA\\n99 FORD F150")]
        ['2015 CHEVROLET IMPALA', '1999 FORD F150']
    """
    return _default_parser.parse(text)


def format_vehicle_list(vehicles: Iterable[Vehicle]) -> str:
    """Join the display text of each record, one per line."""
    return '\n'.join(vehicle.full_text for vehicle in vehicles)
