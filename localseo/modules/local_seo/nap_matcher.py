"""NAP (Name, Address, Phone) normalization and fuzzy matching.

Turns free-text business details into a canonical comparable form and
decides whether two listings describe the same real-world business.
Every function here is pure: no I/O, no shared state, and no exceptions
for any string input.  Malformed input degrades to empty components.

Usage::

    source = NAPRecord("The Gents Place", "10225 Research Blvd #310, Austin, TX 78759", "(512) 555-1234")
    target = NAPRecord("Gents Place Barbershop", "10225 Research Boulevard Suite 310, Austin, Texas 78759")
    result = compare_nap(source, target)
    result.overall_match, result.confidence
"""

import re
from dataclasses import asdict, dataclass, field
from typing import Any, Mapping, Optional

from localseo.utils.string_similarity import levenshtein_similarity


# ---------------------------------------------------------------------------
# Data model
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class NAPRecord:
    """Raw business identity as entered by a user or scraped from a listing."""
    name: str = ""
    address: str = ""
    phone: Optional[str] = None


@dataclass(frozen=True)
class AddressParts:
    """Comma-separated address components (``street, city, ST ZIP``)."""
    street: str = ""
    city: str = ""
    state: str = ""
    zip: str = ""


@dataclass(frozen=True)
class NormalizedNAP:
    """Canonical form of a :class:`NAPRecord`, rebuilt on every comparison."""
    name: str
    address: str
    phone: str
    street: str
    city: str
    state: str
    zip: str

    def to_dict(self) -> dict[str, str]:
        return asdict(self)


@dataclass(frozen=True)
class MatchDetails:
    """Per-field 0-100 scores."""
    name_score: float = 0.0
    address_score: float = 0.0
    phone_score: float = 0.0


@dataclass(frozen=True)
class MatchResult:
    """Outcome of comparing a source NAP against a target listing."""
    name_match: bool
    address_match: bool
    phone_match: bool
    overall_match: bool
    confidence: int
    details: MatchDetails = field(default_factory=MatchDetails)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class NAPWeights:
    """Confidence weights and the fuzzy-name threshold.

    Defaults give name 40 + address 50 + phone 10 = 100.
    """
    name: int = 40
    address: int = 50
    phone: int = 10
    name_similarity_threshold: float = 0.8

    @classmethod
    def from_config(cls, config: Optional[Mapping[str, Any]]) -> "NAPWeights":
        """Build weights from the ``nap`` section of settings.yaml."""
        config = config or {}
        weights = config.get("weights", {}) or {}
        return cls(
            name=int(weights.get("name", cls.name)),
            address=int(weights.get("address", cls.address)),
            phone=int(weights.get("phone", cls.phone)),
            name_similarity_threshold=float(
                config.get("name_similarity_threshold", cls.name_similarity_threshold)
            ),
        )


DEFAULT_NAP_WEIGHTS = NAPWeights()


# ---------------------------------------------------------------------------
# Normalization tables
# ---------------------------------------------------------------------------

_NAME_SUFFIX_RE = re.compile(
    r"\b(?:llc|inc|incorporated|ltd|limited|co|company)\b\.?", re.IGNORECASE
)
_NAME_ARTICLE_RE = re.compile(r"\b(?:the|a|an)\b")
_NON_ALNUM_RE = re.compile(r"[^a-z0-9]")
_NON_ALPHA_RE = re.compile(r"[^a-z]")
_NON_DIGIT_RE = re.compile(r"\D")

ADDRESS_ABBREVIATIONS: dict[str, str] = {
    "street": "st",
    "avenue": "ave",
    "boulevard": "blvd",
    "road": "rd",
    "drive": "dr",
    "lane": "ln",
    "court": "ct",
    "circle": "cir",
    "place": "pl",
    "suite": "ste",
    "#": "ste ",
    "apartment": "apt",
    "building": "bldg",
    "floor": "fl",
    "north": "n",
    "south": "s",
    "east": "e",
    "west": "w",
}


def _token_pattern(token: str) -> re.Pattern[str]:
    # Word boundaries only make sense around word characters.
    if token.isalnum():
        return re.compile(rf"\b{re.escape(token)}\b", re.IGNORECASE)
    return re.compile(re.escape(token))


_ABBREVIATION_PATTERNS: list[tuple[re.Pattern[str], str]] = [
    (_token_pattern(long_form), short_form)
    for long_form, short_form in ADDRESS_ABBREVIATIONS.items()
]

_UNIT_DESIGNATOR_RE = re.compile(
    r"(?:\b(?:ste|suite|apt|apartment|unit)\b\.?|#)\s*[a-z0-9-]+", re.IGNORECASE
)
_STATE_ZIP_RE = re.compile(r"([A-Z]{2})\s*(\d{5}(?:-\d{4})?)?")


# ---------------------------------------------------------------------------
# Field normalizers
# ---------------------------------------------------------------------------

def normalize_name(name: Optional[str]) -> str:
    """Collapse a business name to lowercase alphanumerics.

    Legal suffixes (LLC, Inc., Co. ...) and English articles are dropped, then
    everything outside ``[a-z0-9]`` is removed, including spaces.

    Examples:
        >>> normalize_name("The Gents Place, LLC.")
        'gentsplace'
    """
    normalized = (name or "").lower()
    normalized = _NAME_SUFFIX_RE.sub("", normalized)
    normalized = _NAME_ARTICLE_RE.sub("", normalized)
    normalized = _NON_ALNUM_RE.sub("", normalized)
    return normalized.strip()


def normalize_address(address: Optional[str]) -> str:
    """Canonicalize a street address for equality/containment checks.

    Street-type, direction and unit words are abbreviated, unit/suite
    designators are removed together with their number, and everything
    outside ``[a-z0-9]`` is stripped.  Two listings in the same building but
    different suites normalize identically.

    Examples:
        >>> normalize_address("10225 Research Boulevard Suite 310")
        '10225researchblvd'
    """
    normalized = (address or "").lower()
    for pattern, replacement in _ABBREVIATION_PATTERNS:
        normalized = pattern.sub(replacement, normalized)
    normalized = _UNIT_DESIGNATOR_RE.sub("", normalized)
    return _NON_ALNUM_RE.sub("", normalized)


def normalize_phone(phone: Optional[str]) -> str:
    """Reduce a phone number to 10 US digits, or ``""`` when absent.

    A leading country code ``1`` on an 11-digit number is dropped and any
    digits past the tenth (extensions) are truncated.  No plausibility check
    is made on the result.
    """
    if not phone:
        return ""
    digits = _NON_DIGIT_RE.sub("", phone)
    if len(digits) == 11 and digits.startswith("1"):
        digits = digits[1:]
    if len(digits) > 10:
        digits = digits[:10]
    return digits


def parse_address(full_address: Optional[str]) -> AddressParts:
    """Split ``"<street>, <city>, <ST> <ZIP>"`` into components.

    Missing segments yield empty strings.  Addresses that do not follow the
    three-segment US convention produce partial results rather than errors.
    """
    parts = [segment.strip() for segment in (full_address or "").split(",")]
    street = parts[0] if len(parts) > 0 else ""
    city = parts[1] if len(parts) > 1 else ""
    state_zip = parts[2] if len(parts) > 2 else ""

    state = ""
    zip_code = ""
    match = _STATE_ZIP_RE.search(state_zip)
    if match:
        state = match.group(1) or ""
        zip_code = match.group(2) or ""

    return AddressParts(street=street, city=city, state=state, zip=zip_code)


def normalize_nap(record: NAPRecord) -> NormalizedNAP:
    """Normalize every field of *record* and decompose its address."""
    parts = parse_address(record.address)
    return NormalizedNAP(
        name=normalize_name(record.name),
        address=normalize_address(record.address),
        phone=normalize_phone(record.phone),
        street=normalize_address(parts.street),
        city=_NON_ALPHA_RE.sub("", parts.city.lower()),
        state=parts.state.lower(),
        zip=_NON_DIGIT_RE.sub("", parts.zip),
    )


# ---------------------------------------------------------------------------
# Comparison
# ---------------------------------------------------------------------------

def _contains_either(a: str, b: str) -> bool:
    return a in b or b in a


def compare_nap(
    source: NAPRecord,
    target: NAPRecord,
    weights: NAPWeights = DEFAULT_NAP_WEIGHTS,
) -> MatchResult:
    """Compare a claimed NAP (*source*) with one observed on a listing (*target*).

    Rules:
        * name: containment either way, or Levenshtein similarity above
          ``weights.name_similarity_threshold``.  An empty normalized name on
          either side never matches.
        * address: street equal/containing, city equal, and ZIPs equal or
          missing on either side.
        * phone: equal, or missing on either side.
        * overall: name and address; phone only corroborates.

    Args:
        source: Trusted business details.
        target: Details parsed from an external listing.
        weights: Confidence weights; defaults to 40/50/10.

    Returns:
        A fresh :class:`MatchResult`.
    """
    src = normalize_nap(source)
    tgt = normalize_nap(target)

    names_present = bool(src.name) and bool(tgt.name)
    similarity = levenshtein_similarity(src.name, tgt.name) if names_present else 0.0
    name_match = names_present and (
        _contains_either(src.name, tgt.name)
        or similarity > weights.name_similarity_threshold
    )

    street_match = src.street == tgt.street or _contains_either(src.street, tgt.street)
    city_match = src.city == tgt.city
    zip_match = src.zip == tgt.zip or not src.zip or not tgt.zip
    address_match = street_match and city_match and zip_match

    phones_present = bool(src.phone) and bool(tgt.phone)
    phone_match = src.phone == tgt.phone or not phones_present

    confidence = 0
    if name_match:
        confidence += weights.name
    if address_match:
        confidence += weights.address
    if phone_match and phones_present:
        confidence += weights.phone
    confidence = max(0, min(100, confidence))

    details = MatchDetails(
        name_score=100.0 if name_match else similarity * 100,
        address_score=(
            100.0 if address_match
            else (50.0 if street_match else 0.0) + (50.0 if city_match else 0.0)
        ),
        phone_score=100.0 if phone_match else 0.0,
    )

    return MatchResult(
        name_match=name_match,
        address_match=address_match,
        phone_match=phone_match,
        overall_match=name_match and address_match,
        confidence=confidence,
        details=details,
    )
