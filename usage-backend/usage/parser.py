# usage/parser.py
"""
Weekly usage report parser.

Works on the flat text produced by usage.extractor and recovers:
- the store number ("Store 1020")
- the category sections (Meat, Seafood, ... Other Cogs)
- one record per product line:
      P10002 Chicken, Orange Dark Battered K- LB 19.26 20.97 19.09 20.17 19.90
  (product number, name, unit, four weekly quantities, printed 4-week average)

The report prints each category header ("Store 1020 Meat Inventory Usage per
$1000") AFTER the block of products it summarises, so a product belongs to the
first header that follows it. Category order is the order the headers appear
in the document.

Everything here is a pure function of the input text: no I/O, no state.
"""

import re
from dataclasses import dataclass, field, asdict
from typing import Dict, List, Optional

PARSER_VERSION = "1.0.0"

CATEGORY_LABELS = [
    "Meat",
    "Seafood",
    "Produce",
    "Grocery",
    "Paper",
    "Condiments",
    "Other Cogs",
]

UNITS = ("LB", "CT", "GAL", "PX", "BOTL")

WEEK_FIELDS = ("w1", "w2", "w3", "w4")

STORE_RE = re.compile(r"Store\s+(\d+)", re.IGNORECASE)

PRODUCT_NUMBER_RE = re.compile(r"\bP\d+\b")

# A quantity cell: digits with separators, optionally in parentheses, or a
# placeholder dash (ASCII, em-dash, or em-dash mis-decoded as cp1252).
_NUM = r"([\d().,\-]+|—|â€”)"

PRODUCT_RE = re.compile(
    r"\b(P\d+)\s+"
    r"((?!\bP\d+\b)[A-Za-z](?:(?!\bP\d+\b).)*?)\s+"
    r"(" + "|".join(UNITS) + r")\s+"
    + r"\s+".join([_NUM] * 5)
)

_K_SUFFIX_RE = re.compile(r"\s+K-\s*$")

SNIPPET_LENGTH = 80


def _header_pattern(label: str):
    words = r"\s+".join(re.escape(w) for w in label.split())
    return re.compile(
        r"Store\s+\d+\s+" + words + r"\s+Inventory\s+Usage\s+per\s+\$1000",
        re.IGNORECASE,
    )


CATEGORY_HEADER_PATTERNS = [(label, _header_pattern(label)) for label in CATEGORY_LABELS]


@dataclass
class ParsedProduct:
    product_number: str
    product_name: str
    unit: str
    weeks: Dict[str, Optional[str]] = field(default_factory=dict)
    average: Optional[str] = None

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class ParsedCategory:
    name: str
    products: List[ParsedProduct] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {"name": self.name, "products": [p.to_dict() for p in self.products]}


@dataclass
class ParsedReport:
    store_number: str
    categories: List[ParsedCategory] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "store_number": self.store_number,
            "categories": [c.to_dict() for c in self.categories],
        }

    @property
    def product_count(self) -> int:
        return sum(len(c.products) for c in self.categories)


@dataclass
class RecoveredRecord:
    """A product line matched by PRODUCT_RE, with its offset in the text"""
    offset: int
    product: ParsedProduct


@dataclass
class UnmatchedSpan:
    """A product number the record pattern could not turn into a record"""
    offset: int
    product_number: str
    snippet: str

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class RecordRecovery:
    records: List[RecoveredRecord] = field(default_factory=list)
    unmatched: List[UnmatchedSpan] = field(default_factory=list)


@dataclass
class CategoryHeader:
    name: str
    offset: int


def _clean_number(raw: str) -> str:
    # Parentheses are dropped, not read as a negative sign
    return raw.strip().replace("(", "").replace(")", "")


def _clean_name(raw: str) -> str:
    return _K_SUFFIX_RE.sub("", raw.strip()).strip()


def _snippet(text: str, offset: int) -> str:
    end = text.find("\n", offset)
    if end == -1:
        end = len(text)
    return text[offset:min(end, offset + SNIPPET_LENGTH)].strip()


def extract_store_number(text: str) -> str:
    match = STORE_RE.search(text)
    return match.group(1) if match else ""


def locate_category_headers(text: str) -> List[CategoryHeader]:
    """
    Offsets of the first header of each category present in the text,
    sorted by position.
    """
    found = []
    for label, pattern in CATEGORY_HEADER_PATTERNS:
        match = pattern.search(text)
        if match:
            found.append(CategoryHeader(name=label, offset=match.start()))
    found.sort(key=lambda h: h.offset)
    return found


def recover_product_records(text: str) -> RecordRecovery:
    """
    Scan the text for product lines.

    Returns the matched records in document order, plus a diagnostic entry
    for every product number that is not the start of a matched record
    (a line whose unit or quantities did not fit the pattern).
    """
    recovery = RecordRecovery()
    matched_spans = []

    for match in PRODUCT_RE.finditer(text):
        numbers = [_clean_number(match.group(i)) for i in range(4, 9)]
        product = ParsedProduct(
            product_number=match.group(1).strip(),
            product_name=_clean_name(match.group(2)),
            unit=match.group(3).strip(),
            weeks=dict(zip(WEEK_FIELDS, numbers[:4])),
            average=numbers[4],
        )
        recovery.records.append(RecoveredRecord(offset=match.start(), product=product))
        matched_spans.append((match.start(), match.end()))

    for token in PRODUCT_NUMBER_RE.finditer(text):
        start = token.start()
        if any(lo <= start < hi for lo, hi in matched_spans):
            continue
        recovery.unmatched.append(
            UnmatchedSpan(offset=start, product_number=token.group(0), snippet=_snippet(text, start))
        )

    return recovery


def assign_categories(headers: List[CategoryHeader], records: List[RecoveredRecord]) -> List[ParsedCategory]:
    """
    Build categories from header offsets.

    Each found header owns the records in [previous header offset (or 0),
    its own offset). Labels with no header come last, empty, in declaration
    order.
    """
    categories = []
    start = 0
    for header in headers:
        products = [r.product for r in records if start <= r.offset < header.offset]
        categories.append(ParsedCategory(name=header.name, products=products))
        start = header.offset

    found = {h.name for h in headers}
    for label in CATEGORY_LABELS:
        if label not in found:
            categories.append(ParsedCategory(name=label, products=[]))
    return categories


def parse_usage_report_with_diagnostics(text: str):
    """
    Parse report text and also return the record recovery diagnostics.

    Returns:
        Tuple of (ParsedReport, RecordRecovery)
    """
    text = text or ""
    recovery = recover_product_records(text)
    report = ParsedReport(
        store_number=extract_store_number(text),
        categories=assign_categories(locate_category_headers(text), recovery.records),
    )
    return report, recovery


def parse_usage_report(text: str) -> ParsedReport:
    report, _ = parse_usage_report_with_diagnostics(text)
    return report
