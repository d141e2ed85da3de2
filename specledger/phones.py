"""
Phone dataset loading, selection resolving, spec projection and filtering.

Records are plain dicts straight from the JSON file. Every field other than
``id`` may be missing, nested objects included, so everything here reads
through ``.get`` and tolerates non-dict values.
"""

import json
import os
import re
from datetime import datetime
from urllib.error import URLError
from urllib.request import Request, urlopen

from specledger.logger import logger

PLACEHOLDER = "—"

YEAR_ONLY = re.compile(r"^\d{4}$")
YEAR_MONTH = re.compile(r"^\d{4}-\d{2}$")

DATASET_KEYS = ("items", "phones")

INTERNAL_FIELDS = {"id", "source_url", "source_urls", "description"}

SPEC_ORDER = [
    "brand",
    "model",
    "release_date",
    "release_year",
    "display",
    "chipset",
    "memory",
    "ram_gb",
    "storage",
    "storage_gb",
    "battery",
    "battery_mah",
    "charging",
    "camera",
    "os",
    "connectivity",
    "waterproof",
]

SPEC_LABELS = {
    "brand": "Brand",
    "model": "Model",
    "release_date": "Release Date",
    "release_year": "Release Year",
    "display": "Display",
    "chipset": "Chipset",
    "memory": "Memory",
    "ram_gb": "RAM",
    "storage": "Storage",
    "storage_gb": "Storage",
    "battery": "Battery",
    "battery_mah": "Battery",
    "charging": "Charging",
    "camera": "Camera",
    "os": "Operating System",
    "connectivity": "Connectivity",
    "waterproof": "Water Resistance",
}


class SpecLedgerError(Exception):
    pass


class DataUnavailable(SpecLedgerError):
    """No candidate dataset location produced a usable list of records."""

    def __init__(self, candidates):
        self.candidates = list(candidates)
        super().__init__("No phone dataset found")


class SelectionUnresolved(SpecLedgerError):
    """A non-empty list of requested IDs matched zero records."""

    def __init__(self, requested):
        self.requested = list(requested)
        super().__init__("No valid phone IDs found: " + ", ".join(self.requested))


# ---------- Dataset loading ----------

def _is_url(candidate):
    return str(candidate).lower().startswith(("http://", "https://"))


def _fetch_text(url, timeout=12):
    request = Request(
        url,
        headers={
            "Cache-Control": "no-cache",
            "Pragma": "no-cache",
            "Accept": "application/json",
        },
    )
    with urlopen(request, timeout=timeout) as response:
        return response.read().decode("utf-8")


def _read_candidate(candidate, timeout):
    if _is_url(candidate):
        return _fetch_text(candidate, timeout=timeout)
    with open(candidate, "r", encoding="utf-8") as data_file:
        return data_file.read()


def extract_items(data):
    """Return the record list from a parsed dataset document, or None."""
    if isinstance(data, list):
        items = data
    elif isinstance(data, dict):
        items = None
        for key in DATASET_KEYS:
            if isinstance(data.get(key), list):
                items = data[key]
                break
        if items is None:
            return None
    else:
        return None
    return [item for item in items if isinstance(item, dict)]


def load_phones(candidates, timeout=12):
    """
    Return the records of the first candidate that reads, parses as JSON and
    exposes a non-empty record list. Raises DataUnavailable when none does.
    """
    candidates = list(candidates or [])
    for candidate in candidates:
        if not _is_url(candidate) and not os.path.exists(candidate):
            logger.debug(f"Dataset candidate missing: {candidate}")
            continue
        try:
            data = json.loads(_read_candidate(candidate, timeout))
        except (URLError, TimeoutError, OSError, ValueError) as exc:
            logger.debug(f"Dataset candidate failed: {candidate} ({exc})")
            continue

        items = extract_items(data)
        if not items:
            logger.debug(f"Dataset candidate has no records: {candidate}")
            continue
        logger.debug(f"Loaded {len(items)} phones from {candidate}")
        return items

    raise DataUnavailable(candidates)


def load_comparison_pages(path):
    """Statically configured comparison pages, keyed by slug."""
    if not path or not os.path.exists(path):
        return {}
    try:
        with open(path, "r", encoding="utf-8") as pages_file:
            data = json.load(pages_file)
    except (OSError, ValueError) as exc:
        logger.warning(f"Could not read comparison pages from {path}: {exc}")
        return {}

    entries = data.get("pages") if isinstance(data, dict) else data
    pages = {}
    for entry in entries or []:
        if not isinstance(entry, dict):
            continue
        ids = entry.get("ids")
        if isinstance(ids, str):
            ids = parse_ids(ids)
        ids = [str(value).strip() for value in ids or [] if str(value).strip()]
        slug = str(entry.get("slug") or "-vs-".join(ids)).strip()
        if not slug or not ids:
            continue
        pages[slug] = {"slug": slug, "ids": ids}
    return pages


# ---------- Selection resolving ----------

def parse_ids(raw):
    if not raw:
        return []
    parsed = []
    for value in str(raw).split(","):
        value = value.strip()
        if not value or value in parsed:
            continue
        parsed.append(value)
    return parsed


def requested_ids(args, embedded_ids=None):
    """IDs from the ``ids`` query parameter, else the page-embedded list."""
    from_query = parse_ids(",".join(args.getlist("ids")))
    if from_query:
        return from_query
    return parse_ids(",".join(embedded_ids or []))


def find_phone(phones, phone_id):
    if not phone_id:
        return None
    for phone in phones:
        if phone.get("id") == phone_id:
            return phone
    return None


def resolve_selection(ids, phones):
    """
    Match requested IDs against the dataset, keeping the requested order.

    Unmatched IDs are collected in ``missing``. A non-empty request with no
    match at all raises SelectionUnresolved; an empty request resolves to an
    empty selection.
    """
    phones_by_id = {}
    for phone in phones:
        phones_by_id.setdefault(phone.get("id"), phone)

    selected = []
    missing = []
    for phone_id in ids:
        if phone_id in phones_by_id:
            selected.append(phones_by_id[phone_id])
        else:
            missing.append(phone_id)

    if ids and not selected:
        raise SelectionUnresolved(ids)
    return {"requested": list(ids), "phones": selected, "missing": missing}


# ---------- Spec projection ----------

def _label_for(key):
    return SPEC_LABELS.get(key) or key.replace("_", " ").strip().title()


def spec_fields(phones, include_unlabeled=False):
    """Displayable (key, label) pairs for a set of records."""
    seen = []
    for phone in phones:
        for key in phone.keys():
            if key in INTERNAL_FIELDS or key in seen:
                continue
            seen.append(key)

    present = set(seen)
    fields = [(key, _label_for(key)) for key in SPEC_ORDER if key in present]
    if include_unlabeled:
        fields.extend((key, _label_for(key)) for key in seen if key not in SPEC_ORDER)
    return fields


def _leaves(value):
    if isinstance(value, dict):
        for nested in value.values():
            yield from _leaves(nested)
    elif isinstance(value, (list, tuple)):
        for nested in value:
            yield from _leaves(nested)
    else:
        yield value


def _scalar(value):
    if value is True:
        return "Yes"
    return str(value)


def flatten_value(value):
    if value is None:
        return PLACEHOLDER
    if isinstance(value, dict):
        joined = " / ".join(_scalar(leaf) for leaf in _leaves(value) if leaf)
        return joined or PLACEHOLDER
    if isinstance(value, (list, tuple)):
        joined = ", ".join(_scalar(leaf) for leaf in _leaves(value) if leaf)
        return joined or PLACEHOLDER
    if value == "":
        return PLACEHOLDER
    return _scalar(value)


def nested(phone, section, key):
    block = phone.get(section)
    if not isinstance(block, dict):
        return None
    return block.get(key)


def phone_name(phone):
    return f"{phone.get('brand') or ''} {phone.get('model') or ''}".strip()


def format_date(value):
    """Readable release date; partial dates keep only the precision they have."""
    if not value:
        return PLACEHOLDER
    text = str(value).strip()
    if YEAR_ONLY.match(text):
        return text
    try:
        if YEAR_MONTH.match(text):
            return datetime.strptime(text, "%Y-%m").strftime("%b %Y")
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return text
    return parsed.strftime("%b %d, %Y")


# ---------- Filtering ----------

def _text(value):
    return str(value if value is not None else "").lower()


def matches(phone, query="", brand=""):
    if brand and phone.get("brand") != brand:
        return False
    needle = _text(query).strip()
    if not needle:
        return True
    haystack = " ".join(
        _text(part)
        for part in (
            phone.get("brand"),
            phone.get("model"),
            phone.get("id"),
            nested(phone, "chipset", "name"),
        )
    )
    return needle in haystack


def filter_phones(phones, query="", brand=""):
    return [phone for phone in phones if matches(phone, query, brand)]


def brand_options(phones):
    return sorted({str(phone["brand"]) for phone in phones if phone.get("brand")})
