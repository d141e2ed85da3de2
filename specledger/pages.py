"""
View models for every page.

Each builder takes a snapshot of its inputs (records, selection, filter
values, site settings) and returns a plain dict that the Jinja templates turn
into markup. Nothing here touches Flask or the request, so the same inputs
always give the same output.
"""

from urllib.parse import quote, urlencode

from specledger.phones import (
    PLACEHOLDER,
    brand_options,
    filter_phones,
    flatten_value,
    format_date,
    nested,
    phone_name,
    spec_fields,
)

EMPTY_SELECTION_TEXT = (
    "Select phones to compare using URL parameters "
    "(e.g., ?ids=google-pixel-10,google-pixel-10-pro)"
)
UNRESOLVED_ERROR_TEXT = "No valid phone IDs found. Check the available phones list below."
UNRESOLVED_ROW_TEXT = "No phones found with provided IDs."
COMPARISON_ERROR_TEXT = "Error loading comparison data. Please try again."
COMPARISON_ERROR_ROW_TEXT = "Error loading data."
LOAD_ERROR_TEXT = "Failed to load data. Ensure data/phones.json exists."
STATIC_SELECTION_TEXT = "Pick one of the comparisons listed below."

INDEXABLE = "index, follow"
NOT_INDEXABLE = "noindex, follow"
HIDDEN = "noindex"


def site_settings(name, url=""):
    return {"name": name, "url": (url or "").rstrip("/")}


def canonical_url(site, path):
    return f"{site['url']}{path}" if site["url"] else path


def _is_path_safe(value):
    segments = str(value or "").split("/")
    return all(segment not in ("", ".", "..") for segment in segments)


def phone_path(phone_id):
    """Path-form URL of a phone page, or None when the id cannot be a path."""
    if not _is_path_safe(phone_id):
        return None
    return f"/phone/{quote(str(phone_id), safe='/')}/"


def phone_query_path(phone_id):
    return "/phone?" + urlencode({"id": phone_id or ""})


def comparison_path(slug):
    if "/" in str(slug) or not _is_path_safe(slug):
        return None
    return f"/compare/{quote(str(slug))}/"


def compare_query_path(ids):
    if not ids:
        return "/compare"
    return "/compare?" + urlencode({"ids": ",".join(ids)}, safe=",")


def page_meta(site, title, description, path, robots=INDEXABLE, jsonld=None):
    return {
        "title": title,
        "description": description,
        "canonical": canonical_url(site, path) if path else "",
        "robots": robots,
        "jsonld": jsonld,
    }


def _with_unit(value, unit):
    if not value:
        return PLACEHOLDER
    return f"{value} {unit}"


def _inches(value):
    if not value:
        return PLACEHOLDER
    return f'{value}"'


def product_jsonld(phone):
    brand = phone.get("brand") or ""
    return {
        "@context": "https://schema.org",
        "@type": "Product",
        "name": phone_name(phone),
        "brand": {"@type": "Brand", "name": brand},
        "model": phone.get("model") or "",
        "releaseDate": phone.get("release_date") or "",
        "description": phone.get("description") or "",
    }


# ---------- Compare index ----------

def _card(phone, static=False):
    name = phone_name(phone)
    href = phone_path(phone.get("id"))
    if href is None and not static:
        href = phone_query_path(phone.get("id"))
    return {
        "id": phone.get("id"),
        "href": href,
        "name": name,
        "badge": phone.get("brand") or "",
        "facts": [
            ("Release", format_date(phone.get("release_date"))),
            ("Display", _inches(nested(phone, "display", "size_in"))),
            ("Chipset", nested(phone, "chipset", "name") or PLACEHOLDER),
            ("Battery", _with_unit(nested(phone, "battery", "mah"), "mAh")),
        ],
    }


def compare_index_view(phones, site, query="", brand="", static=False):
    """
    Cards for the phones passing the filter. A static export has no server to
    answer queries or /phone?id= lookups, so its cards only link to path-form
    pages and the filter form is left out.
    """
    filtered = filter_phones(phones, query, brand)
    return {
        "meta": page_meta(
            site,
            f"Compare Phones – {site['name']}",
            "Browse and filter phone specifications sourced from official manufacturer pages.",
            "/",
        ),
        "query": query,
        "brand": brand,
        "brands": brand_options(phones),
        "count_label": f"{len(filtered)} phones",
        "static": static,
        "cards": [_card(phone, static=static) for phone in filtered],
    }


def load_error_view(site, path):
    return {
        "meta": page_meta(site, f"Data unavailable – {site['name']}", LOAD_ERROR_TEXT, path, robots=HIDDEN),
        "load_error": LOAD_ERROR_TEXT,
    }


# ---------- Phone detail ----------

def _block(title, rows):
    return {
        "title": title,
        "rows": [(label, PLACEHOLDER if value in (None, "") else value) for label, value in rows],
    }


def phone_view(phone, site):
    name = phone_name(phone)
    release = format_date(phone.get("release_date"))
    pills = [
        nested(phone, "os", "name"),
        nested(phone, "chipset", "name"),
        nested(phone, "display", "type"),
        nested(phone, "waterproof", "rating"),
    ]
    refresh = nested(phone, "display", "refresh_hz")
    ram = nested(phone, "memory", "ram_gb")
    storage = nested(phone, "storage", "gb")

    blocks = [
        _block("Core", [
            ("Brand", phone.get("brand")),
            ("Model", phone.get("model")),
            ("OS", nested(phone, "os", "name")),
            ("Release", release),
        ]),
        _block("Display", [
            ("Size", _inches(nested(phone, "display", "size_in"))),
            ("Type", nested(phone, "display", "type")),
            ("Resolution", nested(phone, "display", "resolution")),
            ("Refresh", _with_unit(refresh, "Hz")),
        ]),
        _block("Performance", [
            ("Chipset", nested(phone, "chipset", "name")),
            ("RAM", _with_unit(ram, "GB")),
            ("Storage", _with_unit(storage, "GB")),
            ("5G", "Yes" if nested(phone, "connectivity", "five_g") else PLACEHOLDER),
        ]),
        _block("Battery", [
            ("Capacity", _with_unit(nested(phone, "battery", "mah"), "mAh")),
            ("Wired", _with_unit(nested(phone, "charging", "wired_w"), "W")),
            ("Wireless", _with_unit(nested(phone, "charging", "wireless_w"), "W")),
        ]),
    ]

    description = phone.get("description") or f"Official specifications for the {name}."
    return {
        "meta": page_meta(
            site,
            f"{name} Specs – {site['name']}",
            description,
            phone_path(phone.get("id")) or phone_query_path(phone.get("id")),
            jsonld=product_jsonld(phone),
        ),
        "found": True,
        "name": name,
        "subheading": f"Release: {release} • ID: {phone.get('id')}",
        "pills": [str(pill) for pill in pills if pill],
        "blocks": blocks,
        "sources": [url for url in phone.get("source_urls") or [] if url],
    }


def phone_not_found_view(site, phone_id):
    return {
        "meta": page_meta(
            site,
            f"Phone not found – {site['name']}",
            f"No phone with ID {phone_id or '(none)'} exists in the dataset.",
            "",
            robots=HIDDEN,
        ),
        "found": False,
        "phone_id": phone_id,
    }


# ---------- Comparison ----------

def comparison_models(phones):
    return " vs ".join(phone_name(phone) for phone in phones)


def _source_link(phone):
    if phone.get("source_url"):
        return phone["source_url"]
    urls = [url for url in phone.get("source_urls") or [] if url]
    return urls[0] if urls else None


def comparison_jsonld(phones, models):
    return {
        "@context": "https://schema.org",
        "@type": "ItemList",
        "name": models,
        "itemListElement": [
            {"@type": "ListItem", "position": position, "item": product_jsonld(phone)}
            for position, phone in enumerate(phones, start=1)
        ],
    }


def comparison_view(selection, site, path, indexable=False, report_missing=False, include_unlabeled=False):
    """Side-by-side table for a resolved selection with at least one record."""
    phones = selection["phones"]
    models = comparison_models(phones)
    rows = [
        {"label": label, "cells": [flatten_value(phone.get(key)) for phone in phones]}
        for key, label in spec_fields(phones, include_unlabeled=include_unlabeled)
    ]

    notice = ""
    if report_missing and selection["missing"]:
        notice = "Not found: " + ", ".join(selection["missing"])

    return {
        "meta": page_meta(
            site,
            f"{models} – Specs Comparison – {site['name']}",
            (
                f"Compare {models} side-by-side using official manufacturer specifications. "
                f"{site['name']} provides specification-based product comparisons."
            ),
            path,
            robots=INDEXABLE if indexable else NOT_INDEXABLE,
            jsonld=comparison_jsonld(phones, models),
        ),
        "heading": models,
        "error": "",
        "notice": notice,
        "header": [{"brand": phone.get("brand") or "", "model": phone.get("model") or ""} for phone in phones],
        "rows": rows,
        "sources": [_source_link(phone) for phone in phones],
        "placeholder": "",
    }


PLACEHOLDER_STATES = {
    "empty": ("", EMPTY_SELECTION_TEXT, INDEXABLE),
    "static": ("", STATIC_SELECTION_TEXT, INDEXABLE),
    "unresolved": (UNRESOLVED_ERROR_TEXT, UNRESOLVED_ROW_TEXT, HIDDEN),
    "error": (COMPARISON_ERROR_TEXT, COMPARISON_ERROR_ROW_TEXT, HIDDEN),
}


def comparison_placeholder_view(site, path, state):
    """Comparison page with no table: nothing requested, nothing matched, or no data."""
    error, placeholder, robots = PLACEHOLDER_STATES[state]
    return {
        "meta": page_meta(
            site,
            f"Compare Phones – {site['name']}",
            f"Compare phone specifications side-by-side on {site['name']}.",
            path,
            robots=robots,
        ),
        "heading": "Phone Comparison",
        "error": error,
        "notice": "",
        "header": [],
        "rows": [],
        "sources": [],
        "placeholder": placeholder,
    }


def available_phones(phones):
    return [{"id": phone.get("id"), "name": phone_name(phone)} for phone in phones]


def comparison_links(comparison_pages):
    links = []
    for slug in comparison_pages:
        href = comparison_path(slug)
        if href:
            links.append({"href": href, "label": slug.replace("-vs-", " vs ")})
    return links
