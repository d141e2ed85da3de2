"""
Freeze the site into a directory of static files.

Every page is rendered through the Flask test client, so the output is
byte-for-byte what the live app serves. Pages are written in directory form
(``phone/<id>/index.html``) so any static host can serve them.

Usage:
    specledger-freeze [--output PATH] [--base-url URL]

Produces:
    site/
      index.html                  - compare index, all phones
      compare/index.html          - comparison landing page with phone list
      compare/<slug>/index.html   - one per configured comparison page
      phone/<id>/index.html       - one per phone
      data/phones.json            - the dataset the pages were built from
      static/                     - stylesheet
"""

import argparse
import json
import shutil
import sys
from pathlib import Path
from urllib.parse import unquote

from specledger.app import app
from specledger.logger import logger
from specledger.pages import comparison_path, phone_path
from specledger.phones import SpecLedgerError, load_comparison_pages, load_phones


class FreezeError(SpecLedgerError):
    pass


def _output_path(output_dir, url):
    path = unquote(url).strip("/")
    if not path:
        return output_dir / "index.html"
    return output_dir.joinpath(*path.split("/")) / "index.html"


def page_urls(phones, comparison_pages):
    """URLs to freeze; the same helpers build the links the pages point at."""
    urls = ["/", "/compare"]
    for phone in phones:
        href = phone_path(phone.get("id"))
        if href is None:
            logger.warning(f"Skipping phone with no static path: {phone.get('id')!r}")
            continue
        urls.append(href)
    for slug in comparison_pages:
        href = comparison_path(slug)
        if href is None:
            logger.warning(f"Skipping comparison page with unsafe slug: {slug!r}")
            continue
        urls.append(href)
    return urls


def build_site(output_dir, base_url=None):
    output_dir = Path(output_dir)
    previous = {key: app.config[key] for key in ("SITE_URL", "STATIC_EXPORT")}
    app.config["STATIC_EXPORT"] = True
    if base_url is not None:
        app.config["SITE_URL"] = base_url.rstrip("/")
    try:
        return _write_site(output_dir)
    finally:
        app.config.update(previous)


def _write_site(output_dir):
    phones = load_phones(app.config["DATA_PATHS"], timeout=app.config["FETCH_TIMEOUT"])
    comparison_pages = load_comparison_pages(app.config["COMPARISONS_PATH"])
    urls = page_urls(phones, comparison_pages)

    logger.info(f"Freezing {len(urls)} pages into {output_dir}")
    output_dir.mkdir(parents=True, exist_ok=True)

    written = []
    client = app.test_client()
    for url in urls:
        response = client.get(url)
        if response.status_code != 200:
            raise FreezeError(f"{url} returned HTTP {response.status_code}")
        target = _output_path(output_dir, url)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(response.get_data())
        written.append(str(target))
        logger.debug(f"  {url} -> {target}")

    data_dir = output_dir / "data"
    data_dir.mkdir(parents=True, exist_ok=True)
    with open(data_dir / "phones.json", "w", encoding="utf-8") as data_file:
        json.dump({"items": phones}, data_file, ensure_ascii=False, indent=2)

    static_source = Path(app.static_folder)
    if static_source.is_dir():
        shutil.copytree(static_source, output_dir / "static", dirs_exist_ok=True)

    logger.info(f"Wrote {len(written)} pages and {len(phones)} phones")
    return {"pages": written, "phone_count": len(phones)}


def main(argv=None):
    parser = argparse.ArgumentParser(description="Freeze the SpecLedger site into static HTML files.")
    parser.add_argument(
        "--output",
        type=Path,
        default=Path("site"),
        help="Output directory for the static site (default: ./site)",
    )
    parser.add_argument(
        "--base-url",
        default=None,
        help="Absolute site URL used for canonical links (default: SPECLEDGER_SITE_URL)",
    )
    args = parser.parse_args(argv)

    try:
        build_site(args.output, base_url=args.base_url)
    except SpecLedgerError as error:
        logger.error(f"Freeze failed: {error}")
        sys.exit(1)


if __name__ == "__main__":
    main()
