import json

import pytest

from specledger.freeze import FreezeError, build_site, main, page_urls
from specledger.phones import SpecLedgerError


def test_page_urls_skip_unsafe_segments():
    urls = page_urls([{"id": "a"}, {"id": "../etc"}, {"brand": "no id"}], {"a-vs-b": {}, "bad/slug": {}})
    assert urls == ["/", "/compare", "/phone/a/", "/compare/a-vs-b/"]


def test_build_site_writes_every_page(app, tmp_path):
    output = tmp_path / "site"
    result = build_site(output, base_url="https://static.example/")

    assert result["phone_count"] == 3
    assert (output / "index.html").exists()
    assert (output / "compare" / "index.html").exists()
    assert (output / "compare" / "a-vs-b" / "index.html").exists()
    for phone_id in ("a", "b", "c"):
        assert (output / "phone" / phone_id / "index.html").exists()
    assert (output / "static" / "css" / "site.css").exists()

    dataset = json.loads((output / "data" / "phones.json").read_text(encoding="utf-8"))
    assert [item["id"] for item in dataset["items"]] == ["a", "b", "c"]

    phone_page = (output / "phone" / "a" / "index.html").read_text(encoding="utf-8")
    assert '<link rel="canonical" href="https://static.example/phone/a/">' in phone_page


def test_build_site_fails_on_broken_page(app, tmp_path, write_json):
    app.config["COMPARISONS_PATH"] = write_json("bad.json", {"pages": [{"slug": "x-vs-y", "ids": ["x", "y"]}]})
    with pytest.raises(FreezeError):
        build_site(tmp_path / "site")


def test_main_exits_nonzero_without_dataset(app, tmp_path):
    app.config["DATA_PATHS"] = [str(tmp_path / "nothing.json")]
    with pytest.raises(SystemExit) as excinfo:
        main(["--output", str(tmp_path / "site")])
    assert excinfo.value.code == 1


def test_page_urls_match_card_links():
    urls = page_urls([{"id": "pixel 10"}, {"id": "acme/x1"}], {})
    assert urls == ["/", "/compare", "/phone/pixel%2010/", "/phone/acme/x1/"]


def test_build_site_writes_pages_for_encoded_links(app, tmp_path, write_json):
    dataset = [{"id": "pixel 10", "brand": "Pixel", "model": "10"}, {"id": "acme/x1", "brand": "Acme"}]
    app.config["DATA_PATHS"] = [write_json("encoded.json", dataset)]
    app.config["COMPARISONS_PATH"] = None
    output = tmp_path / "site"
    build_site(output)

    index = (output / "index.html").read_text(encoding="utf-8")
    assert 'href="/phone/pixel%2010/"' in index
    assert 'href="/phone/acme/x1/"' in index
    assert (output / "phone" / "pixel 10" / "index.html").exists()
    assert (output / "phone" / "acme" / "x1" / "index.html").exists()


def test_frozen_pages_do_not_depend_on_query_strings(app, tmp_path):
    output = tmp_path / "site"
    build_site(output)

    index = (output / "index.html").read_text(encoding="utf-8")
    assert 'id="q"' not in index
    assert "<form" not in index

    landing = (output / "compare" / "index.html").read_text(encoding="utf-8")
    assert "URL parameters" not in landing
    assert "Pick one of the comparisons listed below." in landing
    assert '<a href="/compare/a-vs-b/">a vs b</a>' in landing


def test_build_site_restores_app_config(app, tmp_path):
    build_site(tmp_path / "site", base_url="https://static.example")

    assert app.config["SITE_URL"] == "https://specs.example"
    assert app.config["STATIC_EXPORT"] is False
    html = app.test_client().get("/").get_data(as_text=True)
    assert 'id="q"' in html
    assert '<link rel="canonical" href="https://specs.example/">' in html


def test_build_site_restores_app_config_on_failure(app, tmp_path):
    app.config["DATA_PATHS"] = [str(tmp_path / "nothing.json")]
    with pytest.raises(SpecLedgerError):
        build_site(tmp_path / "site", base_url="https://static.example")

    assert app.config["SITE_URL"] == "https://specs.example"
    assert app.config["STATIC_EXPORT"] is False
