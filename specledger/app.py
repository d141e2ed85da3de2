from flask import Flask, abort, jsonify, render_template, request

from specledger import config
from specledger.logger import logger
from specledger.pages import (
    available_phones,
    compare_index_view,
    compare_query_path,
    comparison_links,
    comparison_path,
    comparison_placeholder_view,
    comparison_view,
    load_error_view,
    phone_not_found_view,
    phone_view,
    site_settings,
)
from specledger.phones import (
    DataUnavailable,
    SelectionUnresolved,
    find_phone,
    load_comparison_pages,
    load_phones,
    parse_ids,
    requested_ids,
    resolve_selection,
)

app = Flask(__name__)
app.config["SECRET_KEY"] = config.SECRET_KEY
app.config.update(
    SITE_NAME=config.SITE_NAME,
    SITE_URL=config.SITE_URL,
    DATA_PATHS=config.DATA_PATHS,
    COMPARISONS_PATH=config.COMPARISONS_PATH,
    FETCH_TIMEOUT=config.FETCH_TIMEOUT,
    REPORT_MISSING_IDS=config.REPORT_MISSING_IDS,
    INCLUDE_UNLABELED_FIELDS=config.INCLUDE_UNLABELED_FIELDS,
    STATIC_EXPORT=False,
)


def _site():
    return site_settings(app.config["SITE_NAME"], app.config["SITE_URL"])


def _load_phones():
    return load_phones(app.config["DATA_PATHS"], timeout=app.config["FETCH_TIMEOUT"])


def _log_data_unavailable(error):
    logger.error(f"{error}; tried: {', '.join(error.candidates) or '(no candidates)'}")


@app.route("/")
def home():
    site = _site()
    try:
        phones = _load_phones()
    except DataUnavailable as error:
        _log_data_unavailable(error)
        return render_template("index.html", page=load_error_view(site, "/")), 503

    view = compare_index_view(
        phones,
        site,
        query=request.args.get("q", "").strip(),
        brand=request.args.get("brand", "").strip(),
        static=app.config["STATIC_EXPORT"],
    )
    return render_template("index.html", page=view)


@app.route("/phone")
def phone_by_query():
    return _render_phone(request.args.get("id", "").strip())


@app.route("/phone/<path:phone_id>/")
def phone_detail(phone_id):
    return _render_phone(phone_id)


def _render_phone(phone_id):
    site = _site()
    try:
        phones = _load_phones()
    except DataUnavailable as error:
        _log_data_unavailable(error)
        return render_template("phone.html", page=load_error_view(site, "")), 503

    phone = find_phone(phones, phone_id)
    if not phone:
        logger.warning(f"Phone not found: {phone_id or '(no id)'}")
        return render_template("phone.html", page=phone_not_found_view(site, phone_id)), 404
    return render_template("phone.html", page=phone_view(phone, site))


@app.route("/compare")
def compare():
    ids = requested_ids(request.args)
    path = compare_query_path(ids)
    return _render_comparison(ids, path, indexable=False, show_available=True)


@app.route("/compare/<slug>/")
def compare_page(slug):
    page = load_comparison_pages(app.config["COMPARISONS_PATH"]).get(slug)
    if not page:
        abort(404)
    overridden = bool(parse_ids(",".join(request.args.getlist("ids"))))
    ids = requested_ids(request.args, page["ids"])
    return _render_comparison(ids, comparison_path(slug), indexable=not overridden, show_available=False)


def _render_comparison(ids, path, indexable, show_available):
    site = _site()
    try:
        phones = _load_phones()
    except DataUnavailable as error:
        _log_data_unavailable(error)
        view = comparison_placeholder_view(site, path, "error")
        return render_template("compare.html", page=view, available=None), 503

    available = available_phones(phones) if show_available else None
    if not ids:
        state = "static" if app.config["STATIC_EXPORT"] else "empty"
        view = comparison_placeholder_view(site, path, state)
        links = comparison_links(load_comparison_pages(app.config["COMPARISONS_PATH"]))
        return render_template("compare.html", page=view, available=available, comparisons=links)

    try:
        selection = resolve_selection(ids, phones)
    except SelectionUnresolved as error:
        logger.warning(str(error))
        view = comparison_placeholder_view(site, path, "unresolved")
        return render_template("compare.html", page=view, available=available), 404

    view = comparison_view(
        selection,
        site,
        path,
        indexable=indexable,
        report_missing=app.config["REPORT_MISSING_IDS"],
        include_unlabeled=app.config["INCLUDE_UNLABELED_FIELDS"],
    )
    return render_template("compare.html", page=view, available=available)


@app.route("/api/phones")
def api_phones():
    try:
        phones = _load_phones()
    except DataUnavailable as error:
        _log_data_unavailable(error)
        return jsonify({"error": str(error)}), 503
    return jsonify({"items": phones})


def main():
    app.run(
        host=config.FLASK_HOST,
        port=config.PORT,
        debug=config.FLASK_DEBUG,
        use_reloader=config.FLASK_RELOAD,
    )


if __name__ == "__main__":
    main()
