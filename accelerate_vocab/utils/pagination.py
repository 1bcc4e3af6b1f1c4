# File: accelerate_vocab/utils/pagination.py
# Purpose: Pagination helper for SQLAlchemy queries on the admin tables.

from flask import current_app, request


def get_pagination_data(query, page=None, per_page=None):
    """Paginate ``query``; the page defaults to ``?page=`` and the size to ITEMS_PER_PAGE."""

    if page is None:
        page = request.args.get('page', 1, type=int)
    if per_page is None:
        per_page = current_app.config.get('ITEMS_PER_PAGE', 20)

    # error_out=False: an out-of-range page is empty rather than a 404
    return query.paginate(page=page, per_page=per_page, error_out=False)
