"""
JSON response envelope and pagination helpers.

Every endpoint answers with {success, message, data?, errors?}.
"""
import math

from flask import current_app, jsonify, request


def success_response(data=None, message='Success', status_code=200):
    body = {'success': True, 'message': message}
    if data is not None:
        body['data'] = data
    return jsonify(body), status_code


def error_response(message, status_code=400, errors=None, code=None):
    body = {'success': False, 'message': message}
    if code:
        body['code'] = code
    if errors:
        body['errors'] = errors
    return jsonify(body), status_code


def _positive_int(value, default):
    try:
        number = int(value)
    except (TypeError, ValueError):
        return default
    return number if number > 0 else default


def get_pagination_args():
    """Read page/limit from the query string, clamping limit to MAX_PAGE_SIZE."""
    default_limit = current_app.config.get('DEFAULT_PAGE_SIZE', 50)
    max_limit = current_app.config.get('MAX_PAGE_SIZE', 100)
    page = _positive_int(request.args.get('page'), 1)
    limit = min(_positive_int(request.args.get('limit'), default_limit), max_limit)
    return page, limit


def paginate(query, page, limit):
    """
    Apply offset/limit to a query and count the unpaginated total.

    Returns:
        (items, total, pagination) where pagination is
        {currentPage, totalPages, limit}
    """
    total = query.order_by(None).count()
    items = query.offset((page - 1) * limit).limit(limit).all()
    pagination = {
        'currentPage': page,
        'totalPages': math.ceil(total / limit) if limit else 0,
        'limit': limit,
    }
    return items, total, pagination
