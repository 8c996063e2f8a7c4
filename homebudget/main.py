"""Main request handler for the Home Budget API."""

import json
import os
from typing import Any, Optional

from aws_lambda_powertools import Logger

from homebudget.services import database
from homebudget.utils import config

logger = Logger(service="homebudget-api")


def make_response(status_code: int, body: Any, content_type: str = 'application/json') -> dict:
    """Create API Gateway response.

    Args:
        status_code: HTTP status code
        body: Response body (will be JSON-encoded if dict/list)
        content_type: Content-Type header

    Returns:
        API Gateway response dict
    """
    headers = {
        'Content-Type': content_type,
        'Access-Control-Allow-Origin': '*',
        'Access-Control-Allow-Headers': 'Content-Type',
        'Access-Control-Allow-Methods': 'GET,POST,PATCH,DELETE,OPTIONS'
    }

    if isinstance(body, (dict, list)):
        body = json.dumps(body)

    return {
        'statusCode': status_code,
        'headers': headers,
        'body': body
    }


def error_response(status_code: int, error: str, message: str) -> dict:
    """Create error response.

    Args:
        status_code: HTTP status code
        error: Error code
        message: Error message

    Returns:
        API Gateway response dict
    """
    return make_response(status_code, {'error': error, 'message': message})


def ensure_database() -> None:
    """Open the configured database if none is open yet."""
    if database.is_open():
        return

    settings = config.Config()
    path = config.get_db_path(settings)
    os.makedirs(os.path.dirname(os.path.abspath(path)), exist_ok=True)
    database.open_database(path)

    if settings.last_file != path:
        settings.last_file = path


def _path_id(path: str) -> Optional[int]:
    try:
        return int(path.rstrip('/').split('/')[-1])
    except ValueError:
        return None


def handler(event: dict, context: Any) -> dict:
    """Lambda handler for API Gateway events.

    Args:
        event: API Gateway event
        context: Lambda context

    Returns:
        API Gateway response
    """
    try:
        # Parse request
        http_method = event.get('requestContext', {}).get('http', {}).get('method', 'GET')
        path = event.get('rawPath', event.get('path', '/'))
        body_str = event.get('body', '{}')

        # Handle CORS preflight
        if http_method == 'OPTIONS':
            return make_response(200, '')

        try:
            body = json.loads(body_str) if body_str else {}
        except json.JSONDecodeError:
            return error_response(400, 'bad_request', 'Request body is not valid JSON')
        if not isinstance(body, dict):
            return error_response(400, 'bad_request', 'Request body must be a JSON object')

        query_params = event.get('queryStringParameters', {}) or {}

        ensure_database()
        return route_request(http_method, path, body, query_params)

    except database.StoreUnavailable as e:
        logger.error("Store unavailable", extra={"error": str(e)})
        return error_response(503, 'store_unavailable', str(e))
    except Exception as e:
        logger.exception("Unhandled error")
        return error_response(500, 'internal_error', str(e))


def route_request(method: str, path: str, body: dict, query: dict) -> dict:
    """Route request to appropriate handler.

    Args:
        method: HTTP method
        path: Request path
        body: Request body
        query: Query parameters

    Returns:
        API Gateway response
    """
    # Import route handlers (lazy to avoid circular imports)
    from homebudget.routes import categories, clipboard, expenses, reports

    # Reports
    if path == '/api/budget-items' and method == 'GET':
        return reports.handle_budget_items(query)

    if path == '/api/budget-items/by-category' and method == 'GET':
        return reports.handle_by_category(query)

    if path == '/api/budget-items/by-month' and method == 'GET':
        return reports.handle_by_month(query)

    if path == '/api/budget-items/by-category-and-month' and method == 'GET':
        return reports.handle_by_category_and_month(query)

    # Clipboard
    if path == '/api/clipboard' and method == 'GET':
        return clipboard.handle_export(query)

    if path == '/api/clipboard' and method == 'POST':
        return clipboard.handle_import(body)

    # Categories
    if path == '/api/categories' and method == 'GET':
        return categories.handle_list()

    if path == '/api/categories' and method == 'POST':
        return categories.handle_create(body)

    if path.startswith('/api/categories/'):
        category_id = _path_id(path)
        if category_id is None:
            return error_response(404, 'not_found', f'Route not found: {method} {path}')
        if method == 'PATCH':
            return categories.handle_update(category_id, body)
        if method == 'DELETE':
            return categories.handle_delete(category_id)

    # Expenses
    if path == '/api/expenses' and method == 'GET':
        return expenses.handle_list()

    if path == '/api/expenses' and method == 'POST':
        return expenses.handle_create(body)

    if path.startswith('/api/expenses/'):
        expense_id = _path_id(path)
        if expense_id is None:
            return error_response(404, 'not_found', f'Route not found: {method} {path}')
        if method == 'PATCH':
            return expenses.handle_update(expense_id, body)
        if method == 'DELETE':
            return expenses.handle_delete(expense_id)

    # Not found
    return error_response(404, 'not_found', f'Route not found: {method} {path}')
