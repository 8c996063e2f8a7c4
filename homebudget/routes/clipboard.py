"""Copy/paste routes for moving budget items between budgets."""

import json

from homebudget.routes.reports import parse_report_query
from homebudget.services import budget_items, clipboard


def handle_export(query: dict) -> dict:
    """Serialize the filtered budget items.

    Args:
        query: Report filters (start, end, filter, category_id)

    Returns:
        Response with the serialized text under 'data'
    """
    try:
        filters = parse_report_query(query)
    except ValueError as e:
        return {
            'statusCode': 400,
            'headers': {'Content-Type': 'application/json'},
            'body': json.dumps({'error': 'bad_request', 'message': str(e)})
        }

    items = budget_items.get_budget_items(*filters)
    return {
        'statusCode': 200,
        'headers': {'Content-Type': 'application/json'},
        'body': json.dumps({'data': clipboard.serialize_budget_items(items)})
    }


def handle_import(body: dict) -> dict:
    """Add serialized budget items.

    Args:
        body: Request body with 'data' holding serialized items

    Returns:
        Response with the import report; 207 when only some items were added
    """
    data = body.get('data')
    if not isinstance(data, str) or not data:
        return {
            'statusCode': 400,
            'headers': {'Content-Type': 'application/json'},
            'body': json.dumps({'error': 'bad_request', 'message': 'data is required'})
        }

    try:
        report = clipboard.add_serialized_budget_items(data)
    except clipboard.SerializedItemsError as e:
        return {
            'statusCode': 207,
            'headers': {'Content-Type': 'application/json'},
            'body': json.dumps(e.report.to_dict())
        }
    except ValueError as e:
        # json.JSONDecodeError is a ValueError
        return {
            'statusCode': 400,
            'headers': {'Content-Type': 'application/json'},
            'body': json.dumps({'error': 'bad_request', 'message': str(e)})
        }

    return {
        'statusCode': 200,
        'headers': {'Content-Type': 'application/json'},
        'body': json.dumps(report.to_dict())
    }
