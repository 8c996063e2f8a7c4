"""Category management routes."""

import json

from homebudget.models.entities import CategoryType
from homebudget.services import categories


def handle_list() -> dict:
    """List all categories.

    Returns:
        Response with category list
    """
    return {
        'statusCode': 200,
        'headers': {'Content-Type': 'application/json'},
        'body': json.dumps({'categories': [c.to_dict() for c in categories.list_categories()]})
    }


def handle_create(body: dict) -> dict:
    """Create a new category.

    Args:
        body: Category data (description, type)

    Returns:
        Response with created category
    """
    required = ['description', 'type']
    for field in required:
        if not body.get(field):
            return {
                'statusCode': 400,
                'headers': {'Content-Type': 'application/json'},
                'body': json.dumps({'error': 'bad_request', 'message': f'{field} is required'})
            }

    try:
        category = categories.add_category(body['description'], CategoryType.from_label(body['type']))
    except ValueError as e:
        return {
            'statusCode': 400,
            'headers': {'Content-Type': 'application/json'},
            'body': json.dumps({'error': 'bad_request', 'message': str(e)})
        }

    return {
        'statusCode': 201,
        'headers': {'Content-Type': 'application/json'},
        'body': json.dumps(category.to_dict())
    }


def handle_update(category_id: int, body: dict) -> dict:
    """Update a category.

    Missing fields keep their current values.

    Args:
        category_id: Category ID
        body: Updated category data

    Returns:
        Response with updated category
    """
    try:
        current = categories.get_category(category_id)
    except LookupError:
        return {
            'statusCode': 404,
            'headers': {'Content-Type': 'application/json'},
            'body': json.dumps({'error': 'not_found', 'message': 'Category not found'})
        }

    try:
        category_type = CategoryType.from_label(body['type']) if 'type' in body else current.type
        updated = categories.update_category(
            category_id,
            body.get('description', current.description),
            category_type
        )
    except ValueError as e:
        return {
            'statusCode': 400,
            'headers': {'Content-Type': 'application/json'},
            'body': json.dumps({'error': 'bad_request', 'message': str(e)})
        }

    return {
        'statusCode': 200,
        'headers': {'Content-Type': 'application/json'},
        'body': json.dumps(updated.to_dict())
    }


def handle_delete(category_id: int) -> dict:
    """Delete a category that no expense uses."""
    try:
        deleted = categories.delete_category(category_id)
    except ValueError as e:
        return {
            'statusCode': 400,
            'headers': {'Content-Type': 'application/json'},
            'body': json.dumps({'error': 'bad_request', 'message': str(e)})
        }

    if not deleted:
        return {
            'statusCode': 404,
            'headers': {'Content-Type': 'application/json'},
            'body': json.dumps({'error': 'not_found', 'message': 'Category not found'})
        }

    return {
        'statusCode': 200,
        'headers': {'Content-Type': 'application/json'},
        'body': json.dumps({'deleted': True})
    }
