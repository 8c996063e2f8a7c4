"""Category store."""

import re
import sqlite3
import unicodedata
from typing import List, Optional

from aws_lambda_powertools import Logger

from homebudget.models.entities import Category, CategoryType, type_is_positive  # noqa: F401
from homebudget.services import database

logger = Logger(service="homebudget-categories")


def normalize_description(description: str) -> str:
    """Trim, collapse whitespace runs to one space and NFC-normalize."""
    description = re.sub(r'\s+', ' ', description.strip())
    return unicodedata.normalize('NFC', description)


def _as_unique_description(description: str, ignored_id: int = -1) -> str:
    description = normalize_description(description)
    if not description:
        raise ValueError('Category description is required')

    duplicates = database.fetch_scalar(
        "SELECT COUNT(*) FROM categories WHERE description = ? AND id != ?",
        (description, ignored_id)
    )
    if duplicates:
        raise ValueError(f'Description "{description}" is already taken.')
    return description


def list_categories() -> List[Category]:
    """Get all categories in id order."""
    rows = database.fetch_all("SELECT id, description, type_id FROM categories ORDER BY id")
    return [Category.from_row(row) for row in rows]


def get_category(category_id: int) -> Category:
    """Get a category by ID.

    Raises:
        LookupError: if no category has this id
    """
    row = database.fetch_one(
        "SELECT id, description, type_id FROM categories WHERE id = ?", (category_id,)
    )
    if row is None:
        raise LookupError(f'Cannot find category with id {category_id}')
    return Category.from_row(row)


def get_category_by_description(description: str) -> Optional[Category]:
    """Get a category by its (normalized) description."""
    row = database.fetch_one(
        "SELECT id, description, type_id FROM categories WHERE description = ?",
        (normalize_description(description),)
    )
    return Category.from_row(row) if row else None


def add_category(description: str, category_type: CategoryType) -> Category:
    """Create a new category.

    Args:
        description: Category description, normalized before storing
        category_type: Category type

    Returns:
        Created category

    Raises:
        ValueError: if the description is empty or already taken
    """
    description = _as_unique_description(description)

    with database.transaction():
        database.execute(
            "INSERT INTO categories (description, type_id) VALUES (?, ?)",
            (description, category_type.value)
        )
        category_id = database.last_insert_id()

    logger.info("Category added", extra={"category_id": category_id, "description": description})
    return Category(id=category_id, description=description, type=category_type)


def update_category(category_id: int, description: str, category_type: CategoryType) -> Category:
    """Replace a category's description and type.

    Raises:
        LookupError: if the category does not exist
        ValueError: if the description is empty or taken by another category
    """
    get_category(category_id)
    description = _as_unique_description(description, ignored_id=category_id)

    with database.transaction():
        database.execute(
            "UPDATE categories SET description = ?, type_id = ? WHERE id = ?",
            (description, category_type.value, category_id)
        )

    logger.info("Category updated", extra={"category_id": category_id, "description": description})
    return Category(id=category_id, description=description, type=category_type)


def delete_category(category_id: int) -> bool:
    """Delete a category.

    Returns:
        True if deleted, False if not found

    Raises:
        ValueError: if expenses still use the category
    """
    try:
        with database.transaction():
            cursor = database.execute("DELETE FROM categories WHERE id = ?", (category_id,))
    except sqlite3.IntegrityError as e:
        raise ValueError(f'Category {category_id} still has expenses') from e

    deleted = cursor.rowcount > 0
    if deleted:
        logger.info("Category deleted", extra={"category_id": category_id})
    return deleted


def set_categories_to_defaults() -> None:
    """Replace all categories with the default set.

    Raises:
        ValueError: if any expense still references a category
    """
    try:
        with database.transaction() as conn:
            database.seed_default_categories(conn)
    except sqlite3.IntegrityError as e:
        raise ValueError('Categories cannot be reset while expenses reference them') from e
