"""Category domain service."""

import logging

from clientledger.database.base import Database
from clientledger.domain.entities import Category
from clientledger.domain.errors import ValidationError

logger = logging.getLogger(__name__)


class CategoryService:
    """Service for managing the global category registry."""

    def __init__(self, db: Database):
        """Initialize category service.

        Args:
            db: Database instance
        """
        self.db = db

    def list_categories(self) -> list[Category]:
        """List all categories ordered by name."""
        return self.db.list_categories()

    def create_category(self, name: str) -> Category:
        """Create a category.

        Duplicate names are accepted; each call creates a new category.

        Args:
            name: Category name

        Returns:
            The new Category

        Raises:
            ValidationError: If the name is blank
        """
        cleaned = (name or "").strip()
        if not cleaned:
            raise ValidationError("Category name is required")

        category_id = self.db.create_category(name=cleaned)
        logger.info("Created category %r (ID: %s)", cleaned, category_id)
        return Category(id=category_id, name=cleaned)

    def category_names(self) -> dict[int, str]:
        """Map category IDs to names."""
        return {cat.id: cat.name for cat in self.db.list_categories()}
