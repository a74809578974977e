"""Book catalog module.

Provides functionality for:
- Adding, updating and deleting books
- ISBN uniqueness across the catalog
- Paginated search by title and author
"""

from .manager import BookCatalog

__all__ = ["BookCatalog"]
