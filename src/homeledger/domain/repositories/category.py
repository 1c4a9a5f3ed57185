"""Category repository protocol."""

from __future__ import annotations

from typing import Optional, Protocol, runtime_checkable

from ...models.category import Category


@runtime_checkable
class CategoryRepository(Protocol):
    """Repository for managing category entities."""

    def get_by_id(self, category_id: int, *, user_id: int) -> Optional[Category]:
        ...

    def get_by_name(self, name: str, *, user_id: int) -> Optional[Category]:
        ...

    def list_all(self, *, user_id: int) -> list[Category]:
        ...

    def list_by_type(self, category_type: str, *, user_id: int) -> list[Category]:
        ...

    def create(self, category: Category, *, user_id: int) -> Category:
        ...

    def update(self, category: Category, *, user_id: int) -> Category:
        ...

    def delete(self, category_id: int, *, user_id: int) -> None:
        ...
