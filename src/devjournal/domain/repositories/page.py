"""Page repository protocol."""

from __future__ import annotations

from typing import Optional, Protocol

from ...models.page import Page


class PageRepository(Protocol):
    def list_all(self) -> list[Page]:
        ...

    def get(self, page_id: int) -> Optional[Page]:
        ...

    def create(self, title: str, content: str) -> Page:
        ...

    def update(self, page_id: int, title: str, content: str) -> Optional[Page]:
        ...

    def delete(self, page_id: int) -> None:
        ...
