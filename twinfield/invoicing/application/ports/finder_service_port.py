from collections.abc import Mapping
from typing import Protocol

from twinfield.shared.infrastructure.services.finder_service import SearchResult


class FinderServicePort(Protocol):
    async def search_finder(
        self,
        finder_type: str,
        pattern: str,
        field: int,
        first_row: int,
        max_rows: int,
        options: Mapping[str, str] | None = None,
    ) -> SearchResult: ...
