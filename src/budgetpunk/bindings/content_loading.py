"""Content-region loading binding.

Binds the loading state of one or more data queries to the content
indicator. The binding owns at most one `show`: it is taken when any query
starts loading (and none has failed) and released when they all settle, when
one fails, or when the binding is disposed with its view.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional

from budgetpunk.stores.overlay_store import DEFAULT_MESSAGES, OverlayScope, OverlayStore

__all__ = ["QueryStatus", "ContentLoadingBinding"]


@dataclass(frozen=True)
class QueryStatus:
    is_loading: bool = False
    is_fetching: bool = False
    error: Optional[BaseException] = None


class ContentLoadingBinding:
    def __init__(
        self,
        overlay: OverlayStore,
        *,
        message: str = DEFAULT_MESSAGES[OverlayScope.CONTENT],
        enabled: bool = True,
    ) -> None:
        self._overlay = overlay
        self.message = message
        self.enabled = enabled
        self._owns_show = False

    @property
    def owns_show(self) -> bool:
        return self._owns_show

    def update(self, queries: QueryStatus | Iterable[QueryStatus]) -> None:
        statuses = [queries] if isinstance(queries, QueryStatus) else list(queries)
        loading = any(q.is_loading or q.is_fetching for q in statuses)
        failed = any(q.error is not None for q in statuses)
        self.set_loading(loading and not failed)

    def set_loading(self, loading: bool) -> None:
        if not self.enabled:
            loading = False
        if loading and not self._owns_show:
            self._overlay.show(OverlayScope.CONTENT, self.message)
            self._owns_show = True
        elif not loading and self._owns_show:
            self._overlay.hide(OverlayScope.CONTENT)
            self._owns_show = False

    def dispose(self) -> None:
        self.set_loading(False)
