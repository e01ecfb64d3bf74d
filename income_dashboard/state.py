# income_dashboard/state.py
"""View-local state: the current selection and which view is mounted.

Each browser client has its own :class:`ViewLifecycle`, and only one view is
mounted per client at a time (the active tab). Datasets loaded for a view live
in its :class:`ViewSession` and go away with it; a load that finishes after its
view was unmounted is dropped instead of applied.
"""
from __future__ import annotations
from collections import OrderedDict
from contextlib import contextmanager
from dataclasses import dataclass, field
from itertools import count
from typing import Any, Callable, Iterator
import logging
import threading

from income_dashboard.loaders import DataLoadError

logger = logging.getLogger(__name__)


# ---------------- Selection ----------------
@dataclass(frozen=True)
class Selection:
    name: str | None = None


class SelectionState:
    """Single-owner holder for the selected category."""

    def __init__(self, name: str | None = None) -> None:
        self._current = Selection(name or None)

    @property
    def current(self) -> Selection:
        return self._current

    def select(self, name: str | None) -> Selection:
        """Overwrite the selection. Empty names are ignored; the old selection persists."""
        if not name or name == self._current.name:
            return self._current
        self._current = Selection(name)
        return self._current


# ---------------- Mounts ----------------
@dataclass
class ViewSession:
    view: str
    token: int
    datasets: dict[str, Any] = field(default_factory=dict)
    _releases: list[tuple[str, Callable[[], None]]] = field(default_factory=list, repr=False)
    _live: bool = field(default=True, repr=False)

    @property
    def live(self) -> bool:
        return self._live

    def apply(self, key: str, value: Any) -> bool:
        """Store a loaded dataset once. Returns False for stale or repeated loads."""
        if not self._live:
            logger.debug("dropping %s for unmounted view %s#%d", key, self.view, self.token)
            return False
        if key in self.datasets:
            logger.debug("%s already loaded for %s#%d", key, self.view, self.token)
            return False
        self.datasets[key] = value
        return True

    def get(self, key: str, default: Any = None) -> Any:
        return self.datasets.get(key, default)

    def own(self, name: str, release: Callable[[], None]) -> None:
        self._releases.append((name, release))

    @contextmanager
    def scoped(self, name: str, acquire: Callable[[], Any], release: Callable[[Any], None]) -> Iterator[Any]:
        """Acquire a resource for this mount.

        If the body raises, the resource is released right away; otherwise it
        stays attached to the session and is released on unmount.
        """
        resource = acquire()
        try:
            yield resource
        except BaseException:
            release(resource)
            raise
        self.own(name, lambda: release(resource))

    def close(self) -> None:
        self._live = False
        self.datasets.clear()
        while self._releases:
            name, release = self._releases.pop()
            try:
                release()
            except Exception:
                logger.exception("releasing %s for %s#%d failed", name, self.view, self.token)


class ViewLifecycle:
    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._tokens = count(1)
        self._active: ViewSession | None = None

    @property
    def active(self) -> ViewSession | None:
        return self._active

    def mount(self, view: str) -> ViewSession:
        """Unmount whatever is active and start a fresh session for ``view``."""
        with self._lock:
            old, self._active = self._active, ViewSession(view=view, token=next(self._tokens))
            new = self._active
        if old is not None:
            old.close()
            logger.debug("unmounted %s#%d", old.view, old.token)
        logger.debug("mounted %s#%d", new.view, new.token)
        return new

    def unmount(self) -> None:
        with self._lock:
            old, self._active = self._active, None
        if old is not None:
            old.close()

    def session(self, view: str) -> ViewSession | None:
        """The active session if it belongs to ``view``."""
        s = self._active
        return s if s is not None and s.view == view else None

    def is_live(self, session: ViewSession) -> bool:
        return session.live and self._active is session


# ---------------- Clients ----------------
class ClientViews:
    """One :class:`ViewLifecycle` per client id, least recently used evicted first."""

    def __init__(self, limit: int = 256) -> None:
        self._lock = threading.Lock()
        self._limit = limit
        self._clients: OrderedDict[str, ViewLifecycle] = OrderedDict()

    def __len__(self) -> int:
        return len(self._clients)

    def __contains__(self, client_id: str) -> bool:
        return client_id in self._clients

    def lifecycle(self, client_id: str) -> ViewLifecycle:
        evicted = []
        with self._lock:
            lc = self._clients.get(client_id)
            if lc is None:
                lc = self._clients[client_id] = ViewLifecycle()
            self._clients.move_to_end(client_id)
            while len(self._clients) > self._limit:
                evicted.append(self._clients.popitem(last=False))
        for old_id, old in evicted:
            logger.debug("evicting views of client %s", old_id)
            old.unmount()
        return lc


def load_into(session: ViewSession, key: str, loader: Callable[[], Any]) -> bool:
    """Run ``loader`` and store its result; failures are logged and leave the dataset empty."""
    try:
        value = loader()
    except DataLoadError as exc:
        logger.error("loading %s for %s failed: %s", key, session.view, exc)
        return False
    return session.apply(key, value)
