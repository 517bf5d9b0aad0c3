"""Per-entry memoization cell.

Each entry owns exactly one ResolutionCache. The cache starts empty, is filled
once per resolution attempt with either a valid payload or the kind's invalid
sentinel, and is never reset except by decoding the owning entry again.
"""
import logging
import threading
from typing import Callable, Generic, Literal, TypeVar

logger = logging.getLogger(__name__)

Kind = Literal[
    "metric",
    "color",
    "font",
    "textAttributes",
    "placement",
    "image",
    "buttonStyle",
    "customParameters",
]

Dependency = tuple[Kind, str]

T = TypeVar("T")


class ResolutionCache(Generic[T]):
    """Payload, validity flag and recorded dependencies of one entry.

    "Loaded" and "valid" are distinct: a failed resolution stores the sentinel
    payload and stays loaded-but-invalid, so later calls short-circuit.
    """

    def __init__(self) -> None:
        self._payload: T | None = None
        self._valid = False
        self._resolving = False
        self.dependencies: list[Dependency] = []

    # Cache state is not part of an entry's value; two entries decoded from the
    # same text compare equal whatever their caches hold.
    def __eq__(self, other: object) -> bool:
        return isinstance(other, ResolutionCache)

    __hash__ = object.__hash__

    def __repr__(self) -> str:
        state = "empty" if not self.is_loaded() else ("valid" if self._valid else "invalid")
        return f"ResolutionCache({state})"

    @property
    def payload(self) -> T | None:
        return self._payload

    def is_loaded(self) -> bool:
        return self._payload is not None

    def is_valid(self) -> bool:
        return self._valid

    def set(self, payload: T | None, valid: bool = True) -> None:
        self._valid = valid and payload is not None
        self._payload = payload

    def depends_on(self, kind: Kind, name: str) -> None:
        self.dependencies.append((kind, name))

    def depends_on_all(self, dependencies: list[Dependency]) -> None:
        self.dependencies.extend(dependencies)

    def resolve(
        self,
        lock: threading.RLock,
        compute: Callable[[], T | None],
        invalid: T,
        label: str = "entry",
    ) -> T:
        """Return the memoized payload, computing it on the first call.

        ``compute`` returns the resolved value, or None on failure, in which
        case ``invalid`` is stored and returned. Re-entering an entry that is
        still being resolved is a reference cycle and yields ``invalid``
        without touching the cache.
        """
        if self._payload is not None:
            logger.debug("Cache hit for %s", label)
            return self._payload
        with lock:
            if self._payload is not None:
                return self._payload
            if self._resolving:
                logger.warning("Cyclic reference detected while resolving %s", label)
                return invalid
            self._resolving = True
            try:
                value = compute()
            finally:
                self._resolving = False
            if value is None:
                self.set(invalid, valid=False)
                return invalid
            self.set(value)
            return value
