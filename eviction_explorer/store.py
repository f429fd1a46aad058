"""Observable state containers and the graph that keeps derived ones current.

A :class:`ReactiveGraph` owns every container in a session.  Writable
containers are :class:`Value` objects; read-only derived containers are
:class:`Calc` objects built from a pure function and an explicit list of
the containers it depends on.

Writing a ``Value``:

1. stores the new value,
2. recomputes every ``Calc`` downstream of it exactly once, lowest rank
   first, so each one only ever reads already-updated inputs,
3. notifies subscribers of the written value and then of each recomputed
   ``Calc`` in the same order.

If a ``Calc`` raises, the written value and the ``Calc`` objects recomputed
before it are still notified, then the exception reaches the writer.

A write issued from inside a subscriber is queued and applied after the
current pass has finished, so no subscriber ever sees a half-propagated
graph.
"""

from __future__ import annotations

import itertools
import logging
from collections import deque
from typing import (
    Any,
    Callable,
    Deque,
    Generic,
    List,
    Optional,
    Sequence,
    Tuple,
    TypeVar,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

Subscriber = Callable[[Any], None]


class _Node(Generic[T]):
    def __init__(self, graph: "ReactiveGraph", name: Optional[str], rank: int) -> None:
        self._graph = graph
        self._order = next(graph._counter)
        self.name = name or f"{type(self).__name__.lower()}_{self._order}"
        self.rank = rank
        self._value: Any = None
        self._subscribers: List[List[Subscriber]] = []
        self._dependents: List["Calc[Any]"] = []

    def get(self) -> T:
        return self._value

    def subscribe(self, callback: Callable[[T], None]) -> Callable[[], None]:
        """Call ``callback`` with the current value now and on every change.

        Returns a function that cancels the subscription.
        """
        # Wrapped in a list so the same callable can be subscribed twice
        entry = [callback]
        self._subscribers.append(entry)
        callback(self._value)

        def unsubscribe() -> None:
            if entry in self._subscribers:
                self._subscribers.remove(entry)

        return unsubscribe

    def _notify(self) -> None:
        value = self._value
        for (callback,) in list(self._subscribers):
            try:
                callback(value)
            except Exception:
                logger.exception("Subscriber of %r failed", self.name)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.name!r})"


class Value(_Node[T]):
    """A writable container."""

    def __init__(
        self, graph: "ReactiveGraph", initial: T, name: Optional[str] = None
    ) -> None:
        super().__init__(graph, name, rank=0)
        self._value = initial

    def set(self, value: T) -> None:
        self._graph._write(self, value)

    def update(self, fn: Callable[[T], T]) -> None:
        self.set(fn(self._value))


class Calc(_Node[T]):
    """A read-only container recomputed from its declared dependencies."""

    def __init__(
        self,
        graph: "ReactiveGraph",
        fn: Callable[..., T],
        deps: Sequence[_Node[Any]],
        name: Optional[str] = None,
    ) -> None:
        if not deps:
            raise ValueError("A derived container needs at least one dependency")
        for dep in deps:
            if not isinstance(dep, _Node) or dep._graph is not graph:
                raise ValueError(f"Dependency {dep!r} does not belong to this graph")
        super().__init__(graph, name, rank=1 + max(dep.rank for dep in deps))
        self._fn = fn
        self.deps: Tuple[_Node[Any], ...] = tuple(deps)
        for dep in self.deps:
            dep._dependents.append(self)
        self._recompute()

    def _recompute(self) -> None:
        self._value = self._fn(*(dep.get() for dep in self.deps))


class ReactiveGraph:
    """Owner and scheduler for one session's containers."""

    def __init__(self) -> None:
        self._counter = itertools.count()
        self._queue: Deque[Tuple[Value[Any], Any]] = deque()
        self._flushing = False

    def value(self, initial: T, *, name: Optional[str] = None) -> Value[T]:
        return Value(self, initial, name)

    def calc(
        self,
        fn: Callable[..., T],
        deps: Sequence[_Node[Any]],
        *,
        name: Optional[str] = None,
    ) -> Calc[T]:
        return Calc(self, fn, deps, name)

    def _write(self, source: Value[Any], value: Any) -> None:
        self._queue.append((source, value))
        if self._flushing:
            return
        self._flushing = True
        try:
            while self._queue:
                node, new_value = self._queue.popleft()
                self._propagate(node, new_value)
        except Exception:
            self._queue.clear()
            raise
        finally:
            self._flushing = False

    def _propagate(self, source: Value[Any], value: Any) -> None:
        source._value = value
        stale = self._downstream(source)
        recomputed = []
        try:
            for calc in stale:
                calc._recompute()
                recomputed.append(calc)
        finally:
            # Subscribers see every value that changed, even when a later Calc raised
            source._notify()
            for calc in recomputed:
                calc._notify()

    @staticmethod
    def _downstream(source: _Node[Any]) -> List["Calc[Any]"]:
        """Every transitive dependent of ``source`` in topological order."""
        seen = {}
        pending = list(source._dependents)
        while pending:
            node = pending.pop()
            if id(node) in seen:
                continue
            seen[id(node)] = node
            pending.extend(node._dependents)
        return sorted(seen.values(), key=lambda node: (node.rank, node._order))
