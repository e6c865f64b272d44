"""Lexical scope tracking for jinja_schema.

An explicit stack of frames, pushed by block-opening statements and popped
by their end tags. The bottom frame is the template itself and is never
popped.

Frames for ``for``, ``with``, ``macro``, ``call``, ``block``, ``filter`` and
``autoescape`` are binding frames: ``set``/``import``/``from``/``macro``
names bind in the innermost one. ``if``, ``trans`` and block ``set`` frames
only exist so their end tags pair correctly.

A binding may carry an alias: the access path the bound name stands for.
``{% for user in users %}`` binds ``user`` to ``users[*]``, so
``user.name`` resolves to ``users[*].name``. Aliases are stored already
resolved, which makes nested loops resolve transitively.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from jinja_schema.nodes import AccessPath


class ScopeKind(Enum):
    """Kinds of scope frames, named after the statement that opens them."""

    TEMPLATE = "template"
    FOR = "for"
    IF = "if"
    WITH = "with"
    MACRO = "macro"
    CALL = "call"
    BLOCK = "block"
    FILTER = "filter"
    AUTOESCAPE = "autoescape"
    SET = "set"
    TRANS = "trans"


_NON_BINDING = frozenset({ScopeKind.IF, ScopeKind.SET, ScopeKind.TRANS})


@dataclass(slots=True)
class Scope:
    """One frame of the scope stack.

    Attributes:
        kind: Statement kind that opened the frame
        bindings: Bound name -> alias path (None when the name is opaque)
        parent: Enclosing frame
        deferred: Names bound in the enclosing frame when this frame closes
        offset: Source offset of the opening statement
    """

    kind: ScopeKind
    bindings: dict[str, AccessPath | None] = field(default_factory=dict)
    parent: Scope | None = None
    deferred: tuple[str, ...] = ()
    offset: int = 0

    @property
    def is_binding(self) -> bool:
        return self.kind not in _NON_BINDING


class ScopeTracker:
    """Stack of active scopes for one extraction pass.

    Example:
        >>> from jinja_schema.nodes import ELEMENT, Attr
        >>> tracker = ScopeTracker()
        >>> _ = tracker.push(ScopeKind.FOR, {"user": AccessPath("users", (ELEMENT,))})
        >>> str(tracker.resolve(AccessPath("user", (Attr("name"),))))
        'users[*].name'
        >>> _ = tracker.pop(ScopeKind.FOR)
        >>> str(tracker.resolve(AccessPath("user")))
        'user'
    """

    def __init__(self) -> None:
        self._stack: list[Scope] = [Scope(ScopeKind.TEMPLATE)]

    @property
    def depth(self) -> int:
        """Number of open frames, not counting the template frame."""
        return len(self._stack) - 1

    def push(
        self,
        kind: ScopeKind,
        bindings: dict[str, AccessPath | None] | None = None,
        *,
        deferred: tuple[str, ...] = (),
        offset: int = 0,
    ) -> Scope:
        scope = Scope(
            kind=kind,
            bindings=dict(bindings) if bindings else {},
            parent=self._stack[-1],
            deferred=deferred,
            offset=offset,
        )
        self._stack.append(scope)
        return scope

    def pop(self, kind: ScopeKind) -> list[Scope] | None:
        """Close the nearest frame of ``kind`` and every frame above it.

        Returns the closed frames (innermost last), or None when no frame of
        that kind is open. A closed ``set`` frame binds its deferred names in
        the enclosing binding frame.
        """
        for index in range(len(self._stack) - 1, 0, -1):
            if self._stack[index].kind is kind:
                break
        else:
            return None

        closed = self._stack[index:]
        del self._stack[index:]
        target = closed[0]
        for name in target.deferred:
            self.bind(name)
        return closed

    def bind(self, name: str, alias: AccessPath | None = None) -> None:
        """Bind ``name`` in the innermost binding frame."""
        for scope in reversed(self._stack):
            if scope.is_binding:
                scope.bindings[name] = alias
                return

    def unbind_loop(self) -> None:
        """Hide loop bindings for the ``else`` body of the innermost ``for``."""
        if self._stack[-1].kind is ScopeKind.FOR:
            self._stack[-1].bindings.clear()

    def is_bound(self, name: str) -> bool:
        return any(name in scope.bindings for scope in self._stack)

    def resolve(self, path: AccessPath) -> AccessPath | None:
        """Map a path to the free-variable path it accesses.

        Returns the path unchanged when its root is free, the alias joined
        with the remaining steps when its root is an aliased binding, and
        None when its root is bound to something opaque.
        """
        for scope in reversed(self._stack):
            if path.root in scope.bindings:
                alias = scope.bindings[path.root]
                if alias is None:
                    return None
                return alias.extend(path.segments)
        return path

    def open_scopes(self) -> list[Scope]:
        """Frames still open, outermost first (template frame excluded)."""
        return self._stack[1:]
