"""
registry.py

MethodRegistry maps each MiningMethod to its (primary, extension) rule tables
and holds the binding that retrievals currently read from.

The active binding is mutable session state. A registry must not be shared
across concurrent requests; use RuleRecommender.session() to get one per
request.
"""
from __future__ import annotations

from contextlib import contextmanager
from typing import ContextManager, Dict, Iterator, Mapping, Union

from basket_recs.errors import ConfigurationError, UnknownMethod
from basket_recs.logging_utils import get_logger
from basket_recs.rules.schema import MiningMethod, TableBinding

logger = get_logger("registry")

MethodLike = Union[MiningMethod, str]


class MethodRegistry:
    def __init__(self, tables: Mapping[MiningMethod, TableBinding], default: MethodLike = MiningMethod.FPGROWTH) -> None:
        resolved: Dict[MiningMethod, TableBinding] = {}
        for key, binding in tables.items():
            resolved[MiningMethod.parse(key)] = binding
        missing = [m.name for m in MiningMethod if m not in resolved]
        if missing:
            raise ConfigurationError(f"No rule tables configured for: {', '.join(missing)}")

        self._tables = resolved
        default_binding = self.tables_for(default)
        self._primary = default_binding.primary
        self._extension = default_binding.extension

    def tables_for(self, method: MethodLike) -> TableBinding:
        try:
            return self._tables[MiningMethod.parse(method)]
        except KeyError as exc:
            raise UnknownMethod(method) from exc

    @property
    def methods(self) -> Dict[MiningMethod, TableBinding]:
        return dict(self._tables)

    # ------------------------------------------------------------------
    # Active binding
    # ------------------------------------------------------------------
    def active_primary(self) -> str:
        return self._primary

    def active_extension(self) -> str:
        return self._extension

    @property
    def binding(self) -> TableBinding:
        return TableBinding(self._primary, self._extension)

    def bind(self, method: MethodLike) -> None:
        """Switch both primary and extension tables to `method` in one update."""
        binding = self.tables_for(method)
        self._primary, self._extension = binding.primary, binding.extension
        logger.debug("Bound %s -> %s / %s", method, binding.primary, binding.extension)

    bind_both = bind

    def bind_primary(self, method: MethodLike) -> None:
        self._primary = self.tables_for(method).primary

    def bind_extension(self, method: MethodLike) -> None:
        self._extension = self.tables_for(method).extension

    def restore(self, binding: TableBinding) -> None:
        """Set the active tables back to a binding captured earlier via `binding`."""
        self._primary, self._extension = binding.primary, binding.extension

    @contextmanager
    def primary_overridden(self, table: str) -> Iterator[str]:
        """Read primary lookups from `table` inside the block; restore on every exit path."""
        saved = self._primary
        self._primary = table
        try:
            yield table
        finally:
            self._primary = saved

    def extension_as_primary(self) -> ContextManager[str]:
        """primary_overridden() pointed at the currently bound extension table."""
        return self.primary_overridden(self._extension)

    def copy(self) -> "MethodRegistry":
        """Independent registry with the same tables and the same active binding."""
        clone = MethodRegistry(self._tables)
        clone.restore(self.binding)
        return clone
