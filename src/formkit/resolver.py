"""Option resolution for select-like fields.

Nothing in this module raises to its caller. A source that cannot be
evaluated (unknown entity, query error, bad function, timeout) is logged and
the field degrades to an empty, still interactive option list.

Computed sources run against a fork of the form state; their ``set`` writes
are merged back only when the computation finishes in time.
"""

import logging
import threading
from collections.abc import Mapping
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple

from .config import ResolverConfig
from .consts import (
    DEFAULT_OPTIONS_LIMIT,
    DEFAULT_RELATIONSHIP_LIMIT,
    RESOLUTION_MAX_WORKERS,
    TIMEOUT_OPTION_RESOLUTION,
)
from .entities import EntityRegistry
from .errors import ResolutionError
from .functions import FunctionRegistry, invoke
from .options import (
    ComputedOptions,
    Option,
    RelationshipOptions,
    StaticOptions,
    are_grouped,
    limit_options,
    normalize_options,
)
from .state import FormState
from .utils import selected_values

logger = logging.getLogger(__name__)


@dataclass
class ResolvedOptions:
    options: List[Option] = field(default_factory=list)
    has_more: bool = False
    failed: bool = False

    @property
    def grouped(self) -> bool:
        return are_grouped(self.options)

    @property
    def values(self) -> List[str]:
        return [option.value for option in self.options]

    def to_list(self) -> List[Dict[str, Any]]:
        return [option.to_dict() for option in self.options]


class OptionResolver:
    def __init__(
        self,
        functions: Optional[FunctionRegistry] = None,
        entities: Optional[EntityRegistry] = None,
        options_limit: int = DEFAULT_OPTIONS_LIMIT,
        relationship_limit: int = DEFAULT_RELATIONSHIP_LIMIT,
        timeout: float = TIMEOUT_OPTION_RESOLUTION,
        max_workers: int = RESOLUTION_MAX_WORKERS,
    ):
        self.functions = functions if functions is not None else FunctionRegistry()
        self.entities = entities
        self.options_limit = options_limit
        self.relationship_limit = relationship_limit
        self.timeout = timeout
        self.max_workers = max_workers
        self._lock = threading.Lock()
        self._abandoned = set()
        self._executor = self._new_executor()

    @classmethod
    def from_config(
        cls,
        config: ResolverConfig,
        functions: Optional[FunctionRegistry] = None,
        entities: Optional[EntityRegistry] = None,
    ) -> "OptionResolver":
        return cls(
            functions=functions,
            entities=entities,
            options_limit=config.options_limit,
            relationship_limit=config.relationship_limit,
            timeout=config.timeout,
            max_workers=config.max_workers,
        )

    def close(self):
        with self._lock:
            self._executor.shutdown(wait=False, cancel_futures=True)

    def _new_executor(self) -> ThreadPoolExecutor:
        return ThreadPoolExecutor(
            max_workers=self.max_workers, thread_name_prefix="formkit-resolver"
        )

    # ------------------------------------------------------------------ public

    def resolve(self, field, state: FormState) -> ResolvedOptions:
        """Resolve the option list of ``field`` against ``state``.

        Static options are returned whole. Computed options are limited to
        the field's ``options_limit`` while keeping currently selected values.
        Searchable relationship selects load ``relationship_limit`` rows plus
        the selected ones.
        """
        try:
            options, has_more = self._resolve(field, state, limited=True)
            options = self._apply_disabled(field, options, state)
        except Exception as e:
            logger.warning(
                f"Failed to resolve options for field '{field.name}': {e}", exc_info=True
            )
            return ResolvedOptions(failed=True)

        return ResolvedOptions(options=options, has_more=has_more)

    def search(self, field, term: str, state: FormState) -> ResolvedOptions:
        """Options of ``field`` matching ``term``, at most ``options_limit`` of them."""
        limit = self._limit(field)
        source = field.options
        search_using = getattr(field, "get_search_results_using", None)

        try:
            if search_using is not None:
                func = self.functions.resolve(search_using)
                options = self._as_options(
                    self._call(invoke, func, term, state.getter()), field.name
                )
            elif isinstance(source, RelationshipOptions):
                options = self._search_relationship(field, source, term, state, limit)
            else:
                options, _ = self._resolve(field, state, limited=False)
                needle = (term or "").casefold()
                options = [
                    option
                    for option in options
                    if needle in option.label.casefold() or needle in option.value.casefold()
                ]
            options = self._apply_disabled(field, options, state)
        except Exception as e:
            logger.warning(
                f"Failed to search options for field '{field.name}': {e}", exc_info=True
            )
            return ResolvedOptions(failed=True)

        return ResolvedOptions(options=options[:limit], has_more=len(options) > limit)

    def option_labels(self, field, values: Iterable[Any], state: FormState) -> Dict[str, str]:
        """Labels of the given selected values, skipping unknown ones."""
        values = [str(v) for v in values if v is not None and v != ""]
        if not values:
            return {}

        label_using = getattr(field, "get_option_label_using", None)
        source = field.options

        try:
            if label_using is not None:
                func = self.functions.resolve(label_using)
                get = state.getter()
                return {
                    value: str(self._call(invoke, func, value, get)) for value in values
                }

            if isinstance(source, RelationshipOptions):
                if self.entities is None:
                    return {}
                records = self._call(self.entities.find_many, source.entity, values)
                return {
                    self.entities.key(record): self._record_label(source, record)
                    for record in records
                }

            options, _ = self._resolve(field, state, limited=False)
        except Exception as e:
            logger.warning(
                f"Failed to load option labels for field '{field.name}': {e}", exc_info=True
            )
            return {}

        by_value = {option.value: option.label for option in options}
        return {value: by_value[value] for value in values if value in by_value}

    # ----------------------------------------------------------------- sources

    def _resolve(self, field, state: FormState, limited: bool) -> Tuple[List[Option], bool]:
        source = field.options

        if isinstance(source, StaticOptions):
            return normalize_options(source.items), False

        if isinstance(source, RelationshipOptions):
            return self._call(self._relationship_options, field, source, state, limited)

        if isinstance(source, ComputedOptions):
            options = self._computed_options(field, source, state)
            if not limited:
                return options, False
            return limit_options(options, self._limit(field), selected_values(state.get(field.name)))

        logger.warning(f"Field '{field.name}' has unsupported option source {source!r}")
        return [], False

    def _computed_options(self, field, source: ComputedOptions, state: FormState) -> List[Option]:
        func = self.functions.resolve(source.function)
        fork = state.fork()
        raw = self._call(invoke, func, fork.getter(), fork.setter())
        state.merge(fork)
        return self._as_options(raw, field.name)

    def _relationship_options(
        self, field, source: RelationshipOptions, state: FormState, limited: bool
    ) -> Tuple[List[Option], bool]:
        query = self._base_query(field, source, state)
        if query is None:
            return [], False

        has_more = False
        if limited and getattr(field, "searchable", False):
            records = self.entities.fetch(query, limit=self.relationship_limit)
            has_more = len(records) >= self.relationship_limit
            loaded = {self.entities.key(record) for record in records}
            missing = [v for v in selected_values(state.get(field.name)) if v not in loaded]
            if missing:
                records.extend(self.entities.find_many(source.entity, missing))
        else:
            records = self.entities.fetch(query)

        options = [
            Option(value=self.entities.key(record), label=self._record_label(source, record))
            for record in records
        ]
        return options, has_more

    def _search_relationship(
        self, field, source: RelationshipOptions, term: str, state: FormState, limit: int
    ) -> List[Option]:
        def run():
            query = self._base_query(field, source, state)
            if query is None:
                return []
            columns = getattr(field, "searchable_columns", None) or [source.title_attribute]
            query = self.entities.search(query, source.entity, columns, term)
            return self.entities.fetch(query, limit=limit + 1)

        records = self._call(run)
        return [
            Option(value=self.entities.key(record), label=self._record_label(source, record))
            for record in records
        ]

    def _base_query(self, field, source: RelationshipOptions, state: FormState):
        if self.entities is None:
            logger.warning(f"No entity registry available for relationship field '{field.name}'")
            return None

        query = self.entities.query(source.entity)
        if query is None:
            logger.warning(f"Entity '{source.entity}' is not registered (field '{field.name}')")
            return None

        if source.modify_query is not None:
            modifier = self.functions.resolve(source.modify_query)
            query = invoke(modifier, query, state.getter())
        return query

    def _record_label(self, source: RelationshipOptions, record) -> str:
        if source.label_using is not None:
            return str(invoke(self.functions.resolve(source.label_using), record))

        label = getattr(record, source.title_attribute, None)
        if source.title_attribute == "email":
            first = getattr(record, "first_name", None)
            last = getattr(record, "last_name", None)
            name = getattr(record, "name", None)
            if first or last:
                label = f"{' '.join(p for p in (first, last) if p)} ({label})"
            elif name:
                label = f"{name} ({label})"

        return "" if label is None else str(label)

    # ----------------------------------------------------------------- helpers

    def _apply_disabled(self, field, options: List[Option], state: FormState) -> List[Option]:
        disable_when = getattr(field, "disable_option_when", None)
        if disable_when is None:
            return options

        func = self.functions.resolve(disable_when)
        get = state.getter()
        return [
            option.model_copy(update={"disabled": bool(invoke(func, option.value, get))})
            for option in options
        ]

    def _as_options(self, raw: Any, name: str) -> List[Option]:
        if isinstance(raw, (Mapping, list, tuple)):
            return normalize_options(raw)

        if raw is not None:
            logger.warning(
                f"Options of field '{name}' evaluated to {type(raw).__name__}, expected list or mapping"
            )
        return []

    def _limit(self, field) -> int:
        return getattr(field, "options_limit", None) or self.options_limit

    def _call(self, func: Callable[..., Any], *args):
        with self._lock:
            executor = self._executor
        future = executor.submit(func, *args)
        try:
            return future.result(timeout=self.timeout)
        except FutureTimeoutError:
            if not future.cancel():
                self._abandon(executor, future)
            raise ResolutionError(f"Option resolution timed out after {self.timeout}s")

    def _abandon(self, executor: ThreadPoolExecutor, future):
        """Track a timed-out call that is still running on a worker.

        Abandoned calls keep their worker busy. Once they occupy every worker
        the pool is swapped for a fresh one so later resolutions, from this
        request or any other, are not queued behind them.
        """
        with self._lock:
            if executor is not self._executor:
                return
            abandoned = self._abandoned
            abandoned.add(future)
            future.add_done_callback(abandoned.discard)
            if len(abandoned) < self.max_workers:
                return

            logger.warning(
                f"{len(abandoned)} timed out option resolutions still running, "
                "replacing the resolver pool"
            )
            stale = self._executor
            self._executor = self._new_executor()
            self._abandoned = set()
        stale.shutdown(wait=False)
