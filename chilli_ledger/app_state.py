"""Application state for ChilliLedger screens.

State lives in one immutable AppState value. Screens never mutate it; they
dispatch actions to a Store, which runs the pure reduce() function and
notifies subscribers with the new state.
"""
import logging
from dataclasses import dataclass, field, replace
from typing import Any, Callable, List, Optional, Tuple

from chilli_ledger.data_structures import DashboardStats, LedgerSnapshot
from chilli_ledger.exceptions import ChilliLedgerError, ValidationError

log = logging.getLogger(__name__)

TABS = ("dashboard", "customers", "loans", "recoveries", "chillies")

LOAD_ERROR_MESSAGE = "Failed to load data. Please check your connection and try again."

UNEXPECTED_ERROR_MESSAGE = "Something went wrong. Please try again."


@dataclass(frozen=True)
class AppState:
    loading: bool = False
    error: Optional[str] = None
    active_tab: str = "dashboard"
    search_term: str = ""
    customers: Tuple = ()
    loans: Tuple = ()
    recoveries: Tuple = ()
    transactions: Tuple = ()
    stats: DashboardStats = field(default_factory=DashboardStats)
    as_of: Any = None


# Actions
@dataclass(frozen=True)
class LoadStarted:
    pass


@dataclass(frozen=True)
class DataLoaded:
    snapshot: LedgerSnapshot


@dataclass(frozen=True)
class LoadFailed:
    message: str = LOAD_ERROR_MESSAGE


@dataclass(frozen=True)
class ErrorRaised:
    message: str


@dataclass(frozen=True)
class ErrorDismissed:
    pass


@dataclass(frozen=True)
class TabSelected:
    tab: str


@dataclass(frozen=True)
class SearchChanged:
    term: str


def reduce(state: AppState, action) -> AppState:
    """Return the state that results from applying action to state."""
    if isinstance(action, LoadStarted):
        return replace(state, loading=True, error=None)
    if isinstance(action, DataLoaded):
        snap = action.snapshot
        return replace(state, loading=False,
                       customers=tuple(snap.customers), loans=tuple(snap.loans),
                       recoveries=tuple(snap.recoveries), transactions=tuple(snap.transactions),
                       stats=snap.stats, as_of=snap.as_of)
    if isinstance(action, LoadFailed):
        return replace(state, loading=False, error=action.message)
    if isinstance(action, ErrorRaised):
        return replace(state, error=action.message)
    if isinstance(action, ErrorDismissed):
        return replace(state, error=None)
    if isinstance(action, TabSelected):
        if action.tab not in TABS:
            raise ValueError(f"Unknown tab: {action.tab}")
        return replace(state, active_tab=action.tab)
    if isinstance(action, SearchChanged):
        return replace(state, search_term=action.term)
    raise TypeError(f"Unknown action: {action!r}")


class Store:
    """Holds the current AppState and runs actions through reduce()."""

    def __init__(self, initial: AppState = None):
        self._state = initial or AppState()
        self._listeners: List[Callable[[AppState], None]] = []

    @property
    def state(self) -> AppState:
        return self._state

    def dispatch(self, action) -> AppState:
        self._state = reduce(self._state, action)
        for listener in list(self._listeners):
            listener(self._state)
        return self._state

    def subscribe(self, listener: Callable[[AppState], None]) -> Callable[[], None]:
        """Register a listener; returns a function that unsubscribes it."""
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)
        return unsubscribe


# Selectors
def filtered_customers(state: AppState):
    """Customers whose name (case-insensitive) or phone contains the search term."""
    term = state.search_term.strip()
    if not term:
        return list(state.customers)
    lowered = term.lower()
    return [c for c in state.customers
            if lowered in c.name.lower() or (c.phone and term in c.phone)]


def customer_name(state: AppState, customer_id) -> str:
    for customer in state.customers:
        if customer.id == customer_id:
            return customer.name
    return "Unknown Customer"


# Effects
def refresh(store: Store, engine, as_of=None) -> bool:
    """Reload everything from the engine into the store."""
    store.dispatch(LoadStarted())
    try:
        snapshot = engine.load_snapshot(as_of)
    except ChilliLedgerError as e:
        log.error("Error loading data: %s", e)
        store.dispatch(LoadFailed())
        return False
    except Exception:
        log.exception("Unexpected error loading data")
        store.dispatch(LoadFailed())
        return False
    store.dispatch(DataLoaded(snapshot))
    return True


def perform(store: Store, engine, operation: Callable, *args, as_of=None):
    """Run a mutation, then reload everything.

    Validation problems are shown verbatim; storage failures and unexpected
    errors get a generic notice. Returns the created record, or None on failure.
    """
    try:
        result = operation(*args)
    except ValidationError as e:
        store.dispatch(ErrorRaised("; ".join(e.errors.values()) or e.message))
        return None
    except ChilliLedgerError as e:
        log.error("Operation failed: %s", e)
        store.dispatch(ErrorRaised("The operation failed. Please try again."))
        return None
    except Exception:
        log.exception("Unexpected error in %s", getattr(operation, "__name__", operation))
        store.dispatch(ErrorRaised(UNEXPECTED_ERROR_MESSAGE))
        return None
    refresh(store, engine, as_of)
    return result
