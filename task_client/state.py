"""
Client state machine.

The whole client view state is one immutable ``AppState``; every change
goes through ``reduce(state, action)``, which looks the action type up in
the ``TRANSITIONS`` table. Nothing here touches the network or the screen.
"""

from dataclasses import dataclass, field, replace
from typing import Any, Callable, Dict, Optional, Tuple

# Views
LOGIN = "login"
REGISTER = "register"
DASHBOARD = "dashboard"

# Action types
LOGIN_SUCCESS = "LOGIN_SUCCESS"
LOGOUT = "LOGOUT"
SET_TASKS = "SET_TASKS"
TASK_CREATED = "TASK_CREATED"
TASK_UPDATED = "TASK_UPDATED"
TASK_DELETED = "TASK_DELETED"
SET_FILTER_STATUS = "SET_FILTER_STATUS"
SET_SEARCH_KEYWORD = "SET_SEARCH_KEYWORD"
SET_PAGE = "SET_PAGE"
SET_VIEW = "SET_VIEW"
SET_LOADING = "SET_LOADING"
SET_ERROR = "SET_ERROR"

ALL_STATUSES = "All"
STATUS_CHOICES = ("Pending", "In Progress", "Completed", "Canceled")
DEFAULT_PAGE_SIZE = 10


@dataclass(frozen=True)
class Action:
    type: str
    payload: Any = None


@dataclass(frozen=True)
class AppState:
    user: Optional[Dict[str, Any]] = None
    tasks: Tuple[Dict[str, Any], ...] = field(default_factory=tuple)
    loading: bool = False
    error: Optional[str] = None
    view: str = LOGIN
    filter_status: str = ALL_STATUSES
    search_keyword: str = ""
    current_page: int = 1
    total_pages: int = 1
    total_tasks: int = 0
    tasks_per_page: int = DEFAULT_PAGE_SIZE
    # bumped by every completed mutation so the list gets refetched
    revision: int = 0

    @property
    def token(self) -> Optional[str]:
        return self.user.get("token") if self.user else None


def initial_state(user: Optional[Dict[str, Any]] = None) -> AppState:
    """Fresh state; a cached user resumes straight on the dashboard."""
    return AppState(user=user, view=DASHBOARD if user else LOGIN)


def _login_success(state: AppState, user: Dict[str, Any]) -> AppState:
    return replace(state, user=user, error=None, view=DASHBOARD)


def _logout(state: AppState, _payload: Any) -> AppState:
    return initial_state()


def _set_tasks(state: AppState, envelope: Dict[str, Any]) -> AppState:
    return replace(
        state,
        tasks=tuple(envelope.get("items") or ()),
        loading=False,
        current_page=envelope.get("page", 1),
        total_pages=envelope.get("pageCount", 1),
        total_tasks=envelope.get("totalCount", 0),
        tasks_per_page=envelope.get("pageSize", DEFAULT_PAGE_SIZE),
    )


def _mutated(state: AppState, _payload: Any) -> AppState:
    return replace(state, view=DASHBOARD, revision=state.revision + 1)


def _set_filter_status(state: AppState, status: str) -> AppState:
    return replace(state, filter_status=status, current_page=1)


def _set_search_keyword(state: AppState, keyword: str) -> AppState:
    return replace(state, search_keyword=keyword, current_page=1)


TRANSITIONS: Dict[str, Callable[[AppState, Any], AppState]] = {
    LOGIN_SUCCESS: _login_success,
    LOGOUT: _logout,
    SET_TASKS: _set_tasks,
    TASK_CREATED: _mutated,
    TASK_UPDATED: _mutated,
    TASK_DELETED: _mutated,
    SET_FILTER_STATUS: _set_filter_status,
    SET_SEARCH_KEYWORD: _set_search_keyword,
    SET_PAGE: lambda state, page: replace(state, current_page=page),
    SET_VIEW: lambda state, view: replace(state, view=view),
    SET_LOADING: lambda state, loading: replace(state, loading=loading),
    SET_ERROR: lambda state, error: replace(state, error=error),
}


def reduce(state: AppState, action: Action) -> AppState:
    handler = TRANSITIONS.get(action.type)
    if handler is None:
        return state
    return handler(state, action.payload)


def fetch_key(state: AppState) -> Optional[tuple]:
    """Inputs the task list depends on; ``None`` when nothing should load."""
    if state.view != DASHBOARD or not state.token:
        return None
    return (state.token, state.filter_status, state.search_keyword, state.current_page, state.revision)
