"""
Client store: owns the ``AppState``, runs side effects around the reducer.

Effects handled here:
  - persisting / clearing the cached credential on sign-in / sign-out
  - refetching the task page whenever its inputs change (see ``fetch_key``)
  - clearing transient error banners after ``ERROR_DISPLAY_SECONDS``

Mutations never patch ``state.tasks`` locally. They bump the state's
revision, and the resulting refetch brings back the authoritative page.
Overlapping fetches are not de-duplicated; whichever resolves last wins.
"""

import asyncio
import logging
from typing import Any, Callable, Dict, List, Optional, Set

from task_client import state as st
from task_client.api import APIError, TaskAPI
from task_client.session import SessionCache

logger = logging.getLogger("task-client")

ERROR_DISPLAY_SECONDS = 5.0

EMPTY_PAGE = {"items": [], "page": 1, "pageCount": 1, "totalCount": 0, "pageSize": st.DEFAULT_PAGE_SIZE}

Listener = Callable[[st.AppState], None]


class Store:
    def __init__(
        self,
        api: TaskAPI,
        session: Optional[SessionCache] = None,
        error_timeout: float = ERROR_DISPLAY_SECONDS,
    ):
        self.api = api
        self.session = session
        self.error_timeout = error_timeout
        self.state = st.initial_state(session.load() if session else None)
        self._listeners: List[Listener] = []
        self._pending: Set[asyncio.Task] = set()
        self._last_fetch_key: Optional[tuple] = None
        self._error_timer: Optional[asyncio.TimerHandle] = None

    # ------------------------- core -------------------------
    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)
        return lambda: self._listeners.remove(listener)

    def dispatch(self, action_type: str, payload: Any = None) -> st.AppState:
        self.state = st.reduce(self.state, st.Action(action_type, payload))

        if self.session:
            if action_type == st.LOGIN_SUCCESS:
                self.session.save(payload)
            elif action_type == st.LOGOUT:
                self.session.clear()

        for listener in list(self._listeners):
            listener(self.state)
        self._run_effects()
        return self.state

    def start(self) -> None:
        """Kick off the initial fetch for a session restored from cache."""
        self._run_effects()

    def _run_effects(self) -> None:
        key = st.fetch_key(self.state)
        if key is None:
            self._last_fetch_key = None
            return
        if key != self._last_fetch_key:
            self._last_fetch_key = key
            self._spawn(self.fetch_tasks())

    def _spawn(self, coro) -> None:
        task = asyncio.get_running_loop().create_task(coro)
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def settle(self) -> None:
        """Wait until every spawned fetch (and any it triggered) is done."""
        while self._pending:
            await asyncio.gather(*list(self._pending))

    # ------------------------- errors -------------------------
    def display_error(self, message: str) -> None:
        logger.info(f"[Store] {message}")
        if self._error_timer is not None:
            self._error_timer.cancel()
        self.dispatch(st.SET_ERROR, message)
        loop = asyncio.get_running_loop()
        self._error_timer = loop.call_later(self.error_timeout, self._clear_error)

    def _clear_error(self) -> None:
        self._error_timer = None
        self.dispatch(st.SET_ERROR, None)

    # ------------------------- auth -------------------------
    async def sign_in(self, email: str, password: str, register: bool = False) -> bool:
        self.dispatch(st.SET_ERROR, None)
        try:
            if register:
                user = await self.api.register(email, password)
            else:
                user = await self.api.login(email, password)
        except APIError as e:
            self.display_error(e.message)
            return False
        self.dispatch(st.LOGIN_SUCCESS, user)
        return True

    def sign_out(self) -> None:
        if self._error_timer is not None:
            self._error_timer.cancel()
            self._error_timer = None
        self.dispatch(st.LOGOUT)

    def toggle_auth_view(self) -> None:
        self.dispatch(st.SET_VIEW, st.REGISTER if self.state.view == st.LOGIN else st.LOGIN)

    # ------------------------- list controls -------------------------
    def set_filter_status(self, status: str) -> None:
        self.dispatch(st.SET_FILTER_STATUS, status)

    def set_search_keyword(self, keyword: str) -> None:
        self.dispatch(st.SET_SEARCH_KEYWORD, keyword)

    def change_page(self, page: int) -> bool:
        if not 1 <= page <= self.state.total_pages:
            return False
        self.dispatch(st.SET_PAGE, page)
        return True

    # ------------------------- task calls -------------------------
    async def fetch_tasks(self) -> None:
        s = self.state
        token = s.token
        if not token:
            return
        self.dispatch(st.SET_LOADING, True)
        try:
            envelope = await self.api.list_tasks(
                token,
                status=s.filter_status,
                keyword=s.search_keyword,
                page=s.current_page,
                limit=s.tasks_per_page,
            )
        except APIError as e:
            self.display_error(f"Task Error: {e.message}")
            envelope = EMPTY_PAGE
        if self.state.token != token:
            # signed out (or switched user) while the request was in flight
            return
        self.dispatch(st.SET_TASKS, envelope)

    async def create_task(self, title: str, description: str = "") -> bool:
        try:
            await self.api.create_task(self.state.token, {"title": title, "description": description})
        except APIError as e:
            self.display_error(f"Creation Error: {e.message}")
            return False
        self.dispatch(st.TASK_CREATED)
        return True

    async def update_task(self, task_id: str, changes: Dict[str, Any]) -> bool:
        try:
            await self.api.update_task(self.state.token, task_id, changes)
        except APIError as e:
            self.display_error(f"Update Error: {e.message}")
            return False
        self.dispatch(st.TASK_UPDATED)
        return True

    async def delete_task(self, task_id: str) -> bool:
        try:
            await self.api.delete_task(self.state.token, task_id)
        except APIError as e:
            self.display_error(f"Delete Error: {e.message}")
            return False
        self.dispatch(st.TASK_DELETED)
        return True
