import logging
from typing import Any, Dict, Optional

import httpx

logger = logging.getLogger("task-client")

DEFAULT_API_URL = "http://localhost:5000/api"


class APIError(Exception):
    """A request failed; ``message`` is what the server (or transport) said."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


def auth_header(token: str) -> Dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


class TaskAPI:
    """Thin async wrapper over the task service REST endpoints."""

    def __init__(self, base_url: str = DEFAULT_API_URL, transport: Optional[httpx.AsyncBaseTransport] = None, timeout: float = 10.0):
        self._client = httpx.AsyncClient(base_url=base_url.rstrip("/"), transport=transport, timeout=timeout)

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _request(self, method: str, path: str, fallback: str, **kwargs) -> Any:
        try:
            response = await self._client.request(method, path, **kwargs)
        except httpx.HTTPError as e:
            logger.error(f"[API] {method} {path} failed: {e}")
            raise APIError(str(e) or fallback)

        try:
            data = response.json()
        except ValueError:
            data = {}

        if response.is_error:
            message = data.get("message") if isinstance(data, dict) else None
            raise APIError(message or fallback, response.status_code)
        return data

    # ------------------------- users -------------------------
    async def register(self, email: str, password: str) -> Dict[str, Any]:
        return await self._request(
            "POST", "/users/register", "Authentication failed", json={"email": email, "password": password}
        )

    async def login(self, email: str, password: str) -> Dict[str, Any]:
        return await self._request(
            "POST", "/users/login", "Authentication failed", json={"email": email, "password": password}
        )

    async def profile(self, token: str) -> Dict[str, Any]:
        return await self._request("GET", "/users/profile", "Failed to load profile", headers=auth_header(token))

    # ------------------------- tasks -------------------------
    async def list_tasks(
        self,
        token: str,
        status: Optional[str] = None,
        keyword: str = "",
        page: int = 1,
        limit: int = 10,
    ) -> Dict[str, Any]:
        params = {"page": page, "limit": limit, "keyword": keyword}
        if status and status != "All":
            params["status"] = status
        return await self._request(
            "GET", "/tasks", "Failed to fetch tasks", params=params, headers=auth_header(token)
        )

    async def create_task(self, token: str, task: Dict[str, Any]) -> Dict[str, Any]:
        return await self._request("POST", "/tasks", "Failed to create task", json=task, headers=auth_header(token))

    async def update_task(self, token: str, task_id: str, changes: Dict[str, Any]) -> Dict[str, Any]:
        return await self._request(
            "PUT", f"/tasks/{task_id}", "Failed to update task", json=changes, headers=auth_header(token)
        )

    async def delete_task(self, token: str, task_id: str) -> Dict[str, Any]:
        return await self._request("DELETE", f"/tasks/{task_id}", "Failed to delete task", headers=auth_header(token))
