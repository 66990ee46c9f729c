import argparse
import asyncio
import getpass
import logging
import os
import shlex
from datetime import datetime
from typing import List, Optional

from dotenv import load_dotenv

from task_client import state as st
from task_client.api import DEFAULT_API_URL, TaskAPI
from task_client.session import SessionCache
from task_client.store import Store

logger = logging.getLogger("task-client")

HELP = """\
Commands:
  login <email>              sign in (prompts for password)
  register <email>           create an account (prompts for password)
  logout                     sign out and forget the cached session
  list                       redraw the current page
  filter <status|All>        Pending, "In Progress", Completed, Canceled or All
  search [keyword]           filter by title/description (empty clears)
  page <n> | next | prev     move between pages
  add <title> [| description]
  edit <n> [title=..] [description=..] [status=..]
  delete <n>
  help | exit"""


# ------------------------- rendering -------------------------
def render_task(index: int, task: dict) -> str:
    created = task.get("createdAt", "")
    try:
        created = datetime.fromisoformat(created.replace("Z", "+00:00")).strftime("%Y-%m-%d")
    except (AttributeError, TypeError, ValueError):
        pass
    line = f"{index:>3}. [{task['status']}] {task['title']}  (created {created})"
    if task.get("description"):
        line += f"\n       {task['description']}"
    return line


def render(state: st.AppState) -> str:
    lines: List[str] = []
    if state.error:
        lines.append(f"!! {state.error}")

    if state.view != st.DASHBOARD or not state.user:
        title = "Welcome Back" if state.view == st.LOGIN else "Create Account"
        lines.append(f"== {title} ==  (use `{state.view} <email>`; `toggle` switches forms)")
        return "\n".join(lines)

    user = state.user
    heading = "All Tasks" if state.filter_status == st.ALL_STATUSES else f"{state.filter_status} Tasks"
    lines.append(f"== Task Platform ==  {user['email']} ({user['role']})")
    if state.search_keyword:
        lines.append(f"search: {state.search_keyword!r}")
    lines.append(f"{heading} ({state.total_tasks})")

    if state.loading:
        lines.append("Loading tasks...")
    elif not state.tasks:
        lines.append("No tasks found matching the current filters.")
    else:
        lines.extend(render_task(i, task) for i, task in enumerate(state.tasks, 1))

    if state.total_tasks:
        lines.append(f"Showing page {state.current_page} of {state.total_pages}. Total tasks: {state.total_tasks}.")
    return "\n".join(lines)


# ------------------------- commands -------------------------
def _task_at(store: Store, ref: str) -> Optional[dict]:
    try:
        index = int(ref)
    except ValueError:
        return None
    if 1 <= index <= len(store.state.tasks):
        return store.state.tasks[index - 1]
    return None


def _parse_changes(args: List[str]) -> dict:
    changes = {}
    for arg in args:
        key, sep, value = arg.partition("=")
        if sep and key in ("title", "description", "status"):
            changes[key] = value
    return changes


async def handle_command(store: Store, line: str, read_password=getpass.getpass) -> bool:
    """Run one console command. Returns False when the loop should stop."""
    try:
        parts = shlex.split(line)
    except ValueError as e:
        print(f"Cannot parse command: {e}")
        return True
    if not parts:
        return True

    cmd, args = parts[0].lower(), parts[1:]

    if cmd in ("exit", "quit"):
        return False
    if cmd == "help":
        print(HELP)
    elif cmd == "toggle":
        store.toggle_auth_view()
    elif cmd in ("login", "register"):
        if not args:
            print(f"usage: {cmd} <email>")
            return True
        password = await asyncio.to_thread(read_password, "Password: ")
        await store.sign_in(args[0], password, register=(cmd == "register"))
    elif store.state.view != st.DASHBOARD:
        print("Sign in first (see `help`).")
    elif cmd == "logout":
        store.sign_out()
    elif cmd == "list":
        pass
    elif cmd == "filter":
        status = " ".join(args) or st.ALL_STATUSES
        if status not in (st.ALL_STATUSES,) + st.STATUS_CHOICES:
            print(f"Unknown status {status!r}")
        else:
            store.set_filter_status(status)
    elif cmd == "search":
        store.set_search_keyword(" ".join(args))
    elif cmd in ("page", "next", "prev"):
        if cmd == "page":
            target = int(args[0]) if args and args[0].isdigit() else 0
        else:
            target = store.state.current_page + (1 if cmd == "next" else -1)
        if not store.change_page(target):
            print("No such page.")
    elif cmd == "add":
        title, _, description = " ".join(args).partition("|")
        await store.create_task(title.strip(), description.strip())
    elif cmd in ("edit", "delete"):
        task = _task_at(store, args[0]) if args else None
        if task is None:
            print(f"usage: {cmd} <n> (n = number shown in the list)")
        elif cmd == "delete":
            await store.delete_task(task["id"])
        else:
            await store.update_task(task["id"], _parse_changes(args[1:]))
    else:
        print(f"Unknown command {cmd!r}; try `help`.")
    return True


async def run_console(store: Store) -> None:
    logger.info("Console client started.")
    store.start()
    await store.settle()
    print(render(store.state))

    while True:
        try:
            line = await asyncio.to_thread(input, ">>> ")
        except (EOFError, KeyboardInterrupt):
            print()
            break
        if not await handle_command(store, line):
            break
        await store.settle()
        print(render(store.state))

    await store.api.aclose()


def main(argv=None) -> int:
    load_dotenv()
    parser = argparse.ArgumentParser(description="Console client for the task tracker")
    parser.add_argument("--api-url", default=os.getenv("TASK_API_URL", DEFAULT_API_URL))
    parser.add_argument("--session-file", default=None, help="where the signed-in user is cached")
    parser.add_argument("--verbose", action="store_true")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="[%(levelname)s] %(message)s",
    )
    store = Store(TaskAPI(args.api_url), SessionCache(args.session_file))
    asyncio.run(run_console(store))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
