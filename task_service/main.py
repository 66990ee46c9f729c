import uuid
import logging
from typing import Optional

from fastapi import FastAPI, Depends, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from task_service import auth, config, tasks
from task_service.database import database, engine, metadata
from task_service.errors import TaskServiceError
from task_service.pagination import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from task_service.schemas import (
    AuthResponse,
    LoginRequest,
    MessageResponse,
    PageEnvelope,
    RegisterRequest,
    Task,
    TaskCreate,
    TaskUpdate,
    UserProfile,
)

# ---------------------------------------------------------
# Logging
# ---------------------------------------------------------
logging.basicConfig(level=config.LOG_LEVEL, format="[%(levelname)s] %(message)s")
logger = logging.getLogger("task-service")

# ---------------------------------------------------------
# FastAPI Setup
# ---------------------------------------------------------
app = FastAPI(title="Task Manager API", version="1.0.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=[config.CLIENT_URL],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": False, "message": message})


# ---------------------------------------------------------
# Exception Handling
# ---------------------------------------------------------
@app.exception_handler(TaskServiceError)
async def task_service_error_handler(request: Request, exc: TaskServiceError):
    return error_response(exc.status_code, exc.message)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    messages = []
    for err in exc.errors():
        field = ".".join(str(part) for part in err.get("loc", ()) if part not in ("body", "query"))
        messages.append(f"{field}: {err.get('msg')}" if field else err.get("msg", "Invalid input"))
    return error_response(400, "; ".join(messages) or "Invalid input")


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    trace_id = getattr(request.state, "trace_id", "N/A")
    logger.error(f"[TRACE {trace_id}] Unhandled error on {request.method} {request.url.path}: {exc}")
    return error_response(500, str(exc))


# ---------------------------------------------------------
# Middleware for trace_id
# ---------------------------------------------------------
@app.middleware("http")
async def add_trace_id(request: Request, call_next):
    trace_id = request.headers.get("x-trace-id") or str(uuid.uuid4())
    request.state.trace_id = trace_id
    response = await call_next(request)
    response.headers["x-trace-id"] = trace_id
    logger.info(f"[TRACE {trace_id}] {request.method} {request.url.path} -> {response.status_code}")
    return response


# ---------------------------------------------------------
# Lifecycle
# ---------------------------------------------------------
@app.on_event("startup")
async def startup():
    await database.connect()
    metadata.create_all(engine)
    logger.info("Task service started & DB ready.")


@app.on_event("shutdown")
async def shutdown():
    await database.disconnect()
    logger.info("Task service stopped.")


# ---------------------------------------------------------
# Health
# ---------------------------------------------------------
@app.get("/")
async def root():
    return {"message": "Task Manager API is running successfully! 🚀"}


@app.get("/health")
async def health():
    return {"status": "task-service healthy"}


# ---------------------------------------------------------
# Users
# ---------------------------------------------------------
@app.post("/api/users/register", response_model=AuthResponse, status_code=201)
async def register(req: RegisterRequest):
    return await auth.register(req.email, req.password, req.role)


@app.post("/api/users/login", response_model=AuthResponse)
async def login(req: LoginRequest):
    return await auth.login(req.email, req.password)


@app.get("/api/users/profile", response_model=UserProfile)
async def profile(user: UserProfile = Depends(auth.authenticate)):
    return user


# ---------------------------------------------------------
# Tasks
# ---------------------------------------------------------
@app.get("/api/tasks", response_model=PageEnvelope)
async def list_tasks(
    status: Optional[str] = None,
    keyword: Optional[str] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    user: UserProfile = Depends(auth.authenticate),
):
    return await tasks.list_tasks(user.id, status=status, keyword=keyword, page=page, page_size=limit)


@app.post("/api/tasks", response_model=Task, status_code=201)
async def create_task(body: TaskCreate, user: UserProfile = Depends(auth.authenticate)):
    return await tasks.create_task(user.id, body.title, body.description, body.status)


@app.get("/api/tasks/{task_id}", response_model=Task)
async def get_task(task_id: str, user: UserProfile = Depends(auth.authenticate)):
    return await tasks.get_task(user.id, task_id)


@app.put("/api/tasks/{task_id}", response_model=Task)
async def update_task(task_id: str, body: TaskUpdate, user: UserProfile = Depends(auth.authenticate)):
    return await tasks.update_task(user.id, task_id, body.title, body.description, body.status)


@app.delete("/api/tasks/{task_id}", response_model=MessageResponse)
async def delete_task(task_id: str, user: UserProfile = Depends(auth.authenticate)):
    await tasks.delete_task(user.id, task_id)
    return {"message": "Task removed successfully"}


def run():
    import uvicorn
    uvicorn.run("task_service.main:app", host="0.0.0.0", port=config.PORT)


if __name__ == "__main__":
    run()
