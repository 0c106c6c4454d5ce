from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Dict, List, Optional

from fastapi import APIRouter, Depends, FastAPI, Query, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from cleaning_checklist.auth import get_current_user
from cleaning_checklist.auth.crud import create_user, get_user_by_id, verify_user_credentials
from cleaning_checklist.auth.security import create_access_token, hash_password
from cleaning_checklist.checklist import create_item, list_items, parse_field, update_item_field
from cleaning_checklist.config import Config, load_config
from cleaning_checklist.db import Database, init_db
from cleaning_checklist.errors import (
    ApiError,
    AuthError,
    InternalError,
    NotFoundError,
    StoreError,
    ValidationError,
)


def _debug(msg: str) -> None:
    print(f"[api] {msg}")


router = APIRouter(prefix="/api")


def _cfg(request: Request) -> Config:
    return request.app.state.cfg


def _db(request: Request) -> Database:
    return request.app.state.db


# -----------------------------
# Health
# -----------------------------


@router.get("/health")
def health() -> Dict[str, Any]:
    return {"status": "healthy"}


# -----------------------------
# Auth
# -----------------------------


class Credentials(BaseModel):
    # Optional so a missing field is a 400 with a readable message, not a 422.
    email: Optional[str] = None
    password: Optional[str] = None


@router.post("/signup", status_code=201)
def signup(request: Request, payload: Optional[Credentials] = None) -> Dict[str, Any]:
    payload = payload or Credentials()
    if not payload.email or not payload.password:
        raise ValidationError("Email and password are required")

    try:
        password_hash = hash_password(payload.password)
    except Exception as e:
        _debug(f"password hashing failed: {e!r}")
        raise InternalError()

    # Duplicate emails are reported like any other store failure.
    try:
        with _db(request).connect() as conn:
            user_id = create_user(conn, email=payload.email, password_hash=password_hash)
    except ApiError as e:
        _debug(f"signup failed: {e!r}")
        raise StoreError("Error registering user")

    _debug(f"registered user id={user_id}")
    return {"message": "User registered successfully"}


@router.post("/login")
def login(request: Request, payload: Optional[Credentials] = None) -> Dict[str, Any]:
    payload = payload or Credentials()
    if not payload.email or not payload.password:
        raise ValidationError("Email and password are required")

    with _db(request).connect() as conn:
        row = verify_user_credentials(conn, payload.email, payload.password)
    if row is None:
        raise AuthError("Invalid email or password")

    cfg = _cfg(request)
    token = create_access_token(
        secret=cfg.AUTH_JWT_SECRET,
        user_id=int(row["id"]),
        email=str(row["email"]),
        expires_minutes=cfg.AUTH_TOKEN_EXPIRE_MINUTES,
    )
    return {"message": "Login successful", "token": token}


@router.post("/logout")
def logout() -> Dict[str, Any]:
    # Tokens are stateless; the client discards its copy.
    return {"message": "Logged out successfully"}


@router.get("/user")
def current_user(
    request: Request,
    user: Dict[str, Any] = Depends(get_current_user),
) -> Dict[str, Any]:
    with _db(request).connect() as conn:
        found = get_user_by_id(conn, int(user["id"]))
    if found is None:
        raise NotFoundError("User not found")
    return found


# -----------------------------
# Checklist
# -----------------------------


class CreateItemRequest(BaseModel):
    name: Optional[str] = None
    facility: Optional[str] = None


class UpdateFieldRequest(BaseModel):
    # Checked by hand: field against the allow-list, value as a strict bool.
    field: Any = None
    value: Any = None


@router.get("/checklist")
def checklist_list(
    request: Request,
    facility: Optional[str] = Query(None),
    _user: Dict[str, Any] = Depends(get_current_user),
) -> List[Dict[str, Any]]:
    facility = facility or _cfg(request).DEFAULT_FACILITY
    with _db(request).connect() as conn:
        return list_items(conn, facility)


@router.post("/checklist", status_code=201)
def checklist_create(
    request: Request,
    payload: Optional[CreateItemRequest] = None,
    _user: Dict[str, Any] = Depends(get_current_user),
) -> Dict[str, Any]:
    payload = payload or CreateItemRequest()
    if not payload.name:
        raise ValidationError("Name is required")

    facility = payload.facility or _cfg(request).DEFAULT_FACILITY
    with _db(request).connect() as conn:
        return create_item(conn, name=payload.name, facility=facility)


@router.put("/checklist/update-field/{item_id}")
def checklist_update_field(
    item_id: int,
    request: Request,
    payload: Optional[UpdateFieldRequest] = None,
    _user: Dict[str, Any] = Depends(get_current_user),
) -> Response:
    payload = payload or UpdateFieldRequest()
    field = parse_field(payload.field)
    if not isinstance(payload.value, bool):
        raise ValidationError("Value must be a boolean")

    with _db(request).connect() as conn:
        updated = update_item_field(conn, item_id, field, payload.value)
    if not updated:
        _debug(f"update-field matched no item: id={item_id} field={field.value}")
    return Response(status_code=200)


# -----------------------------
# App
# -----------------------------


def _install_cors(app: FastAPI, cfg: Config) -> None:
    # Development allows every origin (hot reload from any local dev server).
    if cfg.is_development:
        origins = ["*"]
    else:
        origins = cfg.cors_origins()
    if origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=origins,
            allow_methods=["*"],
            allow_headers=["*"],
        )


def _install_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(ApiError)
    async def _api_error(request: Request, exc: ApiError) -> JSONResponse:
        headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == 401 else None
        return JSONResponse(status_code=exc.status_code, content={"message": exc.message}, headers=headers)

    @app.exception_handler(RequestValidationError)
    async def _request_invalid(request: Request, exc: RequestValidationError) -> JSONResponse:
        return JSONResponse(status_code=400, content={"message": "Invalid request"})


def create_app(cfg: Optional[Config] = None) -> FastAPI:
    cfg = cfg or load_config()
    db = Database(cfg.DB_DSN, pool_size=cfg.DB_POOL_SIZE)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        init_db(cfg.DB_DSN)
        yield
        db.close()

    app = FastAPI(title="Cleaning Checklist API", version="0.1.0", lifespan=lifespan)
    # Config and the connection pool travel with the app, not as module globals.
    app.state.cfg = cfg
    app.state.db = db

    _install_cors(app, cfg)
    _install_error_handlers(app)
    app.include_router(router)
    return app


app = create_app()
