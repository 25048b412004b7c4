"""FastAPI dependency injection — DB sessions, engine collaborators, user identity.

Each request that touches the database gets a fresh ``AsyncSession`` via
``get_db()``.  The session is committed on success and rolled back on
error; the repository only ever calls ``flush()``.

Long-lived collaborators (form source, submission pipeline, auth cache,
repository) are built once in the app lifespan and read from
``app.state``, so tests can replace them with fakes.
"""

import hmac
import uuid
from typing import AsyncGenerator

from fastapi import Depends, Header, HTTPException, Request
from sqlalchemy.ext.asyncio import AsyncSession

from holoforms.auth_cache import AuthCache
from holoforms.interfaces import FormSource
from holoforms.submission import SubmissionPipeline
from holoforms_db.engine import session_scope
from holoforms_db.models.form import FormRow
from holoforms_db.repository import FormRepository, parse_uuid


# ------------------------------------------------------------------
# Database session; transaction boundary lives here
# ------------------------------------------------------------------

async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Yield an async DB session; commit on success, rollback on error."""
    async with session_scope() as session:
        yield session


# ------------------------------------------------------------------
# Collaborators — stashed on app.state during lifespan
# ------------------------------------------------------------------

def get_repository(request: Request) -> FormRepository:
    return request.app.state.repository


def get_form_source(request: Request) -> FormSource:
    return request.app.state.form_source


def get_submission_pipeline(request: Request) -> SubmissionPipeline:
    return request.app.state.submission_pipeline


def get_auth_cache(request: Request) -> AuthCache:
    return request.app.state.auth_cache


# ------------------------------------------------------------------
# User identity — extracted from the X-User-ID header
# ------------------------------------------------------------------

async def get_user_id(
    request: Request,
    x_user_id: str | None = Header(None, alias="X-User-ID"),
    x_proxy_secret: str | None = Header(None, alias="X-Proxy-Secret"),
) -> str:
    """Extract user identity from the ``X-User-ID`` header.

    Returns 401 if the header is missing.  When ``TRUSTED_PROXY_SECRET``
    is configured the request must also carry a matching
    ``X-Proxy-Secret`` (403 otherwise).
    """
    if not x_user_id:
        raise HTTPException(status_code=401, detail="X-User-ID header is required")

    expected_secret: str | None = request.app.state.settings.trusted_proxy_secret
    if expected_secret:
        if not x_proxy_secret:
            raise HTTPException(
                status_code=403,
                detail="X-Proxy-Secret header is required",
            )
        # Constant-time comparison
        if not hmac.compare_digest(x_proxy_secret, expected_secret):
            raise HTTPException(status_code=403, detail="Invalid proxy secret")

    return x_user_id


# ------------------------------------------------------------------
# Ownership
# ------------------------------------------------------------------

def owner_cache_key(form_id: uuid.UUID) -> str:
    return f"form-owner:{form_id}"


async def require_form_owner(
    db: AsyncSession,
    repo: FormRepository,
    cache: AuthCache,
    form_id: str,
    user_id: str,
) -> uuid.UUID:
    """Check that ``user_id`` owns the form and return its UUID.

    The owner of each form is cached, so field and response endpoints do
    not re-read the form row on every call.  A form owned by someone else
    is reported exactly like a missing one.
    """
    form_uuid = parse_uuid(form_id)
    if form_uuid is None:
        raise ValueError(f"Form not found: {form_id}")

    key = owner_cache_key(form_uuid)
    cached = cache.get(key)
    if cached is None:
        form = await repo.get_form(db, form_uuid)
        if form is None:
            raise ValueError(f"Form not found: {form_id}")
        cached = cache.put(key, form.user_id)

    if cached.principal != user_id:
        raise ValueError(f"Form not found: {form_id} (not owned by caller)")
    return form_uuid


async def get_owned_form(
    form_id: str,
    user_id: str = Depends(get_user_id),
    db: AsyncSession = Depends(get_db),
    repo: FormRepository = Depends(get_repository),
    cache: AuthCache = Depends(get_auth_cache),
) -> FormRow:
    """Dependency: the form row at ``{form_id}``, owned by the caller."""
    form_uuid = await require_form_owner(db, repo, cache, form_id, user_id)
    form = await repo.get_form(db, form_uuid)
    if form is None:
        # Deleted since its owner was cached
        cache.invalidate(owner_cache_key(form_uuid))
        raise ValueError(f"Form not found: {form_id}")
    return form
