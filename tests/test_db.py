"""Persistence layer tests with mocked sessions.

Uses MockRepository from helpers/mock_repository.py for the adapters and
the seeder, and AsyncMock for AsyncSession where a real repository method
only needs ``add`` / ``flush`` / ``delete``.  No database is required.
"""

import uuid
from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock

import pytest
from sqlalchemy.dialects import postgresql
from sqlalchemy.schema import CreateTable

from holoforms.errors import FormClosed, FormNotFound
from holoforms.loader import load_form_definition
from holoforms.models.form import FormStatus
from holoforms_db.adapters import (
    DatabaseFormSource,
    DatabaseResponseSink,
    ensure_fillable,
    form_from_rows,
)
from holoforms_db.config import get_async_url, get_pool_settings, get_sync_url
from holoforms_db.engine import session_scope
from holoforms_db.models.form import FormFieldRow, FormResponseRow, FormRow
from holoforms_db.repository import FormRepository, parse_uuid
from holoforms_db.seed import seed_form

from helpers.mock_repository import FakeSessionFactory, MockRepository
from helpers.mock_repository import seed_form as seed_mock_form


@pytest.fixture
def mock_repo():
    return MockRepository()


@pytest.fixture
def mock_db():
    """AsyncMock standing in for AsyncSession; add() is synchronous."""
    db = AsyncMock()
    db.add = MagicMock()
    return db


# =====================================================================
# Connection URLs
# =====================================================================


class TestConfig:
    def test_async_url_from_parts(self, monkeypatch):
        monkeypatch.delenv("DATABASE_URL", raising=False)
        monkeypatch.setenv("PG_HOST", "db")
        assert get_async_url() == "postgresql+asyncpg://holoforms:holoforms@db:5432/holoforms"

    def test_short_scheme_is_upgraded(self, monkeypatch):
        monkeypatch.setenv("DATABASE_URL", "postgres://u:p@h:5432/d")
        assert get_async_url() == "postgresql+asyncpg://u:p@h:5432/d"

    def test_sync_url_strips_driver(self, monkeypatch):
        monkeypatch.setenv("DATABASE_URL", "postgresql+asyncpg://u:p@h/d")
        assert get_sync_url() == "postgresql://u:p@h/d"

    def test_pool_settings_from_env(self, monkeypatch):
        monkeypatch.setenv("PG_POOL_SIZE", "20")
        monkeypatch.setenv("PG_ECHO", "true")
        monkeypatch.delenv("PG_MAX_OVERFLOW", raising=False)
        settings = get_pool_settings()
        assert settings["pool_size"] == 20
        assert settings["max_overflow"] == 10
        assert settings["echo"] is True
        assert settings["pool_pre_ping"] is True


# =====================================================================
# Schema and session scope
# =====================================================================


class TestSchema:
    def test_constraint_names_match_postgres_defaults(self):
        ddl = str(CreateTable(FormResponseRow.__table__).compile(dialect=postgresql.dialect()))
        assert "CONSTRAINT form_responses_pkey PRIMARY KEY" in ddl
        assert "CONSTRAINT form_responses_form_id_fkey FOREIGN KEY" in ddl


class TestSessionScope:
    @pytest.mark.asyncio
    async def test_commits_on_success(self):
        factory = FakeSessionFactory()
        async with session_scope(factory) as db:
            assert db is factory.db
        factory.db.commit.assert_awaited_once()
        factory.db.rollback.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_rolls_back_and_reraises(self):
        factory = FakeSessionFactory()
        with pytest.raises(RuntimeError):
            async with session_scope(factory):
                raise RuntimeError("constraint violated")
        factory.db.rollback.assert_awaited_once()
        factory.db.commit.assert_not_awaited()


# =====================================================================
# Repository (write paths that only need add/flush/delete)
# =====================================================================


class TestFormRepository:
    def test_parse_uuid(self):
        value = uuid.uuid4()
        assert parse_uuid(value) is value
        assert parse_uuid(str(value)) == value
        assert parse_uuid("customer-feedback") is None

    @pytest.mark.asyncio
    async def test_create_form_generates_slug(self, mock_db):
        form = await FormRepository().create_form(mock_db, user_id="u1", name="Team Survey")
        assert isinstance(form, FormRow)
        assert form.slug.startswith("team-survey-")
        assert form.status == "draft"
        mock_db.add.assert_called_once_with(form)
        mock_db.flush.assert_awaited()

    @pytest.mark.asyncio
    async def test_update_form_rejects_unknown_columns(self, mock_db):
        form = FormRow(user_id="u1", name="F", status="draft")
        with pytest.raises(ValueError):
            await FormRepository().update_form(mock_db, form, {"user_id": "thief"})

    @pytest.mark.asyncio
    async def test_update_form_normalises_status(self, mock_db):
        form = FormRow(user_id="u1", name="F", status="draft")
        await FormRepository().update_form(mock_db, form, {"status": FormStatus.PUBLISHED})
        assert form.status == "published"
        assert form.updated_at is not None

    @pytest.mark.asyncio
    async def test_create_field_explicit_position(self, mock_db):
        form_id = uuid.uuid4()
        field = await FormRepository().create_field(
            mock_db, form_id, field_type="text", label="Name",
            display_order=3, page_number=2, required=True,
        )
        assert isinstance(field, FormFieldRow)
        assert (field.display_order, field.page_number, field.required) == (3, 2, True)

    @pytest.mark.asyncio
    async def test_create_field_rejects_unknown_attrs(self, mock_db):
        with pytest.raises(ValueError):
            await FormRepository().create_field(
                mock_db, uuid.uuid4(), field_type="text", label="X", display_order=0, colour="red",
            )

    @pytest.mark.asyncio
    async def test_insert_response_blank_submitter_is_null(self, mock_db):
        row = await FormRepository().insert_response(
            mock_db, uuid.uuid4(), {"q": "a"}, submitted_by_email="", submitted_by_name=None,
        )
        assert isinstance(row, FormResponseRow)
        assert row.submitted_by_email is None
        assert row.response_data == {"q": "a"}

    @pytest.mark.asyncio
    async def test_insert_response_keeps_given_timestamp(self, mock_db):
        stamp = datetime(2026, 10, 1, 9, 30, tzinfo=timezone.utc)
        row = await FormRepository().insert_response(
            mock_db, uuid.uuid4(), {}, submitted_at=stamp,
        )
        assert row.submitted_at == stamp


# =====================================================================
# Adapters
# =====================================================================


class TestFormFromRows:
    @pytest.mark.asyncio
    async def test_rows_become_sdk_form(self, mock_repo):
        form = await seed_mock_form(mock_repo, fields=[
            {"field_type": "text", "label": "Name", "required": True},
            {"field_type": "select", "label": "Pick", "options": ["Yes", "No"], "page_number": 2},
        ])
        sdk_form = form_from_rows(form, await mock_repo.list_fields(None, form.id))
        assert sdk_form.id == str(form.id)
        assert sdk_form.total_pages == 2
        assert sdk_form.fields[0].required is True
        assert sdk_form.fields[1].options == ["Yes", "No"]
        assert all(uuid.UUID(f.id) for f in sdk_form.fields)

    def test_ensure_fillable(self):
        ensure_fillable(FormRow(user_id="u", name="F", status="published"))
        with pytest.raises(FormClosed):
            ensure_fillable(FormRow(user_id="u", name="F", status="closed"))
        with pytest.raises(FormNotFound):
            ensure_fillable(FormRow(user_id="u", name="F", status="draft"))


class TestDatabaseFormSource:
    @pytest.mark.asyncio
    async def test_by_slug_and_id(self, mock_repo):
        row = await seed_mock_form(mock_repo, fields=[{"field_type": "text", "label": "Name"}])
        source = DatabaseFormSource(FakeSessionFactory(), mock_repo)
        by_slug = await source.get_published_form(row.slug)
        by_id = await source.get_published_form(str(row.id))
        assert by_slug == by_id
        assert by_slug.name == "Customer Feedback"

    @pytest.mark.asyncio
    async def test_unknown_and_draft(self, mock_repo):
        draft = await seed_mock_form(mock_repo, status=FormStatus.DRAFT)
        source = DatabaseFormSource(FakeSessionFactory(), mock_repo)
        with pytest.raises(FormNotFound):
            await source.get_published_form("nothing-here")
        with pytest.raises(FormNotFound):
            await source.get_published_form(draft.slug)

    @pytest.mark.asyncio
    async def test_closed(self, mock_repo):
        closed = await seed_mock_form(mock_repo, status=FormStatus.CLOSED)
        source = DatabaseFormSource(FakeSessionFactory(), mock_repo)
        with pytest.raises(FormClosed):
            await source.get_published_form(str(closed.id))


class TestDatabaseResponseSink:
    @pytest.mark.asyncio
    async def test_insert_commits(self, mock_repo):
        factory = FakeSessionFactory()
        form = await seed_mock_form(mock_repo)
        sink = DatabaseResponseSink(factory, mock_repo)
        response_id = await sink.insert_response(
            str(form.id), {"q": "a"}, submitted_by_email="a@b.com",
        )
        stored = mock_repo.responses[uuid.UUID(response_id)]
        assert stored.response_data == {"q": "a"}
        assert stored.submitted_by_email == "a@b.com"
        factory.db.commit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_insert_passes_timestamp(self, mock_repo):
        form = await seed_mock_form(mock_repo)
        stamp = datetime(2000, 1, 1, tzinfo=timezone.utc)
        sink = DatabaseResponseSink(FakeSessionFactory(), mock_repo)
        response_id = await sink.insert_response(str(form.id), {}, submitted_at=stamp)
        assert mock_repo.responses[uuid.UUID(response_id)].submitted_at == stamp

    @pytest.mark.asyncio
    async def test_failure_rolls_back(self, mock_repo):
        factory = FakeSessionFactory()
        mock_repo.insert_response = AsyncMock(side_effect=RuntimeError("db down"))
        sink = DatabaseResponseSink(factory, mock_repo)
        with pytest.raises(RuntimeError):
            await sink.insert_response(str(uuid.uuid4()), {})
        factory.db.rollback.assert_awaited_once()
        factory.db.commit.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_invalid_form_id(self, mock_repo):
        sink = DatabaseResponseSink(FakeSessionFactory(), mock_repo)
        with pytest.raises(ValueError):
            await sink.insert_response("not-a-uuid", {})


# =====================================================================
# Seeder
# =====================================================================


class TestSeed:
    @pytest.mark.asyncio
    async def test_seed_yaml_definition(self, mock_repo, fixtures_dir):
        definition = load_form_definition(fixtures_dir / "customer_feedback.yaml")
        row = await seed_form(AsyncMock(), mock_repo, definition, user_id="owner-9")
        fields = await mock_repo.list_fields(None, row.id)

        assert row.user_id == "owner-9"
        assert row.slug == "customer-feedback-a1b2c3"
        assert row.status == "published"
        assert [f.label for f in fields][:2] == ["This survey takes about two minutes.", "Your name"]
        recommend = next(f for f in fields if f.label == "Would you recommend us?")
        assert recommend.options == ["Yes", "No"]
        assert recommend.include_other and recommend.require_no_reason
        text_field = next(f for f in fields if f.label == "Your name")
        assert text_field.options is None, "Fields without options store NULL"

    @pytest.mark.asyncio
    async def test_status_override(self, mock_repo, fixtures_dir):
        definition = load_form_definition(fixtures_dir / "customer_feedback.yaml")
        row = await seed_form(
            AsyncMock(), mock_repo, definition, user_id="o", status=FormStatus.DRAFT,
        )
        assert row.status == "draft"
