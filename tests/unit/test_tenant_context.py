"""Tests for tenant scoping helpers and database configuration."""

import pytest
from pydantic import ValidationError as PydanticValidationError

from itsm_core.context import TenantScope, get_scoped_or_404, require_scope, scoped_query
from itsm_core.db import Category, DatabaseConfig, database_config_from_url
from itsm_core.exceptions import NotFoundError, ServiceError, ValidationError
from itsm_core.schemas import CategoryCreate


class TestTenantScope:
    def test_scope_is_immutable(self):
        scope = TenantScope(tenant_id="t1", user_id="u1")

        with pytest.raises(PydanticValidationError):
            scope.tenant_id = "t2"

    @pytest.mark.parametrize("tenant_id", ["", None])
    def test_tenant_is_required(self, tenant_id):
        with pytest.raises(PydanticValidationError):
            TenantScope(tenant_id=tenant_id, user_id="u1")

    @pytest.mark.parametrize("value", [None, "t1", {"tenant_id": "t1"}])
    def test_require_scope_rejects_non_scopes(self, value):
        with pytest.raises(ValidationError):
            require_scope(value)


class TestScopedQueries:
    def test_scoped_query_filters_by_tenant(
        self, category_service, db_session, scope_a, scope_b
    ):
        mine = category_service.create_category(scope_a, CategoryCreate(name="Mine"))
        category_service.create_category(scope_b, CategoryCreate(name="Theirs"))

        rows = scoped_query(db_session, Category, scope_a).all()

        assert [r.id for r in rows] == [mine.id]

    def test_foreign_row_looks_missing(self, category_service, db_session, scope_a, scope_b):
        theirs = category_service.create_category(scope_b, CategoryCreate(name="Theirs"))

        with pytest.raises(NotFoundError) as exc_info:
            get_scoped_or_404(db_session, Category, theirs.id, scope_a)

        assert exc_info.value.message == "Category not found"

    @pytest.mark.parametrize("record_id", [None, ""])
    def test_empty_id_is_not_found(self, db_session, scope_a, record_id):
        with pytest.raises(NotFoundError):
            get_scoped_or_404(db_session, Category, record_id, scope_a)


class TestDatabaseConfig:
    @pytest.mark.parametrize(
        "url,db_type,database",
        [
            ("sqlite:///./itsm.db", "sqlite", "./itsm.db"),
            ("sqlite://", "sqlite", ":memory:"),
            ("postgresql://user:pw@db.internal:5433/itsm", "postgres", "itsm"),
        ],
    )
    def test_from_url(self, url, db_type, database):
        config = database_config_from_url(url)

        assert config.db_type == db_type
        assert config.database == database

    def test_postgres_url_details(self):
        config = database_config_from_url("postgresql://user:pw@db.internal:5433/itsm")

        assert config.get_connection_string() == "postgresql://user:pw@db.internal:5433/itsm"
        assert "pw" not in repr(config)

    def test_unsupported_backend(self):
        with pytest.raises(ValidationError):
            database_config_from_url("mysql://u:p@h/db")

    def test_drop_tables_requires_development_mode(self, db_manager):
        db_manager.config.development_mode = False
        try:
            with pytest.raises(ServiceError):
                db_manager.drop_tables()
        finally:
            db_manager.config.development_mode = True

    def test_in_memory_detection(self):
        assert DatabaseConfig(db_type="sqlite", database=":memory:").is_in_memory
        assert not DatabaseConfig(db_type="sqlite", database="file.db").is_in_memory
