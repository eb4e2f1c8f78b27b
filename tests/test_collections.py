"""Search, filter, ordering and paging rules of the collection queries.

The fake session returns canned rows, so these tests inspect the SQL each
service builds instead of the rows it gets back.
"""

import pytest

from conftest import (
    FakeAsyncSession,
    FakeResult,
    compile_sql,
    make_user,
    recording_handler,
)
from loanlink.core.roles import UserRole
from loanlink.schemas.applications import ApplicationStatus
from loanlink.schemas.common import PageParams
from loanlink.services import applications as applications_service
from loanlink.services import loans as loans_service
from loanlink.services import users as users_service
from loanlink.services.authz import AuthContext


def _matches_case_insensitively(sql: str, column: str) -> bool:
    return f"{column} ILIKE" in sql or f"lower({column}) LIKE" in sql


def _paged_session(statements: list, total: int = 0) -> FakeAsyncSession:
    return FakeAsyncSession().on_execute(
        recording_handler(statements, [FakeResult(scalar=total), FakeResult(items=[])])
    )


@pytest.mark.asyncio
async def test_loan_search_spans_title_and_category_and_is_anded_with_filter():
    statements: list = []
    db = _paged_session(statements, total=11)

    await loans_service.list_loans(
        db, page=PageParams(page=3, limit=5), search="boost", category="Business"
    )

    count_sql, page_sql = (compile_sql(stmt) for stmt in statements)
    for sql in (count_sql, page_sql):
        assert _matches_case_insensitively(sql, "loans.title")
        assert _matches_case_insensitively(sql, "loans.category")
        assert " OR " in sql
        assert "'boost'" in sql
        assert "AND loans.category = 'Business'" in sql
    assert "count(*)" in count_sql
    assert "ORDER BY loans.created_at DESC" in page_sql
    assert "LIMIT 5" in page_sql
    assert "OFFSET 10" in page_sql


@pytest.mark.asyncio
async def test_loan_listing_without_filters_has_no_where_clause():
    statements: list = []

    await loans_service.list_loans(_paged_session(statements), page=PageParams(page=1, limit=10))

    page_sql = compile_sql(statements[1])
    assert "WHERE" not in page_sql
    assert "LIMIT 10" in page_sql


@pytest.mark.asyncio
async def test_manager_loans_are_scoped_to_creator_and_searchable():
    statements: list = []
    manager = make_user(role=UserRole.MANAGER)
    db = FakeAsyncSession().on_execute(recording_handler(statements, [FakeResult(items=[])]))

    await loans_service.list_manager_loans(db, AuthContext(user=manager), search="edu")

    sql = compile_sql(statements[0])
    assert "loans.created_by =" in sql
    assert manager.id.hex in sql.replace("-", "")
    assert _matches_case_insensitively(sql, "loans.title")
    assert "'edu'" in sql
    assert "ORDER BY loans.created_at DESC" in sql
    assert "LIMIT" not in sql


@pytest.mark.asyncio
async def test_featured_loans_are_newest_home_flagged_first():
    statements: list = []
    db = FakeAsyncSession().on_execute(recording_handler(statements, [FakeResult(items=[])]))

    await loans_service.list_featured_loans(db)

    sql = compile_sql(statements[0])
    assert "loans.show_on_home IS" in sql
    assert "ORDER BY loans.created_at DESC" in sql
    assert f"LIMIT {loans_service.FEATURED_LIMIT}" in sql


@pytest.mark.asyncio
async def test_user_search_spans_name_and_email():
    statements: list = []

    await users_service.list_users(
        _paged_session(statements), page=PageParams(page=2, limit=20), search="ada"
    )

    count_sql, page_sql = (compile_sql(stmt) for stmt in statements)
    for sql in (count_sql, page_sql):
        assert _matches_case_insensitively(sql, "users.name")
        assert _matches_case_insensitively(sql, "users.email")
        assert "'ada'" in sql
    assert "ORDER BY users.created_at DESC" in page_sql
    assert "LIMIT 20" in page_sql
    assert "OFFSET 20" in page_sql


@pytest.mark.asyncio
async def test_application_listing_filters_by_status():
    statements: list = []

    await applications_service.list_applications(
        _paged_session(statements),
        page=PageParams(page=4, limit=10),
        status=ApplicationStatus.APPROVED,
    )

    count_sql, page_sql = (compile_sql(stmt) for stmt in statements)
    for sql in (count_sql, page_sql):
        assert "loan_applications.status = 'Approved'" in sql
    assert "ORDER BY loan_applications.created_at DESC" in page_sql
    assert "LIMIT 10" in page_sql
    assert "OFFSET 30" in page_sql


@pytest.mark.asyncio
async def test_my_applications_are_scoped_to_the_borrower():
    statements: list = []
    borrower = make_user()
    db = FakeAsyncSession().on_execute(recording_handler(statements, [FakeResult(items=[])]))

    await applications_service.list_applications_for_user(db, AuthContext(user=borrower))

    sql = compile_sql(statements[0])
    assert "loan_applications.user_id =" in sql
    assert borrower.id.hex in sql.replace("-", "")
    assert "ORDER BY loan_applications.created_at DESC" in sql


def test_page_query_reaches_the_loan_query(client, fake_db):
    statements: list = []
    fake_db.on_execute(recording_handler(statements, [FakeResult(scalar=0), FakeResult(items=[])]))

    response = client.get(
        "/api/loans", params={"page": 3, "limit": 5, "search": "boost", "category": "Business"}
    )

    assert response.status_code == 200
    page_sql = compile_sql(statements[1])
    assert "AND loans.category = 'Business'" in page_sql
    assert "OFFSET 10" in page_sql
