"""
Tests unitarios del contrato HTTP de /api/v1/reviews.

Los casos de uso se reemplazan via dependency_overrides.
"""
from __future__ import annotations

from datetime import datetime, timezone
from unittest.mock import AsyncMock

import pytest
from httpx import ASGITransport, AsyncClient

from reviews.api.v1.dependencies.use_case_deps import get_review_use_cases
from reviews.application.dto.review_dto import PaginatedReviewsDTO, ReviewDTO
from reviews.shared.exceptions.domain import EntityNotFoundException


def _review_dto(review_id: int = 1) -> ReviewDTO:
    now = datetime(2024, 6, 1, tzinfo=timezone.utc)
    return ReviewDTO(
        id=review_id,
        source="yelp",
        external_id=f"r{review_id}",
        author="Ana",
        rating=4,
        content="Bien",
        tag="food",
        review_date=now,
        created_at=now,
        updated_at=now,
    )


@pytest.fixture
def mock_use_cases() -> AsyncMock:
    uc = AsyncMock()
    uc.search_reviews = AsyncMock(
        return_value=PaginatedReviewsDTO(page=1, size=10, total_pages=1, total_items=1, items=[_review_dto()])
    )
    uc.get_review = AsyncMock(return_value=_review_dto(7))
    uc.delete_review = AsyncMock(return_value=None)
    return uc


@pytest.fixture
def app_with_mock(mock_use_cases: AsyncMock):
    """Crea la app FastAPI con los casos de uso mockeados."""
    from main import create_application
    app = create_application()
    app.dependency_overrides[get_review_use_cases] = lambda: mock_use_cases
    yield app
    app.dependency_overrides.clear()


@pytest.fixture
async def client(app_with_mock):
    transport = ASGITransport(app=app_with_mock)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c


@pytest.mark.asyncio
async def test_list_reviews_passes_filters_and_pagination(client, mock_use_cases: AsyncMock) -> None:
    response = await client.get(
        "/api/v1/reviews/",
        params={"q": "ana", "source": "yelp", "min_rating": 3, "page": 2, "size": 500},
    )

    assert response.status_code == 200
    data = response.json()
    assert data["total_items"] == 1
    assert data["items"][0]["external_id"] == "r1"

    call = mock_use_cases.search_reviews.call_args
    params = call.args[0]
    assert params.q == "ana"
    assert params.source == "yelp"
    assert params.min_rating == 3
    assert call.kwargs["page"] == 2
    assert call.kwargs["size"] == 500


@pytest.mark.asyncio
async def test_list_reviews_rejects_out_of_range_rating(client, mock_use_cases: AsyncMock) -> None:
    response = await client.get("/api/v1/reviews/", params={"min_rating": 9})

    assert response.status_code == 422
    mock_use_cases.search_reviews.assert_not_called()


@pytest.mark.asyncio
async def test_list_reviews_rejects_inverted_rating_range(client, mock_use_cases: AsyncMock) -> None:
    response = await client.get("/api/v1/reviews/", params={"min_rating": 5, "max_rating": 2})

    assert response.status_code == 400
    assert response.json()["error"] == "VALIDATION_ERROR"
    mock_use_cases.search_reviews.assert_not_called()


@pytest.mark.asyncio
async def test_get_review(client, mock_use_cases: AsyncMock) -> None:
    response = await client.get("/api/v1/reviews/7")

    assert response.status_code == 200
    assert response.json()["id"] == 7
    mock_use_cases.get_review.assert_awaited_once_with(7)


@pytest.mark.asyncio
async def test_get_review_not_found_returns_404(client, mock_use_cases: AsyncMock) -> None:
    mock_use_cases.get_review.side_effect = EntityNotFoundException("Review", 99)

    response = await client.get("/api/v1/reviews/99")

    assert response.status_code == 404
    assert response.json()["error"] == "ENTITY_NOT_FOUND"


@pytest.mark.asyncio
async def test_delete_review_returns_204(client, mock_use_cases: AsyncMock) -> None:
    response = await client.delete("/api/v1/reviews/7")

    assert response.status_code == 204
    mock_use_cases.delete_review.assert_awaited_once_with(7)


@pytest.mark.asyncio
async def test_health_reports_import_configuration(client) -> None:
    response = await client.get("/health")

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "healthy"
    assert "import_configured" in data
