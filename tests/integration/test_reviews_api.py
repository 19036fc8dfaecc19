"""
Integration tests for the review and store endpoints.
"""

import logging

import pytest
from sqlalchemy import func, select

from fakes import FakeRecognizer
from lor.db.models import Review, Store
from lor.reviews import RecognitionResponse, RecognitionTimeout

RECEIPT_FILE = {"receipt": ("receipt.jpg", b"\xff\xd8fake-receipt", "image/jpeg")}


def _submit(client, member_id, content="Great dakgalbi", rating=5, **extra):
    data = {"member_id": str(member_id), "content": content, "rating": str(rating), **extra}
    return client.post("/api/v1/reviews", data=data, files=RECEIPT_FILE)


def _count(session_factory, model) -> int:
    with session_factory() as session:
        return session.execute(select(func.count(model.id))).scalar_one()


class TestSubmitReview:
    def test_admitted(self, test_api_client, session_factory, member_ids, api_recognizer):
        response = _submit(test_api_client, member_ids[0], image="reviews/ilmi.jpg")

        assert response.status_code == 201
        body = response.json()
        assert body["season"] == "2026-FALL"
        assert body["review_id"] > 0
        assert body["store_id"] > 0
        assert api_recognizer.calls == [b"\xff\xd8fake-receipt"]
        assert _count(session_factory, Store) == 1
        assert _count(session_factory, Review) == 1

    def test_duplicate_is_conflict(self, test_api_client, session_factory, member_ids):
        assert _submit(test_api_client, member_ids[0]).status_code == 201

        response = _submit(test_api_client, member_ids[0], content="Second visit")

        assert response.status_code == 409
        error = response.json()["error"]
        assert error["reason"] == "DuplicateReview"
        assert error["details"]["season"] == "2026-FALL"
        assert _count(session_factory, Review) == 1

    def test_unknown_member(self, test_api_client, member_ids, api_recognizer):
        response = _submit(test_api_client, 9999)

        assert response.status_code == 404
        assert response.json()["error"]["reason"] == "MemberNotFound"
        assert api_recognizer.calls == []

    def test_unreadable_receipt(self, test_api_client, test_app, session_factory, member_ids):
        from lor.api.dependencies import get_recognizer

        test_app.dependency_overrides[get_recognizer] = lambda: FakeRecognizer(
            error=RecognitionTimeout("slow")
        )

        response = _submit(test_api_client, member_ids[0])

        assert response.status_code == 422
        error = response.json()["error"]
        assert error["reason"] == "ReceiptInvalid"
        assert error["details"]["failure_reason"] == "timeout"
        assert _count(session_factory, Store) == 0

    def test_outside_service_area(self, test_api_client, test_app, session_factory, member_ids):
        from lor.api.dependencies import get_recognizer

        busan = RecognitionResponse(
            status="SUCCESS", store_name="Haeundae Gukbap", store_address="부산광역시 해운대구 우동 1"
        )
        test_app.dependency_overrides[get_recognizer] = lambda: FakeRecognizer(busan)

        response = _submit(test_api_client, member_ids[0])

        assert response.status_code == 422
        error = response.json()["error"]
        assert error["reason"] == "UnsupportedArea"
        assert error["details"]["city"] == "Busan"
        assert _count(session_factory, Store) == 0

    @pytest.mark.parametrize("rating", [0, 6])
    def test_rating_out_of_range(self, test_api_client, member_ids, api_recognizer, rating):
        response = _submit(test_api_client, member_ids[0], rating=rating)

        assert response.status_code == 422
        assert response.json()["error"]["type"] == "ValidationError"
        assert api_recognizer.calls == []

    def test_missing_receipt(self, test_api_client, member_ids):
        response = test_api_client.post(
            "/api/v1/reviews", data={"member_id": str(member_ids[0]), "content": "x", "rating": "3"}
        )
        assert response.status_code == 422

    def test_empty_receipt_file(self, test_api_client, member_ids, api_recognizer):
        response = test_api_client.post(
            "/api/v1/reviews",
            data={"member_id": str(member_ids[0]), "content": "x", "rating": "3"},
            files={"receipt": ("receipt.jpg", b"", "image/jpeg")},
        )

        assert response.status_code == 422
        assert response.json()["error"]["details"]["failure_reason"] == "empty_image"
        assert api_recognizer.calls == []

    def test_request_id_is_echoed(self, test_api_client, member_ids):
        response = test_api_client.post(
            "/api/v1/reviews",
            data={"member_id": str(member_ids[0]), "content": "x", "rating": "3"},
            files=RECEIPT_FILE,
            headers={"X-Request-ID": "trace-123"},
        )

        assert response.headers["X-Request-ID"] == "trace-123"
        assert "X-Response-Time" in response.headers

    def test_generated_request_id_matches_router_logs(self, test_api_client, member_ids, caplog):
        caplog.set_level(logging.INFO, logger="lor.api.routers.reviews")

        response = _submit(test_api_client, member_ids[0])

        request_id = response.headers["X-Request-ID"]
        router_records = [r for r in caplog.records if r.name == "lor.api.routers.reviews"]
        assert router_records
        assert {r.request_id for r in router_records} == {request_id}


class TestVerifyReceipt:
    def test_returns_store_identity(self, test_api_client):
        response = test_api_client.post("/api/v1/reviews/receipt", files=RECEIPT_FILE)

        assert response.status_code == 200
        assert response.json() == {
            "store_name": "Ilmi Dakgalbi",
            "store_address": "Seoul, Mapo-gu, Wausan-ro 21",
        }


class TestListAndGet:
    def test_list_by_member_and_store(self, test_api_client, member_ids):
        first = _submit(test_api_client, member_ids[0], content="Spicy", rating=4).json()
        _submit(test_api_client, member_ids[1], content="Too salty", rating=2)

        by_member = test_api_client.get("/api/v1/reviews", params={"member_id": member_ids[0]})
        by_store = test_api_client.get("/api/v1/reviews", params={"store_id": first["store_id"]})

        assert by_member.status_code == 200
        assert by_member.json() == [
            {"content": "Spicy", "rating": 4, "image": None, "season": "2026-FALL"}
        ]
        assert [r["content"] for r in by_store.json()] == ["Spicy", "Too salty"]

    def test_store_listing_is_paged(self, test_api_client, member_ids):
        store_id = _submit(test_api_client, member_ids[0], content="one").json()["store_id"]
        _submit(test_api_client, member_ids[1], content="two")
        _submit(test_api_client, member_ids[2], content="three")

        response = test_api_client.get(
            "/api/v1/reviews", params={"store_id": store_id, "limit": 2, "offset": 1}
        )

        assert response.status_code == 200
        assert [r["content"] for r in response.json()] == ["two", "three"]

    def test_page_size_is_bounded(self, test_api_client):
        response = test_api_client.get("/api/v1/reviews", params={"limit": 0})
        assert response.status_code == 422

    def test_both_filters_is_bad_request(self, test_api_client):
        response = test_api_client.get("/api/v1/reviews", params={"member_id": 1, "store_id": 1})

        assert response.status_code == 400
        assert response.json()["error"]["type"] == "ValueError"

    def test_get_review(self, test_api_client, member_ids):
        review_id = _submit(test_api_client, member_ids[0], content="Spicy", rating=4).json()["review_id"]

        response = test_api_client.get(f"/api/v1/reviews/{review_id}")

        assert response.status_code == 200
        assert response.json()["content"] == "Spicy"

    def test_get_missing_review(self, test_api_client):
        response = test_api_client.get("/api/v1/reviews/12345")

        assert response.status_code == 404
        assert response.json()["error"]["reason"] == "NotFound"


class TestDeleteReview:
    def test_delete_then_delete_again(self, test_api_client, session_factory, member_ids):
        review_id = _submit(test_api_client, member_ids[0]).json()["review_id"]

        first = test_api_client.delete(f"/api/v1/reviews/{review_id}")
        second = test_api_client.delete(f"/api/v1/reviews/{review_id}")

        assert first.status_code == 200
        assert first.json() == {"success": True, "review_id": review_id, "deleted": True}
        assert second.status_code == 200
        assert second.json()["deleted"] is False
        assert test_api_client.get(f"/api/v1/reviews/{review_id}").status_code == 404
        assert test_api_client.get("/api/v1/reviews", params={"member_id": member_ids[0]}).json() == []
        # Soft delete keeps the row
        assert _count(session_factory, Review) == 1

    def test_delete_missing_review(self, test_api_client):
        response = test_api_client.delete("/api/v1/reviews/777")

        assert response.status_code == 404
        assert response.json()["error"]["reason"] == "NotFound"

    def test_resubmit_after_delete(self, test_api_client, member_ids):
        review_id = _submit(test_api_client, member_ids[0]).json()["review_id"]
        test_api_client.delete(f"/api/v1/reviews/{review_id}")

        response = _submit(test_api_client, member_ids[0], content="Changed my mind")

        assert response.status_code == 201
        assert response.json()["review_id"] != review_id


class TestStores:
    def test_lookup_registered_store(self, test_api_client, member_ids):
        store_id = _submit(test_api_client, member_ids[0]).json()["store_id"]

        response = test_api_client.get(
            "/api/v1/stores",
            params={"name": "ILMI  dakgalbi", "address": "seoul, mapo-gu, wausan-ro 21"},
        )

        assert response.status_code == 200
        stores = response.json()
        assert [s["id"] for s in stores] == [store_id]
        assert stores[0]["city"] == "Seoul"

    def test_lookup_unknown_store(self, test_api_client):
        response = test_api_client.get("/api/v1/stores", params={"name": "Nowhere", "address": "Seoul 0"})

        assert response.status_code == 200
        assert response.json() == []


class TestHealth:
    def test_health(self, test_api_client):
        response = test_api_client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    def test_status_reports_database(self, test_api_client):
        response = test_api_client.get("/status")

        assert response.status_code == 200
        body = response.json()
        assert body["components"]["database"]["status"] == "healthy"
        assert "receipt_recognition" in body["components"]
