"""
Tests for the manufacturing item endpoints.
"""
import pytest

from labops.models.milling_form import milling_form_id_for
from tests.factories import (
    create_test_item,
    create_tie_bar_item,
    inspection_completion,
    item_payload,
    printing_completion,
)

BASE = "/api/v1/manufacturing-items"


class TestCreateAndRead:
    """Tests for POST/GET /api/v1/manufacturing-items"""

    @pytest.mark.api
    def test_create_sets_initial_status(self, client, user_headers):
        response = client.post(BASE, json=item_payload(manufacturing_method="milling"), headers=user_headers)

        assert response.status_code == 201
        data = response.json()
        assert data["status"] == "pending-milling"
        assert data["manufacturing_method"] == "milling"

    @pytest.mark.api
    def test_create_rejects_unknown_method(self, client, user_headers):
        response = client.post(BASE, json=item_payload(manufacturing_method="casting"), headers=user_headers)
        assert response.status_code == 422
        assert response.json()["error"] == "VALIDATION_ERROR"

    @pytest.mark.api
    def test_requires_identity(self, client):
        response = client.get(BASE)
        assert response.status_code == 401
        assert response.json()["error"] == "AUTHENTICATION_ERROR"

    @pytest.mark.api
    def test_get_not_found(self, client, user_headers):
        response = client.get(f"{BASE}/missing", headers=user_headers)
        assert response.status_code == 404
        assert response.json()["error"] == "NOT_FOUND"

    @pytest.mark.api
    def test_delete(self, client, db, user_headers):
        item = create_test_item(db)
        db.commit()

        response = client.delete(f"{BASE}/{item.id}", headers=user_headers)
        assert response.status_code == 204
        assert client.get(f"{BASE}/{item.id}", headers=user_headers).status_code == 404
        assert client.delete(f"{BASE}/{item.id}", headers=user_headers).status_code == 404

    @pytest.mark.api
    def test_delete_refused_once_milling_form_exists(self, client, db, user_headers):
        item = create_test_item(db, manufacturing_method="milling", status="milling",
                                milling_location="in-house")
        db.commit()
        client.post(f"{BASE}/{item.id}/milling-form/repair", headers=user_headers)

        response = client.delete(f"{BASE}/{item.id}", headers=user_headers)
        assert response.status_code == 422
        assert response.json()["error"] == "BUSINESS_RULE_ERROR"
        assert client.get(f"{BASE}/{item.id}", headers=user_headers).status_code == 200

    @pytest.mark.api
    def test_transitions(self, client, db, user_headers):
        item = create_tie_bar_item(db)
        db.commit()

        response = client.get(f"{BASE}/{item.id}/transitions", headers=user_headers)

        assert response.status_code == 200
        data = response.json()
        assert data["is_terminal"] is False
        assert [t["trigger"] for t in data["transitions"]] == ["start-milling"]
        assert data["transitions"][0]["label"] == "Start Milling"
        assert data["transitions"][0]["target_status"] == "milling"


class TestListView:
    """Tests for the dashboard list, counts and filter options"""

    @pytest.mark.api
    def test_filter_and_sort(self, client, db, user_headers):
        create_test_item(db, patient_name="Zed Moss")
        create_test_item(db, patient_name="amy Chu", manufacturing_method="milling",
                         status="milling", milling_location="in-house")
        create_test_item(db, patient_name="Bea Ray", manufacturing_method="milling",
                         status="milling", milling_location="haus-milling")
        db.commit()

        response = client.get(
            BASE,
            params={"status": ["milling"], "sort_by": "patient_name", "direction": "asc"},
            headers=user_headers,
        )

        assert response.status_code == 200
        assert [i["patient_name"] for i in response.json()] == ["amy Chu", "Bea Ray"]

        response = client.get(
            BASE,
            params={"milling_location": ["in-house", "haus-milling"], "search": "BEA"},
            headers=user_headers,
        )
        assert [i["patient_name"] for i in response.json()] == ["Bea Ray"]

    @pytest.mark.api
    def test_bucket_tab(self, client, db, user_headers):
        create_test_item(db)
        create_test_item(db, status="completed")
        db.commit()

        response = client.get(BASE, params={"bucket": "completed"}, headers=user_headers)
        assert [i["status"] for i in response.json()] == ["completed"]

    @pytest.mark.api
    def test_counts(self, client, db, user_headers):
        create_test_item(db)
        create_test_item(db, manufacturing_method="milling")
        create_test_item(db, status="completed")
        db.commit()

        response = client.get(f"{BASE}/counts", headers=user_headers)

        assert response.status_code == 200
        counts = response.json()["counts"]
        assert counts["new-script"] == 2
        assert counts["incomplete"] == 2
        assert counts["completed"] == 1
        assert counts["all"] == 3
        assert counts["in-transit"] == 0

    @pytest.mark.api
    def test_filter_options(self, client, db, user_headers):
        create_test_item(db, shade="A2")
        create_test_item(db, shade="B1")
        create_test_item(db, shade="A2")
        db.commit()

        response = client.get(f"{BASE}/filter-options", headers=user_headers)
        assert response.json()["options"]["shade"] == {"A2": 2, "B1": 1}


class TestLifecycleEndpoints:
    """Tests for the trigger endpoints"""

    @pytest.mark.api
    def test_printing_path(self, client, db, user_headers):
        item = create_test_item(db)
        db.commit()

        response = client.post(f"{BASE}/{item.id}/start-printing", headers=user_headers)
        assert response.status_code == 200
        assert response.json()["status"] == "printing"

        response = client.post(
            f"{BASE}/{item.id}/complete-printing", json=printing_completion(), headers=user_headers
        )
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "completed"
        assert data["printing_completed_by_name"] == "Dana Lopez"

        report = client.get(f"{BASE}/{item.id}/report", headers=user_headers).json()
        assert report["inspection_applicable"] is False
        assert report["inspection_label"] == "Not applicable"

    @pytest.mark.api
    def test_invalid_transition(self, client, db, user_headers):
        item = create_test_item(db)
        db.commit()

        response = client.post(f"{BASE}/{item.id}/start-inspection", headers=user_headers)

        assert response.status_code == 400
        body = response.json()
        assert body["error"] == "INVALID_TRANSITION"
        assert body["details"]["allowed_triggers"] == ["start-printing"]
        assert "timestamp" in body

    @pytest.mark.api
    def test_missing_cementation(self, client, db, user_headers):
        item = create_tie_bar_item(db)
        db.commit()

        response = client.post(
            f"{BASE}/{item.id}/start-milling", json={"milling_location": "in-house"}, headers=user_headers
        )

        assert response.status_code == 400
        body = response.json()
        assert body["error"] == "MISSING_REQUIRED_FIELD"
        assert body["details"]["field"] == "cementation"

    @pytest.mark.api
    def test_milling_path(self, client, db, user_headers):
        item = create_tie_bar_item(db)
        db.commit()

        response = client.post(
            f"{BASE}/{item.id}/start-milling",
            json={"milling_location": "in-house", "cementation": "yes", "gingiva_color": "light"},
            headers=user_headers,
        )
        assert response.status_code == 200
        assert response.json()["status"] == "milling"

        form = client.get(f"{BASE}/{item.id}/milling-form", headers=user_headers).json()
        assert form["id"] == milling_form_id_for(item.id)
        assert form["cementation"] == "yes"

        response = client.post(f"{BASE}/{item.id}/ship", json={"tracking_number": ""}, headers=user_headers)
        assert response.status_code == 400
        assert response.json()["details"]["field"] == "tracking_number"

        response = client.post(f"{BASE}/{item.id}/ship", json={"tracking_number": "1Z999"}, headers=user_headers)
        assert response.json()["status"] == "in-transit"

        response = client.post(f"{BASE}/{item.id}/start-inspection", headers=user_headers)
        assert response.json()["status"] == "inspection"

        response = client.post(
            f"{BASE}/{item.id}/complete-inspection",
            json=inspection_completion("pass"),
            headers=user_headers,
        )
        assert response.status_code == 200
        assert response.json()["inspection_status"] == "approved"

        report = client.get(f"{BASE}/{item.id}/report", headers=user_headers).json()
        assert report["inspection_label"] == "Approved"
        assert report["milling_form"]["milling_location"] == "in-house"

    @pytest.mark.api
    def test_milling_form_missing(self, client, db, user_headers):
        item = create_test_item(db, manufacturing_method="milling")
        db.commit()

        response = client.get(f"{BASE}/{item.id}/milling-form", headers=user_headers)
        assert response.status_code == 404

    @pytest.mark.api
    def test_milling_form_repair(self, client, db, user_headers):
        item = create_test_item(db, manufacturing_method="milling", status="milling",
                                milling_location="evolution-dental-lab")
        db.commit()

        response = client.post(f"{BASE}/{item.id}/milling-form/repair", headers=user_headers)

        assert response.status_code == 200
        assert response.json()["milling_location"] == "evolution-dental-lab"
        assert client.get(f"{BASE}/{item.id}/milling-form", headers=user_headers).status_code == 200
