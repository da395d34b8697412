"""HTTP tests for the debts blueprint."""

from __future__ import annotations


def _create(client, **overrides):
    payload = {"name": "Dentist", "balance": 800, "apr": 0, "debt_type": "other"}
    payload.update(overrides)
    return client.post("/debts/custom", json=payload)


class TestRegistry:
    def test_lists_linked_debts_with_resolved_apr(self, client):
        resp = client.get("/debts/")

        assert resp.status_code == 200
        body = resp.get_json()
        assert body["success"] is True
        linked = body["debts"][0]
        assert linked["id"] == "acc_visa"
        assert linked["balance"] == 2000.0
        assert linked["apr"] == 22.0
        assert linked["apr_source"] == "default"
        assert linked["is_custom"] is False

    def test_custom_debts_follow_linked(self, client):
        _create(client)

        ids = [d["id"] for d in client.get("/debts/").get_json()["debts"]]

        assert ids[0] == "acc_visa"
        assert ids[1].startswith("custom_")

    def test_invalid_user_header(self, client):
        resp = client.get("/debts/", headers={"X-User-Id": "abc"})

        assert resp.status_code == 400
        assert resp.get_json()["code"] == "VALIDATION_ERROR"


class TestCustomDebtCrud:
    def test_create_returns_201(self, client):
        resp = _create(client)

        assert resp.status_code == 201
        debt = resp.get_json()["debt"]
        assert debt["name"] == "Dentist"
        assert debt["debt_id"] == f"custom_{debt['id']}"

    def test_create_validation_errors(self, client):
        resp = client.post("/debts/custom", json={"name": "", "balance": -1})

        assert resp.status_code == 400
        body = resp.get_json()
        assert body["success"] is False
        assert set(body["details"]) >= {"name", "balance"}

    def test_create_requires_json_object(self, client):
        resp = client.post("/debts/custom", data="nope", content_type="text/plain")
        assert resp.status_code == 400

    def test_partial_update(self, client):
        debt_id = _create(client).get_json()["debt"]["id"]

        resp = client.put(f"/debts/custom/{debt_id}", json={"balance": 600})

        assert resp.status_code == 200
        debt = resp.get_json()["debt"]
        assert debt["balance"] == 600.0
        assert debt["name"] == "Dentist"

    def test_update_rejects_bad_values(self, client):
        debt_id = _create(client).get_json()["debt"]["id"]

        resp = client.put(f"/debts/custom/{debt_id}", json={"apr": 250})

        assert resp.status_code == 400
        assert "apr" in resp.get_json()["details"]

    def test_delete_then_404(self, client):
        debt_id = _create(client).get_json()["debt"]["id"]

        assert client.delete(f"/debts/custom/{debt_id}").status_code == 200
        resp = client.get(f"/debts/custom/{debt_id}")
        assert resp.status_code == 404
        assert resp.get_json()["code"] == "NOT_FOUND"
        assert client.delete(f"/debts/custom/{debt_id}").status_code == 404

    def test_debts_are_scoped_to_user(self, client):
        debt_id = _create(client, name="Mine").get_json()["debt"]["id"]

        resp = client.get(f"/debts/custom/{debt_id}", headers={"X-User-Id": "99"})

        assert resp.status_code == 404


class TestAprOverrides:
    def test_override_applies_to_registry(self, client):
        resp = client.put("/debts/linked/acc_visa/apr", json={"apr": 15})
        assert resp.status_code == 200

        linked = client.get("/debts/").get_json()["debts"][0]
        assert linked["apr"] == 15.0
        assert linked["apr_source"] == "override"

    def test_get_override(self, client):
        assert client.get("/debts/linked/acc_visa/apr").status_code == 404

        client.put("/debts/linked/acc_visa/apr", json={"apr": 15})
        resp = client.get("/debts/linked/acc_visa/apr")

        assert resp.status_code == 200
        assert resp.get_json() == {"success": True, "account_id": "acc_visa", "apr": 15.0}
        other_user = client.get("/debts/linked/acc_visa/apr", headers={"X-User-Id": "2"})
        assert other_user.status_code == 404

    def test_override_validation(self, client):
        resp = client.put("/debts/linked/acc_visa/apr", json={"apr": "high"})
        assert resp.status_code == 400

    def test_clear_override(self, client):
        client.put("/debts/linked/acc_visa/apr", json={"apr": 15})

        assert client.delete("/debts/linked/acc_visa/apr").status_code == 200
        assert client.delete("/debts/linked/acc_visa/apr").status_code == 404
        assert client.get("/debts/").get_json()["debts"][0]["apr_source"] == "default"


class TestAnalysis:
    def test_stored_analysis(self, client):
        _create(client)

        resp = client.get("/debts/analysis?extra_payment=100&as_of_date=2024-01-01")

        assert resp.status_code == 200
        analysis = resp.get_json()["analysis"]
        assert analysis["as_of_date"] == "2024-01-01"
        assert analysis["debt_count"] == 2
        assert set(analysis["strategies"]) == {"status_quo", "snowball", "avalanche"}
        assert analysis["savings"]["interest_saved_avalanche"] >= 0
        assert "schedule" not in analysis["strategies"]["avalanche"]

    def test_schedule_flag(self, client):
        resp = client.get("/debts/analysis?extra_payment=50&schedule=true")

        schedule = resp.get_json()["analysis"]["strategies"]["snowball"]["schedule"]
        assert schedule[0]["month"] == 1

    def test_stored_analysis_rejects_negative_extra(self, client):
        resp = client.get("/debts/analysis?extra_payment=-5")

        assert resp.status_code == 400
        assert "extra_payment" in resp.get_json()["details"]

    def test_payload_analysis(self, client):
        resp = client.post(
            "/debts/analysis",
            json={
                "extra_payment": 100,
                "as_of_date": "2024-01-01",
                "debts": [
                    {"id": "A", "balance": 1000, "apr": 20, "min_payment": 50},
                    {"id": "B", "balance": 2000, "apr": 10, "min_payment": 60},
                    {"id": "bad", "balance": -5, "apr": 10},
                ],
            },
        )

        assert resp.status_code == 200
        analysis = resp.get_json()["analysis"]
        assert analysis["debt_count"] == 2
        assert analysis["excluded"][0]["id"] == "bad"
        avalanche = analysis["strategies"]["avalanche"]
        assert avalanche["converged"] is True
        assert avalanche["retirement_months"]["A"] < avalanche["retirement_months"]["B"]

    def test_payload_analysis_reports_non_convergence(self, client):
        resp = client.post(
            "/debts/analysis",
            json={"debts": [{"balance": 1000, "apr": 30, "min_payment": 10}]},
        )

        status_quo = resp.get_json()["analysis"]["strategies"]["status_quo"]
        assert status_quo["converged"] is False
        assert status_quo["payoff_month"] is None

    def test_payload_analysis_validation(self, client):
        resp = client.post("/debts/analysis", json={"extra_payment": 10})

        assert resp.status_code == 400
        assert resp.get_json()["details"]["debts"]

    def test_payload_analysis_rejects_overflowing_balance(self, client):
        resp = client.post(
            "/debts/analysis",
            json={
                "extra_payment": 0,
                "debts": [{"id": "x", "balance": "1e400", "apr": 10, "min_payment": 50}],
            },
        )

        assert resp.status_code == 400
        assert resp.get_json()["details"]["debts[0].balance"] == ["Enter a valid number."]

    def test_payload_analysis_rejects_non_object(self, client):
        resp = client.post("/debts/analysis", json=[1, 2])

        assert resp.status_code == 400
        assert "request" in resp.get_json()["details"]

    def test_chart_png(self, client):
        resp = client.get("/debts/analysis/chart.png?extra_payment=100")

        assert resp.status_code == 200
        assert resp.mimetype == "image/png"
        assert resp.data.startswith(b"\x89PNG")
