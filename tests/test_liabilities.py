"""Aggregator payload parsing and liability feed tests."""

from __future__ import annotations

import json
import logging

import pytest

from debtpath.errors import ValidationError
from debtpath.services.liabilities import (
    JSONFileLiabilityFeed,
    LinkedLiability,
    StaticLiabilityFeed,
    parse_liabilities,
)

PAYLOAD = {
    "credit": [
        {
            "account_id": "acc_visa",
            "name": "Visa Signature",
            "balance": 2150.0,
            "last_statement_balance": 1980.25,
            "minimum_payment_amount": 45.0,
            "aprs": [
                {"apr_type": "balance_transfer_apr", "apr_percentage": 0.0},
                {"apr_type": "purchase_apr", "apr_percentage": 23.99},
            ],
        },
        {"balance": 300.0},
    ],
    "student": [
        {
            "account_id": "acc_stu",
            "name": "Federal Direct",
            "principal_balance": 12000.0,
            "outstanding_interest_amount": 150.5,
            "interest_rate_percentage": 5.05,
            "minimum_payment_amount": 130.0,
        }
    ],
}


class TestParseLiabilities:
    def test_credit_and_student_entries(self):
        parsed = {item.account_id: item for item in parse_liabilities(PAYLOAD)}

        visa = parsed["acc_visa"]
        assert visa.debt_type == "credit_card"
        assert visa.statement_balance == 1980.25
        assert visa.apr == 23.99
        assert visa.minimum_payment == 45.0

        loan = parsed["acc_stu"]
        assert loan.debt_type == "student_loan"
        assert loan.balance == pytest.approx(12150.5)
        assert loan.apr == 5.05

    def test_missing_fields_get_defaults(self):
        parsed = parse_liabilities(PAYLOAD)
        bare = parsed[1]

        assert bare.account_id == "linked_credit_1"
        assert bare.name == "Credit Card"
        assert bare.apr is None
        assert bare.statement_balance is None

    def test_effective_apr_takes_precedence(self):
        parsed = parse_liabilities(
            {
                "credit": [
                    {
                        "account_id": "a",
                        "balance": 100.0,
                        "effective_apr": 18.5,
                        "aprs": [{"apr_type": "purchase_apr", "apr_percentage": 25.0}],
                    }
                ]
            }
        )
        assert parsed[0].apr == 18.5

    def test_empty_payload(self):
        assert parse_liabilities(None) == []
        assert parse_liabilities({}) == []

    def test_malformed_entries_raise_itemized_errors(self):
        with pytest.raises(ValidationError) as exc_info:
            parse_liabilities({"credit": [{"balance": "lots"}], "student": "nope"})

        errors = exc_info.value.errors
        assert "liabilities.credit[0]" in errors
        assert "liabilities.student" in errors

    def test_non_mapping_payload_rejected(self):
        with pytest.raises(ValidationError):
            parse_liabilities(["not", "a", "mapping"])  # type: ignore[arg-type]


class TestFeeds:
    def test_static_feed_returns_copies(self):
        liability = LinkedLiability(account_id="a", name="A", debt_type="credit_card", balance=10.0)
        feed = StaticLiabilityFeed([liability])

        first = feed.fetch(user_id=1)
        first.clear()

        assert feed.fetch(user_id=2) == [liability]

    def test_json_file_single_payload(self, tmp_path):
        path = tmp_path / "liabilities.json"
        path.write_text(json.dumps(PAYLOAD), encoding="utf-8")

        fetched = JSONFileLiabilityFeed(path).fetch(user_id=1)

        assert [item.account_id for item in fetched] == ["acc_visa", "linked_credit_1", "acc_stu"]

    def test_json_file_keyed_by_user(self, tmp_path):
        path = tmp_path / "liabilities.json"
        path.write_text(json.dumps({"7": {"student": PAYLOAD["student"]}}), encoding="utf-8")
        feed = JSONFileLiabilityFeed(path)

        assert [item.account_id for item in feed.fetch(user_id=7)] == ["acc_stu"]
        assert feed.fetch(user_id=8) == []

    def test_json_file_with_top_level_list_is_ignored(self, tmp_path, caplog):
        path = tmp_path / "liabilities.json"
        path.write_text(json.dumps([PAYLOAD]), encoding="utf-8")

        with caplog.at_level(logging.WARNING, logger="debtpath.liabilities"):
            fetched = JSONFileLiabilityFeed(path).fetch(user_id=1)

        assert fetched == []
        assert any("not a JSON object" in r.getMessage() for r in caplog.records)

    def test_missing_file_means_no_linked_accounts(self, tmp_path):
        assert JSONFileLiabilityFeed(tmp_path / "absent.json").fetch(user_id=1) == []
