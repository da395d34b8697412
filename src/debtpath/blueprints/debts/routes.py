"""Debt routes: custom debt CRUD, APR overrides and strategy analysis."""

from __future__ import annotations

from typing import Any, Mapping

from flask import Response, current_app, jsonify, request

from ...errors import NotFoundError, ValidationError
from ...extensions import get_session_factory, get_workspace
from ...infra.repositories import SQLModelAprOverrideRepository, SQLModelCustomDebtRepository
from ...logging_config import get_logger
from ...models.custom_debt import CustomDebt
from ...services.debts import analyze_debts
from ...services.reports import payoff_chart_png_bytes
from . import bp
from .forms import AprOverrideForm, CustomDebtForm, parse_analysis_request

logger = get_logger("routes.debts")

_TRUTHY = {"1", "true", "yes", "on"}


def _user_id() -> int:
    raw = request.headers.get("X-User-Id")
    if raw is None or not raw.strip():
        return current_app.config["DEBTPATH_CONFIG"].DEFAULT_USER_ID
    try:
        return int(raw)
    except ValueError:
        raise ValidationError(
            "Invalid user id", errors={"X-User-Id": ["Expected an integer."]}
        ) from None


def _json_body() -> Mapping[str, Any]:
    data = request.get_json(silent=True)
    if not isinstance(data, Mapping):
        raise ValidationError("Invalid request body", errors={"request": ["Expected a JSON object."]})
    return data


def _custom_repo() -> SQLModelCustomDebtRepository:
    return SQLModelCustomDebtRepository(get_session_factory())


def _override_repo() -> SQLModelAprOverrideRepository:
    return SQLModelAprOverrideRepository(get_session_factory())


def _serialize_custom(row: CustomDebt) -> dict:
    return {
        "id": row.id,
        "debt_id": row.debt_key,
        "name": row.name,
        "debt_type": row.debt_type,
        "balance": row.balance,
        "apr": row.apr,
        "min_payment": row.min_payment,
        "created_at": row.created_at.isoformat() if row.created_at else None,
        "updated_at": row.updated_at.isoformat() if row.updated_at else None,
    }


def _get_custom_or_404(debt_id: int, user_id: int) -> CustomDebt:
    row = _custom_repo().get_by_id(debt_id, user_id=user_id)
    if row is None:
        raise NotFoundError("Custom debt")
    return row


def _include_schedule() -> bool:
    return request.args.get("schedule", "").strip().lower() in _TRUTHY


@bp.get("/")
def list_debts():
    """Merged registry view: linked and custom debts plus exclusions."""

    normalized = get_workspace().registry(user_id=_user_id())
    return jsonify({"success": True, **normalized.to_dict()})


@bp.post("/custom")
def create_custom_debt():
    """Validate and persist a user-entered debt."""

    user_id = _user_id()
    form = CustomDebtForm.from_payload(_json_body())
    if not form.validate():
        raise ValidationError("Invalid custom debt", errors=form.errors)

    row = _custom_repo().create(CustomDebt(user_id=user_id, **form.values()), user_id=user_id)
    logger.info("Custom debt created", extra={"user_id": user_id, "debt_id": row.id})
    return jsonify({"success": True, "debt": _serialize_custom(row)}), 201


@bp.get("/custom/<int:debt_id>")
def get_custom_debt(debt_id: int):
    row = _get_custom_or_404(debt_id, _user_id())
    return jsonify({"success": True, "debt": _serialize_custom(row)})


@bp.put("/custom/<int:debt_id>")
def update_custom_debt(debt_id: int):
    """Apply a (possibly partial) edit to a custom debt."""

    user_id = _user_id()
    row = _get_custom_or_404(debt_id, user_id)
    payload = _json_body()

    merged = {
        "name": row.name,
        "balance": row.balance,
        "apr": row.apr,
        "min_payment": row.min_payment,
        "debt_type": row.debt_type,
    }
    merged.update({k: v for k, v in payload.items() if k in merged})
    form = CustomDebtForm.from_payload(merged)
    if not form.validate():
        raise ValidationError("Invalid custom debt", errors=form.errors)

    for key, value in form.values().items():
        setattr(row, key, value)
    row = _custom_repo().update(row, user_id=user_id)
    logger.info("Custom debt updated", extra={"user_id": user_id, "debt_id": debt_id})
    return jsonify({"success": True, "debt": _serialize_custom(row)})


@bp.delete("/custom/<int:debt_id>")
def delete_custom_debt(debt_id: int):
    user_id = _user_id()
    if not _custom_repo().delete(debt_id, user_id=user_id):
        raise NotFoundError("Custom debt")
    logger.info("Custom debt deleted", extra={"user_id": user_id, "debt_id": debt_id})
    return jsonify({"success": True, "deleted": debt_id})


@bp.get("/linked/<account_id>/apr")
def get_apr_override(account_id: str):
    row = _override_repo().get(account_id, user_id=_user_id())
    if row is None:
        raise NotFoundError("APR override")
    return jsonify({"success": True, "account_id": row.account_id, "apr": row.apr})


@bp.put("/linked/<account_id>/apr")
def set_apr_override(account_id: str):
    """Store the user's APR for a linked account."""

    user_id = _user_id()
    form = AprOverrideForm(apr=_json_body().get("apr"))
    if not form.validate():
        raise ValidationError("Invalid APR override", errors=form.errors)

    row = _override_repo().upsert(account_id, float(form.apr), user_id=user_id)  # type: ignore[arg-type]
    return jsonify({"success": True, "account_id": row.account_id, "apr": row.apr})


@bp.delete("/linked/<account_id>/apr")
def clear_apr_override(account_id: str):
    if not _override_repo().delete(account_id, user_id=_user_id()):
        raise NotFoundError("APR override")
    return jsonify({"success": True, "account_id": account_id})


@bp.get("/analysis")
def stored_analysis():
    """Compare strategies over the user's stored debts."""

    form = parse_analysis_request(
        {
            "extra_payment": request.args.get("extra_payment"),
            "as_of_date": request.args.get("as_of_date"),
        },
        require_debts=False,
    )
    analysis = get_workspace().analyze(
        user_id=_user_id(),
        extra_payment=float(form.extra_payment),  # type: ignore[arg-type]
        as_of=form.parsed_as_of,
    )
    return jsonify({"success": True, "analysis": analysis.to_dict(include_schedule=_include_schedule())})


@bp.post("/analysis")
def payload_analysis():
    """Compare strategies over an explicit debts snapshot from the caller."""

    form = parse_analysis_request(request.get_json(silent=True))
    overrides = _override_repo().as_mapping(user_id=_user_id())
    analysis = analyze_debts(
        form.normalized(overrides=overrides),
        extra_payment=float(form.extra_payment),  # type: ignore[arg-type]
        as_of=form.parsed_as_of,
        horizon=current_app.config["DEBTPATH_CONFIG"].HORIZON_MONTHS,
    )
    return jsonify({"success": True, "analysis": analysis.to_dict(include_schedule=_include_schedule())})


@bp.get("/analysis/chart.png")
def analysis_chart():
    """Balance-over-time chart for the stored debts."""

    form = parse_analysis_request(
        {
            "extra_payment": request.args.get("extra_payment"),
            "as_of_date": request.args.get("as_of_date"),
        },
        require_debts=False,
    )
    analysis = get_workspace().analyze(
        user_id=_user_id(),
        extra_payment=float(form.extra_payment),  # type: ignore[arg-type]
        as_of=form.parsed_as_of,
    )
    return Response(payoff_chart_png_bytes(analysis), mimetype="image/png")
