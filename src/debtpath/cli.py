"""Flask CLI commands for DebtPath."""

from __future__ import annotations

import json
from pathlib import Path

import click

DEMO_DEBTS = (
    {"name": "Store Card", "debt_type": "credit_card", "balance": 1200.0, "apr": 26.99, "min_payment": 35.0},
    {"name": "Visa", "debt_type": "credit_card", "balance": 4800.0, "apr": 21.49, "min_payment": 120.0},
    {"name": "Car Loan", "debt_type": "personal_loan", "balance": 9500.0, "apr": 7.9, "min_payment": 260.0},
    {"name": "Family Loan", "debt_type": "other", "balance": 2000.0, "apr": 0.0, "min_payment": 0.0},
)


def init_app(app) -> None:
    """Register CLI commands on the Flask app."""

    @app.cli.command("debtpath-analyze")
    @click.argument("payload_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
    @click.option("--extra-payment", type=float, default=None, help="Override the payload's extra payment")
    @click.option("--as-of", "as_of", default=None, help="Start date as YYYY-MM-DD")
    @click.option("--schedule", is_flag=True, default=False, help="Include month-by-month schedules")
    def debtpath_analyze(payload_file: Path, extra_payment: float | None, as_of: str | None, schedule: bool) -> None:
        """Compare payoff strategies for the debts in PAYLOAD_FILE."""

        from .blueprints.debts.forms import AnalysisRequestForm
        from .services.debts import analyze_debts

        try:
            payload = json.loads(payload_file.read_text(encoding="utf-8"))
        except json.JSONDecodeError as exc:
            raise click.ClickException(f"{payload_file} is not valid JSON: {exc}") from exc
        if isinstance(payload, list):
            payload = {"debts": payload}
        if isinstance(payload, dict):
            if extra_payment is not None:
                payload["extra_payment"] = extra_payment
            if as_of is not None:
                payload["as_of_date"] = as_of

        form = AnalysisRequestForm.from_payload(payload)
        if not form.validate():
            for key, messages in form.errors.items():
                for message in messages:
                    click.echo(f"{key}: {message}", err=True)
            raise click.ClickException("Invalid analysis request")

        analysis = analyze_debts(
            form.normalized(),
            extra_payment=float(form.extra_payment),  # type: ignore[arg-type]
            as_of=form.parsed_as_of,
            horizon=app.config["DEBTPATH_CONFIG"].HORIZON_MONTHS,
        )
        click.echo(json.dumps(analysis.to_dict(include_schedule=schedule), indent=2))

    @app.cli.command("debtpath-seed")
    @click.option("--user-id", type=int, default=None, help="Owner of the demo debts")
    def debtpath_seed(user_id: int | None) -> None:
        """Seed demo custom debts."""

        from .extensions import get_session_factory
        from .infra.repositories import SQLModelCustomDebtRepository
        from .models.custom_debt import CustomDebt

        owner = user_id if user_id is not None else app.config["DEBTPATH_CONFIG"].DEFAULT_USER_ID
        repo = SQLModelCustomDebtRepository(get_session_factory(app))
        if repo.list_all(user_id=owner):
            click.echo(f"User {owner} already has custom debts; nothing to seed.")
            return

        for values in DEMO_DEBTS:
            repo.create(CustomDebt(user_id=owner, **values), user_id=owner)
        click.echo(f"Seeded {len(DEMO_DEBTS)} demo debts for user {owner}.")
