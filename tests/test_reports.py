"""Payoff chart rendering tests."""

from __future__ import annotations

from datetime import date
from pathlib import Path

from debtpath.services.comparator import SimulationRequest, compare_strategies
from debtpath.services.reports import balance_series, export_payoff_png, payoff_chart_png_bytes
from debtpath.services.strategies import Strategy


def _analysis(debts, extra=100.0):
    return compare_strategies(
        SimulationRequest(extra_payment=extra, debts=tuple(debts), as_of_date=date(2024, 1, 1))
    )


def test_balance_series_starts_at_total(debt_factory):
    analysis = _analysis([debt_factory("a", balance=1000.0, apr=0.0, min_payment=100.0)], extra=0.0)

    series = balance_series(analysis.strategies[Strategy.STATUS_QUO], starting_balance=1000.0)

    assert series[0] == 1000.0
    assert series[1] == 900.0
    assert series[-1] == 0.0
    assert len(series) == 11


def test_png_bytes(debt_factory):
    analysis = _analysis(
        [
            debt_factory("a", balance=1000.0, apr=20.0, min_payment=50.0),
            debt_factory("b", balance=2000.0, apr=10.0, min_payment=60.0),
        ]
    )

    assert payoff_chart_png_bytes(analysis).startswith(b"\x89PNG")


def test_png_bytes_without_debts():
    assert payoff_chart_png_bytes(_analysis([])).startswith(b"\x89PNG")


def test_export_writes_file(debt_factory, tmp_path: Path):
    analysis = _analysis([debt_factory("a", balance=500.0, apr=15.0, min_payment=40.0)])

    path = export_payoff_png(analysis, output_path=tmp_path / "charts" / "payoff.png")

    assert path.exists()
    assert path.read_bytes().startswith(b"\x89PNG")


def test_export_uses_renderer(debt_factory, tmp_path: Path):
    calls = []

    class RecordingRenderer:
        def render(self, figure, *, output_path):
            calls.append((figure, output_path))

    analysis = _analysis([debt_factory("a", balance=500.0, apr=15.0, min_payment=40.0)])
    target = tmp_path / "payoff.png"

    export_payoff_png(analysis, output_path=target, renderer=RecordingRenderer())

    assert len(calls) == 1
    assert calls[0][1] == target
