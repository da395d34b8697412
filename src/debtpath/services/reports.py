"""Payoff comparison charts."""

from __future__ import annotations

from io import BytesIO
from pathlib import Path
from typing import Protocol

import matplotlib

matplotlib.use("Agg")
import matplotlib.pyplot as plt
import matplotlib.ticker as mticker
from matplotlib.figure import Figure

from .comparator import Analysis
from .simulator import StrategyResult
from .strategies import STRATEGY_LABELS, Strategy

STRATEGY_COLORS = {
    Strategy.STATUS_QUO: "#9CA3AF",
    Strategy.SNOWBALL: "#4F46E5",
    Strategy.AVALANCHE: "#16A34A",
}


class ReportRenderer(Protocol):
    """Protocol describing renderer behavior."""

    def render(self, figure: Figure, *, output_path: Path) -> None:  # pragma: no cover - interface
        ...


def balance_series(result: StrategyResult, *, starting_balance: float) -> list[float]:
    """Total remaining balance at month 0 and after every simulated month."""

    return [starting_balance] + [record.closing_total for record in result.schedule]


def build_payoff_chart(analysis: Analysis) -> Figure:
    """Plot total remaining balance per month for each strategy."""

    fig, ax = plt.subplots(figsize=(10, 6))

    if analysis.total_debt > 0:
        for strategy, result in analysis.strategies.items():
            totals = balance_series(result, starting_balance=analysis.total_debt)
            label = STRATEGY_LABELS[strategy]
            if result.converged:
                label = f"{label} ({result.payoff_month} mo)"
            else:
                label = f"{label} (not paid off)"
            ax.plot(
                range(len(totals)),
                totals,
                color=STRATEGY_COLORS[strategy],
                linewidth=2.0,
                linestyle="--" if strategy is Strategy.STATUS_QUO else "-",
                label=label,
            )

        ax.grid(True, linestyle="--", alpha=0.3)
        ax.set_axisbelow(True)
        ax.set_title("Debt Payoff Projection", fontsize=14, fontweight="bold", pad=15)
        ax.set_ylabel("Remaining Balance ($)", fontsize=11)
        ax.set_xlabel("Month", fontsize=11)
        ax.yaxis.set_major_formatter(mticker.FuncFormatter(lambda x, p: f"${x:,.0f}"))
        ax.legend(loc="upper right", fontsize=9, framealpha=0.9)

        savings = analysis.savings
        textstr = (
            f"Starting Debt: ${analysis.total_debt:,.0f}\n"
            f"Extra / month: ${analysis.extra_payment:,.0f}\n"
            f"Avalanche saves: ${savings.interest_saved_avalanche:,.0f}"
        )
        props = dict(boxstyle="round", facecolor="lavender", alpha=0.8)
        ax.text(0.02, 0.02, textstr, transform=ax.transAxes, fontsize=9,
                verticalalignment="bottom", bbox=props)
    else:
        ax.text(0.5, 0.5, "No active debts", ha="center", va="center", fontsize=14, color="#666")
        ax.axis("off")

    plt.tight_layout()
    return fig


def payoff_chart_png_bytes(analysis: Analysis) -> bytes:
    """Render the payoff chart to PNG bytes."""

    fig = build_payoff_chart(analysis)
    buffer = BytesIO()
    try:
        fig.savefig(buffer, format="png", bbox_inches="tight", dpi=100)
    finally:
        plt.close(fig)
    return buffer.getvalue()


def export_payoff_png(
    analysis: Analysis,
    *,
    output_path: Path,
    renderer: ReportRenderer | None = None,
) -> Path:
    """Render the payoff chart to PNG and return the path."""

    fig = build_payoff_chart(analysis)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    try:
        if renderer is not None:
            renderer.render(fig, output_path=output_path)
        else:
            fig.savefig(output_path, bbox_inches="tight", dpi=120)
    finally:
        plt.close(fig)
    return output_path


__all__ = [
    "ReportRenderer",
    "balance_series",
    "build_payoff_chart",
    "export_payoff_png",
    "payoff_chart_png_bytes",
]
