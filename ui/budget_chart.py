from matplotlib.figure import Figure

from models.budget import Budget
from utils.constants import BUDGET_CHART_COLORS


def _style_ax(ax, fig):
    bg = "#e4e4e4"
    fg = "#444444"
    fig.patch.set_facecolor(bg)
    ax.set_facecolor(bg)
    ax.tick_params(colors=fg, labelsize=8)
    for spine in ax.spines.values():
        spine.set_edgecolor(fg)


def build_funding_chart(budgets: list[Budget]) -> Figure:
    """Grouped bars of target, funded and spent per budget."""
    fig = Figure(figsize=(8, 3.5), dpi=100, tight_layout=True)
    ax = fig.add_subplot(111)
    _style_ax(ax, fig)

    if not budgets:
        ax.text(0.5, 0.5, "No budgets", ha="center", va="center",
                transform=ax.transAxes, color="gray")
        return fig

    labels = [b.name for b in budgets]
    targets = [b.amount for b in budgets]
    funded = [b.funded_amount for b in budgets]
    spent = [b.spent_amount for b in budgets]

    x = list(range(len(labels)))
    w = 0.27
    ax.bar([i - w for i in x], targets, w, color=BUDGET_CHART_COLORS["target"], label="Target")
    ax.bar(x, funded, w, color=BUDGET_CHART_COLORS["funded"], label="Funded")
    ax.bar([i + w for i in x], spent, w, color=BUDGET_CHART_COLORS["spent"], label="Spent")
    ax.set_xticks(x)
    ax.set_xticklabels(labels, rotation=45 if len(labels) > 8 else 0, ha="right")
    ax.yaxis.set_major_formatter(
        lambda v, _: f"{v/1000:.0f}k" if abs(v) >= 1000 else f"{v:.0f}"
    )
    ax.legend(fontsize=8)
    return fig


def save_funding_chart(budgets: list[Budget], path: str) -> str:
    build_funding_chart(budgets).savefig(path)
    return path
