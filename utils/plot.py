import numpy as np
import pandas as pd
import matplotlib.pyplot as plt


def pallete():
    """Colors from Okabe & Ito color-blind pallete. Ref: https://dovydas.com/blog/colorblind-friendly-diagrams"""
    return {
        "orange": "#E69F00",
        "sky-blue": "#56B4E9",
        "reddish-purple": "#CC79A7",
        "blue": "#0072B2",
        "vermilion": "#D55E00",
        "bluish-green": "#009E73",
        "yellow": "#F0E442",
    }


def figsize(width_pt=455.24411, fraction=1, subplots=(1, 1)):
    """Figure dimensions in inches for a document of `width_pt` points,
    golden ratio height.

    Reference: https://jwalton.info/Embed-Publication-Matplotlib-Latex
    """
    inches_per_pt = 1 / 72.27
    golden_ratio = (5**0.5 - 1) / 2

    fig_width_in = width_pt * fraction * inches_per_pt
    fig_height_in = fig_width_in * golden_ratio * (subplots[0] / subplots[1])
    return (fig_width_in, fig_height_in)


def plot_thrust_fits(
    runs: pd.DataFrame,
    points: pd.DataFrame,
    gross_thrust_column: str = "gross_thrust_momentum",
):
    """Gross thrust against towing drag, one panel per speed group, with the
    regression line and the self-propulsion point.

    Args:
        runs (pd.DataFrame): Reduced runs, a `RunDataSet`
        points (pd.DataFrame): Self-propulsion points of the same definition
        gross_thrust_column (str): Column of `runs` holding the gross thrust

    Returns:
        tuple: (figure, axes)
    """
    froude_numbers = sorted(points["froude_number"].unique())
    n = max(len(froude_numbers), 1)
    cols = min(n, 3)
    rows = int(np.ceil(n / cols))

    width, height = figsize(subplots=(rows, cols))
    fig, axes = plt.subplots(
        rows, cols, figsize=(width, height), squeeze=False, constrained_layout=True
    )
    colors = list(pallete().values())

    for ax, froude_number in zip(axes.flat, froude_numbers):
        group = runs[np.isclose(runs["froude_number"], froude_number)]
        point = points[np.isclose(points["froude_number"], froude_number)].iloc[0]

        ax.scatter(group["drag"], group[gross_thrust_column], color=colors[0], label="Runs")

        drag = np.linspace(
            min(group["drag"].min(), point["towing_force_at_zero_thrust"]),
            max(group["drag"].max(), point["towing_force"]),
            20,
        )
        ax.plot(drag, point["slope"] * drag + point["intercept"], color=colors[1], label="Fit")
        ax.plot(
            point["towing_force"],
            point["thrust_at_spp"],
            marker="o",
            color=colors[4],
            linestyle="",
            label="SPP",
        )

        ax.set_title(f"Fr = {froude_number:.2f}")
        ax.set_xlabel("Drag [N]")
        ax.set_ylabel("Gross thrust [N]")

    for ax in list(axes.flat)[len(froude_numbers):]:
        ax.set_visible(False)

    axes.flat[0].legend()
    return fig, axes


def plot_power_vs_speed(tables: dict, column: str = "delivered_power_mw"):
    """Full scale power [MW] against ship speed [kn], one line per table.

    Args:
        tables (dict): Label to a table with `speed_knots` and `column`
        column (str): Column to plot

    Returns:
        tuple: (figure, axis)
    """
    fig, ax = plt.subplots(figsize=figsize(), constrained_layout=True)

    for (label, table), color in zip(tables.items(), pallete().values()):
        ax.plot(table["speed_knots"], table[column], marker="o", color=color, label=label)

    ax.set_xlabel("Ship speed [kn]")
    ax.set_ylabel("Power [MW]")
    ax.grid(True)
    ax.legend()
    return fig, ax


def fig_save(fig, filename):
    fig.savefig(filename, bbox_inches="tight")
    plt.close(fig)
    return filename
