"""
Visualizer for EvoForage.

Produces:
  1. World snapshots  – animals as heading triangles, food as green dots
  2. Evolution chart  – min / avg / max fitness + diversity over generations
  3. CSV log          – per-generation stats
"""

import os
import csv
import math
import matplotlib
matplotlib.use("Agg")          # non-interactive backend (no display needed)
import matplotlib.pyplot as plt
import matplotlib.patches as mpatches

from config import SAVE_DIR, LOG_CSV


# ──────────────────────────────────────────────────────────────────────────────
# Directory setup
# ──────────────────────────────────────────────────────────────────────────────

def ensure_dirs(base: str = SAVE_DIR):
    for sub in ("snapshots", "charts"):
        os.makedirs(os.path.join(base, sub), exist_ok=True)


# ──────────────────────────────────────────────────────────────────────────────
# World snapshot
# ──────────────────────────────────────────────────────────────────────────────

def _triangle(x: float, y: float, rotation: float, size: float) -> list:
    """Vertices of an animal marker whose tip points along its heading."""
    tip = (x - math.sin(rotation) * size * 1.5,
           y + math.cos(rotation) * size * 1.5)
    left = (x - math.sin(rotation + 2.0 / 3.0 * math.pi) * size,
            y + math.cos(rotation + 2.0 / 3.0 * math.pi) * size)
    right = (x - math.sin(rotation + 4.0 / 3.0 * math.pi) * size,
             y + math.cos(rotation + 4.0 / 3.0 * math.pi) * size)
    return [tip, left, right]


def save_world_snapshot(world, generation: int, age: int = 0,
                        base: str = SAVE_DIR, eat_radius: float = 0.01):
    """
    Render the current world on the unit square.
    Animals are drawn in their genome colour, food in green.
    """
    fig, ax = plt.subplots(figsize=(6, 6), dpi=100)
    ax.set_xlim(0, 1)
    ax.set_ylim(0, 1)
    ax.set_aspect("equal")
    ax.set_facecolor("#111111")
    fig.patch.set_facecolor("#111111")
    ax.set_title(f"Generation {generation}  (tick {age}, "
                 f"{len(world.animals)} animals, {len(world.foods)} food)",
                 color="white", fontsize=10)
    ax.tick_params(colors="white")
    for spine in ax.spines.values():
        spine.set_edgecolor("#444444")

    frame = world.snapshot()
    for food in frame["foods"]:
        ax.add_patch(mpatches.Circle(
            (food["x"], food["y"]), eat_radius / 2 + 0.003,
            color="#00E100", linewidth=0))

    for animal in frame["animals"]:
        r, g, b = animal["color"]
        ax.add_patch(mpatches.Polygon(
            _triangle(animal["x"], animal["y"], animal["rotation"], 0.01),
            closed=True, facecolor=(r / 255, g / 255, b / 255),
            edgecolor="white", linewidth=0.5))

    path = os.path.join(base, "snapshots", f"gen_{generation:06d}.png")
    plt.savefig(path, dpi=100, bbox_inches="tight", facecolor=fig.get_facecolor())
    plt.close(fig)
    return path


# ──────────────────────────────────────────────────────────────────────────────
# Evolution statistics chart
# ──────────────────────────────────────────────────────────────────────────────

def save_evolution_chart(stats: list, base: str = SAVE_DIR,
                         filename: str = "evolution.png"):
    """
    Plot min / avg / max fitness and genetic diversity across generations.
    """
    if not stats:
        return
    gens      = [s["generation"]  for s in stats]
    min_fit   = [s["min_fitness"] for s in stats]
    avg_fit   = [s["avg_fitness"] for s in stats]
    max_fit   = [s["max_fitness"] for s in stats]
    diversity = [s["diversity"]   for s in stats]

    fig, ax1 = plt.subplots(figsize=(12, 5), dpi=100)
    fig.patch.set_facecolor("#111111")
    ax1.set_facecolor("#111111")

    # Fitness band (left axis, food eaten)
    ax1.fill_between(gens, min_fit, max_fit, color="#44FF44", alpha=0.15,
                     zorder=1)
    ax1.plot(gens, avg_fit, color="#44FF44", linewidth=1.2,
             label="Avg fitness", zorder=3)
    ax1.plot(gens, max_fit, color="#FFDD44", linewidth=0.8,
             label="Max fitness", zorder=2)
    ax1.set_ylabel("Food eaten", color="white")
    ax1.set_ylim(0, max(max_fit) * 1.05 if max(max_fit) > 0 else 1)
    ax1.tick_params(axis="both", colors="white")
    ax1.set_xlabel("Generation", color="white")

    ax2 = ax1.twinx()
    ax2.set_facecolor("#111111")

    # Genetic diversity (purple, right axis 0–1)
    ax2.plot(gens, diversity, color="#CC44FF", linewidth=1.0,
             linestyle="--", label="Diversity", zorder=2)
    ax2.set_ylabel("Genetic diversity (0–1)", color="white")
    ax2.set_ylim(0, 1.05)
    ax2.tick_params(colors="white")

    for spine in ax1.spines.values():
        spine.set_edgecolor("#444444")

    # Combined legend
    lines1, labels1 = ax1.get_legend_handles_labels()
    lines2, labels2 = ax2.get_legend_handles_labels()
    ax1.legend(lines1 + lines2, labels1 + labels2,
               facecolor="#222222", labelcolor="white",
               loc="upper left", fontsize=8)

    ax1.set_title("Evolutionary Progress", color="white", fontsize=12)
    plt.tight_layout()
    path = os.path.join(base, "charts", filename)
    plt.savefig(path, dpi=100, bbox_inches="tight",
                facecolor=fig.get_facecolor())
    plt.close(fig)
    return path


# ──────────────────────────────────────────────────────────────────────────────
# CSV log
# ──────────────────────────────────────────────────────────────────────────────

def append_csv(stats: dict, base: str = SAVE_DIR):
    """Append one generation's stats to a CSV file."""
    if not LOG_CSV:
        return
    path = os.path.join(base, "evolution_log.csv")
    file_exists = os.path.isfile(path)
    with open(path, "a", newline="") as f:
        writer = csv.DictWriter(f, fieldnames=list(stats.keys()))
        if not file_exists:
            writer.writeheader()
        writer.writerow(stats)
