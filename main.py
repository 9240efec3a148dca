"""
EvoForage – Main Entry Point
============================

Runs the foraging simulation headless and writes snapshots, charts and a
CSV log.

Usage examples:
  python main.py                              # 20 generations, default world
  python main.py --gens 100 --seed 7          # reproducible longer run
  python main.py --generation_length 500      # shorter lifetimes
  python main.py --animals 60 --foods 80      # bigger world population
  python main.py --use_grid                   # grid-accelerated collisions
"""

import argparse
import os

import numpy as np

from simulation import Simulation
from visualizer import (ensure_dirs, save_world_snapshot,
                        save_evolution_chart, append_csv)
from config import (SAVE_DIR, SNAPSHOT_INTERVAL, NUM_ANIMALS, NUM_FOODS,
                    GENERATION_LENGTH, MUTATION_CHANCE, MUTATION_COEFF,
                    EAT_RADIUS)


# ──────────────────────────────────────────────────────────────────────────────
# CLI
# ──────────────────────────────────────────────────────────────────────────────

def parse_args(argv=None):
    p = argparse.ArgumentParser(description="EvoForage – neuro-evolving foragers")
    p.add_argument("--gens",       type=int,   default=20,
                   help="Number of generations to run")
    p.add_argument("--seed",       type=int,   default=None,
                   help="Random seed for reproducibility")
    p.add_argument("--generation_length", type=int, default=GENERATION_LENGTH,
                   help="Simulation ticks per generation")
    p.add_argument("--animals",    type=int,   default=NUM_ANIMALS,
                   help="Animals per generation")
    p.add_argument("--foods",      type=int,   default=NUM_FOODS,
                   help="Food pellets in the world")
    p.add_argument("--mutation_chance", type=float, default=MUTATION_CHANCE,
                   help="Per-gene mutation probability")
    p.add_argument("--mutation_coeff",  type=float, default=MUTATION_COEFF,
                   help="Maximum mutation magnitude")
    p.add_argument("--use_grid",   action="store_true",
                   help="Use the spatial grid for collision checks")
    p.add_argument("--outdir",     default=SAVE_DIR,
                   help="Output directory")
    p.add_argument("--snapshot_interval", type=int, default=SNAPSHOT_INTERVAL,
                   help="Save a world snapshot every N generations")
    return p.parse_args(argv)


# ──────────────────────────────────────────────────────────────────────────────
# Callbacks
# ──────────────────────────────────────────────────────────────────────────────

class SimCallbacks:
    """Bundles the per-generation callbacks used by the simulation."""

    def __init__(self, outdir: str, snapshot_interval: int, all_stats: list):
        self.outdir            = outdir
        self.snapshot_interval = snapshot_interval
        self.all_stats         = all_stats

    def on_generation(self, gen_idx, stats, world):
        self.all_stats.append(stats)

        # CSV log
        append_csv(stats, self.outdir)

        # Save snapshot of the freshly evolved generation
        if gen_idx % self.snapshot_interval == 0:
            path = save_world_snapshot(world, gen_idx + 1, base=self.outdir,
                                       eat_radius=EAT_RADIUS)
            print(f"  → Snapshot: {path}")

        # Chart update every 10 gens
        if gen_idx % 10 == 0 and gen_idx > 0:
            save_evolution_chart(self.all_stats, self.outdir)


# ──────────────────────────────────────────────────────────────────────────────
# Main
# ──────────────────────────────────────────────────────────────────────────────

def main(argv=None):
    args = parse_args(argv)
    outdir = args.outdir
    ensure_dirs(outdir)

    print("=" * 60)
    print("  EvoForage – Neuro-evolving Foragers")
    print("=" * 60)
    print(f"  Animals    : {args.animals}")
    print(f"  Food       : {args.foods}")
    print(f"  Generations: {args.gens}")
    print(f"  Ticks/gen  : {args.generation_length}")
    print(f"  Mutation   : chance {args.mutation_chance}, coeff {args.mutation_coeff}")
    print(f"  Collisions : {'grid' if args.use_grid else 'brute force'}")
    print(f"  Seed       : {args.seed}")
    print(f"  Output dir : {outdir}")
    print("=" * 60)

    rng = np.random.default_rng(args.seed)
    all_stats = []
    cb = SimCallbacks(outdir, args.snapshot_interval, all_stats)

    sim = Simulation.random(
        rng,
        num_animals       = args.animals,
        num_foods         = args.foods,
        generation_length = args.generation_length,
        mutation_chance   = args.mutation_chance,
        mutation_coeff    = args.mutation_coeff,
        use_grid          = args.use_grid,
        on_gen_callback   = cb.on_generation,
    )
    save_world_snapshot(sim.world, 0, base=outdir, eat_radius=EAT_RADIUS)

    for _ in range(args.gens):
        sim.train(rng)

    print("\n=== Simulation complete ===")

    # Final chart
    print("\nSaving final evolution chart …")
    chart_path = save_evolution_chart(all_stats, outdir, "evolution_final.png")
    print(f"  → {chart_path}")

    if all_stats:
        last = all_stats[-1]
        print(f"\nLast generation ({last['generation']}): "
              f"fitness min {last['min_fitness']:.1f} "
              f"avg {last['avg_fitness']:.2f} max {last['max_fitness']:.1f}")
    if sim.world.animals:
        # Offspring have not foraged yet, so any animal is as good a sample
        print("\nSample brain of the newly evolved generation:")
        print(sim.world.animals[0].brain.nn.summary())

    print("\nDone! All outputs saved to:", os.path.abspath(outdir))


if __name__ == "__main__":
    main()
