"""Entry point for the headless shelter simulation."""

from __future__ import annotations

import argparse
import json
import os
import time


def main(argv=None) -> None:
    parser = argparse.ArgumentParser(
        description="Shelter Survival Simulation",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    parser.add_argument("--days", type=int, default=30, help="Number of days to simulate")
    parser.add_argument("--tenants", type=int, default=2, help="Starting tenants")
    parser.add_argument("--rooms", type=int, default=4, help="Rooms in the building")
    parser.add_argument("--seed", type=int, default=42, help="Random seed for reproducibility")
    parser.add_argument("--verbosity", type=int, default=0, choices=[0, 1, 2, 3], help="Log verbosity level")
    parser.add_argument("--output-dir", type=str, default="results", help="Output directory for results")
    parser.add_argument("--events", type=str, default=None, help="JSON file with event definitions")
    parser.add_argument("--random-choices", action="store_true", help="Resolve events with random choices")
    parser.add_argument("--no-autopilot", action="store_true", help="Skip the automatic landlord routine")
    parser.add_argument("--no-plots", action="store_true", help="Skip the matplotlib report")
    parser.add_argument("--log-file", type=str, default=None, help="Path to log file")

    args = parser.parse_args(argv)

    # Import here to allow --help without loading everything
    from shelter_sim.simulation.engine import SimulationEngine, first_choice, random_choice
    from shelter_sim.viz.logger import SimLogger

    print(f"=== Shelter Survival Simulation ===")
    print(f"Tenants: {args.tenants} | Rooms: {args.rooms} | Days: {args.days} | Seed: {args.seed}")
    print(f"Output: {args.output_dir}")
    print()

    event_config = None
    if args.events:
        with open(args.events, encoding="utf-8") as f:
            event_config = json.load(f)

    logger = SimLogger(
        verbosity=args.verbosity,
        log_file=args.log_file or os.path.join(args.output_dir, "simulation.log"),
        stdout=(args.verbosity > 0),
    )
    engine = SimulationEngine(
        seed=args.seed,
        tenants=args.tenants,
        rooms=args.rooms,
        event_config=event_config,
        logger=logger,
        choice_policy=random_choice if args.random_choices else first_choice,
        autopilot=not args.no_autopilot,
    )
    if engine.events.catalog.errors:
        print(f"Skipped {len(engine.events.catalog.errors)} invalid event definitions")

    engine.initialize()
    print(f"  Events loaded: {len(engine.events.catalog)}")
    print(f"  Tenants: {', '.join(f'{t.name} ({t.tenant_type.value})' for t in engine.registry.tenants)}")
    print()

    print(f"Running simulation for {args.days} days...")
    t0 = time.time()
    try:
        engine.run(args.days)
    except KeyboardInterrupt:
        print("\nSimulation interrupted by user")
    elapsed = time.time() - t0
    print(f"\nSimulation complete: {engine.clock.day - 1} days in {elapsed:.2f}s")

    # Export results
    os.makedirs(args.output_dir, exist_ok=True)
    csv_path = os.path.join(args.output_dir, "metrics.csv")
    engine.metrics.export_csv(csv_path)
    print(f"Metrics exported to {csv_path}")

    if not args.no_plots:
        from shelter_sim.viz.dashboard import Dashboard
        paths = Dashboard.comprehensive_report(engine.metrics, args.output_dir)
        print(f"Reports saved: {len(paths)} charts")

    print()
    print(engine.metrics.summary_report())

    engine.logger.export_json(os.path.join(args.output_dir, "events.json"))
    engine.logger.close()
    print(f"\nAll results saved to {args.output_dir}/")


if __name__ == "__main__":
    main()
