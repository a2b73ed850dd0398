import sys
import json
import argparse
import logging

from creature_refiner.errors import CreatureRefinerError
from creature_refiner.orchestrator import CreatureRefinerOrchestrator
from creature_refiner.utils.config_loader import (
    load_environment,
    configure_logging,
    load_refiner_config,
    build_refinement_config,
    get_openai_config,
)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Creature Refiner - Iterative Folklore Creature Generation"
    )
    parser.add_argument("topic", type=str, help="Cultural origin of the creature, e.g. 'Japan'")
    parser.add_argument("--target-score", type=float, default=None, help="Score that ends the run successfully")
    parser.add_argument("--iterations", type=int, default=None, help="Max refinement rounds")
    parser.add_argument("--no-logging", action="store_true", help="Do not keep a session log")
    parser.add_argument("--no-persistence", action="store_true", help="Do not write sessions or artifacts to disk")
    parser.add_argument("--no-layout", action="store_true", help="Skip the final layout pass")
    parser.add_argument("--sequential", action="store_true", help="Call generators one at a time")
    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="Path to the YAML run configuration. Defaults to 'config/refiner_config.yaml'.",
    )
    parser.add_argument("--work-dir", type=str, default=None, help="Directory for sessions, artifacts and reports")
    parser.add_argument("--offline", action="store_true", help="Use the deterministic offline completion service")
    parser.add_argument("--report", action="store_true", help="Write a markdown session report")
    return parser


def main(argv=None):
    args = build_parser().parse_args(argv)

    load_environment()
    configure_logging()

    config = load_refiner_config(args.config)
    overrides = {
        "target_score": args.target_score,
        "max_iterations": args.iterations,
    }
    if args.no_logging:
        overrides["enable_logging"] = False
    if args.no_persistence:
        overrides["enable_persistence"] = False
    if args.no_layout:
        overrides["generate_layout"] = False
    if args.sequential:
        overrides["parallel_generation"] = False

    try:
        refinement_config = build_refinement_config(config, overrides)
    except (TypeError, ValueError) as e:
        print(f"❌ Invalid configuration: {e}")
        sys.exit(1)

    work_dir = args.work_dir or (config.get("storage") or {}).get("work_dir", "run_workspace")
    openai_key, openai_base_url, openai_model = get_openai_config()

    print(f"🚀 Launching Creature Refiner...")
    print(f"   Topic:  {args.topic}")
    print(f"   Target: {refinement_config.target_score}, rounds: {refinement_config.max_iterations}")
    print(f"   Mode:   {'Offline' if args.offline else openai_model}")

    try:
        orchestrator = CreatureRefinerOrchestrator(
            work_dir=work_dir,
            openai_key=openai_key,
            openai_base_url=openai_base_url,
            openai_model=openai_model,
            config=config,
            offline=args.offline,
        )
    except Exception as e:
        print(f"❌ Error initializing orchestrator: {e}")
        sys.exit(1)

    try:
        result = orchestrator.run(args.topic, refinement_config, write_report=args.report)
    except KeyboardInterrupt:
        print("\n🛑 Process interrupted by user.")
        sys.exit(130)
    except CreatureRefinerError as e:
        logging.exception("Refinement aborted")
        print(f"\n❌ Refinement aborted: {e}")
        sys.exit(1)
    except Exception as e:
        logging.exception("Fatal error during refinement")
        print(f"\n❌ Fatal error: {e}")
        sys.exit(1)

    print(json.dumps(result.artifact.to_dict(), indent=2, ensure_ascii=False))
    marker = "✅" if result.success else "⚠️ "
    print(f"\n{marker} {result.status}: score {result.final_score:.2f} after {result.iterations_used} round(s)")
    if result.session_id:
        print(f"   Session: {result.session_id}")
    if result.artifact_id:
        print(f"   Artifact: {result.artifact_id}")


if __name__ == "__main__":
    main()
