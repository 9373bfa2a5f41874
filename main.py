#!/usr/bin/env python3
"""
Sweep - Main entry point.

Usage:
    python main.py evaluate [--difficulty NAME] [--games N] [--solvers ID ...]
    python main.py compare [--difficulty NAME] [--games N]
    python main.py play [--difficulty NAME] [--seed N]
"""
import argparse
import logging
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent / "src"))

from sweep import Board, GameSession
from sweep_solver import DEFAULT_SOLVER_ORDER, SOLVER_TYPES, SolverAgent
from sweep_eval import DIFFICULTIES, EvaluationConfig, Evaluator, get_difficulty


def evaluate(args: argparse.Namespace) -> None:
    """Evaluate one solver ordering."""
    config = EvaluationConfig(
        board=get_difficulty(args.difficulty),
        solver_ids=args.solvers or DEFAULT_SOLVER_ORDER,
        num_games=args.games,
        seed=args.seed,
        output_dir=args.output,
        log_frequency=max(1, args.games // 10),
    )
    print(f"Evaluating {', '.join(config.solver_ids)} on {args.difficulty}...")
    stats = Evaluator(config).evaluate()

    print(f"\nResults over {stats.games_played} games:")
    print(f"  Win rate: {stats.win_rate:.1%}")
    print(f"  Stuck rate: {stats.stuck_rate:.1%}")
    print(f"  Avg steps: {stats.avg_steps:.1f}")
    print(f"  Avg progress: {stats.avg_progress:.1%}")
    for name, count in sorted(stats.solver_steps.items()):
        print(f"  {name}: {count} steps")
    if args.output:
        print(f"Stats saved to: {Path(args.output) / 'evaluation_stats.json'}")


def compare(args: argparse.Namespace) -> None:
    """Compare the default ordering with single-rule variants."""
    config = EvaluationConfig(
        board=get_difficulty(args.difficulty),
        num_games=args.games,
        seed=args.seed,
    )
    orderings = {
        "Default": DEFAULT_SOLVER_ORDER,
        "Flagging only": ("exact-covered-tile-match", "guess-at-start"),
        "Clearing only": ("clear-fully-flagged-tile", "guess-at-start"),
    }
    results = Evaluator(config).compare(orderings)

    print("\n" + "=" * 56)
    print("Solver Comparison Results")
    print("=" * 56)
    print(f"{'Ordering':<20} {'Win Rate':<12} {'Stuck':<12} {'Avg Steps':<10}")
    print("-" * 56)

    for name, metrics in results.items():
        print(
            f"{name:<20} {metrics['win_rate']:>10.1%} "
            f"{metrics['stuck_rate']:>10.1%} "
            f"{metrics['avg_steps']:>10.1f}"
        )


def play(args: argparse.Namespace) -> None:
    """Play one game with the solver, printing the board after each step."""
    import random

    rng = random.Random(args.seed)
    board = Board(get_difficulty(args.difficulty), rng=rng)
    session = GameSession(board)
    agent = SolverAgent(rng=rng)

    step = 0
    while session.is_playing:
        result = agent.try_step(session)
        if result is None:
            print("\nSolver got stuck: no deduction is possible.")
            break
        session.perform_actions(result.actions)
        step += 1
        print(f"\n=== Step {step}: {result} ===")
        print(board.render())

    session.reveal_all()
    print(f"\nFinal state: {session.state.name}")
    print(board.render(show_mines=True))


def main() -> None:
    """Parse arguments and run the appropriate command."""
    parser = argparse.ArgumentParser(
        description="Sweep - play and evaluate the deduction solver"
    )
    parser.add_argument(
        "--verbose", action="store_true", help="Enable debug logging"
    )
    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    # Evaluate command
    eval_parser = subparsers.add_parser("evaluate", help="Evaluate the solver")
    eval_parser.add_argument(
        "--difficulty", choices=sorted(DIFFICULTIES), default="beginner",
        help="Board preset",
    )
    eval_parser.add_argument(
        "--games", type=int, default=100, help="Number of games to play"
    )
    eval_parser.add_argument(
        "--solvers", nargs="+", choices=sorted(SOLVER_TYPES),
        help="Solver ids in priority order",
    )
    eval_parser.add_argument("--seed", type=int, default=None, help="Random seed")
    eval_parser.add_argument(
        "--output", default=None, help="Directory for evaluation_stats.json"
    )

    # Compare command
    compare_parser = subparsers.add_parser(
        "compare", help="Compare solver orderings"
    )
    compare_parser.add_argument(
        "--difficulty", choices=sorted(DIFFICULTIES), default="beginner",
        help="Board preset",
    )
    compare_parser.add_argument(
        "--games", type=int, default=100, help="Number of games per ordering"
    )
    compare_parser.add_argument("--seed", type=int, default=None, help="Random seed")

    # Play command
    play_parser = subparsers.add_parser("play", help="Watch one solver game")
    play_parser.add_argument(
        "--difficulty", choices=sorted(DIFFICULTIES), default="beginner",
        help="Board preset",
    )
    play_parser.add_argument("--seed", type=int, default=None, help="Random seed")

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if args.command == "evaluate":
        evaluate(args)
    elif args.command == "compare":
        compare(args)
    elif args.command == "play":
        play(args)
    else:
        parser.print_help()


if __name__ == "__main__":
    main()
