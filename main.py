#!/usr/bin/env python3
"""
Multisweeper - Main entry point.

Usage:
    python main.py match [--players N] [--games N] [--no-flags]
    python main.py replay [--save DIR]

Global options (before the command): --preset, --seed, --verbose
"""
import argparse
import logging

from multisweeper.agents import LogicAgent, play_match
from multisweeper.game import BEGINNER, EXPERT, INTERMEDIATE, GameConfig, render_board
from multisweeper.sessions import JsonSessionStore, SessionManager, SessionState

PRESETS = {
    "beginner": BEGINNER,
    "intermediate": INTERMEDIATE,
    "expert": EXPERT,
}


def match(args: argparse.Namespace) -> None:
    """Play multiplayer games between logic agents and tally the winners."""
    config = PRESETS[args.preset]
    wins = [0] * args.players

    for game in range(args.games):
        seed = None if args.seed is None else args.seed + game
        agents = [
            LogicAgent(
                config.rows, config.cols,
                flag_mines=not args.no_flags,
                seed=None if seed is None else seed * args.players + seat,
            )
            for seat in range(args.players)
        ]
        result = play_match(agents, config, seed=seed)
        session = result.session

        print(f"\nGame {game + 1}: session {session.session_id} "
              f"{session.state.value} after {result.rounds} rounds")
        for seat, score in enumerate(result.scores):
            status = "cleared" if result.cleared[seat] else "dead" if result.dead[seat] else "playing"
            print(f"  Seat {seat}: {score:>4} cells ({status})")
        if result.winner is not None:
            wins[result.winner] += 1
            print(f"  Winner: seat {result.winner} with {session.top_score()} cells")
        else:
            print("  No single winner")

    if args.games > 1:
        print("\n" + "=" * 30)
        print(f"{'Seat':<10} {'Wins':>8}")
        print("-" * 30)
        for seat, count in enumerate(wins):
            print(f"{seat:<10} {count:>8}")


def replay(args: argparse.Namespace) -> None:
    """Play one logic-agent game and step through its replay."""
    config = PRESETS[args.preset]
    store = JsonSessionStore(args.save) if args.save else None
    manager = SessionManager(store)

    session = manager.create_session(GameConfig(board=config, seed=args.seed), owner="cli")
    agent = LogicAgent(config.rows, config.cols, seed=args.seed)
    while session.state is not SessionState.COMPLETED:
        observation = session.board_for(0)
        kind, point = agent.select_move(observation)
        manager.submit_action(session.session_id, 0, kind, point)
    if store is not None:
        print(f"Saved session {session.session_id} to {args.save}")

    game_replay = manager.replay(session.session_id)
    for position in range(len(game_replay)):
        frame = game_replay.to_position(position)
        deduction = game_replay.annotate(0)
        if frame.entry is None:
            print("=== Start ===")
        else:
            entry = frame.entry
            print(
                f"=== {position}: {entry.action.value} {entry.point} "
                f"({len(entry.effect.revealed)} revealed) ==="
            )
        print(render_board(frame.board(0)))
        print(
            f"Safe: {sorted(deduction.definitely_safe)}  "
            f"Mines: {sorted(deduction.definitely_mine)}\n"
        )

    player = session.player(0)
    print(f"Score: {player.score}, {'cleared' if player.cleared else 'dead'}")


def main() -> None:
    """Parse arguments and run the appropriate command."""
    parser = argparse.ArgumentParser(
        description="Multisweeper - Play and replay multiplayer Minesweeper games"
    )
    parser.add_argument(
        "--verbose", "-v", action="store_true", help="Enable debug logging"
    )
    parser.add_argument(
        "--preset", choices=sorted(PRESETS), default="beginner", help="Board preset"
    )
    parser.add_argument("--seed", type=int, default=None, help="Random seed")
    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    # Match command
    match_parser = subparsers.add_parser("match", help="Play a multiplayer game")
    match_parser.add_argument(
        "--players", type=int, default=2, help="Number of seats"
    )
    match_parser.add_argument(
        "--games", type=int, default=1, help="Number of games to play"
    )
    match_parser.add_argument(
        "--no-flags", action="store_true", help="Agents never flag proven mines"
    )

    # Replay command
    replay_parser = subparsers.add_parser("replay", help="Play and replay one game")
    replay_parser.add_argument(
        "--save", default=None, help="Directory to save the session record to"
    )

    args = parser.parse_args()

    if args.verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(asctime)s %(name)s %(levelname)s %(message)s",
        )

    if args.command == "match":
        match(args)
    elif args.command == "replay":
        replay(args)
    else:
        parser.print_help()


if __name__ == "__main__":
    main()
