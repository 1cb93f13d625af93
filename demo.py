#!/usr/bin/env python3
"""Watch logic agents race on a shared minefield."""
import time
import os

from multisweeper.agents import LogicAgent
from multisweeper.game import ActionError, BoardConfig, GameConfig, render_board
from multisweeper.sessions import GameSession, SessionState


def clear_screen():
    os.system('cls' if os.name == 'nt' else 'clear')


def show(session: GameSession, title: str) -> None:
    clear_screen()
    print(title)
    for player in session.players:
        status = "cleared" if player.cleared else "dead" if player.dead else "playing"
        print(f"--- Player {player.index}: {player.score} cells ({status}) ---")
        print(render_board(session.board_for(player.index, privileged=True)))
        print()


def demo(delay: float = 0.3, players: int = 2, size: int = 9, mines: int = 10):
    """Run one multiplayer demo game with visualization."""
    config = GameConfig(
        board=BoardConfig(rows=size, cols=size, num_mines=mines),
        max_players=players,
    )
    session = GameSession(config, owner="player-0")
    for seat in range(1, players):
        session.join(f"player-{seat}")
    agents = [LogicAgent(size, size, seed=seat) for seat in range(players)]

    print(f"Board: {size}x{size} with {mines} mines ({100*mines/(size*size):.1f}% density)")
    print("Starting in 2 seconds...")
    time.sleep(2)

    session.start("player-0")
    step = 0

    while session.state is SessionState.ACTIVE:
        for seat, agent in enumerate(agents):
            if not session.player(seat).is_active:
                continue
            observation = session.board_for(seat, viewer=f"player-{seat}")
            kind, point = agent.select_move(observation)
            try:
                session.submit_action(seat, kind, point)
            except ActionError:
                continue
            step += 1
            show(session, f"=== Step {step} | Player {seat}: {kind.value} {point} ===")
            time.sleep(delay)

    top = session.top_score()
    print(f"\n=== Game over after {session.elapsed_seconds():.1f}s, top score: {top} ===")


if __name__ == "__main__":
    import argparse
    parser = argparse.ArgumentParser()
    parser.add_argument("--delay", type=float, default=0.3, help="Delay between moves")
    parser.add_argument("--players", type=int, default=2, help="Number of players")
    parser.add_argument("--size", type=int, default=9, help="Board size (NxN)")
    parser.add_argument("--mines", type=int, default=None, help="Number of mines (default: ~15%% of cells)")
    args = parser.parse_args()

    mines = args.mines if args.mines else int(args.size * args.size * 0.15)

    demo(delay=args.delay, players=args.players, size=args.size, mines=mines)
