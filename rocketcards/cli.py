"""
RocketCards CLI - Command-line interface for the engine.

Usage:
    rocketcards simulate [--seed S] [--turns N]   Local AI vs local AI, prints the match log
    rocketcards deck-check <deck_file>            Validate a deck export document
    rocketcards serve [--host H] [--port P]       Run the HTTP API
"""

import argparse
import asyncio
import logging
import sys

from . import config


def main(argv=None):
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="RocketCards - Turn-based card match engine",
        prog="rocketcards",
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level",
    )
    parser.add_argument("--data-dir", help="Directory of collection JSON files")
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # Simulate command
    simulate_parser = subparsers.add_parser("simulate", help="Run a local AI vs local AI match")
    simulate_parser.add_argument("--seed", help="Shuffle seed")
    simulate_parser.add_argument("--turns", type=int, default=20, help="Maximum turns to play")
    simulate_parser.add_argument("--collection", help="Collection id to auto-build from")
    simulate_parser.add_argument("--strategy", default="balanced",
                                 choices=["aggressive", "balanced", "defensive"])
    simulate_parser.add_argument("--key-stat", default="intelligence",
                                 choices=["strength", "intelligence", "charisma"])
    simulate_parser.add_argument("--difficulty", default="medium", choices=["easy", "medium", "hard"])
    simulate_parser.add_argument("--snapshot", help="Persist the match snapshot to this file")

    # Deck check command
    deck_parser = subparsers.add_parser("deck-check", help="Validate a deck export document")
    deck_parser.add_argument("deck_file", help="Path to deck JSON file")

    # Serve command
    serve_parser = subparsers.add_parser("serve", help="Run the HTTP API")
    serve_parser.add_argument("--host", default="127.0.0.1")
    serve_parser.add_argument("--port", type=int, default=8000)

    args = parser.parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.command == "simulate":
        return cmd_simulate(args)
    elif args.command == "deck-check":
        return cmd_deck_check(args)
    elif args.command == "serve":
        return cmd_serve(args)
    else:
        parser.print_help()
        sys.exit(1)


def _load_catalog(args):
    from .content.collections import CardCatalog

    return CardCatalog.from_directory(args.data_dir or config.data_dir())


def cmd_simulate(args):
    """Play both sides with the local AI."""
    from .bots.local_ai import LocalAIPolicy
    from .content.decks import auto_build_deck
    from .content.profiles import create_profile
    from .engine_core.state import AIDifficulty
    from .session.controller import MatchController
    from .session.snapshot import SnapshotStore

    catalog = _load_catalog(args)
    if not catalog.collections:
        print("Error: No collections found")
        sys.exit(1)

    collection = catalog.get_collection(args.collection) if args.collection else catalog.collections[0]
    if collection is None:
        print(f"Error: Unknown collection: {args.collection}")
        sys.exit(1)

    snapshot_file = args.snapshot or config.snapshot_path()
    difficulty = AIDifficulty(args.difficulty)
    controller = MatchController(
        catalog,
        opponent_policy=LocalAIPolicy(catalog, difficulty),
        store=SnapshotStore(snapshot_file) if snapshot_file else None,
    )

    profile = create_profile("Simulator", args.strategy, args.key_stat)
    deck = auto_build_deck(collection, seed=args.seed)
    snapshot = controller.start_match(profile, deck, ai_difficulty=difficulty, seed=args.seed)
    print(f"Seed: {snapshot.match.rng_seed}")
    print(f"Deck: {deck.name} ({len(deck.cards)} cards)")

    async def play():
        while controller.snapshot.match.turn < args.turns and not controller.is_over:
            await controller.run_opponent_turn(controller.snapshot.match.active_player)

    asyncio.run(play())

    final = controller.snapshot
    print()
    for entry in final.match.log:
        print(f"[turn {entry.turn}] {entry.message}")
    print()
    print(f"Player:   HP {final.player.hp}  MP {final.player.mp}  fatigue {final.player.fatigue}")
    print(f"Opponent: HP {final.opponent.hp}  MP {final.opponent.mp}  fatigue {final.opponent.fatigue}")
    winner = controller.winner
    print(f"Winner: {winner.label if winner else 'none'} after {final.match.turn} turns")
    return 0


def cmd_deck_check(args):
    """Validate a deck export document."""
    from .content.decks import DeckImportError, import_deck

    try:
        with open(args.deck_file, "r", encoding="utf-8") as f:
            text = f.read()
    except FileNotFoundError:
        print(f"Error: File not found: {args.deck_file}")
        sys.exit(1)

    catalog = _load_catalog(args)
    try:
        result = import_deck(text, catalog)
    except DeckImportError as e:
        print(f"Error: {e}")
        sys.exit(1)

    print(f"Deck: {result.deck.name}")
    print(f"Valid cards: {len(result.deck.cards)}")
    if result.skipped:
        print("\nSkipped:")
        for card_id in result.skipped:
            print(f"  - {card_id}")
    return 0


def cmd_serve(args):
    """Run the HTTP API with uvicorn."""
    import uvicorn
    from .api.app import create_app
    from .api.service import APIService

    app = create_app(APIService(catalog=_load_catalog(args)))
    uvicorn.run(app, host=args.host, port=args.port)
    return 0


if __name__ == "__main__":
    main()
