#!/usr/bin/env python3
"""Command-line utility to manage the followed Last.fm users."""

import argparse
import sys

from .config import Config, ConfigError
from .registry import FollowResult
from .service import build_service


def main(argv=None):
    """Follow, forget or list users without going through the chat."""
    parser = argparse.ArgumentParser(description="Manage users followed by the Last.fm Notifier")
    subparsers = parser.add_subparsers(dest="command", required=True)

    list_parser = subparsers.add_parser("list", help="List followed users")
    list_parser.add_argument(
        "--songs",
        action="store_true",
        help="Also show the last song seen for each user",
    )
    follow_parser = subparsers.add_parser("follow", help="Start following a user")
    follow_parser.add_argument("username")
    forget_parser = subparsers.add_parser("forget", help="Stop following a user")
    forget_parser.add_argument("username")

    args = parser.parse_args(argv)

    try:
        config = Config.from_env()
    except ConfigError as e:
        print(f"❌ {e}", file=sys.stderr)
        return 1

    registry = build_service(config).registry

    if args.command == "follow":
        if registry.follow(args.username) is FollowResult.NOT_FOUND:
            print(f"❌ {args.username} could not be found on Last.fm!")
            return 1
        print(f"✅ {args.username} is now being followed.")
    elif args.command == "forget":
        registry.forget(args.username)
        print(f"✅ {args.username} is no longer followed.")
    else:
        items = registry.items()
        if not items:
            print("Nobody is being followed.")
        for username, song_id in items:
            if args.songs:
                print(f"{username}\t{song_id or '-'}")
            else:
                print(username)
    return 0


if __name__ == "__main__":
    sys.exit(main())
