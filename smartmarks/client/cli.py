from __future__ import annotations

import argparse
import getpass
import logging
import sys
import time

from smartmarks.client.api import ApiClient
from smartmarks.client.config import ClientConfig
from smartmarks.client.errors import SmartmarksError, ValidationError
from smartmarks.client.loader import load_bookmark
from smartmarks.client.session import AuthSession
from smartmarks.client.view import BookmarkView


def _print_rows(view: BookmarkView, out) -> None:
    rows = view.rows()
    print(f"{len(rows)} links", file=out)
    for bookmark_id, title, domain, category in rows:
        print(f"{bookmark_id:>6}  {title}  [{domain}]  ({category})", file=out)


def _notify(message: str) -> None:
    print(f"error: {message}", file=sys.stderr)


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="smartmarks")
    p.add_argument("--url", help="server base URL (default: $SMARTMARKS_URL)")
    p.add_argument("--token", help="API token (default: $SMARTMARKS_TOKEN)")
    p.add_argument("-v", "--verbose", action="store_true")
    sub = p.add_subparsers(dest="command", required=True)

    login = sub.add_parser("login", help="sign in and print an API token")
    login.add_argument("username", nargs="?")
    login.add_argument("--password")
    login.add_argument("--code", help="exchange a one-time login code instead")

    listing = sub.add_parser("list", help="print bookmarks, newest first")
    listing.add_argument("--category")

    add = sub.add_parser("add", help="save a link")
    add.add_argument("title")
    add.add_argument("link")
    add.add_argument("--category")

    edit = sub.add_parser("edit", help="change a saved link")
    edit.add_argument("id", type=int)
    edit.add_argument("title")
    edit.add_argument("link")
    edit.add_argument("--category", help="default: keep the current category")

    delete = sub.add_parser("delete", help="remove a saved link")
    delete.add_argument("id", type=int)

    watch = sub.add_parser("watch", help="keep a live list until interrupted")
    watch.add_argument("--category")
    watch.add_argument("--interval", type=float)
    return p


def run(args, config: ClientConfig, transport=None, out=sys.stdout) -> int:
    with ApiClient.from_config(config, transport=transport) as api:
        session = AuthSession(api)

        if args.command == "login":
            if args.code:
                session.exchange_code(args.code, token_name="cli")
            else:
                if not args.username:
                    raise ValidationError("username is required unless --code is given")
                password = args.password or getpass.getpass()
                session.sign_in(args.username, password, token_name="cli")
            print(session.token, file=out)
            return 0

        view = BookmarkView(session, notify=_notify)
        if args.command == "add":
            return 0 if view.add(args.title, args.link, args.category) else 1
        if args.command == "edit":
            category = args.category
            if category is None:
                category = load_bookmark(api, args.id).category
            return 0 if view.edit(args.id, args.title, args.link, category) else 1
        if args.command == "delete":
            return 0 if view.remove(args.id) else 1

        with view:
            view.filter_by(args.category)
            _print_rows(view, out)
            if args.command == "list":
                return 0
            interval = args.interval or config.poll_interval
            try:
                while True:
                    time.sleep(interval)
                    if view.refresh():
                        _print_rows(view, out)
            except KeyboardInterrupt:
                return 0


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )
    config = ClientConfig.from_env()
    if args.url:
        config.base_url = args.url.rstrip("/")
    if args.token:
        config.token = args.token

    try:
        return run(args, config)
    except SmartmarksError as exc:
        _notify(str(exc))
        return 1


if __name__ == "__main__":
    sys.exit(main())
