#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
LifeSprints admin CLI (SQLite)

Commands:
  init                Create tables in the configured database
  create-user         Create a user, print its id
  add-story           Create a story for a user, print its id
  toggle              Flip a story's completion state
  list                Print a user's stories for a year (optionally export CSV)
  stats               Print a user's aggregate stats for a year

Notes:
- The database path comes from LIFESPRINTS_DB_PATH / config.yaml unless --db is given.
- Every command goes through the same data-access service the HTTP API uses.
"""
from __future__ import annotations

import argparse
import json
import os
import sys
import uuid
from datetime import datetime
from decimal import Decimal

import pandas as pd

from .db import DbConfig, load_db_config
from .models import CreateStoryDto, CreateUserDto
from .services.schema_svc import ensure_db_schema
from .services.stored_procedure_svc import StoredProcedureService


def _config(args) -> DbConfig:
    cfg = load_db_config()
    if args.db:
        cfg = DbConfig(path=args.db, timeout=cfg.timeout)
    return cfg


def _print_json(obj):
    print(json.dumps(obj, ensure_ascii=False, indent=2, default=str))


# ---------------- Commands ----------------

def cmd_init(args):
    cfg = _config(args)
    ensure_db_schema(cfg)
    print(f"DB initialized: {cfg.path}")


def cmd_create_user(args):
    svc = StoredProcedureService(_config(args))
    user_id = svc.create_user(CreateUserDto(email=args.email, display_name=args.name))
    _print_json({"userId": str(user_id)})


def cmd_add_story(args):
    svc = StoredProcedureService(_config(args))
    dto = CreateStoryDto(
        title=args.title,
        description=args.description,
        year=args.year,
        priority=args.priority,
        estimated_hours=Decimal(args.hours) if args.hours is not None else None,
        due_date=datetime.fromisoformat(args.due) if args.due else None,
    )
    story_id = svc.create_story(uuid.UUID(args.user), dto)
    _print_json({"storyId": story_id})


def cmd_toggle(args):
    svc = StoredProcedureService(_config(args))
    user_id = uuid.UUID(args.user) if args.user else None
    completed = svc.toggle_story_completion(args.story, user_id)
    _print_json({"storyId": args.story, "isCompleted": completed})


def cmd_list(args):
    svc = StoredProcedureService(_config(args))
    stories = svc.get_user_stories_by_year(uuid.UUID(args.user), args.year)
    df = pd.DataFrame([s.model_dump() for s in stories])

    pd.set_option("display.max_rows", 200)
    pd.set_option("display.width", 160)

    print(f"\n=== Stories {args.year} ===")
    if not df.empty:
        print(df[["id", "title", "priority", "is_completed", "estimated_hours", "actual_hours", "due_date"]])
    else:
        print("(empty)")

    if args.csv:
        out_dir = os.path.dirname(args.csv) or "."
        os.makedirs(out_dir, exist_ok=True)
        df.to_csv(args.csv, index=False, encoding="utf-8-sig")
        print(f"\nCSV exported to {args.csv}")


def cmd_stats(args):
    svc = StoredProcedureService(_config(args))
    stats = svc.get_user_year_stats(uuid.UUID(args.user), args.year)
    _print_json(stats.model_dump(mode="json", by_alias=True))


# ---------------- Entry ----------------

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="LifeSprints stories (SQLite)")
    parser.add_argument("--db", default=None, help="SQLite file path (overrides config)")
    sub = parser.add_subparsers()

    p_init = sub.add_parser("init", help="create tables")
    p_init.set_defaults(func=cmd_init)

    p_user = sub.add_parser("create-user", help="create a user")
    p_user.add_argument("--email", required=True)
    p_user.add_argument("--name", required=True, help="display name")
    p_user.set_defaults(func=cmd_create_user)

    p_story = sub.add_parser("add-story", help="create a story")
    p_story.add_argument("--user", required=True, help="owner user id")
    p_story.add_argument("--title", required=True)
    p_story.add_argument("--year", required=True, type=int)
    p_story.add_argument("--description", required=False)
    p_story.add_argument("--priority", type=int, default=0, choices=[0, 1, 2])
    p_story.add_argument("--hours", required=False, help="estimated hours, e.g. 5.50")
    p_story.add_argument("--due", required=False, help="ISO date/time")
    p_story.set_defaults(func=cmd_add_story)

    p_toggle = sub.add_parser("toggle", help="toggle story completion")
    p_toggle.add_argument("--story", required=True, type=int)
    p_toggle.add_argument("--user", required=False, help="require this owner")
    p_toggle.set_defaults(func=cmd_toggle)

    p_list = sub.add_parser("list", help="list stories for a year")
    p_list.add_argument("--user", required=True)
    p_list.add_argument("--year", required=True, type=int)
    p_list.add_argument("--csv", required=False, help="export path")
    p_list.set_defaults(func=cmd_list)

    p_stats = sub.add_parser("stats", help="aggregate stats for a year")
    p_stats.add_argument("--user", required=True)
    p_stats.add_argument("--year", required=True, type=int)
    p_stats.set_defaults(func=cmd_stats)
    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if not hasattr(args, "func"):
        parser.print_help()
        return 0
    try:
        args.func(args)
    except Exception as e:
        print(f"error: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
