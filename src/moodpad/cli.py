from __future__ import annotations

import argparse
import os
import random
from datetime import date, datetime
from pathlib import Path

from . import analytics, csvcodec, tags as tagindex
from ._util import _now_local, _parse_day, _today
from .analytics import EMOJI_NAMES
from .config import load_config
from .dayparse import parse_day
from .demo import load_demo_data
from .errors import FormatError, StorageError
from .log import setup_logging
from .settings import Settings
from .storage import JsonKeyValueStore
from .store import EntryStore, MoodEntry, normalize_tags


# -------------------------
# Helpers
# -------------------------

def _today_arg(args: argparse.Namespace) -> date:
    if args.today:
        d = _parse_day(args.today)
        if d is None:
            raise SystemExit(f"--today must be YYYY-MM-DD (got {args.today!r})")
        return d
    return _today()


def _now_arg(args: argparse.Namespace) -> datetime:
    """Wall clock moved onto --today, with --time overriding the hour and minute."""
    now = _now_local()
    if getattr(args, "time", None):
        try:
            t = datetime.strptime(args.time.strip(), "%H:%M").time()
        except ValueError:
            raise SystemExit(f"--time must be HH:MM (got {args.time!r})") from None
        now = now.replace(hour=t.hour, minute=t.minute, second=0, microsecond=0)
    return datetime.combine(_today_arg(args), now.timetz())


def _parse_tags(raw: str | None) -> list[str]:
    if not raw:
        return []
    return normalize_tags(raw.replace(",", " ").split())


def _parse_month(raw: str | None, today: date) -> tuple[int, int]:
    if not raw:
        return today.year, today.month
    parts = raw.strip().split("-")
    if len(parts) == 2 and parts[0].isdigit() and parts[1].isdigit():
        y, m = int(parts[0]), int(parts[1])
        if 1 <= m <= 12:
            return y, m
    raise SystemExit(f"--month must look like 2024-03 (got {raw!r})")


def _sparkline(values: list[float | None], vmin: float = 1.0, vmax: float = 5.0) -> str:
    if not values:
        return ""
    blocks = "▁▂▃▄▅▆▇█"
    span = max(1e-9, vmax - vmin)
    out = []
    for v in values:
        if v is None:
            out.append(" ")
            continue
        x = (v - vmin) / span
        idx = int(round(x * (len(blocks) - 1)))
        idx = max(0, min(len(blocks) - 1, idx))
        out.append(blocks[idx])
    return "".join(out)


def _or_dash(value: object) -> str:
    return "—" if value is None else str(value)


# -------------------------
# Print blocks
# -------------------------

def _print_entry_line(entry: MoodEntry) -> None:
    line = f"{entry.date} — {entry.emoji}"
    if entry.tags:
        line += f" [{', '.join('#' + t for t in entry.tags)}]"
    if entry.note:
        line += f" ({entry.note})"
    print(line)


def _print_entry_block(entry: MoodEntry) -> None:
    print("```")
    print("📒 Mood Log")
    print(f"- 📅 Date: {entry.date}")
    print(f"- 🙂 Mood: {entry.emoji}")
    if entry.tags:
        print(f"- 🏷️ Tags: {', '.join(entry.tags)}")
    if entry.note:
        print(f"- 📝 Notes: {entry.note}")
    print("```")


def _print_entry(entry: MoodEntry, fmt: str) -> None:
    if fmt == "block":
        _print_entry_block(entry)
    else:
        _print_entry_line(entry)


# -------------------------
# Entry commands
# -------------------------

def cmd_add(args: argparse.Namespace) -> None:
    day = parse_day(args.date, _today_arg(args))
    tags = _parse_tags(args.tags) if args.tags is not None else None
    entry = args.store.save(day, args.emoji, args.note or "", tags)

    if args.format == "block":
        _print_entry_block(entry)
    else:
        print(f"🙂 Logged {entry.emoji} for {entry.date}")


def cmd_show(args: argparse.Namespace) -> None:
    day = parse_day(args.date, _today_arg(args))
    entry = args.store.get(day)
    if entry is None:
        print(f"No mood logged for {day}.")
        return
    _print_entry(entry, args.format)


def cmd_delete(args: argparse.Namespace) -> None:
    day = parse_day(args.date, _today_arg(args))
    if args.store.get(day) is None:
        print(f"No mood logged for {day}.")
        return
    args.store.delete(day)
    print(f"🗑️ Deleted mood for {day}.")


def cmd_list(args: argparse.Namespace) -> None:
    if args.month:
        y, m = _parse_month(args.month, _today_arg(args))
        entries = args.store.get_for_month(y, m)
        title = f"{y:04d}-{m:02d}"
    else:
        entries = args.store.get_all()
        title = "newest first"

    if not entries:
        print("No mood entries yet.")
        return

    if args.format == "line":
        print(f"=== Mood Log ({title}) ===")
    for e in entries[: args.limit]:
        _print_entry(e, args.format)


def cmd_reset(args: argparse.Namespace) -> None:
    before = args.store.count()

    if not args.yes:
        raise SystemExit("Refusing to reset without --yes (this deletes mood history).")

    args.store.clear_all()
    args.settings.set_demo_mode(False)
    print(f"🧹 Mood reset: deleted {before} entries.")


# -------------------------
# Analytics commands
# -------------------------

def cmd_stats(args: argparse.Namespace) -> None:
    today = _today_arg(args)
    y, m = _parse_month(args.month, today)
    store = args.store

    print(f"=== Mood Stats ({y:04d}-{m:02d}) ===")
    print(f"- most common mood: {_or_dash(analytics.most_common_mood(store, y, m))}")
    print(f"- current streak: {analytics.current_streak(store, today=today)} days")
    print(f"- longest streak: {analytics.longest_streak(store)} days")
    print(f"- total entries: {analytics.total_entries(store)}")

    points = analytics.trend_data(store, 30, today=today)
    print(f"- last 30 days: {_sparkline([p.value for p in points])}")


def cmd_trend(args: argparse.Namespace) -> None:
    if args.days < 1:
        raise SystemExit("--days must be at least 1")
    points = analytics.trend_data(args.store, args.days, today=_today_arg(args))
    logged = [p for p in points if p.value is not None]

    if not logged:
        print("Log some moods to see your trend!")
        return

    print(f"=== Mood Trend (last {args.days} days) ===")
    print(f"- sparkline: {_sparkline([p.value for p in points])}")
    print(f"- days logged: {len(logged)}/{len(points)}")
    print(f"- average: {sum(p.value for p in logged) / len(logged):.2f}/5")
    if args.verbose:
        print()
        for p in points:
            print(f"- {p.date}: {_or_dash(p.emoji)} {_or_dash(p.value)}")


INSIGHT_ICONS = {
    "positive": "🌟",
    "info": "💡",
    "stat": "📊",
    "achievement": "🏆",
}


def cmd_insights(args: argparse.Namespace) -> None:
    insights = analytics.weekly_insights(args.store, today=_today_arg(args))
    if not insights:
        print("Log moods for at least a week to see personalized insights!")
        return

    print("=== Weekly Insights ===")
    for i in insights:
        print(f"{INSIGHT_ICONS.get(i.kind, '-')} {i.text}")


def cmd_patterns(args: argparse.Namespace) -> None:
    patterns = analytics.day_of_week_patterns(args.store)
    busiest = max(p.count for p in patterns)

    print("=== Mood by Weekday ===")
    for p in patterns:
        mark = " ◀" if busiest and p.count == busiest else ""
        print(f"{p.day}: {_or_dash(p.emoji)} ({p.count} entries){mark}")


def cmd_review(args: argparse.Namespace) -> None:
    review = analytics.year_review(args.store, args.year, today=_today_arg(args))

    print(f"=== {review.year} in Review ===")
    for m in review.months:
        print(f"{m.name}: {m.emoji or m.name[0]} ({m.count})")
    print(f"\n- days logged: {review.days_logged}")
    print(f"- top mood: {_or_dash(review.top_emoji)}")


# -------------------------
# Tag commands
# -------------------------

def cmd_tags_list(args: argparse.Namespace) -> None:
    rows = tagindex.popular_tags(args.store, args.limit) if args.limit else tagindex.all_tags(args.store)
    if not rows:
        print("No tags yet.")
        return
    for r in rows:
        print(f"#{r.tag}: {r.count}")


def cmd_tags_add(args: argparse.Namespace) -> None:
    day = parse_day(args.date, _today_arg(args))
    tags = tagindex.add_tag(args.store, day, args.tag)
    if tags is None:
        raise SystemExit(f"No mood logged for {day}; add one first.")
    print(f"🏷️ {day}: {' '.join('#' + t for t in tags)}")


def cmd_tags_remove(args: argparse.Namespace) -> None:
    day = parse_day(args.date, _today_arg(args))
    tags = tagindex.remove_tag(args.store, day, args.tag)
    if tags is None:
        raise SystemExit(f"No mood logged for {day}.")
    print(f"🏷️ {day}: {' '.join('#' + t for t in tags) or '(no tags)'}")


# -------------------------
# CSV commands
# -------------------------

def cmd_export(args: argparse.Namespace) -> None:
    text = csvcodec.export_csv(args.store)
    if not text:
        print("No mood data to export!")
        return
    out_path = csvcodec.write_csv_file(Path(args.csv), text + "\n")
    print(f"📄 Exported {args.store.count()} mood rows → {out_path}")


def cmd_import(args: argparse.Namespace) -> None:
    try:
        text = csvcodec.read_csv_file(Path(args.csv))
    except OSError as e:
        raise SystemExit(f"Failed to read {args.csv}: {e}") from e

    try:
        count = csvcodec.import_csv(args.store, text)
    except FormatError as e:
        raise SystemExit(f"Import failed: {e}") from e

    print(f"📥 Imported {count} mood entries from {args.csv}")


# -------------------------
# Settings commands
# -------------------------

def cmd_demo(args: argparse.Namespace) -> None:
    rng = random.Random(args.seed) if args.seed is not None else None
    added = load_demo_data(
        args.store,
        args.settings,
        keep_existing=args.keep_existing,
        today=_today_arg(args),
        rng=rng,
    )
    print(f"🎲 Demo data loaded: {added} entries over 3 months")


def cmd_theme(args: argparse.Namespace) -> None:
    s = args.settings
    if args.choice == "toggle":
        s.toggle_theme()
    elif args.choice:
        s.set_theme(args.choice)
    print(f"🎨 Theme: {s.theme}")


def cmd_reminder(args: argparse.Namespace) -> None:
    s = args.settings
    if args.action == "on":
        s.enable_reminder()
    elif args.action == "off":
        s.disable_reminder()
    elif args.action == "check":
        if s.should_send_reminder(args.store, now=_now_arg(args)):
            print("🔔 How are you feeling today? Take a moment to log your mood.")
        else:
            print("No reminder needed right now.")
        return
    print(f"🔔 Daily reminder: {'on' if s.reminder_enabled else 'off'}")


def cmd_emoji_list(args: argparse.Namespace) -> None:
    custom = set(args.settings.custom_emojis)
    for e in args.settings.all_emojis():
        label = EMOJI_NAMES.get(e, "custom" if e in custom else "")
        print(f"{e} {label}".rstrip())


def cmd_emoji_add(args: argparse.Namespace) -> None:
    emojis = args.settings.add_custom_emoji(args.emoji)
    print(" ".join(emojis))


def cmd_emoji_remove(args: argparse.Namespace) -> None:
    emojis = args.settings.remove_custom_emoji(args.emoji)
    print(" ".join(emojis))


# -------------------------
# Core commands
# -------------------------

def cmd_where(args: argparse.Namespace) -> None:
    env = os.environ.get("MOODPAD_DATA")
    if args.data:
        reason = "because you passed --data"
    elif env:
        reason = "because MOODPAD_DATA is set"
    elif args.profile:
        reason = f"because you used --profile {args.profile!r}"
    else:
        reason = "default XDG config location"

    print(args.config.data_path)
    print(f"↳ using {reason}")


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="moodpad", description="MoodPad: one mood a day, with streaks and insights")
    p.add_argument("--data", default=None, help="Path to data JSON (overrides env/default)")
    p.add_argument("--profile", default=None, help="Profile name (e.g. dev/test)")
    p.add_argument("--strict", action="store_true", help="Fail on unreadable data instead of treating it as empty")
    p.add_argument("--log-level", dest="log_level", default=None, help="DEBUG, INFO, WARNING (default), ERROR")
    p.add_argument("--today", default=None, help="Pretend today is this date (YYYY-MM-DD)")

    sub = p.add_subparsers(dest="cmd", required=True)
    sub.add_parser("where", help="Show which data file is active and why").set_defaults(func=cmd_where)

    # ---- entries ----
    add = sub.add_parser("add", help="Log (or replace) the mood for a day")
    add.add_argument("--emoji", required=True, help="Mood emoji, e.g. 😊")
    add.add_argument("--date", default=None, help="ISO or relative (e.g. yesterday, 3 days ago); default today")
    add.add_argument("--note", default=None)
    add.add_argument("--tags", default=None,
                     help="Comma or space-separated tags; omit to keep existing tags")
    add.add_argument("--format", choices=["line", "block"], default="line")
    add.set_defaults(func=cmd_add)

    show = sub.add_parser("show", help="Show the mood for a day")
    show.add_argument("--date", default=None)
    show.add_argument("--format", choices=["line", "block"], default="block")
    show.set_defaults(func=cmd_show)

    delete = sub.add_parser("delete", help="Delete the mood for a day")
    delete.add_argument("--date", required=True)
    delete.set_defaults(func=cmd_delete)

    lst = sub.add_parser("list", help="List mood entries")
    lst.add_argument("--month", default=None, help="Only this month, e.g. 2024-03")
    lst.add_argument("--limit", type=int, default=50)
    lst.add_argument("--format", choices=["line", "block"], default="line")
    lst.set_defaults(func=cmd_list)

    reset = sub.add_parser("reset", help="Delete ALL mood entries (requires --yes)")
    reset.add_argument("--yes", action="store_true", help="Confirm destructive reset")
    reset.set_defaults(func=cmd_reset)

    # ---- analytics ----
    stats = sub.add_parser("stats", help="Streaks, totals and most common mood")
    stats.add_argument("--month", default=None, help="Month for most common mood (default current)")
    stats.set_defaults(func=cmd_stats)

    trend = sub.add_parser("trend", help="Mood trend over the last N days")
    trend.add_argument("--days", type=int, default=30)
    trend.add_argument("--verbose", action="store_true", help="Print every day")
    trend.set_defaults(func=cmd_trend)

    sub.add_parser("insights", help="Weekly insights").set_defaults(func=cmd_insights)
    sub.add_parser("patterns", help="Dominant mood per weekday").set_defaults(func=cmd_patterns)

    review = sub.add_parser("review", help="Year in review")
    review.add_argument("--year", type=int, default=None)
    review.set_defaults(func=cmd_review)

    # ---- tags ----
    tags = sub.add_parser("tags", help="Tag entries and see popular tags")
    tags_sub = tags.add_subparsers(dest="tags_cmd", required=True)

    tags_list = tags_sub.add_parser("list", help="Tags by frequency")
    tags_list.add_argument("--limit", type=int, default=0, help="Only the top N (e.g. 5)")
    tags_list.set_defaults(func=cmd_tags_list)

    for name, func, helptext in (
        ("add", cmd_tags_add, "Add a tag to a day's entry"),
        ("remove", cmd_tags_remove, "Remove a tag from a day's entry"),
    ):
        tp = tags_sub.add_parser(name, help=helptext)
        tp.add_argument("--tag", required=True)
        tp.add_argument("--date", default=None)
        tp.set_defaults(func=func)

    # ---- csv ----
    export = sub.add_parser("export", help="Export entries to CSV (Date,Emoji,Note)")
    export.add_argument("--csv", required=True, help="Output CSV path (e.g. ~/moods.csv)")
    export.set_defaults(func=cmd_export)

    imp = sub.add_parser("import", help="Merge entries from a CSV file")
    imp.add_argument("--csv", required=True, help="CSV with Date and Emoji columns (Note optional)")
    imp.set_defaults(func=cmd_import)

    # ---- settings ----
    demo = sub.add_parser("demo", help="Load three months of sample data")
    demo.add_argument("--keep-existing", action="store_true", help="Merge instead of replacing current data")
    demo.add_argument("--seed", type=int, default=None)
    demo.set_defaults(func=cmd_demo)

    theme = sub.add_parser("theme", help="Show or change the theme")
    theme.add_argument("choice", nargs="?", choices=["dark", "light", "toggle"])
    theme.set_defaults(func=cmd_theme)

    reminder = sub.add_parser("reminder", help="Daily 8 PM reminder")
    reminder.add_argument("action", nargs="?", choices=["on", "off", "status", "check"], default="status")
    reminder.add_argument("--time", help="HH:MM to check against (default: now)")
    reminder.set_defaults(func=cmd_reminder)

    emoji = sub.add_parser("emoji", help="Default and custom mood emoji")
    emoji_sub = emoji.add_subparsers(dest="emoji_cmd", required=True)
    emoji_sub.add_parser("list", help="List available emoji").set_defaults(func=cmd_emoji_list)
    emoji_add = emoji_sub.add_parser("add", help="Add a custom emoji")
    emoji_add.add_argument("emoji")
    emoji_add.set_defaults(func=cmd_emoji_add)
    emoji_remove = emoji_sub.add_parser("remove", help="Remove a custom emoji")
    emoji_remove.add_argument("emoji")
    emoji_remove.set_defaults(func=cmd_emoji_remove)

    return p


def main(argv=None) -> None:
    p = build_parser()
    args = p.parse_args(argv)

    args.config = load_config(args.data, args.profile, args.strict, args.log_level)
    setup_logging(args.config.log_level, args.config.log_file)

    kv = JsonKeyValueStore(args.config.data_path, strict=args.config.on_corrupt == "raise")
    args.store = EntryStore(kv, on_corrupt=args.config.on_corrupt)
    args.settings = Settings(kv)

    try:
        args.func(args)
    except StorageError as e:
        raise SystemExit(f"Storage error: {e}") from e


if __name__ == "__main__":
    main()
