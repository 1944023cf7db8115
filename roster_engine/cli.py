from __future__ import annotations

import argparse
from pathlib import Path

from .config import load_config
from .deck import Deck, deck_stats
from .errors import RosterError
from .exporter import export_csv
from .exporters.apkg import export_apkg
from .ingest import ingest_roster
from .job import create_job_dirs, init_job_outputs, new_job_id, record_error, snapshot_input
from .page_provider import PdfPageRenderer
from .pipeline import RosterPipeline
from .practice import PracticeSession
from .store import JsonDeckStore
from .utils import utc_now_iso
from .writer import JobWriter


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="roster_engine")
    sub = p.add_subparsers(dest="command", required=True)

    ingest = sub.add_parser("ingest", help="Extract students from a roster PDF into a deck")
    ingest.add_argument("--input", required=True, help="Roster PDF")
    ingest.add_argument("--user", required=True, help="Owner of the deck")
    ingest.add_argument("--deck", default=None, help="Deck name (default: input file name)")
    ingest.add_argument("--workspace", default="./workspace", help="Workspace root")
    ingest.add_argument("--config", default=str(Path("config") / "default.json"), help="Config path")
    ingest.add_argument("--scale", type=float, default=None, help="Render scale override")

    decks = sub.add_parser("decks", help="List a user's decks")
    decks.add_argument("--user", required=True)
    decks.add_argument("--workspace", default="./workspace")

    export = sub.add_parser("export", help="Export a deck")
    export.add_argument("--user", required=True)
    export.add_argument("--deck", required=True, help="Deck name")
    export.add_argument("--workspace", default="./workspace")
    export.add_argument("--format", required=True, choices=["csv", "apkg"], help="Export format")
    export.add_argument("--out", required=True, help="Output file path")
    export.add_argument("--tags", default=None, help="Comma separated Anki tags (apkg only)")
    export.add_argument("--skip-mastered", action="store_true", help="Leave mastered cards out (csv only)")

    pr = sub.add_parser("practice", help="Drill a deck in the terminal")
    pr.add_argument("--user", required=True)
    pr.add_argument("--deck", required=True, help="Deck name")
    pr.add_argument("--workspace", default="./workspace")
    pr.add_argument("--hide-mastered", action="store_true")
    pr.add_argument("--shuffle", action="store_true")

    return p


def _find_deck(store: JsonDeckStore, user: str, name: str) -> Deck | None:
    deck = store.find_deck_by_name(user, name)
    if deck is None:
        print(f"deck_not_found: {name}")
    return deck


def cmd_ingest(args: argparse.Namespace) -> int:
    deck_name = (args.deck or Path(args.input).stem).strip()

    job_id = new_job_id()
    paths = create_job_dirs(args.workspace, job_id)
    init_job_outputs(paths)
    snapshot_input(paths, args.input)

    cfg = load_config(args.config)
    pipeline = RosterPipeline(
        renderer=PdfPageRenderer(),
        template=cfg.roster_template(),
        scale=args.scale if args.scale is not None else cfg.render_scale,
        crop_cfg=cfg.crop_config(),
        paths=paths,
    )
    store = JsonDeckStore(args.workspace)
    job_meta = {
        "job_id": job_id,
        "input": str(args.input),
        "deck_name": deck_name,
        "user_id": args.user,
        "template": pipeline.template.to_dict(),
        "scale": pipeline.scale,
        "created_at": utc_now_iso(),
    }

    try:
        result = ingest_roster(args.input, deck_name, args.user, store=store, pipeline=pipeline)
    except RosterError as e:
        record_error(paths, page_id="", stage="ingest", message=str(e))
        print(f"ingest_failed: {e}")
        return 1

    JobWriter(paths=paths).write_final(job_meta, result)
    print(f"deck={result.deck.name} cards_added={result.cards_added} cards_total={len(result.deck.cards)}")
    for w in result.warnings():
        print(f"warning: {w}")
    print(str(paths.job_dir))
    return 0


def cmd_decks(args: argparse.Namespace) -> int:
    store = JsonDeckStore(args.workspace)
    for d in store.list_decks(args.user):
        s = deck_stats(d)
        print(f"{d.name}\tcards={s.total_cards}\tmastered={s.mastered_count}\tpercent={s.mastered_percent}")
    return 0


def cmd_export(args: argparse.Namespace) -> int:
    store = JsonDeckStore(args.workspace)
    deck = _find_deck(store, args.user, args.deck)
    if deck is None:
        return 1
    try:
        if args.format == "csv":
            stats = export_csv(deck, args.out, include_mastered=not args.skip_mastered)
            print(f"exported={stats.cards_exported} skipped_mastered={stats.cards_skipped_mastered}")
        else:
            apkg_stats = export_apkg(deck, args.out, tags=args.tags)
            print(f"exported={apkg_stats.cards_exported} deck={apkg_stats.deck_name}")
        return 0
    except Exception as e:
        print(f"export_failed: {e}")
        return 1


def cmd_practice(args: argparse.Namespace) -> int:
    store = JsonDeckStore(args.workspace)
    deck = _find_deck(store, args.user, args.deck)
    if deck is None:
        return 1

    session = PracticeSession(store, args.user, deck.id, hide_mastered=args.hide_mastered)
    if args.shuffle:
        session.shuffle()

    print("enter: reveal   y/n: grade   >/<: next/previous   q: quit")
    while not session.finished:
        card = session.current
        print(f"[{session.index + 1}/{len(session.cards)}] progress={card.progress} (photo: card {card.id[:8]})")
        if session.showing_name:
            print(f"  -> {card.name}")
        try:
            cmd = input("> ").strip().lower()
        except EOFError:
            break
        if cmd == "q":
            break
        key = {"": " ", ">": "right", "<": "left"}.get(cmd, cmd)
        session.handle_key(key)

    if session.finished:
        print("All students mastered!")
    print(session.summary())
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command == "ingest":
        return cmd_ingest(args)

    if args.command == "decks":
        return cmd_decks(args)

    if args.command == "export":
        return cmd_export(args)

    if args.command == "practice":
        return cmd_practice(args)

    raise SystemExit(2)


if __name__ == "__main__":
    raise SystemExit(main())
