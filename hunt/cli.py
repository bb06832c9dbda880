"""
Command-line interface for hunt.

Usage:
    hunt email ~/Downloads/alerts/*.eml
    hunt fetch --limit 20
    hunt list --status new
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import List, Optional

from hunt.config import get_settings
from hunt.storage.sqlite import EMPLOYER_STATUSES, JOB_STATUSES, JobDatabase


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    settings = get_settings()

    parser = argparse.ArgumentParser(
        prog="hunt",
        description="Collect job postings from alert emails and pages, without duplicates",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Import saved alert emails
  hunt email ~/Downloads/alerts/*.eml

  # Preview without storing
  hunt email alert.eml --dry-run

  # Add a posting from pasted text or a saved page
  hunt add posting.txt --url https://www.linkedin.com/jobs/view/123456/
  hunt add --title "Staff Engineer" --employer Acme

  # Fetch full descriptions with a logged-in browser profile
  hunt fetch --profile ~/.config/hunt-chrome --limit 20

  # Push an employer down the ranking, then rank open jobs
  hunt employer yuck "Initech"
  hunt rank --limit 20

  # Remove duplicates and link artifacts
  hunt cleanup --all --dry-run
""",
    )
    parser.add_argument(
        "--db",
        default=settings.db_path,
        help=f"SQLite database path (default: {settings.db_path})",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Print progress messages",
    )

    sub = parser.add_subparsers(dest="command", required=True)

    # add
    p = sub.add_parser("add", help="Add one posting")
    p.add_argument("file", nargs="?", help="Pasted posting text, or a saved .html page")
    p.add_argument("--url", help="Posting URL")
    p.add_argument("--title", help="Job title (overrides what is parsed)")
    p.add_argument("--employer", help="Employer name (overrides what is parsed)")

    # list
    p = sub.add_parser("list", help="List stored jobs")
    p.add_argument("--status", choices=JOB_STATUSES, help="Only jobs with this status")
    p.add_argument("--employer", help="Only jobs at this employer")

    # status
    p = sub.add_parser("status", help="Set a job's status")
    p.add_argument("job_id", type=int)
    p.add_argument("status", choices=JOB_STATUSES)

    # show
    p = sub.add_parser("show", help="Show one job with its snapshots")
    p.add_argument("job_id", type=int)

    # rank
    p = sub.add_parser("rank", help="Rank open jobs by pay and employer")
    p.add_argument("--limit", "-n", type=int, default=10, help="Number of jobs to show (default: 10)")

    # employer
    p = sub.add_parser("employer", help="Manage employers")
    emp = p.add_subparsers(dest="employer_command", required=True)
    e = emp.add_parser("list", help="List employers")
    e.add_argument("--status", choices=EMPLOYER_STATUSES, help="Only employers with this status")
    e = emp.add_parser("block", help="Never apply to this employer")
    e.add_argument("name")
    e = emp.add_parser("yuck", help="Apply to this employer reluctantly")
    e.add_argument("name")
    e = emp.add_parser("ok", help="Clear the employer's status")
    e.add_argument("name")
    e = emp.add_parser("show", help="Show one employer")
    e.add_argument("name")

    # email
    p = sub.add_parser("email", help="Import job-alert emails (.eml files)")
    p.add_argument("files", nargs="+", help="Raw RFC 822 message files")
    p.add_argument("--dry-run", action="store_true", help="Parse and report without storing")

    # fetch
    p = sub.add_parser("fetch", help="Fetch full descriptions for stored jobs")
    p.add_argument("--limit", type=int, default=None, help="Max jobs to fetch")
    p.add_argument("--force", action="store_true", help="Re-fetch jobs that already have a description")
    p.add_argument(
        "--delay",
        type=int,
        default=settings.fetch_delay_s,
        help=f"Base seconds between fetches (default: {settings.fetch_delay_s})",
    )
    p.add_argument("--profile", default=settings.browser_user_data_dir, help="Chrome profile directory")
    p.add_argument(
        "--headless",
        action=argparse.BooleanOptionalAction,
        default=settings.browser_headless,
        help="Run the browser without a window",
    )

    # cleanup
    p = sub.add_parser("cleanup", help="Remove duplicates and link artifacts")
    group = p.add_mutually_exclusive_group()
    group.add_argument("--artifacts", action="store_true", help="Only remove link artifacts")
    group.add_argument("--duplicates", action="store_true", help="Only remove duplicates")
    group.add_argument("--all", action="store_true", help="Remove both (default)")
    p.add_argument("--dry-run", action="store_true", help="Report without deleting")

    # export
    p = sub.add_parser("export", help="Export jobs to CSV")
    p.add_argument("--csv", default="jobs.csv", help="CSV export path (default: jobs.csv)")
    p.add_argument("--status", choices=JOB_STATUSES, help="Only jobs with this status")

    return parser.parse_args(argv)


def _format_pay(job: dict) -> str:
    lo, hi = job.get("pay_min"), job.get("pay_max")
    if lo and hi:
        return f"${lo // 1000}k-${hi // 1000}k"
    if lo:
        return f"${lo // 1000}k+"
    return ""


# ----------------------------- Commands -----------------------------

def cmd_add(args: argparse.Namespace, db: JobDatabase) -> int:
    from hunt.extract.posting import parse_pasted_text, parse_posting
    from hunt.models import ParsedJob
    from hunt.pipeline import admit_job

    if args.file:
        path = Path(args.file)
        content = path.read_text(encoding="utf-8", errors="replace")
        if path.suffix.lower() in (".html", ".htm"):
            job = parse_posting(content, url=args.url, title=args.title, employer=args.employer)
        else:
            job = parse_pasted_text(content, url=args.url)
            if job and (args.title or args.employer):
                job = ParsedJob(**{
                    **job.to_dict(),
                    "title": args.title or job.title,
                    "employer": args.employer or job.employer,
                })
    elif args.title:
        job = ParsedJob(title=args.title, employer=args.employer, url=args.url)
    else:
        print("Error: give a posting file or --title", file=sys.stderr)
        return 2

    if job is None:
        print("Error: no job title found", file=sys.stderr)
        return 1

    is_new, job_id = admit_job(job, db)
    if is_new:
        print(f"Added job #{job_id}: {job.title} at {job.employer or '?'}")
    else:
        print(f"Duplicate of job #{job_id}: {job.title} at {job.employer or '?'}")
    return 0


def cmd_list(args: argparse.Namespace, db: JobDatabase) -> int:
    jobs = db.list_jobs(status=args.status, employer=args.employer)
    if not jobs:
        print("No jobs found.")
        return 0
    for job in jobs:
        pay = _format_pay(job)
        print(
            f"#{job['id']:<5} [{job['status']:<9}] {job['title']} "
            f"at {job['employer'] or '?'}"
            + (f"  {pay}" if pay else "")
        )
    print(f"\n{len(jobs)} job(s)")
    return 0


def cmd_status(args: argparse.Namespace, db: JobDatabase) -> int:
    if db.get_job(args.job_id) is None:
        print(f"Error: no job #{args.job_id}", file=sys.stderr)
        return 1
    db.set_status(args.job_id, args.status)
    print(f"Job #{args.job_id} -> {args.status}")
    return 0


def cmd_show(args: argparse.Namespace, db: JobDatabase) -> int:
    job = db.get_job(args.job_id)
    if job is None:
        print(f"Error: no job #{args.job_id}", file=sys.stderr)
        return 1

    print(f"Job #{job['id']}")
    print(f"Title:    {job['title']}")
    if job["employer"]:
        marker = f" ({job['employer_status']})" if job["employer_status"] != "ok" else ""
        print(f"Employer: {job['employer']}{marker}")
    print(f"Status:   {job['status']}")
    for label, key in (("URL", "url"), ("Source", "source"), ("Location", "location"), ("Job code", "job_code")):
        if job[key]:
            print(f"{label + ':':<9} {job[key]}")
    lo, hi = job["pay_min"], job["pay_max"]
    if lo and hi:
        print(f"Pay:      ${lo:,} - ${hi:,}")
    elif lo:
        print(f"Pay:      ${lo:,}+")
    elif hi:
        print(f"Pay:      up to ${hi:,}")
    if job["no_longer_accepting"]:
        print("No longer accepting applications")
    print(f"Created:  {job['created_at']}")
    if job["described_at"]:
        print(f"Fetched:  {job['described_at']}")

    snapshots = db.get_snapshots(job["id"])
    print(f"\nSnapshots: {len(snapshots)}")
    for snap in snapshots:
        print(f"  #{snap['id']} {snap['captured_at']} ({len(snap['raw_text'])} chars)")
    if job["raw_text"]:
        print(f"\n--- Raw Text ---\n{job['raw_text']}")
    return 0


def cmd_rank(args: argparse.Namespace, db: JobDatabase) -> int:
    from hunt.scoring import rank_jobs

    ranked = rank_jobs(db.list_jobs(), limit=args.limit)
    if not ranked:
        print("No jobs to rank.")
        return 0

    print(f"{'RANK':<5} {'ID':<6} {'STATUS':<10} {'TITLE':<30} {'EMPLOYER':<20} {'SCORE':>6}")
    print("-" * 82)
    for i, (job, breakdown) in enumerate(ranked, start=1):
        print(
            f"{i:<5} {job['id']:<6} {job['status']:<10} {job['title'][:30]:<30} "
            f"{(job['employer'] or '')[:20]:<20} {breakdown.score:>6.1f}"
        )
        if args.verbose and breakdown.reasons:
            print(f"      {'; '.join(breakdown.reasons)}")
    return 0


def cmd_employer(args: argparse.Namespace, db: JobDatabase) -> int:
    if args.employer_command == "list":
        employers = db.list_employers(status=args.status)
        if not employers:
            print("No employers found.")
            return 0
        print(f"{'ID':<6} {'STATUS':<8} {'JOBS':>5}  NAME")
        print("-" * 50)
        for emp in employers:
            print(f"{emp['id']:<6} {emp['status']:<8} {emp['job_count']:>5}  {emp['name']}")
        return 0

    if args.employer_command == "show":
        emp = db.get_employer(args.name)
        if emp is None:
            print(f"Employer '{args.name}' not found.")
            return 1
        print(f"Employer #{emp['id']}")
        print(f"Name:   {emp['name']}")
        print(f"Status: {emp['status']}")
        print(f"Jobs:   {emp['job_count']}")
        if emp["notes"]:
            print(f"Notes:  {emp['notes']}")
        return 0

    status = {"block": "never", "yuck": "yuck", "ok": "ok"}[args.employer_command]
    db.set_employer_status(args.name, status)
    label = {"never": "NEVER (blocked)", "yuck": "YUCK (undesirable)", "ok": "OK"}[status]
    print(f"Marked '{args.name}' as {label}.")
    return 0


def cmd_email(args: argparse.Namespace, db: JobDatabase) -> int:
    from hunt.pipeline import EmailResult, ingest_emails

    def report(result: EmailResult) -> None:
        print(f"{result.subject or '(no subject)'}  [{result.date}]")
        for jr in result.jobs_found:
            print(f"  [{jr.status}] {jr.title} at {jr.employer}")

    messages = (Path(f).read_bytes() for f in args.files)
    stats = ingest_emails(messages, db, dry_run=args.dry_run, on_result=report)

    print()
    print("=" * 50)
    print("Email Summary")
    print("=" * 50)
    print(f"  Emails:     {stats.emails_found}")
    print(f"  Added:      {stats.jobs_added}")
    print(f"  Duplicates: {stats.duplicates}")
    print(f"  Errors:     {stats.errors}")
    return 0 if not stats.errors else 1


async def _fetch(args: argparse.Namespace, db: JobDatabase) -> int:
    from hunt.fetchers.browser import BrowserConfig, BrowserFetcher
    from hunt.pipeline import fetch_descriptions

    settings = get_settings()
    config = BrowserConfig.from_settings(settings)
    config.headless = args.headless
    config.user_data_dir = args.profile

    def progress(i: int, total: int, job: dict, error: Optional[str]) -> None:
        outcome = f"FAILED: {error}" if error else "ok"
        print(f"[{i}/{total}] #{job['id']} {job['title']} ... {outcome}")

    async with BrowserFetcher(config) as fetcher:
        if not fetcher.is_available:
            print(
                "Error: Playwright not installed. Install with: "
                "pip install playwright && playwright install chromium",
                file=sys.stderr,
            )
            return 1
        stats = await fetch_descriptions(
            db,
            fetcher,
            delay_s=args.delay,
            jitter_ratio=settings.fetch_jitter_ratio,
            limit=args.limit,
            force=args.force,
            on_progress=progress,
        )

    if not stats.total:
        print("No jobs need descriptions.")
        return 0

    print()
    print(f"Fetched: {stats.fetched}  Failed: {stats.failed}  Closed: {stats.closed}")
    return 0 if not stats.failed else 1


def cmd_fetch(args: argparse.Namespace, db: JobDatabase) -> int:
    return asyncio.run(_fetch(args, db))


def cmd_cleanup(args: argparse.Namespace, db: JobDatabase) -> int:
    from hunt.pipeline import cleanup_artifacts, cleanup_duplicates

    do_all = args.all or not (args.artifacts or args.duplicates)
    verb = "Would remove" if args.dry_run else "Removed"

    if args.artifacts or do_all:
        artifacts = cleanup_artifacts(db, dry_run=args.dry_run)
        for record in artifacts:
            print(f"  artifact #{record.id}: {record.title!r}")
        print(f"{verb} {len(artifacts)} artifact(s)")

    if args.duplicates or do_all:
        pairs = cleanup_duplicates(db, dry_run=args.dry_run)
        for pair in pairs:
            print(f"  [{pair.rule}] {pair.description}")
        print(f"{verb} {len(pairs)} duplicate(s)")

    return 0


def cmd_export(args: argparse.Namespace, db: JobDatabase) -> int:
    count = db.export_to_csv(args.csv, status=args.status)
    print(f"Exported {count} job(s) to {args.csv}")
    return 0


COMMANDS = {
    "add": cmd_add,
    "list": cmd_list,
    "status": cmd_status,
    "show": cmd_show,
    "rank": cmd_rank,
    "employer": cmd_employer,
    "email": cmd_email,
    "fetch": cmd_fetch,
    "cleanup": cmd_cleanup,
    "export": cmd_export,
}


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    args = parse_args(argv)

    level = logging.DEBUG if args.verbose else get_settings().log_level
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")

    db = JobDatabase(args.db)
    try:
        return COMMANDS[args.command](args, db)
    except KeyboardInterrupt:
        print("\nInterrupted by user")
        return 130
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        if args.verbose:
            import traceback
            traceback.print_exc()
        return 1
    finally:
        db.close()


if __name__ == "__main__":
    sys.exit(main())
