#!/usr/bin/env python3
"""
Do Not Contact
==============

Finds a contact channel (email address or web form) for each organization
on a donations opt-out list, then emails each one a polite request to be
removed from its postal mailing list.

Usage:
    python main.py import -f donations-opt-out-list.txt   # Load names into the database
    python main.py search -n 5                           # Look up official websites
    python main.py contact-search                        # Look up contact pages only
    python main.py find-contacts -n 5                    # Search + extract, no database
    python main.py batch                                 # Process every pending organization
    python main.py status                                # Show progress
    python main.py reset --all                           # Put organizations back to pending
    python main.py send-emails --dry-run                 # Preview opt-out emails
    python main.py send-emails --test me@example.com     # Check SMTP settings
    python main.py send-emails                           # Send opt-out emails
"""

import argparse
import logging
import sys
import os

# Ensure project root is on the path
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from donotcontact import config
from donotcontact.db import FAILED, MANUAL, PENDING, SUCCESS, OrganizationStore
from donotcontact.errors import DoNotContactError
from donotcontact.extractor import ContactExtractor
from donotcontact.pipeline import ChannelFound, ResolutionPipeline, SearchFailed, outcome_record
from donotcontact.ranker import HIGH, LOW, MEDIUM
from donotcontact.search import BraveSearch
from donotcontact.selector import BOTH, EMAIL, FORM
from donotcontact.throttle import RateLimiter
from donotcontact.outreach import (
    SmtpMailer,
    TranscriptLog,
    load_identity,
    load_smtp_settings,
    send_opt_out_emails,
    send_test_email,
)
from donotcontact.outreach.config import get_config

logger = logging.getLogger("main")

STATUS_ICONS = {SUCCESS: "✅", FAILED: "❌", MANUAL: "✋", PENDING: "⏳"}
CONTACT_ICONS = {EMAIL: "📧", FORM: "📝", BOTH: "📧📝"}


def setup_logging(verbose: bool = False) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    # Quieten noisy libraries
    logging.getLogger("urllib3").setLevel(logging.WARNING)
    logging.getLogger("requests").setLevel(logging.WARNING)


def load_org_names(path: str, limit: int | None = None) -> list[str]:
    """Read organization names, one per line, skipping blank lines."""
    try:
        with open(path, encoding="utf-8") as f:
            names = [line.strip() for line in f if line.strip()]
    except OSError as e:
        raise DoNotContactError(f"Error reading file: {path} ({e})") from e
    if limit is not None:
        names = names[:limit]
    return names


def _store(args) -> OrganizationStore:
    store = OrganizationStore(args.db)
    store.init_db()
    return store


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------

def cmd_import(args):
    names = load_org_names(args.file)
    store = _store(args)
    imported = store.import_organizations(names)
    stats = store.get_stats()

    print(f"\nImported {imported} new organizations")
    print(f"Total in database: {stats['total']}")


def cmd_search(args):
    api_key = config.require_search_key()
    names = load_org_names(args.file, args.limit)

    print(f"\nSearching for {len(names)} organizations...\n")
    print("-" * 80)

    search = BraveSearch(api_key)
    counts = {HIGH: 0, MEDIUM: 0, LOW: 0, 'failed': 0}
    try:
        for name in names:
            try:
                match = search.find_website(name)
            except DoNotContactError as e:
                counts['failed'] += 1
                print(f"{name:<40} ❌ {e}")
                continue
            counts[match.confidence] += 1
            icon = {HIGH: "✅", MEDIUM: "⚠️"}.get(match.confidence, "❓")
            print(f"{name:<40} {icon} {match.url}")
    finally:
        search.close()

    print("-" * 80)
    print("\nSummary:")
    print(f"  High confidence:   {counts[HIGH]}")
    print(f"  Medium confidence: {counts[MEDIUM]}")
    print(f"  Low confidence:    {counts[LOW]}")
    print(f"  Failed:            {counts['failed']}")
    print(f"  Total:             {len(names)}")


def cmd_contact_search(args):
    api_key = config.require_search_key()
    names = load_org_names(args.file, args.limit)

    print(f"\nSearching for contact pages for {len(names)} organizations...\n")
    print("-" * 100)

    search = BraveSearch(api_key)
    found = 0
    try:
        for name in names:
            try:
                page = search.find_contact_page(name)
            except DoNotContactError as e:
                print(f"{name:<40} ❌ {e}")
                continue
            found += 1
            print(f"{name:<40} -> {page.contact_url[:55]}")
    finally:
        search.close()

    print("-" * 100)
    print("\nSummary:")
    print(f"  Found contact pages: {found}")
    print(f"  Failed:              {len(names) - found}")
    print(f"  Total:               {len(names)}")


def _print_outcome(outcome) -> None:
    if isinstance(outcome, SearchFailed):
        print(f"   ❌ Search: {outcome.error}")
        return

    print(f"   Contact page: {outcome.page.contact_url[:70]}")
    if isinstance(outcome, ChannelFound):
        channel = outcome.channel
        print(f"   {CONTACT_ICONS.get(channel.contact_type, '')} {channel.contact_type}")
        if channel.email:
            print(f"   └─ Email: {channel.email}")
        if channel.form_url and channel.contact_type != EMAIL:
            print(f"   └─ Form: {channel.form_url[:60]}")
    else:
        record = outcome_record(outcome)
        print(f"   {STATUS_ICONS[record.status]} {record.error_message}")


def cmd_find_contacts(args):
    api_key = config.require_search_key()
    names = load_org_names(args.file, args.limit)

    print(f"\nFinding contact info for {len(names)} organizations...\n")
    print("-" * 100)

    with ContactExtractor() as extractor:
        search = BraveSearch(api_key)
        pipeline = ResolutionPipeline(None, search, extractor)
        with_email = []
        counts = {SUCCESS: 0, FAILED: 0, MANUAL: 0}
        try:
            for name in names:
                print(f"\n🔍 {name}")
                outcome = pipeline.resolve(name)
                _print_outcome(outcome)
                counts[outcome_record(outcome).status] += 1
                if isinstance(outcome, ChannelFound) and outcome.channel.email:
                    with_email.append((name, outcome.channel.email))
        finally:
            search.close()

    print("\n" + "-" * 100)
    print("\nSummary:")
    print(f"  With email:         {len(with_email)}")
    print(f"  Form only:          {counts[SUCCESS] - len(with_email)}")
    print(f"  No contact found:   {counts[MANUAL]}")
    print(f"  Failed:             {counts[FAILED]}")
    print(f"  Total:              {len(names)}")

    if with_email:
        print("\nOrgs with email contacts:")
        for name, email in with_email:
            print(f"  - {name}: {email}")


def cmd_batch(args):
    api_key = config.require_search_key()
    store = _store(args)

    pending = store.list_by_status(PENDING)
    if not pending:
        print("\nNo pending organizations to process.")
        print("Use 'import' to add organizations or 'status' to see current state.")
        return

    total = min(len(pending), args.limit) if args.limit is not None else len(pending)
    print(f"\nProcessing {total} pending organizations...\n")
    print("-" * 100)

    def on_result(org, outcome):
        print(f"\n🔍 {org.name}")
        _print_outcome(outcome)

    with ContactExtractor() as extractor:
        search = BraveSearch(api_key)
        try:
            result = ResolutionPipeline(store, search, extractor).run(
                limit=args.limit, on_result=on_result,
            )
        finally:
            search.close()

    print("\n" + "-" * 100)
    print("\nBatch complete!")
    print(f"  ✅ Success: {result.success}")
    print(f"  ❌ Failed:  {result.failed}")
    print(f"  ✋ Manual:  {result.manual}")
    print(f"  ⏳ Pending: {store.get_stats()['pending']}")


def cmd_status(args):
    store = _store(args)
    stats = store.get_stats()
    orgs = store.get_all_organizations()

    print("\n" + "=" * 80)
    print("  DO NOT CONTACT - Status Report")
    print("=" * 80)

    print("\nSummary:")
    print(f"  Total organizations: {stats['total']}")
    print(f"  Pending:    {stats['pending']}")
    print(f"  Success:    {stats['success']}")
    print(f"  Failed:     {stats['failed']}")
    print(f"  Manual:     {stats['manual']}")
    print(f"  With email: {stats['with_email']}")
    print(f"  With form:  {stats['with_form']}")

    if orgs:
        print("\n" + "-" * 80)
        print("Organizations:\n")
        for org in orgs:
            icon = STATUS_ICONS.get(org.status, "  ")
            contact = CONTACT_ICONS.get(org.contact_type, "  ")
            value = f" -> {org.contact_value[:40]}" if org.contact_value else ""
            print(f"  {icon} {contact} {org.name:<35}{value}")

    print("\n" + "=" * 80)


def cmd_reset(args):
    store = _store(args)
    if args.all:
        count = store.reset_all()
        print(f"\nReset {count} organizations to pending")
        return
    if not args.names:
        print("Give organization names or --all")
        sys.exit(1)
    for name in args.names:
        if store.reset(name):
            print(f"Reset: {name}")
        else:
            print(f"Not found: {name}")


def cmd_send_emails(args):
    identity = load_identity()
    settings = load_smtp_settings()
    mailer = SmtpMailer(settings, identity)

    if args.test:
        print("\n" + "=" * 80)
        print("  DO NOT CONTACT - Test Email")
        print("=" * 80)
        print(f"\nFrom: {mailer.from_header}")
        print(f"To: {args.test}")
        print(f"\nConnecting to SMTP server: {settings.host}:{settings.port}...")

        result = send_test_email(mailer, args.test)
        if result.success:
            print("\n✅ Test email sent successfully!")
            print(f"Message ID: {result.message_id}")
        else:
            print(f"\n❌ Failed to send test email: {result.error}")
            sys.exit(1)
        return

    store = _store(args)

    print("\n" + "=" * 80)
    print("  DO NOT CONTACT - Email Sender")
    print("=" * 80)
    print(f"\nSending from: {mailer.from_header}")

    if args.dry_run:
        tally = send_opt_out_emails(
            store, mailer, identity, org=args.org, dry_run=True, resend=args.resend,
        )
        print("\n[DRY RUN - No emails will be sent]\n")
        print("-" * 80)
        for preview in tally.previews:
            print(f"\nTo: {preview.to_email}")
            print(f"Subject: {preview.subject}")
            print("-" * 40)
            print(preview.body)
            print("-" * 80)
        _print_skipped(tally)
        return

    transcript = TranscriptLog()
    limiter = RateLimiter(get_config()['SEND_DELAY_SECONDS'])

    def on_result(result):
        if result.success:
            print(f"Sending to {result.org_name:<35} -> {result.to_email}... ✅")
        else:
            print(f"Sending to {result.org_name:<35} -> {result.to_email}... ❌ {result.error}")

    print(f"\nConnecting to SMTP server: {settings.host}:{settings.port}...")
    tally = send_opt_out_emails(
        store, mailer, identity,
        transcript=transcript,
        limiter=limiter,
        org=args.org,
        resend=args.resend,
        on_result=on_result,
    )
    _print_skipped(tally)

    if tally.total == 0:
        print("\nNo organizations to email.")
        print("Run 'batch' first to find contact information.")
        return

    print("\n" + "-" * 80)
    print(f"\nComplete! Sent: {tally.sent}, Failed: {tally.failed}")
    print(f"Log file: {transcript.path}")


def _print_skipped(tally) -> None:
    if tally.skipped:
        print(f"\nSkipped {len(tally.skipped)} already emailed (use --resend to send again):")
        for org in tally.skipped:
            print(f"  - {org.name}")


def main() -> None:
    parser = argparse.ArgumentParser(
        description="Do Not Contact - automate opt-out requests to nonprofit organizations",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument(
        "--verbose", "-v", action="store_true",
        help="Enable debug logging",
    )
    parser.add_argument(
        "--db", type=str, default=None,
        help=f"Path to the SQLite database (default: {config.DB_PATH})",
    )

    subparsers = parser.add_subparsers(dest='command', help='Commands')

    def add_file_args(p, with_limit=True):
        p.add_argument('--file', '-f', default=config.DEFAULT_ORG_FILE, help='Path to org list file')
        if with_limit:
            p.add_argument('--limit', '-n', type=int, default=None, help='Limit number of orgs to process')

    # import
    import_parser = subparsers.add_parser('import', help='Import organizations from file into the database')
    add_file_args(import_parser, with_limit=False)

    # search
    add_file_args(subparsers.add_parser('search', help='Look up websites for organizations'))

    # contact-search
    add_file_args(subparsers.add_parser('contact-search', help='Search for contact pages directly'))

    # find-contacts
    add_file_args(subparsers.add_parser('find-contacts', help='Find contact info (email/form) without saving'))

    # batch
    batch_parser = subparsers.add_parser('batch', help='Process all pending organizations')
    batch_parser.add_argument('--limit', '-n', type=int, default=None, help='Limit number of orgs to process')

    # status
    subparsers.add_parser('status', help='Show processing status of all organizations')

    # reset
    reset_parser = subparsers.add_parser('reset', help='Put organizations back to pending')
    reset_parser.add_argument('names', nargs='*', help='Organization names')
    reset_parser.add_argument('--all', action='store_true', help='Reset every organization')

    # send-emails
    send_parser = subparsers.add_parser('send-emails', help='Send opt-out emails to organizations with email contacts')
    send_parser.add_argument('--dry-run', action='store_true', help='Preview emails without sending')
    send_parser.add_argument('--test', metavar='EMAIL', help='Send a test email to verify SMTP configuration')
    send_parser.add_argument('--org', metavar='NAME', help='Send to a specific organization only')
    send_parser.add_argument('--resend', action='store_true', help='Email organizations that were already emailed')

    args = parser.parse_args()
    setup_logging(args.verbose)

    if not args.command:
        parser.print_help()
        return

    # Command dispatch
    commands = {
        'import': cmd_import,
        'search': cmd_search,
        'contact-search': cmd_contact_search,
        'find-contacts': cmd_find_contacts,
        'batch': cmd_batch,
        'status': cmd_status,
        'reset': cmd_reset,
        'send-emails': cmd_send_emails,
    }

    try:
        commands[args.command](args)
    except DoNotContactError as e:
        logger.debug("Command failed", exc_info=True)
        print(f"\nError: {e}")
        sys.exit(1)
    except KeyboardInterrupt:
        print("\nInterrupted.")
        sys.exit(130)


if __name__ == "__main__":
    main()
