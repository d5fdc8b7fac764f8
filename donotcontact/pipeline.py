"""
Resolution pipeline - finds a contact channel for each pending organization.

Per organization:
1. Stage A: search for the contact page
2. Stage B: load the page, extract emails / forms, pick the channel
3. Write the terminal status (success, failed or manual) and attempt rows

Each stage returns one of a closed set of outcome types. Only the terminal
outcome changes the organization's status; an interrupted run leaves the
current organization pending.
"""

import logging
from dataclasses import dataclass, field
from typing import Callable, Optional, Union

from donotcontact.db import FAILED, MANUAL, SUCCESS, Organization, OrganizationStore
from donotcontact.errors import NoActionableChannel, ResolutionError
from donotcontact.search import ContactPage
from donotcontact.selector import (
    NONE,
    ContactChannel,
    ExtractionResult,
    require_channel,
    select_channel,
)

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Stage outcomes
# ---------------------------------------------------------------------------

@dataclass
class SearchFailed:
    error: str


@dataclass
class ContactPageFound:
    page: ContactPage


@dataclass
class ExtractionFailed:
    page: ContactPage
    error: str


@dataclass
class NoChannel:
    page: ContactPage
    reason: str
    extraction: Optional[ExtractionResult] = None


@dataclass
class ChannelFound:
    page: ContactPage
    channel: ContactChannel


SearchOutcome = Union[SearchFailed, ContactPageFound]
TerminalOutcome = Union[SearchFailed, ExtractionFailed, NoChannel, ChannelFound]


@dataclass
class OutcomeRecord:
    """Fields written to the store for a terminal outcome."""
    status: str
    contact_type: str = NONE
    contact_value: Optional[str] = None
    website: Optional[str] = None
    error_message: Optional[str] = None
    attempt: Optional[tuple] = None


def outcome_record(outcome: TerminalOutcome) -> OutcomeRecord:
    """Translate a terminal outcome into the organization update."""
    if isinstance(outcome, SearchFailed):
        return OutcomeRecord(
            status=FAILED,
            error_message=outcome.error,
            attempt=("search", False, {"error": outcome.error}),
        )

    if isinstance(outcome, ExtractionFailed):
        return OutcomeRecord(
            status=FAILED,
            website=outcome.page.website_origin,
            error_message=outcome.error,
            attempt=("contact_find", False, {"url": outcome.page.contact_url, "error": outcome.error}),
        )

    if isinstance(outcome, NoChannel):
        return OutcomeRecord(
            status=MANUAL,
            website=outcome.page.website_origin,
            error_message=outcome.reason,
            attempt=("contact_find", False, {"url": outcome.page.contact_url, "type": NONE}),
        )

    if isinstance(outcome, ChannelFound):
        channel = outcome.channel
        return OutcomeRecord(
            status=SUCCESS,
            contact_type=channel.contact_type,
            contact_value=channel.contact_value,
            website=outcome.page.website_origin,
            attempt=("contact_find", True, {
                "type": channel.contact_type,
                "email": channel.email,
                "formUrl": channel.form_url,
            }),
        )

    raise TypeError(f"Not a terminal outcome: {outcome!r}")


@dataclass
class BatchResult:
    """Tally of one pipeline pass."""
    processed: int = 0
    success: int = 0
    failed: int = 0
    manual: int = 0
    statuses: dict = field(default_factory=dict)

    def add(self, name: str, status: str) -> None:
        self.processed += 1
        self.statuses[name] = status
        if status == SUCCESS:
            self.success += 1
        elif status == MANUAL:
            self.manual += 1
        else:
            self.failed += 1


# ---------------------------------------------------------------------------
# Pipeline
# ---------------------------------------------------------------------------

class ResolutionPipeline:
    """
    Orchestrates search and extraction for pending organizations.

    The search client, extractor and store are passed in; the pipeline
    keeps no progress of its own between runs.

    Usage:
        pipeline = ResolutionPipeline(store, BraveSearch(key), ContactExtractor())
        result = pipeline.run()
    """

    def __init__(self, store: Optional[OrganizationStore], search, extractor):
        self.store = store
        self.search = search
        self.extractor = extractor

    def search_stage(self, org_name: str) -> SearchOutcome:
        """Stage A: find the contact page."""
        try:
            page = self.search.find_contact_page(org_name)
        except ResolutionError as exc:
            logger.warning("Search failed for '%s': %s", org_name, exc)
            return SearchFailed(error=str(exc))
        except Exception as exc:
            logger.exception("Unexpected search error for '%s'", org_name)
            return SearchFailed(error=f"Unexpected error: {exc}")

        if not page or not page.contact_url:
            return SearchFailed(error="No contact page found")
        return ContactPageFound(page=page)

    def extract_stage(self, org_name: str, page: ContactPage) -> TerminalOutcome:
        """Stage B: load the contact page and select a channel."""
        try:
            extraction = self.extractor.extract(page.contact_url)
        except ResolutionError as exc:
            logger.warning("Extraction failed for '%s' (%s): %s", org_name, page.contact_url, exc)
            return ExtractionFailed(page=page, error=str(exc))
        except Exception as exc:
            logger.exception("Unexpected extraction error for '%s'", org_name)
            return ExtractionFailed(page=page, error=f"Unexpected error: {exc}")

        try:
            channel = require_channel(select_channel(org_name, page.contact_url, extraction))
        except NoActionableChannel as exc:
            logger.info("No channel for '%s' at %s", org_name, page.contact_url)
            return NoChannel(page=page, reason=str(exc), extraction=extraction)

        return ChannelFound(page=page, channel=channel)

    def resolve(self, org_name: str) -> TerminalOutcome:
        """Run both stages without touching the store."""
        found = self.search_stage(org_name)
        if isinstance(found, SearchFailed):
            return found
        return self.extract_stage(org_name, found.page)

    def process(self, org: Organization) -> TerminalOutcome:
        """Run both stages for one organization and persist the outcome."""
        if self.store is None:
            raise RuntimeError("process() needs a store; use resolve() without one")

        name = org.name
        found = self.search_stage(name)

        if isinstance(found, ContactPageFound):
            self.store.append_attempt(name, "search", True, {"url": found.page.contact_url})
            if found.page.website_origin and not org.website:
                self.store.cache_website(name, found.page.website_origin)
            outcome = self.extract_stage(name, found.page)
        else:
            outcome = found

        record = outcome_record(outcome)
        self.store.record_outcome(
            name,
            status=record.status,
            contact_type=record.contact_type,
            contact_value=record.contact_value,
            website=record.website,
            error_message=record.error_message,
            attempt=record.attempt,
        )
        return outcome

    def run(
        self,
        limit: Optional[int] = None,
        on_result: Optional[Callable[[Organization, TerminalOutcome], None]] = None,
    ) -> BatchResult:
        """
        Process every pending organization once, in name order.

        One organization's failure never stops the batch.
        """
        pending = self.store.list_by_status("pending")
        if limit is not None:
            pending = pending[:limit]

        logger.info("Processing %d pending organizations", len(pending))
        result = BatchResult()

        for i, org in enumerate(pending, 1):
            logger.info("[%d/%d] %s", i, len(pending), org.name)
            outcome = self.process(org)
            status = outcome_record(outcome).status
            result.add(org.name, status)
            if on_result:
                on_result(org, outcome)

        logger.info(
            "Batch complete: %d success, %d failed, %d manual",
            result.success, result.failed, result.manual,
        )
        return result
