"""Event processor for enriching raw calendar entries."""
import logging
from datetime import datetime
from typing import List, Optional

from processor.classifier import classify_activity, strip_title_noise
from processor.extractors import event_status, extract_capacity
from processor.models import ActivityClassification, NormalizedRecord, RawEntry
from processor.roster_parser import parse_roster

logger = logging.getLogger(__name__)


class EventProcessor:
    """Processor turning raw entries into normalized activity records."""

    GENERAL_CATEGORY = 'general-activity'
    GENERAL_COLOR = '#6b7280'

    def process_events(
        self,
        raw_entries: List[RawEntry],
        now: datetime
    ) -> List[NormalizedRecord]:
        """
        Process a batch of raw entries.

        Every entry yields a record; an entry that fails enrichment is
        emitted with defaulted fields instead of dropping the batch.

        Args:
            raw_entries: List of RawEntry objects from the calendar source
            now: Reference instant for status derivation

        Returns:
            List of NormalizedRecord objects in input order
        """
        records = []
        failed = 0

        for entry in raw_entries:
            try:
                records.append(self._process_single_entry(entry, now))
            except Exception as e:
                failed += 1
                logger.warning(
                    f"Failed to enrich entry '{entry.id}' ({entry.title!r}): {e}"
                )
                records.append(NormalizedRecord.from_entry(entry))

        logger.info(
            f"Processed {len(records)} records from {len(raw_entries)} entries "
            f"({failed} defaulted)"
        )
        return records

    def _process_single_entry(
        self,
        entry: RawEntry,
        now: datetime
    ) -> NormalizedRecord:
        """
        Process a single entry.

        Each derived field is computed independently; a field whose
        extraction raises is logged and left at its default.

        Args:
            entry: Raw entry
            now: Reference instant

        Returns:
            NormalizedRecord
        """
        title = entry.title or ''
        enrichment = {}

        try:
            enrichment['classification'] = self.classify(title)
        except Exception as e:
            self._log_field_failure(entry, 'classification', e)

        try:
            enrichment['roster'] = parse_roster(entry.description)
        except Exception as e:
            self._log_field_failure(entry, 'roster', e)

        try:
            current_capacity, max_capacity = extract_capacity(title)
            enrichment['current_capacity'] = current_capacity
            enrichment['max_capacity'] = max_capacity
        except Exception as e:
            self._log_field_failure(entry, 'capacity', e)

        if entry.start_time is not None and entry.end_time is not None:
            try:
                enrichment['status'] = event_status(
                    now, entry.start_time, entry.end_time
                )
            except Exception as e:
                self._log_field_failure(entry, 'status', e)

        return NormalizedRecord.from_entry(entry, **enrichment)

    @staticmethod
    def _log_field_failure(entry: RawEntry, field_name: str, error: Exception):
        logger.warning(
            f"Failed to derive {field_name} for entry '{entry.id}' "
            f"({entry.title!r}): {error}"
        )

    def classify(self, title: str) -> Optional[ActivityClassification]:
        """
        Classify a title, falling back to a generic activity.

        Args:
            title: Entry title

        Returns:
            ActivityClassification or None for an effectively empty title
        """
        classification = classify_activity(title)
        if classification is not None or not title.strip():
            return classification

        clean_title = strip_title_noise(title)
        if not clean_title:
            return None

        return ActivityClassification(
            category=self.GENERAL_CATEGORY,
            filter_name=clean_title,
            specific_name=clean_title,
            display_name=clean_title,
            color=self.GENERAL_COLOR
        )
