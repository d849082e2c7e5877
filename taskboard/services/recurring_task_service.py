"""
Recurring Task Service.

Materializes near-term occurrences of recurring series as ordinary tasks.
Safe to run repeatedly and concurrently: each series is evaluated in its own
transaction, and the (parent_recurring_id, due_date) unique constraint turns a
lost race into a duplicate that is skipped rather than reported.
"""

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from datetime import date, timedelta
from enum import Enum
from typing import Any, Callable, Dict, Iterable, List, Optional

from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session

from taskboard.config import Settings, get_settings
from taskboard.config import today as current_day
from taskboard.models.recurrence_rule import EndType
from taskboard.models.task import Task
from taskboard.recurrence.calculator import next_occurrence
from taskboard.recurrence.codec import decode
from taskboard.recurrence.errors import DuplicateOccurrenceError, MalformedRuleError
from taskboard.services.task_service import GenerationScope, TaskService
from taskboard.utils.logger import get_logger
from taskboard.utils.metrics import metrics_collector

logger = get_logger("recurring-task-service")

Notifier = Callable[[Dict[str, Any]], Any]


class SeriesStatus(str, Enum):
    CREATED = "created"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass(frozen=True)
class CreatedInstance:
    series_id: str
    instance_id: str
    occurrence_date: date


@dataclass(frozen=True)
class FailedSeries:
    series_id: str
    error: str


@dataclass(frozen=True)
class SeriesOutcome:
    """Result of evaluating one series."""

    series_id: str
    status: SeriesStatus
    reason: str = ""
    instance: Optional[CreatedInstance] = None
    error: Optional[str] = None


@dataclass
class GenerationReport:
    """Instances created, series skipped and series that failed in one run."""

    created: List[CreatedInstance] = field(default_factory=list)
    skipped: List[str] = field(default_factory=list)
    failed: List[FailedSeries] = field(default_factory=list)

    @classmethod
    def from_outcomes(cls, outcomes: Iterable[SeriesOutcome]) -> "GenerationReport":
        report = cls()
        for outcome in outcomes:
            if outcome.status == SeriesStatus.CREATED:
                report.created.append(outcome.instance)
            elif outcome.status == SeriesStatus.FAILED:
                report.failed.append(FailedSeries(outcome.series_id, outcome.error or ""))
            else:
                report.skipped.append(outcome.series_id)
        return report

    def to_dict(self) -> Dict[str, Any]:
        """JSON-ready report using the camelCase keys of the HTTP API."""
        return {
            "created": [
                {
                    "seriesId": item.series_id,
                    "instanceId": item.instance_id,
                    "occurrenceDate": item.occurrence_date.isoformat(),
                }
                for item in self.created
            ],
            "skipped": list(self.skipped),
            "failed": [{"seriesId": item.series_id, "error": item.error} for item in self.failed],
        }


def _skip(series_id: str, reason: str) -> SeriesOutcome:
    return SeriesOutcome(series_id=series_id, status=SeriesStatus.SKIPPED, reason=reason)


class RecurringTaskService:
    """Service to generate instances of recurring series."""

    def __init__(
        self,
        engine: Engine,
        notifier: Optional[Notifier] = None,
        settings: Optional[Settings] = None,
        max_workers: int = 1,
    ):
        """
        Initialize the recurring task service.

        Args:
            engine: Database engine; each series gets its own session
            notifier: Called with an instance payload after each instance is
                committed. Defaults to publishing ``task.created`` through Dapr.
            settings: Overrides the environment settings
            max_workers: Series evaluated in parallel
        """
        self.engine = engine
        self.settings = settings or get_settings()
        if notifier is None:
            from taskboard.dapr.client import dapr_publisher

            notifier = dapr_publisher.publish_task_created
        self.notifier = notifier
        self.max_workers = max(1, max_workers)

    def generate(self, scope: Optional[GenerationScope] = None, today: Optional[date] = None) -> GenerationReport:
        """
        Create every occurrence due within the lookahead horizon.

        Args:
            scope: Board and/or actor restriction, all boards when omitted
            today: Reference day, defaults to today in the configured time zone

        Returns:
            GenerationReport for the run
        """
        scope = scope or GenerationScope()
        today = today or current_day()

        with metrics_collector.time_operation("recurring_generation_seconds"):
            with Session(self.engine) as session:
                series_ids = [task.id for task in TaskService(session).list_series(scope)]

            if self.max_workers > 1 and len(series_ids) > 1:
                with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
                    outcomes = list(executor.map(lambda sid: self.process_series(sid, today), series_ids))
            else:
                outcomes = [self.process_series(series_id, today) for series_id in series_ids]

        report = GenerationReport.from_outcomes(outcomes)
        metrics_collector.record_run(len(report.created), len(report.skipped), len(report.failed))
        logger.info(
            "Recurring generation finished",
            board_id=scope.board_id,
            user_id=scope.user_id,
            today=today,
            series=len(series_ids),
            created=len(report.created),
            skipped=len(report.skipped),
            failed=len(report.failed),
        )
        return report

    def process_series(self, series_id: str, today: date) -> SeriesOutcome:
        """Evaluate one series; never raises."""
        try:
            outcome = self._evaluate_series(series_id, today)
        except DuplicateOccurrenceError as e:
            logger.info("Occurrence already materialized by another run", series_id=series_id, date=e.occurrence_date)
            return _skip(series_id, "duplicate")
        except Exception as e:
            logger.exception("Failed to generate recurring instance", series_id=series_id)
            return SeriesOutcome(
                series_id=series_id,
                status=SeriesStatus.FAILED,
                error=f"{type(e).__name__}: {e}",
            )

        if outcome.status == SeriesStatus.CREATED:
            self._notify(outcome)
        else:
            logger.debug("Series skipped", series_id=series_id, reason=outcome.reason)
        return outcome

    def _evaluate_series(self, series_id: str, today: date) -> SeriesOutcome:
        with Session(self.engine) as session:
            service = TaskService(session)
            series = service.get_task(series_id)
            if series is None or not series.is_series:
                return _skip(series_id, "not_a_series")

            rule = decode(series.recurrence_rule)
            if rule is None:
                logger.warning("Skipping series with malformed recurrence rule", series_id=series_id)
                return _skip(series_id, "malformed_rule")

            if (
                rule.end_type == EndType.COUNT
                and rule.end_count is not None
                and service.count_instances(series_id) >= rule.end_count
            ):
                return _skip(series_id, "ended")
            if rule.end_type == EndType.DATE and rule.end_date is not None and today > rule.end_date:
                return _skip(series_id, "ended")

            try:
                occurrence = next_occurrence(
                    rule,
                    series.due_date,
                    series.last_recurrence,
                    today=today,
                    max_steps=self.settings.max_catchup_steps,
                )
            except MalformedRuleError as e:
                logger.warning("Skipping series whose rule cannot advance", series_id=series_id, error=str(e))
                return _skip(series_id, "malformed_rule")

            if occurrence is None:
                return _skip(series_id, "ended")
            if occurrence > today + timedelta(days=self.settings.lookahead_days):
                return _skip(series_id, "not_due")
            if service.find_instance(series_id, occurrence) is not None:
                return _skip(series_id, "already_exists")

            instance = self._materialize(session, service, series, occurrence)
            return SeriesOutcome(
                series_id=series_id,
                status=SeriesStatus.CREATED,
                instance=CreatedInstance(series_id, instance.id, occurrence),
            )

    def _materialize(self, session: Session, service: TaskService, series: Task, occurrence: date) -> Task:
        """Create the instance, advance the series and reorder the column in one transaction."""
        series_id = series.id
        try:
            instance = service.create_instance(series, occurrence, service.label_ids(series_id))
            service.mark_fired(series, occurrence)
            service.shift_column_positions(series.column_id, exclude_task_id=instance.id)
            session.commit()
        except IntegrityError:
            session.rollback()
            if service.find_instance(series_id, occurrence) is not None:
                raise DuplicateOccurrenceError(series_id, occurrence)
            raise

        session.refresh(instance)
        logger.info(
            "Created recurring instance",
            series_id=series_id,
            instance_id=instance.id,
            due_date=occurrence,
        )
        return instance

    def _notify(self, outcome: SeriesOutcome):
        created = outcome.instance
        try:
            with Session(self.engine) as session:
                service = TaskService(session)
                instance = service.get_task(created.instance_id)
                payload = {
                    "id": created.instance_id,
                    "parent_recurring_id": created.series_id,
                    "due_date": created.occurrence_date.isoformat(),
                    "title": instance.title if instance else None,
                    "column_id": instance.column_id if instance else None,
                    "board_id": service.board_id_for_column(instance.column_id) if instance else None,
                    "assignee_id": instance.assignee_id if instance else None,
                }
            self.notifier(payload)
        except Exception as e:
            logger.error("Failed to notify about recurring instance", instance_id=created.instance_id, error=str(e))
