"""
Session Coordinator.

Orchestrates a study session:
1. initialize_session: read learner state, select and enrich items
2. process_response: schedule, track performance, adjust difficulty,
   feed the recall model
3. end_session: summarize and propose profile updates

State machine: IDLE -> BUILDING -> ACTIVE -> COMPLETE (terminal).

The coordinator reads from injected collaborators and returns updated
records; persisting them is the caller's job. Each response is processed
atomically: every computation finishes before the session is touched, so
a rejected response leaves earlier results intact.
"""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Iterable
from dataclasses import replace
from datetime import datetime, timedelta

from loguru import logger

from kotoba_srs.config import get_settings
from kotoba_srs.content.metadata import ContentMetadataEnricher, is_mastered
from kotoba_srs.core.errors import InvalidInput, NoEligibleItems, SessionStateError
from kotoba_srs.core.models import (
    CandidateItem,
    ContentType,
    PlannedItem,
    ReviewResponse,
    SessionPlan,
    UserLearningState,
    utcnow,
)
from kotoba_srs.core.ports import ContentCatalog, PerformanceStore, ProfileProvider
from kotoba_srs.learning.item_selector import ItemSelector
from kotoba_srs.session.metrics import (
    blend_weakness,
    calculate_retention_score,
    estimate_study_time,
)
from kotoba_srs.session.state import (
    ResponseFeedback,
    ResponseOutcome,
    SessionStats,
    SessionStatus,
    SessionSummary,
    StudySession,
)
from kotoba_srs.study.difficulty import DifficultyAdjuster, PerformanceSample
from kotoba_srs.study.performance import (
    new_performance_record,
    record_attempt,
    timing_consistency,
)
from kotoba_srs.study.retention_predictor import RecallFeatures, RetentionPredictor
from kotoba_srs.study.scheduler import PASSING_QUALITY, SM2Scheduler, validate_quality

# Responses per session-difficulty evaluation
SESSION_WINDOW = 5

FEEDBACK_MESSAGES = {
    5: "Perfect recall",
    4: "Correct, with slight hesitation",
    3: "Correct, but it took effort",
    2: "Almost - you nearly had it",
    1: "Incorrect - review the answer",
    0: "Not recalled - this one comes back tomorrow",
}


class SessionCoordinator:
    """
    Builds study sessions and processes responses.

    Collaborators are injected so the coordinator runs against any store,
    including in-memory fakes.
    """

    def __init__(
        self,
        catalog: ContentCatalog,
        store: PerformanceStore,
        profile: ProfileProvider,
        scheduler: SM2Scheduler | None = None,
        selector: ItemSelector | None = None,
        enricher: ContentMetadataEnricher | None = None,
        predictor: RetentionPredictor | None = None,
        adjuster: DifficultyAdjuster | None = None,
    ):
        """
        Args:
            catalog: Content catalog
            store: Current review and performance state
            profile: Learner aggregates
            scheduler: SM-2 scheduler (default config if None)
            selector: Item selector (default weights if None)
            enricher: Metadata cache (created over the catalog if None)
            predictor: Recall model (default weights if None)
            adjuster: Difficulty adjuster (default bounds if None)
        """
        self.catalog = catalog
        self.store = store
        self.profile = profile
        self.scheduler = scheduler or SM2Scheduler()
        self.selector = selector or ItemSelector()
        self.enricher = enricher or ContentMetadataEnricher(catalog)
        self.predictor = predictor or RetentionPredictor()
        self.adjuster = adjuster or DifficultyAdjuster()
        self.settings = get_settings()

    # =========================================================================
    # Session Building
    # =========================================================================

    def initialize_session(
        self,
        user_id: str,
        item_count: int | None = None,
        content_types: Iterable[ContentType] | None = None,
        now: datetime | None = None,
    ) -> StudySession:
        """
        Build a session plan for a learner.

        Args:
            user_id: Learner id
            item_count: Items to plan (settings default if None)
            content_types: Restrict the catalog to these types
            now: Reference time (defaults to current UTC time)

        Returns:
            An ACTIVE StudySession with its plan

        Raises:
            InvalidInput: item_count is not positive
            NoEligibleItems: the catalog offers no candidates
        """
        count = self.settings.default_session_size if item_count is None else item_count
        if isinstance(count, bool) or not isinstance(count, int) or count <= 0:
            raise InvalidInput(f"Item count must be a positive integer, got {count!r}")

        moment = now or utcnow()
        session = StudySession(user_id=user_id, started_at=moment)
        session.status = SessionStatus.BUILDING

        user_state = self.profile.get_learning_state(user_id)
        candidates = self._load_candidates(user_id, content_types)
        if not candidates:
            logger.warning(f"No eligible items for {user_id}")
            raise NoEligibleItems(user_id)

        scored = self.selector.select_items(user_state, candidates, count, now=moment)
        planned = [
            PlannedItem(
                candidate=s.candidate,
                metadata=self.enricher.metadata_for(s.candidate.entry),
                priority_score=s.priority_score,
                factors=s.factors,
            )
            for s in scored
        ]

        avg_difficulty = sum(p.metadata.complexity_score for p in planned) / (100 * len(planned))
        plan = SessionPlan(
            session_id=session.session_id,
            user_id=user_id,
            items=planned,
            estimated_minutes=estimate_study_time(
                len(planned), avg_difficulty, self.settings.seconds_per_item
            ),
            recommendations=self._plan_recommendations(user_state, planned, count, moment),
            created_at=moment,
        )

        session.user_state = user_state
        session.plan = plan
        session.stats = SessionStats(remaining=len(planned))
        session.status = SessionStatus.ACTIVE

        logger.info(
            f"Session {session.session_id} built for {user_id}: {plan.total_items} items "
            f"(~{plan.estimated_minutes} min)"
        )
        return session

    def _load_candidates(
        self, user_id: str, content_types: Iterable[ContentType] | None
    ) -> list[CandidateItem]:
        types = None if content_types is None else [ContentType.parse(t) for t in content_types]
        candidates = []
        for entry in self.catalog.list_entries(types):
            candidates.append(
                CandidateItem(
                    entry=entry,
                    review_item=self.store.get_review_item(
                        user_id, entry.content_type, entry.content_id
                    ),
                    performance=self.store.get_performance(
                        user_id, entry.content_type, entry.content_id
                    ),
                )
            )
        return candidates

    def _plan_recommendations(
        self,
        user_state: UserLearningState,
        planned: list[PlannedItem],
        requested: int,
        now: datetime,
    ) -> list[str]:
        recommendations = []

        due = sum(
            1 for p in planned
            if p.candidate.review_item is not None
            and not p.candidate.is_new
            and p.candidate.review_item.is_due(now)
        )
        new = sum(1 for p in planned if p.candidate.is_new)
        if due:
            recommendations.append(f"{due} review(s) due now - clear these first")
        if new:
            recommendations.append(f"{new} new item(s) introduced this session")

        if user_state.weakness_by_category:
            weakest, weakness = max(
                user_state.weakness_by_category.items(), key=lambda kv: kv[1]
            )
            recommendations.append(
                f"Focus area: {ContentType.parse(weakest).value} (weakness {weakness:.0f})"
            )

        if len(planned) < requested:
            recommendations.append(
                f"Only {len(planned)} eligible item(s) available out of {requested} requested"
            )
        if user_state.current_streak > 0:
            recommendations.append(f"Keep your {user_state.current_streak}-day streak going")

        return recommendations

    # =========================================================================
    # Response Processing
    # =========================================================================

    def process_response(
        self,
        session: StudySession,
        response: ReviewResponse,
        now: datetime | None = None,
    ) -> ResponseOutcome:
        """
        Process one learner response.

        Args:
            session: An ACTIVE session from initialize_session
            response: The learner's answer
            now: Review time (defaults to current UTC time)

        Returns:
            ResponseOutcome with the next item, stats, feedback and the
            updated records to persist

        Raises:
            SessionStateError: the session is not ACTIVE
            InvalidInput: invalid quality, response time, or unplanned item
        """
        self._require_active(session)
        moment = now or utcnow()

        try:
            outcome, delta, factor = self._compute_outcome(session, response, moment)
        except InvalidInput as e:
            logger.warning(f"Rejected response in session {session.session_id}: {e}")
            raise

        # Commit: nothing below can fail
        key = outcome.key
        session.review_items[key] = outcome.review_item
        session.performance[key] = outcome.performance
        session.difficulty_deltas[key] = delta
        session.answered.add(key)
        session.stats = outcome.updated_stats
        session.outcomes.append(outcome)

        logger.debug(
            f"Session {session.session_id}: {key[0].value}:{key[1]} "
            f"q={outcome.feedback.quality}, next in {outcome.review_item.interval}d, "
            f"factor={factor:.2f}"
        )
        return outcome

    def _compute_outcome(
        self,
        session: StudySession,
        response: ReviewResponse,
        now: datetime,
    ) -> tuple[ResponseOutcome, float, float]:
        key = response.key
        planned = session.plan.find(key)
        if planned is None:
            raise InvalidInput(f"{key[0].value}:{key[1]} is not part of this session")

        quality = self._resolve_quality(response)
        is_correct = quality >= PASSING_QUALITY
        user_id = session.user_id
        content_type, content_id = key

        # 1. SM-2 scheduling
        current_item = (
            session.review_items.get(key)
            or planned.candidate.review_item
            or self.scheduler.new_review_item(user_id, content_type, content_id, now)
        )
        updated_item = self.scheduler.review(current_item, quality, now)

        # 2. Running performance counts
        current_perf = (
            session.performance.get(key)
            or planned.candidate.performance
            or new_performance_record(user_id, content_type, content_id)
        )
        updated_perf = record_attempt(current_perf, is_correct, response.response_time_ms, now)

        # 3. Difficulty
        prior_avg = current_perf.avg_response_time_ms if current_perf.attempts > 0 else None
        adjustment = self.adjuster.adjust(
            updated_item,
            PerformanceSample(
                accuracy=updated_perf.accuracy_rate,
                response_time_ms=response.response_time_ms,
                prior_avg_response_time_ms=prior_avg,
            ),
        )
        prior_delta = session.difficulty_deltas.get(key, 0.0)
        accumulated_delta = max(-1.0, min(1.0, prior_delta + adjustment.difficulty_delta))

        # 4. Recall model
        user_accuracy = session.user_state.accuracy_rate if session.user_state else 0.0
        load = min(1.0, session.plan.total_items / max(1, self.settings.daily_review_target))
        complexity = planned.metadata.complexity_score / 100

        elapsed_days = 0.0
        if current_item.last_reviewed_at is not None:
            elapsed_days = max(0.0, (now - current_item.last_reviewed_at) / timedelta(days=1))

        observed = RecallFeatures(
            time_since_last_review=elapsed_days,
            ease_factor=current_item.ease_factor,
            user_historical_accuracy=user_accuracy,
            content_difficulty=self._effective_difficulty(complexity, prior_delta),
            daily_load_factor=load,
        )
        upcoming = RecallFeatures(
            time_since_last_review=float(updated_item.interval),
            ease_factor=updated_item.ease_factor,
            user_historical_accuracy=user_accuracy,
            content_difficulty=self._effective_difficulty(complexity, accumulated_delta),
            daily_load_factor=load,
        )
        predicted_recall = self.predictor.predict_recall(upcoming)
        recommended_days = self.predictor.recommend_timing(upcoming)
        self.predictor.update_model(observed, is_correct)

        # 5. Stats and session pacing
        answered_keys = session.answered | {key}
        previous = session.stats
        factor = previous.difficulty_factor
        answered_count = previous.answered + 1
        if answered_count % SESSION_WINDOW == 0:
            window = [
                1.0 if o.feedback.is_correct else 0.0
                for o in session.outcomes[-(SESSION_WINDOW - 1):]
            ] + [1.0 if is_correct else 0.0]
            factor = self.adjuster.adjust_session_difficulty(window, factor)

        stats = SessionStats(
            answered=answered_count,
            correct=previous.correct + (1 if is_correct else 0),
            total_response_time_ms=previous.total_response_time_ms + response.response_time_ms,
            difficulty_factor=factor,
            remaining=sum(1 for item in session.plan.items if item.key not in answered_keys),
        )

        consistency = timing_consistency(
            response.response_time_ms,
            prior_avg if prior_avg is not None else response.response_time_ms,
        )
        mastered = is_mastered(planned.metadata, updated_item, updated_perf, consistency)
        feedback = ResponseFeedback(
            is_correct=is_correct,
            quality=quality,
            interval_days=updated_item.interval,
            next_review_at=updated_item.next_review_at,
            mastered=mastered,
            message=self._feedback_message(quality, updated_item.interval, mastered),
        )

        next_item = next(
            (item for item in session.plan.items if item.key not in answered_keys),
            None,
        )

        outcome = ResponseOutcome(
            key=key,
            next_item=next_item,
            updated_stats=stats,
            feedback=feedback,
            review_item=updated_item,
            performance=updated_perf,
            difficulty=adjustment,
            predicted_recall=predicted_recall,
            recommended_interval_days=recommended_days,
        )
        return outcome, accumulated_delta, factor

    def _resolve_quality(self, response: ReviewResponse) -> int:
        if response.quality is not None:
            return validate_quality(response.quality)
        if response.is_correct is None:
            raise InvalidInput("Response needs either a quality score or a correctness flag")
        return self.scheduler.grade_from_response(
            response.is_correct,
            response.response_time_ms,
            expected_ms=self.settings.expected_response_ms,
        )

    @staticmethod
    def _effective_difficulty(complexity: float, delta: float) -> float:
        # A positive delta means the item proved easy for this learner
        return max(0.0, min(1.0, complexity - delta))

    @staticmethod
    def _feedback_message(quality: int, interval: int, mastered: bool) -> str:
        message = FEEDBACK_MESSAGES[quality]
        unit = "day" if interval == 1 else "days"
        message = f"{message}. Next review in {interval} {unit}."
        if mastered:
            message += " Mastered!"
        return message

    # =========================================================================
    # Session End
    # =========================================================================

    def end_session(self, session: StudySession, now: datetime | None = None) -> SessionSummary:
        """
        Complete a session and summarize it.

        Returns:
            SessionSummary with proposed weakness updates and every record
            updated during the session

        Raises:
            SessionStateError: the session is not ACTIVE
        """
        self._require_active(session)
        moment = now or utcnow()

        totals: dict[ContentType, list[int]] = defaultdict(lambda: [0, 0])
        for outcome in session.outcomes:
            counts = totals[outcome.key[0]]
            counts[0] += 1
            counts[1] += 1 if outcome.feedback.is_correct else 0

        accuracy_by_category = {
            content_type: correct / answered
            for content_type, (answered, correct) in totals.items()
        }

        user_state = session.user_state
        default_weakness = self.settings.default_category_weakness
        proposed_weakness = {
            content_type: blend_weakness(
                user_state.weakness_for(content_type, default_weakness)
                if user_state else default_weakness,
                accuracy,
            )
            for content_type, accuracy in accuracy_by_category.items()
        }
        focus_areas = sorted(proposed_weakness, key=lambda t: -proposed_weakness[t])

        review_items = list(session.review_items.values())
        avg_interval = (
            sum(item.interval for item in review_items) / len(review_items)
            if review_items else 0.0
        )
        stats = replace(session.stats, remaining=session.remaining_count())
        retention_score = calculate_retention_score(stats.answered, stats.correct, avg_interval)

        session.status = SessionStatus.COMPLETE
        session.ended_at = moment
        session.stats = stats

        summary = SessionSummary(
            session_id=session.session_id,
            user_id=session.user_id,
            stats=stats,
            retention_score=retention_score,
            accuracy_by_category=accuracy_by_category,
            proposed_weakness=proposed_weakness,
            focus_areas=focus_areas,
            recommendations=self._summary_recommendations(stats, focus_areas, proposed_weakness),
            review_items=review_items,
            performance_records=list(session.performance.values()),
            started_at=session.started_at,
            ended_at=moment,
        )

        logger.info(
            f"Session {session.session_id} complete: {stats.correct}/{stats.answered} correct "
            f"({stats.accuracy:.0%}), retention score {retention_score:.2f}"
        )
        return summary

    @staticmethod
    def _summary_recommendations(
        stats: SessionStats,
        focus_areas: list[ContentType],
        proposed_weakness: dict[ContentType, float],
    ) -> list[str]:
        recommendations = []
        if stats.answered == 0:
            return ["No responses recorded - start a new session when ready"]

        if stats.remaining:
            recommendations.append(f"{stats.remaining} planned item(s) left unanswered")
        if focus_areas and proposed_weakness[focus_areas[0]] >= 50:
            recommendations.append(f"Review more {focus_areas[0].value} items next session")
        if stats.difficulty_factor > 1.0:
            recommendations.append("Strong session - try harder material next time")
        elif stats.difficulty_factor < 1.0:
            recommendations.append("Tough session - shorter, easier sessions may help")
        return recommendations

    @staticmethod
    def _require_active(session: StudySession) -> None:
        if session.status != SessionStatus.ACTIVE:
            raise SessionStateError(
                f"Session {session.session_id} is {session.status.value}, expected active"
            )
