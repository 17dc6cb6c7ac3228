# student_insights/domain/services/insights_service.py
import logging
from datetime import datetime
from typing import Iterable, List

from student_insights.core.clock import Clock, utc_now
from student_insights.core.errors import StudentNotFoundError
from student_insights.core.scoring import DEFAULT_SCORING, ScoringConfig
from student_insights.domain.entities.batch import BatchFailure, BatchResult
from student_insights.domain.entities.insight import FormattedInsights
from student_insights.domain.entities.network import ClassNetwork, StudentNetworkAnalysis
from student_insights.domain.entities.records import StudentContext
from student_insights.domain.entities.risk import RiskAssessment
from student_insights.domain.entities.trend import TrendAnalysis
from student_insights.domain.ports import RecordSource, SnapshotWriter
from student_insights.domain.services.factor_explainer import (
    identify_key_risk_factors,
    identify_protective_factors,
)
from student_insights.domain.services.factor_scores import calculate_factor_scores
from student_insights.domain.services.pattern_analysis import analyze_student_patterns, format_insights
from student_insights.domain.services.risk_aggregator import (
    calculate_confidence,
    determine_risk_level,
    weighted_score,
)
from student_insights.domain.services.social_network import (
    analyze_class_network,
    analyze_student_network,
)
from student_insights.domain.services.trend_service import analyze_trend, generate_predictive_indicators

logger = logging.getLogger(__name__)


def build_assessment(
    ctx: StudentContext,
    now: datetime,
    config: ScoringConfig = DEFAULT_SCORING,
    with_predictions: bool = True,
) -> RiskAssessment:
    """Pure computation of a risk assessment from an already loaded context."""
    scores = calculate_factor_scores(ctx, now, config)
    overall = weighted_score(scores, config)

    indicators = None
    if with_predictions:
        trend = analyze_trend(ctx.student_id, ctx.risk_history, overall, config)
        insights = format_insights(analyze_student_patterns(ctx, now, config)).ordered
        indicators = generate_predictive_indicators(overall, trend, scores, insights, config)

    return RiskAssessment(
        student_id=ctx.student_id,
        student_name=ctx.student.name,
        calculated_at=now,
        factor_scores=scores,
        overall_score=overall,
        risk_level=determine_risk_level(overall, config),
        confidence=calculate_confidence(ctx.populated_domains(), config),
        key_risk_factors=identify_key_risk_factors(scores, config),
        protective_factors=identify_protective_factors(ctx.talents, ctx.social_emotional),
        predictive_indicators=indicators,
    )


class InsightsService:
    """
    Entry point used by the API and the batch job.

    Reads go through ``source``; the two side effects (history append, metrics
    upsert) go through ``writer`` and are best effort: a failed write is logged and
    the computed result is still returned.
    """

    def __init__(
        self,
        source: RecordSource,
        writer: SnapshotWriter,
        clock: Clock = utc_now,
        config: ScoringConfig = DEFAULT_SCORING,
    ):
        self.source = source
        self.writer = writer
        self.clock = clock
        self.config = config

    async def assess(self, student_id: str, with_predictions: bool = True) -> RiskAssessment:
        now = self.clock()
        ctx = await self.source.load_context(student_id, now)
        return build_assessment(ctx, now, self.config, with_predictions)

    async def commit_to_history(self, student_id: str) -> RiskAssessment:
        assessment = await self.assess(student_id)
        await self._append_snapshot(assessment)
        return assessment

    async def trend(self, student_id: str) -> TrendAnalysis:
        now = self.clock()
        ctx = await self.source.load_context(student_id, now)
        current = build_assessment(ctx, now, self.config, with_predictions=False).overall_score
        return analyze_trend(student_id, ctx.risk_history, current, self.config)

    async def patterns(self, student_id: str) -> FormattedInsights:
        now = self.clock()
        ctx = await self.source.load_context(student_id, now)
        return format_insights(analyze_student_patterns(ctx, now, self.config))

    async def student_network(self, student_id: str) -> StudentNetworkAnalysis:
        now = self.clock()
        student = await self.source.get_student(student_id)
        if student is None:
            raise StudentNotFoundError(student_id)

        class_name = student.class_name or ""
        roster = await self.source.list_students(class_name)
        edges = await self.source.class_relationships(class_name)
        groups = await self.source.student_groups(student_id)
        analysis = analyze_student_network(student, roster, edges, now, self.config, peer_groups=groups)
        await self._upsert_metrics([analysis.metrics])
        return analysis

    async def class_network(self, class_name: str) -> ClassNetwork:
        now = self.clock()
        roster = await self.source.list_students(class_name)
        edges = await self.source.class_relationships(class_name)
        network, metrics = analyze_class_network(class_name, roster, edges, now, self.config)
        await self._upsert_metrics(metrics.values())
        return network

    async def assess_batch(self, student_ids: Iterable[str], commit: bool = False) -> BatchResult:
        """One student's failure is recorded and never aborts the rest of the batch."""
        result = BatchResult()
        for student_id in student_ids:
            try:
                if commit:
                    assessment = await self.commit_to_history(student_id)
                else:
                    assessment = await self.assess(student_id)
            except Exception as e:
                logger.warning("Risk assessment failed for %s: %s", student_id, e)
                result.failed.append(BatchFailure(student_id=student_id, error=str(e)))
                continue
            result.succeeded.append(assessment)

        logger.info(
            "Batch assessment finished: %d ok, %d failed", len(result.succeeded), len(result.failed)
        )
        return result

    async def _append_snapshot(self, assessment: RiskAssessment) -> None:
        try:
            await self.writer.append_risk_snapshot(assessment)
        except Exception:
            logger.exception("Could not save risk snapshot for %s", assessment.student_id)

    async def _upsert_metrics(self, metrics: Iterable) -> None:
        for m in metrics:
            try:
                await self.writer.upsert_network_metrics(m)
            except Exception:
                logger.exception("Could not save network metrics for %s", m.student_id)


def failed_ids(result: BatchResult) -> List[str]:
    return [f.student_id for f in result.failed]
