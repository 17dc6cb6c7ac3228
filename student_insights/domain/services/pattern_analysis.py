# student_insights/domain/services/pattern_analysis.py
"""
Rule-based pattern mining over a student's raw history.

Five independent analyzers (academic trend, behavior, attendance, cross-factor
correlation, seasonal) each emit zero or more ``PatternInsight`` records whose
evidence lists the numbers that triggered them.
"""
import calendar
from collections import Counter, defaultdict
from datetime import datetime
from typing import Dict, List

from student_insights.core.scoring import DEFAULT_SCORING, ScoringConfig
from student_insights.domain.entities.insight import (
    FormattedInsights,
    InsightCategory,
    InsightSeverity,
    PatternInsight,
)
from student_insights.domain.entities.records import AttendanceStatus, StudentContext
from student_insights.domain.services.factor_scores import (
    average,
    recent_attendance,
    recent_exams,
    recent_incidents,
    window_start,
)

_MISSED = (AttendanceStatus.ABSENT.value, AttendanceStatus.LATE.value)


# ==========================================================
#  ACADEMIC
# ==========================================================

def analyze_academic_trends(
    ctx: StudentContext,
    now: datetime,
    config: ScoringConfig = DEFAULT_SCORING,
) -> List[PatternInsight]:
    cfg = config.patterns
    insights: List[PatternInsight] = []

    exams = sorted(recent_exams(ctx.exams, now, config.windows.exam_days), key=lambda e: e.exam_date)
    grades = [float(e.total_score) for e in exams if e.total_score is not None]

    if len(grades) >= cfg.academic_sample:
        earlier_avg = average(grades[: cfg.academic_sample])
        recent_avg = average(grades[-cfg.academic_sample:])
        change = recent_avg - earlier_avg

        if change > cfg.academic_delta:
            insights.append(
                PatternInsight(
                    category=InsightCategory.TREND,
                    severity=InsightSeverity.INFO,
                    title="Academic Performance Rising",
                    description=f"Recent exam average rose {change:.1f} points over the earlier period.",
                    evidence=[
                        f"Earlier average: {earlier_avg:.1f}",
                        f"Recent average: {recent_avg:.1f}",
                        f"Trend: rising (+{change:.1f} points)",
                    ],
                    recommendation="Keep motivation high and acknowledge the progress to sustain this trend.",
                )
            )
        elif change < -cfg.academic_delta:
            insights.append(
                PatternInsight(
                    category=InsightCategory.TREND,
                    severity=InsightSeverity.WARNING,
                    title="Academic Performance Declining",
                    description=f"Recent exam average fell {abs(change):.1f} points below the earlier period.",
                    evidence=[
                        f"Earlier average: {earlier_avg:.1f}",
                        f"Recent average: {recent_avg:.1f}",
                        f"Trend: falling ({change:.1f} points)",
                    ],
                    recommendation=(
                        "Intervene early. Look for the cause: loss of motivation, "
                        "comprehension difficulties or personal problems."
                    ),
                )
            )

    # per subject, oldest first
    by_subject: Dict[str, List[float]] = defaultdict(list)
    for exam in exams:
        for subject, score in exam.subject_scores.items():
            if score is not None and score > 0:
                by_subject[subject].append(float(score))

    for subject, scores in by_subject.items():
        if len(scores) < cfg.subject_min_exams:
            continue
        earlier_avg = average(scores[: cfg.subject_sample])
        recent_avg = average(scores[-cfg.subject_sample:])
        change = recent_avg - earlier_avg

        if change > cfg.subject_delta:
            insights.append(
                PatternInsight(
                    category=InsightCategory.TREND,
                    severity=InsightSeverity.INFO,
                    title=f"{subject} Performance Rising",
                    description=f"Clear improvement in {subject} over recent exams ({change:.1f} points).",
                    evidence=[f"Earlier average: {earlier_avg:.1f}", f"Recent average: {recent_avg:.1f}"],
                    recommendation=f"Reinforce the progress in {subject} and reuse the same strategies elsewhere.",
                )
            )
        elif change < -cfg.subject_delta:
            insights.append(
                PatternInsight(
                    category=InsightCategory.TREND,
                    severity=InsightSeverity.WARNING,
                    title=f"{subject} Performance Declining",
                    description=f"Clear drop in {subject} over recent exams ({abs(change):.1f} points).",
                    evidence=[f"Earlier average: {earlier_avg:.1f}", f"Recent average: {recent_avg:.1f}"],
                    recommendation=f"{subject} needs extra support now; check for comprehension gaps.",
                )
            )

    return insights


# ==========================================================
#  BEHAVIOR
# ==========================================================

def analyze_behavioral_patterns(
    ctx: StudentContext,
    now: datetime,
    config: ScoringConfig = DEFAULT_SCORING,
) -> List[PatternInsight]:
    cfg = config.patterns
    insights: List[PatternInsight] = []

    incidents = recent_incidents(ctx.incidents, now, config.windows.behavior_days)
    negative = [i for i in incidents if i.is_negative]
    if not negative:
        return insights

    month_start = window_start(now, config.windows.month_days)
    previous_start = window_start(now, config.windows.month_days * 2)
    last_month = sum(1 for i in negative if i.incident_date >= month_start)
    previous_month = sum(1 for i in negative if previous_start <= i.incident_date < month_start)

    if last_month > previous_month and last_month >= cfg.behavior_increase_min:
        increase = (last_month - previous_month) / (previous_month or 1) * 100
        insights.append(
            PatternInsight(
                category=InsightCategory.TREND,
                severity=InsightSeverity.WARNING,
                title="Behavior Incidents Increasing",
                description=f"Behavior incidents rose over the last month ({previous_month} -> {last_month}).",
                evidence=[
                    f"Previous month: {previous_month} incidents",
                    f"Last month: {last_month} incidents",
                    f"Increase: {increase:.0f}%",
                ],
                recommendation=(
                    "Look for the root cause of the change: stress, family problems or peer conflicts."
                ),
            )
        )

    # oldest first so ties keep chronological order of first appearance
    categories = Counter(i.behavior_category for i in sorted(negative, key=lambda i: i.incident_date))
    for category, count in categories.items():
        if count < cfg.repeated_category_min:
            continue
        severity = (
            InsightSeverity.CRITICAL if count >= cfg.repeated_category_critical else InsightSeverity.WARNING
        )
        insights.append(
            PatternInsight(
                category=InsightCategory.PATTERN,
                severity=severity,
                title=f"Recurring {category} Behavior",
                description=f"{count} incidents in the '{category}' category over the last 3 months.",
                evidence=[f"Total of {count} incidents", f"Pattern: recurring {category} behavior"],
                recommendation=(
                    "Break the pattern with a systematic intervention; apply positive behavior support (PBS)."
                ),
            )
        )

    return insights


# ==========================================================
#  ATTENDANCE
# ==========================================================

def analyze_attendance_patterns(
    ctx: StudentContext,
    now: datetime,
    config: ScoringConfig = DEFAULT_SCORING,
) -> List[PatternInsight]:
    cfg = config.patterns
    insights: List[PatternInsight] = []

    missed = [
        r for r in recent_attendance(ctx.attendance, now, config.windows.attendance_days)
        if r.status in _MISSED
    ]
    if not missed:
        return insights

    weekdays = Counter(r.date.weekday() for r in sorted(missed, key=lambda r: r.date))
    day, count = weekdays.most_common(1)[0]
    if count >= cfg.weekday_min:
        day_name = calendar.day_name[day]
        insights.append(
            PatternInsight(
                category=InsightCategory.PATTERN,
                severity=InsightSeverity.WARNING,
                title=f"{day_name} Absence Pattern",
                description=f"The student is frequently absent or late on {day_name}s ({count} times).",
                evidence=[f"{day_name}: {count} absences/tardies", "This may be a recurring pattern"],
                recommendation=f"Check whether something specific happens on {day_name}s; talk with the family.",
            )
        )

    month_start = window_start(now, config.windows.month_days)
    last_month = sum(1 for r in missed if r.date >= month_start)
    if last_month >= cfg.monthly_absence_warning:
        severity = (
            InsightSeverity.CRITICAL if last_month >= cfg.monthly_absence_critical else InsightSeverity.WARNING
        )
        insights.append(
            PatternInsight(
                category=InsightCategory.TREND,
                severity=severity,
                title="High Absence Rate",
                description=f"{last_month} absences or late arrivals recorded in the last month.",
                evidence=[f"Last 30 days: {last_month} absences/tardies"],
                recommendation="Meet the family urgently. Chronic absence seriously affects achievement.",
            )
        )

    return insights


# ==========================================================
#  CROSS-FACTOR CORRELATION
# ==========================================================

def analyze_cross_factor_correlations(
    ctx: StudentContext,
    now: datetime,
    config: ScoringConfig = DEFAULT_SCORING,
) -> List[PatternInsight]:
    cfg = config.patterns
    days = config.windows.correlation_days
    insights: List[PatternInsight] = []

    absences = sum(
        1 for r in recent_attendance(ctx.attendance, now, days)
        if r.status == AttendanceStatus.ABSENT.value
    )
    grades = [float(e.total_score) for e in recent_exams(ctx.exams, now, days)]

    if absences >= cfg.correlation_absences and grades and average(grades) < cfg.correlation_grade_below:
        insights.append(
            PatternInsight(
                category=InsightCategory.CORRELATION,
                severity=InsightSeverity.CRITICAL,
                title="Absence and Academic Decline Correlation",
                description="High absence coincides with low academic performance.",
                evidence=[
                    f"Absences in the last 2 months: {absences} days",
                    f"Exam average in the last 2 months: {average(grades):.1f}",
                    "Absence is directly affecting achievement",
                ],
                recommendation=(
                    "Prioritize reducing absences; academic support is ineffective without attendance."
                ),
            )
        )

    incidents = sum(1 for i in recent_incidents(ctx.incidents, now, days) if i.is_negative)
    profile = ctx.social_emotional
    regulation = profile.emotion_regulation_level if profile else None

    if (
        incidents >= cfg.correlation_incidents
        and regulation is not None
        and regulation < cfg.correlation_regulation_below
    ):
        insights.append(
            PatternInsight(
                category=InsightCategory.CORRELATION,
                severity=InsightSeverity.WARNING,
                title="Emotion Regulation and Behavior Link",
                description="Low emotion regulation skills coincide with behavior problems.",
                evidence=[
                    f"Emotion regulation level: {regulation}/5",
                    f"Behavior incidents in the last 2 months: {incidents}",
                    "Struggles to manage emotions",
                ],
                recommendation=(
                    "Enroll in a social-emotional learning (SEL) program focused on recognizing "
                    "and regulating emotions."
                ),
            )
        )

    return insights


# ==========================================================
#  SEASONAL
# ==========================================================

def analyze_temporal_patterns(
    ctx: StudentContext,
    now: datetime,
    config: ScoringConfig = DEFAULT_SCORING,
) -> List[PatternInsight]:
    cfg = config.patterns
    insights: List[PatternInsight] = []

    monthly: Dict[str, List[float]] = defaultdict(list)
    for exam in recent_exams(ctx.exams, now, config.windows.exam_days):
        monthly[exam.exam_date.strftime("%Y-%m")].append(float(exam.total_score))

    if len(monthly) < cfg.seasonal_min_months:
        return insights

    averages = [average(monthly[month]) for month in sorted(monthly)]
    half = len(averages) // 2
    first_avg = average(averages[:half])
    second_avg = average(averages[half:])

    if second_avg < first_avg - cfg.seasonal_drop:
        insights.append(
            PatternInsight(
                category=InsightCategory.TREND,
                severity=InsightSeverity.WARNING,
                title="Performance Drop As The Term Progresses",
                description="Performance falls noticeably in the later part of the term.",
                evidence=[
                    f"Start of term average: {first_avg:.1f}",
                    f"Current average: {second_avg:.1f}",
                    "May indicate fatigue or loss of motivation",
                ],
                recommendation=(
                    "Watch for fatigue and burnout; adjust the study plan and add motivational support."
                ),
            )
        )

    return insights


# ==========================================================
#  ENTRY POINTS
# ==========================================================

ANALYZERS = (
    analyze_academic_trends,
    analyze_behavioral_patterns,
    analyze_attendance_patterns,
    analyze_cross_factor_correlations,
    analyze_temporal_patterns,
)


def analyze_student_patterns(
    ctx: StudentContext,
    now: datetime,
    config: ScoringConfig = DEFAULT_SCORING,
) -> List[PatternInsight]:
    insights: List[PatternInsight] = []
    for analyzer in ANALYZERS:
        insights.extend(analyzer(ctx, now, config))
    return insights


def format_insights(insights: List[PatternInsight]) -> FormattedInsights:
    """Group insights CRITICAL -> WARNING -> INFO, keeping discovery order inside each group."""
    return FormattedInsights(
        critical=[i for i in insights if i.severity == InsightSeverity.CRITICAL],
        warning=[i for i in insights if i.severity == InsightSeverity.WARNING],
        info=[i for i in insights if i.severity == InsightSeverity.INFO],
    )
