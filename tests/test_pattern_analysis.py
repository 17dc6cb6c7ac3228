# tests/test_pattern_analysis.py
from datetime import date

from conftest import NOW, attendance, days_ago, exams_oldest_to_newest, negative_incident
from student_insights.domain.entities.insight import InsightCategory, InsightSeverity, PatternInsight
from student_insights.domain.entities.records import (
    BehaviorIncident,
    ExamResult,
    SocialEmotionalProfile,
    StudentContext,
    StudentRecord,
)
from student_insights.domain.services.pattern_analysis import (
    analyze_academic_trends,
    analyze_attendance_patterns,
    analyze_behavioral_patterns,
    analyze_cross_factor_correlations,
    analyze_student_patterns,
    analyze_temporal_patterns,
    format_insights,
)


def _ctx(**kwargs) -> StudentContext:
    return StudentContext(student=StudentRecord(id="s-7", name="Noor Haddad", class_name="8C"), **kwargs)


def _recurring(insights):
    return [i for i in insights if i.title.startswith("Recurring")]


def test_three_incidents_in_one_category_is_a_warning():
    incidents = [negative_incident(d, category="BULLYING") for d in (40, 50, 60)]

    found = _recurring(analyze_behavioral_patterns(_ctx(incidents=incidents), NOW))

    assert len(found) == 1
    assert found[0].severity == InsightSeverity.WARNING
    assert found[0].category == InsightCategory.PATTERN


def test_five_incidents_in_one_category_is_critical():
    incidents = [negative_incident(d, category="BULLYING") for d in (35, 45, 55, 65, 75)]

    found = _recurring(analyze_behavioral_patterns(_ctx(incidents=incidents), NOW))

    assert [i.severity for i in found] == [InsightSeverity.CRITICAL]


def test_positive_incidents_are_not_patterns():
    incidents = [
        BehaviorIncident(incident_date=days_ago(d), behavior_type="POSITIVE", behavior_category="HELPING")
        for d in (1, 2, 3, 4, 5)
    ]

    assert analyze_behavioral_patterns(_ctx(incidents=incidents), NOW) == []


def test_incident_increase_over_previous_month():
    incidents = [negative_incident(d, category=c) for d, c in ((2, "A"), (8, "B"), (15, "C"), (40, "D"))]

    found = analyze_behavioral_patterns(_ctx(incidents=incidents), NOW)

    assert [i.title for i in found] == ["Behavior Incidents Increasing"]
    assert "Previous month: 1 incidents" in found[0].evidence
    assert "Increase: 200%" in found[0].evidence


def test_two_incidents_this_month_is_not_an_increase():
    incidents = [negative_incident(3), negative_incident(10)]

    assert analyze_behavioral_patterns(_ctx(incidents=incidents), NOW) == []


def test_academic_decline_and_subject_drop():
    exams = [
        ExamResult(exam_date=days_ago(60), total_score=85, subject_scores={"Mathematics": 90}),
        ExamResult(exam_date=days_ago(45), total_score=82, subject_scores={"Mathematics": 88}),
        ExamResult(exam_date=days_ago(30), total_score=80, subject_scores={"Mathematics": 70}),
        ExamResult(exam_date=days_ago(15), total_score=65, subject_scores={"Mathematics": 60}),
        ExamResult(exam_date=days_ago(5), total_score=60, subject_scores={"Mathematics": 55}),
    ]

    found = analyze_academic_trends(_ctx(exams=exams), NOW)

    assert [i.title for i in found] == ["Academic Performance Declining", "Mathematics Performance Declining"]
    assert all(i.severity == InsightSeverity.WARNING for i in found)


def test_academic_rise_is_info(regression_context):
    found = analyze_academic_trends(regression_context, NOW)

    assert [(i.title, i.severity) for i in found] == [("Academic Performance Rising", InsightSeverity.INFO)]


def test_zero_point_exams_count_toward_the_trend():
    exams = exams_oldest_to_newest([60, 60, 60, 0, 0])

    found = analyze_academic_trends(_ctx(exams=exams), NOW)

    assert [i.title for i in found] == ["Academic Performance Declining"]
    assert "Recent average: 20.0" in found[0].evidence


def test_weekday_absence_pattern():
    # NOW is a Friday; 7, 14 and 21 days back are Fridays too
    records = [attendance(7), attendance(14), attendance(21, status="LATE"), attendance(3)]

    found = analyze_attendance_patterns(_ctx(attendance=records), NOW)

    assert [i.title for i in found] == ["Friday Absence Pattern"]


def test_monthly_absence_rate():
    records = [attendance(d) for d in range(1, 11)]

    found = analyze_attendance_patterns(_ctx(attendance=records), NOW)
    rate = [i for i in found if i.title == "High Absence Rate"]

    assert rate[0].severity == InsightSeverity.CRITICAL


def test_absence_and_low_grades_correlate():
    ctx = _ctx(
        attendance=[attendance(d) for d in (5, 12, 19, 26, 33)],
        exams=[ExamResult(exam_date=days_ago(10), total_score=52)],
    )

    found = analyze_cross_factor_correlations(ctx, NOW)

    assert [(i.category, i.severity) for i in found] == [(InsightCategory.CORRELATION, InsightSeverity.CRITICAL)]


def test_absences_without_exams_do_not_correlate():
    ctx = _ctx(attendance=[attendance(d) for d in (5, 12, 19, 26, 33)])

    assert analyze_cross_factor_correlations(ctx, NOW) == []


def test_emotion_regulation_and_behavior_link():
    ctx = _ctx(
        incidents=[negative_incident(d) for d in (5, 20, 40)],
        social_emotional=SocialEmotionalProfile(assessed_at=days_ago(30), emotion_regulation_level=2),
    )

    found = analyze_cross_factor_correlations(ctx, NOW)

    assert [i.title for i in found] == ["Emotion Regulation and Behavior Link"]


def test_seasonal_drop():
    exams = [
        ExamResult(exam_date=date(2024, 11, 20), total_score=90),
        ExamResult(exam_date=date(2024, 12, 18), total_score=88),
        ExamResult(exam_date=date(2025, 1, 22), total_score=70),
        ExamResult(exam_date=date(2025, 2, 19), total_score=68),
    ]

    found = analyze_temporal_patterns(_ctx(exams=exams), NOW)

    assert [i.title for i in found] == ["Performance Drop As The Term Progresses"]


def test_too_few_months_for_seasonal_analysis():
    assert analyze_temporal_patterns(_ctx(exams=exams_oldest_to_newest([90, 40], step=3)), NOW) == []


def test_format_orders_by_severity_and_keeps_discovery_order():
    insights = [
        PatternInsight(InsightCategory.TREND, InsightSeverity.INFO, "i1", ""),
        PatternInsight(InsightCategory.TREND, InsightSeverity.WARNING, "w1", ""),
        PatternInsight(InsightCategory.TREND, InsightSeverity.CRITICAL, "c1", ""),
        PatternInsight(InsightCategory.TREND, InsightSeverity.WARNING, "w2", ""),
    ]

    formatted = format_insights(insights)

    assert [i.title for i in formatted.ordered] == ["c1", "w1", "w2", "i1"]
    assert not formatted.is_empty
    assert format_insights([]).is_empty


def test_student_without_history_has_no_insights():
    assert analyze_student_patterns(_ctx(), NOW) == []
