"""
Insight text for segmentation results.

`build_insight_context` / `build_insight_messages` prepare the request for an
external text generator; `generate_insight_markdown` is the deterministic
narrative used when no generator is configured.
"""

from __future__ import annotations

from typing import Any, Dict, List

from .analysis import AnalysisResult

REPORT_TYPES = ("detailed", "summary")

_SUMMARY_SYSTEM = (
    "You are a customer analytics expert. Provide a concise executive summary (max 300 words) "
    "of customer segmentation data.\n\n"
    "FORMATTING:\n"
    "- Use numbered lists (1., 2., 3.) for sequential items\n"
    "- Use bullet points (•) for key items\n"
    "- NO asterisks (*) or hashtags (#)\n"
    "- Section headers in UPPERCASE with colon\n\n"
    "STRUCTURE:\n"
    "1. KEY INSIGHTS: Top 3 critical findings\n"
    "2. RECOMMENDATION: One actionable step"
)

_DETAILED_SYSTEM = (
    "You are a customer analytics consultant. Provide a focused analysis (max 600 words) "
    "of customer segmentation data.\n\n"
    "FORMATTING:\n"
    "- Numbered lists (1., 2., 3.) for recommendations\n"
    "- Bullet points (•) for findings\n"
    "- NO asterisks (*) or hashtags (#)\n"
    "- UPPERCASE section headers with colon\n\n"
    "SECTIONS:\n"
    "1. EXECUTIVE SUMMARY: High-level overview (2 paragraphs)\n"
    "2. SEGMENT ANALYSIS:\n"
    "   • Top 3 segments with characteristics and value\n"
    "   • Key behavioral patterns\n"
    "3. OPPORTUNITIES:\n"
    "   Number each (1., 2., 3.) with:\n"
    "   • Growth strategy\n"
    "   • Estimated impact\n"
    "   • Implementation difficulty\n"
    "4. RECOMMENDATIONS:\n"
    "   Top 3 prioritized actions (1., 2., 3.) with expected ROI and timeline\n\n"
    "Use specific numbers from the data."
)

_SEGMENT_ACTIONS = {
    "High Value": "protect with loyalty benefits and early access; they carry a large revenue share.",
    "Premium": "offer concierge service and premium bundles to a small, high-spend group.",
    "Core Customers": "keep engaged with replenishment reminders and cross-sell.",
    "Regular": "nudge toward higher basket sizes with thresholds and bundles.",
    "Potential Growth": "drive repeat purchases with targeted offers to lift spend.",
    "Entry Level": "onboard and educate; low-barrier offers to build a purchase habit.",
    "At Risk": "run win-back campaigns and diagnose churn reasons.",
}


def _check_report_type(report_type: str) -> str:
    rt = (report_type or "detailed").lower().strip()
    if rt not in REPORT_TYPES:
        raise ValueError(f"report_type must be one of {REPORT_TYPES}, got {report_type!r}")
    return rt


def build_insight_context(result: AnalysisResult, report_type: str = "detailed") -> Dict[str, Any]:
    """JSON payload handed to the text-generation collaborator."""
    m = result.metrics
    return {
        "segments": [s.to_dict() for s in m.segment_distribution],
        "metrics": {
            "total_customers": m.total_count,
            "total_revenue": m.total_monetary_sum,
            "avg_order_value": m.average_monetary_per_record,
            "top_segment": m.top_segment_name,
        },
        "trends": [b.to_dict() for b in m.monthly_trend],
        "trend_is_synthetic": m.trend_is_synthetic,
        "type": _check_report_type(report_type),
    }


def build_insight_messages(context: Dict[str, Any]) -> List[Dict[str, str]]:
    """Chat messages (system + user) for the configured report verbosity."""
    report_type = _check_report_type(context.get("type", "detailed"))
    metrics = context.get("metrics") or {}

    seg_lines = "\n".join(
        f"- {s['name']}: {s['member_count']} customers ({s['percentage']}% of total)"
        for s in context.get("segments") or []
    )
    trend_lines = "\n".join(
        f"{t['label']}: {t['customer_count']} customers, ${round(t['revenue_sum']):,} revenue"
        for t in context.get("trends") or []
    )
    closing = (
        "Provide a brief executive summary."
        if report_type == "summary"
        else "Provide a comprehensive detailed report with specific recommendations for growth "
        "and retention strategies for each segment."
    )

    user = (
        "Analyze this customer analytics data:\n\n"
        f"CUSTOMER SEGMENTS:\n{seg_lines}\n\n"
        "KEY METRICS:\n"
        f"- Total Customer Base: {int(metrics.get('total_customers', 0)):,}\n"
        f"- Total Revenue: ${float(metrics.get('total_revenue', 0.0)):,.2f}\n"
        f"- Average Order Value: ${round(float(metrics.get('avg_order_value', 0.0))):,}\n"
        f"- Largest Segment: {metrics.get('top_segment', '')}\n\n"
        f"MONTHLY PERFORMANCE TRENDS (Last 12 Months):\n{trend_lines}\n\n"
        f"{closing}"
    )
    system = _SUMMARY_SYSTEM if report_type == "summary" else _DETAILED_SYSTEM
    return [{"role": "system", "content": system}, {"role": "user", "content": user}]


def generate_insight_markdown(result: AnalysisResult) -> str:
    """Deterministic fallback insight (English, Markdown)."""
    m = result.metrics
    labels = result.labels or {}

    lines: List[str] = []
    lines.append("### Executive Summary")
    lines.append(
        f"- {labels.get('customers', 'Total Records')}: {m.total_count:,}; "
        f"{labels.get('revenue', 'Total Value')}: {m.total_monetary_sum:,.2f}; "
        f"{labels.get('avg_order', 'Avg Value')}: {m.average_monetary_per_record:,.2f}."
    )
    if result.clustering.skipped:
        lines.append("- No numeric columns were found, so customers form a single segment.")
    else:
        lines.append(f"- Customers were grouped into {int((result.clustering.sizes > 0).sum())} clusters using K-Means.")
    lines.append(f"- Largest segment: {m.top_segment_name}.")
    lines.append("")

    lines.append("### Segments")
    for s in m.segment_distribution:
        lines.append(f"- {s.name}: {s.member_count} customers ({s.percentage}%)")
    lines.append("")

    if m.monthly_trend and not m.trend_is_synthetic:
        first, last = m.monthly_trend[0], m.monthly_trend[-1]
        lines.append("### Trend")
        lines.append(
            f"- {first.label}: {first.customer_count} customers; {last.label}: {last.customer_count} customers."
        )
        lines.append("")

    action_lines = [f"- {s.name}: {_SEGMENT_ACTIONS[s.name]}" for s in m.segment_distribution if s.name in _SEGMENT_ACTIONS]
    if not action_lines:
        action_lines.append("- Add a revenue/amount column to enable value-based segment recommendations.")
    lines.append("### Action Plan")
    lines.extend(action_lines)
    return "\n".join(lines).rstrip() + "\n"
