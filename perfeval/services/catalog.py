"""
Built-in reference data: starter KPIs offered to new organizations and the
default behavior indicators used when scoring well-known company values.
"""

from typing import Dict, List, Optional

STARTER_KPIS: List[Dict[str, str]] = [
    {
        "kpi_name": "Revenue Growth Rate",
        "kpi_description": "Increase in total revenue compared to the prior comparable period.",
        "measurement_unit": "%",
        "category": "Sales Performance",
        "target_type": "higher_better",
    },
    {
        "kpi_name": "Sales Win Rate",
        "kpi_description": "Closed won deals as a share of qualified opportunities.",
        "measurement_unit": "%",
        "category": "Sales Performance",
        "target_type": "higher_better",
    },
    {
        "kpi_name": "Customer Retention Rate",
        "kpi_description": "Existing customers still active at the end of the window.",
        "measurement_unit": "%",
        "category": "Customer Success",
        "target_type": "higher_better",
    },
    {
        "kpi_name": "Customer Churn Rate",
        "kpi_description": "Customers lost during the window as a share of the starting base.",
        "measurement_unit": "%",
        "category": "Customer Success",
        "target_type": "lower_better",
    },
    {
        "kpi_name": "First Response Time",
        "kpi_description": "Average minutes until a new support ticket gets a first reply.",
        "measurement_unit": "minutes",
        "category": "Customer Support",
        "target_type": "lower_better",
    },
    {
        "kpi_name": "On-Time Delivery Rate",
        "kpi_description": "Orders delivered on or before the promised date.",
        "measurement_unit": "%",
        "category": "Operations",
        "target_type": "higher_better",
    },
    {
        "kpi_name": "Production Defect Rate",
        "kpi_description": "Defective units per million produced.",
        "measurement_unit": "ppm",
        "category": "Operations Quality",
        "target_type": "lower_better",
    },
    {
        "kpi_name": "Inventory Turnover",
        "kpi_description": "How many times inventory is sold and replaced in the period.",
        "measurement_unit": "turns",
        "category": "Operations",
        "target_type": "target_range",
    },
    {
        "kpi_name": "Operating Expense Ratio",
        "kpi_description": "Operating expenses as a share of revenue.",
        "measurement_unit": "%",
        "category": "Financial Health",
        "target_type": "lower_better",
    },
    {
        "kpi_name": "Budget Adherence",
        "kpi_description": "Actual spend compared to the approved budget.",
        "measurement_unit": "%",
        "category": "Financial Health",
        "target_type": "target_range",
    },
    {
        "kpi_name": "Training Completion Rate",
        "kpi_description": "Assigned training modules completed on time.",
        "measurement_unit": "%",
        "category": "People Development",
        "target_type": "higher_better",
    },
    {
        "kpi_name": "Time to Fill",
        "kpi_description": "Days from requisition approval to accepted offer.",
        "measurement_unit": "days",
        "category": "Talent Acquisition",
        "target_type": "lower_better",
    },
]

DEFAULT_VALUE_BEHAVIORS: Dict[str, List[str]] = {
    "Integrity": [
        "Acts with honesty and transparency in all interactions",
        "Takes responsibility for mistakes and learns from them",
        "Maintains confidentiality when required",
        "Follows through on commitments and promises",
    ],
    "Excellence": [
        "Consistently delivers high-quality work",
        "Seeks continuous improvement in processes and outcomes",
        "Pays attention to detail and accuracy",
        "Goes above and beyond expectations",
    ],
    "Innovation": [
        "Proposes creative solutions to challenges",
        "Embraces new technologies and methodologies",
        "Encourages experimentation and calculated risk-taking",
        "Shares knowledge with others",
    ],
    "Collaboration": [
        "Works effectively with diverse teams",
        "Actively listens and considers different perspectives",
        "Supports colleagues and contributes to team success",
        "Communicates clearly and respectfully",
    ],
    "Customer Focus": [
        "Understands and anticipates customer needs",
        "Responds promptly to customer inquiries and concerns",
        "Seeks feedback to improve customer experience",
        "Makes decisions with customer impact in mind",
    ],
}

GENERIC_VALUE_BEHAVIORS: List[str] = [
    "Demonstrates this value through daily actions",
    "Serves as a role model for others",
    "Consistently applies this value in decision-making",
    "Promotes this value within the team and organization",
]


def starter_kpis(category: Optional[str] = None) -> List[Dict[str, str]]:
    """Starter KPIs, optionally limited to one category (case-insensitive)."""
    if not category:
        return [dict(kpi) for kpi in STARTER_KPIS]
    wanted = category.strip().lower()
    return [dict(kpi) for kpi in STARTER_KPIS if kpi["category"].lower() == wanted]


def behaviors_for(value_name: Optional[str]) -> List[str]:
    return list(DEFAULT_VALUE_BEHAVIORS.get(value_name or "", GENERIC_VALUE_BEHAVIORS))
