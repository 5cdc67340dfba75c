"""
app/services/metric_catalog_service.py

Read access to the catalog of trackable metrics, plus the default catalog
used to seed new deployments.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Any

from sqlalchemy.orm import Session

from db.models.metric_definition import MetricDataType, MetricDefinition
from db.repositories.metric_definition_repository import MetricDefinitionRepository


def _metric(
    metric_id: str,
    metric_name: str,
    category: str,
    description: str,
    unit: str,
    data_type: str = MetricDataType.NUMBER,
) -> dict[str, Any]:
    return {
        "metric_id": metric_id,
        "metric_name": metric_name,
        "category": category,
        "description": description,
        "unit": unit,
        "data_type": data_type,
    }


_PCT = MetricDataType.PERCENTAGE

DEFAULT_METRIC_DEFINITIONS: tuple[dict[str, Any], ...] = (
    # Education
    _metric("enrollment", "Enrollment", "education", "Number of students enrolled", "students"),
    _metric("completion", "Completion Rate", "education", "Percentage of students completing programs", "percentage", _PCT),
    _metric("employment", "Employment Rate", "education", "Percentage of graduates employed", "percentage", _PCT),
    _metric("skills_gained", "Skills Gained", "education", "Number of new skills acquired", "count"),
    _metric("certifications", "Certifications", "education", "Number of certifications earned", "count"),
    # Human constitution
    _metric("health_screenings", "Health Screenings", "human_constitution", "Number of health screenings conducted", "count"),
    _metric("wellness_programs", "Wellness Programs", "human_constitution", "Number of wellness program participants", "participants"),
    _metric("mental_health", "Mental Health Support", "human_constitution", "Mental health sessions provided", "sessions"),
    _metric("physical_fitness", "Physical Fitness", "human_constitution", "Fitness program participation", "participants"),
    # Food
    _metric("meals_served", "Meals Served", "food", "Number of meals provided", "meals"),
    _metric("nutrition_quality", "Nutrition Quality", "food", "Nutritional value score", "score"),
    _metric("food_waste", "Food Waste", "food", "Amount of food waste", "kg"),
    _metric("local_sourcing", "Local Sourcing", "food", "Percentage of locally sourced food", "percentage", _PCT),
    # Environmental
    _metric("carbon_emissions", "Carbon Emissions", "environmental", "Total carbon emissions", "tons CO2"),
    _metric("energy_consumption", "Energy Consumption", "environmental", "Total energy used", "kWh"),
    _metric("water_usage", "Water Usage", "environmental", "Total water consumed", "liters"),
    _metric("waste_generated", "Waste Generated", "environmental", "Total waste produced", "kg"),
    _metric("recycling_rate", "Recycling Rate", "environmental", "Percentage of waste recycled", "percentage", _PCT),
    # Social
    _metric("community_engagement", "Community Engagement", "social", "Number of community events", "events"),
    _metric("volunteer_hours", "Volunteer Hours", "social", "Total volunteer hours", "hours"),
    _metric("diversity_index", "Diversity Index", "social", "Diversity score", "score"),
    _metric("satisfaction_score", "Satisfaction Score", "social", "Stakeholder satisfaction", "score"),
    # Governance
    _metric("policy_compliance", "Policy Compliance", "governance", "Compliance rate", "percentage", _PCT),
    _metric("transparency_score", "Transparency Score", "governance", "Transparency rating", "score"),
    _metric("audit_frequency", "Audit Frequency", "governance", "Number of audits conducted", "audits"),
    _metric("risk_assessment", "Risk Assessment", "governance", "Risk assessment score", "score"),
)


class MetricCatalogService:
    def list_available_metrics(self, *, db: Session) -> list[MetricDefinition]:
        return MetricDefinitionRepository(db).list_all()

    def seed_defaults(self, *, db: Session) -> int:
        """
        Insert any default definitions missing from the catalog and commit.
        """

        inserted = MetricDefinitionRepository(db).insert_missing(DEFAULT_METRIC_DEFINITIONS)
        db.commit()
        return inserted


@lru_cache(maxsize=1)
def get_metric_catalog_service() -> MetricCatalogService:
    return MetricCatalogService()
