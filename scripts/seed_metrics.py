"""
Seed the metric catalog and the development user profile.
"""

from __future__ import annotations

import argparse
import json

from app.config import get_dev_auth_settings
from app.services.metric_catalog_service import MetricCatalogService
from db.repositories.user_profile_repository import UserProfileRepository
from db.session import SessionLocal

_DEFAULT_CUSTOM_METRICS = ["enrollment", "completion", "employment"]


def main() -> int:
    parser = argparse.ArgumentParser(description="Seed metric catalog and test user profile.")
    parser.add_argument(
        "--user-id",
        dest="user_id",
        default=None,
        help="External user id of the profile to create (defaults to DEV_FALLBACK_USER_ID).",
    )
    parser.add_argument(
        "--skip-user",
        dest="skip_user",
        action="store_true",
        help="Only seed the metric catalog.",
    )
    args = parser.parse_args()

    external_user_id = args.user_id or get_dev_auth_settings().fallback_user_id
    profile_created = False

    with SessionLocal() as db:
        metrics_inserted = MetricCatalogService().seed_defaults(db=db)

        if not args.skip_user:
            profiles = UserProfileRepository(db)
            if profiles.get_by_external_id(external_user_id) is None:
                profiles.create(
                    external_user_id=external_user_id,
                    email="test@example.com",
                    name="Test User",
                    user_type="enterprise",
                    selected_profile="custom",
                    industry="technology",
                    onboarding_completed=True,
                    custom_metrics=_DEFAULT_CUSTOM_METRICS,
                    data_input_method="both",
                )
                db.commit()
                profile_created = True

    payload = {
        "metrics_inserted": metrics_inserted,
        "user_profile": None if args.skip_user else external_user_id,
        "user_profile_created": profile_created,
    }
    print(json.dumps(payload, indent=2))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
