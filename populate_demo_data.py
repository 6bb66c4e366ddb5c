"""
populate_demo_data.py

Usage:
    python populate_demo_data.py [YEAR]

Loads the demo facilities and equipment into the configured database and
generates their maintenance plan for YEAR (the current year by default).
Existing rows are kept; running it twice does not duplicate anything.
"""

import sys
from datetime import date

from maintplan import create_app
from maintplan.config import DevelopmentConfig
from maintplan.extensions import db
from maintplan.models import Facility
from maintplan.planning import PlanService
from maintplan.utils.seed import populate_demo_data


def main():
    year = int(sys.argv[1]) if len(sys.argv) > 1 else date.today().year
    app = create_app(DevelopmentConfig)
    with app.app_context():
        populate_demo_data(skip_if_exists=False)
        service = PlanService.for_app(app, db.session)
        for facility in db.session.query(Facility).order_by(Facility.name):
            result = service.generate(facility.id, year)
            print(f"{facility.name}: {result.generated} occurrences generated for {year}")
            for failure in result.failures:
                print(f"  failed {failure.equipment_id}: {failure.reason}")


if __name__ == "__main__":
    main()
