from __future__ import annotations

import argparse

from services.api.app.db.database import db_session
from services.api.app.db.init_db import init_db
from services.api.app.db.models import Assignee, Category, Chore, Household


def main() -> int:
    parser = argparse.ArgumentParser(description="Seed a demo household with chores")
    parser.add_argument("--household-id", default="HOME-2026")
    parser.add_argument("--assignee", action="append", dest="assignees", default=None)
    parser.add_argument("--reset", action="store_true", help="Drop and recreate all tables first")
    args = parser.parse_args()

    household_id = args.household_id.strip().upper()
    names = args.assignees or ["Alex", "Sam"]

    init_db(reset=args.reset)

    db = db_session()
    try:
        if db.get(Household, household_id) is None:
            db.add(Household(id=household_id))
            db.flush()

        existing = db.query(Assignee).filter(Assignee.household_id == household_id).count()
        if existing > 0:
            print(f"Household {household_id} already has data, nothing to seed")
            return 0

        assignees = [Assignee(household_id=household_id, name=name) for name in names]
        db.add_all(assignees)
        db.flush()

        # Kitchen defaults to the first assignee; its chores inherit unless overridden.
        kitchen = Category(
            household_id=household_id, name="Kitchen", assignee_ids=[assignees[0].id]
        )
        bathroom = Category(household_id=household_id, name="Bathroom", assignee_ids=[])
        db.add_all([kitchen, bathroom])
        db.flush()

        override = [assignees[-1].id]
        for title, category, assignee_ids in (
            ("Wash dishes", kitchen, []),
            ("Mop floor", kitchen, override),
            ("Scrub tub", bathroom, []),
            ("Take out trash", None, []),
        ):
            db.add(
                Chore(
                    household_id=household_id,
                    title=title,
                    completed=False,
                    assignee_ids=assignee_ids,
                    category_id=category.id if category is not None else None,
                )
            )

        db.commit()
        print(f"Seeded household={household_id} assignees={', '.join(names)}")
        return 0
    finally:
        db.close()


if __name__ == "__main__":
    raise SystemExit(main())
