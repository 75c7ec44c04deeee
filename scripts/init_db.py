from __future__ import annotations

import importlib
import sys

from dotenv import load_dotenv

from workbeat.common.datetime_utils import now_local
from workbeat.config import get_settings_module
from workbeat.container import build_container
from workbeat.database.bootstrap import apply_schema, list_tables


def main() -> None:
    load_dotenv(override=False)
    settings = importlib.import_module(get_settings_module())
    db_config = dict(settings.DB_CONFIG)

    apply_schema(db_config)
    tables = list_tables(db_config)
    print(
        "OK: Applied schema.sql -> "
        f"{db_config.get('user')}@{db_config.get('host')}:{db_config.get('port', 3306)}/{db_config.get('database')} "
        f"(tables={len(tables)})"
    )

    # Optional: python scripts/init_db.py <organization_id> [year]
    if len(sys.argv) > 1:
        organization_id = int(sys.argv[1])
        year = int(sys.argv[2]) if len(sys.argv) > 2 else now_local().year
        container = build_container(db_config=db_config, settings=settings)
        created = container.leave_ledger.initialize_year(organization_id, year)
        print(f"OK: Initialized {created} leave balances for organization {organization_id}, year {year}")


if __name__ == "__main__":
    main()
