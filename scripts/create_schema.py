#!/usr/bin/env python3
"""
Create the Snowflake `videos` table used by the catalog.

Reads the same SNOWFLAKE_* variables as the API (from the environment or
.env) and runs the DDL from src.infrastructure.snowflake.client.

Usage:
    python scripts/create_schema.py            # create table if missing
    python scripts/create_schema.py --dry-run  # print the DDL only
"""

import sys
from pathlib import Path

# Add project root to path so we can import our modules
sys.path.insert(0, str(Path(__file__).parent.parent))

from dotenv import load_dotenv

# Load environment variables
load_dotenv()

from src.config.settings import get_settings  # noqa: E402
from src.infrastructure.snowflake.client import (  # noqa: E402
    VIDEOS_TABLE_DDL,
    SnowflakeConnectionError,
    get_snowflake_connection,
)
from src.infrastructure.snowflake.repositories.videos import SnowflakeConfig  # noqa: E402


def create_schema(dry_run: bool = False) -> bool:
    settings = get_settings()

    if dry_run:
        print("=== DRY RUN - DDL only ===")
        print(VIDEOS_TABLE_DDL)
        return True

    if not settings.snowflake_account or not settings.snowflake_user:
        print("ERROR: Missing SNOWFLAKE_ACCOUNT or SNOWFLAKE_USER")
        return False

    config = SnowflakeConfig(
        account=settings.snowflake_account,
        user=settings.snowflake_user,
        password=settings.snowflake_password or None,
        private_key_path=settings.snowflake_private_key_path,
        database=settings.snowflake_database,
        schema=settings.snowflake_schema,
        warehouse=settings.snowflake_warehouse,
        role=settings.snowflake_role,
    )

    try:
        print(f"Connecting to Snowflake account: {config.account}")
        with get_snowflake_connection(config) as conn:
            cursor = conn.cursor()
            try:
                cursor.execute(f"CREATE SCHEMA IF NOT EXISTS {config.database}.{config.schema}")
                cursor.execute(f"USE SCHEMA {config.database}.{config.schema}")
                cursor.execute(VIDEOS_TABLE_DDL)
                conn.commit()
            finally:
                cursor.close()
    except SnowflakeConnectionError as e:
        print(f"ERROR connecting to Snowflake: {e}")
        return False

    print(f"Table {config.database}.{config.schema}.VIDEOS is ready")
    return True


def main():
    import argparse

    parser = argparse.ArgumentParser(description='Create the videos table in Snowflake')
    parser.add_argument('--dry-run', action='store_true', help='Print the DDL, don\'t connect')
    args = parser.parse_args()

    sys.exit(0 if create_schema(dry_run=args.dry_run) else 1)


if __name__ == '__main__':
    main()
