"""
PostgreSQL only: forbid overlapping reserved intervals of one venue.

The ledger already serializes writers per venue; this constraint makes an
overlap impossible to commit even for writes that bypass it. Other
backends skip both directions.
"""

from django.db import migrations

CONSTRAINT = "interval_no_overlap"
TABLE = "bookings_availabilityinterval"


def add_exclusion(apps, schema_editor):
    if schema_editor.connection.vendor != "postgresql":
        return
    schema_editor.execute("CREATE EXTENSION IF NOT EXISTS btree_gist")
    schema_editor.execute(
        f"ALTER TABLE {TABLE} ADD CONSTRAINT {CONSTRAINT} "
        f"EXCLUDE USING gist (venue_id WITH =, tstzrange(start_at, end_at, '[)') WITH &&)"
    )


def drop_exclusion(apps, schema_editor):
    if schema_editor.connection.vendor != "postgresql":
        return
    schema_editor.execute(f"ALTER TABLE {TABLE} DROP CONSTRAINT IF EXISTS {CONSTRAINT}")


class Migration(migrations.Migration):

    dependencies = [
        ("bookings", "0001_initial"),
    ]

    operations = [
        migrations.RunPython(add_exclusion, drop_exclusion),
    ]
