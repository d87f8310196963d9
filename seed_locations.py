import json
import os
import sys

import django

# Setup Django Environment
os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'config.settings')
django.setup()

from api.db import get_db


def load(path):
    with open(path, encoding='utf-8') as fh:
        data = json.load(fh)
    # phpMyAdmin-style exports wrap rows as [{"type": "table", "data": [...]}]
    if isinstance(data, list) and data and isinstance(data[-1], dict) and 'data' in data[-1]:
        data = data[-1]['data']
    return data


def seed_locations(districts_path, upazilas_path):
    db = get_db()

    print("--- Seeding Locations (Replacing Existing) ---")
    for name, path in (('districts', districts_path), ('upazilas', upazilas_path)):
        rows = load(path)
        db[name].delete_many({})
        if rows:
            db[name].insert_many(rows)
        print(f"{name}: {len(rows)} rows from {path}")
    print("--- Done ---")


if __name__ == "__main__":
    if len(sys.argv) != 3:
        print("Usage: python seed_locations.py <districts.json> <upazilas.json>")
        sys.exit(1)
    seed_locations(sys.argv[1], sys.argv[2])
