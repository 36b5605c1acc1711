"""Standalone script to create DB tables, seed the default jurisdiction rules and check every stored rule loads."""
import os
import sys

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from staywatch.database import SessionLocal
from staywatch.seed import init_rules
from staywatch.services.rule_registry import RuleRegistry, db_rule_loader

if __name__ == "__main__":
    registry = RuleRegistry(db_rule_loader(SessionLocal))
    added = init_rules(SessionLocal, registry)
    print(f"Jurisdiction rules seeded: {added} added, {len(registry.all())} active.")
