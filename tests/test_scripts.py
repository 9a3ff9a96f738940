from __future__ import annotations

import importlib.util
from pathlib import Path

SCRIPTS_DIR = Path(__file__).resolve().parents[1] / "scripts"


def _load(name):
    spec = importlib.util.spec_from_file_location(name, SCRIPTS_DIR / f"{name}.py")
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


def test_schema_splits_into_one_statement_per_table():
    init_database = _load("init_database")

    statements = init_database.load_statements()

    assert len(statements) == 15
    assert all(stmt.startswith("CREATE TABLE IF NOT EXISTS") for stmt in statements)
    assert any("UNIQUE KEY uq_sex_logs_user_date" in stmt for stmt in statements)


def test_set_admin_without_database_exits_1():
    import asyncio

    set_admin = _load("set_admin")

    assert asyncio.run(set_admin.set_admin("alice")) == 1
