from __future__ import annotations

import sqlite3
import unittest
from datetime import datetime

from listing_queries import (
    BindingError,
    CursorInvalidatedError,
    Database,
    Dialect,
    PostgresDialect,
    QueryExecutionFailure,
    SQLiteDialect,
    StatementPreparationFailure,
)
from listing_queries.core import (
    ALL_STATES,
    BUSINESSES_IN_ZIP_WITH_CATEGORIES,
    CITIES_IN_STATE,
    INSERT_TIP,
    ZIPS_IN_CITY,
    ParamType,
    StatementTemplate,
)
from listing_queries.ports.db_api.cursor import RowCursor, row_to_mapping
from tests.listing_fixture import connect_seeded


class _DummyCursor:
    def __init__(self, description=None):
        self.description = description


class _QmarkDialect(Dialect):
    paramstyle = "qmark"


class _InvalidDialect(Dialect):
    paramstyle = "invalid"


class DialectTests(unittest.TestCase):
    def test_builtin_dialect_placeholders(self) -> None:
        self.assertEqual(SQLiteDialect().placeholder("x"), ":x")
        self.assertEqual(PostgresDialect().placeholder("x"), "%s")
        self.assertEqual(_QmarkDialect().placeholder("x"), "?")

    def test_invalid_paramstyle_raises(self) -> None:
        with self.assertRaises(ValueError):
            _InvalidDialect().placeholder("x")

    def test_postgres_compiles_positional_parameters(self) -> None:
        dialect = PostgresDialect()
        compiled = dialect.compile(ZIPS_IN_CITY)
        self.assertEqual(
            compiled.sql,
            "SELECT DISTINCT zip FROM business WHERE business_state = %s AND city = %s",
        )
        self.assertEqual(compiled.param_order, ("state", "city"))

        params = dialect.driver_params(
            compiled, ZIPS_IN_CITY.bind({"city": "Pittsburgh", "state": "PA"})
        )
        self.assertEqual(params, ["PA", "Pittsburgh"])

    def test_postgres_keeps_array_membership(self) -> None:
        dialect = PostgresDialect()
        compiled = dialect.compile(BUSINESSES_IN_ZIP_WITH_CATEGORIES)
        self.assertIn("Category.category = ANY(%s)", compiled.sql)

        params = dialect.driver_params(
            compiled,
            BUSINESSES_IN_ZIP_WITH_CATEGORIES.bind({"zip": "15203", "categories": ("Bikes",)}),
        )
        self.assertEqual(params, [15203, ["Bikes"]])

    def test_postgres_without_parameters_passes_none(self) -> None:
        dialect = PostgresDialect()
        compiled = dialect.compile(ALL_STATES)
        self.assertIsNone(dialect.driver_params(compiled, ALL_STATES.bind({})))

    def test_postgres_validation_prepares_then_deallocates(self) -> None:
        steps = PostgresDialect().validation_steps(CITIES_IN_STATE)
        self.assertEqual(
            steps,
            [
                (
                    "PREPARE listing_cities_in_state (varchar) AS "
                    "SELECT DISTINCT city FROM business WHERE business_state = $1",
                    None,
                ),
                ("DEALLOCATE listing_cities_in_state", None),
            ],
        )

    def test_postgres_validation_types_follow_declaration(self) -> None:
        prepare, _ = PostgresDialect().validation_steps(INSERT_TIP)[0]
        self.assertTrue(
            prepare.startswith(
                "PREPARE listing_insert_tip (varchar, varchar, timestamp, varchar) AS INSERT"
            )
        )
        self.assertTrue(prepare.endswith("VALUES ($1, $2, $3, $4)"))

        prepare, _ = PostgresDialect().validation_steps(ALL_STATES)[0]
        self.assertEqual(
            prepare, "PREPARE listing_all_states AS SELECT DISTINCT business_state FROM business"
        )

    def test_sqlite_rewrites_array_membership_to_json_each(self) -> None:
        dialect = SQLiteDialect()
        compiled = dialect.compile(BUSINESSES_IN_ZIP_WITH_CATEGORIES)
        self.assertIn(
            "Category.category IN (SELECT value FROM json_each(:categories))", compiled.sql
        )
        self.assertNotIn("ANY", compiled.sql)

        params = dialect.driver_params(
            compiled,
            BUSINESSES_IN_ZIP_WITH_CATEGORIES.bind({"zip": 15203, "categories": ["Bikes", "Delis"]}),
        )
        self.assertEqual(params, {"zip": 15203, "categories": '["Bikes", "Delis"]'})

    def test_sqlite_binds_timestamps_as_text(self) -> None:
        value = SQLiteDialect().adapt_value(ParamType.TIMESTAMP, datetime(2024, 3, 1, 12, 30))
        self.assertEqual(value, "2024-03-01 12:30:00")

    def test_any_rewrite_ignores_scalar_parameters(self) -> None:
        template = StatementTemplate(
            name="scalar_any",
            sql="SELECT 1 WHERE 'a' = ANY(:tag)",
            params={"tag": ParamType.VARCHAR},
        )
        self.assertIn("= ANY(:tag)", SQLiteDialect().compile(template).sql)


class RowMappingTests(unittest.TestCase):
    def test_tuple_rows_use_description(self) -> None:
        cursor = _DummyCursor(description=[("city",), ("zip",)])
        self.assertEqual(row_to_mapping(cursor, ("Mesa", 85201)), {"city": "Mesa", "zip": 85201})

    def test_tuple_without_description_raises(self) -> None:
        with self.assertRaises(TypeError):
            row_to_mapping(_DummyCursor(description=None), (1,))

    def test_mapping_rows_are_copied(self) -> None:
        source = {"city": "Mesa"}
        mapped = row_to_mapping(_DummyCursor(), source)
        self.assertEqual(mapped, source)
        self.assertIsNot(mapped, source)

    def test_sqlite_row_objects_are_supported(self) -> None:
        conn = sqlite3.connect(":memory:")
        conn.row_factory = sqlite3.Row
        cur = conn.execute("SELECT 'PA' AS business_state")
        self.assertEqual(row_to_mapping(cur, cur.fetchone()), {"business_state": "PA"})
        conn.close()

    def test_unsupported_type_raises(self) -> None:
        with self.assertRaises(TypeError):
            row_to_mapping(_DummyCursor(), 12345)


class _ExplodingCursor:
    description = [("city",)]

    def __init__(self) -> None:
        self.closed = False

    def fetchone(self):
        raise sqlite3.OperationalError("server closed the connection")

    def close(self) -> None:
        self.closed = True


class DatabaseAdapterTests(unittest.TestCase):
    def setUp(self) -> None:
        self.conn = connect_seeded()
        self.db = Database(self.conn, SQLiteDialect())

    def tearDown(self) -> None:
        self.db.close()

    def test_prepare_then_query(self) -> None:
        prepared = self.db.prepare(CITIES_IN_STATE)
        cities = {row["city"] for row in self.db.query(prepared, {"state": "AZ"})}
        self.assertEqual(cities, {"Phoenix", "Mesa"})

    def test_query_applies_transform(self) -> None:
        prepared = self.db.prepare(ALL_STATES)
        states = list(self.db.query(prepared, transform=lambda row: row["business_state"]))
        self.assertCountEqual(states, ["PA", "AZ", "NV"])

    def test_prepare_rejects_schema_mismatch(self) -> None:
        template = StatementTemplate(name="ghost", sql="SELECT name FROM no_such_table")
        with self.assertRaises(StatementPreparationFailure) as ctx:
            self.db.prepare(template)
        self.assertIsInstance(ctx.exception.__cause__, sqlite3.Error)

    def test_prepare_does_not_execute_writes(self) -> None:
        self.db.prepare(INSERT_TIP)
        count = self.db.execute("SELECT COUNT(*) FROM tip").fetchone()[0]
        self.assertEqual(count, 0)

    def test_binding_error_raised_before_execution(self) -> None:
        prepared = self.db.prepare(CITIES_IN_STATE)
        with self.assertRaises(BindingError):
            self.db.query(prepared, {})
        with self.assertRaises(BindingError):
            self.db.query(prepared, {"state": "PA", "city": "Pittsburgh"})

    def test_run_returns_rowcount_and_wraps_constraint_errors(self) -> None:
        prepared = self.db.prepare(INSERT_TIP)
        values = {"user": "u1", "business": "b1", "date": "2024-03-01 12:30:00", "body": "ok"}
        with self.db.transaction():
            self.assertEqual(self.db.run(prepared, values), 1)

        with self.assertRaises(QueryExecutionFailure) as ctx:
            with self.db.transaction():
                self.db.run(prepared, values)
        self.assertIsInstance(ctx.exception.__cause__, sqlite3.IntegrityError)

    def test_transaction_rolls_back_on_error(self) -> None:
        prepared = self.db.prepare(INSERT_TIP)
        with self.assertRaises(RuntimeError):
            with self.db.transaction():
                self.db.run(
                    prepared,
                    {"user": "u2", "business": "b2", "date": "2024-03-02", "body": "gone"},
                )
                raise RuntimeError("boom")

        count = self.db.execute("SELECT COUNT(*) FROM tip").fetchone()[0]
        self.assertEqual(count, 0)

    def test_new_statement_invalidates_open_cursor(self) -> None:
        prepared = self.db.prepare(CITIES_IN_STATE)
        first = self.db.query(prepared, {"state": "AZ"})
        next(first)

        second = self.db.query(prepared, {"state": "PA"})
        with self.assertRaises(CursorInvalidatedError):
            next(first)
        self.assertEqual([row["city"] for row in second], ["Pittsburgh"])

    def test_exhausted_cursor_is_not_invalidated(self) -> None:
        prepared = self.db.prepare(CITIES_IN_STATE)
        first = self.db.query(prepared, {"state": "NV"})
        self.assertEqual(len(list(first)), 1)

        self.db.query(prepared, {"state": "PA"})
        self.assertEqual(list(first), [])

    def test_cursor_context_closes_unfinished_cursor(self) -> None:
        prepared = self.db.prepare(CITIES_IN_STATE)
        with self.db.query(prepared, {"state": "AZ"}) as rows:
            next(rows)
            self.assertTrue(rows.is_open)
        self.assertFalse(rows.is_open)
        self.assertEqual(list(rows), [])

    def test_fetch_failure_is_wrapped(self) -> None:
        raw = _ExplodingCursor()
        cursor = RowCursor(raw, statement="cities_in_state")
        with self.assertRaises(QueryExecutionFailure):
            next(cursor)
        self.assertTrue(raw.closed)
        self.assertFalse(cursor.is_open)

    def test_closed_database_rejects_work(self) -> None:
        prepared = self.db.prepare(ALL_STATES)
        self.db.close()
        self.db.close()
        self.assertTrue(self.db.closed)
        with self.assertRaises(RuntimeError):
            self.db.query(prepared)


if __name__ == "__main__":
    unittest.main()
