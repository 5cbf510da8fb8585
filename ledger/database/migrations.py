"""Versioned schema migrations.

The ``versions`` table holds a single row with the schema generation. A fresh
store has no row (generation 0). ``SchemaMigrator.run`` applies every step
whose target generation is above the stored one, in order, and records the
new generation after each step.

Statements run one transaction each, so a failing step leaves the statements
before it applied. Every DDL statement is create-if-absent, which lets the
next process start re-run the step over whatever already exists.

Callers must finish ``run_migrations`` before touching application tables.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Sequence

from sqlalchemy import func, insert, select, update
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.schema import CreateTable
from sqlalchemy.sql.base import Executable

from ledger.core.errors import MigrationError
from ledger.database.engine import get_engine
from ledger.models.item import Item
from ledger.models.stock_change import StockChange
from ledger.models.version import SchemaVersion

logger = logging.getLogger(__name__)

_versions_table = SchemaVersion.__table__


@dataclass(frozen=True)
class MigrationStep:
    version: int
    description: str
    statements: tuple[Executable, ...]


MIGRATIONS: tuple[MigrationStep, ...] = (
    MigrationStep(
        version=1,
        description="create items and stock_changes",
        statements=(
            CreateTable(Item.__table__, if_not_exists=True),
            CreateTable(StockChange.__table__, if_not_exists=True),
        ),
    ),
)


def _check_steps(steps: Sequence[MigrationStep]) -> None:
    for expected, step in enumerate(steps, start=1):
        if step.version != expected:
            raise ValueError(
                "Migration steps must be numbered 1..N in order; "
                "found version {} at position {}".format(step.version, expected)
            )


class SchemaMigrator:
    def __init__(self, engine: Engine, steps: Sequence[MigrationStep] = MIGRATIONS):
        _check_steps(steps)
        self._engine = engine
        self._steps = tuple(steps)

    @property
    def latest_version(self) -> int:
        return self._steps[-1].version if self._steps else 0

    def current_version(self) -> int:
        with self._engine.connect() as conn:
            number = conn.execute(select(func.max(_versions_table.c.number))).scalar()
        return int(number) if number is not None else 0

    def run(self) -> int:
        """Bring the store to ``latest_version``; returns the final generation."""
        try:
            self._execute(CreateTable(_versions_table, if_not_exists=True))
            current = self.current_version()
        except SQLAlchemyError as exc:
            logger.exception("Unable to read the schema version.")
            raise MigrationError("Unable to read the schema version.") from exc

        if current >= self.latest_version:
            logger.info("Schema is up to date at version %d.", current)
            return current

        for step in self._steps:
            if step.version <= current:
                continue
            logger.info("Applying schema migration %d: %s", step.version, step.description)
            try:
                for statement in step.statements:
                    self._execute(statement)
                self._record_version(step.version, had_row=current > 0)
            except SQLAlchemyError as exc:
                logger.exception("Schema migration %d failed.", step.version)
                raise MigrationError(
                    "Schema migration {} ({}) failed.".format(step.version, step.description)
                ) from exc
            current = step.version

        logger.info("Schema migrated to version %d.", current, extra={"schema_version": current})
        return current

    def _execute(self, statement: Executable) -> None:
        with self._engine.begin() as conn:
            conn.execute(statement)

    def _record_version(self, version: int, *, had_row: bool) -> None:
        with self._engine.begin() as conn:
            if had_row:
                conn.execute(update(_versions_table).values(number=version))
            else:
                conn.execute(insert(_versions_table).values(number=version))


def run_migrations(engine: Optional[Engine] = None) -> int:
    return SchemaMigrator(engine or get_engine()).run()


__all__ = ["MIGRATIONS", "MigrationStep", "SchemaMigrator", "run_migrations"]
