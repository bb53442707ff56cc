#!/usr/bin/env python
"""
Report how every abstract's file resolves on disk.

Runs the same resolver as the download endpoint and prints one line per
abstract, so operators can find records whose stored file_path is stale
or whose file only resolves through a low-confidence guess. Nothing is
written back to the database.

Usage:
    PYTHONPATH=.
    python scripts/audit_abstract_files.py
    python scripts/audit_abstract_files.py --only-problems
    python scripts/audit_abstract_files.py --id 12 --id 15
"""

import argparse
import sys

from sqlmodel import Session, select

from api.abstracts.errors import AbstractFileNotFound
from api.abstracts.models import Abstract, ResolutionTier
from api.abstracts.resolver import resolve_abstract_file
from core.config import Settings, get_settings
from core.db import get_session
from core.logger import logger


class AbstractFileAuditor:
    """Resolves abstracts and tallies the outcome per tier."""

    def __init__(self, session: Session, settings: Settings, only_problems: bool = False):
        self.session = session
        self.settings = settings
        self.only_problems = only_problems
        self.stats = {tier.value: 0 for tier in ResolutionTier}
        self.stats["missing"] = 0

    def abstracts(self, ids: list[int] | None = None) -> list[Abstract]:
        query = select(Abstract).order_by(Abstract.id)
        if ids:
            query = query.where(Abstract.id.in_(ids))
        return list(self.session.exec(query).all())

    def audit(self, abstract: Abstract) -> str | None:
        """Return the report line for an abstract, None when it is hidden"""
        try:
            resolved = resolve_abstract_file(abstract, self.settings)
        except AbstractFileNotFound:
            self.stats["missing"] += 1
            return f"{abstract.id}\tMISSING\t-\t{abstract.file_path or '-'}"

        self.stats[resolved.tier.value] += 1
        if self.only_problems and resolved.tier == ResolutionTier.DIRECT_PATH:
            return None
        return (
            f"{abstract.id}\t{resolved.tier.value}\t"
            f"{resolved.confidence.value}\t{resolved.path}"
        )

    def run(self, ids: list[int] | None = None) -> int:
        for abstract in self.abstracts(ids):
            line = self.audit(abstract)
            if line is not None:
                print(line)

        logger.info("Audit completed: %s", self.stats)
        return 1 if self.stats["missing"] else 0


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[1])
    parser.add_argument(
        "--id", dest="ids", type=int, action="append",
        help="Only audit this abstract id (repeatable)",
    )
    parser.add_argument(
        "--only-problems", action="store_true",
        help="Hide abstracts whose stored file_path is still valid",
    )
    args = parser.parse_args(argv)

    session = next(get_session())
    auditor = AbstractFileAuditor(
        session, get_settings(), only_problems=args.only_problems
    )
    return auditor.run(args.ids)


if __name__ == "__main__":
    sys.exit(main())
