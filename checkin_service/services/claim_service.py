"""
Claim Service — Claim Ledger
Records one-time distribution of the garment and the meal coupon.

Each claim runs in a single transaction:
    insert-if-absent -> SELECT ... FOR UPDATE -> conditional UPDATE -> COMMIT
The row lock serializes concurrent claims for one attendee across every
process sharing the database; the ``WHERE <flag> = false`` guard on the
update keeps the transition one-way on stores that ignore FOR UPDATE.
"""

import logging
from datetime import datetime, timezone

from sqlalchemy import false, update
from sqlalchemy.dialects import postgresql, sqlite

from checkin_service.errors import InvalidArgument, require_identifier
from checkin_service.models.claim import Claim, ClaimResult, ItemKind

logger = logging.getLogger(__name__)

_UPSERT_DIALECTS = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


def _now():
    return datetime.now(timezone.utc)


class ClaimLedger:
    def __init__(self, db):
        self.db = db

    def _insert_if_absent(self, identifier):
        dialect = self.db.session.get_bind().dialect.name
        insert = _UPSERT_DIALECTS.get(dialect)
        if insert is None:
            raise NotImplementedError(f"Unsupported database dialect: {dialect}")

        stmt = (
            insert(Claim.__table__)
            .values(attendee_identifier=identifier, garment_claimed=False, meal_claimed=False)
            .on_conflict_do_nothing(index_elements=["attendee_identifier"])
        )
        self.db.session.execute(stmt)

    def _lock(self, identifier):
        return (
            Claim.query.with_for_update()
            .populate_existing()
            .filter_by(attendee_identifier=identifier)
            .one()
        )

    def initialize(self, identifier):
        """Make sure a claim row exists. Safe to call any number of times."""
        require_identifier(identifier)
        try:
            self._insert_if_absent(identifier)
            self.db.session.commit()
        except Exception:
            self.db.session.rollback()
            raise

    def status(self, identifier):
        """Current claim row, or None when the attendee has never been seen."""
        return (
            Claim.query.populate_existing()
            .filter_by(attendee_identifier=identifier)
            .first()
        )

    def claim(self, identifier, item):
        """
        Flip ``item`` from unclaimed to claimed for ``identifier``.

        Returns ClaimResult.CLAIMED for the one caller that performs the
        transition and ClaimResult.ALREADY_CLAIMED for everybody else.
        Nothing is written in the already-claimed case; any exception rolls
        the whole transaction back and is re-raised.
        """
        item = ItemKind.parse(item)
        require_identifier(identifier)
        session = self.db.session

        try:
            self._insert_if_absent(identifier)
            record = self._lock(identifier)

            claimed = getattr(record, item.flag)
            if not claimed:
                now = _now()
                flag_column = getattr(Claim, item.flag)
                result = session.execute(
                    update(Claim)
                    .where(Claim.attendee_identifier == identifier, flag_column == false())
                    .values({item.flag: True, item.timestamp: now, "updated_at": now})
                    .execution_options(synchronize_session=False)
                )
                claimed = result.rowcount != 1

            if claimed:
                session.rollback()
                logger.info("%s already claimed by %s", item.value, identifier)
                return ClaimResult.ALREADY_CLAIMED

            session.commit()
        except Exception:
            session.rollback()
            logger.exception("Claim of %s for %s failed", item.value, identifier)
            raise

        logger.info("%s claimed by %s", item.value, identifier)
        return ClaimResult.CLAIMED

    def set_status(self, identifier, item, collected):
        """
        Administrative override: set the flag to ``collected`` unconditionally.

        Setting True stamps the time; setting False keeps the previous stamp.
        """
        item = ItemKind.parse(item)
        if not isinstance(collected, bool):
            raise InvalidArgument("INVALID_FLAG", "collected must be a boolean")
        require_identifier(identifier)

        session = self.db.session
        try:
            self._insert_if_absent(identifier)
            record = self._lock(identifier)

            now = _now()
            setattr(record, item.flag, collected)
            if collected:
                setattr(record, item.timestamp, now)
            record.updated_at = now

            session.commit()
        except Exception:
            session.rollback()
            logger.exception("Status update of %s for %s failed", item.value, identifier)
            raise

        logger.info("%s for %s set to %s", item.value, identifier, collected)
        return record
