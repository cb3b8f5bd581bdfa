import unittest
from concurrent.futures import ThreadPoolExecutor
from unittest import mock

from sqlalchemy.exc import OperationalError

from checkin_service.errors import InvalidArgument
from checkin_service.extensions import db
from checkin_service.models.claim import Claim, ClaimResult, ItemKind
from tests.base import AppTestCase


class TestItemKind(unittest.TestCase):

    def test_parse(self):
        self.assertIs(ItemKind.parse('garment'), ItemKind.GARMENT)
        self.assertIs(ItemKind.parse(' TSHIRT '), ItemKind.GARMENT)
        self.assertIs(ItemKind.parse('meal'), ItemKind.MEAL)
        self.assertIs(ItemKind.parse(ItemKind.MEAL), ItemKind.MEAL)

    def test_parse_rejects_unknown(self):
        for value in ('hat', '', None, 3):
            with self.assertRaises(InvalidArgument) as ctx:
                ItemKind.parse(value)
            self.assertEqual(ctx.exception.error_code, 'INVALID_ITEM_KIND')


class TestClaimLedger(AppTestCase):

    def setUp(self):
        super().setUp()
        self.ledger = self.checkin.ledger

    def test_claim_timestamps_are_timezone_aware(self):
        for name in ('garment_claimed_at', 'meal_claimed_at', 'created_at', 'updated_at'):
            self.assertTrue(Claim.__table__.c[name].type.timezone, name)

    def test_status_is_none_before_anything_happens(self):
        self.assertIsNone(self.ledger.status('S001'))

    def test_initialize_is_idempotent(self):
        self.ledger.initialize('S001')
        self.ledger.initialize('S001')

        claim = self.ledger.status('S001')
        self.assertFalse(claim.garment_claimed)
        self.assertFalse(claim.meal_claimed)
        self.assertIsNone(claim.garment_claimed_at)

    def test_claim_then_already_claimed(self):
        self.assertIs(self.ledger.claim('S001', ItemKind.GARMENT), ClaimResult.CLAIMED)
        first_stamp = self.ledger.status('S001').garment_claimed_at
        self.assertIsNotNone(first_stamp)

        self.assertIs(self.ledger.claim('S001', ItemKind.GARMENT), ClaimResult.ALREADY_CLAIMED)
        claim = self.ledger.status('S001')
        self.assertTrue(claim.garment_claimed)
        self.assertEqual(claim.garment_claimed_at, first_stamp)

    def test_items_are_independent(self):
        self.assertIs(self.ledger.claim('S001', 'tshirt'), ClaimResult.CLAIMED)
        self.assertIs(self.ledger.claim('S001', 'meal'), ClaimResult.CLAIMED)

        claim = self.ledger.status('S001')
        self.assertTrue(claim.garment_claimed)
        self.assertTrue(claim.meal_claimed)
        self.assertIsNotNone(claim.meal_claimed_at)

    def test_concurrent_claims_have_exactly_one_winner(self):
        self.ledger.initialize('S001')
        db.session.remove()

        def attempt(_):
            with self.app.app_context():
                return self.ledger.claim('S001', ItemKind.GARMENT)

        with ThreadPoolExecutor(max_workers=8) as pool:
            results = list(pool.map(attempt, range(8)))

        self.assertEqual(results.count(ClaimResult.CLAIMED), 1)
        self.assertEqual(results.count(ClaimResult.ALREADY_CLAIMED), 7)

        claim = self.ledger.status('S001')
        self.assertTrue(claim.garment_claimed)
        self.assertIsNotNone(claim.garment_claimed_at)
        self.assertFalse(claim.meal_claimed)

    def test_concurrent_first_claims_create_one_record(self):
        def attempt(_):
            with self.app.app_context():
                return self.ledger.claim('S002', ItemKind.MEAL)

        with ThreadPoolExecutor(max_workers=2) as pool:
            results = list(pool.map(attempt, range(2)))

        self.assertEqual(sorted(r.value for r in results), ['already_claimed', 'claimed'])

    def test_failed_claim_leaves_record_untouched(self):
        self.ledger.initialize('S001')

        with mock.patch.object(db.session, 'commit', side_effect=OperationalError('COMMIT', {}, Exception('disk gone'))):
            with self.assertRaises(OperationalError):
                self.ledger.claim('S001', ItemKind.GARMENT)

        claim = self.ledger.status('S001')
        self.assertFalse(claim.garment_claimed)
        self.assertIsNone(claim.garment_claimed_at)
        self.assertIs(self.ledger.claim('S001', ItemKind.GARMENT), ClaimResult.CLAIMED)

    def test_set_status_toggles_freely(self):
        self.ledger.claim('S001', ItemKind.GARMENT)

        self.ledger.set_status('S001', ItemKind.GARMENT, True)
        claim = self.ledger.set_status('S001', ItemKind.GARMENT, False)
        self.assertFalse(claim.garment_claimed)

        self.ledger.set_status('S001', ItemKind.GARMENT, False)
        self.assertFalse(self.ledger.status('S001').garment_claimed)

    def test_set_status_false_keeps_timestamp(self):
        self.ledger.set_status('S001', ItemKind.MEAL, True)
        stamp = self.ledger.status('S001').meal_claimed_at
        self.assertIsNotNone(stamp)

        self.ledger.set_status('S001', ItemKind.MEAL, False)
        claim = self.ledger.status('S001')
        self.assertFalse(claim.meal_claimed)
        self.assertEqual(claim.meal_claimed_at, stamp)

    def test_claim_after_unclaim_succeeds_again(self):
        self.ledger.claim('S001', ItemKind.MEAL)
        self.ledger.set_status('S001', ItemKind.MEAL, False)
        self.assertIs(self.ledger.claim('S001', ItemKind.MEAL), ClaimResult.CLAIMED)

    def test_set_status_rejects_non_boolean(self):
        with self.assertRaises(InvalidArgument) as ctx:
            self.ledger.set_status('S001', ItemKind.MEAL, 'true')
        self.assertEqual(ctx.exception.error_code, 'INVALID_FLAG')
        self.assertIsNone(self.ledger.status('S001'))

    def test_blank_identifier_rejected_without_writing(self):
        calls = [
            lambda ident: self.ledger.initialize(ident),
            lambda ident: self.ledger.claim(ident, ItemKind.GARMENT),
            lambda ident: self.ledger.set_status(ident, ItemKind.MEAL, True),
        ]
        for call in calls:
            for ident in ('', '   ', None):
                with self.assertRaises(InvalidArgument) as ctx:
                    call(ident)
                self.assertEqual(ctx.exception.error_code, 'VALIDATION_ERROR')

        self.assertEqual(Claim.query.count(), 0)


if __name__ == '__main__':
    unittest.main()
