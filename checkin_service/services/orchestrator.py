"""
Check-in Orchestrator
Wires Token Authority -> Roster Store -> Claim Ledger for the validate,
scan, claim and admin flows. Unknown identifiers and unknown tokens come
back as None; the routes decide what that means for the caller.
"""

import logging

from checkin_service.services.claim_service import ClaimLedger
from checkin_service.services.roster_service import RosterStore
from checkin_service.services.token_service import TokenAuthority

logger = logging.getLogger(__name__)


class CheckinOrchestrator:
    def __init__(self, roster: RosterStore, tokens: TokenAuthority, ledger: ClaimLedger):
        self.roster = roster
        self.tokens = tokens
        self.ledger = ledger

    @classmethod
    def from_db(cls, db):
        return cls(RosterStore(db), TokenAuthority(db), ClaimLedger(db))

    def validate_identifier(self, identifier):
        return self.roster.find(identifier)

    def issue_credential(self, identifier):
        """Look the attendee up and mint a new credential. None when unknown."""
        attendee = self.roster.find(identifier)
        if attendee is None:
            return None
        # Bind to the stored casing, not whatever the caller typed
        credential = self.tokens.mint(attendee.identifier)
        logger.info("Issued credential for %s", attendee.identifier)
        return attendee, credential

    def resolve_credential(self, credential):
        identifier = self.tokens.resolve(credential)
        if identifier is None:
            return None
        return self.roster.find(identifier)

    def scan(self, credential):
        attendee = self.resolve_credential(credential)
        if attendee is None:
            return None
        self.ledger.initialize(attendee.identifier)
        return attendee, self.ledger.status(attendee.identifier)

    def claim_item(self, credential, item):
        attendee = self.resolve_credential(credential)
        if attendee is None:
            return None
        result = self.ledger.claim(attendee.identifier, item)
        return attendee, result, self.ledger.status(attendee.identifier)

    def claim_status(self, identifier):
        attendee = self.roster.find(identifier)
        if attendee is None:
            return None
        return attendee, self.ledger.status(attendee.identifier)

    def set_item_status(self, identifier, item, collected):
        attendee = self.roster.find(identifier)
        if attendee is None:
            return None
        return attendee, self.ledger.set_status(attendee.identifier, item, collected)

    def record_consent(self, identifier, consented):
        return self.roster.update_consent(identifier, consented)

    def import_roster(self, source):
        return self.roster.import_rows(source)
