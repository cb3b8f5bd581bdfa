"""
Token Service — Token Authority
Mints opaque scan credentials bound to an attendee and resolves them back.

Credentials never expire and are never revoked; an attendee may hold any
number of them at once.
"""

import logging
import secrets

from sqlalchemy.exc import IntegrityError

from checkin_service.errors import TokenGenerationExhausted, require_identifier
from checkin_service.models.credential import Credential

logger = logging.getLogger(__name__)

TOKEN_BYTES = 32  # 64 hex characters
MAX_MINT_ATTEMPTS = 5


def generate_token():
    return secrets.token_hex(TOKEN_BYTES)


class TokenAuthority:
    def __init__(self, db, token_factory=generate_token, max_attempts=MAX_MINT_ATTEMPTS):
        self.db = db
        self.token_factory = token_factory
        self.max_attempts = max_attempts

    def mint(self, identifier):
        """
        Store a fresh credential for ``identifier`` and return its value.

        A value that already exists, or loses a concurrent insert race on the
        unique constraint, is discarded and a new one drawn. Any other
        integrity failure is re-raised as is.
        """
        require_identifier(identifier)
        session = self.db.session

        for attempt in range(1, self.max_attempts + 1):
            value = self.token_factory()

            if Credential.query.filter_by(value=value).first() is not None:
                logger.warning("Token collision on attempt %d for %s", attempt, identifier)
                continue

            try:
                session.add(Credential(value=value, attendee_identifier=identifier))
                session.commit()
            except IntegrityError:
                session.rollback()
                # Only a duplicate value is retried
                if Credential.query.filter_by(value=value).first() is None:
                    raise
                logger.warning("Token insert rejected as duplicate on attempt %d for %s", attempt, identifier)
                continue
            except Exception:
                session.rollback()
                raise
            return value

        logger.error("Gave up minting a token for %s after %d attempts", identifier, self.max_attempts)
        raise TokenGenerationExhausted(
            f"Failed to generate unique token after {self.max_attempts} attempts"
        )

    def resolve(self, credential):
        """Identifier bound to ``credential``, or None."""
        if not credential or not str(credential).strip():
            return None
        record = Credential.query.filter_by(value=str(credential).strip()).first()
        return record.attendee_identifier if record else None

    def validate(self, credential):
        return self.resolve(credential) is not None

    def credentials_for(self, identifier):
        return (
            Credential.query.filter_by(attendee_identifier=identifier)
            .order_by(Credential.created_at.desc(), Credential.id.desc())
            .all()
        )
