from checkin_service.models.attendee import Attendee
from checkin_service.models.credential import Credential
from checkin_service.models.claim import Claim, ClaimResult, ItemKind
