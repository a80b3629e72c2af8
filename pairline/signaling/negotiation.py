"""Endpoint-side offer/answer state and the glare tie-break.

The server relays offers verbatim and never resolves glare itself. Each
endpoint runs a ``Negotiator`` that applies the same rule, keyed on the
role the server assigned:

* The Initiator offers when the room becomes ready.
* An offer arriving while stable is accepted by either role.
* An offer arriving while a local offer is still unanswered (glare) is
  ignored by the Responder, which keeps waiting for its answer. The
  Initiator rolls back its own offer and accepts the incoming one.

Both sides therefore converge on the Responder's offer, whatever order
the two offers cross in.
"""

from enum import Enum
from typing import Any, Optional

from pairline.signaling.connection import Role
from pairline.utils.logger import get_logger

logger = get_logger(__name__)


class NegotiationState(str, Enum):
    """Local signaling state."""
    STABLE = "stable"
    HAVE_LOCAL_OFFER = "have_local_offer"


class OfferDecision(str, Enum):
    """What to do with an incoming offer."""
    ACCEPT = "accept"
    ROLLBACK_AND_ACCEPT = "rollback_and_accept"
    IGNORE = "ignore"

    @property
    def accepted(self) -> bool:
        return self is not OfferDecision.IGNORE


class Negotiator:
    """Offer/answer bookkeeping for one endpoint."""

    def __init__(self, role: Role = Role.UNASSIGNED):
        self.role = role
        self.state = NegotiationState.STABLE
        self.pending_offer: Optional[Any] = None
        # Offer both sides agreed on in the last completed exchange
        self.agreed_offer: Optional[Any] = None

    def assign(self, role: Role) -> None:
        """Set the role announced by the server and reset negotiation."""
        self.role = role
        self.reset()

    def reset(self) -> None:
        self.state = NegotiationState.STABLE
        self.pending_offer = None
        self.agreed_offer = None

    def peer_left(self) -> None:
        """The remaining member always becomes the Initiator."""
        self.assign(Role.INITIATOR)

    @property
    def should_offer_on_ready(self) -> bool:
        return self.role == Role.INITIATOR

    @property
    def is_polite(self) -> bool:
        # The Initiator is the side that backs off on glare.
        return self.role != Role.RESPONDER

    def local_offer(self, offer: Any) -> None:
        """Record an offer this endpoint is about to send."""
        self.pending_offer = offer
        self.state = NegotiationState.HAVE_LOCAL_OFFER

    def remote_offer(self, offer: Any) -> OfferDecision:
        """Decide how to treat an offer from the peer.

        Args:
            offer: Opaque session description from the peer

        Returns:
            The decision. For an accepting decision the caller must send
            an answer.
        """
        if self.state == NegotiationState.STABLE:
            self.agreed_offer = offer
            return OfferDecision.ACCEPT

        if not self.is_polite:
            logger.info("Glare: keeping local offer, ignoring the Initiator's offer")
            return OfferDecision.IGNORE

        logger.info("Glare: rolling back local offer in favour of the Responder's offer")
        self.pending_offer = None
        self.state = NegotiationState.STABLE
        self.agreed_offer = offer
        return OfferDecision.ROLLBACK_AND_ACCEPT

    def remote_answer(self, answer: Any) -> bool:
        """Apply an answer from the peer.

        Returns:
            True if it answers the pending offer, False if stale
        """
        if self.state != NegotiationState.HAVE_LOCAL_OFFER:
            logger.debug("Ignoring answer with no pending local offer")
            return False
        self.agreed_offer = self.pending_offer
        self.pending_offer = None
        self.state = NegotiationState.STABLE
        return True
