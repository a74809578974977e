"""Overdue-loan sweep: find late loans and notify their customers."""

import logging
from dataclasses import dataclass, field
from typing import Optional

from ..exceptions import TransportError
from ..lending.manager import LoanLedger
from ..notifications.dispatcher import NotificationDispatcher
from ..notifications.transport import SmtpTransport

logger = logging.getLogger(__name__)

OVERDUE_NOTICE = (
    "Attention! You have an overdue loan. "
    "Please return the book as soon as possible."
)


@dataclass
class SweepResult:
    """Outcome of one sweep run."""

    late_loans: int = 0
    recipients: list[str] = field(default_factory=list)
    sent: bool = False
    error: Optional[str] = None


class OverdueSweep:
    """One pass over the ledger's late loans."""

    def __init__(
        self,
        ledger: LoanLedger,
        dispatcher: NotificationDispatcher,
        message: str = OVERDUE_NOTICE,
    ):
        self.ledger = ledger
        self.dispatcher = dispatcher
        self.message = message

    def run(self) -> SweepResult:
        """Notify every customer holding a late loan.

        Recipients are listed once per late loan, so a customer with two late
        loans appears twice. Transport failures are logged and reported in
        the result rather than raised.
        """
        late_loans = self.ledger.get_all_late_loans()
        result = SweepResult(late_loans=len(late_loans))

        if not late_loans:
            logger.info("Overdue sweep: no late loans")
            return result

        result.recipients = [loan.contact for loan in late_loans]

        try:
            self.dispatcher.send_batch(self.message, result.recipients)
        except TransportError as e:
            result.error = e.message
            logger.error(
                "Overdue sweep: failed to notify %d recipient(s): %s",
                len(result.recipients), e.message, exc_info=True,
            )
            return result

        result.sent = True
        logger.info(
            "Overdue sweep: notified %d recipient(s) about %d late loan(s)",
            len(result.recipients), result.late_loans,
        )
        return result


def build_overdue_sweep(db, config) -> OverdueSweep:
    """Wire a sweep from a database and application config."""
    ledger = LoanLedger(db, late_loan_days=config.late_loan_days)
    dispatcher = NotificationDispatcher(
        SmtpTransport.from_config(config),
        from_address=config.mail_from,
        subject=config.mail_subject,
    )
    return OverdueSweep(ledger, dispatcher)
