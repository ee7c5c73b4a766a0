from decimal import Decimal

from django.db import IntegrityError, transaction
from django.db.models import Q, Sum
from django.utils import timezone
import logging

from core_backend.exceptions import DrawerSessionError, InsufficientInputError
from payments.money import quantize, to_decimal, ZERO
from settings.config import get_restaurant_settings
from .models import CashDrawerSession, LedgerEntry, Payout, ZReport

logger = logging.getLogger(__name__)


def _sum(queryset) -> Decimal:
    return queryset.aggregate(total=Sum("amount"))["total"] or ZERO


class AccountingService:
    """
    Cash drawer sessions and the append-only ledger behind them.

    Every cash movement in the restaurant lands here as a LedgerEntry:
    counter sales, payouts, rider floats and rider settlements on the
    DRAWER account, and the running liability of each rider on the
    RIDER account.
    """

    # ------------------------------------------------------------------
    # Sessions
    # ------------------------------------------------------------------

    @staticmethod
    def get_active_session(tenant=None):
        if tenant is None:
            return CashDrawerSession.objects.filter(status=CashDrawerSession.SessionStatus.OPEN).first()
        return CashDrawerSession.all_objects.filter(
            tenant=tenant, status=CashDrawerSession.SessionStatus.OPEN
        ).first()

    @staticmethod
    def lock_active_session(tenant):
        """
        OPEN session for ``tenant``, row-locked until the caller's transaction ends.

        A close running on another terminal either finishes first, in which
        case no session is returned, or waits until this write has committed.
        """
        session = (
            CashDrawerSession.all_objects.select_for_update()
            .filter(tenant=tenant, status=CashDrawerSession.SessionStatus.OPEN)
            .first()
        )
        if session is None or not session.is_open:
            return None
        return session

    @staticmethod
    @transaction.atomic
    def open_session(staff, opening_balance=0, tenant=None, notes: str = "") -> CashDrawerSession:
        """
        Open the drawer with a counted float.

        Raises:
            DrawerSessionError: If the restaurant already has an OPEN session
        """
        tenant = tenant or staff.tenant
        opening_balance = to_decimal(opening_balance or 0, "opening balance")
        if opening_balance < 0:
            raise InsufficientInputError("Opening balance cannot be negative")

        existing = AccountingService.get_active_session(tenant)
        if existing is not None:
            raise DrawerSessionError(
                f"A cash drawer session is already open (opened by {existing.opened_by} at {existing.opened_at:%H:%M})"
            )

        try:
            with transaction.atomic():
                session = CashDrawerSession.objects.create(
                    tenant=tenant,
                    opened_by=staff,
                    opening_balance=opening_balance,
                    notes=notes or "",
                )
        except IntegrityError:
            # Lost the race against another terminal opening at the same time
            raise DrawerSessionError("A cash drawer session is already open")

        logger.info(f"Cash drawer opened by {staff} with {opening_balance}")
        return session

    @staticmethod
    @transaction.atomic
    def record_entry(
        tenant,
        account: str,
        transaction_type: str,
        reference_type: str,
        amount,
        reference_id="",
        session=None,
        driver=None,
        description: str = "",
        processed_by=None,
    ):
        """
        Append one ledger entry; zero amounts are skipped.

        Raises:
            DrawerSessionError: If ``session`` has been closed
        """
        amount = to_decimal(amount, "amount")
        if amount == 0:
            return None
        if amount < 0:
            raise InsufficientInputError("Ledger amounts must be positive; pick the opposite entry type")

        if session is not None:
            session = CashDrawerSession.all_objects.select_for_update().get(pk=session.pk)
            if not session.is_open:
                raise DrawerSessionError(
                    "This cash drawer session is closed and its Z-report issued; no more entries can be posted"
                )

        return LedgerEntry.objects.create(
            tenant=tenant,
            account=account,
            transaction_type=transaction_type,
            reference_type=reference_type,
            reference_id=str(reference_id or ""),
            amount=amount,
            session=session,
            driver=driver,
            description=description[:255],
            processed_by=processed_by,
        )

    @staticmethod
    @transaction.atomic
    def record_drawer_entry(tenant, transaction_type, reference_type, amount, reference_id="", description="", processed_by=None):
        """DRAWER entry attached to whichever session is open right now."""
        session = AccountingService.lock_active_session(tenant)
        if session is None:
            logger.warning(
                f"No open cash drawer session; {reference_type} {transaction_type} of {amount} "
                f"recorded outside any session"
            )
        return AccountingService.record_entry(
            tenant,
            LedgerEntry.Account.DRAWER,
            transaction_type,
            reference_type,
            amount,
            reference_id=reference_id,
            session=session,
            description=description,
            processed_by=processed_by,
        )

    @staticmethod
    def record_sale(payment_transaction):
        """
        Put a counter sale into the drawer. Only cash moves the drawer;
        card and Raast payments are ignored here.
        """
        from payments.models import PaymentTransaction

        if payment_transaction.method != PaymentTransaction.PaymentMethod.CASH:
            return None
        order = payment_transaction.order
        return AccountingService.record_drawer_entry(
            order.tenant,
            LedgerEntry.TransactionType.DEBIT,
            LedgerEntry.ReferenceType.SALE,
            payment_transaction.amount,
            reference_id=payment_transaction.pk,
            description=f"Cash sale {order.order_number}",
            processed_by=payment_transaction.processed_by,
        )

    @staticmethod
    @transaction.atomic
    def record_payout(session_id, amount, category=Payout.Category.OTHER, notes: str = "", staff=None) -> Payout:
        """
        Take cash out of the drawer for an expense.

        Raises:
            DrawerSessionError: If the session is not OPEN
            InsufficientInputError: If the amount is not positive
        """
        amount = to_decimal(amount, "amount")
        if amount <= 0:
            raise InsufficientInputError("Payout amount must be greater than zero")
        if category not in Payout.Category.values:
            raise InsufficientInputError(f"'{category}' is not a valid payout category.")

        session = CashDrawerSession.objects.select_for_update().filter(pk=session_id).first()
        if session is None or not session.is_open:
            raise DrawerSessionError("Payouts require an open cash drawer session")

        payout = Payout.objects.create(
            tenant=session.tenant,
            session=session,
            amount=amount,
            category=category,
            notes=notes or "",
            processed_by=staff,
        )
        AccountingService.record_entry(
            session.tenant,
            LedgerEntry.Account.DRAWER,
            LedgerEntry.TransactionType.CREDIT,
            LedgerEntry.ReferenceType.PAYOUT,
            amount,
            reference_id=payout.pk,
            session=session,
            description=f"Payout ({category}) {notes}".strip(),
            processed_by=staff,
        )
        logger.info(f"Payout of {amount} ({category}) from drawer by {staff}")
        return payout

    # ------------------------------------------------------------------
    # Balances
    # ------------------------------------------------------------------

    @staticmethod
    def drawer_entries(session):
        return LedgerEntry.all_objects.filter(session=session, account=LedgerEntry.Account.DRAWER)

    @staticmethod
    def expected_cash(session):
        """opening + drawer debits - drawer credits for the session."""
        entries = AccountingService.drawer_entries(session)
        debits = _sum(entries.filter(transaction_type=LedgerEntry.TransactionType.DEBIT))
        credits = _sum(entries.filter(transaction_type=LedgerEntry.TransactionType.CREDIT))
        return session.opening_balance + debits - credits

    @staticmethod
    def session_metrics(session) -> dict:
        entries = AccountingService.drawer_entries(session)
        debit = Q(transaction_type=LedgerEntry.TransactionType.DEBIT)
        credit = Q(transaction_type=LedgerEntry.TransactionType.CREDIT)
        ref = LedgerEntry.ReferenceType

        adjustments_in = _sum(entries.filter(debit, reference_type=ref.ADJUSTMENT))
        adjustments_out = _sum(entries.filter(credit, reference_type=ref.ADJUSTMENT))
        return {
            "opening_balance": session.opening_balance,
            "cash_sales": _sum(entries.filter(debit, reference_type=ref.SALE)),
            "payouts": _sum(entries.filter(credit, reference_type=ref.PAYOUT)),
            "settlements": _sum(entries.filter(debit, reference_type=ref.SETTLEMENT)),
            "floats": _sum(entries.filter(credit, reference_type=ref.FLOAT)),
            "adjustments": adjustments_in - adjustments_out,
            "expected_cash": AccountingService.expected_cash(session),
        }

    @staticmethod
    def get_balance(driver):
        """What a rider currently owes the restaurant according to the ledger."""
        entries = LedgerEntry.all_objects.filter(driver=driver, account=LedgerEntry.Account.RIDER)
        debits = _sum(entries.filter(transaction_type=LedgerEntry.TransactionType.DEBIT))
        credits = _sum(entries.filter(transaction_type=LedgerEntry.TransactionType.CREDIT))
        return debits - credits

    # ------------------------------------------------------------------
    # Closing
    # ------------------------------------------------------------------

    @staticmethod
    @transaction.atomic
    def close_session(session_id, actual_balance, staff, notes: str = "") -> ZReport:
        """
        Count the drawer, record the variance and issue the Z-report.

        A variance is recorded for audit and never blocks the close.

        Raises:
            DrawerSessionError: If the session is already CLOSED
        """
        from .reports import build_z_report

        actual_balance = to_decimal(actual_balance, "actual balance")
        if actual_balance < 0:
            raise InsufficientInputError("Counted cash cannot be negative")

        session = CashDrawerSession.objects.select_for_update().get(pk=session_id)
        if not session.is_open:
            raise DrawerSessionError("This cash drawer session is already closed")

        currency = get_restaurant_settings(session.tenant).currency
        metrics = AccountingService.session_metrics(session)
        expected = quantize(currency, metrics["expected_cash"])
        variance = quantize(currency, actual_balance - expected)

        report = ZReport.objects.create(
            tenant=session.tenant,
            session=session,
            opening_balance=session.opening_balance,
            total_cash_sales=metrics["cash_sales"],
            total_payouts=metrics["payouts"],
            total_settlements=metrics["settlements"],
            total_floats=metrics["floats"],
            expected_balance=expected,
            actual_balance=actual_balance,
            variance=variance,
            breakdown=build_z_report(session),
            closed_by=staff,
        )

        session.status = CashDrawerSession.SessionStatus.CLOSED
        session.closed_by = staff
        session.closed_at = timezone.now()
        session.closing_actual_balance = actual_balance
        session.expected_balance = expected
        session.variance = variance
        if notes:
            session.notes = f"{session.notes}\n{notes}".strip()
        session.save(update_fields=[
            "status", "closed_by", "closed_at", "closing_actual_balance",
            "expected_balance", "variance", "notes",
        ])

        if variance != ZERO:
            logger.warning(
                f"Cash drawer closed by {staff} with variance {variance} "
                f"(expected {expected}, counted {actual_balance})"
            )
        else:
            logger.info(f"Cash drawer closed by {staff}, balanced at {expected}")
        return report
