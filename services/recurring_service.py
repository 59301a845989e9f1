import logging
from datetime import date, timedelta
from decimal import Decimal

from database.ledger_store import LedgerStore
from database.recurring_dao import RecurringDAO
from models.recurring_transaction import RecurringTransaction
from models.report import MaterializedEntry
from services.schedule import iter_due_dates, next_due_date, normalize_frequency
from utils.constants import RECURRING_DESCRIPTION_SUFFIX, UPCOMING_DAYS
from utils.currency import to_decimal
from utils.date_helpers import coerce_date, today
from utils.errors import ConcurrencyConflict, InvalidArgument, NotFound, PersistenceFailure

logger = logging.getLogger(__name__)

# Distinguishes "argument omitted" from an explicit None (clear the end date).
_UNSET = object()


class RecurringService:
    """Recurring transaction templates and their materialization into the ledger.

    This service is the only writer of ``next_due_date``.
    """

    def __init__(self, recurring_dao: RecurringDAO, store: LedgerStore):
        self._dao = recurring_dao
        self._store = store

    def get_all(self, owner_id: int) -> list[RecurringTransaction]:
        return self._dao.get_by_owner(owner_id)

    def get_active(self, owner_id: int) -> list[RecurringTransaction]:
        return self._dao.get_active(owner_id)

    def get_by_id(self, owner_id: int, recurring_id: int) -> RecurringTransaction:
        rt = self._dao.get_by_id(owner_id, recurring_id)
        if rt is None:
            raise NotFound("Recurring transaction", recurring_id)
        return rt

    def create(
        self,
        owner_id: int,
        title: str,
        category: str,
        amount,
        frequency: str,
        start_date,
        end_date=None,
        description: str | None = None,
        is_expense: bool = True,
    ) -> RecurringTransaction:
        title, category, amount, frequency, start, end = self._validate(
            title, category, amount, frequency, start_date, end_date
        )
        rt = self._dao.create(
            owner_id=owner_id, title=title, category=category, amount=amount,
            frequency=frequency, start_date=start,
            next_due_date=next_due_date(frequency, start),
            is_expense=is_expense, description=description, end_date=end,
        )
        logger.info(
            "Created recurring %s %d for owner %d, first due %s",
            rt.kind, rt.id, owner_id, rt.next_due_date,
        )
        return rt

    def update(
        self,
        owner_id: int,
        recurring_id: int,
        title: str | None = None,
        category: str | None = None,
        amount=None,
        frequency: str | None = None,
        start_date=None,
        end_date=_UNSET,
        description: str | None = None,
        is_expense: bool | None = None,
        is_active: bool | None = None,
    ) -> RecurringTransaction:
        """Partial update; omitted arguments keep their stored value.

        Pass end_date=None to remove an existing end date.

        Changing frequency or start date re-derives next_due_date from the last
        processed date, or from the start date if nothing was processed yet.
        """
        current = self.get_by_id(owner_id, recurring_id)
        title, category, amount, frequency, start, end = self._validate(
            title if title is not None else current.title,
            category if category is not None else current.category,
            amount if amount is not None else current.amount,
            frequency if frequency is not None else current.frequency,
            start_date if start_date is not None else current.start_date,
            current.end_date if end_date is _UNSET else end_date,
        )

        next_due = current.next_due_date
        if frequency != current.frequency or start != current.start_date:
            anchor = current.last_processed_date or start
            next_due = next_due_date(frequency, anchor)

        updated = self._dao.update(RecurringTransaction(
            id=current.id,
            owner_id=owner_id,
            title=title,
            category=category,
            amount=amount,
            frequency=frequency,
            start_date=start,
            end_date=end,
            next_due_date=next_due,
            last_processed_date=current.last_processed_date,
            description=description if description is not None else current.description,
            is_expense=is_expense if is_expense is not None else current.is_expense,
            is_active=is_active if is_active is not None else current.is_active,
        ))
        if updated is None:
            raise NotFound("Recurring transaction", recurring_id)
        return updated

    def set_active(self, owner_id: int, recurring_id: int, is_active: bool):
        if not self._dao.set_active(owner_id, recurring_id, is_active):
            raise NotFound("Recurring transaction", recurring_id)

    def delete(self, owner_id: int, recurring_id: int):
        if not self._dao.delete(owner_id, recurring_id):
            raise NotFound("Recurring transaction", recurring_id)

    def process_due(self, owner_id: int, as_of: date | None = None) -> list[MaterializedEntry]:
        """
        Materialize every due occurrence up to as_of (default: today).

        Overdue templates are caught up: one entry per missed due date, never
        past end_date. Each entry and its schedule advance commit together.
        A conflict with a concurrent processor is retried once.
        """
        ref = coerce_date(as_of, "as-of date") if as_of is not None else today()
        materialized: list[MaterializedEntry] = []
        try:
            self._process_pass(owner_id, ref, materialized)
        except ConcurrencyConflict as exc:
            logger.warning("Owner %d: %s; retrying once", owner_id, exc)
            self._process_pass(owner_id, ref, materialized)
        if materialized:
            logger.info(
                "Owner %d: materialized %d recurring entries as of %s",
                owner_id, len(materialized), ref,
            )
        return materialized

    def _process_pass(
        self, owner_id: int, as_of: date, materialized: list[MaterializedEntry]
    ):
        with self._store.owner_lock(owner_id):
            for rt in self._store.find_due_recurring(owner_id, as_of):
                try:
                    for due in iter_due_dates(rt.frequency, rt.next_due_date, as_of, rt.end_date):
                        materialized.append(self._materialize(rt, due))
                except PersistenceFailure:
                    logger.exception(
                        "Owner %d: could not process recurring transaction %d, skipping",
                        owner_id, rt.id,
                    )

    def _materialize(self, rt: RecurringTransaction, due: date) -> MaterializedEntry:
        description = f"{rt.title}{RECURRING_DESCRIPTION_SUFFIX}"
        with self._store.transaction():
            if rt.is_expense:
                record = self._store.create_expense(
                    owner_id=rt.owner_id, category=rt.category, amount=rt.amount,
                    date=due, description=description, recurring_id=rt.id,
                )
            else:
                record = self._store.create_income(
                    owner_id=rt.owner_id, source=rt.category, amount=rt.amount,
                    date=due, description=description, recurring_id=rt.id,
                )
            self._store.update_recurring_schedule(
                rt.id,
                last_processed=due,
                next_due=next_due_date(rt.frequency, due),
                expected_next_due=due,
            )
        logger.info("Recurring %d: %s %s on %s", rt.id, rt.kind, rt.amount, due)
        return MaterializedEntry(kind=rt.kind, record=record, recurring_id=rt.id)

    def upcoming(
        self, owner_id: int, from_date: date | None = None, days: int = UPCOMING_DAYS
    ) -> list[dict]:
        """
        Return [{date, title, amount, kind, recurring_id}] for active templates
        due within [from_date, from_date + days], sorted by date.
        """
        if days < 0:
            raise InvalidArgument("days cannot be negative.")
        start = from_date or today()
        until = start + timedelta(days=days)
        result = []
        for rt in self._dao.get_active(owner_id):
            if rt.is_expired(start):
                continue
            for d in iter_due_dates(rt.frequency, rt.next_due_date, until, rt.end_date):
                if d < start:
                    continue
                result.append({
                    "date": d,
                    "title": rt.title,
                    "amount": rt.amount,
                    "kind": rt.kind,
                    "recurring_id": rt.id,
                })
        result.sort(key=lambda item: (item["date"], item["recurring_id"]))
        return result

    def _validate(self, title, category, amount, frequency, start_date, end_date):
        if not title or not title.strip():
            raise InvalidArgument("Title cannot be empty.")
        if not category or not category.strip():
            raise InvalidArgument("Category cannot be empty.")
        amount = to_decimal(amount)
        if amount <= Decimal("0"):
            raise InvalidArgument("Amount must be positive.")
        frequency = normalize_frequency(frequency)
        start = coerce_date(start_date, "start date")
        end = coerce_date(end_date, "end date") if end_date else None
        if end and end < start:
            raise InvalidArgument("End date cannot be before start date.")
        return title.strip(), category.strip(), amount, frequency, start, end
