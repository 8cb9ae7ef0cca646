"""
Main Orchestrator for Finance Tracker

Ties the session gate, the record store and the view engine together into
the flows the UI drives:

1. EntryEditor: load / validate / submit one record, including the
   delete-then-insert move when an edit changes the record's kind
2. DashboardFlow: fetch both lists concurrently, delete a record, and build
   the totals + current page for display

Flows never patch local state after a write. The UI refetches on success.
"""

import asyncio
from typing import NamedTuple, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from finance_tracker.audit import AuditLogger, configure_logging, create_correlation_id
from finance_tracker.config import get_settings
from finance_tracker.errors import (
    ConnectionError,
    EntryValidationError,
    RecordLostError,
    StoreError,
)
from finance_tracker.models.record import (
    EntryForm,
    FilterMode,
    Page,
    RecordDraft,
    RecordKind,
    StoredRecord,
    Totals,
)
from finance_tracker.queries import (
    PAGE_SIZE,
    clamp_page,
    filter_transactions,
    merge,
    paginate,
    total_pages,
    totals,
)
from finance_tracker.services.auth import (
    AuthBackendInterface,
    InMemoryAuthBackend,
    SupabaseAuthBackend,
)
from finance_tracker.services.storage import (
    RecordStore,
    SupabaseClient,
    create_memory_store,
    create_supabase_store,
)
from finance_tracker.session import SessionGate
from finance_tracker.validation import EntryValidator


def entity_key(kind: RecordKind, record_id: int) -> str:
    return f"{RecordKind(kind).value}-{record_id}"


class EditTarget(NamedTuple):
    """The record being edited, as it was loaded."""
    kind: RecordKind
    record_id: int


class EntryEditor:
    """
    Add/edit form flow for one record.

    The kind passed to submit() is the one currently selected in the form.
    When it differs from the kind of the edit target the record is moved:
    deleted from the old table, then inserted into the new one under a new
    id. The two calls are not atomic; if the insert fails after the delete
    succeeded the record is gone and RecordLostError says so.
    """

    def __init__(
        self,
        store: RecordStore,
        session: SessionGate,
        validator: Optional[EntryValidator] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._store = store
        self._session = session
        self._validator = validator or EntryValidator()
        self._audit_logger = audit_logger

    async def load(self, kind: RecordKind, record_id: int) -> EntryForm:
        """
        Form values for an existing record.

        A missing record is not an error: the default (empty) form comes back.

        Raises:
            StoreError: the lookup itself failed
        """
        record = await self._store.table(kind).get(record_id)
        if record is None:
            return self._validator.default_form()
        return record.to_form()

    def validate(self, form: EntryForm, kind: RecordKind) -> RecordDraft:
        try:
            return self._validator.validate(form, kind)
        except EntryValidationError as e:
            if self._audit_logger:
                self._audit_logger.log_validation_failed(RecordKind(kind).value, e.field_errors)
            raise

    def switch_kind(self, form: EntryForm, kind: RecordKind) -> EntryForm:
        return self._validator.switch_kind(form, kind)

    async def submit(
        self,
        form: EntryForm,
        kind: RecordKind,
        editing: Optional[EditTarget] = None,
    ) -> StoredRecord:
        """
        Create, update or move a record.

        Returns:
            The row as stored. After a move it carries the new id.

        Raises:
            AuthError: nobody is signed in (nothing is written)
            EntryValidationError: invalid fields (nothing is written)
            StoreError: the store refused a call
            RecordLostError: a move deleted the old row but the insert failed
        """
        user = self._session.require_user()
        kind = RecordKind(kind)
        draft = self.validate(form, kind)
        table = self._store.table(kind)

        if editing is None:
            record = await table.insert(draft, user.id)
            if self._audit_logger:
                self._audit_logger.log_record_created(
                    entity_key(kind, record.id), user.id, str(record.amount)
                )
            return record

        original_kind = RecordKind(editing.kind)
        if original_kind is kind:
            record = await table.update(editing.record_id, draft, user.id)
            if self._audit_logger:
                self._audit_logger.log_record_updated(entity_key(kind, record.id), user.id)
            return record

        return await self._move(draft, original_kind, editing.record_id, user.id)

    async def _move(
        self,
        draft: RecordDraft,
        original_kind: RecordKind,
        record_id: int,
        user_id: str,
    ) -> StoredRecord:
        correlation_id = create_correlation_id()
        old_key = entity_key(original_kind, record_id)

        # A failed delete leaves the record where it was.
        await self._store.table(original_kind).delete(record_id)

        try:
            record = await self._store.table(draft.kind).insert(draft, user_id)
        except StoreError as e:
            if self._audit_logger:
                self._audit_logger.log_record_lost(old_key, user_id, e.message, correlation_id)
            raise RecordLostError(
                f"The {original_kind.value} record was removed but could not be saved "
                f"as {draft.kind.value}: {e.message}",
                draft=draft,
            ) from e

        if self._audit_logger:
            self._audit_logger.log_record_moved(
                old_key, entity_key(draft.kind, record.id), user_id, correlation_id
            )
        return record


class FetchResult(BaseModel):
    """Outcome of the dual fetch. A list is None when its fetch failed."""
    model_config = ConfigDict(frozen=True)

    income: Optional[list[StoredRecord]] = None
    expense: Optional[list[StoredRecord]] = None
    errors: dict[RecordKind, str] = Field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.errors

    def error_message(self) -> Optional[str]:
        if not self.errors:
            return None
        return "; ".join(
            f"Could not load {kind.value} records: {message}"
            for kind, message in sorted(self.errors.items(), key=lambda item: item[0].value)
        )


class LedgerState(BaseModel):
    """The two record lists the dashboard currently shows."""

    income: list[StoredRecord] = Field(default_factory=list)
    expense: list[StoredRecord] = Field(default_factory=list)

    def apply(self, result: FetchResult) -> "LedgerState":
        """
        Take each list whose fetch succeeded; keep the current one otherwise.
        """
        return LedgerState(
            income=result.income if result.income is not None else self.income,
            expense=result.expense if result.expense is not None else self.expense,
        )


class LedgerView(BaseModel):
    """Everything the dashboard renders for one filter/page selection."""
    model_config = ConfigDict(frozen=True)

    totals: Totals
    page: Page
    mode: FilterMode


class DashboardFlow:
    """Fetch, delete and present the signed-in user's records."""

    def __init__(
        self,
        store: RecordStore,
        session: SessionGate,
        audit_logger: Optional[AuditLogger] = None,
        page_size: int = PAGE_SIZE,
    ):
        self._store = store
        self._session = session
        self._audit_logger = audit_logger
        self._page_size = page_size

    @property
    def page_size(self) -> int:
        return self._page_size

    async def fetch(self) -> FetchResult:
        """
        Fetch both lists concurrently and wait for both.

        A failure of one list does not discard the other.

        Raises:
            AuthError: nobody is signed in
        """
        user = self._session.require_user()
        kinds = (RecordKind.INCOME, RecordKind.EXPENSE)
        outcomes = await asyncio.gather(
            *(self._store.table(kind).list_for_user(user.id) for kind in kinds),
            return_exceptions=True,
        )

        lists: dict[RecordKind, Optional[list[StoredRecord]]] = {}
        errors: dict[RecordKind, str] = {}
        for kind, outcome in zip(kinds, outcomes):
            if isinstance(outcome, StoreError):
                errors[kind] = outcome.message
                lists[kind] = None
                if self._audit_logger:
                    self._audit_logger.log_fetch_failed(kind.value, user.id, outcome.message)
            elif isinstance(outcome, BaseException):
                raise outcome
            else:
                lists[kind] = outcome

        if self._audit_logger:
            self._audit_logger.log_records_fetched(
                user.id,
                len(lists[RecordKind.INCOME]) if lists[RecordKind.INCOME] is not None else None,
                len(lists[RecordKind.EXPENSE]) if lists[RecordKind.EXPENSE] is not None else None,
            )
        return FetchResult(
            income=lists[RecordKind.INCOME],
            expense=lists[RecordKind.EXPENSE],
            errors=errors,
        )

    async def refresh(self, state: LedgerState) -> tuple[LedgerState, Optional[str]]:
        """fetch() applied to state. Returns the new state and any error message."""
        result = await self.fetch()
        return state.apply(result), result.error_message()

    async def delete(self, kind: RecordKind, record_id: int) -> bool:
        """
        Delete one record by (kind, id).

        Returns:
            True if a row was deleted, False if it was already gone

        Raises:
            AuthError: nobody is signed in
            StoreError: the store refused the delete
        """
        user = self._session.require_user()
        deleted = await self._store.table(kind).delete(record_id)
        if deleted and self._audit_logger:
            self._audit_logger.log_record_deleted(entity_key(kind, record_id), user.id)
        return deleted

    def view(
        self,
        state: LedgerState,
        mode: Union[FilterMode, str] = FilterMode.ALL,
        page: int = 1,
    ) -> LedgerView:
        """
        Totals plus one page of the merged, filtered list.

        The page number is clamped here, the engine itself rejects
        out-of-range pages.
        """
        mode = FilterMode(mode)
        filtered = filter_transactions(merge(state.income, state.expense), mode)
        page = clamp_page(page, total_pages(len(filtered), self._page_size))
        return LedgerView(
            totals=totals(state.income, state.expense),
            page=paginate(filtered, page, self._page_size),
            mode=mode,
        )


class AppComponents(NamedTuple):
    session: SessionGate
    editor: EntryEditor
    dashboard: DashboardFlow
    audit_logger: AuditLogger


def create_app_components(
    store: Optional[RecordStore] = None,
    auth: Optional[AuthBackendInterface] = None,
) -> AppComponents:
    """
    Factory function to create all application components.

    With no arguments the backend follows STORAGE_BACKEND: "supabase" (the
    default) needs SUPABASE_URL and SUPABASE_ANON_KEY and fails with
    ConnectionError without them; "memory" runs entirely in process.
    """
    app_settings = get_settings().app
    configure_logging(app_settings.effective_log_level)
    audit_logger = AuditLogger()

    if store is None or auth is None:
        if app_settings.storage_backend == "memory":
            store = store or create_memory_store()
            auth = auth or InMemoryAuthBackend()
        else:
            client = SupabaseClient()
            try:
                client.connect()
            except ConnectionError as e:
                audit_logger.log_external_service_error("supabase", "connect", e.message)
                raise
            store = store or create_supabase_store(client)
            auth = auth or SupabaseAuthBackend(client)

    session = SessionGate(
        auth,
        audit_logger=audit_logger,
        min_password_length=app_settings.min_password_length,
    )
    editor = EntryEditor(store, session, audit_logger=audit_logger)
    dashboard = DashboardFlow(
        store,
        session,
        audit_logger=audit_logger,
        page_size=app_settings.page_size,
    )
    return AppComponents(
        session=session,
        editor=editor,
        dashboard=dashboard,
        audit_logger=audit_logger,
    )
