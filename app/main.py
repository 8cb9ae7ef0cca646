"""
Streamlit Frontend for Finance Tracker

Screens:
1. Sign in / sign up, shown while nobody is signed in
2. Dashboard: income, expense and balance cards, add buttons, and the
   filterable, paginated transaction list with edit/delete per row
3. Add/edit form, with an income/expense toggle when editing

Each browser session gets its own components (and so its own Supabase
session). Every action goes through run_action and shows at most one
message; after any successful write the lists are refetched.
"""

import asyncio
from datetime import date

import streamlit as st

from finance_tracker.actions import run_action
from finance_tracker.config import validate_all_settings
from finance_tracker.errors import RecordLostError
from finance_tracker.models.record import (
    PAYMENT_METHODS,
    EntryForm,
    FilterMode,
    RecordKind,
    categories_for,
)
from finance_tracker.orchestrator import (
    AppComponents,
    EditTarget,
    LedgerState,
    create_app_components,
)
from finance_tracker.queries import format_amount, format_signed, page_after_delete


# Page configuration
st.set_page_config(
    page_title="Finance Tracker",
    page_icon="💰",
    layout="wide",
    initial_sidebar_state="collapsed",
)

st.markdown("""
<style>
    .stButton>button {
        width: 100%;
    }
    .card {
        padding: 20px;
        border-radius: 10px;
        margin: 10px 0;
        background-color: #111827;
    }
    .card-income { border-left: 5px solid #10b981; }
    .card-expense { border-left: 5px solid #ef4444; }
    .card-balance { border-left: 5px solid #6b7280; }
    .card-label {
        color: #9ca3af;
        font-size: 0.9em;
    }
    .big-number {
        font-size: 2em;
        font-weight: bold;
    }
    .positive { color: #10b981; }
    .negative { color: #ef4444; }
</style>
""", unsafe_allow_html=True)


FORM_FIELDS = ("description", "amount", "date", "category", "payment_method")


def run_async(coro):
    """Helper to run async functions in Streamlit."""
    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)
    try:
        return loop.run_until_complete(coro)
    finally:
        loop.close()


def get_components() -> AppComponents:
    """Components for this browser session, created and started once."""
    if "components" not in st.session_state:
        components = create_app_components()
        run_async(components.session.start())
        st.session_state.components = components
    return st.session_state.components


def sync_session_user(components: AppComponents):
    """
    Drop the cached lists when the signed-in user changed.

    The gate may be updated from the auth client's own thread, so the check
    happens here, on the script thread, rather than in a subscriber.
    """
    user = components.session.current_user
    user_id = user.id if user else None
    if st.session_state.get("seen_user_id") != user_id:
        st.session_state.seen_user_id = user_id
        st.session_state.ledger = LedgerState()
        st.session_state.ledger_stale = user_id is not None
        st.session_state.page = 1
        st.session_state.form_open = False
        st.session_state.form_request = None


def init_state():
    defaults = {
        "ledger": LedgerState(),
        "ledger_stale": True,
        "filter_mode": FilterMode.ALL.value,
        "page": 1,
        "form_open": False,
        "form_request": None,
        "form_kind": RecordKind.INCOME.value,
        "form_editing": None,
        "form_error": None,
        "pending_delete": None,
        "flash": None,
        "auth_mode": "sign_in",
    }
    for key, value in defaults.items():
        if key not in st.session_state:
            st.session_state[key] = value


def main():
    """Main application entry point."""
    try:
        components = get_components()
    except Exception as e:
        st.error(f"Failed to initialize: {e}")
        render_settings_status()
        st.stop()

    init_state()
    sync_session_user(components)

    if not components.session.is_authenticated:
        render_auth_page(components)
        return

    render_dashboard(components)


# =============================================================================
# AUTH
# =============================================================================

def render_auth_page(components: AppComponents):
    """Sign in / sign up screen."""
    is_sign_in = st.session_state.auth_mode == "sign_in"

    _, center, _ = st.columns([1, 2, 1])
    with center:
        st.title("Sign In" if is_sign_in else "Create Account")
        st.markdown("Track your income and expenses.")

        with st.form("auth_form"):
            email = st.text_input("Email", placeholder="you@example.com")
            password = st.text_input("Password", type="password")
            submitted = st.form_submit_button(
                "Sign In" if is_sign_in else "Create Account",
                type="primary",
            )

        if submitted:
            session = components.session
            if is_sign_in:
                user, error = run_async(run_action(
                    "sign in", session.sign_in(email, password), components.audit_logger
                ))
            else:
                user, error = run_async(run_action(
                    "sign up", session.sign_up(email, password), components.audit_logger
                ))
            if error:
                st.error(error)
            elif user is None:
                st.info("Account created. Check your email to confirm it, then sign in.")
            else:
                st.rerun()

        toggle_label = (
            "Don't have an account? Sign up" if is_sign_in
            else "Already have an account? Sign in"
        )
        if st.button(toggle_label):
            st.session_state.auth_mode = "sign_up" if is_sign_in else "sign_in"
            st.rerun()


# =============================================================================
# DASHBOARD
# =============================================================================

def refresh_ledger(components: AppComponents):
    with st.spinner("Loading..."):
        result, error = run_async(run_action(
            "load your records",
            components.dashboard.refresh(st.session_state.ledger),
            components.audit_logger,
        ))
    if result is not None:
        st.session_state.ledger, error = result
    st.session_state.ledger_stale = False
    if error:
        st.session_state.flash = ("error", error)


def render_dashboard(components: AppComponents):
    open_requested_form(components)
    user = components.session.current_user

    header, logout = st.columns([5, 1])
    with header:
        st.title("💰 Finance Tracker")
        if user and user.email:
            st.caption(user.email)
    with logout:
        if st.button("Sign out"):
            _, error = run_async(run_action(
                "sign out", components.session.sign_out(), components.audit_logger
            ))
            if error:
                st.error(error)
            else:
                st.rerun()

    if st.session_state.ledger_stale:
        refresh_ledger(components)

    flash = st.session_state.flash
    if flash:
        level, message = flash
        getattr(st, level)(message)
        st.session_state.flash = None

    view = components.dashboard.view(
        st.session_state.ledger,
        mode=st.session_state.filter_mode,
        page=st.session_state.page,
    )
    st.session_state.page = view.page.page

    render_totals(view.totals)

    col1, col2 = st.columns(2)
    with col1:
        if st.button("➕ Add Income", type="primary"):
            request_form(RecordKind.INCOME)
    with col2:
        if st.button("➕ Add Expense"):
            request_form(RecordKind.EXPENSE)

    if st.session_state.form_open:
        render_form(components)

    st.markdown("---")
    render_transactions(components, view)


def render_totals(totals):
    balance_class = "positive" if totals.balance >= 0 else "negative"
    cards = [
        ("card-income", "Total Income", format_amount(totals.income_total), "positive"),
        ("card-expense", "Total Expenses", format_amount(totals.expense_total), "negative"),
        ("card-balance", "Balance", format_amount(totals.balance), balance_class),
    ]
    for column, (card_class, label, value, value_class) in zip(st.columns(3), cards):
        with column:
            st.markdown(f"""
            <div class="card {card_class}">
                <div class="card-label">{label}</div>
                <div class="big-number {value_class}">{value}</div>
            </div>
            """, unsafe_allow_html=True)


# =============================================================================
# ADD / EDIT FORM
# =============================================================================

def set_form_values(form: EntryForm):
    for field in FORM_FIELDS:
        value = getattr(form, field)
        if field == "date" and not isinstance(value, date):
            value = date.today()
        st.session_state[f"form_{field}"] = value


def read_form_values() -> EntryForm:
    return EntryForm(**{
        field: st.session_state.get(f"form_{field}") for field in FORM_FIELDS
    })


def request_form(kind: RecordKind, editing: EditTarget = None):
    """Open the form on the next run, before any form widget exists."""
    st.session_state.form_request = (RecordKind(kind), editing)
    st.rerun()


def open_requested_form(components: AppComponents):
    request = st.session_state.form_request
    if request is None:
        return
    st.session_state.form_request = None
    kind, editing = request

    st.session_state.form_open = True
    st.session_state.form_kind = kind.value
    st.session_state.form_kind_toggle = kind.value
    st.session_state.form_editing = editing
    st.session_state.form_error = None

    if editing is None:
        set_form_values(EntryForm())
        return

    form, error = run_async(run_action(
        "load this record",
        components.editor.load(editing.kind, editing.record_id),
        components.audit_logger,
    ))
    set_form_values(form or EntryForm())
    st.session_state.form_error = error


def close_form():
    st.session_state.form_open = False
    st.session_state.form_editing = None
    st.session_state.form_error = None


def on_kind_toggle():
    """Clear a category that does not exist for the newly selected kind."""
    components = st.session_state.components
    kind = RecordKind(st.session_state.form_kind_toggle)
    form = components.editor.switch_kind(read_form_values(), kind)
    st.session_state.form_kind = kind.value
    st.session_state.form_category = form.category


def render_form(components: AppComponents):
    editing = st.session_state.form_editing
    kind = RecordKind(st.session_state.form_kind)

    with st.container(border=True):
        if editing is not None:
            st.subheader("Edit Transaction")
            st.session_state.form_kind_toggle = kind.value
            st.radio(
                "Transaction type",
                options=[RecordKind.INCOME.value, RecordKind.EXPENSE.value],
                format_func=lambda value: RecordKind(value).label,
                key="form_kind_toggle",
                horizontal=True,
                on_change=on_kind_toggle,
            )
        else:
            st.subheader(f"New {kind.label}")

        st.text_input("Description *", key="form_description", placeholder="e.g. Utility bill")
        st.text_input("Amount *", key="form_amount", placeholder="0.00")
        st.date_input("Date *", key="form_date")

        category_options = [""] + categories_for(kind)
        if st.session_state.get("form_category") not in category_options:
            st.session_state.form_category = ""
        st.selectbox(
            "Category *",
            options=category_options,
            format_func=lambda value: value or "Select...",
            key="form_category",
        )

        method_options = [""] + PAYMENT_METHODS
        if st.session_state.get("form_payment_method") not in method_options:
            st.session_state.form_payment_method = ""
        st.selectbox(
            "Payment method *",
            options=method_options,
            format_func=lambda value: value or "Select...",
            key="form_payment_method",
        )

        if st.session_state.form_error:
            st.error(st.session_state.form_error)

        save_col, cancel_col = st.columns(2)
        with cancel_col:
            if st.button("Cancel"):
                close_form()
                st.rerun()
        with save_col:
            if st.button("Save", type="primary"):
                submit_form(components, kind, editing)


def submit_form(components: AppComponents, kind: RecordKind, editing):
    form = read_form_values()

    async def save():
        try:
            return await components.editor.submit(form, kind, editing)
        except RecordLostError:
            # The old row is gone; the form now offers the values as a new record.
            st.session_state.form_editing = None
            st.session_state.ledger_stale = True
            raise

    with st.spinner("Saving..."):
        _, error = run_async(run_action("save this record", save(), components.audit_logger))

    if error:
        st.session_state.form_error = error
        st.rerun()

    close_form()
    st.session_state.ledger_stale = True
    st.session_state.flash = ("success", "Saved.")
    st.rerun()


# =============================================================================
# TRANSACTION LIST
# =============================================================================

def on_filter_change():
    st.session_state.page = 1


def render_transactions(components: AppComponents, view):
    title_col, filter_col = st.columns([2, 3])
    with title_col:
        st.subheader("Transactions")
    with filter_col:
        st.radio(
            "Show",
            options=[mode.value for mode in FilterMode],
            format_func=lambda value: {
                "all": "All", "income": "Income", "expense": "Expenses"
            }[value],
            key="filter_mode",
            horizontal=True,
            on_change=on_filter_change,
            label_visibility="collapsed",
        )

    page = view.page
    if page.is_empty:
        st.info("No transactions yet. Use the buttons above to add your first one.")
        return

    for transaction in page.items:
        render_row(components, transaction, len(page.items))

    prev_col, info_col, next_col = st.columns([1, 2, 1])
    with prev_col:
        if st.button("← Previous", disabled=not page.has_previous):
            st.session_state.page = page.page - 1
            st.rerun()
    with info_col:
        st.markdown(
            f"<div style='text-align:center'>Page {page.page} of {page.total_pages}</div>",
            unsafe_allow_html=True,
        )
    with next_col:
        if st.button("Next →", disabled=not page.has_next):
            st.session_state.page = page.page + 1
            st.rerun()


def render_row(components: AppComponents, transaction, items_on_page: int):
    record = transaction.record
    amount_class = "positive" if transaction.kind is RecordKind.INCOME else "negative"

    with st.container(border=True):
        info_col, amount_col, edit_col, delete_col = st.columns([5, 2, 1, 1])
        with info_col:
            st.markdown(f"**{transaction.kind.label}** · {record.description}")
            st.caption(
                f"📅 {record.date.strftime('%d %B %Y')} · 🏷️ {record.category} · "
                f"💳 {record.payment_method}"
            )
        with amount_col:
            st.markdown(
                f"<div class='big-number {amount_class}' style='font-size:1.3em'>"
                f"{format_signed(transaction)}</div>",
                unsafe_allow_html=True,
            )
        with edit_col:
            if st.button("✏️", key=f"edit-{transaction.list_key}", help="Edit"):
                request_form(transaction.kind, EditTarget(*transaction.key))
        with delete_col:
            if st.button("🗑️", key=f"delete-{transaction.list_key}", help="Delete"):
                st.session_state.pending_delete = transaction.key
                st.rerun()

        if st.session_state.pending_delete == transaction.key:
            st.warning("Delete this record? This cannot be undone.")
            yes_col, no_col = st.columns(2)
            with yes_col:
                if st.button("Yes, delete", key=f"confirm-{transaction.list_key}", type="primary"):
                    delete_record(components, transaction, items_on_page)
            with no_col:
                if st.button("Keep it", key=f"cancel-{transaction.list_key}"):
                    st.session_state.pending_delete = None
                    st.rerun()


def delete_record(components: AppComponents, transaction, items_on_page: int):
    st.session_state.pending_delete = None
    _, error = run_async(run_action(
        "delete this record",
        components.dashboard.delete(*transaction.key),
        components.audit_logger,
    ))
    if error:
        st.session_state.flash = ("error", error)
    else:
        st.session_state.page = page_after_delete(st.session_state.page, items_on_page)
        st.session_state.ledger_stale = True
    st.rerun()


# =============================================================================
# SETTINGS STATUS
# =============================================================================

def render_settings_status():
    """Show which configuration is missing."""
    st.markdown("### Connection Status")

    status = validate_all_settings()
    services = [
        ("Supabase (Data & Auth)", "supabase"),
        ("Application settings", "app"),
    ]
    for name, key in services:
        if status.get(key, False):
            st.success(f"✅ {name} - Configured")
        else:
            error = status.get(f"{key}_error", "Not configured")
            st.error(f"❌ {name} - {error}")

    st.markdown(
        "To configure the application, create a `.env` file with "
        "`SUPABASE_URL` and `SUPABASE_ANON_KEY`. See `.env.example`."
    )


if __name__ == "__main__":
    main()
