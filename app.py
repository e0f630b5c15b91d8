"""
app.py
Streamlit management dashboard for the Dharma Sabha (members, pujas, dues,
income, expenses, notices, reports). Data lives in local storage and,
when a token is configured, in a JSON file on GitHub.
Run: streamlit run app.py
"""

from __future__ import annotations

import logging
from datetime import date

import streamlit as st

import reports
import stats
import utils
from config import load_settings
from db import SETUP_SEEN_KEY, LocalStore
from github_sync import CREATED, FETCHED, GitHubSync
from models import (
    DESIGNATIONS,
    EXPENSE_CATEGORIES,
    INCOME_TYPES,
    PAYMENT_METHODS,
    PAYMENT_STATUSES,
    PUJA_TYPES,
    ROLES,
    STATUS_DUE,
)
from state import SYNC_ERROR, SYNC_SUCCESS, SYNC_SYNCING, AppState

st.set_page_config(page_title="Dharma Sabha Management", layout="wide")

SETTINGS = load_settings()
logging.basicConfig(level=SETTINGS.log_level)
logger = logging.getLogger(__name__)

SYNC_TICK_SECONDS = 1.0


def get_state() -> AppState:
    if "app_state" not in st.session_state:
        store = LocalStore(SETTINGS.local_db)
        remote = GitHubSync(SETTINGS, store)
        state = AppState(store, SETTINGS, remote)
        state.load()
        st.session_state.app_state = state
    return st.session_state.app_state


def _index(options, value, default: int = 0) -> int:
    return list(options).index(value) if value in options else default


def _date_value(iso: str | None) -> date:
    try:
        return utils.parse_iso(iso) if iso else date.today()
    except ValueError:
        return date.today()


def show_errors(errors: list[str]) -> bool:
    for e in errors:
        st.error(e)
    return bool(errors)


# ---------- Setup & login ----------

def github_setup_screen(state: AppState):
    st.title("🐙 GitHub connection")
    st.write("Store the data safely as a JSON file in a GitHub repository.")
    st.caption(
        f"Repository: **{SETTINGS.github_owner or '(KHS_GITHUB_OWNER not set)'}/{SETTINGS.github_repo}** "
        f"· branch **{SETTINGS.github_branch}** · file **{SETTINGS.data_file}**"
    )

    with st.expander("How to create a token"):
        st.markdown(
            "1. GitHub → Settings → Developer settings → Personal access tokens\n"
            "2. Generate a token with **repo** (contents read/write) scope\n"
            "3. Paste it below"
        )

    token = st.text_input("Personal access token", type="password")
    col1, col2 = st.columns(2)
    with col1:
        if st.button("Connect", type="primary", disabled=not token.strip()):
            with st.spinner("Connecting..."):
                source = state.enable_remote(token)
            if state.source in (FETCHED, CREATED):
                state.local_store.save(SETUP_SEEN_KEY, True)
                st.success(f"Connected ({source}).")
                st.rerun()
            else:
                st.error("Wrong token or connection problem. Data is kept locally.")
                state.disable_remote()
    with col2:
        if st.button("Skip (use local storage)"):
            state.local_store.save(SETUP_SEEN_KEY, True)
            st.rerun()


def login_screen(state: AppState):
    st.title(f"🔐 {SETTINGS.org_name}")
    st.caption("Management app")

    col1, col2 = st.columns([1, 1])
    with col1:
        username = st.text_input("Username")
        password = st.text_input("Password", type="password")
        if st.button("Login", type="primary"):
            if state.login(username, password):
                st.rerun()
            else:
                st.error("Invalid username or password.")

        if st.button("👁️ View only (no login)"):
            state.login_as_viewer()
            st.rerun()

    with col2:
        if state.remote_enabled:
            st.success("☁️ GitHub connected")
        else:
            st.info("Data is stored locally on this machine.")
            if st.button("Connect GitHub"):
                state.local_store.save(SETUP_SEEN_KEY, False)
                st.rerun()


# ---------- Shared widgets ----------

@st.fragment(run_every=SYNC_TICK_SECONDS)
def sync_indicator(state: AppState):
    """
    Sync status for the sidebar. The fragment reruns on its own, which is what
    sends debounced changes to GitHub and refreshes the status without a click.
    """
    if not state.remote_enabled:
        st.caption("☁️ Local mode")
        return
    state.poll_sync()
    status = state.sync_status
    if status == SYNC_SYNCING:
        st.info("🔄 Syncing...")
    elif status == SYNC_SUCCESS:
        st.success("✅ Synced")
    elif status == SYNC_ERROR:
        st.error("⚠️ Sync failed")
    elif state.has_pending_changes:
        st.warning("Changes waiting to sync")
    else:
        st.caption(f"☁️ GitHub · last update {state.db.last_updated or '-'}")

    if st.button("Sync now"):
        result = state.sync_now()
        if result:
            st.success("Saved to GitHub.")
        else:
            st.error(f"Sync failed ({result.status}).")


def record_picker(label: str, records: list, fmt, key: str):
    options = {"(none)": None}
    options.update({fmt(r): r for r in records})
    chosen = st.selectbox(label, list(options.keys()), key=key)
    return options[chosen]


def record_actions(state: AppState, collection: str, record, edit_key: str):
    """Edit + confirmed delete buttons for the selected record."""
    c1, c2 = st.columns(2)
    with c1:
        if st.button("Edit", key=f"edit_{collection}"):
            st.session_state[edit_key] = record.id
            st.rerun()
    with c2:
        confirm = st.checkbox("Confirm delete", value=False, key=f"del_confirm_{collection}")
        if st.button("Delete", disabled=not confirm, key=f"del_{collection}"):
            state.delete(collection, record.id)
            st.session_state[edit_key] = None
            st.success("Deleted.")
            st.rerun()


def editing(state: AppState, collection: str, edit_key: str):
    record_id = st.session_state.get(edit_key)
    return state.get(collection, record_id) if record_id else None


def finish_edit(edit_key: str, message: str):
    st.session_state[edit_key] = None
    st.success(message)
    st.rerun()


# ---------- Pages ----------

def dashboard_page(state: AppState):
    st.header("📊 Dashboard")
    db = state.db
    s = stats.dashboard_stats(db)

    c1, c2, c3, c4 = st.columns(4)
    c1.metric("Members", s.total_members)
    c2.metric("Other income", utils.format_currency(s.total_income))
    c3.metric("Expenses", utils.format_currency(s.total_expenses))
    c4.metric("Balance", utils.format_currency(s.balance))

    d1, d2, d3 = st.columns(3)
    d1.metric("Dues expected", utils.format_currency(s.total_contributions_expected))
    d2.metric("Dues received", utils.format_currency(s.total_contributions_received))
    d3.metric("Dues pending", utils.format_currency(s.total_contributions_pending))

    st.divider()

    left, right = st.columns(2)
    with left:
        st.subheader("Upcoming pujas")
        upcoming = stats.upcoming_pujas(db.pujas)
        if upcoming:
            st.dataframe(stats.records_frame(upcoming, ["name", "type", "date", "budget"]), hide_index=True)
        else:
            st.caption("No upcoming pujas.")

        st.subheader("Important notices")
        for n in stats.important_notices(db.notices):
            st.warning(f"**{n.title}** ({n.date})\n\n{n.description}")

    with right:
        st.subheader("Recent transactions")
        recent = stats.recent_transactions(db.income, db.expenses)
        if recent:
            st.dataframe(
                [
                    {"date": t.date, "kind": t.kind, "type": t.label, "details": t.description,
                     "amount": (t.amount if t.kind == "income" else -t.amount)}
                    for t in recent
                ],
                hide_index=True,
            )
        else:
            st.caption("No transactions yet.")


def member_form(state: AppState, existing=None):
    st.subheader(f"✏️ Edit Member ({existing.name})" if existing else "➕ Add Member")

    col1, col2 = st.columns(2)
    with col1:
        name = st.text_input("Name", value=existing.name if existing else "")
        designation = st.selectbox(
            "Designation", DESIGNATIONS, index=_index(DESIGNATIONS, existing.designation if existing else "", 3)
        )
        phone = st.text_input("Phone", value=existing.phone if existing else "")
    with col2:
        address = st.text_area("Address", value=existing.address if existing else "")
        photo_file = st.file_uploader("Photo (optional)", type=["png", "jpg", "jpeg"])
        if existing and existing.photo:
            st.image(existing.photo, width=96)

    if st.button("Save member", type="primary"):
        if show_errors(utils.validate_member_inputs(name, phone)):
            return
        photo = existing.photo if existing else None
        if photo_file is not None:
            photo = utils.photo_data_uri(photo_file.getvalue(), photo_file.type)
        values = dict(name=name.strip(), designation=designation, phone=phone.strip(),
                      address=address.strip(), photo=photo)
        if existing:
            state.update("members", existing.id, **values)
            finish_edit("edit_members_id", "Member updated.")
        else:
            state.create("members", **values)
            st.success("Member added.")
            st.rerun()


def members_page(state: AppState):
    st.header("👥 Members")
    is_admin = state.user.is_admin

    search = st.text_input("Search (name / designation / phone)")
    rows = stats.filter_members(state.db.members, search)
    st.dataframe(
        stats.records_frame(rows, ["name", "designation", "phone", "address", "createdAt"]),
        use_container_width=True,
        hide_index=True,
    )
    st.download_button(
        "Download members.csv",
        data=utils.records_to_csv_bytes(rows, ["name", "designation", "phone", "address"]),
        file_name="members.csv",
        mime="text/csv",
        disabled=not rows,
    )

    if not is_admin:
        return

    st.divider()
    selected = record_picker("Select member", rows, lambda m: f"{m.name} ({m.phone}) - {m.id}", "pick_member")
    if selected:
        record_actions(state, "members", selected, "edit_members_id")

    st.divider()
    existing = editing(state, "members", "edit_members_id")
    member_form(state, existing)
    if existing and st.button("Cancel edit"):
        st.session_state.edit_members_id = None
        st.rerun()


def puja_form(state: AppState, existing=None):
    st.subheader(f"✏️ Edit Puja ({existing.name})" if existing else "➕ Add Puja")
    col1, col2 = st.columns(2)
    with col1:
        name = st.text_input("Puja name", value=existing.name if existing else "")
        puja_type = st.selectbox("Type", PUJA_TYPES, index=_index(PUJA_TYPES, existing.type if existing else ""))
        budget = st.text_input("Budget", value=str(existing.budget) if existing else "0")
    with col2:
        puja_date = st.date_input("Date", value=_date_value(existing.date if existing else None)).isoformat()
        description = st.text_area("Description", value=existing.description if existing else "")

    if st.button("Save puja", type="primary"):
        if show_errors(utils.validate_puja_inputs(name, budget, puja_date)):
            return
        values = dict(name=name.strip(), type=puja_type, budget=float(budget), date=puja_date,
                      description=description.strip())
        if existing:
            state.update("pujas", existing.id, **values)
            finish_edit("edit_pujas_id", "Puja updated.")
        else:
            state.create("pujas", **values)
            st.success("Puja added.")
            st.rerun()


def pujas_page(state: AppState):
    st.header("🪔 Pujas")
    pujas = sorted(state.db.pujas, key=lambda p: utils.date_key(p.date))
    spent = {s.puja_id: s.total_expenses for s in stats.puja_expense_summary(pujas, state.db.expenses)}
    st.dataframe(
        [{"name": p.name, "type": p.type, "date": p.date, "budget": p.budget, "spent": spent[p.id]} for p in pujas],
        use_container_width=True,
        hide_index=True,
    )
    if not state.user.is_admin:
        return

    st.divider()
    selected = record_picker("Select puja", pujas, lambda p: f"{p.name} ({p.date}) - {p.id}", "pick_puja")
    if selected:
        record_actions(state, "pujas", selected, "edit_pujas_id")
    st.divider()
    puja_form(state, editing(state, "pujas", "edit_pujas_id"))


def contribution_form(state: AppState, existing=None):
    db = state.db
    st.subheader("✏️ Edit Contribution" if existing else "➕ Add Contribution")
    members = {m.id: m.name for m in db.members}
    pujas = {p.id: p.name for p in db.pujas}
    if not members or not pujas:
        st.info("Add at least one member and one puja first.")
        return

    col1, col2, col3 = st.columns(3)
    with col1:
        member_ids = list(members)
        member_id = st.selectbox("Member", member_ids, format_func=members.get,
                                 index=_index(member_ids, existing.member_id if existing else ""))
        puja_ids = list(pujas)
        puja_id = st.selectbox("Puja", puja_ids, format_func=pujas.get,
                               index=_index(puja_ids, existing.puja_id if existing else ""))
    with col2:
        amount = st.text_input("Amount due", value=str(existing.amount) if existing else "0")
        paid_amount = st.text_input("Amount paid", value=str(existing.paid_amount) if existing else "0")
        status = st.selectbox("Status", PAYMENT_STATUSES,
                              index=_index(PAYMENT_STATUSES, existing.status if existing else STATUS_DUE))
    with col3:
        method = st.selectbox("Payment method", PAYMENT_METHODS,
                              index=_index(PAYMENT_METHODS, existing.payment_method if existing else ""))
        pay_date = st.text_input("Payment date (YYYY-MM-DD, optional)",
                                 value=(existing.payment_date or "") if existing else "")
        notes = st.text_input("Notes", value=(existing.notes or "") if existing else "")

    if st.button("Save contribution", type="primary"):
        if show_errors(utils.validate_contribution_inputs(member_id, puja_id, amount, paid_amount)):
            return
        values = dict(member_id=member_id, puja_id=puja_id, amount=float(amount), paid_amount=float(paid_amount),
                      status=status, payment_method=method, payment_date=pay_date.strip() or None,
                      notes=notes.strip() or None)
        if existing:
            state.update("contributions", existing.id, **values)
            finish_edit("edit_contributions_id", "Contribution updated.")
        else:
            state.create("contributions", **values)
            st.success("Contribution added.")
            st.rerun()


def bulk_contribution_form(state: AppState):
    db = state.db
    st.subheader("👥 Assign dues to several members")
    pujas = {p.id: p.name for p in db.pujas}
    if not pujas or not db.members:
        st.caption("Needs at least one member and one puja.")
        return
    puja_id = st.selectbox("Puja", list(pujas), format_func=pujas.get, key="bulk_puja")
    amount = st.text_input("Amount per member", value="0", key="bulk_amount")
    names = {m.id: m.name for m in db.members}
    selected = st.multiselect("Members", list(names), format_func=names.get, key="bulk_members")
    if st.button("Assign", disabled=not selected):
        if show_errors(utils.validate_contribution_inputs(selected[0], puja_id, amount, 0)):
            return
        created = state.bulk_assign_contributions(puja_id, float(amount), selected)
        st.success(f"{len(created)} contribution(s) added.")
        st.rerun()


def contributions_page(state: AppState):
    st.header("💰 Contributions (dues)")
    db = state.db
    members = {m.id: m.name for m in db.members}
    pujas = {p.id: p.name for p in db.pujas}

    f1, f2, f3 = st.columns(3)
    with f1:
        puja_filter = st.selectbox("Puja", [""] + list(pujas), format_func=lambda k: pujas.get(k, "All pujas"))
    with f2:
        member_filter = st.selectbox("Member", [""] + list(members),
                                     format_func=lambda k: members.get(k, "All members"))
    with f3:
        status_filter = st.selectbox("Status", [""] + list(PAYMENT_STATUSES), format_func=lambda k: k or "All")

    rows = stats.filter_contributions(db.contributions, puja_filter, member_filter, status_filter)
    st.dataframe(
        [
            {"member": members.get(c.member_id, reports.UNKNOWN), "puja": pujas.get(c.puja_id, reports.UNKNOWN),
             "amount": c.amount, "paid": c.paid_amount, "pending": c.pending, "status": c.status,
             "method": c.payment_method, "paymentDate": c.payment_date}
            for c in rows
        ],
        use_container_width=True,
        hide_index=True,
    )
    s = stats.dashboard_stats(db)
    c1, c2, c3 = st.columns(3)
    c1.metric("Expected", utils.format_currency(s.total_contributions_expected))
    c2.metric("Received", utils.format_currency(s.total_contributions_received))
    c3.metric("Pending", utils.format_currency(s.total_contributions_pending))

    if not state.user.is_admin:
        return

    st.divider()
    selected = record_picker(
        "Select contribution", rows,
        lambda c: f"{members.get(c.member_id, reports.UNKNOWN)} / {pujas.get(c.puja_id, reports.UNKNOWN)} - {c.id}",
        "pick_contribution",
    )
    if selected:
        record_actions(state, "contributions", selected, "edit_contributions_id")
    st.divider()
    contribution_form(state, editing(state, "contributions", "edit_contributions_id"))
    st.divider()
    bulk_contribution_form(state)


def income_form(state: AppState, existing=None):
    st.subheader("✏️ Edit Income" if existing else "➕ Add Income")
    col1, col2 = st.columns(2)
    with col1:
        income_type = st.selectbox("Type", INCOME_TYPES, index=_index(INCOME_TYPES, existing.type if existing else ""))
        source = st.text_input("Source", value=existing.source if existing else "")
        amount = st.text_input("Amount", value=str(existing.amount) if existing else "0")
    with col2:
        income_date = st.date_input("Date", value=_date_value(existing.date if existing else None),
                                    key="income_date").isoformat()
        description = st.text_area("Description", value=existing.description if existing else "")

    if st.button("Save income", type="primary"):
        if show_errors(utils.validate_money_entry(source, amount, income_date)):
            return
        values = dict(type=income_type, source=source.strip(), description=description.strip(),
                      amount=float(amount), date=income_date)
        if existing:
            state.update("income", existing.id, **values)
            finish_edit("edit_income_id", "Income updated.")
        else:
            state.create("income", **values)
            st.success("Income added.")
            st.rerun()


def income_page(state: AppState):
    st.header("💵 Other income")
    rows = stats.sort_by_date_desc(state.db.income)
    st.metric("Total", utils.format_currency(sum(i.amount for i in rows)))
    st.dataframe(stats.records_frame(rows, ["date", "type", "source", "description", "amount"]),
                 use_container_width=True, hide_index=True)
    if not state.user.is_admin:
        return
    st.divider()
    selected = record_picker("Select entry", rows, lambda i: f"{i.date} {i.source} {i.amount} - {i.id}", "pick_income")
    if selected:
        record_actions(state, "income", selected, "edit_income_id")
    st.divider()
    income_form(state, editing(state, "income", "edit_income_id"))


def expense_form(state: AppState, existing=None):
    st.subheader("✏️ Edit Expense" if existing else "➕ Add Expense")
    pujas = {p.id: p.name for p in state.db.pujas}
    col1, col2 = st.columns(2)
    with col1:
        category = st.selectbox("Category", EXPENSE_CATEGORIES,
                                index=_index(EXPENSE_CATEGORIES, existing.category if existing else "", 6))
        description = st.text_input("Description", value=existing.description if existing else "")
        amount = st.text_input("Amount", value=str(existing.amount) if existing else "0")
    with col2:
        expense_date = st.date_input("Date", value=_date_value(existing.date if existing else None),
                                     key="expense_date").isoformat()
        receipt_no = st.text_input("Receipt no. (optional)", value=(existing.receipt_no or "") if existing else "")
        puja_options = [""] + list(pujas)
        puja_id = st.selectbox("Puja (optional)", puja_options, format_func=lambda k: pujas.get(k, "-"),
                               index=_index(puja_options, existing.puja_id if existing else ""))

    if st.button("Save expense", type="primary"):
        if show_errors(utils.validate_money_entry(description, amount, expense_date)):
            return
        values = dict(category=category, description=description.strip(), amount=float(amount),
                      date=expense_date, receipt_no=receipt_no.strip() or None, puja_id=puja_id or None)
        if existing:
            state.update("expenses", existing.id, **values)
            finish_edit("edit_expenses_id", "Expense updated.")
        else:
            state.create("expenses", **values)
            st.success("Expense added.")
            st.rerun()


def expenses_page(state: AppState):
    st.header("🧾 Expenses")
    pujas = {p.id: p.name for p in state.db.pujas}
    puja_filter = st.selectbox("Filter by puja", [""] + list(pujas), format_func=lambda k: pujas.get(k, "All"))
    rows = stats.sort_by_date_desc(stats.filter_expenses(state.db.expenses, puja_filter))
    st.metric("Total", utils.format_currency(sum(e.amount for e in rows)))
    st.dataframe(
        [{"date": e.date, "category": e.category, "description": e.description, "amount": e.amount,
          "receiptNo": e.receipt_no, "puja": pujas.get(e.puja_id, "")} for e in rows],
        use_container_width=True,
        hide_index=True,
    )
    if not state.user.is_admin:
        return
    st.divider()
    selected = record_picker("Select expense", rows, lambda e: f"{e.date} {e.description} - {e.id}", "pick_expense")
    if selected:
        record_actions(state, "expenses", selected, "edit_expenses_id")
    st.divider()
    expense_form(state, editing(state, "expenses", "edit_expenses_id"))


def notice_form(state: AppState, existing=None):
    st.subheader("✏️ Edit Notice" if existing else "➕ Add Notice")
    title = st.text_input("Title", value=existing.title if existing else "")
    description = st.text_area("Description", value=existing.description if existing else "")
    notice_date = st.date_input("Date", value=_date_value(existing.date if existing else None),
                                key="notice_date").isoformat()
    important = st.checkbox("Important", value=existing.is_important if existing else False)

    if st.button("Save notice", type="primary"):
        if show_errors(utils.validate_notice_inputs(title, notice_date)):
            return
        values = dict(title=title.strip(), description=description.strip(), date=notice_date,
                      is_important=important)
        if existing:
            state.update("notices", existing.id, **values)
            finish_edit("edit_notices_id", "Notice updated.")
        else:
            state.create("notices", **values)
            st.success("Notice added.")
            st.rerun()


def notices_page(state: AppState):
    st.header("📢 Notice board")
    rows = stats.sort_by_date_desc(state.db.notices)
    if not rows:
        st.caption("No notices.")
    for n in rows:
        box = st.warning if n.is_important else st.info
        box(f"**{n.title}** · {n.date}\n\n{n.description}")
    if not state.user.is_admin:
        return
    st.divider()
    selected = record_picker("Select notice", rows, lambda n: f"{n.date} {n.title} - {n.id}", "pick_notice")
    if selected:
        record_actions(state, "notices", selected, "edit_notices_id")
    st.divider()
    notice_form(state, editing(state, "notices", "edit_notices_id"))


def reports_page(state: AppState):
    st.header("📄 Reports")
    builder = reports.ReportBuilder(SETTINGS.org_name, SETTINGS.pdf_font)
    db = state.snapshot()
    for key, (label, build, file_name) in reports.REPORTS.items():
        st.subheader(label)
        st.download_button(
            f"Download {file_name}",
            data=build(builder, db),
            file_name=file_name,
            mime="application/pdf",
            key=f"report_{key}",
        )

    st.divider()
    st.subheader("Dues summary per member")
    summary = stats.contribution_summary(db.members, db.contributions)
    st.dataframe([s.__dict__ for s in summary], use_container_width=True, hide_index=True)


def settings_page(state: AppState):
    st.header("⚙️ Settings")

    st.subheader("Change password")
    p1 = st.text_input("New password", type="password")
    p2 = st.text_input("Confirm new password", type="password")
    if st.button("Update password", type="primary"):
        if len(p1) < 6:
            st.error("Password must be at least 6 characters.")
        elif p1 != p2:
            st.error("Passwords do not match.")
        else:
            state.change_password(state.user.username, p1)
            st.success("Password updated.")

    st.divider()
    st.subheader("Users")
    st.dataframe([{"username": u.username, "name": u.name, "role": u.role} for u in state.users], hide_index=True)
    c1, c2 = st.columns(2)
    with c1:
        new_username = st.text_input("Username", key="new_user_name")
        new_display = st.text_input("Display name", key="new_user_display")
    with c2:
        new_password = st.text_input("Password", type="password", key="new_user_password")
        new_role = st.selectbox("Role", ROLES, key="new_user_role")
    if st.button("Add user"):
        if not new_username.strip() or len(new_password) < 6:
            st.error("Username and a password of at least 6 characters are required.")
        elif state.add_user(new_username, new_password, new_role, new_display):
            st.success("User added.")
        else:
            st.error("That username already exists.")

    st.divider()
    st.subheader("GitHub")
    if state.remote_enabled:
        st.success(f"Connected to {SETTINGS.github_owner}/{SETTINGS.github_repo} ({state.source}).")
        if st.button("Reload from GitHub"):
            if state.reload():
                st.rerun()
            st.error("Pending changes could not be saved to GitHub, so nothing was reloaded.")
        if st.button("Disconnect GitHub"):
            state.disable_remote()
            st.rerun()
    else:
        token = st.text_input("Personal access token", type="password", key="settings_token")
        if st.button("Connect GitHub", disabled=not token.strip()):
            state.enable_remote(token)
            st.rerun()


PAGES = {
    "Dashboard": dashboard_page,
    "Members": members_page,
    "Pujas": pujas_page,
    "Contributions": contributions_page,
    "Income": income_page,
    "Expenses": expenses_page,
    "Notices": notices_page,
    "Reports": reports_page,
}
ADMIN_PAGES = {"Settings": settings_page}


def main_app(state: AppState):
    st.sidebar.title(f"🪔 {SETTINGS.org_name}")
    st.sidebar.caption(f"Logged in as: {state.user.username} ({state.user.role})")
    with st.sidebar:
        sync_indicator(state)

    pages = dict(PAGES)
    if state.user.is_admin:
        pages.update(ADMIN_PAGES)
    names = list(pages)
    if st.session_state.get("page") not in names:
        st.session_state.page = "Dashboard"
    st.session_state.page = st.sidebar.radio("Navigate", names, index=names.index(st.session_state.page))

    if st.sidebar.button("Logout"):
        state.logout()
        st.session_state.page = "Dashboard"
        st.rerun()

    pages[st.session_state.page](state)


# --------- App entry ---------

def run():
    state = get_state()

    if not state.remote_enabled and not state.local_store.load(SETUP_SEEN_KEY, False):
        github_setup_screen(state)
        return

    if state.user is None:
        login_screen(state)
        return

    main_app(state)


if __name__ == "__main__":
    run()
