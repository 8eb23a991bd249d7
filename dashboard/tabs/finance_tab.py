import streamlit as st

from dashboard.constants import FINANCE_COLORS, FINANCE_TYPES
from dashboard.data import repositories
from dashboard.data.api_client import ApiError
from dashboard.metrics import expense_by_category, finance_totals
from dashboard.visualizations import expense_breakdown_chart, finance_totals_chart

PERIODS = [7, 30, 90, 365]


def _add_entry(ctx):
    amount = st.session_state.get("finance.new_amount")
    if not amount:
        st.session_state["finance.flash"] = "Type and amount are required"
        return
    tags = [item.strip() for item in str(st.session_state.get("finance.new_tags", "")).split(",") if item.strip()]
    payload = {
        "type": st.session_state.get("finance.new_type", "expense"),
        "amount": float(amount),
        "category": st.session_state.get("finance.new_category") or None,
        "description": st.session_state.get("finance.new_description") or None,
        "account": st.session_state.get("finance.new_account") or None,
        "date": st.session_state.get("finance.new_date"),
        "tags": tags,
    }
    try:
        repositories.create_finance_entry(payload, timezone=ctx.timezone)
        st.session_state["finance.new_amount"] = 0.0
        st.session_state["finance.new_description"] = ""
    except ApiError as exc:
        st.session_state["finance.flash"] = exc.message


def render_finance_tab(ctx, compact=False):
    if not compact:
        st.markdown("<div class='section-title'>Finance</div>", unsafe_allow_html=True)

    flash = st.session_state.pop("finance.flash", None)
    if flash:
        st.error(flash)

    days = 30
    type_filter = None
    if not compact:
        cols = st.columns(2)
        with cols[0]:
            days = st.selectbox("Period", PERIODS, index=1, key="finance.period", format_func=lambda d: f"Last {d} days")
        with cols[1]:
            choice = st.selectbox("Type", ["all"] + FINANCE_TYPES, key="finance.type_filter")
            type_filter = None if choice == "all" else choice

    try:
        entries = repositories.list_finance_entries(days=days, timezone=ctx.timezone, entry_type=type_filter, limit=500)
    except ApiError as exc:
        st.error(exc.message)
        return

    totals = finance_totals(entries)
    cols = st.columns(3)
    cols[0].metric("Income", f"{totals['income']:.2f}")
    cols[1].metric("Expenses", f"{totals['expense']:.2f}")
    cols[2].metric("Balance", f"{totals['balance']:.2f}")

    with st.expander("Add entry", expanded=False):
        cols = st.columns(2)
        with cols[0]:
            st.selectbox("Type", FINANCE_TYPES, key="finance.new_type")
            st.number_input("Amount", min_value=0.0, step=1.0, key="finance.new_amount")
            st.date_input("Date", value=ctx.today(), key="finance.new_date")
        with cols[1]:
            st.text_input("Category", key="finance.new_category")
            st.text_input("Account", key="finance.new_account")
            st.text_input("Tags (comma-separated)", key="finance.new_tags")
        st.text_input("Description", key="finance.new_description")
        st.button("Add", key="finance.add", on_click=_add_entry, args=(ctx,))

    if compact:
        return

    breakdown = expense_by_category(entries)
    chart_cols = st.columns(2)
    with chart_cols[0]:
        st.plotly_chart(finance_totals_chart(totals), use_container_width=True)
    with chart_cols[1]:
        if breakdown.empty:
            st.caption("No expenses in this period.")
        else:
            st.plotly_chart(expense_breakdown_chart(breakdown), use_container_width=True)

    st.markdown("<div class='section-title'>Entries</div>", unsafe_allow_html=True)
    if not entries:
        st.caption("No entries yet.")
    for entry in entries:
        color = FINANCE_COLORS.get(entry.get("type"), "#999999")
        sign = "+" if entry.get("type") == "income" else ("-" if entry.get("type") == "expense" else "↔")
        cols = st.columns([0.7, 0.15, 0.15])
        with cols[0]:
            st.markdown(f"**{entry.get('date')}** • {entry.get('category') or 'Uncategorized'}")
            if entry.get("description"):
                st.caption(entry["description"])
        with cols[1]:
            st.markdown(
                f"<span style='color:{color};font-weight:600;'>{sign}{float(entry.get('amount') or 0):.2f}</span>",
                unsafe_allow_html=True,
            )
        with cols[2]:
            if st.button("Delete", key=f"finance.delete.{entry['id']}"):
                try:
                    repositories.delete_finance_entry(entry["id"])
                    st.rerun()
                except ApiError as exc:
                    st.error(exc.message)
