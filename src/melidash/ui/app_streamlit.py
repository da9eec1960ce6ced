"""
Streamlit operator console for MeliDash pricing automation.

Features:
- Rules tab: list, activate/deactivate and create rules (dialog workflow)
- Executions tab: run rules, history and dashboard metrics
- Alerts tab: pricing alerts and price recommendations
- System tab: settings and service status
"""
import asyncio
import sys
from datetime import datetime
from pathlib import Path

import pandas as pd
import streamlit as st

# Add src to path for imports
src_path = Path(__file__).parent.parent.parent
if str(src_path) not in sys.path:
    sys.path.insert(0, str(src_path))

from melidash.api.state import ServiceContainer
from melidash.config.settings import get_settings
from melidash.engine.models import ACTION_TYPES, ACTION_UNITS, CONDITION_OPERATORS, CONDITION_TYPES
from melidash.services import reports
from melidash.ui.workflow import DialogState, RuleDialog


st.set_page_config(
    page_title="MeliDash Pricing",
    layout="wide",
    initial_sidebar_state="expanded"
)


@st.cache_resource
def get_services():
    """Get cached service container."""
    return ServiceContainer.build(get_settings())


try:
    services = get_services()
except Exception as e:
    st.error(f"System Error: {e}")
    st.stop()


def run(coro):
    return asyncio.run(coro)


if 'rule_dialog' not in st.session_state:
    st.session_state.rule_dialog = RuleDialog()
dialog: RuleDialog = st.session_state.rule_dialog


# ============================================================================
# SIDEBAR: Status
# ============================================================================
with st.sidebar:
    st.header("⚙️ Automation")
    rules = services.rules.list_rules()
    active = [r for r in rules if r.is_active]
    st.success(f"🔧 **{len(active)} of {len(rules)} Rules Active**")

    unread = [a for a in services.pricing.get_alerts() if not a.is_read]
    if unread:
        st.warning(f"🔔 {len(unread)} unread alerts")

    st.divider()
    if st.button("▶️ Run All Active Rules", type="primary", use_container_width=True):
        with st.spinner("Executing rules..."):
            executions = run(services.pricing.execute_all(services.rules.list_rules()))
        ok_count = sum(1 for e in executions if e.status == 'success')
        st.toast(f"{len(executions)} executions, {ok_count} price changes")
        st.rerun()


# ============================================================================
# MAIN CONTENT: TABBED INTERFACE
# ============================================================================
st.title("MeliDash Pricing Automation")
st.caption(f"Environment: {services.settings.environment} | {datetime.now().strftime('%Y-%m-%d')}")

tab1, tab2, tab3, tab4 = st.tabs(["🔧 Rules", "📈 Executions", "🔔 Alerts", "📊 System"])


# ============================================================================
# TAB 1: RULES
# ============================================================================
with tab1:
    col1, col2 = st.columns([3, 1])
    with col1:
        st.subheader("Pricing Rules")
    with col2:
        if dialog.state is DialogState.CLOSED and st.button("➕ New Rule", use_container_width=True):
            dialog.open()
            st.rerun()

    for rule in services.rules.list_rules():
        with st.container(border=True):
            c1, c2, c3 = st.columns([4, 1, 1])
            c1.markdown(f"**{rule.name}** · priority {rule.priority}")
            c1.caption(rule.description or "No description")
            c2.metric("Runs", rule.execution_count)
            label = "Deactivate" if rule.is_active else "Activate"
            if c3.button(label, key=f"toggle_{rule.id}"):
                services.rules.toggle_rule(rule.id)
                st.rerun()
            conditions = ", ".join(f"{c.type} {c.operator} {c.value}" for c in rule.conditions)
            actions = ", ".join(f"{a.type} {a.value} ({a.unit})" for a in rule.actions)
            st.caption(f"When: {conditions or '-'} | Then: {actions or '-'}")

    if dialog.is_open:
        st.divider()
        st.subheader("New Rule")

        if dialog.state is DialogState.ERROR:
            st.error(dialog.error)
            for problem in dialog.problems:
                st.caption(f"• {problem}")
            b1, b2 = st.columns(2)
            if b1.button("✏️ Back to Form"):
                dialog.edit()
                st.rerun()
            if b2.button("Cancel", key="cancel_error"):
                dialog.cancel()
                st.rerun()

        elif dialog.state is DialogState.EDITING:
            draft = dialog.draft
            name = st.text_input("Name", value=draft.name)
            description = st.text_area("Description", value=draft.description)
            priority = st.number_input("Priority", min_value=1, value=draft.priority, step=1)
            dialog.set_fields(name=name, description=description, priority=int(priority))

            st.markdown("##### Conditions")
            for i, condition in enumerate(draft.conditions):
                c1, c2, c3, c4 = st.columns([2, 2, 1, 1])
                ctype = c1.selectbox("Type", CONDITION_TYPES, index=CONDITION_TYPES.index(condition['type']), key=f"ctype_{condition['id']}")
                cop = c2.selectbox("Operator", CONDITION_OPERATORS, index=CONDITION_OPERATORS.index(condition['operator']), key=f"cop_{condition['id']}")
                cval = c3.number_input("Value", value=float(condition['value']) if isinstance(condition['value'], (int, float)) else 0.0, key=f"cval_{condition['id']}")
                dialog.update_condition(i, type=ctype, operator=cop, value=cval)
                if c4.button("🗑️", key=f"cdel_{condition['id']}"):
                    dialog.remove_condition(i)
                    st.rerun()
            if st.button("Add Condition"):
                dialog.add_condition()
                st.rerun()

            st.markdown("##### Actions")
            for i, action in enumerate(draft.actions):
                c1, c2, c3, c4 = st.columns([2, 1, 2, 1])
                atype = c1.selectbox("Type", ACTION_TYPES, index=ACTION_TYPES.index(action['type']), key=f"atype_{action['id']}")
                aval = c2.number_input("Value", value=float(action['value'] or 0), key=f"aval_{action['id']}")
                aunit = c3.selectbox("Unit", ACTION_UNITS, index=ACTION_UNITS.index(action['unit']), key=f"aunit_{action['id']}")
                dialog.update_action(i, type=atype, value=aval, unit=aunit)
                if c4.button("🗑️", key=f"adel_{action['id']}"):
                    dialog.remove_action(i)
                    st.rerun()
            if st.button("Add Action"):
                dialog.add_action()
                st.rerun()

            for problem in dialog.problems:
                st.warning(problem)

            b1, b2 = st.columns(2)
            if b1.button("💾 Create Rule", type="primary"):
                created = dialog.submit(services.rules.create_rule)
                if created:
                    st.toast(f"Rule '{created.name}' created")
                st.rerun()
            if b2.button("Cancel"):
                dialog.cancel()
                st.rerun()


# ============================================================================
# TAB 2: EXECUTIONS & METRICS
# ============================================================================
with tab2:
    history = services.pricing.get_execution_history()
    metrics = reports.pricing_metrics(history, services.rules.list_rules())

    c1, c2, c3, c4 = st.columns(4)
    c1.metric("Executions", f"{metrics['total_executions']:,}")
    c2.metric("Success Rate", f"{metrics['success_rate']}%")
    c3.metric("Avg Change", f"{metrics['avg_price_change_pct']}%")
    c4.metric("Active Rules", f"{metrics['active_rules']}/{metrics['total_rules']}")

    st.divider()
    st.subheader("Last 24 Hours")
    activity = pd.DataFrame(reports.hourly_activity(history)).set_index('hour')
    st.bar_chart(activity[['successful', 'failed']])

    st.subheader("History")
    status_filter = st.selectbox("Status", ["ALL", "success", "failed", "skipped"], label_visibility="collapsed")
    df = reports.executions_frame(history)
    if status_filter != "ALL" and len(df):
        df = df[df['status'] == status_filter]
    st.dataframe(df.sort_values('executed_at', ascending=False) if len(df) else df,
                 use_container_width=True, hide_index=True)


# ============================================================================
# TAB 3: ALERTS & RECOMMENDATIONS
# ============================================================================
with tab3:
    st.subheader("🔔 Pricing Alerts")
    alerts = sorted(services.pricing.get_alerts(), key=lambda a: a.created_at, reverse=True)
    if not alerts:
        st.info("No alerts.")
    for alert in alerts:
        with st.container(border=True):
            c1, c2 = st.columns([5, 1])
            c1.markdown(f"**{alert.type}** · {alert.severity} · `{alert.product_id}`")
            c1.caption(alert.message)
            if not alert.is_read and c2.button("Mark read", key=f"read_{alert.id}"):
                services.pricing.mark_alert_as_read(alert.id)
                st.rerun()

    st.divider()
    st.subheader("💡 Recommendations")
    if st.button("Generate Recommendations"):
        with st.spinner("Analyzing competitors..."):
            products = run(services.marketplace.get_my_products())["results"]
            for product in products:
                run(services.pricing.feed.get_competitors(product))
            st.session_state.recommendations = run(services.pricing.generate_recommendations(products))

    recs = st.session_state.get('recommendations', [])
    if recs:
        st.dataframe(pd.DataFrame([
            {
                'Product': r.product_id,
                'Current': f"R$ {r.current_price:.2f}",
                'Recommended': f"R$ {r.recommended_price:.2f}",
                'Confidence': f"{r.confidence}%",
                'Reasoning': "; ".join(r.reasoning),
            }
            for r in recs
        ]), use_container_width=True, hide_index=True)


# ============================================================================
# TAB 4: SYSTEM INFO
# ============================================================================
with tab4:
    st.header("System Status")
    settings = services.settings
    c1, c2, c3, c4 = st.columns(4)
    c1.metric("Environment", settings.environment)
    c2.metric("Mock Data", "on" if settings.use_mock_data else "off")
    c3.metric("Cost Ratio", f"{settings.cost_ratio:.0%}")
    c4.metric("Alert Threshold", f"{settings.significant_change_pct:.0f}%")

    products = run(services.marketplace.get_my_products())["results"]
    st.subheader("Listings")
    st.dataframe(pd.DataFrame([
        {'ID': p.id, 'Title': p.title, 'Price': p.price, 'Stock': p.available_quantity, 'Sold': p.sold_quantity}
        for p in products
    ]), use_container_width=True, hide_index=True)
