"""
Streamlit Frontend for the Finance Tracker

Dashboard with summary cards, the financial health score and ranked
insights, plus a voice console that accepts typed or transcribed commands.

DESIGN PRINCIPLES:
1. Simple, clear interface
2. Explicit confirmation before anything is deleted
3. Clear error messages in simple language
4. Visual feedback for all operations
"""

import asyncio
from datetime import date
from decimal import Decimal
from typing import Optional

import streamlit as st
from pydantic import ValidationError

from fintracker.commands import PresentationHandlers, SpeechOutput
from fintracker.models.insight import InsightReport, Severity
from fintracker.models.transaction import TransactionCreate, TransactionType
from fintracker.models.voice import VoiceEvent, VoiceEventType
from fintracker.orchestrator import InsightFlow, create_app_components
from fintracker.services.storage import StorageError
from fintracker.voice.patterns import HELP_EXAMPLES
from fintracker.voice.session import VoiceSession


# Page configuration
st.set_page_config(
    page_title="Finance Tracker",
    page_icon="💰",
    layout="wide",
    initial_sidebar_state="expanded",
)

st.markdown("""
<style>
    .insight-card {
        padding: 16px;
        border-radius: 10px;
        margin: 8px 0;
        border-left: 5px solid #004085;
        background-color: #cce5ff;
    }
    .insight-high { border-left-color: #dc3545; background-color: #f8d7da; }
    .insight-medium { border-left-color: #ffc107; background-color: #fff3cd; }
    .insight-low { border-left-color: #28a745; background-color: #d4edda; }
    .big-number {
        font-size: 2.5em;
        font-weight: bold;
        color: #2c3e50;
    }
</style>
""", unsafe_allow_html=True)


def run_async(coro):
    """Helper to run async functions in Streamlit."""
    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)
    try:
        return loop.run_until_complete(coro)
    finally:
        loop.close()


class StreamlitPresentation(PresentationHandlers):
    """Voice UI hooks backed by st.session_state."""

    def navigate(self, route: str) -> None:
        st.session_state.page = "📊 Dashboard"
        st.session_state.filter_category = None
        st.session_state.filter_date = None

    def scroll_to(self, element: str) -> None:
        st.session_state.focus = element

    def apply_filter(
        self,
        category: Optional[str] = None,
        date: Optional[str] = None,
    ) -> None:
        st.session_state.filter_category = category
        st.session_state.filter_date = date

    def show_help(self) -> None:
        st.session_state.show_help = True


class VoiceEventLog:
    """Keeps the most recent voice events for display."""

    def __init__(self, limit: int = 20):
        self.limit = limit
        self.events: list[VoiceEvent] = []

    def __call__(self, event: VoiceEvent) -> None:
        self.events = (self.events + [event])[-self.limit:]


@st.cache_resource
def get_components():
    """Get or create application components (cached)."""
    insight_flow, session, store = create_app_components(
        presentation=StreamlitPresentation(),
        speech=SpeechOutput(),
    )
    event_log = VoiceEventLog()
    session.subscribe(event_log)
    return insight_flow, session, store, event_log


def init_state():
    defaults = {
        "page": "📊 Dashboard",
        "filter_category": None,
        "filter_date": None,
        "focus": None,
        "show_help": False,
    }
    for key, value in defaults.items():
        if key not in st.session_state:
            st.session_state[key] = value


def main():
    """Main application entry point."""
    init_state()
    insight_flow, session, store, event_log = get_components()

    # A rerun is the only tick Streamlit gives us
    run_async(session.check_timeout())

    st.sidebar.title("💰 Finance Tracker")
    st.sidebar.markdown("---")

    pages = ["📊 Dashboard", "🎤 Voice Commands", "⚙️ Settings"]
    page = st.sidebar.radio(
        "Navigate to:",
        pages,
        index=pages.index(st.session_state.page),
    )
    st.session_state.page = page

    st.sidebar.markdown("---")
    st.sidebar.markdown(
        """
        **Try saying:**
        - "Spent 25 on groceries"
        - "What is my balance?"
        - "Show food expenses"
        """
    )

    if page == "📊 Dashboard":
        render_dashboard_page(insight_flow, store)
    elif page == "🎤 Voice Commands":
        render_voice_page(session, event_log)
    elif page == "⚙️ Settings":
        render_settings_page()


def render_insight(insight) -> None:
    css = {
        Severity.HIGH: "insight-high",
        Severity.MEDIUM: "insight-medium",
        Severity.LOW: "insight-low",
    }.get(insight.severity, "")
    action = f"<p><em>💡 {insight.action}</em></p>" if insight.action else ""
    st.markdown(f"""
    <div class="insight-card {css}">
        <h4>{insight.icon} {insight.title}</h4>
        <p>{insight.message}</p>
        {action}
    </div>
    """, unsafe_allow_html=True)


def render_insights_panel(report: InsightReport) -> None:
    st.markdown("### 🤖 Insights")

    if not report.has_data:
        st.info("Add at least 3 transactions to unlock personalised insights.")
        return

    if report.health_score is not None:
        st.markdown(f"""
        <div>
            <p>Financial Health Score</p>
            <p class="big-number">{report.health_score}/100</p>
        </div>
        """, unsafe_allow_html=True)
        st.progress(report.health_score / 100)

    if not report.insights:
        st.success("Nothing stands out. Keep it up!")
        return

    for insight in report.insights:
        render_insight(insight)


def render_dashboard_page(insight_flow: InsightFlow, store):
    """Render the dashboard page."""
    st.title("📊 Dashboard")

    report = run_async(insight_flow.refresh())
    totals = report.totals

    col1, col2, col3 = st.columns(3)
    col1.metric("Income", insight_flow.profile.money(totals.income))
    col2.metric("Expenses", insight_flow.profile.money(totals.expense))
    col3.metric("Balance", insight_flow.profile.money(totals.balance))

    st.markdown("---")
    left, right = st.columns([2, 1])

    with right:
        render_insights_panel(report)

    with left:
        render_add_form(store, insight_flow)
        render_transactions(store, insight_flow)


def render_add_form(store, insight_flow: InsightFlow):
    with st.expander("➕ Add Transaction"):
        with st.form("add_transaction", clear_on_submit=True):
            kind = st.selectbox("Type", options=list(TransactionType), format_func=lambda t: t.value.title())
            amount = st.number_input("Amount", min_value=0.01, step=1.0, format="%.2f")
            category = st.text_input("Category", value="Other")
            description = st.text_input("Description")
            when = st.date_input("Date", value=date.today())

            if st.form_submit_button("💾 Save", type="primary"):
                try:
                    data = TransactionCreate(
                        type=kind,
                        amount=Decimal(str(round(amount, 2))),
                        category=category,
                        description=description or None,
                        date=when,
                    )
                    run_async(store.create_transaction(insight_flow.user_id, data))
                except (ValidationError, StorageError) as e:
                    st.error(f"❌ Could not save: {e}")
                else:
                    st.rerun()


def render_transactions(store, insight_flow: InsightFlow):
    st.markdown("### 📋 Transactions")
    if st.session_state.focus == "transactions":
        st.caption("📍 Showing your transactions")
        st.session_state.focus = None

    transactions = run_async(store.list_transactions(insight_flow.user_id))

    category = st.session_state.filter_category
    if category:
        transactions = [t for t in transactions if t.category == category]
    if st.session_state.filter_date == "today":
        transactions = [t for t in transactions if t.date == date.today()]

    if category or st.session_state.filter_date:
        label = category or f"{st.session_state.filter_date}'s transactions"
        col1, col2 = st.columns([3, 1])
        col1.info(f"Filtered by: {label}")
        if col2.button("Clear filter"):
            st.session_state.filter_category = None
            st.session_state.filter_date = None
            st.rerun()

    if not transactions:
        st.info("📋 No transactions yet. Add one above or say \"Spent 25 on groceries\".")
        return

    st.dataframe(
        [
            {
                "Date": t.date.isoformat(),
                "Type": t.type.value.title(),
                "Category": t.category,
                "Description": t.description or "",
                "Amount": f"{float(t.amount):.2f}",
            }
            for t in transactions
        ],
        use_container_width=True,
        hide_index=True,
    )


def render_voice_page(session: VoiceSession, event_log: VoiceEventLog):
    """Render the voice command console."""
    st.title("🎤 Voice Commands")

    col1, col2 = st.columns(2)
    with col1:
        if session.is_listening:
            if st.button("⏹️ Stop Listening"):
                run_async(session.stop_capture())
                st.rerun()
        else:
            if st.button("🎤 Start Listening", type="primary"):
                if not run_async(session.start_capture()):
                    st.error("❌ Failed to start voice recognition")
                st.rerun()
    with col2:
        status = "🎤 Listening... Speak now" if session.is_listening else "Click the microphone to start"
        st.markdown(f"**Status:** {status}")

    with st.form("voice_input", clear_on_submit=True):
        text = st.text_input(
            "Say or type a command:",
            placeholder="e.g., Spent 25 on groceries",
        )
        if st.form_submit_button("Send") and text:
            run_async(session.handle_transcript(text, is_final=True))
            st.rerun()

    # Security dialog
    pending = session.pending_command
    if pending is not None:
        st.warning(f"🔒 Security check required: \"{pending.transcript}\"")
        confirm_col, cancel_col = st.columns(2)
        if confirm_col.button("✅ Confirm", type="primary"):
            run_async(session.confirm_pending_command(True))
            st.rerun()
        if cancel_col.button("❌ Cancel"):
            run_async(session.confirm_pending_command(False))
            st.rerun()

    render_voice_events(event_log)

    if st.session_state.show_help:
        with st.expander("📝 Available Commands", expanded=True):
            for category, examples in HELP_EXAMPLES:
                st.markdown(f"**{category}:** " + ", ".join(f'"{e}"' for e in examples))
            if st.button("Hide commands"):
                st.session_state.show_help = False
                st.rerun()

    with st.expander("🕘 Recent Commands"):
        entries = session.history.entries
        if not entries:
            st.caption("No commands yet.")
        for entry in reversed(entries):
            st.markdown(f"- {entry.command_text}  \n  _{entry.timestamp:%H:%M:%S}_")


def render_voice_events(event_log: VoiceEventLog):
    icons = {
        VoiceEventType.COMMAND_RESULT: "✅",
        VoiceEventType.UNKNOWN_COMMAND: "❌",
        VoiceEventType.SECURITY_CHECK_REQUIRED: "🔒",
        VoiceEventType.ERROR: "❌",
        VoiceEventType.STATUS_CHANGE: "ℹ️",
    }
    shown = [e for e in event_log.events if e.type in icons]
    if not shown:
        return

    st.markdown("### Activity")
    for event in reversed(shown[-5:]):
        if event.type == VoiceEventType.COMMAND_RESULT and event.outcome and not event.outcome.success:
            st.error(f"❌ {event.message}")
        else:
            st.markdown(f"{icons[event.type]} {event.message}")


def render_settings_page():
    """Render the settings page."""
    st.title("⚙️ Settings")

    st.markdown("### Configuration Status")

    from fintracker.config import get_settings, validate_all_settings

    status = validate_all_settings()
    groups = [
        ("Insight thresholds", "insights"),
        ("Voice commands", "voice"),
        ("Application", "app"),
    ]
    if get_settings().app.storage_backend == "google_sheets":
        groups.append(("Google Sheets (Storage)", "google_sheets"))

    for name, key in groups:
        if status.get(key, False):
            st.success(f"✅ {name} - OK")
        else:
            error = status.get(f"{key}_error", "Not configured")
            st.error(f"❌ {name} - {error}")

    st.markdown("---")
    st.markdown("### Configuration")
    st.markdown(
        "Settings are read from environment variables or a `.env` file "
        "(`INSIGHTS_*`, `VOICE_*`, `GOOGLE_SHEETS_*`, `STORAGE_BACKEND`). "
        "See `.env.example` for the available variables."
    )


if __name__ == "__main__":
    main()
