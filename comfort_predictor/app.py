"""Weather Comfort Predictor Streamlit app.

Run with: streamlit run comfort_predictor/app.py

Two modes: a daily comfort prediction for a location and date, and a
monthly climate overview for a whole country. Predictions come from
Claude with web search; daily predictions are kept in a local history
that can be charted per location.
"""

from __future__ import annotations

import random
from datetime import date
from html import escape

import streamlit as st

from comfort_predictor import config
from comfort_predictor.chart import Metric, build_chart, render_svg
from comfort_predictor.controller import (
    ComfortController,
    CountryQuery,
    CountryResult,
    DailyQuery,
    DailyResult,
    Status,
    load_controller,
)
from comfort_predictor.display import (
    clamp_score,
    condition_icon,
    format_measurement,
    gauge_dash_offset,
    likelihood_color,
    score_color,
    sky_scene,
)
from comfort_predictor.models import (
    CountryOverviewData,
    GroundingSource,
    PredictionData,
    Theme,
)
from comfort_predictor.storage import LocalStore

COUNTRIES = [
    "United States", "Canada", "Mexico", "Brazil", "Argentina", "United Kingdom",
    "France", "Germany", "Spain", "Italy", "Russia", "China", "India", "Japan",
    "Australia", "Egypt", "South Africa", "Nigeria",
]

_MODES = ("Daily Forecast", "Monthly Overview")


# ---------------------------------------------------------------------------
# Theme palettes
# ---------------------------------------------------------------------------

_PALETTES: dict[Theme, dict[str, str]] = {
    Theme.LIGHT: {
        "sky": "linear-gradient(180deg, #7dd3fc 0%, #bae6fd 60%, #e0f2fe 100%)",
        "page": "#f1f5f9",
        "card": "rgba(255, 255, 255, 0.7)",
        "border": "rgba(15, 23, 42, 0.1)",
        "text": "#0f172a",
        "muted": "#64748b",
        "track": "#e5e7eb",
    },
    Theme.DARK: {
        "sky": "linear-gradient(180deg, #0b1026 0%, #1e1b4b 60%, #312e81 100%)",
        "page": "#0f172a",
        "card": "rgba(31, 41, 55, 0.55)",
        "border": "rgba(255, 255, 255, 0.12)",
        "text": "#f8fafc",
        "muted": "#9ca3af",
        "track": "#374151",
    },
}


# ---------------------------------------------------------------------------
# CSS injection
# ---------------------------------------------------------------------------

def _inject_css(theme: Theme) -> None:
    """Inject the glass-card styles for the active theme."""
    p = _PALETTES[theme]
    st.markdown(f"""
    <style>
    .stApp {{
        background: {p["page"]} !important;
        color: {p["text"]};
    }}
    #MainMenu {{visibility: hidden;}}
    footer {{visibility: hidden;}}
    .block-container {{
        padding-top: 1rem !important;
        max-width: 900px !important;
    }}

    /* ===== GLASS CARD ===== */
    .glass-card {{
        background: {p["card"]};
        backdrop-filter: blur(12px);
        -webkit-backdrop-filter: blur(12px);
        border-radius: 16px;
        border: 1px solid {p["border"]};
        padding: 18px;
        margin-bottom: 14px;
        color: {p["text"]};
    }}
    .section-label {{
        font-size: 0.75rem;
        text-transform: uppercase;
        letter-spacing: 0.05em;
        color: {p["muted"]};
        margin-bottom: 10px;
    }}
    .muted {{ color: {p["muted"]}; }}

    /* ===== CONDITION BARS ===== */
    .cond-row {{ margin-bottom: 12px; }}
    .cond-head {{ display: flex; justify-content: space-between; font-size: 0.9rem; }}
    .cond-track {{
        width: 100%; height: 10px; border-radius: 5px;
        background: {p["track"]}; overflow: hidden; margin-top: 4px;
    }}
    .cond-fill {{ height: 10px; border-radius: 5px; }}
    .glance {{ display: flex; gap: 10px; justify-content: space-between; }}
    .glance-item {{ flex: 1; text-align: center; padding: 8px; border-radius: 10px; }}

    /* ===== CHART ===== */
    .chart-label {{ font-size: 11px; fill: {p["muted"]}; }}
    .chart-grid {{ stroke: {p["muted"]}; opacity: 0.2; }}

    /* ===== SKY BANNER ===== */
    .sky {{
        position: relative; height: 120px; border-radius: 16px;
        overflow: hidden; margin-bottom: 14px; background: {p["sky"]};
    }}
    .sky .orb {{
        position: absolute; top: 18px; right: 40px; width: 56px; height: 56px;
        border-radius: 50%;
    }}
    .sky .cloud {{
        position: absolute; width: 90px; height: 28px; border-radius: 14px;
        background: rgba(255, 255, 255, 0.75);
        animation: drift linear infinite;
    }}
    .sky .star {{
        position: absolute; width: 2px; height: 2px; border-radius: 50%;
        background: #fff; animation: twinkle 4s infinite alternate;
    }}
    .sky .rain {{
        position: absolute; width: 2px; height: 14px;
        background: rgba(186, 230, 253, 0.8); animation: rain-fall 0.9s linear infinite;
    }}
    .sky .gust {{
        position: absolute; height: 2px; width: 120px;
        background: rgba(255, 255, 255, 0.5); animation: wind-gust 3s linear infinite;
    }}
    .sky .heat {{
        position: absolute; inset: 0;
        background: linear-gradient(0deg, rgba(249, 115, 22, 0.25), transparent 60%);
        animation: heat-shimmer 4s ease-in-out infinite;
    }}
    @keyframes drift {{ from {{ left: -120px; }} to {{ left: 100%; }} }}
    @keyframes twinkle {{ from {{ opacity: 0.1; }} to {{ opacity: 1; }} }}
    @keyframes rain-fall {{ from {{ transform: translateY(-20px); }} to {{ transform: translateY(140px); }} }}
    @keyframes wind-gust {{ from {{ left: -150px; opacity: 0; }} 30% {{ opacity: 0.6; }} to {{ left: 100%; opacity: 0; }} }}
    @keyframes heat-shimmer {{ 0%, 100% {{ opacity: 0; }} 50% {{ opacity: 1; }} }}
    </style>
    """, unsafe_allow_html=True)


# ---------------------------------------------------------------------------
# Session state
# ---------------------------------------------------------------------------

@st.cache_resource
def _get_store() -> LocalStore:
    """One LocalStore per server process."""
    return LocalStore(config.STORAGE_PATH)


def _get_controller() -> ComfortController:
    if "controller" not in st.session_state:
        st.session_state.controller = load_controller(_get_store())
    return st.session_state.controller


# ---------------------------------------------------------------------------
# Render: sky banner
# ---------------------------------------------------------------------------

def _render_sky(controller: ComfortController) -> None:
    """Render the animated sky banner for the theme and latest prediction."""
    prediction = None
    if isinstance(controller.result, DailyResult):
        prediction = controller.result.data.prediction
    scene = sky_scene(controller.theme, prediction)

    rng = random.Random(scene.cloud_count)
    layers = []
    if scene.is_night:
        layers.append('<div class="orb" style="background:#e5e7eb;box-shadow:0 0 24px #e5e7eb;"></div>')
        for _ in range(40):
            layers.append(
                f'<div class="star" style="top:{rng.uniform(0, 60):.0f}%;left:{rng.uniform(0, 100):.0f}%;'
                f'animation-delay:{rng.uniform(0, 4):.1f}s;"></div>'
            )
    else:
        layers.append('<div class="orb" style="background:#fde047;box-shadow:0 0 40px #facc15;"></div>')

    for _ in range(scene.cloud_count):
        layers.append(
            f'<div class="cloud" style="top:{rng.uniform(5, 60):.0f}%;'
            f'animation-duration:{rng.uniform(40, 100):.0f}s;'
            f'animation-delay:-{rng.uniform(0, 100):.0f}s;'
            f'transform:scale({rng.uniform(0.6, 1.1):.2f});"></div>'
        )
    if scene.show_rain:
        for _ in range(40):
            layers.append(
                f'<div class="rain" style="left:{rng.uniform(0, 100):.0f}%;'
                f'animation-delay:{rng.uniform(0, 1):.2f}s;"></div>'
            )
    if scene.show_wind:
        for _ in range(4):
            layers.append(
                f'<div class="gust" style="top:{rng.uniform(20, 90):.0f}%;'
                f'animation-delay:{rng.uniform(0, 3):.1f}s;"></div>'
            )
    if scene.show_heat:
        layers.append('<div class="heat"></div>')

    st.markdown(f'<div class="sky">{"".join(layers)}</div>', unsafe_allow_html=True)


# ---------------------------------------------------------------------------
# Render: input form
# ---------------------------------------------------------------------------

def _render_form(controller: ComfortController) -> None:
    """Render the mode selector and the query form, submitting on click."""
    mode = st.radio("Mode", _MODES, horizontal=True, label_visibility="collapsed")

    with st.form("prediction_form"):
        if mode == _MODES[0]:
            col1, col2 = st.columns([3, 2])
            location = col1.text_input(
                "Location",
                value=controller.last_location,
                placeholder="e.g., San Francisco, US",
            )
            target = col2.date_input("Date", value=date.today())
            query = DailyQuery(location=location, date=target.isoformat() if target else "")
        else:
            today = date.today()
            col1, col2, col3 = st.columns([3, 2, 1])
            country = col1.selectbox("Country", COUNTRIES)
            month = col2.selectbox(
                "Month",
                list(range(1, 13)),
                index=today.month - 1,
                format_func=lambda m: date(2000, m, 1).strftime("%B"),
            )
            year = col3.number_input("Year", value=today.year, step=1, format="%d")
            query = CountryQuery(country=country, month=month, year=int(year))

        submitted = st.form_submit_button(
            "\u2728 Predict",
            type="primary",
            disabled=controller.is_loading,
            use_container_width=True,
        )

    if submitted:
        with st.spinner("AI is analyzing real-time web data... This may take a moment."):
            controller.submit(query)


# ---------------------------------------------------------------------------
# Render: daily prediction
# ---------------------------------------------------------------------------

def _render_gauge(score: float) -> str:
    circumference, offset = gauge_dash_offset(score)
    color = score_color(score)
    clamped = clamp_score(score)
    return (
        f'<svg viewBox="0 0 100 100" style="width:150px;height:150px;">'
        f'<circle cx="50" cy="50" r="45" fill="transparent" stroke-width="10" '
        f'stroke="rgba(148,163,184,0.3)"/>'
        f'<circle cx="50" cy="50" r="45" fill="transparent" stroke-width="10" '
        f'stroke-linecap="round" stroke="{color}" transform="rotate(-90 50 50)" '
        f'stroke-dasharray="{circumference:.2f}" stroke-dashoffset="{offset:.2f}"/>'
        f'<text x="50" y="52" text-anchor="middle" font-size="22" font-weight="700" '
        f'fill="{color}">{clamped:.1f}</text>'
        f'<text x="50" y="68" text-anchor="middle" font-size="9" class="chart-label">/ 10</text>'
        f'</svg>'
    )


def _render_sources(sources: tuple[GroundingSource, ...]) -> None:
    if not sources:
        return
    links = "".join(
        f'<li><a href="{escape(s.uri)}" target="_blank" rel="noopener">{escape(s.title)}</a></li>'
        for s in sources
    )
    st.markdown(
        f'<div class="glass-card"><div class="section-label">\U0001f310 SOURCES</div>'
        f'<ul>{links}</ul></div>',
        unsafe_allow_html=True,
    )


def _render_prediction(prediction: PredictionData, sources: tuple[GroundingSource, ...]) -> None:
    """Render the comfort gauge, condition details, and recommendations."""
    st.markdown(
        f'<div class="glass-card" style="text-align:center;">'
        f'<div class="section-label">{escape(prediction.location)} \u00b7 {prediction.date}</div>'
        f'<div class="section-label">OVERALL COMFORT SCORE</div>'
        f'{_render_gauge(prediction.comfort_score)}'
        f'<p class="muted">{escape(prediction.summary)}</p>'
        f'</div>',
        unsafe_allow_html=True,
    )

    glance = ""
    for cond in prediction.conditions:
        opacity = "0.35" if cond.likelihood < 25 else "1"
        glance += (
            f'<div class="glance-item" title="{cond.name.value}: {cond.likelihood}%">'
            f'<div style="font-size:1.6rem;opacity:{opacity};">{condition_icon(cond.name)}</div>'
            f'<div style="color:{likelihood_color(cond.likelihood)};font-weight:600;">'
            f'{cond.likelihood}%</div></div>'
        )

    bars = ""
    for cond in prediction.conditions:
        bars += (
            f'<div class="cond-row" title="{escape(cond.description)}">'
            f'<div class="cond-head"><span>{condition_icon(cond.name)} {cond.name.value}</span>'
            f'<span><strong>{cond.likelihood}%</strong> '
            f'<span class="muted">{escape(format_measurement(cond))}</span></span></div>'
            f'<div class="cond-track"><div class="cond-fill" style="width:{cond.likelihood}%;'
            f'background:{likelihood_color(cond.likelihood)};"></div></div>'
            f'</div>'
        )

    st.markdown(
        f'<div class="glass-card"><div class="section-label">AT A GLANCE</div>'
        f'<div class="glance">{glance}</div></div>'
        f'<div class="glass-card"><div class="section-label">CONDITION DETAILS</div>{bars}</div>',
        unsafe_allow_html=True,
    )

    if prediction.recommendations:
        items = "".join(f"<li>{escape(rec)}</li>" for rec in prediction.recommendations)
        st.markdown(
            f'<div class="glass-card"><div class="section-label">\u2705 ACTIVITY RECOMMENDATIONS</div>'
            f'<ul>{items}</ul></div>',
            unsafe_allow_html=True,
        )

    _render_sources(sources)


# ---------------------------------------------------------------------------
# Render: country overview
# ---------------------------------------------------------------------------

def _render_overview(overview: CountryOverviewData, sources: tuple[GroundingSource, ...]) -> None:
    """Render the country summary, regional breakdowns, and travel advice."""
    regions = "".join(
        f'<div style="margin-bottom:10px;"><strong>{escape(r.region)}</strong>'
        f'<div class="muted">{escape(r.summary)}</div></div>'
        for r in overview.regional_breakdowns
    )
    st.markdown(
        f'<div class="glass-card">'
        f'<div class="section-label">{overview.month_name}, {overview.year}</div>'
        f'<h3 style="margin-top:0;">{escape(overview.country)}</h3>'
        f'<p>{escape(overview.overall_summary)}</p></div>'
        f'<div class="glass-card"><div class="section-label">\U0001f5fa\ufe0f REGIONAL BREAKDOWN</div>'
        f'{regions}</div>',
        unsafe_allow_html=True,
    )

    if overview.travel_advice:
        items = "".join(f"<li>{escape(tip)}</li>" for tip in overview.travel_advice)
        st.markdown(
            f'<div class="glass-card"><div class="section-label">\U0001f9f3 TRAVEL ADVICE</div>'
            f'<ul>{items}</ul></div>',
            unsafe_allow_html=True,
        )

    _render_sources(sources)


# ---------------------------------------------------------------------------
# Render: history
# ---------------------------------------------------------------------------

def _render_history(controller: ComfortController) -> None:
    """Render the per-location history chart with metric selection."""
    locations = controller.history_locations()
    if not locations:
        return

    st.markdown("#### Prediction History")
    col1, col2, col3 = st.columns([3, 3, 1])
    if len(locations) > 1:
        selected = col1.selectbox("Location", locations, key="history_location")
    else:
        selected = locations[0]
        col1.markdown(f"**{selected}**")
    metric = col2.selectbox(
        "Metric",
        list(Metric),
        format_func=lambda m: m.label,
        key="history_metric",
    )
    if col3.button("\U0001f5d1 Clear", key="clear_history", help="Clear all prediction history"):
        controller.clear_history()
        st.rerun()

    chart = build_chart(controller.history_for(selected), metric)
    if chart.is_empty:
        st.markdown(
            '<p class="muted" style="text-align:center;">Select a location to view its history.</p>',
            unsafe_allow_html=True,
        )
        return
    st.markdown(
        f'<div class="glass-card" style="overflow-x:auto;">{render_svg(chart, metric)}</div>',
        unsafe_allow_html=True,
    )


# ---------------------------------------------------------------------------
# Main
# ---------------------------------------------------------------------------

def main():
    """Main Streamlit application entry point."""
    config.configure_logging()
    st.set_page_config(
        page_title="Weather Comfort Predictor",
        page_icon="\U0001f324\ufe0f",
        layout="centered",
    )

    controller = _get_controller()
    _inject_css(controller.theme)

    col1, col2 = st.columns([5, 1])
    col1.markdown("## \U0001f324\ufe0f Weather Comfort Predictor")
    toggle_label = "\U0001f319 Dark" if controller.theme is Theme.LIGHT else "\u2600\ufe0f Light"
    if col2.button(toggle_label, key="theme_toggle"):
        controller.toggle_theme()
        st.rerun()

    _render_sky(controller)

    if not config.get_anthropic_api_key():
        st.warning(
            "Predictions are not enabled. Add ANTHROPIC_API_KEY in "
            "Streamlit app Settings \u2192 Secrets or your environment."
        )

    _render_form(controller)

    if controller.status is Status.FAILED and controller.error:
        st.error(f"**An Error Occurred**\n\n{controller.error}")
    elif isinstance(controller.result, DailyResult):
        _render_prediction(controller.result.data.prediction, controller.result.data.sources)
    elif isinstance(controller.result, CountryResult):
        _render_overview(controller.result.data.overview, controller.result.data.sources)
    else:
        st.markdown(
            '<div class="glass-card" style="text-align:center;">'
            '<h3>Weather Comfort Predictor</h3>'
            '<p class="muted">Select a mode above to get an AI-powered weather forecast.</p>'
            '</div>',
            unsafe_allow_html=True,
        )

    if not controller.is_loading:
        _render_history(controller)

    st.caption("Powered by AI. Forecasts are predictive and not guaranteed.")


if __name__ == "__main__":
    main()
