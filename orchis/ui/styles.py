"""
Custom CSS styles for the Orchis console.
Dark theme with the orange/lime brand accents.
"""
import streamlit as st


# Color palette
COLORS = {
    "primary": "#F97316",      # orange-500
    "primary_hover": "#EA580C",
    "accent": "#A3E635",       # lime-400
    "background": "#0A0A0A",
    "surface": "#171717",
    "surface_hover": "#262626",
    "text": "#FAFAFA",
    "text_muted": "#A3A3A3",
    "success": "#22C55E",
    "warning": "#EAB308",
    "error": "#EF4444",
    "border": "#2E2E2E",
    "featured": "#D946EF",     # fuchsia-500
}


def inject_custom_css():
    """Inject custom CSS into the Streamlit app."""
    st.markdown(f"""
    <style>
    @import url('https://fonts.googleapis.com/css2?family=Inter:wght@300;400;500;600;700&display=swap');

    :root {{
        --primary: {COLORS['primary']};
        --primary-hover: {COLORS['primary_hover']};
        --accent: {COLORS['accent']};
        --bg: {COLORS['background']};
        --surface: {COLORS['surface']};
        --surface-hover: {COLORS['surface_hover']};
        --text: {COLORS['text']};
        --text-muted: {COLORS['text_muted']};
        --success: {COLORS['success']};
        --warning: {COLORS['warning']};
        --error: {COLORS['error']};
        --border: {COLORS['border']};
        --featured: {COLORS['featured']};
    }}

    .stApp {{
        font-family: 'Inter', -apple-system, sans-serif;
        background: var(--bg);
    }}

    /* Header */
    .app-header {{
        padding: 1.5rem 0 1rem;
    }}

    .app-header h1 {{
        font-size: 2.2rem;
        font-weight: 700;
        background: linear-gradient(135deg, var(--primary) 0%, var(--accent) 100%);
        -webkit-background-clip: text;
        -webkit-text-fill-color: transparent;
        margin-bottom: 0.25rem;
    }}

    .app-header .subtitle {{
        color: var(--text-muted);
        font-size: 1rem;
    }}

    /* Tool cards */
    .tool-card {{
        background: var(--surface);
        border: 1px solid var(--border);
        border-radius: 12px;
        padding: 1rem 1.25rem;
        margin-bottom: 0.75rem;
        transition: background 0.2s ease;
    }}

    .tool-card:hover {{
        background: var(--surface-hover);
    }}

    .tool-card.featured {{
        border-color: var(--featured);
    }}

    .tool-card .card-header {{
        display: flex;
        justify-content: space-between;
        align-items: center;
    }}

    .tool-card .name {{
        color: var(--text);
        font-size: 1.1rem;
        font-weight: 600;
    }}

    .tool-card .tagline {{
        color: var(--text-muted);
        font-size: 0.9rem;
        margin-top: 0.25rem;
    }}

    .score-badge {{
        padding: 0.2rem 0.6rem;
        border-radius: 999px;
        font-size: 0.8rem;
        font-weight: 600;
        background: rgba(249, 115, 22, 0.15);
        color: var(--primary);
    }}

    .tag {{
        display: inline-block;
        padding: 0.15rem 0.5rem;
        margin: 0.4rem 0.3rem 0 0;
        border-radius: 6px;
        font-size: 0.75rem;
        background: rgba(163, 230, 53, 0.12);
        color: var(--accent);
    }}

    .tag-featured {{
        background: rgba(217, 70, 239, 0.15);
        color: var(--featured);
    }}

    .tag-status {{
        background: rgba(163, 163, 163, 0.15);
        color: var(--text-muted);
    }}

    /* Buttons */
    .stButton > button[kind="primary"] {{
        background: var(--primary);
        border: none;
        font-weight: 600;
    }}

    .stButton > button[kind="primary"]:hover {{
        background: var(--primary-hover);
    }}

    /* Metrics */
    [data-testid="stMetric"] {{
        background: var(--surface);
        border: 1px solid var(--border);
        border-radius: 12px;
        padding: 1rem;
    }}

    [data-testid="stMetricValue"] {{
        color: var(--primary);
    }}

    .empty-state {{
        text-align: center;
        color: var(--text-muted);
        padding: 2rem 0;
    }}
    </style>
    """, unsafe_allow_html=True)
