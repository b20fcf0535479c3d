"""
CSS styles for heatbar.
"""

from .models import HeatTheme, THEME


def get_chart_css(theme: HeatTheme = THEME) -> str:
    """Generate CSS for the full-screen chart using theme colors."""
    return f"""
Screen {{
    padding: 0;
}}

/* Chart owns every cell; the renderer does its own layout */
#heatbar-chart {{
    width: 100%;
    height: 100%;
    padding: 0;
    margin: 0;
    color: {theme.address};
}}
"""
