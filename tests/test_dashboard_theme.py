from decimal import Decimal

import pandas as pd

from mt_dashboard.frontend import components, tables


def test_theme_css_includes_font():
    css = components.get_global_styles()
    assert "Space Grotesk" in css


def test_metrics_bar_markup():
    html = components.build_metrics_bar_html(
        balance="$10,000.00",
        equity="$10,250.50",
        profit="+$250.50",
        margin="$1,500.00",
        free_margin="$8,750.50",
        margin_level="683.37%",
    )
    assert "metrics-card" in html
    assert "Free: $8,750.50" in html


def test_danger_margin_uses_negative_color():
    html = components.build_metrics_bar_html(
        balance="$1", equity="$1", profit="-$1", margin="$1", free_margin="$0",
        margin_level="120.00%", margin_status="Danger", profit_positive=False,
    )
    assert components.COLORS["negative"] in html


def test_format_currency():
    assert components.format_currency(Decimal("10250.5"), "USD") == "$10,250.50"
    assert components.format_currency(-5.2, "USD") == "-$5.20"
    assert components.format_currency(12, "CHF") == "12.00 CHF"
    assert components.format_signed_currency(Decimal("32.5")) == "+$32.50"


def test_format_volume():
    assert components.format_volume(Decimal("0.1")) == "0.10"


def test_table_style_formats_volumes_to_two_decimals():
    df = pd.DataFrame({"Symbol": ["XAUUSD"], "Volume": [0.1], "P&L": [12.345]})
    html = tables.style_frame(df).to_html()
    assert ">0.10<" in html
    assert ">12.35<" in html


def test_table_style_formats_net_volume():
    df = pd.DataFrame({"Symbol": ["EURUSD"], "Net Volume": [0.5], "Direction": ["Sell"], "P&L": [-1.0]})
    html = tables.style_frame(df).to_html()
    assert ">0.50<" in html
