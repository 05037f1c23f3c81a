"""
Plain-text rendering of a risk Panel.
Summary view shows banner, temperature and four chips; full view shows every card.
"""

import json
from typing import List, Optional

from analysis.models import IndicatorResult, Level, Panel
from reports.labelers import ANSI_RESET, banner_for, indicator_icon, level_style


DISCLAIMER = "Historical risk context — not a prediction. Not financial advice."

# (chip label, indicator name, suffix)
SUMMARY_CHIPS = [
    ('Trend', 'trend', ''),
    ('Euphoria', 'euphoria', '/100'),
    ('Vol', 'volatility', ''),
    ('DD', 'drawdown', ''),
]

RENDER_FORMATS = ('summary', 'full', 'json')


class RenderError(Exception):
    """Raised when a panel cannot be rendered."""
    pass


def _paint(text: str, level: Level, color: bool) -> str:
    if not color:
        return text
    return f"{level_style(level).ansi}{text}{ANSI_RESET}"


def _render_header(panel: Panel, color: bool) -> List[str]:
    banner = banner_for(panel.severity)
    title = f"{banner.icon} {banner.header}"
    if panel.ticker:
        title += f" · {panel.ticker}"

    lines = [title]
    if panel.as_of:
        lines.append(f"As of {panel.as_of.isoformat()} ({panel.session_count} sessions)")

    temperature = panel.get('temperature')
    if temperature is not None:
        reading = f"{temperature.context} · {temperature.value}/100"
        lines.append(f"Risk Temperature: {_paint(reading, temperature.level, color)}")

    lines.append("=" * 50)
    return lines


def render_chip(label: str, value: str, level: Level, color: bool = False) -> str:
    """Render one summary chip, e.g. `[Vol 23.4% · ELEVATED]`."""
    style = level_style(level)
    return f"[{label} {_paint(value, level, color)} · {style.label}]"


def render_card(name: str, title: str, result: IndicatorResult, color: bool = False) -> str:
    """
    Render one indicator card with value, context, explanation and detail.

    Args:
        name: Logical indicator name
        title: Display title
        result: Indicator reading
        color: Wrap the value in ANSI colour codes

    Returns:
        Multi-line card text
    """
    style = level_style(result.level)
    value = f"{result.value} / 100" if name == 'temperature' else result.value

    lines = [
        f"{indicator_icon(name)} {title} [{style.label}]",
        f"   {_paint(value, result.level, color)}",
        f"   {result.context}",
    ]
    if result.explanation:
        lines.append(f"   {result.explanation}")
    if result.detail:
        lines.append(f"   {result.detail}")
    return "\n".join(lines)


def render_summary(panel: Panel, color: bool = False) -> str:
    lines = _render_header(panel, color)

    chips = []
    for label, name, suffix in SUMMARY_CHIPS:
        result = panel.get(name)
        if result is not None:
            chips.append(render_chip(label, f"{result.value}{suffix}", result.level, color))

    if chips:
        lines.append("  ".join(chips))

    lines.append("")
    lines.append(DISCLAIMER)
    return "\n".join(lines)


def render_full(panel: Panel, color: bool = False) -> str:
    lines = _render_header(panel, color)

    for name, title, result in panel.cards():
        lines.append("")
        lines.append(render_card(name, title, result, color))

    lines.append("")
    lines.append(DISCLAIMER)
    return "\n".join(lines)


def render_json(panel: Panel) -> str:
    payload = panel.to_dict()
    for item in payload['indicators']:
        item['color'] = level_style(item['level']).color
    payload['disclaimer'] = DISCLAIMER
    return json.dumps(payload, indent=2, ensure_ascii=False)


def render_panel(panel: Panel, fmt: str = 'summary', color: Optional[bool] = False) -> str:
    """
    Render a panel in one of the supported formats.

    Args:
        panel: Assembled risk panel
        fmt: 'summary', 'full' or 'json'
        color: Use ANSI colours (ignored for json)

    Returns:
        Rendered text

    Raises:
        RenderError: If the format is unknown
    """
    if fmt == 'json':
        return render_json(panel)
    elif fmt == 'full':
        return render_full(panel, bool(color))
    elif fmt == 'summary':
        return render_summary(panel, bool(color))
    raise RenderError(f"Unknown format: {fmt}. Use one of {RENDER_FORMATS}")
