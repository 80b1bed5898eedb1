# ABOUTME: Pango markup rendering of the bar text and the two tooltip views.
# ABOUTME: Tables use fixed column widths so they line up in Waybar's monospace spans.

import html
import math
from datetime import date, datetime

from pydantic import BaseModel, ConfigDict

from waybar_weather.bands import POP_ALERT_THRESHOLD, Band, classify, clamp_pop, pop_color, pop_icon, temperature_bands
from waybar_weather.forecast import astro_by_date, next_days, next_hours, sun_times, three_hour_rows
from waybar_weather.icons import IconMap, condition_icon
from waybar_weather.models import CurrentConditions, DailyEntry, DisplayMode, ForecastData, HourlyEntry, ThreeHourRow, Units
from waybar_weather.settings import Settings

SUNRISE_ICON = ""
SUNSET_ICON = "\U000f059a"
HOURS_ICON = ""
DAYS_ICON = "\U000f0a33"

DIVIDER_CHAR = "─"
DIVIDER_LEN = 74
COL_SEP = " │ "
MISSING_TIME = "—"

DAY_LABEL_WIDTH = 9


class RenderContext(BaseModel):
    """Everything the renderer needs besides the forecast itself."""

    model_config = ConfigDict(frozen=True)

    settings: Settings
    units: Units
    bands: list[Band]
    icons: IconMap


def build_context(settings: Settings, units: Units, month: int, icons: IconMap) -> RenderContext:
    bands = temperature_bands(units.is_celsius, month, settings.seasonal_bias, settings.colors)
    return RenderContext(settings=settings, units=units, bands=bands, icons=icons)


def round_half_up(value: float) -> int:
    """Round half away from zero, so 2.5 shows as 3 and -2.5 as -3."""
    return int(math.floor(abs(value) + 0.5)) * (-1 if value < 0 else 1)


def escape(text) -> str:
    return html.escape(str(text))


def style_icon(glyph: str, color: str, size: str) -> str:
    return f"<span foreground='{color}' size='{size}'>{glyph} </span>"


def divider(ctx: RenderContext) -> str:
    line = DIVIDER_CHAR * max(1, DIVIDER_LEN)
    return f"<span font_family='monospace' foreground='{ctx.settings.colors.divider}'>{line}</span>"


def colored(text: str, color: str) -> str:
    return f"<span foreground='{color}'>{text}</span>"


def monospace_table(header: str, rows: list[str]) -> str:
    return f"<span font_family='monospace'><span weight='bold'>{header}</span>\n" + "\n".join(rows) + "</span>"


# ─── Cells ───────────────────────────────────────────────────────────────────


def hour_label(ts: datetime, time_format: str) -> str:
    if time_format == "12h":
        suffix = "AM" if ts.hour < 12 else "PM"
        return f"{ts.hour % 12 or 12:>2} {suffix}"
    return ts.strftime("%H")


def hour_width(time_format: str) -> int:
    """Hourly table column width: "14" padded to 4, or "2 PM" padded to 5."""
    return 5 if time_format == "12h" else 4


def detail_hour_width(time_format: str) -> int:
    return 5 if time_format == "12h" else 2


def day_label(day: date) -> str:
    return day.strftime("%a %m/%d")


def temp_cell(value: float, ctx: RenderContext, width: int = 5) -> str:
    text = f"{round_half_up(value)}{ctx.units.temperature}".rjust(width)
    band = classify(value, ctx.bands)
    return colored(text, band.color) if band else text


def pop_cell(pop, ctx: RenderContext) -> str:
    pop = clamp_pop(pop)
    return colored(f"{pop}%".rjust(4), pop_color(pop, ctx.settings.colors))


def precip_cell(value: float, ctx: RenderContext) -> str:
    return f"{value:.1f} {ctx.units.precipitation}".rjust(7)


def condition_cell(condition: str, code: int, is_day: bool, ctx: RenderContext) -> str:
    glyph = condition_icon(ctx.icons, code, is_day)
    icon_html = style_icon(glyph, ctx.settings.colors.primary, ctx.settings.icon_size_small) if glyph else ""
    return f"{icon_html} {escape(condition)}".strip()


# ─── Tables ──────────────────────────────────────────────────────────────────


def make_hour_table(hours: list[HourlyEntry], ctx: RenderContext) -> str:
    if not hours:
        return "No hourly data"
    fmt = ctx.settings.time_format
    w = hour_width(fmt)
    header = COL_SEP.join([f"{'Hr':<{w}}", f"{'Temp':>5}", f"{'PoP':>4}", f"{'Precip':>7}", "Cond"])
    rows = [
        COL_SEP.join(
            [
                f"{hour_label(h.time, fmt):<{w}}",
                temp_cell(h.temperature, ctx),
                pop_cell(h.pop, ctx),
                precip_cell(h.precipitation, ctx),
                condition_cell(h.condition, h.code, h.is_day != 0, ctx),
            ]
        )
        for h in hours
    ]
    return monospace_table(header, rows)


def make_day_table(days: list[DailyEntry], ctx: RenderContext) -> str:
    if not days:
        return "No daily data"
    header = COL_SEP.join(
        [f"{'Day':<{DAY_LABEL_WIDTH}}", f"{'Hi':>5}", f"{'Lo':>5}", f"{'PoP':>4}", f"{'Precip':>7}", "Cond"]
    )
    rows = [
        COL_SEP.join(
            [
                f"{day_label(d.date):<{DAY_LABEL_WIDTH}}",
                temp_cell(d.temperature_max, ctx),
                temp_cell(d.temperature_min, ctx),
                pop_cell(d.pop_max, ctx),
                precip_cell(d.precipitation_sum, ctx),
                condition_cell(d.condition, d.code, True, ctx),
            ]
        )
        for d in days
    ]
    return monospace_table(header, rows)


def make_3h_table(rows: list[ThreeHourRow], ctx: RenderContext) -> str:
    if not rows:
        return "No 3-hour data"
    fmt = ctx.settings.time_format
    w = detail_hour_width(fmt)
    header = COL_SEP.join(
        [f"{'Date':<{DAY_LABEL_WIDTH}}", f"{'Hr':>{w}}", f"{'Temp':>5}", f"{'PoP':>4}", f"{'Precip':>7}", "Cond"]
    )
    lines = [
        COL_SEP.join(
            [
                f"{day_label(r.date):<{DAY_LABEL_WIDTH}}",
                f"{hour_label(r.time, fmt):>{w}}",
                temp_cell(r.temperature, ctx),
                pop_cell(r.pop, ctx),
                precip_cell(r.precipitation, ctx),
                condition_cell(r.condition, r.code, r.is_day != 0, ctx),
            ]
        )
        for r in rows
    ]
    return monospace_table(header, lines)


def make_astro_table(rows: list[ThreeHourRow], astro: dict[date, tuple[str, str]]) -> str:
    """Sunrise/sunset for each distinct date in the 3-hour rows."""
    dates = sorted({r.date for r in rows})
    if not dates:
        return "No sunrise/sunset data"
    header = COL_SEP.join([f"{'Date':<{DAY_LABEL_WIDTH}}", f"{'Rise':>5}", f"{'Set':>5}"])
    lines = []
    for day in dates:
        rise, set_ = astro.get(day, ("", ""))
        lines.append(
            COL_SEP.join(
                [
                    f"{day_label(day):<{DAY_LABEL_WIDTH}}",
                    f"{(rise or MISSING_TIME)[:5]:>5}",
                    f"{(set_ or MISSING_TIME)[:5]:>5}",
                ]
            )
        )
    return monospace_table(header, lines)


# ─── Text & tooltip ──────────────────────────────────────────────────────────


def build_status_text(current: CurrentConditions, ctx: RenderContext) -> str:
    """Condition glyph and rounded temperature, glyph on the configured side."""
    glyph = condition_icon(ctx.icons, current.code, current.is_day != 0)
    icon = style_icon(glyph, ctx.settings.colors.primary, ctx.settings.icon_size_small) if glyph else ""
    temp = f"{round_half_up(current.temperature)}{ctx.units.temperature}"
    if ctx.settings.icon_position == "right":
        return f"{temp} {icon}".rstrip()
    return f"{icon}{temp}"


def build_header_block(
    current: CurrentConditions,
    ctx: RenderContext,
    sunrise: str = "",
    sunset: str = "",
    now_pop: int | None = None,
) -> str:
    """Top of every tooltip: location, current conditions, sun times, precipitation now."""
    colors = ctx.settings.colors
    size = ctx.settings.icon_size
    unit = ctx.units.temperature

    location = current.location_name or current.timezone or "Local"
    location_line = f"<b>{escape(location)}</b>"

    glyph = condition_icon(ctx.icons, current.code, current.is_day != 0)
    cond_icon = style_icon(glyph, colors.primary, size) if glyph else ""
    band = classify(current.temperature, ctx.bands)
    thermo = style_icon(band.glyph, band.color, size) if band else ""
    current_line = (
        f"{cond_icon} {escape(current.condition)} | {thermo}"
        f"{round_half_up(current.temperature)}{unit} (feels {round_half_up(current.feels_like)}{unit})"
    ).lstrip()

    parts = [location_line, "", current_line]
    if sunrise and sunset:
        parts.append(
            f"{style_icon(SUNRISE_ICON, colors.primary, size)} Sunrise {escape(sunrise)} | "
            f"{style_icon(SUNSET_ICON, colors.primary, size)} Sunset {escape(sunset)}"
        )
    if now_pop is not None:
        color = pop_color(now_pop, colors)
        parts.append(
            f"{style_icon(pop_icon(now_pop), color, size)} PoP {colored(f'{clamp_pop(now_pop)}%', color)}, "
            f"Precip {current.precipitation:.1f}{ctx.units.precipitation}"
        )
    parts.append(f"\n{divider(ctx)}\n")
    return "\n".join(parts)


def section_title(glyph: str, title: str, ctx: RenderContext) -> str:
    return f"<b>{style_icon(glyph, ctx.settings.colors.primary, ctx.settings.icon_size_small)} {title}</b>"


def render_default_view(weather: ForecastData, hours: list[HourlyEntry], header: str, ctx: RenderContext) -> str:
    days = next_days(weather.daily, ctx.settings.days_window)
    return (
        f"{header}\n"
        f"{section_title(HOURS_ICON, f'Next {len(hours)} hours', ctx)}\n\n"
        f"{make_hour_table(hours, ctx)}\n\n{divider(ctx)}\n\n"
        f"{section_title(DAYS_ICON, f'Next {len(days)} Days', ctx)}\n\n"
        f"{make_day_table(days, ctx)}"
    )


def render_week_view(weather: ForecastData, hours: list[HourlyEntry], header: str, ctx: RenderContext) -> str:
    rows = three_hour_rows(weather.hourly, weather.current.time)
    return (
        f"{header}\n"
        f"{section_title(SUNRISE_ICON, 'Week Sunrise / Sunset', ctx)}\n\n"
        f"{make_astro_table(rows, astro_by_date(weather.daily))}\n\n{divider(ctx)}\n\n"
        f"{section_title(DAYS_ICON, 'Week Details', ctx)}\n\n"
        f"{make_3h_table(rows, ctx)}"
    )


VIEWS = {
    DisplayMode.DEFAULT: render_default_view,
    DisplayMode.WEEKVIEW: render_week_view,
}


def build_output(mode: DisplayMode, weather: ForecastData, ctx: RenderContext) -> dict:
    """The Waybar JSON object for one update: text, tooltip, alt, and class."""
    current = weather.current
    hours = next_hours(weather.hourly, current.time, ctx.settings.hours_window)
    now_pop = hours[0].pop if hours else None
    sunrise, sunset = sun_times(weather.daily, current.time)

    header = build_header_block(current, ctx, sunrise=sunrise, sunset=sunset, now_pop=now_pop)
    tooltip = VIEWS[mode](weather, hours, header, ctx)

    pop_class = "pop-high" if now_pop is not None and now_pop >= POP_ALERT_THRESHOLD else "pop-low"
    return {
        "text": build_status_text(current, ctx),
        "tooltip": tooltip,
        "alt": current.condition,
        "class": ["weather", f"mode-{mode.value}", pop_class],
    }
