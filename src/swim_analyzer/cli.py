#!/usr/bin/env python3
"""
Swim Analyzer CLI.

Performance analytics for swim session logs stored as JSON.

Usage:
    swim-analyzer analyze sessions.json            # Deep analysis of the latest swim
    swim-analyzer analyze sessions.json --session-id 42
    swim-analyzer records sessions.json            # Records, milestones, badges and stroke efficiency
    swim-analyzer streaks sessions.json            # Streaks, streak milestones and momentum
    swim-analyzer patterns sessions.json           # Best day and time, pace streaks, months
    swim-analyzer progress sessions.json --days 90 # Progress, goals, weekly trend and coaching
"""

import argparse
import json
import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Any, List, Optional

from pydantic import TypeAdapter, ValidationError
from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from .analysis.anomalies import detect_anomalies
from .analysis.patterns import analyze_monthly_patterns, detect_performance_streaks, find_performance_patterns
from .analysis.progress import (
    analyze_progress,
    compare_windows,
    generate_coaching_insight,
    monthly_goal_progress,
    week_stats,
    weekly_goal_progress,
    weekly_trend,
)
from .analysis.records import calculate_next_milestones, check_achievement_badges, find_records, rank_session
from .analysis.streaks import (
    calculate_momentum,
    calculate_monthly_streak,
    calculate_streaks,
    check_streak_achievements,
    momentum_motivation,
    next_streak_milestone,
)
from .config import Settings, get_settings
from .exceptions import ConfigurationError, ErrorCode, SessionDataError, SwimAnalyzerError
from .metrics.swim import (
    best_dps_session,
    dps_grade,
    dps_stats,
    format_distance,
    format_pace,
    session_distance_per_stroke,
)
from .models.analysis import AnalysisError, MomentumTrend, TrendDirection
from .models.recommendations import RecommendationPriority
from .models.session import Session
from .services.deep_analysis import DeepAnalysisService
from .utils.dates import resolve_now

console = Console()
logger = logging.getLogger(__name__)

_sessions_adapter = TypeAdapter(List[Session])


def load_sessions(path: str) -> List[Session]:
    """
    Load session records from a JSON file.

    The file holds either a list of sessions or an object with a
    "sessions" list.

    Raises:
        SessionDataError: If the file is missing, is not JSON, or holds
            records that cannot be read as sessions
    """
    file_path = Path(path)
    try:
        raw = json.loads(file_path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        raise SessionDataError(
            f"Session file not found: {path}",
            code=ErrorCode.SESSION_FILE_NOT_FOUND,
            path=path,
        )
    except (OSError, json.JSONDecodeError) as e:
        raise SessionDataError(f"Could not read session file: {e}", path=path)

    if isinstance(raw, dict):
        raw = raw.get("sessions", [])
    if not isinstance(raw, list):
        raise SessionDataError("Session file must contain a list of sessions", path=path)

    try:
        sessions = _sessions_adapter.validate_python(raw)
    except ValidationError as e:
        raise SessionDataError(
            "Session file contains invalid records",
            path=path,
            details={"errors": e.error_count()},
        )

    logger.debug("Loaded %d sessions from %s", len(sessions), path)
    return sessions


def load_settings() -> Settings:
    """Load settings, reporting invalid environment values as a ConfigurationError."""
    try:
        return get_settings()
    except ValidationError as e:
        raise ConfigurationError(
            "Invalid swim analyzer settings",
            details={"errors": e.error_count()},
        )


def _parse_now(value: Optional[str]) -> Optional[datetime]:
    if value is None:
        return None
    try:
        return datetime.fromisoformat(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"Invalid ISO date/time: {value}")


def _print_json(payload: Any) -> None:
    sys.stdout.write(json.dumps(payload, indent=2) + "\n")


def get_priority_color(priority: RecommendationPriority) -> str:
    """Get rich color for a recommendation priority."""
    colors = {
        RecommendationPriority.HIGH: "red",
        RecommendationPriority.MEDIUM: "yellow",
        RecommendationPriority.LOW: "blue",
        RecommendationPriority.POSITIVE: "green",
        RecommendationPriority.INFO: "white",
    }
    return colors.get(priority, "white")


def get_trend_color(direction: str) -> str:
    colors = {"up": "green", "down": "red", "steady": "yellow"}
    return colors.get(direction, "white")


def cmd_analyze(args, sessions: List[Session], settings: Settings):
    """Deep analysis of one session."""
    service = DeepAnalysisService(settings)
    now = args.now
    if args.session_id:
        result = service.analyze_by_id(args.session_id, sessions, now=now)
    else:
        result = service.analyze_latest(sessions, now=now)

    if args.json:
        _print_json(result.to_dict())
        return

    if isinstance(result, AnalysisError):
        console.print(f"[yellow]{result.error}[/yellow]")
        return

    session = result.session
    console.print()
    console.print(Panel(f"[bold]Swim Analysis - {session.timestamp:%Y-%m-%d %H:%M}[/bold]"))

    table = Table(title="Session", box=box.ROUNDED)
    table.add_column("Metric", style="cyan")
    table.add_column("Value", justify="right")
    table.add_row("Distance", format_distance(session.distance))
    table.add_row("Duration", f"{session.duration:.0f} min")
    table.add_row("Pace", format_pace(session.pace))
    table.add_row("SWOLF", f"{session.swolf:g}" if session.has_valid_swolf else "--")
    dps = session_distance_per_stroke(session)
    table.add_row("Distance per stroke", f"{dps:.2f} m" if dps else "--")
    if result.days_since_previous is not None:
        table.add_row("Days since previous swim", str(result.days_since_previous))
    console.print(table)

    if result.pacing is not None:
        pacing = result.pacing
        console.print(
            f"Pacing: [bold]{pacing.strategy.value}[/bold] "
            f"(consistency {pacing.consistency}, variation {pacing.variation}%, "
            f"change {pacing.pace_change:+d}%)"
        )
    if result.fatigue is not None and result.fatigue.sufficient_data:
        console.print(f"Fatigue: {result.fatigue.fatigue_index}% - {result.fatigue.description}")

    comparative = result.comparative
    if comparative is not None:
        if comparative.vs_recent is not None:
            console.print(f"vs recent average: {comparative.vs_recent.pace_diff:+.1f}%")
        if comparative.vs_pb is not None:
            console.print(f"vs personal best: {comparative.vs_pb.pace_diff:+.1f}%")
        if comparative.vs_same_distance is not None:
            console.print(f"vs best at this distance: {comparative.vs_same_distance.pace_diff:+.1f}%")
        if comparative.percentile is not None:
            console.print(f"Pace percentile: {comparative.percentile}")

    console.print()
    recs = Table(title="Recommendations", box=box.ROUNDED)
    recs.add_column("Priority")
    recs.add_column("Title", style="bold")
    recs.add_column("Message")
    recs.add_column("Action", style="italic")
    for rec in result.recommendations:
        color = get_priority_color(rec.priority)
        recs.add_row(f"[{color}]{rec.priority.value}[/{color}]", rec.title, rec.message, rec.action)
    console.print(recs)
    console.print()


def cmd_records(args, sessions: List[Session], settings: Settings):
    """Personal records, next milestones, badges and stroke efficiency."""
    records = find_records(sessions)
    milestones = calculate_next_milestones(records, sessions)
    badges = check_achievement_badges(sessions, records, now=args.now)
    dps = dps_stats(sessions)
    best_dps = best_dps_session(sessions)

    if args.json:
        _print_json({
            "records": records.to_dict(),
            "milestones": [m.to_dict() for m in milestones],
            "badges": [b.to_dict() for b in badges],
            "strokeEfficiency": {
                "stats": dps.to_dict(),
                "grade": dps_grade(dps.average).to_dict() if dps.count else None,
                "bestSessionId": best_dps.id if best_dps is not None else None,
            },
        })
        return

    console.print()
    console.print(Panel("[bold]Personal Records[/bold]"))
    if records.is_empty:
        console.print("No records yet. Log some swims first.")
        console.print()
        return

    table = Table(box=box.ROUNDED)
    table.add_column("Record", style="cyan")
    table.add_column("Value", justify="right")
    table.add_column("Date")
    if records.fastest_pace is not None:
        table.add_row("Fastest pace", format_pace(records.fastest_pace.pace), f"{records.fastest_pace.timestamp:%Y-%m-%d}")
    if records.longest_distance is not None:
        table.add_row("Longest swim", format_distance(records.longest_distance.distance), f"{records.longest_distance.timestamp:%Y-%m-%d}")
    if records.best_swolf is not None:
        table.add_row("Best SWOLF", f"{records.best_swolf.swolf:g}", f"{records.best_swolf.timestamp:%Y-%m-%d}")
    console.print(table)

    if milestones:
        console.print()
        ms_table = Table(title="Next Milestones", box=box.ROUNDED)
        ms_table.add_column("Milestone", style="cyan")
        ms_table.add_column("Current", justify="right")
        ms_table.add_column("Target", justify="right")
        ms_table.add_column("Progress", justify="right")
        for milestone in milestones:
            ms_table.add_row(
                milestone.title,
                milestone.display_current,
                milestone.display_target,
                f"{milestone.progress:.0f}%",
            )
        console.print(ms_table)

    latest = max(sessions, key=lambda s: s.timestamp)
    ranking = rank_session(latest, sessions, now=args.now)
    if ranking is not None:
        console.print(
            f"Latest swim ranks #{ranking.pace_rank} for pace of {ranking.total_sessions} "
            f"(overall percentile {ranking.overall_percentile})"
        )

    if dps.count:
        grade = dps_grade(dps.average)
        console.print(
            f"Distance per stroke: {dps.average:.2f} m ({grade.grade}), "
            f"range {dps.min:.2f}-{dps.max:.2f} m, trend {dps.trend:+.1f}%"
        )

    console.print()
    badge_table = Table(title="Badges", box=box.ROUNDED)
    badge_table.add_column("Badge", style="cyan")
    badge_table.add_column("Description")
    badge_table.add_column("Progress", justify="right")
    for badge in badges:
        status = "[green]earned[/green]" if badge.earned else f"{badge.progress:.0f}%"
        badge_table.add_row(f"{badge.icon} {badge.name}", badge.description, status)
    console.print(badge_table)
    console.print()


def cmd_streaks(args, sessions: List[Session], settings: Settings):
    """Weekly and monthly streaks, streak milestones and momentum."""
    now = resolve_now(args.now)
    streak = calculate_streaks(sessions, now=now)
    monthly = calculate_monthly_streak(sessions, now=now)
    achievements = check_streak_achievements(monthly.current_streak_months)
    next_milestone = next_streak_milestone(monthly.current_streak_months)
    momentum = calculate_momentum(
        sessions,
        now=now,
        recent_days=settings.momentum_recent_days,
        comparison_days=settings.momentum_comparison_days,
    )

    if args.json:
        _print_json({
            "streak": streak.to_dict(),
            "monthlyStreak": monthly.to_dict(),
            "streakAchievements": [a.to_dict() for a in achievements],
            "nextStreakMilestone": next_milestone.to_dict() if next_milestone is not None else None,
            "momentum": momentum.to_dict(),
        })
        return

    console.print()
    console.print(Panel("[bold]Streaks & Momentum[/bold]"))
    console.print(f"Current streak: [bold]{streak.current_streak_weeks}[/bold] weeks")
    console.print(f"Longest streak: [bold]{streak.longest_streak_weeks}[/bold] weeks")
    console.print(
        f"Monthly streak: [bold]{monthly.current_streak_months}[/bold] months "
        f"(longest {monthly.longest_streak_months})"
    )
    for achievement in achievements:
        console.print(f"{achievement.icon} {achievement.badge}: {achievement.message}")
    if next_milestone is not None:
        console.print(f"Next: {next_milestone.message} ({next_milestone.progress_percent}%)")
    console.print()

    if momentum.trend == MomentumTrend.INSUFFICIENT_DATA:
        console.print(f"[yellow]{momentum.message}[/yellow]")
    else:
        color = get_trend_color(momentum.trend.value)
        console.print(f"Momentum: [{color}]{momentum.trend.value} ({momentum.percentage:+d}%)[/{color}]")
        console.print(momentum.message)
        if momentum.breakdown is not None:
            table = Table(box=box.SIMPLE)
            table.add_column("Component", style="cyan")
            table.add_column("Recent", justify="right")
            table.add_column("Before", justify="right")
            table.add_column("Change", justify="right")
            for name, part in (
                ("Sessions/week", momentum.breakdown.frequency),
                ("Avg distance", momentum.breakdown.volume),
                ("Avg pace", momentum.breakdown.pace),
            ):
                color = get_trend_color(part.trend.value)
                table.add_row(name, f"{part.recent:g}", f"{part.comparison:g}", f"[{color}]{part.change:+d}%[/{color}]")
            console.print(table)
    console.print(f"[italic]{momentum_motivation(momentum)}[/italic]")
    console.print()


def cmd_patterns(args, sessions: List[Session], settings: Settings):
    """Day and time patterns, pace streaks and monthly patterns."""
    patterns = find_performance_patterns(
        sessions,
        min_sessions=settings.min_sessions_for_patterns,
        min_group_size=settings.min_sessions_per_pattern_group,
    )
    streak = detect_performance_streaks(sessions)
    monthly = analyze_monthly_patterns(sessions)

    if args.json:
        _print_json({
            "patterns": patterns.to_dict(),
            "performanceStreak": streak.to_dict(),
            "monthly": monthly.to_dict(),
        })
        return

    console.print()
    console.print(Panel("[bold]Performance Patterns[/bold]"))
    if streak.has_streak:
        console.print(f"[bold]{streak.message}[/bold]")
    if monthly.has_sufficient_data:
        if monthly.best_month is not None:
            console.print(f"Fastest month: {monthly.best_month.month} ({format_pace(monthly.best_month.avg_pace)})")
        console.print(
            f"Most active month: {monthly.most_active_month.month} "
            f"({monthly.most_active_month.count} swims)"
        )
    if not patterns.has_patterns:
        console.print(f"[yellow]{patterns.message}[/yellow]")
        console.print()
        return

    if patterns.best_day is not None:
        console.print(f"Best day: [bold]{patterns.best_day.day_name}[/bold] ({format_pace(patterns.best_day.avg_pace)})")
    if patterns.best_time is not None:
        console.print(
            f"Best time: [bold]{patterns.best_time.time_of_day.value}[/bold] "
            f"({format_pace(patterns.best_time.avg_pace)})"
        )

    table = Table(title="Average Pace by Day", box=box.ROUNDED)
    table.add_column("Day", style="cyan")
    table.add_column("Avg pace", justify="right")
    table.add_column("Swims", justify="right")
    for day in patterns.day_averages:
        table.add_row(day.day_name, format_pace(day.avg_pace), str(day.count))
    console.print(table)
    console.print()


def cmd_progress(args, sessions: List[Session], settings: Settings):
    """Progress over a window, compare mode, weekly trend, goals, coaching and anomalies."""
    now = resolve_now(args.now)
    days = args.days or settings.progress_window_days
    progress = analyze_progress(sessions, days=days, now=now)
    comparison = compare_windows(sessions, days=settings.compare_window_days, now=now)
    week = weekly_trend(week_stats(sessions, 0, now), week_stats(sessions, 1, now))
    anomalies = detect_anomalies(sessions)
    weekly_goal = weekly_goal_progress(sessions, settings.weekly_distance_goal_m, now=now)
    monthly_goal = monthly_goal_progress(sessions, settings.monthly_distance_goal_m, now=now)
    insight = generate_coaching_insight(progress, sessions, now=now)

    if args.json:
        _print_json({
            "progress": progress.to_dict(),
            "comparison": comparison.to_dict(),
            "weeklyTrend": week.to_dict(),
            "anomalies": anomalies.to_dict(),
            "weeklyGoal": weekly_goal.to_dict(),
            "monthlyGoal": monthly_goal.to_dict(),
            "coachingInsight": insight,
        })
        return

    console.print()
    console.print(Panel(f"[bold]Progress - Last {days} Days[/bold]"))
    console.print(progress.message)
    if progress.trends is not None:
        console.print(
            f"Pace {progress.trends.pace:+d}%, SWOLF {progress.trends.swolf:+d}%, "
            f"distance {progress.trends.distance:+d}% (score {progress.weighted_score:+d})"
        )
    console.print()

    table = Table(title=f"Last {settings.compare_window_days} days vs previous", box=box.ROUNDED)
    table.add_column("Metric", style="cyan")
    table.add_column("Change", justify="right")
    for name, result in (("Pace", comparison.pace), ("Distance", comparison.distance), ("SWOLF", comparison.swolf)):
        color = get_trend_color(result.direction.value)
        table.add_row(name, f"[{color}]{result.percentage_change:+d}%[/{color}]")
    table.add_row("Swims", f"{comparison.count_change:+d}")
    console.print(table)

    console.print(
        f"This week: {week.count.current:g} swims ({week.count.change:+d}%), "
        f"{format_distance(week.distance.current)}"
    )
    if week.pace.trend != TrendDirection.STEADY:
        console.print(f"Pace vs last week: {week.pace.change:+d}%")
    for label, goal in (("Weekly goal", weekly_goal), ("Monthly goal", monthly_goal)):
        status = "[green]met[/green]" if goal.is_goal_met else f"{format_distance(goal.remaining)} to go"
        console.print(
            f"{label}: {format_distance(goal.current)} of {format_distance(goal.goal)} "
            f"({goal.percentage:.0f}%), {status}"
        )
    console.print()
    console.print(Panel(insight, title="Coach"))

    for anomaly in anomalies.anomalies:
        color = "green" if anomaly.direction == "positive" else "red"
        console.print(f"[{color}]{anomaly.message}[/{color}]")
    console.print()


COMMANDS = {
    "analyze": cmd_analyze,
    "records": cmd_records,
    "streaks": cmd_streaks,
    "patterns": cmd_patterns,
    "progress": cmd_progress,
}


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser."""
    parser = argparse.ArgumentParser(
        prog="swim-analyzer",
        description="Swim Analyzer - performance analytics for swim sessions",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  swim-analyzer analyze sessions.json
  swim-analyzer analyze sessions.json --session-id 42 --json
  swim-analyzer records sessions.json
  swim-analyzer streaks sessions.json --now 2024-03-15T12:00
  swim-analyzer patterns sessions.json
  swim-analyzer progress sessions.json --days 90
        """,
    )

    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("file", help="JSON file with session records")
    common.add_argument("--json", action="store_true", help="Print JSON instead of tables")
    common.add_argument(
        "--now",
        type=_parse_now,
        default=None,
        help="Reference time as ISO date/time (default: system clock)",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    analyze_p = subparsers.add_parser("analyze", parents=[common], help="Deep analysis of a swim")
    analyze_p.add_argument("--session-id", help="Session to analyze (default: most recent)")

    subparsers.add_parser("records", parents=[common], help="Records, milestones, badges and stroke efficiency")
    subparsers.add_parser("streaks", parents=[common], help="Streaks, streak milestones and momentum")
    subparsers.add_parser("patterns", parents=[common], help="Day and time patterns, pace streaks and months")

    progress_p = subparsers.add_parser("progress", parents=[common], help="Progress, goals, weekly trend and coaching")
    progress_p.add_argument("--days", "-d", type=int, default=None, help="Progress window in days")

    return parser


def main(argv: Optional[List[str]] = None):
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command not in COMMANDS:
        parser.print_help()
        return

    try:
        settings = load_settings()
        logging.basicConfig(
            level=getattr(logging, settings.log_level.upper(), logging.INFO),
            format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        )
        sessions = load_sessions(args.file)
        COMMANDS[args.command](args, sessions, settings)
    except SwimAnalyzerError as e:
        if getattr(args, "json", False):
            _print_json(e.to_dict())
        else:
            console.print(f"[red]Error: {e.message}[/red]")
        sys.exit(1)


if __name__ == "__main__":
    main()
