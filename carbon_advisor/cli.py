"""
Carbon Advisor — CLI entry point.

All commands follow this pattern:
  1. Load ``AppConfig`` via ``load_config()``.
  2. Configure logging.
  3. Load benchmark records (local CSV or the published sheet).
  4. Run the pure matching / catalogue functions.
  5. Report result to stdout.

Install and run::

    pip install -e .
    carbon-advisor --help
    carbon-advisor validate-config
    carbon-advisor industries --search 電子
    carbon-advisor systems 電子零組件製造業
    carbon-advisor recommend 電子零組件製造業
    carbon-advisor recommend 電子零組件製造業 --path energy \\
        --baseline 1,200,000 --target-type percentage --target-value 10
    carbon-advisor recommend 電子零組件製造業 --quote-url --tax-id 12345678
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Optional

import typer

app = typer.Typer(
    name="carbon-advisor",
    help="Industry benchmark advisor for energy and carbon reduction measures.",
    add_completion=False,
)


# ── Helpers ───────────────────────────────────────────────────────────────────

def _load_config_or_exit(config_path: Optional[str] = None):
    """Load AppConfig, printing a friendly error and exiting on failure."""
    from pydantic import ValidationError

    from carbon_advisor.config import load_config

    try:
        cfg_path = Path(config_path) if config_path else None
        return load_config(cfg_path)
    except FileNotFoundError as exc:
        typer.echo(f"[ERROR] {exc}", err=True)
        raise typer.Exit(code=1)
    except (ValidationError, ValueError) as exc:
        typer.echo(f"[ERROR] Config validation failed: {exc}", err=True)
        raise typer.Exit(code=1)


def _configure_logging(config):
    """Set up logging from config."""
    from carbon_advisor.utils.logging import configure_logging
    configure_logging(config.logging)


def _load_records_or_exit(config, records_file: Optional[str]):
    """Load benchmark records; ``--file`` overrides the configured source."""
    from carbon_advisor.ingestion import load_records

    if records_file:
        config = config.model_copy(
            update={"source": config.source.model_copy(update={"records_file": records_file})}
        )
    try:
        return load_records(config)
    except (FileNotFoundError, ValueError) as exc:
        typer.echo(f"[ERROR] Could not load benchmark records:\n{exc}", err=True)
        raise typer.Exit(code=1)


def _warn_if_unknown_industry(records, industry: str) -> None:
    """Point at ``industries --search`` when ``industry`` has no records."""
    from carbon_advisor.matching.industry import is_known_industry

    if records and not is_known_industry(records, industry):
        typer.echo(
            f"[WARN] Unknown industry '{industry}'. "
            "Use 'carbon-advisor industries --search' to find the exact name.",
            err=True,
        )


# ── Commands ──────────────────────────────────────────────────────────────────

@app.command("validate-config")
def validate_config(
    config_path: Optional[str] = typer.Option(
        None,
        "--config",
        help="Path to TOML config file (default: config/default.toml).",
    ),
    show_full: bool = typer.Option(
        False,
        "--full",
        help="Print full config including all fields.",
    ),
) -> None:
    """Validate the configuration file and print parsed values.

    Exits with code 1 if the config fails validation.
    """
    config = _load_config_or_exit(config_path)

    typer.echo("Configuration validated successfully.")
    typer.echo("")
    typer.echo(f"  Sheet export URL: {config.source.export_url}")
    typer.echo(f"  Records file:     {config.source.records_file or '(none)'}")
    typer.echo(f"  No-goal limit:    {config.recommend.no_goal_limit}")
    typer.echo(f"  Alternatives:     {config.recommend.alternatives_limit}")
    typer.echo(f"  Quote form:       {config.quote.base_url}")
    typer.echo(f"  Log level:        {config.logging.level}")
    typer.echo(f"  Debug mode:       {config.debug}")

    if show_full:
        typer.echo("")
        typer.echo("Full config (JSON):")
        typer.echo(
            json.dumps(config.model_dump(mode="json"), indent=2, ensure_ascii=False)
        )

    typer.echo("")
    typer.echo("[OK] Config valid.")


@app.command("industries")
def industries(
    search: str = typer.Option("", "--search", "-s", help="Case-insensitive substring filter."),
    limit: Optional[int] = typer.Option(
        None, "--limit", "-n", help="Max names to show (default: config profile.suggestion_limit)."
    ),
    records_file: Optional[str] = typer.Option(
        None, "--file", "-f", help="Local CSV export to use instead of the sheet."
    ),
    config_path: Optional[str] = typer.Option(None, "--config", help="Path to TOML config file."),
) -> None:
    """List industries present in the benchmark data."""
    from carbon_advisor.matching.industry import list_industries, suggest_industries

    config = _load_config_or_exit(config_path)
    _configure_logging(config)
    records = _load_records_or_exit(config, records_file)

    names = suggest_industries(
        list_industries(records),
        search,
        limit=limit if limit is not None else config.profile.suggestion_limit,
    )
    if not names:
        typer.echo("(no matching industries)")
        return
    for name in names:
        typer.echo(name)


@app.command("systems")
def systems(
    industry: str = typer.Argument(..., help="Industry name (exact match)."),
    top: int = typer.Option(0, "--top", help="Show only the N largest systems (0 = all)."),
    records_file: Optional[str] = typer.Option(
        None, "--file", "-f", help="Local CSV export to use instead of the sheet."
    ),
    config_path: Optional[str] = typer.Option(None, "--config", help="Path to TOML config file."),
) -> None:
    """Show the footprint share of each energy system in an industry."""
    from carbon_advisor.matching.industry import system_distribution, top_systems
    from carbon_advisor.reporting.formatters import format_system_distribution

    config = _load_config_or_exit(config_path)
    _configure_logging(config)
    records = _load_records_or_exit(config, records_file)

    industry = industry.strip()
    _warn_if_unknown_industry(records, industry)
    shares = top_systems(records, industry, top) if top > 0 else system_distribution(records, industry)
    typer.echo(format_system_distribution(shares, industry))


@app.command("recommend")
def recommend_cmd(
    industry: str = typer.Argument(..., help="Industry name (exact match)."),
    path: Optional[str] = typer.Option(
        None, "--path", help="Goal path: 'carbon' (tCO2e) or 'energy' (kWh). Requires --target-value."
    ),
    baseline: str = typer.Option(
        "0", "--baseline", help="Current annual value in the path unit, e.g. 12,000."
    ),
    target_type: str = typer.Option(
        "percentage", "--target-type", help="'percentage' of baseline or 'absolute'."
    ),
    target_value: Optional[str] = typer.Option(
        None, "--target-value", help="Target value; omit for the no-goal view."
    ),
    quote_url: bool = typer.Option(
        False, "--quote-url", help="Also print a quote-request link per measure (needs --tax-id)."
    ),
    tax_id: str = typer.Option("", "--tax-id", help="Company tax ID for quote-request links."),
    records_file: Optional[str] = typer.Option(
        None, "--file", "-f", help="Local CSV export to use instead of the sheet."
    ),
    as_json: bool = typer.Option(False, "--json", help="Print the result as JSON."),
    config_path: Optional[str] = typer.Option(None, "--config", help="Path to TOML config file."),
) -> None:
    """Recommend reduction measures for an industry and optional goal.

    \b
    Without --target-value: the five measures from the largest systems.
    With --target-value:    the measure(s) that close the target gap.
    """
    from pydantic import ValidationError

    from carbon_advisor.flow import (
        CompanyProfile,
        is_valid_tax_id,
        quote_request_url,
    )
    from carbon_advisor.matching.engine import recommend
    from carbon_advisor.models.goal import Goal
    from carbon_advisor.reporting.formatters import format_recommendation

    config = _load_config_or_exit(config_path)
    _configure_logging(config)

    if path is not None and target_value is None:
        typer.echo(
            "[ERROR] --path only applies to a goal; pass --target-value as well.",
            err=True,
        )
        raise typer.Exit(code=1)

    goal: Optional[Goal] = None
    if target_value is not None:
        try:
            goal = Goal(
                path=path or config.recommend.default_path,
                baseline=baseline,
                target_type=target_type,
                target_value=target_value,
            )
        except ValidationError as exc:
            typer.echo(f"[ERROR] Invalid goal: {exc}", err=True)
            raise typer.Exit(code=1)

    industry = industry.strip()
    profile: Optional[CompanyProfile] = None
    if quote_url:
        profile = CompanyProfile(industry=industry, tax_id=tax_id).normalized(config.profile)
        if not is_valid_tax_id(profile.tax_id, config.profile):
            typer.echo(
                f"[ERROR] --quote-url needs a {config.profile.tax_id_length}-digit --tax-id.",
                err=True,
            )
            raise typer.Exit(code=1)

    records = _load_records_or_exit(config, records_file)
    _warn_if_unknown_industry(records, industry)
    result = recommend(
        records,
        industry,
        goal,
        no_goal_limit=config.recommend.no_goal_limit,
        alternatives_limit=config.recommend.alternatives_limit,
    )
    quote_urls = (
        [quote_request_url(profile, record, config.quote) for record in result.items]
        if profile is not None
        else []
    )

    if as_json:
        payload = {
            "industry": industry,
            "goal": goal.model_dump(mode="json") if goal is not None else None,
            "coverage_pct": result.coverage_pct,
            **result.model_dump(mode="json"),
        }
        if profile is not None:
            payload["quote_urls"] = quote_urls
        typer.echo(json.dumps(payload, indent=2, ensure_ascii=False))
        return

    typer.echo(format_recommendation(result, goal, industry))
    if quote_urls:
        typer.echo("")
        typer.echo("  Quote requests:")
        for rank, url in enumerate(quote_urls, start=1):
            typer.echo(f"    {rank:>4}  {url}")


if __name__ == "__main__":
    app()
