"""
carbon_advisor.reporting — terminal formatting of recommendations.

It does NOT compute anything: unit choice and number display are pure
functions of the engine result and the goal path.

Modules:
  formatters — ASCII terminal formatters for Typer CLI commands.
"""
