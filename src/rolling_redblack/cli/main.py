# Copyright 2025 iGenius S.p.A
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

import json

from pydantic import ValidationError
from rich.console import Console
import typer
from typing_extensions import Annotated

from ..exceptions import RollingRedBlackError
from ..helpers.io import dump_plan, load_document, stage_record_from_document
from ..helpers.logger import setup_logger
from ..planning.strategy import RollingRedBlackStrategy, StageRecord
from ..platform.protocols import Plan
from ..utils.version import get_version
from .render import plan_table

app = typer.Typer(name="rolling-redblack CLI", no_args_is_help=True)

console = Console()
logger = setup_logger("rolling_redblack.cli", console=console)

ConfigOption = Annotated[
    typer.FileText,
    typer.Option(
        ...,
        "-c",
        "--config",
        help="YAML/JSON document with the deploy stage: {stage: {id, context, ancestry}}",
    ),
]
JsonOption = Annotated[
    bool, typer.Option("--json", help="Print the plan as JSON instead of a table")
]


def _load_stage(config: typer.FileText) -> StageRecord:
    try:
        return stage_record_from_document(load_document(config))
    except ValueError as e:
        logger.error(f"Invalid document: {e}")
        raise typer.Exit(code=1)


def _print_plan(plan: Plan, as_json: bool, title: str) -> None:
    if as_json:
        typer.echo(dump_plan(plan))
    elif not plan:
        console.print("[yellow]Nothing to do.[/yellow]")
    else:
        console.print(plan_table(plan, title=title))


@app.command("version", short_help="Show the version of the rolling-redblack CLI")
def version(short: bool = False):
    v = get_version()
    print(v if short else f"rolling-redblack CLI Version: {v}")
    raise typer.Exit()


@app.command("before", short_help="Rewrite a deploy context for zero-capacity provisioning")
def before(config: ConfigOption):
    """Print the deploy stage context the execution engine should merge back."""
    stage = _load_stage(config)
    strategy = RollingRedBlackStrategy.from_settings()
    try:
        payload = strategy.compose_before_stages(stage)
    except (RollingRedBlackError, ValidationError) as e:
        logger.error(f"Cannot plan deploy: {e}")
        raise typer.Exit(code=1)
    typer.echo(json.dumps(payload, indent=2, default=str))


@app.command("plan", short_help="Plan the rollout that follows a deploy")
def plan(config: ConfigOption, as_json: JsonOption = False):
    stage = _load_stage(config)
    strategy = RollingRedBlackStrategy.from_settings()
    try:
        stages = strategy.compose_after_stages(stage)
    except (RollingRedBlackError, ValidationError) as e:
        logger.error(f"Cannot plan rollout: {e}")
        raise typer.Exit(code=1)
    _print_plan(stages, as_json, title=f"Rolling red/black plan for {stage.id}")


@app.command("on-failure", short_help="Plan the cleanup for a failed rollout")
def on_failure(config: ConfigOption, as_json: JsonOption = False):
    stage = _load_stage(config)
    strategy = RollingRedBlackStrategy.from_settings()
    stages = strategy.compose_on_failure_stages(stage)
    _print_plan(stages, as_json, title=f"Compensation plan for {stage.id}")


if __name__ == "__main__":
    app()
