from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import NoReturn

import typer
from pydantic import ValidationError
from rich.console import Console

from stagegen.config import default_config
from stagegen.engine import Engine
from stagegen.errors import StageError
from stagegen.lib.gen import (
    indexed_args,
    indexed_fields,
    indexed_initializer_list,
    indexed_params,
)
from stagegen.program import load_program, run_program
from stagegen.registry import load_builtins
from stagegen.runtime import initialize_runtime
from stagegen.term import Term, as_text, v
from stagegen.types import Nat, list_from_items

app = typer.Typer(help="stagegen: staged evaluation of C code generators")
ops_app = typer.Typer(help="Builtin operation commands")
gen_app = typer.Typer(help="Indexed generator shortcuts")

app.add_typer(ops_app, name="ops")
app.add_typer(gen_app, name="gen")

console = Console()
logger = logging.getLogger(__name__)

PROGRAM_FILE_OPTION = typer.Option(..., "--program-file", exists=True, dir_okay=False)
TRACE_OPTION = typer.Option(False, "--trace")
MAX_DEPTH_OPTION = typer.Option(None, "--max-depth", min=1)
MAX_STEPS_OPTION = typer.Option(None, "--max-steps", min=1)
VERBOSE_OPTION = typer.Option(False, "--verbose", "-v")


def _fail(message: str) -> NoReturn:
    console.print(message, markup=False)
    raise typer.Exit(code=1)


@app.command("eval")
def eval_program(
    program_file: Path = PROGRAM_FILE_OPTION,
    trace: bool = TRACE_OPTION,
    max_depth: int | None = MAX_DEPTH_OPTION,
    max_steps: int | None = MAX_STEPS_OPTION,
    verbose: bool = VERBOSE_OPTION,
) -> None:
    initialize_runtime(verbose=verbose, logger=logger)
    logger.info("eval start program=%s", program_file)
    if not program_file.read_text().strip():
        console.print(f"Program file is empty: {program_file}", markup=False)
        raise typer.BadParameter(f"Program file is empty: {program_file}")
    try:
        spec = load_program(program_file)
    except (ValidationError, json.JSONDecodeError, ValueError) as exc:
        _fail(f"Invalid program: {exc}")
    config = default_config().with_overrides(
        max_depth=max_depth, max_steps=max_steps, trace=trace
    )
    try:
        value, eval_trace = run_program(spec, config)
        text = as_text(value)
    except StageError as exc:
        logger.info("eval failed program=%s error=%s", program_file, exc)
        _fail(f"Evaluation failed: {exc}")
    logger.info("eval complete program=%s steps=%s", program_file, eval_trace.steps)
    console.print(text, markup=False, highlight=False, soft_wrap=True)
    if trace:
        payload = {
            "steps": eval_trace.steps,
            "max_depth": eval_trace.max_depth,
            "events": eval_trace.events,
        }
        console.print(json.dumps(payload, indent=2), markup=False, highlight=False, soft_wrap=True)


@ops_app.command("list")
def ops_list() -> None:
    registry = load_builtins()
    for op in registry:
        lazy = ""
        if op.lazy:
            lazy = f" lazy={sorted(op.lazy)}"
        console.print(f"{op.name}/{op.arity}{lazy}", markup=False, highlight=False, soft_wrap=True)


@ops_app.command("show")
def ops_show(name: str) -> None:
    registry = load_builtins()
    op = registry.lookup(name)
    if op is None:
        _fail(f"Operation {name} not found")
    payload = {
        "name": op.name,
        "arity": op.arity,
        "lazy": sorted(op.lazy),
        "doc": op.doc,
    }
    console.print(json.dumps(payload, indent=2), markup=False, highlight=False, soft_wrap=True)


def _print_term(term: Term) -> None:
    engine = Engine(config=default_config())
    try:
        text = as_text(engine.evaluate(term))
    except StageError as exc:
        _fail(f"Evaluation failed: {exc}")
    console.print(text, markup=False, highlight=False, soft_wrap=True)


def _type_list(types: list[str]) -> Term:
    return v(list_from_items(v(item) for item in types))


@gen_app.command("params")
def gen_params(types: list[str] = typer.Argument(None)) -> None:
    _print_term(indexed_params(_type_list(types or [])))


@gen_app.command("fields")
def gen_fields(types: list[str] = typer.Argument(None)) -> None:
    _print_term(indexed_fields(_type_list(types or [])))


@gen_app.command("args")
def gen_args(n: int) -> None:
    try:
        count = Nat(n)
    except StageError as exc:
        _fail(f"Evaluation failed: {exc}")
    _print_term(indexed_args(v(count)))


@gen_app.command("init")
def gen_init(n: int) -> None:
    try:
        count = Nat(n)
    except StageError as exc:
        _fail(f"Evaluation failed: {exc}")
    _print_term(indexed_initializer_list(v(count)))


if __name__ == "__main__":
    app()
