"""CLI entry point for nova-llm."""

from __future__ import annotations

import asyncio
import json
import logging
import sys
from pathlib import Path

import click

from . import __version__
from .exceptions import NovaError

logger = logging.getLogger("nova-llm")


# ── Helpers ──────────────────────────────────────────────


def _parse_field(spec: str):
    """Turn ``name:kind`` into a schema field; kind defaults to string."""
    from .structured.schema import (
        AnyField,
        ArrayField,
        BooleanField,
        EnumField,
        NumberField,
        StringField,
    )

    name, _, kind = spec.partition(":")
    kind = kind or "string"
    simple = {
        "string": StringField(),
        "number": NumberField(),
        "integer": NumberField(integer=True),
        "percent": NumberField(minimum=0, maximum=100),
        "boolean": BooleanField(),
        "array": ArrayField(StringField()),
        "any": AnyField(),
    }
    if not name:
        raise click.BadParameter(f"missing field name in {spec!r}")
    if kind in simple:
        return name, simple[kind]
    if kind.startswith("enum="):
        members = tuple(m for m in kind[len("enum=") :].split("|") if m)
        if members:
            return name, EnumField(members)
    raise click.BadParameter(
        f"unknown kind {kind!r} (string, number, integer, percent, boolean, "
        "array, any, enum=a|b)"
    )


async def _with_provider(ctx: click.Context, fn):
    """Create the provider for this invocation, run ``fn(provider)``, close it."""
    from .providers.factory import create_provider

    obj = ctx.obj
    provider = await create_provider(
        obj["config"], name=obj["provider"], model=obj["model"], stats=obj["stats"]
    )
    try:
        return await fn(provider)
    finally:
        await provider.close()


def _run_structured(ctx: click.Context, request):
    """Run one generate_object call under the configured overall timeout."""
    timeout = ctx.obj["config"].ai.generation.timeout_seconds

    async def _go(provider):
        return await asyncio.wait_for(provider.generate_object(request), timeout)

    try:
        result = asyncio.run(_with_provider(ctx, _go))
    except asyncio.TimeoutError:
        raise click.ClickException(f"Timed out after {timeout:g}s")
    except NovaError as e:
        raise click.ClickException(str(e))
    logger.debug("Generation stats: %s", ctx.obj["stats"].summary())
    return result


# ── CLI Commands ─────────────────────────────────────────


@click.group()
@click.version_option(version=__version__, prog_name="nova-llm")
@click.option("--config", "config_path", default=None, help="Config file path")
@click.option(
    "--provider",
    default=None,
    help="Override provider: auto | openai | azure | ollama | anthropic",
)
@click.option("--model", default=None, help="Override model name")
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
@click.pass_context
def main(
    ctx: click.Context,
    config_path: str | None,
    provider: str | None,
    model: str | None,
    verbose: bool,
) -> None:
    """nova-llm — Structured output from any LLM."""
    from .config import load_config
    from .stats import GenerationStats

    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )
    for noisy in ("httpx", "openai", "anthropic", "aiohttp"):
        logging.getLogger(noisy).setLevel(logging.WARNING)

    try:
        config = load_config(config_path)
    except NovaError as e:
        raise click.ClickException(str(e))

    ctx.obj = {
        "config": config,
        "config_path": config_path,
        "provider": provider,
        "model": model,
        "stats": GenerationStats(),
    }


@main.command()
@click.argument("prompt")
@click.option(
    "--field",
    "-f",
    "fields",
    multiple=True,
    help="Expected field as name:kind, repeatable (default: answer:string)",
)
@click.option("--temperature", default=None, type=float, help="Sampling temperature")
@click.pass_context
def generate(
    ctx: click.Context, prompt: str, fields: tuple[str, ...], temperature: float | None
) -> None:
    """Ask the model for a JSON object with the given fields."""
    from .structured.schema import Schema
    from .structured.types import GenerationRequest

    parsed = dict(_parse_field(f) for f in fields or ("answer:string",))
    gen = ctx.obj["config"].ai.generation
    request = GenerationRequest(
        prompt=prompt,
        schema=Schema.of("result", **parsed),
        temperature=temperature if temperature is not None else gen.temperature,
        max_tokens=gen.max_tokens,
    )
    value = _run_structured(ctx, request)
    click.echo(json.dumps(value, indent=2))


@main.command()
@click.argument("path", required=False, type=click.Path(dir_okay=False))
@click.option("--json", "as_json", is_flag=True, help="Print the raw verdict as JSON")
@click.pass_context
def review(ctx: click.Context, path: str | None, as_json: bool) -> None:
    """Review a source file (or stdin) and print a graded verdict."""
    from .review import (
        REVIEW_SCHEMA,
        REVIEW_SYSTEM_PROMPT,
        build_review_prompt,
        format_review,
    )
    from .structured.types import GenerationRequest

    if path and path != "-":
        file = Path(path)
        if not file.exists():
            raise click.ClickException(f"File not found: {path}")
        code = file.read_text(errors="replace")
    else:
        code = sys.stdin.read()
        path = None
    if not code.strip():
        raise click.ClickException("Nothing to review")

    gen = ctx.obj["config"].ai.generation
    request = GenerationRequest(
        prompt=build_review_prompt(code, path),
        schema=REVIEW_SCHEMA,
        temperature=gen.temperature,
        system_prompt=REVIEW_SYSTEM_PROMPT,
        max_tokens=gen.max_tokens,
    )
    verdict = _run_structured(ctx, request)
    if as_json:
        click.echo(json.dumps(verdict.model_dump(by_alias=True), indent=2))
    else:
        click.echo(format_review(verdict))


@main.command()
@click.pass_context
def models(ctx: click.Context) -> None:
    """List models offered by the selected provider."""

    async def _list(provider):
        return provider.name, await provider.list_models()

    try:
        name, names = asyncio.run(_with_provider(ctx, _list))
    except NovaError as e:
        raise click.ClickException(str(e))
    click.echo(f"Provider: {name}")
    if not names:
        click.echo("  (no models reported)")
    for model_name in names:
        click.echo(f"  {model_name}")


@main.command()
@click.pass_context
def check(ctx: click.Context) -> None:
    """Validate the config and smoke-test the selected provider."""
    from .providers.factory import (
        check_provider,
        provider_recommendations,
        validate_llm_config,
    )

    config = ctx.obj["config"]
    report = validate_llm_config(config)
    rec = provider_recommendations(config)

    async def _check(provider):
        return provider.name, provider.model_name, await check_provider(provider)

    try:
        name, model_name, result = asyncio.run(_with_provider(ctx, _check))
    except NovaError as e:
        raise click.ClickException(str(e))

    checks: list[tuple[str, bool, str]] = [
        (
            "Config",
            report.is_valid,
            "; ".join(report.errors) or "valid",
        ),
        ("Provider", name != "fallback", f"{name} / {model_name}"),
        ("Availability", result.availability, "reachable" if result.availability else "unreachable"),
        ("Models", bool(result.models), f"{len(result.models)} listed"),
        (
            "Generation",
            result.basic_generation,
            "ok" if result.basic_generation else "; ".join(result.errors) or "failed",
        ),
    ]

    click.echo("\nnova-llm check")
    click.echo("=" * 50)
    passed = failed = 0
    for label, ok, detail in checks:
        icon = click.style("PASS", fg="green") if ok else click.style("FAIL", fg="red")
        if ok:
            passed += 1
        else:
            failed += 1
        click.echo(f"  [{icon}] {label}: {detail}")

    for warning in report.warnings:
        click.echo(f"  [{click.style('WARN', fg='yellow')}] {warning}")
    click.echo(f"\n  Recommended provider: {rec.recommended}")
    for provider_name, requirement in rec.missing:
        click.echo(f"    {provider_name}: needs {requirement}")

    click.echo(f"\n  {passed} passed, {failed} failed")
    if failed:
        ctx.exit(1)


@main.group("config")
def config_group() -> None:
    """Show or create the configuration file."""


@config_group.command("show")
@click.pass_context
def config_show(ctx: click.Context) -> None:
    """Print the effective configuration (API keys masked)."""
    import yaml

    data = ctx.obj["config"].model_dump()
    for section in ("openai", "anthropic"):
        key = data["ai"][section]["api_key"]
        if key:
            data["ai"][section]["api_key"] = f"{key[:4]}...{key[-4:]}" if len(key) > 8 else "****"
    click.echo(yaml.dump(data, default_flow_style=False, sort_keys=False).rstrip())


@config_group.command("init")
@click.option("--force", is_flag=True, help="Overwrite an existing config file")
@click.pass_context
def config_init(ctx: click.Context, force: bool) -> None:
    """Write the current effective configuration to the config file."""
    from .config import _resolve_path, save_config

    target = _resolve_path(ctx.obj["config_path"])
    if target.exists() and not force:
        raise click.ClickException(f"{target} already exists (use --force to overwrite)")
    path = save_config(ctx.obj["config"], target)
    click.echo(f"Config written to {path}")


if __name__ == "__main__":
    main()
