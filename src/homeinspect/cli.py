"""CLI interface for the home inspection service"""

import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, Optional

import click
from dotenv import load_dotenv

from homeinspect.application.config_service import ConfigService
from homeinspect.domain.errors import ConfigValidationError
from homeinspect.infrastructure.config.config_manager import ConfigManager, ConfigurationError
from homeinspect.infrastructure.config.config_store import ConfigStore
from homeinspect.infrastructure.llm.factory import LLMProviderFactory

logger = logging.getLogger(__name__)


def setup_logging(verbose: bool = False) -> None:
    """Setup logging configuration"""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        force=True,
    )
    logging.getLogger().setLevel(level)


def _die(message: str, verbose: bool = False, exc: Optional[Exception] = None) -> None:
    """Exit with a user-friendly error message"""
    if exc is not None:
        logger.error(message, exc_info=verbose)
    else:
        logger.error(message)
    raise click.ClickException(message)


def _load_settings(ctx) -> ConfigManager:
    try:
        return ConfigManager(config_path=ctx.obj.get("config_path"))
    except ConfigurationError as e:
        _die(str(e), verbose=ctx.obj.get("verbose", False), exc=e)


def _create_config_service(config_manager: ConfigManager, provider_override: Optional[str] = None) -> ConfigService:
    """Create config service backed by the on-disk store"""
    storage = config_manager.get_storage_config()
    limits = config_manager.get_limits_config()

    store = ConfigStore(Path(storage.config_path))
    llm_provider = LLMProviderFactory.from_settings(config_manager.get_provider_config(), provider_override)
    llm_provider.reconfigure(store.get())
    return ConfigService(store, llm_provider, test_timeout=limits.config_test_timeout)


def _collect_changes(
    model: Optional[str],
    temperature: Optional[float],
    top_p: Optional[float],
    streaming: Optional[bool],
    system_prompt: Optional[str],
    chat_prompt: Optional[str],
) -> Dict[str, Any]:
    """Map CLI options to wire-named configuration fields"""
    candidates = {
        "modelName": model,
        "temperature": temperature,
        "topP": top_p,
        "streaming": streaming,
        "systemPrompt": system_prompt,
        "chatPrompt": chat_prompt,
    }
    return {key: value for key, value in candidates.items() if value is not None}


def _config_options(func):
    """Options shared by ``config set`` and ``config test``"""
    options = [
        click.option("--model", type=str, help="Model identifier (e.g. gpt-4o-mini)"),
        click.option("--temperature", type=float, help="Sampling temperature (0-2)"),
        click.option("--top-p", type=float, help="Nucleus sampling (0-1)"),
        click.option("--streaming/--no-streaming", default=None, help="Stream responses"),
        click.option("--system-prompt", type=str, help="System prompt text"),
        click.option("--chat-prompt", type=str, help="Chat system prompt template"),
    ]
    for option in reversed(options):
        func = option(func)
    return func


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose logging")
@click.option(
    "--config",
    type=click.Path(exists=True, path_type=Path),
    help="Path to .homeinspect.yml settings file",
)
@click.pass_context
def cli(ctx, verbose: bool, config: Path):
    """Home inspection assistant - LLM photo analysis service"""
    ctx.ensure_object(dict)
    setup_logging(verbose)
    ctx.obj["config_path"] = config
    ctx.obj["verbose"] = verbose


@cli.command()
@click.option("--host", type=str, help="Interface to bind. Overrides settings.")
@click.option("--port", type=int, help="Port to listen on. Overrides settings.")
@click.option(
    "--provider",
    type=click.Choice(["openai", "mock"], case_sensitive=False),
    help="LLM provider to use. Overrides settings.",
)
@click.pass_context
def serve(ctx, host: Optional[str], port: Optional[int], provider: Optional[str]):
    """Run the HTTP API server."""
    import uvicorn

    from homeinspect.api.app import create_app_from_settings

    config_manager = _load_settings(ctx)
    settings = config_manager.settings
    if provider:
        settings = settings.model_copy(
            update={"provider": settings.provider.model_copy(update={"type": provider.lower()})}
        )

    bind_host = host or settings.server.host
    bind_port = port or settings.server.port
    try:
        app = create_app_from_settings(settings)
    except ValueError as e:
        _die(str(e), verbose=ctx.obj.get("verbose", False), exc=e)

    logger.info(f"Server running on {bind_host}:{bind_port} (provider: {settings.provider.type})")
    uvicorn.run(app, host=bind_host, port=bind_port, log_config=None)


@cli.group()
def config():
    """Inspect and change the saved LLM configuration."""


@config.command("show")
@click.pass_context
def config_show(ctx):
    """Print the saved LLM configuration as JSON."""
    service = _create_config_service(_load_settings(ctx))
    click.echo(json.dumps(service.read(), indent=2))


@config.command("set")
@_config_options
@click.pass_context
def config_set(ctx, model, temperature, top_p, streaming, system_prompt, chat_prompt):
    """Validate and save LLM configuration changes."""
    changes = _collect_changes(model, temperature, top_p, streaming, system_prompt, chat_prompt)
    if not changes:
        raise click.UsageError("Nothing to change. Pass at least one option.")

    service = _create_config_service(_load_settings(ctx))
    try:
        updated = service.update(changes)
    except ConfigValidationError as e:
        _die(f"Invalid configuration: {'; '.join(e.errors)}", verbose=ctx.obj.get("verbose", False))
    click.echo(json.dumps(updated.to_wire(), indent=2))
    click.echo("Configuration saved.")


@config.command("test")
@_config_options
@click.option(
    "--provider",
    type=click.Choice(["openai", "mock"], case_sensitive=False),
    help="LLM provider to use. Overrides settings.",
)
@click.pass_context
def config_test(ctx, model, temperature, top_p, streaming, system_prompt, chat_prompt, provider):
    """Try a configuration against the provider without saving it."""
    changes = _collect_changes(model, temperature, top_p, streaming, system_prompt, chat_prompt)
    service = _create_config_service(_load_settings(ctx), provider_override=provider)
    try:
        result = service.test(changes)
    except ConfigValidationError as e:
        _die(f"Invalid configuration: {'; '.join(e.errors)}", verbose=ctx.obj.get("verbose", False))

    tested = result.tested_config()
    click.echo(
        f"Model: {tested['model']}  Temperature: {tested['temperature']}  "
        f"Top P: {tested['topP']}  Streaming: {'enabled' if tested['streaming'] else 'disabled'}"
    )
    if result.success:
        click.echo("Configuration is working, including image analysis.")
        click.echo(f"Response: {result.response}")
        return

    error = result.error
    click.echo(f"Configuration test failed: {error.message}", err=True)
    for step in error.remediation:
        click.echo(f"  - {step}", err=True)
    if error.code:
        click.echo(f"Error code: {error.code}", err=True)
    sys.exit(1)


def main():
    """Main entry point"""
    load_dotenv()
    cli(obj={})


if __name__ == "__main__":
    main()
