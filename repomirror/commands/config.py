import click
from repomirror.config import load_config, save_config, get_config_path, get_default_config
import json


# Never printed by `config show`
SECRET_KEYS = ("source_token", "dest_token")


def _redact(config):
    github = dict(config.get("github", {}))
    for key in SECRET_KEYS:
        if github.get(key):
            github[key] = "***"
    return {**config, "github": github}


@click.group("config")
def config_cmd():
    """Configuration management commands."""
    pass


@config_cmd.command("generate")
@click.option("--force", is_flag=True, help="Overwrite an existing configuration file")
def generate_config(force):
    """Write the default configuration file."""
    config_path = get_config_path()
    if config_path.exists() and not force:
        click.echo(f"Configuration already exists at {config_path} (use --force to overwrite)")
        return
    save_config(get_default_config())
    click.echo(f"Default configuration written to {config_path}")


@config_cmd.command("show")
@click.option("--pretty", is_flag=True, help="Display as formatted JSON instead of single-line JSONL")
@click.option("--path", is_flag=True, help="Show the config file path being used")
def show_config(pretty, path):
    """Show the current configuration with all merges applied.

    By default, outputs single-line JSON (JSONL format).
    Use --pretty for human-readable formatted output.
    Tokens are redacted.
    """
    if path:
        print(json.dumps({"config_path": str(get_config_path())}))
        return

    config = _redact(load_config())

    if pretty:
        print(json.dumps(config, indent=2, ensure_ascii=False))
    else:
        print(json.dumps(config, ensure_ascii=False))
