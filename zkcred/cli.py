"""
Command-line interface for the zkcred toolkit.

Provides key generation, a view of the configured credential structure and
a full issue / update / prove demonstration over in-memory streams.
"""

import logging
import sys
from pathlib import Path
from typing import Dict, List, Optional

import click
import trio
from rich import box
from rich.console import Console
from rich.table import Table

from zkcred import __version__
from zkcred.cl.cred_manager import CredManager, generate_master_secret
from zkcred.cl.keys import generate_keys
from zkcred.cl.params import Params
from zkcred.crypto.exceptions import ZKCredError
from zkcred.network.client import (
    fetch_structure,
    issue_credential,
    prove_credential,
    update_credential,
)
from zkcred.network.errors import ProtocolError
from zkcred.network.protocol import ClService, run_local_session
from zkcred.settings import ToolkitConfig, load_config

console = Console()

DEMO_VALUES = {"Name": "Jack", "Gender": "M", "Age": "122"}
DEMO_UPDATE = {"Name": "John"}
DEMO_REVEAL = ["Gender"]


@click.group()
@click.version_option(version=__version__)
@click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False),
    help="YAML configuration file (default: $ZKCRED_CONFIG or packaged defaults)",
)
@click.option("--verbose", is_flag=True, help="Enable debug logging")
@click.pass_context
def main(ctx, config_path, verbose):
    """
    zkcred - anonymous credentials over zero-knowledge proofs.

    ⚠️  DRAFT - requires crypto review before production use
    """
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path
    ctx.obj["verbose"] = verbose


def _load(ctx) -> ToolkitConfig:
    try:
        return load_config(ctx.obj.get("config_path"))
    except ZKCredError as e:
        console.print(f"[red]✗ Configuration error: {e}[/red]")
        sys.exit(1)


def _with_n_length(config: ToolkitConfig, n_length: Optional[int]) -> ToolkitConfig:
    if n_length is None:
        return config
    values = config.params.to_dict()
    values["n_length"] = n_length
    params = Params.from_dict(values)
    return ToolkitConfig(params, config.structure, config.acceptable_credentials)


@main.command()
@click.option(
    "--out",
    "out_dir",
    type=click.Path(file_okay=False),
    required=True,
    help="Directory for pub_key.cbor and sec_key.cbor",
)
@click.option("--n-length", type=int, help="Override the special RSA modulus length")
@click.pass_context
def keygen(ctx, out_dir, n_length):
    """
    Generate an issuer key pair for the configured credential structure.

    Examples:

        zkcred keygen --out keys/

        zkcred --config my.yml keygen --out keys/ --n-length 2048
    """
    try:
        config = _with_n_length(_load(ctx), n_length)
        params = config.params
        with console.status("Generating keys (safe primes take a while)..."):
            pub_key, sec_key = generate_keys(params)
        out = Path(out_dir)
        out.mkdir(parents=True, exist_ok=True)
        pub_key.save(out / "pub_key.cbor")
        sec_key.save(out / "sec_key.cbor")
        console.print(f"[green]✓ Keys written to {out}[/green]")
        console.print(
            f"  N: {pub_key.n.bit_length()} bits, attributes "
            f"{params.known_attrs_num} known / {params.committed_attrs_num} committed / "
            f"{params.hidden_attrs_num} hidden"
        )
    except ZKCredError as e:
        console.print(f"[red]✗ Key generation failed: {e}[/red]")
        sys.exit(1)


@main.command()
@click.pass_context
def structure(ctx):
    """Show the configured credential structure and acceptable credentials."""
    config = _load(ctx)
    table = Table(title="Credential structure", box=box.MINIMAL_DOUBLE_HEAD, header_style="bold")
    table.add_column("Index", justify="right")
    table.add_column("Name")
    table.add_column("Type")
    table.add_column("Visibility")
    for attr in config.raw_credential().get_attributes():
        table.add_row(str(attr.index), attr.name, attr.type, attr.visibility.value)
    console.print(table)

    creds = Table(title="Acceptable credentials", box=box.MINIMAL, header_style="bold")
    creds.add_column("Organization")
    creds.add_column("Revealed known attributes")
    for org, indices in config.acceptable_credentials.items():
        creds.add_row(org, ", ".join(str(i) for i in indices))
    console.print(creds)


@main.command()
@click.option("--n-length", type=int, help="Override the special RSA modulus length")
@click.pass_context
def demo(ctx, n_length):
    """
    Issue, verify, update and present a credential end to end.

    Runs the client flows against the stream handler over in-memory trio
    streams: Name=Jack, Gender=M, Age=122 is issued, Name is updated to
    John, and a presentation reveals Gender only.
    """
    config = _with_n_length(_load(ctx), n_length)
    try:
        ok = trio.run(_run_demo, config)
    except (ZKCredError, ProtocolError) as e:
        console.print(f"[red]✗ Demo failed: {e}[/red]")
        if ctx.obj.get("verbose"):
            console.print_exception()
        sys.exit(1)
    if not ok:
        sys.exit(1)


async def _run_demo(config: ToolkitConfig) -> bool:
    params = config.params
    console.rule("[bold cyan]zkcred demo")
    with console.status("Generating issuer keys..."):
        pub_key, sec_key = generate_keys(params)
    service = ClService(
        params,
        pub_key,
        sec_key,
        structure=config.structure,
        acceptable_credentials=config.acceptable_credentials,
    )
    console.print(f"[green]✓[/green] Issuer keys ready (N = {pub_key.n.bit_length()} bits)")

    structure = await run_local_session(service, fetch_structure)
    raw_cred = structure.raw_credential()
    values: Dict[str, str] = {
        a.name: DEMO_VALUES.get(a.name, "0") for a in raw_cred.get_attributes()
    }
    raw_cred.set_values(values)
    console.print(f"[green]✓[/green] Structure fetched: {raw_cred.get_attribute_values()}")

    manager = CredManager.from_raw_credential(
        params, pub_key, generate_master_secret(pub_key), raw_cred
    )

    async def _issue(stream):
        return await issue_credential(stream, manager)

    cred = await run_local_session(service, _issue)
    console.print("[green]✓[/green] Credential issued and verified")

    updates = {name: value for name, value in DEMO_UPDATE.items() if name in values}
    for name, value in updates.items():
        raw_cred.update_value(name, value)

    async def _update(stream):
        return await update_credential(stream, manager, raw_cred.get_known_values())

    cred = await run_local_session(service, _update)
    console.print(f"[green]✓[/green] Credential updated: {raw_cred.get_attribute_values()}")

    revealed: List[int] = [
        raw_cred.known_index(name) for name in DEMO_REVEAL if name in values
    ]

    async def _prove(stream):
        return await prove_credential(stream, manager, cred, revealed, [])

    result = await run_local_session(service, _prove)
    if result:
        console.print(f"[green]✓[/green] Presentation accepted (revealed: {', '.join(DEMO_REVEAL)})")
    else:
        console.print(f"[red]✗ Presentation rejected: {result.reason}[/red]")
    console.rule()
    return bool(result)


if __name__ == "__main__":
    main()
