from functools import partial
from typing import Any, Callable, Dict, List, Mapping, Optional

import click

from ntt_peering.addresses import Address
from ntt_peering.client import ChainClient
from ntt_peering.confirm import confirm_payload
from ntt_peering.constants import ChainFamily
from ntt_peering.evm_client import EvmNttClient
from ntt_peering.exceptions import ConfigurationError
from ntt_peering.options import JSON_OUTPUT
from ntt_peering.report import exit_code, render_json, render_text
from ntt_peering.solana_client import SolanaNttClient
from ntt_peering.steps import ChainEndpoint, RegistrationStep
from ntt_peering.workflow import Sequencer, WorkflowConfig


class PeeringCommand(click.Command):
    """A click command whose usage errors are configuration errors (exit status 1)."""

    def parse_args(self, ctx: click.Context, args: List[str]) -> List[str]:
        try:
            return super().parse_args(ctx, args)
        except ConfigurationError:
            raise
        except click.UsageError as e:
            raise ConfigurationError(e.format_message(), ctx=e.ctx or ctx) from e


def client_for(endpoint: ChainEndpoint, sender: Optional[Address] = None) -> ChainClient:
    """Builds the chain client matching the endpoint's chain family."""
    if endpoint.chain.family is ChainFamily.EVM:
        return EvmNttClient(endpoint=endpoint, sender=sender)
    return SolanaNttClient(endpoint=endpoint, sender=sender)


def console(output: str) -> Callable[[str], None]:
    """Progress output goes to stderr when stdout is reserved for the JSON report."""
    return partial(click.echo, err=output == JSON_OUTPUT)


def print_header(title: str, fields: Dict[str, Any], output: str) -> None:
    echo = console(output)
    echo(f"=== {title} ===")
    for name, value in fields.items():
        if value is not None:
            echo(f"{name}: {value}")
    echo("")


def run_workflow(
    steps: List[RegistrationStep],
    clients: Mapping[str, ChainClient],
    config: WorkflowConfig,
    output: str,
    credentials: Optional[Mapping[str, Any]] = None,
) -> None:
    """Runs the steps, prints the report and exits with the workflow's status."""
    err = output == JSON_OUTPUT
    sequencer = Sequencer(
        clients=clients,
        config=config,
        credentials=credentials,
        confirm=partial(confirm_payload, err=err),
        echo=console(output),
    )
    run = sequencer.run(steps)

    if output == JSON_OUTPUT:
        click.echo(render_json(run))
    else:
        click.echo(render_text(run))
    click.get_current_context().exit(exit_code(run))
