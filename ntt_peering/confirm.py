import click

from ntt_peering.payloads import Payload
from ntt_peering.steps import RegistrationStep


def confirm_payload(step: RegistrationStep, payload: Payload, err: bool = False) -> None:
    """Asks the operator to confirm a single transaction before it is signed."""
    message = (
        f"\nTransacting {step.kind} on {step.endpoint.name}"
        f"\n\ttarget={payload.target}"
        f"\n\tvalue={payload.value}"
        f"\n\tdata={payload.data}"
    )
    click.echo(message, err=err)
    for pubkey, is_signer, is_writable in payload.accounts:
        flags = ",".join(f for f, on in (("signer", is_signer), ("writable", is_writable)) if on)
        click.echo(f"\t\t{pubkey} {flags}".rstrip(), err=err)
    # declining fails the current step and halts the run
    click.confirm("Continue?", abort=True, err=err)
