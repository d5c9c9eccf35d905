#!/usr/bin/env python3
"""
counter_program.cli.main — typer app.

demo      Replays the reference client flow on a fresh in-memory ledger:
          fund a payer, initialize its counter, increment it, close it to a
          new recipient. Prints balances and the counter after each step.
derive    Print the counter address and bump for an owner (hex).
decode    Decode an instruction payload (hex) into its operation.
rent      Print the rent-exempt minimum for a data length.
version   Print the package version (--verbose: ABI and build metadata as JSON).
"""

from __future__ import annotations

import json
from typing import Any, Dict, List, Optional

import typer
from rich.console import Console
from rich.table import Table

from .. import logging as clog
from ..client import close_counter, fetch_counter, increment_counter, initialize_counter
from ..config import get_config, summary
from ..errors import ProgramError
from ..instruction import CounterInstruction, IncrementCounter
from ..pda import counter_address
from ..runtime.accounts import LAMPORTS_PER_SOL, parse_hex_address, to_hex
from ..runtime.keys import Keypair
from ..runtime.ledger import Ledger
from ..runtime.message import Instruction, Transaction
from ..state import CounterState
from ..types.ints import U64_MAX
from ..version import __version__, version_metadata

app = typer.Typer(no_args_is_help=True, add_completion=False, help="Counter program tools")
console = Console()


@app.callback()
def _main(
    log_level: Optional[str] = typer.Option(None, "--log-level", help="Override COUNTER_LOG_LEVEL"),
) -> None:
    if log_level is None:
        clog.configure_from_env()
    else:
        clog.configure(json=get_config().logging.json, level=log_level)


def _hex_arg(value: str, name: str) -> bytes:
    try:
        return parse_hex_address(value, name=name)
    except ValueError as e:
        raise typer.BadParameter(str(e)) from e


@app.command()
def version(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Print ABI and build metadata as JSON"),
) -> None:
    """Print the package version."""
    if verbose:
        typer.echo(json.dumps(version_metadata()))
    else:
        typer.echo(__version__)


@app.command()
def derive(
    owner: str = typer.Argument(..., help="Owner identity, 32-byte hex"),
    program_id: Optional[str] = typer.Option(None, "--program-id", help="Program id hex (default from config)"),
) -> None:
    """Derive the counter address for OWNER."""
    owner_b = _hex_arg(owner, "owner")
    pid = _hex_arg(program_id, "program_id") if program_id else get_config().program_id
    address, bump = counter_address(owner_b, pid)
    typer.echo(json.dumps({"address": to_hex(address), "bump": bump, "program_id": to_hex(pid)}))


@app.command()
def decode(payload: str = typer.Argument(..., help="Instruction payload hex")) -> None:
    """Decode PAYLOAD into a counter operation."""
    s = payload.strip().lower().removeprefix("0x")
    try:
        raw = bytes.fromhex(s)
    except ValueError as e:
        raise typer.BadParameter("payload must be hex") from e
    try:
        ix = CounterInstruction.unpack(raw)
    except ProgramError as err:
        typer.echo(json.dumps(err.to_dict()), err=True)
        raise typer.Exit(1)
    out: Dict[str, Any] = {"op": type(ix).__name__, "opcode": ix.OPCODE}
    if isinstance(ix, IncrementCounter):
        out["increment_by"] = ix.increment_by
    typer.echo(json.dumps(out))


@app.command()
def rent(data_len: int = typer.Argument(CounterState.LEN, min=0, help="Account data length in bytes")) -> None:
    """Rent-exempt minimum balance for DATA_LEN bytes."""
    cfg = get_config()
    typer.echo(str(cfg.rent.to_rent().minimum_balance(data_len)))


@app.command()
def demo(
    increment_by: int = typer.Option(101, "--increment-by", min=0, max=U64_MAX, help="Amount to add"),
    as_json: bool = typer.Option(False, "--json", help="Print JSON instead of a table"),
) -> None:
    """Initialize, increment and close a counter on a fresh in-memory ledger."""
    cfg = get_config()
    ledger = Ledger.from_config(cfg)
    payer = Keypair.generate()
    recipient = Keypair.generate()
    pda, _ = counter_address(payer.pubkey, ledger.program_id)
    ledger.airdrop(payer.pubkey, 5 * LAMPORTS_PER_SOL)

    steps: List[Dict[str, Any]] = []

    def _send(name: str, ix: Instruction) -> None:
        result = ledger.process_transaction(Transaction([ix], fee_payer=payer.pubkey).sign(payer))
        counter = fetch_counter(ledger, pda)
        steps.append(
            {
                "step": name,
                **result.to_dict(),
                "counter": None if counter is None else counter.value,
                "payer": ledger.get_balance(payer.pubkey),
                "recipient": ledger.get_balance(recipient.pubkey),
            }
        )
        if not result.is_success:
            _render(steps, as_json)
            raise typer.Exit(1)

    _send("initialize", initialize_counter(ledger.program_id, payer.pubkey))
    _send("increment", increment_counter(ledger.program_id, payer.pubkey, increment_by))
    _send("close", close_counter(ledger.program_id, payer.pubkey, recipient.pubkey))
    _render(steps, as_json)


def _render(steps: List[Dict[str, Any]], as_json: bool) -> None:
    if as_json:
        typer.echo(json.dumps(steps, indent=2))
        return
    console.print(summary())
    table = Table(title="counter demo")
    for col in ("step", "status", "counter", "payer", "recipient"):
        table.add_column(col)
    for s in steps:
        status = s["status"] if "error" not in s else f"{s['status']} ({s['error']['code']})"
        table.add_row(s["step"], status, str(s["counter"]), str(s["payer"]), str(s["recipient"]))
    console.print(table)


def main() -> None:  # pragma: no cover - thin wrapper
    app()


if __name__ == "__main__":  # pragma: no cover
    main()
