"""
counter_program.entrypoint — dispatch boundary of the counter program.

`process_instruction` is what a host calls for every instruction addressed to
the program. It:

  1) snapshots every account handle (lamports, data, owner),
  2) runs `Processor.process`,
  3) on any ProgramError restores the snapshot, logs the rejection and
     returns a FAILED `ProcessResult` carrying the error,
  4) otherwise returns SUCCESS with the program log lines.

Every call is counted in `counter_program_instructions_total`.

Nothing a failed request wrote survives it.
"""

from __future__ import annotations

from typing import Optional, Sequence

from .errors import ProgramError, error_category
from .logging import get_logger
from .metrics import observe_instruction, op_label
from .processor import Processor
from .runtime.accounts import AccountInfo, restore_accounts, snapshot_accounts, to_hex
from .runtime.context import InvokeContext
from .types.result import ProcessResult

log = get_logger(__name__)


def process_instruction(
    program_id: bytes,
    accounts: Sequence[AccountInfo],
    data: bytes,
    *,
    ctx: Optional[InvokeContext] = None,
) -> ProcessResult:
    ctx = ctx or InvokeContext()
    snapshot = snapshot_accounts(accounts)
    try:
        Processor.process(program_id, accounts, data, ctx)
    except ProgramError as err:
        restore_accounts(snapshot)
        ctx.logs.append(f"Program {to_hex(program_id)} failed: {err}")
        log.warning(
            "instruction rejected",
            extra={"code": err.code, "category": error_category(err), "reason": err.message},
        )
        observe_instruction(op=op_label(data), success=False, code=err.code)
        return ProcessResult.failed(err, ctx.logs)
    observe_instruction(op=op_label(data), success=True)
    return ProcessResult.ok(ctx.logs)


__all__ = ["process_instruction"]
