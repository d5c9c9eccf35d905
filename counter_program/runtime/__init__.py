"""
Host runtime for the counter program: accounts, rent, the system program,
cross-program invocation, signed transactions and an in-memory ledger.

Import from the submodules directly; this package keeps import-time cost at
zero so low-level modules can depend on `runtime.accounts` without cycles.
"""
