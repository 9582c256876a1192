"""examples/basic_usage.py - faultlog in debug mode.

Debug mode needs no provider: every signal, whatever its severity, is
printed to stderr by a ScreenSink, and dump() is enabled.

Run:
    python examples/basic_usage.py
    FAULTLOG_DEBUG=1 python examples/basic_usage.py   # same, via the environment
"""

import warnings

import faultlog
from faultlog import severity

# ---------------------------------------------------------------------------
# One line at process start
# ---------------------------------------------------------------------------
faultlog.register(debug=True)


def get_balance(user_id: int) -> int:
    """Simulate a DB balance query."""
    faultlog.dump({"user_id": user_id, "source": "replica"}, "balance query")
    return 3_000


def pay(user_id: int, amount: int) -> None:
    """Simulate a payment flow that runs out of funds."""
    faultlog.log(f"payment attempt user_id={user_id} amount={amount}")
    balance = get_balance(user_id)

    if balance < amount:
        faultlog.trigger_error(
            f"insufficient funds (balance={balance}, requested={amount})",
            severity.E_USER_WARNING,
        )
        return

    faultlog.log("payment successful")


if __name__ == "__main__":
    pay(user_id=101, amount=500)
    pay(user_id=202, amount=5_000)

    warnings.warn("legacy currency table in use", DeprecationWarning)

    # An uncaught exception is recorded, then the process exits with status 1.
    raise RuntimeError("ledger unavailable")
