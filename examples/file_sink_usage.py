"""examples/file_sink_usage.py - Persist signals to a size-rotated log file.

Records go to ./logs/app_<date>_<n>.log. Once a file reaches max_size_bytes
the counter advances and the old file is kept.

Run:
    python examples/file_sink_usage.py
    ls ./logs/
"""

import logging
import warnings

import faultlog
from faultlog import FaultLogHandler, FileSink, severity

sink = FileSink(
    filename_template="./logs/app_{yyyy}-{mm}-{dd}_{n}.log",
    max_size_bytes=512,
    overwrite_on_rollover=False,
    timestamp_format="%Y-%m-%d %H:%M:%S",
)
faultlog.register(sink, level=severity.ERRORS | severity.WARNINGS)

# Existing logging calls feed the same file.
logging.getLogger().addHandler(FaultLogHandler())
logger = logging.getLogger("inventory")


def restock(product_id: int, qty: int) -> None:
    if qty <= 0:
        logger.warning("ignoring restock of %d units for product %d", qty, product_id)
        return
    logger.info("restocked product %d", product_id)  # below the level, not written


if __name__ == "__main__":
    for i in range(20):
        restock(product_id=i, qty=i % 3 - 1)

    warnings.warn("stock cache is cold", RuntimeWarning)
    warnings.warn("old pricing api", DeprecationWarning)  # notices are filtered out

    faultlog.log("restock batch finished")
    print(f"current log file: {sink.path}")
