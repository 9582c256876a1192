"""examples/multithreaded_usage.py - One FileSink shared by many threads.

Worker threads warn concurrently; the sink serialises the size check, the
rollover and the append, so every record lands whole in exactly one file.

Run:
    python examples/multithreaded_usage.py
"""

import threading
import time
import warnings

import faultlog
from faultlog import FileSink, severity

faultlog.register(
    FileSink(filename_template="./logs/orders_{date}.log", max_size_bytes=4096),
    level=severity.ALL,
)


def fetch_inventory(product_id: int) -> int:
    """Simulate a DB read for product stock."""
    time.sleep(0.01)
    stock = {1: 10, 2: 0, 3: 5}
    return stock.get(product_id, 0)


def place_order(order_id: int, product_id: int, qty: int) -> None:
    stock = fetch_inventory(product_id)
    if stock < qty:
        warnings.warn(
            f"order {order_id}: product {product_id} short by {qty - stock}",
            RuntimeWarning,
        )
        return
    faultlog.log(f"order {order_id} placed")


if __name__ == "__main__":
    threads = [
        threading.Thread(target=place_order, args=(n, n % 3 + 1, 4), name=f"order-{n}")
        for n in range(12)
    ]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    print("see ./logs/ for the records")
