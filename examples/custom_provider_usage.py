"""examples/custom_provider_usage.py - Implement and plug in a custom provider.

Subclass OutputProvider to send records anywhere. This one keeps them in
memory (handy in tests) and forwards errors as JSON lines to stdout, the
way a log shipper would pick them up.

Run:
    python examples/custom_provider_usage.py
"""

import json
from typing import Any, Dict, List

import faultlog
from faultlog import OutputProvider, severity
from faultlog.events import ExceptionEvent


class JsonMemoryProvider(OutputProvider):
    """Collects records as dicts and prints each one as a JSON line.

    Attributes:
        records: Every record received, in arrival order.

    Example:
        >>> provider = JsonMemoryProvider()
        >>> faultlog.register(provider, severity.ALL)
        >>> faultlog.log("hello")
        >>> provider.records[-1]["message"]
        'hello'
    """

    def __init__(self) -> None:
        self.records: List[Dict[str, Any]] = []

    def _emit(self, record: Dict[str, Any]) -> None:
        self.records.append(record)
        print(json.dumps(record))

    def log_error(self, code: int, description: str, file: str, line: int) -> bool:
        self._emit(
            {
                "kind": severity.category(code).lower(),
                "label": severity.label(code),
                "message": description,
                "at": f"{file}:{line}",
            }
        )
        return True

    def log_exception(self, exc: BaseException) -> None:
        event = ExceptionEvent.from_exception(exc)
        self._emit(
            {
                "kind": "exception",
                "label": event.type_name,
                "message": event.message,
                "at": f"{event.file}:{event.line}",
            }
        )

    def log_message(self, message: str) -> None:
        self._emit({"kind": "message", "message": message})

    def log_value(self, value: Any, comment: str = "") -> None:
        self._emit({"kind": "dump", "message": comment, "value": repr(value)})


if __name__ == "__main__":
    provider = JsonMemoryProvider()
    faultlog.register(provider, severity.ALL)

    faultlog.log("importer started")
    faultlog.trigger_error("row 17 has no SKU", severity.E_USER_WARNING)
    faultlog.trigger_error("price column is deprecated", severity.E_USER_DEPRECATED)

    print(f"{len(provider.records)} records collected")
