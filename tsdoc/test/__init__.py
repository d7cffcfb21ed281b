"""TSDoc's test suite."""

from logging import LogRecord
from typing import TYPE_CHECKING, List, Sequence

from tsdoc.parser import ParserContext


# Because pytest does not export types for all fixtures, we define
# approximations that are good enough for our test cases:

if TYPE_CHECKING:
    from typing import Protocol

    class CapLog(Protocol):
        records: Sequence[LogRecord]

    class CaptureResult(Protocol):
        out: str
        err: str

    class CapSys(Protocol):
        def readouterr(self) -> CaptureResult: ...

    from _pytest.monkeypatch import MonkeyPatch
else:
    CapLog = CaptureResult = CapSys = object
    MonkeyPatch = object


def message_ids(parser_context: ParserContext) -> List[str]:
    return [str(message.message_id) for message in parser_context.log]
