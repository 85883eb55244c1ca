import typing as t
import trio
import socket
from sockspec.addrinfo import Addrinfo

import logging
logger = logging.getLogger(__name__)
# logging.basicConfig(level=logging.DEBUG)

class FakeSocket(trio.socket.SocketType):
    "Just enough of a trio socket for the code paths that don't touch the kernel"
    family = socket.AF_INET
    type = socket.SOCK_STREAM
    proto = 0

    def __init__(self) -> None:
        self.closed = False

    def fileno(self) -> int:
        return -1 if self.closed else 1000

    def close(self) -> None:
        self.closed = True

    def __enter__(self) -> "FakeSocket":
        return self

    def __exit__(self, *args: t.Any) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"{type(self).__name__}(closed={self.closed})"

class FakeConnection(FakeSocket):
    pass

class ScriptedSocket(FakeSocket):
    """A listening socket whose accept calls follow a script

    Each accept takes the next item: exceptions are raised, anything else is
    returned. Once the script runs out, accept behaves as if the socket had
    been closed by another task.

    """
    def __init__(self, script: t.List[t.Any]) -> None:
        super().__init__()
        self.script = list(script)
        self.backlogs: t.List[int] = []
        self.accepts = 0

    def listen(self, backlog: int) -> None:
        self.backlogs.append(backlog)

    def getsockname(self) -> t.Tuple[str, int]:
        return ("127.0.0.1", 9090)

    async def accept(self) -> t.Tuple[trio.socket.SocketType, t.Any]:
        await trio.lowlevel.checkpoint()
        self.accepts += 1
        if not self.script:
            raise trio.ClosedResourceError("closed by another task")
        item = self.script.pop(0)
        logger.debug("accept #%d: %r", self.accepts, item)
        if isinstance(item, BaseException):
            raise item
        return item

def record_bind(listener: ScriptedSocket) -> t.Callable[..., t.Awaitable[t.Any]]:
    "Make a replacement for sockspec.socket.bind that hands `listener` to the handler"
    async def bind(addrinfo: Addrinfo, handler: t.Callable[[trio.socket.SocketType], t.Awaitable[t.Any]],
                   **options: t.Any) -> t.Any:
        logger.debug("pretending to bind %s to %s with %s", listener, addrinfo, options)
        return await handler(listener)
    return bind
