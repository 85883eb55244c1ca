"""The socket operations that an AddressSpec dispatches to

These wrap `trio.socket`: creating a socket for a resolved address, binding
or connecting it, listening, and accepting in a loop. Every socket created
here is closed when the handler it was passed to returns or raises.

OSErrors from the socket itself are raised as `FatalSocketError`, chained to
the original error and keeping its errno.

"""
from __future__ import annotations
import errno
import logging
import typing as t
import trio
from sockspec.addrinfo import Addrinfo
from sockspec.sys.socket import AF, SOL, SO
from sockspec.exceptions import FatalSocketError, TransientAcceptError, from_oserror
if t.TYPE_CHECKING:
    from sockspec.address import AddressSpec
logger = logging.getLogger(__name__)

__all__ = [
    "DEFAULT_BACKLOG",
    "bind",
    "connect",
    "listen",
    "accept_each",
]

DEFAULT_BACKLOG: int = trio.socket.SOMAXCONN
# how long to back off when accept fails because we're out of file descriptors or memory
ACCEPT_CAPACITY_SLEEP = 0.1
CAPACITY_ACCEPT_ERRNOS = frozenset({
    errno.EMFILE,
    errno.ENFILE,
    errno.ENOMEM,
    errno.ENOBUFS,
})
TRANSIENT_ACCEPT_ERRNOS = frozenset({
    # the connection was torn down before we got around to accepting it
    errno.ECONNABORTED,
    errno.ECONNRESET,
    errno.EPROTO,
    # firewall rules on Linux
    errno.EPERM,
    errno.EAGAIN,
    errno.EWOULDBLOCK,
    errno.EINTR,
}) | CAPACITY_ACCEPT_ERRNOS

T = t.TypeVar('T')
SocketHandler = t.Callable[[trio.socket.SocketType], t.Awaitable[T]]
ConnectionHandler = t.Callable[[trio.socket.SocketType, Addrinfo], t.Awaitable[t.Any]]

def _ignore_options(operation: str, options: t.Mapping[str, t.Any]) -> None:
    for name, value in options.items():
        logger.debug("%s: ignoring unrecognized option %s=%r", operation, name, value)

def _make_socket(addrinfo: Addrinfo) -> trio.socket.SocketType:
    try:
        return trio.socket.socket(addrinfo.family, addrinfo.type, addrinfo.proto)
    except OSError as e:
        raise from_oserror(FatalSocketError, e, "socket", addrinfo) from e

def _set_reuse(sock: trio.socket.SocketType, family: AF, reuse_address: bool, reuse_port: bool) -> None:
    if family == AF.UNIX:
        # neither option means anything for Unix sockets
        return
    if reuse_address:
        sock.setsockopt(SOL.SOCKET, SO.REUSEADDR, 1)
    if reuse_port:
        sock.setsockopt(SOL.SOCKET, SO.REUSEPORT, 1)

async def bind(addrinfo: Addrinfo, handler: SocketHandler[T], *,
               reuse_address: bool=True, reuse_port: bool=False, backlog: t.Optional[int]=None,
               **options: t.Any) -> T:
    """Make a socket bound to `addrinfo` and call `handler` with it.

    `backlog` is accepted so an AddressSpec's options can be passed straight
    through; it's only used by `listen`.

    """
    _ignore_options("bind", options)
    logger.debug("binding to %s", addrinfo)
    sock = _make_socket(addrinfo)
    with sock:
        try:
            _set_reuse(sock, addrinfo.family, reuse_address, reuse_port)
            await sock.bind(addrinfo.address)
        except OSError as e:
            raise from_oserror(FatalSocketError, e, "bind", addrinfo) from e
        return await handler(sock)

async def connect(address: AddressSpec, handler: SocketHandler[T], *,
                  local_address: t.Any=None, reuse_address: bool=False, backlog: t.Optional[int]=None,
                  **options: t.Any) -> T:
    """Make a socket connected to `address` and call `handler` with it.

    `local_address` is bound before connecting, if passed; it can be an
    `AddressSpec` or anything `AddressSpec` accepts as a specification.

    """
    # imported here since address.py imports this module
    from sockspec.address import AddressSpec
    remote = await address.resolve()
    local = None
    if local_address is not None:
        if not isinstance(local_address, AddressSpec):
            local_address = AddressSpec(local_address)
        local = await local_address.resolve()
    _ignore_options("connect", options)
    logger.debug("connecting to %s", remote)
    sock = _make_socket(remote)
    with sock:
        try:
            _set_reuse(sock, remote.family, reuse_address, False)
            if local is not None:
                await sock.bind(local.address)
            await sock.connect(remote.address)
        except OSError as e:
            raise from_oserror(FatalSocketError, e, "connect", remote) from e
        logger.debug("connected to %s", remote)
        return await handler(sock)

def listen(sock: trio.socket.SocketType, backlog: int) -> None:
    "Mark `sock` as accepting connections, with up to `backlog` pending"
    try:
        sock.listen(backlog)
    except OSError as e:
        raise from_oserror(FatalSocketError, e, "listen") from e
    logger.info("listening on %s with backlog %d", sock, backlog)

async def _serve(handler: ConnectionHandler, conn: trio.socket.SocketType, peer: Addrinfo) -> None:
    with conn:
        try:
            await handler(conn, peer)
        except Exception:
            # one bad connection doesn't stop the others or the listener
            logger.exception("handler for connection from %s failed", peer)

async def accept_each(sock: trio.socket.SocketType, handler: ConnectionHandler) -> None:
    """Accept connections on `sock` until it's closed, calling `handler` on each in its own task.

    Closing `sock`, from any task, ends the loop; we return once the handlers
    for connections already accepted have finished. A handler that raises is
    logged, and the loop carries on. Failures of a single accept are logged
    and skipped; anything else cancels the running handlers and is raised as
    FatalSocketError.

    """
    failure: t.Optional[OSError] = None
    async with trio.open_nursery() as nursery:
        while sock.fileno() != -1:
            try:
                conn, raw_peer = await sock.accept()
            except trio.ClosedResourceError:
                break
            except OSError as e:
                if e.errno not in TRANSIENT_ACCEPT_ERRNOS:
                    # raised outside the nursery so callers don't get an ExceptionGroup
                    failure = e
                    nursery.cancel_scope.cancel()
                    break
                logger.warning("skipping failed accept: %s", from_oserror(TransientAcceptError, e, "accept"))
                if e.errno in CAPACITY_ACCEPT_ERRNOS:
                    await trio.sleep(ACCEPT_CAPACITY_SLEEP)
                continue
            peer = Addrinfo.from_peer(conn, raw_peer)
            logger.debug("accepted connection from %s", peer)
            nursery.start_soon(_serve, handler, conn, peer)
    if failure is not None:
        raise from_oserror(FatalSocketError, failure, "accept") from failure
