"""Uniform specifications of where to bind, listen, or connect

An `AddressSpec` wraps one of several ways of saying where an endpoint is:

- an `Addrinfo`, already resolved;
- a `Construction`, the protocol and arguments to resolve one with,
  as made by `AddressSpec.tcp`, `AddressSpec.udp` and `AddressSpec.unix`;
- an open socket, either a `trio.socket.SocketType` or a stdlib `socket.socket`,
  whose local address is used as-is.

Whatever the form, `AddressSpec.bind`, `AddressSpec.accept` and
`AddressSpec.connect` work the same way: they get hold of a suitable socket
and pass it to an async handler.

Two AddressSpecs are equal when they resolve to the same bytes, and they
sort by those bytes, so a Construction and the socket that was bound with it
compare equal. Resolution happens the first time it's needed and is then
cached for the life of the AddressSpec.

"""
from __future__ import annotations
import functools
import logging
import socket
import threading
import types
import typing as t
from dataclasses import dataclass
import trio
import sockspec.socket
from sockspec.addrinfo import Addrinfo
from sockspec.exceptions import ResolutionError, UnsupportedSpecification, from_oserror
logger = logging.getLogger(__name__)

__all__ = [
    "AddressSpec",
    "Construction",
]

T = t.TypeVar('T')
SocketHandler = t.Callable[[trio.socket.SocketType], t.Awaitable[T]]
ConnectionHandler = t.Callable[[trio.socket.SocketType, 'AddressSpec'], t.Awaitable[t.Any]]

@dataclass(frozen=True)
class Construction:
    "A call to one of the `Addrinfo` resolution methods, made when the address is first needed"
    protocol: str
    args: t.Tuple[t.Any, ...]

    protocols: t.ClassVar[t.FrozenSet[str]] = frozenset({'tcp', 'udp', 'unix', 'getaddrinfo'})

    def __str__(self) -> str:
        return f"{self.protocol}({', '.join(map(repr, self.args))})"

@functools.total_ordering
@dataclass(frozen=True, eq=False)
class AddressSpec:
    "A specification of a network endpoint, together with the options to use when binding or connecting it"
    specification: t.Any
    options: t.Mapping[str, t.Any]

    def __init__(self, specification: t.Any, **options: t.Any) -> None:
        if isinstance(specification, (tuple, list)) and specification and isinstance(specification[0], str):
            specification = Construction(specification[0], tuple(specification[1:]))
        # the dataclass is frozen so we have to use __setattr__
        object.__setattr__(self, 'specification', specification)
        object.__setattr__(self, 'options', types.MappingProxyType(dict(options)))
        object.__setattr__(self, '_addrinfo', None)
        object.__setattr__(self, '_lock', threading.Lock())

    @classmethod
    def tcp(cls, *args: t.Any, **options: t.Any) -> AddressSpec:
        return cls(Construction('tcp', args), **options)

    @classmethod
    def udp(cls, *args: t.Any, **options: t.Any) -> AddressSpec:
        return cls(Construction('udp', args), **options)

    @classmethod
    def unix(cls, *args: t.Any, **options: t.Any) -> AddressSpec:
        return cls(Construction('unix', args), **options)

    @classmethod
    def from_each(cls, specifications: t.Iterable[t.Any]) -> t.Iterator[AddressSpec]:
        "Yield an AddressSpec for each specification, passing through the ones that already are"
        for specification in specifications:
            if isinstance(specification, cls):
                yield specification
            else:
                yield cls(specification)

    #### resolution ####
    def _compute_addrinfo(self) -> Addrinfo:
        spec = self.specification
        if isinstance(spec, Addrinfo):
            return spec
        elif isinstance(spec, Construction):
            if spec.protocol not in Construction.protocols:
                raise UnsupportedSpecification("not sure how to resolve protocol", spec.protocol, "in", spec)
            logger.debug("resolving %s", spec)
            try:
                result = getattr(Addrinfo, spec.protocol)(*spec.args)
            except ResolutionError:
                raise
            except (OSError, ValueError) as e:
                raise from_oserror(ResolutionError, e, spec) from e
            except TypeError as e:
                raise UnsupportedSpecification("wrong arguments for", spec, e) from e
            if isinstance(result, list):
                # getaddrinfo gives every candidate; we take the first, as tcp and udp do
                if not result:
                    raise ResolutionError(f"no addresses found for {spec}")
                return result[0]
            return result
        elif isinstance(spec, (trio.socket.SocketType, socket.socket)):
            try:
                return Addrinfo.from_socket(spec)
            except (OSError, ValueError) as e:
                raise from_oserror(ResolutionError, e, spec) from e
        else:
            raise UnsupportedSpecification("not sure how to convert", spec, "into an address")

    @property
    def addrinfo(self) -> Addrinfo:
        """The resolved address, computed on first access and cached afterwards.

        This blocks the thread while resolving names; use `AddressSpec.resolve`
        from async code.

        """
        with self._lock:
            if self._addrinfo is None:
                object.__setattr__(self, '_addrinfo', self._compute_addrinfo())
            return self._addrinfo

    async def resolve(self) -> Addrinfo:
        "Return `AddressSpec.addrinfo`, running any name lookup in a worker thread."
        if self._addrinfo is not None:
            return self._addrinfo
        if isinstance(self.specification, Construction):
            return await trio.to_thread.run_sync(lambda: self.addrinfo)
        return self.addrinfo

    def to_sockaddr(self) -> bytes:
        return self.addrinfo.to_sockaddr()

    def __bytes__(self) -> bytes:
        return self.to_sockaddr()

    @property
    def family(self) -> int:
        return self.addrinfo.family

    @property
    def type(self) -> int:
        return self.addrinfo.type

    @property
    def proto(self) -> int:
        return self.addrinfo.proto

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, AddressSpec):
            return NotImplemented
        return self.to_sockaddr() == other.to_sockaddr()

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, AddressSpec):
            return NotImplemented
        return self.to_sockaddr() < other.to_sockaddr()

    def __hash__(self) -> int:
        return hash(self.to_sockaddr())

    #### operations ####
    async def bind(self, handler: SocketHandler[T]) -> T:
        """Call `handler` with a socket bound to this address, and return what it returns.

        If the specification is already a socket, it's passed along as it is
        and not closed afterwards; otherwise a new socket is made, and closed
        when `handler` is done.

        """
        spec = self.specification
        if isinstance(spec, (Addrinfo, Construction)):
            return await sockspec.socket.bind(await self.resolve(), handler, **self.options)
        elif isinstance(spec, trio.socket.SocketType):
            return await handler(spec)
        elif isinstance(spec, socket.socket):
            return await handler(trio.socket.from_stdlib_socket(spec))
        else:
            raise UnsupportedSpecification("not sure how to bind to", spec)

    async def accept(self, handler: ConnectionHandler, *,
                     task_status: trio.TaskStatus[trio.socket.SocketType]=trio.TASK_STATUS_IGNORED,
    ) -> None:
        """Listen on this address and call `handler` on every connection, each in its own task.

        `handler` receives the connection and the peer's address; if it
        raises, that's logged and other connections carry on. This
        returns only once the listening socket is closed; to get hold of it,
        start this with `trio.Nursery.start`, which returns the listening
        socket once it's ready.

        """
        backlog = self.options.get('backlog', sockspec.socket.DEFAULT_BACKLOG)
        async def serve(conn: trio.socket.SocketType, peer: Addrinfo) -> None:
            await handler(conn, AddressSpec(peer))
        async def listen_and_accept(sock: trio.socket.SocketType) -> None:
            sockspec.socket.listen(sock, backlog)
            task_status.started(sock)
            await sockspec.socket.accept_each(sock, serve)
        await self.bind(listen_and_accept)

    async def connect(self, handler: SocketHandler[T]) -> T:
        "Call `handler` with a socket connected to this address, and return what it returns."
        spec = self.specification
        if isinstance(spec, (Addrinfo, Construction)):
            return await sockspec.socket.connect(self, handler, **self.options)
        elif isinstance(spec, trio.socket.SocketType):
            return await handler(spec)
        elif isinstance(spec, socket.socket):
            return await handler(trio.socket.from_stdlib_socket(spec))
        else:
            raise UnsupportedSpecification("not sure how to connect to", spec)

    def __repr__(self) -> str:
        args = [repr(self.specification)] + [f"{name}={value!r}" for name, value in self.options.items()]
        return f"AddressSpec({', '.join(args)})"
