"""Address specifications for binding, listening and connecting with trio

sockspec lets code say where an endpoint is in whichever form is convenient,
and then bind, accept or connect on it without caring which form that was.

## `AddressSpec`

The main entry point is `sockspec.address.AddressSpec`.
Make one with `AddressSpec.tcp`, `AddressSpec.udp` or `AddressSpec.unix`,
which take the same arguments as the matching `Addrinfo` methods:

    server = AddressSpec.tcp("127.0.0.1", 8080, backlog=16)

or directly from an `Addrinfo` or an already-open socket:

    AddressSpec(Addrinfo.unix("/run/app.sock"))
    AddressSpec(listening_socket)

`AddressSpec.from_each` turns a list of mixed specifications into AddressSpecs.

## Operations

`AddressSpec.bind`, `AddressSpec.accept` and `AddressSpec.connect` all take an async handler:

    async def handle(conn, peer):
        await conn.send(b"hello")

    async with trio.open_nursery() as nursery:
        listener = await nursery.start(server.accept, handle)
        await server.connect(lambda sock: sock.recv(5))
        listener.close()

Sockets made for an operation are closed when the handler returns.
Sockets passed in as specifications are never closed by sockspec.

## Resolution

An AddressSpec is resolved to an `Addrinfo` the first time it's needed,
and the result is cached.
`AddressSpec.resolve` does that without blocking the trio thread.
AddressSpecs compare equal, hash, and sort by the bytes of their resolved address,
as returned by `AddressSpec.to_sockaddr`.

## Errors

See `sockspec.exceptions`: `ResolutionError`, `UnsupportedSpecification`,
`TransientAcceptError` and `FatalSocketError`.

"""
from sockspec.address import AddressSpec, Construction
from sockspec.addrinfo import Addrinfo
from sockspec.sys.socket import AF, SOCK, Sockaddr, SockaddrStorage
from sockspec.netinet.in_ import SockaddrIn, SockaddrIn6
from sockspec.sys.un import SockaddrUn
from sockspec.exceptions import (
    ResolutionError, UnsupportedSpecification,
    TransientAcceptError, FatalSocketError,
)

__all__ = [
    'AddressSpec', 'Construction',
    'Addrinfo',
    'AF', 'SOCK',
    'Sockaddr', 'SockaddrStorage', 'SockaddrIn', 'SockaddrIn6', 'SockaddrUn',
    'ResolutionError', 'UnsupportedSpecification',
    'TransientAcceptError', 'FatalSocketError',
]
