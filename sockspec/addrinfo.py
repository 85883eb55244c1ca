"""Resolved socket addresses, and the name lookups that produce them

An `Addrinfo` is what `getaddrinfo` gives back for one candidate address:
the family, socket type and protocol to create a socket with, and the
`Sockaddr` to bind or connect it to.

The classmethods here are the resolution facility used by
`sockspec.address.AddressSpec`; a `Construction` tagged "tcp" is resolved by
calling `Addrinfo.tcp` with its arguments, and so on. They block the calling
thread while looking names up, so async code should go through
`AddressSpec.resolve`, which runs them in a worker thread.

"""
from __future__ import annotations
from sockspec.sys.socket import AF, SOCK, Sockaddr, parse_address
from sockspec.sys.un import SockaddrUn
from dataclasses import dataclass
import socket
import typing as t
import os
import logging
logger = logging.getLogger(__name__)

__all__ = [
    "Addrinfo",
]

@dataclass(frozen=True)
class Addrinfo:
    "One resolved address: what kind of socket to make, and the address to use with it"
    family: AF
    type: SOCK
    proto: int
    sockaddr: Sockaddr

    def to_sockaddr(self) -> bytes:
        "The address exactly as the kernel sees it"
        return self.sockaddr.to_bytes()

    @property
    def address(self) -> t.Any:
        "The address in the form `trio.socket.SocketType.bind` and `connect` take"
        return self.sockaddr.to_address()

    @classmethod
    def getaddrinfo(cls, host: t.Optional[t.Union[str, bytes]], port: t.Union[str, int, None],
                    family: int=0, type: int=0, proto: int=0, flags: int=0) -> t.List[Addrinfo]:
        "Call getaddrinfo and wrap up every result"
        results = socket.getaddrinfo(host, port, family, type, proto, flags)
        logger.debug("getaddrinfo(%r, %r) returned %d results", host, port, len(results))
        return [cls(AF(family), SOCK(type), proto, parse_address(family, address))
                for family, type, proto, _, address in results]

    @classmethod
    def _first(cls, host: t.Optional[t.Union[str, bytes]], port: t.Union[str, int, None],
               type: SOCK, proto: int) -> Addrinfo:
        results = cls.getaddrinfo(host, port, AF.UNSPEC, type, proto)
        if not results:
            # getaddrinfo normally raises gaierror itself rather than returning nothing
            raise socket.gaierror(socket.EAI_NONAME, f"no addresses found for {host!r} port {port!r}")
        return results[0]

    @classmethod
    def tcp(cls, host: t.Optional[t.Union[str, bytes]], port: t.Union[str, int, None]) -> Addrinfo:
        "Resolve a host and port to a stream address"
        return cls._first(host, port, SOCK.STREAM, socket.IPPROTO_TCP)

    @classmethod
    def udp(cls, host: t.Optional[t.Union[str, bytes]], port: t.Union[str, int, None]) -> Addrinfo:
        "Resolve a host and port to a datagram address"
        return cls._first(host, port, SOCK.DGRAM, socket.IPPROTO_UDP)

    @classmethod
    def unix(cls, path: t.Union[str, bytes, os.PathLike], type: SOCK=SOCK.STREAM) -> Addrinfo:
        "A Unix socket address for this path; nothing to look up"
        return cls(AF.UNIX, SOCK(type), 0, SockaddrUn.from_path(path))

    @classmethod
    def from_socket(cls, sock: t.Any) -> Addrinfo:
        "The local address of an open socket, either a trio or a stdlib one"
        return cls(AF(sock.family), SOCK(sock.type), sock.proto,
                   parse_address(sock.family, sock.getsockname()))

    @classmethod
    def from_peer(cls, sock: t.Any, peer: t.Any) -> Addrinfo:
        "The remote address of a connection, given the address returned alongside it by accept"
        return cls(AF(sock.family), SOCK(sock.type), sock.proto, parse_address(sock.family, peer))

    def __str__(self) -> str:
        return f"Addrinfo({self.family.name}, {self.type.name}, {self.sockaddr})"
