"`#include <sys/socket.h>`"
from __future__ import annotations
from sockspec._raw import ffi
import typing as t
import enum
import socket

__all__ = [
    "AF",
    "SOCK",
    "SOL",
    "SO",
    "Sockaddr",
    "SockaddrStorage",
    "parse_address",
]

class AF(enum.IntEnum):
    UNSPEC = socket.AF_UNSPEC
    UNIX = socket.AF_UNIX
    INET = socket.AF_INET
    INET6 = socket.AF_INET6

class SOCK(enum.IntFlag):
    NONE = 0
    # socket kinds
    DGRAM = socket.SOCK_DGRAM
    STREAM = socket.SOCK_STREAM
    # getaddrinfo returns these too when no type is asked for, as can getsockname on a live socket
    SEQPACKET = socket.SOCK_SEQPACKET
    RAW = socket.SOCK_RAW

class SOL(enum.IntEnum):
    """Stands for Sock Opt Level

    This is what should be passed as the "level" argument to
    getsockopt/setsockopt.

    """
    SOCKET = socket.SOL_SOCKET

class SO(enum.IntEnum):
    REUSEADDR = socket.SO_REUSEADDR
    REUSEPORT = socket.SO_REUSEPORT

family_to_class: t.Dict[AF, t.Type[Sockaddr]] = {}
def _register_sockaddr(sockaddr: t.Type[Sockaddr]) -> None:
    if sockaddr.family in family_to_class:
        raise Exception("tried to register sockaddr", sockaddr, "for family", sockaddr.family,
                        "but there's already a class registered for that family:",
                        family_to_class[sockaddr.family])
    family_to_class[sockaddr.family] = sockaddr

T = t.TypeVar('T', bound='Sockaddr')
class Sockaddr:
    """struct sockaddr. This is not really useful on its own; you want the derived classes.

    Every derived class can be turned into the exact bytes the kernel would
    use for that address, and into the address form that Python's socket
    module takes.

    """
    family: AF

    @classmethod
    def check_family(cls, family: AF) -> None:
        if cls.family != family:
            raise ValueError("sa_family should be", cls.family, "is instead", family)

    def to_bytes(self) -> bytes:
        raise NotImplementedError("to_bytes not implemented on", type(self))

    @classmethod
    def from_bytes(cls: t.Type[T], data: bytes) -> T:
        raise NotImplementedError("from_bytes not implemented on", cls)

    @classmethod
    def sizeof(cls) -> int:
        return ffi.sizeof('struct sockaddr')

    def to_address(self) -> t.Any:
        "Return this address in the form accepted by `socket.socket.bind` and `connect`"
        raise NotImplementedError("to_address not implemented on", type(self))

    @classmethod
    def from_address(cls: t.Type[T], address: t.Any) -> T:
        "Build this address from the form returned by `socket.socket.getsockname` and `getaddrinfo`"
        raise NotImplementedError("from_address not implemented on", cls)

    def parse(self) -> Sockaddr:
        "Using the family field, return the correct Sockaddr type that this actually contains."
        cls = family_to_class[self.family]
        return cls.from_bytes(self.to_bytes())

def parse_address(family: int, address: t.Any) -> Sockaddr:
    "Turn a Python-level socket address of this family into the matching Sockaddr"
    try:
        cls = family_to_class[AF(family)]
    except (ValueError, KeyError):
        raise ValueError("unsupported address family", family) from None
    return cls.from_address(address)

class SockaddrStorage(Sockaddr):
    "struct sockaddr_storage. Useful when dealing with sockets with unknown address families"
    def __init__(self, family: AF, data: bytes) -> None:
        self.family = family
        self.data = data

    def to_bytes(self) -> bytes:
        # We can't just create a struct sockaddr_storage and turn the whole thing to bytes,
        # because that will pad the actually valid data with a bunch of trailing null bytes.
        # And we can't do that because the length of the valid data is semantically
        # meaningful for some socket addresses, such as sockaddr_un.
        return bytes(ffi.buffer(ffi.new('sa_family_t*', self.family))) + self.data

    @classmethod
    def from_bytes(cls, data: bytes) -> SockaddrStorage:
        header = ffi.sizeof('sa_family_t')
        if len(data) < header:
            raise ValueError("data too small", data)
        family = ffi.cast('sa_family_t*', ffi.from_buffer(data))
        return cls(AF(family[0]), data[header:])

    @classmethod
    def sizeof(cls) -> int:
        return ffi.sizeof('struct sockaddr_storage')

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, SockaddrStorage):
            return NotImplemented
        return self.family == other.family and self.data == other.data

    def __repr__(self) -> str:
        return f"SockaddrStorage({self.family.name}, {self.data!r})"
