"`#include <sys/un.h>`"
from __future__ import annotations
import typing as t
from sockspec._raw import ffi
from sockspec.sys.socket import AF, Sockaddr, _register_sockaddr
from dataclasses import dataclass
import os

__all__ = [
    "PathTooLongError",
    "SockaddrUn",
]

class PathTooLongError(ValueError):
    pass

@dataclass(frozen=True)
class SockaddrUn(Sockaddr):
    """Representation of struct sockaddr_un

    An empty path is an unnamed socket, and a path starting with a null byte
    is in the abstract namespace; only pathname sockets are null-terminated
    on the wire.

    """
    path: bytes

    family = AF.UNIX
    def __post_init__(self) -> None:
        if len(self.path) > 108:
            raise PathTooLongError("path", self.path, "is longer than the maximum unix address size")

    @staticmethod
    def from_path(path: t.Union[str, bytes, os.PathLike]) -> SockaddrUn:
        return SockaddrUn(os.fsencode(path))

    T = t.TypeVar('T', bound='SockaddrUn')
    @classmethod
    def from_bytes(cls: t.Type[T], data: bytes) -> T:
        header = ffi.sizeof('sa_family_t')
        if len(data) < header:
            raise ValueError("data too small", data)
        struct = ffi.cast('struct sockaddr_un*', ffi.from_buffer(data))
        cls.check_family(AF(struct.sun_family))
        path = data[header:]
        if len(data) == header:
            # unnamed socket, name is empty
            return cls(b'')
        elif path[0] == 0:
            # abstract socket, entire buffer is part of path
            return cls(path)
        else:
            # pathname socket, path is null-terminated if there's room for it
            return cls(path.split(b'\0', 1)[0])

    def to_bytes(self) -> bytes:
        header = ffi.sizeof('sa_family_t')
        addr = ffi.new('struct sockaddr_un*', (AF.UNIX,))
        ffi.memmove(addr.sun_path, self.path, len(self.path))
        if self.path and self.path[0] != 0:
            real_length = header + len(self.path) + 1
        else:
            real_length = header + len(self.path)
        return bytes(ffi.buffer(addr))[:real_length]

    @classmethod
    def sizeof(cls) -> int:
        return ffi.sizeof('struct sockaddr_un')

    def to_address(self) -> bytes:
        return self.path

    @classmethod
    def from_address(cls: t.Type[T], address: t.Union[str, bytes]) -> T:
        return cls(os.fsencode(address))

    def __str__(self) -> str:
        return f"SockaddrUn({self.path!r})"
_register_sockaddr(SockaddrUn)


#### Tests ####
from unittest import TestCase
class TestUn(TestCase):
    def test_sockaddrun(self) -> None:
        initial = SockaddrUn(b"asefliasjeflsaifje0.1")
        data = initial.to_bytes()
        self.assertEqual(data[-1], 0)
        output = SockaddrUn.from_bytes(data)
        self.assertEqual(initial, output)
        from sockspec.sys.socket import SockaddrStorage
        out = SockaddrStorage.from_bytes(data).parse()
        self.assertEqual(initial, out)

    def test_abstract_and_unnamed(self) -> None:
        abstract = SockaddrUn(b"\0hidden")
        self.assertEqual(len(abstract.to_bytes()), ffi.sizeof('sa_family_t') + 7)
        self.assertEqual(SockaddrUn.from_bytes(abstract.to_bytes()), abstract)
        unnamed = SockaddrUn(b"")
        self.assertEqual(len(unnamed.to_bytes()), ffi.sizeof('sa_family_t'))
        self.assertEqual(SockaddrUn.from_bytes(unnamed.to_bytes()), unnamed)

    def test_too_long(self) -> None:
        with self.assertRaises(PathTooLongError):
            SockaddrUn(b"x" * 200)
