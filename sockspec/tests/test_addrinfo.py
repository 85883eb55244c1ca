from sockspec.addrinfo import Addrinfo
from sockspec.sys.socket import AF, SOCK
from sockspec.netinet.in_ import SockaddrIn, SockaddrIn6
from sockspec.sys.un import SockaddrUn
from unittest import TestCase, mock
import socket

class TestAddrinfo(TestCase):
    def test_tcp(self) -> None:
        info = Addrinfo.tcp("127.0.0.1", 8080)
        self.assertEqual(info.family, AF.INET)
        self.assertEqual(info.type, SOCK.STREAM)
        self.assertEqual(info.proto, socket.IPPROTO_TCP)
        self.assertEqual(info.sockaddr, SockaddrIn(8080, "127.0.0.1"))
        self.assertEqual(info.address, ("127.0.0.1", 8080))

    def test_udp_v6(self) -> None:
        info = Addrinfo.udp("::1", "53")
        self.assertEqual(info.family, AF.INET6)
        self.assertEqual(info.type, SOCK.DGRAM)
        self.assertEqual(info.sockaddr, SockaddrIn6(53, "::1"))

    def test_unix(self) -> None:
        info = Addrinfo.unix("/run/app.sock")
        self.assertEqual(info.family, AF.UNIX)
        self.assertEqual(info.sockaddr, SockaddrUn(b"/run/app.sock"))
        self.assertEqual(Addrinfo.unix(b"/run/app.sock", SOCK.DGRAM).type, SOCK.DGRAM)

    def test_to_sockaddr(self) -> None:
        info = Addrinfo.tcp("127.0.0.1", 8080)
        self.assertEqual(info.to_sockaddr(), SockaddrIn(8080, "127.0.0.1").to_bytes())
        self.assertNotEqual(info.to_sockaddr(), Addrinfo.tcp("127.0.0.1", 8081).to_sockaddr())

    def test_no_results(self) -> None:
        with mock.patch.object(socket, 'getaddrinfo', return_value=[]):
            with self.assertRaises(socket.gaierror):
                Addrinfo.tcp("example.invalid", 80)

    def test_from_socket(self) -> None:
        with socket.socket(socket.AF_INET, socket.SOCK_DGRAM) as sock:
            sock.bind(("127.0.0.1", 0))
            info = Addrinfo.from_socket(sock)
            self.assertEqual(info.family, AF.INET)
            self.assertEqual(info.type, SOCK.DGRAM)
            self.assertEqual(info.address, sock.getsockname())

    def test_getaddrinfo_every_type(self) -> None:
        types = {info.type for info in Addrinfo.getaddrinfo("127.0.0.1", 80)}
        self.assertIn(SOCK.STREAM, types)
        self.assertIn(SOCK.RAW, types)

    def test_from_seqpacket_socket(self) -> None:
        with socket.socket(socket.AF_UNIX, socket.SOCK_SEQPACKET) as sock:
            info = Addrinfo.from_socket(sock)
            self.assertEqual(info.type, SOCK.SEQPACKET)
            self.assertEqual(info.sockaddr, SockaddrUn(b""))

    def test_str(self) -> None:
        self.assertIn("INET", str(Addrinfo.tcp("127.0.0.1", 80)))
