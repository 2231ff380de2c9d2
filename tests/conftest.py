import socket, threading, pytest

from adapters.dict_protocol import DictionaryConnection

BANNER = "220 dict.example.org dictd 1.13.1 <auth.mime> <101.2026.1760000000@dict.example.org>"

SHOW_DB_REPLY = (
    "110 2 databases present\n"
    'wn "WordNet (r) 3.0 (2006)"\n'
    'foo "Foo Dictionary"\n'
    ".\n"
    "250 ok"
)
SHOW_STRATEGIES_REPLY = (
    "111 3 strategies available\n"
    'exact "Match headwords exactly"\n'
    'prefix "Match prefixes"\n'
    'substring "Match substring occurring anywhere in a headword"\n'
    ".\n"
    "250 ok"
)
DEFINE_CAT_REPLY = (
    "150 2 definitions retrieved\n"
    '151 "cat" wn "WordNet (r) 3.0 (2006)"\n'
    "cat\n"
    "    n 1: feline mammal usually having thick soft fur\n"
    ".\n"
    '151 "cat" foo "Foo Dictionary"\n'
    "A small feline.\n"
    ".\n"
    "250 ok [d/m/c = 2/0/30; 0.000r 0.000u 0.000s]"
)


def _wire(text, crlf=True):
    eol = "\r\n" if crlf else "\n"
    return (eol.join(text.split("\n")) + eol).encode("utf-8")


class FakeDictServer:
    """Scripted DICT server on 127.0.0.1, one client at a time.

    `responses` maps a command line (without CRLF) to the raw reply text.
    Unknown commands get `500 unknown command`.
    """

    def __init__(self, responses=None, *, banner=BANNER, hang_up_after=(), quit_reply="221 bye",
                 hold_on_quit=False, crlf=True):
        self.responses = dict(responses or {})
        self.banner = banner
        self.hang_up_after = set(hang_up_after)
        self.quit_reply = quit_reply
        self.hold_on_quit = hold_on_quit
        self.crlf = crlf
        self.received = []
        self.raw_received = []
        self.connections = 0
        self._stop = threading.Event()
        self._listener = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        self._listener.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        self._listener.bind(("127.0.0.1", 0))
        self._listener.listen(5)
        self._listener.settimeout(0.1)
        self.host, self.port = self._listener.getsockname()
        self._thread = threading.Thread(target=self._serve, daemon=True)
        self._thread.start()

    def _serve(self):
        while not self._stop.is_set():
            try:
                conn, _ = self._listener.accept()
            except socket.timeout:
                continue
            except OSError:
                return
            self.connections += 1
            conn.settimeout(10)
            try:
                self._handle(conn)
            except OSError:
                pass

    def _handle(self, conn):
        with conn, conn.makefile("rb") as rfile:
            if self.banner is None:
                return
            conn.sendall(_wire(self.banner, self.crlf))
            if not self.banner.startswith("220"):
                return
            for raw in rfile:
                self.raw_received.append(raw)
                command = raw.decode("utf-8").rstrip("\r\n")
                self.received.append(command)
                if command == "QUIT":
                    if self.quit_reply:
                        conn.sendall(_wire(self.quit_reply, self.crlf))
                    if self.hold_on_quit:
                        self._stop.wait(5)
                    return
                conn.sendall(_wire(self.responses.get(command, "500 unknown command"), self.crlf))
                if command in self.hang_up_after:
                    return

    def close(self):
        self._stop.set()
        self._listener.close()
        self._thread.join(timeout=5)


@pytest.fixture()
def dict_server():
    servers = []

    def factory(responses=None, **kwargs):
        server = FakeDictServer(responses, **kwargs)
        servers.append(server)
        return server

    yield factory
    for server in servers:
        server.close()


@pytest.fixture()
def connect_to(dict_server):
    conns = []

    def factory(server, **kwargs):
        kwargs.setdefault("timeout", 5)
        conn = DictionaryConnection(server.host, server.port, **kwargs)
        conns.append(conn)
        return conn

    yield factory
    for conn in conns:
        conn.close()
