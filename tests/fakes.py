"""In-memory stand-ins for the asyncpg pool used by the services.

Queries are matched by SQL fragment; every call is recorded together with
whether it ran inside a transaction.
"""
import re


def _normalize(query):
    return re.sub(r"\s+", " ", query).strip()


class FakeTransaction:
    def __init__(self, conn):
        self.conn = conn

    async def __aenter__(self):
        self.conn.transaction_depth += 1
        self.conn.transactions_started += 1
        return self

    async def __aexit__(self, exc_type, exc, tb):
        self.conn.transaction_depth -= 1
        if exc_type is not None:
            self.conn.rolled_back = True
        else:
            self.conn.committed = True
        return False


class FakeConnection:
    DEFAULTS = {
        "fetch": [],
        "fetchrow": None,
        "fetchval": None,
        "execute": "OK",
        "executemany": None,
    }

    def __init__(self):
        self.calls = []
        self.handlers = []
        self.transaction_depth = 0
        self.transactions_started = 0
        self.committed = False
        self.rolled_back = False

    def on(self, method, fragment, result):
        """Answer `method` calls whose SQL contains `fragment`.

        `result` may be a value or a callable taking the query args.
        """
        self.handlers.append((method, _normalize(fragment), result))
        return self

    def queries(self, method=None):
        return [call for call in self.calls if method is None or call["method"] == method]

    def find(self, fragment):
        fragment = _normalize(fragment)
        return [call for call in self.calls if fragment in call["query"]]

    async def _call(self, method, query, args):
        query = _normalize(query)
        self.calls.append({
            "method": method,
            "query": query,
            "args": args,
            "in_transaction": self.transaction_depth > 0,
        })
        for handler_method, fragment, result in self.handlers:
            if handler_method == method and fragment in query:
                if callable(result):
                    result = result(*args)
                if isinstance(result, Exception):
                    raise result
                return result
        return self.DEFAULTS[method]

    async def fetch(self, query, *args):
        return await self._call("fetch", query, args)

    async def fetchrow(self, query, *args):
        return await self._call("fetchrow", query, args)

    async def fetchval(self, query, *args):
        return await self._call("fetchval", query, args)

    async def execute(self, query, *args):
        return await self._call("execute", query, args)

    async def executemany(self, query, args):
        return await self._call("executemany", query, (list(args),))

    def transaction(self):
        return FakeTransaction(self)


class _Acquire:
    def __init__(self, conn):
        self.conn = conn

    async def __aenter__(self):
        return self.conn

    async def __aexit__(self, exc_type, exc, tb):
        return False


class FakePool:
    def __init__(self, conn):
        self.conn = conn

    def acquire(self):
        return _Acquire(self.conn)


class FakeDatabase:
    def __init__(self, conn=None):
        self.conn = conn or FakeConnection()
        self.pool = FakePool(self.conn)
