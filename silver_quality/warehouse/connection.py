"""
Read-only access to the warehouse through a psycopg3 connection pool.

Rules running on worker threads share one pool; every fetch borrows a
connection for as long as its row stream stays open, so the pool should
hold at least as many connections as the run concurrency.
"""
import os
import time
import uuid
from collections.abc import Iterator
from contextlib import contextmanager

from psycopg import OperationalError
from psycopg.conninfo import make_conninfo
from psycopg.rows import dict_row
from psycopg_pool import ConnectionPool

from silver_quality.observability.logger import get_logger

logger = get_logger(__name__)

APPLICATION_NAME = "silver-quality"


class DatabaseConnectionPool:
    """
    Pool of read-only PostgreSQL connections returning dict rows.

    Connection parameters not passed explicitly fall back to the DB_*
    environment variables. A password is mandatory.
    """

    def __init__(
        self,
        host: str | None = None,
        port: int | None = None,
        database: str | None = None,
        user: str | None = None,
        password: str | None = None,
        min_size: int = 1,
        max_size: int = 8,
        timeout: float = 30.0,
        statement_timeout_ms: int | None = None,
    ) -> None:
        """
        Configure the pool without connecting.

        Args:
            host: Server host (env DB_HOST, default localhost)
            port: Server port (env DB_PORT, default 5432)
            database: Warehouse database (env DB_NAME, default datawarehouse)
            user: Login role (env DB_USER, default dq_reader)
            password: Login password (env DB_PASSWORD, required)
            min_size: Connections kept open while idle
            max_size: Upper bound on borrowed connections
            timeout: Seconds to wait for a connection, also the connect timeout
            statement_timeout_ms: Server-side limit for each query (none when None)

        Raises:
            ValueError: If no password is available
        """
        self.host = host or os.getenv("DB_HOST", "localhost")
        self.port = port or int(os.getenv("DB_PORT", "5432"))
        self.database = database or os.getenv("DB_NAME", "datawarehouse")
        self.user = user or os.getenv("DB_USER", "dq_reader")
        password = password or os.getenv("DB_PASSWORD")
        if not password:
            raise ValueError(
                "Database password must be provided. "
                "Set DB_PASSWORD environment variable or pass to constructor."
            )

        if min_size < 1 or max_size < min_size:
            raise ValueError(f"invalid pool size: min_size={min_size}, max_size={max_size}")
        self.min_size = min_size
        self.max_size = max_size
        self.timeout = timeout

        options = None
        if statement_timeout_ms is not None:
            options = f"-c statement_timeout={int(statement_timeout_ms)}"

        # make_conninfo quotes values, so passwords may contain spaces
        self.conninfo = make_conninfo(
            host=self.host,
            port=self.port,
            dbname=self.database,
            user=self.user,
            password=password,
            connect_timeout=int(self.timeout),
            application_name=APPLICATION_NAME,
            options=options,
        )

        self._pool: ConnectionPool | None = None

    def __repr__(self) -> str:
        return f"DatabaseConnectionPool({self.user}@{self.host}:{self.port}/{self.database})"

    @staticmethod
    def _configure(conn) -> None:
        conn.read_only = True

    def open(self, max_retries: int = 3, retry_delay: float = 2.0) -> None:
        """
        Connect, retrying while the server is unreachable.

        Args:
            max_retries: Connection attempts before giving up
            retry_delay: Seconds between attempts

        Raises:
            OperationalError: If every attempt fails
        """
        if self._pool is not None:
            return

        target = {"host": self.host, "database": self.database}
        for attempt in range(1, max_retries + 1):
            pool = ConnectionPool(
                conninfo=self.conninfo,
                min_size=self.min_size,
                max_size=self.max_size,
                timeout=self.timeout,
                kwargs={"row_factory": dict_row},
                configure=self._configure,
                name=APPLICATION_NAME,
                open=False,
            )
            try:
                pool.open(wait=True, timeout=self.timeout)
            except OperationalError as e:  # PoolTimeout included
                pool.close()
                logger.warning(f"Connection attempt {attempt}/{max_retries} failed: {e}", extra=target)
                if attempt == max_retries:
                    raise OperationalError(
                        f"Failed to connect to database after {max_retries} attempts: {e}"
                    ) from e
                time.sleep(retry_delay)
            else:
                self._pool = pool
                logger.info("Connection pool opened", extra={**target, "attempt": attempt})
                return

    def close(self) -> None:
        if self._pool is not None:
            self._pool.close()
            self._pool = None
            logger.debug("Connection pool closed", extra={"host": self.host, "database": self.database})

    @contextmanager
    def get_connection(self):
        """
        Borrow a connection.

        Raises:
            RuntimeError: If open() was not called
        """
        if self._pool is None:
            raise RuntimeError("Connection pool is not open. Call open() first.")

        with self._pool.connection() as conn:
            yield conn

    def execute_query(self, query, params: tuple | None = None) -> list[dict]:
        """
        Run a query and return every row.

        Args:
            query: SQL text or psycopg.sql.Composable
            params: Positional query parameters
        """
        with self.get_connection() as conn:
            with conn.cursor() as cur:
                cur.execute(query, params)
                return cur.fetchall()

    def stream_query(
        self, query, params: tuple | None = None, batch_size: int = 1000
    ) -> Iterator[dict]:
        """
        Yield rows from a server-side cursor, batch_size rows per round trip.

        The connection goes back to the pool once the generator is
        exhausted or closed.
        """
        with self.get_connection() as conn:
            with conn.cursor(name=f"dq_{uuid.uuid4().hex[:12]}") as cur:
                cur.itersize = batch_size
                cur.execute(query, params)
                yield from cur

    def __enter__(self):
        self.open()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False
