# db.py
import asyncio
import copy
import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone

import psycopg
from psycopg.rows import dict_row
from psycopg.types.json import Jsonb
from psycopg_pool import AsyncConnectionPool

from errors import DuplicateIdentity, StorageError
from init_db import init_database

logger = logging.getLogger(__name__)

USER_COLUMNS = "id, name, email, hashed_password, role, portfolio, created_at"
JOB_COLUMNS = "id, client_id, title, description, budget, bids, version, created_at"


class Storage:
    """
    儲存層的共同介面。

    每個元件 (CredentialStore、JobCatalog...) 在建立時就拿到同一個 Storage，
    不再使用全域的連線變數。生命週期由 main.py 的 lifespan 控制：
    啟動時 open()，關閉時 close()。

    使用者與案件都以 dict 回傳，案件的 bids 是依投標順序排列的 list。
    """

    async def open(self) -> None:
        pass

    async def close(self) -> None:
        pass

    async def insert_user(self, name: str, email: str, hashed_password: str, role: str) -> int:
        raise NotImplementedError

    async def find_user_by_email(self, email: str) -> dict | None:
        raise NotImplementedError

    async def get_user(self, user_id: int) -> dict | None:
        raise NotImplementedError

    async def get_users(self, user_ids) -> dict[int, dict]:
        raise NotImplementedError

    async def set_user_portfolio(self, user_id: int, path: str) -> bool:
        raise NotImplementedError

    async def insert_job(self, client_id: int, title: str, description: str, budget: float) -> int:
        raise NotImplementedError

    async def get_job(self, job_id: int) -> dict | None:
        raise NotImplementedError

    async def list_jobs(self) -> list[dict]:
        raise NotImplementedError

    async def update_job_bids(self, job_id: int, bids: list[dict], expected_version: int) -> bool:
        """
        只有在案件目前的 version 等於 expected_version 時才寫入 bids，並把 version +1。
        回傳 False 代表期間有人先寫入了 (或案件已不存在)。
        """
        raise NotImplementedError


# =========================================================
# PostgreSQL (psycopg 連線池)
# =========================================================
class PostgresStorage(Storage):

    def __init__(self, conninfo: str, min_size: int = 1, max_size: int = 10, bootstrap: bool = True):
        self.conninfo = conninfo
        self.bootstrap = bootstrap
        self._pool = AsyncConnectionPool(
            conninfo=conninfo,
            min_size=min_size,
            max_size=max_size,
            kwargs={"row_factory": dict_row},  # 查詢結果變成 dict (record['id'])
            open=False,  # 先設定好參數，由 open() 開啟
        )
        self._opened = False

    async def open(self) -> None:
        if self.bootstrap:
            # init_database 用的是同步連線，丟到 thread 執行避免卡住 event loop
            await asyncio.to_thread(init_database, self.conninfo)
        logger.info("正在初始化資料庫連線池 (Initializing Connection Pool)...")
        try:
            await self._pool.open(wait=True)
        except Exception as e:
            logger.error("無法開啟連線池: %s", e)
            raise StorageError("Database connection pool is not available.") from e
        self._opened = True
        logger.info("資料庫連線池已開啟 (Connection Pool Opened).")

    async def close(self) -> None:
        if self._opened:
            await self._pool.close()
            self._opened = False
            logger.info("資料庫連線池已關閉 (Connection Pool Closed).")

    @asynccontextmanager
    async def _cursor(self):
        # 借出一條連線，離開時自動 commit (有例外則 rollback) 並歸還
        if not self._opened:
            raise StorageError("Database connection pool is not available.")
        try:
            async with self._pool.connection() as conn:
                async with conn.cursor() as cur:
                    yield cur
        except psycopg.Error as e:
            logger.error("資料庫錯誤: %s", e)
            raise StorageError(f"Database error: {e}") from e

    @staticmethod
    def _job_from_row(row: dict) -> dict:
        job = dict(row)
        # NUMERIC 欄位會回傳 Decimal，對外統一用 float
        job["budget"] = float(job["budget"])
        job["bids"] = list(job["bids"] or [])
        return job

    async def insert_user(self, name, email, hashed_password, role):
        async with self._cursor() as cur:
            try:
                await cur.execute(
                    """
                    INSERT INTO users (name, email, hashed_password, role)
                    VALUES (%s, %s, %s, %s)
                    RETURNING id
                    """,
                    (name, email, hashed_password, role),
                )
            except psycopg.errors.UniqueViolation as e:
                raise DuplicateIdentity() from e
            row = await cur.fetchone()
        return row["id"]

    async def find_user_by_email(self, email):
        async with self._cursor() as cur:
            await cur.execute(f"SELECT {USER_COLUMNS} FROM users WHERE email = %s", (email,))
            return await cur.fetchone()

    async def get_user(self, user_id):
        async with self._cursor() as cur:
            await cur.execute(f"SELECT {USER_COLUMNS} FROM users WHERE id = %s", (user_id,))
            return await cur.fetchone()

    async def get_users(self, user_ids):
        ids = sorted(set(user_ids))
        if not ids:
            return {}
        async with self._cursor() as cur:
            await cur.execute(f"SELECT {USER_COLUMNS} FROM users WHERE id = ANY(%s)", (ids,))
            rows = await cur.fetchall()
        return {row["id"]: row for row in rows}

    async def set_user_portfolio(self, user_id, path):
        async with self._cursor() as cur:
            await cur.execute("UPDATE users SET portfolio = %s WHERE id = %s", (path, user_id))
            return cur.rowcount == 1

    async def insert_job(self, client_id, title, description, budget):
        async with self._cursor() as cur:
            await cur.execute(
                """
                INSERT INTO jobs (client_id, title, description, budget)
                VALUES (%s, %s, %s, %s)
                RETURNING id
                """,
                (client_id, title, description, budget),
            )
            row = await cur.fetchone()
        return row["id"]

    async def get_job(self, job_id):
        async with self._cursor() as cur:
            await cur.execute(f"SELECT {JOB_COLUMNS} FROM jobs WHERE id = %s", (job_id,))
            row = await cur.fetchone()
        return self._job_from_row(row) if row else None

    async def list_jobs(self):
        async with self._cursor() as cur:
            await cur.execute(f"SELECT {JOB_COLUMNS} FROM jobs ORDER BY id")
            rows = await cur.fetchall()
        return [self._job_from_row(row) for row in rows]

    async def update_job_bids(self, job_id, bids, expected_version):
        async with self._cursor() as cur:
            await cur.execute(
                """
                UPDATE jobs SET bids = %s, version = version + 1
                WHERE id = %s AND version = %s
                """,
                (Jsonb(bids), job_id, expected_version),
            )
            return cur.rowcount == 1


# =========================================================
# 記憶體版本 (本機開發與測試用，不需要資料庫)
# =========================================================
class MemoryStorage(Storage):

    def __init__(self):
        self._users: dict[int, dict] = {}
        self._jobs: dict[int, dict] = {}
        self._next_user_id = 1
        self._next_job_id = 1
        self._lock = asyncio.Lock()

    async def insert_user(self, name, email, hashed_password, role):
        async with self._lock:
            if any(u["email"] == email for u in self._users.values()):
                raise DuplicateIdentity()
            user_id = self._next_user_id
            self._next_user_id += 1
            self._users[user_id] = {
                "id": user_id,
                "name": name,
                "email": email,
                "hashed_password": hashed_password,
                "role": role,
                "portfolio": None,
                "created_at": datetime.now(timezone.utc),
            }
        return user_id

    async def find_user_by_email(self, email):
        for user in self._users.values():
            if user["email"] == email:
                return copy.deepcopy(user)
        return None

    async def get_user(self, user_id):
        user = self._users.get(user_id)
        return copy.deepcopy(user) if user else None

    async def get_users(self, user_ids):
        return {uid: copy.deepcopy(self._users[uid]) for uid in set(user_ids) if uid in self._users}

    async def set_user_portfolio(self, user_id, path):
        async with self._lock:
            user = self._users.get(user_id)
            if user is None:
                return False
            user["portfolio"] = path
        return True

    async def insert_job(self, client_id, title, description, budget):
        async with self._lock:
            job_id = self._next_job_id
            self._next_job_id += 1
            self._jobs[job_id] = {
                "id": job_id,
                "client_id": client_id,
                "title": title,
                "description": description,
                "budget": float(budget),
                "bids": [],
                "version": 0,
                "created_at": datetime.now(timezone.utc),
            }
        return job_id

    async def get_job(self, job_id):
        job = self._jobs.get(job_id)
        return copy.deepcopy(job) if job else None

    async def list_jobs(self):
        return [copy.deepcopy(job) for job in self._jobs.values()]

    async def update_job_bids(self, job_id, bids, expected_version):
        async with self._lock:
            job = self._jobs.get(job_id)
            if job is None or job["version"] != expected_version:
                return False
            job["bids"] = copy.deepcopy(bids)
            job["version"] += 1
        return True


def create_storage(settings) -> Storage:
    """依照設定 STORAGE_BACKEND 建立儲存層。"""
    if settings.storage_backend == "memory":
        logger.warning("使用記憶體儲存 (MemoryStorage)，重啟後資料會消失")
        return MemoryStorage()
    if settings.storage_backend == "postgres":
        return PostgresStorage(settings.database_url)
    raise ValueError(f"Unknown STORAGE_BACKEND: {settings.storage_backend!r}")
