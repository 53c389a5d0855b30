# init_db.py
import logging

import psycopg

from config import get_settings

logger = logging.getLogger(__name__)

# 定義初始化 SQL 指令
# 使用 IF NOT EXISTS 避免重複建立錯誤
INIT_SQL = """
-- 1. 建立列舉類型 (Enum Types)
DO $$ BEGIN
    IF NOT EXISTS (SELECT 1 FROM pg_type WHERE typname = 'user_role') THEN
        CREATE TYPE user_role AS ENUM ('freelancer', 'client');
    END IF;
END $$;

-- 2. 建立使用者表 (users)
CREATE TABLE IF NOT EXISTS users (
    id SERIAL PRIMARY KEY,
    name VARCHAR(100) NOT NULL,
    email VARCHAR(255) NOT NULL UNIQUE,
    hashed_password VARCHAR(255) NOT NULL,
    role user_role NOT NULL,
    portfolio VARCHAR(500),   -- 作品集檔案路徑
    created_at TIMESTAMPTZ DEFAULT NOW()
);

-- 3. 建立案件表 (jobs)
-- bids 直接內嵌在案件裡 (JSONB 陣列)，順序就是投標順序
-- version 是樂觀鎖的版本號，每次寫入 bids 都會 +1
CREATE TABLE IF NOT EXISTS jobs (
    id SERIAL PRIMARY KEY,
    client_id INT NOT NULL REFERENCES users(id) ON DELETE CASCADE,
    title VARCHAR(255) NOT NULL,
    description TEXT NOT NULL DEFAULT '',
    budget NUMERIC(12, 2) NOT NULL CHECK (budget > 0),
    bids JSONB NOT NULL DEFAULT '[]'::jsonb,
    version INT NOT NULL DEFAULT 0,
    created_at TIMESTAMPTZ DEFAULT NOW()
);

CREATE INDEX IF NOT EXISTS idx_jobs_client ON jobs(client_id);
"""


def _has_column(cur, table: str, column: str) -> bool:
    cur.execute(
        "SELECT column_name FROM information_schema.columns WHERE table_name = %s AND column_name = %s",
        (table, column),
    )
    return cur.fetchone() is not None


def init_database(conninfo: str | None = None) -> None:
    """
    執行資料庫初始化：
    1. 建立基礎表格。
    2. 自動檢查並補上舊表格缺少的欄位 (Migration)。
    """
    conninfo = conninfo or get_settings().database_url
    logger.info("正在檢查並更新資料庫結構 (Checking schema)...")
    try:
        # 這裡使用同步連線，因為初始化只在伺服器啟動時執行一次
        with psycopg.connect(conninfo) as conn:
            with conn.cursor() as cur:
                cur.execute(INIT_SQL)

                # --- 自動修復區域 (Auto-Migration) ---

                # [修復 jobs] 早期版本沒有 version 欄位，投標會互相覆蓋
                if not _has_column(cur, "jobs", "version"):
                    logger.info("--> jobs 表缺少 version，正在新增...")
                    cur.execute("ALTER TABLE jobs ADD COLUMN version INT NOT NULL DEFAULT 0")

                # [修復 users] 檢查 portfolio
                if not _has_column(cur, "users", "portfolio"):
                    logger.info("--> users 表缺少 portfolio，正在新增...")
                    cur.execute("ALTER TABLE users ADD COLUMN portfolio VARCHAR(500)")

            conn.commit()
    except psycopg.Error:
        logger.exception("資料庫初始化失敗 (Schema bootstrap failed)")
        raise
    logger.info("資料庫初始化/更新完成 (Schema ready).")


if __name__ == "__main__":
    init_database()
