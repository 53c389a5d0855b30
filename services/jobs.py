# services/jobs.py
import logging

from db import Storage
from errors import NotFound, ValidationError
from models.job import job_to_json
from models.user import public_user
from utils import is_positive_number

logger = logging.getLogger(__name__)


class JobCatalog:

    def __init__(self, storage: Storage):
        self.storage = storage

    async def create_job(self, client_id: int, title: str, description: str, budget) -> int:
        title = (title or "").strip()
        if not title:
            raise ValidationError("title is required")
        if not is_positive_number(budget):
            raise ValidationError("budget must be a positive number")

        job_id = await self.storage.insert_job(client_id, title, description or "", float(budget))
        logger.info("新案件建立 job_id=%s client_id=%s", job_id, client_id)
        return job_id

    async def list_jobs(self) -> list[dict]:
        """
        撈出全部案件 (沒有分頁)，並把 client 與每筆投標的 freelancer 一次查好帶進去。
        """
        jobs = await self.storage.list_jobs()
        users = await self._resolve_users(jobs)
        return [job_to_json(job, users) for job in jobs]

    async def get_job(self, job_id: int) -> dict:
        job = await self.storage.get_job(job_id)
        if job is None:
            raise NotFound(f"Job {job_id} not found")
        users = await self._resolve_users([job])
        return job_to_json(job, users)

    async def _resolve_users(self, jobs: list[dict]) -> dict[int, dict]:
        user_ids = set()
        for job in jobs:
            user_ids.add(job["client_id"])
            user_ids.update(bid["freelancer_id"] for bid in job["bids"])
        users = await self.storage.get_users(user_ids)
        return {uid: public_user(user) for uid, user in users.items()}
