# services/bids.py
import logging
from datetime import datetime, timezone

from db import Storage
from errors import Conflict, NotFound, ValidationError
from utils import is_finite_number

logger = logging.getLogger(__name__)


class BidLedger:
    """
    案件的投標紀錄。

    投標直接內嵌在案件的 bids 陣列裡，順序就是投標的先後。
    寫入採用樂觀鎖：先讀出案件與它的 version，加上新的一筆，
    再以「version 沒變」為條件寫回。如果中間有別人先寫入，
    條件不成立，直接丟出 Conflict，而不是默默蓋掉對方的投標。

    目前不檢查：投標者是否為 freelancer、金額是否為正、
    同一人重複投標、案件是否已結標。
    """

    def __init__(self, storage: Storage):
        self.storage = storage

    async def submit_bid(self, job_id: int, freelancer_id: int, amount: float, message: str = "") -> None:
        # 金額正負不檢查，但一定要是有限的數字 (inf / nan 存進去之後整個列表都無法輸出)
        if not is_finite_number(amount):
            raise ValidationError("bidAmount must be a finite number")

        job = await self.storage.get_job(job_id)
        if job is None:
            raise NotFound(f"Job {job_id} not found")

        bid = {
            "freelancer_id": freelancer_id,
            "bid_amount": amount,
            "message": message or "",
            "created_at": datetime.now(timezone.utc).isoformat(),
        }
        bids = job["bids"] + [bid]

        if not await self.storage.update_job_bids(job_id, bids, job["version"]):
            logger.warning(
                "投標寫入衝突 job_id=%s freelancer_id=%s version=%s",
                job_id, freelancer_id, job["version"],
            )
            raise Conflict()

        logger.info("新投標 job_id=%s freelancer_id=%s amount=%s", job_id, freelancer_id, amount)
