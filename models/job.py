# models/job.py
from pydantic import BaseModel, Field


class JobCreateRequest(BaseModel):
    title: str
    description: str = ""
    budget: float = Field(allow_inf_nan=False)


class BidRequest(BaseModel):
    bidAmount: float = Field(allow_inf_nan=False)
    message: str = ""


def _iso(value):
    if value is None or isinstance(value, str):
        return value
    return value.isoformat()


def bid_to_json(bid: dict, freelancer: dict | None) -> dict:
    return {
        "freelancer": freelancer,
        "bidAmount": bid["bid_amount"],
        "message": bid.get("message", ""),
        "createdAt": _iso(bid.get("created_at")),
    }


def job_to_json(job: dict, users: dict[int, dict]) -> dict:
    """
    組合案件的回傳格式：client 與每筆投標的 freelancer 都換成使用者資料。
    users 是已經轉成公開格式的使用者 (id -> dict)。
    """
    return {
        "id": job["id"],
        "title": job["title"],
        "description": job["description"],
        "budget": job["budget"],
        "client": users.get(job["client_id"]),
        "bids": [bid_to_json(bid, users.get(bid["freelancer_id"])) for bid in job["bids"]],
        "createdAt": _iso(job.get("created_at")),
    }
