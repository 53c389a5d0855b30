from fastapi import APIRouter, Depends, status

from models.job import BidRequest, JobCreateRequest
from routes.auth import get_current_user
from services import Services, get_services

router = APIRouter()


# ---------------------------------------------------------
# 1. 發案 (Create Job)
# ---------------------------------------------------------
@router.post("", status_code=status.HTTP_201_CREATED)
async def handle_create_job(
    body: JobCreateRequest,
    user: dict = Depends(get_current_user),
    services: Services = Depends(get_services),
):
    job_id = await services.jobs.create_job(user["id"], body.title, body.description, body.budget)
    return await services.jobs.get_job(job_id)


# ---------------------------------------------------------
# 2. 案件列表 (不需登入)
# ---------------------------------------------------------
@router.get("")
async def list_jobs(services: Services = Depends(get_services)):
    return await services.jobs.list_jobs()


# ---------------------------------------------------------
# 3. 案件詳情
# ---------------------------------------------------------
@router.get("/{job_id}")
async def get_job(job_id: int, services: Services = Depends(get_services)):
    return await services.jobs.get_job(job_id)


# ---------------------------------------------------------
# 4. 投標 (Bid)
# ---------------------------------------------------------
@router.post("/{job_id}/bid")
async def handle_bid(
    job_id: int,
    body: BidRequest,
    user: dict = Depends(get_current_user),
    services: Services = Depends(get_services),
):
    # 角色不檢查：目前任何登入者都可以投標
    await services.bids.submit_bid(job_id, user["id"], body.bidAmount, body.message)
    return {"message": "Bid placed successfully"}
