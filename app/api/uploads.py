"""Image uploads — profile pictures and the company logo."""
from fastapi import APIRouter, Depends, File, UploadFile
from starlette.concurrency import run_in_threadpool
from sqlalchemy.orm import Session

from app.api.deps import admin_only, get_current_user
from app.models.base import get_db
from app.services import upload_service
from app.services.setting_service import SettingService

router = APIRouter(prefix="/uploads", tags=["uploads"], dependencies=[Depends(get_current_user)])


@router.post("/profile-picture", status_code=201, dependencies=[Depends(admin_only)])
async def upload_profile_picture(profile_picture: UploadFile = File(None, alias="profilePicture")):
    path = await upload_service.save_image(profile_picture, "profilePicture")
    return {"status": "success", "message": "Profile picture uploaded successfully.", "filePath": path}


@router.post("/customer-profile-picture", status_code=201)
async def upload_customer_profile_picture(profile_picture: UploadFile = File(None, alias="profilePicture")):
    path = await upload_service.save_image(profile_picture, "profilePicture")
    return {"status": "success", "message": "Profile picture uploaded successfully.", "filePath": path}


@router.post("/company-logo", dependencies=[Depends(admin_only)])
async def upload_company_logo(
    company_logo: UploadFile = File(None, alias="companyLogo"),
    db: Session = Depends(get_db),
):
    """Store the logo and point the company settings at it."""
    path = await upload_service.save_image(company_logo, "companyLogo")
    await run_in_threadpool(SettingService(db).set_logo, path)
    return {"status": "success", "message": "Logo uploaded successfully.", "filePath": path}
