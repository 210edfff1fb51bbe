# vendoriq/api/requests.py
import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from vendoriq.api.deps import get_form_validator
from vendoriq.core.security import get_current_user
from vendoriq.db.session import get_db
from vendoriq.models.industry import Category
from vendoriq.models.service_request import ServiceRequest
from vendoriq.models.user import User
from vendoriq.schemas.service_request import ServiceRequestCreate
from vendoriq.services.form_validation_service import FormValidationService
from vendoriq.utils.pagination import calculate_offset, format_paginated_response

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/requests", tags=["Service Requests"])


@router.post("", status_code=status.HTTP_201_CREATED)
def create_service_request(
    data: ServiceRequestCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    validator: FormValidationService = Depends(get_form_validator),
):
    """Post a service request; custom fields are checked against the category's form"""
    if not current_user.can_post_requests():
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="An active subscription or trial is required to post requests",
        )

    custom_fields = {}
    industry_id = data.industry_id
    if data.category_id is not None:
        category = db.query(Category).filter(
            Category.id == data.category_id, Category.is_active == True  # noqa: E712
        ).first()
        if not category:
            raise HTTPException(status_code=404, detail="Category not found")
        industry_id = industry_id or category.industry_id

        outcome = validator.validate(category.id, data.custom_fields)
        if not outcome.accepted:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail={"message": "Validation error", "errors": outcome.error_list()},
            )
        custom_fields = outcome.normalized_values

    request = ServiceRequest(
        title=data.title,
        description=data.description,
        industry_id=industry_id,
        category_id=data.category_id,
        location=data.location,
        budget=data.budget,
        deadline=data.deadline,
        created_by=current_user.id,
        custom_fields=custom_fields,
    )
    db.add(request)
    db.commit()
    db.refresh(request)
    logger.info(f"✅ Service request {request.id} posted by {current_user.id}")

    return {"success": True, "message": "Service request created", "data": request.to_dict()}


@router.get("")
def list_open_requests(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    category_id: Optional[int] = None,
    location: Optional[str] = None,
    db: Session = Depends(get_db),
):
    query = db.query(ServiceRequest).filter(ServiceRequest.status == "open")
    if category_id is not None:
        query = query.filter(ServiceRequest.category_id == category_id)
    if location:
        query = query.filter(ServiceRequest.location.ilike(f"%{location}%"))

    total = query.count()
    rows = (
        query.order_by(ServiceRequest.created_at.desc())
        .offset(calculate_offset(page, limit))
        .limit(limit)
        .all()
    )
    return format_paginated_response([r.to_dict() for r in rows], total, page, limit)


@router.get("/{request_id}")
def get_service_request(request_id: str, db: Session = Depends(get_db)):
    request = db.query(ServiceRequest).filter(ServiceRequest.id == request_id).first()
    if not request:
        raise HTTPException(status_code=404, detail="Service request not found")
    return {"success": True, "data": request.to_dict()}
