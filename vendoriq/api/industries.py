# vendoriq/api/industries.py
from typing import List

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from vendoriq.crud.form_field import get_form_fields
from vendoriq.db.session import get_db
from vendoriq.models.industry import Category, Industry
from vendoriq.schemas.taxonomy import CategoryOut, FormFieldOut, IndustryDetail, IndustryOut

router = APIRouter(tags=["Industries"])


def _get_active_industry(db: Session, industry_id: int) -> Industry:
    industry = db.query(Industry).filter(Industry.id == industry_id, Industry.is_active == True).first()  # noqa: E712
    if not industry:
        raise HTTPException(status_code=404, detail="Industry not found")
    return industry


def _active_categories(db: Session, industry_id: int) -> List[Category]:
    return (
        db.query(Category)
        .filter(Category.industry_id == industry_id, Category.is_active == True)  # noqa: E712
        .order_by(Category.sort_order, Category.id)
        .all()
    )


@router.get("/industries", response_model=List[IndustryOut])
def list_industries(db: Session = Depends(get_db)):
    return (
        db.query(Industry)
        .filter(Industry.is_active == True)  # noqa: E712
        .order_by(Industry.sort_order, Industry.name)
        .all()
    )


@router.get("/industries/{industry_id}", response_model=IndustryDetail)
def get_industry(industry_id: int, db: Session = Depends(get_db)):
    industry = _get_active_industry(db, industry_id)
    detail = IndustryDetail.model_validate(industry, from_attributes=True)
    detail.categories = [CategoryOut.model_validate(c) for c in _active_categories(db, industry_id)]
    return detail


@router.get("/industries/{industry_id}/categories", response_model=List[CategoryOut])
def list_categories(industry_id: int, db: Session = Depends(get_db)):
    _get_active_industry(db, industry_id)
    return _active_categories(db, industry_id)


@router.get("/categories/{category_id}/form-fields", response_model=List[FormFieldOut])
def list_form_fields(category_id: int, db: Session = Depends(get_db)):
    """Field schema a client renders for a category's request form"""
    category = db.query(Category).filter(Category.id == category_id, Category.is_active == True).first()  # noqa: E712
    if not category:
        raise HTTPException(status_code=404, detail="Category not found")
    return get_form_fields(db, category_id)
