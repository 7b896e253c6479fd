from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from app.database.connection import get_db
from app.enums.rule_types import RuleType
from app.schemas.common import ApiResponse, ListResponse
from app.schemas.pricing_rule import PricingRuleCreate, PricingRuleUpdate, PricingRuleResponse
from app.services.pricing_service.pricing_service import (
    create_pricing_rule, get_pricing_rules, get_pricing_rule,
    update_pricing_rule, deactivate_pricing_rule, activate_pricing_rule
)
from app.dependencies.auth import require_auth, require_admin


router = APIRouter(prefix="/pricing/rules", tags=["Pricing Rules"])

@router.post("/", response_model=ApiResponse[PricingRuleResponse], status_code=201, dependencies=[Depends(require_admin)])
def create_rule(rule: PricingRuleCreate, db: Session = Depends(get_db)):
    created = create_pricing_rule(db, rule)
    return {"success": True, "message": "Pricing rule created successfully", "data": created}

@router.get("/", response_model=ListResponse[PricingRuleResponse], dependencies=[Depends(require_auth)])
def list_rules(
    rule_type: Optional[RuleType] = None,
    is_active: Optional[bool] = None,
    skip: int = Query(default=0, ge=0),
    limit: int = Query(default=100, ge=1, le=500),
    db: Session = Depends(get_db),
):
    rules = get_pricing_rules(db, rule_type=rule_type, is_active=is_active, skip=skip, limit=limit)
    return {"success": True, "count": len(rules), "data": rules}

@router.get("/{rule_id}", response_model=ApiResponse[PricingRuleResponse], dependencies=[Depends(require_auth)])
def get_rule(rule_id: int, db: Session = Depends(get_db)):
    return {"success": True, "data": get_pricing_rule(db, rule_id)}

@router.put("/{rule_id}", response_model=ApiResponse[PricingRuleResponse], dependencies=[Depends(require_admin)])
def update_rule(rule_id: int, rule: PricingRuleUpdate, db: Session = Depends(get_db)):
    updated = update_pricing_rule(db, rule_id, rule)
    return {"success": True, "message": "Pricing rule updated successfully", "data": updated}

@router.delete("/{rule_id}", response_model=ApiResponse[PricingRuleResponse], dependencies=[Depends(require_admin)])
def deactivate_rule(rule_id: int, db: Session = Depends(get_db)):
    rule = deactivate_pricing_rule(db, rule_id)
    return {"success": True, "message": "Pricing rule deactivated", "data": rule}

@router.post("/{rule_id}/activate", response_model=ApiResponse[PricingRuleResponse], dependencies=[Depends(require_admin)])
def activate_rule(rule_id: int, db: Session = Depends(get_db)):
    rule = activate_pricing_rule(db, rule_id)
    return {"success": True, "message": "Pricing rule activated", "data": rule}
