# storefront/services/campaign_service.py
import logging
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional
from ..exceptions import InvalidTransitionError, NotFoundError, ValidationError
from ..models.campaign import CampaignCreate, CampaignStatus, CampaignType, CampaignUpdate
from ..utils.pagination import page_bounds, page_result
from ..utils.validation import parse_input
from .auth_service import AuthService

# Allowed lifecycle moves; ENDED has none
CAMPAIGN_TRANSITIONS = {
    CampaignStatus.DRAFT: {CampaignStatus.ACTIVE},
    CampaignStatus.ACTIVE: {CampaignStatus.PAUSED, CampaignStatus.ENDED},
    CampaignStatus.PAUSED: {CampaignStatus.ACTIVE, CampaignStatus.ENDED},
    CampaignStatus.ENDED: set(),
}

_SCOPE_SELECT = """
    SELECT c.*,
        COALESCE((
            SELECT array_agg(cp.product_id ORDER BY cp.product_id)
            FROM campaign_products cp
            WHERE cp.campaign_id = c.campaign_id
        ), '{}'::int[]) as product_ids,
        COALESCE((
            SELECT array_agg(cc.category_id ORDER BY cc.category_id)
            FROM campaign_categories cc
            WHERE cc.campaign_id = c.campaign_id
        ), '{}'::int[]) as category_ids
    FROM campaigns c
"""


def _positive(value: Any) -> bool:
    return value is not None and value > 0


def validate_campaign_data(data: Dict[str, Any]) -> None:
    """Type-specific field checks, run before anything is written"""
    campaign_type = data.get('type')
    if campaign_type is not None:
        campaign_type = CampaignType(campaign_type)

    if campaign_type == CampaignType.PERCENTAGE_DISCOUNT:
        value = data.get('discount_value')
        if not _positive(value) or value > 100:
            raise ValidationError("Percentage discount must be between 0 and 100")

    elif campaign_type == CampaignType.FIXED_AMOUNT_DISCOUNT:
        if not _positive(data.get('discount_value')):
            raise ValidationError("Fixed amount discount must be greater than 0")

    elif campaign_type == CampaignType.BUY_ONE_GET_ONE:
        if not _positive(data.get('buy_quantity')) or not _positive(data.get('get_quantity')):
            raise ValidationError("Buy and get quantities must be greater than 0")

    elif campaign_type == CampaignType.FLAT_PRICE:
        if not _positive(data.get('flat_price')):
            raise ValidationError("Flat price must be greater than 0")

    for field, label in (('maximum_discount_amount', "Maximum discount"),
                         ('minimum_order_amount', "Minimum order amount"),
                         ('max_usage', "Usage limit")):
        value = data.get(field)
        if value is not None and value < 0:
            raise ValidationError(f"{label} cannot be negative")

    start_date = data.get('start_date')
    end_date = data.get('end_date')
    if start_date and end_date and start_date >= end_date:
        raise ValidationError("End date must be after start date")


def check_transition(current: Any, target: Any) -> CampaignStatus:
    """Validate a lifecycle move and return the target status"""
    current = CampaignStatus(current)
    target = CampaignStatus(target)
    if target not in CAMPAIGN_TRANSITIONS[current]:
        raise InvalidTransitionError(
            f"Cannot change campaign status from {current.value} to {target.value}"
        )
    return target


class CampaignService:
    """Promotional campaign management"""

    def __init__(self, db):
        self.db = db
        self.auth = AuthService(db)
        self.logger = logging.getLogger(__name__)

    async def get_paginated(self, page: int = 1, page_size: Optional[int] = None,
                            search: Optional[str] = None) -> Dict[str, Any]:
        """Newest campaigns first, optionally filtered by name or description"""
        limit, offset = page_bounds(page, page_size)
        pattern = f"%{search.strip()}%" if search and search.strip() else None

        async with self.db.pool.acquire() as conn:
            campaigns = await conn.fetch(_SCOPE_SELECT + """
                WHERE $1::text IS NULL
                    OR c.name ILIKE $1
                    OR c.description ILIKE $1
                ORDER BY c.created_at DESC, c.campaign_id DESC
                LIMIT $2 OFFSET $3
            """, pattern, limit, offset)
            total = await conn.fetchval("""
                SELECT COUNT(*)
                FROM campaigns c
                WHERE $1::text IS NULL
                    OR c.name ILIKE $1
                    OR c.description ILIKE $1
            """, pattern)

        return page_result("campaigns", [dict(c) for c in campaigns], total or 0, page, limit)

    async def get_campaign(self, campaign_id: int) -> Dict[str, Any]:
        """Campaign with its product and category scope"""
        async with self.db.pool.acquire() as conn:
            campaign = await conn.fetchrow(_SCOPE_SELECT + """
                WHERE c.campaign_id = $1
            """, campaign_id)
        if not campaign:
            raise NotFoundError("Campaign not found")
        return dict(campaign)

    async def list_active_campaigns(self, now: Optional[datetime] = None) -> List[Dict[str, Any]]:
        """ACTIVE campaigns whose window contains now, oldest first"""
        now = now or datetime.now(timezone.utc)
        async with self.db.pool.acquire() as conn:
            campaigns = await conn.fetch(_SCOPE_SELECT + """
                WHERE c.status = $1
                AND c.start_date <= $2
                AND c.end_date >= $2
                ORDER BY c.created_at, c.campaign_id
            """, CampaignStatus.ACTIVE.value, now)
            return [dict(c) for c in campaigns]

    async def create_campaign(self, actor_id: int, campaign_data: Dict[str, Any]) -> int:
        """Validate and store a new campaign with its scope"""
        await self.auth.require_admin(actor_id, "create campaigns")

        campaign = parse_input(CampaignCreate, campaign_data)
        if campaign.status not in (CampaignStatus.DRAFT, CampaignStatus.ACTIVE):
            raise ValidationError("New campaigns must start as DRAFT or ACTIVE")
        validate_campaign_data(campaign.model_dump())

        async with self.db.pool.acquire() as conn:
            async with conn.transaction():
                campaign_id = await conn.fetchval("""
                    INSERT INTO campaigns (
                        name, description, type, status, start_date, end_date,
                        apply_to_all_products, discount_value, maximum_discount_amount,
                        buy_quantity, get_quantity, flat_price, minimum_order_amount,
                        max_usage, created_by
                    ) VALUES ($1, $2, $3, $4, $5, $6, $7, $8, $9, $10, $11, $12, $13, $14, $15)
                    RETURNING campaign_id
                """,
                    campaign.name,
                    campaign.description,
                    campaign.type.value,
                    campaign.status.value,
                    campaign.start_date,
                    campaign.end_date,
                    campaign.apply_to_all_products,
                    campaign.discount_value,
                    campaign.maximum_discount_amount,
                    campaign.buy_quantity,
                    campaign.get_quantity,
                    campaign.flat_price,
                    campaign.minimum_order_amount,
                    campaign.max_usage,
                    actor_id
                )
                await self._replace_scope(conn, campaign_id, campaign.product_ids, campaign.category_ids)

        self.logger.info(f"Campaign {campaign_id} ({campaign.type.value}) created by {actor_id}")
        return campaign_id

    async def update_campaign(self, actor_id: int, campaign_id: int,
                              update_data: Dict[str, Any]) -> Dict[str, Any]:
        """Apply a partial update; the merged result is validated as a whole"""
        await self.auth.require_admin(actor_id, "update campaigns")

        current = await self.get_campaign(campaign_id)
        patch = parse_input(CampaignUpdate, update_data).model_dump(exclude_unset=True)

        product_ids = patch.pop('product_ids', None)
        category_ids = patch.pop('category_ids', None)
        if 'status' in patch:
            target = patch.pop('status')
            if target is not None and CampaignStatus(target) != CampaignStatus(current['status']):
                patch['status'] = check_transition(current['status'], target)

        validate_campaign_data({**current, **patch})

        query_parts = []
        params = []
        param_count = 1

        for key, value in patch.items():
            query_parts.append(f"{key} = ${param_count}")
            params.append(getattr(value, 'value', value))
            param_count += 1

        async with self.db.pool.acquire() as conn:
            async with conn.transaction():
                if query_parts:
                    params.append(campaign_id)
                    await conn.execute(f"""
                        UPDATE campaigns
                        SET {', '.join(query_parts)}, updated_at = CURRENT_TIMESTAMP
                        WHERE campaign_id = ${param_count}
                    """, *params)
                await self._replace_scope(conn, campaign_id, product_ids, category_ids, replace=True)

        self.logger.info(f"Campaign {campaign_id} updated by {actor_id}")
        return await self.get_campaign(campaign_id)

    async def delete_campaign(self, actor_id: int, campaign_id: int) -> bool:
        await self.auth.require_admin(actor_id, "delete campaigns")
        async with self.db.pool.acquire() as conn:
            result = await conn.execute("""
                DELETE FROM campaigns
                WHERE campaign_id = $1
            """, campaign_id)
        if result != "DELETE 1":
            raise NotFoundError("Campaign not found")
        self.logger.info(f"Campaign {campaign_id} deleted by {actor_id}")
        return True

    async def update_status(self, actor_id: int, campaign_id: int, status: Any) -> Dict[str, Any]:
        """Move a campaign through its lifecycle"""
        await self.auth.require_admin(actor_id, "update campaign status")

        try:
            status = CampaignStatus(status)
        except ValueError:
            raise ValidationError(f"Unknown campaign status: {status}")

        current = await self.get_campaign(campaign_id)
        target = check_transition(current['status'], status)

        async with self.db.pool.acquire() as conn:
            await conn.execute("""
                UPDATE campaigns
                SET status = $1, updated_at = CURRENT_TIMESTAMP
                WHERE campaign_id = $2
            """, target.value, campaign_id)

        self.logger.info(
            f"Campaign {campaign_id} status {current['status']} -> {target.value} by {actor_id}"
        )
        current['status'] = target.value
        return current

    async def activate(self, actor_id: int, campaign_id: int) -> Dict[str, Any]:
        return await self.update_status(actor_id, campaign_id, CampaignStatus.ACTIVE)

    async def pause(self, actor_id: int, campaign_id: int) -> Dict[str, Any]:
        return await self.update_status(actor_id, campaign_id, CampaignStatus.PAUSED)

    async def resume(self, actor_id: int, campaign_id: int) -> Dict[str, Any]:
        return await self.update_status(actor_id, campaign_id, CampaignStatus.ACTIVE)

    async def end(self, actor_id: int, campaign_id: int) -> Dict[str, Any]:
        return await self.update_status(actor_id, campaign_id, CampaignStatus.ENDED)

    @staticmethod
    async def record_usage(conn, campaign_ids: Iterable[int]) -> None:
        """Count one use per campaign; runs on the caller's transaction"""
        campaign_ids = sorted(set(campaign_ids))
        if not campaign_ids:
            return
        await conn.execute("""
            UPDATE campaigns
            SET usage_count = usage_count + 1
            WHERE campaign_id = ANY($1::int[])
        """, campaign_ids)

    async def _replace_scope(self, conn, campaign_id: int,
                             product_ids: Optional[List[int]],
                             category_ids: Optional[List[int]],
                             replace: bool = False) -> None:
        if product_ids is not None:
            if replace:
                await conn.execute(
                    "DELETE FROM campaign_products WHERE campaign_id = $1", campaign_id
                )
            if product_ids:
                await conn.executemany("""
                    INSERT INTO campaign_products (campaign_id, product_id)
                    VALUES ($1, $2)
                    ON CONFLICT DO NOTHING
                """, [(campaign_id, product_id) for product_id in product_ids])

        if category_ids is not None:
            if replace:
                await conn.execute(
                    "DELETE FROM campaign_categories WHERE campaign_id = $1", campaign_id
                )
            if category_ids:
                await conn.executemany("""
                    INSERT INTO campaign_categories (campaign_id, category_id)
                    VALUES ($1, $2)
                    ON CONFLICT DO NOTHING
                """, [(campaign_id, category_id) for category_id in category_ids])
